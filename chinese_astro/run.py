"""
Command line entry point.

Usage:
    python -m chinese_astro.run chart --birth-date YYYY-MM-DD --birth-time HH:MM[:SS] \
        [--utc-offset OFFSET | --latitude LAT --longitude LON] [--lmt] [--current-year YEAR]
    python -m chinese_astro.run horoscope --birth-date YYYY-MM-DD --birth-time HH:MM \
        [--utc-offset OFFSET] --type {daily,weekly,monthly,yearly,all} [--date YYYY-MM-DD]
    python -m chinese_astro.run compatibility SIGN SIGN [--include-polarity-direction]

Prints JSON on stdout. Errors are printed as JSON on stderr with exit status 1.
--metrics-out FILE (before the subcommand) writes the run's Prometheus metrics to FILE.
"""

import argparse
import json
import sys
from datetime import datetime

from chinese_astro.bazi import BirthMoment
from chinese_astro.compatibility import ZodiacCompatibilityEngine
from chinese_astro.create_chart import BirthChartGenerator
from chinese_astro.errors import ChineseAstrologyError, ValidationError
from chinese_astro.horoscope import PERIOD_TYPES
from chinese_astro.horoscope_system import ChineseHoroscopeSystem
from chinese_astro.observability import create_metrics, setup_logging
from chinese_astro.settings import get_settings


def parse_birth(args) -> BirthMoment:
    try:
        birth_date = datetime.strptime(args.birth_date, "%Y-%m-%d")
    except ValueError:
        raise ValidationError("birth_date", f"expected YYYY-MM-DD, got {args.birth_date!r}", kind="date") from None

    parts = args.birth_time.split(":")
    try:
        if len(parts) not in (2, 3):
            raise ValueError
        hour, minute, second = (list(map(int, parts)) + [0])[:3]
    except ValueError:
        raise ValidationError("birth_time", f"expected HH:MM[:SS], got {args.birth_time!r}", kind="type") from None

    return BirthMoment(
        birth_date.year, birth_date.month, birth_date.day, hour, minute, second,
        timezone_offset=args.utc_offset,
        latitude=args.latitude,
        longitude=args.longitude,
    )


def add_birth_arguments(parser):
    parser.add_argument("--birth-date", required=True, dest="birth_date")
    parser.add_argument("--birth-time", required=True, dest="birth_time")
    parser.add_argument("--utc-offset", dest="utc_offset", type=float, default=None)
    parser.add_argument("--latitude", type=float, default=None)
    parser.add_argument("--longitude", type=float, default=None)


def cmd_chart(args, metrics):
    chart = BirthChartGenerator(metrics=metrics).generate_birth_chart(
        parse_birth(args), current_year=args.current_year, use_lmt=args.lmt)
    return chart.to_dict()


def cmd_horoscope(args, metrics):
    system = ChineseHoroscopeSystem(metrics=metrics)
    # Through the chart generator so coordinates resolve the timezone
    system.set_chart(BirthChartGenerator(metrics=metrics).generate_birth_chart(parse_birth(args)))
    if args.type == "all":
        results = system.generate_all_horoscopes(args.date, parallel=True)
        return {t: h.to_dict() for t, h in results.items()}
    return system.generate_horoscope(args.type, args.date).to_dict()


def cmd_compatibility(args, metrics):
    engine = ZodiacCompatibilityEngine(get_settings().compatibility_cache_policy(), metrics=metrics)
    result = engine.calculate_compatibility(
        args.sign1, args.sign2, include_polarity_direction=args.include_polarity_direction)
    return result.to_dict()


def build_parser():
    parser = argparse.ArgumentParser(description="Chinese astrology calculations.")
    parser.add_argument("--log-level", dest="log_level", default=None)
    parser.add_argument("--metrics-out", dest="metrics_out", default=None,
                        help="Write Prometheus metrics of this run to a file (text format)")
    sub = parser.add_subparsers(dest="command", required=True)

    chart = sub.add_parser("chart", help="Compute a birth chart.")
    add_birth_arguments(chart)
    chart.add_argument("--current-year", dest="current_year", type=int, default=None)
    chart.add_argument("--lmt", action="store_true", help="Use Local Mean Time (needs --longitude)")
    chart.set_defaults(func=cmd_chart)

    horoscope = sub.add_parser("horoscope", help="Generate a horoscope for a birth chart.")
    add_birth_arguments(horoscope)
    horoscope.add_argument("--type", default="daily", choices=list(PERIOD_TYPES) + ["all"])
    horoscope.add_argument("--date", default=None, help="YYYY-MM-DD, defaults to today")
    horoscope.set_defaults(func=cmd_horoscope)

    compat = sub.add_parser("compatibility", help="Zodiac sign compatibility.")
    compat.add_argument("sign1")
    compat.add_argument("sign2")
    compat.add_argument("--include-polarity-direction", dest="include_polarity_direction",
                        action="store_true")
    compat.set_defaults(func=cmd_compatibility)

    return parser


def main(argv=None):
    args = build_parser().parse_args(argv)
    settings = get_settings()
    setup_logging(args.log_level or settings.log_level)
    metrics = create_metrics("prometheus" if args.metrics_out else settings.metrics_backend)

    try:
        result = args.func(args, metrics)
    except ChineseAstrologyError as exc:
        print(json.dumps(exc.to_dict(), indent=2), file=sys.stderr)
        return 1
    finally:
        if args.metrics_out:
            with open(args.metrics_out, "wb") as f:
                f.write(metrics.exposition())

    print(json.dumps(result, indent=2, ensure_ascii=False))
    return 0


if __name__ == "__main__":
    sys.exit(main())
