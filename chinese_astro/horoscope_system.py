"""
Horoscope system facade.

Holds one Ba-Zi chart and produces horoscopes for it over any supported
timeframe. The four timeframes of generate_all_horoscopes share only
read-only data, so they can run on a thread pool.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from datetime import date, datetime
from typing import Mapping, Optional, Union

from chinese_astro.astro_calendar import DateLike, as_datetime, week_start
from chinese_astro.bazi import BirthMoment, FourPillarsChart, calculate_bazi
from chinese_astro.create_chart import BirthChart
from chinese_astro.errors import (
    CalculationError, ChartNotSetError, ChineseAstrologyError, ValidationError,
)
from chinese_astro.horoscope import (
    CATEGORIES, LOWEST_RATING, PERIOD_TYPES, RATING_THRESHOLDS, HoroscopePeriod,
    daily_horoscope, monthly_horoscope, weekly_horoscope, yearly_horoscope,
)
from chinese_astro.observability import MetricsSink, NullMetrics
from chinese_astro.settings import get_settings

logger = logging.getLogger(__name__)

SYSTEM_NAME = "Chinese Horoscope System"
SYSTEM_VERSION = "1.0.0"
VALID_RATINGS = [name for _, name in RATING_THRESHOLDS] + [LOWEST_RATING]

# Fixed chart used by health_check so it works before any chart is loaded
_PROBE_BIRTH = BirthMoment(1990, 5, 15, 12, 0)


class ChineseHoroscopeSystem:
    def __init__(self, chart: Optional[FourPillarsChart] = None, solar_term_method: Optional[str] = None,
                 logger: Optional[logging.Logger] = None, metrics: Optional[MetricsSink] = None):
        self.chart = None
        self.solar_term_method = solar_term_method or get_settings().solar_term_method
        self.logger = logger or logging.getLogger(__name__)
        self.metrics = metrics or NullMetrics()
        if chart is not None:
            self.set_chart(chart)

    # ============================================================
    # CHART
    # ============================================================

    def set_chart(self, chart: Union[FourPillarsChart, BirthChart]) -> None:
        if isinstance(chart, BirthChart):
            chart = chart.four_pillars
        if not isinstance(chart, FourPillarsChart):
            raise ValidationError("chart", f"expected a Ba-Zi chart, got {type(chart).__name__}", kind="type")
        self.chart = chart

    def generate_chart(self, birth: Union[BirthMoment, Mapping]) -> FourPillarsChart:
        """Calculate the Ba-Zi chart for a birth moment and keep it."""
        if isinstance(birth, Mapping):
            birth = BirthMoment.from_dict(birth)
        self.set_chart(calculate_bazi(birth, self.solar_term_method))
        return self.chart

    def _require_chart(self) -> FourPillarsChart:
        if self.chart is None:
            raise ChartNotSetError()
        return self.chart

    # ============================================================
    # GENERATION
    # ============================================================

    def _dispatch(self, period_type: str, chart: FourPillarsChart, when: datetime) -> HoroscopePeriod:
        if period_type == "daily":
            return daily_horoscope(chart, when, self.solar_term_method)
        if period_type == "weekly":
            return weekly_horoscope(chart, week_start(when))
        if period_type == "monthly":
            return monthly_horoscope(chart, when.year, when.month, self.solar_term_method)
        return yearly_horoscope(chart, when.year, self.solar_term_method)

    def generate_horoscope(self, period_type: str, when: Optional[DateLike] = None) -> HoroscopePeriod:
        """
        Horoscope of one timeframe containing `when` (today by default).

        Weekly horoscopes start on the Sunday of the week containing `when`.
        """
        if not isinstance(period_type, str) or period_type.lower() not in PERIOD_TYPES:
            raise ValidationError("type", f"unsupported horoscope type {period_type!r}, "
                                          f"expected one of {PERIOD_TYPES}", kind="range")
        period_type = period_type.lower()
        chart = self._require_chart()
        moment = as_datetime(when if when is not None else datetime.now())

        try:
            result = self._dispatch(period_type, chart, moment)
        except ChineseAstrologyError:
            self.metrics.increment("horoscope_generation_error")
            raise
        except Exception as exc:
            self.metrics.increment("horoscope_generation_error")
            self.logger.exception("Failed to generate %s horoscope for %s", period_type, moment.date())
            raise CalculationError(f"{period_type}_horoscope", str(exc)) from exc

        self.metrics.increment(f"horoscope_{period_type}_generated")
        self.logger.debug("Generated %s horoscope for %s: %s", period_type, moment.date(),
                          result.predictions.overall.rating)
        return result

    def generate_all_horoscopes(self, when: Optional[DateLike] = None, parallel: bool = False) -> dict:
        """{period_type: HoroscopePeriod} for all four timeframes around `when`."""
        self._require_chart()
        moment = as_datetime(when if when is not None else datetime.now())

        if not parallel:
            return {t: self.generate_horoscope(t, moment) for t in PERIOD_TYPES}

        with ThreadPoolExecutor(max_workers=len(PERIOD_TYPES)) as pool:
            futures = {t: pool.submit(self.generate_horoscope, t, moment) for t in PERIOD_TYPES}
            return {t: f.result() for t, f in futures.items()}

    # ============================================================
    # VALIDATION AND STATUS
    # ============================================================

    def validate_horoscope(self, horoscope: Union[HoroscopePeriod, Mapping], reference: Mapping) -> dict:
        """
        Structural sanity checks of a horoscope against reference data.

        Accepts a HoroscopePeriod or its dict form. reference may carry the
        expected "animal_sign".
        """
        data = horoscope.to_dict() if isinstance(horoscope, HoroscopePeriod) else dict(horoscope)
        predictions = data.get("predictions") or {}
        overall = predictions.get("overall") or {}
        date_range = data.get("date_range") or {}
        confidence = data.get("confidence")

        checks = {
            "animal_match": "animal_sign" in data and data.get("animal_sign") == reference.get("animal_sign"),
            "rating_reasonable": overall.get("rating") in VALID_RATINGS,
            "categories_present": set(predictions.get("categories") or {}) == set(CATEGORIES),
            "date_range_valid": bool(date_range) and date_range.get("start", "") <= date_range.get("end", ""),
            "type_valid": data.get("type") in PERIOD_TYPES,
            "confidence_valid": isinstance(confidence, (int, float)) and 0 <= confidence <= 1,
        }
        passed = sum(checks.values())
        accurate = passed == len(checks)
        return {
            "is_accurate": accurate,
            "validations": checks,
            "accuracy": "High" if accurate else "Needs Review",
            "score": passed / len(checks),
        }

    def system_info(self) -> dict:
        return {
            "name": SYSTEM_NAME,
            "version": SYSTEM_VERSION,
            "supported_types": list(PERIOD_TYPES),
            "categories": list(CATEGORIES),
            "ratings": list(VALID_RATINGS),
            "solar_term_method": self.solar_term_method,
            "chart_loaded": self.chart is not None,
        }

    def health_check(self) -> dict:
        """Runs a daily horoscope on a fixed probe chart and reports the outcome."""
        report = {
            "status": "healthy",
            "chart_loaded": self.chart is not None,
            "timestamp": datetime.now().isoformat(),
            "version": SYSTEM_VERSION,
            "solar_term_method": self.solar_term_method,
        }
        try:
            probe_chart = calculate_bazi(_PROBE_BIRTH, self.solar_term_method)
            probe = daily_horoscope(probe_chart, date(2024, 1, 1), self.solar_term_method)
            report["probe_rating"] = probe.predictions.overall.rating
        except Exception as exc:
            self.logger.error("Health check failed: %s", exc, exc_info=exc)
            report["status"] = "unhealthy"
            report["error"] = str(exc)
        return report
