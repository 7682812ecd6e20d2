"""
Birth chart orchestration.
Sequences the calculators over one birth moment and assembles a BirthChart.

Pipeline: cache lookup -> timezone/LMT preparation -> Ba-Zi -> five elements
-> Nine Star Ki -> interpretations -> BirthChart.

Timezone is auto-detected from birth coordinates and date when no explicit
offset is given. Ba-Zi uses the zone's standard offset (DST stripped).

Usage from Python:
    from chinese_astro.bazi import BirthMoment
    from chinese_astro.create_chart import BirthChartGenerator
    chart = BirthChartGenerator().generate_birth_chart(
        BirthMoment(1990, 5, 15, 14, 30, latitude=31.23, longitude=121.47)
    )
    print(chart.to_dict())
"""

import logging
import time
import uuid
from dataclasses import dataclass, replace
from datetime import date, datetime, timezone
from functools import lru_cache
from typing import Callable, Mapping, Optional, Union
from zoneinfo import ZoneInfo

from timezonefinder import TimezoneFinder

from chinese_astro import five_elements, nine_star_ki
from chinese_astro.astro_calendar import apply_lmt, lmt_correction
from chinese_astro.bazi import BirthMoment, FourPillarsChart, bazi_summary, calculate_bazi
from chinese_astro.cache import BoundedCache
from chinese_astro.errors import CalculationError, ValidationError
from chinese_astro.five_elements import ElementBalance
from chinese_astro.nine_star_ki import NineStarProfile
from chinese_astro.observability import MetricsSink, NullMetrics
from chinese_astro.settings import CachePolicy, get_settings
from chinese_astro.stems_branches import Element

logger = logging.getLogger(__name__)

ALGORITHM_VERSION = "1.0"
DISCLAIMER = "This is for entertainment and self-reflection purposes only"

ELEMENT_PERSONALITY = {
    Element.WOOD: "determined and ambitious nature",
    Element.FIRE: "passionate and charismatic personality",
    Element.EARTH: "nurturing and stable character",
    Element.METAL: "disciplined and organized mindset",
    Element.WATER: "adaptable and intuitive approach",
}

_tf = None


def _timezone_finder() -> TimezoneFinder:
    # Loading the boundary data is slow, do it once and only when needed
    global _tf
    if _tf is None:
        _tf = TimezoneFinder()
    return _tf


# ============================================================
# TIMEZONE
# ============================================================

def utc_offset_for(latitude, longitude, birth_date, hour=0, minute=0):
    """
    Determine UTC offset from coordinates and date.
    Detects historical DST (e.g., China 1986-1991).

    Returns:
        (clock_offset, standard_offset, timezone_name, dst_detected)

        clock_offset:    what the clock was actually set to (includes DST if active)
        standard_offset: the zone's standard (non-DST) offset
        dst_detected:    True if DST was active at birth time
    """
    tz_name = _timezone_finder().timezone_at(lat=latitude, lng=longitude)
    if tz_name is None:
        raise CalculationError("utc_offset_for", f"could not determine timezone for ({latitude}, {longitude})")

    local_dt = datetime(birth_date.year, birth_date.month, birth_date.day,
                        hour, minute, tzinfo=ZoneInfo(tz_name))
    clock_offset = local_dt.utcoffset().total_seconds() / 3600

    dst_seconds = local_dt.dst()
    dst_detected = dst_seconds is not None and dst_seconds.total_seconds() > 0

    if dst_detected:
        standard_offset = clock_offset - dst_seconds.total_seconds() / 3600
    else:
        standard_offset = clock_offset

    return clock_offset, standard_offset, tz_name, dst_detected


def resolve_utc_offset(latitude: float, longitude: float, birth_date: date, hour: int = 0, minute: int = 0) -> float:
    """Standard (DST-stripped) UTC offset in hours at the given place and date."""
    return utc_offset_for(latitude, longitude, birth_date, hour, minute)[1]


def with_resolved_offset(birth: BirthMoment) -> BirthMoment:
    """Fill timezone_offset from coordinates when it is missing."""
    if birth.timezone_offset is not None or birth.latitude is None or birth.longitude is None:
        return birth
    offset = resolve_utc_offset(birth.latitude, birth.longitude,
                                date(birth.year, birth.month, birth.day), birth.hour, birth.minute)
    logger.debug("Resolved UTC offset %+.2f for (%s, %s)", offset, birth.latitude, birth.longitude)
    return replace(birth, timezone_offset=offset)


def with_local_mean_time(birth: BirthMoment) -> tuple[BirthMoment, float]:
    """
    Shift the birth moment from zone clock time to Local Mean Time.

    The standard meridian is the zone offset times 15 degrees. Returns the
    shifted moment and the correction in minutes.
    """
    if birth.longitude is None:
        raise ValidationError("longitude", "is required for Local Mean Time", kind="required")
    meridian = birth.utc_offset * 15.0
    shifted = apply_lmt(birth.to_datetime(), birth.longitude, meridian)
    moved = replace(birth, year=shifted.year, month=shifted.month, day=shifted.day,
                    hour=shifted.hour, minute=shifted.minute, second=shifted.second)
    return moved, lmt_correction(birth.longitude, meridian)


# ============================================================
# CHART OBJECT
# ============================================================

@dataclass(frozen=True)
class LuckyFactors:
    elements: list[str]
    directions: list[str]
    remedies: list[str]

    def to_dict(self):
        return {"elements": list(self.elements), "directions": list(self.directions),
                "remedies": list(self.remedies)}


@dataclass(frozen=True)
class Interpretations:
    personality: list[str]
    career: list[str]
    relationships: list[str]
    health: list[str]
    lucky: LuckyFactors

    def to_dict(self):
        return {
            "personality": list(self.personality),
            "career": list(self.career),
            "relationships": list(self.relationships),
            "health": list(self.health),
            "lucky": self.lucky.to_dict(),
        }


@dataclass(frozen=True)
class BirthChart:
    birth: BirthMoment
    four_pillars: FourPillarsChart
    elements: ElementBalance
    nine_star: NineStarProfile
    interpretations: Interpretations
    metadata: dict

    @property
    def summary(self) -> str:
        return bazi_summary(self.four_pillars)

    @property
    def lucky_directions(self) -> list[str]:
        return list(self.interpretations.lucky.directions)

    def to_dict(self):
        return {
            "birth_data": self.birth.to_dict(),
            "ba_zi": self.four_pillars.to_dict(),
            "summary": self.summary,
            "five_elements": self.elements.to_dict(),
            "nine_star_ki": self.nine_star.to_dict(),
            "interpretations": self.interpretations.to_dict(),
            "metadata": dict(self.metadata),
        }


# ============================================================
# INTERPRETATIONS
# ============================================================

def personality_insights(chart: FourPillarsChart, balance: ElementBalance, star: NineStarProfile) -> list[str]:
    traits = [f"Day Stem {chart.day.stem.pinyin} indicates core personality"]
    strongest = balance.strongest
    traits.append(f"{strongest.value} dominant element suggests "
                  f"{ELEMENT_PERSONALITY.get(strongest, 'balanced personality')}")
    traits.extend(star.analysis.personality)
    return traits


def career_insights(chart: FourPillarsChart, star: NineStarProfile) -> list[str]:
    return [f"Day Stem {chart.day.stem.pinyin} suggests career paths"] + list(star.analysis.career)


def relationship_insights(chart: FourPillarsChart, balance: ElementBalance) -> list[str]:
    return [
        f"{balance.strongest.value} element influences relationship style",
        f"{chart.day.animal} zodiac sign affects relationship dynamics",
    ]


def health_insights(balance: ElementBalance, star: NineStarProfile) -> list[str]:
    return [f"Strengthen {balance.weakest.value} element for better health"] + list(star.analysis.health)


def lucky_factors(balance: ElementBalance, star: NineStarProfile) -> LuckyFactors:
    return LuckyFactors(
        elements=[balance.weakest.value],
        directions=list(star.analysis.lucky_directions),
        remedies=five_elements.suggest_remedies(balance),
    )


def interpret(chart: FourPillarsChart, balance: ElementBalance, star: NineStarProfile) -> Interpretations:
    return Interpretations(
        personality=personality_insights(chart, balance, star),
        career=career_insights(chart, star),
        relationships=relationship_insights(chart, balance),
        health=health_insights(balance, star),
        lucky=lucky_factors(balance, star),
    )


# ============================================================
# ORCHESTRATOR
# ============================================================

class BirthChartGenerator:
    """
    Builds BirthCharts and keeps recent ones in a bounded cache.

    Args:
        cache_policy: capacity/expiry of the chart cache (defaults from settings)
        logger: where progress and failures are logged
        metrics: sink for cache hit/miss, duration, success and error metrics
        clock: monotonic clock used for durations and cache expiry
        solar_term_method: "mean" or "swisseph" (defaults from settings)
    """

    def __init__(self, cache_policy: Optional[CachePolicy] = None, logger: Optional[logging.Logger] = None,
                 metrics: Optional[MetricsSink] = None, clock: Callable[[], float] = time.monotonic,
                 solar_term_method: Optional[str] = None):
        settings = get_settings()
        self.cache = BoundedCache(cache_policy or settings.chart_cache_policy(), clock=clock)
        self.logger = logger or logging.getLogger(__name__)
        self.metrics = metrics or NullMetrics()
        self.clock = clock
        self.solar_term_method = solar_term_method or settings.solar_term_method

    def generate_birth_chart(self, birth: Union[BirthMoment, Mapping], current_year: Optional[int] = None,
                             use_lmt: bool = False) -> BirthChart:
        """
        Full chart for one birth moment.

        Args:
            birth: a BirthMoment or a mapping with the same keys
            current_year: year the Nine Star Ki current star is projected for
            use_lmt: convert the clock time to Local Mean Time first (needs longitude)

        Raises:
            ValidationError: bad input, passed through unchanged
            CalculationError: anything else that went wrong, with the correlation id
        """
        correlation_id = f"bcg-{uuid.uuid4().hex[:12]}"
        started = self.clock()

        try:
            if isinstance(birth, Mapping):
                birth = BirthMoment.from_dict(birth)
            elif not isinstance(birth, BirthMoment):
                raise ValidationError("birth", f"expected BirthMoment or mapping, got {type(birth).__name__}",
                                      kind="type")
            if current_year is None:
                current_year = date.today().year

            self.logger.info("[%s] Starting birth chart generation for %04d-%02d-%02d",
                             correlation_id, birth.year, birth.month, birth.day)

            key = birth.cache_key() + (current_year, use_lmt, self.solar_term_method)
            hit = self.cache.get(key)
            if hit is not None:
                self.logger.info("[%s] Birth chart served from cache", correlation_id)
                self.metrics.increment("birth_chart_cache_hit")
                return hit
            self.metrics.increment("birth_chart_cache_miss")

            chart = self._build(birth, current_year, use_lmt, correlation_id)
            self.cache.set(key, chart)
        except ValidationError as exc:
            self._record_failure(correlation_id, started, exc)
            raise
        except Exception as exc:
            self._record_failure(correlation_id, started, exc)
            raise CalculationError("generate_birth_chart", f"[{correlation_id}] {exc}") from exc

        duration = self.clock() - started
        self.logger.info("[%s] Birth chart generated in %.1f ms", correlation_id, duration * 1000)
        self.metrics.observe("birth_chart_generation_duration", duration)
        self.metrics.increment("birth_chart_generation_success")
        return chart

    def _build(self, birth: BirthMoment, current_year: int, use_lmt: bool, correlation_id: str) -> BirthChart:
        birth = with_resolved_offset(birth)
        lmt_minutes = None
        if use_lmt:
            birth, lmt_minutes = with_local_mean_time(birth)

        pillars = calculate_bazi(birth, self.solar_term_method)
        balance = five_elements.analyze(pillars)
        star = nine_star_ki.calculate(birth.year, current_year)

        metadata = {
            "calculation_method": "Traditional Chinese Astrology",
            "algorithm_version": ALGORITHM_VERSION,
            "solar_term_method": self.solar_term_method,
            "generated_at": datetime.now(timezone.utc).isoformat(),
            "correlation_id": correlation_id,
            "disclaimer": DISCLAIMER,
        }
        if lmt_minutes is not None:
            metadata["lmt_correction_minutes"] = round(lmt_minutes, 2)

        return BirthChart(birth, pillars, balance, star, interpret(pillars, balance, star), metadata)

    def _record_failure(self, correlation_id: str, started: float, exc: Exception) -> None:
        if isinstance(exc, ValidationError):
            self.logger.warning("[%s] Birth chart rejected: %s", correlation_id, exc)
        else:
            self.logger.error("[%s] Birth chart generation failed: %s", correlation_id, exc, exc_info=exc)
        self.metrics.increment("birth_chart_generation_error")
        self.metrics.observe("birth_chart_generation_duration", self.clock() - started)

    def clear_cache(self) -> None:
        self.cache.clear()

    def health(self) -> dict:
        """Cache occupancy and calculation settings of this generator."""
        return {
            "status": "healthy",
            "algorithm_version": ALGORITHM_VERSION,
            "solar_term_method": self.solar_term_method,
            "cache": self.cache.stats(),
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }


@lru_cache
def default_generator() -> BirthChartGenerator:
    return BirthChartGenerator()


def generate_birth_chart(birth: Union[BirthMoment, Mapping], **kwargs) -> BirthChart:
    """Module-level shortcut using a shared generator configured from settings."""
    return default_generator().generate_birth_chart(birth, **kwargs)
