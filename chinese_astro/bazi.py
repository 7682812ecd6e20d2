"""
BaZi (Four Pillars of Destiny) computation engine.

Handles:
- Birth moment validation
- Year, Month, Day and Hour pillar derivation over the sexagenary cycle
- Solar-term anchored month index
- Chart validation and compact summaries

Design principle: This module COMPUTES. It does not interpret.
Every pillar's element and animal are derived from its stem and branch,
never stored separately.
"""

import math
from dataclasses import dataclass, fields
from datetime import datetime
from typing import Mapping, Optional, Union

from chinese_astro.astro_calendar import days_in_month, gregorian_to_julian_day
from chinese_astro.astronomy import SolarTerm, current_solar_term, solar_terms
from chinese_astro.errors import ValidationError
from chinese_astro.stems_branches import (
    BRANCH_BY_PINYIN, STEM_BY_PINYIN, EarthlyBranch, Element, HeavenlyStem,
    branch_at, stem_at,
)

REFERENCE_YEAR = 1984  # Jia Zi year
REFERENCE_DAY_JD = 2451544.5  # 2000-01-01 00:00 UT
DAY_STEM_OFFSET = 6
DAY_BRANCH_OFFSET = 2

PILLAR_POSITIONS = ("year", "month", "day", "hour")


# ============================================================
# INPUT
# ============================================================

def _check_int(name: str, value, low: int, high: int):
    if value is None:
        raise ValidationError(name, "is required", kind="required")
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError(name, f"must be an integer, got {type(value).__name__}", kind="type")
    if value < low or value > high:
        raise ValidationError(name, f"must be between {low} and {high}", kind="range")


def _check_number(name: str, value, low: float, high: float):
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValidationError(name, f"must be a number, got {type(value).__name__}", kind="type")
    if not math.isfinite(value):
        raise ValidationError(name, "must be a finite number", kind="range")
    if value < low or value > high:
        raise ValidationError(name, f"must be between {low} and {high}", kind="range")


@dataclass(frozen=True)
class BirthMoment:
    """
    Local civil birth time. Validated on construction, immutable afterwards.

    timezone_offset is in hours east of UTC; None means UTC.
    latitude/longitude are optional and only used for timezone lookup
    and LMT correction by the chart orchestrator.
    """
    year: int
    month: int
    day: int
    hour: int = 0
    minute: int = 0
    second: int = 0
    timezone_offset: Optional[float] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None

    def __post_init__(self):
        _check_int("year", self.year, 1900, 2100)
        _check_int("month", self.month, 1, 12)
        _check_int("day", self.day, 1, 31)
        limit = days_in_month(self.year, self.month)
        if self.day > limit:
            raise ValidationError(
                "day", f"must be between 1 and {limit} for {self.month}/{self.year}", kind="date")
        _check_int("hour", self.hour, 0, 23)
        _check_int("minute", self.minute, 0, 59)
        _check_int("second", self.second, 0, 59)
        if self.timezone_offset is not None:
            _check_number("timezone_offset", self.timezone_offset, -12, 14)
        if self.latitude is not None:
            _check_number("latitude", self.latitude, -90, 90)
        if self.longitude is not None:
            _check_number("longitude", self.longitude, -180, 180)

    @classmethod
    def from_dict(cls, data: Mapping) -> "BirthMoment":
        """Build from a mapping; unknown keys are ignored, missing date parts are reported."""
        known = {f.name for f in fields(cls)}
        for name in ("year", "month", "day"):
            if data.get(name) is None:
                raise ValidationError(name, "is required", kind="required")
        return cls(**{k: v for k, v in data.items() if k in known})

    @property
    def utc_offset(self) -> float:
        return self.timezone_offset if self.timezone_offset is not None else 0.0

    @property
    def julian_day(self) -> float:
        return gregorian_to_julian_day(self.year, self.month, self.day,
                                       self.hour, self.minute, self.second, self.utc_offset)

    def to_datetime(self) -> datetime:
        return datetime(self.year, self.month, self.day, self.hour, self.minute, self.second)

    def cache_key(self) -> tuple:
        return (self.year, self.month, self.day, self.hour, self.minute, self.second,
                self.utc_offset, self.latitude, self.longitude)

    def to_dict(self):
        return {
            "year": self.year,
            "month": self.month,
            "day": self.day,
            "hour": self.hour,
            "minute": self.minute,
            "second": self.second,
            "timezone_offset": self.utc_offset,
            "latitude": self.latitude,
            "longitude": self.longitude,
        }


# ============================================================
# PILLARS
# ============================================================

@dataclass(frozen=True)
class Pillar:
    stem: HeavenlyStem
    branch: EarthlyBranch
    position: str  # "year", "month", "day", "hour"

    @property
    def element(self) -> Element:
        return self.stem.element

    @property
    def animal(self) -> str:
        return self.branch.animal

    def __str__(self):
        return f"{self.stem.pinyin} {self.branch.pinyin} ({self.stem.polarity.value} {self.element.value} {self.animal})"

    def to_dict(self):
        return {
            "position": self.position,
            "stem": self.stem.pinyin,
            "branch": self.branch.pinyin,
            "element": self.element.value,
            "animal": self.animal,
            "chinese": f"{self.stem.chinese}{self.branch.chinese}",
            "polarity": self.stem.polarity.value,
            "branch_element": self.branch.element.value,
        }


@dataclass(frozen=True)
class LunarContext:
    lunar_year: int
    solar_term: SolarTerm

    def to_dict(self):
        return {"lunar_year": self.lunar_year, "solar_term": self.solar_term.to_dict()}


@dataclass(frozen=True)
class FourPillarsChart:
    year: Pillar
    month: Pillar
    day: Pillar
    hour: Pillar
    lunar: Optional[LunarContext] = None

    @property
    def pillars(self) -> list[Pillar]:
        return [self.year, self.month, self.day, self.hour]

    @property
    def day_master(self) -> HeavenlyStem:
        return self.day.stem

    def to_dict(self):
        d = {p.position: p.to_dict() for p in self.pillars}
        if self.lunar is not None:
            d["lunar_date"] = self.lunar.to_dict()
        return d


def year_pillar(year: int) -> Pillar:
    """Year pillar. 1984 is Jia Zi (stem 0, branch 0)."""
    offset = year - REFERENCE_YEAR
    return Pillar(stem_at(offset % 10), branch_at(offset % 12), "year")


def month_branch_index(longitude: float) -> int:
    """
    Month branch index from a solar longitude.

    Every caller that needs "the current month" goes through this, so the
    chart and the horoscope generators never disagree.
    """
    return int(math.floor(longitude / 30.0)) % 12


def month_pillar(year: int, solar_term: Union[SolarTerm, float]) -> Pillar:
    """
    Month pillar from the birth year and the solar term in force.

    stem index = (year stem index * 2 + month index) mod 10
    """
    longitude = solar_term.longitude if isinstance(solar_term, SolarTerm) else solar_term
    month_index = month_branch_index(longitude)
    year_stem_index = year_pillar(year).stem.index
    return Pillar(stem_at((year_stem_index * 2 + month_index) % 10), branch_at(month_index), "month")


def days_since_reference(jd: float) -> int:
    """Whole UT days between 2000-01-01 and the day containing jd."""
    day_start = math.floor(jd + 0.5) - 0.5
    return int(round(day_start - REFERENCE_DAY_JD))


def day_pillar(birth: BirthMoment) -> Pillar:
    """
    Day pillar from whole days elapsed since 2000-01-01 UT.

    The birth moment is shifted to UT first, so a timezone change that
    moves the birth across UT midnight changes the day pillar.
    """
    days = days_since_reference(birth.julian_day)
    return Pillar(stem_at((days + DAY_STEM_OFFSET) % 10), branch_at((days + DAY_BRANCH_OFFSET) % 12), "day")


def hour_pillar(day_stem_index: int, hour: int) -> Pillar:
    """
    Hour pillar over the 12 double hours.

    double hour = hour // 2
    stem index  = (day stem index * 2 + double hour) mod 10
    """
    double_hour = hour // 2
    return Pillar(stem_at((day_stem_index * 2 + double_hour) % 10), branch_at(double_hour), "hour")


def lunar_year(birth: BirthMoment, terms: list[SolarTerm]) -> int:
    """Gregorian year, minus one before Spring Begins (Li Chun)."""
    li_chun = next(t for t in terms if t.longitude == 315)
    return birth.year - 1 if birth.julian_day < li_chun.julian_day else birth.year


def calculate_bazi(birth: BirthMoment, solar_term_method: str = "mean") -> FourPillarsChart:
    """
    Compute the full Four Pillars chart.

    Args:
        birth: validated BirthMoment
        solar_term_method: "mean" or "swisseph"

    Returns:
        FourPillarsChart with lunar context (lunar year and solar term)
    """
    if not isinstance(birth, BirthMoment):
        raise ValidationError("birth", f"expected BirthMoment, got {type(birth).__name__}", kind="type")

    terms = solar_terms(birth.year, solar_term_method)
    term = current_solar_term(birth.to_datetime(), tz_offset=birth.utc_offset, terms=terms)

    yp = year_pillar(birth.year)
    mp = month_pillar(birth.year, term)
    dp = day_pillar(birth)
    hp = hour_pillar(dp.stem.index, birth.hour)

    return FourPillarsChart(yp, mp, dp, hp, LunarContext(lunar_year(birth, terms), term))


# ============================================================
# VALIDATION AND SUMMARY
# ============================================================

def validate_bazi(chart: Union[FourPillarsChart, Mapping]) -> bool:
    """
    True if all four pillars are present with stem, branch, element and
    animal, stems and branches are canonical, and element/animal agree
    with the stem/branch they derive from.
    """
    if isinstance(chart, FourPillarsChart):
        chart = chart.to_dict()
    if not isinstance(chart, Mapping):
        return False

    for position in PILLAR_POSITIONS:
        pillar = chart.get(position)
        if not isinstance(pillar, Mapping):
            return False
        if any(pillar.get(key) is None for key in ("stem", "branch", "element", "animal")):
            return False
        if not isinstance(pillar["stem"], str) or not isinstance(pillar["branch"], str):
            return False
        stem = STEM_BY_PINYIN.get(pillar["stem"])
        branch = BRANCH_BY_PINYIN.get(pillar["branch"])
        if stem is None or branch is None:
            return False
        element = pillar["element"]
        element = element.value if isinstance(element, Element) else element
        if element != stem.element.value or pillar["animal"] != branch.animal:
            return False
    return True


def bazi_summary(chart: FourPillarsChart) -> str:
    """Compact form, e.g. 'GengWu XinSi JiaZi XinWei'."""
    return " ".join(f"{p.stem.pinyin}{p.branch.pinyin}" for p in chart.pillars)
