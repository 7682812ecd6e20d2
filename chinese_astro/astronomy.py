"""
Lunar and solar astronomy for Chinese horoscopes.

Handles:
- Lunar phase (8 equal buckets over the synodic month), lunar mansion,
  moon sign and illumination
- The 24 solar terms (Jie Qi) of a Gregorian year
- Current solar term lookup
- Mean new moons in a year

These are the simplified models Chinese almanacs have always used for
horoscopes: a mean synodic month and a linear solar longitude rate.
Swiss Ephemeris is available as an opt-in refinement for solar terms.
"""

import logging
import math
from dataclasses import dataclass, asdict
from datetime import date
from typing import Optional

import swisseph as swe

from chinese_astro.astro_calendar import (
    DateLike, JULIAN_DAY_J2000, as_datetime, datetime_to_julian_day,
    gregorian_to_julian_day, julian_day_to_gregorian, normalize_angle, mod,
)
from chinese_astro.errors import CalculationError, SolarTermNotFoundError, ValidationError
from chinese_astro.stems_branches import ANIMALS

logger = logging.getLogger(__name__)

REFERENCE_NEW_MOON_JD = 2451550.1
SYNODIC_MONTH = 29.530588
SIDEREAL_MONTH = 27.3217
MANSION_COUNT = 28

MEAN_SOLAR_LONGITUDE_J2000 = 280.46
MEAN_SOLAR_RATE = 0.98564736  # degrees per day

LUNAR_PHASES = [
    "New Moon",
    "Waxing Crescent",
    "First Quarter",
    "Waxing Gibbous",
    "Full Moon",
    "Waning Gibbous",
    "Last Quarter",
    "Waning Crescent",
]

# 28 Xiu, in order from Horn
LUNAR_MANSIONS = [
    "Horn", "Neck", "Root", "Room", "Heart", "Tail", "Winnowing Basket",
    "Dipper", "Ox", "Girl", "Emptiness", "Rooftop", "Encampment", "Wall",
    "Legs", "Bond", "Stomach", "Hairy Head", "Net", "Turtle Beak", "Three Stars",
    "Well", "Ghost", "Willow", "Star", "Extended Net", "Wings", "Chariot",
]

# Solar longitude -> (name, significance)
SOLAR_TERMS = {
    315: ("Spring Begins", "Beginning of spring, renewal and growth"),
    330: ("Rain Water", "Moisture and nourishment for new life"),
    345: ("Insects Awaken", "Nature stirs, time for planning"),
    0: ("Spring Equinox", "Balance between day and night"),
    15: ("Clear and Bright", "Clarity and brightness in actions"),
    30: ("Grain Rains", "Nurturing and development"),
    45: ("Summer Begins", "Active growth and expansion"),
    60: ("Grain Buds", "Initial development and progress"),
    75: ("Grain in Ear", "Maturation and harvesting ideas"),
    90: ("Summer Solstice", "Peak energy and activity"),
    105: ("Minor Heat", "Building intensity"),
    120: ("Major Heat", "Maximum yang energy"),
    135: ("Autumn Begins", "Harvest and reflection"),
    150: ("Stopping the Heat", "Cooling and moderation"),
    165: ("White Dews", "Purity and clarity"),
    180: ("Autumn Equinox", "Balance and harmony"),
    195: ("Cold Dews", "Preparation for winter"),
    210: ("Frost Descent", "Caution and protection"),
    225: ("Winter Begins", "Rest and introspection"),
    240: ("Minor Snow", "Gentle accumulation"),
    255: ("Major Snow", "Deep contemplation"),
    270: ("Winter Solstice", "Maximum yin energy"),
    285: ("Minor Cold", "Endurance and patience"),
    300: ("Major Cold", "Deep inner work"),
}

SOLAR_TERM_METHODS = ("mean", "swisseph")


# ============================================================
# DATA STRUCTURES
# ============================================================

@dataclass(frozen=True)
class LunarData:
    phase: str
    phase_fraction: float  # 0.0 = new moon, 0.5 = full moon
    mansion: int  # 0-27
    moon_sign: str
    illumination: int  # percent
    julian_day: float

    @property
    def mansion_name(self) -> str:
        return LUNAR_MANSIONS[self.mansion]

    def to_dict(self):
        d = asdict(self)
        d["mansion_name"] = self.mansion_name
        return d


@dataclass(frozen=True)
class SolarTerm:
    name: str
    longitude: int
    date: date
    julian_day: float
    significance: str

    def to_dict(self):
        return {
            "name": self.name,
            "longitude": self.longitude,
            "date": self.date.isoformat(),
            "julian_day": round(self.julian_day, 5),
            "significance": self.significance,
        }


# ============================================================
# LUNAR CALCULATIONS
# ============================================================

def lunar_phase_fraction(jd: float) -> float:
    """Fraction of the synodic month elapsed since the last mean new moon."""
    return mod(jd - REFERENCE_NEW_MOON_JD, SYNODIC_MONTH) / SYNODIC_MONTH


def lunar_phase(jd: float) -> str:
    return LUNAR_PHASES[int(math.floor(lunar_phase_fraction(jd) * 8)) % 8]


def lunar_mansion(jd: float) -> int:
    return int(math.floor((jd % SIDEREAL_MONTH) / SIDEREAL_MONTH * MANSION_COUNT)) % MANSION_COUNT


def moon_sign(mansion: int) -> str:
    return ANIMALS[mansion % 12]


def moon_illumination(jd: float) -> int:
    """Illuminated fraction in percent (cosine approximation)."""
    phase = lunar_phase_fraction(jd)
    return round((1 - math.cos(2 * math.pi * phase)) / 2 * 100)


def lunar_data(moment: DateLike, tz_offset: float = 0.0) -> LunarData:
    """
    Lunar snapshot for a moment.

    Args:
        moment: datetime, date or ISO string (local civil time)
        tz_offset: hours east of UTC for the moment
    """
    jd = datetime_to_julian_day(moment, tz_offset)
    mansion = lunar_mansion(jd)
    return LunarData(
        phase=lunar_phase(jd),
        phase_fraction=round(lunar_phase_fraction(jd), 6),
        mansion=mansion,
        moon_sign=moon_sign(mansion),
        illumination=moon_illumination(jd),
        julian_day=jd,
    )


def new_moons(year: int) -> list[float]:
    """Julian Days of the mean new moons that fall inside a Gregorian year."""
    start = gregorian_to_julian_day(year, 1, 1)
    end = gregorian_to_julian_day(year + 1, 1, 1)
    k = math.ceil((start - REFERENCE_NEW_MOON_JD) / SYNODIC_MONTH)
    moons = []
    jd = REFERENCE_NEW_MOON_JD + k * SYNODIC_MONTH
    while jd < end:
        moons.append(jd)
        k += 1
        jd = REFERENCE_NEW_MOON_JD + k * SYNODIC_MONTH
    return moons


# ============================================================
# SOLAR TERMS
# ============================================================

def solar_term_longitudes() -> list[int]:
    """The 24 longitudes starting from the winter solstice reference."""
    return [(270 + 15 * i) % 360 for i in range(24)]


def mean_solar_longitude(jd: float) -> float:
    return normalize_angle(MEAN_SOLAR_LONGITUDE_J2000 + MEAN_SOLAR_RATE * (jd - JULIAN_DAY_J2000))


def _mean_crossing(jd_start: float, longitude: float) -> float:
    """First instant at or after jd_start when the mean sun reaches longitude."""
    delta = mod(longitude - mean_solar_longitude(jd_start), 360.0)
    return jd_start + delta / MEAN_SOLAR_RATE


def _swisseph_crossing(jd_start: float, longitude: float) -> float:
    """Exact crossing using the built-in Moshier ephemeris (no data files needed)."""
    try:
        return swe.solcross_ut(float(longitude), jd_start, swe.FLG_MOSEPH)
    except swe.Error as exc:
        raise CalculationError("solar_terms", f"swisseph crossing of {longitude} failed: {exc}") from exc


def solar_terms(year: int, method: str = "mean") -> list[SolarTerm]:
    """
    Compute the 24 solar terms of a Gregorian year.

    Each term is the first crossing of its longitude after Jan 1 0h UT,
    so the list runs from Minor Cold (early January) to Winter Solstice
    (late December).

    Args:
        year: Gregorian year
        method: "mean" (linear longitude rate) or "swisseph" (exact crossing)
    """
    if method not in SOLAR_TERM_METHODS:
        raise ValidationError("method", f"must be one of {SOLAR_TERM_METHODS}", kind="range")

    crossing = _mean_crossing if method == "mean" else _swisseph_crossing
    jd_start = gregorian_to_julian_day(year, 1, 1)

    terms = []
    for longitude in solar_term_longitudes():
        jd = crossing(jd_start, longitude)
        name, significance = SOLAR_TERMS[longitude]
        terms.append(SolarTerm(
            name=name,
            longitude=longitude,
            date=julian_day_to_gregorian(jd).to_date(),
            julian_day=jd,
            significance=significance,
        ))

    terms.sort(key=lambda t: t.julian_day)
    return terms


def current_solar_term(moment: DateLike, method: str = "mean",
                       tz_offset: float = 0.0,
                       terms: Optional[list[SolarTerm]] = None) -> SolarTerm:
    """
    The latest solar term at or before a moment, within that year's 24.

    A moment before the year's first term wraps to the last one
    (the Winter Solstice of the same year).
    """
    moment = as_datetime(moment)
    if terms is None:
        terms = solar_terms(moment.year, method)
    if not terms:
        raise SolarTermNotFoundError(moment.isoformat())

    jd = datetime_to_julian_day(moment, tz_offset)
    current = None
    for term in terms:
        if term.julian_day <= jd:
            current = term
        else:
            break

    if current is None:
        logger.debug("%s precedes the first solar term of %d, wrapping", moment, moment.year)
        current = terms[-1]
    return current


def solar_terms_between(start: DateLike, end: DateLike, method: str = "mean") -> list[SolarTerm]:
    """Solar terms whose date falls in [start, end] (dates inclusive)."""
    first = as_datetime(start).date()
    last = as_datetime(end).date()
    found = []
    for year in range(first.year, last.year + 1):
        found.extend(t for t in solar_terms(year, method) if first <= t.date <= last)
    return found
