"""
Calendar utilities for Chinese astrology calculations.
Handles angle arithmetic, Julian Day conversion (with timezone rollover),
day-of-week lookups, LMT correction and date range generation.
"""

import math
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Union

import swisseph as swe

from chinese_astro.errors import ValidationError

DateLike = Union[datetime, date, str]

JULIAN_DAY_J2000 = 2451545.0
JULIAN_CENTURY = 36525.0


# ============================================================
# ANGLES AND MODULO
# ============================================================

def deg_to_rad(degrees: float) -> float:
    return degrees * math.pi / 180.0


def rad_to_deg(radians: float) -> float:
    return radians * 180.0 / math.pi


def normalize_angle(angle: float) -> float:
    """Fold an angle into [0, 360)."""
    angle = angle % 360.0
    # -1e-15 % 360 == 360.0 in floating point
    return 0.0 if angle >= 360.0 else angle


def mod(a: float, b: float) -> float:
    """
    Mathematical modulo: non-negative result for positive b.

    Raises:
        ZeroDivisionError: if b is zero
    """
    if b == 0:
        raise ZeroDivisionError("mod() divisor must not be zero")
    return ((a % b) + b) % b


# ============================================================
# GREGORIAN CALENDAR
# ============================================================

def is_leap_year(year: int) -> bool:
    return (year % 4 == 0 and year % 100 != 0) or year % 400 == 0


def days_in_month(year: int, month: int) -> int:
    if month < 1 or month > 12:
        raise ValidationError("month", "must be between 1 and 12", kind="range")
    if month == 2 and is_leap_year(year):
        return 29
    return [31, 28, 31, 30, 31, 30, 31, 31, 30, 31, 30, 31][month - 1]


def as_datetime(value: DateLike) -> datetime:
    """Accept a datetime, a date, or an ISO string (YYYY-MM-DD[THH:MM[:SS]])."""
    if isinstance(value, str):
        try:
            return datetime.fromisoformat(value)
        except ValueError as exc:
            raise ValidationError("date", f"not an ISO date: {value!r}", kind="date") from exc
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    raise ValidationError("date", f"expected a date, datetime or ISO string, got {type(value).__name__}",
                          kind="type")


@dataclass(frozen=True)
class CivilTime:
    year: int
    month: int
    day: int
    hour: int = 0
    minute: int = 0
    second: int = 0

    def to_datetime(self) -> datetime:
        return datetime(self.year, self.month, self.day, self.hour, self.minute, self.second)

    def to_date(self) -> date:
        return date(self.year, self.month, self.day)


# ============================================================
# JULIAN DAY
# ============================================================

def gregorian_to_julian_day(year: int, month: int, day: int,
                            hour: int = 0, minute: int = 0, second: int = 0,
                            tz_offset: float = 0.0) -> float:
    """
    Convert a local civil time to a continuous Julian Day (UT).

    The timezone offset is removed first so that any day/month/year
    rollover happens before the Gregorian -> JD formula runs.

    Args:
        year, month, day, hour, minute, second: local civil time
        tz_offset: hours east of UTC (e.g. +8 for Beijing, -5 for New York)

    Returns:
        Julian Day as a float
    """
    try:
        local = datetime(year, month, day, hour, minute, second)
    except ValueError as exc:
        raise ValidationError("date", str(exc), kind="date") from exc

    utc = local - timedelta(hours=tz_offset)
    decimal_hours = utc.hour + utc.minute / 60.0 + utc.second / 3600.0 + utc.microsecond / 3.6e9
    return swe.julday(utc.year, utc.month, utc.day, decimal_hours)


def julian_day_to_gregorian(jd: float, tz_offset: float = 0.0) -> CivilTime:
    """
    Inverse of gregorian_to_julian_day.

    The fractional day is decomposed into hours, minutes and seconds,
    rounded to the nearest second (carry propagates into the date).
    """
    year, month, day, hours = swe.revjul(jd)
    total_seconds = round(hours * 3600.0 + tz_offset * 3600.0)
    moment = datetime(year, month, day) + timedelta(seconds=total_seconds)
    return CivilTime(moment.year, moment.month, moment.day,
                     moment.hour, moment.minute, moment.second)


def datetime_to_julian_day(moment: DateLike, tz_offset: float = 0.0) -> float:
    moment = as_datetime(moment)
    return gregorian_to_julian_day(moment.year, moment.month, moment.day,
                                   moment.hour, moment.minute, moment.second, tz_offset)


# ============================================================
# DAYS, WEEKS, RANGES
# ============================================================

def day_of_week(value: DateLike) -> dict:
    """
    Day of week info for a date.

    Returns:
        dict with 'date', 'day_name', 'day_number' (0=Monday, 6=Sunday)
    """
    moment = as_datetime(value)
    return {
        "date": moment.strftime("%Y-%m-%d"),
        "day_name": moment.strftime("%A"),
        "day_number": moment.weekday(),
    }


def week_start(value: DateLike) -> date:
    """Sunday on or before the given date."""
    day = as_datetime(value).date()
    return day - timedelta(days=(day.weekday() + 1) % 7)


def date_range(start: DateLike, end: DateLike) -> list[date]:
    """All calendar dates from start to end, inclusive."""
    current = as_datetime(start).date()
    last = as_datetime(end).date()
    days = []
    while current <= last:
        days.append(current)
        current += timedelta(days=1)
    return days


def month_dates(year: int, month: int) -> list[date]:
    return [date(year, month, d) for d in range(1, days_in_month(year, month) + 1)]


# ============================================================
# LOCAL MEAN TIME
# ============================================================

def lmt_correction(longitude: float, standard_meridian: float) -> float:
    """
    Local Mean Time correction in minutes.

    Example:
        Nanning (108.37°E) on China time (120°E):
        (108.37 - 120.0) * 4 = -46.52 min
    """
    return (longitude - standard_meridian) * 4.0


def apply_lmt(clock_time: datetime, longitude: float, standard_meridian: float) -> datetime:
    """Convert clock time to Local Mean Time."""
    return clock_time + timedelta(minutes=lmt_correction(longitude, standard_meridian))
