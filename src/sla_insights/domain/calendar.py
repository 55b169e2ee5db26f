"""
Business Calendar
=================

Classifies dates as working or non-working for one fixed timezone.

Holidays follow the US federal calendar with weekend observance:
- Fixed-date holidays on Saturday are observed the preceding Friday
- Fixed-date holidays on Sunday are observed the following Monday
- Weekday-pinned holidays (e.g. Labor Day) never move

The holiday set for a year is computed once and memoized process-wide.
"""

import calendar as _calendar
from datetime import MAXYEAR, date, timedelta
from types import MappingProxyType
from typing import Dict, FrozenSet, Mapping
from zoneinfo import ZoneInfo

MONDAY, TUESDAY, WEDNESDAY, THURSDAY, FRIDAY, SATURDAY, SUNDAY = range(7)

# Read-mostly memo keyed by year. Two callers racing on the same year
# compute identical values, so the last write wins harmlessly.
_HOLIDAY_CACHE: Dict[int, Mapping[date, str]] = {}


def nth_weekday_of_month(year: int, month: int, weekday: int, n: int) -> date:
    """Return the n-th (1-based) given weekday of a month."""
    first = date(year, month, 1)
    offset = (weekday - first.weekday()) % 7
    return first + timedelta(days=offset + (n - 1) * 7)


def last_weekday_of_month(year: int, month: int, weekday: int) -> date:
    """Return the last given weekday of a month."""
    last = date(year, month, _calendar.monthrange(year, month)[1])
    offset = (last.weekday() - weekday) % 7
    return last - timedelta(days=offset)


def observed(day: date) -> date:
    """Shift a fixed-date holiday off the weekend."""
    if day.weekday() == SATURDAY:
        return day - timedelta(days=1)
    if day.weekday() == SUNDAY:
        return day + timedelta(days=1)
    return day


def _compute_holidays(year: int) -> Dict[date, str]:
    holidays = {
        observed(date(year, 1, 1)): "New Year's Day",
        nth_weekday_of_month(year, 1, MONDAY, 3): "Martin Luther King Jr. Day",
        nth_weekday_of_month(year, 2, MONDAY, 3): "Presidents' Day",
        last_weekday_of_month(year, 5, MONDAY): "Memorial Day",
        observed(date(year, 6, 19)): "Juneteenth",
        observed(date(year, 7, 4)): "Independence Day",
        nth_weekday_of_month(year, 9, MONDAY, 1): "Labor Day",
        nth_weekday_of_month(year, 10, MONDAY, 2): "Columbus Day",
        observed(date(year, 11, 11)): "Veterans Day",
        nth_weekday_of_month(year, 11, THURSDAY, 4): "Thanksgiving Day",
        observed(date(year, 12, 25)): "Christmas Day",
    }

    # Next year's New Year's Day on a Saturday is observed on Dec 31
    if year < MAXYEAR:
        next_new_year = observed(date(year + 1, 1, 1))
        if next_new_year.year == year:
            holidays[next_new_year] = "New Year's Day (observed)"

    # An observed New Year's Day of this year may have moved into last year
    return {day: name for day, name in holidays.items() if day.year == year}


def holidays(year: int) -> Mapping[date, str]:
    """Observed holidays for a year, keyed by date."""
    cached = _HOLIDAY_CACHE.get(year)
    if cached is None:
        cached = MappingProxyType(_compute_holidays(year))
        _HOLIDAY_CACHE[year] = cached
    return cached


def holiday_set(year: int) -> FrozenSet[date]:
    """Observed holiday dates for a year."""
    return frozenset(holidays(year))


def clear_holiday_cache() -> None:
    """Drop memoized holiday sets (tests only need this)."""
    _HOLIDAY_CACHE.clear()


class BusinessCalendar:
    """
    Working-day calendar pinned to one timezone.

    Dates passed in are calendar dates already expressed in that timezone;
    the timezone itself is used by the duration calculator for conversion.
    """

    def __init__(self, timezone: str = "America/Denver"):
        self.timezone_name = timezone
        self.tz = ZoneInfo(timezone)

    def is_holiday(self, day: date) -> bool:
        return day in holidays(day.year)

    def is_working_day(self, day: date) -> bool:
        """False on weekends and observed holidays, True otherwise."""
        if day.weekday() >= SATURDAY:
            return False
        return not self.is_holiday(day)

    def holiday_name(self, day: date) -> str | None:
        return holidays(day.year).get(day)

    def __repr__(self) -> str:
        return f"BusinessCalendar(timezone={self.timezone_name!r})"
