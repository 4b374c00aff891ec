#!/usr/bin/env python3
"""
Calendar Math - Gregorian Day Counts, Weekdays and Day-of-Year

================================================================================
PURPOSE
================================================================================
Integer calendar arithmetic shared by the epoch converter and the GPS leap
second resolver. Every date is mapped onto one linear day count, and weekday,
epoch bias and GPS week/day computations are all derived from that count.

================================================================================
DAY COUNT
================================================================================
    n_days_since_year_0(1, 1, 1970)  = 719162   (POSIX epoch, Thursday)
    n_days_since_year_0(6, 1, 1980)  = 722819   (GPS epoch, Sunday)
    n_days_since_year_0(1, 1, 0)     = 0        (Monday)

For years >= 1 the count equals datetime.date.toordinal() - 1, so the epoch
constants in time_constants.py line up with the standard library. Year 0 is
a leap year (proleptic Gregorian) and is counted from the same day 0 as
year 1, i.e. year 0 dates map onto 0..365 without a separate offset. This
keeps 0000-01-01 at day 0 and the POSIX epoch at day 719162.

Weekdays:
    day_of_week       0 = Monday .. 6 = Sunday   (n % 7)
    day_of_week_sun06 0 = Sunday .. 6 = Saturday (mon + 1) % 7

================================================================================
DAY OF YEAR ROLLING
================================================================================
date_of_year(year, n) accepts n outside 1..days_in_year(year):

    date_of_year(2017, 0)    -> 31 Dec 2016
    date_of_year(2017, -1)   -> 30 Dec 2016
    date_of_year(2016, 367)  -> 1 Jan 2017

The rolled year is returned by resolve_day_of_year().
"""

import logging
from typing import NamedTuple, Tuple

from ..errors import InvalidDate
from ..interfaces.time_models import CalendarDate
from .time_constants import (
    DAYS_OF_MONTH,
    DAYS_PER_400_YEARS,
    DAYS_PER_WEEK,
    HOURS_PER_DAY,
    MINS_PER_HOUR,
    MJD_DAY_COUNT_OFFSET,
    SECS_PER_DAY,
    SECS_PER_HOUR,
    SECS_PER_MIN,
    SECS_PER_WEEK,
)
from .time_rules import days_in_month, days_in_year, is_leap_year

logger = logging.getLogger(__name__)


class DayMonth(NamedTuple):
    """Result of date_of_year(); compares equal to a plain (day, month) tuple."""
    day: int
    month: int


# =============================================================================
# BASIC CALENDAR RULES
# =============================================================================

def check_date(day: int, month: int, year: int):
    """
    Validate a calendar date.

    Raises:
        InvalidDate: any field out of range
    """
    max_day = days_in_month(year, month)
    if not 1 <= day <= max_day:
        raise InvalidDate(
            f"Day out of range for {year:04d}-{month:02d}: {day} (1..{max_day})"
        )


# =============================================================================
# DAY COUNT
# =============================================================================

def _days_before_year(year: int) -> int:
    if year <= 1:
        return 0
    y = year - 1
    return 365 * y + y // 4 - y // 100 + y // 400


def day_of_year(day: int, month: int, year: int) -> int:
    """Day number within the year, 1..366."""
    check_date(day, month, year)
    return sum(DAYS_OF_MONTH[is_leap_year(year)][:month - 1]) + day


def n_days_since_year_0(day: int, month: int, year: int) -> int:
    """
    Linear day count, 0000-01-01 being day 0.

    Args:
        day: Day of month, 1..31
        month: Month, 1..12
        year: Full year, >= 0

    Returns:
        Number of days since 0000-01-01

    Raises:
        InvalidDate: invalid date
    """
    return _days_before_year(year) + day_of_year(day, month, year) - 1


def date_from_days_since_year_0(n_days: int) -> CalendarDate:
    """
    Inverse of n_days_since_year_0() for the years >= 1 it produces.

    Raises:
        InvalidDate: n_days < 0
    """
    if n_days < 0:
        raise InvalidDate(f"Day count must not be negative: {n_days}")

    cycles, rem = divmod(n_days, DAYS_PER_400_YEARS)
    year = 1 + 400 * cycles

    # At most 400 iterations
    while rem >= days_in_year(year):
        rem -= days_in_year(year)
        year += 1

    month_lengths = DAYS_OF_MONTH[is_leap_year(year)]
    month = 1
    while rem >= month_lengths[month - 1]:
        rem -= month_lengths[month - 1]
        month += 1

    return CalendarDate(year, month, rem + 1)


def day_of_week(day: int, month: int, year: int) -> int:
    """
    Weekday, 0 = Monday .. 6 = Sunday.

    Year 0 shares day numbers with year 1, so the weekday sequence breaks
    between them: 0000-12-31 is a Tuesday (1) and 0001-01-01 a Monday (0).
    From year 1 on the weekdays are the proleptic Gregorian ones, which is
    what keeps the epoch day numbers in time_constants.py valid.
    """
    return n_days_since_year_0(day, month, year) % DAYS_PER_WEEK


def day_of_week_sun06(day: int, month: int, year: int) -> int:
    """Weekday, 0 = Sunday .. 6 = Saturday (GPS week convention)."""
    return (day_of_week(day, month, year) + 1) % DAYS_PER_WEEK


# =============================================================================
# DAY OF YEAR <-> DATE
# =============================================================================

def days_to_years(day_num: int, year: int) -> Tuple[int, int]:
    """
    Move an out-of-range day-of-year number into range by adjusting the year.

    Args:
        day_num: Day of year, may be <= 0 or beyond the year's length
        year: Year day_num refers to

    Returns:
        (day_num, year) with 1 <= day_num <= days_in_year(year)

    Raises:
        InvalidDate: rolling back would go before year 0
    """
    if year < 0:
        raise InvalidDate(f"Year must not be negative: {year}")

    while day_num < 1:
        year -= 1
        if year < 0:
            raise InvalidDate("Day number rolls back before year 0")
        day_num += days_in_year(year)

    while day_num > days_in_year(year):
        day_num -= days_in_year(year)
        year += 1

    return day_num, year


def resolve_day_of_year(year: int, day_num: int) -> CalendarDate:
    """Turn (year, day of year) into a date, rolling the year as needed."""
    rolled_day, rolled_year = days_to_years(day_num, year)
    if rolled_year != year:
        logger.debug(f"Day {day_num} of {year} rolled to day {rolled_day} of {rolled_year}")

    month_lengths = DAYS_OF_MONTH[is_leap_year(rolled_year)]
    month = 1
    while rolled_day > month_lengths[month - 1]:
        rolled_day -= month_lengths[month - 1]
        month += 1

    return CalendarDate(rolled_year, month, rolled_day)


def date_of_year(year: int, day_num: int) -> DayMonth:
    """
    Inverse of day_of_year().

    Returns:
        (day, month); use resolve_day_of_year() when the year may roll
    """
    date = resolve_day_of_year(year, day_num)
    return DayMonth(date.day, date.month)


def expand_year(year: int, year_lim: int = 1970) -> int:
    """
    Expand a 2-digit year to the century window [year_lim, year_lim + 99].

    expand_year(69) -> 2069, expand_year(70) -> 1970
    """
    if not 0 <= year <= 99:
        raise InvalidDate(f"Not a 2-digit year: {year}")
    full = year + year_lim - year_lim % 100
    if full < year_lim:
        full += 100
    return full


# =============================================================================
# SECONDS OF WEEK
# =============================================================================

def seconds_of_week_to_time(wsec: int) -> Tuple[int, int, int, int]:
    """
    Split seconds-of-week (week starting Sunday 00:00) into its parts.

    Returns:
        (weekday_sun06, hour, minute, second)
    """
    if not 0 <= wsec < SECS_PER_WEEK:
        raise InvalidDate(f"Seconds of week out of range: {wsec}")
    wday, rem = divmod(wsec, SECS_PER_DAY)
    hour, rem = divmod(rem, SECS_PER_HOUR)
    minute, second = divmod(rem, SECS_PER_MIN)
    return wday, hour, minute, second


def time_to_seconds_of_week(weekday: int, hour: int, minute: int, second: int) -> int:
    """Inverse of seconds_of_week_to_time()."""
    if not 0 <= weekday < DAYS_PER_WEEK:
        raise InvalidDate(f"Weekday out of range: {weekday}")
    if not 0 <= hour < HOURS_PER_DAY:
        raise InvalidDate(f"Hour out of range: {hour}")
    if not 0 <= minute < MINS_PER_HOUR:
        raise InvalidDate(f"Minute out of range: {minute}")
    if not 0 <= second < SECS_PER_MIN:
        raise InvalidDate(f"Second out of range: {second}")
    return weekday * SECS_PER_DAY + hour * SECS_PER_HOUR + minute * SECS_PER_MIN + second


# =============================================================================
# MODIFIED JULIAN DAY
# =============================================================================

def mjd_from_days_since_year_0(n_days: int) -> int:
    return n_days - MJD_DAY_COUNT_OFFSET


def days_since_year_0_from_mjd(mjd: int) -> int:
    return mjd + MJD_DAY_COUNT_OFFSET
