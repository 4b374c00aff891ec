"""
Time Rules - Integer Rules Shared by the Data Types and the Timing Modules

Gregorian leap year and month length rules, the GPS day-7 week/day rule and
wrap-safe counter differences. This module imports only constants and
errors, so interfaces/time_models.py can validate with the same rules the
timing modules compute with.
"""

from typing import Tuple

from ..errors import InvalidDate
from .time_constants import (
    DAYS_OF_MONTH,
    DAYS_PER_WEEK,
    DEFAULT_COUNTER_BITS,
    MONTHS_PER_YEAR,
)


# =============================================================================
# GREGORIAN CALENDAR
# =============================================================================

def is_leap_year(year: int) -> bool:
    """Gregorian rule, applied uniformly from year 0 (which is a leap year)."""
    return (year % 4 == 0 and year % 100 != 0) or year % 400 == 0


def days_in_year(year: int) -> int:
    return 366 if is_leap_year(year) else 365


def days_in_month(year: int, month: int) -> int:
    """
    Number of days in a month.

    Raises:
        InvalidDate: year < 0 or month outside 1..12
    """
    if year < 0:
        raise InvalidDate(f"Year must not be negative: {year}")
    if not 1 <= month <= MONTHS_PER_YEAR:
        raise InvalidDate(f"Month out of range: {month}")
    return DAYS_OF_MONTH[is_leap_year(year)][month - 1]


# =============================================================================
# GPS WEEK / DAY
# =============================================================================

def _check_day(day: int):
    if not 0 <= day <= DAYS_PER_WEEK:
        raise InvalidDate(f"GPS day number out of range: {day}")


def normalize(week: int, day: int) -> Tuple[int, int]:
    """Map day 7 onto day 0 of the next week."""
    _check_day(day)
    if day == DAYS_PER_WEEK:
        return week + 1, 0
    return week, day


def de_normalize(week: int, day: int) -> Tuple[int, int]:
    """Map day 0 onto day 7 of the previous week."""
    _check_day(day)
    if day == 0:
        if week < 1:
            raise InvalidDate(f"Cannot de-normalize week {week} day 0")
        return week - 1, DAYS_PER_WEEK
    return week, day


# =============================================================================
# FREE-RUNNING COUNTERS
# =============================================================================

def delta_cycles(a: int, b: int, bits: int = DEFAULT_COUNTER_BITS) -> int:
    """
    Signed difference a - b of two counter readings, modulo 2^bits.

    delta_cycles(0x00000005, 0xFFFFFFFB, bits=32) == 10
    """
    if not 1 <= bits <= 64:
        raise ValueError(f"Counter width must be 1..64 bits, got {bits}")
    modulus = 1 << bits
    diff = (a - b) & (modulus - 1)
    if diff >= modulus >> 1:
        diff -= modulus
    return diff
