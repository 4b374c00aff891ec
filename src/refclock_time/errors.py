"""
Exception hierarchy for refclock-time.

Every error raised by the time model derives from TimebaseError, so a
driver-layer caller can catch the whole family in one place. The concrete
classes also derive from the closest builtin (ValueError, OverflowError,
LookupError) so generic handlers keep working.

GPS week resolution does NOT raise on its own: GpsWeekResolver.resolve()
returns a tagged result and only result.unwrap() raises
AmbiguousWeekNumber / WeekNumberNotFound.
"""

from typing import Sequence


class TimebaseError(Exception):
    """Base class for all refclock-time errors."""


class InvalidDate(TimebaseError, ValueError):
    """Out-of-range year, month, day, time field or GPS week/day number."""


class InconsistentSign(TimebaseError, ValueError):
    """Seconds and nanoseconds of an Instant disagree about the sign."""


class FractionOverflow(TimebaseError, OverflowError):
    """Value does not fit the requested binary fraction width or scale."""


class AmbiguousWeekNumber(TimebaseError):
    """More than one 256-week cycle yields a valid leap second date."""

    def __init__(self, truncated_week: int, day: int, candidates: Sequence[int]):
        self.truncated_week = truncated_week
        self.day = day
        self.candidates = tuple(candidates)
        super().__init__(
            f"Truncated week {truncated_week} day {day} is ambiguous: "
            f"candidates {list(self.candidates)}"
        )


class WeekNumberNotFound(TimebaseError, LookupError):
    """No 256-week cycle yields a valid leap second date."""

    def __init__(self, truncated_week: int, day: int, cycle_limit: int):
        self.truncated_week = truncated_week
        self.day = day
        self.cycle_limit = cycle_limit
        super().__init__(
            f"No leap second date found for truncated week {truncated_week} "
            f"day {day} within {cycle_limit} cycles"
        )


class LeapSecondFileError(TimebaseError):
    """A leap second bulletin file could not be parsed."""


class ConfigError(TimebaseError, ValueError):
    """Invalid configuration value."""
