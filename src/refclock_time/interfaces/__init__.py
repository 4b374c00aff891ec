"""Data contracts exchanged with the driver layer."""

from .time_models import (
    Ambiguous,
    CalendarDate,
    CycleBracketedTimestamp,
    Epoch,
    GpsLeapSecondEntry,
    GpsWeekDay,
    Instant,
    LeapSecondEntry,
    NotFound,
    PendingLeapSecond,
    Resolved,
    WeekResolution,
)

__all__ = [
    'Ambiguous', 'CalendarDate', 'CycleBracketedTimestamp', 'Epoch',
    'GpsLeapSecondEntry', 'GpsWeekDay', 'Instant', 'LeapSecondEntry',
    'NotFound', 'PendingLeapSecond', 'Resolved', 'WeekResolution',
]
