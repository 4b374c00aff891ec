"""
refclock-time: Time Model for Radio Clock and GNSS Timing Adapters

This package interprets timestamps read from reference clock hardware. It
provides the calendar arithmetic, epoch conversion (POSIX/UTC, GPS, NTP,
TAI, SMPTE), fixed-point fraction codecs and leap second handling that a
driver layer needs, independent of bus type or register layout.

Architecture:
    driver layer (registers, IOCTLs) → refclock-time → timestamps on any scale

The centerpiece is the GPS leap second week resolver: the GPS UTC parameters
carry only the 8 LSBs of the leap second week number, which is extended
against the table of known leap seconds and the rule that leap seconds end
on 1 January or 1 July.

Version: 1.0.0
"""

__version__ = "1.0.0"

from .interfaces.time_models import (
    Ambiguous,
    CalendarDate,
    CycleBracketedTimestamp,
    Epoch,
    GpsWeekDay,
    Instant,
    LeapSecondEntry,
    NotFound,
    PendingLeapSecond,
    Resolved,
)
from .config import TimebaseConfig
from .errors import (
    AmbiguousWeekNumber,
    ConfigError,
    FractionOverflow,
    InconsistentSign,
    InvalidDate,
    LeapSecondFileError,
    TimebaseError,
    WeekNumberNotFound,
)
from .timing.epoch_converter import EpochConverter, SmpteEpoch
from .timing.gps_week_resolver import GpsWeekResolver
from .timing.leap_second_table import LeapSecondTable, LeapSecondTableHandle
from .timing.timestamp_bundle import LatencyStats, TimestampBundle

__all__ = [
    "Ambiguous",
    "CalendarDate",
    "CycleBracketedTimestamp",
    "Epoch",
    "GpsWeekDay",
    "Instant",
    "LeapSecondEntry",
    "NotFound",
    "PendingLeapSecond",
    "Resolved",
    "TimebaseConfig",
    "AmbiguousWeekNumber",
    "ConfigError",
    "FractionOverflow",
    "InconsistentSign",
    "InvalidDate",
    "LeapSecondFileError",
    "TimebaseError",
    "WeekNumberNotFound",
    "EpochConverter",
    "SmpteEpoch",
    "GpsWeekResolver",
    "LeapSecondTable",
    "LeapSecondTableHandle",
    "LatencyStats",
    "TimestampBundle",
    "__version__",
]
