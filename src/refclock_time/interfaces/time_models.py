"""
Time Model Data Types

These dataclasses define the contract between the time model and the
(external) driver layer: decoded hardware timestamps, calendar dates, GPS
week/day pairs, leap second records and the tagged results of GPS week
resolution.

Design principles:
- Immutable (frozen dataclasses), validated on construction
- Integer seconds and nanoseconds only, no floats in the data path
- JSON-friendly to_dict() for diagnostics

Contract Version: 1.0.0
"""

from dataclasses import dataclass, field
from enum import Enum
from functools import total_ordering
from typing import Any, Dict, Optional, Tuple, Union

from ..errors import (
    AmbiguousWeekNumber,
    InconsistentSign,
    InvalidDate,
    WeekNumberNotFound,
)
from ..timing.time_constants import NSEC_PER_SEC
from ..timing.time_rules import days_in_month, de_normalize, delta_cycles, normalize


class Epoch(str, Enum):
    """Reference epoch / time scale an Instant is counted from."""
    POSIX = "POSIX"   # UTC seconds since 1970-01-01
    GPS = "GPS"       # GPS seconds since 1980-01-06, no leap seconds
    NTP = "NTP"       # UTC seconds since 1900-01-01
    TAI = "TAI"       # TAI seconds since 1970-01-01 TAI (PTP style)


# ============================================================================
# INSTANT
# ============================================================================

@total_ordering
@dataclass(frozen=True)
class Instant:
    """
    A point in time: signed seconds plus signed nanoseconds on an epoch.

    If the value is negative, BOTH fields carry the negative sign
    (-1.5 s is secs=-1, nanos=-500000000). A pair whose fields disagree
    about the sign is rejected, and so is secs=0 with negative nanos,
    because a zero seconds field cannot confirm the sign of the whole.

    Attributes:
        secs: Whole seconds since the epoch
        nanos: Nanoseconds, |nanos| < 1e9, same sign as secs
        epoch: Reference epoch (default POSIX/UTC)
    """
    secs: int
    nanos: int = 0
    epoch: Epoch = Epoch.POSIX

    def __post_init__(self):
        if isinstance(self.secs, bool) or not isinstance(self.secs, int):
            raise TypeError(f"secs must be int, got {type(self.secs).__name__}")
        if isinstance(self.nanos, bool) or not isinstance(self.nanos, int):
            raise TypeError(f"nanos must be int, got {type(self.nanos).__name__}")
        if abs(self.nanos) >= NSEC_PER_SEC:
            raise ValueError(f"nanos out of range: {self.nanos}")
        if self.nanos < 0 and self.secs >= 0:
            raise InconsistentSign(
                f"Negative nanos ({self.nanos}) with secs={self.secs}"
            )
        if self.nanos > 0 and self.secs < 0:
            raise InconsistentSign(
                f"Positive nanos ({self.nanos}) with secs={self.secs}"
            )
        # Normalize plain strings ("GPS") to the enum
        object.__setattr__(self, 'epoch', Epoch(self.epoch))

    @classmethod
    def from_nanoseconds(cls, total_ns: int, epoch: Epoch = Epoch.POSIX) -> "Instant":
        """Build an Instant from a signed nanosecond count (truncating split)."""
        sign = -1 if total_ns < 0 else 1
        secs, nanos = divmod(abs(total_ns), NSEC_PER_SEC)
        return cls(sign * secs, sign * nanos, epoch)

    @property
    def total_nanoseconds(self) -> int:
        return self.secs * NSEC_PER_SEC + self.nanos

    @property
    def is_negative(self) -> bool:
        return self.secs < 0 or self.nanos < 0

    @property
    def is_zero(self) -> bool:
        return self.secs == 0 and self.nanos == 0

    def shifted(self, delta_secs: int, epoch: Optional[Epoch] = None) -> "Instant":
        """
        Return this instant moved by whole seconds, optionally relabelled.

        The nanosecond field is kept as is unless the shift crosses zero,
        in which case the pair is re-split to keep the sign consistent.
        """
        target = self.epoch if epoch is None else epoch
        new_secs = self.secs + delta_secs
        if self.nanos == 0 or (new_secs > 0) == (self.nanos > 0):
            return Instant(new_secs, self.nanos, target)
        return Instant.from_nanoseconds(
            self.total_nanoseconds + delta_secs * NSEC_PER_SEC, target
        )

    def to_float(self) -> float:
        """Seconds as float (display only, loses precision)."""
        return self.secs + self.nanos / NSEC_PER_SEC

    def _check_epoch(self, other: "Instant"):
        if self.epoch != other.epoch:
            raise ValueError(
                f"Cannot compare {self.epoch.value} and {other.epoch.value} instants"
            )

    def __lt__(self, other):
        if not isinstance(other, Instant):
            return NotImplemented
        self._check_epoch(other)
        return self.total_nanoseconds < other.total_nanoseconds

    def to_dict(self) -> Dict[str, Any]:
        return {'secs': self.secs, 'nanos': self.nanos, 'epoch': self.epoch.value}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Instant":
        return cls(
            secs=int(data['secs']),
            nanos=int(data.get('nanos', 0)),
            epoch=Epoch(data.get('epoch', 'POSIX')),
        )

    def __str__(self) -> str:
        sign = "-" if self.is_negative else ""
        return f"{sign}{abs(self.secs)}.{abs(self.nanos):09d} {self.epoch.value}"


# ============================================================================
# CALENDAR DATE
# ============================================================================

@dataclass(frozen=True)
class CalendarDate:
    """
    Gregorian date and time of day.

    Second 60 is admitted so an inserted leap second (23:59:60) can be
    represented.
    """
    year: int
    month: int
    day: int
    hour: int = 0
    minute: int = 0
    second: int = 0

    def __post_init__(self):
        max_day = days_in_month(self.year, self.month)
        if not 1 <= self.day <= max_day:
            raise InvalidDate(
                f"Day out of range for {self.year:04d}-{self.month:02d}: {self.day}"
            )
        if not 0 <= self.hour <= 23:
            raise InvalidDate(f"Hour out of range: {self.hour}")
        if not 0 <= self.minute <= 59:
            raise InvalidDate(f"Minute out of range: {self.minute}")
        if not 0 <= self.second <= 60:
            raise InvalidDate(f"Second out of range: {self.second}")

    def to_dict(self) -> Dict[str, int]:
        return {
            'year': self.year, 'month': self.month, 'day': self.day,
            'hour': self.hour, 'minute': self.minute, 'second': self.second,
        }

    def __str__(self) -> str:
        return (
            f"{self.year:04d}-{self.month:02d}-{self.day:02d}"
            f"T{self.hour:02d}:{self.minute:02d}:{self.second:02d}"
        )


# ============================================================================
# GPS WEEK / DAY
# ============================================================================

@dataclass(frozen=True)
class GpsWeekDay:
    """
    Extended GPS week number plus day-of-week.

    Normalized pairs have day 0..6. Some receivers send de-normalized pairs
    where day 7 means day 0 of the following week, e.g. the 2017-01-01 leap
    second was broadcast as 1929|7 rather than 1930|0.
    """
    week: int
    day: int

    def __post_init__(self):
        if self.week < 0:
            raise InvalidDate(f"GPS week must not be negative: {self.week}")
        if not 0 <= self.day <= 7:
            raise InvalidDate(f"GPS day number out of range: {self.day}")

    @property
    def is_normalized(self) -> bool:
        return self.day < 7

    def normalized(self) -> "GpsWeekDay":
        return GpsWeekDay(*normalize(self.week, self.day))

    def de_normalized(self) -> "GpsWeekDay":
        """Day 0 as day 7 of the previous week; InvalidDate for week 0 day 0."""
        return GpsWeekDay(*de_normalize(self.week, self.day))

    def to_dict(self) -> Dict[str, int]:
        return {'week': self.week, 'day': self.day}


# ============================================================================
# LEAP SECONDS
# ============================================================================

@dataclass(frozen=True)
class LeapSecondEntry:
    """
    One row of a leap second table.

    Attributes:
        instant: End of the leap second (when the new offset takes effect)
        utc_tai_offset_after: Seconds UTC is behind TAI from `instant` on
    """
    instant: Instant
    utc_tai_offset_after: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            'instant': self.instant.to_dict(),
            'utc_tai_offset_after': self.utc_tai_offset_after,
        }


@dataclass(frozen=True)
class GpsLeapSecondEntry:
    """A leap second expressed as a normalized GPS week/day pair."""
    week: int
    day: int
    gps_utc_offset_after: int  # seconds UTC is behind GPS after the step


@dataclass(frozen=True)
class PendingLeapSecond:
    """
    Announced-but-not-yet-applied leap second.

    `valid` stays False until the driver layer supplies a fresh announcement
    (e.g. decoded GPS UTC parameters or a new leap second bulletin).

    Attributes:
        instant_utc: Time of the step, UTC scale
        instant_tai: Time of the step, TAI scale (ahead by the offset in
                     effect before the step)
        step: +1 inserted, -1 deleted, 0 no change announced
        offset_gps_utc: GPS - UTC after the step
        offset_tai_utc: TAI - UTC after the step
        valid: The record has been set up from an announcement
    """
    instant_utc: Optional[Instant] = None
    instant_tai: Optional[Instant] = None
    step: int = 0
    offset_gps_utc: int = 0
    offset_tai_utc: int = 0
    valid: bool = False

    def __post_init__(self):
        if self.step not in (-1, 0, 1):
            raise ValueError(f"Leap second step must be -1, 0 or +1, got {self.step}")
        if self.valid and self.instant_utc is None:
            raise ValueError("A valid pending leap second needs instant_utc")

    @classmethod
    def none(cls) -> "PendingLeapSecond":
        """The 'no announcement yet' record."""
        return cls()

    @property
    def is_announced(self) -> bool:
        return self.valid and self.step != 0

    def ntp_leap_indicator(self) -> int:
        """NTP leap indicator: 0 = none, 1 = insert, 2 = delete."""
        if not self.is_announced:
            return 0
        return 1 if self.step > 0 else 2

    def is_due(self, now: Instant) -> bool:
        """True once `now` (UTC) has reached the end of the leap second."""
        return self.is_announced and now >= self.instant_utc

    def to_dict(self) -> Dict[str, Any]:
        return {
            'instant_utc': self.instant_utc.to_dict() if self.instant_utc else None,
            'instant_tai': self.instant_tai.to_dict() if self.instant_tai else None,
            'step': self.step,
            'offset_gps_utc': self.offset_gps_utc,
            'offset_tai_utc': self.offset_tai_utc,
            'valid': self.valid,
        }


# ============================================================================
# CYCLE-BRACKETED TIMESTAMP
# ============================================================================

@dataclass(frozen=True)
class CycleBracketedTimestamp:
    """
    A hardware timestamp bracketed by two reads of a free-running counter.

    The bracket width (cycles_after - cycles_before) bounds the latency of
    the timestamp read itself.

    Attributes:
        cycles_before: Counter value read just before the timestamp
        cycles_after: Counter value read just after the timestamp
        instant: The timestamp read in between
        counter_bits: Native width of the counter (wrap-around modulus)
    """
    cycles_before: int
    cycles_after: int
    instant: Instant
    counter_bits: int = 64

    @property
    def latency_cycles(self) -> int:
        """Counter ticks between the two reads, correct across a wrap."""
        return delta_cycles(self.cycles_after, self.cycles_before, self.counter_bits)

    @property
    def midpoint_cycles(self) -> int:
        """Counter value half way between the two reads, in counter width."""
        mask = (1 << self.counter_bits) - 1
        return (self.cycles_before + self.latency_cycles // 2) & mask

    def latency_seconds(self, cycles_frequency: float) -> float:
        """
        Read latency in seconds.

        Args:
            cycles_frequency: Counter frequency in Hz
        """
        if cycles_frequency <= 0:
            raise ValueError(f"Counter frequency must be positive: {cycles_frequency}")
        return self.latency_cycles / cycles_frequency

    def to_dict(self) -> Dict[str, Any]:
        return {
            'cycles_before': self.cycles_before,
            'cycles_after': self.cycles_after,
            'instant': self.instant.to_dict(),
            'counter_bits': self.counter_bits,
            'latency_cycles': self.latency_cycles,
        }


# ============================================================================
# GPS WEEK RESOLUTION RESULTS
# ============================================================================

@dataclass(frozen=True)
class Resolved:
    """Exactly one 256-week cycle matched a valid leap second date."""
    week: int

    def unwrap(self) -> int:
        return self.week


@dataclass(frozen=True)
class Ambiguous:
    """More than one cycle matched. All Ambiguous results compare equal."""
    truncated_week: Optional[int] = field(default=None, compare=False)
    day: Optional[int] = field(default=None, compare=False)
    candidates: Tuple[int, ...] = field(default=(), compare=False)

    def unwrap(self) -> int:
        raise AmbiguousWeekNumber(self.truncated_week, self.day, self.candidates)


@dataclass(frozen=True)
class NotFound:
    """No cycle matched. All NotFound results compare equal."""
    truncated_week: Optional[int] = field(default=None, compare=False)
    day: Optional[int] = field(default=None, compare=False)
    cycle_limit: Optional[int] = field(default=None, compare=False)

    def unwrap(self) -> int:
        raise WeekNumberNotFound(self.truncated_week, self.day, self.cycle_limit)


WeekResolution = Union[Resolved, Ambiguous, NotFound]
