"""
Epoch Converter - POSIX/UTC, GPS, NTP, TAI and SMPTE Time Scales

Pure bias conversions (POSIX <-> GPS label, POSIX <-> NTP) are plain
functions on integer seconds. Conversions that cross the UTC/atomic boundary
(UTC <-> TAI <-> GPS) need the leap second table and go through
EpochConverter.convert().

    TAI  = UTC + (TAI-UTC from the table)
    GPS  = TAI - GPS_TAI_OFFSET           (19 s)
    NTP  = POSIX + 2208988800             (both UTC)

TAI instants count TAI seconds since 1970-01-01 00:00:00 TAI, as PTP does.

An inserted leap second (23:59:60) has no POSIX representation: converting
a TAI or GPS instant inside it back to UTC yields the following 00:00:00.
"""

import logging
from enum import Enum
from typing import Optional, Tuple

from ..config import TimebaseConfig
from ..errors import InvalidDate
from ..interfaces.time_models import CalendarDate, Epoch, Instant
from .calendar_math import date_from_days_since_year_0, n_days_since_year_0
from .leap_second_table import LeapSecondTableHandle
from .time_constants import (
    DAYS_PER_WEEK,
    GPS_EPOCH_BIAS_FROM_POSIX,
    GPS_INITIAL_DAY,
    GPS_TAI_OFFSET,
    NTP_EPOCH_BIAS_FROM_POSIX,
    POSIX_1970_INITIAL_DAY,
    SECS_PER_DAY,
    SECS_PER_HOUR,
    SECS_PER_MIN,
    SECS_PER_WEEK,
)

logger = logging.getLogger(__name__)


class SmpteEpoch(str, Enum):
    """Epochs selectable in the SMPTE ST 2059 PTP profile."""
    TAI_1970 = "TAI_1970"
    TAI_1958 = "TAI_1958"   # hypothetical extrapolation, TAI did not exist yet
    UTC_1972 = "UTC_1972"
    GPS_1980 = "GPS_1980"


def smpte_epoch_offset(epoch: SmpteEpoch, gps_tai_offset: int = GPS_TAI_OFFSET) -> int:
    """
    Seconds from a SMPTE epoch to the GPS epoch.

    Adding this to a GPS seconds count gives seconds since the SMPTE epoch.
    """
    epoch = SmpteEpoch(epoch)
    if epoch == SmpteEpoch.TAI_1970:
        return GPS_EPOCH_BIAS_FROM_POSIX + gps_tai_offset
    if epoch == SmpteEpoch.TAI_1958:
        return GPS_EPOCH_BIAS_FROM_POSIX + (12 * 365 + 3) * SECS_PER_DAY + gps_tai_offset
    if epoch == SmpteEpoch.UTC_1972:
        return GPS_EPOCH_BIAS_FROM_POSIX - 2 * 365 * SECS_PER_DAY
    return 0


# =============================================================================
# PURE BIAS CONVERSIONS
# =============================================================================

def posix_to_gps(posix_secs: int) -> int:
    """Relabel POSIX seconds onto the GPS epoch (no leap seconds applied)."""
    return posix_secs - GPS_EPOCH_BIAS_FROM_POSIX


def gps_to_posix(gps_secs: int) -> int:
    return gps_secs + GPS_EPOCH_BIAS_FROM_POSIX


def posix_to_ntp(posix_secs: int) -> int:
    return posix_secs + NTP_EPOCH_BIAS_FROM_POSIX


def ntp_to_posix(ntp_secs: int) -> int:
    return ntp_secs - NTP_EPOCH_BIAS_FROM_POSIX


def gps_week_seconds(gps_secs: int) -> Tuple[int, int]:
    """Split GPS seconds into (week, second of week)."""
    if gps_secs < 0:
        raise InvalidDate(f"GPS seconds before the GPS epoch: {gps_secs}")
    return divmod(gps_secs, SECS_PER_WEEK)


def from_gps_week(week: int, second_of_week: int) -> int:
    """Inverse of gps_week_seconds()."""
    if week < 0:
        raise InvalidDate(f"GPS week must not be negative: {week}")
    if not 0 <= second_of_week < SECS_PER_WEEK:
        raise InvalidDate(f"Second of week out of range: {second_of_week}")
    return week * SECS_PER_WEEK + second_of_week


def gps_week_day_to_date(week: int, day: int) -> CalendarDate:
    """
    Date of a GPS week/day pair (day 0 = Sunday).

    De-normalized pairs (day 7) land on the same date as (week + 1, 0).
    """
    if week < 0:
        raise InvalidDate(f"GPS week must not be negative: {week}")
    if not 0 <= day <= DAYS_PER_WEEK:
        raise InvalidDate(f"GPS day number out of range: {day}")
    return date_from_days_since_year_0(GPS_INITIAL_DAY + week * DAYS_PER_WEEK + day)


def posix_to_date(posix_secs: int) -> CalendarDate:
    """UTC calendar date and time of a POSIX seconds count."""
    days, rem = divmod(posix_secs, SECS_PER_DAY)
    date = date_from_days_since_year_0(days + POSIX_1970_INITIAL_DAY)
    hour, rem = divmod(rem, SECS_PER_HOUR)
    minute, second = divmod(rem, SECS_PER_MIN)
    return CalendarDate(date.year, date.month, date.day, hour, minute, second)


def date_to_posix(date: CalendarDate) -> int:
    """
    POSIX seconds of a calendar date.

    Second 60 maps onto the following 00:00:00, as POSIX time does.
    """
    days = n_days_since_year_0(date.day, date.month, date.year) - POSIX_1970_INITIAL_DAY
    return days * SECS_PER_DAY + date.hour * SECS_PER_HOUR + date.minute * SECS_PER_MIN + date.second


# =============================================================================
# LEAP-SECOND-AWARE CONVERSION
# =============================================================================

class EpochConverter:
    """
    Convert Instants between time scales using a leap second table.

    Usage:
        converter = EpochConverter(config, handle)
        gps = converter.convert(Instant(1483228800), Epoch.GPS)
    """

    def __init__(
        self,
        config: Optional[TimebaseConfig] = None,
        table_handle: Optional[LeapSecondTableHandle] = None,
    ):
        """
        Args:
            config: TimebaseConfig (defaults if None)
            table_handle: LeapSecondTableHandle (built-in table if None)
        """
        self.config = config if config is not None else TimebaseConfig()
        if table_handle is None:
            table_handle = LeapSecondTableHandle.from_config(self.config)
        self.table_handle = table_handle

    @property
    def gps_tai_offset(self) -> int:
        return self.table_handle.table.gps_tai_offset

    def smpte_epoch_offset(self, epoch: SmpteEpoch) -> int:
        return smpte_epoch_offset(epoch, self.gps_tai_offset)

    def to_tai(self, instant: Instant) -> Instant:
        """Convert any supported instant to TAI seconds since 1970 TAI."""
        if instant.epoch == Epoch.TAI:
            return instant
        if instant.epoch == Epoch.GPS:
            return instant.shifted(GPS_EPOCH_BIAS_FROM_POSIX + self.gps_tai_offset, Epoch.TAI)

        # POSIX or NTP, i.e. UTC
        table = self.table_handle.table
        offset = table.offset_at(instant)
        if offset is None:
            raise InvalidDate(f"No TAI-UTC offset defined at {instant}")
        utc = instant if instant.epoch == Epoch.POSIX else instant.shifted(
            -NTP_EPOCH_BIAS_FROM_POSIX, Epoch.POSIX
        )
        return utc.shifted(offset, Epoch.TAI)

    def from_tai(self, tai: Instant, target: Epoch) -> Instant:
        """Convert a TAI instant to the target scale."""
        target = Epoch(target)
        if target == Epoch.TAI:
            return tai
        if target == Epoch.GPS:
            return tai.shifted(-(GPS_EPOCH_BIAS_FROM_POSIX + self.gps_tai_offset), Epoch.GPS)

        offset = self.table_handle.table.offset_at_tai(tai)
        if offset is None:
            raise InvalidDate(f"No TAI-UTC offset defined at {tai}")
        utc = tai.shifted(-offset, Epoch.POSIX)
        if target == Epoch.NTP:
            return utc.shifted(NTP_EPOCH_BIAS_FROM_POSIX, Epoch.NTP)
        return utc

    def convert(self, instant: Instant, target: Epoch) -> Instant:
        """
        Convert an instant to another time scale.

        POSIX <-> NTP is a pure bias. Everything else goes through TAI and
        applies the leap second offset in effect at the instant.

        Raises:
            InvalidDate: UTC instant before the first leap second table entry
        """
        target = Epoch(target)
        if instant.epoch == target:
            return instant

        utc_scales = (Epoch.POSIX, Epoch.NTP)
        if instant.epoch in utc_scales and target in utc_scales:
            if target == Epoch.NTP:
                return instant.shifted(NTP_EPOCH_BIAS_FROM_POSIX, Epoch.NTP)
            return instant.shifted(-NTP_EPOCH_BIAS_FROM_POSIX, Epoch.POSIX)

        result = self.from_tai(self.to_tai(instant), target)
        logger.debug(f"convert {instant} -> {result}")
        return result

    def to_smpte(self, instant: Instant, epoch: SmpteEpoch) -> Tuple[int, int]:
        """
        Seconds and nanoseconds since a SMPTE epoch.

        Returns:
            (secs, nanos) with the same sign convention as Instant
        """
        gps = self.convert(instant, Epoch.GPS)
        shifted = gps.shifted(self.smpte_epoch_offset(epoch))
        return shifted.secs, shifted.nanos

    def gps_utc_offset(self, instant: Optional[Instant] = None) -> int:
        """GPS - UTC at a UTC instant, or the current value if None."""
        table = self.table_handle.table
        if instant is None:
            return table.current_offset() - table.gps_tai_offset
        offset = table.gps_utc_offset_at(instant)
        if offset is None:
            raise InvalidDate(f"No TAI-UTC offset defined at {instant}")
        return offset
