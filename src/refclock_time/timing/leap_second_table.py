#!/usr/bin/env python3
"""
Leap Second Table - Historic UTC-TAI Offsets and Pending Announcements

================================================================================
PURPOSE
================================================================================
Holds the sequence of known leap seconds and answers "what was TAI-UTC at
instant t?". The table is immutable after construction. A reload builds a
complete new table and swaps it into a LeapSecondTableHandle in one
assignment, so readers see either the old or the new table, never a mix.

================================================================================
ENTRY SEMANTICS
================================================================================
Each entry stores the END of the leap second, i.e. the first instant on
which the new offset applies:

    2017-01-01 00:00:00 UTC   TAI-UTC = 37
    offset_at(2017-01-01 00:00:00) = 37
    offset_at(2016-12-31 23:59:59) = 36

Before the first entry (1972-01-01) no offset is defined and offset_at()
returns None.

================================================================================
SOURCES
================================================================================
    LeapSecondTable.builtin()                   compiled-in (time_constants)
    LeapSecondTable.from_leap_seconds_file()    IETF/NTP leap-seconds.list

leap-seconds.list format:
    #$  <NTP seconds of last update>
    #@  <NTP seconds of expiration>
    #   comment
    <NTP seconds> <TAI-UTC>   [# comment]
"""

import bisect
import logging
import threading
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Sequence, Tuple, Union

from ..errors import LeapSecondFileError
from ..interfaces.time_models import (
    Epoch,
    GpsLeapSecondEntry,
    Instant,
    LeapSecondEntry,
    PendingLeapSecond,
)
from .calendar_math import date_from_days_since_year_0
from .time_constants import (
    DAYS_PER_WEEK,
    GPS_EPOCH_BIAS_FROM_POSIX,
    GPS_INITIAL_DAY,
    GPS_TAI_OFFSET,
    KNOWN_LEAP_SECONDS_EXPIRE_NTP,
    KNOWN_LEAP_SECONDS_NTP,
    LEAP_SECOND_MONTHS,
    LEAP_SECOND_MONTHS_APR_OCT,
    NTP_EPOCH_BIAS_FROM_POSIX,
    POSIX_1970_INITIAL_DAY,
    SECS_PER_DAY,
)

logger = logging.getLogger(__name__)


def is_valid_leap_second_date(day: int, month: int, accept_apr_oct: bool = False) -> bool:
    """
    Check whether a leap second may take effect on this date.

    Leap seconds end on the 1st of January or July. April and October are
    permitted by ITU-R TF.460 but have never been used; accepting them
    weakens the uniqueness of GPS week resolution, so it is opt-in.
    """
    if day != 1:
        return False
    if month in LEAP_SECOND_MONTHS:
        return True
    return accept_apr_oct and month in LEAP_SECOND_MONTHS_APR_OCT


def _ntp_to_posix_instant(ntp_secs: int) -> Instant:
    return Instant(ntp_secs - NTP_EPOCH_BIAS_FROM_POSIX, 0, Epoch.POSIX)


def _as_utc(instant: Instant) -> Instant:
    """Relabel an NTP instant as POSIX; both count UTC seconds."""
    if instant.epoch == Epoch.POSIX:
        return instant
    if instant.epoch == Epoch.NTP:
        return instant.shifted(-NTP_EPOCH_BIAS_FROM_POSIX, Epoch.POSIX)
    raise ValueError(f"Expected a UTC (POSIX or NTP) instant, got {instant.epoch.value}")


def parse_leap_seconds_list(
    lines: Sequence[str],
    source: str = "<string>",
) -> Tuple[List[Tuple[int, int]], Optional[int], Optional[int]]:
    """
    Parse the lines of an NTP leap-seconds.list file.

    Args:
        lines: File contents split into lines
        source: Name used in error messages

    Returns:
        (entries as (ntp_secs, tai_utc), expires_ntp, last_update_ntp)

    Raises:
        LeapSecondFileError: malformed line or no entries
    """
    entries: List[Tuple[int, int]] = []
    expires = None
    last_update = None

    for line_no, raw in enumerate(lines, start=1):
        line = raw.strip()
        if not line:
            continue

        if line.startswith('#@') or line.startswith('#$'):
            fields = line[2:].split()
            if not fields:
                raise LeapSecondFileError(f"{source}:{line_no}: missing timestamp")
            try:
                value = int(fields[0])
            except ValueError as e:
                raise LeapSecondFileError(
                    f"{source}:{line_no}: bad timestamp {fields[0]!r}"
                ) from e
            if line.startswith('#@'):
                expires = value
            else:
                last_update = value
            continue

        if line.startswith('#'):
            continue

        fields = line.split('#', 1)[0].split()
        if len(fields) < 2:
            raise LeapSecondFileError(f"{source}:{line_no}: expected '<ntp_secs> <offset>'")
        try:
            entries.append((int(fields[0]), int(fields[1])))
        except ValueError as e:
            raise LeapSecondFileError(f"{source}:{line_no}: {e}") from e

    if not entries:
        raise LeapSecondFileError(f"{source}: no leap second entries found")

    return entries, expires, last_update


class LeapSecondTable:
    """
    Immutable, strictly time-ascending sequence of leap second entries.

    Instants are POSIX (UTC) seconds at the end of each leap second.
    """

    def __init__(
        self,
        entries: Sequence[LeapSecondEntry],
        expires: Optional[Instant] = None,
        last_update: Optional[Instant] = None,
        gps_tai_offset: int = GPS_TAI_OFFSET,
        source: str = "builtin",
    ):
        """
        Args:
            entries: Table rows, strictly ascending by instant
            expires: Bulletin expiration (UTC), None if unknown
            last_update: Bulletin update time (UTC), None if unknown
            gps_tai_offset: TAI - GPS in seconds
            source: Where the table came from, for logging

        Raises:
            ValueError: empty table or instants not strictly ascending
        """
        if not entries:
            raise ValueError("Leap second table must contain at least one entry")

        self._entries: Tuple[LeapSecondEntry, ...] = tuple(
            LeapSecondEntry(_as_utc(e.instant), e.utc_tai_offset_after) for e in entries
        )
        self._expires = _as_utc(expires) if expires is not None else None
        self._last_update = _as_utc(last_update) if last_update is not None else None
        self._gps_tai_offset = gps_tai_offset
        self._source = source

        self._validate()
        self._keys = [e.instant.total_nanoseconds for e in self._entries]

    def _validate(self):
        previous = None
        for entry in self._entries:
            if previous is not None:
                if entry.instant <= previous.instant:
                    raise ValueError(
                        f"Leap second table not strictly ascending at {entry.instant}"
                    )
                step = entry.utc_tai_offset_after - previous.utc_tai_offset_after
                if abs(step) != 1:
                    logger.warning(
                        f"{self._source}: offset step of {step:+d} s at {entry.instant}"
                    )

            if entry.instant.secs % SECS_PER_DAY or entry.instant.nanos:
                logger.warning(f"{self._source}: leap second not at midnight: {entry.instant}")
            elif entry.instant.secs >= 0:
                date = date_from_days_since_year_0(
                    entry.instant.secs // SECS_PER_DAY + POSIX_1970_INITIAL_DAY
                )
                if not is_valid_leap_second_date(date.day, date.month, accept_apr_oct=True):
                    logger.warning(f"{self._source}: unusual leap second date {date}")
            previous = entry

    # -------------------------------------------------------------------------
    # Construction
    # -------------------------------------------------------------------------

    @classmethod
    def from_ntp_pairs(
        cls,
        pairs: Sequence[Tuple[int, int]],
        expires_ntp: Optional[int] = None,
        last_update_ntp: Optional[int] = None,
        gps_tai_offset: int = GPS_TAI_OFFSET,
        source: str = "ntp-pairs",
    ) -> "LeapSecondTable":
        """Build from (NTP seconds, TAI-UTC) pairs as found in leap-seconds.list."""
        entries = [LeapSecondEntry(_ntp_to_posix_instant(ntp), offset) for ntp, offset in pairs]
        return cls(
            entries,
            expires=_ntp_to_posix_instant(expires_ntp) if expires_ntp is not None else None,
            last_update=(_ntp_to_posix_instant(last_update_ntp)
                         if last_update_ntp is not None else None),
            gps_tai_offset=gps_tai_offset,
            source=source,
        )

    @classmethod
    def builtin(cls, gps_tai_offset: int = GPS_TAI_OFFSET) -> "LeapSecondTable":
        """The compiled-in table (1972-01-01 through 2017-01-01)."""
        return cls.from_ntp_pairs(
            KNOWN_LEAP_SECONDS_NTP,
            expires_ntp=KNOWN_LEAP_SECONDS_EXPIRE_NTP,
            gps_tai_offset=gps_tai_offset,
            source="builtin",
        )

    @classmethod
    def from_leap_seconds_file(
        cls,
        path: Union[str, Path],
        gps_tai_offset: int = GPS_TAI_OFFSET,
    ) -> "LeapSecondTable":
        """
        Load an NTP leap-seconds.list bulletin.

        Raises:
            LeapSecondFileError: file missing, unreadable or malformed
        """
        path = Path(path)
        try:
            with open(path, 'r') as f:
                lines = f.read().splitlines()
        except OSError as e:
            raise LeapSecondFileError(f"Cannot read leap second file {path}: {e}") from e

        pairs, expires, last_update = parse_leap_seconds_list(lines, source=str(path))
        try:
            table = cls.from_ntp_pairs(
                pairs, expires, last_update,
                gps_tai_offset=gps_tai_offset, source=str(path),
            )
        except ValueError as e:
            raise LeapSecondFileError(f"{path}: {e}") from e

        logger.info(f"Loaded {len(table)} leap seconds from {path} "
                    f"(TAI-UTC = {table.current_offset()} s)")
        return table

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    @property
    def entries(self) -> Tuple[LeapSecondEntry, ...]:
        return self._entries

    @property
    def expires(self) -> Optional[Instant]:
        return self._expires

    @property
    def last_update(self) -> Optional[Instant]:
        return self._last_update

    @property
    def gps_tai_offset(self) -> int:
        return self._gps_tai_offset

    @property
    def source(self) -> str:
        return self._source

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[LeapSecondEntry]:
        return iter(self._entries)

    def __getitem__(self, index: int) -> LeapSecondEntry:
        return self._entries[index]

    def current_offset(self) -> int:
        """TAI - UTC after the most recent leap second in the table."""
        return self._entries[-1].utc_tai_offset_after

    def offset_at(self, instant: Instant) -> Optional[int]:
        """
        TAI - UTC in effect at a UTC instant.

        Args:
            instant: POSIX or NTP instant

        Returns:
            Offset in seconds, None before the first table entry
        """
        key = _as_utc(instant).total_nanoseconds
        index = bisect.bisect_right(self._keys, key)
        if index == 0:
            return None
        return self._entries[index - 1].utc_tai_offset_after

    def offset_at_tai(self, tai: Union[Instant, int]) -> Optional[int]:
        """
        TAI - UTC in effect at a TAI instant (seconds since 1970-01-01 TAI).

        The step happens at TAI time utc_instant + offset_after.
        """
        if isinstance(tai, int):
            tai = Instant(tai, 0, Epoch.TAI)
        if tai.epoch != Epoch.TAI:
            raise ValueError(f"Expected a TAI instant, got {tai.epoch.value}")

        key = tai.total_nanoseconds
        result = None
        for entry in self._entries:
            step_tai = entry.instant.shifted(entry.utc_tai_offset_after, Epoch.TAI)
            if step_tai.total_nanoseconds > key:
                break
            result = entry.utc_tai_offset_after
        return result

    def gps_utc_offset_at(self, instant: Instant) -> Optional[int]:
        """GPS - UTC at a UTC instant, None before the first entry."""
        offset = self.offset_at(instant)
        if offset is None:
            return None
        return offset - self._gps_tai_offset

    def gps_entries(self) -> Tuple[GpsLeapSecondEntry, ...]:
        """
        Leap seconds after the GPS epoch as normalized GPS week/day pairs.

        The week/day is that of the UTC date on which the new offset applies,
        e.g. 2017-01-01 -> week 1930, day 0, GPS-UTC 18.
        """
        result = []
        for entry in self._entries:
            if entry.instant.secs <= GPS_EPOCH_BIAS_FROM_POSIX:
                continue
            days = entry.instant.secs // SECS_PER_DAY + POSIX_1970_INITIAL_DAY - GPS_INITIAL_DAY
            week, day = divmod(days, DAYS_PER_WEEK)
            result.append(GpsLeapSecondEntry(
                week=week,
                day=day,
                gps_utc_offset_after=entry.utc_tai_offset_after - self._gps_tai_offset,
            ))
        return tuple(result)

    def is_expired(self, now: Instant) -> bool:
        """True if the bulletin's expiration date has passed (never if unknown)."""
        if self._expires is None:
            return False
        return _as_utc(now) >= self._expires

    def pending_leap_second(self, now: Instant) -> PendingLeapSecond:
        """
        Announcement record for the first table entry after `now`.

        A bulletin lists scheduled leap seconds months ahead; if one lies in
        the future it is reported as pending, otherwise PendingLeapSecond.none().
        """
        now = _as_utc(now)
        index = bisect.bisect_right(self._keys, now.total_nanoseconds)
        if index >= len(self._entries) or index == 0:
            return PendingLeapSecond.none()

        entry = self._entries[index]
        before = self._entries[index - 1].utc_tai_offset_after
        step = entry.utc_tai_offset_after - before
        if step not in (-1, 1):
            logger.warning(f"Ignoring pending offset change of {step:+d} s at {entry.instant}")
            return PendingLeapSecond.none()

        return PendingLeapSecond(
            instant_utc=entry.instant,
            instant_tai=entry.instant.shifted(before, Epoch.TAI),
            step=step,
            offset_gps_utc=entry.utc_tai_offset_after - self._gps_tai_offset,
            offset_tai_utc=entry.utc_tai_offset_after,
            valid=True,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'source': self._source,
            'current_offset': self.current_offset(),
            'gps_tai_offset': self._gps_tai_offset,
            'expires': self._expires.to_dict() if self._expires else None,
            'last_update': self._last_update.to_dict() if self._last_update else None,
            'entries': [e.to_dict() for e in self._entries],
        }

    def __repr__(self) -> str:
        return (f"LeapSecondTable(source={self._source!r}, entries={len(self)}, "
                f"current_offset={self.current_offset()})")


class LeapSecondTableHandle:
    """
    Shared reference to the current LeapSecondTable.

    Readers take `handle.table` once and work on that snapshot. Writers build
    the new table completely, then swap the reference under a lock.
    """

    def __init__(self, table: Optional[LeapSecondTable] = None):
        self._table = table if table is not None else LeapSecondTable.builtin()
        self._lock = threading.Lock()
        self.reload_count = 0

    @classmethod
    def from_config(cls, config) -> "LeapSecondTableHandle":
        """Load the configured bulletin, or the compiled-in table if none."""
        if config.leap_second_file:
            table = LeapSecondTable.from_leap_seconds_file(
                config.leap_second_file, gps_tai_offset=config.gps_tai_offset
            )
        else:
            table = LeapSecondTable.builtin(gps_tai_offset=config.gps_tai_offset)
        return cls(table)

    @property
    def table(self) -> LeapSecondTable:
        return self._table

    def replace(self, table: LeapSecondTable) -> LeapSecondTable:
        """Swap in a new table; returns the previous one."""
        if not isinstance(table, LeapSecondTable):
            raise TypeError(f"Expected LeapSecondTable, got {type(table).__name__}")
        with self._lock:
            previous = self._table
            self._table = table
            self.reload_count += 1
        logger.info(f"Leap second table replaced: {previous.source} -> {table.source} "
                    f"(TAI-UTC {previous.current_offset()} -> {table.current_offset()} s)")
        return previous

    def reload_from_file(self, path: Union[str, Path]) -> LeapSecondTable:
        """
        Parse a bulletin and swap it in. On error the current table is kept.

        Raises:
            LeapSecondFileError: the file could not be loaded
        """
        table = LeapSecondTable.from_leap_seconds_file(
            path, gps_tai_offset=self._table.gps_tai_offset
        )
        self.replace(table)
        return table
