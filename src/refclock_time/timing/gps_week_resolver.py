#!/usr/bin/env python3
"""
GPS Week Resolver - Extending the 8-bit Leap Second Week Number (WNlsf)

================================================================================
PROBLEM
================================================================================
The GPS UTC parameter set announces leap seconds as (WNlsf, DN, delta_tls,
delta_tlsf). WNlsf carries only the 8 LSBs of the extended week number, so
it repeats every 256 weeks (~4.9 years).

    delta_tls != delta_tlsf   A leap second is being announced. WNlsf is
                              within +-128 weeks of the current week and can
                              be extended directly (extend_week_near()).

    delta_tls == delta_tlsf   Nothing announced. WNlsf/DN refer to the LAST
                              leap second, which may be any number of 256-week
                              cycles in the past.

================================================================================
ALGORITHM (second case)
================================================================================
Leap seconds have only ever ended on 1 January or 1 July. For each cycle
c = 0 .. cycle_limit-1 the candidate week WNlsf + 256*c is combined with DN
into a date; a candidate is accepted if that date is a valid leap second
date. Exactly one match -> Resolved, several -> Ambiguous, none -> NotFound.

With January/July only, results are unique for 25 cycles from 1980 (until
~2099). Accepting April/October as well, or searching more cycles, can
produce several matches.

Example:
    2017-01-01 is GPS week 1930, day 0. 1930 % 256 = 138.
    resolve(138, 0) -> Resolved(1930)

================================================================================
WEEK/DAY ENCODING
================================================================================
Day numbers are Sunday-origin, 0..6. Receivers may also send day 7, meaning
day 0 of the following week (1929|7 == 1930|0). resolve() normalizes first.
"""

import logging
from typing import List, Optional, Tuple

from ..config import TimebaseConfig
from ..errors import InvalidDate
from ..interfaces.time_models import (
    Ambiguous,
    Epoch,
    Instant,
    NotFound,
    PendingLeapSecond,
    Resolved,
    WeekResolution,
)
from .epoch_converter import date_to_posix, gps_week_day_to_date
from .leap_second_table import LeapSecondTableHandle, is_valid_leap_second_date
from .time_constants import (
    DEFAULT_CYCLE_LIMIT,
    WNLSF_CYCLE_WEEKS,
    WNLSF_HALF_CYCLE,
    WNLSF_MASK,
)
from .time_rules import de_normalize, normalize

logger = logging.getLogger(__name__)


def _check_truncated(truncated_week: int):
    if not 0 <= truncated_week <= WNLSF_MASK:
        raise InvalidDate(f"Truncated week number out of range: {truncated_week}")


def resolve(
    truncated_week: int,
    day: int,
    cycle_limit: int = DEFAULT_CYCLE_LIMIT,
    accept_apr_oct: bool = False,
) -> WeekResolution:
    """
    Extend an 8-bit leap second week number by trying 256-week cycles.

    Args:
        truncated_week: WNlsf, 0..255
        day: DN, 0..7
        cycle_limit: Number of cycles to try, starting at the GPS epoch
        accept_apr_oct: Also accept April/October 1st

    Returns:
        Resolved(week), Ambiguous(...) or NotFound(...)

    Raises:
        InvalidDate: inputs out of range
    """
    _check_truncated(truncated_week)
    week, norm_day = normalize(truncated_week, day)

    candidates: List[int] = []
    for cycle in range(cycle_limit):
        candidate = week + cycle * WNLSF_CYCLE_WEEKS
        date = gps_week_day_to_date(candidate, norm_day)
        if is_valid_leap_second_date(date.day, date.month, accept_apr_oct):
            logger.debug(f"WNlsf {truncated_week}|{day}: cycle {cycle} -> week {candidate} ({date})")
            candidates.append(candidate)

    if len(candidates) == 1:
        return Resolved(candidates[0])

    if candidates:
        logger.warning(f"WNlsf {truncated_week}|{day} is ambiguous: weeks {candidates}")
        return Ambiguous(truncated_week, day, tuple(candidates))

    logger.warning(f"WNlsf {truncated_week}|{day}: no leap second date "
                   f"within {cycle_limit} cycles")
    return NotFound(truncated_week, day, cycle_limit)


def extend_week_near(truncated_week: int, current_week: int) -> int:
    """
    Extend an 8-bit week number to the full week within +-128 of current_week.

    extend_week_near(138, 1925) -> 1930
    """
    _check_truncated(truncated_week)
    if current_week < 0:
        raise InvalidDate(f"GPS week must not be negative: {current_week}")
    diff = (truncated_week - current_week) & WNLSF_MASK
    if diff >= WNLSF_HALF_CYCLE:
        diff -= WNLSF_CYCLE_WEEKS
    return current_week + diff


class GpsWeekResolver:
    """
    Resolve GPS leap second week numbers against a leap second table.

    The table is read from the handle on every call, so a reload takes
    effect on the next resolution.
    """

    def __init__(
        self,
        config: Optional[TimebaseConfig] = None,
        table_handle: Optional[LeapSecondTableHandle] = None,
    ):
        self.config = config if config is not None else TimebaseConfig()
        if table_handle is None:
            table_handle = LeapSecondTableHandle.from_config(self.config)
        self.table_handle = table_handle

    normalize = staticmethod(normalize)
    de_normalize = staticmethod(de_normalize)
    extend_week_near = staticmethod(extend_week_near)

    def resolve(
        self,
        truncated_week: int,
        day: int,
        cycle_limit: Optional[int] = None,
    ) -> WeekResolution:
        """resolve() with the configured cycle limit and leap date option."""
        if cycle_limit is None:
            cycle_limit = self.config.cycle_limit
        return resolve(truncated_week, day, cycle_limit, self.config.accept_apr_oct)

    def find_past_from_table(
        self,
        day: int,
        search_all: bool = False,
        truncated_week: Optional[int] = None,
    ) -> Tuple[Optional[int], Optional[int]]:
        """
        Look up a past leap second in the table by its day number.

        Entries are scanned oldest first. Without search_all the first match
        is returned, with search_all the latest one.

        Args:
            day: Day number 0..7 (7 is normalized first)
            search_all: Keep scanning after the first match
            truncated_week: If given, the week's low 8 bits must match too

        Returns:
            (matching week or None, greatest week in the table or None)
        """
        if truncated_week is None:
            _, norm_day = normalize(0, day)
            norm_truncated = None
        else:
            _check_truncated(truncated_week)
            norm_truncated, norm_day = normalize(truncated_week, day)
            norm_truncated &= WNLSF_MASK

        entries = self.table_handle.table.gps_entries()
        last_known = max((e.week for e in entries), default=None)

        found = None
        for entry in entries:
            if entry.day != norm_day:
                continue
            if norm_truncated is not None and (entry.week & WNLSF_MASK) != norm_truncated:
                continue
            found = entry.week
            if not search_all:
                break

        logger.debug(f"Table search day={day} truncated={truncated_week}: "
                     f"found={found} last_known={last_known}")
        return found, last_known

    def pending_from_gps_utc(
        self,
        wn_lsf: int,
        dn: int,
        delta_tls: int,
        delta_tlsf: int,
        current_week: Optional[int] = None,
    ) -> PendingLeapSecond:
        """
        Build leap second information from a decoded GPS UTC parameter set.

        Args:
            wn_lsf: 8-bit leap second week number
            dn: Day number 0..7
            delta_tls: GPS - UTC before the leap second
            delta_tlsf: GPS - UTC after the leap second
            current_week: Current extended GPS week, required while a leap
                          second is being announced

        Returns:
            PendingLeapSecond; PendingLeapSecond.none() if the week cannot be
            resolved unambiguously
        """
        step = delta_tlsf - delta_tls
        if step not in (-1, 0, 1):
            logger.warning(f"Implausible GPS UTC parameters: delta_tls={delta_tls} "
                           f"delta_tlsf={delta_tlsf}")
            return PendingLeapSecond.none()

        _check_truncated(wn_lsf)
        if step != 0:
            if current_week is None:
                raise ValueError("current_week is required while a leap second is announced")
            week, day = normalize(extend_week_near(wn_lsf, current_week), dn)
        else:
            week, _ = self.find_past_from_table(dn, search_all=True, truncated_week=wn_lsf)
            _, day = normalize(0, dn)
            if week is None:
                result = self.resolve(wn_lsf, dn)
                if not isinstance(result, Resolved):
                    return PendingLeapSecond.none()
                week = result.week

        date = gps_week_day_to_date(week, day)
        instant_utc = Instant(date_to_posix(date), 0, Epoch.POSIX)
        gps_tai_offset = self.table_handle.table.gps_tai_offset

        pending = PendingLeapSecond(
            instant_utc=instant_utc,
            instant_tai=instant_utc.shifted(delta_tls + gps_tai_offset, Epoch.TAI),
            step=step,
            offset_gps_utc=delta_tlsf,
            offset_tai_utc=delta_tlsf + gps_tai_offset,
            valid=True,
        )
        if step:
            logger.info(f"Leap second announced for {date} (week {week} day {day}), "
                        f"step {step:+d} s")
        return pending
