#!/usr/bin/env python3
"""
Time Model Constants - Central Reference for Epochs, Units and Leap Seconds

================================================================================
PURPOSE
================================================================================
Single source of truth for the fixed numbers used across the time model:
unit conversions, calendar tables, epoch biases, SMPTE epoch offsets, MJD
numbers and the compiled-in table of known leap seconds.

Everything here is a plain module-level constant. Values that a deployment
may legitimately change (GPS-TAI offset, cycle limit, April/October leap
dates) are only DEFAULTS; the live values travel in TimebaseConfig.

================================================================================
EPOCHS
================================================================================
    POSIX/UTC   1970-01-01 00:00:00 UTC   (day 719162 of the day count)
    GPS         1980-01-06 00:00:00 GPS   (day 722819, a Sunday)
    NTP         1900-01-01 00:00:00 UTC   (before POSIX, so posix = ntp - bias)
    TAI         runs ahead of UTC by the accumulated leap seconds
                (10 s in 1972, 37 s since 2017-01-01)

GPS time never had leap seconds applied, so GPS = TAI - 19 s for all time.

GPS bias derivation:
    10 years (1970..1979) x 365 days
    + 2 leap days (1972, 1976)
    + 5 days (Jan 1 -> Jan 6)
    = 3657 days = 315 964 800 s

================================================================================
SMPTE EPOCHS (offsets from the GPS epoch, in seconds)
================================================================================
    TAI 1970    GPS bias + GPS-TAI offset
                (standard epoch of the PTP/IEEE 1588 SMPTE profile)
    TAI 1958    GPS bias + (12 x 365 + 3) days + GPS-TAI offset
                NOTE: TAI did not exist in 1958 and time scales were adjusted
                repeatedly until 1972. This epoch is a hypothetical
                extrapolation into the past, not a physically measured TAI.
    UTC 1972    GPS bias - 2 x 365 days
    GPS 1980    0

================================================================================
LEAP SECONDS
================================================================================
Leap second dates refer to the END of the leap second, i.e. the instant the
new TAI-UTC offset takes effect: 2017-01-01 00:00:00 rather than
2016-12-31 23:59:59. This works for inserted (59, 60, 0) and deleted
(58, 0) leap seconds alike and matches the IERS tables.

The table below is copied from the NTP leap-seconds.list bulletin. When a new
leap second is scheduled, add the entry here (or load a current bulletin via
LeapSecondTable.from_leap_seconds_file()).

================================================================================
REFERENCES
================================================================================
- IERS Bulletin C (leap second announcements)
- IETF NTP leap-seconds.list
- IS-GPS-200, section 20.3.3.5.2.4 (UTC parameters, WNlsf / DN)
- SMPTE ST 2059-1 (SMPTE epoch for PTP)
"""

from typing import FrozenSet, Tuple

# =============================================================================
# UNITS
# =============================================================================

MONTHS_PER_YEAR = 12
DAYS_PER_WEEK = 7
SECS_PER_MIN = 60
MINS_PER_HOUR = 60
HOURS_PER_DAY = 24
SECS_PER_HOUR = 3600
SECS_PER_DAY = 86400
SECS_PER_WEEK = 604800

MSEC_PER_SEC = 1000
USEC_PER_SEC = 1_000_000
NSEC_PER_SEC = 1_000_000_000

# Binary fraction scales (max register value + 1)
FRAC16_UNITS_PER_SEC = 0x10000
FRAC32_UNITS_PER_SEC = 0x100000000
NTP_FRAC_PER_SEC = FRAC32_UNITS_PER_SEC

# =============================================================================
# CALENDAR
# =============================================================================

# Row 0: common years, row 1: leap years
DAYS_OF_MONTH: Tuple[Tuple[int, ...], Tuple[int, ...]] = (
    (31, 28, 31, 30, 31, 30, 31, 31, 30, 31, 30, 31),
    (31, 29, 31, 30, 31, 30, 31, 31, 30, 31, 30, 31),
)

DAYS_PER_400_YEARS = 146097

# Day count (see calendar_math.n_days_since_year_0) of the epochs
POSIX_1970_INITIAL_DAY = 719162  # Thursday
GPS_INITIAL_DAY = 722819         # Sunday
NTP_1900_INITIAL_DAY = 693595    # Monday

# =============================================================================
# EPOCH BIASES (seconds)
# =============================================================================

GPS_EPOCH_BIAS_FROM_POSIX = 315_964_800    # (10 * 365 + 2 + 5) * SECS_PER_DAY
NTP_EPOCH_BIAS_FROM_POSIX = 2_208_988_800  # posix = ntp - bias

# TAI - GPS, constant since the GPS epoch
GPS_TAI_OFFSET = 19

# =============================================================================
# MODIFIED JULIAN DAY NUMBERS
# =============================================================================
# current_mjd = (posix_seconds // SECS_PER_DAY) + MJD_AT_POSIX_EPOCH

MJD_AT_POSIX_EPOCH = 40587

# MJD 0 is 1858-11-17; offset between the day count and MJD
MJD_DAY_COUNT_OFFSET = POSIX_1970_INITIAL_DAY - MJD_AT_POSIX_EPOCH  # 678575

# =============================================================================
# GPS LEAP SECOND WEEK NUMBER (WNlsf)
# =============================================================================

# WNlsf carries only the 8 LSBs of the extended week number
WNLSF_CYCLE_WEEKS = 256
WNLSF_MASK = 0xFF

# Number of 256-week cycles searched by GpsWeekResolver.resolve().
# Results are unique for 25 cycles from 1980 (until ~2099) as long as only
# January/July leap dates are accepted.
DEFAULT_CYCLE_LIMIT = 25

# Half a cycle: an announced WNlsf lies within +-128 weeks of the current week
WNLSF_HALF_CYCLE = WNLSF_CYCLE_WEEKS // 2

# Months in which a leap second may take effect (on the 1st)
LEAP_SECOND_MONTHS: FrozenSet[int] = frozenset({1, 7})

# Additional months only accepted with accept_apr_oct=True.
# Enabling them can make GpsWeekResolver.resolve() ambiguous.
LEAP_SECOND_MONTHS_APR_OCT: FrozenSet[int] = frozenset({4, 10})

# =============================================================================
# KNOWN LEAP SECONDS
# =============================================================================
# (NTP seconds at the end of the leap second, TAI - UTC after that instant)

KNOWN_LEAP_SECONDS_NTP: Tuple[Tuple[int, int], ...] = (
    (2272060800, 10),  # 1 Jan 1972
    (2287785600, 11),  # 1 Jul 1972
    (2303683200, 12),  # 1 Jan 1973
    (2335219200, 13),  # 1 Jan 1974
    (2366755200, 14),  # 1 Jan 1975
    (2398291200, 15),  # 1 Jan 1976
    (2429913600, 16),  # 1 Jan 1977
    (2461449600, 17),  # 1 Jan 1978
    (2492985600, 18),  # 1 Jan 1979
    (2524521600, 19),  # 1 Jan 1980
    (2571782400, 20),  # 1 Jul 1981
    (2603318400, 21),  # 1 Jul 1982
    (2634854400, 22),  # 1 Jul 1983
    (2698012800, 23),  # 1 Jul 1985
    (2776982400, 24),  # 1 Jan 1988
    (2840140800, 25),  # 1 Jan 1990
    (2871676800, 26),  # 1 Jan 1991
    (2918937600, 27),  # 1 Jul 1992
    (2950473600, 28),  # 1 Jul 1993
    (2982009600, 29),  # 1 Jul 1994
    (3029443200, 30),  # 1 Jan 1996
    (3076704000, 31),  # 1 Jul 1997
    (3124137600, 32),  # 1 Jan 1999
    (3345062400, 33),  # 1 Jan 2006
    (3439756800, 34),  # 1 Jan 2009
    (3550089600, 35),  # 1 Jul 2012
    (3644697600, 36),  # 1 Jul 2015
    (3692217600, 37),  # 1 Jan 2017
)

# Expiration of the built-in table (NTP seconds, from the bulletin's '#@' line)
KNOWN_LEAP_SECONDS_EXPIRE_NTP = 3960057600  # 28 Jun 2025

# =============================================================================
# CYCLE COUNTER
# =============================================================================

DEFAULT_COUNTER_BITS = 64
