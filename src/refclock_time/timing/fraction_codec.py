"""
Fraction Codec - Binary <-> Decimal Fractions of a Second

Hardware time registers store the sub-second part as an unsigned binary
fraction: a 16-bit or 32-bit value in units of 2^-16 or 2^-32 seconds.
These helpers convert such fractions into a decimal unit (ms, us, ns) and
back, using integer arithmetic only.

    bin -> dec:  floor(bin * scale / 2^bits)
    dec -> bin:  round to nearest, ties up:
                 ((dec * 2^bits * 2) // scale + 1) >> 1

The round trip is lossy: re-encoding a decoded value lands within one unit
of the binary granularity, nothing more is guaranteed.

Python integers do not overflow, so no intermediate width needs choosing;
the 32-bit case still fits 64 bits (dec < scale <= 1e9 times 2^33).
"""

import logging

import numpy as np

from ..errors import FractionOverflow
from ..interfaces.time_models import Epoch, Instant
from .time_constants import (
    FRAC16_UNITS_PER_SEC,
    FRAC32_UNITS_PER_SEC,
    MSEC_PER_SEC,
    NSEC_PER_SEC,
    NTP_FRAC_PER_SEC,
    USEC_PER_SEC,
)

logger = logging.getLogger(__name__)

# Fraction width -> units per second
UNITS_PER_SEC = {16: FRAC16_UNITS_PER_SEC, 32: FRAC32_UNITS_PER_SEC}
SUPPORTED_BITS = tuple(UNITS_PER_SEC)


def _check_bits(bits: int) -> int:
    """Validate the width and return its units per second."""
    if bits not in UNITS_PER_SEC:
        raise ValueError(f"Unsupported fraction width: {bits} (use 16 or 32)")
    return UNITS_PER_SEC[bits]


def _check_scale(scale: int):
    if scale <= 0:
        raise ValueError(f"Scale must be positive: {scale}")


# =============================================================================
# GENERIC CODEC
# =============================================================================

def bin_to_dec(bin_frac: int, scale: int, bits: int = 32) -> int:
    """
    Convert a binary fraction to a decimal fraction (truncating).

    Args:
        bin_frac: Unsigned binary fraction, 0 .. 2^bits - 1
        scale: Decimal units per second (1000, 1000000, 1000000000)
        bits: Fraction width, 16 or 32

    Returns:
        Decimal fraction in units of 1/scale seconds

    Raises:
        FractionOverflow: bin_frac outside the fraction width
    """
    units = _check_bits(bits)
    _check_scale(scale)
    if not 0 <= bin_frac < units:
        raise FractionOverflow(f"Binary fraction 0x{bin_frac:X} exceeds {bits} bits")
    return (bin_frac * scale) >> bits


def dec_to_bin(dec_frac: int, scale: int, bits: int = 32) -> int:
    """
    Convert a decimal fraction to a binary fraction (round to nearest).

    A value just below one second that rounds up to 2^bits is clamped to
    the largest representable fraction.

    Raises:
        FractionOverflow: dec_frac outside [0, scale)
    """
    units = _check_bits(bits)
    _check_scale(scale)
    if not 0 <= dec_frac < scale:
        raise FractionOverflow(f"Decimal fraction {dec_frac} outside [0, {scale})")

    result = (((dec_frac << bits) * 2) // scale + 1) >> 1

    limit = units - 1
    if result > limit:
        logger.debug(f"Fraction {dec_frac}/{scale} saturated at 0x{limit:X}")
        result = limit
    return result


# =============================================================================
# FIXED-WIDTH ENTRY POINTS
# =============================================================================

def bin_frac_16_to_dec_frac(bin_frac: int, scale: int) -> int:
    return bin_to_dec(bin_frac, scale, bits=16)


def bin_frac_32_to_dec_frac(bin_frac: int, scale: int) -> int:
    return bin_to_dec(bin_frac, scale, bits=32)


def dec_frac_to_bin_frac_16(dec_frac: int, scale: int) -> int:
    return dec_to_bin(dec_frac, scale, bits=16)


def dec_frac_to_bin_frac_32(dec_frac: int, scale: int) -> int:
    return dec_to_bin(dec_frac, scale, bits=32)


# Historic name of the 32-bit decoder
frac_sec_from_bin = bin_frac_32_to_dec_frac


def dfrac_sec_from_bin(bin_frac: int, bits: int = 32) -> float:
    """Binary fraction as float seconds (display only)."""
    units = _check_bits(bits)
    if not 0 <= bin_frac < units:
        raise FractionOverflow(f"Binary fraction 0x{bin_frac:X} exceeds {bits} bits")
    return bin_frac / float(units)


# =============================================================================
# UNIT HELPERS
# =============================================================================

def bin_frac_16_to_msec(bin_frac: int) -> int:
    return bin_to_dec(bin_frac, MSEC_PER_SEC, bits=16)


def bin_frac_16_to_usec(bin_frac: int) -> int:
    return bin_to_dec(bin_frac, USEC_PER_SEC, bits=16)


def bin_frac_16_to_nsec(bin_frac: int) -> int:
    return bin_to_dec(bin_frac, NSEC_PER_SEC, bits=16)


def bin_frac_32_to_msec(bin_frac: int) -> int:
    return bin_to_dec(bin_frac, MSEC_PER_SEC, bits=32)


def bin_frac_32_to_usec(bin_frac: int) -> int:
    return bin_to_dec(bin_frac, USEC_PER_SEC, bits=32)


def bin_frac_32_to_nsec(bin_frac: int) -> int:
    return bin_to_dec(bin_frac, NSEC_PER_SEC, bits=32)


def msec_to_bin_frac_16(msec: int) -> int:
    return dec_to_bin(msec, MSEC_PER_SEC, bits=16)


def usec_to_bin_frac_16(usec: int) -> int:
    return dec_to_bin(usec, USEC_PER_SEC, bits=16)


def nsec_to_bin_frac_16(nsec: int) -> int:
    return dec_to_bin(nsec, NSEC_PER_SEC, bits=16)


def msec_to_bin_frac_32(msec: int) -> int:
    return dec_to_bin(msec, MSEC_PER_SEC, bits=32)


def usec_to_bin_frac_32(usec: int) -> int:
    return dec_to_bin(usec, USEC_PER_SEC, bits=32)


def nsec_to_bin_frac_32(nsec: int) -> int:
    return dec_to_bin(nsec, NSEC_PER_SEC, bits=32)


# =============================================================================
# NTP 32.32 TIMESTAMPS
# =============================================================================

def ntp_timestamp_to_instant(ntp_timestamp: int) -> Instant:
    """
    Split a 64-bit NTP timestamp (32-bit seconds . 32-bit fraction).

    Returns:
        Instant on the NTP epoch, nanoseconds truncated
    """
    if not 0 <= ntp_timestamp < NTP_FRAC_PER_SEC * NTP_FRAC_PER_SEC:
        raise FractionOverflow(f"NTP timestamp exceeds 64 bits: {ntp_timestamp}")
    secs, frac = divmod(ntp_timestamp, NTP_FRAC_PER_SEC)
    return Instant(secs, bin_frac_32_to_nsec(frac), Epoch.NTP)


def instant_to_ntp_timestamp(instant: Instant) -> int:
    """
    Pack an NTP-epoch Instant into a 64-bit NTP timestamp.

    Raises:
        ValueError: instant is not on the NTP epoch
        FractionOverflow: seconds do not fit 32 bits (other NTP era)
    """
    if instant.epoch != Epoch.NTP:
        raise ValueError(f"Expected an NTP instant, got {instant.epoch.value}")
    if not 0 <= instant.secs < NTP_FRAC_PER_SEC:
        raise FractionOverflow(f"NTP seconds outside era 0: {instant.secs}")
    return instant.secs * NTP_FRAC_PER_SEC + nsec_to_bin_frac_32(instant.nanos)


# =============================================================================
# VECTORISED
# =============================================================================

def bin_frac_32_to_dec_frac_array(bin_fracs, scale: int) -> np.ndarray:
    """
    Decode an array of 32-bit binary fractions (e.g. a register dump).

    Args:
        bin_fracs: Sequence or array of unsigned 32-bit fractions
        scale: Decimal units per second, at most 1e9

    Returns:
        np.ndarray of uint64 decimal fractions
    """
    _check_scale(scale)
    if scale > NSEC_PER_SEC:
        raise ValueError(f"Scale too large for vectorised decoding: {scale}")

    values = np.asarray(bin_fracs, dtype=np.int64)
    if values.size and (values.min() < 0 or values.max() >= FRAC32_UNITS_PER_SEC):
        raise FractionOverflow("Binary fraction array exceeds 32 bits")

    # (2^32 - 1) * 1e9 < 2^64, so uint64 holds the product
    return (values.astype(np.uint64) * np.uint64(scale)) >> np.uint64(32)
