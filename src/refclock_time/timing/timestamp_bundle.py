"""
Timestamp Bundle - Cycle-Bracketed Hardware Timestamps

A hardware timestamp read is bracketed by two reads of a free-running cycle
counter (TSC, performance counter):

    cycles_before = read_cycles()
    instant       = read_instant()
    cycles_after  = read_cycles()

The bracket width bounds the read latency, and its midpoint is the best
estimate of the counter value belonging to the timestamp. Repeating the
capture and keeping the narrowest bracket filters out reads that were
delayed by interrupts or bus contention.

Counter deltas are computed modulo the counter width, so a wrap between the
two reads still yields the correct small positive latency.

Captures are not reentrant: two overlapping captures on the same device are
meaningless, so the caller serializes access to the hardware.
"""

import logging
from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence

import numpy as np
from scipy.stats import median_abs_deviation

from ..config import TimebaseConfig
from ..interfaces.time_models import CycleBracketedTimestamp, Instant
from .time_constants import DEFAULT_COUNTER_BITS
from .time_rules import delta_cycles  # re-exported

logger = logging.getLogger(__name__)

# Floor for the scaled MAD, in counter cycles
MIN_MAD_CYCLES = 1.0

# Minimum number of captures before outlier rejection is attempted
MIN_CAPTURES_FOR_REJECTION = 4


def capture(
    read_instant: Callable[[], Instant],
    read_cycles: Callable[[], int],
    counter_bits: int = DEFAULT_COUNTER_BITS,
) -> CycleBracketedTimestamp:
    """
    Read a timestamp bracketed by two counter reads.

    Args:
        read_instant: Reads the hardware timestamp
        read_cycles: Reads the cycle counter
        counter_bits: Native counter width

    Returns:
        CycleBracketedTimestamp
    """
    cycles_before = read_cycles()
    instant = read_instant()
    cycles_after = read_cycles()
    return CycleBracketedTimestamp(cycles_before, cycles_after, instant, counter_bits)


def _latencies(captures: Sequence[CycleBracketedTimestamp]) -> np.ndarray:
    return np.array([c.latency_cycles for c in captures], dtype=np.float64)


def reject_latency_outliers(
    captures: Sequence[CycleBracketedTimestamp],
    n_mad: float = 3.0,
) -> List[CycleBracketedTimestamp]:
    """
    Drop captures whose latency deviates more than n_mad scaled MADs from
    the median latency.

    Fewer than 4 captures are returned unchanged, and so is the input if
    rejection would leave fewer than 2.
    """
    captures = list(captures)
    if len(captures) < MIN_CAPTURES_FOR_REJECTION:
        return captures

    latencies = _latencies(captures)
    median = np.median(latencies)
    # MAD scaled to a standard deviation (x 1.4826)
    mad = max(float(median_abs_deviation(latencies, scale='normal')), MIN_MAD_CYCLES)

    deviations = np.abs(latencies - median)
    keep_mask = deviations <= n_mad * mad

    if np.sum(keep_mask) < 2:
        return captures

    n_rejected = len(captures) - int(np.sum(keep_mask))
    if n_rejected > 0:
        logger.debug(f"Latency outlier rejection: {n_rejected} of {len(captures)} captures "
                     f"(median={median:.1f} cycles, MAD={mad:.1f})")
    return [c for c, keep in zip(captures, keep_mask) if keep]


def best_capture(captures: Sequence[CycleBracketedTimestamp]) -> CycleBracketedTimestamp:
    """The capture with the narrowest bracket (first one on ties)."""
    if not captures:
        raise ValueError("No captures given")
    return min(captures, key=lambda c: c.latency_cycles)


@dataclass(frozen=True)
class LatencyStats:
    """Read latency statistics over a series of captures, in counter cycles."""
    count: int
    min_cycles: int
    median_cycles: float
    max_cycles: int
    mad_cycles: float
    cycles_frequency: Optional[float] = None

    @classmethod
    def from_captures(
        cls,
        captures: Sequence[CycleBracketedTimestamp],
        cycles_frequency: Optional[float] = None,
    ) -> "LatencyStats":
        if not captures:
            raise ValueError("No captures given")
        latencies = _latencies(captures)
        return cls(
            count=len(captures),
            min_cycles=int(np.min(latencies)),
            median_cycles=float(np.median(latencies)),
            max_cycles=int(np.max(latencies)),
            mad_cycles=float(median_abs_deviation(latencies, scale='normal')),
            cycles_frequency=cycles_frequency,
        )

    def _to_seconds(self, cycles: float) -> Optional[float]:
        if not self.cycles_frequency:
            return None
        return cycles / self.cycles_frequency

    @property
    def min_seconds(self) -> Optional[float]:
        return self._to_seconds(self.min_cycles)

    @property
    def median_seconds(self) -> Optional[float]:
        return self._to_seconds(self.median_cycles)

    @property
    def max_seconds(self) -> Optional[float]:
        return self._to_seconds(self.max_cycles)

    def to_dict(self):
        return {
            'count': self.count,
            'min_cycles': self.min_cycles,
            'median_cycles': self.median_cycles,
            'max_cycles': self.max_cycles,
            'mad_cycles': self.mad_cycles,
            'median_seconds': self.median_seconds,
        }


class TimestampBundle:
    """
    Captures cycle-bracketed timestamps from one device.

    Usage:
        bundle = TimestampBundle(device.read_time, device.read_tsc, config)
        best = bundle.capture_best(8)
    """

    def __init__(
        self,
        read_instant: Callable[[], Instant],
        read_cycles: Callable[[], int],
        config: Optional[TimebaseConfig] = None,
    ):
        self.read_instant = read_instant
        self.read_cycles = read_cycles
        self.config = config if config is not None else TimebaseConfig()

    def capture(self) -> CycleBracketedTimestamp:
        return capture(self.read_instant, self.read_cycles, self.config.counter_bits)

    def capture_many(self, count: int) -> List[CycleBracketedTimestamp]:
        if count < 1:
            raise ValueError(f"count must be >= 1, got {count}")
        return [self.capture() for _ in range(count)]

    def capture_best(self, count: int, n_mad: float = 3.0) -> CycleBracketedTimestamp:
        """Capture `count` times, reject latency outliers, keep the narrowest."""
        captures = reject_latency_outliers(self.capture_many(count), n_mad)
        return best_capture(captures)

    def latency_stats(self, captures: Sequence[CycleBracketedTimestamp]) -> LatencyStats:
        return LatencyStats.from_captures(captures, self.config.counter_frequency_hz)
