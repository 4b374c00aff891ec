"""
Configuration for refclock-time.

The TOML file is loaded by main.load_config() into a plain dict; this module
maps that dict onto an immutable TimebaseConfig that is passed explicitly to
the components that need it.

Example config.toml:

    [leap_seconds]
    file = "/usr/share/zoneinfo/leap-seconds.list"
    accept_apr_oct = false

    [gps]
    cycle_limit = 25
    gps_tai_offset = 19

    [counter]
    bits = 64
    frequency_hz = 1000000000
"""

import logging
from dataclasses import dataclass, asdict
from typing import Any, Dict, Optional

from .errors import ConfigError
from .timing.time_constants import (
    DEFAULT_COUNTER_BITS,
    DEFAULT_CYCLE_LIMIT,
    GPS_TAI_OFFSET,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TimebaseConfig:
    """
    Settings of the time model.

    Attributes:
        accept_apr_oct: Also accept April/October 1st as leap second dates.
                        Off by default: it can make week resolution ambiguous.
        cycle_limit: Number of 256-week cycles searched from the GPS epoch
        gps_tai_offset: TAI - GPS in seconds
        leap_second_file: Path to a leap-seconds.list bulletin, None for the
                          compiled-in table
        counter_bits: Width of the free-running cycle counter
        counter_frequency_hz: Counter frequency, None if unknown
    """
    accept_apr_oct: bool = False
    cycle_limit: int = DEFAULT_CYCLE_LIMIT
    gps_tai_offset: int = GPS_TAI_OFFSET
    leap_second_file: Optional[str] = None
    counter_bits: int = DEFAULT_COUNTER_BITS
    counter_frequency_hz: Optional[float] = None

    def __post_init__(self):
        # A TOML string such as "false" must not switch the option on
        if not isinstance(self.accept_apr_oct, bool):
            raise ConfigError(
                f"leap_seconds.accept_apr_oct must be true or false, got {self.accept_apr_oct!r}"
            )
        if self.cycle_limit < 1:
            raise ConfigError(f"cycle_limit must be >= 1, got {self.cycle_limit}")
        if not 1 <= self.counter_bits <= 64:
            raise ConfigError(f"counter.bits must be 1..64, got {self.counter_bits}")
        if self.counter_frequency_hz is not None and self.counter_frequency_hz <= 0:
            raise ConfigError(
                f"counter.frequency_hz must be positive, got {self.counter_frequency_hz}"
            )

    @classmethod
    def from_dict(cls, config: Dict[str, Any]) -> "TimebaseConfig":
        """Build from a loaded TOML dict; missing keys keep their defaults."""
        leap = config.get('leap_seconds', {})
        gps = config.get('gps', {})
        counter = config.get('counter', {})

        try:
            frequency = counter.get('frequency_hz')
            result = cls(
                accept_apr_oct=leap.get('accept_apr_oct', False),
                cycle_limit=int(gps.get('cycle_limit', DEFAULT_CYCLE_LIMIT)),
                gps_tai_offset=int(gps.get('gps_tai_offset', GPS_TAI_OFFSET)),
                leap_second_file=leap.get('file'),
                counter_bits=int(counter.get('bits', DEFAULT_COUNTER_BITS)),
                counter_frequency_hz=float(frequency) if frequency is not None else None,
            )
        except ConfigError:
            raise
        except (TypeError, ValueError) as e:
            raise ConfigError(f"Invalid configuration value: {e}") from e

        if result.accept_apr_oct:
            logger.warning("April/October leap second dates enabled; "
                           "GPS week resolution may become ambiguous")
        return result

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
