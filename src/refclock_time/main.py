#!/usr/bin/env python3
"""
refclock-time: diagnostic command line for the reference clock time model.

Usage:
    # Leap second table summary (compiled-in or from a bulletin)
    refclock-time leap-info
    refclock-time --config /etc/refclock-time/config.toml leap-info --json

    # Extend an 8-bit GPS leap second week number
    refclock-time resolve-week 138 0

    # Convert an instant between time scales
    refclock-time convert 1483228800 --from POSIX --to GPS

    # Binary <-> decimal fractions of a second
    refclock-time frac 0x80000000 --scale 1000000000
    refclock-time frac 500 --scale 1000 --encode
"""

import argparse
import json
import logging
import sys
import time
from pathlib import Path
from typing import Any, Dict, List, Optional

import toml

from .config import TimebaseConfig
from .errors import TimebaseError
from .interfaces.time_models import Epoch, Instant
from .timing.epoch_converter import EpochConverter, gps_week_day_to_date, posix_to_date
from .timing.fraction_codec import bin_to_dec, dec_to_bin
from .timing.gps_week_resolver import GpsWeekResolver
from .timing.leap_second_table import LeapSecondTableHandle
from .timing.time_constants import GPS_EPOCH_BIAS_FROM_POSIX

logger = logging.getLogger('refclock-time')


def load_config(config_path: Optional[str] = None) -> Dict[str, Any]:
    """Load configuration from TOML file; an empty dict selects all defaults."""
    if config_path and Path(config_path).exists():
        with open(config_path, 'r') as f:
            return toml.load(f)
    if config_path:
        logger.warning(f"Config file {config_path} not found, using defaults")
    return {}


def _cmd_leap_info(args, config: TimebaseConfig, handle: LeapSecondTableHandle) -> int:
    if args.file:
        handle.reload_from_file(args.file)
    table = handle.table

    if args.json:
        data = table.to_dict()
        data['gps_entries'] = [
            {'week': e.week, 'day': e.day, 'gps_utc_offset_after': e.gps_utc_offset_after}
            for e in table.gps_entries()
        ]
        print(json.dumps(data, indent=2))
        return 0

    now = Instant(int(time.time()))
    print(f"Source:          {table.source}")
    print(f"Entries:         {len(table)}")
    print(f"TAI-UTC:         {table.current_offset()} s")
    print(f"GPS-UTC:         {table.current_offset() - table.gps_tai_offset} s")
    if table.expires is not None:
        state = "EXPIRED" if table.is_expired(now) else "valid"
        print(f"Expires:         {posix_to_date(table.expires.secs)} ({state})")
    pending = table.pending_leap_second(now)
    if pending.is_announced:
        print(f"Pending:         {posix_to_date(pending.instant_utc.secs)} step {pending.step:+d}")
    print()
    print("  Date         TAI-UTC  GPS week|day")
    gps = iter(table.gps_entries())
    for entry in table:
        date = posix_to_date(entry.instant.secs)
        wn = ""
        if entry.instant.secs > GPS_EPOCH_BIAS_FROM_POSIX:
            g = next(gps)
            wn = f"{g.week}|{g.day}"
        print(f"  {date.year:04d}-{date.month:02d}-{date.day:02d}  {entry.utc_tai_offset_after:7d}  {wn}")
    return 0


def _cmd_resolve_week(args, config: TimebaseConfig, handle: LeapSecondTableHandle) -> int:
    resolver = GpsWeekResolver(config, handle)

    if args.delta_tls is not None and args.delta_tlsf is not None:
        pending = resolver.pending_from_gps_utc(
            args.wn_lsf, args.dn, args.delta_tls, args.delta_tlsf, args.current_week
        )
        print(json.dumps(pending.to_dict(), indent=2))
        return 0 if pending.valid else 1

    result = resolver.resolve(args.wn_lsf, args.dn, args.cycles)
    week = result.unwrap()
    _, day = resolver.normalize(0, args.dn)
    print(f"WNlsf {args.wn_lsf}|{args.dn} -> week {week} day {day} "
          f"({gps_week_day_to_date(week, day)})")
    return 0


def _cmd_convert(args, config: TimebaseConfig, handle: LeapSecondTableHandle) -> int:
    converter = EpochConverter(config, handle)
    instant = Instant(args.secs, args.nanos, Epoch(args.from_epoch))
    result = converter.convert(instant, Epoch(args.to_epoch))
    if args.json:
        print(json.dumps(result.to_dict()))
    else:
        print(result)
    return 0


def _cmd_frac(args, config: TimebaseConfig, handle: LeapSecondTableHandle) -> int:
    if args.encode:
        value = dec_to_bin(args.value, args.scale, args.bits)
        width = args.bits // 4
        print(f"0x{value:0{width}X}")
    else:
        print(bin_to_dec(args.value, args.scale, args.bits))
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='refclock-time',
        description='refclock-time: reference clock time model diagnostics',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    refclock-time leap-info --file /usr/share/zoneinfo/leap-seconds.list
    refclock-time resolve-week 138 0
    refclock-time resolve-week 138 0 --delta-tls 18 --delta-tlsf 18
    refclock-time convert 1483228800 --from POSIX --to GPS
    refclock-time frac 0xFFFFFFFF --scale 1000
        """
    )
    parser.add_argument(
        '--config', '-c',
        help='Path to TOML configuration file'
    )
    parser.add_argument(
        '--debug',
        action='store_true',
        help='Enable debug logging'
    )

    sub = parser.add_subparsers(dest='command', required=True)

    leap = sub.add_parser('leap-info', help='Show the leap second table')
    leap.add_argument('--file', '-f', help='leap-seconds.list to load (overrides config)')
    leap.add_argument('--json', action='store_true', help='Print as JSON')
    leap.set_defaults(func=_cmd_leap_info)

    wn = sub.add_parser('resolve-week', help='Extend an 8-bit GPS leap second week number')
    wn.add_argument('wn_lsf', type=lambda s: int(s, 0), help='Truncated week number (0..255)')
    wn.add_argument('dn', type=int, help='Day number (0..7)')
    wn.add_argument('--cycles', type=int, default=None,
                    help='Number of 256-week cycles to search (default: from config)')
    wn.add_argument('--delta-tls', type=int, default=None, help='GPS-UTC before the leap second')
    wn.add_argument('--delta-tlsf', type=int, default=None, help='GPS-UTC after the leap second')
    wn.add_argument('--current-week', type=int, default=None,
                    help='Current extended GPS week (needed while a leap second is announced)')
    wn.set_defaults(func=_cmd_resolve_week)

    conv = sub.add_parser('convert', help='Convert an instant between time scales')
    conv.add_argument('secs', type=int, help='Seconds since the source epoch')
    conv.add_argument('--nanos', type=int, default=0, help='Nanoseconds (same sign as secs)')
    conv.add_argument('--from', dest='from_epoch', default='POSIX',
                      choices=[e.value for e in Epoch], help='Source scale (default: POSIX)')
    conv.add_argument('--to', dest='to_epoch', default='GPS',
                      choices=[e.value for e in Epoch], help='Target scale (default: GPS)')
    conv.add_argument('--json', action='store_true', help='Print as JSON')
    conv.set_defaults(func=_cmd_convert)

    frac = sub.add_parser('frac', help='Convert fractions of a second')
    frac.add_argument('value', type=lambda s: int(s, 0), help='Binary (or decimal with --encode) value')
    frac.add_argument('--bits', type=int, default=32, choices=[16, 32], help='Fraction width')
    frac.add_argument('--scale', type=int, default=1_000_000_000,
                      help='Decimal units per second (default: 1000000000)')
    frac.add_argument('--encode', action='store_true', help='Decimal -> binary')
    frac.set_defaults(func=_cmd_frac)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.debug else logging.INFO,
        format='%(asctime)s [%(levelname)s] %(name)s: %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    try:
        config = TimebaseConfig.from_dict(load_config(args.config))
        handle = LeapSecondTableHandle.from_config(config)
        return args.func(args, config, handle)
    except (TimebaseError, ValueError) as e:
        logger.error(f"{type(e).__name__}: {e}")
        return 1


if __name__ == '__main__':
    sys.exit(main())
