"""
Unit tests for GPS leap second week number resolution.

Reference values (GPS week | day of the date the new offset applies):
    1981-07-01   77|3
    2006-01-01 1356|0
    2012-07-01 1695|0
    2015-07-01 1851|3
    2017-01-01 1930|0   (truncated 138)
"""

import pytest


class TestNormalize:
    """Test week/day normalization."""

    def test_day_7(self):
        """Day 7 is day 0 of the next week."""
        from refclock_time.timing.gps_week_resolver import normalize
        assert normalize(1929, 7) == (1930, 0)

    def test_day_0(self):
        """Day 0 de-normalizes to day 7 of the previous week."""
        from refclock_time.timing.gps_week_resolver import de_normalize
        assert de_normalize(1930, 0) == (1929, 7)

    @pytest.mark.parametrize("day", range(1, 7))
    def test_round_trip(self, day):
        """Days 1..6 pass through both directions unchanged."""
        from refclock_time.timing.gps_week_resolver import de_normalize, normalize
        assert de_normalize(*normalize(1930, day)) == (1930, day)

    def test_round_trip_day_7(self):
        """Day 7 survives normalize then de_normalize."""
        from refclock_time.timing.gps_week_resolver import de_normalize, normalize
        assert de_normalize(*normalize(1929, 7)) == (1929, 7)

    def test_invalid(self):
        """Day 8 and de-normalizing week 0 day 0 are rejected."""
        from refclock_time.timing.gps_week_resolver import de_normalize, normalize
        from refclock_time.errors import InvalidDate
        with pytest.raises(InvalidDate):
            normalize(0, 8)
        with pytest.raises(InvalidDate):
            de_normalize(0, 0)


class TestResolve:
    """Test the 256-week cycle search."""

    def test_2017_leap_second(self):
        """138|0 resolves to week 1930."""
        from refclock_time.timing.gps_week_resolver import resolve
        from refclock_time.interfaces.time_models import Resolved
        assert resolve(138, 0, 25) == Resolved(1930)

    def test_de_normalized_input(self):
        """137|7 is the same date as 138|0."""
        from refclock_time.timing.gps_week_resolver import resolve
        from refclock_time.interfaces.time_models import Resolved
        assert resolve(137, 7) == Resolved(1930)

    def test_2015_leap_second(self):
        """1851 & 0xFF = 59, day 3."""
        from refclock_time.timing.gps_week_resolver import resolve
        from refclock_time.interfaces.time_models import Resolved
        assert resolve(1851 & 0xFF, 3) == Resolved(1851)

    def test_not_found(self):
        """0|0 never hits 1 January or 1 July within 25 cycles."""
        from refclock_time.timing.gps_week_resolver import resolve
        from refclock_time.interfaces.time_models import NotFound
        result = resolve(0, 0)
        assert isinstance(result, NotFound)
        assert result.cycle_limit == 25

    def test_cycle_limit(self):
        """Week 1930 is in cycle 7; a limit of 7 cycles misses it."""
        from refclock_time.timing.gps_week_resolver import resolve
        from refclock_time.interfaces.time_models import NotFound, Resolved
        assert resolve(138, 0, cycle_limit=7) == NotFound()
        assert resolve(138, 0, cycle_limit=8) == Resolved(1930)

    def test_april_october_ambiguous(self):
        """With April/October accepted, 0|6 matches 1994-10-01 and 2073-04-01."""
        from refclock_time.timing.gps_week_resolver import resolve
        from refclock_time.interfaces.time_models import Ambiguous, NotFound
        from refclock_time.errors import AmbiguousWeekNumber
        assert resolve(0, 6) == NotFound()
        result = resolve(0, 6, accept_apr_oct=True)
        assert isinstance(result, Ambiguous)
        assert result.candidates == (768, 4864)
        with pytest.raises(AmbiguousWeekNumber):
            result.unwrap()

    def test_resolver_uses_config(self, table_handle):
        """GpsWeekResolver applies the configured leap date option."""
        from refclock_time.config import TimebaseConfig
        from refclock_time.timing.gps_week_resolver import GpsWeekResolver
        from refclock_time.interfaces.time_models import Ambiguous
        resolver = GpsWeekResolver(TimebaseConfig(accept_apr_oct=True), table_handle)
        assert resolver.resolve(0, 6) == Ambiguous()

    def test_truncated_range(self):
        """Truncated week numbers are 8 bits."""
        from refclock_time.timing.gps_week_resolver import resolve
        from refclock_time.errors import InvalidDate
        with pytest.raises(InvalidDate):
            resolve(256, 0)


class TestExtendWeekNear:
    """Test extension relative to the current week."""

    def test_ahead(self):
        """An announced WNlsf a few weeks ahead."""
        from refclock_time.timing.gps_week_resolver import extend_week_near
        assert extend_week_near(138, 1925) == 1930

    def test_behind(self):
        """A WNlsf a few weeks in the past."""
        from refclock_time.timing.gps_week_resolver import extend_week_near
        assert extend_week_near(138, 1940) == 1930

    def test_across_wrap(self):
        """Low bits wrapping between current and target week."""
        from refclock_time.timing.gps_week_resolver import extend_week_near
        assert extend_week_near(2, 2045) == 2050
        assert extend_week_near(250, 2050) == 2042


class TestFindPastFromTable:
    """Test table lookups by day number."""

    def test_first_match(self, resolver):
        """Without search_all the oldest day-0 entry is returned."""
        assert resolver.find_past_from_table(0) == (1356, 1930)

    def test_search_all(self, resolver):
        """With search_all the latest match is returned."""
        assert resolver.find_past_from_table(0, search_all=True) == (1930, 1930)

    def test_with_truncated_week(self, resolver):
        """Matching the low 8 bits narrows the search."""
        assert resolver.find_past_from_table(0, truncated_week=159) == (1695, 1930)
        assert resolver.find_past_from_table(7, truncated_week=137) == (1930, 1930)

    def test_no_match(self, resolver):
        """No leap second ended on a Saturday."""
        assert resolver.find_past_from_table(6) == (None, 1930)


class TestPendingFromGpsUtc:
    """Test PendingLeapSecond construction from GPS UTC parameters."""

    def test_announced(self, resolver):
        """delta_tls != delta_tlsf: extended near the current week."""
        from refclock_time.interfaces.time_models import Epoch, Instant
        pending = resolver.pending_from_gps_utc(137, 7, 17, 18, current_week=1925)
        assert pending.valid
        assert pending.step == 1
        assert pending.instant_utc == Instant(1483228800)
        assert pending.instant_tai == Instant(1483228800 + 36, 0, Epoch.TAI)
        assert pending.offset_gps_utc == 18
        assert pending.offset_tai_utc == 37
        assert pending.ntp_leap_indicator() == 1

    def test_announced_needs_current_week(self, resolver):
        """Without the current week an announcement cannot be placed."""
        with pytest.raises(ValueError):
            resolver.pending_from_gps_utc(138, 0, 17, 18)

    def test_past_from_table(self, resolver):
        """delta_tls == delta_tlsf: the last leap second is found in the table."""
        from refclock_time.interfaces.time_models import Instant
        pending = resolver.pending_from_gps_utc(138, 0, 18, 18)
        assert pending.valid
        assert pending.step == 0
        assert pending.instant_utc == Instant(1483228800)
        assert pending.ntp_leap_indicator() == 0

    def test_past_from_cycles(self, table_handle):
        """Entries missing from the table fall back to the cycle search."""
        from refclock_time.interfaces.time_models import Instant
        from refclock_time.timing.gps_week_resolver import GpsWeekResolver
        from refclock_time.timing.leap_second_table import LeapSecondTable
        table_handle.replace(LeapSecondTable.from_ntp_pairs([(2272060800, 10)]))
        resolver = GpsWeekResolver(table_handle=table_handle)
        pending = resolver.pending_from_gps_utc(1851 & 0xFF, 3, 17, 17)
        assert pending.instant_utc == Instant(1435708800)

    def test_unresolvable(self, resolver):
        """An unresolvable week yields the empty record."""
        pending = resolver.pending_from_gps_utc(0, 0, 18, 18)
        assert not pending.valid

    def test_implausible_step(self, resolver):
        """A jump of several seconds is ignored."""
        assert not resolver.pending_from_gps_utc(138, 0, 15, 18, current_week=1925).valid
