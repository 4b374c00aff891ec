"""
Unit tests for the time model data types.
"""

import json

import pytest


class TestInstant:
    """Test Instant construction, sign rules and ordering."""

    def test_positive(self):
        """A plain positive instant."""
        from refclock_time.interfaces.time_models import Epoch, Instant
        instant = Instant(1483228800, 5)
        assert instant.epoch == Epoch.POSIX
        assert instant.total_nanoseconds == 1483228800_000000005

    def test_negative_both_fields(self):
        """-1.5 s carries the sign in both fields."""
        from refclock_time.interfaces.time_models import Instant
        instant = Instant(-1, -500_000_000)
        assert instant.is_negative
        assert instant.total_nanoseconds == -1_500_000_000

    def test_inconsistent_signs_rejected(self):
        """Mixed-sign pairs are rejected."""
        from refclock_time.interfaces.time_models import Instant
        from refclock_time.errors import InconsistentSign
        with pytest.raises(InconsistentSign):
            Instant(1, -5)
        with pytest.raises(InconsistentSign):
            Instant(-1, 5)
        with pytest.raises(InconsistentSign):
            Instant(0, -5)

    def test_nanos_range(self):
        """|nanos| must stay below one second."""
        from refclock_time.interfaces.time_models import Instant
        with pytest.raises(ValueError):
            Instant(1, 1_000_000_000)

    def test_from_nanoseconds(self):
        """Splitting a nanosecond count keeps the sign in both fields."""
        from refclock_time.interfaces.time_models import Instant
        assert Instant.from_nanoseconds(2_500_000_000) == Instant(2, 500_000_000)
        assert Instant.from_nanoseconds(-2_500_000_000) == Instant(-2, -500_000_000)
        assert Instant.from_nanoseconds(0).is_zero

    def test_ordering(self):
        """Instants on the same epoch are ordered by value."""
        from refclock_time.interfaces.time_models import Instant
        assert Instant(1, 1) > Instant(1)
        assert Instant(-2, -1) < Instant(-2)
        assert Instant(5) <= Instant(5)

    def test_ordering_across_epochs(self):
        """Comparing different epochs is an error."""
        from refclock_time.interfaces.time_models import Epoch, Instant
        with pytest.raises(ValueError):
            Instant(1) < Instant(1, 0, Epoch.GPS)

    def test_shifted_keeps_nanos(self):
        """Whole-second shifts leave the fraction alone."""
        from refclock_time.interfaces.time_models import Epoch, Instant
        shifted = Instant(1483228800, 123).shifted(-315964800, Epoch.GPS)
        assert shifted == Instant(1167264000, 123, Epoch.GPS)

    def test_shifted_across_zero(self):
        """A shift across zero re-splits the pair."""
        from refclock_time.interfaces.time_models import Instant
        assert Instant(1, 250_000_000).shifted(-3) == Instant(-1, -750_000_000)
        assert Instant(-1, -250_000_000).shifted(3) == Instant(1, 750_000_000)

    def test_shifted_into_last_negative_second(self):
        """Values between -1 s and 0 have no representation."""
        from refclock_time.interfaces.time_models import Instant
        from refclock_time.errors import InconsistentSign
        with pytest.raises(InconsistentSign):
            Instant(1, 250_000_000).shifted(-2)

    def test_json(self):
        """to_dict/from_dict round trip through JSON."""
        from refclock_time.interfaces.time_models import Epoch, Instant
        instant = Instant(-7, -9, Epoch.TAI)
        data = json.loads(json.dumps(instant.to_dict()))
        assert data == {'secs': -7, 'nanos': -9, 'epoch': 'TAI'}
        assert Instant.from_dict(data) == instant


class TestCalendarDate:
    """Test CalendarDate validation."""

    def test_leap_second_label(self):
        """23:59:60 is accepted."""
        from refclock_time.interfaces.time_models import CalendarDate
        date = CalendarDate(2016, 12, 31, 23, 59, 60)
        assert str(date) == "2016-12-31T23:59:60"

    @pytest.mark.parametrize("fields", [
        (2017, 2, 29), (2017, 0, 1), (2017, 13, 1), (-1, 1, 1),
        (2017, 1, 1, 24), (2017, 1, 1, 0, 60), (2017, 1, 1, 0, 0, 61),
    ])
    def test_invalid(self, fields):
        """Out-of-range fields raise InvalidDate."""
        from refclock_time.interfaces.time_models import CalendarDate
        from refclock_time.errors import InvalidDate
        with pytest.raises(InvalidDate):
            CalendarDate(*fields)


class TestGpsWeekDay:
    """Test GPS week/day encodings."""

    def test_normalized(self):
        """1929|7 is 1930|0."""
        from refclock_time.interfaces.time_models import GpsWeekDay
        assert GpsWeekDay(1929, 7).normalized() == GpsWeekDay(1930, 0)
        assert GpsWeekDay(1930, 0).de_normalized() == GpsWeekDay(1929, 7)
        assert GpsWeekDay(1930, 3).normalized() == GpsWeekDay(1930, 3)

    def test_invalid(self):
        """Negative weeks and day 8 are rejected."""
        from refclock_time.interfaces.time_models import GpsWeekDay
        from refclock_time.errors import InvalidDate
        with pytest.raises(InvalidDate):
            GpsWeekDay(-1, 0)
        with pytest.raises(InvalidDate):
            GpsWeekDay(0, 8)


class TestPendingLeapSecond:
    """Test the pending leap second record."""

    def test_none(self):
        """No announcement: invalid, no step, NTP indicator 0."""
        from refclock_time.interfaces.time_models import PendingLeapSecond
        pending = PendingLeapSecond.none()
        assert not pending.valid
        assert pending.step == 0
        assert pending.ntp_leap_indicator() == 0

    def test_insert_and_delete(self):
        """NTP leap indicator: 1 insert, 2 delete."""
        from refclock_time.interfaces.time_models import Instant, PendingLeapSecond
        at = Instant(1483228800)
        assert PendingLeapSecond(at, step=1, valid=True).ntp_leap_indicator() == 1
        assert PendingLeapSecond(at, step=-1, valid=True).ntp_leap_indicator() == 2

    def test_is_due(self):
        """Due once the end of the leap second is reached."""
        from refclock_time.interfaces.time_models import Instant, PendingLeapSecond
        pending = PendingLeapSecond(Instant(1483228800), step=1, valid=True)
        assert not pending.is_due(Instant(1483228799))
        assert pending.is_due(Instant(1483228800))

    def test_bad_step(self):
        """Steps other than -1, 0, +1 are rejected."""
        from refclock_time.interfaces.time_models import PendingLeapSecond
        with pytest.raises(ValueError):
            PendingLeapSecond(step=2)


class TestResolutionResults:
    """Test the tagged week resolution results."""

    def test_resolved_unwrap(self):
        """Resolved unwraps to its week."""
        from refclock_time.interfaces.time_models import Resolved
        assert Resolved(1930).unwrap() == 1930

    def test_ambiguous_unwrap(self):
        """Ambiguous raises with the candidates attached."""
        from refclock_time.interfaces.time_models import Ambiguous
        from refclock_time.errors import AmbiguousWeekNumber
        with pytest.raises(AmbiguousWeekNumber) as exc_info:
            Ambiguous(0, 6, (768, 4864)).unwrap()
        assert exc_info.value.candidates == (768, 4864)

    def test_not_found_unwrap(self):
        """NotFound raises WeekNumberNotFound."""
        from refclock_time.interfaces.time_models import NotFound
        from refclock_time.errors import WeekNumberNotFound
        with pytest.raises(WeekNumberNotFound):
            NotFound(0, 0, 25).unwrap()

    def test_tag_equality(self):
        """Ambiguous and NotFound compare by tag only."""
        from refclock_time.interfaces.time_models import Ambiguous, NotFound
        assert NotFound(0, 0, 25) == NotFound()
        assert Ambiguous(0, 6, (768, 4864)) == Ambiguous()
        assert NotFound() != Ambiguous()
