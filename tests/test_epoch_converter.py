"""
Unit tests for epoch conversion.
"""

import pytest

POSIX_2017_01_01 = 1483228800
GPS_BIAS = 315964800
NTP_BIAS = 2208988800


class TestConstants:
    """Test epoch biases against the day count."""

    def test_gps_bias(self):
        """GPS bias is 3657 days."""
        from refclock_time.timing.time_constants import (
            GPS_EPOCH_BIAS_FROM_POSIX, GPS_INITIAL_DAY, POSIX_1970_INITIAL_DAY, SECS_PER_DAY,
        )
        assert GPS_EPOCH_BIAS_FROM_POSIX == (GPS_INITIAL_DAY - POSIX_1970_INITIAL_DAY) * SECS_PER_DAY

    def test_ntp_bias(self):
        """NTP bias is 70 years including 17 leap days."""
        from refclock_time.timing.time_constants import (
            NTP_1900_INITIAL_DAY, NTP_EPOCH_BIAS_FROM_POSIX, POSIX_1970_INITIAL_DAY, SECS_PER_DAY,
        )
        assert NTP_EPOCH_BIAS_FROM_POSIX == (POSIX_1970_INITIAL_DAY - NTP_1900_INITIAL_DAY) * SECS_PER_DAY


class TestSmpteEpochs:
    """Test SMPTE epoch offsets from the GPS epoch."""

    def test_offsets(self):
        """Offsets for the default GPS-TAI offset of 19 s."""
        from refclock_time.timing.epoch_converter import SmpteEpoch, smpte_epoch_offset
        assert smpte_epoch_offset(SmpteEpoch.TAI_1970) == GPS_BIAS + 19
        assert smpte_epoch_offset(SmpteEpoch.TAI_1958) == GPS_BIAS + (12 * 365 + 3) * 86400 + 19
        assert smpte_epoch_offset(SmpteEpoch.UTC_1972) == GPS_BIAS - 2 * 365 * 86400
        assert smpte_epoch_offset(SmpteEpoch.GPS_1980) == 0

    def test_offset_input(self):
        """The GPS-TAI offset is an input."""
        from refclock_time.timing.epoch_converter import SmpteEpoch, smpte_epoch_offset
        assert smpte_epoch_offset(SmpteEpoch.TAI_1970, gps_tai_offset=20) == GPS_BIAS + 20
        assert smpte_epoch_offset("UTC_1972", gps_tai_offset=20) == GPS_BIAS - 2 * 365 * 86400

    def test_to_smpte(self, converter):
        """An instant counted from the TAI 1970 epoch is PTP time."""
        from refclock_time.interfaces.time_models import Instant
        from refclock_time.timing.epoch_converter import SmpteEpoch
        assert converter.to_smpte(Instant(POSIX_2017_01_01, 7), SmpteEpoch.TAI_1970) == (
            POSIX_2017_01_01 + 37, 7
        )
        assert converter.to_smpte(Instant(POSIX_2017_01_01), SmpteEpoch.GPS_1980) == (
            POSIX_2017_01_01 - GPS_BIAS + 18, 0
        )


class TestBiasConversions:
    """Test pure bias conversions."""

    def test_gps(self):
        """POSIX <-> GPS label shift."""
        from refclock_time.timing.epoch_converter import gps_to_posix, posix_to_gps
        assert posix_to_gps(GPS_BIAS) == 0
        assert gps_to_posix(0) == GPS_BIAS

    def test_ntp(self):
        """POSIX <-> NTP shift."""
        from refclock_time.timing.epoch_converter import ntp_to_posix, posix_to_ntp
        assert posix_to_ntp(0) == NTP_BIAS
        assert ntp_to_posix(3692217600) == POSIX_2017_01_01

    def test_gps_week_seconds(self):
        """GPS seconds split into week and second of week."""
        from refclock_time.timing.epoch_converter import from_gps_week, gps_week_seconds
        assert gps_week_seconds(1930 * 604800 + 18) == (1930, 18)
        assert from_gps_week(1930, 18) == 1930 * 604800 + 18
        assert gps_week_seconds(0) == (0, 0)

    def test_gps_week_day_to_date(self):
        """Week/day pairs map onto dates, de-normalized included."""
        from refclock_time.timing.epoch_converter import gps_week_day_to_date
        date = gps_week_day_to_date(1930, 0)
        assert (date.year, date.month, date.day) == (2017, 1, 1)
        assert gps_week_day_to_date(1929, 7) == date
        epoch = gps_week_day_to_date(0, 0)
        assert (epoch.year, epoch.month, epoch.day) == (1980, 1, 6)

    def test_posix_dates(self):
        """POSIX seconds <-> calendar dates."""
        from refclock_time.interfaces.time_models import CalendarDate
        from refclock_time.timing.epoch_converter import date_to_posix, posix_to_date
        assert posix_to_date(0) == CalendarDate(1970, 1, 1)
        assert posix_to_date(POSIX_2017_01_01 - 1) == CalendarDate(2016, 12, 31, 23, 59, 59)
        assert date_to_posix(CalendarDate(2017, 1, 1)) == POSIX_2017_01_01
        assert date_to_posix(CalendarDate(2016, 12, 31, 23, 59, 60)) == POSIX_2017_01_01
        assert posix_to_date(-1) == CalendarDate(1969, 12, 31, 23, 59, 59)


class TestConvert:
    """Test leap-second-aware conversion."""

    def test_utc_to_gps(self, converter):
        """GPS runs 18 s ahead of UTC since 2017."""
        from refclock_time.interfaces.time_models import Epoch, Instant
        gps = converter.convert(Instant(POSIX_2017_01_01, 123), Epoch.GPS)
        assert gps == Instant(POSIX_2017_01_01 - GPS_BIAS + 18, 123, Epoch.GPS)

    def test_utc_to_gps_before_step(self, converter):
        """One second earlier GPS-UTC was 17 s."""
        from refclock_time.interfaces.time_models import Epoch, Instant
        gps = converter.convert(Instant(POSIX_2017_01_01 - 1), Epoch.GPS)
        assert gps.secs == POSIX_2017_01_01 - 1 - GPS_BIAS + 17

    def test_gps_epoch(self, converter):
        """At the GPS epoch GPS and UTC coincided."""
        from refclock_time.interfaces.time_models import Epoch, Instant
        assert converter.convert(Instant(GPS_BIAS), Epoch.GPS) == Instant(0, 0, Epoch.GPS)
        assert converter.convert(Instant(0, 0, Epoch.GPS), Epoch.POSIX) == Instant(GPS_BIAS)

    def test_utc_to_tai(self, converter):
        """TAI = UTC + 37 s since 2017."""
        from refclock_time.interfaces.time_models import Epoch, Instant
        assert converter.convert(Instant(POSIX_2017_01_01), Epoch.TAI) == Instant(
            POSIX_2017_01_01 + 37, 0, Epoch.TAI
        )

    def test_round_trips(self, converter):
        """UTC -> X -> UTC returns the original for every scale."""
        from refclock_time.interfaces.time_models import Epoch, Instant
        for secs in (GPS_BIAS + 1, POSIX_2017_01_01 - 1, POSIX_2017_01_01, 1700000000):
            instant = Instant(secs, 999)
            for epoch in Epoch:
                assert converter.convert(converter.convert(instant, epoch), Epoch.POSIX) == instant

    def test_ntp_is_pure_bias(self, converter):
        """POSIX <-> NTP works even before 1972."""
        from refclock_time.interfaces.time_models import Epoch, Instant
        assert converter.convert(Instant(0), Epoch.NTP) == Instant(NTP_BIAS, 0, Epoch.NTP)
        assert converter.convert(Instant(NTP_BIAS, 5, Epoch.NTP), Epoch.POSIX) == Instant(0, 5)

    def test_ntp_to_gps(self, converter):
        """NTP instants go through the leap second table too."""
        from refclock_time.interfaces.time_models import Epoch, Instant
        gps = converter.convert(Instant(3692217600, 0, Epoch.NTP), Epoch.GPS)
        assert gps.secs == POSIX_2017_01_01 - GPS_BIAS + 18

    def test_before_table(self, converter):
        """UTC before 1972 has no TAI offset."""
        from refclock_time.interfaces.time_models import Epoch, Instant
        from refclock_time.errors import InvalidDate
        with pytest.raises(InvalidDate):
            converter.convert(Instant(0), Epoch.TAI)

    def test_gps_utc_offset(self, converter):
        """Current and historic GPS-UTC."""
        from refclock_time.interfaces.time_models import Instant
        assert converter.gps_utc_offset() == 18
        assert converter.gps_utc_offset(Instant(POSIX_2017_01_01 - 1)) == 17

    def test_default_construction(self):
        """Without arguments the built-in table is used."""
        from refclock_time.interfaces.time_models import Epoch, Instant
        from refclock_time.timing.epoch_converter import EpochConverter
        converter = EpochConverter()
        assert converter.convert(Instant(POSIX_2017_01_01), Epoch.TAI).secs == POSIX_2017_01_01 + 37
