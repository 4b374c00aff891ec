"""
Pytest configuration and fixtures for refclock-time tests.
"""

import pytest
import sys
from pathlib import Path

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / 'src'))


LEAP_SECONDS_LIST_EXCERPT = """\
#
#	In the following text, the symbol '#' introduces
#	a comment, which continues from that symbol until
#	the end of the line.
#
#$	 3676924800
#@	3960057600
#
2272060800	10	# 1 Jan 1972
2287785600	11	# 1 Jul 1972
2303683200	12	# 1 Jan 1973
2335219200	13	# 1 Jan 1974
2366755200	14	# 1 Jan 1975
2398291200	15	# 1 Jan 1976
2429913600	16	# 1 Jan 1977
2461449600	17	# 1 Jan 1978
2492985600	18	# 1 Jan 1979
2524521600	19	# 1 Jan 1980
2571782400	20	# 1 Jul 1981
2603318400	21	# 1 Jul 1982
2634854400	22	# 1 Jul 1983
2698012800	23	# 1 Jul 1985
2776982400	24	# 1 Jan 1988
2840140800	25	# 1 Jan 1990
2871676800	26	# 1 Jan 1991
2918937600	27	# 1 Jul 1992
2950473600	28	# 1 Jul 1993
2982009600	29	# 1 Jul 1994
3029443200	30	# 1 Jan 1996
3076704000	31	# 1 Jul 1997
3124137600	32	# 1 Jan 1999
3345062400	33	# 1 Jan 2006
3439756800	34	# 1 Jan 2009
3550089600	35	# 1 Jul 2012
3644697600	36	# 1 Jul 2015
3692217600	37	# 1 Jan 2017
#
#h	16edd0f0 3666784f 37db7429 7b3a1a3d 3a1c2a5c
"""


@pytest.fixture
def leap_seconds_file(tmp_path):
    """A leap-seconds.list bulletin identical to the built-in table."""
    path = tmp_path / "leap-seconds.list"
    path.write_text(LEAP_SECONDS_LIST_EXCERPT)
    return path


@pytest.fixture
def config():
    """Default time model configuration."""
    from refclock_time.config import TimebaseConfig
    return TimebaseConfig()


@pytest.fixture
def builtin_table():
    """The compiled-in leap second table."""
    from refclock_time.timing.leap_second_table import LeapSecondTable
    return LeapSecondTable.builtin()


@pytest.fixture
def table_handle(builtin_table):
    """A table handle holding the built-in table."""
    from refclock_time.timing.leap_second_table import LeapSecondTableHandle
    return LeapSecondTableHandle(builtin_table)


@pytest.fixture
def resolver(config, table_handle):
    """GPS week resolver on the built-in table."""
    from refclock_time.timing.gps_week_resolver import GpsWeekResolver
    return GpsWeekResolver(config, table_handle)


@pytest.fixture
def converter(config, table_handle):
    """Epoch converter on the built-in table."""
    from refclock_time.timing.epoch_converter import EpochConverter
    return EpochConverter(config, table_handle)
