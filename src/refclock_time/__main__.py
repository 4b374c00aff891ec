"""Allow running as `python -m refclock_time`."""

import sys

from .main import main

sys.exit(main())
