"""Allow ``python -m parcel_tracker``."""

import sys

from parcel_tracker.cli import main

sys.exit(main())
