"""Allow ``python -m avdrunner``."""

import sys

from avdrunner.cli import main

sys.exit(main())
