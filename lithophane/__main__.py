"""Allow running as ``python -m lithophane``."""

import sys

from lithophane.cli import main

sys.exit(main())
