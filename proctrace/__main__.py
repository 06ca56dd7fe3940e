"""Allow running as ``python -m proctrace``."""

import sys

from .cli import main

sys.exit(main())
