"""Allow ``python -m gameplay_arena``."""

import sys

from .cli import main

sys.exit(main())
