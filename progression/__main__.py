"""Allows `python -m progression`."""

import sys

from .cli import main

sys.exit(main())
