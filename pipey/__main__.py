"""Allows running pipey with ``python -m pipey``."""

import sys

from .cli import main

if __name__ == "__main__":
    sys.exit(main())
