"""Allows ``python -m devtrace``."""

import sys

from devtrace.cli import main

if __name__ == "__main__":
    sys.exit(main())
