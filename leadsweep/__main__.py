"""
Package entry point.

Allows running: python -m leadsweep --policy no-website
"""

import sys

from .cli import main

if __name__ == "__main__":
    sys.exit(main())
