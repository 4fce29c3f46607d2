"""Thin wrapper so the server runs with: python -m servicehooks"""

import sys

from servicehooks.main import main

if __name__ == "__main__":
    sys.exit(main())
