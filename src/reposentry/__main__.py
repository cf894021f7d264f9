"""Entry point for python -m reposentry."""
from __future__ import annotations

import sys

from .audit import main

if __name__ == "__main__":
    sys.exit(main())
