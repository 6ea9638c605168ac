"""Allow `python -m configdrill` to run the project CLI."""

from __future__ import annotations

import sys

from cli.main import main

if __name__ == "__main__":
    sys.exit(main())
