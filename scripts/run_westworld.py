"""Run the default westworld simulation (Miner Bob and Elsa) in the terminal.

Usage:
    uv run python scripts/run_westworld.py

Settings come from `WESTWORLD_*` environment variables or a `.env` file in the
current directory.
"""

from __future__ import annotations

import sys

from westworld.runner import main

if __name__ == "__main__":
    sys.exit(main())
