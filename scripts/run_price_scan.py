"""
Run a competitive price scan from CLI.
"""

from __future__ import annotations

from pricescan.cli import main

if __name__ == "__main__":
    raise SystemExit(main())
