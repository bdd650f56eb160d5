#!/usr/bin/env python3
"""Entry point for biosctl when run from a source checkout."""

from __future__ import annotations

import sys
from pathlib import Path

# Ensure src/ is on sys.path for local imports when running as a script
ROOT_DIR = Path(__file__).resolve().parent.parent
SRC_DIR = ROOT_DIR / "src"
if str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))

from biosctl.cli import main  # noqa: E402

if __name__ == "__main__":
    raise SystemExit(main())
