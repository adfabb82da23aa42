#!/usr/bin/env python3
"""Oura heart rate for shell prompts and status bars.

Usage:
    oura-hr.py          print "♥ <bpm>" (silent if anything goes wrong)
    oura-hr.py setup    one-time OAuth authorization

Requires OURA_CLIENT_ID and OURA_CLIENT_SECRET in the environment.
"""

import sys
from pathlib import Path

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from oura_hr.cli import main


if __name__ == "__main__":
    sys.exit(main())
