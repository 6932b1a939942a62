#!/usr/bin/env python3
"""Photobioreactor optimiser runner.

Usage:
    python scripts/run_optimiser.py sensor.csv lab.csv --reactor-type zhaw
    python scripts/run_optimiser.py sensor.csv lab.csv --reactor-type agroscope --config scripts/user_config.py
    python scripts/run_optimiser.py sensor.csv lab.csv --reactor-type zhaw --submit --endpoint https://example.org/api/optimizer

Note: User config in scripts/user_config.py, expert defaults in src/pbropt/schemas/param.py
"""

import sys
from pathlib import Path

# Add src to path
project_root = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(project_root / "src"))

from pbropt.cli import main


if __name__ == "__main__":
    sys.exit(main())
