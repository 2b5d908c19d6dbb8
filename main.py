#!/usr/bin/env python3
"""
PostgreSQL Backup Manager - Main Entry Point
Runs the tool straight from a checkout without installing it.
"""

import sys
from pathlib import Path

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent / "src"))

from pg_backup_manager.cli import main


if __name__ == "__main__":
    main()
