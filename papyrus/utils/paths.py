"""Centralized path definitions for the Papyrus application.

All paths hang off ``PAPYRUS_HOME`` (default ``~/.papyrus``) so tests and
alternate profiles can relocate everything with one environment variable.
"""

import os
from pathlib import Path

# Base application directory
PAPYRUS_DIR = Path(os.getenv("PAPYRUS_HOME", str(Path.home() / ".papyrus")))

# Subdirectories
DATA_DIR = PAPYRUS_DIR / "data"
LOGS_DIR = PAPYRUS_DIR / "logs"

# Specific files
DATABASE_PATH = DATA_DIR / "papyrus.db"
CONFIG_PATH = PAPYRUS_DIR / "config.json"
