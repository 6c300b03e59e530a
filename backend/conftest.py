# backend/conftest.py
"""
Root pytest configuration.

Environment overrides must be in place before any app import reads
settings, so they are applied at module import time.
"""

import os
from pathlib import Path
import sys

# CRITICAL: Set testing mode BEFORE any app imports!
os.environ.setdefault("ENVIRONMENT", "test")
os.environ["DATABASE_URL"] = "sqlite+pysqlite:///:memory:"
os.environ["BOOKING_LOCK_ENABLED"] = "false"
os.environ.setdefault("LOG_LEVEL", "WARNING")

# Ensure 'backend/' is on sys.path so 'app' and 'tests._utils' import
# the same way whether pytest starts at the repo root or in backend/.
_BACKEND_ROOT = Path(__file__).resolve().parent
if str(_BACKEND_ROOT) not in sys.path:
    sys.path.insert(0, str(_BACKEND_ROOT))
