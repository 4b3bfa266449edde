"""Pytest configuration for the shared engine tests.

Adds the services directory to sys.path so `shared` imports as a package.
"""

import sys
from pathlib import Path

SERVICES_ROOT = Path(__file__).resolve().parents[1] / "services"

if str(SERVICES_ROOT) not in sys.path:
    sys.path.insert(0, str(SERVICES_ROOT))
