"""Pytest configuration for the Streamlit client tests.

Puts the client modules and the shared package on sys.path.
"""

import sys
from pathlib import Path

import pytest

CLIENT_ROOT = Path(__file__).resolve().parents[1]
SERVICES_ROOT = Path(__file__).resolve().parents[2]

for path in (SERVICES_ROOT, CLIENT_ROOT):
    if str(path) not in sys.path:
        sys.path.insert(0, str(path))

from local_store import LocalStateStore  # noqa: E402


@pytest.fixture
def state_path(tmp_path: Path) -> Path:
    return tmp_path / "state.json"


@pytest.fixture
def store(state_path: Path) -> LocalStateStore:
    return LocalStateStore(state_path)
