"""
Pytest configuration and shared fixtures for Shift tests.
"""

import pytest

from shift.infrastructure.storage import EventLog
from tests.helpers import FakeClock, ok


@pytest.fixture
def log():
    """An isolated in-memory event log."""
    event_log = ok(EventLog.open(":memory:"))
    yield event_log
    event_log.close()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def cli_env(tmp_path, monkeypatch):
    """Point config and data directories at a temporary folder."""
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))
    monkeypatch.delenv("ST_DB_PATH", raising=False)
    monkeypatch.delenv("ST_CONFIG", raising=False)
    return tmp_path
