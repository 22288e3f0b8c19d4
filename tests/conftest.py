"""Shared test fixtures for jrnl."""

import logging
import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest
import structlog

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))


@pytest.fixture(autouse=True)
def isolated_env(tmp_path, monkeypatch):
    """Keep tests away from the real ~/.jrnl.db and any user config."""
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.delenv("JRNL_DB", raising=False)
    monkeypatch.chdir(tmp_path)
    yield home
    structlog.reset_defaults()
    logging.getLogger().handlers.clear()


@pytest.fixture
def db_path(tmp_path):
    return tmp_path / "jrnl.db"


@pytest.fixture
def store(db_path):
    """Opened, initialized quad store; closed after the test."""
    from journal.storage import open_store

    s = open_store(db_path)
    yield s
    s.close()


class FakeClock:
    """Deterministic clock: returns ``start`` and advances by ``step`` per call."""

    def __init__(self, start: datetime, step: timedelta = timedelta(seconds=1)):
        self.now = start
        self.step = step

    def __call__(self) -> datetime:
        current = self.now
        self.now = self.now + self.step
        return current

    def set(self, value: datetime) -> None:
        self.now = value


@pytest.fixture
def clock():
    return FakeClock(datetime(2024, 3, 5, 9, 0, tzinfo=timezone.utc))


@pytest.fixture
def journal(store, clock):
    from journal import Journal

    return Journal(store, clock=clock)
