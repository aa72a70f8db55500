"""Fixtures globais dos testes."""

import os
from datetime import datetime, timezone

import pytest

from _fakes import ManualClock, quiet_logger


@pytest.fixture(autouse=True)
def _ambiente_limpo(monkeypatch):
    """Remove overrides SHAKESYNC_* e LOG_* herdados do ambiente."""
    for name in list(os.environ):
        if name.startswith(("SHAKESYNC_", "LOG_")):
            monkeypatch.delenv(name, raising=False)


@pytest.fixture
def clock() -> ManualClock:
    return ManualClock(datetime(2024, 1, 15, 12, 0, tzinfo=timezone.utc))


@pytest.fixture
def logger():
    return quiet_logger()
