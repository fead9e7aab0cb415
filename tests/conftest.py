# tests/conftest.py - shared fixtures

import random

import pytest

from learning_chatbot.utils import logger_utils


@pytest.fixture(autouse=True)
def _log_to_tmp(tmp_path, monkeypatch):
    """Keep log output inside the test's temp dir."""
    monkeypatch.setattr(logger_utils, "LOG_PATH", str(tmp_path / "logs" / "chatbot.log"))


@pytest.fixture
def frozen_clock():
    """Clock that never moves, so the time budget never cuts a search short."""
    return lambda: 0.0


@pytest.fixture
def seeded():
    return random.Random(1234)
