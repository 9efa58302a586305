"""Shared fixtures for the slack-vault test suite."""

from __future__ import annotations

import pytest

from slack_vault.config import get_settings

_ENV_VARS = (
    "SLACK_TOKEN",
    "CHANNELS",
    "OUTPUT_DIR",
    "STATE_PATH",
    "WRITE_MODE",
    "SUMMARY_ENABLED",
    "AI_PROVIDER",
    "OPENAI_API_KEY",
    "ANTHROPIC_API_KEY",
    "GEMINI_API_KEY",
    "RUN_TIMEOUT",
    "FAIL_FAST",
    "TIMEZONE",
)


@pytest.fixture(autouse=True)
def _isolate_environment(monkeypatch):
    """Keep real credentials and the cached settings out of tests."""
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
