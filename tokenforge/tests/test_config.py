"""Tests for chain settings and logging setup."""

import logging

import pytest
from pydantic import ValidationError
from pythonjsonlogger.json import JsonFormatter

from tokenforge.config import ETHER, ChainSettings
from tokenforge.logging_config import get_logger, setup_logging


def test_defaults():
    """Settings default to the documented values."""
    settings = ChainSettings()

    assert settings.genesis_time == 1_700_000_000
    assert settings.account_count == 10
    assert settings.account_balance == 10_000 * ETHER


def test_from_env(monkeypatch):
    """Settings read TOKENFORGE_* variables."""
    monkeypatch.setenv("TOKENFORGE_GENESIS_TIME", "42")
    monkeypatch.setenv("TOKENFORGE_ACCOUNT_COUNT", "3")

    settings = ChainSettings.from_env()

    assert settings.genesis_time == 42
    assert settings.account_count == 3
    assert settings.account_balance == 10_000 * ETHER


def test_from_env_ignores_malformed_values(monkeypatch):
    """Unparseable variables fall back to defaults."""
    monkeypatch.setenv("TOKENFORGE_ACCOUNT_COUNT", "many")
    assert ChainSettings.from_env().account_count == 10


def test_settings_are_validated():
    """Out-of-range settings are rejected."""
    with pytest.raises(ValidationError):
        ChainSettings(account_count=0)


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield root
    root.handlers[:] = handlers
    root.setLevel(level)


def test_setup_logging_json(monkeypatch, restore_root_logger):
    """JSON output is the default, at the level from the environment."""
    monkeypatch.setenv("TOKENFORGE_LOG_LEVEL", "debug")
    monkeypatch.delenv("TOKENFORGE_LOG_FORMAT", raising=False)

    setup_logging()

    assert restore_root_logger.level == logging.DEBUG
    assert isinstance(restore_root_logger.handlers[0].formatter, JsonFormatter)


def test_setup_logging_text(monkeypatch, restore_root_logger):
    """The text format uses a plain formatter."""
    monkeypatch.setenv("TOKENFORGE_LOG_FORMAT", "text")

    setup_logging()

    assert not isinstance(restore_root_logger.handlers[0].formatter, JsonFormatter)


def test_get_logger_carries_trace_id():
    """Adapters attach the trace id to each record."""
    assert get_logger(__name__, trace_id="0xabc").extra == {"trace_id": "0xabc"}
    assert get_logger(__name__).extra == {"trace_id": "N/A"}


def test_setup_logging_arguments_override_env(monkeypatch, restore_root_logger):
    """Explicit arguments win over environment variables."""
    monkeypatch.setenv("TOKENFORGE_LOG_LEVEL", "ERROR")

    setup_logging(level="warning", log_format="text")

    assert restore_root_logger.level == logging.WARNING


def test_setup_logging_unknown_level(monkeypatch, restore_root_logger):
    """An unknown level name falls back to INFO."""
    monkeypatch.setenv("TOKENFORGE_LOG_LEVEL", "LOUD")

    setup_logging()

    assert restore_root_logger.level == logging.INFO
