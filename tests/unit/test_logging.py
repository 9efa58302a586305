"""Unit tests for the logging configuration module."""

import logging
from logging.handlers import RotatingFileHandler
from unittest.mock import MagicMock, patch

import pytest
import structlog

from slack_vault.logging import get_logger, setup_logging


@pytest.fixture(autouse=True)
def _reset_root_logger():
    """Reset root logger state before and after each test."""
    original_handlers = logging.root.handlers[:]
    original_level = logging.root.level
    logging.root.handlers.clear()
    yield
    for handler in logging.root.handlers:
        handler.close()
    logging.root.handlers.clear()
    logging.root.handlers.extend(original_handlers)
    logging.root.setLevel(original_level)
    structlog.reset_defaults()


def _mock_settings(**overrides) -> MagicMock:
    settings = MagicMock()
    settings.log_level = "INFO"
    settings.log_to_file = False
    settings.is_development = False
    for key, value in overrides.items():
        setattr(settings, key, value)
    return settings


class TestSetupLogging:
    """Tests for setup_logging."""

    def test_uses_explicit_settings(self):
        settings = _mock_settings(log_level="DEBUG")
        with patch("slack_vault.logging.get_settings") as mock_get:
            setup_logging(settings)
        mock_get.assert_not_called()
        assert logging.root.level == logging.DEBUG

    def test_falls_back_to_cached_settings(self):
        with patch("slack_vault.logging.get_settings", return_value=_mock_settings()) as mock_get:
            setup_logging()
        mock_get.assert_called_once()

    def test_repeated_setup_keeps_one_console_handler(self):
        setup_logging(_mock_settings())
        setup_logging(_mock_settings())
        console = [h for h in logging.root.handlers if type(h) is logging.StreamHandler]
        assert len(console) == 1

    def test_invalid_level_defaults_to_info(self):
        setup_logging(_mock_settings(log_level="NONEXISTENT"))
        assert logging.root.level == logging.INFO

    def test_console_handler_has_processor_formatter(self):
        setup_logging(_mock_settings(is_development=True))
        console = [h for h in logging.root.handlers if type(h) is logging.StreamHandler]
        assert len(console) == 1
        assert isinstance(console[0].formatter, structlog.stdlib.ProcessorFormatter)

    def test_development_uses_console_renderer(self):
        with patch("slack_vault.logging.structlog.dev.ConsoleRenderer") as mock_renderer:
            setup_logging(_mock_settings(is_development=True))
        mock_renderer.assert_called_once_with(colors=True)

    def test_reduces_http_noise(self):
        setup_logging(_mock_settings(log_level="DEBUG"))
        assert logging.getLogger("httpx").level == logging.WARNING
        assert logging.getLogger("httpcore").level == logging.WARNING

    def test_configures_structlog(self):
        with patch("slack_vault.logging.structlog.configure") as mock_configure:
            setup_logging(_mock_settings())
        kwargs = mock_configure.call_args[1]
        assert kwargs["context_class"] is dict
        assert kwargs["cache_logger_on_first_use"] is True


class TestFileLogging:
    """Tests for the rotating file handler."""

    def test_file_handler_added(self, tmp_path):
        log_dir = tmp_path / "logs"
        settings = _mock_settings(
            log_to_file=True,
            log_directory=str(log_dir),
            log_file_path=str(log_dir / "slack_vault.log"),
            log_file_max_bytes=2048,
            log_file_backup_count=2,
        )
        setup_logging(settings)
        handlers = [h for h in logging.root.handlers if isinstance(h, RotatingFileHandler)]
        assert len(handlers) == 1
        assert handlers[0].maxBytes == 2048
        assert handlers[0].backupCount == 2
        assert log_dir.exists()

    def test_directory_failure_disables_file_logging(self):
        settings = _mock_settings(log_to_file=True, log_directory="/nonexistent/path")
        with patch("slack_vault.logging.Path.mkdir", side_effect=PermissionError("denied")):
            setup_logging(settings)
        assert settings.log_to_file is True
        assert not [h for h in logging.root.handlers if isinstance(h, RotatingFileHandler)]

    def test_handler_failure_is_tolerated(self, tmp_path):
        settings = _mock_settings(
            log_to_file=True,
            log_directory=str(tmp_path),
            log_file_path=str(tmp_path / "slack_vault.log"),
            log_file_max_bytes=1024,
            log_file_backup_count=1,
        )
        with patch(
            "slack_vault.logging.RotatingFileHandler",
            side_effect=PermissionError("cannot write"),
        ):
            setup_logging(settings)
        assert not [h for h in logging.root.handlers if isinstance(h, RotatingFileHandler)]


def test_get_logger_returns_structlog_logger():
    logger = get_logger("slack_vault.test")
    assert hasattr(logger, "info")
