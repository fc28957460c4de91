"""Tests for centralized logging configuration."""

import json
import logging
import sys
from logging.handlers import RotatingFileHandler

import pytest

from lupo.system import LoggerFactory, LoggingConfig


@pytest.fixture(autouse=True)
def reset_logging():
    """Reset logging configuration before and after each test."""
    LoggerFactory.reset()
    yield
    LoggerFactory.reset()


def test_default_configuration():
    """Test logger factory with default configuration."""
    logger = LoggerFactory.get_logger()

    assert LoggerFactory.is_configured()
    assert hasattr(logger, "info")
    assert hasattr(logger, "warning")

    config = LoggerFactory.get_config()
    assert config.level == "WARNING"
    assert config.format == "console"
    assert config.enable_file is False


def test_console_handler_writes_to_stderr():
    """Tables go to stdout, logs to stderr."""
    LoggerFactory.configure(LoggingConfig(level="INFO"))

    stream_handlers = [h for h in logging.getLogger().handlers if type(h) is logging.StreamHandler]

    assert len(stream_handlers) == 1
    assert stream_handlers[0].level == logging.INFO
    assert stream_handlers[0].stream is sys.stderr


def test_explicit_configuration():
    """Test configuring logger factory explicitly."""
    LoggerFactory.configure(LoggingConfig(level="DEBUG", format="json"))

    assert LoggerFactory.is_configured()
    assert LoggerFactory.get_config().level == "DEBUG"
    assert LoggerFactory.get_config().format == "json"


def test_file_logging_json_lines(tmp_path):
    """Test that file output is one JSON object per event."""
    log_file = tmp_path / "lupo.log"

    LoggerFactory.configure(LoggingConfig(level="ERROR", enable_file=True, file_path=log_file, file_level="INFO"))
    logger = LoggerFactory.get_logger("test.module")

    logger.info("pricing.quote_fetched", ticker="AAA", price=12.5)

    entry = json.loads(log_file.read_text(encoding="utf-8").strip())
    assert entry["event"] == "pricing.quote_fetched"
    assert entry["ticker"] == "AAA"
    assert entry["price"] == 12.5
    assert entry["level"] == "info"


def test_file_logging_default_path(tmp_path, monkeypatch):
    """Test that enabling file logging without path uses logs/lupo.log."""
    monkeypatch.chdir(tmp_path)

    LoggerFactory.configure(LoggingConfig(enable_file=True))

    assert str(LoggerFactory.get_config().file_path) == "logs/lupo.log"
    assert (tmp_path / "logs").is_dir()


def test_rotating_file_handler(tmp_path):
    """Test rotating file handler configuration."""
    log_file = tmp_path / "logs" / "rotating.log"

    LoggerFactory.configure(
        LoggingConfig(enable_file=True, file_path=log_file, max_file_size_mb=1, backup_count=3)
    )

    handlers = [h for h in logging.getLogger().handlers if isinstance(h, RotatingFileHandler)]
    assert len(handlers) == 1
    assert handlers[0].maxBytes == 1 * 1024 * 1024
    assert handlers[0].backupCount == 3
    assert log_file.parent.exists()


def test_root_level_covers_file_level(tmp_path):
    """A quiet console must not hide INFO events from the log file."""
    LoggerFactory.configure(
        LoggingConfig(level="ERROR", enable_file=True, file_path=tmp_path / "x.log", file_level="DEBUG")
    )

    assert logging.getLogger().level == logging.DEBUG


def test_console_renderer_splits_event_name():
    """Dotted event names render as area and message."""
    render = LoggerFactory._console_renderer()

    line = render(
        None,
        "warning",
        {"event": "pricing.fetch_failed", "level": "warning", "log_timestamp": "10:00:00.00", "ticker": "XYZ"},
    )

    assert "Pricing:" in line
    assert "Fetch failed" in line
    assert "ticker=" in line
    assert "XYZ" in line


def test_reset_clears_configuration():
    """Test that reset clears configuration."""
    LoggerFactory.configure(LoggingConfig(level="DEBUG"))
    LoggerFactory.reset()

    assert not LoggerFactory.is_configured()
    assert LoggerFactory.get_config().level == "WARNING"
    assert logging.getLogger().handlers == []
