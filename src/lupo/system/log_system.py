"""Centralized logging configuration for lupo."""

import logging
import sys
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Callable, Literal

import structlog
from pydantic import BaseModel, Field

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class LoggingConfig(BaseModel):
    """Configuration for logging system.

    Logging Levels Guide:

    INFO:
    - Files created by init
    - Ledger and registry loaded (summary)
    - Price refresh started/completed

    DEBUG (-vv):
    - Per-symbol quote retrieval
    - Per-trade fold details

    WARNING (default):
    - Recoverable issues (failed quote, missing price snapshot, existing files)

    ERROR:
    - Failures aborting a command

    Console output goes to stderr so tables printed on stdout stay clean.

    Timestamp Format Options:
    - "iso": 2025-10-22T20:50:07.288824Z (full ISO format)
    - "compact": 251022-205007.28 (YYMMDD-HHMMSS.ms)
    - "time": 20:50:07.28 (time only)
    """

    level: LogLevel = Field(
        default="WARNING",
        description="Minimum console log level",
    )
    format: Literal["console", "json"] = Field(
        default="console",
        description="Output format: console, or json",
    )
    timestamp_format: Literal["iso", "compact", "time"] = Field(
        default="time",
        description="Timestamp format for console output",
    )
    enable_file: bool = Field(
        default=False,
        description="Enable JSON logging to file",
    )
    file_path: Path | None = Field(
        default=None,
        description="Path to log file (uses logs/lupo.log if None)",
    )
    file_level: LogLevel = Field(
        default="INFO",
        description="Minimum log level for file output",
    )
    max_file_size_mb: int = Field(
        default=5,
        description="Maximum log file size in MB before rotation",
    )
    backup_count: int = Field(
        default=3,
        description="Number of rotated log files to keep",
    )


class LoggerFactory:
    """
    Factory for creating and configuring structured loggers.

    Call configure() once at startup (the CLI does it from its -v/-q flags),
    then use get_logger() in modules.

    Example:
        LoggerFactory.configure(LoggingConfig(level="DEBUG"))

        logger = LoggerFactory.get_logger()
        logger.info("pricing.quote_fetched", ticker="AAPL", price=189.3)
    """

    _config: LoggingConfig | None = None
    _configured: bool = False

    @classmethod
    def configure(cls, config: LoggingConfig | None = None) -> None:
        """
        Configure the logging system.

        Args:
            config: LoggingConfig instance. If None, uses default configuration.
        """
        if config is None:
            config = LoggingConfig()

        cls._config = config

        processors = cls._build_common_processors(config.timestamp_format)

        console_handler = logging.StreamHandler(stream=sys.stderr)
        console_handler.setLevel(getattr(logging, config.level))
        console_processor: Any
        if config.format == "console":
            console_processor = cls._console_renderer()
        else:
            console_processor = structlog.processors.JSONRenderer()
        console_handler.setFormatter(
            structlog.stdlib.ProcessorFormatter(
                processor=console_processor,
                foreign_pre_chain=processors,
            )
        )

        handlers: list[logging.Handler] = [console_handler]
        root_level = getattr(logging, config.level)

        if config.enable_file:
            if config.file_path is None:
                config.file_path = Path("logs/lupo.log")

            handlers.append(cls._configure_file_logging(config, processors))
            root_level = min(root_level, getattr(logging, config.file_level))

        logging.basicConfig(level=root_level, handlers=handlers, force=True)

        configured_processors = list(processors)
        configured_processors.append(structlog.processors.format_exc_info)
        configured_processors.append(structlog.stdlib.ProcessorFormatter.wrap_for_formatter)

        structlog.configure(
            processors=configured_processors,
            wrapper_class=structlog.stdlib.BoundLogger,
            context_class=dict,
            logger_factory=structlog.stdlib.LoggerFactory(),
            cache_logger_on_first_use=True,
        )

        cls._configured = True

    @classmethod
    def _build_common_processors(cls, timestamp_format: str) -> list[Any]:
        """Processors shared by both structlog and stdlib handlers before rendering."""
        return [
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            cls._get_timestamper(timestamp_format),
            structlog.processors.StackInfoRenderer(),
        ]

    @staticmethod
    def _get_timestamper(fmt: str) -> Any:
        """Get timestamper writing to 'log_timestamp' (trade and quote dates use 'date')."""

        def add_timestamp_processor(logger: Any, method_name: str, event_dict: dict[str, Any]) -> dict[str, Any]:
            now = datetime.now(timezone.utc)
            ms = now.microsecond // 10000

            if fmt == "compact":
                event_dict["log_timestamp"] = now.strftime(f"%y%m%d-%H%M%S.{ms:02d}")
            elif fmt == "time":
                event_dict["log_timestamp"] = now.strftime(f"%H:%M:%S.{ms:02d}")
            else:
                event_dict["log_timestamp"] = now.isoformat()

            return event_dict

        return add_timestamp_processor

    @staticmethod
    def _console_renderer() -> Callable[[Any, str, dict[str, Any]], str]:
        """Console renderer: timestamp, colored level, area, message and context."""

        colors = {
            "DEBUG": "\033[36m",  # Cyan
            "INFO": "\033[32m",  # Green
            "WARNING": "\033[33m",  # Yellow
            "ERROR": "\033[31m",  # Red
            "CRITICAL": "\033[35m",  # Magenta
        }
        reset = "\033[0m"
        dim = "\033[2m"
        cyan = "\033[36m"

        def renderer(logger: Any, name: str, event_dict: dict[str, Any]) -> str:
            timestamp = event_dict.pop("log_timestamp", "")
            level = event_dict.pop("level", "info").upper()
            event = str(event_dict.pop("event", ""))
            event_dict.pop("logger", None)
            exception = event_dict.pop("exception", None)

            # "pricing.fetch_failed" -> area "Pricing", message "Fetch Failed"
            if "." in event:
                area, _, message = event.partition(".")
                area = area.replace("_", " ").title()
            else:
                area, message = "", event
            message = message.replace("_", " ").replace(".", " ").capitalize()

            parts = [f"{dim}{timestamp}{reset}", f"{colors.get(level, '')}{level.lower():<7}{reset}"]
            if area:
                parts.append(f"{area}:")
            parts.append(message)

            context = [
                f"{key}={cyan}{value}{reset}" for key, value in sorted(event_dict.items()) if not key.startswith("_")
            ]
            line = " ".join(parts)
            if context:
                line += f" {dim}|{reset} " + " ".join(context)
            if exception:
                line += "\n" + str(exception)
            return line

        return renderer

    @classmethod
    def _configure_file_logging(cls, config: LoggingConfig, pre_chain: list[Any]) -> logging.Handler:
        """Configure rotating JSON file output."""
        file_path = config.file_path
        assert file_path is not None  # Already defaulted in configure()

        file_path.parent.mkdir(parents=True, exist_ok=True)

        handler = RotatingFileHandler(
            filename=str(file_path),
            maxBytes=config.max_file_size_mb * 1024 * 1024,
            backupCount=config.backup_count,
            encoding="utf-8",
        )
        handler.setLevel(getattr(logging, config.file_level))
        handler.setFormatter(
            structlog.stdlib.ProcessorFormatter(
                processor=structlog.processors.JSONRenderer(),
                foreign_pre_chain=pre_chain,
            )
        )
        return handler

    @classmethod
    def get_logger(cls, name: str | None = None):
        """
        Get a configured logger instance.

        Args:
            name: Optional logger name. If None, uses the calling module's __name__.

        Returns:
            Configured structlog BoundLogger instance.
        """
        if not cls._configured:
            cls.configure()

        if name is None:
            import inspect

            frame = inspect.currentframe()
            if frame and frame.f_back:
                name = frame.f_back.f_globals.get("__name__", "lupo")
            else:
                name = "lupo"

        return structlog.get_logger(name)

    @classmethod
    def get_config(cls) -> LoggingConfig:
        """Get current logging configuration."""
        if cls._config is None:
            return LoggingConfig()
        return cls._config

    @classmethod
    def is_configured(cls) -> bool:
        """Check if logging has been configured."""
        return cls._configured

    @classmethod
    def reset(cls) -> None:
        """Reset logging configuration (mainly for testing)."""
        root_logger = logging.getLogger()
        for handler in root_logger.handlers[:]:
            root_logger.removeHandler(handler)
            try:
                handler.close()
            except Exception:
                pass
        root_logger.handlers.clear()
        root_logger.setLevel(logging.NOTSET)
        cls._config = None
        cls._configured = False
        structlog.reset_defaults()
