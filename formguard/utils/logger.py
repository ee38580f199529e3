"""
Formguard Logger
================

Structured logging for the validation engine.

Messages carry key=value context instead of interpolated strings, so
the same record can be written as text or JSON.
"""

from __future__ import annotations

import json
import logging
import sys
import traceback
from dataclasses import dataclass, field
from datetime import datetime
from enum import IntEnum
from typing import Any, Dict, List, Optional, TextIO, Union

from formguard.core.config import get_config


class LogLevel(IntEnum):
    """Log levels."""

    DEBUG = logging.DEBUG
    INFO = logging.INFO
    WARNING = logging.WARNING
    ERROR = logging.ERROR
    CRITICAL = logging.CRITICAL

    @classmethod
    def parse(cls, value: Union[str, int, "LogLevel"]) -> "LogLevel":
        """Accept "debug", "WARNING", 10 or a LogLevel."""
        if isinstance(value, str):
            try:
                return cls[value.strip().upper()]
            except KeyError:
                raise ValueError(f"Unknown log level '{value}'") from None
        return cls(int(value))


@dataclass
class LogRecord:
    """
    Structured log record.

    Attributes:
        level: Log level
        message: Log message
        timestamp: Record timestamp
        context: Additional context
        exception: Exception info
    """

    level: LogLevel
    message: str
    timestamp: datetime = field(default_factory=datetime.now)
    context: Dict[str, Any] = field(default_factory=dict)
    exception: Optional[BaseException] = None
    logger_name: str = "formguard"

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        data = {
            "timestamp": self.timestamp.isoformat(),
            "level": self.level.name,
            "message": self.message,
            "logger": self.logger_name,
        }

        if self.context:
            data["context"] = self.context

        if self.exception:
            data["exception"] = {
                "type": type(self.exception).__name__,
                "message": str(self.exception),
            }

        return data


class LogFormatter:
    """Base log formatter."""

    def format(self, record: LogRecord) -> str:
        raise NotImplementedError


class TextFormatter(LogFormatter):
    """
    Plain text formatter.

    Example output:
        2024-01-15 10:30:45 [DEBUG] formguard.validator: Validation finished success=False errors=2
    """

    def __init__(
        self,
        format_string: Optional[str] = None,
        date_format: str = "%Y-%m-%d %H:%M:%S",
    ):
        self.format_string = format_string or "{timestamp} [{level}] {logger}: {message}"
        self.date_format = date_format

    def format(self, record: LogRecord) -> str:
        message = record.message

        if record.context:
            context_str = " ".join(
                f"{k}={v}" for k, v in record.context.items()
            )
            message = f"{message} {context_str}"

        output = self.format_string.format(
            timestamp=record.timestamp.strftime(self.date_format),
            level=record.level.name,
            message=message,
            logger=record.logger_name,
        )

        if record.exception:
            output += "\n" + "".join(
                traceback.format_exception(
                    type(record.exception),
                    record.exception,
                    record.exception.__traceback__,
                )
            )

        return output


class JsonFormatter(LogFormatter):
    """One JSON object per line."""

    def format(self, record: LogRecord) -> str:
        return json.dumps(record.to_dict(), default=str)


class StreamHandler:
    """Writes formatted records to a stream (stderr by default)."""

    def __init__(
        self,
        stream: Optional[TextIO] = None,
        formatter: Optional[LogFormatter] = None,
        level: LogLevel = LogLevel.DEBUG,
    ):
        self.stream = stream or sys.stderr
        self.formatter = formatter or TextFormatter()
        self.level = level

    def handle(self, record: LogRecord) -> None:
        if record.level >= self.level:
            self.stream.write(self.formatter.format(record) + "\n")
            self.stream.flush()


class Logger:
    """
    Structured logger.

    Example:
        logger = get_logger("formguard.validator")
        logger.debug("Rule registered", field="email", rule="email")
    """

    def __init__(
        self,
        name: str = "formguard",
        level: LogLevel = LogLevel.WARNING,
        handlers: Optional[List[StreamHandler]] = None,
    ):
        self.name = name
        self.level = level
        self._handlers = handlers if handlers is not None else []

    def add_handler(self, handler: StreamHandler) -> "Logger":
        self._handlers.append(handler)
        return self

    def _log(
        self,
        level: LogLevel,
        message: str,
        exception: Optional[BaseException] = None,
        **context: Any,
    ) -> None:
        if level < self.level:
            return

        record = LogRecord(
            level=level,
            message=message,
            context=context,
            exception=exception,
            logger_name=self.name,
        )

        for handler in self._handlers:
            try:
                handler.handle(record)
            except Exception:
                pass  # Don't let logging errors break validation

    def debug(self, message: str, **context: Any) -> None:
        self._log(LogLevel.DEBUG, message, **context)

    def info(self, message: str, **context: Any) -> None:
        self._log(LogLevel.INFO, message, **context)

    def warning(self, message: str, **context: Any) -> None:
        self._log(LogLevel.WARNING, message, **context)

    def error(
        self,
        message: str,
        exception: Optional[BaseException] = None,
        **context: Any,
    ) -> None:
        self._log(LogLevel.ERROR, message, exception, **context)


# Global logger registry
_loggers: Dict[str, Logger] = {}


def _default_formatter() -> LogFormatter:
    if get_config().get("logging.format", "text") == "json":
        return JsonFormatter()
    return TextFormatter()


def get_logger(
    name: str = "formguard",
    level: Optional[LogLevel] = None,
) -> Logger:
    """
    Get or create a named logger.

    The level defaults to ``logging.level`` from the configuration.
    """
    if name not in _loggers:
        if level is None:
            level = LogLevel.parse(get_config().get("logging.level", "WARNING"))
        logger = Logger(name=name, level=level)
        logger.add_handler(StreamHandler(formatter=_default_formatter()))
        _loggers[name] = logger
    elif level is not None:
        _loggers[name].level = level

    return _loggers[name]


def configure_logging(
    level: Union[str, LogLevel] = LogLevel.INFO,
    format: str = "text",
    stream: Optional[TextIO] = None,
) -> None:
    """
    Reconfigure every formguard logger.

    Args:
        level: Minimum level
        format: "text" or "json"
        stream: Output stream, stderr by default
    """
    resolved = LogLevel.parse(level)
    formatter = JsonFormatter() if format == "json" else TextFormatter()

    config = get_config()
    config.set("logging.level", resolved.name)
    config.set("logging.format", format)

    for logger in list(_loggers.values()) or [get_logger()]:
        logger.level = resolved
        logger._handlers = [StreamHandler(stream=stream, formatter=formatter, level=resolved)]
