"""Structured logging for dreamdup."""

import logging
import sys
from enum import Enum
from pathlib import Path
from typing import Any, Optional

from pythonjsonlogger.json import JsonFormatter


class LogLevel(str, Enum):
    """Log level enumeration."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


def _build_formatter(json_output: bool) -> logging.Formatter:
    if json_output:
        return JsonFormatter(
            "%(asctime)s %(levelname)s %(name)s %(message)s",
            json_ensure_ascii=False,
        )
    return logging.Formatter(
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


class StructuredLogger:
    """
    Structured logger with JSON output support and context tracking.

    Context passed to the logging methods is attached to the log record as
    extra fields, so JSON output carries it as top-level keys.
    """

    def __init__(
        self,
        name: str = "dreamdup",
        level: LogLevel = LogLevel.INFO,
        json_output: bool = False,
        log_file: Optional[Path] = None,
    ):
        """
        Initialize structured logger.

        Args:
            name: Logger name
            level: Log level
            json_output: If True, output JSON-formatted logs
            log_file: Optional file path to write logs to
        """
        self.name = name
        self.level = level
        self.json_output = json_output
        self.log_file = log_file

        self.logger = logging.getLogger(name)
        self.logger.setLevel(getattr(logging, level.value))
        self.logger.propagate = False
        for handler in list(self.logger.handlers):
            handler.close()
        self.logger.handlers.clear()

        formatter = _build_formatter(json_output)

        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(getattr(logging, level.value))
        console_handler.setFormatter(formatter)
        self.logger.addHandler(console_handler)

        if log_file:
            self.add_file_handler(log_file)

    def add_file_handler(self, log_file: Path) -> None:
        """Also write logs to ``log_file``."""
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(getattr(logging, self.level.value))
        file_handler.setFormatter(_build_formatter(self.json_output))
        self.logger.addHandler(file_handler)
        self.log_file = log_file

    def _log_with_context(
        self,
        level: int,
        message: str,
        context: Optional[dict[str, Any]] = None,
        **kwargs: Any,
    ) -> None:
        if context:
            kwargs.update(context)

        if kwargs:
            record = self.logger.makeRecord(
                self.logger.name, level, "", 0, message, (), None
            )
            for key, value in kwargs.items():
                setattr(record, key, value)
            self.logger.handle(record)
        else:
            self.logger.log(level, message)

    def debug(self, message: str, context: Optional[dict[str, Any]] = None, **kwargs: Any) -> None:
        """Log debug message."""
        self._log_with_context(logging.DEBUG, message, context, **kwargs)

    def info(self, message: str, context: Optional[dict[str, Any]] = None, **kwargs: Any) -> None:
        """Log info message."""
        self._log_with_context(logging.INFO, message, context, **kwargs)

    def warning(self, message: str, context: Optional[dict[str, Any]] = None, **kwargs: Any) -> None:
        """Log warning message."""
        self._log_with_context(logging.WARNING, message, context, **kwargs)

    def error(self, message: str, context: Optional[dict[str, Any]] = None, **kwargs: Any) -> None:
        """Log error message."""
        self._log_with_context(logging.ERROR, message, context, **kwargs)

    def log_duplicate_check(
        self,
        query: str,
        corpus_size: int,
        match_count: int,
        skipped: bool = False,
        reason: Optional[str] = None,
        duration_ms: Optional[float] = None,
        **kwargs: Any,
    ) -> None:
        """
        Log the outcome of a duplicate keyword check.

        Args:
            query: Candidate keyword
            corpus_size: Number of records compared against
            match_count: Number of records at or above the threshold
            skipped: Whether the check was skipped
            reason: Why it was skipped
            duration_ms: Time spent on fetch and scan
            **kwargs: Additional metadata
        """
        context = {
            "event_type": "duplicate_check",
            "query": query,
            "corpus_size": corpus_size,
            "match_count": match_count,
            "skipped": skipped,
        }
        if reason is not None:
            context["reason"] = reason
        if duration_ms is not None:
            context["duration_ms"] = duration_ms
        context.update(kwargs)

        if skipped:
            self.warning(f"Duplicate check skipped for '{query}': {reason}", context=context)
        else:
            self.info(
                f"Duplicate check for '{query}': {match_count} match(es) in {corpus_size} record(s)",
                context=context,
            )

    def log_store_fetch(
        self,
        source: str,
        count: int,
        duration_ms: Optional[float] = None,
        **kwargs: Any,
    ) -> None:
        """
        Log a corpus fetch from a keyword store.

        Args:
            source: Store description (table name, file path)
            count: Number of records fetched
            duration_ms: Fetch duration in milliseconds
            **kwargs: Additional metadata
        """
        context = {
            "event_type": "store_fetch",
            "source": source,
            "count": count,
        }
        if duration_ms is not None:
            context["duration_ms"] = duration_ms
        context.update(kwargs)

        self.debug(f"Fetched {count} keyword record(s) from {source}", context=context)


_loggers: dict[str, StructuredLogger] = {}
_defaults: dict[str, Any] = {"level": LogLevel.INFO, "json_output": False, "log_file": None}


def get_logger(name: str = "dreamdup") -> StructuredLogger:
    """
    Get or create a structured logger instance.

    New loggers use the settings from the last configure_logging() call.

    Args:
        name: Logger name

    Returns:
        StructuredLogger instance
    """
    existing = _loggers.get(name)
    if existing is None:
        existing = StructuredLogger(
            name=name,
            level=_defaults["level"],
            json_output=_defaults["json_output"],
            log_file=_defaults["log_file"],
        )
        _loggers[name] = existing
    return existing


def configure_logging(
    level: str = "INFO",
    json_output: bool = False,
    log_file: Optional[str] = None,
) -> None:
    """
    Configure global logging settings and rebuild every dreamdup logger.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_output: If True, output JSON-formatted logs
        log_file: Optional file path to write logs to
    """
    _defaults["level"] = LogLevel[level.upper()]
    _defaults["json_output"] = json_output
    _defaults["log_file"] = Path(log_file) if log_file else None

    for name in set(_loggers) | {"dreamdup"}:
        _loggers[name] = StructuredLogger(
            name=name,
            level=_defaults["level"],
            json_output=json_output,
            log_file=_defaults["log_file"],
        )
