#!/usr/bin/env python3
"""Structured logging for fileiter.

Log calls take key-value context, e.g. the entity being scanned or the
archive being opened. Context is stored on each ``logging.LogRecord`` as
``record.context`` and rendered by :class:`ContextFormatter` as trailing
``key=value`` pairs, so any handler using that formatter shows it.

Context can also be pushed for a block with :meth:`Logger.add_context`;
pushed context is thread-local and nests.

Example:
    >>> logger = Logger(level=LogLevel.INFO)
    >>> logger.info("Scan finished", entity="logs", records=12)
    >>> with logger.add_context(entity="logs"):
    ...     logger.debug("Resolving bounds")
"""

import logging
import logging.handlers
import threading
from contextlib import contextmanager
from enum import IntEnum
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Union

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


class LogLevel(IntEnum):
    """Log levels matching Python's logging module."""

    DEBUG = logging.DEBUG
    INFO = logging.INFO
    WARNING = logging.WARNING
    ERROR = logging.ERROR
    CRITICAL = logging.CRITICAL

    @classmethod
    def parse(cls, level: Union["LogLevel", int, str]) -> "LogLevel":
        """Accept a LogLevel, a numeric level or a name in any case."""
        if isinstance(level, str):
            return cls[level.strip().upper()]
        return cls(level)


class ContextFormatter(logging.Formatter):
    """Formatter appending ``record.context`` as ``key=value`` pairs."""

    def __init__(self, fmt: str = LOG_FORMAT, datefmt: Optional[str] = LOG_DATE_FORMAT):
        super().__init__(fmt, datefmt)

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        context = getattr(record, "context", None)
        if not context:
            return line

        pairs = " ".join(f"{key}={value}" for key, value in context.items())
        # keep the traceback below the pairs
        head, sep, tail = line.partition("\n")
        return f"{head} | {pairs}{sep}{tail}"


class Logger:
    """Wrapper over a stdlib logger adding structured context."""

    _local = threading.local()

    def __init__(
        self,
        name: str = "fileiter",
        level: Union[LogLevel, str] = LogLevel.INFO,
        handlers: Optional[List[logging.Handler]] = None,
    ):
        """Initialize logger.

        The underlying stdlib logger's handlers are replaced and propagation
        to the root logger is turned off.

        Args:
            name: Name of the stdlib logger to drive
            level: Minimum level to emit
            handlers: Handlers to install (default: one stderr handler)
        """
        self.name = name
        self.logger = logging.getLogger(name)
        self.set_level(level)

        self.logger.handlers.clear()
        for handler in handlers if handlers is not None else [self.create_console_handler()]:
            self.logger.addHandler(handler)
        self.logger.propagate = False

    @staticmethod
    def create_console_handler() -> logging.StreamHandler:
        """Create a stderr handler using :class:`ContextFormatter`."""
        handler = logging.StreamHandler()
        handler.setFormatter(ContextFormatter())
        return handler

    @staticmethod
    def create_file_handler(
        filename: Union[str, Path],
        max_bytes: int = 10 * 1024 * 1024,
        backup_count: int = 5,
    ) -> logging.handlers.RotatingFileHandler:
        """Create a rotating file handler using :class:`ContextFormatter`.

        Args:
            filename: Path to log file
            max_bytes: Maximum size before rotation
            backup_count: Number of rotated files to keep
        """
        handler = logging.handlers.RotatingFileHandler(
            filename, maxBytes=max_bytes, backupCount=backup_count
        )
        handler.setFormatter(ContextFormatter())
        return handler

    def add_handler(self, handler: logging.Handler) -> None:
        self.logger.addHandler(handler)

    def set_level(self, level: Union[LogLevel, str]) -> None:
        self.logger.setLevel(LogLevel.parse(level))

    def _stack(self) -> List[Dict[str, Any]]:
        if not hasattr(self._local, "stack"):
            self._local.stack = []
        return self._local.stack

    def _context(self, extra: Dict[str, Any]) -> Dict[str, Any]:
        context: Dict[str, Any] = {}
        for pushed in self._stack():
            context.update(pushed)
        context.update(extra)
        return context

    @contextmanager
    def add_context(self, **context) -> Iterator[None]:
        """Attach context to every message logged inside the block.

        Example:
            >>> with logger.add_context(entity="logs"):
            ...     logger.info("Starting scan")
        """
        stack = self._stack()
        stack.append(context)
        try:
            yield
        finally:
            stack.pop()

    def log(self, level: LogLevel, msg: str, **context) -> None:
        """Log msg at level with context."""
        if self.logger.isEnabledFor(level):
            self.logger.log(level, msg, extra={"context": self._context(context)})

    def debug(self, msg: str, **context) -> None:
        self.log(LogLevel.DEBUG, msg, **context)

    def info(self, msg: str, **context) -> None:
        self.log(LogLevel.INFO, msg, **context)

    def warning(self, msg: str, **context) -> None:
        self.log(LogLevel.WARNING, msg, **context)

    def error(self, msg: str, **context) -> None:
        self.log(LogLevel.ERROR, msg, **context)


_global_logger: Optional[Logger] = None


def get_logger(name: str = "fileiter") -> Logger:
    """Get the global logger, creating it if the name differs.

    Args:
        name: Logger name

    Returns:
        Logger instance
    """
    global _global_logger
    if _global_logger is None or _global_logger.name != name:
        _global_logger = Logger(name=name)
    return _global_logger


def set_global_logger(logger: Logger) -> None:
    """Install logger as the one returned by get_logger()."""
    global _global_logger
    _global_logger = logger
