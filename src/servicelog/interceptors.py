"""
Adapters for code that expects a different logger interface.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from .core import Logger


class StdLogger:
    """Minimal ``print`` / ``printf`` logger. Everything is logged at ERROR."""

    def __init__(self, logger: Logger):
        self._logger = logger

    @property
    def logger(self) -> Logger:
        return self._logger

    def print(self, *args: Any) -> None:
        self._logger.error(" ".join(str(arg) for arg in args))

    def printf(self, fmt: str, *args: Any) -> None:
        self._logger.errorf(fmt, *args)


class ServicelogHandler(logging.Handler):
    """
    Redirect standard library logging records into servicelog.

    DEBUG and INFO records go to the debug sink, WARNING and above to the
    error sink. Lines keep the record's own file and line number.

    Args:
        logger: Target logger. When omitted, each record is logged through a
            logger whose prefix is the record's logger name.
    """

    def __init__(self, logger: Logger | None = None, level: int = logging.NOTSET):
        super().__init__(level)
        self._logger = logger

    def emit(self, record: logging.LogRecord) -> None:
        try:
            msg = self.format(record)
            target = self._logger
            if target is None:
                # Imported here to avoid a circular import with core
                from .core import logger_for

                target = logger_for(record.name or "stdlib")

            located = target.bind(filename=record.filename, lineno=record.lineno)
            if record.levelno >= logging.WARNING:
                located.error(msg)
            else:
                located.debug(msg)
        except Exception:
            self.handleError(record)
