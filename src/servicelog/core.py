"""
Named loggers and the logger factory.
"""

from __future__ import annotations

from typing import Any

from structlog import BoundLoggerBase

from .gate import TraceGate, default_trace_gate
from .interceptors import StdLogger
from .io import DiscardWriter, TraceWriter
from .outputs import get_outputs
from .processors import CallerLocation, build_processors
from .severity import Severity

_caller_location = CallerLocation()
_processors = build_processors(_caller_location)


class SinkRouter:
    """
    The logger structlog wraps: receives rendered lines and writes each to
    the sink the output registry holds *right now*.

    Holds no sink itself, only the trace gate, so registry changes reach
    loggers created before them.
    """

    def __init__(self, trace_gate: TraceGate):
        self.trace_gate = trace_gate

    def _write(self, severity: Severity, line: str) -> None:
        try:
            get_outputs().sink_for(severity).write(line)
        except Exception:
            pass  # Sink failures never reach the logging caller

    def debug(self, line: str) -> None:
        self._write(Severity.DEBUG, line)

    def error(self, line: str) -> None:
        self._write(Severity.ERROR, line)

    def trace(self, line: str) -> None:
        self._write(Severity.TRACE, line)

    def __repr__(self) -> str:
        return f"<SinkRouter(trace_gate={self.trace_gate!r})>"


class Logger(BoundLoggerBase):
    """Leveled logger bound to a prefix.

    Usage::

        log = logger_for("fetcher")
        log.debug("starting")
        log.errorf("retry %d of %d failed", attempt, limit)
        log.tracef("payload: %r", payload)   # only when TRACE=true
    """

    _logger: SinkRouter

    @property
    def prefix(self) -> str:
        return self._context.get("logger", "")

    def is_trace_enabled(self) -> bool:
        return self._logger.trace_gate.enabled()

    def debug(self, msg: Any) -> None:
        self._proxy_to_logger(Severity.DEBUG.method_name, msg)

    def debugf(self, fmt: str, *args: Any) -> None:
        self._proxy_to_logger(Severity.DEBUG.method_name, fmt, positional_args=args)

    def error(self, msg: Any) -> None:
        self._proxy_to_logger(Severity.ERROR.method_name, msg)

    def errorf(self, fmt: str, *args: Any) -> None:
        self._proxy_to_logger(Severity.ERROR.method_name, fmt, positional_args=args)

    def trace(self, msg: Any) -> None:
        if not self.is_trace_enabled():
            return
        self._proxy_to_logger(Severity.TRACE.method_name, msg)

    def tracef(self, fmt: str, *args: Any) -> None:
        if not self.is_trace_enabled():
            return
        self._proxy_to_logger(Severity.TRACE.method_name, fmt, positional_args=args)

    def trace_out(self) -> TraceWriter | DiscardWriter:
        """
        Writer whose newline-delimited records become TRACE lines.

        Decided once, at creation: with TRACE disabled this is a
        :class:`DiscardWriter`. Records emitted by the writer carry the
        location of this call.
        """
        if not self.is_trace_enabled():
            return DiscardWriter()
        filename, lineno = _caller_location.locate()
        return TraceWriter(self.bind(filename=filename, lineno=lineno))

    def as_std_logger(self) -> StdLogger:
        """``print`` / ``printf`` view of this logger, fixed at ERROR."""
        return StdLogger(self)


def logger_for(prefix: str, *, trace_gate: TraceGate | None = None) -> Logger:
    """
    Get a logger for ``prefix``.

    Args:
        prefix: Shown after the severity on every line
        trace_gate: Decides whether TRACE calls produce output
            (default: the ``TRACE`` environment variable)

    Every call returns a new, equivalent logger; there is no per-prefix cache.
    """
    return Logger(SinkRouter(trace_gate or default_trace_gate()), _processors, {"logger": prefix})
