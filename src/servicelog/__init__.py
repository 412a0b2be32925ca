"""
Leveled Logging Façade for Service Processes.

Named loggers write DEBUG, ERROR and TRACE lines to two process-wide sinks:

    {SEVERITY} {prefix}: {file}:{line} {message}

- ERROR goes to the error sink (default: stderr)
- DEBUG and TRACE go to the debug sink (default: stdout)
- TRACE only produces output while the ``TRACE`` environment variable is "true"

Library: structlog processors for caller location and rendering,
pydantic-settings for configuration.
"""

from .core import Logger, logger_for
from .gate import EnvTraceGate, StaticTraceGate, TraceGate
from .interceptors import ServicelogHandler, StdLogger
from .io import CLOSE_MESSAGE, DiscardWriter, TraceWriter
from .outputs import Outputs, get_outputs, reset_outputs, set_outputs
from .severity import Severity
from .sinks import BaseSink, DiscardSink, StdioSink, StreamSink

__all__ = [
    "Logger",
    "logger_for",
    "set_outputs",
    "get_outputs",
    "reset_outputs",
    "Outputs",
    "Severity",
    "TraceGate",
    "EnvTraceGate",
    "StaticTraceGate",
    "TraceWriter",
    "DiscardWriter",
    "CLOSE_MESSAGE",
    "StdLogger",
    "ServicelogHandler",
    "BaseSink",
    "StreamSink",
    "StdioSink",
    "DiscardSink",
]
