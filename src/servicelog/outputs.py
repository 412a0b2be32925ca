"""
Process-wide output registry.

Holds the (error, debug) sink pair every logger writes to. The pair is an
immutable snapshot: reconfiguration builds a new one and swaps a single
reference, so a reader either sees the old pair or the new pair, never a mix.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import Any

from .severity import Severity
from .sinks import BaseSink, StdioSink, as_sink


@dataclass(frozen=True)
class Outputs:
    error_sink: BaseSink
    debug_sink: BaseSink

    def sink_for(self, severity: Severity) -> BaseSink:
        return self.error_sink if severity.uses_error_sink else self.debug_sink


def _default_outputs() -> Outputs:
    return Outputs(error_sink=StdioSink("stderr"), debug_sink=StdioSink("stdout"))


# =============================================================================
# Global State
# =============================================================================

_outputs: Outputs = _default_outputs()
_swap_lock = threading.Lock()


def get_outputs() -> Outputs:
    """Return the current snapshot. Lock-free."""
    return _outputs


def set_outputs(error_sink: Any, debug_sink: Any) -> None:
    """
    Replace both sinks at once.

    Args:
        error_sink: Destination for ERROR lines
        debug_sink: Destination for DEBUG and TRACE lines

    Each argument may be a :class:`BaseSink`, any object with a ``write``
    method (text or binary) or ``None`` to discard. Takes effect for every
    logger, including ones created earlier, on their next call.
    """
    global _outputs

    snapshot = Outputs(error_sink=as_sink(error_sink), debug_sink=as_sink(debug_sink))
    with _swap_lock:
        _outputs = snapshot


def reset_outputs() -> None:
    """Restore the default ``sys.stderr`` / ``sys.stdout`` pair."""
    global _outputs

    with _swap_lock:
        _outputs = _default_outputs()
