"""
Trace gate: decides whether TRACE calls produce output.
"""

from __future__ import annotations

import os
from typing import Protocol, runtime_checkable

from .config import settings


@runtime_checkable
class TraceGate(Protocol):
    def enabled(self) -> bool: ...


class EnvTraceGate:
    """Reads an environment variable on every call.

    Enabled iff the variable, stripped and case-folded, equals ``"true"``.
    Unset, empty and any other value mean disabled. Nothing is cached, so
    toggling the variable at runtime takes effect on the very next call.
    """

    def __init__(self, variable: str = "TRACE"):
        self.variable = variable

    def enabled(self) -> bool:
        return os.environ.get(self.variable, "").strip().casefold() == "true"

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.variable!r})"


class StaticTraceGate:
    """Fixed answer, for callers that decide tracing themselves."""

    def __init__(self, value: bool):
        self.value = bool(value)

    def enabled(self) -> bool:
        return self.value

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.value!r})"


_default_gate: EnvTraceGate | None = None


def default_trace_gate() -> EnvTraceGate:
    """Process-wide gate bound to the configured variable (``TRACE``)."""
    global _default_gate

    if _default_gate is None:
        _default_gate = EnvTraceGate(settings.trace_env_var)
    return _default_gate
