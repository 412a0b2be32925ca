"""
Structlog processors that turn a log call into a rendered line.

Chain (in order):
    CallerLocation -> interpolate_positional_args -> render_line
"""

from __future__ import annotations

from typing import Any

from structlog.processors import CallsiteParameter, CallsiteParameterAdder
from structlog.typing import EventDict, Processor, WrappedLogger

from .severity import Severity

# Frames from modules with these prefixes never count as the caller. The
# trailing dot keeps sibling top-level modules such as ``servicelog_app``
# visible; the bare ``servicelog`` package module only re-exports and never
# sits on a logging call path.
PACKAGE_IGNORES = ["servicelog."]

FALLBACK_FILENAME = "???"
FALLBACK_LINENO = 0


class CallerLocation:
    """Add ``filename`` and ``lineno`` of the first frame outside the façade.

    Events that already carry both keys (e.g. lines replayed by a trace
    writer on behalf of its creator) keep them.
    """

    def __init__(self, additional_ignores: list[str] | None = None):
        self._adder = CallsiteParameterAdder(
            [CallsiteParameter.FILENAME, CallsiteParameter.LINENO],
            additional_ignores=list(PACKAGE_IGNORES) + list(additional_ignores or []),
        )

    def __call__(self, logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
        if "filename" in event_dict and "lineno" in event_dict:
            return event_dict
        return self._adder(logger, method_name, event_dict)

    def locate(self) -> tuple[str, int]:
        """Return ``(filename, lineno)`` of the current caller."""
        found = self._adder(None, "locate", {})
        return found.get("filename", FALLBACK_FILENAME), found.get("lineno", FALLBACK_LINENO)


def interpolate_positional_args(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
    """Apply ``%``-style arguments from the ``*f`` methods to the message.

    A template that does not match its arguments never raises; the line falls
    back to the raw template followed by the arguments.
    """
    args = event_dict.pop("positional_args", None)
    if args is None:
        return event_dict

    template = str(event_dict.get("event", ""))
    values: Any = args
    if len(args) == 1 and isinstance(args[0], dict) and args[0]:
        values = args[0]
    try:
        event_dict["event"] = template % values
    except (TypeError, ValueError, KeyError):
        extra = ", ".join(repr(a) for a in args)
        event_dict["event"] = f"{template} %!(BADARGS {extra})" if extra else template
    return event_dict


def render_line(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> str:
    """Render ``{SEVERITY} {prefix}: {file}:{line} {message}\\n``."""
    severity = Severity.from_method_name(method_name)
    return "{severity} {prefix}: {filename}:{lineno} {message}\n".format(
        severity=severity.label,
        prefix=event_dict.get("logger", ""),
        filename=event_dict.get("filename", FALLBACK_FILENAME),
        lineno=event_dict.get("lineno", FALLBACK_LINENO),
        message=event_dict.get("event", ""),
    )


def build_processors(caller_location: CallerLocation | None = None) -> list[Processor]:
    return [
        caller_location or CallerLocation(),
        interpolate_positional_args,
        render_line,
    ]
