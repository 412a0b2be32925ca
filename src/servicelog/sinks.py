"""
Sink abstractions and concrete implementations.
"""

from __future__ import annotations

import sys
import threading
from abc import ABC, abstractmethod
from typing import Any, Literal

from .config import settings

StdioName = Literal["stdout", "stderr"]


# =============================================================================
# Sink Abstraction (Strategy Pattern)
# =============================================================================


class BaseSink(ABC):
    """Abstract base class for log sinks."""

    @abstractmethod
    def write(self, line: str) -> None:
        """Write one fully rendered, newline-terminated line."""
        ...

    @abstractmethod
    def close(self) -> None:
        """Release resources owned by the sink itself."""
        ...


class StreamSink(BaseSink):
    """Sink over any object with a ``write`` method.

    Text streams receive ``str``, binary streams receive encoded ``bytes``.
    Which one a stream is gets detected on the first write and remembered.
    Writes are serialized per sink, so two threads logging through the same
    sink never interleave partial lines.

    Args:
        stream: Destination. Not closed by :meth:`close`, the caller owns it.
        encoding: Encoding for binary streams (default: ``sink_encoding`` setting)
    """

    def __init__(self, stream: Any, encoding: str | None = None):
        if not callable(getattr(stream, "write", None)):
            raise TypeError(f"{type(stream).__name__!r} object is not a writable sink")
        self._stream = stream
        self._encoding = encoding or settings.sink_encoding
        self._binary: bool | None = None
        self._lock = threading.Lock()

    @property
    def stream(self) -> Any:
        return self._stream

    def write(self, line: str) -> None:
        with self._lock:
            try:
                self._write(self._stream, line)
                flush = getattr(self._stream, "flush", None)
                if flush is not None:
                    flush()
            except Exception:
                pass  # A broken sink must never take the caller down with it

    def _write(self, stream: Any, line: str) -> None:
        if self._binary is None:
            try:
                stream.write(line)
                self._binary = False
                return
            except TypeError:
                self._binary = True
        if self._binary:
            stream.write(line.encode(self._encoding, errors="replace"))
        else:
            stream.write(line)

    def close(self) -> None:
        pass

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._stream!r})"


class StdioSink(BaseSink):
    """Standard I/O sink resolved at write time.

    Looks up ``sys.stdout`` / ``sys.stderr`` on every write instead of
    binding the stream object once, so later replacement of the process
    streams is honoured.
    """

    def __init__(self, name: StdioName = "stderr"):
        self._name = name
        self._lock = threading.Lock()

    @property
    def stream(self) -> Any:
        return getattr(sys, self._name)

    def write(self, line: str) -> None:
        stream = self.stream
        if stream is None:
            return
        with self._lock:
            try:
                stream.write(line)
                stream.flush()
            except Exception:
                pass

    def close(self) -> None:
        pass

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._name!r})"


class DiscardSink(BaseSink):
    """Sink that accepts and drops everything."""

    def write(self, line: str) -> None:
        pass

    def close(self) -> None:
        pass

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


def as_sink(target: Any) -> BaseSink:
    """Normalize a value accepted by ``set_outputs`` into a sink.

    ``None`` discards, a :class:`BaseSink` is used as is and anything with a
    ``write`` method is wrapped in a :class:`StreamSink`.
    """
    if target is None:
        return DiscardSink()
    if isinstance(target, BaseSink):
        return target
    return StreamSink(target)
