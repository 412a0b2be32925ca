"""
Writers that fold raw byte streams into the TRACE log.
"""

from __future__ import annotations

import itertools
import queue
import threading
from typing import TYPE_CHECKING, Any

from .config import settings

if TYPE_CHECKING:
    from .core import Logger

CLOSE_MESSAGE = "TraceWriter closed due to unexpected error: EOF"

# End-of-stream marker on a writer's queue
_EOF = object()

_worker_ids = itertools.count(1)


class TraceWriter:
    """Turns writes into one TRACE call per newline-terminated record.

    Writes go onto a bounded queue and return as soon as the chunk is queued
    (blocking only while the queue is full). A dedicated worker thread owned
    by this writer splits the byte stream on ``\\n`` and logs each record
    through ``logger.trace``, so lines show up shortly *after* the write.

    ``close()`` ends the stream. The worker then logs any unterminated
    remainder, logs :data:`CLOSE_MESSAGE` once and exits. Use :meth:`join`
    (or the context manager) to wait for that.
    """

    def __init__(self, logger: Logger, *, encoding: str | None = None, max_pending: int | None = None):
        self.logger = logger
        self.encoding = encoding or settings.trace_encoding
        self._queue: queue.Queue[Any] = queue.Queue(maxsize=max_pending or settings.trace_queue_size)
        self._closed = False
        self._close_lock = threading.Lock()
        self._linebuf = b""
        self._worker = threading.Thread(
            target=self._run,
            name=f"trace-writer-{logger.prefix}-{next(_worker_ids)}",
            daemon=True,
        )
        self._worker.start()

    # ------------------------------------------------------------------
    # Producer side
    # ------------------------------------------------------------------

    def write(self, buf: bytes | bytearray | memoryview | str) -> int:
        if isinstance(buf, str):
            data = buf.encode(self.encoding)
            written = len(buf)
        else:
            data = bytes(buf)
            written = len(data)
        # Held across the put so no chunk can land behind the end-of-stream marker
        with self._close_lock:
            if self._closed:
                raise ValueError("I/O operation on closed TraceWriter")
            if data:
                self._queue.put(data)
        return written

    def close(self) -> None:
        with self._close_lock:
            if self._closed:
                return
            self._closed = True
            self._queue.put(_EOF)

    def join(self, timeout: float | None = None) -> bool:
        """Wait for the worker to drain and exit. Returns whether it did."""
        self._worker.join(timeout)
        return not self._worker.is_alive()

    def flush(self) -> None:
        pass

    @property
    def closed(self) -> bool:
        return self._closed

    def writable(self) -> bool:
        return not self._closed

    def isatty(self) -> bool:
        return False

    def __enter__(self) -> TraceWriter:
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()
        self.join()

    # ------------------------------------------------------------------
    # Worker side
    # ------------------------------------------------------------------

    def _run(self) -> None:
        while True:
            chunk = self._queue.get()
            if chunk is _EOF:
                break
            self._feed(chunk)

        if self._linebuf:
            self._emit(self._linebuf)
            self._linebuf = b""
        self._log(CLOSE_MESSAGE)

    def _feed(self, chunk: bytes) -> None:
        *lines, self._linebuf = (self._linebuf + chunk).split(b"\n")
        for line in lines:
            self._emit(line)

    def _emit(self, line: bytes) -> None:
        # CRLF records lose the \r as well, the way a line scanner treats them
        if line.endswith(b"\r"):
            line = line[:-1]
        self._log(line.decode(self.encoding, errors="replace"))

    def _log(self, message: str) -> None:
        try:
            self.logger.trace(message)
        except Exception:
            pass  # A failed record must not stop the worker from draining to end-of-stream


class DiscardWriter:
    """Stand-in returned by ``trace_out()`` while TRACE is disabled."""

    def __init__(self) -> None:
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def write(self, buf: bytes | bytearray | memoryview | str) -> int:
        return len(buf) if isinstance(buf, str) else memoryview(buf).nbytes

    def close(self) -> None:
        self._closed = True

    def join(self, timeout: float | None = None) -> bool:
        return True

    def flush(self) -> None:
        pass

    def writable(self) -> bool:
        return True

    def isatty(self) -> bool:
        return False

    def __enter__(self) -> DiscardWriter:
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()
