"""
Trace Writer 单元测试

测试按行切分、异步输出、关闭通知以及 TRACE 关闭时的丢弃行为。
"""

from __future__ import annotations

import inspect
import io
import re
import threading
import time

import pytest

from servicelog import CLOSE_MESSAGE, DiscardSink, DiscardWriter, TraceWriter, logger_for, set_outputs


def messages(out: io.StringIO) -> list[str]:
    return [line.split(" ", 3)[3] for line in out.getvalue().splitlines()]


class TestTraceWriterEnabled:
    """TRACE 开启时的 Trace Writer"""

    def test_write_then_close(self, out: io.StringIO, trace_on, wait_for) -> None:
        set_outputs(None, out)
        log = logger_for("myprefix")
        log.trace("Hello world")
        log.tracef("Hello %d", 5)
        tw = log.trace_out()
        assert isinstance(tw, TraceWriter)
        assert tw.write(b"Gravy\n") == 6
        tw.close()

        assert wait_for(lambda: CLOSE_MESSAGE in out.getvalue())
        expected = (
            r"TRACE myprefix: test_trace_writer\.py:(\d+) Hello world\n"
            r"TRACE myprefix: test_trace_writer\.py:(\d+) Hello 5\n"
            r"TRACE myprefix: test_trace_writer\.py:(\d+) Gravy\n"
            r"TRACE myprefix: test_trace_writer\.py:(\d+) TraceWriter closed due to unexpected error: EOF\n"
        )
        assert re.fullmatch(expected, out.getvalue())

    def test_records_carry_trace_out_location(self, out: io.StringIO, trace_on) -> None:
        """worker 输出的行号指向 trace_out() 的调用处"""
        set_outputs(None, out)
        log = logger_for("myprefix")
        line = inspect.currentframe().f_lineno + 1
        with log.trace_out() as tw:
            tw.write(b"located\n")

        assert f"test_trace_writer.py:{line} located\n" in out.getvalue()

    def test_close_message_logged_exactly_once(self, out: io.StringIO, trace_on) -> None:
        set_outputs(None, out)
        tw = logger_for("myprefix").trace_out()
        tw.write(b"Gravy\n")
        tw.close()
        tw.close()
        assert tw.join(timeout=2)

        assert out.getvalue().count(CLOSE_MESSAGE) == 1
        assert messages(out) == ["Gravy", CLOSE_MESSAGE]

    def test_records_split_across_writes(self, out: io.StringIO, trace_on) -> None:
        """跨多次 write 的记录按换行符重新拼接"""
        set_outputs(None, out)
        tw = logger_for("myprefix").trace_out()
        tw.write(b"Gr")
        tw.write(b"avy\nbis")
        tw.write(b"cuits\r\n\nlast")
        tw.close()
        tw.join(timeout=2)

        assert messages(out) == ["Gravy", "biscuits", "", "last", CLOSE_MESSAGE]

    def test_text_is_unmodified(self, out: io.StringIO, trace_on) -> None:
        set_outputs(None, out)
        with logger_for("myprefix").trace_out() as tw:
            tw.write("  spaced %d {braces}\n")
            tw.write("héllo\n".encode("utf-8"))

        assert messages(out)[:2] == ["  spaced %d {braces}", "héllo"]

    def test_invalid_bytes_are_replaced(self, out: io.StringIO, trace_on) -> None:
        set_outputs(None, out)
        with logger_for("myprefix").trace_out() as tw:
            tw.write(b"bad \xff byte\n")

        assert messages(out)[0] == "bad � byte"

    def test_write_after_close_is_rejected(self, trace_on) -> None:
        set_outputs(None, None)
        tw = logger_for("myprefix").trace_out()
        tw.close()

        assert tw.closed
        assert not tw.writable()
        with pytest.raises(ValueError, match="closed"):
            tw.write(b"late\n")

    def test_output_is_asynchronous(self, out: io.StringIO, trace_on, wait_for) -> None:
        """write 返回后输出最终出现（最终一致）"""
        set_outputs(None, out)
        tw = logger_for("myprefix").trace_out()
        tw.write(b"eventually\n")

        assert wait_for(lambda: "eventually" in out.getvalue())
        tw.close()
        assert tw.join(timeout=2)

    def test_small_queue_applies_backpressure(self, out: io.StringIO, trace_on) -> None:
        set_outputs(None, out)
        tw = TraceWriter(logger_for("myprefix"), max_pending=1)
        for i in range(20):
            tw.write(f"{i}\n")
        tw.close()
        assert tw.join(timeout=2)

        assert messages(out) == [str(i) for i in range(20)] + [CLOSE_MESSAGE]

    def test_each_writer_has_its_own_worker(self, trace_on) -> None:
        set_outputs(None, None)
        log = logger_for("myprefix")
        first, second = log.trace_out(), log.trace_out()
        try:
            assert first._worker is not second._worker
            assert first._worker.daemon and second._worker.daemon
        finally:
            first.close()
            second.close()
        assert first.join(timeout=2) and second.join(timeout=2)


class TestTraceWriterDisabled:
    """TRACE 关闭时返回丢弃写入器"""

    def test_writes_are_discarded(self, out: io.StringIO, trace_off) -> None:
        set_outputs(out, out)
        log = logger_for("myprefix")
        log.trace("Hello world")
        log.tracef("Hello %d", 5)
        tw = log.trace_out()
        assert isinstance(tw, DiscardWriter)
        assert tw.write(b"Gravy\n") == 6
        tw.close()

        time.sleep(0.05)
        assert out.getvalue() == ""

    def test_decision_is_made_at_creation(self, out: io.StringIO, monkeypatch) -> None:
        """创建时 TRACE 关闭，之后再开启也不会输出"""
        monkeypatch.setenv("TRACE", "false")
        set_outputs(None, out)
        tw = logger_for("myprefix").trace_out()
        monkeypatch.setenv("TRACE", "true")
        tw.write(b"Gravy\n")
        tw.close()

        assert tw.join(timeout=1)
        assert out.getvalue() == ""


class RecordingLogger:
    """Stand-in owner logger whose ``trace`` fails for records starting with ``bad``."""

    prefix = "myprefix"

    def __init__(self) -> None:
        self.records: list[str] = []

    def trace(self, message: str) -> None:
        if message.startswith("bad"):
            raise RuntimeError("render failed")
        self.records.append(message)


class TestTraceWriterFailures:
    """worker 遇到错误时继续排空队列并输出关闭通知"""

    def test_failing_sink_does_not_block_producer(self, trace_on) -> None:
        class FailingSink(DiscardSink):
            def write(self, line: str) -> None:
                raise OSError("disk full")

        set_outputs(None, FailingSink())
        tw = TraceWriter(logger_for("myprefix"), max_pending=2)

        def produce() -> None:
            for _ in range(10):
                tw.write(b"x\n")

        producer = threading.Thread(target=produce, daemon=True)
        producer.start()
        producer.join(timeout=2)

        assert not producer.is_alive()
        tw.close()
        assert tw.join(timeout=2)

    def test_failed_record_keeps_worker_draining(self) -> None:
        owner = RecordingLogger()
        tw = TraceWriter(owner, max_pending=2)  # type: ignore[arg-type]
        for line in (b"one\n", b"bad\n", b"two\n", b"bad again\n", b"three\n"):
            tw.write(line)
        tw.close()

        assert tw.join(timeout=2)
        assert owner.records == ["one", "two", "three", CLOSE_MESSAGE]


class TestTraceWriterClosing:
    """关闭与并发写入"""

    def test_write_racing_close_is_logged_or_rejected(self) -> None:
        """与 close 竞争的 write 要么被拒绝，要么其记录在关闭通知之前输出"""
        owner = RecordingLogger()
        tw = TraceWriter(owner, max_pending=4)  # type: ignore[arg-type]
        accepted: list[str] = []
        lock = threading.Lock()

        def produce(n: int) -> None:
            for i in range(200):
                record = f"{n}-{i}"
                try:
                    tw.write(f"{record}\n")
                except ValueError:
                    return
                with lock:
                    accepted.append(record)

        producers = [threading.Thread(target=produce, args=(n,)) for n in range(4)]
        for producer in producers:
            producer.start()
        time.sleep(0.01)
        tw.close()
        for producer in producers:
            producer.join(timeout=2)

        assert tw.join(timeout=2)
        assert owner.records[-1] == CLOSE_MESSAGE
        assert sorted(owner.records[:-1]) == sorted(accepted)

    def test_discard_writer_reports_closed(self, trace_off) -> None:
        tw = logger_for("myprefix").trace_out()
        assert isinstance(tw, DiscardWriter)
        assert not tw.closed
        tw.close()
        assert tw.closed
