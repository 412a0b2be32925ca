import io
import time
import typing as t

import pytest

from servicelog import reset_outputs


@pytest.fixture(autouse=True)
def restore_outputs():
    """
    Every test starts and ends with the default stdio sinks.
    The registry is process-wide, so a test that redirects it must not leak.
    """
    reset_outputs()
    yield
    reset_outputs()


@pytest.fixture
def out() -> io.StringIO:
    return io.StringIO()


@pytest.fixture
def trace_on(monkeypatch):
    monkeypatch.setenv("TRACE", "true")


@pytest.fixture
def trace_off(monkeypatch):
    monkeypatch.setenv("TRACE", "false")


def _poll(predicate: t.Callable[[], bool], timeout: float = 2.0, interval: float = 0.01) -> bool:
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(interval)
    return predicate()


@pytest.fixture
def wait_for():
    """Poll until a predicate holds. Trace writers log asynchronously."""
    return _poll
