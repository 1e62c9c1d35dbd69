"""
Pytest configuration for ESC/POS printer tests.

Provides in-memory sinks so printer tests never touch real hardware.
"""

import pytest

from posprinter import Printer
from posprinter.connection import Sink


class MemorySink(Sink):
    """Sink that records every successful write."""

    def __init__(self):
        self.writes: list[bytes] = []
        self.open_count = 0
        self.flush_count = 0
        self.closed = False
        self._open = False

    @property
    def is_open(self) -> bool:
        return self._open

    @property
    def data(self) -> bytes:
        return b"".join(self.writes)

    def open(self):
        if not self._open:
            self._open = True
            self.open_count += 1

    def write(self, data: bytes):
        if not self._open:
            raise OSError("not open")
        self.writes.append(bytes(data))

    def flush(self):
        self.flush_count += 1

    def close(self):
        self._open = False
        self.closed = True


class FlakySink(MemorySink):
    """Sink whose first `failures` writes raise OSError before storing anything."""

    def __init__(self, failures: int):
        super().__init__()
        self.failures = failures
        self.attempts = 0

    def write(self, data: bytes):
        self.attempts += 1
        if self.attempts <= self.failures:
            raise OSError("transient failure")
        super().write(data)


@pytest.fixture
def sink():
    """In-memory sink."""
    return MemorySink()


@pytest.fixture
def printer(sink):
    """Printer on an in-memory sink with the default profile and no retry delay."""
    return Printer(sink, retry_delay=0)


@pytest.fixture
def flaky_sink_factory():
    """Build sinks that fail a given number of writes."""
    return FlakySink
