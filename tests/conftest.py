"""
Pytest configuration and fixtures for subwriter tests.
"""

import errno

import pytest

from subwriter.results import HostEntry, Result


class FailingSink:
    """Binary sink that accepts `limit` bytes and then fails every write."""

    def __init__(self, limit: int, fail_flush: bool = False):
        self.limit = limit
        self.fail_flush = fail_flush
        self.data = b""
        self.writes = 0
        self.flushes = 0

    def write(self, chunk: bytes) -> int:
        if len(self.data) + len(chunk) > self.limit:
            raise OSError(errno.ENOSPC, "No space left on device")
        self.data += chunk
        self.writes += 1
        return len(chunk)

    def flush(self):
        self.flushes += 1
        if self.fail_flush:
            raise OSError(errno.EIO, "Input/output error")


@pytest.fixture
def single_result():
    """The canonical one-record collection."""
    return {"a.com": Result(host="a.com", ip="1.2.3.4", source="crt")}


@pytest.fixture
def two_results():
    return {
        "a.com": Result(host="a.com", ip="1.2.3.4", source="crt"),
        "b.com": Result(host="b.com", ip="", source="dnsdumpster"),
    }


@pytest.fixture
def host_entries():
    return {
        "a.com": HostEntry(host="a.com", source="crt"),
        "www.b.com": HostEntry(host="www.b.com", source="archive"),
    }


@pytest.fixture
def many_results():
    """Enough records to span several internal buffer flushes."""
    return {
        f"host{i:04d}.example.com": Result(host=f"host{i:04d}.example.com", ip=f"10.0.{i // 256}.{i % 256}", source="brute")
        for i in range(1000)
    }


@pytest.fixture
def failing_sink():
    return FailingSink
