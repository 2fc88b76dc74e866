"""Test configuration and fixtures for prefix-walk."""

import threading
from typing import Optional

import pytest

from prefix_walk.core.exceptions import StoreError
from prefix_walk.models import ListLevel
from prefix_walk.store import InMemoryStore

SAMPLE_KEYS = ["a.txt", "foo/b.txt", "foo/bar/c.txt", "foo/bar/d.txt"]


class RecordingStore:
    """Wraps a store, recording every prefix listed and failing on demand."""

    def __init__(self, inner, fail_on: Optional[set] = None):
        self.inner = inner
        self.fail_on = fail_on or set()
        self.calls: list[Optional[str]] = []
        self.raised: list[StoreError] = []
        self._lock = threading.Lock()

    def list_with_delimiter(self, prefix: Optional[str] = None) -> ListLevel:
        with self._lock:
            self.calls.append(prefix)
        if prefix in self.fail_on:
            error = StoreError(f"listing failed for {prefix}")
            with self._lock:
                self.raised.append(error)
            raise error
        return self.inner.list_with_delimiter(prefix)


@pytest.fixture
def sample_store():
    """Store holding a.txt, foo/b.txt, foo/bar/c.txt and foo/bar/d.txt."""
    return InMemoryStore(SAMPLE_KEYS)


@pytest.fixture
def wide_store():
    """Store with several sibling prefixes, two levels deep."""
    return InMemoryStore(
        [
            "root.txt",
            "alpha/1.txt",
            "alpha/deep/x.txt",
            "beta/2.txt",
            "beta/deep/y.txt",
            "gamma/3.txt",
            "gamma/deeper/z/z.txt",
            "delta/4.txt",
        ]
    )


@pytest.fixture
def recording_store(sample_store):
    """Recording wrapper around the sample store."""
    return RecordingStore(sample_store)


@pytest.fixture
def recording_store_factory():
    """Build recording wrappers, optionally failing on given prefixes."""
    return RecordingStore
