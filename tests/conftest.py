"""
Shared pytest fixtures for the attis test suite.
"""

import io

import pytest

from attis.cybele.source import CharacterSource


class FailingStream(io.RawIOBase):
    """Stream that yields its data once, then fails on the next read."""

    def __init__(self, data: bytes):
        self._data = data

    def readable(self):
        return True

    def read(self, size=-1):
        if self._data:
            data, self._data = self._data, b""
            return data
        raise OSError("device went away")


@pytest.fixture
def failing_source():
    """Factory for CharacterSources whose stream fails after `data`."""
    def make(data: bytes, name: str = "pipe") -> CharacterSource:
        return CharacterSource(FailingStream(data), name)
    return make
