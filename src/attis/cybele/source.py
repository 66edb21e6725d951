"""
Character Source
================

The lexer reads its input one byte at a time from a CharacterSource.
A source wraps any readable stream (file, pipe, in-memory buffer) and
hands out bytes until the end of input, which is signalled by None.

Read failures are not raised from next_byte(): the source records the
OSError in `error` and reports end of input. The lexer checks `error`
whenever it sees end of input and turns a recorded failure into a
SourceReadError, so a broken pipe is never mistaken for a clean EOF.

Usage
-----
>>> source = CharacterSource.from_string("1+2;")
>>> source.next_byte()
49
>>> with CharacterSource.open("program.cyb") as source:
...     tokens = CybeleLexer(source).lex()
"""

import io
from pathlib import Path
from typing import BinaryIO, Optional, Union


class CharacterSource:
    """
    Byte-at-a-time reader over a stream.

    Text streams are accepted too; their characters are encoded as UTF-8,
    so anything outside ASCII reaches the lexer as bytes >= 0x80.

    Attributes:
        name: Name used in diagnostics (file path or "<string>")
        error: The OSError that ended reading early, if any
    """

    CHUNK_SIZE = 4096

    def __init__(self, stream: Union[BinaryIO, io.TextIOBase], name: str = "<stream>"):
        self.name = name
        self.error: Optional[OSError] = None
        self._stream = stream
        self._buffer = b""
        self._pos = 0
        self._exhausted = False
        self._closed = False

    # =========================================================================
    # Constructors
    # =========================================================================

    @classmethod
    def from_bytes(cls, data: bytes, name: str = "<bytes>") -> "CharacterSource":
        """Create a source over an in-memory byte string."""
        return cls(io.BytesIO(data), name)

    @classmethod
    def from_string(cls, text: str, name: str = "<string>") -> "CharacterSource":
        """Create a source over a text string."""
        return cls(io.BytesIO(text.encode("utf-8")), name)

    @classmethod
    def open(cls, path: Union[str, Path]) -> "CharacterSource":
        """
        Open a file for reading.

        Raises:
            FileNotFoundError: If the file does not exist
        """
        path = Path(path)
        return cls(path.open("rb"), str(path))

    # =========================================================================
    # Reading
    # =========================================================================

    def next_byte(self) -> Optional[int]:
        """
        Return the next byte, or None at end of input.

        After None is returned, check `error` to tell a failed read from
        a normal end of file.
        """
        if self._pos >= len(self._buffer):
            if not self._fill():
                return None

        byte = self._buffer[self._pos]
        self._pos += 1
        return byte

    def _fill(self) -> bool:
        """Read the next chunk from the stream; False once it is exhausted."""
        if self._exhausted:
            return False

        try:
            chunk = self._stream.read(self.CHUNK_SIZE)
        except OSError as e:
            self.error = e
            self._exhausted = True
            return False

        if isinstance(chunk, str):
            chunk = chunk.encode("utf-8")

        if not chunk:
            self._exhausted = True
            return False

        self._buffer = chunk
        self._pos = 0
        return True

    # =========================================================================
    # Resource Management
    # =========================================================================

    def close(self) -> None:
        """Close the underlying stream. Calling it again does nothing."""
        if not self._closed:
            self._closed = True
            self._stream.close()

    @property
    def closed(self) -> bool:
        return self._closed

    def __enter__(self) -> "CharacterSource":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"CharacterSource({self.name!r})"
