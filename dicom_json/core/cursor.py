"""Bounds-checked sequential reader over a DICOM byte stream.

The cursor never reads past the end of its buffer: every short read
raises TruncatedStreamError carrying the stream offset (and the tag
being decoded, when the caller supplies it). Files are memory-mapped
so large pixel payloads that are skipped are never loaded.
"""

from __future__ import annotations

import mmap
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from struct import Struct
from typing import Any

from .exceptions import TruncatedStreamError

_U16 = {"<": Struct("<H"), ">": Struct(">H")}
_U32 = {"<": Struct("<L"), ">": Struct(">L")}


class ByteCursor:
    """Sequential reader over ``bytes`` or a read-only ``mmap``.

    Attributes:
        position: Offset of the next unread byte
        size: Total buffer length

    """

    def __init__(self, buffer: bytes | mmap.mmap, position: int = 0) -> None:
        self._buffer = buffer
        self.size = len(buffer)
        self.position = position

    @property
    def remaining(self) -> int:
        return self.size - self.position

    @property
    def at_end(self) -> bool:
        return self.position >= self.size

    def _require(self, n: int, tag: int | None, what: str) -> None:
        if n < 0 or n > self.remaining:
            raise TruncatedStreamError(
                f"Cannot {what} {n} bytes, only {self.remaining} remain",
                tag=tag,
                offset=self.position,
            )

    def read_fixed(self, n: int, tag: int | None = None) -> bytes:
        """Read exactly ``n`` bytes and advance.

        Raises:
            TruncatedStreamError: If fewer than ``n`` bytes remain

        """
        self._require(n, tag, "read")
        start = self.position
        self.position += n
        return bytes(self._buffer[start : self.position])

    def skip(self, n: int, tag: int | None = None) -> None:
        """Advance ``n`` bytes without materializing them."""
        self._require(n, tag, "skip")
        self.position += n

    def unpack(self, layout: Struct, tag: int | None = None) -> tuple[Any, ...]:
        """Read and unpack one fixed-size struct, advancing past it."""
        self._require(layout.size, tag, "read")
        values = layout.unpack_from(self._buffer, self.position)
        self.position += layout.size
        return values

    def peek(self, layout: Struct, offset: int = 0) -> tuple[Any, ...]:
        """Unpack a struct at ``position + offset`` without advancing."""
        if offset < 0 or layout.size + offset > self.remaining:
            raise TruncatedStreamError(
                f"Cannot peek {layout.size} bytes, only "
                f"{max(self.remaining - offset, 0)} remain",
                offset=self.position + offset,
            )
        return layout.unpack_from(self._buffer, self.position + offset)

    def peek_u16(self, endian: str = "<", offset: int = 0) -> int:
        value: int = self.peek(_U16[endian], offset)[0]
        return value

    def peek_u32(self, endian: str = "<", offset: int = 0) -> int:
        value: int = self.peek(_U32[endian], offset)[0]
        return value

    def read_u16(self, endian: str = "<", tag: int | None = None) -> int:
        value: int = self.unpack(_U16[endian], tag)[0]
        return value

    def read_u32(self, endian: str = "<", tag: int | None = None) -> int:
        value: int = self.unpack(_U32[endian], tag)[0]
        return value


@contextmanager
def open_cursor(path: Path) -> Iterator[ByteCursor]:
    """Memory-map ``path`` and yield a cursor positioned at its start.

    The mapping is closed when the context exits. Values handed out by
    the cursor are copies, so nothing refers to the map afterwards.

    Raises:
        OSError: If the file cannot be opened or mapped

    """
    with open(path, "rb") as f:
        try:
            mapped = mmap.mmap(f.fileno(), 0, access=mmap.ACCESS_READ)
        except ValueError:
            # Zero-length files cannot be mapped
            mapped = None
        if mapped is None:
            yield ByteCursor(b"")
            return
        try:
            yield ByteCursor(mapped)
        finally:
            mapped.close()
