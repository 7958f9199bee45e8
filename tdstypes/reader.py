"""Little-endian primitive reader over a TDS byte stream."""

from __future__ import annotations

import io
import struct
from typing import BinaryIO, Union

Source = Union[bytes, bytearray, memoryview, BinaryIO]


class BadStreamError(Exception):
    """The byte stream is truncated or malformed."""


class TdsReader:
    """Reads TDS primitives from bytes or a binary stream."""

    def __init__(self, source: Source) -> None:
        if isinstance(source, (bytes, bytearray, memoryview)):
            self._stream: BinaryIO = io.BytesIO(bytes(source))
        else:
            self._stream = source

    def read_full(self, size: int) -> bytes:
        """Read exactly ``size`` bytes or raise BadStreamError."""
        if size < 0:
            raise BadStreamError(f"invalid read size {size}")
        parts = []
        remaining = size
        while remaining:
            chunk = self._stream.read(remaining)
            if not chunk:
                raise BadStreamError(
                    f"unexpected end of stream: wanted {size} bytes, got {size - remaining}"
                )
            parts.append(chunk)
            remaining -= len(chunk)
        return b"".join(parts)

    def _unpack(self, fmt: str) -> int:
        return struct.unpack(fmt, self.read_full(struct.calcsize(fmt)))[0]

    def byte(self) -> int:
        return self._unpack("<B")

    def uint16(self) -> int:
        return self._unpack("<H")

    def uint32(self) -> int:
        return self._unpack("<I")

    def int32(self) -> int:
        return self._unpack("<i")

    def uint64(self) -> int:
        return self._unpack("<Q")

    def b_varchar(self) -> str:
        """Read a string prefixed by a one-byte character count."""
        return _decode_ucs2(self.read_full(self.byte() * 2))

    def us_varchar(self) -> str:
        """Read a string prefixed by a two-byte character count."""
        return _decode_ucs2(self.read_full(self.uint16() * 2))


def _decode_ucs2(buf: bytes) -> str:
    try:
        return buf.decode("utf-16-le")
    except UnicodeDecodeError as exc:
        raise BadStreamError(f"Invalid UCS2 encoding: {exc}") from exc