"""SQL Server uniqueidentifier value with its mixed-endian wire layout."""

from __future__ import annotations

import binascii
from dataclasses import dataclass

_SIZE = 16


def _swap_fields(raw: bytes) -> bytes:
    # The first three groups are stored little-endian on the wire.
    return raw[3::-1] + raw[5:3:-1] + raw[7:5:-1] + raw[8:]


@dataclass(frozen=True)
class UniqueIdentifier:
    """A 16-byte GUID held in its canonical (display) byte order."""

    raw: bytes = bytes(_SIZE)

    def __post_init__(self) -> None:
        raw = bytes(self.raw)
        if len(raw) != _SIZE:
            raise ValueError("invalid UniqueIdentifier length")
        object.__setattr__(self, "raw", raw)

    @classmethod
    def from_value(cls, value: object) -> "UniqueIdentifier":
        """Build from wire bytes (16 bytes) or a 36-character string."""
        if isinstance(value, (bytes, bytearray, memoryview)):
            data = bytes(value)
            if len(data) != _SIZE:
                raise ValueError("invalid UniqueIdentifier length")
            return cls(_swap_fields(data))
        if isinstance(value, str):
            if len(value) != 36:
                raise ValueError("invalid UniqueIdentifier string length")
            digits = value.replace("-", "")
            if len(digits) != _SIZE * 2:
                raise ValueError("invalid UniqueIdentifier string")
            try:
                return cls(binascii.unhexlify(digits))
            except (binascii.Error, ValueError) as exc:
                raise ValueError(f"invalid UniqueIdentifier string: {exc}") from exc
        raise TypeError(
            f"cannot convert {type(value).__name__} to UniqueIdentifier"
        )

    def value(self) -> bytes:
        """Return the bytes in wire order."""
        return _swap_fields(self.raw)

    def __str__(self) -> str:
        h = self.raw.hex().upper()
        return f"{h[0:8]}-{h[8:12]}-{h[12:16]}-{h[16:20]}-{h[20:]}"

    def marshal_text(self) -> bytes:
        """Return the string form as ASCII bytes."""
        return str(self).encode("ascii")