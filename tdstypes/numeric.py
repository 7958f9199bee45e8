"""Decoding of money, smallmoney and decimal/numeric wire values."""

from __future__ import annotations

import struct
from decimal import Decimal

_MONEY_SCALE = 4


def _to_decimal(negative: bool, magnitude: int, scale: int) -> Decimal:
    digits = tuple(int(d) for d in str(magnitude))
    sign = 1 if negative and magnitude else 0
    return Decimal((sign, digits, -scale))


def decode_money(buf: bytes) -> Decimal:
    """Decode an 8-byte money value (high dword first) with four decimals."""
    if len(buf) < 8:
        raise ValueError(f"money needs 8 bytes, got {len(buf)}")
    high, low = struct.unpack_from("<iI", buf)
    money = (high << 32) | low
    return _to_decimal(money < 0, abs(money), _MONEY_SCALE)


def decode_money4(buf: bytes) -> Decimal:
    """Decode a 4-byte smallmoney value with four decimals."""
    if len(buf) < 4:
        raise ValueError(f"smallmoney needs 4 bytes, got {len(buf)}")
    (money,) = struct.unpack_from("<i", buf)
    return _to_decimal(money < 0, abs(money), _MONEY_SCALE)


def decode_decimal(prec: int, scale: int, buf: bytes) -> Decimal:
    """Decode a decimal/numeric value.

    The first byte is the sign (non-zero means positive), followed by
    little-endian 32-bit words of the magnitude. ``prec`` is the declared
    precision and does not affect the value.
    """
    if not buf:
        raise ValueError("decimal value is empty")
    positive = buf[0] != 0
    body = buf[1:]
    words = len(body) // 4
    magnitude = int.from_bytes(body[: words * 4], "little")
    return _to_decimal(not positive, magnitude, scale)