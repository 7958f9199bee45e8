"""Encoding and decoding of SQL Server date and time wire formats.

Decoded values are timezone-aware datetimes. Sub-microsecond precision
carried by the wire formats is truncated to microseconds.
"""

from __future__ import annotations

import math
import struct
from datetime import datetime, timedelta, timezone

_UTC = timezone.utc
_EPOCH_0001 = datetime(1, 1, 1)
_EPOCH_1900 = datetime(1900, 1, 1)
_DAY_MICROSECONDS = 86_400_000_000
_MASK64 = 0xFFFFFFFFFFFFFFFF
_MASK40 = 0xFFFFFFFFFF


def _quot(a: int, b: int) -> int:
    """Integer division truncating toward zero (b must be positive)."""
    q = abs(a) // b
    return -q if a < 0 else q


def _require(buf: bytes, size: int, what: str) -> None:
    if len(buf) < size:
        raise ValueError(f"{what} needs at least {size} bytes, got {len(buf)}")


def _build(
    base: datetime, days: int, seconds: int, ns: int, tz: timezone = _UTC
) -> datetime:
    try:
        naive = base + timedelta(days=days, seconds=seconds, microseconds=ns // 1000)
    except OverflowError as exc:
        raise ValueError("decoded date is out of range") from exc
    return naive.replace(tzinfo=tz)


def _yearday(value: datetime) -> int:
    return value.timetuple().tm_yday


def gregorian_days(year: int, yearday: int) -> int:
    """Return days since January 1st of year 1 in the Gregorian calendar."""
    year0 = year - 1
    return (
        year0 * 365
        + _quot(year0, 4)
        - _quot(year0, 100)
        + _quot(year0, 400)
        + yearday
        - 1
    )


def calc_time_size(scale: int) -> int:
    """Return the byte size of a time field with the given scale."""
    if scale <= 2:
        return 3
    if scale <= 4:
        return 4
    return 5


def decode_datetim4(buf: bytes) -> datetime:
    """Decode a smalldatetime value (days and minutes since 1900-01-01)."""
    _require(buf, 4, "smalldatetime")
    days, mins = struct.unpack_from("<HH", buf)
    return _build(_EPOCH_1900, days, mins * 60, 0)


def encode_datetim4(value: datetime) -> bytes:
    """Encode a smalldatetime value; dates before 1900 become zero."""
    ref = datetime(1900, 1, 1, tzinfo=_UTC)
    aware = value if value.tzinfo is not None else value.replace(tzinfo=_UTC)
    delta_us = (aware - ref) // timedelta(microseconds=1)
    days = _quot(delta_us, _DAY_MICROSECONDS)
    mins = value.hour * 60 + value.minute
    if days < 0:
        days = 0
        mins = 0
    return struct.pack("<HH", days & 0xFFFF, mins & 0xFFFF)


def encode_datetime(value: datetime) -> bytes:
    """Encode a datetime value, clamped to the 1753..9999 range."""
    basedays = gregorian_days(1900, 1)
    days = gregorian_days(value.year, _yearday(value)) - basedays
    ns = value.microsecond * 1000
    tm = 300 * (value.second + value.minute * 60 + value.hour * 3600) + ns * 300 // 1_000_000_000
    mindays = gregorian_days(1753, 1) - basedays
    maxdays = gregorian_days(9999, 365) - basedays
    if days < mindays:
        days = mindays
        tm = 0
    if days > maxdays:
        days = maxdays
        tm = (23 * 3600 + 59 * 60 + 59) * 300 + 299
    return struct.pack("<II", days & 0xFFFFFFFF, tm & 0xFFFFFFFF)


def decode_datetime(buf: bytes) -> datetime:
    """Decode a datetime value (days since 1900 and 1/300 second ticks)."""
    _require(buf, 8, "datetime")
    days, tm = struct.unpack_from("<iI", buf)
    ns = int(math.trunc((tm % 300) / 0.3 + 0.5)) * 1_000_000
    secs = tm // 300
    return _build(_EPOCH_1900, days, secs, ns)


def _decode_date_int(buf: bytes) -> int:
    return int.from_bytes(buf[:3], "little")


def decode_date(buf: bytes) -> datetime:
    """Decode a date value (days since 0001-01-01)."""
    _require(buf, 3, "date")
    return _build(_EPOCH_0001, _decode_date_int(buf), 0, 0)


def _datetime2(value: datetime) -> tuple[int, int, int]:
    days = gregorian_days(value.year, _yearday(value))
    seconds = value.second + value.minute * 60 + value.hour * 3600
    ns = value.microsecond * 1000
    if days < 0:
        days = seconds = ns = 0
    limit = gregorian_days(9999, 365)
    if days > limit:
        days = limit
        seconds = 59 + 59 * 60 + 23 * 3600
        ns = 999_999_900
    return days, seconds, ns


def _encode_days(days: int) -> bytes:
    return (days & 0xFFFFFF).to_bytes(3, "little")


def encode_date(value: datetime) -> bytes:
    """Encode a date value as three little-endian bytes."""
    days, _, _ = _datetime2(value)
    return _encode_days(days)


def _decode_time_int(scale: int, buf: bytes) -> tuple[int, int]:
    acc = int.from_bytes(buf, "little") & _MASK64
    if scale < 7:
        acc = (acc * 10 ** (7 - scale)) & _MASK64
    nsbig = (acc * 100) & _MASK64
    return nsbig // 1_000_000_000, nsbig % 1_000_000_000


def _encode_time_int(seconds: int, ns: int, scale: int, size: int) -> bytes:
    if scale > 9:
        raise ValueError(f"invalid time scale {scale}")
    divisor = 10 ** (9 - scale)
    ns_total = seconds * 1_000_000_000 + ns
    ticks = _quot(ns_total, divisor) if ns_total >= 0 else -(-ns_total // divisor)
    return (ticks & _MASK40).to_bytes(5, "little")[:size]


def decode_time(scale: int, buf: bytes) -> datetime:
    """Decode a time value; the date part is 0001-01-01."""
    sec, ns = _decode_time_int(scale, buf)
    return _build(_EPOCH_0001, 0, sec, ns)


def encode_time(hour: int, minute: int, second: int, ns: int, scale: int) -> bytes:
    """Encode a time of day with the given scale."""
    seconds = hour * 3600 + minute * 60 + second
    return _encode_time_int(seconds, ns, scale, calc_time_size(scale))


def decode_datetime2(scale: int, buf: bytes) -> datetime:
    """Decode a datetime2 value (time field followed by three date bytes)."""
    _require(buf, 3, "datetime2")
    timesize = len(buf) - 3
    sec, ns = _decode_time_int(scale, buf[:timesize])
    days = _decode_date_int(buf[timesize:])
    return _build(_EPOCH_0001, days, sec, ns)


def encode_datetime2(value: datetime, scale: int) -> bytes:
    """Encode a datetime2 value with the given scale."""
    days, seconds, ns = _datetime2(value)
    timesize = calc_time_size(scale)
    return _encode_time_int(seconds, ns, scale, timesize) + _encode_days(days)


def decode_datetimeoffset(scale: int, buf: bytes) -> datetime:
    """Decode a datetimeoffset value into a datetime in its own offset."""
    _require(buf, 5, "datetimeoffset")
    timesize = len(buf) - 5
    sec, ns = _decode_time_int(scale, buf[:timesize])
    days = _decode_date_int(buf[timesize:timesize + 3])
    (offset,) = struct.unpack_from("<h", buf, timesize + 3)
    tz = timezone(timedelta(minutes=offset))
    return _build(_EPOCH_0001, days, sec + offset * 60, ns, tz)


def encode_datetimeoffset(value: datetime, scale: int) -> bytes:
    """Encode a datetimeoffset value; naive datetimes are taken as UTC."""
    offset_td = value.utcoffset() if value.tzinfo is not None else None
    if offset_td is None:
        utc_value = value
        offset = 0
    else:
        try:
            utc_value = value.astimezone(_UTC)
        except OverflowError as exc:
            raise ValueError("value is out of range") from exc
        offset = _quot(int(offset_td.total_seconds()), 60)
    days, seconds, ns = _datetime2(utc_value)
    timesize = calc_time_size(scale)
    return (
        _encode_time_int(seconds, ns, scale, timesize)
        + _encode_days(days)
        + struct.pack("<H", offset & 0xFFFF)
    )