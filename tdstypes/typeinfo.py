"""TYPE_INFO parsing and serialisation, and reading and writing of column values."""

from __future__ import annotations

import struct
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any, BinaryIO, Callable, Dict, Optional

from .numeric import decode_decimal, decode_money, decode_money4
from .reader import BadStreamError, TdsReader
from .temporal import (
    decode_date,
    decode_datetim4,
    decode_datetime,
    decode_datetime2,
    decode_datetimeoffset,
    decode_time,
)
from .typeids import PLP_NULL, PLP_TERMINATOR, UNKNOWN_PLP_LEN, TypeId, fixed_size, is_fixed_length


@dataclass(frozen=True)
class Collation:
    """Collation of character data: locale id with flags, and SQL sort id."""

    lcid_and_flags: int = 0
    sort_id: int = 0


@dataclass
class UdtInfo:
    """Description of a CLR user-defined type."""

    db_name: str = ""
    schema_name: str = ""
    type_name: str = ""
    assembly_qualified_name: str = ""


@dataclass
class XmlInfo:
    """Schema information attached to an XML column."""

    schema_present: int = 0
    db_name: str = ""
    owning_schema: str = ""
    xml_schema_collection: str = ""


class _Layout(Enum):
    FIXED = auto()
    BYTE_LEN = auto()
    SHORT_LEN = auto()
    LONG_LEN = auto()
    PLP = auto()
    VARIANT = auto()


@dataclass
class TypeInfo:
    """Type description of a column or parameter."""

    type_id: int
    size: int = 0
    scale: int = 0
    prec: int = 0
    collation: Collation = field(default_factory=Collation)
    udt_info: UdtInfo = field(default_factory=UdtInfo)
    xml_info: XmlInfo = field(default_factory=XmlInfo)
    _reader: Optional[_Layout] = field(default=None, init=False, repr=False, compare=False)
    _writer: Optional[_Layout] = field(default=None, init=False, repr=False, compare=False)

    def read_value(self, reader: TdsReader) -> Any:
        """Read one value of this type from the stream; None stands for NULL."""
        if self._reader is None:
            raise ValueError("type info has no value layout; obtain it with read_type_info")
        try:
            return _READERS[self._reader](self, reader)
        except ValueError as exc:
            raise BadStreamError(str(exc)) from exc

    def write_value(self, stream: BinaryIO, data: Optional[bytes]) -> None:
        """Write an encoded value; None writes NULL where the layout allows it."""
        if self._writer is None:
            raise ValueError("write_type_info must be called before write_value")
        _WRITERS[self._writer](stream, self, data)


# ---------------------------------------------------------------- collations

_PRIMARY_LANGUAGE_CODE_PAGES = {
    0x11: "cp932",  # Japanese
    0x12: "cp949",  # Korean
    0x1E: "cp874",  # Thai
    0x2A: "cp1258",  # Vietnamese
    0x08: "cp1253",  # Greek
    0x1F: "cp1254",  # Turkish
    0x0D: "cp1255",  # Hebrew
    0x01: "cp1256",  # Arabic
    0x29: "cp1256",  # Farsi
    0x20: "cp1256",  # Urdu
    0x25: "cp1257",  # Estonian
    0x26: "cp1257",  # Latvian
    0x27: "cp1257",  # Lithuanian
    0x19: "cp1251",  # Russian
    0x22: "cp1251",  # Ukrainian
    0x23: "cp1251",  # Belarusian
    0x02: "cp1251",  # Bulgarian
    0x2F: "cp1251",  # Macedonian
    0x3F: "cp1251",  # Kazakh
    0x40: "cp1251",  # Kyrgyz
    0x44: "cp1251",  # Tatar
    0x50: "cp1251",  # Mongolian
    0x05: "cp1250",  # Czech
    0x0E: "cp1250",  # Hungarian
    0x15: "cp1250",  # Polish
    0x18: "cp1250",  # Romanian
    0x1B: "cp1250",  # Slovak
    0x1C: "cp1250",  # Albanian
    0x24: "cp1250",  # Slovenian
}

_TRADITIONAL_CHINESE_LCIDS = {0x0404, 0x0C04, 0x1404}
_SERBIAN_CYRILLIC_LCIDS = {0x0C1A, 0x1C1A}


def _code_page(collation: Collation) -> str:
    lcid = collation.lcid_and_flags & 0xFFFFF
    primary = lcid & 0x3FF
    if primary == 0x04:
        return "cp950" if lcid in _TRADITIONAL_CHINESE_LCIDS else "cp936"
    if primary == 0x1A:
        return "cp1251" if lcid in _SERBIAN_CYRILLIC_LCIDS else "cp1250"
    return _PRIMARY_LANGUAGE_CODE_PAGES.get(primary, "cp1252")


def read_collation(reader: TdsReader) -> Collation:
    """Read a five-byte collation."""
    lcid_and_flags = reader.uint32()
    sort_id = reader.byte()
    return Collation(lcid_and_flags, sort_id)


def write_collation(stream: BinaryIO, collation: Collation) -> None:
    """Write a five-byte collation."""
    stream.write(struct.pack("<IB", collation.lcid_and_flags, collation.sort_id))


def decode_char(collation: Collation, buf: bytes) -> str:
    """Decode single-byte character data using the collation's code page."""
    return bytes(buf).decode(_code_page(collation), errors="replace")


def decode_nchar(buf: bytes) -> str:
    """Decode UCS-2 (UTF-16LE) character data."""
    if len(buf) % 2:
        raise BadStreamError("Invalid UCS2 encoding: odd number of bytes")
    return bytes(buf).decode("utf-16-le", errors="replace")


# ------------------------------------------------------------ small decoders

def _u8(buf: bytes) -> int:
    return buf[0]


def _i16(buf: bytes) -> int:
    return struct.unpack("<h", buf)[0]


def _i32(buf: bytes) -> int:
    return struct.unpack("<i", buf)[0]


def _i64(buf: bytes) -> int:
    return struct.unpack("<q", buf)[0]


def _f32(buf: bytes) -> float:
    return struct.unpack("<f", buf)[0]


def _f64(buf: bytes) -> float:
    return struct.unpack("<d", buf)[0]


def _by_size(buf: bytes, decoders: Dict[int, Callable[[bytes], Any]], what: str) -> Any:
    try:
        decode = decoders[len(buf)]
    except KeyError:
        raise BadStreamError(f"Invalid size for {what}: {len(buf)}") from None
    return decode(buf)


_INTN = {1: _u8, 2: _i16, 4: _i32, 8: _i64}
_FLTN = {4: _f32, 8: _f64}
_MONEYN = {4: decode_money4, 8: decode_money}
_DATETIMEN = {4: decode_datetim4, 8: decode_datetime}

_FIXED_DECODERS: Dict[int, Callable[[bytes], Any]] = {
    TypeId.NULL: lambda buf: None,
    TypeId.INT1: _u8,
    TypeId.BIT: lambda buf: buf[0] != 0,
    TypeId.INT2: _i16,
    TypeId.INT4: _i32,
    TypeId.DATETIM4: decode_datetim4,
    TypeId.FLT4: _f32,
    TypeId.MONEY4: decode_money4,
    TypeId.MONEY: decode_money,
    TypeId.DATETIME: decode_datetime,
    TypeId.FLT8: _f64,
    TypeId.INT8: _i64,
}


# ------------------------------------------------------------- value readers

def _read_fixed(ti: TypeInfo, reader: TdsReader) -> Any:
    buf = reader.read_full(ti.size)
    try:
        decode = _FIXED_DECODERS[ti.type_id]
    except KeyError:
        raise BadStreamError("Invalid typeid") from None
    return decode(buf)


def _read_byte_len(ti: TypeInfo, reader: TdsReader) -> Any:
    size = reader.byte()
    if size == 0:
        return None
    buf = reader.read_full(size)
    match ti.type_id:
        case TypeId.DATEN:
            if len(buf) != 3:
                raise BadStreamError("Invalid size for DATENTYPE")
            return decode_date(buf)
        case TypeId.TIMEN:
            return decode_time(ti.scale, buf)
        case TypeId.DATETIME2N:
            return decode_datetime2(ti.scale, buf)
        case TypeId.DATETIMEOFFSETN:
            return decode_datetimeoffset(ti.scale, buf)
        case TypeId.GUID:
            return bytes(buf[:16]).ljust(16, b"\x00")
        case TypeId.INTN:
            return _by_size(buf, _INTN, "INTNTYPE")
        case TypeId.DECIMAL | TypeId.NUMERIC | TypeId.DECIMALN | TypeId.NUMERICN:
            return decode_decimal(ti.prec, ti.scale, buf)
        case TypeId.BITN:
            if len(buf) != 1:
                raise BadStreamError("Invalid size for BITNTYPE")
            return buf[0] != 0
        case TypeId.FLTN:
            return _by_size(buf, _FLTN, "FLTNTYPE")
        case TypeId.MONEYN:
            return _by_size(buf, _MONEYN, "MONEYNTYPE")
        case TypeId.DATETIM4:
            return decode_datetim4(buf)
        case TypeId.DATETIME:
            return decode_datetime(buf)
        case TypeId.DATETIMEN:
            return _by_size(buf, _DATETIMEN, "DATETIMENTYPE")
        case TypeId.CHAR | TypeId.VARCHAR:
            return decode_char(ti.collation, buf)
        case TypeId.BINARY | TypeId.VARBINARY:
            return bytes(buf)
    raise BadStreamError("Invalid typeid")


def _read_short_len(ti: TypeInfo, reader: TdsReader) -> Any:
    size = reader.uint16()
    if size == 0xFFFF:
        return None
    buf = reader.read_full(size)
    match ti.type_id:
        case TypeId.BIGVARCHAR | TypeId.BIGCHAR:
            return decode_char(ti.collation, buf)
        case TypeId.BIGVARBIN | TypeId.BIGBINARY | TypeId.UDT:
            return bytes(buf)
        case TypeId.NVARCHAR | TypeId.NCHAR:
            return decode_nchar(buf)
    raise BadStreamError("Invalid typeid")


def _read_long_len(ti: TypeInfo, reader: TdsReader) -> Any:
    textptr_size = reader.byte()
    if textptr_size == 0:
        return None
    reader.read_full(textptr_size)
    reader.uint64()  # timestamp, ignored
    size = reader.int32()
    if size == -1:
        return None
    buf = reader.read_full(size)
    match ti.type_id:
        case TypeId.TEXT:
            return decode_char(ti.collation, buf)
        case TypeId.IMAGE:
            return buf
        case TypeId.NTEXT:
            return decode_nchar(buf)
    raise BadStreamError("Invalid typeid")


def _read_variant(ti: TypeInfo, reader: TdsReader) -> Any:
    size = reader.int32()
    if size == 0:
        return None
    vartype = reader.byte()
    propbytes = reader.byte()
    rest = size - 2 - propbytes

    def body() -> bytes:
        return reader.read_full(rest)

    match vartype:
        case TypeId.GUID:
            return body()
        case TypeId.BIT:
            return reader.byte() != 0
        case TypeId.INT1:
            return reader.byte()
        case TypeId.INT2:
            return _i16(struct.pack("<H", reader.uint16()))
        case TypeId.INT4:
            return reader.int32()
        case TypeId.INT8:
            return _i64(struct.pack("<Q", reader.uint64()))
        case TypeId.DATETIME:
            return decode_datetime(body())
        case TypeId.DATETIM4:
            return decode_datetim4(body())
        case TypeId.FLT4:
            return _f32(struct.pack("<I", reader.uint32()))
        case TypeId.FLT8:
            return _f64(struct.pack("<Q", reader.uint64()))
        case TypeId.MONEY4:
            return decode_money4(body())
        case TypeId.MONEY:
            return decode_money(body())
        case TypeId.DATEN:
            return decode_date(body())
        case TypeId.TIMEN:
            scale = reader.byte()
            return decode_time(scale, body())
        case TypeId.DATETIME2N:
            scale = reader.byte()
            return decode_datetime2(scale, body())
        case TypeId.DATETIMEOFFSETN:
            scale = reader.byte()
            return decode_datetimeoffset(scale, body())
        case TypeId.BIGVARBIN | TypeId.BIGBINARY:
            reader.uint16()  # max length, ignored
            return body()
        case TypeId.DECIMALN | TypeId.NUMERICN:
            prec = reader.byte()
            scale = reader.byte()
            return decode_decimal(prec, scale, body())
        case TypeId.BIGVARCHAR | TypeId.BIGCHAR:
            collation = read_collation(reader)
            reader.uint16()  # max length, ignored
            return decode_char(collation, body())
        case TypeId.NVARCHAR | TypeId.NCHAR:
            read_collation(reader)
            reader.uint16()  # max length, ignored
            return decode_nchar(body())
    raise BadStreamError("Invalid variant typeid")


def _read_plp(ti: TypeInfo, reader: TdsReader) -> Any:
    if reader.uint64() == PLP_NULL:
        return None
    chunks = []
    while chunk_size := reader.uint32():
        chunks.append(reader.read_full(chunk_size))
    data = b"".join(chunks)
    match ti.type_id:
        case TypeId.XML:
            return decode_nchar(data)
        case TypeId.BIGVARCHAR | TypeId.BIGCHAR | TypeId.TEXT:
            return decode_char(ti.collation, data)
        case TypeId.BIGVARBIN | TypeId.BIGBINARY | TypeId.IMAGE | TypeId.UDT:
            return data
        case TypeId.NVARCHAR | TypeId.NCHAR | TypeId.NTEXT:
            return decode_nchar(data)
    raise BadStreamError("Invalid typeid for PLP value")


_READERS: Dict[_Layout, Callable[[TypeInfo, TdsReader], Any]] = {
    _Layout.FIXED: _read_fixed,
    _Layout.BYTE_LEN: _read_byte_len,
    _Layout.SHORT_LEN: _read_short_len,
    _Layout.LONG_LEN: _read_long_len,
    _Layout.PLP: _read_plp,
    _Layout.VARIANT: _read_variant,
}


# ------------------------------------------------------------ TYPE_INFO read

def _read_var_len(ti: TypeInfo, reader: TdsReader) -> None:
    match ti.type_id:
        case TypeId.DATEN:
            ti.size = 3
            ti._reader = _Layout.BYTE_LEN
        case TypeId.TIMEN | TypeId.DATETIME2N | TypeId.DATETIMEOFFSETN:
            ti.scale = reader.byte()
            if ti.scale <= 2:
                ti.size = 3
            elif ti.scale <= 4:
                ti.size = 4
            elif ti.scale <= 7:
                ti.size = 5
            else:
                raise BadStreamError(
                    "Invalid scale for TIME/DATETIME2/DATETIMEOFFSET type"
                )
            if ti.type_id == TypeId.DATETIME2N:
                ti.size += 3
            elif ti.type_id == TypeId.DATETIMEOFFSETN:
                ti.size += 5
            ti._reader = _Layout.BYTE_LEN
        case (
            TypeId.GUID | TypeId.INTN | TypeId.DECIMAL | TypeId.NUMERIC
            | TypeId.BITN | TypeId.DECIMALN | TypeId.NUMERICN | TypeId.FLTN
            | TypeId.MONEYN | TypeId.DATETIMEN | TypeId.CHAR
            | TypeId.VARCHAR | TypeId.BINARY | TypeId.VARBINARY
        ):
            ti.size = reader.byte()
            if ti.type_id in (TypeId.DECIMAL, TypeId.NUMERIC, TypeId.DECIMALN, TypeId.NUMERICN):
                ti.prec = reader.byte()
                ti.scale = reader.byte()
            ti._reader = _Layout.BYTE_LEN
        case TypeId.XML:
            schema_present = reader.byte()
            ti.xml_info = XmlInfo(schema_present=schema_present)
            if schema_present:
                ti.xml_info.db_name = reader.b_varchar()
                ti.xml_info.owning_schema = reader.b_varchar()
                ti.xml_info.xml_schema_collection = reader.us_varchar()
            ti._reader = _Layout.PLP
        case TypeId.UDT:
            ti.size = reader.uint16()
            ti.udt_info = UdtInfo(
                db_name=reader.b_varchar(),
                schema_name=reader.b_varchar(),
                type_name=reader.b_varchar(),
                assembly_qualified_name=reader.us_varchar(),
            )
            ti._reader = _Layout.PLP
        case (
            TypeId.BIGVARBIN | TypeId.BIGVARCHAR | TypeId.BIGBINARY
            | TypeId.BIGCHAR | TypeId.NVARCHAR | TypeId.NCHAR
        ):
            ti.size = reader.uint16()
            if ti.type_id in (TypeId.BIGVARCHAR, TypeId.BIGCHAR, TypeId.NVARCHAR, TypeId.NCHAR):
                ti.collation = read_collation(reader)
            ti._reader = _Layout.PLP if ti.size == 0xFFFF else _Layout.SHORT_LEN
        case TypeId.TEXT | TypeId.NTEXT | TypeId.IMAGE | TypeId.VARIANT:
            ti.size = reader.int32()
            if ti.type_id == TypeId.VARIANT:
                ti._reader = _Layout.VARIANT
                return
            if ti.type_id in (TypeId.TEXT, TypeId.NTEXT):
                ti.collation = read_collation(reader)
            for _ in range(reader.byte()):
                reader.us_varchar()  # table name parts, ignored
            ti._reader = _Layout.LONG_LEN
        case _:
            raise BadStreamError(f"Invalid type {int(ti.type_id)}")


def read_type_info(reader: TdsReader) -> TypeInfo:
    """Read a TYPE_INFO structure; the result can then read values."""
    type_id = reader.byte()
    try:
        tid = TypeId(type_id)
    except ValueError:
        raise BadStreamError(f"Invalid type {type_id}") from None
    ti = TypeInfo(tid)
    if is_fixed_length(tid):
        ti.size = fixed_size(tid)
        ti._reader = _Layout.FIXED
    else:
        _read_var_len(ti, reader)
    return ti


# ------------------------------------------------------------- value writers

def _write_fixed(stream: BinaryIO, ti: TypeInfo, data: Optional[bytes]) -> None:
    stream.write(data or b"")


def _write_byte_len(stream: BinaryIO, ti: TypeInfo, data: Optional[bytes]) -> None:
    if ti.size > 0xFF:
        raise ValueError("Invalid size for BYTELEN_TYPE")
    buf = data or b""
    if len(buf) > 0xFF:
        raise ValueError("value too long for BYTELEN_TYPE")
    stream.write(struct.pack("<B", len(buf)))
    stream.write(buf)


def _write_short_len(stream: BinaryIO, ti: TypeInfo, data: Optional[bytes]) -> None:
    if data is None:
        stream.write(struct.pack("<H", 0xFFFF))
        return
    if ti.size > 0xFFFE:
        raise ValueError("Invalid size for USHORTLEN_TYPE")
    stream.write(struct.pack("<H", ti.size))
    stream.write(data)


def _write_long_len(stream: BinaryIO, ti: TypeInfo, data: Optional[bytes]) -> None:
    stream.write(b"\x10")  # text pointer length
    stream.write(b"\xff" * 16)  # text pointer
    stream.write(b"\xff" * 8)  # timestamp
    stream.write(struct.pack("<I", ti.size & 0xFFFFFFFF))
    stream.write(data or b"")


def _write_plp(stream: BinaryIO, ti: TypeInfo, data: Optional[bytes]) -> None:
    if data is None:
        stream.write(struct.pack("<Q", PLP_NULL))
        return
    stream.write(struct.pack("<Q", UNKNOWN_PLP_LEN))
    if data:
        stream.write(struct.pack("<I", len(data)))
        stream.write(data)
    stream.write(struct.pack("<I", PLP_TERMINATOR))


_WRITERS: Dict[_Layout, Callable[[BinaryIO, TypeInfo, Optional[bytes]], None]] = {
    _Layout.FIXED: _write_fixed,
    _Layout.BYTE_LEN: _write_byte_len,
    _Layout.SHORT_LEN: _write_short_len,
    _Layout.LONG_LEN: _write_long_len,
    _Layout.PLP: _write_plp,
}


# ----------------------------------------------------------- TYPE_INFO write

def _write_var_len(stream: BinaryIO, ti: TypeInfo) -> _Layout:
    match ti.type_id:
        case TypeId.DATEN:
            return _Layout.BYTE_LEN
        case TypeId.TIMEN | TypeId.DATETIME2N | TypeId.DATETIMEOFFSETN:
            stream.write(struct.pack("<B", ti.scale))
            return _Layout.BYTE_LEN
        case (
            TypeId.INTN | TypeId.DECIMAL | TypeId.NUMERIC | TypeId.BITN
            | TypeId.DECIMALN | TypeId.NUMERICN | TypeId.FLTN | TypeId.MONEYN
            | TypeId.DATETIMEN | TypeId.CHAR | TypeId.VARCHAR | TypeId.BINARY
            | TypeId.VARBINARY
        ):
            if not 0 <= ti.size <= 0xFF:
                raise ValueError("Invalid size for BYTELEN_TYPE")
            stream.write(struct.pack("<B", ti.size))
            if ti.type_id in (TypeId.DECIMAL, TypeId.NUMERIC, TypeId.DECIMALN, TypeId.NUMERICN):
                stream.write(struct.pack("<BB", ti.prec, ti.scale))
            return _Layout.BYTE_LEN
        case TypeId.GUID:
            if ti.size not in (0x10, 0x00):
                raise ValueError("Invalid size for BYTELEN_TYPE")
            stream.write(struct.pack("<B", ti.size))
            return _Layout.BYTE_LEN
        case (
            TypeId.BIGVARBIN | TypeId.BIGVARCHAR | TypeId.BIGBINARY
            | TypeId.BIGCHAR | TypeId.NVARCHAR | TypeId.NCHAR | TypeId.XML
            | TypeId.UDT
        ):
            if ti.size > 8000 or ti.size == 0:
                stream.write(struct.pack("<H", 0xFFFF))
                layout = _Layout.PLP
            else:
                stream.write(struct.pack("<H", ti.size))
                layout = _Layout.SHORT_LEN
            if ti.type_id in (TypeId.BIGVARCHAR, TypeId.BIGCHAR, TypeId.NVARCHAR, TypeId.NCHAR):
                write_collation(stream, ti.collation)
            elif ti.type_id == TypeId.XML:
                stream.write(struct.pack("<B", ti.xml_info.schema_present))
            return layout
        case TypeId.TEXT | TypeId.IMAGE | TypeId.NTEXT | TypeId.VARIANT:
            stream.write(struct.pack("<I", ti.size & 0xFFFFFFFF))
            write_collation(stream, ti.collation)
            return _Layout.LONG_LEN
    raise ValueError(f"Invalid type {int(ti.type_id):#x}")


def write_type_info(stream: BinaryIO, ti: TypeInfo) -> None:
    """Write a TYPE_INFO structure and prepare ``ti`` for write_value."""
    stream.write(struct.pack("<B", ti.type_id))
    if is_fixed_length(ti.type_id) or ti.type_id == TypeId.TVP:
        ti._writer = _Layout.FIXED
        return
    ti._writer = _write_var_len(stream, ti)