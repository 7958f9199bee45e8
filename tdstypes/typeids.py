"""Type identifiers used in TDS TYPE_INFO and value streams."""

from __future__ import annotations

from enum import IntEnum

PLP_NULL = 0xFFFFFFFFFFFFFFFF
UNKNOWN_PLP_LEN = 0xFFFFFFFFFFFFFFFE
PLP_TERMINATOR = 0x00000000

TVP_END_TOKEN = 0x00
TVP_ROW_TOKEN = 0x01


class TypeId(IntEnum):
    """Data type identifiers as they appear on the wire."""

    # fixed-length types
    NULL = 0x1F
    INT1 = 0x30
    BIT = 0x32
    INT2 = 0x34
    INT4 = 0x38
    DATETIM4 = 0x3A
    FLT4 = 0x3B
    MONEY = 0x3C
    DATETIME = 0x3D
    FLT8 = 0x3E
    MONEY4 = 0x7A
    INT8 = 0x7F

    # byte length types
    GUID = 0x24
    INTN = 0x26
    DECIMAL = 0x37
    NUMERIC = 0x3F
    BITN = 0x68
    DECIMALN = 0x6A
    NUMERICN = 0x6C
    FLTN = 0x6D
    MONEYN = 0x6E
    DATETIMEN = 0x6F
    DATEN = 0x28
    TIMEN = 0x29
    DATETIME2N = 0x2A
    DATETIMEOFFSETN = 0x2B
    CHAR = 0x2F
    VARCHAR = 0x27
    BINARY = 0x2D
    VARBINARY = 0x25

    # short length types
    BIGVARBIN = 0xA5
    BIGVARCHAR = 0xA7
    BIGBINARY = 0xAD
    BIGCHAR = 0xAF
    NVARCHAR = 0xE7
    NCHAR = 0xEF
    XML = 0xF1
    UDT = 0xF0
    TVP = 0xF3

    # long length types
    TEXT = 0x23
    IMAGE = 0x22
    NTEXT = 0x63
    VARIANT = 0x62


_FIXED_SIZES = {
    TypeId.NULL: 0,
    TypeId.INT1: 1,
    TypeId.BIT: 1,
    TypeId.INT2: 2,
    TypeId.INT4: 4,
    TypeId.DATETIM4: 4,
    TypeId.FLT4: 4,
    TypeId.MONEY4: 4,
    TypeId.MONEY: 8,
    TypeId.DATETIME: 8,
    TypeId.FLT8: 8,
    TypeId.INT8: 8,
}


def is_fixed_length(type_id: int) -> bool:
    """Return True if the type identifier names a fixed-length type."""
    return type_id in _FIXED_SIZES


def fixed_size(type_id: int) -> int:
    """Return the byte size of a fixed-length type.

    Raises ValueError for identifiers that are not fixed-length types.
    """
    try:
        return _FIXED_SIZES[type_id]
    except KeyError:
        raise ValueError(f"type {type_id:#x} is not a fixed-length type") from None