"""Column metadata derived from TYPE_INFO: Python types, SQL declarations, names and sizes."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Dict, Tuple

from .typeids import TypeId
from .typeinfo import TypeInfo

_MAX_VARLEN = 2147483645

_MONEY_IDS = (TypeId.MONEY, TypeId.MONEY4, TypeId.MONEYN)

# Types whose meaning depends on the declared size, with allowed sizes.
_SIZED: Dict[int, Tuple[Tuple[int, ...], str]] = {
    TypeId.INTN: ((1, 2, 4, 8), "INTNTYPE"),
    TypeId.FLTN: ((4, 8), "FLNNTYPE"),
    TypeId.MONEY: ((4, 8), "MONEYN"),
    TypeId.MONEY4: ((4, 8), "MONEYN"),
    TypeId.MONEYN: ((4, 8), "MONEYN"),
    TypeId.DATETIMEN: ((4, 8), "DATETIMEN"),
}

_SCAN_TYPES: Dict[int, type] = {
    TypeId.INT1: int,
    TypeId.INT2: int,
    TypeId.INT4: int,
    TypeId.INT8: int,
    TypeId.INTN: int,
    TypeId.FLT4: float,
    TypeId.FLT8: float,
    TypeId.FLTN: float,
    TypeId.BIGVARBIN: bytes,
    TypeId.VARCHAR: str,
    TypeId.NVARCHAR: str,
    TypeId.BIT: bool,
    TypeId.BITN: bool,
    TypeId.DECIMALN: Decimal,
    TypeId.NUMERICN: Decimal,
    TypeId.MONEY: Decimal,
    TypeId.MONEY4: Decimal,
    TypeId.MONEYN: Decimal,
    TypeId.DATETIM4: datetime,
    TypeId.DATETIME: datetime,
    TypeId.DATETIMEN: datetime,
    TypeId.DATETIME2N: datetime,
    TypeId.DATEN: datetime,
    TypeId.TIMEN: datetime,
    TypeId.DATETIMEOFFSETN: datetime,
    TypeId.BIGVARCHAR: str,
    TypeId.BIGCHAR: str,
    TypeId.NCHAR: str,
    TypeId.GUID: bytes,
    TypeId.XML: str,
    TypeId.TEXT: str,
    TypeId.NTEXT: str,
    TypeId.IMAGE: bytes,
    TypeId.BIGBINARY: bytes,
    TypeId.VARIANT: object,
}

_TYPE_NAMES: Dict[int, str] = {
    TypeId.INT1: "TINYINT",
    TypeId.INT2: "SMALLINT",
    TypeId.INT4: "INT",
    TypeId.INT8: "BIGINT",
    TypeId.FLT4: "REAL",
    TypeId.FLT8: "FLOAT",
    TypeId.BIGVARBIN: "VARBINARY",
    TypeId.VARCHAR: "VARCHAR",
    TypeId.NVARCHAR: "NVARCHAR",
    TypeId.BIT: "BIT",
    TypeId.BITN: "BIT",
    TypeId.DECIMALN: "DECIMAL",
    TypeId.NUMERICN: "DECIMAL",
    TypeId.DATETIM4: "SMALLDATETIME",
    TypeId.DATETIME: "DATETIME",
    TypeId.DATETIME2N: "DATETIME2",
    TypeId.DATEN: "DATE",
    TypeId.TIMEN: "TIME",
    TypeId.DATETIMEOFFSETN: "DATETIMEOFFSET",
    TypeId.BIGVARCHAR: "VARCHAR",
    TypeId.BIGCHAR: "CHAR",
    TypeId.NCHAR: "NCHAR",
    TypeId.GUID: "UNIQUEIDENTIFIER",
    TypeId.XML: "XML",
    TypeId.TEXT: "TEXT",
    TypeId.NTEXT: "NTEXT",
    TypeId.IMAGE: "IMAGE",
    TypeId.VARIANT: "SQL_VARIANT",
    TypeId.BIGBINARY: "BINARY",
}

_SIZED_NAMES: Dict[int, Dict[int, str]] = {
    TypeId.INTN: {1: "TINYINT", 2: "SMALLINT", 4: "INT", 8: "BIGINT"},
    TypeId.FLTN: {4: "REAL", 8: "FLOAT"},
    TypeId.MONEY: {4: "SMALLMONEY", 8: "MONEY"},
    TypeId.MONEY4: {4: "SMALLMONEY", 8: "MONEY"},
    TypeId.MONEYN: {4: "SMALLMONEY", 8: "MONEY"},
    TypeId.DATETIMEN: {4: "SMALLDATETIME", 8: "DATETIME"},
}

# Types that carry no length and no precision/scale.
_PLAIN = frozenset(
    {
        TypeId.INT1, TypeId.INT2, TypeId.INT4, TypeId.INT8, TypeId.FLT4,
        TypeId.FLT8, TypeId.BIT, TypeId.BITN, TypeId.DATETIM4,
        TypeId.DATETIME, TypeId.DATETIME2N, TypeId.DATEN, TypeId.TIMEN,
        TypeId.DATETIMEOFFSETN, TypeId.GUID, TypeId.VARIANT,
    }
)

_FIXED_LENGTHS: Dict[int, int] = {
    TypeId.XML: 1073741822,
    TypeId.TEXT: 2147483647,
    TypeId.NTEXT: 1073741823,
    TypeId.IMAGE: 2147483647,
}

_VARLEN_IDS = frozenset(
    {
        TypeId.BIGVARBIN, TypeId.VARCHAR, TypeId.BIGVARCHAR, TypeId.BIGCHAR,
        TypeId.NVARCHAR, TypeId.NCHAR, TypeId.XML, TypeId.TEXT,
        TypeId.NTEXT, TypeId.IMAGE, TypeId.BIGBINARY,
    }
)


def _check_size(ti: TypeInfo) -> None:
    sizes, what = _SIZED[ti.type_id]
    if ti.size not in sizes:
        raise ValueError(f"invalid size of {what}")


def _unsupported(what: str, ti: TypeInfo) -> ValueError:
    return ValueError(f"{what} does not support type {int(ti.type_id):#x}")


def make_scan_type(ti: TypeInfo) -> type:
    """Return the Python type that values of this column decode to."""
    try:
        result = _SCAN_TYPES[ti.type_id]
    except KeyError:
        raise _unsupported("make_scan_type", ti) from None
    if ti.type_id in _SIZED:
        _check_size(ti)
    return result


def make_decl(ti: TypeInfo) -> str:
    """Return the SQL declaration used for a parameter of this type."""
    size = ti.size
    max_len = size > 8000 or size == 0
    match ti.type_id:
        case TypeId.NULL:
            return "nvarchar(1)"
        case TypeId.INT1:
            return "tinyint"
        case TypeId.BIGBINARY:
            return f"binary({size})"
        case TypeId.INT2:
            return "smallint"
        case TypeId.INT4:
            return "int"
        case TypeId.INT8:
            return "bigint"
        case TypeId.FLT4:
            return "real"
        case TypeId.INTN | TypeId.FLTN | TypeId.MONEYN | TypeId.DATETIMEN:
            names = {
                TypeId.INTN: {1: "tinyint", 2: "smallint", 4: "int", 8: "bigint"},
                TypeId.FLTN: {4: "real", 8: "float"},
                TypeId.MONEYN: {4: "smallmoney", 8: "money"},
                TypeId.DATETIMEN: {4: "smalldatetime", 8: "datetime"},
            }[ti.type_id]
            try:
                return names[size]
            except KeyError:
                raise ValueError(f"invalid size of {_SIZED[ti.type_id][1]}") from None
        case TypeId.FLT8:
            return "float"
        case TypeId.DECIMAL | TypeId.DECIMALN:
            return f"decimal({ti.prec}, {ti.scale})"
        case TypeId.NUMERIC | TypeId.NUMERICN:
            return f"numeric({ti.prec}, {ti.scale})"
        case TypeId.MONEY4:
            return "smallmoney"
        case TypeId.MONEY:
            return "money"
        case TypeId.BIGVARBIN:
            return "varbinary(max)" if max_len else f"varbinary({size})"
        case TypeId.NCHAR:
            return f"nchar({size // 2})"
        case TypeId.BIGCHAR | TypeId.CHAR:
            return f"char({size})"
        case TypeId.BIGVARCHAR | TypeId.VARCHAR:
            return "varchar(max)" if max_len else f"varchar({size})"
        case TypeId.NVARCHAR:
            return "nvarchar(max)" if max_len else f"nvarchar({size // 2})"
        case TypeId.BIT | TypeId.BITN:
            return "bit"
        case TypeId.DATEN:
            return "date"
        case TypeId.DATETIM4:
            return "smalldatetime"
        case TypeId.DATETIME:
            return "datetime"
        case TypeId.TIMEN:
            return "time"
        case TypeId.DATETIME2N:
            return f"datetime2({ti.scale})"
        case TypeId.DATETIMEOFFSETN:
            return f"datetimeoffset({ti.scale})"
        case TypeId.TEXT:
            return "text"
        case TypeId.NTEXT:
            return "ntext"
        case TypeId.UDT:
            return ti.udt_info.type_name
        case TypeId.GUID:
            return "uniqueidentifier"
        case TypeId.TVP:
            if ti.udt_info.schema_name:
                return f"{ti.udt_info.schema_name}.{ti.udt_info.type_name} READONLY"
            return f"{ti.udt_info.type_name} READONLY"
    raise _unsupported("make_decl", ti)


def make_type_name(ti: TypeInfo) -> str:
    """Return the upper-case database type name, without length."""
    sized = _SIZED_NAMES.get(ti.type_id)
    if sized is not None:
        try:
            return sized[ti.size]
        except KeyError:
            raise ValueError(f"invalid size of {_SIZED[ti.type_id][1]}") from None
    try:
        return _TYPE_NAMES[ti.type_id]
    except KeyError:
        raise _unsupported("make_type_name", ti) from None


def make_type_length(ti: TypeInfo) -> Tuple[int, bool]:
    """Return (length, is_variable) for the column type."""
    tid = ti.type_id
    if tid in _SIZED:
        _check_size(ti)
        return 0, False
    if tid in _PLAIN or tid in (TypeId.DECIMALN, TypeId.NUMERICN):
        return 0, False
    if tid in _FIXED_LENGTHS:
        return _FIXED_LENGTHS[tid], True
    match tid:
        case TypeId.BIGVARBIN | TypeId.BIGVARCHAR:
            return (_MAX_VARLEN if ti.size == 0xFFFF else ti.size), True
        case TypeId.VARCHAR | TypeId.BIGCHAR | TypeId.BIGBINARY:
            return ti.size, True
        case TypeId.NVARCHAR:
            return (_MAX_VARLEN // 2 if ti.size == 0xFFFF else ti.size // 2), True
        case TypeId.NCHAR:
            return ti.size // 2, True
    raise _unsupported("make_type_length", ti)


def make_precision_scale(ti: TypeInfo) -> Tuple[int, int, bool]:
    """Return (precision, scale, applies) for the column type."""
    tid = ti.type_id
    if tid in (TypeId.DECIMALN, TypeId.NUMERICN):
        return ti.prec, ti.scale, True
    if tid in _SIZED:
        _check_size(ti)
        return 0, 0, False
    if tid in _PLAIN or tid in _VARLEN_IDS:
        return 0, 0, False
    raise _unsupported("make_precision_scale", ti)