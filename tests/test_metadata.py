from datetime import datetime
from decimal import Decimal

import pytest

from tdstypes.metadata import (
    make_decl,
    make_precision_scale,
    make_scan_type,
    make_type_length,
    make_type_name,
)
from tdstypes.reader import TdsReader
from tdstypes.typeids import TypeId
from tdstypes.typeinfo import TypeInfo, UdtInfo, read_type_info


@pytest.mark.parametrize(
    "type_id,size,expected",
    [
        (TypeId.INT8, 0, int),
        (TypeId.FLT4, 0, float),
        (TypeId.FLT8, 0, float),
        (TypeId.VARCHAR, 0, str),
        (TypeId.DATETIME, 0, datetime),
        (TypeId.DATETIM4, 0, datetime),
        (TypeId.INT1, 0, int),
        (TypeId.INT2, 0, int),
        (TypeId.INT4, 0, int),
        (TypeId.INTN, 4, int),
        (TypeId.MONEY, 8, Decimal),
        (TypeId.GUID, 16, bytes),
        (TypeId.BITN, 1, bool),
    ],
)
def test_make_scan_type(type_id, size, expected):
    assert make_scan_type(TypeInfo(type_id, size=size)) is expected


def test_scan_type_invalid_size():
    with pytest.raises(ValueError):
        make_scan_type(TypeInfo(TypeId.INTN, size=3))


def test_scan_type_unsupported():
    with pytest.raises(ValueError):
        make_scan_type(TypeInfo(TypeId.TVP))


def test_scan_type_matches_decoded_value():
    ti = read_type_info(TdsReader(bytes([TypeId.INTN, 4])))
    value = ti.read_value(TdsReader(b"\x04\x2a\x00\x00\x00"))
    assert value == 42
    assert isinstance(value, make_scan_type(ti))


@pytest.mark.parametrize(
    "type_id,expected",
    [
        (TypeId.DATETIME, "DATETIME"),
        (TypeId.DATETIM4, "SMALLDATETIME"),
        (TypeId.BIGBINARY, "BINARY"),
        (TypeId.VARIANT, "SQL_VARIANT"),
    ],
)
def test_make_type_name(type_id, expected):
    assert make_type_name(TypeInfo(type_id)) == expected


def test_type_name_sized():
    assert make_type_name(TypeInfo(TypeId.INTN, size=8)) == "BIGINT"
    assert make_type_name(TypeInfo(TypeId.MONEYN, size=4)) == "SMALLMONEY"
    with pytest.raises(ValueError):
        make_type_name(TypeInfo(TypeId.FLTN, size=2))


@pytest.mark.parametrize(
    "type_id,size,varlen,length",
    [
        (TypeId.DATETIME, 0, False, 0),
        (TypeId.DATETIM4, 0, False, 0),
        (TypeId.BIGVARCHAR, 0xFFFF, True, 2147483645),
        (TypeId.BIGVARCHAR, 10, True, 10),
        (TypeId.BIGBINARY, 30, True, 30),
        (TypeId.NVARCHAR, 0xFFFF, True, 1073741822),
        (TypeId.NVARCHAR, 20, True, 10),
        (TypeId.TEXT, 0, True, 2147483647),
    ],
)
def test_make_type_length(type_id, size, varlen, length):
    assert make_type_length(TypeInfo(type_id, size=size)) == (length, varlen)


def test_type_length_invalid_size():
    with pytest.raises(ValueError):
        make_type_length(TypeInfo(TypeId.DATETIMEN, size=5))


@pytest.mark.parametrize(
    "type_id", [TypeId.DATETIME, TypeId.DATETIM4, TypeId.BIGBINARY]
)
def test_make_precision_scale(type_id):
    assert make_precision_scale(TypeInfo(type_id)) == (0, 0, False)


def test_precision_scale_decimal():
    ti = TypeInfo(TypeId.DECIMALN, size=9, prec=18, scale=4)
    assert make_precision_scale(ti) == (18, 4, True)


@pytest.mark.parametrize(
    "expected,size,type_id",
    [
        ("varchar(max)", 0xFFFF, TypeId.VARCHAR),
        ("varchar(8000)", 8000, TypeId.VARCHAR),
        ("varchar(4001)", 4001, TypeId.VARCHAR),
        ("nvarchar(max)", 0xFFFF, TypeId.NVARCHAR),
        ("nvarchar(4000)", 8000, TypeId.NVARCHAR),
        ("nvarchar(2001)", 4002, TypeId.NVARCHAR),
        ("varbinary(max)", 0xFFFF, TypeId.BIGVARBIN),
        ("varbinary(8000)", 8000, TypeId.BIGVARBIN),
        ("varbinary(4001)", 4001, TypeId.BIGVARBIN),
    ],
)
def test_make_decl(expected, size, type_id):
    assert make_decl(TypeInfo(type_id, size=size)) == expected


def test_decl_misc():
    assert make_decl(TypeInfo(TypeId.NULL)) == "nvarchar(1)"
    assert make_decl(TypeInfo(TypeId.DECIMALN, prec=10, scale=2)) == "decimal(10, 2)"
    assert make_decl(TypeInfo(TypeId.DATETIME2N, scale=7)) == "datetime2(7)"
    assert make_decl(TypeInfo(TypeId.NCHAR, size=20)) == "nchar(10)"


def test_decl_tvp():
    with_schema = TypeInfo(TypeId.TVP, udt_info=UdtInfo(schema_name="s", type_name="t"))
    assert make_decl(with_schema) == "s.t READONLY"
    plain = TypeInfo(TypeId.TVP, udt_info=UdtInfo(type_name="t"))
    assert make_decl(plain) == "t READONLY"


def test_decl_errors():
    with pytest.raises(ValueError):
        make_decl(TypeInfo(TypeId.INTN, size=3))
    with pytest.raises(ValueError):
        make_decl(TypeInfo(TypeId.VARIANT))