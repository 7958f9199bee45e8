import pytest
from hypothesis import given
from hypothesis import strategies as st

from tdstypes.uniqueidentifier import UniqueIdentifier

DB_UUID = bytes(
    [
        0x67, 0x45, 0x23, 0x01,
        0xAB, 0x89,
        0xEF, 0xCD,
        0x01, 0x23, 0x45, 0x67, 0x89, 0xAB, 0xCD, 0xEF,
    ]
)

UUID = UniqueIdentifier(
    bytes(
        [0x01, 0x23, 0x45, 0x67, 0x89, 0xAB, 0xCD, 0xEF,
         0x01, 0x23, 0x45, 0x67, 0x89, 0xAB, 0xCD, 0xEF]
    )
)


def test_scan_bytes_swaps():
    assert UniqueIdentifier.from_value(DB_UUID) == UUID


def test_scan_string():
    assert UniqueIdentifier.from_value(str(UUID)) == UUID


def test_value_returns_wire_bytes():
    v = UUID.value()
    assert isinstance(v, bytes)
    assert v == DB_UUID


def test_string():
    assert str(UUID) == "01234567-89AB-CDEF-0123-456789ABCDEF"


def test_marshal_text():
    expected = bytes(
        [48, 49, 50, 51, 52, 53, 54, 55, 45, 56, 57, 65, 66, 45, 67, 68, 69, 70,
         45, 48, 49, 50, 51, 45, 52, 53, 54, 55, 56, 57, 65, 66, 67, 68, 69, 70]
    )
    assert UUID.marshal_text() == expected


def test_scan_bytearray():
    assert UniqueIdentifier.from_value(bytearray(DB_UUID)) == UUID


def test_scan_lowercase_string():
    assert UniqueIdentifier.from_value(str(UUID).lower()) == UUID


def test_scan_bytes_wrong_length():
    with pytest.raises(ValueError, match="length"):
        UniqueIdentifier.from_value(DB_UUID[:15])


def test_scan_string_wrong_length():
    with pytest.raises(ValueError, match="string length"):
        UniqueIdentifier.from_value(str(UUID)[:-1])


def test_scan_string_bad_hex():
    text = "ZZ" + str(UUID)[2:]
    with pytest.raises(ValueError):
        UniqueIdentifier.from_value(text)


def test_scan_unsupported_type():
    with pytest.raises(TypeError, match="int"):
        UniqueIdentifier.from_value(42)


def test_constructor_rejects_wrong_length():
    with pytest.raises(ValueError):
        UniqueIdentifier(b"\x00" * 3)


def test_default_is_all_zero():
    assert UniqueIdentifier().raw == bytes(16)
    assert UniqueIdentifier().value() == bytes(16)


@given(st.binary(min_size=16, max_size=16))
def test_wire_round_trip(raw):
    u = UniqueIdentifier(raw)
    assert UniqueIdentifier.from_value(u.value()) == u


@given(st.binary(min_size=16, max_size=16))
def test_string_round_trip(raw):
    u = UniqueIdentifier(raw)
    assert UniqueIdentifier.from_value(str(u)) == u
    assert u.marshal_text().decode("ascii") == str(u)


@given(st.binary(min_size=16, max_size=16))
def test_swap_is_involution(raw):
    once = UniqueIdentifier.from_value(raw).value()
    assert once == raw