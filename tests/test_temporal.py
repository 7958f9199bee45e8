from datetime import date, datetime, timedelta, timezone

import pytest
from hypothesis import given
from hypothesis import strategies as st

from tdstypes.temporal import (
    calc_time_size,
    decode_date,
    decode_datetim4,
    decode_datetime,
    decode_datetime2,
    decode_datetimeoffset,
    decode_time,
    encode_date,
    encode_datetim4,
    encode_datetime,
    encode_datetime2,
    encode_datetimeoffset,
    encode_time,
    gregorian_days,
)

UTC = timezone.utc


@given(st.dates())
def test_gregorian_days_matches_ordinal(d):
    yday = d.timetuple().tm_yday
    assert gregorian_days(d.year, yday) == d.toordinal() - 1


def test_gregorian_days_origin():
    assert gregorian_days(1, 1) == 0
    assert gregorian_days(1900, 1) == date(1900, 1, 1).toordinal() - 1


@pytest.mark.parametrize(
    "scale,size", [(0, 3), (1, 3), (2, 3), (3, 4), (4, 4), (5, 5), (6, 5), (7, 5)]
)
def test_calc_time_size(scale, size):
    assert calc_time_size(scale) == size


@given(
    st.datetimes(min_value=datetime(1900, 1, 1), max_value=datetime(2079, 6, 6, 23, 59))
)
def test_datetim4_round_trip(dt):
    encoded = encode_datetim4(dt)
    assert len(encoded) == 4
    assert decode_datetim4(encoded) == dt.replace(second=0, microsecond=0, tzinfo=UTC)


def test_datetim4_before_1900_is_zero():
    assert encode_datetim4(datetime(1850, 6, 1, 10, 30)) == b"\x00" * 4


def test_datetim4_zero_is_base_date():
    assert decode_datetim4(b"\x00" * 4) == datetime(1900, 1, 1, tzinfo=UTC)


def test_datetim4_short_buffer():
    with pytest.raises(ValueError):
        decode_datetim4(b"\x00\x00\x00")


@given(st.datetimes(min_value=datetime(1753, 1, 1)))
def test_datetime_round_trip_within_tick(dt):
    encoded = encode_datetime(dt)
    assert len(encoded) == 8
    decoded = decode_datetime(encoded)
    assert abs(decoded - dt.replace(tzinfo=UTC)) <= timedelta(milliseconds=4)


def test_datetime_base_date_is_zero():
    assert encode_datetime(datetime(1900, 1, 1)) == b"\x00" * 8


def test_datetime_clamps_to_minimum():
    assert encode_datetime(datetime(1700, 5, 5, 12)) == encode_datetime(datetime(1753, 1, 1))
    assert decode_datetime(encode_datetime(datetime(1600, 1, 1))) == datetime(
        1753, 1, 1, tzinfo=UTC
    )


def test_datetime_last_tick_of_second():
    buf = b"\x00" * 4 + (299).to_bytes(4, "little")
    assert decode_datetime(buf) == datetime(1900, 1, 1, 0, 0, 0, 997000, tzinfo=UTC)


def test_datetime_short_buffer():
    with pytest.raises(ValueError):
        decode_datetime(b"\x00" * 7)


@given(st.datetimes())
def test_date_round_trip(dt):
    encoded = encode_date(dt)
    assert len(encoded) == 3
    assert decode_date(encoded) == datetime(dt.year, dt.month, dt.day, tzinfo=UTC)


def test_date_origin_is_zero():
    assert encode_date(datetime(1, 1, 1)) == b"\x00\x00\x00"


def test_date_out_of_range():
    with pytest.raises(ValueError):
        decode_date(b"\xff\xff\xff")


def test_date_short_buffer():
    with pytest.raises(ValueError):
        decode_date(b"\x01\x02")


@given(st.times())
def test_time_round_trip_scale7(t):
    encoded = encode_time(t.hour, t.minute, t.second, t.microsecond * 1000, 7)
    assert len(encoded) == 5
    assert decode_time(7, encoded) == datetime(
        1, 1, 1, t.hour, t.minute, t.second, t.microsecond, tzinfo=UTC
    )


@given(st.times())
def test_time_round_trip_scale3(t):
    ms = t.microsecond // 1000
    encoded = encode_time(t.hour, t.minute, t.second, ms * 1_000_000, 3)
    assert len(encoded) == 4
    assert decode_time(3, encoded) == datetime(
        1, 1, 1, t.hour, t.minute, t.second, ms * 1000, tzinfo=UTC
    )


@given(st.times())
def test_time_scale0_drops_fraction(t):
    encoded = encode_time(t.hour, t.minute, t.second, t.microsecond * 1000, 0)
    assert len(encoded) == 3
    assert decode_time(0, encoded) == datetime(
        1, 1, 1, t.hour, t.minute, t.second, tzinfo=UTC
    )


@given(st.datetimes())
def test_datetime2_round_trip_scale7(dt):
    encoded = encode_datetime2(dt, 7)
    assert len(encoded) == 8
    assert decode_datetime2(7, encoded) == dt.replace(tzinfo=UTC)


@given(st.datetimes())
def test_datetime2_scale0_truncates(dt):
    encoded = encode_datetime2(dt, 0)
    assert len(encoded) == 6
    assert decode_datetime2(0, encoded) == dt.replace(microsecond=0, tzinfo=UTC)


def test_datetime2_short_buffer():
    with pytest.raises(ValueError):
        decode_datetime2(7, b"\x00\x00")


_offsets = st.integers(min_value=-840, max_value=840).map(
    lambda m: timezone(timedelta(minutes=m))
)


@given(
    st.datetimes(
        min_value=datetime(1900, 1, 1),
        max_value=datetime(9000, 1, 1),
        timezones=_offsets,
    )
)
def test_datetimeoffset_round_trip(dt):
    encoded = encode_datetimeoffset(dt, 7)
    assert len(encoded) == 10
    decoded = decode_datetimeoffset(7, encoded)
    assert decoded == dt
    assert decoded.utcoffset() == dt.utcoffset()
    assert decoded.replace(tzinfo=None) == dt.replace(tzinfo=None)


def test_datetimeoffset_naive_is_utc():
    naive = datetime(2006, 1, 2, 22, 4, 5)
    encoded = encode_datetimeoffset(naive, 7)
    assert encoded[-2:] == b"\x00\x00"
    assert encoded == encode_datetimeoffset(naive.replace(tzinfo=UTC), 7)


def test_datetimeoffset_stores_utc_time():
    tz = timezone(timedelta(hours=-7))
    local = datetime(2006, 1, 2, 22, 4, 5, tzinfo=tz)
    encoded = encode_datetimeoffset(local, 7)
    utc_part = encode_datetime2(local.astimezone(UTC).replace(tzinfo=None), 7)
    assert encoded[:-2] == utc_part


def test_datetimeoffset_short_buffer():
    with pytest.raises(ValueError):
        decode_datetimeoffset(7, b"\x00" * 4)