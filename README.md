# tdstypes

`tdstypes` reads and writes the column and parameter values that SQL Server
sends and receives in the TDS protocol. It decodes `TYPE_INFO` headers and the
values that follow them. It also describes column types in the form a
database driver reports them.

## Installation

```
pip install tdstypes
```

It needs Python 3.10 or later. It has no other dependencies.

## Modules

- `tdstypes.typeids`
  - `TypeId` is an `IntEnum` of the TDS type codes.
  - `is_fixed_length(type_id)` and `fixed_size(type_id)` report on fixed-length types. `fixed_size` raises `ValueError` for any other type.
  - The module also defines the PLP markers `PLP_NULL`, `UNKNOWN_PLP_LEN` and `PLP_TERMINATOR`.
- `tdstypes.reader`
  - `TdsReader` wraps bytes or a binary stream.
  - It reads little-endian primitives with `byte`, `uint16`, `uint32`, `int32` and `uint64`.
  - `read_full(size)` reads exactly `size` bytes.
  - `b_varchar` and `us_varchar` read UTF-16 strings that carry a 1-byte or 2-byte length prefix.
  - If the stream ends early or holds bad data, the reader raises `BadStreamError`.
- `tdstypes.typeinfo`
  - `TypeInfo`, `Collation`, `UdtInfo` and `XmlInfo` are dataclasses.
  - `read_type_info(reader)` parses a `TYPE_INFO` structure. After that, `TypeInfo.read_value(reader)` decodes values of that type. It handles fixed-length, byte-length, short-length, long-length (`text`/`ntext`/`image`), PLP (`max` types, `xml`, UDT) and `sql_variant` values. `NULL` comes back as `None`.
  - `write_type_info(stream, ti)` writes the header. After that, `TypeInfo.write_value(stream, data)` writes bytes that are already encoded, or `None` for NULL.
  - `read_collation`, `write_collation`, `decode_char` (decodes with the collation's Windows code page) and `decode_nchar` (UTF-16LE) handle collations and character data.
- `tdstypes.temporal`
  - Decoders and encoders for the date and time types:
    - `smalldatetime`: `decode_datetim4`, `encode_datetim4`
    - `datetime`: `decode_datetime`, `encode_datetime`
    - `date`: `decode_date`, `encode_date`
    - `time`: `decode_time`, `encode_time`
    - `datetime2`: `decode_datetime2`, `encode_datetime2`
    - `datetimeoffset`: `decode_datetimeoffset`, `encode_datetimeoffset`
  - The helpers `gregorian_days` and `calc_time_size` are also public.
  - Decoders return datetimes that carry a timezone. The value is in UTC, or in the stored offset for `datetimeoffset`.
  - Precision finer than a microsecond is truncated.
  - Encoders clamp values to the range of the target type.
- `tdstypes.numeric`
  - `decode_money`, `decode_money4` and `decode_decimal` return `decimal.Decimal` values.
- `tdstypes.uniqueidentifier`
  - `UniqueIdentifier` holds a GUID in display order.
  - `from_value` accepts either of these:
    - 16 bytes in wire order
    - a 36-character string
  - `value()` returns the bytes in wire order. The first three groups are byte-swapped.
  - `str()` gives the upper-case text form. `marshal_text()` gives that form as ASCII bytes.
- `tdstypes.metadata`
  - `make_decl` gives the SQL parameter declaration, such as `nvarchar(max)` or `decimal(18, 2)`.
  - `make_type_name` gives the upper-case type name.
  - `make_type_length` returns `(length, is_variable)`.
  - `make_precision_scale` returns `(precision, scale, applies)`.
  - `make_scan_type` gives the Python type of decoded values.
  - All of these raise `ValueError` for types or sizes they do not support.

## Example

```python
import io

from tdstypes.reader import TdsReader
from tdstypes.typeinfo import read_type_info
from tdstypes.metadata import make_decl, make_type_name

# INTN column of size 4, followed by a value of 42
stream = TdsReader(io.BytesIO(bytes([0x26, 0x04, 0x04, 0x2A, 0, 0, 0])))
ti = read_type_info(stream)
print(make_decl(ti), make_type_name(ti))   # int INT
print(ti.read_value(stream))               # 42
```

```python
from tdstypes.uniqueidentifier import UniqueIdentifier

guid = UniqueIdentifier.from_value("01234567-89AB-CDEF-0123-456789ABCDEF")
print(str(guid))           # 01234567-89AB-CDEF-0123-456789ABCDEF
print(guid.value().hex())  # 67452301ab89efcd0123456789abcdef
```

## What it does not do

This is a codec library only.

- It does not open connections or speak the login or packet layers of TDS.
- It does not run queries.
- Apart from the temporal encoders, it does not turn Python values into wire bytes. `write_value` expects data that is already encoded.
- It has no encoder for money or decimal values, or for table-valued parameter rows.

## Running the tests

```
pip install -e ".[test]"
pytest
```