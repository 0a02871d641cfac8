"""Row normalization, binary row encoding and primary-key row keys."""

from __future__ import annotations

import struct
from typing import Callable, Optional

from lsmdb.errors import (
    ColumnNotFoundError,
    DecodeError,
    EncodeError,
    MissingPrimaryKeyValueError,
    NullViolationError,
    TypeMismatchError,
)
from lsmdb.schema import ColumnType, DefaultValue
from lsmdb.table import ColumnDescriptor, TableDescriptor
from lsmdb.values import (
    NULL,
    LiteralPayload,
    Row,
    ScalarKind,
    ScalarValue,
    default_to_scalar,
)

_I32_MIN = -(2**31)
_I32_MAX = 2**31 - 1
_I64_MIN = -(2**63)
_I64_MAX = 2**63 - 1


def literal_to_default(
    column_type: ColumnType, literal: LiteralPayload
) -> Optional[DefaultValue]:
    """Convert a DEFAULT literal to a typed default; NULL means no default."""
    if literal is None:
        return None
    if isinstance(literal, bool):
        found = "BOOLEAN"
        if column_type is ColumnType.BOOLEAN:
            return DefaultValue(ColumnType.BOOLEAN, literal)
    elif isinstance(literal, int):
        found = "BIGINT"
        if column_type is ColumnType.INTEGER:
            if not _I32_MIN <= literal <= _I32_MAX:
                raise TypeMismatchError("<default>", "INTEGER", "BIGINT")
            return DefaultValue(ColumnType.INTEGER, literal)
        if column_type is ColumnType.BIGINT:
            return DefaultValue(ColumnType.BIGINT, literal)
        if column_type is ColumnType.FLOAT:
            return DefaultValue(ColumnType.FLOAT, float(literal))
        if column_type is ColumnType.TIMESTAMP:
            return DefaultValue(ColumnType.TIMESTAMP, literal)
    elif isinstance(literal, float):
        found = "FLOAT"
        if column_type is ColumnType.FLOAT:
            return DefaultValue(ColumnType.FLOAT, literal)
    elif isinstance(literal, str):
        found = "TEXT"
        if column_type is ColumnType.TEXT:
            return DefaultValue(ColumnType.TEXT, literal)
    else:
        raise TypeError(f"{type(literal).__name__} is not a SQL literal")
    raise TypeMismatchError("<default>", column_type.as_sql(), found)


def _float_to_int(
    value: float, column: ColumnDescriptor, kind: ScalarKind, low: int, high: int
) -> ScalarValue:
    if low <= value <= float(high):
        return ScalarValue(kind, max(low, min(high, int(value))))
    raise TypeMismatchError(column.name, kind.value, "FLOAT")


def coerce_scalar_for_column(value: ScalarValue, column: ColumnDescriptor) -> ScalarValue:
    """Convert a value to the column's type, enforcing nullability."""
    if value.is_null():
        if column.nullable:
            return NULL
        raise NullViolationError(column.name)

    target = column.column_type
    kind = value.kind
    payload = value.value

    if target is ColumnType.INTEGER:
        if kind is ScalarKind.INTEGER:
            return value
        if kind is ScalarKind.BIGINT:
            if not _I32_MIN <= payload <= _I32_MAX:
                raise TypeMismatchError(column.name, "INTEGER", "BIGINT")
            return ScalarValue(ScalarKind.INTEGER, payload)
        if kind is ScalarKind.FLOAT and payload.is_integer():
            return _float_to_int(payload, column, ScalarKind.INTEGER, _I32_MIN, _I32_MAX)
    elif target is ColumnType.BIGINT:
        if kind in (ScalarKind.INTEGER, ScalarKind.BIGINT):
            return ScalarValue(ScalarKind.BIGINT, payload)
        if kind is ScalarKind.FLOAT and payload.is_integer():
            return _float_to_int(payload, column, ScalarKind.BIGINT, _I64_MIN, _I64_MAX)
    elif target is ColumnType.FLOAT:
        if kind in (ScalarKind.INTEGER, ScalarKind.BIGINT, ScalarKind.FLOAT):
            return ScalarValue(ScalarKind.FLOAT, float(payload))
    elif target is ColumnType.TIMESTAMP:
        if kind in (ScalarKind.INTEGER, ScalarKind.BIGINT, ScalarKind.TIMESTAMP):
            return ScalarValue(ScalarKind.TIMESTAMP, payload)
    elif kind.name == target.name:
        return value

    raise TypeMismatchError(column.name, target.as_sql(), value.type_name())


def coerce_row_for_table(table: TableDescriptor, candidate: Row) -> Row:
    """Build a full row in column order, filling defaults and coercing types."""
    normalized: Row = {}
    for column in table.columns:
        if column.name in candidate:
            value = candidate[column.name]
        elif column.default is not None:
            value = default_to_scalar(column.default)
        else:
            value = NULL
        normalized[column.name] = coerce_scalar_for_column(value, column)
    return normalized


def _length_prefixed(payload: bytes) -> bytes:
    return struct.pack(">I", len(payload) & 0xFFFFFFFF) + payload


_ENCODERS: dict[tuple[ColumnType, ScalarKind], Callable[[object], bytes]] = {
    (ColumnType.INTEGER, ScalarKind.INTEGER): lambda v: struct.pack(">i", v),
    (ColumnType.BIGINT, ScalarKind.BIGINT): lambda v: struct.pack(">q", v),
    (ColumnType.FLOAT, ScalarKind.FLOAT): lambda v: struct.pack(">d", v),
    (ColumnType.TEXT, ScalarKind.TEXT): lambda v: _length_prefixed(v.encode("utf-8")),
    (ColumnType.BOOLEAN, ScalarKind.BOOLEAN): lambda v: b"\x01" if v else b"\x00",
    (ColumnType.BLOB, ScalarKind.BLOB): lambda v: _length_prefixed(bytes(v)),
    (ColumnType.TIMESTAMP, ScalarKind.TIMESTAMP): lambda v: struct.pack(">q", v),
}


def _encode_non_null(column_type: ColumnType, value: ScalarValue) -> bytes:
    encoder = _ENCODERS.get((column_type, value.kind))
    if encoder is None:
        raise EncodeError(
            f"cannot encode {value.type_name()} as {column_type.as_sql()}"
        )
    return encoder(value.value)


def encode_row(table: TableDescriptor, row: Row) -> bytes:
    """Encode a normalized row: per column a null marker, then the value."""
    out = bytearray()
    for column in table.columns:
        if column.name not in row:
            raise ColumnNotFoundError(table.name, column.name)
        value = row[column.name]
        if value.is_null():
            out.append(0)
            continue
        out.append(1)
        out += _encode_non_null(column.column_type, value)
    return bytes(out)


class _Cursor:
    def __init__(self, data: bytes) -> None:
        self._data = bytes(data)
        self.offset = 0

    def at_end(self) -> bool:
        return self.offset >= len(self._data)

    def remaining(self) -> int:
        return len(self._data) - self.offset

    def take(self, length: int) -> bytes:
        end = self.offset + length
        if end > len(self._data):
            raise DecodeError("row payload truncated")
        chunk = self._data[self.offset:end]
        self.offset = end
        return chunk

    def unpack(self, fmt: str):
        return struct.unpack(fmt, self.take(struct.calcsize(fmt)))[0]


def _decode_non_null(column_type: ColumnType, cursor: _Cursor) -> ScalarValue:
    if column_type is ColumnType.INTEGER:
        return ScalarValue(ScalarKind.INTEGER, cursor.unpack(">i"))
    if column_type is ColumnType.BIGINT:
        return ScalarValue(ScalarKind.BIGINT, cursor.unpack(">q"))
    if column_type is ColumnType.FLOAT:
        return ScalarValue(ScalarKind.FLOAT, cursor.unpack(">d"))
    if column_type is ColumnType.TIMESTAMP:
        return ScalarValue(ScalarKind.TIMESTAMP, cursor.unpack(">q"))
    if column_type is ColumnType.BOOLEAN:
        return ScalarValue(ScalarKind.BOOLEAN, cursor.take(1)[0] != 0)
    payload = cursor.take(cursor.unpack(">I"))
    if column_type is ColumnType.TEXT:
        try:
            return ScalarValue(ScalarKind.TEXT, payload.decode("utf-8"))
        except UnicodeDecodeError as err:
            raise DecodeError(str(err)) from err
    return ScalarValue(ScalarKind.BLOB, payload)


def decode_row(table: TableDescriptor, data: bytes) -> Row:
    """Decode a payload produced by encode_row for the same table."""
    cursor = _Cursor(data)
    row: Row = {}
    for column in table.columns:
        if cursor.at_end():
            raise DecodeError("missing null marker")
        marker = cursor.take(1)[0]
        row[column.name] = (
            NULL if marker == 0 else _decode_non_null(column.column_type, cursor)
        )
    if cursor.remaining():
        raise DecodeError("row payload has trailing bytes")
    return row


def table_rows_prefix(table_name: str) -> bytes:
    """The key prefix under which a table's rows are stored."""
    return f"__data__/tables/{table_name}/rows/".encode("utf-8")


def build_row_key(table: TableDescriptor, row: Row) -> bytes:
    """Build the storage key of a row from its primary key values."""
    key = bytearray(table_rows_prefix(table.name))
    for primary_key in table.primary_key:
        column = table.column(primary_key)
        if column is None or primary_key not in row:
            raise MissingPrimaryKeyValueError(primary_key)
        value = coerce_scalar_for_column(row[primary_key], column)
        if value.is_null():
            raise NullViolationError(primary_key)
        component = _encode_non_null(column.column_type, value)
        key += struct.pack(">H", len(component) & 0xFFFF)
        key += component
    return bytes(key)