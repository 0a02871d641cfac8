"""Column types and typed default values for table schemas."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Union

_I32_MIN = -(2**31)
_I32_MAX = 2**31 - 1
_I64_MIN = -(2**63)
_I64_MAX = 2**63 - 1

DefaultPayload = Union[int, float, str, bool, bytes]


class ColumnType(Enum):
    """The storage type of a table column."""

    INTEGER = "INTEGER"
    BIGINT = "BIGINT"
    FLOAT = "FLOAT"
    TEXT = "TEXT"
    BOOLEAN = "BOOLEAN"
    BLOB = "BLOB"
    TIMESTAMP = "TIMESTAMP"

    def as_sql(self) -> str:
        """Return the SQL spelling of the type."""
        return self.value


def _check_payload(kind: ColumnType, value: object) -> None:
    if kind is ColumnType.BOOLEAN:
        ok = isinstance(value, bool)
    elif kind is ColumnType.FLOAT:
        ok = isinstance(value, float)
    elif kind is ColumnType.TEXT:
        ok = isinstance(value, str)
    elif kind is ColumnType.BLOB:
        ok = isinstance(value, bytes)
    else:
        ok = isinstance(value, int) and not isinstance(value, bool)
        if ok:
            low, high = (
                (_I32_MIN, _I32_MAX) if kind is ColumnType.INTEGER else (_I64_MIN, _I64_MAX)
            )
            if not low <= value <= high:
                raise ValueError(f"{kind.as_sql()} default {value} is out of range")
    if not ok:
        raise TypeError(
            f"{type(value).__name__} value cannot be a {kind.as_sql()} default"
        )


@dataclass(frozen=True)
class DefaultValue:
    """A column default: a value tagged with the column type it was written for."""

    kind: ColumnType
    value: DefaultPayload

    def __post_init__(self) -> None:
        _check_payload(self.kind, self.value)

    def matches_type(self, column_type: ColumnType) -> bool:
        """Whether this default fits a column of the given type."""
        return self.kind is column_type