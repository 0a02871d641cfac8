"""Runtime scalar values, rows, row sets and execution resource limits."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Union

from lsmdb.errors import ResourceLimitExceededError
from lsmdb.governance import ExecutionGovernance
from lsmdb.schema import DefaultValue

_I32_MIN = -(2**31)
_I32_MAX = 2**31 - 1
_I64_MIN = -(2**63)
_I64_MAX = 2**63 - 1

UNLIMITED = 2**64 - 1
"""The largest limit value; limits left at this value never trip."""

ScalarPayload = Union[int, float, str, bool, bytes, None]
LiteralPayload = Union[int, float, str, bool, None]


class ScalarKind(Enum):
    """The runtime type of a scalar value; the value is its SQL name."""

    INTEGER = "INTEGER"
    BIGINT = "BIGINT"
    FLOAT = "FLOAT"
    TEXT = "TEXT"
    BOOLEAN = "BOOLEAN"
    BLOB = "BLOB"
    TIMESTAMP = "TIMESTAMP"
    NULL = "NULL"


def _check_payload(kind: ScalarKind, value: object) -> None:
    if kind is ScalarKind.NULL:
        ok = value is None
    elif kind is ScalarKind.BOOLEAN:
        ok = isinstance(value, bool)
    elif kind is ScalarKind.FLOAT:
        ok = isinstance(value, float)
    elif kind is ScalarKind.TEXT:
        ok = isinstance(value, str)
    elif kind is ScalarKind.BLOB:
        ok = isinstance(value, bytes)
    else:
        ok = isinstance(value, int) and not isinstance(value, bool)
        if ok:
            low, high = (
                (_I32_MIN, _I32_MAX) if kind is ScalarKind.INTEGER else (_I64_MIN, _I64_MAX)
            )
            if not low <= value <= high:
                raise ValueError(f"{kind.value} value {value} is out of range")
    if not ok:
        raise TypeError(f"{type(value).__name__} value cannot be a {kind.value} scalar")


@dataclass(frozen=True)
class ScalarValue:
    """A typed runtime value; NULL carries no payload."""

    kind: ScalarKind
    value: ScalarPayload = None

    def __post_init__(self) -> None:
        _check_payload(self.kind, self.value)

    def is_null(self) -> bool:
        return self.kind is ScalarKind.NULL

    def type_name(self) -> str:
        """The SQL name of the value's type."""
        return self.kind.value

    def estimated_query_bytes(self) -> int:
        """Approximate size of the value when materialized in a result."""
        kind = self.kind
        if kind is ScalarKind.INTEGER:
            return 4
        if kind in (ScalarKind.BIGINT, ScalarKind.FLOAT, ScalarKind.TIMESTAMP):
            return 8
        if kind is ScalarKind.TEXT:
            return len(self.value.encode("utf-8"))
        if kind is ScalarKind.BOOLEAN:
            return 1
        if kind is ScalarKind.BLOB:
            return len(self.value)
        return 0


NULL = ScalarValue(ScalarKind.NULL)

Row = dict[str, ScalarValue]


@dataclass(frozen=True)
class ExecutionLimits:
    """Upper bounds on the rows and bytes a statement may process."""

    max_scan_rows: int = UNLIMITED
    max_sort_rows: int = UNLIMITED
    max_join_rows: int = UNLIMITED
    max_query_result_rows: int = UNLIMITED
    max_query_result_bytes: int = UNLIMITED

    @staticmethod
    def _ensure_within(resource: str, actual: int, limit: int) -> None:
        if actual > limit:
            raise ResourceLimitExceededError(resource, actual, limit)

    def ensure_scan_rows(self, actual: int) -> None:
        self._ensure_within("scan rows", actual, self.max_scan_rows)

    def ensure_sort_rows(self, actual: int) -> None:
        self._ensure_within("sort rows", actual, self.max_sort_rows)

    def ensure_join_rows(self, actual: int) -> None:
        self._ensure_within("join rows", actual, self.max_join_rows)

    def ensure_query_result_rows(self, actual: int) -> None:
        self._ensure_within("query result rows", actual, self.max_query_result_rows)

    def ensure_query_result_bytes(self, actual: int) -> None:
        self._ensure_within("query result bytes", actual, self.max_query_result_bytes)


@dataclass(frozen=True)
class ExecutionContext:
    """The limits and governance a single statement executes under."""

    limits: ExecutionLimits = field(default_factory=ExecutionLimits)
    governance: ExecutionGovernance = field(default_factory=ExecutionGovernance)

    def checkpoint(self) -> None:
        """Raise if the statement has been canceled or timed out."""
        self.governance.checkpoint()


@dataclass
class QueryResult:
    """Materialized query output: column names and positional rows."""

    columns: list[str]
    rows: list[list[ScalarValue]]


@dataclass
class RowSet:
    """Intermediate rows keyed by column name, with the output column order."""

    columns: list[str]
    rows: list[Row] = field(default_factory=list)
    table_name: Optional[str] = None

    def into_query_result(self, context: ExecutionContext) -> QueryResult:
        """Materialize rows in column order, enforcing result size limits."""
        materialized: list[list[ScalarValue]] = []
        total_bytes = 0
        for row in self.rows:
            context.checkpoint()
            values = [row.get(column, NULL) for column in self.columns]
            for value in values:
                total_bytes = min(total_bytes + value.estimated_query_bytes(), UNLIMITED)
                context.limits.ensure_query_result_bytes(total_bytes)
            materialized.append(values)
            context.limits.ensure_query_result_rows(len(materialized))
        return QueryResult(columns=list(self.columns), rows=materialized)


def literal_to_scalar(literal: LiteralPayload) -> ScalarValue:
    """Convert a SQL literal (None, bool, int, float or str) to a scalar."""
    if literal is None:
        return NULL
    if isinstance(literal, bool):
        return ScalarValue(ScalarKind.BOOLEAN, literal)
    if isinstance(literal, int):
        return ScalarValue(ScalarKind.BIGINT, literal)
    if isinstance(literal, float):
        return ScalarValue(ScalarKind.FLOAT, literal)
    if isinstance(literal, str):
        return ScalarValue(ScalarKind.TEXT, literal)
    raise TypeError(f"{type(literal).__name__} is not a SQL literal")


def default_to_scalar(default: DefaultValue) -> ScalarValue:
    """Convert a column default to the scalar of the same type."""
    return ScalarValue(ScalarKind[default.kind.name], default.value)