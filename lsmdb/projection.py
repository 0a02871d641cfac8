"""Projection, sorting and limiting of row sets."""

from __future__ import annotations

import functools
import math
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Sequence, Union

from lsmdb.expressions import CompoundIdentifier, Expr, Identifier, evaluate_expr
from lsmdb.values import ExecutionContext, RowSet, ScalarKind, ScalarValue

_NUMERIC_KINDS = (
    ScalarKind.INTEGER,
    ScalarKind.BIGINT,
    ScalarKind.FLOAT,
    ScalarKind.TIMESTAMP,
)


class SortDirection(Enum):
    ASC = "ASC"
    DESC = "DESC"


@dataclass(frozen=True)
class Wildcard:
    """The ``*`` select item."""


@dataclass(frozen=True)
class SelectExpr:
    """A select item computed from an expression."""

    expr: Expr


SelectItem = Union[Wildcard, SelectExpr]


@dataclass(frozen=True)
class OrderByExpr:
    expr: Expr
    direction: SortDirection = SortDirection.ASC


def _column_name(item: SelectItem, index: int) -> str:
    if isinstance(item, Wildcard):
        return "*"
    if isinstance(item.expr, Identifier):
        return item.expr.name
    if isinstance(item.expr, CompoundIdentifier):
        return ".".join(item.expr.parts)
    return f"expr_{index}"


def apply_projection(
    input: RowSet, projection: Sequence[SelectItem], context: ExecutionContext
) -> RowSet:
    """Compute the selected columns for every row."""
    if len(projection) == 1 and isinstance(projection[0], Wildcard):
        return input

    columns = [_column_name(item, index) for index, item in enumerate(projection)]
    projected = []
    for row in input.rows:
        context.checkpoint()
        source = dict(row)
        materialized = dict(row)
        for index, item in enumerate(projection):
            if not isinstance(item, SelectExpr):
                continue
            value = evaluate_expr(item.expr, source, input.table_name)
            materialized[_column_name(item, index)] = value
        projected.append(materialized)

    return RowSet(columns=columns, rows=projected, table_name=input.table_name)


def _cmp(a, b) -> int:
    return (a > b) - (a < b)


def _numeric(value: ScalarValue) -> Optional[float]:
    if value.kind in _NUMERIC_KINDS:
        return float(value.value)
    return None


def _compare_for_sort(left: ScalarValue, right: ScalarValue) -> int:
    if left.is_null() or right.is_null():
        return _cmp(left.is_null(), right.is_null())

    a, b = _numeric(left), _numeric(right)
    if a is not None and b is not None:
        if math.isnan(a) or math.isnan(b):
            return 0
        return _cmp(a, b)

    if left.kind is right.kind and left.kind in (
        ScalarKind.TEXT,
        ScalarKind.BOOLEAN,
        ScalarKind.BLOB,
    ):
        return _cmp(left.value, right.value)
    return _cmp(left.type_name(), right.type_name())


def apply_sort(
    input: RowSet, order_by: Sequence[OrderByExpr], context: ExecutionContext
) -> RowSet:
    """Stable sort by the ORDER BY keys; NULLs sort last when ascending."""
    if not order_by:
        return input

    context.limits.ensure_sort_rows(len(input.rows))

    keyed = []
    for row in input.rows:
        context.checkpoint()
        keys = [evaluate_expr(entry.expr, row, input.table_name) for entry in order_by]
        keyed.append((row, keys))

    def compare(left, right) -> int:
        for left_value, right_value, entry in zip(left[1], right[1], order_by):
            ordering = _compare_for_sort(left_value, right_value)
            if ordering:
                return -ordering if entry.direction is SortDirection.DESC else ordering
        return 0

    keyed.sort(key=functools.cmp_to_key(compare))
    return RowSet(
        columns=input.columns,
        rows=[row for row, _ in keyed],
        table_name=input.table_name,
    )


def apply_limit(input: RowSet, limit: int, context: ExecutionContext) -> RowSet:
    """Keep at most ``limit`` rows."""
    context.checkpoint()
    if limit < 0:
        raise ValueError("limit must be non-negative")
    return RowSet(columns=input.columns, rows=input.rows[:limit], table_name=input.table_name)