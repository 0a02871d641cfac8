"""Nested-loop join of two row sets."""

from __future__ import annotations

from lsmdb.expressions import Expr, evaluate_predicate
from lsmdb.values import UNLIMITED, ExecutionContext, Row, RowSet


def _join_columns(left: list[str], right: list[str], right_prefix: str) -> list[str]:
    columns = list(left)
    for column in right:
        columns.append(f"{right_prefix}.{column}" if column in columns else column)
    return columns


def _merge_rows(left: Row, right: Row, right_prefix: str) -> Row:
    merged = dict(left)
    for column, value in right.items():
        if column in merged:
            merged[f"{right_prefix}.{column}"] = value
        else:
            merged[column] = value
    return merged


def execute_join(
    left: RowSet, right: RowSet, predicate: Expr, context: ExecutionContext
) -> RowSet:
    """Join every left row with every right row that satisfies the predicate.

    Right-hand columns whose names clash with left-hand ones are qualified
    with the right table's name (or ``right`` when it has none).
    """
    right_prefix = right.table_name if right.table_name is not None else "right"
    columns = _join_columns(left.columns, right.columns, right_prefix)

    limits = context.limits
    limits.ensure_join_rows(len(left.rows))
    limits.ensure_join_rows(len(right.rows))
    limits.ensure_join_rows(min(len(left.rows) * len(right.rows), UNLIMITED))

    joined: list[Row] = []
    for left_row in left.rows:
        context.checkpoint()
        for right_row in right.rows:
            context.checkpoint()
            merged = _merge_rows(left_row, right_row, right_prefix)
            if evaluate_predicate(predicate, merged, None):
                joined.append(merged)
                limits.ensure_join_rows(len(joined))

    return RowSet(columns=columns, rows=joined, table_name=None)