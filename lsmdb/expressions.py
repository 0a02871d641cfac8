"""Expression trees and their evaluation against rows."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union

from lsmdb.errors import ColumnNotFoundError, DivisionByZeroError, TypeMismatchError
from lsmdb.values import (
    NULL,
    ExecutionContext,
    LiteralPayload,
    Row,
    RowSet,
    ScalarKind,
    ScalarValue,
    literal_to_scalar,
)

_I64_MIN = -(2**63)
_I64_MAX = 2**63 - 1


class BinaryOp(Enum):
    AND = "AND"
    OR = "OR"
    ADD = "+"
    SUBTRACT = "-"
    MULTIPLY = "*"
    DIVIDE = "/"
    EQUAL = "="
    NOT_EQUAL = "!="
    LESS_THAN = "<"
    LESS_THAN_OR_EQUAL = "<="
    GREATER_THAN = ">"
    GREATER_THAN_OR_EQUAL = ">="


class UnaryOp(Enum):
    NOT = "NOT"
    NEGATE = "-"


@dataclass(frozen=True)
class Identifier:
    name: str


@dataclass(frozen=True)
class CompoundIdentifier:
    parts: tuple[str, ...]


@dataclass(frozen=True)
class Literal:
    value: LiteralPayload

    def __post_init__(self) -> None:
        literal_to_scalar(self.value)


@dataclass(frozen=True)
class Unary:
    op: UnaryOp
    expr: "Expr"


@dataclass(frozen=True)
class Binary:
    left: "Expr"
    op: BinaryOp
    right: "Expr"


Expr = Union[Identifier, CompoundIdentifier, Literal, Unary, Binary]

_INT_KINDS = (ScalarKind.INTEGER, ScalarKind.BIGINT, ScalarKind.TIMESTAMP)
_ARITHMETIC = {BinaryOp.ADD, BinaryOp.SUBTRACT, BinaryOp.MULTIPLY, BinaryOp.DIVIDE}
_COMPARISONS = {
    BinaryOp.EQUAL: lambda order: order == 0,
    BinaryOp.NOT_EQUAL: lambda order: order != 0,
    BinaryOp.LESS_THAN: lambda order: order < 0,
    BinaryOp.LESS_THAN_OR_EQUAL: lambda order: order <= 0,
    BinaryOp.GREATER_THAN: lambda order: order > 0,
    BinaryOp.GREATER_THAN_OR_EQUAL: lambda order: order >= 0,
}


def _boolean(value: Optional[bool]) -> ScalarValue:
    return NULL if value is None else ScalarValue(ScalarKind.BOOLEAN, value)


def _missing(table_name: Optional[str], column: str) -> ColumnNotFoundError:
    return ColumnNotFoundError(table_name if table_name is not None else "<row>", column)


def apply_filter(input: RowSet, predicate: Expr, context: ExecutionContext) -> RowSet:
    """Keep the rows for which the predicate is TRUE."""
    kept = []
    for row in input.rows:
        context.checkpoint()
        if evaluate_predicate(predicate, row, input.table_name):
            kept.append(row)
    return RowSet(columns=input.columns, rows=kept, table_name=input.table_name)


def evaluate_const_expr(expr: Expr) -> ScalarValue:
    """Evaluate an expression that refers to no columns."""
    return evaluate_expr(expr, {}, None)


def evaluate_predicate(expr: Expr, row: Row, table_name: Optional[str] = None) -> bool:
    """Evaluate a predicate; NULL counts as false, non-booleans are an error."""
    value = evaluate_expr(expr, row, table_name)
    if value.kind is ScalarKind.BOOLEAN:
        return value.value
    if value.is_null():
        return False
    raise TypeMismatchError("<predicate>", "BOOLEAN", value.type_name())


def evaluate_expr(expr: Expr, row: Row, table_name: Optional[str] = None) -> ScalarValue:
    """Evaluate an expression against a row of named values."""
    match expr:
        case Identifier(name=name):
            if name in row:
                return row[name]
            raise _missing(table_name, name)
        case CompoundIdentifier(parts=parts):
            return _resolve_compound(tuple(parts), row, table_name)
        case Literal(value=value):
            return literal_to_scalar(value)
        case Unary(op=op, expr=inner):
            return _evaluate_unary(op, evaluate_expr(inner, row, table_name))
        case Binary(left=left, op=op, right=right):
            left_value = evaluate_expr(left, row, table_name)
            right_value = evaluate_expr(right, row, table_name)
            return _evaluate_binary(op, left_value, right_value)
    raise TypeError(f"{type(expr).__name__} is not an expression")


def _resolve_compound(
    parts: tuple[str, ...], row: Row, table_name: Optional[str]
) -> ScalarValue:
    if not parts:
        raise _missing(table_name, "<empty>")
    if len(parts) == 2 and table_name is not None and parts[0] != table_name:
        qualified = f"{parts[0]}.{parts[1]}"
        if qualified in row:
            return row[qualified]
    if parts[-1] in row:
        return row[parts[-1]]
    composed = ".".join(parts)
    if composed in row:
        return row[composed]
    raise _missing(table_name, composed)


def _evaluate_unary(op: UnaryOp, value: ScalarValue) -> ScalarValue:
    if value.is_null():
        return NULL
    if op is UnaryOp.NOT:
        if value.kind is ScalarKind.BOOLEAN:
            return ScalarValue(ScalarKind.BOOLEAN, not value.value)
        raise TypeMismatchError("<expression>", "BOOLEAN", value.type_name())
    if value.kind in _INT_KINDS or value.kind is ScalarKind.FLOAT:
        return ScalarValue(value.kind, -value.value)
    raise TypeMismatchError("<expression>", "numeric", value.type_name())


def _evaluate_binary(op: BinaryOp, left: ScalarValue, right: ScalarValue) -> ScalarValue:
    if op is BinaryOp.AND:
        a, b = _optional_bool(left), _optional_bool(right)
        if a is False or b is False:
            return _boolean(False)
        return _boolean(True if a and b else None)
    if op is BinaryOp.OR:
        a, b = _optional_bool(left), _optional_bool(right)
        if a is True or b is True:
            return _boolean(True)
        return _boolean(False if a is False and b is False else None)
    if op in _ARITHMETIC:
        return _evaluate_arithmetic(op, left, right)
    if left.is_null() or right.is_null():
        return NULL
    return _boolean(_COMPARISONS[op](_compare_values(left, right)))


def _optional_bool(value: ScalarValue) -> Optional[bool]:
    if value.kind is ScalarKind.BOOLEAN:
        return value.value
    if value.is_null():
        return None
    raise TypeMismatchError("<expression>", "BOOLEAN", value.type_name())


def _numeric_or_none(value: ScalarValue) -> Union[int, float, None]:
    if value.kind in _INT_KINDS or value.kind is ScalarKind.FLOAT:
        return value.value
    return None


def _as_numeric(value: ScalarValue) -> Union[int, float]:
    number = _numeric_or_none(value)
    if number is None:
        raise TypeMismatchError("<expression>", "numeric", value.type_name())
    return number


def _evaluate_arithmetic(op: BinaryOp, left: ScalarValue, right: ScalarValue) -> ScalarValue:
    if left.is_null() or right.is_null():
        return NULL
    a = _as_numeric(left)
    b = _as_numeric(right)

    if isinstance(a, int) and isinstance(b, int) and op is not BinaryOp.DIVIDE:
        if op is BinaryOp.ADD:
            result = a + b
        elif op is BinaryOp.SUBTRACT:
            result = a - b
        else:
            result = a * b
        return ScalarValue(ScalarKind.BIGINT, max(_I64_MIN, min(_I64_MAX, result)))

    x, y = float(a), float(b)
    if op is BinaryOp.DIVIDE:
        if y == 0.0:
            raise DivisionByZeroError()
        return ScalarValue(ScalarKind.FLOAT, x / y)
    if op is BinaryOp.ADD:
        return ScalarValue(ScalarKind.FLOAT, x + y)
    if op is BinaryOp.SUBTRACT:
        return ScalarValue(ScalarKind.FLOAT, x - y)
    return ScalarValue(ScalarKind.FLOAT, x * y)


def _order(a, b) -> int:
    if a < b:
        return -1
    if a > b:
        return 1
    return 0


def _compare_values(left: ScalarValue, right: ScalarValue) -> int:
    a, b = _numeric_or_none(left), _numeric_or_none(right)
    if a is not None and b is not None:
        return _order(float(a), float(b))
    if left.kind is right.kind and left.kind in (
        ScalarKind.TEXT,
        ScalarKind.BOOLEAN,
        ScalarKind.BLOB,
    ):
        return _order(left.value, right.value)
    raise TypeMismatchError("<expression>", left.type_name(), right.type_name())