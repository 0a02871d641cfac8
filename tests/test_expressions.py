import pytest

from lsmdb.errors import (
    ColumnNotFoundError,
    DivisionByZeroError,
    StatementCanceledError,
    TypeMismatchError,
)
from lsmdb.expressions import (
    Binary,
    BinaryOp,
    CompoundIdentifier,
    Identifier,
    Literal,
    Unary,
    UnaryOp,
    apply_filter,
    evaluate_const_expr,
    evaluate_expr,
    evaluate_predicate,
)
from lsmdb.governance import ExecutionGovernance, StatementCancellation
from lsmdb.values import NULL, ExecutionContext, RowSet, ScalarKind, ScalarValue


def big(value):
    return ScalarValue(ScalarKind.BIGINT, value)


def boolean(value):
    return ScalarValue(ScalarKind.BOOLEAN, value)


def test_evaluates_arithmetic_expression():
    expr = Binary(Literal(1), BinaryOp.ADD, Literal(2))
    assert evaluate_const_expr(expr) == big(3)


def test_evaluates_null_sensitive_boolean_logic():
    expr = Binary(Literal(False), BinaryOp.AND, Literal(None))
    assert evaluate_const_expr(expr) == boolean(False)


def test_filters_rows_using_predicate():
    row_set = RowSet(
        columns=["id"],
        rows=[{"id": big(1)}, {"id": big(2)}],
        table_name="users",
    )
    predicate = Binary(Identifier("id"), BinaryOp.EQUAL, Literal(2))
    filtered = apply_filter(row_set, predicate, ExecutionContext())
    assert len(filtered.rows) == 1
    assert filtered.rows[0]["id"] == big(2)
    assert filtered.table_name == "users"


@pytest.mark.parametrize(
    "op, left, right, expected",
    [
        (BinaryOp.AND, True, None, NULL),
        (BinaryOp.AND, True, True, boolean(True)),
        (BinaryOp.OR, True, None, boolean(True)),
        (BinaryOp.OR, False, None, NULL),
        (BinaryOp.OR, False, False, boolean(False)),
    ],
)
def test_three_valued_logic(op, left, right, expected):
    assert evaluate_const_expr(Binary(Literal(left), op, Literal(right))) == expected


def test_boolean_operator_rejects_non_boolean():
    with pytest.raises(TypeMismatchError) as info:
        evaluate_const_expr(Binary(Literal(1), BinaryOp.AND, Literal(True)))
    assert info.value.expected == "BOOLEAN"
    assert info.value.found == "BIGINT"


def test_integer_division_yields_float():
    result = evaluate_const_expr(Binary(Literal(7), BinaryOp.DIVIDE, Literal(2)))
    assert result == ScalarValue(ScalarKind.FLOAT, 3.5)


def test_division_by_zero_raises():
    with pytest.raises(DivisionByZeroError):
        evaluate_const_expr(Binary(Literal(1), BinaryOp.DIVIDE, Literal(0)))


def test_integer_arithmetic_saturates():
    top = 2**63 - 1
    assert evaluate_const_expr(Binary(Literal(top), BinaryOp.ADD, Literal(1))) == big(top)
    bottom = -(2**63)
    assert evaluate_const_expr(
        Binary(Literal(bottom), BinaryOp.SUBTRACT, Literal(1))
    ) == big(bottom)


def test_arithmetic_with_null_is_null():
    assert evaluate_const_expr(Binary(Literal(None), BinaryOp.MULTIPLY, Literal(3))) == NULL


def test_arithmetic_rejects_text():
    with pytest.raises(TypeMismatchError) as info:
        evaluate_const_expr(Binary(Literal("a"), BinaryOp.ADD, Literal(1)))
    assert info.value.expected == "numeric"


def test_comparison_with_null_is_null_and_predicate_false():
    expr = Binary(Identifier("v"), BinaryOp.EQUAL, Literal(1))
    row = {"v": NULL}
    assert evaluate_expr(expr, row) == NULL
    assert evaluate_predicate(expr, row) is False


def test_mixed_numeric_comparison():
    row = {"a": ScalarValue(ScalarKind.INTEGER, 3), "b": ScalarValue(ScalarKind.FLOAT, 3.0)}
    assert evaluate_expr(Binary(Identifier("a"), BinaryOp.EQUAL, Identifier("b")), row) == boolean(
        True
    )


@pytest.mark.parametrize(
    "left, op, right, expected",
    [
        ("abc", BinaryOp.LESS_THAN, "abd", True),
        (False, BinaryOp.LESS_THAN, True, True),
        (True, BinaryOp.GREATER_THAN_OR_EQUAL, True, True),
        ("b", BinaryOp.NOT_EQUAL, "b", False),
        (2.5, BinaryOp.LESS_THAN_OR_EQUAL, 2, False),
    ],
)
def test_comparisons(left, op, right, expected):
    assert evaluate_const_expr(Binary(Literal(left), op, Literal(right))) == boolean(expected)


def test_blob_comparison():
    row = {"a": ScalarValue(ScalarKind.BLOB, b"\x01"), "b": ScalarValue(ScalarKind.BLOB, b"\x02")}
    assert evaluate_expr(
        Binary(Identifier("a"), BinaryOp.LESS_THAN, Identifier("b")), row
    ) == boolean(True)


def test_comparison_of_incompatible_types_raises():
    with pytest.raises(TypeMismatchError) as info:
        evaluate_const_expr(Binary(Literal("x"), BinaryOp.EQUAL, Literal(1)))
    assert info.value.column == "<expression>"
    assert info.value.expected == "TEXT"
    assert info.value.found == "BIGINT"


def test_unary_operators():
    assert evaluate_const_expr(Unary(UnaryOp.NOT, Literal(True))) == boolean(False)
    assert evaluate_const_expr(Unary(UnaryOp.NEGATE, Literal(5))) == big(-5)
    assert evaluate_const_expr(Unary(UnaryOp.NEGATE, Literal(None))) == NULL
    row = {"t": ScalarValue(ScalarKind.TIMESTAMP, 10)}
    assert evaluate_expr(Unary(UnaryOp.NEGATE, Identifier("t")), row) == ScalarValue(
        ScalarKind.TIMESTAMP, -10
    )


def test_unary_type_errors():
    with pytest.raises(TypeMismatchError) as info:
        evaluate_const_expr(Unary(UnaryOp.NEGATE, Literal("x")))
    assert info.value.expected == "numeric"
    with pytest.raises(TypeMismatchError) as info:
        evaluate_const_expr(Unary(UnaryOp.NOT, Literal(1)))
    assert info.value.expected == "BOOLEAN"


def test_missing_identifier_names_table():
    with pytest.raises(ColumnNotFoundError) as info:
        evaluate_expr(Identifier("nope"), {}, None)
    assert info.value.table == "<row>"
    with pytest.raises(ColumnNotFoundError) as info:
        evaluate_expr(Identifier("nope"), {}, "users")
    assert info.value.table == "users"
    assert info.value.column == "nope"


def test_compound_identifier_prefers_qualified_column_of_other_table():
    row = {"id": big(1), "profiles.id": big(2)}
    expr = CompoundIdentifier(("profiles", "id"))
    assert evaluate_expr(expr, row, "users") == big(2)
    assert evaluate_expr(expr, row, "profiles") == big(1)
    assert evaluate_expr(expr, row, None) == big(1)


def test_compound_identifier_falls_back_to_joined_name():
    row = {"a.b.c": big(7)}
    assert evaluate_expr(CompoundIdentifier(("a", "b", "c")), row) == big(7)
    with pytest.raises(ColumnNotFoundError) as info:
        evaluate_expr(CompoundIdentifier(("x", "y")), row, "t")
    assert info.value.column == "x.y"


def test_empty_compound_identifier_raises():
    with pytest.raises(ColumnNotFoundError) as info:
        evaluate_expr(CompoundIdentifier(()), {}, None)
    assert info.value.column == "<empty>"


def test_predicate_must_be_boolean():
    with pytest.raises(TypeMismatchError) as info:
        evaluate_predicate(Literal(1), {})
    assert info.value.column == "<predicate>"
    assert info.value.found == "BIGINT"


def test_literal_rejects_non_sql_values():
    with pytest.raises(TypeError):
        Literal([1, 2])


def test_filter_honours_cancellation():
    cancellation = StatementCancellation()
    assert cancellation.cancel()
    context = ExecutionContext(
        governance=ExecutionGovernance().with_cancellation(cancellation)
    )
    row_set = RowSet(columns=["id"], rows=[{"id": big(1)}], table_name="users")
    with pytest.raises(StatementCanceledError):
        apply_filter(row_set, Literal(True), context)