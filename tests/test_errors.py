import pytest

from lsmdb.errors import (
    ColumnNotFoundError,
    ColumnValueCountMismatchError,
    DecodeError,
    DivisionByZeroError,
    DuplicateColumnError,
    EncodeError,
    ExecutionError,
    MissingPrimaryKeyValueError,
    NullViolationError,
    PrimaryKeyConflictError,
    ResourceLimitExceededError,
    StatementCanceledError,
    StatementTimedOutError,
    TableNotFoundError,
    TypeMismatchError,
    UnsupportedPlanError,
)


def test_division_by_zero_message():
    assert str(DivisionByZeroError()) == "cannot divide by zero"


def test_column_not_found_fields_and_message():
    err = ColumnNotFoundError("users", "age")
    assert (err.table, err.column) == ("users", "age")
    assert "'age'" in str(err) and "'users'" in str(err)


def test_type_mismatch_fields():
    err = TypeMismatchError("id", "INTEGER", "TEXT")
    assert (err.column, err.expected, err.found) == ("id", "INTEGER", "TEXT")
    assert str(err).endswith("expected INTEGER, found TEXT")


def test_resource_limit_fields():
    err = ResourceLimitExceededError("join rows", 4, 3)
    assert (err.resource, err.actual, err.limit) == ("join rows", 4, 3)
    assert "join rows" in str(err)


def test_count_mismatch_fields():
    err = ColumnValueCountMismatchError(2, 3)
    assert (err.columns, err.values) == (2, 3)
    assert "columns=2" in str(err) and "values=3" in str(err)


@pytest.mark.parametrize(
    "error, attr, value",
    [
        (TableNotFoundError("t"), "table", "t"),
        (DuplicateColumnError("c"), "column", "c"),
        (NullViolationError("c"), "column", "c"),
        (MissingPrimaryKeyValueError("id"), "column", "id"),
        (PrimaryKeyConflictError("t"), "table", "t"),
        (EncodeError("bad"), "detail", "bad"),
        (DecodeError("bad"), "detail", "bad"),
        (StatementTimedOutError(25), "timeout_ms", 25),
        (StatementCanceledError("stop"), "reason", "stop"),
        (UnsupportedPlanError("node"), "detail", "node"),
    ],
)
def test_errors_keep_their_fields(error, attr, value):
    assert getattr(error, attr) == value
    assert str(value) in str(error)


@pytest.mark.parametrize(
    "error, fragment",
    [
        (TableNotFoundError("t"), "not found"),
        (ColumnNotFoundError("t", "c"), "not found"),
        (DuplicateColumnError("c"), "duplicated"),
        (ColumnValueCountMismatchError(1, 2), "mismatch"),
        (TypeMismatchError("c", "INTEGER", "TEXT"), "type mismatch"),
        (NullViolationError("email"), "null"),
        (MissingPrimaryKeyValueError("id"), "primary key"),
        (PrimaryKeyConflictError("t"), "primary key conflict"),
        (EncodeError("bad"), "encode"),
        (DecodeError("bad"), "decode"),
        (DivisionByZeroError(), "divide by zero"),
        (ResourceLimitExceededError("scan rows", 2, 1), "resource limit"),
        (StatementTimedOutError(10), "timed out"),
        (StatementCanceledError("stop"), "canceled"),
        (UnsupportedPlanError("node"), "unsupported plan"),
    ],
)
def test_all_errors_are_caught_as_execution_errors(error, fragment):
    with pytest.raises(ExecutionError) as info:
        raise error
    assert info.value is error
    assert fragment in str(info.value).lower()


def test_null_violation_message_names_column():
    err = NullViolationError("email")
    assert err.column == "email"
    assert "NULL" in str(err) and "'email'" in str(err)