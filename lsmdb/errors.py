"""Errors raised while executing statements."""

from __future__ import annotations


class ExecutionError(Exception):
    """Base class for statement execution failures."""


class TableNotFoundError(ExecutionError):
    def __init__(self, table: str) -> None:
        super().__init__(f"table '{table}' not found")
        self.table = table


class ColumnNotFoundError(ExecutionError):
    def __init__(self, table: str, column: str) -> None:
        super().__init__(f"column '{column}' not found in table '{table}'")
        self.table = table
        self.column = column


class DuplicateColumnError(ExecutionError):
    def __init__(self, column: str) -> None:
        super().__init__(f"column '{column}' is duplicated in statement")
        self.column = column


class ColumnValueCountMismatchError(ExecutionError):
    def __init__(self, columns: int, values: int) -> None:
        super().__init__(f"column/value count mismatch: columns={columns}, values={values}")
        self.columns = columns
        self.values = values


class TypeMismatchError(ExecutionError):
    def __init__(self, column: str, expected: str, found: str) -> None:
        super().__init__(
            f"type mismatch for column '{column}': expected {expected}, found {found}"
        )
        self.column = column
        self.expected = expected
        self.found = found


class NullViolationError(ExecutionError):
    def __init__(self, column: str) -> None:
        super().__init__(f"NULL is not allowed for column '{column}'")
        self.column = column


class MissingPrimaryKeyValueError(ExecutionError):
    def __init__(self, column: str) -> None:
        super().__init__(f"missing primary key value for column '{column}'")
        self.column = column


class PrimaryKeyConflictError(ExecutionError):
    def __init__(self, table: str) -> None:
        super().__init__(f"primary key conflict on table '{table}'")
        self.table = table


class EncodeError(ExecutionError):
    def __init__(self, detail: str) -> None:
        super().__init__(f"failed to encode row: {detail}")
        self.detail = detail


class DecodeError(ExecutionError):
    def __init__(self, detail: str) -> None:
        super().__init__(f"failed to decode row: {detail}")
        self.detail = detail


class DivisionByZeroError(ExecutionError):
    def __init__(self) -> None:
        super().__init__("cannot divide by zero")


class ResourceLimitExceededError(ExecutionError):
    def __init__(self, resource: str, actual: int, limit: int) -> None:
        super().__init__(
            f"resource limit exceeded for {resource}: actual={actual}, limit={limit}"
        )
        self.resource = resource
        self.actual = actual
        self.limit = limit


class StatementTimedOutError(ExecutionError):
    def __init__(self, timeout_ms: int) -> None:
        super().__init__(f"statement timed out after {timeout_ms} ms")
        self.timeout_ms = timeout_ms


class StatementCanceledError(ExecutionError):
    def __init__(self, reason: str) -> None:
        super().__init__(f"statement canceled: {reason}")
        self.reason = reason


class UnsupportedPlanError(ExecutionError):
    def __init__(self, detail: str) -> None:
        super().__init__(f"unsupported plan: {detail}")
        self.detail = detail