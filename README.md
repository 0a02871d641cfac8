# lsmdb

The relational layer of a small LSM-tree database, as a library. It
describes tables and checks that their definitions are sound, coerces
values to column types, turns rows into compact byte payloads and storage
keys, and runs the query operators that sit above a key-value store:
filtering, projection, sorting, limiting and nested-loop joins. Every
operator runs under resource limits and can be stopped by a timeout or a
cancellation request.

The package has no runtime dependencies and needs Python 3.10 or later.

## Installation

```
pip install .
```

To run the test suite:

```
pip install ".[test]"
pytest
```

## A short tour

```python
from lsmdb.schema import ColumnType, DefaultValue
from lsmdb.table import ColumnDescriptor, TableDescriptor
from lsmdb.rows import build_row_key, coerce_row_for_table, decode_row, encode_row
from lsmdb.values import ExecutionContext, RowSet, ScalarKind, ScalarValue
from lsmdb.expressions import Binary, BinaryOp, Identifier, Literal, apply_filter

users = TableDescriptor(
    name="users",
    columns=[
        ColumnDescriptor("id", ColumnType.BIGINT),
        ColumnDescriptor(
            "active", ColumnType.BOOLEAN, default=DefaultValue(ColumnType.BOOLEAN, True)
        ),
    ],
    primary_key=["id"],
)
users.validate()  # raises TableValidationError if the definition is unsound

row = coerce_row_for_table(users, {"id": ScalarValue(ScalarKind.BIGINT, 1)})
payload = encode_row(users, row)      # bytes
assert decode_row(users, payload) == row
key = build_row_key(users, row)       # b"__data__/tables/users/rows/..."

rows = RowSet(columns=["id", "active"], rows=[row], table_name="users")
matched = apply_filter(
    rows, Binary(Identifier("id"), BinaryOp.EQUAL, Literal(1)), ExecutionContext()
)
result = matched.into_query_result(ExecutionContext())
```

## What is inside

| Module | Contents |
| --- | --- |
| `lsmdb.schema` | `ColumnType` (the SQL column types, with `as_sql()`) and `DefaultValue` (a typed column default, with `matches_type`). |
| `lsmdb.table` | `ColumnDescriptor` and `TableDescriptor` with `validate()`, and `TableDescriptor.column(name)`. Errors are `ColumnValidationError` and `TableValidationError`. |
| `lsmdb.errors` | `ExecutionError` and its subclasses: `TableNotFoundError`, `ColumnNotFoundError`, `DuplicateColumnError`, `ColumnValueCountMismatchError`, `TypeMismatchError`, `NullViolationError`, `MissingPrimaryKeyValueError`, `PrimaryKeyConflictError`, `EncodeError`, `DecodeError`, `DivisionByZeroError`, `ResourceLimitExceededError`, `StatementTimedOutError`, `StatementCanceledError` and `UnsupportedPlanError`. |
| `lsmdb.governance` | `StatementCancellation`, `StatementDeadline`, `CancellationReason` and `ExecutionGovernance`. Operators call `checkpoint()`, which raises once a statement has been canceled or its deadline has passed. |
| `lsmdb.values` | `ScalarValue` and `ScalarKind` (a typed SQL value, or NULL), `ExecutionLimits`, `ExecutionContext`, `RowSet`, `QueryResult`, `literal_to_scalar` and `default_to_scalar`. |
| `lsmdb.expressions` | The expression tree (`Identifier`, `CompoundIdentifier`, `Literal`, `Unary`, `Binary`, with `UnaryOp` and `BinaryOp`) and its evaluation: `evaluate_expr`, `evaluate_predicate`, `evaluate_const_expr` and `apply_filter`. |
| `lsmdb.rows` | `literal_to_default`, value coercion (`coerce_scalar_for_column`, `coerce_row_for_table`), the binary row format (`encode_row`, `decode_row`) and storage keys (`table_rows_prefix`, `build_row_key`). |
| `lsmdb.projection` | `apply_projection`, `apply_sort` and `apply_limit`, together with `Wildcard`, `SelectExpr`, `OrderByExpr` and `SortDirection`. |
| `lsmdb.join` | `execute_join`, a nested-loop join with a predicate. |

## Semantics worth knowing

- Boolean logic is three-valued. `FALSE AND NULL` is `FALSE`,
  `TRUE OR NULL` is `TRUE`, and any other combination with NULL gives NULL.
  A predicate that evaluates to NULL filters its row out; one that gives a
  non-boolean value raises `TypeMismatchError`.
- Integer addition, subtraction and multiplication saturate at the 64-bit
  bounds instead of overflowing, and produce a `BIGINT`. Division, and any
  arithmetic with a float operand, produces a `FLOAT`. Dividing by zero
  raises `DivisionByZeroError`.
- Literals are plain Python values: `None`, `bool`, `int` (a `BIGINT`),
  `float` and `str`.
- A projection of a single `Wildcard` returns its input unchanged. A
  computed select item that is not a column reference is named
  `expr_<index>`.
- Sorting is stable, and NULLs come after every other value in ascending
  order. A negative limit raises `ValueError`.
- In a join, right-hand columns whose names clash with left-hand ones are
  qualified with the right table's name, or with `right` when it has none.
- A row is stored under `__data__/tables/<table>/rows/` followed by its
  primary-key components. Each component is written with a two-byte
  big-endian length prefix.
- In the row payload, every column starts with a null marker byte. Integers
  and floats are stored big-endian, booleans as one byte, and text and blobs
  carry a four-byte length prefix.
- `ExecutionLimits` are unlimited by default. A limit that is exceeded
  raises `ResourceLimitExceededError`, which names the resource (for example
  `join rows`), the actual count and the limit.
- `StatementDeadline.after` and `ExecutionGovernance.with_timeout` take a
  `timedelta` or a number of seconds.

## What this package does not do

It is the relational layer only. It has no key-value store or storage
engine, no write-ahead log, no transactions, and no catalog that persists
table definitions: the payloads and keys it builds are bytes for the caller
to store. It has no SQL parser or query planner, so expressions and
operator pipelines are built in Python, and it provides no server and no
command-line tool.