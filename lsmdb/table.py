"""Column and table descriptors with schema validation."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from lsmdb.schema import ColumnType, DefaultValue


class ColumnValidationError(ValueError):
    """A column descriptor is malformed."""


class TableValidationError(ValueError):
    """A table descriptor is malformed; ``column`` names the offending column if any."""

    def __init__(self, message: str, column: Optional[str] = None) -> None:
        super().__init__(message)
        self.column = column


@dataclass
class ColumnDescriptor:
    """A column's name, type, nullability and optional default."""

    name: str
    column_type: ColumnType
    nullable: bool = False
    default: Optional[DefaultValue] = None

    def validate(self) -> None:
        """Raise ColumnValidationError if the column is malformed."""
        if not self.name.strip():
            raise ColumnValidationError("column name cannot be empty")
        if self.default is not None and not self.default.matches_type(self.column_type):
            raise ColumnValidationError("default value does not match declared column type")


@dataclass
class TableDescriptor:
    """A table's name, ordered columns and primary key columns."""

    name: str
    columns: list[ColumnDescriptor] = field(default_factory=list)
    primary_key: list[str] = field(default_factory=list)

    def validate(self) -> None:
        """Raise TableValidationError if the table is malformed."""
        if not self.name.strip():
            raise TableValidationError("table name cannot be empty")
        if not self.columns:
            raise TableValidationError("table must define at least one column")

        seen: set[str] = set()
        for column in self.columns:
            try:
                column.validate()
            except ColumnValidationError as err:
                raise TableValidationError(
                    f"invalid column '{column.name}': {err}", column.name
                ) from err
            if column.name in seen:
                raise TableValidationError(
                    f"column '{column.name}' is duplicated", column.name
                )
            seen.add(column.name)

        if not self.primary_key:
            raise TableValidationError("primary key must contain at least one column")

        for pk in self.primary_key:
            column = self.column(pk)
            if column is None:
                raise TableValidationError(
                    f"primary key column '{pk}' does not exist in table", pk
                )
            if column.nullable:
                raise TableValidationError(
                    f"primary key column '{pk}' cannot be nullable", pk
                )

    def column(self, name: str) -> Optional[ColumnDescriptor]:
        """Return the first column with the given name, or None."""
        return next((column for column in self.columns if column.name == name), None)