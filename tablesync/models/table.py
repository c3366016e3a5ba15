"""Table sync request models.

This module defines the unit of work handed to a sync executor: the target
table, its column/key layout, the operation to apply and the rows to stage.
It also owns the row contract shared by every bulk loader.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping, Sequence
from datetime import date, datetime, time
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, Optional, Union
from uuid import UUID

from pydantic import BaseModel, Field as PydanticField, field_validator
from pydantic import ValidationError as PydanticValidationError

from tablesync.exceptions import ValidationError

ScalarValue = Union[int, float, Decimal, str, bool, None, date, datetime, time, bytes, UUID]
Row = Mapping[str, ScalarValue]

_SCALAR_TYPES = (int, float, Decimal, str, bool, date, datetime, time, bytes, bytearray, UUID)


class SyncOperation(str, Enum):
    """Operation applied to the target table from the staged rows."""

    INSERT = "insert"
    UPDATE = "update"
    DELETE = "delete"

    @property
    def requires_keys(self) -> bool:
        """Whether the merge statement correlates staged rows by primary key."""
        return self is not SyncOperation.INSERT


class ColumnType(str, Enum):
    """Closed set of value types a column definition may declare.

    Declaring a type is optional. When declared, every staged value is
    checked against it, and text sources (CSV) are coerced into it.
    """

    INTEGER = "integer"
    FLOAT = "float"
    DECIMAL = "decimal"
    STRING = "string"
    BOOLEAN = "boolean"
    DATE = "date"
    DATETIME = "datetime"
    TIME = "time"
    BINARY = "binary"
    UUID = "uuid"

    def accepts(self, value: Any) -> bool:
        """Check whether a Python value is compatible with this type.

        None is accepted for every type.
        """
        if value is None:
            return True
        if self is ColumnType.INTEGER:
            return isinstance(value, int) and not isinstance(value, bool)
        if self is ColumnType.FLOAT:
            return isinstance(value, (int, float)) and not isinstance(value, bool)
        if self is ColumnType.DECIMAL:
            return isinstance(value, (Decimal, int)) and not isinstance(value, bool)
        if self is ColumnType.STRING:
            return isinstance(value, str)
        if self is ColumnType.BOOLEAN:
            return isinstance(value, bool)
        if self is ColumnType.DATE:
            return isinstance(value, date) and not isinstance(value, datetime)
        if self is ColumnType.DATETIME:
            return isinstance(value, datetime)
        if self is ColumnType.TIME:
            return isinstance(value, time)
        if self is ColumnType.BINARY:
            return isinstance(value, (bytes, bytearray))
        return isinstance(value, UUID)

    def coerce(self, text: Optional[str]) -> ScalarValue:
        """Convert a text value (e.g. a CSV cell) into this type.

        Empty strings become None for every type except STRING.

        Raises:
            ValueError: If the text cannot be parsed
        """
        if text is None:
            return None
        if text == "" and self is not ColumnType.STRING:
            return None
        if self is ColumnType.INTEGER:
            return int(text)
        if self is ColumnType.FLOAT:
            return float(text)
        if self is ColumnType.DECIMAL:
            try:
                return Decimal(text)
            except InvalidOperation:
                raise ValueError(f"Invalid decimal: {text!r}")
        if self is ColumnType.STRING:
            return text
        if self is ColumnType.BOOLEAN:
            lowered = text.strip().lower()
            if lowered in ("true", "t", "1", "yes", "y"):
                return True
            if lowered in ("false", "f", "0", "no", "n"):
                return False
            raise ValueError(f"Invalid boolean: {text!r}")
        if self is ColumnType.DATE:
            return date.fromisoformat(text)
        if self is ColumnType.DATETIME:
            return datetime.fromisoformat(text)
        if self is ColumnType.TIME:
            return time.fromisoformat(text)
        if self is ColumnType.BINARY:
            return bytes.fromhex(text)
        return UUID(text)


class ColumnDefinition(BaseModel):
    """A column of the target table that the request supplies values for.

    Examples:
        >>> ColumnDefinition(name="id", primary_key=True)
        >>> ColumnDefinition(name="amount", dtype="decimal")
    """

    name: str = PydanticField(
        ...,
        description="Column name in the target table",
    )

    primary_key: bool = PydanticField(
        False,
        description="Whether the column takes part in the update/delete join predicate",
    )

    dtype: Optional[ColumnType] = PydanticField(
        None,
        description="Optional declared value type, checked for every staged value",
    )

    model_config = {"extra": "forbid", "frozen": True}

    def __init__(self, **data: Any) -> None:
        try:
            super().__init__(**data)
        except PydanticValidationError as e:
            raise ValidationError(f"Invalid column definition: {e}") from e


class RowStream:
    """Single-pass wrapper around an iterator-backed row source.

    Generators and file readers cannot be rewound, so the rows of such a
    request can be staged once. A second pass is refused instead of
    silently staging nothing.
    """

    def __init__(self, source: Iterable[Any]):
        self._source = source
        self.consumed = False

    def __iter__(self) -> Iterator[Any]:
        if self.consumed:
            raise ValidationError("Rows have already been consumed by an earlier apply")
        self.consumed = True
        return iter(self._source)


class TableSyncRequest(BaseModel):
    """Unit of work for a sync executor.

    ``rows`` may be a list/tuple of row mappings, which is validated in full
    before any connection is opened, or any other iterable of row mappings
    (a generator, a file reader), which is validated row by row while it is
    streamed into the staging table. An iterator-backed request can be
    applied once; applying it again raises ValidationError before any
    connection is opened.

    Invalid field values (an unknown operation, rows that are a single
    mapping, unknown fields) raise tablesync's ValidationError, so callers
    can catch every request error as a TableSyncError.

    Examples:
        >>> request = TableSyncRequest(
        ...     schema_name="poc",
        ...     table_name="customer",
        ...     operation="delete",
        ...     columns=[ColumnDefinition(name="id", primary_key=True)],
        ...     rows=[{"id": 1}],
        ... )
    """

    schema_name: Optional[str] = PydanticField(
        None,
        description="Schema qualifier of the target table (search path/default schema if omitted)",
    )

    table_name: str = PydanticField(
        ...,
        description="Target table name",
    )

    operation: SyncOperation = PydanticField(
        ...,
        description="Operation to apply: 'insert', 'update' or 'delete'",
    )

    columns: list[ColumnDefinition] = PydanticField(
        default_factory=list,
        description="Columns supplied by every row, in target-column order",
    )

    rows: Any = PydanticField(
        default_factory=list,
        description="Rows to stage: a list of mappings or an iterable producing them",
    )

    model_config = {"extra": "forbid", "frozen": True}

    def __init__(self, **data: Any) -> None:
        try:
            super().__init__(**data)
        except PydanticValidationError as e:
            raise ValidationError(f"Invalid sync request: {e}") from e

    @field_validator("operation", mode="before")
    @classmethod
    def normalize_operation(cls, v: Any) -> Any:
        """Accept operation names case-insensitively, with 'create' as an insert alias."""
        if isinstance(v, str) and not isinstance(v, SyncOperation):
            lowered = v.strip().lower()
            return "insert" if lowered == "create" else lowered
        return v

    @field_validator("rows")
    @classmethod
    def validate_rows_container(cls, v: Any) -> Any:
        """Ensure rows is an iterable of rows rather than a single row or string."""
        if isinstance(v, (str, bytes, Mapping)) or not isinstance(v, Iterable):
            raise ValueError("rows must be a list of row mappings or an iterable producing them")
        if isinstance(v, (Sequence, RowStream)):
            return v
        return RowStream(v)

    @property
    def key_columns(self) -> list[ColumnDefinition]:
        """Primary-key columns in declaration order."""
        return [c for c in self.columns if c.primary_key]

    @property
    def rows_consumed(self) -> bool:
        """Whether iterator-backed rows were already streamed by an apply."""
        return isinstance(self.rows, RowStream) and self.rows.consumed

    @property
    def rows_materialized(self) -> bool:
        """Whether rows were supplied as a re-iterable sequence."""
        return isinstance(self.rows, Sequence)

    @property
    def qualified_name(self) -> str:
        """Unquoted display name, e.g. 'poc.customer'."""
        if self.schema_name:
            return f"{self.schema_name}.{self.table_name}"
        return self.table_name

    def validate_request(self) -> None:
        """Check the request contract without touching a database.

        Raises:
            ValidationError: If the table name is empty, columns are missing,
                empty or duplicated, update/delete has no primary-key column,
                update has no non-key column, iterator-backed rows were
                already consumed, or a materialized row breaks the row
                contract
        """
        if not self.table_name or not self.table_name.strip():
            raise ValidationError("Table name is empty")

        if not self.columns:
            raise ValidationError(f"Table '{self.qualified_name}': at least one column is required")

        seen: set[str] = set()
        for column in self.columns:
            if not column.name or not column.name.strip():
                raise ValidationError(f"Table '{self.qualified_name}': column name is empty")
            if column.name in seen:
                raise ValidationError(
                    f"Table '{self.qualified_name}': duplicate column '{column.name}'"
                )
            seen.add(column.name)

        if self.operation.requires_keys and not self.key_columns:
            raise ValidationError(
                f"Table '{self.qualified_name}': {self.operation.value} requires at least "
                "one primary-key column"
            )

        if self.operation is SyncOperation.UPDATE and all(c.primary_key for c in self.columns):
            raise ValidationError(
                f"Table '{self.qualified_name}': update requires at least one non-key column"
            )

        if self.rows_consumed:
            raise ValidationError(
                f"Table '{self.qualified_name}': rows were already consumed by an earlier "
                "apply; build a new request or pass a list to apply it again"
            )

        if self.rows_materialized:
            for index, row in enumerate(self.rows):
                order_row(self.columns, row, index)


def order_row(columns: Sequence[ColumnDefinition], row: Any, index: int) -> tuple:
    """Validate a row against the column definitions and order its values.

    Args:
        columns: Column definitions in staging order
        row: Row mapping (column name -> scalar value)
        index: Zero-based position of the row in its source, for messages

    Returns:
        Tuple of values in column order

    Raises:
        ValidationError: If the row is not a mapping, has missing or extra
            keys, or holds a value outside the supported scalar types or
            incompatible with a declared column type
    """
    if not isinstance(row, Mapping):
        raise ValidationError(f"Row {index}: expected a mapping, got {type(row).__name__}")

    if len(row) != len(columns) or any(c.name not in row for c in columns):
        expected = {c.name for c in columns}
        missing = sorted(expected - set(row))
        extra = sorted(str(k) for k in set(row) - expected)
        raise ValidationError(f"Row {index}: missing columns {missing}, unexpected columns {extra}")

    values = []
    for column in columns:
        value = row[column.name]
        if value is not None and not isinstance(value, _SCALAR_TYPES):
            raise ValidationError(
                f"Row {index}: column '{column.name}' has unsupported value type "
                f"{type(value).__name__}"
            )
        if column.dtype is not None and not column.dtype.accepts(value):
            raise ValidationError(
                f"Row {index}: column '{column.name}' expects {column.dtype.value}, "
                f"got {type(value).__name__}"
            )
        values.append(value)
    return tuple(values)
