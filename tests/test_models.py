"""Tests for sync request models and the row contract."""

from datetime import date, datetime
from decimal import Decimal
from uuid import UUID

import pytest
from pydantic import ValidationError as PydanticValidationError

from tablesync.exceptions import TableSyncError, ValidationError
from tablesync.models import (
    ColumnDefinition,
    ColumnType,
    SyncOperation,
    SyncResult,
    TableSyncRequest,
    order_row,
)


def customer_columns():
    return [
        ColumnDefinition(name="id", primary_key=True),
        ColumnDefinition(name="name"),
        ColumnDefinition(name="email"),
    ]


def make_request(**overrides):
    values = {
        "schema_name": "poc",
        "table_name": "customer",
        "operation": "insert",
        "columns": customer_columns(),
        "rows": [{"id": 1, "name": "Alice", "email": "alice@example.com"}],
    }
    values.update(overrides)
    return TableSyncRequest(**values)


class TestSyncOperation:
    """Test operation parsing."""

    @pytest.mark.parametrize("raw", ["insert", "INSERT", " Insert ", "create", "Create"])
    def test_insert_aliases(self, raw):
        """Test that 'create' and mixed case map to insert."""
        assert make_request(operation=raw).operation is SyncOperation.INSERT

    def test_enum_value_accepted(self):
        """Test passing the enum member directly."""
        assert make_request(operation=SyncOperation.DELETE).operation is SyncOperation.DELETE

    def test_unknown_operation_rejected(self):
        """Test that an unknown operation raises the tablesync ValidationError."""
        with pytest.raises(ValidationError, match="Invalid sync request"):
            make_request(operation="upsert")

    def test_unknown_operation_is_table_sync_error(self):
        """Test that callers catching TableSyncError see construction failures."""
        with pytest.raises(TableSyncError):
            make_request(operation="merge")

    def test_requires_keys(self):
        """Test which operations correlate by key."""
        assert not SyncOperation.INSERT.requires_keys
        assert SyncOperation.UPDATE.requires_keys
        assert SyncOperation.DELETE.requires_keys


class TestTableSyncRequest:
    """Test request properties and validate_request()."""

    def test_valid_request(self):
        """Test that a well-formed request validates."""
        request = make_request()
        request.validate_request()

        assert request.qualified_name == "poc.customer"
        assert [c.name for c in request.key_columns] == ["id"]
        assert request.rows_materialized

    def test_qualified_name_without_schema(self):
        """Test display name when no schema is given."""
        assert make_request(schema_name=None).qualified_name == "customer"

    def test_empty_rows_is_valid(self):
        """Test that an empty row set is a valid request."""
        make_request(rows=[]).validate_request()

    def test_generator_rows_not_materialized(self):
        """Test that generator rows are accepted and left unconsumed."""
        consumed = []

        def rows():
            consumed.append(True)
            yield {"id": 1, "name": "Alice", "email": None}

        request = make_request(rows=rows())
        request.validate_request()

        assert not request.rows_materialized
        assert consumed == []

    def test_iterator_rows_single_pass(self):
        """Test that iterator rows refuse a second pass once streamed."""
        request = make_request(rows=iter([{"id": 1, "name": "Alice", "email": None}]))

        assert not request.rows_consumed
        assert [row["id"] for row in request.rows] == [1]
        assert request.rows_consumed

        with pytest.raises(ValidationError, match="already consumed"):
            iter(request.rows)
        with pytest.raises(ValidationError, match="already consumed"):
            request.validate_request()

    def test_list_rows_never_consumed(self):
        """Test that list rows can be iterated repeatedly."""
        request = make_request()
        list(request.rows)

        assert not request.rows_consumed
        request.validate_request()

    @pytest.mark.parametrize("rows", ["abc", b"abc", {"id": 1}, 42])
    def test_rows_must_be_iterable_of_rows(self, rows):
        """Test that strings, single mappings and scalars are rejected."""
        with pytest.raises(ValidationError):
            make_request(rows=rows)

    def test_empty_table_name(self):
        """Test empty table name."""
        with pytest.raises(ValidationError, match="Table name is empty"):
            make_request(table_name="  ").validate_request()

    def test_no_columns(self):
        """Test that at least one column is required."""
        with pytest.raises(ValidationError, match="at least one column"):
            make_request(columns=[], rows=[]).validate_request()

    def test_empty_column_name(self):
        """Test empty column name."""
        with pytest.raises(ValidationError, match="column name is empty"):
            make_request(columns=[ColumnDefinition(name="")], rows=[]).validate_request()

    def test_duplicate_column(self):
        """Test duplicate column names."""
        columns = [ColumnDefinition(name="id", primary_key=True), ColumnDefinition(name="id")]
        with pytest.raises(ValidationError, match="duplicate column 'id'"):
            make_request(columns=columns, rows=[]).validate_request()

    @pytest.mark.parametrize("operation", ["update", "delete"])
    def test_key_required_for_update_and_delete(self, operation):
        """Test that update/delete without a primary key are rejected."""
        columns = [ColumnDefinition(name="id"), ColumnDefinition(name="name")]
        request = make_request(operation=operation, columns=columns, rows=[])

        with pytest.raises(ValidationError, match="requires at least one primary-key column"):
            request.validate_request()

    def test_insert_without_key_is_valid(self):
        """Test that insert does not need a primary key."""
        columns = [ColumnDefinition(name="id"), ColumnDefinition(name="name")]
        make_request(columns=columns, rows=[{"id": 1, "name": "A"}]).validate_request()

    def test_update_requires_value_column(self):
        """Test that update with only key columns is rejected."""
        columns = [ColumnDefinition(name="id", primary_key=True)]
        request = make_request(operation="update", columns=columns, rows=[{"id": 1}])

        with pytest.raises(ValidationError, match="non-key column"):
            request.validate_request()

    def test_delete_with_only_keys_is_valid(self):
        """Test that delete needs no non-key column."""
        columns = [ColumnDefinition(name="id", primary_key=True)]
        make_request(operation="delete", columns=columns, rows=[{"id": 1}]).validate_request()

    def test_bad_materialized_row(self):
        """Test that a bad row in a list fails validation with its index."""
        rows = [
            {"id": 1, "name": "Alice", "email": None},
            {"id": 2, "name": "Bob"},
        ]
        with pytest.raises(ValidationError, match="Row 1"):
            make_request(rows=rows).validate_request()

    def test_request_is_frozen(self):
        """Test that requests are immutable."""
        request = make_request()
        with pytest.raises(PydanticValidationError):
            request.table_name = "other"

    def test_extra_fields_forbidden(self):
        """Test that unknown request fields are rejected."""
        with pytest.raises(ValidationError):
            make_request(mode="merge")


class TestOrderRow:
    """Test the row contract."""

    def test_orders_values_by_column(self):
        """Test that values come back in column order, not mapping order."""
        row = {"email": "a@example.com", "id": 7, "name": "Alice"}
        assert order_row(customer_columns(), row, 0) == (7, "Alice", "a@example.com")

    def test_none_values_allowed(self):
        """Test that None is accepted for any column."""
        row = {"id": 1, "name": None, "email": None}
        assert order_row(customer_columns(), row, 0) == (1, None, None)

    def test_not_a_mapping(self):
        """Test that tuples are not accepted as rows."""
        with pytest.raises(ValidationError, match="expected a mapping, got tuple"):
            order_row(customer_columns(), (1, "Alice", None), 3)

    def test_missing_key(self):
        """Test a row with a missing column."""
        with pytest.raises(ValidationError, match=r"missing columns \['email'\]"):
            order_row(customer_columns(), {"id": 1, "name": "Alice"}, 0)

    def test_extra_key(self):
        """Test a row with an unexpected column."""
        row = {"id": 1, "name": "Alice", "email": None, "phone": "555"}
        with pytest.raises(ValidationError, match=r"unexpected columns \['phone'\]"):
            order_row(customer_columns(), row, 0)

    def test_unsupported_value_type(self):
        """Test that values outside the scalar variant are rejected."""
        row = {"id": 1, "name": ["Alice"], "email": None}
        with pytest.raises(ValidationError, match="unsupported value type list"):
            order_row(customer_columns(), row, 0)

    def test_scalar_variant(self):
        """Test every supported scalar type passes untyped columns."""
        values = [
            1,
            1.5,
            Decimal("2.50"),
            "text",
            True,
            date(2024, 1, 1),
            datetime(2024, 1, 1, 12, 0),
            b"\x00\x01",
            UUID("12345678-1234-5678-1234-567812345678"),
        ]
        columns = [ColumnDefinition(name=f"c{i}") for i in range(len(values))]
        row = {f"c{i}": v for i, v in enumerate(values)}

        assert order_row(columns, row, 0) == tuple(values)

    def test_declared_type_mismatch(self):
        """Test that a value contradicting a declared dtype is rejected."""
        columns = [ColumnDefinition(name="id", primary_key=True, dtype="integer")]
        with pytest.raises(ValidationError, match="column 'id' expects integer, got str"):
            order_row(columns, {"id": "1"}, 0)


class TestColumnType:
    """Test declared column types."""

    @pytest.mark.parametrize(
        "dtype, value, expected",
        [
            (ColumnType.INTEGER, 1, True),
            (ColumnType.INTEGER, True, False),
            (ColumnType.INTEGER, 1.0, False),
            (ColumnType.FLOAT, 1, True),
            (ColumnType.FLOAT, 1.5, True),
            (ColumnType.DECIMAL, Decimal("1.5"), True),
            (ColumnType.DECIMAL, 1.5, False),
            (ColumnType.BOOLEAN, False, True),
            (ColumnType.BOOLEAN, 0, False),
            (ColumnType.DATE, date(2024, 1, 1), True),
            (ColumnType.DATE, datetime(2024, 1, 1), False),
            (ColumnType.DATETIME, datetime(2024, 1, 1), True),
            (ColumnType.BINARY, b"x", True),
            (ColumnType.UUID, "not-a-uuid", False),
            (ColumnType.STRING, None, True),
        ],
    )
    def test_accepts(self, dtype, value, expected):
        """Test value compatibility per type."""
        assert dtype.accepts(value) is expected

    def test_coerce(self):
        """Test text coercion per type."""
        assert ColumnType.INTEGER.coerce("42") == 42
        assert ColumnType.FLOAT.coerce("1.5") == 1.5
        assert ColumnType.DECIMAL.coerce("10.25") == Decimal("10.25")
        assert ColumnType.BOOLEAN.coerce("yes") is True
        assert ColumnType.BOOLEAN.coerce("F") is False
        assert ColumnType.DATE.coerce("2024-03-01") == date(2024, 3, 1)
        assert ColumnType.DATETIME.coerce("2024-03-01T10:30:00") == datetime(2024, 3, 1, 10, 30)
        assert ColumnType.BINARY.coerce("00ff") == b"\x00\xff"
        assert ColumnType.STRING.coerce("") == ""

    def test_coerce_empty_is_null(self):
        """Test that empty text is NULL for non-string types."""
        assert ColumnType.INTEGER.coerce("") is None
        assert ColumnType.DATE.coerce("") is None

    @pytest.mark.parametrize(
        "dtype, text",
        [
            (ColumnType.INTEGER, "abc"),
            (ColumnType.DECIMAL, "1.2.3"),
            (ColumnType.BOOLEAN, "maybe"),
            (ColumnType.UUID, "xyz"),
        ],
    )
    def test_coerce_invalid(self, dtype, text):
        """Test that unparsable text raises ValueError."""
        with pytest.raises(ValueError):
            dtype.coerce(text)

    def test_unknown_dtype_rejected(self):
        """Test that an unknown declared type raises the tablesync ValidationError."""
        with pytest.raises(ValidationError, match="Invalid column definition"):
            ColumnDefinition(name="id", dtype="money")


class TestSyncResult:
    """Test the result model."""

    def test_negative_counts_rejected(self):
        """Test that row counts cannot be negative."""
        now = datetime.now()
        with pytest.raises(PydanticValidationError):
            SyncResult(
                table="poc.customer",
                operation="insert",
                staging_table="customer__abc",
                rows_affected=-1,
                started_at=now,
                completed_at=now,
            )
