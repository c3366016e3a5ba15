"""Base Dialect abstract class.

A Dialect is the SQL generator for one backend: it turns a table reference,
a staging table reference and column definitions into the statements a sync
executor runs. Dialects are pure and deterministic; they never touch a
connection.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Sequence
from typing import Callable, Optional

from sqlalchemy.engine.interfaces import Dialect as SQLAlchemyDialect

from tablesync.core.staging import generate_staging_name
from tablesync.exceptions import ValidationError
from tablesync.models.table import ColumnDefinition, SyncOperation

TARGET_ALIAS = "T"
STAGING_ALIAS = "S"


class Dialect(ABC):
    """Base class for backend SQL generators.

    Identifiers are quoted with the SQLAlchemy dialect's identifier preparer,
    which only quotes names that need it (reserved words, upper-case or
    special characters); backends may override quote() to follow their
    own case rules. Staging table names are generated so that they never
    need quoting.

    Subclasses must implement:
    - _get_sqlalchemy_dialect(): SQLAlchemy dialect used for quoting
    - build_staging_ddl(): Create an empty, transaction-scoped staging table
    - build_update_sql(): Correlated update from the staging table
    - build_delete_sql(): Correlated delete using the staging table

    Examples:
        >>> dialect = PostgresDialect()
        >>> target = dialect.table_ref("customer", "poc")
        >>> staging = dialect.staging_table_name("customer")
        >>> dialect.build_merge_sql(SyncOperation.DELETE, target, staging, columns)
    """

    #: Backend tag, e.g. "postgres"
    name: str = ""

    #: Prefix that makes a table name temporary on this backend
    staging_prefix: str = ""

    def __init__(self) -> None:
        self._preparer = self._get_sqlalchemy_dialect().identifier_preparer

    @abstractmethod
    def _get_sqlalchemy_dialect(self) -> SQLAlchemyDialect:
        """Get the SQLAlchemy dialect whose quoting rules apply.

        Returns:
            SQLAlchemy dialect instance (no DBAPI needed)
        """
        pass

    def quote(self, identifier: str) -> str:
        """Quote a column or table identifier if required."""
        return self._preparer.quote(identifier)

    def table_ref(self, table_name: str, schema_name: Optional[str] = None) -> str:
        """Format a (possibly schema-qualified) target table reference.

        Args:
            table_name: Table name
            schema_name: Optional schema qualifier

        Returns:
            Quoted table reference, e.g. 'poc.customer'
        """
        if schema_name:
            return f"{self.quote(schema_name)}.{self.quote(table_name)}"
        return self.quote(table_name)

    def staging_table_name(self, table_name: str) -> str:
        """Generate a unique staging table name for a target table.

        Raises:
            ValidationError: If the table name is empty
        """
        if not table_name or not table_name.strip():
            raise ValidationError("Table name is empty")
        return generate_staging_name(table_name, self.staging_prefix)

    @abstractmethod
    def build_staging_ddl(self, target: str, staging: str) -> str:
        """Build DDL creating an empty staging table shaped like the target.

        The table must be scoped to the current session/transaction and be
        gone once the transaction ends.

        Args:
            target: Quoted target table reference
            staging: Staging table name

        Returns:
            SQL statement
        """
        pass

    def build_insert_sql(
        self, target: str, staging: str, columns: Sequence[ColumnDefinition]
    ) -> str:
        """Build INSERT ... SELECT from the staging table.

        Both column lists use declaration order, so each staged value lands
        in the column of the same name.

        Args:
            target: Quoted target table reference
            staging: Staging table name
            columns: Column definitions

        Returns:
            SQL statement
        """
        column_list = ", ".join(self.quote(c.name) for c in columns)
        return f"INSERT INTO {target} ({column_list}) SELECT {column_list} FROM {staging}"

    @abstractmethod
    def build_update_sql(
        self, target: str, staging: str, columns: Sequence[ColumnDefinition]
    ) -> str:
        """Build a correlated UPDATE setting every non-key column from staging.

        Raises:
            ValidationError: If there is no primary-key or no non-key column
        """
        pass

    @abstractmethod
    def build_delete_sql(
        self, target: str, staging: str, columns: Sequence[ColumnDefinition]
    ) -> str:
        """Build a correlated DELETE of target rows matching staged keys.

        Raises:
            ValidationError: If there is no primary-key column
        """
        pass

    def build_drop_staging_sql(self, staging: str) -> Optional[str]:
        """Build the statement removing the staging table before commit.

        Returns:
            SQL statement, or None when the backend drops it on commit
        """
        return None

    def build_merge_sql(
        self,
        operation: SyncOperation,
        target: str,
        staging: str,
        columns: Sequence[ColumnDefinition],
    ) -> str:
        """Build the merge statement selected by the operation.

        Raises:
            ValidationError: If the operation is not supported or the columns
                do not satisfy the operation's key rules
        """
        builders: dict[SyncOperation, Callable[..., str]] = {
            SyncOperation.INSERT: self.build_insert_sql,
            SyncOperation.UPDATE: self.build_update_sql,
            SyncOperation.DELETE: self.build_delete_sql,
        }
        try:
            builder = builders[SyncOperation(operation)]
        except (KeyError, ValueError):
            raise ValidationError(f"Unsupported operation: {operation!r}")
        return builder(target, staging, columns)

    def _key_predicate(self, columns: Sequence[ColumnDefinition], operation: str) -> str:
        """Join predicate over every primary-key column, ANDed in declaration order."""
        keys = [c for c in columns if c.primary_key]
        if not keys:
            raise ValidationError(f"{operation} requires at least one primary-key column")
        return " AND ".join(
            f"{TARGET_ALIAS}.{self.quote(c.name)} = {STAGING_ALIAS}.{self.quote(c.name)}"
            for c in keys
        )

    def _value_columns(self, columns: Sequence[ColumnDefinition]) -> list[ColumnDefinition]:
        values = [c for c in columns if not c.primary_key]
        if not values:
            raise ValidationError("update requires at least one non-key column")
        return values
