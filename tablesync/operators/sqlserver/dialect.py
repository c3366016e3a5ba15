"""SQL Server SQL generator."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Optional

from sqlalchemy.dialects import mssql
from sqlalchemy.engine.interfaces import Dialect as SQLAlchemyDialect

from tablesync.core.dialect import STAGING_ALIAS, TARGET_ALIAS, Dialect
from tablesync.models.table import ColumnDefinition


class SqlServerDialect(Dialect):
    """SQL Server dialect.

    The staging table is a '#' local temp table created with SELECT INTO
    inside the transaction: a rollback removes it, and it is dropped
    explicitly before commit so it never outlives the transaction on a
    pooled connection.

    Examples:
        >>> dialect = SqlServerDialect()
        >>> dialect.build_delete_sql("poc.customer", "#customer__1a2b", columns)
        'DELETE T FROM poc.customer AS T INNER JOIN #customer__1a2b AS S ON T.id = S.id'
    """

    name = "sqlserver"
    staging_prefix = "#"

    def _get_sqlalchemy_dialect(self) -> SQLAlchemyDialect:
        return mssql.dialect()

    def build_staging_ddl(self, target: str, staging: str) -> str:
        return f"SELECT TOP 0 * INTO {staging} FROM {target}"

    def build_update_sql(
        self, target: str, staging: str, columns: Sequence[ColumnDefinition]
    ) -> str:
        predicate = self._key_predicate(columns, "update")
        assignments = ", ".join(
            f"{TARGET_ALIAS}.{self.quote(c.name)} = {STAGING_ALIAS}.{self.quote(c.name)}"
            for c in self._value_columns(columns)
        )
        return (
            f"UPDATE {TARGET_ALIAS} SET {assignments} "
            f"FROM {target} AS {TARGET_ALIAS} "
            f"INNER JOIN {staging} AS {STAGING_ALIAS} ON {predicate}"
        )

    def build_delete_sql(
        self, target: str, staging: str, columns: Sequence[ColumnDefinition]
    ) -> str:
        predicate = self._key_predicate(columns, "delete")
        return (
            f"DELETE {TARGET_ALIAS} FROM {target} AS {TARGET_ALIAS} "
            f"INNER JOIN {staging} AS {STAGING_ALIAS} ON {predicate}"
        )

    def build_drop_staging_sql(self, staging: str) -> Optional[str]:
        return f"DROP TABLE {staging}"
