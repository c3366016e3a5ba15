"""PostgreSQL SQL generator."""

from __future__ import annotations

import re
from collections.abc import Sequence

from sqlalchemy.dialects import postgresql
from sqlalchemy.engine.interfaces import Dialect as SQLAlchemyDialect

from tablesync.core.dialect import STAGING_ALIAS, TARGET_ALIAS, Dialect
from tablesync.models.table import ColumnDefinition

_PLAIN_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_$]*$")


class PostgresDialect(Dialect):
    """PostgreSQL dialect.

    The staging table is a TEMP table created with ON COMMIT DROP, so it
    disappears with the transaction on both commit and rollback.

    Plain names are written unquoted, so the server folds them to lower
    case: a column declared as ``ID`` addresses the column ``id`` of a
    table created with ``CREATE TABLE customer (ID int ...)``. Reserved
    words and names with other characters are quoted and stay exact.

    Examples:
        >>> dialect = PostgresDialect()
        >>> dialect.build_delete_sql("poc.customer", "customer__1a2b", columns)
        'DELETE FROM poc.customer AS T USING customer__1a2b AS S WHERE T.ID = S.ID'
    """

    name = "postgres"

    def _get_sqlalchemy_dialect(self) -> SQLAlchemyDialect:
        return postgresql.dialect()

    def quote(self, identifier: str) -> str:
        if self._is_folded(identifier):
            return identifier
        return super().quote(identifier)

    def catalog_name(self, identifier: str) -> str:
        """Name under which the server stores an identifier in pg_catalog."""
        if self._is_folded(identifier):
            return identifier.lower()
        return identifier

    def _is_folded(self, identifier: str) -> bool:
        return (
            _PLAIN_IDENTIFIER.match(identifier) is not None
            and identifier.lower() not in self._preparer.reserved_words
        )

    def build_staging_ddl(self, target: str, staging: str) -> str:
        return f"CREATE TEMP TABLE {staging} ON COMMIT DROP AS SELECT * FROM {target} LIMIT 0"

    def build_update_sql(
        self, target: str, staging: str, columns: Sequence[ColumnDefinition]
    ) -> str:
        # SET targets cannot be alias-qualified in PostgreSQL
        predicate = self._key_predicate(columns, "update")
        assignments = ", ".join(
            f"{self.quote(c.name)} = {STAGING_ALIAS}.{self.quote(c.name)}"
            for c in self._value_columns(columns)
        )
        return (
            f"UPDATE {target} AS {TARGET_ALIAS} SET {assignments} "
            f"FROM {staging} AS {STAGING_ALIAS} WHERE {predicate}"
        )

    def build_delete_sql(
        self, target: str, staging: str, columns: Sequence[ColumnDefinition]
    ) -> str:
        predicate = self._key_predicate(columns, "delete")
        return (
            f"DELETE FROM {target} AS {TARGET_ALIAS} "
            f"USING {staging} AS {STAGING_ALIAS} WHERE {predicate}"
        )
