"""PostgreSQL COPY loader for high-performance staging loads."""

from __future__ import annotations

from collections.abc import Iterator, Sequence
from typing import Any, Optional

from sqlalchemy import text
from sqlalchemy.engine import Connection

from tablesync.core.config import config as settings
from tablesync.core.loader import BulkLoader
from tablesync.models.table import ColumnDefinition
from tablesync.operators.postgres.dialect import PostgresDialect

_STAGING_TYPES_SQL = """
SELECT attname, atttypid
FROM pg_attribute
WHERE attrelid = CAST(:relation AS regclass)
  AND attnum > 0
  AND NOT attisdropped
"""


class PostgresCopyLoader(BulkLoader):
    """PostgreSQL loader using COPY FROM STDIN.

    Streams rows with psycopg 3's COPY protocol on the driver connection
    behind the SQLAlchemy connection, so the load is part of the open
    transaction. Rows are written one at a time into the COPY stream; no
    INSERT statements are issued.

    Configuration options (via config):
    - copy_format: "binary" (default: TABLESYNC_COPY_FORMAT) or "text"

    In binary format the column types are read from the staging table's
    catalog entry, so Python values are dumped as exactly the types the
    table declares.
    """

    def __init__(self, config: Optional[dict[str, Any]] = None):
        """Initialize PostgreSQL COPY loader.

        Args:
            config: Optional loader configuration
                - copy_format: "binary" or "text"
        """
        super().__init__(config)
        self.copy_format = str(self.config.get("copy_format", settings.copy_format)).lower()
        if self.copy_format not in ("binary", "text"):
            raise ValueError(f"Unsupported COPY format: {self.copy_format}")
        self.dialect = PostgresDialect()

    def build_copy_sql(self, staging: str, columns: Sequence[ColumnDefinition]) -> str:
        """Build the COPY FROM STDIN statement for the staging table."""
        column_list = ", ".join(self.dialect.quote(c.name) for c in columns)
        return f"COPY {staging} ({column_list}) FROM STDIN (FORMAT {self.copy_format.upper()})"

    def _write_rows(
        self,
        conn: Connection,
        staging: str,
        columns: Sequence[ColumnDefinition],
        rows: Iterator[tuple],
    ) -> int:
        type_oids = (
            self._staging_type_oids(conn, staging, columns)
            if self.copy_format == "binary"
            else None
        )

        driver_conn = conn.connection.driver_connection
        written = 0
        with driver_conn.cursor() as cursor:
            with cursor.copy(self.build_copy_sql(staging, columns)) as copy:
                if type_oids is not None:
                    copy.set_types(type_oids)
                for row in rows:
                    copy.write_row(row)
                    written += 1
        return written

    def _staging_type_oids(
        self, conn: Connection, staging: str, columns: Sequence[ColumnDefinition]
    ) -> list[int]:
        """Look up the type OID of each staged column, in column order.

        Raises:
            ValueError: If a column does not exist in the staging table
        """
        result = conn.execute(text(_STAGING_TYPES_SQL), {"relation": staging})
        oids = {row.attname: int(row.atttypid) for row in result}

        names = [self.dialect.catalog_name(c.name) for c in columns]
        missing = [c.name for c, name in zip(columns, names) if name not in oids]
        if missing:
            raise ValueError(f"Columns not found in {staging}: {', '.join(missing)}")
        return [oids[name] for name in names]
