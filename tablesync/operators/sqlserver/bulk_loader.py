"""SQL Server bulk loader using buffered array inserts."""

from __future__ import annotations

from collections.abc import Iterator, Sequence
from itertools import islice
from typing import Any, Optional

from sqlalchemy.engine import Connection

from tablesync.core.config import config as settings
from tablesync.core.loader import BulkLoader
from tablesync.models.table import ColumnDefinition
from tablesync.operators.sqlserver.dialect import SqlServerDialect


class SqlServerBulkLoader(BulkLoader):
    """SQL Server loader sending row buffers through pyodbc fast_executemany.

    Rows are collected into buffers of batch_size and each buffer is sent
    as a single parameter array (one executemany per buffer) on the
    caller's connection, so the writes belong to the open transaction.

    Configuration options (via config):
    - batch_size: Rows per buffer (default: TABLESYNC_BULK_BATCH_SIZE)
    """

    def __init__(self, config: Optional[dict[str, Any]] = None):
        """Initialize SQL Server bulk loader.

        Args:
            config: Optional loader configuration
                - batch_size: Rows per buffer
        """
        super().__init__(config)
        self.batch_size = int(self.config.get("batch_size", settings.bulk_batch_size))
        if self.batch_size < 1:
            raise ValueError(f"batch_size must be >= 1, got {self.batch_size}")
        self.dialect = SqlServerDialect()

    def build_insert_sql(self, staging: str, columns: Sequence[ColumnDefinition]) -> str:
        """Build the parameterized INSERT used for every buffer."""
        column_list = ", ".join(self.dialect.quote(c.name) for c in columns)
        placeholders = ", ".join("?" for _ in columns)
        return f"INSERT INTO {staging} ({column_list}) VALUES ({placeholders})"

    def _write_rows(
        self,
        conn: Connection,
        staging: str,
        columns: Sequence[ColumnDefinition],
        rows: Iterator[tuple],
    ) -> int:
        insert_sql = self.build_insert_sql(staging, columns)
        written = 0
        while True:
            batch = list(islice(rows, self.batch_size))
            if not batch:
                break
            conn.exec_driver_sql(insert_sql, batch)
            written += len(batch)
        return written
