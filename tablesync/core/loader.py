"""Base BulkLoader abstract class.

This module defines the BulkLoader interface for streaming rows into a
staging table through a backend's bulk-ingestion channel.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Iterable, Iterator, Sequence
from typing import Any, Optional

from sqlalchemy.engine import Connection

from tablesync.models.table import ColumnDefinition, order_row

logger = logging.getLogger(__name__)


class BulkLoader(ABC):
    """Base class for loading rows into a staging table.

    Loaders write on the caller's connection, inside the caller's
    transaction, and never commit. Every row is checked against the row
    contract as it is streamed; the first bad row or driver fault is raised
    immediately so the caller can roll back.

    Examples:
        >>> loader = PostgresCopyLoader()
        >>> with engine.connect() as conn, conn.begin():
        ...     conn.execute(text(dialect.build_staging_ddl(target, staging)))
        ...     written = loader.load(conn, staging, request.columns, request.rows)
    """

    def __init__(self, config: Optional[dict[str, Any]] = None):
        """Initialize loader with configuration.

        Args:
            config: Optional loader-specific configuration
        """
        self.config = config or {}

    def load(
        self,
        conn: Connection,
        staging: str,
        columns: Sequence[ColumnDefinition],
        rows: Iterable[Any],
    ) -> int:
        """Stream rows into the staging table.

        Args:
            conn: SQLAlchemy connection with an open transaction
            staging: Staging table name
            columns: Column definitions, in the order values are written
            rows: Row mappings

        Returns:
            Number of rows written

        Raises:
            ValidationError: If a row breaks the row contract
            Exception: Any driver error, unchanged
        """
        ordered = self._ordered_rows(columns, rows)
        written = self._write_rows(conn, staging, columns, ordered)
        logger.debug("Bulk-loaded %d rows into %s", written, staging)
        return written

    @staticmethod
    def _ordered_rows(
        columns: Sequence[ColumnDefinition], rows: Iterable[Any]
    ) -> Iterator[tuple]:
        for index, row in enumerate(rows):
            yield order_row(columns, row, index)

    @abstractmethod
    def _write_rows(
        self,
        conn: Connection,
        staging: str,
        columns: Sequence[ColumnDefinition],
        rows: Iterator[tuple],
    ) -> int:
        """Write ordered value tuples through the backend bulk channel.

        Args:
            conn: SQLAlchemy connection with an open transaction
            staging: Staging table name
            columns: Column definitions matching the tuple positions
            rows: Value tuples in column order

        Returns:
            Number of rows written
        """
        pass
