"""Sync executor: stage rows and merge them into a target table.

Each request runs on its own pooled connection inside one transaction:

    validate -> open connection -> begin -> create staging table
    -> bulk load -> merge statement -> drop staging -> commit

Any failure after the transaction begins rolls it back and is raised as a
typed error; a failed request never reports zero affected rows.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Iterable
from datetime import datetime
from typing import TYPE_CHECKING, Any, Optional, Protocol, Union, overload

from sqlalchemy.engine import Connection, RootTransaction

from tablesync.core.dialect import Dialect
from tablesync.core.loader import BulkLoader
from tablesync.exceptions import MergeError, StagingError, TableSyncError, TransactionError
from tablesync.models.results import SyncResult
from tablesync.models.table import TableSyncRequest

if TYPE_CHECKING:
    from tablesync.operators.sql.connector import SQLConnector

logger = logging.getLogger(__name__)


class TableSynchronizer(Protocol):
    """Capability set shared by every backend executor."""

    def apply(
        self, request: Union[TableSyncRequest, Iterable[TableSyncRequest]]
    ) -> Union[int, list[int]]:
        ...

    def apply_many(self, requests: Iterable[TableSyncRequest]) -> list[int]:
        ...


class SyncExecutor:
    """Backend-agnostic sync executor.

    Composes a connector (connections), a dialect (SQL text) and a bulk
    loader (staging writes). Backend adapters only choose the three parts.

    Examples:
        >>> executor = PostgresSyncExecutor({"connection_string": url})
        >>> executor.apply(request)
        2
        >>> executor.apply([insert_request, delete_request])
        [2, 1]
    """

    def __init__(
        self,
        connector: SQLConnector,
        dialect: Dialect,
        loader: BulkLoader,
        config: Optional[dict[str, Any]] = None,
    ):
        """Initialize sync executor.

        Args:
            connector: Connector providing scoped connections
            dialect: SQL generator for the connector's backend
            loader: Bulk loader for the connector's backend
            config: Optional executor configuration
        """
        self.connector = connector
        self.dialect = dialect
        self.loader = loader
        self.config = config or {}

    @overload
    def apply(self, request: TableSyncRequest) -> int:
        ...

    @overload
    def apply(self, request: Iterable[TableSyncRequest]) -> list[int]:
        ...

    def apply(self, request):
        """Apply one request, or each request of a sequence.

        Args:
            request: A TableSyncRequest, or an iterable of them

        Returns:
            Affected row count, or a list of counts in input order

        Raises:
            TableSyncError: Typed failure of the (first failing) request
        """
        if isinstance(request, TableSyncRequest):
            return self.run(request).rows_affected
        return self.apply_many(request)

    def apply_many(self, requests: Iterable[TableSyncRequest]) -> list[int]:
        """Apply requests sequentially, each in its own transaction.

        There is no batch-level atomicity: when request i fails, requests
        before it stay committed and the error propagates.

        Args:
            requests: Requests to apply

        Returns:
            Affected row counts in input order
        """
        return [self.run(request).rows_affected for request in requests]

    def run(self, request: TableSyncRequest) -> SyncResult:
        """Apply one request and report details.

        Args:
            request: Request to apply

        Returns:
            SyncResult for the committed transaction

        Raises:
            ValidationError: If the request is malformed (before any I/O),
                or a streamed row is malformed (after rollback)
            ConnectionError: If no connection can be opened
            StagingError: If staging table creation or bulk load fails
            MergeError: If the merge statement fails
            TransactionError: If begin, commit or rollback fails
        """
        request.validate_request()

        target = self.dialect.table_ref(request.table_name, request.schema_name)
        staging = self.dialect.staging_table_name(request.table_name)
        staging_ddl = self.dialect.build_staging_ddl(target, staging)
        merge_sql = self.dialect.build_merge_sql(
            request.operation, target, staging, request.columns
        )
        drop_sql = self.dialect.build_drop_staging_sql(staging)

        started_at = datetime.now()
        start = time.perf_counter()

        with self.connector.connection() as conn:
            transaction = self._begin(conn, request)
            try:
                rows_staged = self._stage(conn, request, staging, staging_ddl)
                rows_affected = self._merge(conn, request, merge_sql)
                if drop_sql is not None:
                    self._drop_staging(conn, request, staging, drop_sql)
            except BaseException:
                self._rollback(transaction, request)
                raise
            self._commit(transaction, request)

        completed_at = datetime.now()
        duration = time.perf_counter() - start

        logger.info(
            "%s %s: %d rows staged, %d rows affected in %.0f ms",
            request.operation.value,
            request.qualified_name,
            rows_staged,
            rows_affected,
            duration * 1000,
        )

        return SyncResult(
            table=request.qualified_name,
            operation=request.operation,
            staging_table=staging,
            rows_staged=rows_staged,
            rows_affected=rows_affected,
            started_at=started_at,
            completed_at=completed_at,
            duration_seconds=duration,
        )

    def _begin(self, conn: Connection, request: TableSyncRequest) -> RootTransaction:
        try:
            return conn.begin()
        except Exception as e:
            raise TransactionError(
                f"Failed to begin transaction for {request.qualified_name}: {e}"
            ) from e

    def _stage(
        self, conn: Connection, request: TableSyncRequest, staging: str, staging_ddl: str
    ) -> int:
        """Create the staging table and bulk-load the request rows into it."""
        try:
            logger.debug("Creating staging table %s for %s", staging, request.qualified_name)
            conn.exec_driver_sql(staging_ddl)
            return self.loader.load(conn, staging, request.columns, request.rows)
        except TableSyncError:
            raise
        except Exception as e:
            raise StagingError(
                f"Failed to stage rows for {request.qualified_name} in {staging}: {e}"
            ) from e

    def _merge(self, conn: Connection, request: TableSyncRequest, merge_sql: str) -> int:
        """Execute the merge statement and return the driver's row count."""
        logger.debug("Executing %s merge: %s", request.operation.value, merge_sql)
        try:
            result = conn.exec_driver_sql(merge_sql)
            rowcount = result.rowcount
        except Exception as e:
            raise MergeError(
                f"Failed to {request.operation.value} {request.qualified_name}: {e}"
            ) from e

        if rowcount is None or rowcount < 0:
            raise MergeError(
                f"Driver reported no row count for {request.operation.value} "
                f"on {request.qualified_name}"
            )
        return int(rowcount)

    def _drop_staging(
        self, conn: Connection, request: TableSyncRequest, staging: str, drop_sql: str
    ) -> None:
        try:
            conn.exec_driver_sql(drop_sql)
        except Exception as e:
            raise StagingError(
                f"Failed to drop staging table {staging} for {request.qualified_name}: {e}"
            ) from e

    def _commit(self, transaction: RootTransaction, request: TableSyncRequest) -> None:
        try:
            transaction.commit()
        except Exception as e:
            raise TransactionError(
                f"Failed to commit {request.operation.value} on {request.qualified_name}: {e}"
            ) from e

    def _rollback(self, transaction: RootTransaction, request: TableSyncRequest) -> None:
        logger.warning(
            "Rolling back %s on %s", request.operation.value, request.qualified_name
        )
        try:
            transaction.rollback()
        except Exception as e:
            raise TransactionError(
                f"Failed to roll back {request.operation.value} on {request.qualified_name}: {e}"
            ) from e
