"""SQL Server sync executor."""

from __future__ import annotations

from typing import Any, Optional

from tablesync.core.executor import SyncExecutor
from tablesync.operators.sqlserver.bulk_loader import SqlServerBulkLoader
from tablesync.operators.sqlserver.connector import SqlServerConnector
from tablesync.operators.sqlserver.dialect import SqlServerDialect


class SqlServerSyncExecutor(SyncExecutor):
    """Sync executor for SQL Server.

    Stages rows in a '#' temp table through buffered array inserts.
    """

    def __init__(
        self,
        connector: Optional[SqlServerConnector] = None,
        config: Optional[dict[str, Any]] = None,
    ):
        """Initialize SQL Server executor.

        Args:
            connector: Connector to use (built from config if omitted)
            config: Connector and loader configuration (connection keys,
                batch_size)
        """
        config = config or {}
        super().__init__(
            connector or SqlServerConnector(config),
            SqlServerDialect(),
            SqlServerBulkLoader(config),
            config,
        )
