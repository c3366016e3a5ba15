"""SQL Server operator for tablesync.

This package provides SQL Server support: connection management, the
SQL dialect, the buffered bulk loader and the executor that wires them.
"""

from tablesync.operators.sqlserver.bulk_loader import SqlServerBulkLoader
from tablesync.operators.sqlserver.connector import SqlServerConnector
from tablesync.operators.sqlserver.dialect import SqlServerDialect
from tablesync.operators.sqlserver.executor import SqlServerSyncExecutor

__all__ = [
    "SqlServerBulkLoader",
    "SqlServerConnector",
    "SqlServerDialect",
    "SqlServerSyncExecutor",
]
