"""PostgreSQL operator for tablesync.

This package provides PostgreSQL support: connection management, the
SQL dialect, the COPY staging loader and the executor that wires them.
"""

from tablesync.operators.postgres.connector import PostgresConnector
from tablesync.operators.postgres.copy_loader import PostgresCopyLoader
from tablesync.operators.postgres.dialect import PostgresDialect
from tablesync.operators.postgres.executor import PostgresSyncExecutor

__all__ = [
    "PostgresConnector",
    "PostgresCopyLoader",
    "PostgresDialect",
    "PostgresSyncExecutor",
]
