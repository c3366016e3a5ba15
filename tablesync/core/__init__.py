"""tablesync core package.

This package contains the abstract base classes and the backend-agnostic
sync executor.
"""

from tablesync.core.connector import Connector
from tablesync.core.dialect import Dialect
from tablesync.core.executor import SyncExecutor, TableSynchronizer
from tablesync.core.loader import BulkLoader

__all__ = [
    "BulkLoader",
    "Connector",
    "Dialect",
    "SyncExecutor",
    "TableSynchronizer",
]
