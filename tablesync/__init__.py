"""tablesync - Bulk table sync through transaction-scoped staging tables."""

__version__ = "0.1.0"

# Re-export key models for convenience
from tablesync.models import (
    ColumnDefinition,
    ColumnType,
    SyncOperation,
    SyncResult,
    TableSyncRequest,
)

# Re-export core classes for custom backends
from tablesync.core import BulkLoader, Connector, Dialect, SyncExecutor, TableSynchronizer

# Re-export the error hierarchy
from tablesync.exceptions import (
    ConfigurationError,
    ConnectionError,
    MergeError,
    StagingError,
    TableSyncError,
    TransactionError,
    ValidationError,
)

# Backend selection
from tablesync.operators import get_dialect, get_executor

__all__ = [
    # Version
    "__version__",
    # Models
    "ColumnDefinition",
    "ColumnType",
    "SyncOperation",
    "SyncResult",
    "TableSyncRequest",
    # Core
    "BulkLoader",
    "Connector",
    "Dialect",
    "SyncExecutor",
    "TableSynchronizer",
    # Errors
    "ConfigurationError",
    "ConnectionError",
    "MergeError",
    "StagingError",
    "TableSyncError",
    "TransactionError",
    "ValidationError",
    # Backends
    "get_dialect",
    "get_executor",
]
