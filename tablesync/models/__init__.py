"""tablesync models package.

This package contains the Pydantic models that describe sync requests
and their results.
"""

from tablesync.models.results import SyncResult
from tablesync.models.table import (
    ColumnDefinition,
    ColumnType,
    Row,
    RowStream,
    ScalarValue,
    SyncOperation,
    TableSyncRequest,
    order_row,
)

__all__ = [
    # Request models
    "ColumnDefinition",
    "ColumnType",
    "Row",
    "RowStream",
    "ScalarValue",
    "SyncOperation",
    "TableSyncRequest",
    "order_row",
    # Result models
    "SyncResult",
]
