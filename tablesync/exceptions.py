"""tablesync exception hierarchy.

Errors raised after a transaction has begun are always raised after the
transaction was rolled back. The driver error that caused them is chained
as ``__cause__``.
"""

from __future__ import annotations


class TableSyncError(Exception):
    """Base exception for all tablesync errors."""

    pass


class ConfigurationError(TableSyncError):
    """Raised when configuration is invalid or missing."""

    pass


class ConnectionError(TableSyncError):
    """Raised when a connection to the database cannot be opened."""

    pass


class ValidationError(TableSyncError):
    """Raised when a sync request or one of its rows is malformed.

    Never retried. When raised for an eagerly validated request, no
    connection has been opened.
    """

    pass


class ConnectorError(TableSyncError):
    """Raised when an ad-hoc query or statement on a connector fails."""

    pass


class StagingError(TableSyncError):
    """Raised when the staging table cannot be created or bulk-loaded."""

    pass


class MergeError(TableSyncError):
    """Raised when the insert/update/delete merge statement fails."""

    pass


class TransactionError(TableSyncError):
    """Raised when commit or rollback itself fails."""

    pass
