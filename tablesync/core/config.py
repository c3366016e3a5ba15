"""tablesync configuration management.

This module centralizes all configuration loading from environment variables
and provides sensible defaults. All modules should import configuration
values from here rather than reading environment variables directly.

Environment Variables:
    TABLESYNC_LOG_LEVEL: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
                         Default: INFO

    TABLESYNC_LOG_FORMAT: Log output format (text, json)
                          Default: text

    TABLESYNC_POSTGRES_URL: SQLAlchemy URL used by the PostgreSQL backend
                            when no connection string is passed explicitly
                            Default: unset

    TABLESYNC_SQLSERVER_URL: SQLAlchemy URL used by the SQL Server backend
                             when no connection string is passed explicitly
                             Default: unset

    TABLESYNC_COPY_FORMAT: PostgreSQL COPY format for staging loads
                           Options: binary, text
                           Default: binary

    TABLESYNC_BULK_BATCH_SIZE: Rows per bulk buffer sent to SQL Server
                               Default: 10000

    TABLESYNC_CONNECTION_TIMEOUT: Connection timeout in seconds
                                  Default: 30

    TABLESYNC_ECHO_SQL: Echo every SQL statement through SQLAlchemy
                        Default: false
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Optional


def _get_bool(key: str, default: bool) -> bool:
    """Get boolean from environment variable."""
    value = os.environ.get(key, "").lower()
    if not value:
        return default
    return value in ("true", "1", "yes", "on")


def _get_int(key: str, default: int) -> int:
    """Get integer from environment variable."""
    value = os.environ.get(key, "")
    if not value:
        return default
    try:
        return int(value)
    except ValueError:
        return default


def _get_str(key: str, default: str) -> str:
    """Get string from environment variable."""
    return os.environ.get(key, default)


def _get_optional_str(key: str) -> Optional[str]:
    value = os.environ.get(key, "")
    return value or None


@dataclass
class TableSyncConfig:
    """tablesync configuration container.

    All configuration values are loaded from environment variables
    with sensible defaults.

    Usage:
        from tablesync.core.config import config

        batch_size = config.bulk_batch_size
        url = config.connection_url("postgres")
    """

    # Logging Configuration
    log_level: str = field(default_factory=lambda: _get_str("TABLESYNC_LOG_LEVEL", "INFO").upper())
    log_format: str = field(default_factory=lambda: _get_str("TABLESYNC_LOG_FORMAT", "text"))

    # Connection Configuration
    postgres_url: Optional[str] = field(default_factory=lambda: _get_optional_str("TABLESYNC_POSTGRES_URL"))
    sqlserver_url: Optional[str] = field(default_factory=lambda: _get_optional_str("TABLESYNC_SQLSERVER_URL"))
    connection_timeout: int = field(default_factory=lambda: _get_int("TABLESYNC_CONNECTION_TIMEOUT", 30))
    echo_sql: bool = field(default_factory=lambda: _get_bool("TABLESYNC_ECHO_SQL", False))

    # Bulk Load Configuration
    copy_format: str = field(default_factory=lambda: _get_str("TABLESYNC_COPY_FORMAT", "binary").lower())
    bulk_batch_size: int = field(default_factory=lambda: _get_int("TABLESYNC_BULK_BATCH_SIZE", 10000))

    def __post_init__(self):
        """Validate configuration after initialization."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if self.log_level not in valid_levels:
            raise ValueError(
                f"Invalid TABLESYNC_LOG_LEVEL: {self.log_level}. "
                f"Must be one of: {valid_levels}"
            )

        valid_formats = {"text", "json"}
        if self.log_format not in valid_formats:
            raise ValueError(
                f"Invalid TABLESYNC_LOG_FORMAT: {self.log_format}. "
                f"Must be one of: {valid_formats}"
            )

        valid_copy_formats = {"binary", "text"}
        if self.copy_format not in valid_copy_formats:
            raise ValueError(
                f"Invalid TABLESYNC_COPY_FORMAT: {self.copy_format}. "
                f"Must be one of: {valid_copy_formats}"
            )

        if self.bulk_batch_size < 1:
            raise ValueError(f"TABLESYNC_BULK_BATCH_SIZE must be >= 1, got {self.bulk_batch_size}")

        if self.connection_timeout < 1:
            raise ValueError(
                f"TABLESYNC_CONNECTION_TIMEOUT must be >= 1, got {self.connection_timeout}"
            )

    def connection_url(self, backend: str) -> Optional[str]:
        """Get the configured connection URL for a backend tag.

        Args:
            backend: Backend tag ("postgres" or "sqlserver")

        Returns:
            SQLAlchemy URL, or None if not configured
        """
        if backend == "postgres":
            return self.postgres_url
        if backend == "sqlserver":
            return self.sqlserver_url
        return None

    def as_dict(self) -> dict:
        """Export configuration as dictionary.

        Connection URLs are reported as set/unset only, since they carry
        credentials.

        Returns:
            Dictionary of all configuration values
        """
        return {
            "log_level": self.log_level,
            "log_format": self.log_format,
            "postgres_url": "<set>" if self.postgres_url else None,
            "sqlserver_url": "<set>" if self.sqlserver_url else None,
            "connection_timeout": self.connection_timeout,
            "echo_sql": self.echo_sql,
            "copy_format": self.copy_format,
            "bulk_batch_size": self.bulk_batch_size,
        }


def load_config() -> TableSyncConfig:
    """Load configuration from environment.

    This function creates a new TableSyncConfig instance by reading
    current environment variables. Call this to refresh config
    if environment has changed.

    Returns:
        New TableSyncConfig instance
    """
    return TableSyncConfig()


# Global configuration instance - loaded once at import time
# Use load_config() to refresh if needed
config = load_config()
