"""SQL-based connector base class using SQLAlchemy.

This module provides a base class for database connectors that use
SQLAlchemy for engine and connection management.
"""

from __future__ import annotations

from abc import abstractmethod
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any, Optional

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Connection, Engine

from tablesync.core.config import TableSyncConfig, config as default_settings
from tablesync.core.connector import Connector
from tablesync.exceptions import ConfigurationError, ConnectionError, ConnectorError


class SQLConnector(Connector):
    """Base class for SQL database connectors using SQLAlchemy.

    Provides common functionality for SQL-based backends including:
    - SQLAlchemy engine management
    - Connection lifecycle (connect, disconnect, test)
    - Scoped connections for executors
    - Query and statement execution

    The connection string is treated as an opaque credential. It is taken
    from, in order:
    1. config["connection_string"]
    2. the backend URL in the environment settings (TABLESYNC_*_URL)
    3. individual host/port/database/user/password keys

    Subclasses must implement:
    - _build_url_from_parts(): Backend-specific URL from individual keys
    - _get_database_name(): Return database name for error messages

    Configuration keys:
        - connection_string: Full SQLAlchemy URL
        - host, port, database, user, password: URL parts
        - echo: Enable SQLAlchemy SQL logging (default: TABLESYNC_ECHO_SQL)
        - connect_timeout: Seconds (default: TABLESYNC_CONNECTION_TIMEOUT)
    """

    #: Backend tag used to look up the URL in settings
    backend: str = ""

    def __init__(
        self,
        config: Optional[dict[str, Any]] = None,
        settings: Optional[TableSyncConfig] = None,
    ):
        """Initialize SQL connector.

        Args:
            config: Connection configuration dictionary
            settings: Environment settings (defaults to the global settings)
        """
        super().__init__(config)
        self.settings = settings or default_settings
        self.engine: Optional[Engine] = None

    @abstractmethod
    def _build_url_from_parts(self) -> Optional[str]:
        """Build a SQLAlchemy URL from individual config keys.

        Returns:
            SQLAlchemy URL, or None if the required keys are absent
        """
        pass

    @abstractmethod
    def _get_database_name(self) -> str:
        """Get database name for error messages.

        Returns:
            Human-readable database name (e.g., "PostgreSQL", "SQL Server")
        """
        pass

    def _engine_options(self) -> dict[str, Any]:
        """Extra keyword arguments for create_engine().

        Returns:
            Backend-specific engine options
        """
        return {}

    def _build_connection_string(self) -> str:
        """Resolve the connection string for this connector.

        Raises:
            ConfigurationError: If no connection string can be resolved
        """
        if self.config.get("connection_string"):
            return self.config["connection_string"]

        configured = self.settings.connection_url(self.backend)
        if configured:
            return configured

        built = self._build_url_from_parts()
        if built:
            return built

        db_name = self._get_database_name()
        raise ConfigurationError(
            f"No {db_name} connection string: pass 'connection_string', set "
            f"TABLESYNC_{self.backend.upper()}_URL, or provide database/user/password"
        )

    @property
    def connect_timeout(self) -> int:
        return int(self.config.get("connect_timeout", self.settings.connection_timeout))

    def connect(self) -> None:
        """Create the SQLAlchemy engine and test the connection.

        Raises:
            ConfigurationError: If no connection string is configured
            ConnectionError: If connection fails
        """
        connection_string = self._build_connection_string()
        try:
            self.engine = create_engine(
                connection_string,
                pool_pre_ping=True,
                echo=self.config.get("echo", self.settings.echo_sql),
                **self._engine_options(),
            )
            with self.engine.connect() as conn:
                conn.execute(text("SELECT 1"))
            self.connection = self.engine
        except Exception as e:
            if self.engine is not None:
                self.engine.dispose()
                self.engine = None
            db_name = self._get_database_name()
            raise ConnectionError(f"Failed to connect to {db_name}: {e}") from e

    def disconnect(self) -> None:
        """Dispose the SQLAlchemy engine and clear connection references.

        Safe to call even if already disconnected.
        """
        if self.engine is not None:
            self.engine.dispose()
            self.engine = None
            self.connection = None

    def test_connection(self) -> bool:
        """Test connectivity to the database.

        Returns:
            True if connection is successful, False otherwise
        """
        try:
            if not self.is_connected:
                self.connect()
            with self.engine.connect() as conn:
                conn.execute(text("SELECT 1"))
            return True
        except Exception:
            return False

    @contextmanager
    def connection(self) -> Iterator[Connection]:
        """Check out a pooled connection for the duration of a block.

        Connects lazily on first use. The connection is returned to the
        pool on every exit path, with any open transaction rolled back.

        Yields:
            SQLAlchemy Connection

        Raises:
            ConnectionError: If no connection can be opened
        """
        if not self.is_connected:
            self.connect()
        try:
            conn = self.engine.connect()
        except Exception as e:
            db_name = self._get_database_name()
            raise ConnectionError(f"Failed to open {db_name} connection: {e}") from e
        with conn:
            yield conn

    def execute_query(
        self, query: str, params: Optional[dict[str, Any]] = None
    ) -> list[dict[str, Any]]:
        """Execute a SQL query and return results.

        Args:
            query: SQL query string
            params: Optional bind parameters

        Returns:
            List of records as dictionaries (column_name -> value)

        Raises:
            ConnectorError: If query execution fails
        """
        try:
            with self.connection() as conn:
                result = conn.execute(text(query), params or {})
                return [dict(row._mapping) for row in result]
        except ConnectionError:
            raise
        except Exception as e:
            raise ConnectorError(f"Failed to execute query: {e}") from e

    def execute_statement(self, statement: str, params: Optional[dict[str, Any]] = None) -> int:
        """Execute a SQL statement (DDL, DML) in its own transaction.

        Args:
            statement: SQL statement string
            params: Optional bind parameters

        Returns:
            Affected row count reported by the driver (-1 if unknown)

        Raises:
            ConnectorError: If statement execution fails
        """
        try:
            with self.connection() as conn:
                result = conn.execute(text(statement), params or {})
                rowcount = result.rowcount
                conn.commit()
                return rowcount
        except ConnectionError:
            raise
        except Exception as e:
            raise ConnectorError(f"Failed to execute statement: {e}") from e
