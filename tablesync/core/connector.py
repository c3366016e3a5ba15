"""Base Connector abstract class.

This module defines the Connector interface for managing connections
to the databases a sync executor writes to.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Optional


class Connector(ABC):
    """Base class for managing connections to a database.

    Connectors handle connection lifecycle and ad-hoc query execution.
    They are composed by sync executors rather than inherited.

    Examples:
        Using a connector as a context manager:
        >>> with PostgresConnector({"connection_string": url}) as conn:
        ...     rows = conn.execute_query("SELECT count(*) AS n FROM poc.customer")
    """

    def __init__(self, config: Optional[dict[str, Any]] = None):
        """Initialize connector with configuration.

        Args:
            config: Connection configuration dictionary
        """
        self.config = config or {}
        self.connection: Optional[Any] = None

    @abstractmethod
    def connect(self) -> None:
        """Establish connection to the database.

        Raises:
            ConnectionError: If connection fails
        """
        pass

    @abstractmethod
    def disconnect(self) -> None:
        """Close connection to the database.

        Should handle cases where connection is already closed gracefully.
        """
        pass

    @abstractmethod
    def test_connection(self) -> bool:
        """Test connectivity to the database.

        Returns:
            True if connection is successful, False otherwise
        """
        pass

    @abstractmethod
    def execute_query(
        self, query: str, params: Optional[dict[str, Any]] = None
    ) -> list[dict[str, Any]]:
        """Execute a query and return results.

        Args:
            query: SQL query string
            params: Optional bind parameters

        Returns:
            List of records as dictionaries

        Raises:
            ConnectorError: If query execution fails
        """
        pass

    def __enter__(self) -> Connector:
        """Context manager entry: establish connection.

        Returns:
            Self
        """
        self.connect()
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Context manager exit: close connection."""
        self.disconnect()

    @property
    def is_connected(self) -> bool:
        """Check if connection is established.

        Returns:
            True if connected, False otherwise
        """
        return self.connection is not None
