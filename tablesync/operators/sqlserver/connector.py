"""SQL Server connector implementation using SQLAlchemy.

This module provides connection management for SQL Server databases
through the pyodbc driver.
"""

from __future__ import annotations

from typing import Any, Optional

from sqlalchemy.engine import URL, make_url

from tablesync.operators.sql.connector import SQLConnector

DEFAULT_ODBC_DRIVER = "ODBC Driver 18 for SQL Server"


class SqlServerConnector(SQLConnector):
    """SQL Server connector using SQLAlchemy and pyodbc.

    Engines for 'mssql+pyodbc' URLs are created with fast_executemany, which
    the bulk loader relies on to send each row buffer as one array-bound
    round trip.

    Configuration keys:
        - connection_string: Full connection string
        - host: Database host (default: localhost)
        - port: Database port (default: 1433)
        - database: Database name
        - user: Username
        - password: Password
        - driver: ODBC driver name (default: ODBC Driver 18 for SQL Server)
        - trust_server_certificate: Skip TLS certificate validation (default: False)
        - echo: Enable SQL logging
        - connect_timeout: Seconds

    Examples:
        >>> config = {
        ...     "host": "localhost",
        ...     "database": "mydb",
        ...     "user": "sa",
        ...     "password": "secret",
        ...     "trust_server_certificate": True,
        ... }
        >>> with SqlServerConnector(config) as conn:
        ...     results = conn.execute_query("SELECT TOP 10 * FROM poc.customer")
    """

    backend = "sqlserver"

    def _build_url_from_parts(self) -> Optional[str]:
        """Build SQL Server URL from config.

        Returns:
            SQLAlchemy URL, or None if database/user are missing
        """
        if "database" not in self.config or "user" not in self.config:
            return None

        query = {"driver": self.config.get("driver", DEFAULT_ODBC_DRIVER)}
        if self.config.get("trust_server_certificate"):
            query["TrustServerCertificate"] = "yes"

        url = URL.create(
            "mssql+pyodbc",
            username=self.config["user"],
            password=self.config.get("password"),
            host=self.config.get("host", "localhost"),
            port=int(self.config.get("port", 1433)),
            database=self.config["database"],
            query=query,
        )
        return url.render_as_string(hide_password=False)

    def _engine_options(self) -> dict[str, Any]:
        options: dict[str, Any] = {}
        if make_url(self._build_connection_string()).get_driver_name() == "pyodbc":
            options["fast_executemany"] = True
            options["connect_args"] = {"timeout": self.connect_timeout}
        return options

    def _get_database_name(self) -> str:
        return "SQL Server"
