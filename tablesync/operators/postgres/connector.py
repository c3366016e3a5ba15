"""PostgreSQL connector implementation using SQLAlchemy.

This module provides connection management for PostgreSQL databases
through the psycopg 3 driver.
"""

from __future__ import annotations

from typing import Any, Optional

from sqlalchemy.engine import URL

from tablesync.operators.sql.connector import SQLConnector


class PostgresConnector(SQLConnector):
    """PostgreSQL connector using SQLAlchemy and psycopg 3.

    The COPY loader needs the psycopg 3 driver, so URLs built from parts
    use the 'postgresql+psycopg' scheme. Explicit connection strings are
    used as given.

    Configuration keys:
        - connection_string: Full connection string
        - host: Database host (default: localhost)
        - port: Database port (default: 5432)
        - database: Database name
        - user: Username
        - password: Password
        - echo: Enable SQL logging
        - connect_timeout: Seconds

    Examples:
        >>> config = {
        ...     "host": "localhost",
        ...     "port": 5432,
        ...     "database": "mydb",
        ...     "user": "postgres",
        ...     "password": "secret"
        ... }
        >>> with PostgresConnector(config) as conn:
        ...     results = conn.execute_query("SELECT * FROM poc.customer LIMIT 10")
    """

    backend = "postgres"

    def _build_url_from_parts(self) -> Optional[str]:
        """Build PostgreSQL URL from config.

        Returns:
            SQLAlchemy URL, or None if database/user are missing
        """
        if "database" not in self.config or "user" not in self.config:
            return None

        url = URL.create(
            "postgresql+psycopg",
            username=self.config["user"],
            password=self.config.get("password"),
            host=self.config.get("host", "localhost"),
            port=int(self.config.get("port", 5432)),
            database=self.config["database"],
        )
        return url.render_as_string(hide_password=False)

    def _engine_options(self) -> dict[str, Any]:
        return {"connect_args": {"connect_timeout": self.connect_timeout}}

    def _get_database_name(self) -> str:
        return "PostgreSQL"
