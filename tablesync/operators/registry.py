"""Backend registry.

Maps backend tags to the executor and dialect classes implementing them,
so callers can select a backend by name (or from a connection string)
and depend only on the TableSynchronizer capability set.
"""

from __future__ import annotations

import importlib
from typing import Any, Optional

from tablesync.core.dialect import Dialect
from tablesync.core.executor import SyncExecutor
from tablesync.exceptions import ConfigurationError

# Backend tag aliases, including SQLAlchemy URL schemes
BACKEND_ALIASES = {
    "postgres": "postgres",
    "postgresql": "postgres",
    "sqlserver": "sqlserver",
    "mssql": "sqlserver",
}

# Default classes per backend tag
DEFAULT_OPERATORS = {
    "postgres": {
        "executor": "tablesync.operators.postgres.executor.PostgresSyncExecutor",
        "dialect": "tablesync.operators.postgres.dialect.PostgresDialect",
    },
    "sqlserver": {
        "executor": "tablesync.operators.sqlserver.executor.SqlServerSyncExecutor",
        "dialect": "tablesync.operators.sqlserver.dialect.SqlServerDialect",
    },
}


def normalize_backend(backend: str) -> str:
    """Normalize a backend tag or alias.

    Args:
        backend: e.g. "postgresql", "MSSQL", "sqlserver"

    Returns:
        Canonical tag ("postgres" or "sqlserver")

    Raises:
        ConfigurationError: If the backend is unknown
    """
    key = backend.strip().lower()
    if key not in BACKEND_ALIASES:
        raise ConfigurationError(
            f"Unknown backend '{backend}'. "
            f"Available backends: {', '.join(sorted(BACKEND_ALIASES))}"
        )
    return BACKEND_ALIASES[key]


def backend_from_connection_string(connection_string: str) -> str:
    """Infer the backend tag from a SQLAlchemy URL scheme.

    Examples:
        >>> backend_from_connection_string("postgresql+psycopg://u:p@h/db")
        'postgres'
        >>> backend_from_connection_string("mssql+pyodbc://u:p@h/db?driver=...")
        'sqlserver'

    Raises:
        ConfigurationError: If the scheme is missing or unknown
    """
    if "://" not in connection_string:
        raise ConfigurationError("Connection string has no URL scheme")
    scheme = connection_string.split("://")[0]
    return normalize_backend(scheme.split("+")[0])


def _load_class(full_path: str) -> type:
    module_path, class_name = full_path.rsplit(".", 1)
    try:
        module = importlib.import_module(module_path)
        return getattr(module, class_name)
    except (ImportError, AttributeError) as e:
        raise ConfigurationError(f"Failed to load '{full_path}': {e}") from e


def get_dialect(backend: str) -> Dialect:
    """Create the SQL dialect for a backend tag."""
    tag = normalize_backend(backend)
    return _load_class(DEFAULT_OPERATORS[tag]["dialect"])()


def get_executor(
    backend: Optional[str] = None, config: Optional[dict[str, Any]] = None
) -> SyncExecutor:
    """Create the sync executor for a backend.

    Args:
        backend: Backend tag; inferred from config["connection_string"] if omitted
        config: Connector and loader configuration

    Returns:
        Executor for the backend

    Raises:
        ConfigurationError: If the backend is unknown or cannot be inferred
    """
    config = config or {}
    if backend is None:
        connection_string = config.get("connection_string")
        if not connection_string:
            raise ConfigurationError("Backend not given and no connection_string to infer it from")
        tag = backend_from_connection_string(connection_string)
    else:
        tag = normalize_backend(backend)

    executor_class = _load_class(DEFAULT_OPERATORS[tag]["executor"])
    return executor_class(config=config)
