"""Tests for backend selection."""

import pytest

from tablesync.core.executor import SyncExecutor
from tablesync.exceptions import ConfigurationError
from tablesync.operators.postgres import PostgresDialect, PostgresSyncExecutor
from tablesync.operators.registry import (
    _load_class,
    backend_from_connection_string,
    get_dialect,
    get_executor,
    normalize_backend,
)
from tablesync.operators.sqlserver import SqlServerDialect, SqlServerSyncExecutor


class TestBackendTags:
    """Test backend tag normalization."""

    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("postgres", "postgres"),
            ("PostgreSQL", "postgres"),
            ("sqlserver", "sqlserver"),
            (" MSSQL ", "sqlserver"),
        ],
    )
    def test_aliases(self, raw, expected):
        """Test accepted aliases."""
        assert normalize_backend(raw) == expected

    def test_unknown_backend(self):
        """Test an unsupported backend."""
        with pytest.raises(ConfigurationError, match="Unknown backend 'oracle'"):
            normalize_backend("oracle")

    @pytest.mark.parametrize(
        "url, expected",
        [
            ("postgresql+psycopg://u:p@h/db", "postgres"),
            ("postgresql://u:p@h/db", "postgres"),
            ("mssql+pyodbc://u:p@h/db?driver=x", "sqlserver"),
        ],
    )
    def test_from_connection_string(self, url, expected):
        """Test backend inference from the URL scheme."""
        assert backend_from_connection_string(url) == expected

    def test_connection_string_without_scheme(self):
        """Test a connection string that is not a URL."""
        with pytest.raises(ConfigurationError, match="no URL scheme"):
            backend_from_connection_string("Server=db;Database=app")


class TestFactories:
    """Test dialect and executor construction."""

    def test_get_dialect(self):
        """Test dialect lookup by tag."""
        assert isinstance(get_dialect("postgresql"), PostgresDialect)
        assert isinstance(get_dialect("mssql"), SqlServerDialect)

    def test_get_executor_by_tag(self):
        """Test executor lookup by tag without connecting."""
        executor = get_executor("postgres", {"copy_format": "text"})

        assert isinstance(executor, PostgresSyncExecutor)
        assert isinstance(executor, SyncExecutor)
        assert executor.loader.copy_format == "text"
        assert not executor.connector.is_connected

    def test_get_executor_inferred(self):
        """Test executor inferred from the connection string."""
        executor = get_executor(config={"connection_string": "mssql+pyodbc://sa:pw@db/app?driver=x"})
        assert isinstance(executor, SqlServerSyncExecutor)

    def test_get_executor_without_hint(self):
        """Test that a backend or connection string is required."""
        with pytest.raises(ConfigurationError, match="Backend not given"):
            get_executor()

    def test_load_class_failure(self):
        """Test a dotted path that cannot be imported."""
        with pytest.raises(ConfigurationError, match="Failed to load"):
            _load_class("tablesync.operators.nowhere.Executor")
