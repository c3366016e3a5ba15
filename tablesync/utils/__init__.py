"""tablesync utilities package.

This package contains request file parsing, row sources and logging setup.
"""

from tablesync.utils.logging import configure_logging
from tablesync.utils.row_sources import open_row_source, read_csv_rows, read_jsonl_rows
from tablesync.utils.yaml_parser import load_request, load_yaml, substitute_env_vars

__all__ = [
    "configure_logging",
    "load_request",
    "load_yaml",
    "open_row_source",
    "read_csv_rows",
    "read_jsonl_rows",
    "substitute_env_vars",
]
