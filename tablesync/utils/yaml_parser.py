"""YAML parsing utilities for tablesync.

This module provides functions for loading sync request files.

A request file looks like:

    schema: poc
    table: customer
    operation: delete
    columns:
      - name: id
        primary_key: true
        dtype: integer
      - name
    rows:
      - {id: 1, name: Alice}

or, for large batches, names a rows file instead of inline rows:

    rows_file: customers.jsonl
"""

from __future__ import annotations

import os
import re
from pathlib import Path
from typing import Any

import yaml

from tablesync.exceptions import ValidationError
from tablesync.models.table import ColumnDefinition, TableSyncRequest
from tablesync.utils.row_sources import open_row_source

REQUEST_KEYS = {"schema", "table", "operation", "columns", "rows", "rows_file"}


def substitute_env_vars(data: Any) -> Any:
    """Recursively substitute environment variables in data structure.

    Supports ${VAR_NAME} and ${VAR_NAME:-default} syntax.

    Args:
        data: Data structure (dict, list, str, etc.)

    Returns:
        Data with environment variables substituted

    Examples:
        >>> os.environ['SYNC_SCHEMA'] = 'poc'
        >>> substitute_env_vars('${SYNC_SCHEMA}')
        'poc'
        >>> substitute_env_vars('${MISSING:-default_value}')
        'default_value'
    """
    if isinstance(data, dict):
        return {k: substitute_env_vars(v) for k, v in data.items()}
    elif isinstance(data, list):
        return [substitute_env_vars(item) for item in data]
    elif isinstance(data, str):
        # Pattern matches ${VAR_NAME} or ${VAR_NAME:-default}
        pattern = r'\$\{([^}:]+)(?::-([^}]*))?\}'

        def replace_var(match: re.Match) -> str:
            var_name = match.group(1)
            default_value = match.group(2)

            value = os.environ.get(var_name)
            if value is not None:
                return value
            if default_value is not None:
                return default_value
            raise ValidationError(
                f"Environment variable '{var_name}' not found and no default provided"
            )

        return re.sub(pattern, replace_var, data)
    else:
        return data


def load_yaml(path: Path) -> dict[str, Any]:
    """Load YAML file into a dictionary with environment variable substitution.

    Args:
        path: Path to YAML file

    Returns:
        Dictionary with YAML contents and environment variables substituted

    Raises:
        ValidationError: If file cannot be read or parsed, or required env vars are missing
    """
    try:
        with open(path, "r") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ValidationError(f"Invalid YAML in {path}: {e}") from e
    except FileNotFoundError:
        raise ValidationError(f"File not found: {path}")
    except OSError as e:
        raise ValidationError(f"Failed to load {path}: {e}") from e

    if data is None:
        raise ValidationError(f"Empty YAML file: {path}")
    if not isinstance(data, dict):
        raise ValidationError(f"Expected a mapping at the top of {path}")
    return substitute_env_vars(data)


def _parse_columns(raw: Any, path: Path) -> list[ColumnDefinition]:
    if not isinstance(raw, list):
        raise ValidationError(f"'columns' in {path} must be a list")
    columns = []
    for item in raw:
        # Bare strings are non-key, untyped columns
        if isinstance(item, str):
            item = {"name": item}
        columns.append(ColumnDefinition(**item))
    return columns


def load_request(path: Path) -> TableSyncRequest:
    """Load a sync request from a YAML file.

    Inline rows are materialized and validated with the request. A
    rows_file is resolved relative to the YAML file and streamed lazily.

    Args:
        path: Path to request YAML file

    Returns:
        TableSyncRequest (not yet validated against the request contract;
        call validate_request() or apply it)

    Raises:
        ValidationError: If the file or its structure is invalid
    """
    data = load_yaml(path)

    unknown = set(data) - REQUEST_KEYS
    if unknown:
        raise ValidationError(f"Unknown keys in {path}: {', '.join(sorted(unknown))}")
    if "rows" in data and "rows_file" in data:
        raise ValidationError(f"{path}: use either 'rows' or 'rows_file', not both")

    try:
        columns = _parse_columns(data.get("columns", []), path)

        if "rows_file" in data:
            rows_path = Path(data["rows_file"])
            if not rows_path.is_absolute():
                rows_path = path.parent / rows_path
            rows: Any = open_row_source(rows_path, columns)
        else:
            rows = data.get("rows") or []

        return TableSyncRequest(
            schema_name=data.get("schema"),
            table_name=data.get("table", ""),
            operation=data.get("operation"),
            columns=columns,
            rows=rows,
        )
    except (ValidationError, TypeError) as e:
        raise ValidationError(f"Invalid request in {path}: {e}") from e
