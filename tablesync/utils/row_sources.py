"""Lazy row sources for request files.

Row files are read one line at a time while the bulk loader streams them,
so a request can carry arbitrarily many rows without holding them in
memory. Text values are coerced into declared column types.
"""

from __future__ import annotations

import csv
import json
from collections.abc import Iterator, Sequence
from pathlib import Path
from typing import Any

from tablesync.exceptions import ValidationError
from tablesync.models.table import ColumnDefinition, ColumnType

JSONL_SUFFIXES = {".jsonl", ".ndjson"}
CSV_SUFFIXES = {".csv"}


def _coerce_row(
    row: dict[Any, Any], columns_by_name: dict[str, ColumnDefinition], location: str
) -> dict[Any, Any]:
    """Coerce string values of typed, non-string columns."""
    coerced = {}
    for key, value in row.items():
        column = columns_by_name.get(key)
        if (
            column is not None
            and column.dtype is not None
            and column.dtype is not ColumnType.STRING
            and isinstance(value, str)
        ):
            try:
                value = column.dtype.coerce(value)
            except ValueError as e:
                raise ValidationError(f"{location}: column '{key}': {e}") from e
        coerced[key] = value
    return coerced


def read_jsonl_rows(path: Path, columns: Sequence[ColumnDefinition]) -> Iterator[dict]:
    """Yield rows from a JSON Lines file.

    Blank lines are skipped.

    Raises:
        ValidationError: If a line is not a JSON object or a value cannot be coerced
    """
    columns_by_name = {c.name: c for c in columns}
    with open(path, "r", encoding="utf-8") as f:
        for line_number, line in enumerate(f, start=1):
            line = line.strip()
            if not line:
                continue
            location = f"{path}:{line_number}"
            try:
                row = json.loads(line)
            except json.JSONDecodeError as e:
                raise ValidationError(f"{location}: invalid JSON: {e}") from e
            if not isinstance(row, dict):
                raise ValidationError(f"{location}: expected a JSON object")
            yield _coerce_row(row, columns_by_name, location)


def read_csv_rows(path: Path, columns: Sequence[ColumnDefinition]) -> Iterator[dict]:
    """Yield rows from a CSV file with a header line.

    Raises:
        ValidationError: If a value cannot be coerced into its declared type
    """
    columns_by_name = {c.name: c for c in columns}
    with open(path, "r", encoding="utf-8", newline="") as f:
        reader = csv.DictReader(f)
        # Header is line 1
        for line_number, record in enumerate(reader, start=2):
            yield _coerce_row(record, columns_by_name, f"{path}:{line_number}")


def open_row_source(path: Path, columns: Sequence[ColumnDefinition]) -> Iterator[dict]:
    """Create a lazy row iterator for a rows file.

    The file is opened on first iteration.

    Args:
        path: Path to a .jsonl/.ndjson or .csv file
        columns: Column definitions used for type coercion

    Returns:
        Row iterator

    Raises:
        ValidationError: If the file does not exist or has an unsupported suffix
    """
    if not path.is_file():
        raise ValidationError(f"Rows file not found: {path}")

    suffix = path.suffix.lower()
    if suffix in JSONL_SUFFIXES:
        return read_jsonl_rows(path, columns)
    if suffix in CSV_SUFFIXES:
        return read_csv_rows(path, columns)
    raise ValidationError(
        f"Unsupported rows file format '{suffix}'. "
        f"Use one of: {', '.join(sorted(JSONL_SUFFIXES | CSV_SUFFIXES))}"
    )
