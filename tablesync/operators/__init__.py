"""tablesync backend operators.

Each backend package bundles a connector, a dialect, a bulk loader and an
executor. Use get_executor() to select one by tag.
"""

from tablesync.operators.registry import (
    backend_from_connection_string,
    get_dialect,
    get_executor,
    normalize_backend,
)

__all__ = [
    "backend_from_connection_string",
    "get_dialect",
    "get_executor",
    "normalize_backend",
]
