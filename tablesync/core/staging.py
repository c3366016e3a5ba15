"""Staging table name generation.

Staging tables live only inside one transaction, but their names must still
be unique within the process so that rapid repeated calls on one session
never collide.
"""

from __future__ import annotations

import itertools
import re
import secrets
import time

# Leaves room for the separator, the token and a '#' prefix under
# PostgreSQL's 63-byte identifier limit.
MAX_BASE_LENGTH = 30

_counter = itertools.count()
_unsafe = re.compile(r"[^a-z0-9_]+")


def generate_staging_token() -> str:
    """Generate a unique, roughly time-ordered token.

    Format: <ns timestamp hex><counter hex><random hex>
    Example: 1873f0a2c9d5e4b00a3f2b

    Returns:
        Token made of lowercase hex characters only
    """
    return f"{time.time_ns():x}{next(_counter) % 0x1000:03x}{secrets.token_hex(2)}"


def generate_staging_name(table_name: str, prefix: str = "") -> str:
    """Derive a staging table name from the target table name.

    The target name is lowercased, stripped of characters that would need
    quoting and truncated, so the result never needs quoting either.

    Args:
        table_name: Target table name
        prefix: Dialect-specific prefix (e.g. '#' for SQL Server temp tables)

    Returns:
        Staging table name, e.g. 'customer__1873f0a2c9d5e4b00a3f2b'
    """
    base = _unsafe.sub("_", table_name.lower()).strip("_")[:MAX_BASE_LENGTH] or "staging"
    if base[0].isdigit():
        base = f"t_{base}"[:MAX_BASE_LENGTH]
    return f"{prefix}{base}__{generate_staging_token()}"
