"""Result model for sync execution."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field as PydanticField

from tablesync.models.table import SyncOperation


class SyncResult(BaseModel):
    """Outcome of one committed sync request.

    Failed requests raise instead of producing a result, so every
    SyncResult describes a committed transaction.
    """

    table: str = PydanticField(
        ...,
        description="Target table, schema-qualified when a schema was given",
    )

    operation: SyncOperation = PydanticField(
        ...,
        description="Operation that was applied",
    )

    staging_table: str = PydanticField(
        ...,
        description="Name of the transaction-scoped staging table",
    )

    rows_staged: int = PydanticField(
        0,
        description="Number of rows bulk-loaded into the staging table",
        ge=0,
    )

    rows_affected: int = PydanticField(
        0,
        description="Number of target rows inserted, updated or deleted",
        ge=0,
    )

    started_at: datetime = PydanticField(
        ...,
        description="Start time of the request",
    )

    completed_at: datetime = PydanticField(
        ...,
        description="Commit time of the request",
    )

    duration_seconds: float = PydanticField(
        0.0,
        description="Duration of the request in seconds",
        ge=0.0,
    )

    model_config = {"extra": "forbid"}
