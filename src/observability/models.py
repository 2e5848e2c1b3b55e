"""Observability record models.

Records are designed to be:
- Durable and append-only (sink decides storage).
- Easy to link across an end-to-end flow via correlation identifiers.
- Safe by default (store summaries + selected fields, not full raw payloads).
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field


def utc_now() -> datetime:
    """Return the current UTC time as a timezone-aware datetime."""
    return datetime.now(tz=timezone.utc)


RecordKind = Literal["command", "event", "error"]


class ObservabilityRecord(BaseModel):
    """A durable, structured record derived from an internal command/event."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    kind: RecordKind

    # A stable, human-readable type label (e.g., "launch_virtual_l1", "launched").
    event_type: str

    # Where the record was produced (e.g., "registry_client", "registry_engine").
    stage: str

    # Identifiers used to link the records of one L1 together.
    correlation_id: str | None = None
    l1_id: int | None = None
    caller: str | None = None

    occurred_at: datetime
    logged_at: datetime = Field(default_factory=utc_now)

    summary: dict[str, Any] = Field(default_factory=dict)
