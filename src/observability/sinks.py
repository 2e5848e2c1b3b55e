"""Observability sinks (storage backends)."""

from __future__ import annotations

import json
import threading
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any, Protocol

import duckdb

from .models import ObservabilityRecord

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)

_COLUMNS = (
    "logged_at",
    "occurred_at",
    "kind",
    "event_type",
    "stage",
    "correlation_id",
    "l1_id",
    "caller",
    "summary_json",
)


class ObservabilitySink(Protocol):
    """A synchronous sink for observability records.

    Sinks are synchronous; the recorder runs them in a worker thread.
    """

    def write(self, record: ObservabilityRecord) -> None:
        """Persist a single record."""

    def close(self) -> None:
        """Close any underlying resources."""


class InMemoryObservabilitySink:
    """In-memory sink for tests and local debugging."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._records: list[ObservabilityRecord] = []

    def write(self, record: ObservabilityRecord) -> None:
        """Append a record to the in-memory list (thread-safe)."""
        with self._lock:
            self._records.append(record)

    def close(self) -> None:  # noqa: D401 - keep interface consistent
        """No-op."""

    def snapshot(self) -> Sequence[ObservabilityRecord]:
        """Return a point-in-time copy of all recorded entries."""
        with self._lock:
            return list(self._records)


@dataclass(frozen=True)
class DuckDBOptions:
    path: Path
    table: str = "observability_records"


class DuckDBObservabilitySink:
    """DuckDB sink for durable local persistence of registry activity."""

    def __init__(self, *, path: str | Path, table: str = "observability_records") -> None:
        """Create (or open) a DuckDB-backed sink at the given path."""
        self._opts = DuckDBOptions(path=Path(path), table=table)
        self._lock = threading.Lock()
        self._conn = duckdb.connect(str(self._opts.path))
        self._ensure_schema()

    def _ensure_schema(self) -> None:
        """Create the backing table if it does not exist yet."""
        create_sql = f"""
        create table if not exists {self._opts.table} (
          logged_at timestamptz not null,
          occurred_at timestamptz not null,
          kind varchar not null,
          event_type varchar not null,
          stage varchar not null,
          correlation_id varchar,
          l1_id bigint,
          caller varchar,
          summary_json varchar not null
        )
        """
        with self._lock:
            self._conn.execute(create_sql)

    def write(self, record: ObservabilityRecord) -> None:
        """Insert a single record, with its summary as stable JSON."""
        summary_json = json.dumps(record.summary, separators=(",", ":"), sort_keys=True, default=str)
        insert_sql = f"""
        insert into {self._opts.table} ({", ".join(_COLUMNS)})
        values ({", ".join("?" for _ in _COLUMNS)})
        """
        with self._lock:
            self._conn.execute(
                insert_sql,
                [
                    record.logged_at,
                    record.occurred_at,
                    record.kind,
                    record.event_type,
                    record.stage,
                    record.correlation_id,
                    record.l1_id,
                    record.caller,
                    summary_json,
                ],
            )

    def read_records(self, *, l1_id: int | None = None) -> list[dict[str, Any]]:
        """Return stored rows (oldest first), optionally only those for one L1."""
        # Timestamps come back as epoch microseconds; fetching timestamptz values
        # directly would need pytz.
        selected = ["epoch_us(logged_at) as logged_at", "epoch_us(occurred_at) as occurred_at", *_COLUMNS[2:]]
        select_sql = f"select {', '.join(selected)} from {self._opts.table}"
        params: list[Any] = []
        if l1_id is not None:
            select_sql += " where l1_id = ?"
            params.append(l1_id)
        select_sql += " order by logged_at"
        with self._lock:
            rows = self._conn.execute(select_sql, params).fetchall()

        out: list[dict[str, Any]] = []
        for row in rows:
            item = dict(zip(_COLUMNS, row))
            item["logged_at"] = _EPOCH + timedelta(microseconds=item["logged_at"])
            item["occurred_at"] = _EPOCH + timedelta(microseconds=item["occurred_at"])
            item["summary"] = json.loads(item.pop("summary_json"))
            out.append(item)
        return out

    def close(self) -> None:
        """Close the underlying DuckDB connection."""
        with self._lock:
            self._conn.close()
