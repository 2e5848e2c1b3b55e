"""Async recorder that writes observability records without blocking the event loop."""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime
from typing import Any, Literal

from .models import ObservabilityRecord, utc_now
from .sinks import ObservabilitySink

logger = logging.getLogger(__name__)

MessageKind = Literal["command", "event", "error"]


def _safe_getattr(obj: Any, name: str) -> Any:
    """Best-effort getattr that never raises."""
    try:
        return getattr(obj, name)
    except Exception:  # pragma: no cover
        return None


def _extract_event_type(message: Any) -> str:
    """Derive a stable event type label for a message.

    Prefers `message.type` when present; otherwise falls back to the class name.
    """
    msg_type = _safe_getattr(message, "type")
    if isinstance(msg_type, str) and msg_type:
        return msg_type
    return type(message).__name__


def _extract_l1_id(message: Any) -> int | None:
    """Extract the L1 id a message refers to, if any."""
    l1_id = _safe_getattr(message, "l1_id")
    if isinstance(l1_id, int) and not isinstance(l1_id, bool):
        return l1_id
    return None


def _extract_caller(message: Any) -> str | None:
    """Extract the acting identity: `caller` on commands, `owner` on launches."""
    for name in ("caller", "owner"):
        value = _safe_getattr(message, name)
        if isinstance(value, str) and value:
            return value
    return None


def _extract_occurred_at(message: Any) -> datetime:
    """Extract a message timestamp, falling back to `utc_now()` when absent."""
    ts = _safe_getattr(message, "ts")
    if isinstance(ts, datetime):
        return ts
    return utc_now()


def _extract_summary(message: Any) -> dict[str, Any]:
    """Build a small, safe-to-store summary payload for a message.

    Timestamps and the type label already have their own columns, so they are
    dropped here. Obvious secret-like fields are redacted.
    """
    if hasattr(message, "model_dump"):
        data = message.model_dump()
    elif isinstance(message, dict):
        data = dict(message)
    else:
        data = {"repr": repr(message)}

    for key in ["api_key", "private_key", "secret", "token", "password"]:
        if key in data:
            data[key] = "[REDACTED]"

    data.pop("ts", None)
    data.pop("type", None)
    return data


class ObservabilityRecorder:
    """Queues records and writes them in a background task."""

    def __init__(self, *, sink: ObservabilitySink, max_queue_size: int = 10000) -> None:
        """Create a recorder backed by a synchronous sink.

        Args:
            sink: Storage backend used by the background writer.
            max_queue_size: Bound for in-memory buffering; records may be dropped
                when full so registry writes never wait on observability.
        """
        self._sink = sink
        self._queue: asyncio.Queue[ObservabilityRecord | None] = asyncio.Queue(maxsize=max_queue_size)
        self._worker: asyncio.Task[None] | None = None
        self._closed = False

        self._write_failures = 0
        self._first_failure_at: datetime | None = None
        self._last_failure_at: datetime | None = None

    def _ensure_started(self) -> None:
        """Start the background writer task if it hasn't been started yet."""
        if self._worker is not None:
            return
        self._worker = asyncio.create_task(self._run_worker(), name="observability-writer")

    async def record_message(
        self,
        message: Any,
        *,
        kind: MessageKind,
        stage: str,
        correlation_id: str | None = None,
    ) -> None:
        """Record a message by enqueueing an ObservabilityRecord (non-blocking)."""
        if self._closed:
            return

        self._ensure_started()

        l1_id = _extract_l1_id(message)
        corr = correlation_id or (str(l1_id) if l1_id is not None else None)

        record = ObservabilityRecord(
            kind=kind,
            event_type=_extract_event_type(message),
            stage=stage,
            correlation_id=corr,
            l1_id=l1_id,
            caller=_extract_caller(message),
            occurred_at=_extract_occurred_at(message),
            logged_at=utc_now(),
            summary=_extract_summary(message),
        )

        try:
            self._queue.put_nowait(record)
        except asyncio.QueueFull:
            self._note_failure()
            logger.warning("observability queue full; dropped %s record", record.event_type)

    async def aclose(self) -> None:
        """Flush and close the recorder.

        Safe to call multiple times.
        """
        if self._closed:
            return
        self._closed = True
        if self._worker is not None:
            await self._queue.put(None)
            await self._worker
        await asyncio.to_thread(self._sink.close)

    async def _run_worker(self) -> None:
        """Background loop that drains the queue and writes to the sink."""
        while True:
            item = await self._queue.get()
            try:
                if item is None:
                    return
                await asyncio.to_thread(self._sink.write, item)
            except Exception:  # noqa: BLE001 - observability must not crash the registry
                self._note_failure()
                logger.exception("observability sink write failed")
            finally:
                self._queue.task_done()

    def _note_failure(self) -> None:
        now = utc_now()
        self._write_failures += 1
        self._first_failure_at = self._first_failure_at or now
        self._last_failure_at = now

    def degraded_status(self) -> dict[str, Any]:
        """Return a minimal degraded-status snapshot."""
        return {
            "write_failures": self._write_failures,
            "first_failure_at": self._first_failure_at,
            "last_failure_at": self._last_failure_at,
        }
