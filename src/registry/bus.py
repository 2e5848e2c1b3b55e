"""In-process message buses for the registry.

Buses are named by the domain of messages they carry:

- RegistryCommandBus: single-consumer queue for registry commands (launch,
  go sovereign, update metadata); RegistryClient -> RegistryEngine. Each
  command travels with the future its caller awaits.
- RegistryEventBus: fan-out pub/sub for registry notifications (launched,
  upgraded to sovereign, metadata updated, command rejected);
  RegistryEngine -> subscribers.
"""

from __future__ import annotations

import asyncio
from collections.abc import Iterable
from typing import Any

from observability.recorder import ObservabilityRecorder

from .models import RegistryCommand, RegistryEvent

PendingCommand = tuple[RegistryCommand, asyncio.Future[Any]]


class RegistryCommandBus:
    """Single-consumer queue for registry commands (RegistryClient -> RegistryEngine)."""

    def __init__(self, *, recorder: ObservabilityRecorder | None = None) -> None:
        """Create a command queue with optional observability recording."""
        self._queue: asyncio.Queue[PendingCommand] = asyncio.Queue()
        self._recorder = recorder

    async def submit(self, cmd: RegistryCommand, *, stage: str = "registry_command_bus") -> asyncio.Future[Any]:
        """Enqueue a command and return the future resolved with its outcome.

        If a recorder is configured, the command is also recorded for observability.
        """
        if self._recorder is not None:
            await self._recorder.record_message(cmd, kind="command", stage=stage)
        fut: asyncio.Future[Any] = asyncio.get_running_loop().create_future()
        await self._queue.put((cmd, fut))
        return fut

    async def get(self) -> PendingCommand:
        """Dequeue the next command and its future (awaits until one is available)."""
        return await self._queue.get()

    def task_done(self) -> None:
        """Mark the most recently processed command as done."""
        self._queue.task_done()

    async def join(self) -> None:
        """Wait until every submitted command has been processed."""
        await self._queue.join()


class RegistryEventBus:
    """Fan-out bus for registry notifications (RegistryEngine -> subscribers)."""

    def __init__(self, *, recorder: ObservabilityRecorder | None = None) -> None:
        """Create an event fan-out bus with optional observability recording."""
        self._subscribers: set[asyncio.Queue[RegistryEvent]] = set()
        self._recorder = recorder

    def subscribe(self) -> asyncio.Queue[RegistryEvent]:
        """Create a new subscriber queue that will receive published events."""
        q: asyncio.Queue[RegistryEvent] = asyncio.Queue()
        self._subscribers.add(q)
        return q

    def unsubscribe(self, q: asyncio.Queue[RegistryEvent]) -> None:
        """Remove a subscriber queue (no further events will be delivered)."""
        self._subscribers.discard(q)

    async def publish(self, event: RegistryEvent, *, stage: str = "registry_event_bus") -> None:
        """Publish an event to all current subscribers (best-effort fan-out)."""
        if self._recorder is not None:
            kind = "error" if event.type == "command_rejected" else "event"
            await self._recorder.record_message(event, kind=kind, stage=stage)
        for q in list(self._subscribers):
            await q.put(event)

    async def publish_many(self, events: Iterable[RegistryEvent], *, stage: str = "registry_event_bus") -> None:
        """Publish multiple events sequentially, preserving order."""
        for event in events:
            await self.publish(event, stage=stage)
