"""Registry engine.

Responsibilities:
- consume commands from the command bus, one at a time
- apply them to the record store
- resolve each caller's future with the outcome
- publish the resulting notifications for downstream consumers
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from .bus import RegistryCommandBus, RegistryEventBus
from .errors import RegistryError
from .models import (
    CommandRejected,
    GoSovereign,
    LaunchVirtualL1,
    RegistryCommand,
    RegistryEvent,
    UpdateMetadata,
)
from .store import L1Store

logger = logging.getLogger(__name__)


class RegistryEngine:
    """Background worker that is the single writer of an `L1Store`.

    The engine:
    - Consumes `RegistryCommand` objects from the `RegistryCommandBus`.
    - Applies them to the store serially, so every mutation sees the result of
      the one before it.
    - Publishes the store's notifications (or a `CommandRejected`) to the
      `RegistryEventBus` after each command.
    """

    def __init__(
        self,
        *,
        store: L1Store,
        command_bus: RegistryCommandBus,
        event_bus: RegistryEventBus,
    ) -> None:
        """Create an engine writing to the given store."""
        self._store = store
        self._commands = command_bus
        self._events = event_bus
        self._pending: list[RegistryEvent] = []

    async def run(self) -> None:
        """Consume commands forever."""
        self._store.add_listener(self._pending.append)
        try:
            while True:
                cmd, fut = await self._commands.get()
                try:
                    await self._handle(cmd, fut)
                finally:
                    self._commands.task_done()
        finally:
            self._store.remove_listener(self._pending.append)

    async def _handle(self, cmd: RegistryCommand, fut: asyncio.Future[Any]) -> None:
        """Apply one command, then publish its events and settle its future."""
        try:
            result = self._apply(cmd)
        except RegistryError as exc:
            self._pending.clear()
            await self._events.publish(_rejection(cmd, exc), stage="registry_engine")
            if not fut.cancelled():
                fut.set_exception(exc)
            return
        except Exception as exc:  # noqa: BLE001 - propagate into awaiting caller
            self._pending.clear()
            logger.exception("unexpected failure applying %s", cmd.type)
            if not fut.cancelled():
                fut.set_exception(exc)
            return

        events = list(self._pending)
        self._pending.clear()
        await self._events.publish_many(events, stage="registry_engine")
        if not fut.cancelled():
            fut.set_result(result)

    def _apply(self, cmd: RegistryCommand) -> Any:
        if isinstance(cmd, LaunchVirtualL1):
            return self._store.launch(cmd.metadata_uri, caller=cmd.caller)
        if isinstance(cmd, GoSovereign):
            return self._store.go_sovereign(cmd.l1_id, caller=cmd.caller)
        if isinstance(cmd, UpdateMetadata):
            return self._store.update_metadata(cmd.l1_id, cmd.metadata_uri, caller=cmd.caller)
        raise TypeError(f"Unknown command type: {type(cmd)!r}")


def _rejection(cmd: RegistryCommand, exc: RegistryError) -> CommandRejected:
    return CommandRejected(
        command=cmd.type,
        l1_id=getattr(cmd, "l1_id", None),
        caller=cmd.caller,
        error=type(exc).__name__,
        message=str(exc),
    )
