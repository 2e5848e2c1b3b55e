"""Caller-facing registry client.

Writes are sent as commands to the registry engine and awaited; reads go
straight to the store so they never queue behind writers.
"""

from __future__ import annotations

from .bus import RegistryCommandBus
from .models import (
    Address,
    GoSovereign,
    L1Id,
    L1Record,
    LaunchVirtualL1,
    UpdateMetadata,
    normalize_address,
)
from .store import L1Store


class RegistryClient:
    """Async facade over the registry's public operations.

    Caller identity is an explicit argument on every write; owner-gated
    operations compare it against the record's owner.
    """

    def __init__(self, *, store: L1Store, command_bus: RegistryCommandBus) -> None:
        """Create a client reading from `store` and writing via `command_bus`."""
        self._store = store
        self._commands = command_bus

    @property
    def total_l1s(self) -> int:
        """Number of L1s launched so far."""
        return self._store.total_l1s

    async def launch_virtual_l1(self, metadata_uri: str, *, caller: Address) -> L1Id:
        """Launch a Virtual L1 and return its id.

        Raises `InvalidMetadata` if `metadata_uri` is empty.
        """
        cmd = LaunchVirtualL1(metadata_uri=metadata_uri, caller=normalize_address(caller))
        fut = await self._commands.submit(cmd, stage="registry_client")
        return await fut

    async def go_sovereign(self, l1_id: L1Id, *, caller: Address) -> None:
        """Upgrade an L1 to sovereign.

        Raises `L1NotFound` or `NotOwner`.
        """
        cmd = GoSovereign(l1_id=l1_id, caller=normalize_address(caller))
        fut = await self._commands.submit(cmd, stage="registry_client")
        await fut

    async def update_metadata(self, l1_id: L1Id, new_metadata_uri: str, *, caller: Address) -> None:
        """Replace an L1's metadata URI.

        Raises `L1NotFound`, `NotOwner` or `InvalidMetadata`.
        """
        cmd = UpdateMetadata(l1_id=l1_id, metadata_uri=new_metadata_uri, caller=normalize_address(caller))
        fut = await self._commands.submit(cmd, stage="registry_client")
        await fut

    async def get_l1(self, l1_id: L1Id) -> L1Record:
        """Return a snapshot of an L1 record. Raises `L1NotFound`."""
        return self._store.get(l1_id)
