"""In-memory record store for launched Virtual L1s.

The store is the only owner of the id counter and the id -> record mapping.
Every mutation validates first and writes last, so a failed operation leaves
no partial state behind. Listeners are notified after each successful
mutation, outside the lock.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from datetime import datetime

from .errors import InvalidMetadata, L1NotFound, NotOwner
from .models import (
    Address,
    L1Id,
    L1Record,
    Launched,
    MetadataUpdated,
    RegistryEvent,
    UpgradedToSovereign,
    normalize_address,
    utc_now,
)

logger = logging.getLogger(__name__)

Listener = Callable[[RegistryEvent], None]


class L1Store:
    """Counter + mapping of launched L1s, guarded by a single lock."""

    def __init__(self, *, clock: Callable[[], datetime] = utc_now) -> None:
        self._clock = clock
        self._lock = threading.Lock()
        self._total_l1s: int = 0
        self._records: dict[L1Id, L1Record] = {}
        self._listeners: list[Listener] = []

    @property
    def total_l1s(self) -> int:
        """Number of L1s launched so far (also the highest assigned id)."""
        with self._lock:
            return self._total_l1s

    def add_listener(self, listener: Listener) -> None:
        """Register a callback invoked with each event after a successful mutation."""
        self._listeners.append(listener)

    def remove_listener(self, listener: Listener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def launch(self, metadata_uri: str, *, caller: Address) -> L1Id:
        """Launch a new Virtual L1 owned by `caller` and return its id."""
        owner = normalize_address(caller)
        if not metadata_uri:
            logger.debug("launch rejected for %s: empty metadata URI", owner)
            raise InvalidMetadata()

        with self._lock:
            self._total_l1s += 1
            l1_id = self._total_l1s
            self._records[l1_id] = L1Record(
                l1_id=l1_id,
                owner=owner,
                metadata_uri=metadata_uri,
                launched_at=self._clock(),
            )

        logger.info("L1 %d launched by %s (%s)", l1_id, owner, metadata_uri)
        self._notify(Launched(l1_id=l1_id, owner=owner, metadata_uri=metadata_uri))
        return l1_id

    def go_sovereign(self, l1_id: L1Id, *, caller: Address) -> None:
        """Mark an L1 as sovereign. Owner only; repeating it changes nothing."""
        who = normalize_address(caller)
        with self._lock:
            record = self._owned_record(l1_id, who)
            if not record.sovereign:
                self._records[l1_id] = record.model_copy(update={"sovereign": True})

        logger.info("L1 %d is sovereign", l1_id)
        self._notify(UpgradedToSovereign(l1_id=l1_id))

    def update_metadata(self, l1_id: L1Id, metadata_uri: str, *, caller: Address) -> None:
        """Replace an L1's metadata URI. Owner only; the URI must be non-empty."""
        who = normalize_address(caller)
        with self._lock:
            record = self._owned_record(l1_id, who)
            if not metadata_uri:
                logger.debug("metadata update rejected for L1 %d: empty metadata URI", l1_id)
                raise InvalidMetadata()
            self._records[l1_id] = record.model_copy(update={"metadata_uri": metadata_uri})

        logger.info("L1 %d metadata updated (%s)", l1_id, metadata_uri)
        self._notify(MetadataUpdated(l1_id=l1_id, metadata_uri=metadata_uri))

    def get(self, l1_id: L1Id) -> L1Record:
        """Return a read-only snapshot of an L1 record."""
        _check_l1_id(l1_id)
        with self._lock:
            record = self._records.get(l1_id)
        if record is None:
            raise L1NotFound(l1_id)
        return record

    def _owned_record(self, l1_id: L1Id, caller: Address) -> L1Record:
        # Caller must hold the lock.
        _check_l1_id(l1_id)
        record = self._records.get(l1_id)
        if record is None:
            logger.debug("L1 %d not found (caller %s)", l1_id, caller)
            raise L1NotFound(l1_id)
        if record.owner != caller:
            logger.debug("%s is not the owner of L1 %d", caller, l1_id)
            raise NotOwner(l1_id, caller)
        return record

    def _notify(self, event: RegistryEvent) -> None:
        # State is already committed; listener failures are logged, not raised.
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception:  # noqa: BLE001 - listeners must not fail the mutation
                logger.exception("listener %r failed on %s", listener, event.type)


def _check_l1_id(l1_id: L1Id) -> None:
    """Reject non-integer ids; `True` would otherwise alias L1 1."""
    if isinstance(l1_id, bool) or not isinstance(l1_id, int):
        raise TypeError(f"L1 id must be an int. Got: {l1_id!r}")
