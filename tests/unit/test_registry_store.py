from __future__ import annotations

from datetime import datetime, timezone

import pytest
from pydantic import ValidationError

from registry.errors import InvalidMetadata, L1NotFound, NotOwner
from registry.models import Launched, MetadataUpdated, UpgradedToSovereign
from registry.store import L1Store

ALICE = "0xAbCdEf0000000000000000000000000000000001"
BOB = "0x0000000000000000000000000000000000000002"


def test_launch_assigns_sequential_ids_from_one(clock) -> None:
    store = L1Store(clock=clock)
    ids = [store.launch(f"ipfs://cfg-{i}", caller=ALICE) for i in range(5)]

    assert ids == [1, 2, 3, 4, 5]
    assert store.total_l1s == 5


def test_launch_stores_creation_fields(clock) -> None:
    store = L1Store(clock=clock)
    l1_id = store.launch("ipfs://a", caller=ALICE)

    record = store.get(l1_id)
    assert record.l1_id == 1
    assert record.owner == ALICE.lower()
    assert record.metadata_uri == "ipfs://a"
    assert record.launched_at == datetime(2024, 1, 1, tzinfo=timezone.utc)
    assert record.sovereign is False


def test_launch_with_empty_uri_fails_and_keeps_counter(clock) -> None:
    store = L1Store(clock=clock)
    store.launch("ipfs://a", caller=ALICE)

    with pytest.raises(InvalidMetadata):
        store.launch("", caller=ALICE)

    assert store.total_l1s == 1
    assert store.launch("ipfs://b", caller=ALICE) == 2


def test_whitespace_uri_is_not_interpreted() -> None:
    store = L1Store()
    l1_id = store.launch(" ", caller=ALICE)
    assert store.get(l1_id).metadata_uri == " "


def test_get_unknown_id_raises_not_found() -> None:
    store = L1Store()
    with pytest.raises(L1NotFound) as excinfo:
        store.get(1)
    assert excinfo.value.l1_id == 1

    store.launch("ipfs://a", caller=ALICE)
    with pytest.raises(L1NotFound):
        store.get(0)
    with pytest.raises(L1NotFound):
        store.get(2)


def test_go_sovereign_unknown_id() -> None:
    store = L1Store()
    with pytest.raises(L1NotFound):
        store.go_sovereign(7, caller=ALICE)


def test_go_sovereign_by_non_owner_is_rejected() -> None:
    store = L1Store()
    l1_id = store.launch("ipfs://a", caller=ALICE)

    with pytest.raises(NotOwner) as excinfo:
        store.go_sovereign(l1_id, caller=BOB)

    assert excinfo.value.l1_id == l1_id
    assert excinfo.value.caller == BOB
    assert store.get(l1_id).sovereign is False


def test_go_sovereign_is_idempotent() -> None:
    store = L1Store()
    l1_id = store.launch("ipfs://a", caller=ALICE)
    before = store.get(l1_id)

    store.go_sovereign(l1_id, caller=ALICE)
    first = store.get(l1_id)
    store.go_sovereign(l1_id, caller=ALICE)
    second = store.get(l1_id)

    assert first.sovereign is True
    assert second == first
    assert first.launched_at == before.launched_at
    assert first.metadata_uri == before.metadata_uri


def test_owner_match_ignores_hex_case() -> None:
    store = L1Store()
    l1_id = store.launch("ipfs://a", caller=ALICE)

    store.go_sovereign(l1_id, caller=ALICE.upper().replace("0X", "0x"))
    assert store.get(l1_id).sovereign is True


def test_update_metadata_is_visible_on_next_get() -> None:
    store = L1Store()
    l1_id = store.launch("ipfs://a", caller=ALICE)

    store.update_metadata(l1_id, "ipfs://b", caller=ALICE)

    assert store.get(l1_id).metadata_uri == "ipfs://b"


def test_update_metadata_rejections_leave_record_untouched() -> None:
    store = L1Store()
    l1_id = store.launch("ipfs://a", caller=ALICE)

    with pytest.raises(InvalidMetadata):
        store.update_metadata(l1_id, "", caller=ALICE)
    with pytest.raises(NotOwner):
        store.update_metadata(l1_id, "ipfs://evil", caller=BOB)
    with pytest.raises(L1NotFound):
        store.update_metadata(99, "ipfs://b", caller=ALICE)

    assert store.get(l1_id).metadata_uri == "ipfs://a"


def test_ownership_is_checked_before_metadata() -> None:
    store = L1Store()
    l1_id = store.launch("ipfs://a", caller=ALICE)

    with pytest.raises(NotOwner):
        store.update_metadata(l1_id, "", caller=BOB)
    with pytest.raises(L1NotFound):
        store.update_metadata(2, "", caller=ALICE)


def test_snapshots_are_read_only_and_not_affected_by_later_updates() -> None:
    store = L1Store()
    l1_id = store.launch("ipfs://a", caller=ALICE)
    snapshot = store.get(l1_id)

    with pytest.raises(ValidationError):
        snapshot.sovereign = True  # type: ignore[misc]

    store.update_metadata(l1_id, "ipfs://b", caller=ALICE)
    store.go_sovereign(l1_id, caller=ALICE)

    assert snapshot.metadata_uri == "ipfs://a"
    assert snapshot.sovereign is False


def test_empty_caller_is_a_programming_error() -> None:
    store = L1Store()
    with pytest.raises(ValueError):
        store.launch("ipfs://a", caller="  ")
    assert store.total_l1s == 0


def test_listeners_receive_events_after_successful_mutations() -> None:
    store = L1Store()
    seen: list = []
    store.add_listener(seen.append)

    l1_id = store.launch("ipfs://a", caller=ALICE)
    with pytest.raises(NotOwner):
        store.go_sovereign(l1_id, caller=BOB)
    store.go_sovereign(l1_id, caller=ALICE)
    store.go_sovereign(l1_id, caller=ALICE)
    store.update_metadata(l1_id, "ipfs://b", caller=ALICE)

    assert [type(e) for e in seen] == [Launched, UpgradedToSovereign, UpgradedToSovereign, MetadataUpdated]
    assert seen[0].l1_id == 1
    assert seen[0].owner == ALICE.lower()
    assert seen[0].metadata_uri == "ipfs://a"
    assert seen[3].metadata_uri == "ipfs://b"

    store.remove_listener(seen.append)
    store.launch("ipfs://c", caller=ALICE)
    assert len(seen) == 4


def test_failing_listener_does_not_fail_the_mutation() -> None:
    store = L1Store()
    seen: list = []

    def broken(event) -> None:  # noqa: ANN001
        raise RuntimeError("observer down")

    store.add_listener(broken)
    store.add_listener(seen.append)

    assert store.launch("ipfs://a", caller=ALICE) == 1
    store.go_sovereign(1, caller=ALICE)
    store.update_metadata(1, "ipfs://b", caller=ALICE)

    assert store.total_l1s == 1
    assert [type(e) for e in seen] == [Launched, UpgradedToSovereign, MetadataUpdated]
    assert store.get(1).sovereign is True


@pytest.mark.parametrize("bad_id", [True, False, "1", 1.0, None])
def test_non_integer_ids_are_rejected(bad_id) -> None:
    store = L1Store()
    store.launch("ipfs://a", caller=ALICE)

    with pytest.raises(TypeError):
        store.get(bad_id)
    with pytest.raises(TypeError):
        store.go_sovereign(bad_id, caller=ALICE)
    with pytest.raises(TypeError):
        store.update_metadata(bad_id, "ipfs://b", caller=ALICE)

    record = store.get(1)
    assert record.sovereign is False
    assert record.metadata_uri == "ipfs://a"
