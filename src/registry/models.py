"""Normalized models for the Virtual L1 registry.

Three groups live here:
- the stored record (`L1Record`), handed out as a read-only snapshot
- commands flowing from callers to the registry engine
- events published after every successful mutation (plus command rejections)
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Literal, TypeAlias

from pydantic import BaseModel, ConfigDict, Field, StrictInt

L1Id: TypeAlias = int
Address: TypeAlias = str


def utc_now() -> datetime:
    return datetime.now(tz=timezone.utc)


def normalize_address(address: Address) -> Address:
    """Normalize a caller/owner identity for comparison.

    Surrounding whitespace is dropped and `0x`-prefixed hex addresses are
    lower-cased so checksummed and plain spellings of one address match.
    """
    if address is None:
        raise ValueError("address is required")
    value = str(address).strip()
    if not value:
        raise ValueError("address must not be empty")
    if value[:2] in {"0x", "0X"}:
        body = value[2:]
        if body and all(c in "0123456789abcdefABCDEF" for c in body):
            return "0x" + body.lower()
    return value


class _Model(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True)


class L1Record(_Model):
    """A launched Virtual L1. Never deleted; replaced as a whole on change."""

    l1_id: L1Id
    owner: Address
    metadata_uri: str
    launched_at: datetime
    sovereign: bool = False


class LaunchVirtualL1(_Model):
    type: Literal["launch_virtual_l1"] = "launch_virtual_l1"
    metadata_uri: str
    caller: Address
    ts: datetime = Field(default_factory=utc_now)


class GoSovereign(_Model):
    type: Literal["go_sovereign"] = "go_sovereign"
    l1_id: StrictInt
    caller: Address
    ts: datetime = Field(default_factory=utc_now)


class UpdateMetadata(_Model):
    type: Literal["update_metadata"] = "update_metadata"
    l1_id: StrictInt
    metadata_uri: str
    caller: Address
    ts: datetime = Field(default_factory=utc_now)


RegistryCommand = LaunchVirtualL1 | GoSovereign | UpdateMetadata


class Launched(_Model):
    type: Literal["launched"] = "launched"
    l1_id: L1Id
    owner: Address
    metadata_uri: str
    ts: datetime = Field(default_factory=utc_now)


class UpgradedToSovereign(_Model):
    type: Literal["upgraded_to_sovereign"] = "upgraded_to_sovereign"
    l1_id: L1Id
    ts: datetime = Field(default_factory=utc_now)


class MetadataUpdated(_Model):
    type: Literal["metadata_updated"] = "metadata_updated"
    l1_id: L1Id
    metadata_uri: str
    ts: datetime = Field(default_factory=utc_now)


class CommandRejected(_Model):
    """A command that aborted without changing state."""

    type: Literal["command_rejected"] = "command_rejected"
    command: str
    l1_id: L1Id | None = None
    caller: Address | None = None
    # Exception class name, e.g. "NotOwner".
    error: str
    message: str
    ts: datetime = Field(default_factory=utc_now)


RegistryEvent = Launched | UpgradedToSovereign | MetadataUpdated | CommandRejected
