"""Registry exception hierarchy.

All three registry errors are caller faults (bad input or wrong identity) and
are never retried by the system.
"""

from __future__ import annotations


class RegistryError(Exception):
    """Base exception for all registry errors."""


class InvalidMetadata(RegistryError):
    """Raised when an empty metadata URI is supplied to launch or update."""

    def __init__(self, message: str = "metadata URI must not be empty") -> None:
        super().__init__(message)


class L1NotFound(RegistryError):
    """Raised when the referenced L1 id was never created."""

    def __init__(self, l1_id: int) -> None:
        self.l1_id = l1_id
        super().__init__(f"L1 {l1_id} not found")


class NotOwner(RegistryError):
    """Raised when the caller does not own the L1 on an owner-gated operation."""

    def __init__(self, l1_id: int, caller: str) -> None:
        self.l1_id = l1_id
        self.caller = caller
        super().__init__(f"{caller} is not the owner of L1 {l1_id}")
