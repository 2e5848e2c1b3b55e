"""Virtual L1 launch registry.

A single record store (`L1Store`) served by a single-writer engine
(`RegistryEngine`) and exposed to callers through `RegistryClient`.
"""

from .bus import RegistryCommandBus, RegistryEventBus
from .client import RegistryClient
from .engine import RegistryEngine
from .errors import InvalidMetadata, L1NotFound, NotOwner, RegistryError
from .models import L1Record, normalize_address
from .store import L1Store

__all__ = [
    "InvalidMetadata",
    "L1NotFound",
    "L1Record",
    "L1Store",
    "NotOwner",
    "RegistryClient",
    "RegistryCommandBus",
    "RegistryEngine",
    "RegistryError",
    "RegistryEventBus",
    "normalize_address",
]
