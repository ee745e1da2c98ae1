from __future__ import annotations

from .config import Settings
from .core.addresses import (
    LOOKUP_TABLE_PROGRAM_ID,
    LOOKUP_TABLE_REGISTRY_ID,
    derive_lookup_table_address,
    derive_registry_address,
)
from .core.state import EntryState, Registry, RegistryEntry
from .core.store import RegistryStore
from .errors import LookupRegistryError
from .runtime.server import LookupServer, run
from .sdk.cache import RegistryCache
from .sdk.compression import FindAddressesResult, Instruction, find_addresses
from .sdk.lookup import LookupRegistryReader
from .sdk.reader import RpcAccountReader
from .sdk.writer import RegistryWriter

__all__ = [
    "Settings",
    "LOOKUP_TABLE_PROGRAM_ID",
    "LOOKUP_TABLE_REGISTRY_ID",
    "derive_lookup_table_address",
    "derive_registry_address",
    "EntryState",
    "Registry",
    "RegistryEntry",
    "RegistryStore",
    "LookupRegistryError",
    "LookupServer",
    "run",
    "RegistryCache",
    "FindAddressesResult",
    "Instruction",
    "find_addresses",
    "LookupRegistryReader",
    "RpcAccountReader",
    "RegistryWriter",
]
