from __future__ import annotations

from .addresses import (
    DEFAULT_PUBKEY,
    LOOKUP_TABLE_PROGRAM_ID,
    LOOKUP_TABLE_REGISTRY_ID,
    derive_lookup_table_address,
    derive_registry_address,
    parse_pubkey,
)
from .state import (
    DEACTIVATED,
    EMPTY,
    MAX_REGISTRY_ENTRIES,
    NEXT_CATEGORY,
    EntryState,
    Registry,
    RegistryEntry,
    minimum_balance,
)
from .tables import LOOKUP_TABLE_MAX_ADDRESSES, AddressLookupTable, LookupTableMeta
from .transitions import (
    AppendAddresses,
    Command,
    CreateTable,
    InitRegistry,
    RemoveTable,
    Transition,
    apply,
)

__all__ = [
    "DEFAULT_PUBKEY",
    "LOOKUP_TABLE_PROGRAM_ID",
    "LOOKUP_TABLE_REGISTRY_ID",
    "derive_lookup_table_address",
    "derive_registry_address",
    "parse_pubkey",
    "EMPTY",
    "DEACTIVATED",
    "NEXT_CATEGORY",
    "MAX_REGISTRY_ENTRIES",
    "EntryState",
    "Registry",
    "RegistryEntry",
    "minimum_balance",
    "LOOKUP_TABLE_MAX_ADDRESSES",
    "AddressLookupTable",
    "LookupTableMeta",
    "Command",
    "InitRegistry",
    "CreateTable",
    "AppendAddresses",
    "RemoveTable",
    "Transition",
    "apply",
]
