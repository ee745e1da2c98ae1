from __future__ import annotations

from .cache import RegistryCache
from .compression import FindAddressesResult, Instruction, find_addresses
from .lookup import LookupRegistryReader
from .reader import AccountReader, RpcAccountReader, fetch_registry
from .snapshot import RegistrySnapshot, ResolvedTable
from .writer import RegistryWriter, SubmissionChannel

__all__ = [
    "RegistryCache",
    "FindAddressesResult",
    "Instruction",
    "find_addresses",
    "LookupRegistryReader",
    "AccountReader",
    "RpcAccountReader",
    "fetch_registry",
    "RegistrySnapshot",
    "ResolvedTable",
    "RegistryWriter",
    "SubmissionChannel",
]
