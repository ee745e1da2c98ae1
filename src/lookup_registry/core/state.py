from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Literal

from solders.pubkey import Pubkey

from ..errors import InvalidState
from .addresses import DEFAULT_PUBKEY, derive_registry_address

# Wire values of the entry discriminator.
EMPTY = 0
DEACTIVATED = 1
# Category assigned to every newly created entry.
NEXT_CATEGORY = DEACTIVATED + 1

ACCOUNT_SIZE_LIMIT = 10240
# Anchor account discriminator.
ACCOUNT_DISCRIMINATOR_SIZE = 8
# In-memory size of the registry struct (header + Vec), used for allocation.
REGISTRY_STRUCT_SIZE = 72
REGISTRY_ENTRY_SIZE = 40
REGISTRY_BASE_SPACE = ACCOUNT_DISCRIMINATOR_SIZE + REGISTRY_STRUCT_SIZE
MAX_REGISTRY_ENTRIES = (ACCOUNT_SIZE_LIMIT - REGISTRY_STRUCT_SIZE) // REGISTRY_ENTRY_SIZE

# Default rent parameters of the cluster.
ACCOUNT_STORAGE_OVERHEAD = 128
LAMPORTS_PER_BYTE_YEAR = 3480
EXEMPTION_THRESHOLD_YEARS = 2


def minimum_balance(data_len: int) -> int:
    """Rent-exempt lamports for an account holding `data_len` bytes."""
    return (ACCOUNT_STORAGE_OVERHEAD + int(data_len)) * LAMPORTS_PER_BYTE_YEAR * EXEMPTION_THRESHOLD_YEARS


EntryKind = Literal["empty", "deactivated", "active"]


@dataclass(frozen=True)
class EntryState:
    """Lifecycle of a registry slot.

    On the wire this is a single u64: 0 is empty, 1 is deactivated and any
    value >= 2 is an active entry whose value is its category.
    """

    kind: EntryKind
    category: int = 0

    @classmethod
    def empty(cls) -> "EntryState":
        return cls("empty", EMPTY)

    @classmethod
    def deactivated(cls) -> "EntryState":
        return cls("deactivated", DEACTIVATED)

    @classmethod
    def active(cls, category: int = NEXT_CATEGORY) -> "EntryState":
        if int(category) <= DEACTIVATED:
            raise ValueError(f"Active categories must be > {DEACTIVATED}, got {category}")
        return cls("active", int(category))

    @classmethod
    def from_discriminator(cls, discriminator: int) -> "EntryState":
        d = int(discriminator)
        if d == EMPTY:
            return cls.empty()
        if d == DEACTIVATED:
            return cls.deactivated()
        return cls.active(d)

    @property
    def discriminator(self) -> int:
        return int(self.category)

    @property
    def is_empty(self) -> bool:
        return self.kind == "empty"

    @property
    def is_active(self) -> bool:
        return self.kind == "active"


@dataclass(frozen=True)
class RegistryEntry:
    state: EntryState = field(default_factory=EntryState.empty)
    table: Pubkey = DEFAULT_PUBKEY

    @property
    def discriminator(self) -> int:
        return self.state.discriminator


@dataclass(frozen=True, kw_only=True)
class Registry:
    """The registry account of one authority.

    `entries` always holds `capacity` slots; `len` counts the non-empty ones.
    """

    authority: Pubkey
    version: int = 0
    seed: int = 0
    len: int = 0
    capacity: int = 0
    last_created_slot: int = 0
    entries: tuple[RegistryEntry, ...] = ()

    @classmethod
    def new(cls, authority: Pubkey, *, slot: int) -> "Registry":
        _, bump = derive_registry_address(authority)
        return cls(authority=authority, seed=bump, last_created_slot=int(slot))

    @property
    def address(self) -> Pubkey:
        return derive_registry_address(self.authority)[0]

    @property
    def data_len(self) -> int:
        return REGISTRY_BASE_SPACE + REGISTRY_ENTRY_SIZE * int(self.capacity)

    def find_entry(self, table: Pubkey) -> int | None:
        """Index of the first slot referencing `table`."""
        for idx, entry in enumerate(self.entries):
            if entry.table == table:
                return idx
        return None

    def find_empty_entry(self) -> int | None:
        for idx, entry in enumerate(self.entries):
            if entry.state.is_empty:
                return idx
        return None

    def active_entries(self) -> list[RegistryEntry]:
        return [e for e in self.entries if e.state.is_active]

    def with_entry(self, index: int, entry: RegistryEntry, **changes: int) -> "Registry":
        entries = list(self.entries)
        entries[index] = entry
        return replace(self, entries=tuple(entries), **changes)

    def check_invariants(self) -> None:
        if not (0 <= self.len <= self.capacity <= MAX_REGISTRY_ENTRIES):
            raise InvalidState(
                f"Registry bounds violated: len={self.len} capacity={self.capacity} max={MAX_REGISTRY_ENTRIES}"
            )
        if len(self.entries) != self.capacity:
            raise InvalidState(f"Registry holds {len(self.entries)} slots but capacity is {self.capacity}")
        used = sum(1 for e in self.entries if not e.state.is_empty)
        if used != self.len:
            raise InvalidState(f"Registry len is {self.len} but {used} slots are in use")
