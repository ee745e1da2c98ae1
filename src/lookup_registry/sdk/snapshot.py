from __future__ import annotations

from dataclasses import dataclass, field

from solders.pubkey import Pubkey


@dataclass(frozen=True)
class ResolvedTable:
    """An active registry entry together with the addresses its table holds.

    `addresses` keeps the table order and any duplicates: a table that repeats
    one address 256 times is full even though it only knows one account.
    """

    category: int
    address: Pubkey
    addresses: tuple[Pubkey, ...]
    members: frozenset[Pubkey] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "members", frozenset(self.addresses))


@dataclass(frozen=True)
class RegistrySnapshot:
    """Immutable view of one authority's active tables at fetch time."""

    authority: Pubkey
    version: int
    tables: tuple[ResolvedTable, ...] = ()

    @property
    def table_addresses(self) -> list[Pubkey]:
        return [t.address for t in self.tables]
