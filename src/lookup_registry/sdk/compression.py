from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Mapping, Sequence

from solders.pubkey import Pubkey

from .snapshot import RegistrySnapshot

# A table has to replace at least this many accounts to be worth referencing.
MIN_TABLE_MATCHES = 2


@dataclass(frozen=True)
class Instruction:
    """The account footprint of one instruction: its program and accounts."""

    program_id: Pubkey
    accounts: tuple[Pubkey, ...] = ()

    @classmethod
    def new(cls, program_id: Pubkey, accounts: Iterable[Pubkey]) -> "Instruction":
        return cls(program_id=program_id, accounts=tuple(accounts))


@dataclass(frozen=True)
class FindAddressesResult:
    matches: list[Pubkey]
    distinct: int
    unmatched: int


def distinct_accounts(instructions: Iterable[Instruction]) -> set[Pubkey]:
    accounts: set[Pubkey] = set()
    for ix in instructions:
        accounts.add(ix.program_id)
        accounts.update(ix.accounts)
    return accounts


def find_addresses(
    instructions: Sequence[Instruction],
    authorities: Sequence[Pubkey],
    snapshots: Mapping[Pubkey, RegistrySnapshot],
) -> FindAddressesResult:
    """Pick lookup tables that cover as many of the instructions' accounts as possible.

    Greedy and single pass: authorities are visited in the given order and
    their tables in stored order. A table is taken when it covers more than
    one still-unmatched account, and the accounts it covers are then no longer
    available to later tables. Authorities without a snapshot are skipped.
    """
    remaining = distinct_accounts(instructions)
    distinct = len(remaining)

    matches: list[Pubkey] = []
    for authority in authorities:
        snapshot = snapshots.get(authority)
        if snapshot is None:
            continue
        for table in snapshot.tables:
            if len(table.addresses) < len(remaining):
                intersection = {a for a in table.addresses if a in remaining}
            else:
                intersection = {a for a in remaining if a in table.members}

            if len(intersection) >= MIN_TABLE_MATCHES:
                matches.append(table.address)
                remaining.difference_update(intersection)

    return FindAddressesResult(matches=matches, distinct=distinct, unmatched=len(remaining))
