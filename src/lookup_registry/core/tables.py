"""Address lookup table accounts and the rules the table program enforces.

The functions here return new values and never mutate their inputs; the store
decides when a result is committed.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Sequence

from solders.pubkey import Pubkey

from ..errors import InvalidArgumentError, InvalidSlot, InvalidStateError, LookupTableFull, LookupTableNotClosable

LOOKUP_TABLE_META_SIZE = 56
LOOKUP_TABLE_MAX_ADDRESSES = 256
# Deactivation slot of a table that is still active.
SLOT_MAX = 2**64 - 1
# Number of recent slots the cluster keeps hashes for.
SLOT_HASHES_MAX_ENTRIES = 512


@dataclass(frozen=True)
class LookupTableMeta:
    deactivation_slot: int = SLOT_MAX
    last_extended_slot: int = 0
    last_extended_slot_start_index: int = 0
    authority: Pubkey | None = None
    padding: int = 0

    @property
    def is_active(self) -> bool:
        return self.deactivation_slot == SLOT_MAX


@dataclass(frozen=True)
class AddressLookupTable:
    meta: LookupTableMeta
    addresses: tuple[Pubkey, ...] = ()

    @property
    def data_len(self) -> int:
        return LOOKUP_TABLE_META_SIZE + 32 * len(self.addresses)


def _require_authority(table: AddressLookupTable, authority: Pubkey) -> None:
    if table.meta.authority is None:
        raise InvalidStateError("Lookup table is frozen")
    if table.meta.authority != authority:
        raise InvalidArgumentError("Incorrect lookup table authority")


def create_table(authority: Pubkey, *, recent_slot: int, current_slot: int) -> AddressLookupTable:
    """A new, empty table. `recent_slot` must be one the cluster still remembers."""
    if recent_slot > current_slot or current_slot - recent_slot >= SLOT_HASHES_MAX_ENTRIES:
        raise InvalidSlot(f"{recent_slot} is not a recent slot (current slot is {current_slot})")
    return AddressLookupTable(meta=LookupTableMeta(authority=authority))


def extend_table(
    table: AddressLookupTable,
    authority: Pubkey,
    new_addresses: Sequence[Pubkey],
    *,
    current_slot: int,
) -> AddressLookupTable:
    _require_authority(table, authority)
    if not table.meta.is_active:
        raise InvalidStateError("Deactivated tables cannot be extended")
    if not new_addresses:
        raise InvalidArgumentError("Must extend with at least one address")

    old_len = len(table.addresses)
    new_len = old_len + len(new_addresses)
    if new_len > LOOKUP_TABLE_MAX_ADDRESSES:
        raise LookupTableFull(
            f"Extended lookup table length {new_len} would exceed max capacity of {LOOKUP_TABLE_MAX_ADDRESSES}"
        )

    meta = table.meta
    if current_slot != meta.last_extended_slot:
        meta = replace(meta, last_extended_slot=current_slot, last_extended_slot_start_index=old_len)
    return AddressLookupTable(meta=meta, addresses=table.addresses + tuple(new_addresses))


def deactivate_table(table: AddressLookupTable, authority: Pubkey, *, current_slot: int) -> AddressLookupTable:
    _require_authority(table, authority)
    if not table.meta.is_active:
        raise InvalidStateError("Lookup table is already deactivated")
    return replace(table, meta=replace(table.meta, deactivation_slot=current_slot))


def check_closable(address: Pubkey, table: AddressLookupTable, authority: Pubkey, *, current_slot: int) -> None:
    """Raise unless the table finished its deactivation cool-down."""
    _require_authority(table, authority)
    if table.meta.is_active:
        raise InvalidStateError("Lookup table is not deactivated")
    elapsed = current_slot - table.meta.deactivation_slot
    if elapsed <= SLOT_HASHES_MAX_ENTRIES:
        raise LookupTableNotClosable(address, SLOT_HASHES_MAX_ENTRIES - elapsed + 1)
