from __future__ import annotations

from dataclasses import replace

import pytest
from solders.pubkey import Pubkey

from lookup_registry.core.tables import (
    SLOT_MAX,
    check_closable,
    create_table,
    deactivate_table,
    extend_table,
)
from lookup_registry.errors import InvalidArgumentError, InvalidSlot, InvalidStateError, LookupTableNotClosable


def test_create_accepts_only_recent_slots() -> None:
    authority = Pubkey.new_unique()
    table = create_table(authority, recent_slot=100, current_slot=100)
    assert table.meta.authority == authority
    assert table.meta.deactivation_slot == SLOT_MAX
    assert table.data_len == 56

    create_table(authority, recent_slot=100, current_slot=611)
    with pytest.raises(InvalidSlot):
        create_table(authority, recent_slot=100, current_slot=612)
    with pytest.raises(InvalidSlot):
        create_table(authority, recent_slot=101, current_slot=100)


def test_authority_checks() -> None:
    authority = Pubkey.new_unique()
    table = create_table(authority, recent_slot=0, current_slot=0)

    with pytest.raises(InvalidArgumentError):
        extend_table(table, Pubkey.new_unique(), [Pubkey.new_unique()], current_slot=1)

    frozen = replace(table, meta=replace(table.meta, authority=None))
    with pytest.raises(InvalidStateError):
        deactivate_table(frozen, authority, current_slot=1)


def test_deactivated_table_lifecycle() -> None:
    authority = Pubkey.new_unique()
    address = Pubkey.new_unique()
    table = create_table(authority, recent_slot=0, current_slot=0)

    with pytest.raises(InvalidStateError):
        check_closable(address, table, authority, current_slot=10)

    table = deactivate_table(table, authority, current_slot=10)
    assert table.meta.deactivation_slot == 10
    with pytest.raises(InvalidStateError):
        deactivate_table(table, authority, current_slot=11)
    with pytest.raises(InvalidStateError):
        extend_table(table, authority, [Pubkey.new_unique()], current_slot=11)

    with pytest.raises(LookupTableNotClosable) as ex:
        check_closable(address, table, authority, current_slot=522)
    assert ex.value.remaining_slots == 1
    check_closable(address, table, authority, current_slot=523)
