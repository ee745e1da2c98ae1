from __future__ import annotations

from solders.pubkey import Pubkey

from lookup_registry.sdk.compression import Instruction, find_addresses
from lookup_registry.sdk.snapshot import RegistrySnapshot, ResolvedTable


def _keys(n: int) -> list[Pubkey]:
    return [Pubkey.new_unique() for _ in range(n)]


def _snapshot(authority: Pubkey, *tables: ResolvedTable) -> RegistrySnapshot:
    return RegistrySnapshot(authority=authority, version=0, tables=tuple(tables))


def _table(addresses: list[Pubkey]) -> ResolvedTable:
    return ResolvedTable(category=2, address=Pubkey.new_unique(), addresses=tuple(addresses))


def test_table_covering_six_of_ten_accounts_is_selected() -> None:
    accounts = _keys(10)
    ix = Instruction.new(accounts[0], accounts[1:])
    table = _table(accounts[:6] + _keys(2))
    authority = Pubkey.new_unique()

    result = find_addresses([ix], [authority], {authority: _snapshot(authority, table)})

    assert result.matches == [table.address]
    assert result.distinct == 10
    assert result.unmatched == 4


def test_single_overlap_is_not_worth_a_table() -> None:
    accounts = _keys(10)
    ix = Instruction.new(accounts[0], accounts[1:])
    table = _table([accounts[3]] + _keys(5))
    authority = Pubkey.new_unique()

    result = find_addresses([ix], [authority], {authority: _snapshot(authority, table)})

    assert result.matches == []
    assert result.distinct == 10
    assert result.unmatched == 10


def test_disjoint_tables_never_match() -> None:
    accounts = _keys(4)
    ix = Instruction.new(accounts[0], accounts[1:])
    authority = Pubkey.new_unique()
    snap = _snapshot(authority, _table(_keys(3)), _table(_keys(300)))

    result = find_addresses([ix], [authority], {authority: snap})
    assert result.matches == []
    assert result.unmatched == 4


def test_greedy_order_removes_matched_accounts() -> None:
    accounts = _keys(6)
    ix = Instruction.new(accounts[0], accounts[1:])
    first = _table(accounts[:4])
    # Overlaps `first` on accounts[2:4]; only accounts[4] is left for it.
    second = _table(accounts[2:5])
    third = _table(accounts[4:6])

    a1, a2 = Pubkey.new_unique(), Pubkey.new_unique()
    snapshots = {a1: _snapshot(a1, first, second), a2: _snapshot(a2, third)}

    result = find_addresses([ix], [a1, a2], snapshots)
    assert result.matches == [first.address, third.address]
    assert result.distinct == 6
    assert result.unmatched == 0


def test_authority_order_is_respected() -> None:
    accounts = _keys(3)
    ix = Instruction.new(accounts[0], accounts[1:])
    a1, a2 = Pubkey.new_unique(), Pubkey.new_unique()
    t1 = _table(accounts)
    t2 = _table(accounts)
    snapshots = {a1: _snapshot(a1, t1), a2: _snapshot(a2, t2)}

    assert find_addresses([ix], [a1, a2], snapshots).matches == [t1.address]
    assert find_addresses([ix], [a2, a1], snapshots).matches == [t2.address]


def test_repeated_table_is_not_deduplicated() -> None:
    accounts = _keys(4)
    ix = Instruction.new(accounts[0], accounts[1:])
    authority = Pubkey.new_unique()
    same = ResolvedTable(category=2, address=Pubkey.new_unique(), addresses=tuple(accounts[:2]))
    again = ResolvedTable(category=2, address=same.address, addresses=tuple(accounts[2:]))

    result = find_addresses([ix], [authority], {authority: _snapshot(authority, same, again)})
    assert result.matches == [same.address, same.address]
    assert result.unmatched == 0


def test_missing_snapshots_are_skipped() -> None:
    accounts = _keys(3)
    ix = Instruction.new(accounts[0], accounts[1:])
    result = find_addresses([ix], [Pubkey.new_unique()], {})
    assert result.matches == []
    assert result.distinct == result.unmatched == 3


def test_accounts_shared_between_instructions_count_once() -> None:
    program = Pubkey.new_unique()
    shared = _keys(2)
    ixs = [Instruction.new(program, shared), Instruction.new(program, shared + [program])]
    result = find_addresses(ixs, [], {})
    assert result.distinct == 3


def test_same_input_same_output() -> None:
    accounts = _keys(20)
    ix = Instruction.new(accounts[0], accounts[1:])
    authority = Pubkey.new_unique()
    snap = _snapshot(authority, _table(accounts[:5]), _table(accounts[5:12]), _table(accounts[1:3] + _keys(4)))

    first = find_addresses([ix], [authority], {authority: snap})
    for _ in range(5):
        assert find_addresses([ix], [authority], {authority: snap}) == first
