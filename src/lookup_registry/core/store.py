from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Iterable, Sequence

from solders.pubkey import Pubkey

from ..errors import AccountNotFound, AlreadyExists, InsufficientFunds, InvalidLookupTable
from ..io.registry_codec import encode_registry
from ..io.table_codec import encode_table
from .state import Registry, minimum_balance
from . import tables as table_program
from .tables import LOOKUP_TABLE_META_SIZE, AddressLookupTable
from .transitions import (
    AllocateRegistry,
    AppendAddresses,
    CloseLookupTable,
    Command,
    CreateLookupTable,
    CreateTable,
    DeactivateLookupTable,
    Effect,
    ExtendLookupTable,
    GrowRegistry,
    InitRegistry,
    RemoveTable,
    apply,
)

logger = logging.getLogger(__name__)


@dataclass
class _Staged:
    """Copies of the mutable maps a submission works on before committing."""

    registries: dict[Pubkey, Registry]
    tables: dict[Pubkey, AddressLookupTable]
    lamports: dict[Pubkey, int]


class RegistryStore:
    """Authoritative, in-process copy of every registry and the tables they own.

    The store plays the role of the execution environment: it serializes
    submissions under one lock, runs the registry transition, performs its
    effects against the local lookup table program and commits everything or
    nothing. It also answers account reads with the same bytes a cluster would
    return, so client code can be pointed at it directly.
    """

    def __init__(self, *, slot: int = 0) -> None:
        self._lock = threading.RLock()
        self._slot = int(slot)
        self._registries: dict[Pubkey, Registry] = {}
        self._tables: dict[Pubkey, AddressLookupTable] = {}
        self._lamports: dict[Pubkey, int] = {}
        # Registry account address -> authority.
        self._owners: dict[Pubkey, Pubkey] = {}

    # Clock and balances

    @property
    def slot(self) -> int:
        with self._lock:
            return self._slot

    def get_slot(self) -> int:
        return self.slot

    def advance_slot(self, n: int = 1) -> int:
        if int(n) < 0:
            raise ValueError("n must be >= 0")
        with self._lock:
            self._slot += int(n)
            return self._slot

    def airdrop(self, address: Pubkey, lamports: int) -> int:
        if int(lamports) <= 0:
            raise ValueError("lamports must be > 0")
        with self._lock:
            self._lamports[address] = self._lamports.get(address, 0) + int(lamports)
            return self._lamports[address]

    def balance(self, address: Pubkey) -> int:
        with self._lock:
            return self._lamports.get(address, 0)

    # State access

    def registry(self, authority: Pubkey) -> Registry | None:
        with self._lock:
            return self._registries.get(authority)

    def table(self, address: Pubkey) -> AddressLookupTable | None:
        with self._lock:
            return self._tables.get(address)

    def _account_data_locked(self, address: Pubkey) -> bytes | None:
        table = self._tables.get(address)
        if table is not None:
            return encode_table(table)
        owner = self._owners.get(address)
        if owner is None:
            return None
        return encode_registry(self._registries[owner])

    def get_account(self, address: Pubkey) -> bytes:
        with self._lock:
            data = self._account_data_locked(address)
        if data is None:
            raise AccountNotFound(address)
        return data

    def get_multiple_accounts(self, addresses: Sequence[Pubkey]) -> list[bytes | None]:
        with self._lock:
            return [self._account_data_locked(a) for a in addresses]

    # Submissions

    def submit(self, command: Command) -> Registry:
        """Apply one command atomically and return the committed registry."""
        with self._lock:
            current = self._registries.get(command.authority)
            transition = apply(current, command, slot=self._slot)

            staged = _Staged(
                registries=dict(self._registries),
                tables=dict(self._tables),
                lamports=dict(self._lamports),
            )
            for effect in transition.effects:
                self._execute_locked(staged, effect)
            staged.registries[command.authority] = transition.registry

            self._registries = staged.registries
            self._tables = staged.tables
            self._lamports = staged.lamports
            if current is None:
                self._owners[transition.registry.address] = command.authority
            self._slot += 1

        logger.info(
            "Applied %s for %s (len=%d capacity=%d)",
            type(command).__name__,
            command.authority,
            transition.registry.len,
            transition.registry.capacity,
        )
        return transition.registry

    def init_registry(self, authority: Pubkey, payer: Pubkey | None = None) -> Registry:
        return self.submit(InitRegistry(authority=authority, payer=payer or authority))

    def create_table(self, authority: Pubkey, table: Pubkey, recent_slot: int, payer: Pubkey | None = None) -> Registry:
        return self.submit(
            CreateTable(authority=authority, payer=payer or authority, table=table, recent_slot=int(recent_slot))
        )

    def append_addresses(
        self,
        authority: Pubkey,
        table: Pubkey,
        addresses: Iterable[Pubkey],
        payer: Pubkey | None = None,
    ) -> Registry:
        return self.submit(
            AppendAddresses(authority=authority, payer=payer or authority, table=table, addresses=tuple(addresses))
        )

    def remove_table(self, authority: Pubkey, table: Pubkey, recipient: Pubkey | None = None) -> Registry:
        return self.submit(RemoveTable(authority=authority, recipient=recipient or authority, table=table))

    # Effects

    def _execute_locked(self, staged: _Staged, effect: Effect) -> None:
        if isinstance(effect, AllocateRegistry):
            self._fund(staged, effect.payer, effect.address, minimum_balance(effect.size))
        elif isinstance(effect, GrowRegistry):
            delta = minimum_balance(effect.new_size) - staged.lamports.get(effect.address, 0)
            self._fund(staged, effect.payer, effect.address, max(delta, 0))
        elif isinstance(effect, CreateLookupTable):
            if effect.table in staged.tables or staged.lamports.get(effect.table, 0) > 0:
                raise AlreadyExists(effect.table)
            table = table_program.create_table(effect.authority, recent_slot=effect.recent_slot, current_slot=self._slot)
            self._fund(staged, effect.payer, effect.table, minimum_balance(LOOKUP_TABLE_META_SIZE))
            staged.tables[effect.table] = table
            logger.info("Created lookup table %s", effect.table)
        elif isinstance(effect, ExtendLookupTable):
            table = self._require_table(staged, effect.table)
            extended = table_program.extend_table(table, effect.authority, effect.addresses, current_slot=self._slot)
            delta = minimum_balance(extended.data_len) - staged.lamports.get(effect.table, 0)
            self._fund(staged, effect.payer, effect.table, max(delta, 0))
            staged.tables[effect.table] = extended
        elif isinstance(effect, DeactivateLookupTable):
            table = self._require_table(staged, effect.table)
            staged.tables[effect.table] = table_program.deactivate_table(table, effect.authority, current_slot=self._slot)
            logger.info("Deactivated lookup table %s at slot %d", effect.table, self._slot)
        elif isinstance(effect, CloseLookupTable):
            table = self._require_table(staged, effect.table)
            table_program.check_closable(effect.table, table, effect.authority, current_slot=self._slot)
            refund = staged.lamports.pop(effect.table, 0)
            staged.lamports[effect.recipient] = staged.lamports.get(effect.recipient, 0) + refund
            del staged.tables[effect.table]
            logger.info("Closed lookup table %s", effect.table)
        else:
            raise TypeError(f"Unsupported effect: {type(effect).__name__}")

    @staticmethod
    def _require_table(staged: _Staged, address: Pubkey) -> AddressLookupTable:
        table = staged.tables.get(address)
        if table is None:
            raise InvalidLookupTable(f"Lookup table account {address} does not exist")
        return table

    @staticmethod
    def _fund(staged: _Staged, payer: Pubkey, address: Pubkey, amount: int) -> None:
        if amount <= 0:
            return
        available = staged.lamports.get(payer, 0)
        if available < amount:
            raise InsufficientFunds(payer, amount, available)
        staged.lamports[payer] = available - amount
        staged.lamports[address] = staged.lamports.get(address, 0) + amount
