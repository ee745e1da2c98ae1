from __future__ import annotations

import logging
from typing import Iterable, Protocol, Sequence

from solders.pubkey import Pubkey

from ..core.addresses import derive_lookup_table_address, derive_registry_address
from ..core.state import Registry, RegistryEntry
from ..core.tables import AddressLookupTable
from ..core.transitions import AppendAddresses, Command, CreateTable, InitRegistry, RemoveTable
from ..errors import AccountNotFound, InvalidLookupTable, RegistryNotFound
from ..io.registry_codec import decode_registry
from ..io.table_codec import decode_table

logger = logging.getLogger(__name__)


class SubmissionChannel(Protocol):
    """Where registry commands are sent and accounts are read back.

    `RegistryStore` implements this directly.
    """

    def submit(self, command: Command) -> Registry: ...

    def get_account(self, address: Pubkey) -> bytes: ...

    def get_multiple_accounts(self, addresses: Sequence[Pubkey]) -> list[bytes | None]: ...

    def get_slot(self) -> int: ...


class RegistryWriter:
    """Manage the registry and lookup tables of one authority."""

    def __init__(self, channel: SubmissionChannel, authority: Pubkey, payer: Pubkey) -> None:
        self.channel = channel
        self.authority = authority
        self.payer = payer

    @property
    def registry_address(self) -> Pubkey:
        return derive_registry_address(self.authority)[0]

    @classmethod
    def new_or_create(cls, channel: SubmissionChannel, authority: Pubkey, payer: Pubkey) -> "RegistryWriter":
        """Return a writer, initialising the registry first if it does not exist yet."""
        writer = cls(channel, authority, payer)
        try:
            channel.get_account(writer.registry_address)
        except AccountNotFound:
            channel.submit(InitRegistry(authority=authority, payer=payer))
            logger.info("Initialised registry %s for %s", writer.registry_address, authority)
        return writer

    def get_registry(self) -> Registry:
        try:
            data = self.channel.get_account(self.registry_address)
        except AccountNotFound as ex:
            raise RegistryNotFound(self.registry_address) from ex
        return decode_registry(data)

    def find_lookup_table_addresses(self, category: int) -> list[Pubkey]:
        return [e.table for e in self.get_registry().entries if e.discriminator == int(category)]

    def get_lookup_table(self, table: Pubkey) -> tuple[RegistryEntry, AddressLookupTable]:
        registry = self.get_registry()
        idx = registry.find_entry(table)
        if idx is None:
            raise InvalidLookupTable(f"Lookup table {table} is not part of registry {self.registry_address}")
        try:
            data = self.channel.get_account(table)
        except AccountNotFound as ex:
            raise InvalidLookupTable(f"Lookup table account {table} does not exist") from ex
        return registry.entries[idx], decode_table(data)

    def create_lookup_table(self, recent_slot: int | None = None) -> tuple[Pubkey, int]:
        slot = self.channel.get_slot() if recent_slot is None else int(recent_slot)
        table, _ = derive_lookup_table_address(self.authority, slot)
        self.channel.submit(CreateTable(authority=self.authority, payer=self.payer, table=table, recent_slot=slot))
        return table, slot

    def append_to_lookup_table(self, table: Pubkey, addresses: Iterable[Pubkey]) -> list[Pubkey]:
        """Extend `table` with the addresses it does not hold yet.

        Repeats within `addresses` are dropped too, keeping the first
        occurrence. Returns what was submitted; nothing is submitted when the
        list ends up empty.
        """
        _, current = self.get_lookup_table(table)
        seen = set(current.addresses)
        new: list[Pubkey] = []
        for address in addresses:
            if address in seen:
                continue
            seen.add(address)
            new.append(address)

        if not new:
            logger.debug("Nothing to append to %s", table)
            return []
        self.channel.submit(
            AppendAddresses(authority=self.authority, payer=self.payer, table=table, addresses=tuple(new))
        )
        return new

    def remove_lookup_table(self, table: Pubkey) -> Registry:
        """Advance `table` one step: active to deactivated, deactivated to removed."""
        return self.channel.submit(RemoveTable(authority=self.authority, recipient=self.payer, table=table))
