"""The registry state machine as a pure transition function.

`apply()` validates one command against the current registry and returns the
next registry together with the side effects the executing environment must
perform (rent transfers and calls into the lookup table program). Nothing is
mutated; an invalid command raises and produces no transition.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Union

from solders.pubkey import Pubkey

from ..errors import (
    AlreadyExists,
    InvalidDiscriminator,
    InvalidLookupTable,
    InvalidState,
    RegistryNotFound,
    TooManyEntries,
)
from .addresses import DEFAULT_PUBKEY, derive_lookup_table_address, derive_registry_address
from .state import (
    DEACTIVATED,
    MAX_REGISTRY_ENTRIES,
    NEXT_CATEGORY,
    REGISTRY_BASE_SPACE,
    REGISTRY_ENTRY_SIZE,
    EntryState,
    Registry,
    RegistryEntry,
)

# Commands


@dataclass(frozen=True)
class InitRegistry:
    authority: Pubkey
    payer: Pubkey


@dataclass(frozen=True)
class CreateTable:
    authority: Pubkey
    payer: Pubkey
    table: Pubkey
    recent_slot: int
    # Accepted for wire compatibility; the program always assigns NEXT_CATEGORY.
    category: int = 0


@dataclass(frozen=True)
class AppendAddresses:
    authority: Pubkey
    payer: Pubkey
    table: Pubkey
    addresses: tuple[Pubkey, ...]
    category: int = 0


@dataclass(frozen=True)
class RemoveTable:
    authority: Pubkey
    recipient: Pubkey
    table: Pubkey


Command = Union[InitRegistry, CreateTable, AppendAddresses, RemoveTable]


# Effects


@dataclass(frozen=True)
class AllocateRegistry:
    payer: Pubkey
    address: Pubkey
    size: int


@dataclass(frozen=True)
class GrowRegistry:
    payer: Pubkey
    address: Pubkey
    new_size: int


@dataclass(frozen=True)
class CreateLookupTable:
    authority: Pubkey
    payer: Pubkey
    table: Pubkey
    recent_slot: int


@dataclass(frozen=True)
class ExtendLookupTable:
    authority: Pubkey
    payer: Pubkey
    table: Pubkey
    addresses: tuple[Pubkey, ...]


@dataclass(frozen=True)
class DeactivateLookupTable:
    authority: Pubkey
    table: Pubkey


@dataclass(frozen=True)
class CloseLookupTable:
    authority: Pubkey
    recipient: Pubkey
    table: Pubkey


Effect = Union[AllocateRegistry, GrowRegistry, CreateLookupTable, ExtendLookupTable, DeactivateLookupTable, CloseLookupTable]


@dataclass(frozen=True)
class Transition:
    registry: Registry
    effects: tuple[Effect, ...] = ()


def apply(registry: Registry | None, command: Command, *, slot: int) -> Transition:
    """Validate `command` against `registry` and compute the next state.

    `slot` is the current slot of the executing environment.
    """
    if isinstance(command, InitRegistry):
        return _init_registry(registry, command, slot=slot)

    if registry is None:
        raise RegistryNotFound(derive_registry_address(command.authority)[0])
    if registry.authority != command.authority:
        raise InvalidState(f"Registry is owned by {registry.authority}, not {command.authority}")

    if isinstance(command, CreateTable):
        return _create_table(registry, command)
    if isinstance(command, AppendAddresses):
        return _append_addresses(registry, command)
    if isinstance(command, RemoveTable):
        return _remove_table(registry, command)
    raise TypeError(f"Unsupported command: {type(command).__name__}")


def _init_registry(registry: Registry | None, command: InitRegistry, *, slot: int) -> Transition:
    if registry is not None:
        raise AlreadyExists(registry.address)
    created = Registry.new(command.authority, slot=slot)
    return Transition(
        registry=created,
        effects=(AllocateRegistry(payer=command.payer, address=created.address, size=REGISTRY_BASE_SPACE),),
    )


def _create_table(registry: Registry, command: CreateTable) -> Transition:
    if registry.len == MAX_REGISTRY_ENTRIES:
        raise TooManyEntries()
    category = NEXT_CATEGORY
    if category <= DEACTIVATED:
        raise InvalidDiscriminator()

    expected, _ = derive_lookup_table_address(command.authority, command.recent_slot)
    if expected != command.table:
        raise InvalidLookupTable(f"Expected lookup table {expected} for slot {command.recent_slot}, got {command.table}")

    entry = RegistryEntry(state=EntryState.active(category), table=command.table)
    effects: list = []

    empty_idx = registry.find_empty_entry()
    if empty_idx is not None:
        nxt = registry.with_entry(
            empty_idx,
            entry,
            len=registry.len + 1,
            last_created_slot=int(command.recent_slot),
        )
    else:
        nxt = replace(
            registry,
            entries=registry.entries + (entry,),
            len=registry.len + 1,
            capacity=registry.capacity + 1,
            last_created_slot=int(command.recent_slot),
        )
        effects.append(
            GrowRegistry(
                payer=command.payer,
                address=registry.address,
                new_size=registry.data_len + REGISTRY_ENTRY_SIZE,
            )
        )

    effects.append(
        CreateLookupTable(
            authority=command.authority,
            payer=command.payer,
            table=command.table,
            recent_slot=int(command.recent_slot),
        )
    )
    nxt.check_invariants()
    return Transition(registry=nxt, effects=tuple(effects))


def _append_addresses(registry: Registry, command: AppendAddresses) -> Transition:
    idx = registry.find_entry(command.table)
    if idx is None:
        raise InvalidLookupTable()
    if registry.entries[idx].discriminator <= DEACTIVATED:
        raise InvalidDiscriminator("Cannot append to a lookup table that is deactivated")

    return Transition(
        registry=registry,
        effects=(
            ExtendLookupTable(
                authority=command.authority,
                payer=command.payer,
                table=command.table,
                addresses=tuple(command.addresses),
            ),
        ),
    )


def _remove_table(registry: Registry, command: RemoveTable) -> Transition:
    idx = registry.find_entry(command.table)
    if idx is None:
        raise InvalidLookupTable()
    entry = registry.entries[idx]

    if entry.state.is_empty:
        raise InvalidState("Found an entry with an EMPTY discriminator")

    if entry.state.is_active:
        nxt = registry.with_entry(idx, replace(entry, state=EntryState.deactivated()))
        effect: DeactivateLookupTable | CloseLookupTable = DeactivateLookupTable(
            authority=command.authority,
            table=command.table,
        )
    else:
        nxt = registry.with_entry(idx, RegistryEntry(state=EntryState.empty(), table=DEFAULT_PUBKEY), len=registry.len - 1)
        effect = CloseLookupTable(
            authority=command.authority,
            recipient=command.recipient,
            table=command.table,
        )

    nxt.check_invariants()
    return Transition(registry=nxt, effects=(effect,))
