from __future__ import annotations

import hashlib

import numpy as np
from solders.pubkey import Pubkey

from ..core.state import (
    ACCOUNT_DISCRIMINATOR_SIZE,
    MAX_REGISTRY_ENTRIES,
    EntryState,
    Registry,
    RegistryEntry,
)
from ..errors import DecodeError

REGISTRY_ACCOUNT_DISCRIMINATOR = hashlib.sha256(b"account:RegistryAccount").digest()[:ACCOUNT_DISCRIMINATOR_SIZE]

# Little-endian, packed.
REGISTRY_HEADER_DTYPE = np.dtype(
    [
        ("authority", "u1", (32,)),
        ("version", "u1"),
        ("seed", "u1"),
        ("len", "u1"),
        ("capacity", "u1"),
        ("reserved0", "u1", (4,)),
        ("last_created_slot", "<u8"),
    ]
)
REGISTRY_ENTRY_DTYPE = np.dtype(
    [
        ("discriminator", "<u8"),
        ("table", "u1", (32,)),
    ]
)

HEADER_OFFSET = ACCOUNT_DISCRIMINATOR_SIZE
COUNT_OFFSET = HEADER_OFFSET + REGISTRY_HEADER_DTYPE.itemsize
ENTRIES_OFFSET = COUNT_OFFSET + 4


def encode_registry(registry: Registry) -> bytes:
    """Serialize a registry into its account data.

    The result is zero padded to the allocated account size.
    """
    n = len(registry.entries)

    header = np.zeros(1, dtype=REGISTRY_HEADER_DTYPE)
    header["authority"][0] = np.frombuffer(bytes(registry.authority), dtype=np.uint8)
    header["version"] = registry.version
    header["seed"] = registry.seed
    header["len"] = registry.len
    header["capacity"] = registry.capacity
    header["last_created_slot"] = registry.last_created_slot

    entries = np.zeros(n, dtype=REGISTRY_ENTRY_DTYPE)
    if n:
        entries["discriminator"] = [e.discriminator for e in registry.entries]
        entries["table"] = np.frombuffer(b"".join(bytes(e.table) for e in registry.entries), dtype=np.uint8).reshape(n, 32)

    payload = b"".join(
        [
            REGISTRY_ACCOUNT_DISCRIMINATOR,
            header.tobytes(),
            int(n).to_bytes(4, "little"),
            entries.tobytes(),
        ]
    )
    size = max(len(payload), registry.data_len)
    return payload.ljust(size, b"\x00")


def decode_registry(data: bytes) -> Registry:
    raw = bytes(data)
    if len(raw) < ENTRIES_OFFSET:
        raise DecodeError(f"Registry account too small: {len(raw)} bytes")
    if raw[:HEADER_OFFSET] != REGISTRY_ACCOUNT_DISCRIMINATOR:
        raise DecodeError("Account is not a lookup table registry")

    header = np.frombuffer(raw, dtype=REGISTRY_HEADER_DTYPE, count=1, offset=HEADER_OFFSET)[0]
    n = int.from_bytes(raw[COUNT_OFFSET:ENTRIES_OFFSET], "little")
    if n > MAX_REGISTRY_ENTRIES:
        raise DecodeError(f"Registry holds {n} entries, more than {MAX_REGISTRY_ENTRIES}")
    end = ENTRIES_OFFSET + n * REGISTRY_ENTRY_DTYPE.itemsize
    if len(raw) < end:
        raise DecodeError(f"Registry account truncated: expected at least {end} bytes, got {len(raw)}")

    length = int(header["len"])
    capacity = int(header["capacity"])
    if not (length <= capacity <= MAX_REGISTRY_ENTRIES):
        raise DecodeError(f"Invalid registry bounds: len={length} capacity={capacity}")

    if n:
        rows = np.frombuffer(raw, dtype=REGISTRY_ENTRY_DTYPE, count=n, offset=ENTRIES_OFFSET)
    else:
        rows = np.zeros(0, dtype=REGISTRY_ENTRY_DTYPE)
    entries = tuple(
        RegistryEntry(
            state=EntryState.from_discriminator(int(row["discriminator"])),
            table=Pubkey(row["table"].tobytes()),
        )
        for row in rows
    )

    return Registry(
        authority=Pubkey(header["authority"].tobytes()),
        version=int(header["version"]),
        seed=int(header["seed"]),
        len=length,
        capacity=capacity,
        last_created_slot=int(header["last_created_slot"]),
        entries=entries,
    )
