from __future__ import annotations

import numpy as np
from solders.pubkey import Pubkey

from ..core.tables import LOOKUP_TABLE_META_SIZE, AddressLookupTable, LookupTableMeta
from ..errors import DecodeError, UninitializedAccount

# bincode `ProgramState` variants.
STATE_UNINITIALIZED = 0
STATE_LOOKUP_TABLE = 1

# Fixed part of the metadata up to (and including) the authority option tag.
TABLE_META_PREFIX_DTYPE = np.dtype(
    [
        ("state", "<u4"),
        ("deactivation_slot", "<u8"),
        ("last_extended_slot", "<u8"),
        ("last_extended_slot_start_index", "u1"),
        ("has_authority", "u1"),
    ]
)
_PREFIX_SIZE = TABLE_META_PREFIX_DTYPE.itemsize


def encode_table(table: AddressLookupTable) -> bytes:
    """Serialize a lookup table the way the table program lays out its account."""
    meta = table.meta
    prefix = np.zeros(1, dtype=TABLE_META_PREFIX_DTYPE)
    prefix["state"] = STATE_LOOKUP_TABLE
    prefix["deactivation_slot"] = meta.deactivation_slot
    prefix["last_extended_slot"] = meta.last_extended_slot
    prefix["last_extended_slot_start_index"] = meta.last_extended_slot_start_index
    prefix["has_authority"] = 1 if meta.authority is not None else 0

    out = bytearray(prefix.tobytes())
    if meta.authority is not None:
        out += bytes(meta.authority)
    out += int(meta.padding).to_bytes(2, "little")
    out = out.ljust(LOOKUP_TABLE_META_SIZE, b"\x00")

    out += b"".join(bytes(a) for a in table.addresses)
    return bytes(out)


def encode_uninitialized_table() -> bytes:
    return int(STATE_UNINITIALIZED).to_bytes(4, "little").ljust(LOOKUP_TABLE_META_SIZE, b"\x00")


def decode_table(data: bytes) -> AddressLookupTable:
    raw = bytes(data)
    if len(raw) < 4:
        raise DecodeError("Lookup table account too small")

    state = int.from_bytes(raw[:4], "little")
    if state == STATE_UNINITIALIZED:
        raise UninitializedAccount()
    if state != STATE_LOOKUP_TABLE:
        raise DecodeError(f"Unknown lookup table state {state}")
    if len(raw) < LOOKUP_TABLE_META_SIZE:
        raise DecodeError(f"Lookup table account too small: {len(raw)} bytes")

    prefix = np.frombuffer(raw, dtype=TABLE_META_PREFIX_DTYPE, count=1)[0]
    has_authority = int(prefix["has_authority"])
    offset = _PREFIX_SIZE
    authority: Pubkey | None = None
    if has_authority == 1:
        authority = Pubkey(raw[offset : offset + 32])
        offset += 32
    elif has_authority != 0:
        raise DecodeError(f"Invalid authority option tag {has_authority}")
    padding = int.from_bytes(raw[offset : offset + 2], "little")

    body = raw[LOOKUP_TABLE_META_SIZE:]
    if len(body) % 32 != 0:
        raise DecodeError(f"Lookup table address data is {len(body)} bytes, not a multiple of 32")
    if body:
        rows = np.frombuffer(body, dtype=np.uint8).reshape(-1, 32)
    else:
        rows = np.zeros((0, 32), dtype=np.uint8)

    meta = LookupTableMeta(
        deactivation_slot=int(prefix["deactivation_slot"]),
        last_extended_slot=int(prefix["last_extended_slot"]),
        last_extended_slot_start_index=int(prefix["last_extended_slot_start_index"]),
        authority=authority,
        padding=padding,
    )
    return AddressLookupTable(meta=meta, addresses=tuple(Pubkey(r.tobytes()) for r in rows))
