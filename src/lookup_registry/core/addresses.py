from __future__ import annotations

from solders.pubkey import Pubkey

# The registry program and the address lookup table program.
LOOKUP_TABLE_REGISTRY_ID = Pubkey.from_string("LTR8xXcSrEDsCbTWPY4JmJREFdMz4uYh65uajkVjzru")
LOOKUP_TABLE_PROGRAM_ID = Pubkey.from_string("AddressLookupTab1e1111111111111111111111111")

DEFAULT_PUBKEY = Pubkey.default()


def derive_registry_address(authority: Pubkey) -> tuple[Pubkey, int]:
    """Return (registry address, bump seed) for an authority."""
    return Pubkey.find_program_address([bytes(authority)], LOOKUP_TABLE_REGISTRY_ID)


def derive_lookup_table_address(authority: Pubkey, recent_slot: int) -> tuple[Pubkey, int]:
    """Return (table address, bump seed) the lookup table program assigns.

    The seeds are the authority and the slot as a little-endian u64.
    """
    slot = int(recent_slot)
    if slot < 0 or slot >= 2**64:
        raise ValueError(f"recent_slot must fit in a u64, got {recent_slot!r}")
    return Pubkey.find_program_address(
        [bytes(authority), slot.to_bytes(8, "little")],
        LOOKUP_TABLE_PROGRAM_ID,
    )


def parse_pubkey(value: object) -> Pubkey:
    """Parse a base58 string (or pass through a Pubkey)."""
    if isinstance(value, Pubkey):
        return value
    if not isinstance(value, str):
        raise ValueError(f"Expected a base58 string, got {type(value).__name__}")
    try:
        return Pubkey.from_string(value.strip())
    except Exception as ex:
        raise ValueError(f"Invalid pubkey: {value!r}") from ex
