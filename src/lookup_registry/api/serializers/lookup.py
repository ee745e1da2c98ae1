from __future__ import annotations

from typing import Any, Sequence

from solders.pubkey import Pubkey

from ...sdk.compression import FindAddressesResult
from ...sdk.snapshot import RegistrySnapshot


def find_addresses_to_dict(result: FindAddressesResult) -> dict[str, Any]:
    return {
        "addresses": [str(a) for a in result.matches],
        "distinct_accounts": int(result.distinct),
        "unmatched_accounts": int(result.unmatched),
    }


def authority_addresses_to_dict(authority: Pubkey, addresses: Sequence[Pubkey]) -> dict[str, Any]:
    return {
        "authority": str(authority),
        "addresses": [str(a) for a in addresses],
    }


def snapshot_to_dict(snapshot: RegistrySnapshot) -> dict[str, Any]:
    """Full view of a snapshot, tables and their members included."""
    return {
        "authority": str(snapshot.authority),
        "version": int(snapshot.version),
        "tables": [
            {
                "address": str(t.address),
                "category": int(t.category),
                "addresses": [str(a) for a in t.addresses],
            }
            for t in snapshot.tables
        ],
    }
