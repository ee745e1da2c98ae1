from __future__ import annotations

from .lookup import authority_addresses_to_dict, find_addresses_to_dict, snapshot_to_dict

__all__ = [
    "authority_addresses_to_dict",
    "find_addresses_to_dict",
    "snapshot_to_dict",
]
