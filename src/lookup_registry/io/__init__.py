from __future__ import annotations

from .registry_codec import REGISTRY_ACCOUNT_DISCRIMINATOR, decode_registry, encode_registry
from .table_codec import decode_table, encode_table, encode_uninitialized_table

__all__ = [
    "REGISTRY_ACCOUNT_DISCRIMINATOR",
    "encode_registry",
    "decode_registry",
    "encode_table",
    "decode_table",
    "encode_uninitialized_table",
]
