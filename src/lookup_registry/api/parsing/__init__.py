from __future__ import annotations

from .requests import parse_authorities, parse_get_addresses_body, parse_instruction, parse_pubkey_field

__all__ = [
    "parse_pubkey_field",
    "parse_instruction",
    "parse_authorities",
    "parse_get_addresses_body",
]
