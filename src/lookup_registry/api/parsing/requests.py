from __future__ import annotations

from typing import Any

from solders.pubkey import Pubkey

from ...core.addresses import parse_pubkey
from ...sdk.compression import Instruction


def parse_pubkey_field(value: Any, *, field: str) -> Pubkey:
    if value is None:
        raise ValueError(f"Missing {field}")
    try:
        return parse_pubkey(value)
    except ValueError as ex:
        raise ValueError(f"Invalid {field}: {value!r}") from ex


def _parse_list(value: Any, *, field: str) -> list[Any]:
    if value is None:
        raise ValueError(f"Missing {field}")
    if not isinstance(value, list):
        raise ValueError(f"{field} must be a list")
    return value


def parse_instruction(raw: Any, *, index: int) -> Instruction:
    if not isinstance(raw, dict):
        raise ValueError(f"instructions[{index}] must be an object")
    # `target` is the name older clients send.
    program = raw.get("program", raw.get("target"))
    program_id = parse_pubkey_field(program, field=f"instructions[{index}].program")
    accounts = _parse_list(raw.get("accounts", []), field=f"instructions[{index}].accounts")
    return Instruction.new(
        program_id,
        (parse_pubkey_field(a, field=f"instructions[{index}].accounts[{i}]") for i, a in enumerate(accounts)),
    )


def parse_authorities(value: Any) -> list[Pubkey]:
    authorities = _parse_list(value, field="authorities")
    return [parse_pubkey_field(a, field=f"authorities[{i}]") for i, a in enumerate(authorities)]


def parse_get_addresses_body(body: dict[str, Any]) -> tuple[list[Instruction], list[Pubkey]]:
    if not isinstance(body, dict):
        raise ValueError("Request body must be an object")
    raw_instructions = _parse_list(body.get("instructions"), field="instructions")
    instructions = [parse_instruction(raw, index=i) for i, raw in enumerate(raw_instructions)]
    authorities = parse_authorities(body.get("authorities"))
    return instructions, authorities
