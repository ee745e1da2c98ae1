from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Any, Literal, Mapping

Commitment = Literal["processed", "confirmed", "finalized"]

_COMMITMENTS = ("processed", "confirmed", "finalized")
_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def parse_bool(value: Any, *, field: str) -> bool:
    if isinstance(value, bool):
        return value
    if value is None:
        raise ValueError(f"Missing {field}")
    s = str(value).strip().lower()
    if s in {"1", "true", "yes", "on"}:
        return True
    if s in {"0", "false", "no", "off", ""}:
        return False
    raise ValueError(f"Invalid {field}: {value!r}")


def _parse_port(value: str, *, field: str) -> int:
    try:
        port = int(value)
    except Exception as ex:
        raise ValueError(f"Invalid {field}: {value!r}") from ex
    if not 0 <= port <= 65535:
        raise ValueError(f"Invalid {field}: {value!r}")
    return port


def _parse_positive_float(value: str, *, field: str) -> float:
    try:
        v = float(value)
    except Exception as ex:
        raise ValueError(f"Invalid {field}: {value!r}") from ex
    if not v > 0 or v == float("inf"):
        raise ValueError(f"Invalid {field}: {value!r}")
    return v


@dataclass(frozen=True)
class Settings:
    """Runtime settings of the lookup service."""

    endpoint: str = "http://127.0.0.1:8899"
    host: str = "0.0.0.0"
    port: int = 3006
    cache_ttl_s: float = 3600.0
    rpc_timeout_s: float = 30.0
    commitment: Commitment = "confirmed"
    log_level: str = "INFO"
    log_json: bool = False

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "Settings":
        env = os.environ if environ is None else environ

        def get(name: str, default: object) -> str:
            return str(env.get(name, default)).strip()

        d = cls()

        endpoint = get("SOLANA_ENDPOINT", d.endpoint)
        if not endpoint:
            raise ValueError("Invalid SOLANA_ENDPOINT: empty")

        commitment = get("LOOKUP_REGISTRY_COMMITMENT", d.commitment).lower()
        if commitment not in _COMMITMENTS:
            raise ValueError(f"Invalid LOOKUP_REGISTRY_COMMITMENT: {commitment!r}")

        log_level = get("LOOKUP_REGISTRY_LOG_LEVEL", d.log_level).upper()
        if log_level not in _LOG_LEVELS:
            raise ValueError(f"Invalid LOOKUP_REGISTRY_LOG_LEVEL: {log_level!r}")

        return cls(
            endpoint=endpoint,
            host=get("LOOKUP_REGISTRY_HOST", d.host) or d.host,
            port=_parse_port(get("LOOKUP_REGISTRY_PORT", d.port), field="LOOKUP_REGISTRY_PORT"),
            cache_ttl_s=_parse_positive_float(get("LOOKUP_REGISTRY_CACHE_TTL", d.cache_ttl_s), field="LOOKUP_REGISTRY_CACHE_TTL"),
            rpc_timeout_s=_parse_positive_float(
                get("LOOKUP_REGISTRY_RPC_TIMEOUT", d.rpc_timeout_s), field="LOOKUP_REGISTRY_RPC_TIMEOUT"
            ),
            commitment=commitment,  # type: ignore[arg-type]
            log_level=log_level,
            log_json=parse_bool(get("LOOKUP_REGISTRY_LOG_JSON", "0"), field="LOOKUP_REGISTRY_LOG_JSON"),
        )
