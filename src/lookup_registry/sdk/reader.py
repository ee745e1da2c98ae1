from __future__ import annotations

import base64
import binascii
import itertools
import logging
from typing import Any, Protocol, Sequence

import httpx
from solders.pubkey import Pubkey

from ..core.addresses import derive_registry_address
from ..errors import AccountNotFound, DecodeError, RegistryNotFound, TransportError
from ..io.registry_codec import decode_registry
from ..io.table_codec import decode_table
from .snapshot import RegistrySnapshot, ResolvedTable

logger = logging.getLogger(__name__)

# getMultipleAccounts accepts at most this many keys per request.
MAX_MULTIPLE_ACCOUNTS = 100


class AccountReader(Protocol):
    """Source of raw account data.

    `get_account` raises `AccountNotFound` for a missing account;
    `get_multiple_accounts` returns `None` in its place.
    """

    def get_account(self, address: Pubkey) -> bytes: ...

    def get_multiple_accounts(self, addresses: Sequence[Pubkey]) -> list[bytes | None]: ...


class RpcAccountReader:
    """JSON-RPC account reader for a Solana compatible endpoint."""

    def __init__(
        self,
        endpoint: str = "http://127.0.0.1:8899",
        *,
        timeout_s: float = 30.0,
        commitment: str = "confirmed",
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.endpoint = endpoint
        self.timeout_s = float(timeout_s)
        self.commitment = commitment
        self._transport = transport
        self._ids = itertools.count(1)

    def _call(self, method: str, params: list[Any]) -> Any:
        req = {"jsonrpc": "2.0", "id": next(self._ids), "method": method, "params": params}
        try:
            with httpx.Client(timeout=self.timeout_s, transport=self._transport) as client:
                res = client.post(self.endpoint, json=req)
        except httpx.HTTPError as ex:
            logger.warning("RPC %s to %s failed: %r", method, self.endpoint, ex)
            raise TransportError(f"RPC {method} failed: {ex}") from ex

        if res.status_code >= 400:
            raise TransportError(f"RPC {method} failed: {res.status_code} {res.text}")
        try:
            data = res.json()
        except ValueError as ex:
            raise TransportError(f"RPC {method} returned invalid JSON") from ex

        if not isinstance(data, dict):
            raise TransportError(f"RPC {method} returned an unexpected payload: {data!r}")
        if data.get("error") is not None:
            err = data["error"]
            if isinstance(err, dict):
                raise TransportError(f"RPC {method} error: {err.get('code')} {err.get('message')}")
            raise TransportError(f"RPC {method} error: {err}")
        if "result" not in data:
            raise TransportError(f"RPC {method} returned no result")
        return data["result"]

    @staticmethod
    def _account_bytes(value: dict[str, Any]) -> bytes:
        try:
            encoded, encoding = value["data"]
        except (KeyError, TypeError, ValueError) as ex:
            raise TransportError("RPC account value has no data") from ex
        if encoding != "base64":
            raise TransportError(f"Unexpected account encoding {encoding!r}")
        try:
            return base64.b64decode(encoded, validate=True)
        except (binascii.Error, TypeError, ValueError) as ex:
            raise TransportError(f"RPC account data is not valid base64: {ex}") from ex

    def _config(self) -> dict[str, str]:
        return {"encoding": "base64", "commitment": self.commitment}

    def get_account(self, address: Pubkey) -> bytes:
        result = self._call("getAccountInfo", [str(address), self._config()])
        value = result.get("value") if isinstance(result, dict) else None
        if value is None:
            raise AccountNotFound(address)
        return self._account_bytes(value)

    def get_multiple_accounts(self, addresses: Sequence[Pubkey]) -> list[bytes | None]:
        out: list[bytes | None] = []
        for start in range(0, len(addresses), MAX_MULTIPLE_ACCOUNTS):
            chunk = addresses[start : start + MAX_MULTIPLE_ACCOUNTS]
            result = self._call("getMultipleAccounts", [[str(a) for a in chunk], self._config()])
            values = result.get("value") if isinstance(result, dict) else None
            if not isinstance(values, list) or len(values) != len(chunk):
                raise TransportError("getMultipleAccounts returned a mismatched value list")
            out.extend(None if v is None else self._account_bytes(v) for v in values)
        return out

    def get_slot(self) -> int:
        result = self._call("getSlot", [{"commitment": self.commitment}])
        try:
            return int(result)
        except (TypeError, ValueError) as ex:
            raise TransportError(f"getSlot returned {result!r}") from ex


def fetch_registry(reader: AccountReader, authority: Pubkey) -> RegistrySnapshot:
    """Fetch and resolve the registry of `authority`.

    Only active entries are resolved, with a single batched read of their
    tables. Entries whose table is missing or does not decode are dropped.
    """
    registry_address, _ = derive_registry_address(authority)
    try:
        data = reader.get_account(registry_address)
    except AccountNotFound as ex:
        raise RegistryNotFound(registry_address) from ex

    registry = decode_registry(data)
    active = registry.active_entries()
    accounts = reader.get_multiple_accounts([e.table for e in active]) if active else []

    tables: list[ResolvedTable] = []
    for entry, raw in zip(active, accounts):
        if raw is None:
            logger.debug("Dropping %s from %s: table account missing", entry.table, authority)
            continue
        try:
            table = decode_table(raw)
        except DecodeError as ex:
            logger.debug("Dropping %s from %s: %s", entry.table, authority, ex)
            continue
        tables.append(ResolvedTable(category=entry.discriminator, address=entry.table, addresses=table.addresses))

    return RegistrySnapshot(authority=authority, version=registry.version, tables=tuple(tables))
