from __future__ import annotations

import base64
import json

import httpx
import pytest
from solders.pubkey import Pubkey

from lookup_registry.core.addresses import derive_lookup_table_address, derive_registry_address
from lookup_registry.core.store import RegistryStore
from lookup_registry.errors import AccountNotFound, TransportError
from lookup_registry.sdk.lookup import LookupRegistryReader
from lookup_registry.sdk.reader import RpcAccountReader, fetch_registry


def _account(data: bytes) -> dict:
    return {
        "data": [base64.b64encode(data).decode("ascii"), "base64"],
        "executable": False,
        "lamports": 1,
        "owner": "11111111111111111111111111111111",
        "rentEpoch": 0,
    }


def _store_backed_transport(store: RegistryStore, calls: list[dict]) -> httpx.MockTransport:
    def lookup(key: str) -> dict | None:
        try:
            return _account(store.get_account(Pubkey.from_string(key)))
        except AccountNotFound:
            return None

    def handler(request: httpx.Request) -> httpx.Response:
        req = json.loads(request.content)
        calls.append(req)
        method, params = req["method"], req["params"]
        if method == "getAccountInfo":
            result = {"context": {"slot": 1}, "value": lookup(params[0])}
        elif method == "getMultipleAccounts":
            result = {"context": {"slot": 1}, "value": [lookup(k) for k in params[0]]}
        elif method == "getSlot":
            result = store.slot
        else:
            return httpx.Response(200, json={"jsonrpc": "2.0", "id": req["id"], "error": {"code": -32601, "message": "Method not found"}})
        return httpx.Response(200, json={"jsonrpc": "2.0", "id": req["id"], "result": result})

    return httpx.MockTransport(handler)


def test_reads_accounts_over_json_rpc() -> None:
    store = RegistryStore()
    authority = Pubkey.new_unique()
    store.airdrop(authority, 10**12)
    store.init_registry(authority)
    slot = store.slot
    table, _ = derive_lookup_table_address(authority, slot)
    store.create_table(authority, table, slot)
    store.append_addresses(authority, table, [Pubkey.new_unique(), Pubkey.new_unique()])

    calls: list[dict] = []
    reader = RpcAccountReader("http://rpc.test", commitment="finalized", transport=_store_backed_transport(store, calls))

    assert reader.get_account(table) == store.get_account(table)
    assert calls[0]["method"] == "getAccountInfo"
    assert calls[0]["params"][1] == {"encoding": "base64", "commitment": "finalized"}

    with pytest.raises(AccountNotFound):
        reader.get_account(Pubkey.new_unique())

    assert reader.get_slot() == store.slot

    snapshot = fetch_registry(reader, authority)
    assert snapshot.table_addresses == [table]
    assert len(snapshot.tables[0].addresses) == 2


def test_get_multiple_accounts_is_chunked() -> None:
    store = RegistryStore()
    calls: list[dict] = []
    reader = RpcAccountReader("http://rpc.test", transport=_store_backed_transport(store, calls))

    keys = [Pubkey.new_unique() for _ in range(150)]
    out = reader.get_multiple_accounts(keys)

    assert out == [None] * 150
    assert [len(c["params"][0]) for c in calls] == [100, 50]


def test_rpc_error_object() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"jsonrpc": "2.0", "id": 1, "error": {"code": -32005, "message": "Node is behind"}})

    reader = RpcAccountReader("http://rpc.test", transport=httpx.MockTransport(handler))
    with pytest.raises(TransportError, match="Node is behind"):
        reader.get_slot()


def test_http_status_and_connection_errors() -> None:
    def server_error(request: httpx.Request) -> httpx.Response:
        return httpx.Response(503, text="unavailable")

    reader = RpcAccountReader("http://rpc.test", transport=httpx.MockTransport(server_error))
    with pytest.raises(TransportError, match="503"):
        reader.get_account(Pubkey.new_unique())

    def refused(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    reader = RpcAccountReader("http://rpc.test", transport=httpx.MockTransport(refused))
    with pytest.raises(TransportError):
        reader.get_multiple_accounts([Pubkey.new_unique()])


def test_invalid_json_payload() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, content=b"<html>oops</html>")

    reader = RpcAccountReader("http://rpc.test", transport=httpx.MockTransport(handler))
    with pytest.raises(TransportError):
        reader.get_slot()


def test_rpc_error_that_is_not_an_object() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"jsonrpc": "2.0", "id": 1, "error": "boom"})

    reader = RpcAccountReader("http://rpc.test", transport=httpx.MockTransport(handler))
    with pytest.raises(TransportError, match="boom"):
        reader.get_account(Pubkey.new_unique())

    lookup = LookupRegistryReader(reader)
    assert lookup.get_registry(Pubkey.new_unique()) is None
    assert len(lookup.cache) == 0


def test_bad_account_encoding_fails_only_that_authority() -> None:
    store = RegistryStore()
    good, bad = Pubkey.new_unique(), Pubkey.new_unique()
    store.airdrop(good, 10**12)
    store.init_registry(good)
    bad_registry = str(derive_registry_address(bad)[0])

    def handler(request: httpx.Request) -> httpx.Response:
        req = json.loads(request.content)
        key = req["params"][0]
        if key == bad_registry:
            value: dict | None = {"data": ["abc", "base64"]}
        else:
            value = _account(store.get_account(Pubkey.from_string(key)))
        return httpx.Response(200, json={"jsonrpc": "2.0", "id": req["id"], "result": {"value": value}})

    reader = RpcAccountReader("http://rpc.test", transport=httpx.MockTransport(handler))
    with pytest.raises(TransportError):
        reader.get_account(derive_registry_address(bad)[0])

    lookup = LookupRegistryReader(reader)
    assert lookup.update_registries([bad, good]) == [bad]
    assert lookup.cache.get(good) is not None
    assert lookup.cache.get(bad) is None
