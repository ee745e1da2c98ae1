from __future__ import annotations

from solders.pubkey import Pubkey

from lookup_registry.config import Settings
from lookup_registry.core.addresses import DEFAULT_PUBKEY, derive_lookup_table_address
from lookup_registry.core.store import RegistryStore


def _skip(msg: str) -> None:  # pragma: no cover
    try:
        import pytest  # type: ignore

        pytest.skip(msg)
    except Exception:
        raise RuntimeError(msg)


def _client(store: RegistryStore):
    from lookup_registry.runtime.app import create_app

    try:
        from fastapi.testclient import TestClient
    except Exception as e:  # pragma: no cover
        _skip(f"TestClient not available ({e!r}); install test extras to run this test")
        return None

    return TestClient(create_app(Settings(), account_reader=store))


def _seed(members: list[Pubkey]) -> tuple[RegistryStore, Pubkey, Pubkey]:
    store = RegistryStore()
    authority = Pubkey.new_unique()
    store.airdrop(authority, 10**12)
    store.init_registry(authority)
    slot = store.slot
    table, _ = derive_lookup_table_address(authority, slot)
    store.create_table(authority, table, slot)
    store.append_addresses(authority, table, members)
    return store, authority, table


def test_healthz() -> None:
    client = _client(RegistryStore())
    res = client.get("/healthz")
    assert res.status_code == 200
    assert res.json() == {"ok": True}


def test_get_addresses_compresses_instruction_accounts() -> None:
    members = [Pubkey.new_unique() for _ in range(4)]
    store, authority, table = _seed(members)
    client = _client(store)
    outsider = Pubkey.new_unique()

    body = {
        "instructions": [
            {"program": str(members[0]), "accounts": [str(members[1]), str(members[2]), str(outsider)]},
            {"target": str(members[0]), "accounts": [str(members[3])]},
        ],
        "authorities": [str(authority)],
    }
    res = client.post("/lookup/get_addresses", json=body)
    assert res.status_code == 200
    assert res.json() == {
        "addresses": [str(table)],
        "distinct_accounts": 5,
        "unmatched_accounts": 1,
    }


def test_get_addresses_sees_registry_changes() -> None:
    members = [Pubkey.new_unique() for _ in range(3)]
    store, authority, table = _seed(members)
    client = _client(store)
    body = {
        "instructions": [{"program": str(members[0]), "accounts": [str(m) for m in members[1:]]}],
        "authorities": [str(authority)],
    }
    assert client.post("/lookup/get_addresses", json=body).json()["addresses"] == [str(table)]

    store.remove_table(authority, table)
    data = client.post("/lookup/get_addresses", json=body).json()
    assert data["addresses"] == []
    assert data["unmatched_accounts"] == 3


def test_get_addresses_with_unknown_authority() -> None:
    client = _client(RegistryStore())
    program = Pubkey.new_unique()
    body = {
        "instructions": [{"program": str(program), "accounts": [str(Pubkey.new_unique())]}],
        "authorities": [str(Pubkey.new_unique())],
    }
    res = client.post("/lookup/get_addresses", json=body)
    assert res.status_code == 200
    assert res.json() == {"addresses": [], "distinct_accounts": 2, "unmatched_accounts": 2}


def test_get_addresses_rejects_malformed_body() -> None:
    client = _client(RegistryStore())

    res = client.post("/lookup/get_addresses", json={"instructions": "nope", "authorities": []})
    assert res.status_code == 400

    res = client.post("/lookup/get_addresses", json={"instructions": []})
    assert res.status_code == 400
    assert "authorities" in res.json()["detail"]

    res = client.post(
        "/lookup/get_addresses",
        json={"instructions": [{"program": "not-a-key", "accounts": []}], "authorities": []},
    )
    assert res.status_code == 400
    assert "program" in res.json()["detail"]


def test_authority_addresses() -> None:
    members = [Pubkey.new_unique() for _ in range(2)]
    store, authority, table = _seed(members)
    client = _client(store)

    res = client.get(f"/lookup/authority_addresses/{authority}")
    assert res.status_code == 200
    assert res.json() == {"authority": str(authority), "addresses": [str(table)]}

    unknown = Pubkey.new_unique()
    res = client.get(f"/lookup/authority_addresses/{unknown}")
    assert res.status_code == 200
    assert res.json() == {"authority": str(unknown), "addresses": []}


def test_authority_addresses_with_malformed_id() -> None:
    client = _client(RegistryStore())
    res = client.get("/lookup/authority_addresses/not-a-key")
    assert res.status_code == 200
    assert res.json() == {"authority": str(DEFAULT_PUBKEY), "addresses": []}


def test_registry_detail() -> None:
    members = [Pubkey.new_unique() for _ in range(2)]
    store, authority, table = _seed(members)
    client = _client(store)

    res = client.get(f"/lookup/registries/{authority}")
    assert res.status_code == 200
    data = res.json()
    assert data["authority"] == str(authority)
    assert data["tables"] == [{"address": str(table), "category": 2, "addresses": [str(m) for m in members]}]

    assert client.get(f"/lookup/registries/{Pubkey.new_unique()}").status_code == 404
    assert client.get("/lookup/registries/xyz-0").status_code == 400
