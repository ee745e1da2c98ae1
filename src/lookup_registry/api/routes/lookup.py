from __future__ import annotations

import logging
from typing import Any

from fastapi import FastAPI, HTTPException

from ...core.addresses import DEFAULT_PUBKEY
from ...sdk.lookup import LookupRegistryReader
from ..parsing import parse_get_addresses_body, parse_pubkey_field
from ..serializers import authority_addresses_to_dict, find_addresses_to_dict, snapshot_to_dict

logger = logging.getLogger(__name__)


def mount_lookup_api(app: FastAPI, registry_reader: LookupRegistryReader) -> None:
    """Mount the lookup endpoints backed by `registry_reader`."""

    @app.post("/lookup/get_addresses")
    def get_addresses(body: dict) -> dict[str, Any]:
        try:
            instructions, authorities = parse_get_addresses_body(body)
        except ValueError as ex:
            raise HTTPException(status_code=400, detail=str(ex))

        failed = registry_reader.update_registries(authorities)
        if failed:
            logger.info("Using cached registries for %d authorities after refresh failures", len(failed))

        result = registry_reader.find_addresses(instructions, authorities)
        return find_addresses_to_dict(result)

    @app.get("/lookup/authority_addresses/{authority}")
    def get_authority_addresses(authority: str) -> dict[str, Any]:
        try:
            key = parse_pubkey_field(authority, field="authority")
        except ValueError:
            # Unparseable ids answer with the default key and no tables.
            return authority_addresses_to_dict(DEFAULT_PUBKEY, [])

        snapshot = registry_reader.get_registry(key)
        addresses = [] if snapshot is None else snapshot.table_addresses
        return authority_addresses_to_dict(key, addresses)

    @app.get("/lookup/registries/{authority}")
    def get_registry(authority: str) -> dict[str, Any]:
        try:
            key = parse_pubkey_field(authority, field="authority")
        except ValueError as ex:
            raise HTTPException(status_code=400, detail=str(ex))

        snapshot = registry_reader.get_registry(key)
        if snapshot is None:
            raise HTTPException(status_code=404, detail=f"Unknown registry for authority {key}")
        return snapshot_to_dict(snapshot)
