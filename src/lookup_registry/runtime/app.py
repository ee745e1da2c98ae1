from __future__ import annotations

from fastapi import FastAPI

from ..api import create_api_app
from ..config import Settings
from ..sdk.cache import RegistryCache
from ..sdk.lookup import LookupRegistryReader
from ..sdk.reader import AccountReader, RpcAccountReader


def create_registry_reader(settings: Settings, *, account_reader: AccountReader | None = None) -> LookupRegistryReader:
    reader = account_reader
    if reader is None:
        reader = RpcAccountReader(
            settings.endpoint,
            timeout_s=settings.rpc_timeout_s,
            commitment=settings.commitment,
        )
    return LookupRegistryReader(reader, RegistryCache(settings.cache_ttl_s))


def create_app(settings: Settings | None = None, *, account_reader: AccountReader | None = None) -> FastAPI:
    """Compose the service: settings, account reader, cache and the HTTP API.

    For uvicorn: `uvicorn --factory lookup_registry.runtime.app:create_app`.
    """
    settings = settings or Settings.from_env()
    return create_api_app(create_registry_reader(settings, account_reader=account_reader))
