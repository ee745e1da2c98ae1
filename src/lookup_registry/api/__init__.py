from __future__ import annotations

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from ..sdk.lookup import LookupRegistryReader
from .routes.lookup import mount_lookup_api


def create_api_app(registry_reader: LookupRegistryReader) -> FastAPI:
    app = FastAPI(title="lookup-registry", version="0.1.0")

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    mount_lookup_api(app, registry_reader)

    @app.get("/healthz")
    def healthz() -> dict[str, bool]:
        return {"ok": True}

    return app


__all__ = ["create_api_app"]
