from __future__ import annotations

from .app import create_app, create_registry_reader
from .server import LookupServer, run

__all__ = ["create_app", "create_registry_reader", "LookupServer", "run"]
