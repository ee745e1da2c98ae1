from __future__ import annotations

from .lookup import mount_lookup_api

__all__ = ["mount_lookup_api"]
