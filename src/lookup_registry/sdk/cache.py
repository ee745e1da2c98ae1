from __future__ import annotations

import threading
import time
from dataclasses import dataclass
from typing import Callable

from solders.pubkey import Pubkey

from .snapshot import RegistrySnapshot

DEFAULT_TTL_S = 3600.0


@dataclass(frozen=True)
class _CacheEntry:
    snapshot: RegistrySnapshot
    expires_at: float


class RegistryCache:
    """Authority -> snapshot map whose entries expire after a fixed TTL.

    Snapshots are immutable and replaced as a whole, so a reader holding one
    never sees a partial refresh. Expired entries read as absent but stay
    stored until they are replaced or `purge_expired` drops them.
    """

    def __init__(self, ttl_s: float = DEFAULT_TTL_S, *, clock: Callable[[], float] = time.monotonic) -> None:
        if not float(ttl_s) > 0:
            raise ValueError("ttl_s must be > 0")
        self.ttl_s = float(ttl_s)
        self._clock = clock
        self._lock = threading.Lock()
        self._entries: dict[Pubkey, _CacheEntry] = {}

    def get(self, authority: Pubkey) -> RegistrySnapshot | None:
        now = self._clock()
        with self._lock:
            entry = self._entries.get(authority)
        if entry is None or entry.expires_at <= now:
            return None
        return entry.snapshot

    def insert(self, authority: Pubkey, snapshot: RegistrySnapshot, *, ttl_s: float | None = None) -> None:
        ttl = self.ttl_s if ttl_s is None else float(ttl_s)
        entry = _CacheEntry(snapshot=snapshot, expires_at=self._clock() + ttl)
        with self._lock:
            self._entries[authority] = entry

    def remove(self, authority: Pubkey) -> bool:
        with self._lock:
            return self._entries.pop(authority, None) is not None

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def purge_expired(self) -> int:
        now = self._clock()
        with self._lock:
            expired = [a for a, e in self._entries.items() if e.expires_at <= now]
            for authority in expired:
                del self._entries[authority]
            return len(expired)

    def __contains__(self, authority: object) -> bool:
        if not isinstance(authority, Pubkey):
            return False
        return self.get(authority) is not None

    def __len__(self) -> int:
        now = self._clock()
        with self._lock:
            return sum(1 for e in self._entries.values() if e.expires_at > now)
