from __future__ import annotations

import logging
from typing import Iterable, Sequence

from solders.pubkey import Pubkey

from ..errors import LookupRegistryError
from .cache import RegistryCache
from .compression import FindAddressesResult, Instruction, find_addresses
from .reader import AccountReader, fetch_registry
from .snapshot import RegistrySnapshot, ResolvedTable

logger = logging.getLogger(__name__)


class LookupRegistryReader:
    """Cached, read-only view over the registries of many authorities.

    Only `get_registry` and `update_registries` touch the network. Fetches run
    without holding the cache lock, so two concurrent misses for the same
    authority both fetch and the last one to finish wins.
    """

    def __init__(self, reader: AccountReader, cache: RegistryCache | None = None) -> None:
        self.reader = reader
        self.cache = cache if cache is not None else RegistryCache()

    def _fetch(self, authority: Pubkey) -> RegistrySnapshot | None:
        try:
            return fetch_registry(self.reader, authority)
        except LookupRegistryError as ex:
            logger.warning("Failed to fetch registry of %s: %s", authority, ex)
            return None

    def get_registry(self, authority: Pubkey) -> RegistrySnapshot | None:
        """Return the cached snapshot, fetching it on a miss or after expiry.

        A failed fetch returns None and leaves the cache as it was.
        """
        cached = self.cache.get(authority)
        if cached is not None:
            return cached

        snapshot = self._fetch(authority)
        if snapshot is None:
            return None
        self.cache.insert(authority, snapshot)
        logger.info("Cached registry of %s (%d active tables)", authority, len(snapshot.tables))
        return snapshot

    def update_registries(self, authorities: Iterable[Pubkey]) -> list[Pubkey]:
        """Refetch every authority and return the ones that failed.

        Failed authorities keep whatever the cache held before.
        """
        failed: list[Pubkey] = []
        for authority in authorities:
            snapshot = self._fetch(authority)
            if snapshot is None:
                failed.append(authority)
                continue
            self.cache.insert(authority, snapshot)
        if failed:
            logger.warning("Registry refresh failed for %d authorities", len(failed))
        return failed

    def get_tables(self, authority: Pubkey) -> list[ResolvedTable]:
        snapshot = self.cache.get(authority)
        if snapshot is None:
            return []
        return list(snapshot.tables)

    def get_table_addresses(self, authority: Pubkey) -> list[Pubkey]:
        return [t.address for t in self.get_tables(authority)]

    def find_addresses(self, instructions: Sequence[Instruction], authorities: Sequence[Pubkey]) -> FindAddressesResult:
        snapshots: dict[Pubkey, RegistrySnapshot] = {}
        for authority in authorities:
            snapshot = self.cache.get(authority)
            if snapshot is not None:
                snapshots[authority] = snapshot
        return find_addresses(instructions, authorities, snapshots)
