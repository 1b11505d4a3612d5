"""In-memory LRU cache of search results with a time-to-live."""

from __future__ import annotations

import time
from collections import OrderedDict

from vault_search.models.domain import SearchResult
from vault_search.observability.logger import get_logger

logger = get_logger("search_cache")


class SearchCache:
    """Per-owner cache keyed by the normalized query.

    Reads refresh both recency and age. Entries are dropped for an owner
    whenever that owner's documents change.
    """

    def __init__(self, max_size: int = 100, ttl_s: float = 300.0) -> None:
        self._max_size = max_size
        self._ttl_s = ttl_s
        self._entries: OrderedDict[tuple[str, str], tuple[float, SearchResult]] = OrderedDict()

    @staticmethod
    def _key(owner_id: str, query: str) -> tuple[str, str]:
        return owner_id, " ".join(query.lower().split())

    def get(self, owner_id: str, query: str) -> SearchResult | None:
        key = self._key(owner_id, query)
        entry = self._entries.get(key)
        if entry is None:
            logger.debug("search_cache_miss", query=query)
            return None

        stored_at, result = entry
        now = time.monotonic()
        if now - stored_at > self._ttl_s:
            del self._entries[key]
            logger.debug("search_cache_expired", query=query)
            return None

        self._entries[key] = (now, result)
        self._entries.move_to_end(key)
        logger.debug("search_cache_hit", query=query)
        return result

    def set(self, owner_id: str, query: str, result: SearchResult) -> None:
        key = self._key(owner_id, query)
        self._entries[key] = (time.monotonic(), result)
        self._entries.move_to_end(key)
        while len(self._entries) > self._max_size:
            self._entries.popitem(last=False)

    def invalidate_owner(self, owner_id: str) -> int:
        stale = [key for key in self._entries if key[0] == owner_id]
        for key in stale:
            del self._entries[key]
        if stale:
            logger.info("search_cache_invalidated", owner_id=owner_id, entries=len(stale))
        return len(stale)

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)
