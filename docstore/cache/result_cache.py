"""
Result cache - memoize query results between mutations.

Maps a condition signature to the list a scan produced. Entries are
dropped all at once whenever the owning collection changes; there is no
TTL, no capacity bound and no selective eviction.
"""

import logging
from typing import Any, Optional

from .hashing import stable_hash

logger = logging.getLogger(__name__)

ALL_KEY = "ALL"
INDEX_SUFFIX = ":i"
OBJECT_SUFFIX = ":o"


class ResultCache:
    """
    In-memory memo of find() results for one collection.

    Lookups are presence-aware: a cached empty list is a hit.
    """

    def __init__(self):
        self._entries: dict[str, list] = {}
        self._hits = 0
        self._misses = 0
        self._invalidations = 0

    @staticmethod
    def key(condition: Optional[dict], return_index: bool = False) -> str:
        """
        Build the cache signature for a condition.

        Args:
            condition: Query condition (None means "everything")
            return_index: Whether the cached list holds positions

        Returns:
            "ALL" or a blake2b hex digest, suffixed with the result form
        """
        base = ALL_KEY if condition is None else stable_hash(condition)
        return base + (INDEX_SUFFIX if return_index else OBJECT_SUFFIX)

    def get(self, signature: str) -> Optional[list]:
        """Return the cached list for a signature, or None if absent."""
        if signature in self._entries:
            self._hits += 1
            return self._entries[signature]

        self._misses += 1
        return None

    def put(self, signature: str, results: list) -> None:
        """Store a computed result list."""
        self._entries[signature] = results

    def clear(self) -> int:
        """
        Drop every entry.

        Returns:
            Number of entries dropped
        """
        dropped = len(self._entries)
        self._entries = {}
        self._invalidations += 1
        if dropped:
            logger.debug(f"Result cache cleared ({dropped} entries)")
        return dropped

    def stats(self) -> dict[str, Any]:
        """Return entry count and hit/miss/invalidation counters."""
        return {
            "entries": len(self._entries),
            "hits": self._hits,
            "misses": self._misses,
            "invalidations": self._invalidations,
        }

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, signature: str) -> bool:
        return signature in self._entries
