"""
Process-lifetime cache for derived catalog data.

Entries never expire and the store is unbounded: the catalog is treated as
static for the life of the process.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any

from stockpick_gateway.logging import get_logger

logger = get_logger(__name__)


class CacheKey(str, Enum):
    """Logical names of cached structures."""

    CATALOG = "catalog"
    SECTOR_INDEX = "sector-index"


@dataclass
class CacheStats:
    """Cache statistics."""

    hits: int = 0
    misses: int = 0
    puts: int = 0

    @property
    def hit_rate(self) -> float:
        """Calculate hit rate as percentage."""
        total = self.hits + self.misses
        if total == 0:
            return 0.0
        return (self.hits / total) * 100


class CacheStore:
    """
    Key -> value store with get/put semantics.

    Values are stored as given and must be immutable snapshots (tuples of
    frozen models); a concurrent `put` of the same key is last-write-wins.
    """

    def __init__(self, name: str = "cache") -> None:
        """
        Initialize an empty store.

        Args:
            name: Name for logging purposes
        """
        self._name = name
        self._entries: dict[str, Any] = {}
        self._stats = CacheStats()

    @staticmethod
    def _key(key: CacheKey | str) -> str:
        return key.value if isinstance(key, CacheKey) else key

    def get(self, key: CacheKey | str) -> Any | None:
        """
        Get value from cache.

        Args:
            key: Cache key

        Returns:
            Value if present, None otherwise
        """
        k = self._key(key)
        if k not in self._entries:
            self._stats.misses += 1
            return None
        self._stats.hits += 1
        return self._entries[k]

    def put(self, key: CacheKey | str, value: Any) -> None:
        """
        Store a value, replacing any previous one.

        Args:
            key: Cache key
            value: Value to cache
        """
        k = self._key(key)
        self._entries[k] = value
        self._stats.puts += 1
        logger.debug("%s: stored '%s'", self._name, k)

    def delete(self, key: CacheKey | str) -> bool:
        """
        Delete entry from cache.

        Returns:
            True if entry was deleted
        """
        return self._entries.pop(self._key(key), None) is not None

    def clear(self) -> None:
        """Clear all entries."""
        self._entries.clear()

    def contains(self, key: CacheKey | str) -> bool:
        """Check if key exists (does not count as a hit or miss)."""
        return self._key(key) in self._entries

    def keys(self) -> list[str]:
        """Get all keys in insertion order."""
        return list(self._entries.keys())

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: CacheKey | str) -> bool:
        return self.contains(key)

    @property
    def stats(self) -> CacheStats:
        """Get cache statistics."""
        return self._stats
