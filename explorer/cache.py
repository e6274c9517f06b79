"""Bounded result caches.

Both caches evict strictly by insertion order: when a put overflows the
capacity, the entry inserted earliest is dropped, however recently it was
read. Re-putting an existing key replaces its value in place without
moving it.
"""

import logging
from collections import OrderedDict
from collections.abc import Hashable, Iterator
from typing import Generic, TypeVar

from agent_client.models import Listing
from explorer.paths import SEPARATOR, normalize_path

logger = logging.getLogger(__name__)

K = TypeVar("K", bound=Hashable)
V = TypeVar("V")

ROOT_SCOPE = "root"


class BoundedCache(Generic[K, V]):
    """Insertion-ordered mapping with a fixed capacity.

    Attributes:
        capacity: Maximum number of entries kept.
    """

    def __init__(self, capacity: int) -> None:
        """Initialize an empty cache.

        Args:
            capacity: Maximum number of entries; must be positive.

        Raises:
            ValueError: If capacity is not positive.
        """
        if capacity <= 0:
            raise ValueError("capacity must be positive")
        self.capacity = capacity
        self._entries: OrderedDict[K, V] = OrderedDict()

    def get(self, key: K) -> V | None:
        """Return the cached value for key, or None."""
        return self._entries.get(key)

    def put(self, key: K, value: V) -> K | None:
        """Insert or replace an entry.

        Args:
            key: Cache key.
            value: Value to store.

        Returns:
            The evicted key if the insert overflowed the capacity.
        """
        self._entries[key] = value
        if len(self._entries) > self.capacity:
            evicted, _ = self._entries.popitem(last=False)
            return evicted
        return None

    def invalidate(self, key: K) -> bool:
        """Drop a single entry; returns whether it was present."""
        return self._entries.pop(key, None) is not None

    def invalidate_all(self) -> None:
        """Drop every entry."""
        self._entries.clear()

    def keys(self) -> list[K]:
        """Keys in insertion order, oldest first."""
        return list(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[K]:
        return iter(self._entries)


class DirectoryCache(BoundedCache[str, Listing]):
    """Last-fetched listing per normalized directory path."""

    def __init__(self, capacity: int = 100) -> None:
        super().__init__(capacity)

    def get(self, key: str) -> Listing | None:
        return super().get(normalize_path(key))

    def put(self, key: str, value: Listing) -> str | None:
        evicted = super().put(normalize_path(key), value)
        if evicted is not None:
            logger.debug(f"Directory cache full, evicted {evicted}")
        return evicted

    def invalidate(self, key: str) -> bool:
        return super().invalidate(normalize_path(key))

    def invalidate_under(self, path: str) -> list[str]:
        """Drop a directory's listing and the listing of everything below it.

        Returns:
            The keys dropped.
        """
        path = normalize_path(path)
        prefix = path.rstrip(SEPARATOR) + SEPARATOR
        dropped = [key for key in self._entries if key == path or key.startswith(prefix)]
        for key in dropped:
            del self._entries[key]
        return dropped

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and super().__contains__(normalize_path(key))


class SearchCache(BoundedCache[tuple[str, str], Listing]):
    """Ranked search results keyed by ``(scope, lowercase query)``."""

    def __init__(self, capacity: int = 50) -> None:
        super().__init__(capacity)

    @staticmethod
    def make_key(scope: str | None, query: str) -> tuple[str, str]:
        """Build the cache key for a query run in a directory.

        Args:
            scope: The directory searched, or None when nothing is open.
            query: The raw query text.

        Returns:
            ``(scope or "root", query.lower())``.
        """
        return (scope or ROOT_SCOPE, query.lower())
