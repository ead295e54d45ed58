"""
EmberGuard - Bounded Cache
==========================

Least-recently-used map with an explicit capacity, shared by the heat
tracker, the join-window detector, and the slow mode monitor.

DESIGN:
    Trackers never grow without bound. Every insert beyond capacity
    evicts the entry touched longest ago, and idle-based pruning is a
    separate call so the eviction policy is testable on its own.

Author: حَـــــنَّـــــا
Server: discord.gg/syria
"""

from collections import OrderedDict
from typing import Callable, Dict, Generic, Iterator, List, Optional, Tuple, TypeVar

K = TypeVar("K")
V = TypeVar("V")


class LRUCache(Generic[K, V]):
    """
    Ordered map that evicts least-recently-used entries beyond max_size.

    Safe for single-threaded async use; no method awaits.
    """

    def __init__(self, max_size: int = 1000):
        if max_size < 1:
            raise ValueError("max_size must be at least 1")
        self._max_size = max_size
        self._data: "OrderedDict[K, V]" = OrderedDict()

    @property
    def max_size(self) -> int:
        return self._max_size

    def get(self, key: K, touch: bool = True) -> Optional[V]:
        """
        Get an item, marking it most recently used.

        Args:
            key: The cache key.
            touch: Whether to refresh the item's recency.

        Returns:
            The cached value or None if not present.
        """
        if key not in self._data:
            return None
        if touch:
            self._data.move_to_end(key)
        return self._data[key]

    def set(self, key: K, value: V) -> List[Tuple[K, V]]:
        """
        Insert or replace an item as most recently used.

        Returns:
            The (key, value) pairs evicted to stay within capacity.
        """
        self._data[key] = value
        self._data.move_to_end(key)
        return self.enforce_capacity()

    def get_or_create(self, key: K, factory: Callable[[], V]) -> V:
        """Return the existing value or insert factory() for the key."""
        value = self.get(key)
        if value is None:
            value = factory()
            self.set(key, value)
        return value

    def delete(self, key: K) -> bool:
        """Delete an item. Returns True if it was present."""
        return self._data.pop(key, None) is not None

    def clear(self) -> None:
        self._data.clear()

    def enforce_capacity(self) -> List[Tuple[K, V]]:
        """Evict oldest entries until the cache fits max_size."""
        evicted = []
        while len(self._data) > self._max_size:
            evicted.append(self._data.popitem(last=False))
        return evicted

    def prune(self, predicate: Callable[[K, V], bool]) -> int:
        """
        Remove every entry for which predicate(key, value) is true.

        Returns:
            Number of entries removed.
        """
        doomed = [k for k, v in self._data.items() if predicate(k, v)]
        for key in doomed:
            del self._data[key]
        return len(doomed)

    def items(self) -> List[Tuple[K, V]]:
        """Snapshot of entries, oldest first."""
        return list(self._data.items())

    def as_dict(self) -> Dict[K, V]:
        return dict(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __contains__(self, key: object) -> bool:
        return key in self._data

    def __iter__(self) -> Iterator[K]:
        return iter(list(self._data))


__all__ = ["LRUCache"]
