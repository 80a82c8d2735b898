"""Bounded max-priority container used for attention sampling.

The bag holds at most ``capacity`` items. While there is room every item
is admitted; once full, an item is admitted only if its priority is
strictly greater than the current minimum, which is evicted (ties favour
the incumbent). ``take`` removes the maximum.

Two heaps index the same entries: a max-heap for ``take`` and a min-heap
for eviction. Removal from one heap leaves a stale entry in the other,
which is skipped lazily. Every entry carries an insertion sequence number
so equal priorities resolve by insertion order: the earliest item is
taken first and evicted first.
"""

from __future__ import annotations

import heapq
import itertools
from typing import Callable, Generic, Iterator, TypeVar

__all__ = ["Bag"]

T = TypeVar("T")


def _default_priority(item) -> float:
    return item.priority


class Bag(Generic[T]):
    """Deterministic bounded priority bag.

    Args:
        capacity: Maximum number of items (at least 1)
        priority: Function giving an item's priority; read once, when the
            item is added. Defaults to the item's ``priority`` attribute.
    """

    def __init__(
        self,
        capacity: int,
        priority: Callable[[T], float] = _default_priority,
    ) -> None:
        if capacity < 1:
            raise ValueError(f"Bag capacity must be positive, got {capacity}")
        self.capacity = capacity
        self._priority = priority
        self._seq = itertools.count()
        # seq -> (priority, item) for live entries
        self._live: dict[int, tuple[float, T]] = {}
        self._max_heap: list[tuple[float, int]] = []
        self._min_heap: list[tuple[float, int]] = []

    def __len__(self) -> int:
        return len(self._live)

    def __iter__(self) -> Iterator[T]:
        """Iterate items from highest to lowest priority without removing them."""
        ordered = sorted(self._live.items(), key=lambda e: (-e[1][0], e[0]))
        return iter([item for _, (_, item) in ordered])

    def is_full(self) -> bool:
        return len(self._live) >= self.capacity

    def add(self, item: T) -> bool:
        """Offer an item to the bag.

        Returns:
            True if the item was admitted
        """
        pri = self._priority(item)
        if self.is_full():
            lowest = self._peek_entry(self._min_heap, sign=1.0)
            if lowest is None or pri <= lowest[0]:
                return False
            self._live.pop(lowest[1])
            heapq.heappop(self._min_heap)
            self._compact()

        seq = next(self._seq)
        self._live[seq] = (pri, item)
        heapq.heappush(self._max_heap, (-pri, seq))
        heapq.heappush(self._min_heap, (pri, seq))
        assert len(self._live) <= self.capacity, "bag exceeded its capacity"
        return True

    def take(self) -> T | None:
        """Remove and return the highest-priority item, or None if empty."""
        top = self._peek_entry(self._max_heap, sign=-1.0)
        if top is None:
            return None
        heapq.heappop(self._max_heap)
        _, item = self._live.pop(top[1])
        self._compact()
        return item

    def peek(self) -> T | None:
        """Highest-priority item, left in place."""
        top = self._peek_entry(self._max_heap, sign=-1.0)
        return self._live[top[1]][1] if top is not None else None

    def peek_min(self) -> T | None:
        """Lowest-priority item, left in place."""
        low = self._peek_entry(self._min_heap, sign=1.0)
        return self._live[low[1]][1] if low is not None else None

    def clear(self) -> None:
        self._live.clear()
        self._max_heap.clear()
        self._min_heap.clear()

    def _peek_entry(self, heap: list[tuple[float, int]], sign: float) -> tuple[float, int] | None:
        """Drop stale heads of a heap and return (priority, seq) of the live head."""
        while heap and heap[0][1] not in self._live:
            heapq.heappop(heap)
        if not heap:
            return None
        key, seq = heap[0]
        return sign * key, seq

    def _compact(self) -> None:
        # Stale entries accumulate in whichever heap was not popped
        if len(self._min_heap) > 2 * len(self._live) + 16:
            self._min_heap = [(p, s) for p, s in self._min_heap if s in self._live]
            heapq.heapify(self._min_heap)
        if len(self._max_heap) > 2 * len(self._live) + 16:
            self._max_heap = [(p, s) for p, s in self._max_heap if s in self._live]
            heapq.heapify(self._max_heap)
