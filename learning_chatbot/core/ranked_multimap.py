# ranked_multimap.py
# Score -> bucket-of-items map with a reverse lookup, kept in ascending score order.
# Used for successor ranks inside a WordNode and for topic scores inside the brain.
# - put() relocates an item that is already tracked (never two live entries)
# - remove() leaves empty buckets behind, compact() sweeps them every 100 removals
# - buckets are dicts used as ordered sets so iteration order is reproducible

from __future__ import annotations

from bisect import bisect_left, insort
from typing import Dict, Generic, Hashable, Iterator, List, Optional, Tuple, TypeVar

S = TypeVar("S", int, float)
T = TypeVar("T", bound=Hashable)


class RankedMultimap(Generic[S, T]):
    """
    Ordered multimap from a numeric score to the items holding that score.

    Public API:
      put(score, item) / remove(item)
      frequency_of(item), values_at(score), last_key()
      descending_items(), descending_keys(), entries()
      clear(), compact(), size()
    """

    COMPACT_THRESHOLD = 100

    def __init__(self) -> None:
        self._keys: List[S] = []             # ascending scores, one per bucket
        self._buckets: Dict[S, Dict[T, None]] = {}
        self._lookup: Dict[T, S] = {}
        self._removals = 0

    # mutation -------------------------------------------------------------
    def put(self, score: S, item: T) -> None:
        """Insert `item` at `score`, moving it out of its old bucket if tracked."""
        if score is None or item is None:
            raise ValueError("score and item must not be None")

        if item in self._lookup:
            old = self._lookup[item]
            if old == score:
                return
            self._detach(old, item)
            self._drop_if_empty(old)
        self._attach(score, item)

    def remove(self, item: T) -> Optional[S]:
        """Stop tracking `item`. Returns its old score, or None if it wasn't tracked."""
        if item is None:
            raise ValueError("item must not be None")
        if item not in self._lookup:
            return None

        score = self._lookup.pop(item)
        self._buckets[score].pop(item, None)
        self._removals += 1
        if self._removals >= self.COMPACT_THRESHOLD:
            self.compact()
        return score

    def clear(self) -> None:
        self._keys.clear()
        self._buckets.clear()
        self._lookup.clear()
        self._removals = 0

    def compact(self) -> None:
        """Drop every empty bucket. The only O(bucket count) operation."""
        self._keys = [k for k in self._keys if self._buckets[k]]
        self._buckets = {k: self._buckets[k] for k in self._keys}
        self._removals = 0

    # queries ---------------------------------------------------------------
    def frequency_of(self, item: T) -> Optional[S]:
        return self._lookup.get(item)

    def values_at(self, score: S) -> Tuple[T, ...]:
        """Items currently holding exactly `score` (empty tuple if none)."""
        return tuple(self._buckets.get(score, ()))

    def last_key(self) -> S:
        """
        Highest score held by at least one item.
        Raises KeyError when nothing is tracked.
        """
        for key in reversed(self._keys):
            if self._buckets[key]:
                return key
        raise KeyError("last_key() on an empty RankedMultimap")

    def descending_keys(self) -> List[S]:
        return [k for k in reversed(self._keys) if self._buckets[k]]

    def descending_items(self) -> Iterator[T]:
        """
        Items by descending score. Each call starts a fresh pass; every bucket
        is copied before it is yielded from, so callers may mutate the map
        while iterating.
        """
        for key in list(reversed(self._keys)):
            bucket = self._buckets.get(key)
            if bucket:
                yield from list(bucket)

    def entries(self) -> List[Tuple[T, S]]:
        """(item, score) pairs in ascending bucket order, insertion order inside a bucket."""
        return [(item, key) for key in self._keys for item in self._buckets[key]]

    def items(self) -> List[Tuple[T, S]]:
        """(item, score) pairs straight from the lookup."""
        return list(self._lookup.items())

    def size(self) -> int:
        return len(self._lookup)

    def bucket_count(self) -> int:
        """Number of buckets, including empty ones still waiting for compaction."""
        return len(self._keys)

    def __len__(self) -> int:
        return len(self._lookup)

    def __contains__(self, item: object) -> bool:
        return item in self._lookup

    def __repr__(self) -> str:
        parts = [f"{k}:{list(self._buckets[k])}" for k in self._keys if self._buckets[k]]
        return f"RankedMultimap({', '.join(parts)})"

    # internals -------------------------------------------------------------
    def _attach(self, score: S, item: T) -> None:
        bucket = self._buckets.get(score)
        if bucket is None:
            bucket = {}
            self._buckets[score] = bucket
            insort(self._keys, score)
        bucket[item] = None
        self._lookup[item] = score

    def _detach(self, score: S, item: T) -> None:
        self._buckets[score].pop(item, None)
        del self._lookup[item]

    def _drop_if_empty(self, score: S) -> None:
        if self._buckets.get(score):
            return
        self._buckets.pop(score, None)
        idx = bisect_left(self._keys, score)
        if idx < len(self._keys) and self._keys[idx] == score:
            del self._keys[idx]
