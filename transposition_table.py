#transposition_table.py
from collections import OrderedDict
from typing import Hashable, NamedTuple, Optional

from errors import InvalidConfiguration

# Constants for transposition table entry flags
FLAG_EXACT = 0
FLAG_LOWERBOUND = 1
FLAG_UPPERBOUND = 2


class TTEntry(NamedTuple):
    depth: int
    value: int
    flag: int
    best_move: Optional[int]


class TranspositionTable:
    """
    Insertion-ordered search cache with bounded size.

    Once the table grows past `soft_limit` entries, the oldest insertions are
    dropped until it holds `hard_limit // 2` entries.
    """

    def __init__(self, soft_limit=200_000, hard_limit=250_000):
        if soft_limit < 1 or hard_limit < soft_limit:
            raise InvalidConfiguration(
                f"Cache limits must satisfy 1 <= soft <= hard, got soft={soft_limit}, hard={hard_limit}.")
        self._table: "OrderedDict[Hashable, TTEntry]" = OrderedDict()
        self.soft_limit = soft_limit
        self.hard_limit = hard_limit
        self.hits = 0
        self.misses = 0
        self.evictions = 0

    def get(self, key: Hashable, depth: int) -> Optional[TTEntry]:
        """Return the entry for `key` if it was searched at least `depth` plies deep."""
        entry = self._table.get(key)
        if entry is None or entry.depth < depth:
            self.misses += 1
            return None
        self.hits += 1
        return entry

    def put(self, key: Hashable, depth: int, value: int, flag: int, best_move: Optional[int] = None) -> None:
        if key in self._table:
            del self._table[key]
        self._table[key] = TTEntry(depth, value, flag, best_move)
        if len(self._table) > self.soft_limit:
            self._evict()

    def _evict(self):
        target = self.hard_limit // 2
        while len(self._table) > target:
            self._table.popitem(last=False)
            self.evictions += 1

    def __contains__(self, key: Hashable) -> bool:
        return key in self._table

    def __len__(self) -> int:
        return len(self._table)

    def clear(self) -> None:
        self._table.clear()
        self.hits = 0
        self.misses = 0
        self.evictions = 0

    def stats(self) -> dict:
        total_lookups = self.hits + self.misses
        return {
            "entries": len(self._table),
            "soft_limit": self.soft_limit,
            "hard_limit": self.hard_limit,
            "hits": self.hits,
            "misses": self.misses,
            "evictions": self.evictions,
            "hit_rate": self.hits / total_lookups if total_lookups > 0 else 0.0,
        }
