"""Unit tests for TranspositionTable."""

import pytest

from errors import InvalidConfiguration
from transposition_table import FLAG_EXACT, FLAG_LOWERBOUND, TranspositionTable


class TestBasicOperations:
    def test_put_and_get(self) -> None:
        table = TranspositionTable(soft_limit=100, hard_limit=100)
        table.put("key1", 3, 42, FLAG_EXACT, best_move=7)
        entry = table.get("key1", 3)
        assert entry.value == 42
        assert entry.depth == 3
        assert entry.flag == FLAG_EXACT
        assert entry.best_move == 7

    def test_missing_key(self) -> None:
        table = TranspositionTable(soft_limit=100, hard_limit=100)
        assert table.get("missing", 1) is None
        assert table.misses == 1

    def test_shallower_entry_not_used_for_deeper_query(self) -> None:
        table = TranspositionTable(soft_limit=100, hard_limit=100)
        table.put("key", 2, 10, FLAG_EXACT)
        assert table.get("key", 3) is None
        assert table.get("key", 2) is not None
        assert table.get("key", 1) is not None

    def test_put_replaces_existing(self) -> None:
        table = TranspositionTable(soft_limit=100, hard_limit=100)
        table.put("key", 1, 10, FLAG_EXACT)
        table.put("key", 4, -5, FLAG_LOWERBOUND)
        assert len(table) == 1
        assert table.get("key", 4).value == -5

    def test_contains_and_clear(self) -> None:
        table = TranspositionTable(soft_limit=100, hard_limit=100)
        table.put(("a", 1), 1, 0, FLAG_EXACT)
        table.get(("a", 1), 1)
        assert ("a", 1) in table
        table.clear()
        assert len(table) == 0
        assert table.hits == 0
        assert ("a", 1) not in table


class TestEviction:
    def test_no_eviction_at_soft_limit(self) -> None:
        table = TranspositionTable(soft_limit=10, hard_limit=12)
        for i in range(10):
            table.put(i, 1, i, FLAG_EXACT)
        assert len(table) == 10
        assert table.evictions == 0

    def test_evicts_oldest_down_to_half_hard_limit(self) -> None:
        table = TranspositionTable(soft_limit=10, hard_limit=12)
        for i in range(11):
            table.put(i, 1, i, FLAG_EXACT)
        assert len(table) == 6
        assert table.evictions == 5
        assert all(i not in table for i in range(5))
        assert all(i in table for i in range(5, 11))

    def test_reinserted_key_counts_as_newest(self) -> None:
        table = TranspositionTable(soft_limit=4, hard_limit=4)
        for i in range(4):
            table.put(i, 1, i, FLAG_EXACT)
        table.put(0, 1, 0, FLAG_EXACT)
        table.put(4, 1, 4, FLAG_EXACT)
        assert 0 in table
        assert 4 in table
        assert len(table) == 2

    def test_size_stays_bounded(self) -> None:
        table = TranspositionTable(soft_limit=50, hard_limit=60)
        for i in range(1000):
            table.put(i, 1, i, FLAG_EXACT)
            assert len(table) <= 50


class TestConfiguration:
    @pytest.mark.parametrize("soft,hard", [(0, 10), (10, 5)])
    def test_bad_limits(self, soft, hard) -> None:
        with pytest.raises(InvalidConfiguration):
            TranspositionTable(soft_limit=soft, hard_limit=hard)

    def test_stats(self) -> None:
        table = TranspositionTable(soft_limit=10, hard_limit=10)
        table.put("k", 1, 1, FLAG_EXACT)
        table.get("k", 1)
        table.get("x", 1)
        stats = table.stats()
        assert stats["entries"] == 1
        assert stats["hits"] == 1
        assert stats["misses"] == 1
        assert stats["hit_rate"] == 0.5
