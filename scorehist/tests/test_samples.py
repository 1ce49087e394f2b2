"""Tests for the raw sample buffer."""

import numpy as np
import pytest

from scorehist.exceptions import RankOutOfRangeError
from scorehist.samples import RawSampleStore


class TestRawSampleStore:
    """Test appending, sorting and rank queries on raw samples."""

    def test_capacity_doubles(self):
        """Capacity grows geometrically and keeps earlier samples."""
        store = RawSampleStore(capacity=2)
        for x in [3.0, 1.0, 2.0]:
            store.append(x)
        assert store.capacity == 4
        assert store.n == 3
        np.testing.assert_array_equal(store.values, [3.0, 1.0, 2.0])

    def test_append_clears_sorted_flag(self):
        """Sorting sets the flag and a new sample clears it."""
        store = RawSampleStore()
        assert store.is_sorted
        store.append(2.0)
        store.append(1.0)
        assert not store.is_sorted
        store.sort()
        assert store.is_sorted
        np.testing.assert_array_equal(store.values, [1.0, 2.0])
        store.append(0.5)
        assert not store.is_sorted

    def test_sort_is_idempotent(self):
        """Sorting twice gives the same order."""
        store = RawSampleStore()
        for x in [5.0, 4.0, 6.0]:
            store.append(x)
        store.sort()
        first = store.values.copy()
        store.sort()
        np.testing.assert_array_equal(store.values, first)

    def test_values_are_read_only(self):
        """The exposed view cannot be written through."""
        store = RawSampleStore()
        store.append(1.0)
        with pytest.raises(ValueError):
            store.values[0] = 2.0

    def test_at_rank(self):
        """Ranks are 1-based and sort on demand."""
        store = RawSampleStore()
        for x in [3.0, 1.0, 2.0]:
            store.append(x)
        assert store.at_rank(1) == 1.0
        assert store.at_rank(3) == 3.0
        assert store.is_sorted

    @pytest.mark.parametrize("rank", [0, 4, -1])
    def test_rank_out_of_range(self, rank):
        """Ranks outside [1, n] are rejected."""
        store = RawSampleStore()
        for x in [3.0, 1.0, 2.0]:
            store.append(x)
        with pytest.raises(RankOutOfRangeError, match="outside"):
            store.at_rank(rank)

    def test_count_at_or_below(self):
        """Counts include ties whether or not the buffer is sorted."""
        store = RawSampleStore()
        for x in [2.0, 1.0, 2.0, 3.0]:
            store.append(x)
        assert store.count_at_or_below(2.0) == 3
        store.sort()
        assert store.count_at_or_below(2.0) == 3
        assert store.count_at_or_below(0.5) == 0
        assert store.count_at_or_below(3.0) == 4
