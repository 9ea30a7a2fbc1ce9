"""Tests for search state dataclasses."""
import dataclasses
import math

import pytest

from perfect_search.errors import CapacityExceededError
from perfect_search.search_state import (
    MAX_PERFECTS, PerfectNumberList, SearchPosition, SearchState
)


class TestSearchPosition:
    def test_value_derived_from_powers(self):
        position = SearchPosition(25, 12)
        assert position.current_value == 33550336
        assert position.max_divisor == math.isqrt(33550336)

    def test_immutable(self):
        position = SearchPosition(5, 2)
        with pytest.raises(dataclasses.FrozenInstanceError):
            position.lo_power = 1

    def test_str(self):
        assert str(SearchPosition(5, 2)) == "2^5 - 2^2 = 28"


class TestPerfectNumberList:
    def test_append_and_iterate(self):
        records = PerfectNumberList()
        records.append(6)
        records.append(28)
        assert list(records) == [6, 28]
        assert records.values == (6, 28)
        assert len(records) == 2
        assert 28 in records
        assert records[0] == 6

    def test_capacity_exceeded(self):
        records = PerfectNumberList(range(1, MAX_PERFECTS + 1))
        assert records.is_full
        with pytest.raises(CapacityExceededError):
            records.append(1000)
        assert len(records) == MAX_PERFECTS

    def test_small_capacity(self):
        records = PerfectNumberList([6], capacity=1)
        with pytest.raises(CapacityExceededError):
            records.append(28)

    def test_rejects_non_ascending(self):
        records = PerfectNumberList([28])
        with pytest.raises(ValueError):
            records.append(6)
        with pytest.raises(ValueError):
            records.append(28)

    @pytest.mark.parametrize("value", [0, 2 ** 32])
    def test_rejects_out_of_range(self, value):
        with pytest.raises(ValueError):
            PerfectNumberList([value])

    def test_equality(self):
        assert PerfectNumberList([6, 28]) == PerfectNumberList([6, 28])
        assert PerfectNumberList([6]) != PerfectNumberList([6, 28])


class TestSearchState:
    def test_fresh(self):
        state = SearchState.fresh()
        assert state.position == SearchPosition(3, 2)
        assert state.elapsed_seconds == 0.0
        assert len(state.records) == 0
        assert state.next_index == 1
        assert not state.exhausted

    def test_next_index_counts_records(self):
        state = SearchState(records=PerfectNumberList([6, 28]), position=SearchPosition(5, 1))
        assert state.next_index == 3

    def test_exhausted(self):
        assert SearchState(position=None).exhausted

    @pytest.mark.parametrize("elapsed", [-1.0, float('nan'), float('inf')])
    def test_invalid_elapsed(self, elapsed):
        with pytest.raises(ValueError):
            SearchState(elapsed_seconds=elapsed)
