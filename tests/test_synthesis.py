"""Tests for range mapping and unique-set synthesis."""

import pytest

from truedraw.core.synthesis import (
    OVERFETCH_FACTOR,
    csprng_numbers,
    map_all,
    map_to_range,
    overfetch_count,
    unique_numbers,
)


class TestMapToRange:
    def test_modulo_reduction(self):
        assert map_to_range(0, 1, 6) == 1
        assert map_to_range(5, 1, 6) == 6
        assert map_to_range(6, 1, 6) == 1
        assert map_to_range(65535, 1, 6) == 65535 % 6 + 1

    def test_negative_bounds(self):
        assert map_to_range(0, -5, 5) == -5
        assert map_to_range(10, -5, 5) == 5

    def test_map_all_keeps_order(self):
        assert map_all([0, 1, 2, 3], 10, 11) == [10, 11, 10, 11]


class TestCsprngNumbers:
    def test_count_and_bounds(self):
        numbers = csprng_numbers(-3, 3, 500)
        assert len(numbers) == 500
        assert all(-3 <= n <= 3 for n in numbers)


class TestOverfetch:
    def test_triples_count(self):
        assert OVERFETCH_FACTOR == 3
        assert overfetch_count(5, 1, 1000) == 15

    def test_capped_at_range_size(self):
        assert overfetch_count(5, 1, 10) == 10


class TestUniqueNumbers:
    def test_keeps_first_appearance_order(self):
        assert unique_numbers([4, 2, 4, 7, 2, 9], 1, 10, 3) == [4, 2, 7]

    def test_stops_at_count(self):
        assert unique_numbers([1, 2, 3, 4, 5], 1, 10, 2) == [1, 2]

    def test_tops_up_when_candidates_collide(self):
        result = unique_numbers([3, 3, 3, 3], 1, 10, 5)
        assert len(result) == 5
        assert len(set(result)) == 5
        assert result[0] == 3
        assert all(1 <= n <= 10 for n in result)

    def test_tops_up_from_empty_candidates(self):
        result = unique_numbers([], 1, 10, 10)
        assert sorted(result) == list(range(1, 11))

    def test_count_exceeding_range(self):
        with pytest.raises(ValueError, match="more unique numbers than range"):
            unique_numbers([], 1, 3, 4)
