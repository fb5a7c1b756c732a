"""
Tests for dominance, ranking and layering utilities.
"""

import sys
from pathlib import Path

import numpy as np
import pytest

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from paretoga import utils
from paretoga.config import FitnessOption
from paretoga.utils import (
    crowding_distance,
    divide_layers,
    dominated_counts,
    front_checksum,
    is_better,
    is_strong_dominant,
)

LESS = FitnessOption.LESS_BETTER
GREATER = FitnessOption.GREATER_BETTER


class TestDominance:
    """Tests for the strong dominance comparator."""

    def test_strictly_better_in_every_objective(self):
        assert is_strong_dominant(np.array([1.0, 2.0]), np.array([2.0, 3.0]), LESS)
        assert not is_strong_dominant(np.array([2.0, 3.0]), np.array([1.0, 2.0]), LESS)

    def test_tie_in_one_objective_is_not_dominance(self):
        assert not is_strong_dominant(np.array([1.0, 3.0]), np.array([2.0, 3.0]), LESS)
        assert not is_strong_dominant(np.array([2.0, 3.0]), np.array([1.0, 3.0]), LESS)

    def test_trade_off_is_not_dominance(self):
        assert not is_strong_dominant(np.array([1.0, 5.0]), np.array([2.0, 3.0]), LESS)
        assert not is_strong_dominant(np.array([2.0, 3.0]), np.array([1.0, 5.0]), LESS)

    def test_greater_better_direction(self):
        assert is_strong_dominant(np.array([3.0, 4.0]), np.array([1.0, 2.0]), GREATER)
        assert not is_strong_dominant(np.array([1.0, 2.0]), np.array([3.0, 4.0]), GREATER)

    def test_irreflexive(self):
        rng = np.random.default_rng(0)
        for _ in range(20):
            a = rng.normal(size=3)
            assert not is_strong_dominant(a, a, LESS)
            assert not is_strong_dominant(a, a, GREATER)

    def test_nan_never_dominates(self):
        a = np.array([np.nan, 0.0])
        b = np.array([1.0, 1.0])
        assert not is_strong_dominant(a, b, LESS)
        assert not is_strong_dominant(b, a, LESS)

    def test_is_better_scalar(self):
        assert is_better(1.0, 2.0, LESS)
        assert not is_better(2.0, 2.0, LESS)
        assert is_better(2.0, 1.0, GREATER)


class TestDominatedCounts:
    """Tests for dominated-by counting."""

    def setup_method(self):
        self.objectives = np.array(
            [
                [1.0, 5.0],  # Front
                [2.0, 3.0],  # Front
                [3.0, 2.0],  # Front
                [4.0, 4.0],  # Dominated by [2, 3] and [3, 2]
                [5.0, 1.0],  # Front
            ]
        )

    def test_counts_minimization(self):
        counts = dominated_counts(self.objectives, LESS)
        assert counts.tolist() == [0, 0, 0, 2, 0]

    def test_counts_maximization(self):
        counts = dominated_counts(self.objectives, GREATER)
        # [4, 4] strictly beats [2, 3] and [3, 2] when greater is better
        assert counts.tolist() == [0, 1, 1, 0, 0]

    def test_duplicates_do_not_dominate_each_other(self):
        objectives = np.array([[1.0, 1.0], [1.0, 1.0], [2.0, 2.0]])
        counts = dominated_counts(objectives, LESS)
        assert counts.tolist() == [0, 0, 2]

    def test_thread_count_does_not_change_result(self):
        objectives = np.random.default_rng(1).random((97, 3))
        single = dominated_counts(objectives, LESS, thread_num=1)
        multi = dominated_counts(objectives, LESS, thread_num=4)
        assert np.array_equal(single, multi)

    def test_matches_pairwise_comparator(self):
        objectives = np.random.default_rng(2).random((30, 2))
        counts = dominated_counts(objectives, LESS)
        for i in range(len(objectives)):
            expected = sum(
                is_strong_dominant(objectives[j], objectives[i], LESS)
                for j in range(len(objectives))
                if j != i
            )
            assert counts[i] == expected

    def test_small_blocks_match_single_pass(self, monkeypatch):
        """Walking rows in tiny blocks gives the same counts as one full block."""
        objectives = np.random.default_rng(3).random((41, 3))
        expected = dominated_counts(objectives, GREATER, thread_num=1)

        # room for barely one row per block
        monkeypatch.setattr(utils, "_BLOCK_ELEMENTS", objectives.size + 1)
        assert np.array_equal(dominated_counts(objectives, GREATER, thread_num=1), expected)
        assert np.array_equal(dominated_counts(objectives, GREATER, thread_num=3), expected)


class TestLayers:
    """Tests for layer division."""

    def test_divide_layers(self):
        layers = divide_layers(["a", "b", "c", "d"], [2, 0, 1, 0])
        assert layers == [["b", "d"], ["c"], ["a"]]

    def test_partition_and_rank_zero(self):
        objectives = np.random.default_rng(3).random((60, 2))
        counts = dominated_counts(objectives, LESS)
        ids = list(range(len(objectives)))
        layers = divide_layers(ids, counts)

        assert sum(len(layer) for layer in layers) == len(ids)
        assert sorted(i for layer in layers for i in layer) == ids
        assert all(counts[i] == 0 for i in layers[0])

        for layer in layers[1:]:
            for i in layer:
                assert any(counts[j] < counts[i] for j in ids)

    def test_idempotent(self):
        objectives = np.random.default_rng(4).random((40, 3))
        ids = list(range(len(objectives)))
        first = divide_layers(ids, dominated_counts(objectives, LESS))
        second = divide_layers(ids, dominated_counts(objectives, LESS))
        assert first == second

    def test_length_mismatch(self):
        with pytest.raises(ValueError):
            divide_layers([1, 2], [0])


class TestCrowdingDistance:
    """Tests for crowding distance calculation."""

    def test_boundaries_are_infinite(self):
        objectives = np.array([[1.0, 5.0], [2.0, 3.0], [3.0, 2.0], [5.0, 1.0]])
        distances = crowding_distance(objectives)

        assert distances[0] == np.inf
        assert distances[3] == np.inf
        assert np.all(np.isfinite(distances[1:3]))
        assert np.all(distances >= 0)

    def test_small_layers(self):
        assert np.all(crowding_distance(np.array([[1.0, 2.0], [2.0, 1.0]])) == np.inf)

    def test_constant_objective_is_ignored(self):
        objectives = np.array([[1.0, 0.0], [2.0, 0.0], [4.0, 0.0]])
        distances = crowding_distance(objectives)
        assert distances[1] == pytest.approx((4.0 - 1.0) / 3.0)


class TestFrontChecksum:
    """Tests for the order-independent front checksum."""

    def test_order_independent(self):
        assert front_checksum([1, 2, 3]) == front_checksum([3, 1, 2])

    def test_distinguishes_equal_plain_xor(self):
        # 1 ^ 2 == 0 ^ 3, the mixed checksum must still tell them apart
        assert front_checksum([1, 2]) != front_checksum([0, 3])

    def test_empty(self):
        assert front_checksum([]) == 0


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
