"""
Tests for reference-point geometry.
"""

import sys
from pathlib import Path

import numpy as np
import pytest

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from paretoga.exceptions import ConfigurationError
from paretoga.random_source import RandomSource
from paretoga.reference import (
    associate,
    compute_intercepts,
    count_reference_points,
    make_reference_points,
    niche_select,
    normalize_objectives,
)


class TestMakeReferencePoints:
    """Tests for make_reference_points."""

    @pytest.mark.parametrize("dimension, divisions, expected", [(3, 2, 6), (3, 4, 15), (2, 5, 6), (4, 3, 20)])
    def test_count(self, dimension, divisions, expected):
        points = make_reference_points(dimension, divisions)

        assert points.shape == (expected, dimension)
        assert count_reference_points(dimension, divisions) == expected

    def test_points_lie_on_simplex(self):
        points = make_reference_points(3, 4)

        assert np.allclose(points.sum(axis=1), 1.0)
        assert np.all(points >= 0)
        assert len(np.unique(points, axis=0)) == len(points)

    def test_two_objectives(self):
        assert np.allclose(make_reference_points(2, 2), [[0.0, 1.0], [0.5, 0.5], [1.0, 0.0]])

    @pytest.mark.parametrize("dimension, divisions", [(3, 0), (0, 2), (3, 2.5), (True, 2)])
    def test_invalid_arguments(self, dimension, divisions):
        with pytest.raises(ConfigurationError):
            make_reference_points(dimension, divisions)


class TestNormalization:
    """Tests for compute_intercepts and normalize_objectives."""

    def test_intercepts_through_extremes(self):
        shifted = np.array([[2.0, 0.0], [0.0, 4.0], [1.0, 2.0]])
        assert np.allclose(compute_intercepts(shifted), [2.0, 4.0])

    def test_degenerate_extremes_fall_back(self):
        """A singular extreme-point matrix uses the per-axis maxima."""
        assert np.allclose(compute_intercepts(np.array([[1.0, 1.0], [0.0, 0.0]])), [1.0, 1.0])

    def test_zero_range_axis_stays_finite(self):
        intercepts = compute_intercepts(np.zeros((3, 2)))
        assert np.all(np.isfinite(intercepts))
        assert np.all(intercepts > 0)

    def test_normalize_maps_extremes_to_axes(self):
        normalized = normalize_objectives(np.array([[1.0, 5.0], [3.0, 1.0], [2.0, 3.0]]))
        assert np.allclose(normalized, [[0.0, 1.0], [1.0, 0.0], [0.5, 0.5]])


class TestAssociate:
    """Tests for associate."""

    def test_nearest_direction(self):
        reference_points = make_reference_points(2, 2)
        associations, distances = associate(np.array([[1.0, 0.0], [0.0, 1.0], [1.0, 1.0]]), reference_points)

        assert associations.tolist() == [2, 0, 1]
        assert np.allclose(distances, 0.0)

    def test_perpendicular_distance(self):
        reference_points = np.array([[1.0, 0.0], [0.0, 1.0]])
        associations, distances = associate(np.array([[2.0, 0.5]]), reference_points)

        assert associations.tolist() == [0]
        assert distances[0] == pytest.approx(0.5)

    def test_ideal_point_is_associated(self):
        associations, distances = associate(np.zeros((1, 2)), make_reference_points(2, 2))

        assert len(associations) == 1
        assert distances[0] == 0.0


class TestNicheSelect:
    """Tests for niche_select."""

    def test_empty_niches_take_closest_member(self):
        associations = np.array([0, 0, 1])
        distances = np.array([0.3, 0.1, 0.2])

        picked = niche_select([0, 1, 2], 2, np.zeros(2, dtype=int), associations, distances, RandomSource(0))
        assert sorted(picked) == [1, 2]

    def test_least_crowded_niche_first(self):
        associations = np.array([0, 0, 1])
        distances = np.array([0.3, 0.1, 0.2])

        picked = niche_select([0, 1, 2], 1, np.array([3, 0]), associations, distances, RandomSource(0))
        assert picked == [2]

    def test_counts_are_not_modified(self):
        niche_counts = np.array([1, 0])
        niche_select([0, 1], 2, niche_counts, np.array([0, 1]), np.zeros(2), RandomSource(0))
        assert niche_counts.tolist() == [1, 0]

    def test_picks_exact_count(self):
        rng = RandomSource(3)
        associations = np.array([0, 1, 1, 2, 2, 2])
        picked = niche_select(range(6), 4, np.zeros(3, dtype=int), associations, np.linspace(0, 1, 6), rng)

        assert len(picked) == 4
        assert len(set(picked)) == 4
        # every niche is represented before any gets a second member
        assert set(associations[picked[:3]]) == {0, 1, 2}


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
