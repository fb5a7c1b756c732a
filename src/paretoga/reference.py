"""
Reference-point geometry for reference-point based survival.

Provides structured points on the unit simplex, intercept normalization of
objective vectors, association of solutions with reference directions and
niche-preserving selection among the members of one layer.
"""

from math import comb
from typing import List, Sequence, Tuple

import numpy as np

from .exceptions import ConfigurationError
from .random_source import RandomSource


def count_reference_points(dimension: int, divisions: int) -> int:
    """Number of points produced by :func:`make_reference_points`."""
    return comb(divisions + dimension - 1, dimension - 1)


def make_reference_points(dimension: int, divisions: int) -> np.ndarray:
    """
    Das and Dennis structured points on the unit simplex.

    Every coordinate is a multiple of ``1 / divisions`` and every point sums
    to one. Points are ordered lexicographically by their leading coordinates.

    Args:
        dimension: Number of objectives (>= 1)
        divisions: Number of divisions along each objective axis (>= 1)

    Returns:
        Array of shape (count_reference_points(dimension, divisions), dimension)
    """
    for value, name in ((dimension, "dimension"), (divisions, "divisions")):
        if isinstance(value, bool) or not isinstance(value, int):
            raise ConfigurationError(f"{name} must be an integer (got {value!r})")
        if value < 1:
            raise ConfigurationError(f"{name} must be >= 1 (got {value})")

    points: List[List[int]] = []

    def fill(current: List[int], remaining: int):
        if len(current) == dimension - 1:
            points.append(current + [remaining])
            return
        for share in range(remaining + 1):
            fill(current + [share], remaining - share)

    fill([], divisions)
    return np.asarray(points, dtype=float) / divisions


def compute_intercepts(shifted: np.ndarray) -> np.ndarray:
    """
    Axis intercepts of the hyperplane through the extreme points.

    The extreme point of objective ``m`` minimizes the achievement
    scalarizing function with a large weight on every other axis. When the
    extreme points are degenerate the per-axis maxima are used instead.

    Args:
        shifted: Objectives translated so that the ideal point is the origin, shape (N, M)

    Returns:
        Strictly positive intercepts, shape (M,)
    """
    objective_num = shifted.shape[1]
    extremes = np.empty(objective_num, dtype=int)
    for m in range(objective_num):
        weights = np.full(objective_num, 1e6)
        weights[m] = 1.0
        extremes[m] = int(np.argmin((shifted * weights).max(axis=1)))

    fallback = shifted.max(axis=0)
    try:
        plane = np.linalg.solve(shifted[extremes], np.ones(objective_num))
    except np.linalg.LinAlgError:
        intercepts = fallback
    else:
        with np.errstate(divide="ignore"):
            intercepts = 1.0 / plane
        if not np.all(np.isfinite(intercepts)) or np.any(intercepts <= 1e-12):
            intercepts = fallback

    return np.where(intercepts > 1e-12, intercepts, 1.0)


def normalize_objectives(objectives: np.ndarray) -> np.ndarray:
    """
    Translate objectives to the ideal point and scale them by the intercepts.

    Objectives must already be oriented so that smaller is better.
    """
    objectives = np.asarray(objectives, dtype=float)
    shifted = objectives - objectives.min(axis=0)
    return shifted / compute_intercepts(shifted)


def associate(normalized: np.ndarray, reference_points: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
    """
    Attach every solution to its closest reference direction.

    Args:
        normalized: Normalized objectives, shape (N, M)
        reference_points: Reference points, shape (R, M)

    Returns:
        Tuple of (reference index per solution, perpendicular distance to that direction)
    """
    directions = reference_points / np.linalg.norm(reference_points, axis=1, keepdims=True)
    norms = np.linalg.norm(normalized, axis=1)
    unit = normalized / np.where(norms > 0, norms, 1.0)[:, None]

    cosine = np.clip(unit @ directions.T, -1.0, 1.0)
    associations = np.argmax(cosine, axis=1)
    chosen = cosine[np.arange(len(normalized)), associations]
    distances = norms * np.sqrt(np.maximum(0.0, 1.0 - chosen**2))
    return associations, distances


def niche_select(
    candidates: Sequence[int],
    count: int,
    niche_counts: np.ndarray,
    associations: np.ndarray,
    distances: np.ndarray,
    rng: RandomSource,
) -> List[int]:
    """
    Pick ``count`` candidates so that sparsely populated niches are filled first.

    Repeatedly takes a reference point with the fewest members among those
    some candidate is attached to, ties broken at random. An empty niche
    admits its closest candidate; an occupied one admits a random candidate.

    Args:
        candidates: Row indices eligible for selection
        count: Number of rows to pick (<= len(candidates))
        niche_counts: Members already attached to each reference point; not modified
        associations: Reference index of every row
        distances: Perpendicular distance of every row
        rng: Random source

    Returns:
        Picked row indices, in pick order
    """
    niche_counts = np.array(niche_counts, dtype=int)
    pool = list(candidates)
    picked: List[int] = []

    while len(picked) < count and pool:
        refs = np.unique(associations[pool])
        loads = niche_counts[refs]
        lightest = refs[loads == loads.min()]
        ref = int(lightest[rng.index(len(lightest))])

        members = [row for row in pool if associations[row] == ref]
        if niche_counts[ref] == 0:
            row = min(members, key=lambda member: distances[member])
        else:
            row = members[rng.index(len(members))]

        pool.remove(row)
        picked.append(row)
        niche_counts[ref] += 1

    return picked
