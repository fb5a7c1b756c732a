"""
Utility functions for non-dominated ranking.

Implements strong Pareto dominance, dominated-by counting, layering,
crowding distance and the front checksum used for stagnation detection.
"""

from functools import reduce
from operator import xor
from typing import Hashable, Iterable, List, Sequence

import numpy as np

from .config import FitnessOption
from .parallel import parallel_for

_MASK64 = (1 << 64) - 1

# upper bound on the boolean comparison tensor built per block of rows
_BLOCK_ELEMENTS = 1 << 20


def is_better(a: float, b: float, fitness_option: FitnessOption) -> bool:
    """Whether scalar fitness ``a`` is strictly better than ``b``."""
    if fitness_option == FitnessOption.GREATER_BETTER:
        return a > b
    return a < b


def is_strong_dominant(a: np.ndarray, b: np.ndarray, fitness_option: FitnessOption) -> bool:
    """
    Whether ``a`` strongly dominates ``b``.

    ``a`` strongly dominates ``b`` iff it is strictly better in every objective.
    A tie in any objective means no dominance, hence a vector never dominates
    itself. Comparisons involving NaN are false.

    Args:
        a: Objective values of the first solution
        b: Objective values of the second solution
        fitness_option: Optimization direction

    Returns:
        True if ``a`` strongly dominates ``b``
    """
    a = np.asarray(a, dtype=float)
    b = np.asarray(b, dtype=float)
    if fitness_option == FitnessOption.GREATER_BETTER:
        return bool(np.all(a > b))
    return bool(np.all(a < b))


def dominated_counts(
    objectives: np.ndarray, fitness_option: FitnessOption, thread_num: int = 1
) -> np.ndarray:
    """
    Count, for every solution, how many other solutions strongly dominate it.

    Plain O(N^2 * M) pairwise scan. Rows are split across threads and each
    worker walks its slice in blocks, so memory stays bounded by
    ``_BLOCK_ELEMENTS`` booleans per worker. Each worker fills only its own
    slice of the result, so the output does not depend on ``thread_num``.

    Args:
        objectives: Array of shape (N, M)
        fitness_option: Optimization direction
        thread_num: Number of worker threads

    Returns:
        Integer array of shape (N,)
    """
    objectives = np.asarray(objectives, dtype=float)
    if objectives.ndim == 1:
        objectives = objectives.reshape(-1, 1)
    population_size = objectives.shape[0]
    counts = np.zeros(population_size, dtype=int)
    greater = fitness_option == FitnessOption.GREATER_BETTER

    block = max(1, _BLOCK_ELEMENTS // max(1, objectives.size))

    def body(start: int, end: int):
        for block_start in range(start, end, block):
            block_end = min(block_start + block, end)
            rows = objectives[block_start:block_end, None, :]
            if greater:
                dominates = np.all(objectives[None, :, :] > rows, axis=2)
            else:
                dominates = np.all(objectives[None, :, :] < rows, axis=2)
            # the diagonal is always False: nothing is strictly better than itself
            counts[block_start:block_end] = dominates.sum(axis=1)

    parallel_for(population_size, body, thread_num)
    return counts


def divide_layers(ids: Sequence[Hashable], counts: Sequence[int]) -> List[List[Hashable]]:
    """
    Divide solutions into non-dominated layers.

    Solutions are sorted by dominated-by count ascending; a new layer starts
    every time the count changes. Layer 0 is the Pareto front.

    Args:
        ids: Identity of every solution
        counts: Dominated-by count of every solution, aligned with ``ids``

    Returns:
        List of layers, each a list of ids
    """
    if len(ids) != len(counts):
        raise ValueError("ids and counts must have the same length")

    order = np.argsort(np.asarray(counts), kind="stable")
    layers: List[List[Hashable]] = []
    current = None
    for position in order:
        count = counts[position]
        if count != current:
            current = count
            layers.append([])
        layers[-1].append(ids[position])
    return layers


def crowding_distance(objectives: np.ndarray) -> np.ndarray:
    """
    Crowding distance of every solution inside one layer.

    Args:
        objectives: Array of shape (K, M) holding the layer's objectives

    Returns:
        Array of shape (K,); boundary solutions get infinite distance
    """
    objectives = np.asarray(objectives, dtype=float)
    layer_size = objectives.shape[0]

    if layer_size <= 2:
        return np.full(layer_size, np.inf)

    distances = np.zeros(layer_size)
    for m in range(objectives.shape[1]):
        order = np.argsort(objectives[:, m], kind="stable")
        column = objectives[order, m]

        distances[order[0]] = np.inf
        distances[order[-1]] = np.inf

        obj_range = column[-1] - column[0]
        if obj_range == 0 or not np.isfinite(obj_range):
            continue

        distances[order[1:-1]] += (column[2:] - column[:-2]) / obj_range

    return distances


def _mix64(value: int) -> int:
    """splitmix64 finalizer; spreads consecutive ids over 64 bits."""
    z = (value + 0x9E3779B97F4A7C15) & _MASK64
    z = ((z ^ (z >> 30)) * 0xBF58476D1CE4E5B9) & _MASK64
    z = ((z ^ (z >> 27)) * 0x94D049BB133111EB) & _MASK64
    return z ^ (z >> 31)


def front_checksum(ids: Iterable[int]) -> int:
    """
    Order-independent checksum of a set of gene ids.

    XOR of a 64-bit mix of every id; XOR is commutative so no canonical
    ordering of the front is needed.
    """
    return reduce(xor, (_mix64(int(gene_id)) for gene_id in ids), 0)
