"""
Injectable random source used by selectors, variation and default operators.
"""

from typing import List, Optional

import numpy as np


class RandomSource:
    """
    Thin wrapper around ``numpy.random.Generator``.

    Each solver owns one instance so that runs with the same seed are reproducible.
    """

    def __init__(self, seed: Optional[int] = None):
        self._generator = np.random.default_rng(seed)

    @property
    def generator(self) -> np.random.Generator:
        return self._generator

    def reseed(self, seed: Optional[int]):
        self._generator = np.random.default_rng(seed)

    def uniform(self, low: float = 0.0, high: float = 1.0) -> float:
        """Uniform double on [low, high)."""
        return float(self._generator.uniform(low, high))

    def index(self, high: int) -> int:
        """Uniform index on [0, high)."""
        return int(self._generator.integers(0, high))

    def index_range(self, low: int, high: int) -> int:
        """Uniform index on [low, high), i.e. excluding the leading sub-range [0, low)."""
        return int(self._generator.integers(low, high))

    def shuffle(self, items: List):
        """Shuffle a list in place."""
        order = self._generator.permutation(len(items))
        items[:] = [items[i] for i in order]
