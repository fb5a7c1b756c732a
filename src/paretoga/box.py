"""
Box constraints describing the domain of real-valued decision vectors.
"""

from typing import Sequence, Union

import numpy as np

from .exceptions import ConfigurationError


class Box:
    """
    Per-dimension lower and upper bounds.

    Only the default operators consume a box; the engine itself treats
    decision vectors as opaque.
    """

    def __init__(self, lower: Union[Sequence[float], np.ndarray], upper: Union[Sequence[float], np.ndarray]):
        self.lower = np.asarray(lower, dtype=float).reshape(-1)
        self.upper = np.asarray(upper, dtype=float).reshape(-1)

        if self.lower.shape != self.upper.shape:
            raise ConfigurationError(
                f"Bounds differ in size: {self.lower.size} lower vs {self.upper.size} upper"
            )
        if self.lower.size == 0:
            raise ConfigurationError("Box needs at least one dimension")
        if np.any(self.lower > self.upper):
            raise ConfigurationError("Every lower bound must be <= its upper bound")

    @classmethod
    def square(cls, dimension: int, low: float, high: float) -> "Box":
        """Box sharing the same range in every dimension."""
        if dimension < 1:
            raise ConfigurationError(f"dimension must be >= 1 (got {dimension})")
        return cls(np.full(dimension, low, dtype=float), np.full(dimension, high, dtype=float))

    @property
    def dimension(self) -> int:
        return self.lower.size

    @property
    def span(self) -> np.ndarray:
        return self.upper - self.lower

    def clip(self, x: np.ndarray) -> np.ndarray:
        return np.clip(x, self.lower, self.upper)

    def contains(self, x: np.ndarray) -> bool:
        x = np.asarray(x, dtype=float)
        return bool(np.all(x >= self.lower) and np.all(x <= self.upper))

    def __repr__(self) -> str:
        return f"Box(lower={self.lower.tolist()}, upper={self.upper.tolist()})"
