"""
NSGA-III style many-objective genetic algorithm.

Shares ranking, layering and front tracking with :class:`NSGA2` and replaces
the crowding-distance cut of the overflowing layer with niche preservation
around structured reference points.
"""

import logging
from typing import Any, Callable, List, Optional

import numpy as np

from .config import FitnessOption, GAOption
from .exceptions import ConfigurationError
from .nsga2 import NSGA2
from .random_source import RandomSource
from .reference import associate, make_reference_points, niche_select, normalize_objectives


def _logger() -> logging.Logger:
    return logging.getLogger(__name__)


class NSGA3(NSGA2):
    """
    Multi-objective genetic algorithm with reference-point survival.

    Args:
        option: Solver options
        initialize: Function () -> decision
        fitness: Function (decision) -> sequence of objective values
        crossover: Function (parent_a, parent_b) -> offspring(s)
        mutate: Function (decision) -> new decision, or None after mutating in place
        random_source: Random source (default: one seeded with ``seed``)
        seed: Seed for the default random source
        divisions: Divisions along each objective axis for the reference points
    """

    def __init__(
        self,
        option: GAOption,
        initialize: Callable[[], Any],
        fitness: Callable[[Any], Any],
        crossover: Callable[[Any, Any], Any],
        mutate: Callable[[Any], Any],
        random_source: Optional[RandomSource] = None,
        seed: Optional[int] = None,
        divisions: int = 4,
    ):
        if isinstance(divisions, bool) or not isinstance(divisions, int) or divisions < 1:
            raise ConfigurationError(f"divisions must be an integer >= 1 (got {divisions!r})")
        super().__init__(option, initialize, fitness, crossover, mutate, random_source, seed)
        self.divisions = divisions
        self._reference_points: Optional[np.ndarray] = None

    @property
    def reference_points(self) -> Optional[np.ndarray]:
        """Reference points in use, or None before the first cut."""
        return self._reference_points

    def _points_for(self, objective_num: int) -> np.ndarray:
        if self._reference_points is None or self._reference_points.shape[1] != objective_num:
            self._reference_points = make_reference_points(objective_num, self.divisions)
            _logger().debug(
                "Built %d reference points for %d objectives",
                len(self._reference_points),
                objective_num,
            )
        return self._reference_points

    def _truncate_layer(
        self, layer: List[int], room: int, kept_layers: List[List[int]]
    ) -> List[int]:
        """Fill the remaining room from the least crowded reference niches."""
        kept = [gene_id for kept_layer in kept_layers for gene_id in kept_layer]
        candidates = kept + list(layer)

        objectives = self.fitness_matrix(candidates)
        if self.option.fitness_option == FitnessOption.GREATER_BETTER:
            objectives = -objectives

        reference_points = self._points_for(objectives.shape[1])
        associations, distances = associate(normalize_objectives(objectives), reference_points)

        niche_counts = np.bincount(associations[: len(kept)], minlength=len(reference_points))
        positions = niche_select(
            range(len(kept), len(candidates)),
            room,
            niche_counts,
            associations,
            distances,
            self.rng,
        )
        return [candidates[position] for position in positions]
