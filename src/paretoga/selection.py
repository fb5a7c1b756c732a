"""
Selection strategies for the single-objective solver.

Each strategy reduces a working population to the target size and reports the
new best gene. Strategies are chosen at configuration time through
:func:`make_selector`.
"""

import logging
from abc import ABC, abstractmethod
from collections import Counter
from typing import List, NamedTuple, Optional

import numpy as np

from .config import FitnessOption, GAOption, SelectMethod
from .exceptions import ConfigurationError
from .gene import Population
from .random_source import RandomSource
from .utils import is_better


def _logger() -> logging.Logger:
    return logging.getLogger(__name__)


class SelectionResult(NamedTuple):
    """Outcome of one selection: the best surviving gene and the best fitness of the previous selection."""

    best_id: Optional[int]
    previous_best_fitness: Optional[float]


class Selector(ABC):
    """
    Common interface of all selection strategies.

    Args:
        fitness_option: Whether smaller or greater fitness is better
        random_source: Random source for stochastic strategies
    """

    def __init__(
        self,
        fitness_option: FitnessOption = FitnessOption.LESS_BETTER,
        random_source: Optional[RandomSource] = None,
    ):
        self.fitness_option = FitnessOption(fitness_option)
        self.rng = random_source if random_source is not None else RandomSource()
        self.last_best_fitness: Optional[float] = None

    def reset(self):
        """Forget the best fitness remembered from the previous selection."""
        self.last_best_fitness = None

    def select(self, population: Population, target_size: int) -> SelectionResult:
        """
        Reduce ``population`` to exactly ``target_size`` genes.

        A population smaller than the target is left untouched. The best
        fitness of every selection is remembered and reported by the next one,
        so callers can tell whether a generation improved on its predecessor.

        Args:
            population: Working population, trimmed in place
            target_size: Number of genes to keep (>= 1)

        Returns:
            SelectionResult with the new best id and the best fitness of the
            previous selection (None on the first call after :meth:`reset`)
        """
        if isinstance(target_size, bool) or not isinstance(target_size, (int, np.integer)):
            raise ConfigurationError(f"target_size must be an integer (got {target_size!r})")
        if target_size < 1:
            raise ConfigurationError(f"target_size must be >= 1 (got {target_size})")

        ids = population.ids()
        if len(ids) >= target_size:
            self._select(population, ids, target_size)

        best_id = self.best_id(population, population.ids())
        previous_best = self.last_best_fitness
        if best_id is not None:
            self.last_best_fitness = population[best_id].fitness
        return SelectionResult(best_id, previous_best)

    @abstractmethod
    def _select(self, population: Population, ids: List[int], target_size: int):
        """Trim ``population`` (holding ``ids``) down to ``target_size`` genes."""

    def best_id(self, population: Population, ids: List[int]) -> Optional[int]:
        best = None
        for gene_id in ids:
            if best is None or is_better(
                population[gene_id].fitness, population[best].fitness, self.fitness_option
            ):
                best = gene_id
        return best

    def _sort_key(self, population: Population, ids: List[int]) -> np.ndarray:
        """Scalar keys such that ascending order means best first."""
        fitness = np.array([population[gene_id].fitness for gene_id in ids], dtype=float)
        if self.fitness_option == FitnessOption.GREATER_BETTER:
            return -fitness
        return fitness


class TruncationSelector(Selector):
    """
    Keep the ``target_size`` best genes and evict the rest.

    Deterministic and the strongest convergence pressure of the three strategies.
    """

    def _select(self, population: Population, ids: List[int], target_size: int):
        order = np.argsort(self._sort_key(population, ids), kind="stable")
        for position in order[target_size:]:
            population.erase(ids[position])


class RouletteWheelSelector(Selector):
    """
    Fitness-proportional selection.

    Every gene starts earmarked for elimination. Genes are released from that
    list one at a time with probability proportional to their fitness shifted so
    that the worst remaining candidate sits at zero. When the shifted fitness sum
    is below ``epsilon`` the released gene is drawn uniformly instead. Once only
    ``len(population) - target_size`` candidates remain they are all evicted.

    Args:
        epsilon: Threshold below which the shifted fitness sum counts as degenerate
    """

    def __init__(
        self,
        fitness_option: FitnessOption = FitnessOption.LESS_BETTER,
        random_source: Optional[RandomSource] = None,
        epsilon: float = 1e-10,
    ):
        super().__init__(fitness_option, random_source)
        if epsilon < 0:
            raise ConfigurationError(f"epsilon must be >= 0 (got {epsilon})")
        self.epsilon = epsilon
        self.uniform_fallbacks = 0

    def _select(self, population: Population, ids: List[int], target_size: int):
        eliminate_num = len(ids) - target_size
        self.uniform_fallbacks = 0
        if eliminate_num <= 0:
            return

        # minimization is turned into maximization by flipping the sign
        sign = 1.0 if self.fitness_option == FitnessOption.GREATER_BETTER else -1.0
        candidates = [[gene_id, sign * float(population[gene_id].fitness)] for gene_id in ids]

        while len(candidates) > eliminate_num:
            min_fitness = min(value for _, value in candidates)
            total = 0.0
            for pair in candidates:
                pair[1] -= min_fitness
                total += pair[1]

            if total > self.epsilon:
                r = self.rng.uniform(0.0, total)
                released = None
                for position, (_, value) in enumerate(candidates):
                    if value > 0:
                        released = position
                    r -= value
                    if r < 0:
                        break
            else:
                self.uniform_fallbacks += 1
                released = self.rng.index(len(candidates))

            del candidates[released]

        if self.uniform_fallbacks:
            _logger().debug(
                "Roulette wheel fell back to uniform draws %d time(s)", self.uniform_fallbacks
            )

        for gene_id, _ in candidates:
            population.erase(gene_id)


class TournamentSelector(Selector):
    """
    Tournament selection with duplication of repeated winners.

    Members are shuffled, then ``target_size`` tournaments are played among the
    first ``tournament_size`` entries of the shuffled space. After every round the
    contestants are swapped with random entries outside the tournament. Each
    winner earns one credit; genes without credits are evicted and genes with
    several credits are copied until the population holds exactly ``target_size``
    genes.

    Args:
        tournament_size: Number of contestants per round (>= 2)
    """

    def __init__(
        self,
        fitness_option: FitnessOption = FitnessOption.LESS_BETTER,
        random_source: Optional[RandomSource] = None,
        tournament_size: int = 3,
    ):
        super().__init__(fitness_option, random_source)
        if isinstance(tournament_size, bool) or not isinstance(tournament_size, int):
            raise ConfigurationError(f"tournament_size must be an integer (got {tournament_size!r})")
        if tournament_size < 2:
            raise ConfigurationError(f"tournament_size must be >= 2 (got {tournament_size})")
        self.tournament_size = tournament_size
        self.credits: Counter = Counter()

    def _select(self, population: Population, ids: List[int], target_size: int):
        size = len(ids)
        contest = min(self.tournament_size, size)
        space = list(ids)
        self.rng.shuffle(space)
        self.credits = Counter()

        for _ in range(target_size):
            winner = space[0]
            for gene_id in space[1:contest]:
                if is_better(
                    population[gene_id].fitness, population[winner].fitness, self.fitness_option
                ):
                    winner = gene_id
            self.credits[winner] += 1

            if size > contest:
                for a in range(contest):
                    b = self.rng.index_range(contest, size)
                    space[a], space[b] = space[b], space[a]

        for gene_id in ids:
            if self.credits[gene_id] == 0:
                population.erase(gene_id)

        for gene_id, credit in list(self.credits.items()):
            for _ in range(credit - 1):
                population.insert(population[gene_id].copy())


def make_selector(option: GAOption, random_source: Optional[RandomSource] = None) -> Selector:
    """Instantiate the selector named by ``option.select_method``."""
    if option.select_method == SelectMethod.TRUNCATION:
        return TruncationSelector(option.fitness_option, random_source)
    if option.select_method == SelectMethod.ROULETTE_WHEEL:
        return RouletteWheelSelector(option.fitness_option, random_source)
    if option.select_method == SelectMethod.TOURNAMENT:
        return TournamentSelector(option.fitness_option, random_source, option.tournament_size)
    raise ConfigurationError(f"Unknown select method: {option.select_method!r}")
