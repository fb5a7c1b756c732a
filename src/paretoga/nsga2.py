"""
NSGA-II style multi-objective genetic algorithm.

Ranks the working population by dominated-by count, keeps whole non-dominated
layers in rank order, cuts the overflowing layer by crowding distance and
tracks the Pareto front for stagnation detection.
"""

import logging
from typing import Any, Callable, Dict, FrozenSet, List, Optional, Tuple

import numpy as np

from .config import FitnessOption, GAOption
from .driver import GenerationDriver, SolverState
from .evaluation import evaluate_genes, vector_fitness
from .exceptions import InvariantViolation
from .gene import Gene, Population
from .operators import apply_crossover, apply_mutation
from .pareto import ParetoFrontTracker
from .random_source import RandomSource
from .utils import crowding_distance, divide_layers, dominated_counts


def _logger() -> logging.Logger:
    return logging.getLogger(__name__)


class NSGA2:
    """
    Multi-objective genetic algorithm based on non-dominated sorting.

    Optimizes multiple conflicting objectives simultaneously, every objective
    in the direction given by ``option.fitness_option``.

    Args:
        option: Solver options
        initialize: Function () -> decision
        fitness: Function (decision) -> sequence of objective values
        crossover: Function (parent_a, parent_b) -> offspring(s)
        mutate: Function (decision) -> new decision, or None after mutating in place
        random_source: Random source (default: one seeded with ``seed``)
        seed: Seed for the default random source
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
    ):
        self.option = option
        self.initialize = initialize
        self.fitness_function = fitness
        self.crossover = crossover
        self.mutate = mutate
        self.rng = random_source if random_source is not None else RandomSource(seed)

        self.population = Population()
        self.front = ParetoFrontTracker()
        self._layers: List[List[int]] = []
        self._record: List[np.ndarray] = []
        self._driver = GenerationDriver(self, option)

    @property
    def state(self) -> SolverState:
        return self._driver.state

    @property
    def generation(self) -> int:
        return self._driver.generation

    @property
    def fail_times(self) -> int:
        return self._driver.fail_times

    @property
    def record(self) -> List[np.ndarray]:
        """Front objectives of every generation (empty unless ``record_fitness``)."""
        return list(self._record)

    @property
    def layers(self) -> List[Tuple[int, ...]]:
        """Non-dominated layers of the last ranking, layer 0 being the front."""
        return [tuple(layer) for layer in self._layers]

    @property
    def pf_genes(self) -> FrozenSet[int]:
        """Ids of the genes currently on the Pareto front."""
        return self.front.members

    def is_on_front(self, gene_id: int) -> bool:
        return gene_id in self.front

    def pareto_front(self) -> List[np.ndarray]:
        """
        Objective vectors of the current front.

        Front members mutated since their last evaluation are left out, so the
        answer after a manual :meth:`step` covers the still-evaluated members only.
        """
        self._require_front()
        return [self.population[gene_id].fitness.copy() for gene_id in self._front_ids()]

    def pareto_front_pairs(self) -> List[Tuple[Any, np.ndarray]]:
        """(decision, objectives) pairs of the evaluated members of the current front."""
        self._require_front()
        return [
            (self.population[gene_id].decision, self.population[gene_id].fitness.copy())
            for gene_id in self._front_ids()
        ]

    def fitness_matrix(self, gene_ids: Optional[List[int]] = None) -> np.ndarray:
        """Stack the objectives of ``gene_ids`` (default: whole population) into an (N, M) array."""
        if gene_ids is None:
            gene_ids = self.population.ids()
        return np.vstack([self.population[gene_id].fitness for gene_id in gene_ids])

    def get_best_solution(self, objective_weights: Optional[np.ndarray] = None) -> Tuple[Any, np.ndarray]:
        """
        Get the best compromise on the front based on weighted objectives.

        Args:
            objective_weights: Weights for each objective (default: equal weights)

        Returns:
            Tuple of (best_decision, best_objectives)
        """
        pairs = self.pareto_front_pairs()
        objectives = np.vstack([fitness for _, fitness in pairs])

        if objective_weights is None:
            objective_weights = np.ones(objectives.shape[1]) / objectives.shape[1]

        # Normalize objectives to [0, 1]
        obj_min = objectives.min(axis=0)
        obj_range = objectives.max(axis=0) - obj_min
        obj_range[obj_range == 0] = 1

        weighted_sum = ((objectives - obj_min) / obj_range * objective_weights).sum(axis=1)
        if self.option.fitness_option == FitnessOption.GREATER_BETTER:
            best_idx = int(np.argmax(weighted_sum))
        else:
            best_idx = int(np.argmin(weighted_sum))

        return pairs[best_idx]

    def initialize_population(self):
        self._driver.initialize()

    def step(self) -> bool:
        """Run one generation; True once the run has terminated."""
        return self._driver.step()

    def run(self, verbose: bool = True) -> Dict:
        """
        Evolve until the generation or stagnation limit is exceeded.

        Initializes the population first if that has not been done yet.

        Args:
            verbose: Log progress at INFO level

        Returns:
            Dictionary with the final front and run history
        """
        if self._driver.state in (SolverState.UNINITIALIZED, SolverState.TERMINATED):
            self._driver.initialize()
        self._driver.run(verbose)

        pairs = self.pareto_front_pairs()
        return {
            "front": np.vstack([fitness for _, fitness in pairs]),
            "front_decisions": [decision for decision, _ in pairs],
            "generation": self.generation,
            "fail_times": self.fail_times,
            "history": self.record,
        }

    # GenerationAlgorithm steps

    def populate(self):
        self.population.clear()
        self.front.reset()
        self._layers = []
        self._record = []
        for _ in range(self.option.population_size):
            self.population.insert(Gene(decision=self.initialize()))

    def evaluate(self):
        evaluate_genes(
            self.population.genes(),
            self.fitness_function,
            coerce=vector_fitness,
            thread_num=self.option.threads,
        )

    def rank(self):
        ids = self.population.ids()
        counts = dominated_counts(
            self.fitness_matrix(ids), self.option.fitness_option, self.option.threads
        )
        for gene_id, count in zip(ids, counts):
            self.population[gene_id].dominated_by_count = int(count)

        self._layers = divide_layers(ids, [int(count) for count in counts])
        _logger().debug("Ranked %d genes into %d layers", len(ids), len(self._layers))
        if ids and any(self.population[gene_id].dominated_by_count for gene_id in self._layers[0]):
            raise InvariantViolation("Every gene is dominated; no rank-0 layer exists")

    def select(self) -> int:
        """
        Keep whole layers in rank order; cut the overflowing layer with :meth:`_truncate_layer`.

        Returns:
            Number of generations the front has been stagnant
        """
        target = self.option.population_size
        kept_layers: List[List[int]] = []
        evicted: List[int] = []
        kept = 0

        for layer in self._layers:
            room = target - kept
            if room <= 0:
                evicted.extend(layer)
                continue
            if len(layer) > room:
                survivors = self._truncate_layer(layer, room, kept_layers)
                survivor_set = set(survivors)
                evicted.extend(gene_id for gene_id in layer if gene_id not in survivor_set)
                layer = survivors
            kept_layers.append(layer)
            kept += len(layer)

        for gene_id in evicted:
            self.population.erase(gene_id)
        self.front.discard(evicted)
        self._layers = kept_layers

        if not self._layers:
            raise InvariantViolation("Pareto front is empty")
        return self.front.update(self._layers[0])

    def _truncate_layer(
        self, layer: List[int], room: int, kept_layers: List[List[int]]
    ) -> List[int]:
        """
        Choose ``room`` survivors from the layer that overflows the population.

        Genes with the largest crowding distance survive.

        Args:
            layer: Ids of the overflowing layer
            room: Number of genes still to keep
            kept_layers: Layers already kept whole

        Returns:
            Ids of the surviving genes
        """
        distances = crowding_distance(self.fitness_matrix(layer))
        for gene_id, distance in zip(layer, distances):
            self.population[gene_id].crowding = float(distance)
        order = np.argsort(-distances, kind="stable")
        return [layer[i] for i in order[:room]]

    def record_generation(self):
        if self.option.record_fitness:
            self._record.append(self.fitness_matrix(self._front_ids()))

    def reproduce(self):
        apply_crossover(self.population, self.crossover, self.option.crossover_prob, self.rng)
        protected = self.front.members if self.option.protect_pareto_front else ()
        apply_mutation(self.population, self.mutate, self.option.mutate_prob, self.rng, protected)

    def describe(self) -> str:
        return f"Pareto front size: {len(self.front)}"

    def _front_ids(self) -> List[int]:
        # genes mutated since the last evaluation carry stale fitness
        return [
            gene_id
            for gene_id in self.population.ids()
            if gene_id in self.front and self.population[gene_id].evaluated
        ]

    def _require_front(self):
        if not self.front.members:
            raise ValueError("Must run at least one generation first")
        if not self._front_ids():
            raise ValueError("Every front member changed since its evaluation; call step() first")
