"""
Single-objective genetic algorithm.

Evolves a population of genes with scalar fitness, trimming the working
population every generation with a configurable selection strategy.
"""

import copy
from typing import Any, Callable, Dict, List, Optional, Tuple

from .config import GAOption
from .driver import GenerationDriver, SolverState
from .evaluation import evaluate_genes, scalar_fitness
from .gene import Gene, Population
from .operators import apply_crossover, apply_mutation
from .random_source import RandomSource
from .selection import Selector, make_selector
from .utils import is_better


class SOGA:
    """
    Single-objective genetic algorithm.

    Args:
        option: Solver options
        initialize: Function () -> decision
        fitness: Function (decision) -> scalar fitness
        crossover: Function (parent_a, parent_b) -> offspring(s)
        mutate: Function (decision) -> new decision, or None after mutating in place
        selector: Selection strategy (default: built from ``option.select_method``)
        random_source: Random source (default: one seeded with ``seed``)
        seed: Seed for the default random source
    """

    def __init__(
        self,
        option: GAOption,
        initialize: Callable[[], Any],
        fitness: Callable[[Any], float],
        crossover: Callable[[Any, Any], Any],
        mutate: Callable[[Any], Any],
        selector: Optional[Selector] = None,
        random_source: Optional[RandomSource] = None,
        seed: Optional[int] = None,
    ):
        self.option = option
        self.initialize = initialize
        self.fitness_function = fitness
        self.crossover = crossover
        self.mutate = mutate
        self.rng = random_source if random_source is not None else RandomSource(seed)
        self.selector = selector if selector is not None else make_selector(option, self.rng)

        self.population = Population()
        self._best_decision = None
        self._best_fitness: Optional[float] = None
        self._overall_best_decision = None
        self._overall_best_fitness: Optional[float] = None
        self._record: List[float] = []
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
    def best_fitness(self) -> float:
        """Best fitness of the latest generation."""
        if self._best_fitness is None:
            raise ValueError("Must run at least one generation first")
        return self._best_fitness

    @property
    def record(self) -> List[float]:
        """Best fitness of every generation (empty unless ``record_fitness``)."""
        return list(self._record)

    def result(self) -> Any:
        """Decision of the best gene found by the last selection."""
        if self._best_decision is None:
            raise ValueError("Must run at least one generation first")
        return self._best_decision

    def overall_best(self) -> Tuple[Any, float]:
        """
        Best gene seen over the whole run.

        Selection may evict the best gene of an earlier generation, so this can
        be better than :meth:`result`.

        Returns:
            Tuple of (decision, fitness)
        """
        if self._overall_best_decision is None:
            raise ValueError("Must run at least one generation first")
        return self._overall_best_decision, self._overall_best_fitness

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
            Dictionary with the best decision, its fitness, the counters and history
        """
        if self._driver.state in (SolverState.UNINITIALIZED, SolverState.TERMINATED):
            self._driver.initialize()
        self._driver.run(verbose)

        return {
            "best": self.result(),
            "best_fitness": self.best_fitness,
            "overall_best": self._overall_best_decision,
            "overall_best_fitness": self._overall_best_fitness,
            "generation": self.generation,
            "fail_times": self.fail_times,
            "history": self.record,
        }

    # GenerationAlgorithm steps

    def populate(self):
        self.population.clear()
        self._best_decision = None
        self._best_fitness = None
        self._overall_best_decision = None
        self._overall_best_fitness = None
        self._record = []
        self.selector.reset()
        for _ in range(self.option.population_size):
            self.population.insert(Gene(decision=self.initialize()))

    def evaluate(self):
        evaluate_genes(
            self.population.genes(),
            self.fitness_function,
            coerce=scalar_fitness,
            thread_num=self.option.threads,
        )

    def rank(self):
        pass

    def select(self) -> int:
        result = self.selector.select(self.population, self.option.population_size)
        best = self.population[result.best_id]
        fitness_option = self.option.fitness_option

        self._best_fitness = best.fitness
        self._best_decision = copy.deepcopy(best.decision)
        if self._overall_best_fitness is None or is_better(
            best.fitness, self._overall_best_fitness, fitness_option
        ):
            self._overall_best_fitness = best.fitness
            self._overall_best_decision = copy.deepcopy(best.decision)

        previous = result.previous_best_fitness
        if previous is None or is_better(best.fitness, previous, fitness_option):
            return 0
        return self._driver.fail_times + 1

    def record_generation(self):
        if self.option.record_fitness:
            self._record.append(self._best_fitness)

    def reproduce(self):
        apply_crossover(self.population, self.crossover, self.option.crossover_prob, self.rng)
        apply_mutation(self.population, self.mutate, self.option.mutate_prob, self.rng)

    def describe(self) -> str:
        return f"best fitness {self._best_fitness:.6g}"
