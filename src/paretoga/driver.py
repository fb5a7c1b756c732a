"""
Generation driver shared by the single- and multi-objective solvers.

The driver owns the generation and stagnation counters and walks an algorithm
through evaluate -> rank -> select -> reproduce until the termination
predicate fires. Algorithms plug in through :class:`GenerationAlgorithm`.
"""

import logging
from enum import Enum
from typing import Protocol, runtime_checkable

from .config import GAOption


def _logger() -> logging.Logger:
    return logging.getLogger(__name__)


class SolverState(str, Enum):
    UNINITIALIZED = "uninitialized"
    INITIALIZED = "initialized"
    EVALUATING = "evaluating"
    RANKING = "ranking"
    SELECTING = "selecting"
    REPRODUCING = "reproducing"
    TERMINATED = "terminated"

    def __str__(self) -> str:
        return self.value


@runtime_checkable
class GenerationAlgorithm(Protocol):
    """Per-algorithm steps of one generation."""

    def populate(self) -> None:
        """Fill the population with fresh, unevaluated genes."""

    def evaluate(self) -> None:
        """Compute the fitness of every unevaluated gene."""

    def rank(self) -> None:
        """Order the working population (no-op for single-objective selection)."""

    def select(self) -> int:
        """Trim the population to its target size and return the updated fail counter."""

    def record_generation(self) -> None:
        """Append this generation to the history, if recording is enabled."""

    def reproduce(self) -> None:
        """Apply crossover and mutation to produce the next working population."""

    def describe(self) -> str:
        """One-line progress summary used in log messages."""


class GenerationDriver:
    """
    Runs the generation loop of a :class:`GenerationAlgorithm`.

    Termination is checked only at the end of a generation, so a generation in
    progress always runs to completion.

    Args:
        algorithm: Algorithm supplying the per-generation steps
        option: Solver options (termination limits)
    """

    def __init__(self, algorithm: GenerationAlgorithm, option: GAOption):
        self.algorithm = algorithm
        self.option = option
        self.state = SolverState.UNINITIALIZED
        self.generation = 0
        self.fail_times = 0

    def initialize(self):
        self.algorithm.populate()
        self.generation = 0
        self.fail_times = 0
        self.state = SolverState.INITIALIZED

    def should_terminate(self) -> bool:
        if self.generation > self.option.max_generations:
            return True
        return self.option.max_fail_times > 0 and self.fail_times > self.option.max_fail_times

    def step(self) -> bool:
        """
        Run a single generation.

        Returns:
            True if the run reached its termination condition
        """
        if self.state == SolverState.UNINITIALIZED:
            raise ValueError("Must call initialize_population() first")
        if self.state == SolverState.TERMINATED:
            raise ValueError("Run already terminated; call initialize_population() to restart")

        self.state = SolverState.EVALUATING
        self.algorithm.evaluate()

        self.state = SolverState.RANKING
        self.algorithm.rank()

        self.state = SolverState.SELECTING
        self.fail_times = self.algorithm.select()
        self.algorithm.record_generation()

        if self.should_terminate():
            self.state = SolverState.TERMINATED
            return True

        self.state = SolverState.REPRODUCING
        self.algorithm.reproduce()
        self.generation += 1
        return False

    def run(self, verbose: bool = True) -> int:
        """
        Run generations until termination.

        Args:
            verbose: Log progress at INFO instead of DEBUG

        Returns:
            Final generation count
        """
        level = logging.INFO if verbose else logging.DEBUG
        report_every = max(1, self.option.max_generations // 10)

        while not self.step():
            if self.generation % report_every == 0:
                _logger().log(
                    level,
                    "Generation %d/%d - fail times %d - %s",
                    self.generation,
                    self.option.max_generations,
                    self.fail_times,
                    self.algorithm.describe(),
                )

        if self.generation > self.option.max_generations:
            cause = "generation limit"
        else:
            cause = "stagnation limit"
        _logger().log(
            level,
            "Terminated by %s after %d generations - %s",
            cause,
            self.generation,
            self.algorithm.describe(),
        )
        return self.generation
