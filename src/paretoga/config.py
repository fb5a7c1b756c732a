"""
Configuration for genetic algorithm solvers.

Every option is validated when the dataclass is built, so a solver never
starts with a value it cannot honour.
"""

import os
from dataclasses import dataclass, fields
from enum import Enum
from typing import Any, Mapping, Optional

from .exceptions import ConfigurationError


class FitnessOption(str, Enum):
    """Optimization direction, shared by every objective."""

    LESS_BETTER = "less"
    GREATER_BETTER = "greater"

    def __str__(self) -> str:
        return self.value


class SelectMethod(str, Enum):
    """Selection strategy used by the single-objective solver."""

    TRUNCATION = "truncation"
    ROULETTE_WHEEL = "roulette_wheel"
    TOURNAMENT = "tournament"

    def __str__(self) -> str:
        return self.value


@dataclass
class GAOption:
    """
    Options shared by SOGA and NSGA2.

    Args:
        population_size: Number of genes kept after every selection
        max_generations: Run ends once the generation counter exceeds this value
        max_fail_times: Run ends once the stagnation counter exceeds this value (0 disables)
        crossover_prob: Per-gene probability of being picked as a crossover parent
        mutate_prob: Per-gene probability of being mutated
        fitness_option: Whether smaller or greater fitness values are better
        select_method: Selection strategy (single-objective solver only)
        tournament_size: Number of contestants per tournament
        record_fitness: Keep a per-generation history of the best fitness / front
        protect_pareto_front: Skip mutation of current front members (NSGA2 only)
        thread_num: Worker threads for evaluation and ranking (None = all cores)
    """

    population_size: int = 100
    max_generations: int = 300
    max_fail_times: int = 50
    crossover_prob: float = 0.8
    mutate_prob: float = 0.05
    fitness_option: FitnessOption = FitnessOption.LESS_BETTER
    select_method: SelectMethod = SelectMethod.TRUNCATION
    tournament_size: int = 3
    record_fitness: bool = False
    protect_pareto_front: bool = False
    thread_num: Optional[int] = None

    def __post_init__(self):
        self.fitness_option = _coerce_enum(FitnessOption, self.fitness_option, "fitness_option")
        self.select_method = _coerce_enum(SelectMethod, self.select_method, "select_method")

        _require_int(self.population_size, "population_size", minimum=1)
        _require_int(self.max_generations, "max_generations", minimum=1)
        _require_int(self.max_fail_times, "max_fail_times", minimum=0)
        _require_int(self.tournament_size, "tournament_size", minimum=2)
        _require_probability(self.crossover_prob, "crossover_prob")
        _require_probability(self.mutate_prob, "mutate_prob")
        if self.thread_num is not None:
            _require_int(self.thread_num, "thread_num", minimum=1)

    @property
    def threads(self) -> int:
        """Resolved number of worker threads."""
        if self.thread_num is None:
            return os.cpu_count() or 1
        return self.thread_num

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "GAOption":
        """
        Build options from a plain mapping (e.g. parsed JSON).

        Raises:
            ConfigurationError: If the mapping holds unknown keys or invalid values
        """
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ConfigurationError(f"Unknown option(s): {', '.join(unknown)}")
        return cls(**dict(data))


def _coerce_enum(enum_cls, value, name: str):
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(value)
    except ValueError:
        choices = ", ".join(member.value for member in enum_cls)
        raise ConfigurationError(f"{name} must be one of: {choices} (got {value!r})") from None


def _require_int(value, name: str, minimum: int):
    if isinstance(value, bool) or not isinstance(value, int):
        raise ConfigurationError(f"{name} must be an integer (got {value!r})")
    if value < minimum:
        raise ConfigurationError(f"{name} must be >= {minimum} (got {value})")


def _require_probability(value, name: str):
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ConfigurationError(f"{name} must be a number (got {value!r})")
    if not 0.0 <= value <= 1.0:
        raise ConfigurationError(f"{name} must lie in [0, 1] (got {value})")
