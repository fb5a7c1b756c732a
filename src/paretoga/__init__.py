"""
Multi-objective genetic algorithm engine.

Evolves a population toward the Pareto front using non-dominated sorting
with crowding-distance or reference-point survival,
Pareto-front tracking with stagnation detection, and truncation,
roulette-wheel or tournament selection for single-objective problems.
"""

from .box import Box
from .config import FitnessOption, GAOption, SelectMethod
from .driver import GenerationAlgorithm, GenerationDriver, SolverState
from .exceptions import ConfigurationError, InvariantViolation
from .gene import Gene, Population
from .nsga2 import NSGA2
from .nsga3 import NSGA3
from .operators import (
    apply_crossover,
    apply_mutation,
    gaussian_mutation,
    polynomial_mutation,
    simulated_binary_crossover,
    uniform_crossover,
    uniform_initialization,
)
from .pareto import ParetoFrontTracker
from .random_source import RandomSource
from .reference import (
    associate,
    compute_intercepts,
    count_reference_points,
    make_reference_points,
    niche_select,
    normalize_objectives,
)
from .selection import (
    RouletteWheelSelector,
    SelectionResult,
    Selector,
    TournamentSelector,
    TruncationSelector,
    make_selector,
)
from .soga import SOGA
from .utils import (
    crowding_distance,
    divide_layers,
    dominated_counts,
    front_checksum,
    is_better,
    is_strong_dominant,
)

__version__ = "0.1.0"

__all__ = [
    "NSGA2",
    "NSGA3",
    "SOGA",
    "GAOption",
    "FitnessOption",
    "SelectMethod",
    "ConfigurationError",
    "InvariantViolation",
    "Box",
    "Gene",
    "Population",
    "RandomSource",
    "ParetoFrontTracker",
    "GenerationAlgorithm",
    "GenerationDriver",
    "SolverState",
    "Selector",
    "SelectionResult",
    "TruncationSelector",
    "RouletteWheelSelector",
    "TournamentSelector",
    "make_selector",
    "apply_crossover",
    "apply_mutation",
    "uniform_initialization",
    "simulated_binary_crossover",
    "uniform_crossover",
    "polynomial_mutation",
    "gaussian_mutation",
    "is_better",
    "is_strong_dominant",
    "dominated_counts",
    "divide_layers",
    "crowding_distance",
    "front_checksum",
    "make_reference_points",
    "count_reference_points",
    "compute_intercepts",
    "normalize_objectives",
    "associate",
    "niche_select",
]
