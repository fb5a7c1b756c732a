"""
Fitness evaluation of unevaluated genes.
"""

from typing import Any, Callable, List

import numpy as np

from .gene import Gene
from .parallel import parallel_for


def scalar_fitness(value: Any) -> float:
    """Coerce a fitness function result to a float; vectors of any other size are rejected."""
    flat = np.asarray(value, dtype=float).reshape(-1)
    if flat.size != 1:
        raise ValueError(f"Expected a single fitness value, got {flat.size}")
    return float(flat[0])


def vector_fitness(value: Any) -> np.ndarray:
    """Coerce a fitness function result to a 1-D float array."""
    if not isinstance(value, (list, tuple, np.ndarray)):
        value = [value]
    return np.asarray(value, dtype=float).reshape(-1)


def evaluate_genes(
    genes: List[Gene],
    fitness_function: Callable,
    coerce: Callable[[Any], Any] = vector_fitness,
    thread_num: int = 1,
) -> int:
    """
    Evaluate every unevaluated gene in ``genes``.

    Work is split across threads by index; each worker writes only the fitness
    of the genes it owns. Exceptions raised by ``fitness_function`` propagate.

    Args:
        genes: Genes to consider
        fitness_function: Function mapping a decision to its fitness
        coerce: Converts the raw result (scalar or vector)
        thread_num: Number of worker threads

    Returns:
        Number of genes evaluated
    """
    pending = [gene for gene in genes if not gene.evaluated]

    def body(start: int, end: int):
        for gene in pending[start:end]:
            gene.fitness = coerce(fitness_function(gene.decision))
            gene.evaluated = True

    parallel_for(len(pending), body, thread_num)
    return len(pending)
