"""
Genetic operators.

Applies caller-supplied crossover and mutation to a population and provides
default box-bounded operators for real-valued decision vectors. Default
operators take the box and random source explicitly; bind them with
``functools.partial`` before handing them to a solver.
"""

from typing import Callable, Iterable, List, Tuple

import numpy as np

from .box import Box
from .gene import Gene, Population
from .random_source import RandomSource


def apply_crossover(
    population: Population, crossover: Callable, crossover_prob: float, rng: RandomSource
) -> List[int]:
    """
    Breed offspring from randomly paired parents.

    Every gene is picked as a parent with probability ``crossover_prob``. Picked
    parents are shuffled and paired; an odd one out is dropped. ``crossover``
    may return one offspring or a tuple/list of offspring.

    Args:
        population: Population to breed from; offspring are inserted into it
        crossover: Function (parent_a, parent_b) -> offspring(s)
        crossover_prob: Per-gene probability of taking part
        rng: Random source

    Returns:
        Ids of the inserted offspring
    """
    parents = [gene_id for gene_id in population.ids() if rng.uniform() < crossover_prob]
    rng.shuffle(parents)
    if len(parents) % 2 == 1:
        parents.pop()

    offspring_ids = []
    for a, b in zip(parents[0::2], parents[1::2]):
        children = crossover(population[a].decision, population[b].decision)
        if not isinstance(children, (tuple, list)):
            children = (children,)
        for child in children:
            offspring_ids.append(population.insert(Gene(decision=child)))
    return offspring_ids


def apply_mutation(
    population: Population,
    mutate: Callable,
    mutate_prob: float,
    rng: RandomSource,
    protected: Iterable[int] = (),
) -> List[int]:
    """
    Mutate genes in place.

    ``mutate`` may modify the decision in place and return None, or return the
    new decision. Mutated genes are marked unevaluated.

    Args:
        population: Population to mutate
        mutate: Function (decision) -> new decision or None
        mutate_prob: Per-gene probability of mutation
        rng: Random source
        protected: Ids that must not be mutated

    Returns:
        Ids of the mutated genes
    """
    protected = frozenset(protected)
    mutated = []
    for gene_id, gene in population.items():
        if rng.uniform() >= mutate_prob or gene_id in protected:
            continue
        result = mutate(gene.decision)
        if result is not None:
            gene.decision = result
        gene.invalidate()
        mutated.append(gene_id)
    return mutated


def uniform_initialization(box: Box, rng: RandomSource) -> np.ndarray:
    """Random decision vector drawn uniformly inside ``box``."""
    return rng.generator.uniform(box.lower, box.upper)


def simulated_binary_crossover(
    parent1: np.ndarray, parent2: np.ndarray, box: Box, rng: RandomSource, eta: float = 20.0
) -> Tuple[np.ndarray, np.ndarray]:
    """
    Simulated Binary Crossover (SBX) operator.

    Args:
        parent1: First parent genome
        parent2: Second parent genome
        box: Bounds the offspring are clipped to
        rng: Random source
        eta: Distribution index (larger values produce offspring closer to parents)

    Returns:
        Tuple of two offspring genomes
    """
    parent1 = np.asarray(parent1, dtype=float)
    parent2 = np.asarray(parent2, dtype=float)
    offspring1 = parent1.copy()
    offspring2 = parent2.copy()

    generator = rng.generator
    swap = generator.random(parent1.size) <= 0.5
    spread = np.abs(parent1 - parent2)
    active = swap & (spread > 1e-9)
    if not np.any(active):
        return offspring1, offspring2

    u = generator.random(parent1.size)
    beta = np.where(
        u <= 0.5,
        (2.0 * u) ** (1.0 / (eta + 1.0)),
        (1.0 / (2.0 * (1.0 - u))) ** (1.0 / (eta + 1.0)),
    )
    mid = 0.5 * (parent1 + parent2)
    offspring1[active] = (mid - 0.5 * beta * spread)[active]
    offspring2[active] = (mid + 0.5 * beta * spread)[active]

    return box.clip(offspring1), box.clip(offspring2)


def uniform_crossover(
    parent1: np.ndarray, parent2: np.ndarray, rng: RandomSource
) -> Tuple[np.ndarray, np.ndarray]:
    """
    Uniform crossover operator.

    Each gene is taken from either parent with equal probability.
    """
    parent1 = np.asarray(parent1)
    parent2 = np.asarray(parent2)
    offspring1 = parent1.copy()
    offspring2 = parent2.copy()

    mask = rng.generator.random(parent1.size) < 0.5
    offspring1[mask] = parent2[mask]
    offspring2[mask] = parent1[mask]

    return offspring1, offspring2


def polynomial_mutation(
    individual: np.ndarray,
    box: Box,
    rng: RandomSource,
    eta: float = 20.0,
    mutation_prob: float = None,
) -> np.ndarray:
    """
    Polynomial mutation operator.

    Args:
        individual: Individual genome to mutate
        box: Bounds of every dimension
        rng: Random source
        eta: Distribution index (larger values produce smaller mutations)
        mutation_prob: Probability of mutating each gene (default: 1/genome_size)

    Returns:
        Mutated individual
    """
    individual = np.asarray(individual, dtype=float)
    if mutation_prob is None:
        mutation_prob = 1.0 / individual.size

    generator = rng.generator
    mask = generator.random(individual.size) <= mutation_prob
    u = generator.random(individual.size)

    span = np.where(box.span > 0, box.span, 1.0)
    delta_l = (individual - box.lower) / span
    delta_r = (box.upper - individual) / span

    with np.errstate(invalid="ignore"):
        lower_val = 2.0 * u + (1.0 - 2.0 * u) * (1.0 - delta_l) ** (eta + 1.0)
        upper_val = 2.0 * (1.0 - u) + 2.0 * (u - 0.5) * (1.0 - delta_r) ** (eta + 1.0)
        delta_q = np.where(
            u <= 0.5,
            lower_val ** (1.0 / (eta + 1.0)) - 1.0,
            1.0 - upper_val ** (1.0 / (eta + 1.0)),
        )

    mutated = individual.copy()
    mutated[mask] = (individual + delta_q * box.span)[mask]
    return box.clip(mutated)


def gaussian_mutation(
    individual: np.ndarray,
    box: Box,
    rng: RandomSource,
    sigma: float = 0.1,
    mutation_prob: float = None,
) -> np.ndarray:
    """
    Gaussian mutation operator.

    ``sigma`` is relative to the span of each dimension.
    """
    individual = np.asarray(individual, dtype=float)
    if mutation_prob is None:
        mutation_prob = 1.0 / individual.size

    generator = rng.generator
    mask = generator.random(individual.size) <= mutation_prob
    noise = generator.normal(0.0, sigma, individual.size) * box.span

    mutated = individual.copy()
    mutated[mask] += noise[mask]
    return box.clip(mutated)
