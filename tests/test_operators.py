"""
Tests for genetic operators.

Covers application of caller-supplied crossover/mutation to a population and
the default box-bounded operators.
"""

import sys
from functools import partial
from pathlib import Path

import numpy as np
import pytest

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from paretoga.box import Box
from paretoga.gene import Gene, Population
from paretoga.operators import (
    apply_crossover,
    apply_mutation,
    gaussian_mutation,
    polynomial_mutation,
    simulated_binary_crossover,
    uniform_crossover,
    uniform_initialization,
)
from paretoga.random_source import RandomSource


def make_population(decisions):
    population = Population()
    for decision in decisions:
        population.insert(Gene(decision=decision, fitness=0.0, evaluated=True))
    return population


class TestApplyCrossover:
    """Tests for apply_crossover."""

    def test_every_gene_pairs_with_probability_one(self):
        population = make_population([1, 2, 3, 4])
        offspring = apply_crossover(
            population, lambda a, b: (a + b, a - b), 1.0, RandomSource(0)
        )

        assert len(offspring) == 4
        assert len(population) == 8
        assert all(not population[gene_id].evaluated for gene_id in offspring)

    def test_probability_zero_breeds_nothing(self):
        population = make_population([1, 2, 3, 4])
        offspring = apply_crossover(population, lambda a, b: (a, b), 0.0, RandomSource(0))

        assert offspring == []
        assert len(population) == 4

    def test_odd_parent_is_dropped(self):
        population = make_population([1, 2, 3])
        offspring = apply_crossover(population, lambda a, b: (a, b), 1.0, RandomSource(1))
        assert len(offspring) == 2

    def test_single_offspring(self):
        population = make_population([np.zeros(2), np.ones(2)])
        offspring = apply_crossover(population, lambda a, b: (a + b) / 2, 1.0, RandomSource(2))

        assert len(offspring) == 1
        assert np.allclose(population[offspring[0]].decision, [0.5, 0.5])


class TestApplyMutation:
    """Tests for apply_mutation."""

    def test_in_place_mutation(self):
        population = make_population([[1], [2], [3]])
        mutated = apply_mutation(population, lambda d: d.append(0), 1.0, RandomSource(0))

        assert len(mutated) == 3
        for gene in population:
            assert gene.decision[-1] == 0
            assert not gene.evaluated

    def test_returned_decision_replaces_old_one(self):
        population = make_population([1, 2])
        apply_mutation(population, lambda d: d * 10, 1.0, RandomSource(0))
        assert sorted(gene.decision for gene in population) == [10, 20]

    def test_protected_genes_are_skipped(self):
        population = make_population([1, 2, 3])
        protected = population.ids()[:2]
        mutated = apply_mutation(population, lambda d: d + 1, 1.0, RandomSource(0), protected)

        assert mutated == [population.ids()[2]]
        assert all(population[gene_id].evaluated for gene_id in protected)

    def test_probability_zero(self):
        population = make_population([1, 2, 3])
        assert apply_mutation(population, lambda d: d + 1, 0.0, RandomSource(0)) == []


class TestBoxOperators:
    """Tests for the default box-bounded operators."""

    def setup_method(self):
        self.box = Box.square(4, -1.0, 1.0)
        self.rng = RandomSource(42)
        self.parent1 = np.array([0.5, -0.3, 0.8, -0.1])
        self.parent2 = np.array([-0.5, 0.3, -0.8, 0.1])

    def test_uniform_initialization(self):
        box = Box([0.0, 10.0], [1.0, 20.0])
        for _ in range(20):
            x = uniform_initialization(box, self.rng)
            assert x.shape == (2,)
            assert box.contains(x)

    def test_sbx_crossover(self):
        child1, child2 = simulated_binary_crossover(
            self.parent1, self.parent2, self.box, self.rng, eta=20.0
        )

        assert len(child1) == len(self.parent1)
        assert len(child2) == len(self.parent2)
        assert self.box.contains(child1) and self.box.contains(child2)

    def test_sbx_identical_parents(self):
        child1, child2 = simulated_binary_crossover(self.parent1, self.parent1, self.box, self.rng)
        assert np.allclose(child1, self.parent1)
        assert np.allclose(child2, self.parent1)

    def test_uniform_crossover_preserves_genes(self):
        child1, child2 = uniform_crossover(self.parent1, self.parent2, self.rng)
        for i in range(len(self.parent1)):
            assert {child1[i], child2[i]} == {self.parent1[i], self.parent2[i]}

    def test_polynomial_mutation(self):
        mutated = polynomial_mutation(self.parent1, self.box, self.rng, eta=20.0, mutation_prob=1.0)

        assert len(mutated) == len(self.parent1)
        assert self.box.contains(mutated)
        assert not np.allclose(mutated, self.parent1)
        # the input is left untouched
        assert np.array_equal(self.parent1, [0.5, -0.3, 0.8, -0.1])

    def test_gaussian_mutation(self):
        mutated = gaussian_mutation(self.parent1, self.box, self.rng, sigma=0.5, mutation_prob=1.0)
        assert self.box.contains(mutated)
        assert not np.allclose(mutated, self.parent1)

    def test_partial_binding(self):
        mutate = partial(polynomial_mutation, box=self.box, rng=self.rng, mutation_prob=1.0)
        population = make_population([self.parent1.copy()])
        apply_mutation(population, mutate, 1.0, self.rng)

        gene = population.genes()[0]
        assert self.box.contains(gene.decision)
        assert not gene.evaluated


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
