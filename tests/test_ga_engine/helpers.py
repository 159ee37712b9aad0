"""
Shared builders for GA engine tests.
"""

import threading
from types import SimpleNamespace

import numpy as np

from ga_engine.data_models import Fitness, Gene, Genome


def make_genome(values, fitness=None, maximizing=True):
    """Genome with loci 0..n-1 holding the given values."""
    genome = Genome()
    for position, value in enumerate(values):
        genome.put_gene(position, Gene(value))

    if fitness is not None:
        if isinstance(fitness, (list, tuple)):
            genome.set_fitnesses([Fitness(f, maximizing) for f in fitness])
        else:
            genome.set_fitnesses(Fitness(fitness, maximizing))

    return genome


def make_strategy(**overrides):
    """Lightweight stand-in for GeneticAlgorithmStrategy in operator tests."""
    values = dict(
        mutation_rate=0.1,
        max_mutations_per_individual=3,
        mutation_count_distribution='uniform',
        mutation_stop_probability=0.5,
        max_mutation_attempts=10,
        tournament_size=3,
        tournament_selector_accuracy=0.9,
        truncation_percentage=0.5,
        gene_dao=FreshGeneDao(),
        fitness_evaluator=None,
    )
    values.update(overrides)
    return SimpleNamespace(**values)


class FreshGeneDao:
    """Draws values no test genome uses, so every replacement is a real change."""

    def random_gene(self, genome, rng):
        return Gene(int(rng.integers(1000, 1_000_000)))


class ConstantEvaluator:
    """Returns the same fitness for every genome and counts calls."""

    def __init__(self, value, maximizing=True):
        self.value = value
        self.maximizing = maximizing
        self.calls = 0
        self._lock = threading.Lock()

    def evaluate(self, genome):
        with self._lock:
            self.calls += 1
        return Fitness(self.value, self.maximizing)


class SumEvaluator:
    """Fitness is the sum of integer gene values."""

    def evaluate(self, genome):
        return Fitness(float(sum(gene.value for gene in genome.genes.values())))


class FailingEvaluator:
    def evaluate(self, genome):
        raise RuntimeError("evaluator exploded")


class ScriptedSelector:
    """Returns a fixed sequence of indices, ignoring the rng."""

    def __init__(self, indices):
        self.indices = list(indices)

    def get_next_index(self, individuals, strategy=None, rng=None):
        return self.indices.pop(0)


def seeded_rng(seed=42):
    return np.random.default_rng(seed)
