"""
Population of genomes.

The population owns its genomes, keeps lazily computed aggregates
(total fitness and total selection probability) and delegates breeding,
evaluation and parent selection to the collaborators configured on the
strategy.
"""

import math
from collections import Counter
from typing import List, Optional

import numpy as np
from loguru import logger

from .data_models import Fitness, Genome, Parents
from .executor import TaskExecutor
from .sorting import best_of, pareto_sort


class StandardPopulation:
    """
    Ordered collection of genomes for one evolving population.

    After sort() the genomes are ordered worst-first, so the last genome is
    the elite.
    """

    def __init__(self, strategy=None, executor: Optional[TaskExecutor] = None):
        self.strategy = strategy
        self.executor = executor
        self._individuals: List[Genome] = []
        self._total_fitness: Optional[float] = None
        self._total_probability: Optional[float] = None

    @property
    def individuals(self) -> List[Genome]:
        return self._individuals

    def _invalidate(self) -> None:
        self._total_fitness = None
        self._total_probability = None

    def clear(self) -> None:
        self._individuals = []
        self._invalidate()

    def add(self, genome: Genome) -> None:
        self._individuals.append(genome)
        self._invalidate()

    def add_all(self, genomes: List[Genome]) -> None:
        self._individuals.extend(genomes)
        self._invalidate()

    def remove(self, index: int) -> Genome:
        """
        Remove and return the genome at index.

        Raises:
            IndexError: If index is out of range
        """
        if not 0 <= index < len(self._individuals):
            raise IndexError(f"Population index {index} out of range for size {len(self._individuals)}")

        genome = self._individuals.pop(index)
        self._invalidate()
        return genome

    def get(self, index: int) -> Genome:
        return self._individuals[index]

    def size(self) -> int:
        return len(self._individuals)

    def __len__(self) -> int:
        return len(self._individuals)

    def __iter__(self):
        return iter(self._individuals)

    def sort(self) -> None:
        """Stable sort ascending by fitness (worst first)."""
        pareto_sort(self._individuals)

    def best(self) -> Optional[Genome]:
        if not self._individuals:
            return None
        return best_of(self._individuals)

    def total_fitness(self) -> float:
        """Sum of primary fitness values of evaluated genomes."""
        if self._total_fitness is None:
            self._total_fitness = sum(
                genome.fitness.value for genome in self._individuals if genome.fitness is not None
            )
        return self._total_fitness

    def total_probability(self) -> float:
        """Sum of selection weights (log-probabilities converted with exp)."""
        if self._total_probability is None:
            self._total_probability = sum(
                genome.fitness.probability for genome in self._individuals if genome.fitness is not None
            )
        return self._total_probability

    def average_fitness(self) -> Optional[float]:
        evaluated = [genome for genome in self._individuals if genome.fitness is not None]
        if not evaluated:
            return None
        return self.total_fitness() / len(evaluated)

    def breed(self, count: int, rng: Optional[np.random.Generator] = None) -> List[Genome]:
        """Create count fresh random genomes with the strategy's breeder."""
        if count <= 0:
            return []

        rng = rng if rng is not None else self.strategy.rng
        genomes = list(self.strategy.breeder.breed(count, rng))
        logger.debug(f"Bred {len(genomes)} new individual(s)")
        return genomes

    def evaluate_fitness(self, stats=None) -> int:
        """
        Evaluate every genome whose evaluation-needed flag is set.

        Evaluation runs concurrently, one task per genome. Fitness is
        assigned only after every task has finished, so a failed phase
        leaves all genomes untouched.

        Args:
            stats: Optional GenerationStatistics to increment

        Returns:
            Number of genomes evaluated

        Raises:
            GenerationAbortedError: If any evaluation raised
        """
        pending = [genome for genome in self._individuals if genome.evaluation_needed]
        evaluator = self.strategy.fitness_evaluator

        tasks = [lambda genome=genome: evaluator.evaluate(genome) for genome in pending]

        if self.executor is not None:
            results = self.executor.run_all(tasks, phase="evaluation")
        else:
            results = [task() for task in tasks]

        for genome, result in zip(pending, results):
            genome.set_fitnesses(result)

        self._invalidate()

        if stats is not None:
            stats.number_of_evaluations += len(pending)

        return len(pending)

    def update_fitness_for_individual(self, genome: Genome, fitnesses: List[Fitness]) -> None:
        """Overwrite a member's fitness without re-evaluating it."""
        genome.restore_fitnesses(fitnesses)
        self._invalidate()

    def select(self, pair_count: int, rng: np.random.Generator) -> List[Parents]:
        """
        Choose parent pairs with the strategy's selector.

        The population is sorted and the selector reindexed first. A pair is
        skipped when the selector returns -1.

        Args:
            pair_count: Number of pairs wanted
            rng: Random number generator (orchestrating thread only)

        Returns:
            List of Parents, at most pair_count long
        """
        self.sort()

        selector = self.strategy.selector
        selector.reindex(self._individuals)

        pairs = []
        for _ in range(max(pair_count, 0)):
            mom_index = selector.get_next_index(self._individuals, self.strategy, rng)
            dad_index = selector.get_next_index(self._individuals, self.strategy, rng)

            if mom_index < 0 or dad_index < 0:
                logger.warning("Selector returned no parent; skipping pair")
                continue

            pairs.append(Parents(self._individuals[mom_index], self._individuals[dad_index]))

        return pairs

    def calculate_entropy(self) -> float:
        """
        Average per-locus Shannon entropy (base 2) of gene values.

        Returns:
            Mean entropy over all loci, 0.0 for an empty population
        """
        if not self._individuals:
            return 0.0

        loci = {}
        for genome in self._individuals:
            for key, gene in genome.genes.items():
                loci.setdefault(key, Counter())[gene.value] += 1

        if not loci:
            return 0.0

        total_entropy = 0.0
        for counts in loci.values():
            observations = sum(counts.values())
            for count in counts.values():
                p = count / observations
                total_entropy -= p * math.log2(p)

        return total_entropy / len(loci)

    def __repr__(self) -> str:
        return f"StandardPopulation(size={len(self._individuals)})"
