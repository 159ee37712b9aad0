"""
Divergent (speciated) genetic algorithm.

Runs ``min_populations`` independent evolutions, then alternates extinction
cycles (cull down to the best ``min_populations`` sub-populations) with
speciation events (split every survivor and keep evolving each piece).
Sub-populations evolve concurrently on an outer pool while their own
crossover, mutation and evaluation tasks share the inner worker pool.
"""

import copy
from typing import List, Optional

from loguru import logger

from .algorithm import StandardGeneticAlgorithm, spawn_task_rng
from .errors import ConfigValidationError
from .executor import TaskExecutor
from .population import StandardPopulation
from .sorting import pareto_sort
from .statistics import ExecutionStatistics


class DivergentGeneticAlgorithm:
    """
    Evolves several sub-populations and returns the best one.

    Args:
        strategy: Validated GeneticAlgorithmStrategy with a bounded
                  number_of_generations
        executor: Inner worker pool shared by every sub-population
    """

    def __init__(self, strategy, executor: Optional[TaskExecutor] = None):
        if strategy.number_of_generations < 1:
            raise ConfigValidationError(
                "Divergent evolution requires a bounded number_of_generations (>= 1)"
            )

        self.strategy = strategy
        self._owns_executor = executor is None
        self.executor = executor if executor is not None else TaskExecutor(strategy.worker_threads)
        self.populations: List[StandardPopulation] = []
        self.population: Optional[StandardPopulation] = None
        self.execution_statistics: List[ExecutionStatistics] = []

    def _sub_algorithm(self, population: Optional[StandardPopulation] = None) -> StandardGeneticAlgorithm:
        # Sub-runs evolve concurrently, so selector state and rng are per copy
        sub_strategy = copy.copy(self.strategy)
        sub_strategy.selector = self.strategy.selector.new_instance()
        sub_strategy.rng = spawn_task_rng(self.strategy.rng)

        if population is None:
            population = StandardPopulation(sub_strategy, self.executor)
        else:
            population.strategy = sub_strategy
            population.executor = self.executor

        return StandardGeneticAlgorithm(sub_strategy, executor=self.executor, population=population)

    def _run_all(self, outer: TaskExecutor, algorithms: List[StandardGeneticAlgorithm], spawn: bool, phase: str) -> List[StandardPopulation]:
        tasks = [lambda algorithm=algorithm: algorithm.evolve(spawn=spawn) for algorithm in algorithms]
        self.execution_statistics.extend(outer.run_all(tasks, phase=phase))
        return [algorithm.population for algorithm in algorithms]

    @staticmethod
    def _best_of_each(populations: List[StandardPopulation]):
        for population in populations:
            population.sort()
        return [population.individuals[-1] for population in populations]

    def cull(self, populations: List[StandardPopulation]) -> List[StandardPopulation]:
        """
        Keep the ``min_populations`` sub-populations with the best individuals.

        Best individuals are Pareto-ranked when several objectives exist.
        """
        if len(populations) <= self.strategy.min_populations:
            return populations

        best_individuals = self._best_of_each(populations)
        ranked = list(best_individuals)
        pareto_sort(ranked)
        survivors = ranked[-self.strategy.min_populations:]

        kept = [
            population for population, best in zip(populations, best_individuals)
            if any(best is survivor for survivor in survivors)
        ]
        logger.info(f"Extinction cycle culled {len(populations) - len(kept)} of {len(populations)} populations")
        return kept

    def diverge(self, population: StandardPopulation) -> List[StandardPopulation]:
        """Split one sub-population with the configured speciation operator."""
        species = self.strategy.speciation(list(population.individuals), self.strategy.speciation_factor)

        divergent = []
        for genomes in species:
            sub_population = StandardPopulation(population.strategy, self.executor)
            sub_population.add_all(genomes)
            divergent.append(sub_population)

        return divergent

    def evolve(self) -> StandardPopulation:
        """
        Run the full divergent schedule.

        Returns:
            The sub-population whose best individual ranks highest
        """
        strategy = self.strategy
        self.execution_statistics = []

        outer = TaskExecutor(max(strategy.min_populations, 1), thread_name_prefix="ga-population")

        try:
            algorithms = [self._sub_algorithm() for _ in range(strategy.min_populations)]
            populations = self._run_all(outer, algorithms, spawn=True, phase="population")

            for cycle in range(strategy.extinction_cycles):
                populations = self.cull(populations)

                for event in range(strategy.speciation_events):
                    algorithms = [
                        self._sub_algorithm(species)
                        for population in populations
                        for species in self.diverge(population)
                    ]
                    logger.info(
                        f"Extinction cycle {cycle + 1}, speciation event {event + 1}: "
                        f"evolving {len(algorithms)} populations"
                    )
                    populations = self._run_all(outer, algorithms, spawn=False, phase="speciation")
        finally:
            outer.shutdown()
            if self._owns_executor:
                self.executor.shutdown()

        best_individuals = self._best_of_each(populations)
        ranked = list(best_individuals)
        pareto_sort(ranked)

        self.populations = populations
        self.population = next(
            population for population, best in zip(populations, best_individuals) if best is ranked[-1]
        )

        logger.info(f"Selected best of {len(populations)} populations: {self.population.best()}")
        return self.population
