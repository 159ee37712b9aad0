"""
Standard (single population) genetic algorithm driver.

One generation runs in bulk-synchronous phases:

1. breed invasive species
2. select parent pairs (orchestrating thread only)
3. crossover, one concurrent task per pair
4. mutation, one concurrent task per child
5. replace the population with elites + children + invasive species
6. evaluate, one concurrent task per dirty genome

Every phase waits for all of its tasks before the next one starts. Each
task receives its own random generator seeded from the strategy's
generator, so a fixed ``random_seed`` gives the same run regardless of
thread scheduling.
"""

import time
from enum import Enum
from typing import List, Optional

import numpy as np
from loguru import logger

from .crossover import apply_crossover
from .data_models import Genome, Parents
from .errors import PopulationInvariantError
from .executor import TaskExecutor
from .population import StandardPopulation
from .statistics import ExecutionStatistics, GenerationStatistics

INVASIVE_PENALTY = 0.1


class AlgorithmState(Enum):
    IDLE = "idle"
    SPAWNING_INITIAL = "spawning_initial"
    EVALUATING = "evaluating"
    SELECTING = "selecting"
    CROSSING_OVER = "crossing_over"
    MUTATING = "mutating"
    REPLACING = "replacing"
    FINISHED = "finished"


def _millis_since(start: float) -> int:
    return int((time.perf_counter() - start) * 1000)


def spawn_task_rng(rng: np.random.Generator) -> np.random.Generator:
    """Derive an independent generator for one concurrent task."""
    return np.random.default_rng(int(rng.integers(0, 2**31)))


class StandardGeneticAlgorithm:
    """
    Drives one population through the generation loop.

    Args:
        strategy: Validated GeneticAlgorithmStrategy
        executor: Worker pool; one sized by ``strategy.worker_threads`` is
                  created if omitted
        population: Population to evolve; a new empty one if omitted
    """

    def __init__(
        self,
        strategy,
        executor: Optional[TaskExecutor] = None,
        population: Optional[StandardPopulation] = None
    ):
        self.strategy = strategy
        self._owns_executor = executor is None
        self.executor = executor if executor is not None else TaskExecutor(strategy.worker_threads)
        self.population = population if population is not None else StandardPopulation(strategy, self.executor)
        self.state = AlgorithmState.IDLE
        self._stop_requested = False

    @property
    def rng(self) -> np.random.Generator:
        return self.strategy.rng

    def request_stop(self) -> None:
        """Ask the run to end after the current generation."""
        logger.info("Stop requested; finishing after the current generation")
        self._stop_requested = True

    @property
    def stop_requested(self) -> bool:
        return self._stop_requested

    def _record(self, stats: GenerationStatistics) -> None:
        stats.average_fitness = self.population.average_fitness()
        best = self.population.best()
        stats.best_fitness = best.fitness.value if best is not None and best.fitness is not None else None

    def spawn_initial_population(self, execution_statistics: Optional[ExecutionStatistics] = None) -> GenerationStatistics:
        """
        Breed and evaluate a fresh population of ``population_size`` genomes.

        Returns:
            Statistics for generation 0
        """
        self.state = AlgorithmState.SPAWNING_INITIAL
        stats = GenerationStatistics(0)
        start = time.perf_counter()

        self.population.clear()
        self.population.add_all(self.population.breed(self.strategy.population_size))

        if self.strategy.calculate_entropy:
            start_entropy = time.perf_counter()
            stats.entropy = self.population.calculate_entropy()
            stats.performance.entropy_millis = _millis_since(start_entropy)

        self.state = AlgorithmState.EVALUATING
        start_evaluation = time.perf_counter()
        self.population.evaluate_fitness(stats)
        stats.performance.evaluation_millis = _millis_since(start_evaluation)

        self._record(stats)
        stats.performance.total_millis = _millis_since(start)

        logger.info(
            f"Took {stats.performance.total_millis}ms to spawn initial population of size {self.population.size()}"
        )
        logger.info(str(stats))

        if execution_statistics is not None:
            execution_statistics.add_generation_statistics(stats)

        return stats

    def evolve(self, spawn: bool = True) -> ExecutionStatistics:
        """
        Spawn the initial population and run generations until the
        configured count is reached or a stop is requested.

        ``number_of_generations == -1`` runs until request_stop() is called.

        Args:
            spawn: If False, keep evolving the current (already evaluated)
                   population instead of breeding a new one

        Returns:
            ExecutionStatistics for the run
        """
        execution_statistics = ExecutionStatistics(strategy_summary=self.strategy.to_dict())
        self._stop_requested = False

        try:
            if spawn:
                self.spawn_initial_population(execution_statistics)

            generation = 1
            limit = self.strategy.number_of_generations

            while not self._stop_requested and (limit < 0 or generation <= limit):
                self.proceed_with_next_generation(execution_statistics, generation)
                generation += 1

            self.finish(execution_statistics)
        finally:
            if self._owns_executor:
                self.executor.shutdown()

        return execution_statistics

    def proceed_with_next_generation(
        self,
        execution_statistics: Optional[ExecutionStatistics],
        generation: int
    ) -> GenerationStatistics:
        """
        Run one full generation on the current population.

        Args:
            execution_statistics: Series to append to (may be None)
            generation: Generation index for the statistics

        Returns:
            Statistics for this generation

        Raises:
            PopulationInvariantError: If crossover cannot refill the population
            GenerationAbortedError: If a concurrent task failed
        """
        stats = GenerationStatistics(generation)
        performance = stats.performance
        generation_start = time.perf_counter()

        strategy = self.strategy
        population = self.population

        start = time.perf_counter()
        invasive_species = population.breed(strategy.invasive_species_count)
        stats.number_of_invasive = len(invasive_species)
        performance.invasive_millis = _millis_since(start)

        self.state = AlgorithmState.SELECTING
        start = time.perf_counter()
        elite_count = min(strategy.elitism, population.size())
        pair_count = strategy.population_size - elite_count - len(invasive_species)
        all_parents = population.select(pair_count, self.rng)
        performance.selection_millis = _millis_since(start)

        self.state = AlgorithmState.CROSSING_OVER
        start = time.perf_counter()
        children = self.crossover(all_parents)
        stats.number_of_crossovers = len(children)
        performance.crossover_millis = _millis_since(start)

        self.state = AlgorithmState.MUTATING
        start = time.perf_counter()
        stats.number_of_mutations = self.mutate(children)
        performance.mutation_millis = _millis_since(start)

        self.state = AlgorithmState.REPLACING
        self.replace_population(children, invasive_species)

        if strategy.calculate_entropy:
            start = time.perf_counter()
            stats.entropy = population.calculate_entropy()
            performance.entropy_millis = _millis_since(start)

        self.state = AlgorithmState.EVALUATING
        start = time.perf_counter()
        population.evaluate_fitness(stats)
        performance.evaluation_millis = _millis_since(start)

        for invasive in invasive_species:
            population.update_fitness_for_individual(
                invasive, [fitness.penalized(INVASIVE_PENALTY) for fitness in invasive.fitnesses]
            )

        self._record(stats)
        performance.total_millis = _millis_since(generation_start)

        logger.info(str(stats))

        if execution_statistics is not None:
            execution_statistics.add_generation_statistics(stats)

        return stats

    def crossover(self, all_parents: List[Parents]) -> List[Genome]:
        """
        Cross every pair concurrently.

        Raises:
            PopulationInvariantError: If children + elitism + invasive species
                                      fall short of population_size
        """
        strategy = self.strategy

        if self.population.size() < 2:
            logger.info("Unable to perform crossover because there is only 1 individual in the population")
            children = []
        else:
            logger.debug(f"Pairs to crossover: {len(all_parents)}")

            tasks = [
                lambda parents=parents, rng=spawn_task_rng(self.rng): apply_crossover(parents, strategy, rng)
                for parents in all_parents
            ]
            children = self.executor.run_all(tasks, phase="crossover")

        available = len(children) + strategy.elitism + strategy.invasive_species_count
        if available < strategy.population_size:
            message = (
                f"{len(children)} children produced from concurrent crossover execution. "
                f"Expected at least {strategy.population_size - strategy.elitism - strategy.invasive_species_count} "
                f"to refill a population of {strategy.population_size}."
            )
            logger.error(message)
            raise PopulationInvariantError(message)

        return children

    def mutate(self, children: List[Genome]) -> int:
        """
        Mutate every child concurrently.

        Returns:
            Number of children that changed
        """
        strategy = self.strategy

        tasks = [
            lambda child=child, rng=spawn_task_rng(self.rng): strategy.mutation(child, strategy, rng)
            for child in children
        ]
        results = self.executor.run_all(tasks, phase="mutation")

        return sum(1 for changed in results if changed)

    def replace_population(self, children: List[Genome], invasive_species: List[Genome]) -> None:
        """
        Rebuild the population from elites, children and invasive species.

        Elites are the top ``elitism`` genomes of the previous population and
        are carried over unchanged. Surplus children are dropped so the new
        population has exactly ``population_size`` members.
        """
        population = self.population
        elites = []

        if self.strategy.elitism > 0:
            population.sort()
            elites = population.individuals[-self.strategy.elitism:]

        room = max(self.strategy.population_size - len(elites) - len(invasive_species), 0)

        population.clear()
        population.add_all(elites)
        population.add_all(children[:room])
        population.add_all(invasive_species)

        logger.debug(
            f"Replaced population: {len(elites)} elite(s), {min(len(children), room)} child(ren), "
            f"{len(invasive_species)} invasive"
        )

    def finish(self, execution_statistics: ExecutionStatistics) -> None:
        execution_statistics.finish()
        self.state = AlgorithmState.FINISHED
