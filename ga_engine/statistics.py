"""
Per-generation telemetry.

GenerationStatistics holds counts and phase timings for one generation.
ExecutionStatistics is the append-only series for a whole run.
"""

from dataclasses import asdict, dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

from loguru import logger


@dataclass
class PerformanceStatistics:
    """Phase timings in milliseconds."""
    total_millis: int = 0
    invasive_millis: int = 0
    selection_millis: int = 0
    crossover_millis: int = 0
    mutation_millis: int = 0
    evaluation_millis: int = 0
    entropy_millis: int = 0

    def __str__(self) -> str:
        return (
            f"[totalMillis={self.total_millis}, invasiveMillis={self.invasive_millis}, "
            f"selectionMillis={self.selection_millis}, crossoverMillis={self.crossover_millis}, "
            f"mutationMillis={self.mutation_millis}, evaluationMillis={self.evaluation_millis}, "
            f"entropyMillis={self.entropy_millis}]"
        )


@dataclass
class GenerationStatistics:
    """
    Counts and timings for one generation.

    Attributes:
        generation: Generation index (0 for the initial population)
        average_fitness: Mean primary fitness after evaluation
        best_fitness: Primary fitness of the best genome
        entropy: Average per-locus entropy, None when not calculated
    """
    generation: int
    average_fitness: Optional[float] = None
    best_fitness: Optional[float] = None
    entropy: Optional[float] = None
    number_of_crossovers: int = 0
    number_of_mutations: int = 0
    number_of_evaluations: int = 0
    number_of_invasive: int = 0
    performance: PerformanceStatistics = field(default_factory=PerformanceStatistics)

    def to_row(self) -> Dict[str, Any]:
        """Flatten into a single dict (one CSV row)."""
        row = asdict(self)
        row.update(row.pop('performance'))
        return row

    def __str__(self) -> str:
        entropy = f"{self.entropy:.4f}" if self.entropy is not None else "n/a"
        return (
            f"[generation={self.generation}, averageFitness={self.average_fitness}, "
            f"bestFitness={self.best_fitness}, entropy={entropy}, "
            f"crossovers={self.number_of_crossovers}, evaluations={self.number_of_evaluations}, "
            f"mutations={self.number_of_mutations}, invasive={self.number_of_invasive}, "
            f"performance={self.performance}]"
        )


@dataclass
class ExecutionStatistics:
    """Time series of GenerationStatistics for one run."""
    strategy_summary: Dict[str, Any] = field(default_factory=dict)
    start_time: datetime = field(default_factory=datetime.now)
    end_time: Optional[datetime] = None
    generations: List[GenerationStatistics] = field(default_factory=list)

    def add_generation_statistics(self, stats: GenerationStatistics) -> None:
        self.generations.append(stats)

    def average_generation_millis(self) -> float:
        """Mean total time per generation, excluding the initial population."""
        if len(self.generations) <= 1:
            return 0.0

        total = sum(stats.performance.total_millis for stats in self.generations[1:])
        return total / (len(self.generations) - 1)

    def finish(self) -> None:
        """Stamp the end time and log the average generation time."""
        self.end_time = datetime.now()

        if len(self.generations) > 1:
            logger.info(f"Average generation time is {self.average_generation_millis():.1f}ms.")

    def best_fitness_history(self) -> List[Optional[float]]:
        return [stats.best_fitness for stats in self.generations]

    def __str__(self) -> str:
        return (
            f"[startTime={self.start_time.isoformat()}, "
            f"endTime={self.end_time.isoformat() if self.end_time else None}, "
            f"generations={len(self.generations)}]"
        )
