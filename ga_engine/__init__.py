"""
Generic evolutionary-optimization engine.

Genomes of keyed genes with one or more fitness scores are evolved by a
standard (single population) or divergent (speciated) genetic algorithm
with pluggable selection, crossover, mutation and speciation strategies.
"""

__version__ = "0.1.0"

from .algorithm import AlgorithmState, StandardGeneticAlgorithm
from .config import GeneticAlgorithmStrategy, load_strategy, strategy_from_dict
from .data_models import Fitness, Gene, Genome, Parents
from .divergent import DivergentGeneticAlgorithm
from .errors import (
    ConfigValidationError,
    GenerationAbortedError,
    GenomeShapeError,
    PopulationInvariantError
)
from .executor import TaskExecutor
from .population import StandardPopulation
from .statistics import ExecutionStatistics, GenerationStatistics

__all__ = [
    'AlgorithmState',
    'ConfigValidationError',
    'DivergentGeneticAlgorithm',
    'ExecutionStatistics',
    'Fitness',
    'Gene',
    'GenerationAbortedError',
    'GenerationStatistics',
    'GeneticAlgorithmStrategy',
    'Genome',
    'GenomeShapeError',
    'Parents',
    'PopulationInvariantError',
    'StandardGeneticAlgorithm',
    'StandardPopulation',
    'TaskExecutor',
    'load_strategy',
    'strategy_from_dict',
]
