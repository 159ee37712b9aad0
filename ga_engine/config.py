"""
Strategy configuration.

A GeneticAlgorithmStrategy is the flat key/value configuration of a run
plus the external collaborators (breeder, gene DAO, fitness evaluator).
Strategy names are resolved into selector instances and operator
callables once, when the strategy is constructed, and the whole
configuration is validated at the same time.
"""

from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, Optional

import numpy as np
import yaml

from .crossover import get_crossover_operator
from .errors import ConfigValidationError
from .executor import default_worker_count
from .mutation import get_mutation_operator
from .selection import create_selector
from .speciation import get_speciation_operator

# Collaborators and resolved strategies are not part of the YAML surface
_RUNTIME_FIELDS = ('breeder', 'gene_dao', 'fitness_evaluator')

_PROBABILITY_FIELDS = (
    'mutation_rate',
    'tournament_selector_accuracy',
    'truncation_percentage',
    'mutation_stop_probability',
)


@dataclass
class GeneticAlgorithmStrategy:
    """
    Configuration of one genetic algorithm run.

    Raises:
        ConfigValidationError: On construction if any value is out of range
                               or any strategy name is unknown
    """
    population_size: int = 100
    number_of_generations: int = 50
    mutation_rate: float = 0.05
    max_mutations_per_individual: int = 5
    elitism: int = 1
    invasive_species_count: int = 0
    tournament_size: int = 3
    tournament_selector_accuracy: float = 0.9
    truncation_percentage: float = 0.5
    min_populations: int = 2
    speciation_events: int = 1
    speciation_factor: int = 2
    extinction_cycles: int = 1
    calculate_entropy: bool = False

    selector_name: str = 'tournament'
    crossover_operator: str = 'uniform'
    mutation_operator: str = 'standard'
    speciation_operator: str = 'fitness'
    max_mutation_attempts: int = 100
    mutation_count_distribution: str = 'uniform'
    mutation_stop_probability: float = 0.5
    random_seed: Optional[int] = None
    worker_threads: int = field(default_factory=default_worker_count)

    breeder: Any = field(default=None, repr=False, compare=False)
    gene_dao: Any = field(default=None, repr=False, compare=False)
    fitness_evaluator: Any = field(default=None, repr=False, compare=False)

    def __post_init__(self):
        self.validate()

        self.selector = create_selector(self.selector_name)
        self.crossover = get_crossover_operator(self.crossover_operator)
        self.mutation = get_mutation_operator(self.mutation_operator)
        self.speciation = get_speciation_operator(self.speciation_operator)
        self.rng = np.random.default_rng(self.random_seed)

    def validate(self) -> None:
        """
        Check every value range.

        Raises:
            ConfigValidationError: If configuration is invalid
        """
        for name in _PROBABILITY_FIELDS:
            value = getattr(self, name)
            if not isinstance(value, (int, float)) or not 0.0 <= value <= 1.0:
                raise ConfigValidationError(f"{name} must be between 0.0 and 1.0, got {value}")

        if self.population_size < 1:
            raise ConfigValidationError(f"population_size must be >= 1, got {self.population_size}")

        if self.number_of_generations != -1 and self.number_of_generations < 1:
            raise ConfigValidationError(
                f"number_of_generations must be -1 (unbounded) or >= 1, got {self.number_of_generations}"
            )

        for name in ('elitism', 'invasive_species_count'):
            if getattr(self, name) < 0:
                raise ConfigValidationError(f"{name} must be >= 0, got {getattr(self, name)}")

        if self.elitism + self.invasive_species_count > self.population_size:
            raise ConfigValidationError(
                f"elitism ({self.elitism}) plus invasive_species_count ({self.invasive_species_count}) "
                f"cannot exceed population_size ({self.population_size})"
            )

        for name in ('tournament_size', 'speciation_factor', 'max_mutations_per_individual',
                     'min_populations', 'max_mutation_attempts', 'worker_threads'):
            if getattr(self, name) < 1:
                raise ConfigValidationError(f"{name} must be >= 1, got {getattr(self, name)}")

        for name in ('speciation_events', 'extinction_cycles'):
            if getattr(self, name) < 0:
                raise ConfigValidationError(f"{name} must be >= 0, got {getattr(self, name)}")

        if self.mutation_count_distribution not in ('uniform', 'geometric'):
            raise ConfigValidationError(
                f"Invalid mutation_count_distribution: '{self.mutation_count_distribution}'. "
                f"Must be 'uniform' or 'geometric'"
            )

    def to_dict(self) -> Dict[str, Any]:
        """Configuration values only, in YAML key form."""
        values = {}
        for f in fields(self):
            if f.name in _RUNTIME_FIELDS:
                continue
            key = 'selector' if f.name == 'selector_name' else f.name
            values[key] = getattr(self, f.name)
        return values


def strategy_from_dict(values: Dict[str, Any], **collaborators) -> GeneticAlgorithmStrategy:
    """
    Build a strategy from a flat mapping.

    Args:
        values: Flat mapping of configuration keys (YAML form)
        **collaborators: breeder, gene_dao, fitness_evaluator

    Returns:
        Validated GeneticAlgorithmStrategy

    Raises:
        ConfigValidationError: If a key is unknown or a value is invalid
    """
    if values is None:
        values = {}
    if not isinstance(values, dict):
        raise ConfigValidationError("Strategy configuration must be a mapping")

    known = {f.name for f in fields(GeneticAlgorithmStrategy)} - set(_RUNTIME_FIELDS)
    kwargs = {}

    for key, value in values.items():
        name = 'selector_name' if key == 'selector' else key
        if name not in known:
            raise ConfigValidationError(f"Unknown strategy option: '{key}'")
        kwargs[name] = value

    return GeneticAlgorithmStrategy(**kwargs, **collaborators)


def load_strategy(config_path: str, **collaborators) -> GeneticAlgorithmStrategy:
    """
    Load a strategy from a flat YAML file.

    Raises:
        FileNotFoundError: If config file doesn't exist
        ConfigValidationError: If config is invalid
    """
    config_file = Path(config_path)

    if not config_file.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    try:
        with open(config_file, 'r') as f:
            values = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigValidationError(f"Invalid YAML in configuration file: {e}")

    return strategy_from_dict(values, **collaborators)
