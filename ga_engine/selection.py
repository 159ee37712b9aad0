"""
Parent selection strategies.

A selector turns a list of evaluated genomes into indices of chosen
parents. Every selector is used in two steps: ``reindex(individuals)``
precomputes whatever sampling structure it needs, then
``get_next_index(individuals, strategy, rng)`` draws one index. An empty
list is not an error: selectors return -1 and log a warning.

Selectors are not thread-safe and are only used from the orchestrating
thread.
"""

from abc import ABC, abstractmethod
from typing import Dict, List, Optional, Type

import numpy as np
from loguru import logger

from .data_models import Genome
from .errors import ConfigValidationError
from .roulette import BinaryRouletteTree, build_roulette_tree
from .sorting import pareto_sort


class Selector(ABC):
    """Base class for all selection strategies."""

    name = "selector"

    def reindex(self, individuals: List[Genome]) -> None:
        """Precompute sampling state. Must be called after any fitness change."""
        pass

    @abstractmethod
    def get_next_index(self, individuals: List[Genome], strategy, rng: np.random.Generator) -> int:
        """
        Pick the next parent.

        Args:
            individuals: Genomes to choose from
            strategy: GeneticAlgorithmStrategy with the selector parameters
            rng: Random number generator

        Returns:
            Index into individuals, or -1 if individuals is empty
        """
        raise NotImplementedError

    def new_instance(self) -> "Selector":
        """Create a fresh selector of the same kind with no indexed state."""
        return type(self)()

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


def _warn_empty(selector: Selector) -> int:
    logger.warning(f"Attempted to select from an empty population using {type(selector).__name__}. Returning -1.")
    return -1


class RandomSelector(Selector):
    """Uniform pick."""

    name = "random"

    def get_next_index(self, individuals: List[Genome], strategy=None, rng: Optional[np.random.Generator] = None) -> int:
        if not individuals:
            return _warn_empty(self)

        rng = rng if rng is not None else np.random.default_rng()
        return int(rng.integers(0, len(individuals)))


class RouletteSelector(Selector):
    """
    Fitness-proportional selection over a balanced cumulative-weight tree.

    Weights come from ``Fitness.probability`` of each genome's primary
    objective. Genomes without fitness or with zero weight can never be
    drawn. If every weight is zero the pick falls back to uniform.
    """

    name = "roulette"

    def __init__(self):
        self._tree: Optional[BinaryRouletteTree] = None
        self._total: float = 0.0
        self._indexed_size = 0

    def reindex(self, individuals: List[Genome]) -> None:
        weights = []
        skipped = 0

        for genome in individuals:
            if genome.fitness is None:
                skipped += 1
                weights.append(None)
            else:
                weights.append(genome.fitness.probability)

        if skipped:
            logger.warning(f"Skipping {skipped} individual(s) without fitness while indexing roulette wheel")

        self._tree, self._total = build_roulette_tree(weights)
        self._indexed_size = len(individuals)

    def get_next_index(self, individuals: List[Genome], strategy=None, rng: Optional[np.random.Generator] = None) -> int:
        if not individuals:
            return _warn_empty(self)

        rng = rng if rng is not None else np.random.default_rng()

        if self._tree is None or self._indexed_size != len(individuals):
            self.reindex(individuals)

        if self._total == 0.0:
            return int(rng.integers(0, len(individuals)))

        return self._tree.find(rng.random() * self._total).index


class TournamentSelector(Selector):
    """
    Draw ``tournament_size`` competitors uniformly, then walk them from best
    to worst, accepting each with probability ``tournament_selector_accuracy``.
    If nobody is accepted the weakest competitor wins.

    Competitor draws are independent, so one genome may enter a tournament
    more than once.
    """

    name = "tournament"

    def __init__(self):
        self._random = RandomSelector()

    def get_next_index(self, individuals: List[Genome], strategy, rng: Optional[np.random.Generator] = None) -> int:
        if not individuals:
            return _warn_empty(self)

        accuracy = strategy.tournament_selector_accuracy
        if not 0.0 <= accuracy <= 1.0:
            raise ConfigValidationError(
                f"tournament_selector_accuracy must be between 0.0 and 1.0, got {accuracy}"
            )
        if strategy.tournament_size < 1:
            raise ConfigValidationError(f"tournament_size must be >= 1, got {strategy.tournament_size}")

        rng = rng if rng is not None else np.random.default_rng()

        competitors = [
            self._random.get_next_index(individuals, strategy, rng)
            for _ in range(strategy.tournament_size)
        ]

        # Best first; sorted() is stable so equal competitors keep draw order
        competitors = sorted(competitors, key=lambda i: individuals[i].sort_key(), reverse=True)

        for index in competitors:
            if rng.random() <= accuracy:
                return index

        return competitors[-1]


class TruncationSelector(Selector):
    """
    Uniform pick restricted to the top ``1 - truncation_percentage`` of the
    population.

    ``reindex`` sorts the list in place, worst first. The returned index is
    always in ``[floor(size * truncation_percentage), size)``.
    """

    name = "truncation"

    def __init__(self):
        self._random = RandomSelector()

    def reindex(self, individuals: List[Genome]) -> None:
        pareto_sort(individuals)

    def get_next_index(self, individuals: List[Genome], strategy, rng: Optional[np.random.Generator] = None) -> int:
        if not individuals:
            return _warn_empty(self)

        percentage = strategy.truncation_percentage
        if not 0.0 <= percentage <= 1.0:
            raise ConfigValidationError(
                f"truncation_percentage must be between 0.0 and 1.0, got {percentage}"
            )

        # A percentage of 1.0 still leaves the single best genome
        cutoff = min(int(len(individuals) * percentage), len(individuals) - 1)

        return self._random.get_next_index(individuals[cutoff:], strategy, rng) + cutoff


SELECTORS: Dict[str, Type[Selector]] = {
    RandomSelector.name: RandomSelector,
    RouletteSelector.name: RouletteSelector,
    TournamentSelector.name: TournamentSelector,
    TruncationSelector.name: TruncationSelector,
}


def create_selector(name: str) -> Selector:
    """
    Create a selector by name.

    Args:
        name: One of 'random', 'roulette', 'tournament', 'truncation'

    Returns:
        New selector instance

    Raises:
        ConfigValidationError: If the name is unknown
    """
    try:
        return SELECTORS[name]()
    except KeyError:
        raise ConfigValidationError(
            f"Unknown selector: '{name}'. Must be one of {sorted(SELECTORS)}"
        ) from None
