"""
Data models for the GA engine.

Core data structures representing genes, fitness values, genomes and
parent pairs. Nothing in here knows what a gene value means; the engine
only needs to clone, compare and score genomes.
"""

import copy
import math
from dataclasses import dataclass, field
from functools import total_ordering
from typing import Any, Dict, Hashable, Iterable, List, Optional, Sequence, Union

from .sorting import dominates


@dataclass(frozen=True)
class Gene:
    """
    Smallest mutable unit of a genome.

    Genes are immutable values; a genome changes by replacing the gene at a
    locus, never by editing a gene in place.

    Attributes:
        value: The gene value (any hashable object)
    """
    value: Any

    def clone(self) -> "Gene":
        """Create a deep copy of this gene."""
        return Gene(copy.deepcopy(self.value))


@total_ordering
@dataclass(frozen=True)
class Fitness:
    """
    A scalar score with an explicit comparison direction.

    Attributes:
        value: The raw score
        maximizing: True if higher values are better, False if lower values are better
    """
    value: float
    maximizing: bool = True

    @property
    def oriented_value(self) -> float:
        """Score transformed so that higher is always better."""
        return self.value if self.maximizing else -self.value

    @property
    def probability(self) -> float:
        """Selection weight: negative scores are read as log-probabilities."""
        return math.exp(self.value) if self.value < 0 else self.value

    def is_better_than(self, other: "Fitness") -> bool:
        return self.oriented_value > other.oriented_value

    def penalized(self, fraction: float) -> "Fitness":
        """
        Return a fitness made worse by the given fraction of its magnitude.

        Args:
            fraction: Fraction of abs(value) to take away (e.g. 0.1 for 10%)

        Returns:
            New Fitness in the same direction
        """
        delta = abs(self.value) * fraction
        new_value = self.value - delta if self.maximizing else self.value + delta
        return Fitness(new_value, self.maximizing)

    def __lt__(self, other: "Fitness") -> bool:
        if not isinstance(other, Fitness):
            return NotImplemented
        return self.oriented_value < other.oriented_value


FitnessLike = Union[float, int, Fitness, Sequence[Union[float, int, Fitness]]]


def as_fitnesses(result: FitnessLike) -> List[Fitness]:
    """
    Normalize an evaluator result into a list of Fitness values.

    Plain numbers are treated as maximizing scores.

    Args:
        result: A number, a Fitness, or a sequence of either

    Returns:
        List of Fitness (one per objective)

    Raises:
        ValueError: If the result is empty
    """
    if isinstance(result, (Fitness, int, float)):
        items = [result]
    else:
        items = list(result)

    if not items:
        raise ValueError("Fitness evaluator returned no objectives")

    return [item if isinstance(item, Fitness) else Fitness(float(item)) for item in items]


class Genome:
    """
    One candidate solution: an ordered mapping of locus key to Gene plus
    one or more fitness values.

    The genome tracks whether it needs to be (re)evaluated. Any gene that
    is put or replaced sets ``evaluation_needed``; assigning fitness clears it.
    Iteration order over loci is insertion order, which keeps crossover
    cut-points reproducible within a run.
    """

    def __init__(
        self,
        genes: Optional[Dict[Hashable, Gene]] = None,
        fitnesses: Optional[Iterable[Fitness]] = None,
        evaluation_needed: bool = True
    ):
        self._genes: Dict[Hashable, Gene] = dict(genes) if genes else {}
        self._fitnesses: List[Fitness] = list(fitnesses) if fitnesses else []
        self.evaluation_needed = evaluation_needed

    @property
    def genes(self) -> Dict[Hashable, Gene]:
        """Locus-to-gene mapping. Change it through put_gene/replace_gene so the dirty flag stays correct."""
        return self._genes

    def keys(self) -> List[Hashable]:
        return list(self._genes.keys())

    def get_gene(self, key: Hashable) -> Optional[Gene]:
        return self._genes.get(key)

    def has_gene(self, key: Hashable) -> bool:
        return key in self._genes

    def put_gene(self, key: Hashable, gene: Gene) -> None:
        """Add a gene at a new or existing locus and mark the genome dirty."""
        self._genes[key] = gene
        self.evaluation_needed = True

    def replace_gene(self, key: Hashable, gene: Gene) -> None:
        """
        Replace the gene at an existing locus and mark the genome dirty.

        Raises:
            KeyError: If the locus does not exist
        """
        if key not in self._genes:
            raise KeyError(f"Cannot replace gene at missing locus {key!r}")
        self._genes[key] = gene
        self.evaluation_needed = True

    def restore_genes(self, genes: Dict[Hashable, Gene]) -> None:
        """Put back a previously saved locus-to-gene mapping. Marks the genome dirty."""
        self._genes = dict(genes)
        self.evaluation_needed = True

    def size(self) -> int:
        return len(self._genes)

    def __len__(self) -> int:
        return len(self._genes)

    @property
    def fitnesses(self) -> List[Fitness]:
        return list(self._fitnesses)

    @property
    def fitness(self) -> Optional[Fitness]:
        """Primary (first) objective, or None if never evaluated."""
        return self._fitnesses[0] if self._fitnesses else None

    def set_fitnesses(self, fitnesses: FitnessLike) -> None:
        """Assign fitness and clear the evaluation-needed flag."""
        self._fitnesses = as_fitnesses(fitnesses)
        self.evaluation_needed = False

    def restore_fitnesses(self, fitnesses: List[Fitness]) -> None:
        """Put back a previously saved fitness list without re-evaluating."""
        self._fitnesses = list(fitnesses)
        self.evaluation_needed = False

    def has_fitness(self) -> bool:
        return bool(self._fitnesses)

    def sort_key(self) -> tuple:
        """
        Total ordering key: objectives compared lexicographically with
        "higher is better" orientation. Unevaluated genomes sort first.
        """
        if not self._fitnesses:
            return (0, ())
        return (1, tuple(f.oriented_value for f in self._fitnesses))

    def compare_to(self, other: "Genome") -> int:
        """
        Compare two genomes by fitness.

        Single objective: sign of the oriented difference. Multiple
        objectives: 1 if this genome Pareto-dominates the other, -1 if it is
        dominated, 0 otherwise.
        """
        if len(self._fitnesses) > 1 or len(other._fitnesses) > 1:
            mine = [f.oriented_value for f in self._fitnesses]
            theirs = [f.oriented_value for f in other._fitnesses]
            if dominates(mine, theirs):
                return 1
            if dominates(theirs, mine):
                return -1
            return 0

        mine, theirs = self.sort_key(), other.sort_key()
        if mine > theirs:
            return 1
        if mine < theirs:
            return -1
        return 0

    def clone(self) -> "Genome":
        """
        Create a deep copy of this genome.

        Returns:
            New Genome with copied genes, the same fitness values and the same
            evaluation-needed flag
        """
        return Genome(
            genes={key: gene.clone() for key, gene in self._genes.items()},
            fitnesses=self._fitnesses,
            evaluation_needed=self.evaluation_needed
        )

    def __repr__(self) -> str:
        fitness = ", ".join(f"{f.value:.6g}" for f in self._fitnesses) or "unevaluated"
        return f"Genome(loci={len(self._genes)}, fitness=[{fitness}])"


@dataclass(frozen=True)
class Parents:
    """
    Two genomes selected for crossover.

    The pair references genomes owned by a population; it never copies or
    owns them.
    """
    mom: Genome = field(compare=False)
    dad: Genome = field(compare=False)
