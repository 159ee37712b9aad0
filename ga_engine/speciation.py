"""
Speciation operators.

A speciation operator splits one list of genomes into
``speciation_factor`` sub-populations. Every genome ends up in exactly
one sub-population and no sub-population is empty.
"""

from typing import Callable, Dict, List

from .data_models import Genome
from .errors import ConfigValidationError
from .sorting import best_of, pareto_sort

SpeciationOperator = Callable[[List[Genome], int], List[List[Genome]]]


def _validate(individuals: List[Genome], speciation_factor: int) -> None:
    if speciation_factor <= 0:
        raise ValueError(f"speciation_factor must be greater than zero, got {speciation_factor}")

    if not individuals:
        raise ValueError("Cannot speciate an empty population")

    if speciation_factor > len(individuals):
        raise ValueError(
            f"speciation_factor ({speciation_factor}) cannot exceed the population size ({len(individuals)})"
        )


def fitness_speciation(individuals: List[Genome], speciation_factor: int) -> List[List[Genome]]:
    """
    Split into contiguous fitness bands.

    The genomes are sorted worst-first and cut into slices of
    ``size // speciation_factor``; the last slice also takes the remainder.

    Args:
        individuals: Genomes to split (not modified)
        speciation_factor: Number of sub-populations

    Returns:
        List of genome lists, worst band first

    Raises:
        ValueError: If the factor is not positive, the population is empty,
                    or the factor exceeds the population size
    """
    _validate(individuals, speciation_factor)

    ranked = list(individuals)
    pareto_sort(ranked)

    return _slice(ranked, speciation_factor)


def hamming_distance(a: Genome, b: Genome) -> int:
    """Number of loci where the two genomes differ (missing loci count as different)."""
    keys = set(a.keys()) | set(b.keys())
    return sum(1 for key in keys if a.get_gene(key) != b.get_gene(key))


def _slice(ranked: List[Genome], speciation_factor: int) -> List[List[Genome]]:
    slice_size = len(ranked) // speciation_factor
    species = []

    for i in range(speciation_factor):
        start = i * slice_size
        end = len(ranked) if i == speciation_factor - 1 else start + slice_size
        species.append(ranked[start:end])

    return species


def proximity_speciation(individuals: List[Genome], speciation_factor: int) -> List[List[Genome]]:
    """
    Split into neighbourhoods of genotype space.

    Genomes are ordered by Hamming distance from the best genome (stable
    for ties) and cut into slices the same way fitness_speciation cuts
    fitness bands, so the first sub-population holds the best genome and its
    closest relatives.

    Args:
        individuals: Genomes to split (not modified)
        speciation_factor: Number of sub-populations

    Returns:
        List of genome lists, nearest neighbourhood first

    Raises:
        ValueError: Same conditions as fitness_speciation
    """
    _validate(individuals, speciation_factor)

    best = best_of(individuals)
    ranked = sorted(individuals, key=lambda genome: hamming_distance(genome, best))

    return _slice(ranked, speciation_factor)


SPECIATION_OPERATORS: Dict[str, SpeciationOperator] = {
    'fitness': fitness_speciation,
    'proximity': proximity_speciation,
}


def get_speciation_operator(name: str) -> SpeciationOperator:
    """
    Resolve a speciation operator by name.

    Raises:
        ConfigValidationError: If the name is unknown
    """
    if name not in SPECIATION_OPERATORS:
        raise ConfigValidationError(
            f"Unknown speciation operator: '{name}'. Must be one of {sorted(SPECIATION_OPERATORS)}"
        )
    return SPECIATION_OPERATORS[name]
