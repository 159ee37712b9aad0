"""
Crossover operators.

Every operator has the signature ``(parent_a, parent_b, rng) -> child``.
The child always starts as a clone of one parent; the parents are only
read, never modified.
"""

from typing import Callable, Dict

import numpy as np

from .data_models import Genome, Parents
from .errors import ConfigValidationError, GenomeShapeError

CrossoverOperator = Callable[[Genome, Genome, np.random.Generator], Genome]


def _copy_if_different(child: Genome, donor: Genome, key) -> bool:
    donor_gene = donor.get_gene(key)
    if donor_gene is None or donor_gene == child.get_gene(key):
        return False

    child.replace_gene(key, donor_gene.clone())
    return True


def single_point_crossover(parent_a: Genome, parent_b: Genome, rng: np.random.Generator) -> Genome:
    """
    Cut both parents at one random locus ordinal.

    A coin flip picks which parent is cloned into the child (the recipient).
    Every locus from ordinal 0 up to and including the cut point is then
    taken from the other parent (the donor).

    Args:
        parent_a: First parent
        parent_b: Second parent
        rng: Random number generator

    Returns:
        Child genome

    Raises:
        GenomeShapeError: If the donor lacks a locus the recipient has
    """
    if rng.random() < 0.5:
        recipient, donor = parent_a, parent_b
    else:
        recipient, donor = parent_b, parent_a

    child = recipient.clone()
    keys = child.keys()

    if not keys:
        return child

    cut = int(rng.integers(0, len(keys)))

    for key in keys[:cut + 1]:
        donor_gene = donor.get_gene(key)

        if donor_gene is None:
            raise GenomeShapeError(
                f"Donor genome has no gene at locus {key!r}; parents must share the same loci"
            )

        child.replace_gene(key, donor_gene.clone())

    return child


def uniform_crossover(parent_a: Genome, parent_b: Genome, rng: np.random.Generator) -> Genome:
    """
    Clone parent A, then take each locus from parent B on a fair coin flip.

    Loci that parent B lacks, or where both parents already agree, are left
    alone.
    """
    child = parent_a.clone()

    for key in child.keys():
        if rng.random() < 0.5:
            _copy_if_different(child, parent_b, key)

    return child


def single_gene_crossover(parent_a: Genome, parent_b: Genome, rng: np.random.Generator) -> Genome:
    """Clone parent A and take exactly one random locus from parent B."""
    child = parent_a.clone()
    keys = child.keys()

    if keys:
        _copy_if_different(child, parent_b, keys[int(rng.integers(0, len(keys)))])

    return child


def multiple_gene_crossover(parent_a: Genome, parent_b: Genome, rng: np.random.Generator) -> Genome:
    """Clone parent A and take a random-sized subset of distinct loci from parent B."""
    child = parent_a.clone()
    keys = child.keys()

    if not keys:
        return child

    count = int(rng.integers(1, len(keys) + 1))
    for position in rng.choice(len(keys), size=count, replace=False):
        _copy_if_different(child, parent_b, keys[int(position)])

    return child


CROSSOVER_OPERATORS: Dict[str, CrossoverOperator] = {
    'single_point': single_point_crossover,
    'uniform': uniform_crossover,
    'single_gene': single_gene_crossover,
    'multiple_gene': multiple_gene_crossover,
}


def get_crossover_operator(name: str) -> CrossoverOperator:
    """
    Resolve a crossover operator by name.

    Raises:
        ConfigValidationError: If the name is unknown
    """
    if name not in CROSSOVER_OPERATORS:
        raise ConfigValidationError(
            f"Unknown crossover operator: '{name}'. Must be one of {sorted(CROSSOVER_OPERATORS)}"
        )
    return CROSSOVER_OPERATORS[name]


def apply_crossover(parents: Parents, strategy, rng: np.random.Generator) -> Genome:
    """
    Cross a selected pair with the strategy's operator.

    Args:
        parents: Pair chosen by the selector
        strategy: GeneticAlgorithmStrategy
        rng: Random number generator owned by the calling task

    Returns:
        Child genome
    """
    return strategy.crossover(parents.mom, parents.dad, rng)

