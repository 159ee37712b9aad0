"""
Pareto ordering for genomes.

Single-objective populations sort by fitness. With several objectives,
genomes are grouped into buckets of mutually non-dominated individuals and
the buckets are laid out worst-first, so the last element is always a
member of the non-dominated front.
"""

from typing import TYPE_CHECKING, List, Sequence

if TYPE_CHECKING:
    from .data_models import Genome


def dominates(p: Sequence[float], q: Sequence[float]) -> bool:
    """Returns True if p Pareto-dominates q (i.e., p is >= in all and > in at least one)."""
    return all(p_i >= q_i for p_i, q_i in zip(p, q)) and any(
        p_i > q_i for p_i, q_i in zip(p, q)
    )


def _compare_to_bucket(individual: "Genome", bucket: List["Genome"]) -> int:
    for other in bucket:
        comparison = individual.compare_to(other)

        if comparison < 0:
            return -1
        elif comparison > 0:
            return 1

    return 0


def pareto_sort(individuals: List["Genome"]) -> None:
    """
    Sort genomes in place, worst first.

    Args:
        individuals: Genomes to sort (modified in place)
    """
    if not individuals:
        return

    if len(individuals[0].fitnesses) <= 1:
        individuals.sort(key=lambda genome: genome.sort_key())
        return

    buckets: List[List["Genome"]] = []

    for individual in individuals:
        bucket = None

        for i, existing in enumerate(buckets):
            comparison = _compare_to_bucket(individual, existing)

            if comparison < 0:
                # Dominated by this front: open a new, worse front before it
                bucket = []
                buckets.insert(i, bucket)
                break
            elif comparison == 0:
                bucket = existing
                break

        if bucket is None:
            bucket = []
            buckets.append(bucket)

        bucket.append(individual)

    individuals[:] = [genome for bucket in buckets for genome in bucket]


def best_of(individuals: List["Genome"]) -> "Genome":
    """
    Return the genome that dominates, or is tied with, every other one.

    Raises:
        ValueError: If individuals is empty
    """
    if not individuals:
        raise ValueError("Cannot pick the best of an empty collection")

    ranked = list(individuals)
    pareto_sort(ranked)
    return ranked[-1]
