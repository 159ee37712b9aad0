"""
Mutation operators.

Every operator has the signature ``(genome, strategy, rng) -> bool`` and
mutates the genome in place. The return value is True iff at least one
gene actually changed value. Replacement genes are drawn from the
strategy's gene DAO.

Fitness-guaranteed variants retry a base operator up to
``max_mutation_attempts`` times and keep a mutation only if it strictly
improves fitness. A failed attempt is reverted completely: genes, fitness
and evaluation flag all return to their pre-call values.
"""

from typing import Callable, Dict, List

import numpy as np
from loguru import logger

from .data_models import Fitness, Gene, Genome, as_fitnesses
from .errors import ConfigValidationError
from .sorting import dominates

MutationOperator = Callable[[Genome, object, np.random.Generator], bool]


def _replace_with_random(genome: Genome, key, strategy, rng: np.random.Generator) -> bool:
    new_gene: Gene = strategy.gene_dao.random_gene(genome, rng)

    if new_gene == genome.get_gene(key):
        return False

    genome.replace_gene(key, new_gene)
    return True


def draw_mutation_count(strategy, rng: np.random.Generator, limit: int) -> int:
    """
    Draw how many distinct loci to mutate.

    'uniform' draws from 1..min(max_mutations_per_individual, limit).
    'geometric' starts at one and adds another mutation while a draw does
    not hit ``mutation_stop_probability``.

    Args:
        strategy: GeneticAlgorithmStrategy
        rng: Random number generator
        limit: Number of loci available

    Returns:
        Mutation count in [1, limit], or 0 if limit is 0
    """
    upper = min(strategy.max_mutations_per_individual, limit)
    if upper <= 0:
        return 0

    if strategy.mutation_count_distribution == 'geometric':
        count = 1
        while count < upper and rng.random() >= strategy.mutation_stop_probability:
            count += 1
        return count

    return int(rng.integers(1, upper + 1))


def standard_mutation(genome: Genome, strategy, rng: np.random.Generator) -> bool:
    """Replace each gene independently with probability ``mutation_rate``."""
    changed = False

    for key in genome.keys():
        if rng.random() < strategy.mutation_rate:
            changed = _replace_with_random(genome, key, strategy, rng) or changed

    return changed


def mandatory_single_mutation(genome: Genome, strategy, rng: np.random.Generator) -> bool:
    """Replace the gene at exactly one random locus."""
    keys = genome.keys()
    if not keys:
        return False

    return _replace_with_random(genome, keys[int(rng.integers(0, len(keys)))], strategy, rng)


def multiple_mutation(genome: Genome, strategy, rng: np.random.Generator) -> bool:
    """Replace the genes at k distinct random loci, k from the configured distribution."""
    keys = genome.keys()
    count = draw_mutation_count(strategy, rng, len(keys))
    if count == 0:
        return False

    changed = False
    for position in rng.choice(len(keys), size=count, replace=False):
        changed = _replace_with_random(genome, keys[int(position)], strategy, rng) or changed

    return changed


def _improves(new: List[Fitness], old: List[Fitness]) -> bool:
    if len(new) > 1 or len(old) > 1:
        return dominates([f.oriented_value for f in new], [f.oriented_value for f in old])
    return new[0].is_better_than(old[0])


def guaranteed(base: MutationOperator) -> MutationOperator:
    """
    Wrap a base operator so that only strictly improving mutations are kept.

    Args:
        base: Rate- or count-based operator to retry

    Returns:
        Operator returning False (genome unchanged) when no attempt improved
    """

    def mutate_until_improved(genome: Genome, strategy, rng: np.random.Generator) -> bool:
        evaluator = strategy.fitness_evaluator

        if genome.evaluation_needed or not genome.has_fitness():
            genome.set_fitnesses(evaluator.evaluate(genome))

        original_genes = dict(genome.genes)
        original_fitnesses = genome.fitnesses

        for attempt in range(strategy.max_mutation_attempts):
            if not base(genome, strategy, rng):
                continue

            candidate = as_fitnesses(evaluator.evaluate(genome))

            if _improves(candidate, original_fitnesses):
                genome.set_fitnesses(candidate)
                logger.debug(f"Improving mutation found after {attempt + 1} attempt(s)")
                return True

            genome.restore_genes(original_genes)
            genome.restore_fitnesses(original_fitnesses)

        return False

    mutate_until_improved.__name__ = f"{base.__name__}_guaranteed"
    return mutate_until_improved


standard_guaranteed_mutation = guaranteed(standard_mutation)
multiple_guaranteed_mutation = guaranteed(multiple_mutation)


MUTATION_OPERATORS: Dict[str, MutationOperator] = {
    'standard': standard_mutation,
    'mandatory_single': mandatory_single_mutation,
    'multiple': multiple_mutation,
    'standard_guaranteed': standard_guaranteed_mutation,
    'multiple_guaranteed': multiple_guaranteed_mutation,
}


def get_mutation_operator(name: str) -> MutationOperator:
    """
    Resolve a mutation operator by name.

    Raises:
        ConfigValidationError: If the name is unknown
    """
    if name not in MUTATION_OPERATORS:
        raise ConfigValidationError(
            f"Unknown mutation operator: '{name}'. Must be one of {sorted(MUTATION_OPERATORS)}"
        )
    return MUTATION_OPERATORS[name]

