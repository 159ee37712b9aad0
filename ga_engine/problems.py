"""
Demonstration problem for driving the engine from the CLI and tests.

TargetSequenceProblem acts as breeder, gene DAO and fitness evaluator at
once: loci are positions, gene values are alphabet symbols and fitness is
the fraction of positions that match a target sequence.
"""

from typing import Dict, List, Sequence

import numpy as np

from .data_models import Fitness, Gene, Genome


class TargetSequenceProblem:
    """
    Match a target sequence symbol by symbol.

    Args:
        target: Sequence to reconstruct (e.g. a string)
        alphabet: Symbols genes are drawn from; must contain every target symbol
    """

    def __init__(self, target: Sequence, alphabet: Sequence):
        if not target:
            raise ValueError("Target sequence must not be empty")

        missing = set(target) - set(alphabet)
        if missing:
            raise ValueError(f"Alphabet is missing target symbols: {sorted(map(str, missing))}")

        self.target = list(target)
        self.alphabet = list(alphabet)

    def random_gene(self, genome: Genome, rng: np.random.Generator) -> Gene:
        return Gene(self.alphabet[int(rng.integers(0, len(self.alphabet)))])

    def breed(self, count: int, rng: np.random.Generator) -> List[Genome]:
        genomes = []
        for _ in range(count):
            genome = Genome()
            for position in range(len(self.target)):
                genome.put_gene(position, self.random_gene(genome, rng))
            genomes.append(genome)
        return genomes

    def evaluate(self, genome: Genome) -> Fitness:
        matches = sum(
            1 for position, symbol in enumerate(self.target)
            if genome.get_gene(position) is not None and genome.get_gene(position).value == symbol
        )
        return Fitness(matches / len(self.target), maximizing=True)

    def decode(self, genome: Genome) -> str:
        """Render a genome's gene values in locus order."""
        return "".join(str(genome.get_gene(position).value) for position in range(len(self.target)))

    @classmethod
    def from_config(cls, config: Dict) -> "TargetSequenceProblem":
        """
        Build from a run-file 'problem' section.

        Args:
            config: Mapping with 'target' and optional 'alphabet'
                    (defaults to the distinct target symbols plus space and a-z)
        """
        target = config.get('target')
        if not target:
            raise ValueError("Problem configuration requires 'target'")

        alphabet = config.get('alphabet') or sorted(set(target) | set(" abcdefghijklmnopqrstuvwxyz"))
        return cls(target, alphabet)


PROBLEMS = {
    'target_sequence': TargetSequenceProblem,
}
