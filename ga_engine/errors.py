"""
Exception types raised by the GA engine.
"""

from typing import Optional


class ConfigValidationError(Exception):
    """Raised when a strategy configuration is invalid."""
    pass


class GenomeShapeError(Exception):
    """Raised when two genomes do not share the loci an operator expects."""
    pass


class PopulationInvariantError(Exception):
    """
    Raised when a generation cannot refill the population.

    This is a structural misconfiguration (e.g. a selector returning too few
    pairs) and is never retried.
    """
    pass


class GenerationAbortedError(Exception):
    """
    Raised when one or more concurrent tasks of a generation phase failed.

    The first failure is chained as ``__cause__``; results of the phase are
    discarded.
    """

    def __init__(self, phase: str, failures: int, total: int, first: Optional[BaseException] = None):
        self.phase = phase
        self.failures = failures
        self.total = total
        self.first = first
        detail = f": {first!r}" if first is not None else ""
        super().__init__(f"{failures} of {total} {phase} task(s) failed{detail}")
