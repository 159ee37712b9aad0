"""
Weighted sampling for roulette-wheel selection.

The wheel is a binary search tree over cumulative weights. Nodes are
inserted from a list that is already ordered by cumulative value, always
taking the middle element first, so the tree stays balanced and a lookup
costs O(log n).
"""

from dataclasses import dataclass
from typing import List, Optional, Sequence

import numpy as np
from loguru import logger


@dataclass
class BinaryRouletteNode:
    """
    One slot on the roulette wheel.

    Attributes:
        index: Position of the weighted item in the caller's list
        value: Cumulative weight up to and including this item
    """
    index: int
    value: float
    less_than: Optional["BinaryRouletteNode"] = None
    greater_than: Optional["BinaryRouletteNode"] = None


class BinaryRouletteTree:
    """Binary tree keyed by cumulative weight."""

    def __init__(self):
        self.root: Optional[BinaryRouletteNode] = None

    def insert(self, to_insert: BinaryRouletteNode) -> None:
        if self.root is None:
            self.root = to_insert
            return

        parent = self.root
        while True:
            if to_insert.value < parent.value:
                if parent.less_than is None:
                    parent.less_than = to_insert
                    return
                parent = parent.less_than
            else:
                # Equal values go right
                if parent.greater_than is None:
                    parent.greater_than = to_insert
                    return
                parent = parent.greater_than

    def insert_balanced(self, nodes: Sequence[BinaryRouletteNode]) -> None:
        """
        Insert nodes (sorted by value) median-first.

        Args:
            nodes: Nodes ordered by ascending cumulative value
        """
        if not nodes:
            return

        half = len(nodes) // 2
        self.insert(nodes[half])

        self.insert_balanced(nodes[:half])
        self.insert_balanced(nodes[half + 1:])

    def find(self, value: float) -> Optional[BinaryRouletteNode]:
        """
        Find the node whose cumulative interval contains value.

        A node owns the half-open interval (previous value, node value]. A
        value beyond the last boundary resolves to the greatest node.

        Args:
            value: Cumulative weight to locate, normally in [0, total weight)

        Returns:
            Matching node, or None if the tree is empty
        """
        if self.root is None:
            return None

        current = self.root
        # Smallest node passed so far whose value is >= the searched value
        closest_so_far = None

        while True:
            if value <= current.value:
                closest_so_far = current

                if current.less_than is None:
                    return current

                current = current.less_than
            else:
                if current.greater_than is None:
                    return closest_so_far if closest_so_far is not None else current

                current = current.greater_than


def build_roulette_tree(weights: Sequence[float]) -> tuple:
    """
    Build a balanced tree from raw (non-cumulative) weights.

    Zero weights are skipped so they can never be drawn.

    Args:
        weights: One non-negative weight per item

    Returns:
        Tuple of (tree, total_weight)
    """
    tree = BinaryRouletteTree()
    nodes: List[BinaryRouletteNode] = []
    total = 0.0

    for i, weight in enumerate(weights):
        if weight is None or weight == 0.0:
            continue

        total += weight
        nodes.append(BinaryRouletteNode(i, total))

    if total > 0.0:
        tree.insert_balanced(nodes)

    return tree, total


class RouletteSampler:
    """
    Sampler over an explicit probability distribution.

    Call reindex() with probabilities that sum to 1, then draw indices with
    get_next_index().
    """

    def __init__(self):
        self._tree: Optional[BinaryRouletteTree] = None
        self._total = 0.0

    def reindex(self, probabilities: Sequence[float]) -> float:
        """
        Rebuild the wheel.

        Args:
            probabilities: Probability per item

        Returns:
            Sum of the probabilities, or -1 if the distribution is unusable
        """
        if not probabilities:
            logger.error("Attempted to index a null or empty probability distribution. Unable to continue.")
            return -1

        self._tree, total = build_roulette_tree(probabilities)

        if abs(1.0 - total) > 0.0001:
            logger.error(
                f"Attempted to index a probability distribution that does not sum to 1. "
                f"The sum is {total}. Unable to continue."
            )
            self._tree = None
            return -1

        self._total = total
        return total

    def get_next_index(self, rng: np.random.Generator) -> int:
        """
        Draw one index.

        Returns:
            Index into the indexed distribution, or -1 if not indexed
        """
        if self._tree is None:
            logger.warning("Roulette sampler has not been indexed. Call reindex() first.")
            return -1

        return self._tree.find(rng.random() * self._total).index
