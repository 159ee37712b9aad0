"""
Tests for the binary roulette tree and the roulette sampler.
"""

import unittest

import numpy as np

from ga_engine.roulette import (
    BinaryRouletteNode,
    BinaryRouletteTree,
    RouletteSampler,
    build_roulette_tree
)


class FixedDraw:
    """Random source whose random() always returns the same value."""

    def __init__(self, value):
        self.value = value

    def random(self):
        return self.value


class TestBinaryRouletteTree(unittest.TestCase):
    """Test balanced insertion and interval lookup."""

    def setUp(self):
        """Build a three-node tree with boundaries 0.2, 0.5 and 0.9."""
        self.tree = BinaryRouletteTree()
        self.tree.insert_balanced([
            BinaryRouletteNode(0, 0.2),
            BinaryRouletteNode(1, 0.5),
            BinaryRouletteNode(2, 0.9),
        ])

    def test_median_becomes_root(self):
        """Test the median node is inserted first."""
        self.assertEqual(self.tree.root.value, 0.5)
        self.assertEqual(self.tree.root.less_than.value, 0.2)
        self.assertEqual(self.tree.root.greater_than.value, 0.9)

    def test_find_rounds_up_to_boundary(self):
        """Test a value resolves to the node whose interval contains it."""
        self.assertEqual(self.tree.find(0.3).value, 0.5)
        self.assertEqual(self.tree.find(0.1).value, 0.2)
        self.assertEqual(self.tree.find(0.7).value, 0.9)

    def test_find_on_boundary(self):
        """Test a value equal to a boundary belongs to that node."""
        self.assertEqual(self.tree.find(0.2).value, 0.2)
        self.assertEqual(self.tree.find(0.5).value, 0.5)

    def test_find_above_last_boundary(self):
        """Test a value beyond every interval resolves to the greatest node."""
        self.assertEqual(self.tree.find(0.95).value, 0.9)
        self.assertEqual(self.tree.find(10.0).index, 2)

    def test_find_through_left_subtree(self):
        """Test values past a left subtree resolve to its parent or the greatest node."""
        tree = BinaryRouletteTree()
        tree.insert(BinaryRouletteNode(1, 0.6))
        tree.insert(BinaryRouletteNode(0, 0.3))
        tree.insert(BinaryRouletteNode(2, 0.45))

        self.assertEqual(tree.find(0.5).index, 1)
        self.assertEqual(tree.find(0.7).index, 1)

    def test_single_node_tree(self):
        """Test a single-node tree resolves every value to its node."""
        tree = BinaryRouletteTree()
        tree.insert(BinaryRouletteNode(7, 0.4))

        for value in (0.0, 0.4, 0.99, 5.0):
            self.assertEqual(tree.find(value).index, 7)

    def test_empty_tree(self):
        """Test lookup in an empty tree returns None."""
        self.assertIsNone(BinaryRouletteTree().find(0.5))

    def test_deeper_tree_lookup(self):
        """Test interval lookup in a seven-node balanced tree."""
        nodes = [BinaryRouletteNode(i, float(i + 1)) for i in range(7)]
        tree = BinaryRouletteTree()
        tree.insert_balanced(nodes)

        self.assertEqual(tree.root.value, 4.0)
        for value, expected in [(0.5, 0), (1.5, 1), (2.5, 2), (3.5, 3), (4.5, 4), (5.5, 5), (6.5, 6)]:
            self.assertEqual(tree.find(value).index, expected)

    def test_build_skips_zero_weights(self):
        """Test zero and missing weights never get a node."""
        tree, total = build_roulette_tree([0.0, 0.5, None, 0.5])

        self.assertAlmostEqual(total, 1.0)
        self.assertEqual(tree.find(0.25).index, 1)
        self.assertEqual(tree.find(0.75).index, 3)


class TestRouletteSampler(unittest.TestCase):
    """Test sampling from an explicit distribution."""

    def test_empirical_frequencies_match_weights(self):
        """Test a million draws reproduce the weights within 0.001."""
        weights = [0.02, 0.03, 0.05, 0.9]
        sampler = RouletteSampler()
        self.assertAlmostEqual(sampler.reindex(weights), 1.0)

        rng = np.random.default_rng(42)
        draws = 1_000_000
        counts = np.zeros(len(weights))

        for _ in range(draws):
            counts[sampler.get_next_index(rng)] += 1

        for weight, count in zip(weights, counts):
            self.assertAlmostEqual(count / draws, weight, delta=0.001)

    def test_draws_scale_to_slightly_short_total(self):
        """Test a draw near 1 lands on the last item when the sum is just under 1."""
        sampler = RouletteSampler()
        sampler.reindex([0.25, 0.25, 0.25, 0.24995])

        self.assertEqual(sampler.get_next_index(FixedDraw(0.99999)), 3)
        self.assertEqual(sampler.get_next_index(FixedDraw(0.74)), 2)
        self.assertEqual(sampler.get_next_index(FixedDraw(0.0)), 0)

    def test_rejects_empty_distribution(self):
        """Test an empty distribution is reported with -1."""
        self.assertEqual(RouletteSampler().reindex([]), -1)

    def test_rejects_distribution_not_summing_to_one(self):
        """Test a distribution far from 1 is rejected and leaves nothing indexed."""
        sampler = RouletteSampler()

        self.assertEqual(sampler.reindex([0.2, 0.2]), -1)
        self.assertEqual(sampler.get_next_index(np.random.default_rng(0)), -1)

    def test_unindexed_sampler_returns_sentinel(self):
        """Test drawing before reindex returns -1."""
        self.assertEqual(RouletteSampler().get_next_index(np.random.default_rng(0)), -1)


if __name__ == '__main__':
    unittest.main()
