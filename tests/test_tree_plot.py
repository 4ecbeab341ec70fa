import sys
import os
import tempfile
import unittest

import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt
import numpy as np

sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

from binary_heap import BinaryHeap
from binary_search_tree import BinarySearchTree
from red_black_tree import RedBlackTree
from tree_plot import LEVEL_GAP, OFFSET_DECAY, ROOT_OFFSET, draw_step, layout, save_walkthrough


class TestLayout(unittest.TestCase):
    def test_empty_snapshot(self):
        nodes, positions, edges = layout(None)
        self.assertEqual(nodes, [])
        self.assertEqual(positions.shape, (0, 2))
        self.assertEqual(edges, [])

    def test_positions(self):
        tree = BinarySearchTree()
        for v in (5, 3, 8, 1):
            tree.insert(v)
        snapshot = tree.search(5)[-1].tree
        nodes, positions, edges = layout(snapshot)
        self.assertEqual([n.value for n in nodes], [5, 3, 1, 8])
        np.testing.assert_allclose(positions[0], [0.0, 0.0])
        np.testing.assert_allclose(positions[1], [-ROOT_OFFSET, -LEVEL_GAP])
        np.testing.assert_allclose(
            positions[2], [-ROOT_OFFSET - ROOT_OFFSET * OFFSET_DECAY, -2 * LEVEL_GAP]
        )
        np.testing.assert_allclose(positions[3], [ROOT_OFFSET, -LEVEL_GAP])
        self.assertEqual(sorted(edges), [(0, 1), (0, 3), (1, 2)])


class TestDrawing(unittest.TestCase):
    def tearDown(self):
        plt.close("all")

    def test_draw_red_black_step(self):
        tree = RedBlackTree()
        steps = []
        for v in (10, 20, 30):
            steps.extend(tree.insert(v))
        ax = draw_step(steps[-1])
        self.assertEqual(len(ax.patches), 3)
        self.assertEqual(ax.get_title(), steps[-1].description)

    def test_draw_empty_step(self):
        steps = BinaryHeap().remove()
        ax = draw_step(steps[0])
        self.assertEqual(len(ax.patches), 0)

    def test_save_walkthrough(self):
        heap = BinaryHeap()
        steps = []
        for v in (5, 3, 8):
            steps.extend(heap.insert(v))
        steps.extend(heap.sort())
        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, "walkthrough.pdf")
            pages = save_walkthrough(steps, path, title="Heap")
            self.assertEqual(pages, len(steps))
            self.assertGreater(os.path.getsize(path), 0)


if __name__ == "__main__":
    unittest.main()
