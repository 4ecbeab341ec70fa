import sys
import os
import random
import unittest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

from red_black_tree import DUPLICATE_RULE, RedBlackTree
from tree_node import BLACK, RED


def build(values, **kwargs):
    tree = RedBlackTree(**kwargs)
    steps = []
    for v in values:
        steps.extend(tree.insert(v))
    return tree, steps


def fixup_cases(steps):
    return [s.metadata["case"] for s in steps if "case" in s.metadata and s.type == "insert"]


def rotations(steps):
    return [s.metadata["rotation"] for s in steps if "rotation" in s.metadata]


class TestRedBlackTreeInsert(unittest.TestCase):
    def test_new_tree_is_valid(self):
        tree = RedBlackTree()
        self.assertTrue(tree.is_valid())
        self.assertEqual(tree.black_height(), 1)
        self.assertTrue(tree.is_empty())

    def test_root_is_black(self):
        tree, steps = build([10])
        self.assertEqual(tree.root.color, BLACK)
        self.assertEqual(steps[0].tree.color, BLACK)
        self.assertEqual(tree.root.id, "rbt-0")

    def test_child_is_red(self):
        tree, _ = build([10, 5])
        self.assertEqual(tree.root.left.color, RED)

    def test_line_case_rotates_grandparent(self):
        tree, steps = build([10, 20, 30])
        self.assertEqual(fixup_cases(steps), ["line"])
        self.assertEqual(rotations(steps), ["left"])
        self.assertEqual(tree.root.value, 20)
        self.assertEqual(tree.root.color, BLACK)
        self.assertEqual(tree.root.left.color, RED)
        self.assertEqual(tree.root.right.color, RED)

    def test_triangle_case_rotates_twice(self):
        tree, steps = build([10, 30, 20])
        self.assertEqual(fixup_cases(steps), ["triangle", "line"])
        self.assertEqual(rotations(steps), ["right", "left"])
        self.assertEqual(tree.root.value, 20)
        self.assertTrue(tree.is_valid())

    def test_recolor_case_reaches_root(self):
        tree, steps = build([20, 10, 30])
        steps = tree.insert(40)
        self.assertEqual(fixup_cases(steps), ["recolor"])
        self.assertTrue(any(s.description == "Root recolored black" for s in steps))
        self.assertEqual(tree.root.color, BLACK)
        self.assertEqual(tree.root.left.color, BLACK)
        self.assertEqual(tree.root.right.color, BLACK)
        self.assertEqual(tree.root.right.right.color, RED)

    def test_mixed_sequence_ends_valid(self):
        tree, steps = build([10, 20, 30, 40, 50, 25])
        self.assertTrue(tree.is_valid())
        self.assertEqual(tree.root.color, BLACK)
        self.assertEqual(tree.root.value, 20)
        self.assertEqual(tree.in_order(), [10, 20, 25, 30, 40, 50])
        self.assertEqual(tree.black_height(), 3)
        self.assertEqual(fixup_cases(steps), ["line", "recolor", "line", "recolor"])
        self.assertEqual(steps[-1].metadata["black_height"], 3)

    def test_every_insert_keeps_properties(self):
        tree = RedBlackTree()
        for v in random.Random(3).sample(range(200), 120):
            tree.insert(v)
            self.assertTrue(tree.is_valid())
        self.assertEqual(tree.size(), 120)

    def test_duplicate_is_rejected_with_error_step(self):
        tree, _ = build([10, 5])
        steps = tree.insert(5)
        self.assertEqual(len(steps), 1)
        self.assertEqual(steps[0].severity, "error")
        self.assertEqual(steps[0].rule_broken, DUPLICATE_RULE)
        self.assertEqual(tree.size(), 2)
        self.assertEqual(tree.in_order(), [5, 10])

    def test_rotation_steps_keep_full_tree(self):
        _, steps = build([10, 20, 30, 40, 50])
        for step in steps:
            if "rotation" in step.metadata:
                self.assertGreaterEqual(step.tree.size(), 3)

    def test_snapshots_carry_colors(self):
        _, steps = build([10, 20])
        tree_dict = steps[-1].tree.to_dict()
        self.assertEqual(tree_dict["color"], "black")
        self.assertEqual(tree_dict["right"]["color"], "red")


class TestRedBlackTreeRemove(unittest.TestCase):
    def test_remove_missing_value(self):
        tree, _ = build([10])
        steps = tree.remove(3)
        self.assertEqual(len(steps), 1)
        self.assertEqual(steps[0].severity, "warning")

    def test_remove_red_leaf(self):
        tree, _ = build([10, 20, 30])
        steps = tree.remove(10)
        self.assertEqual(tree.in_order(), [20, 30])
        self.assertTrue(steps[-1].metadata["color_invariants_hold"])

    def test_remove_two_children_uses_successor(self):
        tree, _ = build([10, 20, 30])
        steps = tree.remove(20)
        successor = [s for s in steps if s.metadata.get("case") == "two-children"]
        self.assertEqual(successor[0].metadata["successor"], 30)
        self.assertEqual(tree.root.value, 30)
        self.assertEqual(tree.in_order(), [10, 30])
        self.assertEqual(tree.size(), 2)

    def test_structural_remove_can_break_colors(self):
        tree, _ = build([20, 10, 30, 40])
        steps = tree.remove(10)
        self.assertEqual(tree.in_order(), [20, 30, 40])
        self.assertFalse(tree.is_valid())
        self.assertFalse(steps[-1].metadata["color_invariants_hold"])
        self.assertEqual(steps[-1].explanation, "Node spliced out without recoloring")

    def test_rebalancing_remove_keeps_colors(self):
        tree, _ = build([20, 10, 30, 40], rebalance_on_remove=True)
        steps = tree.remove(10)
        self.assertEqual(tree.in_order(), [20, 30, 40])
        self.assertTrue(tree.is_valid())
        self.assertTrue(steps[-1].metadata["color_invariants_hold"])
        self.assertTrue(any("rotation" in s.metadata for s in steps))
        self.assertTrue(all(s.type == "remove" for s in steps))

    def test_rebalancing_remove_random_sequence(self):
        rng = random.Random(11)
        values = rng.sample(range(500), 150)
        tree, _ = build(values, rebalance_on_remove=True)
        rng.shuffle(values)
        for v in values:
            tree.remove(v)
            self.assertTrue(tree.is_valid())
            self.assertNotIn(v, tree)
        self.assertTrue(tree.is_empty())

    def test_remove_last_node(self):
        tree, _ = build([10], rebalance_on_remove=True)
        tree.remove(10)
        self.assertIsNone(tree.root)
        self.assertTrue(tree.is_valid())


class TestRedBlackTreeSearch(unittest.TestCase):
    def test_search_reports_color(self):
        tree, _ = build([10, 20, 30])
        steps = tree.search(10)
        self.assertEqual(steps[0].metadata["color"], BLACK)
        self.assertEqual(steps[1].metadata["color"], RED)
        self.assertTrue(steps[-1].metadata["found"])

    def test_traversal(self):
        tree, _ = build([10, 20, 30])
        self.assertEqual(tree.traverse("levelorder").order, [20, 10, 30])


if __name__ == "__main__":
    unittest.main()
