import sys
import os
import unittest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

from binary_heap import BinaryHeap
from binary_search_tree import BinarySearchTree
from operation_log import TREE_TYPES, Operation, OperationLog


class TestOperationLog(unittest.TestCase):
    def setUp(self):
        self.log = OperationLog()

    def test_default_engines(self):
        self.assertEqual(set(self.log.engines), set(TREE_TYPES))
        self.assertIsInstance(self.log.engine("heap"), BinaryHeap)
        self.assertEqual(self.log.engine("heap").heap_type, "min")

    def test_unknown_tree_type_raises(self):
        with self.assertRaises(ValueError):
            self.log.run("splay", "insert", 1)

    def test_unknown_operation_raises(self):
        with self.assertRaises(ValueError):
            self.log.run("binary", "rotate", 1)

    def test_run_stores_operation(self):
        operation = self.log.run("binary", "insert", 5)
        self.assertIsInstance(operation, Operation)
        self.assertEqual(operation.tree_type, "binary")
        self.assertEqual(operation.type, "insert")
        self.assertEqual(operation.value, 5)
        self.assertEqual(len(operation.steps), 1)
        self.assertEqual(len(self.log), 1)
        self.assertEqual(self.log.operations[0], operation)

    def test_insert_needs_value(self):
        with self.assertRaises(ValueError):
            self.log.run("avl", "insert")

    def test_heap_remove_takes_no_value(self):
        self.log.run("heap", "insert", 4)
        operation = self.log.run("heap", "remove")
        self.assertEqual(operation.steps[0].metadata["extracted"], 4)

    def test_heap_remove_rejects_value(self):
        self.log.run("heap", "insert", 4)
        with self.assertRaises(ValueError):
            self.log.run("heap", "remove", 5)
        self.assertEqual(self.log.engine("heap").to_list(), [4])
        self.assertEqual([op.value for op in self.log.operations], [4])

    def test_traverse_and_sort_reject_value(self):
        self.log.run("heap", "insert", 4)
        with self.assertRaises(ValueError):
            self.log.run("heap", "sort", 4)
        with self.assertRaises(ValueError):
            self.log.run("binary", "traverse", 4)
        self.assertEqual(len(self.log), 1)

    def test_sort_is_heap_only(self):
        with self.assertRaises(ValueError):
            self.log.run("binary", "sort")
        self.log.run("heap", "insert", 2)
        self.log.run("heap", "insert", 1)
        operation = self.log.run("heap", "sort")
        self.assertEqual(operation.steps[-1].sorted_elements, (1, 2))

    def test_traverse_returns_order(self):
        for v in (5, 3, 8):
            self.log.run("redblack", "insert", v)
        operation = self.log.run("redblack", "traverse", kind="preorder")
        self.assertEqual(operation.order, [5, 3, 8])
        self.assertEqual(len(operation.steps), 3)

    def test_traverse_unknown_kind_raises(self):
        with self.assertRaises(ValueError):
            self.log.run("binary", "traverse", kind="zigzag")

    def test_step_filters(self):
        self.log.run("binary", "insert", 5)
        self.log.run("avl", "insert", 5)
        self.log.run("binary", "search", 5)
        self.assertEqual(len(self.log.all_steps()), 1 + 2 + 2)
        self.assertEqual(len(self.log.steps_by_type("search")), 2)
        self.assertEqual(len(self.log.steps_for_tree("avl")), 2)
        self.assertEqual(self.log.steps_for_tree("heap"), [])

    def test_all_steps_keep_order(self):
        self.log.run("binary", "insert", 5)
        self.log.run("binary", "insert", 3)
        descriptions = [s.description for s in self.log.all_steps()]
        self.assertEqual(descriptions, ["Insert 5 as root", "Insert 3 to the left of 5"])

    def test_clear_resets_log_and_engines(self):
        self.log.run("binary", "insert", 5)
        self.log.run("heap", "insert", 5)
        self.log.clear()
        self.assertEqual(len(self.log), 0)
        self.assertTrue(self.log.engine("binary").is_empty())
        self.assertTrue(self.log.engine("heap").is_empty())

    def test_custom_engines(self):
        log = OperationLog({"binary": BinarySearchTree(), "heap": BinaryHeap("max")})
        log.run("heap", "insert", 1)
        log.run("heap", "insert", 9)
        self.assertEqual(log.engine("heap").peek(), 9)
        with self.assertRaises(ValueError):
            log.engine("avl")

    def test_operations_is_a_copy(self):
        self.log.run("binary", "insert", 1)
        self.log.operations.clear()
        self.assertEqual(len(self.log), 1)


if __name__ == "__main__":
    unittest.main()
