import sys
import os
import random
import unittest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

from binary_heap import BinaryHeap


def build(values, heap_type="min"):
    heap = BinaryHeap(heap_type)
    for v in values:
        heap.insert(v)
    return heap


def is_heap(data, heap_type):
    for i in range(1, len(data)):
        parent = data[(i - 1) // 2]
        if heap_type == "min" and parent > data[i]:
            return False
        if heap_type == "max" and parent < data[i]:
            return False
    return True


class TestBinaryHeap(unittest.TestCase):

    # Construction & Basic State

    def test_default_is_min_heap(self):
        heap = BinaryHeap()
        self.assertEqual(heap.heap_type, "min")
        self.assertTrue(heap.is_empty())
        self.assertEqual(len(heap), 0)
        self.assertFalse(heap)

    def test_unknown_type_raises(self):
        with self.assertRaises(ValueError):
            BinaryHeap("median")

    def test_peek_empty_raises(self):
        with self.assertRaises(IndexError):
            BinaryHeap().peek()

    # Insert

    def test_min_heap_insert_order(self):
        heap = build([5, 3, 8, 1])
        self.assertEqual(heap.to_list(), [1, 3, 8, 5])
        self.assertEqual(heap.peek(), 1)
        self.assertEqual(heap.size(), 4)

    def test_max_heap_insert_order(self):
        heap = build([5, 3, 8, 1], "max")
        self.assertEqual(heap.to_list(), [8, 3, 5, 1])
        self.assertEqual(heap.peek(), 8)

    def test_insert_steps_bubble_up(self):
        heap = build([5, 3, 8])
        steps = heap.insert(1)
        self.assertEqual(len(steps), 4)
        self.assertEqual(steps[0].array_snapshot, (3, 5, 8, 1))
        self.assertEqual(steps[1].metadata["swapped"], (1, 5))
        self.assertEqual(steps[2].metadata["swapped"], (1, 3))
        self.assertEqual(steps[-1].array_snapshot, (1, 3, 8, 5))
        self.assertTrue(all(s.type == "insert" for s in steps))

    def test_swap_step_is_recorded_before_swap(self):
        heap = build([5])
        steps = heap.insert(1)
        swap = steps[1]
        self.assertEqual(swap.array_snapshot, (5, 1))
        self.assertEqual(swap.highlighted_nodes, ("heap-1", "heap-0"))

    def test_snapshot_mirrors_array(self):
        steps = build([5, 3, 8]).insert(1)
        tree = steps[-1].tree
        self.assertEqual(tree.value, 1)
        self.assertEqual(tree.left.value, 3)
        self.assertEqual(tree.right.value, 8)
        self.assertEqual(tree.left.left.value, 5)
        self.assertEqual(tree.id, "heap-3")

    def test_value_keeps_its_id_while_moving(self):
        heap = build([5, 3])
        steps = heap.insert(1)
        self.assertEqual(steps[0].highlighted_nodes, ("heap-2",))
        self.assertEqual(steps[-1].tree.id, "heap-2")

    def test_random_inserts_keep_heap_property(self):
        rng = random.Random(5)
        for heap_type in ("min", "max"):
            heap = build([rng.randint(0, 100) for _ in range(60)], heap_type)
            self.assertTrue(is_heap(heap.to_list(), heap_type))

    # Remove

    def test_remove_top(self):
        heap = build([5, 3, 8, 1])
        steps = heap.remove()
        self.assertEqual(heap.to_list(), [3, 5, 8])
        self.assertEqual(len(steps), 3)
        self.assertEqual(steps[0].metadata["extracted"], 1)
        self.assertEqual(steps[-1].sorted_elements, (1,))
        self.assertEqual(heap.extracted, [1])

    def test_extracted_accumulates(self):
        heap = build([5, 3, 8, 1])
        heap.remove()
        steps = heap.remove()
        self.assertEqual(heap.extracted, [1, 3])
        self.assertEqual(steps[-1].sorted_elements, (1, 3))

    def test_remove_max(self):
        heap = build([5, 3, 8, 1], "max")
        heap.remove()
        self.assertEqual(heap.peek(), 5)
        self.assertTrue(is_heap(heap.to_list(), "max"))

    def test_remove_last_element(self):
        heap = build([4])
        steps = heap.remove()
        self.assertTrue(heap.is_empty())
        self.assertIsNone(steps[-1].tree)

    def test_remove_empty_heap_warns(self):
        steps = BinaryHeap().remove()
        self.assertEqual(len(steps), 1)
        self.assertEqual(steps[0].severity, "warning")
        self.assertEqual(steps[0].array_snapshot, ())

    def test_repeated_remove_yields_sorted_values(self):
        values = random.Random(9).sample(range(100), 30)
        heap = build(values)
        for _ in values:
            heap.remove()
        self.assertEqual(heap.extracted, sorted(values))

    def test_random_removes_keep_heap_property(self):
        rng = random.Random(17)
        for heap_type in ("min", "max"):
            heap = build([rng.randint(0, 100) for _ in range(50)], heap_type)
            while not heap.is_empty():
                heap.remove()
                self.assertTrue(is_heap(heap.to_list(), heap_type))
                if rng.random() < 0.3:
                    heap.insert(rng.randint(0, 100))
                    self.assertTrue(is_heap(heap.to_list(), heap_type))

    # Sort

    def test_random_sort_is_ordered_permutation(self):
        rng = random.Random(23)
        for heap_type in ("min", "max"):
            for size in (1, 2, 7, 40):
                heap = build([rng.randint(0, 100) for _ in range(size)], heap_type)
                before = heap.to_list()
                steps = heap.sort()
                result = list(steps[-1].sorted_elements)
                self.assertEqual(result, sorted(before, reverse=heap_type == "max"))
                self.assertEqual(heap.to_list(), before)

    def test_sort_leaves_heap_unchanged(self):
        heap = build([5, 3, 8, 1])
        steps = heap.sort()
        self.assertEqual(steps[-1].sorted_elements, (1, 3, 5, 8))
        self.assertIsNone(steps[-1].tree)
        self.assertEqual(heap.to_list(), [1, 3, 8, 5])
        self.assertTrue(all(s.type == "sort" for s in steps))

    def test_sort_max_heap_descending(self):
        heap = build([5, 3, 8, 1], "max")
        steps = heap.sort()
        self.assertEqual(steps[-1].sorted_elements, (8, 5, 3, 1))

    def test_sort_steps_use_working_copy_ids(self):
        steps = build([5, 3, 8, 1]).sort()
        extract = steps[1]
        self.assertEqual(extract.highlighted_nodes, ("heap-sort-0",))
        self.assertEqual(extract.tree.id, "heap-sort-0")
        self.assertEqual(extract.sorted_elements, ())

    def test_sort_empty_heap_warns(self):
        steps = BinaryHeap().sort()
        self.assertEqual(len(steps), 1)
        self.assertEqual(steps[0].severity, "warning")

    # Search

    def test_search_found(self):
        heap = build([5, 3, 8, 1])
        steps = heap.search(8)
        self.assertEqual(len(steps), 4)
        self.assertTrue(steps[-1].metadata["found"])
        self.assertEqual(steps[-1].metadata["found_index"], 2)
        self.assertEqual(steps[-1].metadata["total_iterations"], 3)

    def test_search_missing(self):
        heap = build([5, 3, 8, 1])
        steps = heap.search(9)
        self.assertEqual(len(steps), 5)
        self.assertEqual(steps[-1].severity, "warning")
        self.assertFalse(steps[-1].metadata["found"])
        self.assertEqual(len(steps[-1].highlighted_nodes), 4)

    def test_search_empty_heap(self):
        steps = BinaryHeap().search(1)
        self.assertEqual(len(steps), 1)
        self.assertEqual(steps[0].severity, "warning")

    # Traversal

    def test_traverse_is_level_order(self):
        heap = build([5, 3, 8, 1])
        result = heap.traverse("inorder")
        self.assertEqual(result.order, [1, 3, 8, 5])
        self.assertEqual(len(result.steps), 4)
        self.assertEqual(result.steps[0].metadata["traversal_type"], "levelorder")
        self.assertEqual(result.steps[0].metadata["requested_type"], "inorder")

    # Mode switching & clear

    def test_set_heap_type_clears(self):
        heap = build([5, 3, 8, 1])
        heap.remove()
        heap.set_heap_type("max")
        self.assertEqual(heap.heap_type, "max")
        self.assertTrue(heap.is_empty())
        self.assertEqual(heap.extracted, [])
        with self.assertRaises(ValueError):
            heap.set_heap_type("median")

    def test_clear_resets_ids(self):
        heap = build([5, 3])
        heap.clear()
        steps = heap.insert(7)
        self.assertEqual(steps[0].highlighted_nodes, ("heap-0",))

    def test_repr_and_str(self):
        heap = build([2, 1])
        self.assertEqual(repr(heap), "BinaryHeap(min, [1, 2])")
        self.assertEqual(str(heap), "BinaryHeap(type=min, size=2)")


if __name__ == "__main__":
    unittest.main()
