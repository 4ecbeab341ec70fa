"""
Tree Step Visualizer Demo -- step trails for every engine, plus figures.

Generates:
- viz/*.png -- One figure per highlighted step
- report.pdf -- Step-by-step walkthrough of the examples
"""

import logging
import sys
from pathlib import Path

import matplotlib.pyplot as plt

sys.path.insert(0, str(Path(__file__).parent / "src"))

from avl_tree import AVLTree
from binary_heap import BinaryHeap
from binary_search_tree import BinarySearchTree
from operation_log import OperationLog
from red_black_tree import RedBlackTree
from tree_plot import draw_step, save_walkthrough

VIZ_DIR = Path(__file__).parent / "viz"
VIZ_DIR.mkdir(exist_ok=True)


def print_steps(steps):
    for number, step in enumerate(steps, start=1):
        marker = "" if step.severity == "info" else f" [{step.severity.upper()}]"
        print(f"  {number:>3}. {step.description}{marker}")


def save_figure(step, filename):
    fig, ax = plt.subplots(figsize=(8, 6))
    draw_step(step, ax)
    fig.tight_layout()
    fig.savefig(VIZ_DIR / filename, dpi=150)
    plt.close(fig)


def example_1_binary_search_tree():
    """Insert 5, 3, 8, 1, traverse in order and search for a missing value."""
    print("=" * 60)
    print("Example 1: Binary Search Tree")
    print("=" * 60)

    tree = BinarySearchTree()
    steps = []
    for value in (5, 3, 8, 1):
        steps.extend(tree.insert(value))

    traversal = tree.traverse("inorder")
    print(f"Inorder traversal: {traversal.order}")

    search_steps = tree.search(7)
    print(f"Search 7 visited: {search_steps[-1].metadata['path_sequence']}")
    print_steps(search_steps)

    save_figure(search_steps[-1], "01_bst_search.png")
    return steps + traversal.steps + search_steps


def example_2_avl_rotation():
    """Insert 10, 20, 30: the Right-Right case triggers one left rotation."""
    print("\n" + "=" * 60)
    print("Example 2: AVL Tree Right-Right Rotation")
    print("=" * 60)

    tree = AVLTree()
    steps = []
    for value in (10, 20, 30):
        steps.extend(tree.insert(value))
    print_steps(steps)

    rotations = [s for s in steps if "rotation" in s.metadata]
    print(f"Rotations: {[s.metadata['rotation'] for s in rotations]}")
    print(f"Root: {tree.root.value}, balance factor {tree.root.balance_factor}")

    save_figure(rotations[0], "02_avl_rotation.png")
    return steps


def example_3_red_black_fixup():
    """Insert 10, 20, 30, 40, 50, 25 and show every fix-up case."""
    print("\n" + "=" * 60)
    print("Example 3: Red-Black Tree Insert Fix-up")
    print("=" * 60)

    tree = RedBlackTree()
    steps = []
    for value in (10, 20, 30, 40, 50, 25):
        steps.extend(tree.insert(value))
    for step in steps:
        if step.description.startswith("Case"):
            print(f"  {step.description}")
    print(f"Valid: {tree.is_valid()}, black height: {tree.black_height()}")

    save_figure(steps[-1], "03_red_black.png")
    return steps


def example_4_heap_sort():
    """Min-heap of 5, 3, 8, 1 and a heap sort that leaves the heap untouched."""
    print("\n" + "=" * 60)
    print("Example 4: Min Heap and Heap Sort")
    print("=" * 60)

    heap = BinaryHeap("min")
    steps = []
    for value in (5, 3, 8, 1):
        steps.extend(heap.insert(value))
    print(f"Heap array: {heap.to_list()}")

    sort_steps = heap.sort()
    print(f"Sorted: {list(sort_steps[-1].sorted_elements)}")
    print(f"Heap array after sort: {heap.to_list()}")

    save_figure(sort_steps[1], "04_heap_sort.png")
    return steps + sort_steps


def example_5_operation_log():
    """Drive all four engines through the operation log."""
    print("\n" + "=" * 60)
    print("Example 5: Operation Log")
    print("=" * 60)

    log = OperationLog()
    for tree_type in ("binary", "avl", "redblack", "heap"):
        for value in (40, 20, 60, 10):
            log.run(tree_type, "insert", value)
    log.run("avl", "remove", 40)
    log.run("heap", "remove")
    log.run("redblack", "search", 60)

    for tree_type in ("binary", "heap", "avl", "redblack"):
        print(f"  {tree_type:<9} {len(log.steps_for_tree(tree_type)):>3} steps")
    print(f"Total: {len(log.all_steps())} steps across {len(log)} operations")
    return log.all_steps()


def generate_pdf_report(walkthrough):
    print("\n" + "=" * 60)
    print("Generating PDF Report")
    print("=" * 60)

    pdf_path = Path(__file__).parent / "report.pdf"
    pages = save_walkthrough(walkthrough, pdf_path, title="Tree Step Visualizer")
    print(f"Report saved to: {pdf_path} ({pages} step pages)")


def main():
    logging.basicConfig(level=logging.INFO, format="%(levelname)s - %(name)s - %(message)s")

    walkthrough = []
    walkthrough += example_1_binary_search_tree()
    walkthrough += example_2_avl_rotation()
    walkthrough += example_3_red_black_fixup()
    walkthrough += example_4_heap_sort()
    example_5_operation_log()

    generate_pdf_report(walkthrough)
    print(f"\nVisualizations saved to: {VIZ_DIR}")


if __name__ == "__main__":
    main()
