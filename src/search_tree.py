"""
Shared machinery of the linked search-tree engines (BST, AVL, Red-Black).

Subclasses implement ``insert`` and ``remove``. This base owns the node id
counter, the step recorder, child relinking and the read-only operations that
work the same way on every binary search tree: iterative search and the four
traversal orders.
"""

import logging
from collections import deque
from typing import Any, Deque, Dict, Iterator, List, NamedTuple, Optional, Sequence

from step_recorder import SearchMetadata, Step, StepRecorder, TraversalMetadata
from tree_node import TreeNode

logger = logging.getLogger(__name__)

TRAVERSAL_KINDS = ("inorder", "preorder", "postorder", "levelorder")

# Input range the UI offers; engines accept any integer.
VALUE_MIN = 0
VALUE_MAX = 100

_TRAVERSAL_NOTES = {
    "inorder": "Node visited after its left subtree",
    "preorder": "Node visited before its children",
    "postorder": "Node visited after both subtrees",
    "levelorder": "Nodes visited level by level using a queue",
}


class TraversalResult(NamedTuple):
    steps: List[Step]
    order: List[int]


def edge_id(parent: TreeNode, child: TreeNode) -> str:
    return f"{parent.id}->{child.id}"


class SearchTreeEngine:
    id_prefix = "node"
    search_complexity = "O(h) | average O(log n), worst O(n)"

    def __init__(self) -> None:
        self._root: Optional[TreeNode] = None
        self._size: int = 0
        self._node_counter: int = 0
        self._recorder = StepRecorder()

    @property
    def root(self) -> Optional[TreeNode]:
        return self._root

    def insert(self, value: int) -> List[Step]:
        raise NotImplementedError

    def remove(self, value: int) -> List[Step]:
        raise NotImplementedError

    # -- bookkeeping --

    def _new_node(self, value: int, color: Optional[str] = None) -> TreeNode:
        node = TreeNode(f"{self.id_prefix}-{self._node_counter}", value, color)
        self._node_counter += 1
        self._size += 1
        return node

    def _record(
        self,
        kind: str,
        description: str,
        highlighted: Sequence[str] = (),
        explanation: str = "",
        edges: Sequence[str] = (),
        **extras: Any,
    ) -> Step:
        return self._recorder.record(
            kind, description, self._root, highlighted, edges, explanation, **extras
        )

    def _finish(self, operation: str, value: Optional[int] = None) -> List[Step]:
        steps = self._recorder.flush()
        logger.debug(
            "%s.%s(%s) produced %d steps (size=%d)",
            type(self).__name__, operation, value, len(steps), self._size,
        )
        return steps

    def _replace_child(
        self, parent: Optional[TreeNode], old: TreeNode, new: Optional[TreeNode]
    ) -> None:
        """Put ``new`` in the slot ``old`` occupies under ``parent`` (or at the root)."""
        if parent is None:
            self._root = new
        elif parent.left is old:
            parent.left = new
        else:
            assert parent.right is old, "parent does not own the replaced node"
            parent.right = new
        if new is not None:
            new.parent = parent

    def _minimum(self, node: TreeNode) -> TreeNode:
        while node.left is not None:
            node = node.left
        return node

    def _find_node(self, value: int) -> Optional[TreeNode]:
        node = self._root
        while node is not None:
            if value < node.value:
                node = node.left
            elif value > node.value:
                node = node.right
            else:
                return node
        return None

    # -- per-engine hooks --

    def _node_label(self, node: TreeNode) -> str:
        return str(node.value)

    def _search_extras(self, node: TreeNode) -> Dict[str, Any]:
        return {}

    def _search_notes(self, node: TreeNode) -> List[str]:
        return []

    # -- search --

    def search(self, value: int) -> List[Step]:
        current = self._root
        path_nodes: List[TreeNode] = []
        path_sequence: List[int] = []
        edges: List[str] = []
        iteration = 0

        while current is not None:
            iteration += 1
            if path_nodes:
                edges.append(edge_id(path_nodes[-1], current))
            path_nodes.append(current)
            path_sequence.append(current.value)
            highlighted = [node.id for node in path_nodes]
            trail = " -> ".join(str(v) for v in path_sequence)

            if value < current.value:
                comparison, direction_note = "left", "Target is smaller: go left"
            elif value > current.value:
                comparison, direction_note = "right", "Target is larger: go right"
            else:
                comparison, direction_note = "match", "Values are equal"

            metadata = SearchMetadata(
                target=value,
                path_sequence=list(path_sequence),
                comparison_result=comparison,
                iteration=iteration,
                visited_count=len(path_sequence),
                complexity=self.search_complexity,
            )
            metadata.update(self._search_extras(current))
            self._record(
                "search",
                f"Iteration {iteration}: visiting {self._node_label(current)}",
                highlighted,
                f"Iteration {iteration} - looking for {value}. Path: {trail}",
                edges,
                notes=[
                    f"Iteration {iteration}",
                    f"Comparing {value} with {current.value}",
                    direction_note,
                    *self._search_notes(current),
                    f"Expected complexity: {self.search_complexity}",
                ],
                metadata=metadata,
            )

            if comparison == "match":
                self._record(
                    "search",
                    f"Found {value}",
                    highlighted,
                    f"Value {value} found after {iteration} iteration(s). Path: {trail}",
                    edges,
                    notes=["The comparison matched", "Search finished"],
                    metadata=SearchMetadata(
                        target=value,
                        path_sequence=list(path_sequence),
                        found=True,
                        iteration=iteration,
                        total_iterations=iteration,
                        visited_count=len(path_sequence),
                        complexity=self.search_complexity,
                    ),
                )
                return self._finish("search", value)

            current = current.left if comparison == "left" else current.right

        trail = " -> ".join(str(v) for v in path_sequence)
        self._record(
            "search",
            f"Value {value} not found",
            [node.id for node in path_nodes],
            f"Search failed after {len(path_sequence)} iteration(s). Path: {trail or '-'}",
            edges,
            severity="warning",
            notes=[
                f"Total iterations: {len(path_sequence)}",
                "Reached an empty branch",
                f"Path walked: {trail or '-'}",
            ],
            metadata=SearchMetadata(
                target=value,
                path_sequence=list(path_sequence),
                found=False,
                total_iterations=len(path_sequence),
                visited_count=len(path_sequence),
                complexity=self.search_complexity,
            ),
        )
        return self._finish("search", value)

    # -- traversal --

    def traverse(self, kind: str = "inorder") -> TraversalResult:
        if kind not in TRAVERSAL_KINDS:
            raise ValueError(f"unknown traversal kind: {kind!r}")

        order: List[int] = []
        for node in self._iter_nodes(kind):
            order.append(node.value)
            self._record(
                "traverse",
                f"Visiting {self._node_label(node)}",
                [node.id],
                f"{kind} traversal: visiting {node.value}. Order: {', '.join(map(str, order))}",
                notes=[_TRAVERSAL_NOTES[kind]],
                metadata=TraversalMetadata(
                    traversal_type=kind, order_snapshot=list(order), current=node.value
                ),
            )
        return TraversalResult(self._finish("traverse"), order)

    def _iter_nodes(self, kind: str) -> Iterator[TreeNode]:
        if kind == "inorder":
            return self._in_order_nodes()
        if kind == "preorder":
            return self._pre_order_nodes()
        if kind == "postorder":
            return iter(self._post_order_nodes())
        return self._level_order_nodes()

    def _in_order_nodes(self) -> Iterator[TreeNode]:
        stack: List[TreeNode] = []
        node = self._root
        while stack or node is not None:
            while node is not None:
                stack.append(node)
                node = node.left
            node = stack.pop()
            yield node
            node = node.right

    def _pre_order_nodes(self) -> Iterator[TreeNode]:
        if self._root is None:
            return
        stack: List[TreeNode] = [self._root]
        while stack:
            node = stack.pop()
            yield node
            if node.right is not None:
                stack.append(node.right)
            if node.left is not None:
                stack.append(node.left)

    def _post_order_nodes(self) -> List[TreeNode]:
        result: List[TreeNode] = []
        if self._root is None:
            return result
        stack: List[TreeNode] = [self._root]
        while stack:
            node = stack.pop()
            result.append(node)
            if node.left is not None:
                stack.append(node.left)
            if node.right is not None:
                stack.append(node.right)
        result.reverse()
        return result

    def _level_order_nodes(self) -> Iterator[TreeNode]:
        queue: Deque[TreeNode] = deque()
        if self._root is not None:
            queue.append(self._root)
        while queue:
            node = queue.popleft()
            yield node
            if node.left is not None:
                queue.append(node.left)
            if node.right is not None:
                queue.append(node.right)

    # -- read-only helpers --

    def contains(self, value: int) -> bool:
        return self._find_node(value) is not None

    def in_order(self) -> List[int]:
        return [node.value for node in self._in_order_nodes()]

    def min(self) -> int:
        if self._root is None:
            raise ValueError("min from empty tree")
        return self._minimum(self._root).value

    def max(self) -> int:
        if self._root is None:
            raise ValueError("max from empty tree")
        node = self._root
        while node.right is not None:
            node = node.right
        return node.value

    def size(self) -> int:
        return self._size

    def is_empty(self) -> bool:
        return self._size == 0

    def height(self) -> int:
        """Edge height of the tree; -1 when empty."""
        if self._root is None:
            return -1
        height = -1
        level = [self._root]
        while level:
            height += 1
            level = [child for node in level for child in (node.left, node.right) if child is not None]
        return height

    def clear(self) -> None:
        self._root = None
        self._size = 0
        self._node_counter = 0
        self._recorder.flush()
        logger.debug("%s cleared", type(self).__name__)

    def __len__(self) -> int:
        return self._size

    def __contains__(self, value: int) -> bool:
        return self.contains(value)

    def __iter__(self) -> Iterator[int]:
        return iter(self.in_order())

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.in_order()})"

    def __str__(self) -> str:
        return f"{type(self).__name__}(size={self._size}, height={self.height()})"
