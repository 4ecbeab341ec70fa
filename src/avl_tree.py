import logging
from typing import List, Optional

from search_tree import SearchTreeEngine
from step_recorder import RemovalMetadata, RotationMetadata, Step
from tree_node import TreeNode

logger = logging.getLogger(__name__)

_CASE_LABELS = {
    "left-left": "Left-Left",
    "right-right": "Right-Right",
    "left-right": "Left-Right",
    "right-left": "Right-Left",
}


class AVLTree(SearchTreeEngine):
    """Self-balancing binary search tree.

    Heights use the edge convention: an empty subtree has height -1 and a
    leaf height 0. Every node on the unwind path of an insert or remove gets
    its height and balance factor recomputed before the balance check, so
    the cached values on a node are always those of its current children.
    """

    id_prefix = "avl"
    search_complexity = "O(log n) guaranteed"

    def _get_height(self, node: Optional[TreeNode]) -> int:
        if node is None:
            return -1
        assert node.height is not None
        return node.height

    def _get_balance(self, node: Optional[TreeNode]) -> int:
        if node is None:
            return 0
        return self._get_height(node.left) - self._get_height(node.right)

    def _update_height(self, node: TreeNode) -> None:
        node.height = 1 + max(self._get_height(node.left), self._get_height(node.right))
        node.balance_factor = self._get_balance(node)

    def _create(self, value: int) -> TreeNode:
        node = self._new_node(value)
        node.height = 0
        node.balance_factor = 0
        return node

    def _node_label(self, node: TreeNode) -> str:
        return f"{node.value} (balance {node.balance_factor})"

    def _search_extras(self, node: TreeNode) -> dict:
        return {"balance_factor": node.balance_factor}

    # -- rotations --

    def _right_rotate(self, y: TreeNode, kind: str) -> TreeNode:
        x = y.left
        assert x is not None
        t2 = x.right

        y.left = t2
        if t2 is not None:
            t2.parent = y
        self._replace_child(y.parent, y, x)
        x.right = y
        y.parent = x

        self._update_height(y)
        self._update_height(x)

        logger.debug("right rotation: %s above %s", x.value, y.value)
        self._record(
            kind,
            f"Right rotation: {x.value} moves up",
            [x.id, y.id],
            f"Node {x.value} rotated above {y.value}",
            notes=["The left child takes its parent's place", "The left side is rebalanced"],
            metadata=RotationMetadata(rotation="right", pivot=y.value, promoted=x.value),
        )
        return x

    def _left_rotate(self, x: TreeNode, kind: str) -> TreeNode:
        y = x.right
        assert y is not None
        t2 = y.left

        x.right = t2
        if t2 is not None:
            t2.parent = x
        self._replace_child(x.parent, x, y)
        y.left = x
        x.parent = y

        self._update_height(x)
        self._update_height(y)

        logger.debug("left rotation: %s above %s", y.value, x.value)
        self._record(
            kind,
            f"Left rotation: {y.value} moves up",
            [y.id, x.id],
            f"Node {y.value} rotated above {x.value}",
            notes=["The right child takes its parent's place", "The right side is rebalanced"],
            metadata=RotationMetadata(rotation="left", pivot=x.value, promoted=y.value),
        )
        return y

    def _record_case(self, kind: str, case: str, node: TreeNode, child: TreeNode) -> None:
        if case == "left-left":
            explanation = "A right rotation is needed"
        elif case == "right-right":
            explanation = "A left rotation is needed"
        else:
            explanation = "A double rotation is needed"
        self._record(
            kind,
            f"{_CASE_LABELS[case]} imbalance detected at {node.value}",
            [node.id, child.id],
            explanation,
            metadata={"case": case, "balance_factor": node.balance_factor, "child_value": child.value},
        )

    def _record_balance_check(self, kind: str, node: TreeNode) -> None:
        self._record(
            kind,
            f"Check balance of {node.value}: factor = {node.balance_factor}",
            [node.id],
            f"Balance factor: {node.balance_factor}",
            metadata={"balance_factor": node.balance_factor, "height": node.height},
        )

    # -- insert --

    def insert(self, value: int) -> List[Step]:
        if self._root is None:
            self._root = self._create(value)
            inserted: Optional[TreeNode] = self._root
            self._record("insert", f"Insert {value}", [self._root.id], f"Node {value} created as the root")
        else:
            inserted = self._insert(self._root, value)
            if inserted is None:
                return self._finish("insert", value)

        self._record(
            "insert",
            f"{value} inserted",
            [inserted.id],
            "Insertion complete",
            metadata={"inserted_value": value, "height": self.height()},
        )
        return self._finish("insert", value)

    def _insert(self, node: TreeNode, value: int) -> Optional[TreeNode]:
        if value == node.value:
            self._record(
                "insert",
                f"Value {value} already exists",
                [node.id],
                "Duplicate value ignored",
                notes=["AVL trees keep unique values", "The tree is left unchanged"],
                metadata={"duplicate": True, "value": value},
            )
            return None

        if value < node.value:
            if node.left is None:
                inserted = self._attach(node, value, "left")
            else:
                inserted = self._insert(node.left, value)
        else:
            if node.right is None:
                inserted = self._attach(node, value, "right")
            else:
                inserted = self._insert(node.right, value)

        if inserted is not None:
            self._rebalance_after_insert(node, value)
        return inserted

    def _attach(self, parent: TreeNode, value: int, direction: str) -> TreeNode:
        node = self._create(value)
        if direction == "left":
            parent.left = node
        else:
            parent.right = node
        node.parent = parent
        self._record(
            "insert",
            f"Insert {value}",
            [node.id],
            f"Node {value} created as the {direction} child of {parent.value}",
            metadata={"inserted_value": value, "parent_value": parent.value, "direction": direction},
        )
        return node

    def _rebalance_after_insert(self, node: TreeNode, value: int) -> None:
        self._update_height(node)
        self._record_balance_check("insert", node)
        balance = self._get_balance(node)
        left, right = node.left, node.right

        if balance > 1 and left is not None and value < left.value:
            self._record_case("insert", "left-left", node, left)
            self._right_rotate(node, "insert")
        elif balance < -1 and right is not None and value > right.value:
            self._record_case("insert", "right-right", node, right)
            self._left_rotate(node, "insert")
        elif balance > 1 and left is not None and value > left.value:
            self._record_case("insert", "left-right", node, left)
            self._left_rotate(left, "insert")
            self._right_rotate(node, "insert")
        elif balance < -1 and right is not None and value < right.value:
            self._record_case("insert", "right-left", node, right)
            self._right_rotate(right, "insert")
            self._left_rotate(node, "insert")

    # -- remove --

    def remove(self, value: int) -> List[Step]:
        if self._remove(self._root, value):
            self._record(
                "remove",
                f"Removal of {value} complete",
                explanation="Tree rebalanced",
                metadata={"removed_value": value, "height": self.height()},
            )
        return self._finish("remove", value)

    def _remove(self, node: Optional[TreeNode], value: int) -> bool:
        if node is None:
            self._record(
                "remove",
                f"Value {value} not found",
                explanation="The node does not exist",
                severity="warning",
                notes=["Reached an empty branch", f"Value searched: {value}"],
                metadata=RemovalMetadata(attempted_value=value),
            )
            return False

        if value < node.value:
            removed = self._remove(node.left, value)
        elif value > node.value:
            removed = self._remove(node.right, value)
        else:
            self._record("remove", f"Found node {value}", [node.id], f"Removing {value}")
            if node.left is None or node.right is None:
                self._splice(node)
                return True

            successor = self._minimum(node.right)
            self._record(
                "remove",
                f"Inorder successor: {successor.value}",
                [node.id, successor.id],
                "Successor found; its value replaces the removed one",
                metadata=RemovalMetadata(
                    case="two-children", successor=successor.value, replaced_value=node.value
                ),
            )
            node.value = successor.value
            removed = self._remove(node.right, successor.value)

        if removed:
            self._rebalance_after_remove(node)
        return removed

    def _splice(self, node: TreeNode) -> None:
        child = node.left if node.left is not None else node.right
        self._replace_child(node.parent, node, child)
        self._size -= 1
        if child is None:
            self._record(
                "remove",
                f"{node.value} was a leaf, removed",
                explanation="Leaf node removed",
                metadata=RemovalMetadata(case="leaf", removed_value=node.value),
            )
        else:
            side = "left" if node.left is not None else "right"
            self._record(
                "remove",
                f"{node.value} had only a {side} child",
                [child.id],
                f"Replaced by its {side} child",
                metadata=RemovalMetadata(
                    case="single-child", removed_value=node.value, promoted_child=child.value
                ),
            )

    def _rebalance_after_remove(self, node: TreeNode) -> None:
        self._update_height(node)
        self._record_balance_check("remove", node)
        balance = self._get_balance(node)

        if balance > 1:
            left = node.left
            assert left is not None
            if self._get_balance(left) >= 0:
                self._record_case("remove", "left-left", node, left)
                self._right_rotate(node, "remove")
            else:
                self._record_case("remove", "left-right", node, left)
                self._left_rotate(left, "remove")
                self._right_rotate(node, "remove")
        elif balance < -1:
            right = node.right
            assert right is not None
            if self._get_balance(right) <= 0:
                self._record_case("remove", "right-right", node, right)
                self._left_rotate(node, "remove")
            else:
                self._record_case("remove", "right-left", node, right)
                self._right_rotate(right, "remove")
                self._left_rotate(node, "remove")

    # -- invariant checks --

    def _checked_height(self, node: Optional[TreeNode]) -> Optional[int]:
        if node is None:
            return -1
        left = self._checked_height(node.left)
        right = self._checked_height(node.right)
        if left is None or right is None or abs(left - right) > 1:
            return None
        height = 1 + max(left, right)
        if node.height != height or node.balance_factor != left - right:
            return None
        return height

    def is_balanced(self) -> bool:
        """True when every node is balanced and carries up-to-date height data."""
        return self._checked_height(self._root) is not None
