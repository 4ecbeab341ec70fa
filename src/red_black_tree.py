import logging
from typing import List, Optional, Tuple

from search_tree import SearchTreeEngine
from step_recorder import FixupMetadata, RemovalMetadata, RotationMetadata, Step
from tree_node import BLACK, RED, TreeNode

logger = logging.getLogger(__name__)

_OPPOSITE = {"left": "right", "right": "left"}

DUPLICATE_RULE = "Binary search tree keys must be unique"


class RedBlackTree(SearchTreeEngine):
    """Red-Black tree.

    Properties kept after every insert:
    1. Every node is red or black
    2. The root is black
    3. Missing children (None) count as black
    4. A red node has only black children
    5. Every path from a node down to a missing child has the same number of black nodes

    By default removal only splices nodes out and may break properties 4
    and 5; pass ``rebalance_on_remove=True`` to run the full delete fix-up.
    """

    id_prefix = "rbt"
    search_complexity = "O(log n) guaranteed"

    def __init__(self, rebalance_on_remove: bool = False) -> None:
        super().__init__()
        self.rebalance_on_remove = rebalance_on_remove

    @staticmethod
    def _color(node: Optional[TreeNode]) -> str:
        return BLACK if node is None else node.color

    def _node_label(self, node: TreeNode) -> str:
        return f"{node.value} ({node.color})"

    def _search_extras(self, node: TreeNode) -> dict:
        return {"color": node.color}

    def _search_notes(self, node: TreeNode) -> List[str]:
        return [f"Current color: {node.color.upper()}"]

    # -- rotations --

    def _left_rotate(self, node: TreeNode, kind: str) -> TreeNode:
        right = node.right
        assert right is not None
        node.right = right.left
        if right.left is not None:
            right.left.parent = node
        self._replace_child(node.parent, node, right)
        right.left = node
        node.parent = right

        logger.debug("left rotation: %s above %s", right.value, node.value)
        self._record(
            kind,
            f"Left rotation: {right.value} moves up",
            [right.id, node.id],
            f"Node {right.value} rotated above {node.value}",
            notes=["The right child takes its parent's place", "A single rotation fixes the imbalance"],
            metadata=RotationMetadata(rotation="left", pivot=node.value, promoted=right.value),
        )
        return right

    def _right_rotate(self, node: TreeNode, kind: str) -> TreeNode:
        left = node.left
        assert left is not None
        node.left = left.right
        if left.right is not None:
            left.right.parent = node
        self._replace_child(node.parent, node, left)
        left.right = node
        node.parent = left

        logger.debug("right rotation: %s above %s", left.value, node.value)
        self._record(
            kind,
            f"Right rotation: {left.value} moves up",
            [left.id, node.id],
            f"Node {left.value} rotated above {node.value}",
            notes=["The left child moves up", "A single rotation fixes the imbalance"],
            metadata=RotationMetadata(rotation="right", pivot=node.value, promoted=left.value),
        )
        return left

    def _rotate(self, node: TreeNode, direction: str, kind: str) -> TreeNode:
        if direction == "left":
            return self._left_rotate(node, kind)
        return self._right_rotate(node, kind)

    # -- insert --

    def insert(self, value: int) -> List[Step]:
        if self._root is None:
            self._root = self._new_node(value, BLACK)
            self._record(
                "insert",
                f"Insert {value} as root (black)",
                [self._root.id],
                "The root is created black",
            )
            return self._finish("insert", value)

        current: Optional[TreeNode] = self._root
        parent = self._root
        while current is not None:
            parent = current
            if value < current.value:
                current = current.left
            elif value > current.value:
                current = current.right
            else:
                self._record(
                    "insert",
                    f"Error: value {value} already exists",
                    [current.id],
                    "Red-Black rule violation: duplicate values are not allowed "
                    "in a binary search tree",
                    severity="error",
                    rule_broken=DUPLICATE_RULE,
                    notes=["Every value must be unique", "Duplicates break the search property"],
                    metadata={"duplicate": True, "value": value},
                )
                return self._finish("insert", value)

        node = self._new_node(value, RED)
        node.parent = parent
        if value < parent.value:
            parent.left = node
        else:
            parent.right = node
        self._record(
            "insert",
            f"{value} inserted as red",
            [node.id],
            "New red node added",
            metadata={"inserted_value": value, "parent_value": parent.value},
        )

        self._fix_insert(node)

        self._record(
            "insert",
            f"{value} inserted",
            [node.id],
            "Red-Black properties hold",
            metadata={"inserted_value": value, "black_height": self.black_height()},
        )
        return self._finish("insert", value)

    def _fix_insert(self, node: TreeNode) -> None:
        current = node
        while current.parent is not None and current.parent.color == RED:
            parent = current.parent
            grandparent = parent.parent
            # A red parent is never the root, so the grandparent exists.
            assert grandparent is not None
            side = "left" if parent is grandparent.left else "right"
            other = _OPPOSITE[side]
            uncle = getattr(grandparent, other)

            if uncle is not None and uncle.color == RED:
                self._record(
                    "insert",
                    "Case 1: red uncle - recoloring",
                    [current.id, parent.id, uncle.id],
                    f"Uncle {uncle.value} and parent {parent.value} turn black, "
                    f"grandparent {grandparent.value} turns red",
                    metadata=FixupMetadata(
                        case="recolor", side=side, uncle=uncle.value,
                        parent=parent.value, grandparent=grandparent.value,
                    ),
                )
                parent.color = BLACK
                uncle.color = BLACK
                grandparent.color = RED
                self._record(
                    "insert",
                    "Colors updated after recoloring",
                    [grandparent.id],
                    "Moving up to check the grandparent",
                )
                current = grandparent
                continue

            if current is getattr(parent, other):
                self._record(
                    "insert",
                    f"Case 2: red triangle - {side} rotation",
                    [current.id, parent.id],
                    "Turning the triangle into a line",
                    metadata=FixupMetadata(
                        case="triangle", side=side,
                        uncle=uncle.value if uncle is not None else None,
                        parent=parent.value, grandparent=grandparent.value,
                    ),
                )
                current = parent
                self._rotate(current, side, "insert")
                parent = current.parent
                assert parent is not None

            self._record(
                "insert",
                f"Case 3: red line - {other} rotation",
                [current.id, parent.id],
                "Rebalancing with a rotation",
                metadata=FixupMetadata(
                    case="line", side=side,
                    uncle=uncle.value if uncle is not None else None,
                    parent=parent.value, grandparent=grandparent.value,
                ),
            )
            parent.color = BLACK
            grandparent.color = RED
            self._record(
                "insert",
                "Colors changed before the rotation",
                [parent.id, grandparent.id],
                "Parent turns black, grandparent turns red",
            )
            self._rotate(grandparent, other, "insert")
            break

        assert self._root is not None
        if self._root.color != BLACK:
            self._root.color = BLACK
            self._record(
                "insert",
                "Root recolored black",
                [self._root.id],
                "Property 2 holds: the root is black",
            )

    # -- remove --

    def remove(self, value: int) -> List[Step]:
        target = self._find_node(value)
        if target is None:
            self._record(
                "remove",
                f"Value {value} not found",
                explanation="The node does not exist",
                severity="warning",
                notes=["Walked the tree without locating the value", f"Value searched: {value}"],
                metadata=RemovalMetadata(attempted_value=value),
            )
            return self._finish("remove", value)

        self._record("remove", f"Found {value}", [target.id], "Starting removal")

        if target.left is not None and target.right is not None:
            successor = self._minimum(target.right)
            self._record(
                "remove",
                f"Successor found: {successor.value}",
                [target.id, successor.id],
                "Using the inorder successor",
                notes=["Node with two children", "The inorder successor's value is copied"],
                metadata=RemovalMetadata(
                    case="two-children", successor=successor.value, replaced_value=target.value
                ),
            )
            target.value = successor.value
            self._record(
                "remove",
                f"Copied {successor.value} into the target",
                [target.id],
                "Next: remove the successor node, which has at most one child",
            )
            target = successor

        self._delete_node(target)

        valid = self.is_valid()
        notes = [f"{value} removed"]
        if not valid:
            notes.append("The color rules no longer hold after this structural removal")
        self._record(
            "remove",
            f"{value} removed",
            explanation="Red-Black properties restored" if self.rebalance_on_remove
            else "Node spliced out without recoloring",
            notes=notes,
            metadata=RemovalMetadata(removed_value=value, color_invariants_hold=valid),
        )
        return self._finish("remove", value)

    def _delete_node(self, node: TreeNode) -> None:
        assert node.left is None or node.right is None
        child = node.left if node.left is not None else node.right
        parent = node.parent
        self._replace_child(parent, node, child)
        self._size -= 1
        self._record(
            "remove",
            f"Spliced out {node.value} ({node.color})",
            [child.id] if child is not None else [],
            "The node is replaced by its only child" if child is not None
            else "The node had no children and is detached",
            metadata=RemovalMetadata(
                case="single-child" if child is not None else "leaf",
                removed_value=node.value,
                promoted_child=child.value if child is not None else None,
            ),
        )
        if self.rebalance_on_remove and node.color == BLACK:
            self._fix_remove(child, parent)

    def _fix_remove(self, x: Optional[TreeNode], parent: Optional[TreeNode]) -> None:
        # x carries an extra black; parent tracks it when x is None.
        while x is not self._root and self._color(x) == BLACK:
            assert parent is not None
            side = "left" if x is parent.left else "right"
            other = _OPPOSITE[side]
            sibling = getattr(parent, other)
            assert sibling is not None

            if sibling.color == RED:
                sibling.color = BLACK
                parent.color = RED
                self._record_remove_case("red-sibling", side, parent, sibling,
                                         "Sibling turns black, parent turns red")
                self._rotate(parent, side, "remove")
                sibling = getattr(parent, other)
                assert sibling is not None

            near, far = getattr(sibling, side), getattr(sibling, other)
            if self._color(near) == BLACK and self._color(far) == BLACK:
                sibling.color = RED
                self._record_remove_case("black-nephews", side, parent, sibling,
                                         "Sibling turns red; the extra black moves up")
                x = parent
                parent = x.parent
                continue

            if self._color(far) == BLACK:
                assert near is not None
                near.color = BLACK
                sibling.color = RED
                self._record_remove_case("near-nephew-red", side, parent, sibling,
                                         "Near nephew turns black, sibling turns red")
                self._rotate(sibling, other, "remove")
                sibling = getattr(parent, other)
                assert sibling is not None
                far = getattr(sibling, other)

            assert far is not None
            sibling.color = parent.color
            parent.color = BLACK
            far.color = BLACK
            self._record_remove_case("far-nephew-red", side, parent, sibling,
                                     "Sibling takes the parent's color; parent and far nephew turn black")
            self._rotate(parent, side, "remove")
            x = self._root
            parent = None

        if x is not None and x.color != BLACK:
            x.color = BLACK
            self._record("remove", f"{x.value} recolored black", [x.id], "The extra black is absorbed")

    def _record_remove_case(
        self, case: str, side: str, parent: TreeNode, sibling: TreeNode, explanation: str
    ) -> None:
        logger.debug("delete fix-up case %s at %s", case, parent.value)
        self._record(
            "remove",
            f"Removal fix-up: {case.replace('-', ' ')}",
            [parent.id, sibling.id],
            explanation,
            metadata=FixupMetadata(case=case, side=side, parent=parent.value, sibling=sibling.value),
        )

    # -- invariant checks --

    def _validate(self, node: Optional[TreeNode], parent_color: Optional[str]) -> Tuple[bool, int]:
        if node is None:
            return True, 1
        if node.color == RED and parent_color == RED:
            return False, 0
        ok_left, bh_left = self._validate(node.left, node.color)
        ok_right, bh_right = self._validate(node.right, node.color)
        if not ok_left or not ok_right or bh_left != bh_right:
            return False, 0
        return True, bh_left + (1 if node.color == BLACK else 0)

    def is_valid(self) -> bool:
        """Check the root color, the red-red rule and equal black-heights."""
        if self._root is not None and self._root.color != BLACK:
            return False
        return self._validate(self._root, None)[0]

    def black_height(self) -> int:
        """Black nodes on the path to a missing child, counting that child; 0 if invalid."""
        ok, height = self._validate(self._root, None)
        return height if ok else 0
