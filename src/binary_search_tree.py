from typing import List, Optional

from search_tree import SearchTreeEngine
from step_recorder import RemovalMetadata, Step
from tree_node import TreeNode


class BinarySearchTree(SearchTreeEngine):
    """Unbalanced binary search tree.

    Equal values are routed to the right subtree and inserted, unlike the
    AVL and Red-Black engines, which reject duplicates.
    """

    id_prefix = "node"

    def insert(self, value: int) -> List[Step]:
        if self._root is None:
            self._root = self._new_node(value)
            self._record(
                "insert",
                f"Insert {value} as root",
                [self._root.id],
                f"Node {value} inserted as the root",
                notes=["The tree was empty", "The first value always becomes the root"],
                metadata={"inserted_value": value, "became_root": True},
            )
            return self._finish("insert", value)

        node = self._root
        duplicate = False
        while True:
            if value < node.value:
                if node.left is None:
                    node.left = self._new_node(value)
                    node.left.parent = node
                    self._record_attach(node, node.left, "left", duplicate)
                    break
                node = node.left
            else:
                duplicate = duplicate or value == node.value
                if node.right is None:
                    node.right = self._new_node(value)
                    node.right.parent = node
                    self._record_attach(node, node.right, "right", duplicate)
                    break
                node = node.right
        return self._finish("insert", value)

    def _record_attach(self, parent: TreeNode, child: TreeNode, direction: str, duplicate: bool) -> None:
        if direction == "left":
            reason = "It is smaller, so the new node goes into the left subtree"
        else:
            reason = "It is greater or equal, so the new node goes into the right subtree"
        notes = [f"Comparing {child.value} with {parent.value}", reason]
        if duplicate:
            notes.append(f"{child.value} already exists; equal values are kept in the right subtree")
        self._record(
            "insert",
            f"Insert {child.value} to the {direction} of {parent.value}",
            [child.id],
            f"Node {child.value} inserted on the {direction}",
            notes=notes,
            metadata={
                "inserted_value": child.value,
                "parent_value": parent.value,
                "direction": direction,
                "duplicate": duplicate,
            },
        )

    def remove(self, value: int) -> List[Step]:
        target = self._find_node(value)
        if target is None:
            self._record(
                "remove",
                f"Value {value} not found",
                explanation="The value does not exist in the tree",
                severity="warning",
                notes=["Walked the tree without locating the value", f"Value searched: {value}"],
                metadata=RemovalMetadata(attempted_value=value),
            )
            return self._finish("remove", value)

        self._record(
            "remove",
            f"Found node with value {value}",
            [target.id],
            f"Removing node {value}",
            notes=["Target node located", "Next: identify the removal case"],
            metadata={"node_id": target.id, "value": value},
        )

        if target.is_leaf():
            self._replace_child(target.parent, target, None)
            self._size -= 1
            self._record(
                "remove",
                f"Node {value} removed (leaf)",
                explanation="Leaf node removed",
                notes=["A leaf can be detached without restructuring the tree"],
                metadata=RemovalMetadata(case="leaf", removed_value=value),
            )
            return self._finish("remove", value)

        if target.left is None or target.right is None:
            child = target.left if target.left is not None else target.right
            self._replace_child(target.parent, target, child)
            self._size -= 1
            self._record(
                "remove",
                f"Node {value} removed (one child)",
                explanation="Node with a single child removed",
                notes=["The only child is promoted to keep the BST property"],
                metadata=RemovalMetadata(
                    case="single-child",
                    removed_value=value,
                    promoted_child=child.value if child is not None else None,
                ),
            )
            return self._finish("remove", value)

        successor = self._minimum(target.right)
        self._record(
            "remove",
            f"Inorder successor found: {successor.value}",
            [successor.id],
            "Looking for the inorder successor",
            notes=["With two children we copy the smallest value of the right subtree"],
            metadata=RemovalMetadata(
                case="two-children", successor=successor.value, replaced_value=target.value
            ),
        )
        target.value = successor.value
        self._record(
            "remove",
            f"Replacing value with {successor.value}",
            [target.id],
            "The successor's value is copied into the target before removing the successor",
            notes=["Only the value moves; the structure stays", "Next: remove the duplicated successor"],
            metadata={"case": "two-children", "replacement_value": successor.value},
        )
        self._remove_successor(successor)
        return self._finish("remove", value)

    def _remove_successor(self, node: TreeNode) -> None:
        # The inorder successor never has a left child.
        assert node.left is None
        parent: Optional[TreeNode] = node.parent
        assert parent is not None
        child = node.right
        self._replace_child(parent, node, child)
        self._size -= 1
        if child is None:
            self._record(
                "remove",
                f"Removing helper node {node.value} (leaf)",
                [node.id],
                "The successor has no children, so it is simply detached",
                notes=["This node was the inorder successor", "As a leaf it is just disconnected"],
                metadata=RemovalMetadata(case="successor-leaf", removed_value=node.value),
            )
        else:
            self._record(
                "remove",
                f"Removing helper node {node.value} (one child)",
                [node.id],
                "The successor's only child takes its place",
                notes=["The successor had exactly one child", "The child is promoted, then the successor is gone"],
                metadata=RemovalMetadata(
                    case="successor-single-child", removed_value=node.value, promoted_child=child.value
                ),
            )
