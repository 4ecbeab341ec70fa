"""
Tree nodes -- live mutable nodes owned by an engine and the immutable
snapshots handed out inside visualization steps.

A TreeNode owns its children through ``left``/``right``. The ``parent``
attribute is a weak back reference: it keeps rotations cheap to express but
never keeps a node alive, and it is never copied into a snapshot. A
NodeSnapshot is a frozen, acyclic copy of everything reachable through
``left``/``right`` at the instant it was taken, so later mutation of the
engine cannot change a step that was already returned.
"""

import weakref
from dataclasses import dataclass
from typing import Any, Dict, Iterator, List, Optional

RED = "red"
BLACK = "black"


class TreeNode:
    def __init__(self, node_id: str, value: int, color: Optional[str] = None) -> None:
        self.id: str = node_id
        self.value: int = value
        self.left: Optional['TreeNode'] = None
        self.right: Optional['TreeNode'] = None
        self.color: Optional[str] = color
        self.height: Optional[int] = None
        self.balance_factor: Optional[int] = None
        self._parent: Optional['weakref.ReferenceType[TreeNode]'] = None

    @property
    def parent(self) -> Optional['TreeNode']:
        if self._parent is None:
            return None
        return self._parent()

    @parent.setter
    def parent(self, node: Optional['TreeNode']) -> None:
        self._parent = weakref.ref(node) if node is not None else None

    def is_leaf(self) -> bool:
        return self.left is None and self.right is None

    def __repr__(self) -> str:
        return f"TreeNode({self.id!r}, {self.value})"


@dataclass(frozen=True)
class NodeSnapshot:
    """Read-only copy of a subtree at one instant of an operation.

    Every walk over a snapshot is iterative: a plain BST can degenerate into
    a chain as deep as it is long.
    """

    id: str
    value: int
    left: Optional['NodeSnapshot'] = None
    right: Optional['NodeSnapshot'] = None
    color: Optional[str] = None
    height: Optional[int] = None
    balance_factor: Optional[int] = None

    @classmethod
    def from_node(cls, node: Optional[TreeNode]) -> Optional['NodeSnapshot']:
        if node is None:
            return None
        built: Dict[int, NodeSnapshot] = {}
        for current in _post_order(node):
            built[id(current)] = cls(
                id=current.id,
                value=current.value,
                left=built.pop(id(current.left)) if current.left is not None else None,
                right=built.pop(id(current.right)) if current.right is not None else None,
                color=current.color,
                height=current.height,
                balance_factor=current.balance_factor,
            )
        return built[id(node)]

    def to_dict(self) -> Dict[str, Any]:
        """Plain nested dict in the shape the presentation layer consumes.

        Optional attributes are omitted rather than set to None.
        """
        built: Dict[int, Dict[str, Any]] = {}
        for node in _post_order(self):
            result: Dict[str, Any] = {"id": node.id, "value": node.value}
            if node.left is not None:
                result["left"] = built.pop(id(node.left))
            if node.right is not None:
                result["right"] = built.pop(id(node.right))
            if node.color is not None:
                result["color"] = node.color
            if node.height is not None:
                result["height"] = node.height
            if node.balance_factor is not None:
                result["balanceFactor"] = node.balance_factor
            built[id(node)] = result
        return built[id(self)]

    def iter_nodes(self) -> Iterator['NodeSnapshot']:
        stack: List[NodeSnapshot] = [self]
        while stack:
            node = stack.pop()
            yield node
            if node.right is not None:
                stack.append(node.right)
            if node.left is not None:
                stack.append(node.left)

    def find(self, node_id: str) -> Optional['NodeSnapshot']:
        for node in self.iter_nodes():
            if node.id == node_id:
                return node
        return None

    def values_in_order(self) -> List[int]:
        result: List[int] = []
        stack: List[NodeSnapshot] = []
        node: Optional[NodeSnapshot] = self
        while stack or node is not None:
            while node is not None:
                stack.append(node)
                node = node.left
            node = stack.pop()
            result.append(node.value)
            node = node.right
        return result

    def size(self) -> int:
        return sum(1 for _ in self.iter_nodes())

    def height_of(self) -> int:
        """Edge height of this snapshot: a single node has height 0."""
        heights: Dict[int, int] = {}
        for node in _post_order(self):
            left = heights.pop(id(node.left)) if node.left is not None else -1
            right = heights.pop(id(node.right)) if node.right is not None else -1
            heights[id(node)] = 1 + max(left, right)
        return heights[id(self)]

    def __repr__(self) -> str:
        return f"NodeSnapshot({self.id!r}, {self.value}, size={self.size()})"


def _post_order(root: Any) -> List[Any]:
    """Nodes of a TreeNode or NodeSnapshot tree, children before parents."""
    result: List[Any] = []
    stack = [root]
    while stack:
        node = stack.pop()
        result.append(node)
        if node.left is not None:
            stack.append(node.left)
        if node.right is not None:
            stack.append(node.right)
    result.reverse()
    return result
