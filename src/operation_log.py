"""
Operation log -- the thin orchestrator between a presentation layer and the
engines.

One engine instance per tree type. Every operation run through the log is
stored with its step batch, so a viewer can replay the whole session, or only
the steps of one operation type or one tree, in order.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional

from avl_tree import AVLTree
from binary_heap import BinaryHeap
from binary_search_tree import BinarySearchTree
from red_black_tree import RedBlackTree
from search_tree import TRAVERSAL_KINDS
from step_recorder import OPERATION_TYPES, Step

logger = logging.getLogger(__name__)

TREE_TYPES = ("binary", "heap", "avl", "redblack")


@dataclass
class Operation:
    tree_type: str
    type: str
    value: Optional[int] = None
    steps: List[Step] = field(default_factory=list)
    order: Optional[List[int]] = None


def default_engines() -> Dict[str, Any]:
    return {
        "binary": BinarySearchTree(),
        "heap": BinaryHeap("min"),
        "avl": AVLTree(),
        "redblack": RedBlackTree(),
    }


class OperationLog:
    def __init__(self, engines: Optional[Mapping[str, Any]] = None) -> None:
        self.engines: Dict[str, Any] = dict(engines) if engines is not None else default_engines()
        self._operations: List[Operation] = []

    @property
    def operations(self) -> List[Operation]:
        return list(self._operations)

    def engine(self, tree_type: str) -> Any:
        if tree_type not in self.engines:
            raise ValueError(f"unknown tree type: {tree_type!r}")
        return self.engines[tree_type]

    def run(
        self,
        tree_type: str,
        operation: str,
        value: Optional[int] = None,
        kind: Optional[str] = None,
    ) -> Operation:
        """Run one operation on the engine for ``tree_type`` and store it.

        Args:
            tree_type: Key of the engine ("binary", "heap", "avl", "redblack")
            operation: "insert", "remove", "search", "traverse" or "sort"
            value: Operand; must be None for heap removal, traversal and sort
            kind: Traversal order for "traverse"

        Returns:
            The stored Operation with its steps
        """
        engine = self.engine(tree_type)
        if operation not in OPERATION_TYPES:
            raise ValueError(f"unknown operation: {operation!r}")

        takes_value = operation not in ("traverse", "sort") and not (
            operation == "remove" and isinstance(engine, BinaryHeap)
        )
        if value is not None and not takes_value:
            raise ValueError(f"{operation} on {tree_type!r} takes no value")

        order: Optional[List[int]] = None
        if operation == "traverse":
            if kind is not None and kind not in TRAVERSAL_KINDS:
                raise ValueError(f"unknown traversal kind: {kind!r}")
            result = engine.traverse(kind) if kind is not None else engine.traverse()
            steps, order = result.steps, result.order
        elif operation == "sort":
            if not isinstance(engine, BinaryHeap):
                raise ValueError(f"sort is only supported by the heap, not {tree_type!r}")
            steps = engine.sort()
        elif operation == "remove" and isinstance(engine, BinaryHeap):
            steps = engine.remove()
        else:
            if value is None:
                raise ValueError(f"{operation} needs a value")
            steps = getattr(engine, operation)(value)

        record = Operation(tree_type, operation, value, steps, order)
        self.add(record)
        return record

    def add(self, operation: Operation) -> None:
        self._operations.append(operation)
        logger.info(
            "stored %s %s(%s): %d steps",
            operation.tree_type, operation.type, operation.value, len(operation.steps),
        )

    def clear(self) -> None:
        """Forget every stored operation and empty every engine."""
        self._operations = []
        for engine in self.engines.values():
            engine.clear()
        logger.info("operation log cleared")

    def all_steps(self) -> List[Step]:
        return [step for operation in self._operations for step in operation.steps]

    def steps_by_type(self, operation_type: str) -> List[Step]:
        return [
            step
            for operation in self._operations
            if operation.type == operation_type
            for step in operation.steps
        ]

    def steps_for_tree(self, tree_type: str) -> List[Step]:
        return [
            step
            for operation in self._operations
            if operation.tree_type == tree_type
            for step in operation.steps
        ]

    def __len__(self) -> int:
        return len(self._operations)
