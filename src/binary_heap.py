import logging
from typing import Any, Callable, Dict, List, Optional, Sequence

from search_tree import TraversalResult
from step_recorder import HeapMetadata, SearchMetadata, Step, StepRecorder, TraversalMetadata
from tree_node import NodeSnapshot

logger = logging.getLogger(__name__)

HEAP_TYPES = ("min", "max")
SEARCH_COMPLEXITY = "O(n) linear scan over the heap array"


class BinaryHeap:
    """Array-backed binary min/max heap that records its steps.

    Node ids are kept per value rather than per array slot, so a value keeps
    its visual identity while it moves through the array and gets the same id
    back if it is inserted again. ``extracted`` lists every value removed
    since the last ``clear()``.
    """

    def __init__(self, heap_type: str = "min") -> None:
        if heap_type not in HEAP_TYPES:
            raise ValueError(f"unknown heap type: {heap_type!r}")
        self._heap_type = heap_type
        self._data: List[int] = []
        self._ids: Dict[int, str] = {}
        self._node_counter = 0
        self._extracted: List[int] = []
        self._recorder = StepRecorder()

    @property
    def heap_type(self) -> str:
        return self._heap_type

    @property
    def extracted(self) -> List[int]:
        return list(self._extracted)

    def set_heap_type(self, heap_type: str) -> None:
        """Switch between min and max mode; the heap is cleared."""
        if heap_type not in HEAP_TYPES:
            raise ValueError(f"unknown heap type: {heap_type!r}")
        self._heap_type = heap_type
        self.clear()

    # -- helpers --

    @property
    def _label(self) -> str:
        return "Min" if self._heap_type == "min" else "Max"

    @property
    def _extreme(self) -> str:
        return "minimum" if self._heap_type == "min" else "maximum"

    def _outranks(self, a: int, b: int) -> bool:
        """True when ``a`` belongs above ``b`` in this heap."""
        if self._heap_type == "min":
            return a < b
        return a > b

    def _id_for_value(self, value: int, index: int) -> str:
        return self._ids.get(value, f"heap-{index}")

    def _snapshot(
        self, data: Sequence[int], id_for: Callable[[int, int], str]
    ) -> Optional[NodeSnapshot]:
        def build(index: int) -> Optional[NodeSnapshot]:
            if index >= len(data):
                return None
            return NodeSnapshot(
                id=id_for(data[index], index),
                value=data[index],
                left=build(2 * index + 1),
                right=build(2 * index + 2),
            )

        return build(0)

    def _record(
        self,
        kind: str,
        description: str,
        highlighted: Sequence[int],
        explanation: str,
        **extras: Any,
    ) -> Step:
        """Record a step on the live heap; ``highlighted`` holds array indices."""
        extras.setdefault("array_snapshot", self._data)
        return self._recorder.record(
            kind,
            description,
            None,
            [self._id_for_value(self._data[i], i) for i in highlighted],
            (),
            explanation,
            snapshot=self._snapshot(self._data, self._id_for_value),
            **extras,
        )

    def _record_copy(
        self,
        data: List[int],
        description: str,
        highlighted: Sequence[int],
        explanation: str,
        sorted_elements: List[int],
        **extras: Any,
    ) -> Step:
        """Record a sort step on the working copy of the array."""
        return self._recorder.record(
            "sort",
            description,
            None,
            [f"heap-sort-{i}" for i in highlighted],
            (),
            explanation,
            snapshot=self._snapshot(data, lambda value, index: f"heap-sort-{index}"),
            sorted_elements=sorted_elements,
            array_snapshot=data,
            **extras,
        )

    def _finish(self, operation: str, value: Optional[int] = None) -> List[Step]:
        steps = self._recorder.flush()
        logger.debug(
            "BinaryHeap(%s).%s(%s) produced %d steps (size=%d)",
            self._heap_type, operation, value, len(steps), len(self._data),
        )
        return steps

    def _sift_down_index(self, data: List[int], index: int) -> int:
        """Child index to swap with, or ``index`` itself when order holds."""
        size = len(data)
        best = index
        left = 2 * index + 1
        right = 2 * index + 2
        if left < size and self._outranks(data[left], data[best]):
            best = left
        if right < size and self._outranks(data[right], data[best]):
            best = right
        return best

    def _record_empty(self, kind: str, description: str) -> None:
        self._recorder.record(
            kind,
            description,
            None,
            explanation="Nothing to do on an empty heap",
            severity="warning",
            notes=["The heap is empty"],
            metadata=HeapMetadata(heap_type=self._heap_type),
            sorted_elements=self._extracted if kind == "remove" else [],
            array_snapshot=[],
        )

    # -- operations --

    def insert(self, value: int) -> List[Step]:
        self._data.append(value)
        if value not in self._ids:
            self._ids[value] = f"heap-{self._node_counter}"
            self._node_counter += 1

        index = len(self._data) - 1
        self._record(
            "insert",
            f"Insert {value} at the end of the {self._label} Heap",
            [index],
            f"{value} appended",
            metadata=HeapMetadata(heap_type=self._heap_type, index=index),
        )

        while index > 0:
            parent = (index - 1) // 2
            if not self._outranks(self._data[index], self._data[parent]):
                break
            symbol = "<" if self._heap_type == "min" else ">"
            self._record(
                "insert",
                f"{self._data[index]} {symbol} {self._data[parent]}, swapping",
                [index, parent],
                f"Bubble up: swapping {self._data[index]} with {self._data[parent]}",
                metadata=HeapMetadata(
                    heap_type=self._heap_type,
                    index=index,
                    parent_index=parent,
                    swapped=(self._data[index], self._data[parent]),
                ),
            )
            self._data[index], self._data[parent] = self._data[parent], self._data[index]
            index = parent

        self._record(
            "insert",
            f"{value} inserted",
            [],
            "Insertion complete",
            metadata=HeapMetadata(heap_type=self._heap_type, index=index),
        )
        return self._finish("insert", value)

    def remove(self) -> List[Step]:
        """Remove the top element (minimum or maximum depending on the mode)."""
        if not self._data:
            self._record_empty("remove", f"Cannot remove the {self._extreme}: heap is empty")
            return self._finish("remove")

        top = self._data[0]
        self._extracted.append(top)
        self._record(
            "remove",
            f"Remove {self._extreme}: {top}",
            [0],
            "Removing the root",
            sorted_elements=self._extracted,
            metadata=HeapMetadata(heap_type=self._heap_type, extracted=top),
        )

        last = self._data.pop()
        if self._data:
            self._data[0] = last
            index = 0
            while True:
                best = self._sift_down_index(self._data, index)
                if best == index:
                    break
                self._record(
                    "remove",
                    f"Swapping {self._data[index]} with {self._data[best]}",
                    [index, best],
                    "Bubble down",
                    sorted_elements=self._extracted,
                    metadata=HeapMetadata(
                        heap_type=self._heap_type,
                        index=index,
                        swapped=(self._data[index], self._data[best]),
                    ),
                )
                self._data[index], self._data[best] = self._data[best], self._data[index]
                index = best

        self._record(
            "remove",
            f"{top} removed",
            [],
            "Removal complete",
            sorted_elements=self._extracted,
            metadata=HeapMetadata(heap_type=self._heap_type, extracted=top),
        )
        return self._finish("remove", top)

    def sort(self) -> List[Step]:
        """Heap sort on a copy of the array; the live heap is not modified."""
        if not self._data:
            self._record_empty("sort", "Cannot sort: heap is empty")
            return self._finish("sort")

        self._record(
            "sort",
            f"Starting Heap Sort ({self._label})",
            [],
            "Sorting begins",
            sorted_elements=[],
        )

        data = list(self._data)
        result: List[int] = []
        while data:
            self._record_copy(
                data,
                f"Extract {self._extreme}: {data[0]}",
                [0],
                f"The {self._extreme} {data[0]} is appended to the result",
                result,
                metadata=HeapMetadata(heap_type=self._heap_type, extracted=data[0]),
            )
            result.append(data[0])
            last = data.pop()
            if not data:
                break
            data[0] = last
            index = 0
            while True:
                best = self._sift_down_index(data, index)
                if best == index:
                    break
                self._record_copy(
                    data,
                    f"Reorder heap: swap {data[index]} and {data[best]}",
                    [index, best],
                    f"Bubble down to keep the {self._label} Heap property",
                    result,
                    metadata=HeapMetadata(
                        heap_type=self._heap_type, index=index, swapped=(data[index], data[best])
                    ),
                )
                data[index], data[best] = data[best], data[index]
                index = best

        self._recorder.record(
            "sort",
            f"Sorting complete: [{', '.join(map(str, result))}]",
            None,
            explanation="Heap Sort finished",
            sorted_elements=result,
            array_snapshot=result,
            metadata=HeapMetadata(heap_type=self._heap_type),
        )
        return self._finish("sort")

    def search(self, value: int) -> List[Step]:
        if not self._data:
            self._recorder.record(
                "search",
                "Empty heap",
                None,
                explanation="Cannot search an empty heap",
                severity="warning",
                notes=["Nothing stored", f"Theoretical complexity: {SEARCH_COMPLEXITY}"],
                metadata=SearchMetadata(
                    target=value, iteration=0, visited_count=0, complexity=SEARCH_COMPLEXITY
                ),
            )
            return self._finish("search", value)

        visited: List[int] = []
        for index, current in enumerate(self._data):
            visited.append(index)
            trail = " -> ".join(str(v) for v in self._data[: index + 1])
            self._record(
                "search",
                f"Iteration {index + 1}: visiting index {index} (value {current})",
                visited,
                f"Iteration {index + 1} - looking for {value}. Visited: {trail}",
                notes=[
                    f"Iteration {index + 1}",
                    f"Comparing {value} with {current}",
                    f"Running complexity: {SEARCH_COMPLEXITY}",
                ],
                metadata=SearchMetadata(
                    target=value,
                    iteration=index + 1,
                    visited_count=len(visited),
                    current_index=index,
                    complexity=SEARCH_COMPLEXITY,
                    path_sequence=self._data[: index + 1],
                ),
            )
            if current == value:
                self._record(
                    "search",
                    f"Found {value} at index {index}",
                    visited,
                    f"Element {value} found after {index + 1} iteration(s). Visited: {trail}",
                    notes=["Search finished", f"Total iterations: {index + 1}"],
                    metadata=SearchMetadata(
                        target=value,
                        found=True,
                        found_index=index,
                        iteration=index + 1,
                        total_iterations=index + 1,
                        visited_count=len(visited),
                        complexity=SEARCH_COMPLEXITY,
                        path_sequence=self._data[: index + 1],
                    ),
                )
                return self._finish("search", value)

        self._record(
            "search",
            f"{value} not found",
            visited,
            f"Element {value} is not in the heap after {len(visited)} iteration(s). "
            f"Visited: {' -> '.join(map(str, self._data))}",
            severity="warning",
            notes=[f"Total iterations: {len(visited)}", f"Observed complexity: {SEARCH_COMPLEXITY}"],
            metadata=SearchMetadata(
                target=value,
                found=False,
                total_iterations=len(visited),
                visited_count=len(visited),
                complexity=SEARCH_COMPLEXITY,
                path_sequence=list(self._data),
            ),
        )
        return self._finish("search", value)

    def traverse(self, kind: str = "levelorder") -> TraversalResult:
        """Level-order walk; the array already is in level order, whatever ``kind`` asks for."""
        order: List[int] = []
        for index, value in enumerate(self._data):
            order.append(value)
            self._record(
                "traverse",
                f"Visiting {value}",
                [index],
                f"Level order traversal: {value}. Order: {', '.join(map(str, order))}",
                notes=["A heap is traversed level by level, which is its array order"],
                metadata=TraversalMetadata(
                    traversal_type="levelorder",
                    requested_type=kind,
                    order_snapshot=list(order),
                    current=value,
                ),
            )
        return TraversalResult(self._finish("traverse"), order)

    # -- read-only helpers --

    def peek(self) -> int:
        if not self._data:
            raise IndexError("peek from empty heap")
        return self._data[0]

    def to_list(self) -> List[int]:
        return list(self._data)

    def size(self) -> int:
        return len(self._data)

    def is_empty(self) -> bool:
        return len(self._data) == 0

    def clear(self) -> None:
        self._data = []
        self._ids.clear()
        self._node_counter = 0
        self._extracted = []
        self._recorder.flush()
        logger.debug("BinaryHeap(%s) cleared", self._heap_type)

    def __len__(self) -> int:
        return len(self._data)

    def __bool__(self) -> bool:
        return len(self._data) > 0

    def __repr__(self) -> str:
        return f"BinaryHeap({self._heap_type}, {self._data})"

    def __str__(self) -> str:
        return f"BinaryHeap(type={self._heap_type}, size={len(self._data)})"
