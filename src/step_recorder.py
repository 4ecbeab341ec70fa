"""
Step recording shared by every engine.

Each public engine operation appends steps to a StepRecorder while it runs
and finishes with ``flush()``, which hands the batch to the caller. A Step is
frozen and its ``tree`` is a NodeSnapshot taken at record time, so a step
never changes after it is returned.

Metadata payloads are stored as read-only mappings with list values turned
into tuples. The TypedDicts below document the keys each kind of step
carries.
"""

import time
import types
import uuid
from dataclasses import dataclass, field
from typing import Any, Dict, List, Literal, Mapping, Optional, Sequence, Tuple, TypedDict

from tree_node import NodeSnapshot, TreeNode

OperationType = Literal["insert", "remove", "search", "traverse", "sort"]
Severity = Literal["info", "warning", "error"]

OPERATION_TYPES: Tuple[str, ...] = ("insert", "remove", "search", "traverse", "sort")
SEVERITIES: Tuple[str, ...] = ("info", "warning", "error")


class SearchMetadata(TypedDict, total=False):
    target: int
    path_sequence: List[int]
    comparison_result: str
    iteration: int
    total_iterations: int
    visited_count: int
    complexity: str
    found: bool
    balance_factor: Optional[int]
    color: Optional[str]
    current_index: int
    found_index: int


class RotationMetadata(TypedDict):
    rotation: str
    pivot: int
    promoted: int


class TraversalMetadata(TypedDict, total=False):
    traversal_type: str
    order_snapshot: List[int]
    current: int
    requested_type: str


class RemovalMetadata(TypedDict, total=False):
    case: str
    removed_value: int
    promoted_child: Optional[int]
    successor: int
    replaced_value: int
    attempted_value: int
    color_invariants_hold: bool


class HeapMetadata(TypedDict, total=False):
    heap_type: str
    index: int
    parent_index: int
    swapped: Tuple[int, int]
    extracted: int


class FixupMetadata(TypedDict, total=False):
    case: str
    side: str
    uncle: Optional[int]
    parent: int
    grandparent: int
    sibling: Optional[int]


@dataclass(frozen=True)
class Step:
    id: str
    type: str
    description: str
    tree: Optional[NodeSnapshot]
    highlighted_nodes: Tuple[str, ...]
    highlighted_edges: Tuple[str, ...]
    explanation: str
    timestamp: float
    notes: Tuple[str, ...] = ()
    severity: str = "info"
    rule_broken: Optional[str] = None
    metadata: Mapping[str, Any] = field(default_factory=dict)
    sorted_elements: Optional[Tuple[int, ...]] = None
    array_snapshot: Optional[Tuple[int, ...]] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "metadata", _freeze(self.metadata))

    def to_dict(self) -> Dict[str, Any]:
        """Serialize with the camelCase keys the presentation layer reads."""
        result: Dict[str, Any] = {
            "id": self.id,
            "type": self.type,
            "description": self.description,
            "tree": self.tree.to_dict() if self.tree is not None else None,
            "highlightedNodes": list(self.highlighted_nodes),
            "highlightedEdges": list(self.highlighted_edges),
            "explanation": self.explanation,
            "timestamp": self.timestamp,
            "notes": list(self.notes),
            "severity": self.severity,
            "metadata": {
                _camel_case(key): list(value) if isinstance(value, tuple) else value
                for key, value in self.metadata.items()
            },
        }
        if self.rule_broken is not None:
            result["ruleBroken"] = self.rule_broken
        if self.sorted_elements is not None:
            result["sortedElements"] = list(self.sorted_elements)
        if self.array_snapshot is not None:
            result["arraySnapshot"] = list(self.array_snapshot)
        return result


def _freeze(metadata: Mapping[str, Any]) -> Mapping[str, Any]:
    """Read-only view of a metadata payload; list values become tuples."""
    return types.MappingProxyType(
        {key: tuple(value) if isinstance(value, list) else value for key, value in metadata.items()}
    )


def _camel_case(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part.capitalize() for part in rest)


class StepRecorder:
    """Builds immutable steps and buffers them for the running operation."""

    def __init__(self) -> None:
        self._pending: List[Step] = []

    def record(
        self,
        kind: str,
        description: str,
        root: Optional[TreeNode],
        highlighted: Sequence[str] = (),
        edges: Sequence[str] = (),
        explanation: str = "",
        *,
        notes: Optional[Sequence[str]] = None,
        metadata: Optional[Dict[str, Any]] = None,
        severity: str = "info",
        rule_broken: Optional[str] = None,
        sorted_elements: Optional[Sequence[int]] = None,
        array_snapshot: Optional[Sequence[int]] = None,
        snapshot: Optional[NodeSnapshot] = None,
    ) -> Step:
        """Record one step.

        Args:
            kind: Operation type, one of OPERATION_TYPES
            description: Short title of the step
            root: Live root to clone; ignored when ``snapshot`` is given
            highlighted: Node ids to highlight
            edges: Edge ids to highlight
            explanation: Longer free text
            notes: Overrides the default ``[description, explanation]``
            metadata: Per-kind payload, copied into a read-only mapping
            severity: "info", "warning" or "error"
            rule_broken: Label of the violated rule, if any
            sorted_elements: Extracted/sorted values to display
            array_snapshot: Backing array of array-based structures
            snapshot: Prebuilt snapshot for engines that are not linked trees

        Returns:
            The new Step, also appended to the pending batch
        """
        assert kind in OPERATION_TYPES, kind
        assert severity in SEVERITIES, severity
        tree = snapshot if snapshot is not None else NodeSnapshot.from_node(root)
        step = Step(
            id=f"step-{uuid.uuid4().hex}",
            type=kind,
            description=description,
            tree=tree,
            highlighted_nodes=tuple(highlighted),
            highlighted_edges=tuple(edges),
            explanation=explanation,
            timestamp=time.time(),
            notes=tuple(notes) if notes is not None else (description, explanation),
            severity=severity,
            rule_broken=rule_broken,
            metadata=dict(metadata) if metadata is not None else {},
            sorted_elements=tuple(sorted_elements) if sorted_elements is not None else None,
            array_snapshot=tuple(array_snapshot) if array_snapshot is not None else None,
        )
        self._pending.append(step)
        return step

    def pending(self) -> int:
        return len(self._pending)

    def flush(self) -> List[Step]:
        steps = self._pending
        self._pending = []
        return steps
