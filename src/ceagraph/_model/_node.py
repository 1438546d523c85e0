"""Node definitions for CEA graphs."""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from enum import StrEnum
from typing import TypeAlias

ComputeFn: TypeAlias = Callable[[Mapping[str, float]], float]


class NodeKind(StrEnum):
    """The role of a node in the model."""

    INPUT = "input"  # Leaf value taken from the region
    CALCULATION = "calculation"  # Derived intermediate value
    ADJUSTMENT = "adjustment"  # Signed fractional adjustment
    OUTPUT = "output"  # Derived headline result

    @property
    def is_derived(self) -> bool:
        """Whether nodes of this kind are always computed."""
        return self in (NodeKind.CALCULATION, NodeKind.OUTPUT)


class ValueFormat(StrEnum):
    """How a node's value is displayed."""

    CURRENCY = "currency"
    NUMBER = "number"
    PERCENTAGE = "percentage"
    MULTIPLIER = "multiplier"
    UNITS_OF_VALUE = "unitsOfValue"


@dataclass(frozen=True, slots=True)
class Node:
    """One named quantity in a CEA model.

    A node is plain data plus an optional pure compute rule. Nodes without a
    compute rule take their value from the active region (or an override);
    nodes with one are derived from the values of other nodes.

    Attributes:
        id: Unique identifier, used as the key for values and overrides.
        kind: The role of the node.
        format: Display format of the value.
        editable: Whether the user may override the value.
        label: Short human-readable name.
        section: Identifier of the layout section the node belongs to.
        description: Longer explanation shown alongside the value.
        formula: Human-readable formula text (display only).
        dependencies: Ids of the values the compute rule reads.
        compute: Function computing the value from the resolved value map.
            It receives every value resolved so far, so it can also read
            hidden parameters that are not nodes themselves.
        dependency_operators: Label per dependency describing its algebraic
            role (display only).

    Example:
        >>> Node(
        ...     id="num_reached",
        ...     kind=NodeKind.CALCULATION,
        ...     format=ValueFormat.NUMBER,
        ...     dependencies=("grant_size", "cost_per_person"),
        ...     compute=lambda v: v["grant_size"] / v["cost_per_person"],
        ... )

    """

    id: str
    kind: NodeKind
    format: ValueFormat
    editable: bool = False
    label: str = ""
    section: str = ""
    description: str = ""
    formula: str = ""
    dependencies: tuple[str, ...] = ()
    compute: ComputeFn | None = field(default=None, compare=False)
    dependency_operators: Mapping[str, str] = field(default_factory=dict)

    @property
    def is_derived(self) -> bool:
        """Whether the node has a compute rule."""
        return self.compute is not None

    @property
    def display_label(self) -> str:
        """The label, or the id when no label was given."""
        return self.label or self.id

    def __hash__(self) -> int:
        """Hash based on the node ID."""
        return hash(self.id)
