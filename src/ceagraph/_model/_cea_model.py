"""Model and region definitions."""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, TypeAlias

if TYPE_CHECKING:
    from ._node import Node, NodeKind

NarrativeFn: TypeAlias = Callable[[Mapping[str, float], str], str]


@dataclass(frozen=True, slots=True)
class Region:
    """A named scenario supplying base values.

    Attributes:
        id: Unique identifier of the region within its model.
        name: Display name (e.g. a country).
        base_values: One value per leaf node id, plus any hidden parameters
            read only inside compute rules.

    """

    id: str
    name: str
    base_values: Mapping[str, float] = field(default_factory=dict)

    def __hash__(self) -> int:
        return hash(self.id)


@dataclass(frozen=True, slots=True)
class LayoutSection:
    """A labelled group of nodes, used for grouping rows in displays."""

    id: str
    label: str
    node_ids: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class CEAModel:
    """A complete cost-effectiveness model.

    Attributes:
        id: Unique identifier of the model.
        title: Display title.
        nodes: The nodes, in declaration order.
        regions: Available regions; the first is the default.
        subtitle: Optional display subtitle.
        region_label: What a region is called in this model (e.g. "Country").
        layout_sections: Grouping of nodes for display.
        narrative: Optional function producing a summary sentence from the
            evaluated values and the region name.

    Raises:
        ValueError: If node ids or region ids are not unique, or if the model
            has no regions.

    """

    id: str
    title: str
    nodes: tuple[Node, ...]
    regions: tuple[Region, ...]
    subtitle: str = ""
    region_label: str = "Region"
    layout_sections: tuple[LayoutSection, ...] = ()
    narrative: NarrativeFn | None = field(default=None, compare=False)

    def __post_init__(self) -> None:
        if not self.regions:
            msg = f"Model '{self.id}' has no regions"
            raise ValueError(msg)
        _check_unique("node", [n.id for n in self.nodes], self.id)
        _check_unique("region", [r.id for r in self.regions], self.id)

    @property
    def node_ids(self) -> tuple[str, ...]:
        """Node ids in declaration order."""
        return tuple(node.id for node in self.nodes)

    @property
    def default_region(self) -> Region:
        """The first region of the model."""
        return self.regions[0]

    def get_node(self, node_id: str) -> Node:
        """Get a node by its id.

        Raises:
            KeyError: If the model has no node with this id.

        """
        for node in self.nodes:
            if node.id == node_id:
                return node
        msg = f"Node not found: {node_id}"
        raise KeyError(msg)

    def has_node(self, node_id: str) -> bool:
        return any(node.id == node_id for node in self.nodes)

    def get_region(self, region_id: str) -> Region:
        """Get a region by its id.

        Raises:
            KeyError: If the model has no region with this id.

        """
        for region in self.regions:
            if region.id == region_id:
                return region
        msg = f"Region not found: {region_id}"
        raise KeyError(msg)

    def get_nodes_by_kind(self, kind: NodeKind) -> list[Node]:
        """Get all nodes of a specific kind, in declaration order."""
        return [node for node in self.nodes if node.kind == kind]


def _check_unique(what: str, ids: list[str], model_id: str) -> None:
    seen: set[str] = set()
    for item_id in ids:
        if item_id in seen:
            msg = f"Duplicate {what} id '{item_id}' in model '{model_id}'"
            raise ValueError(msg)
        seen.add(item_id)
