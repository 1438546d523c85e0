"""Query functions for CLI commands.

This module provides pure functions over models and sessions.
These are the functional core - no I/O, no Rich rendering.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from ceagraph._expr import NarrativeTemplate
from ceagraph._graph import CycleError, DependencyGraph

if TYPE_CHECKING:
    from ceagraph._model import CEAModel, Node
    from ceagraph._session import Session

OTHER_SECTION_LABEL = "Other"


@dataclass(frozen=True, slots=True)
class ValueRow:
    """One node with its base and current value."""

    node: Node
    base_value: float
    value: float
    overridden: bool


@dataclass(frozen=True, slots=True)
class SectionRows:
    """The rows of one layout section."""

    label: str
    rows: list[ValueRow]


@dataclass(frozen=True, slots=True)
class NodeDetail:
    """Detailed information about a node in the active region."""

    node: Node
    base_value: float
    value: float
    direct_dependencies: tuple[str, ...]
    direct_dependents: tuple[str, ...]
    downstream_count: int
    unresolved_dependencies: tuple[str, ...]


@dataclass(slots=True)
class TreeNode:
    """A node in a dependency tree for rendering."""

    node_id: str
    children: list[TreeNode]


def get_section_rows(session: Session) -> list[SectionRows]:
    """Group the evaluated nodes by layout section.

    Sections appear in layout order, followed by an "Other" section for
    nodes that no section lists. Models without layout sections yield a
    single "Other" section with every node in declaration order.
    """
    model = session.model
    base = session.base_values()
    current = session.current_values()
    overrides = session.overrides

    def row(node_id: str) -> ValueRow:
        return ValueRow(model.get_node(node_id), base[node_id], current[node_id], node_id in overrides)

    sections: list[SectionRows] = []
    placed: set[str] = set()
    for section in model.layout_sections:
        node_ids = [node_id for node_id in section.node_ids if model.has_node(node_id)]
        placed.update(node_ids)
        if node_ids:
            sections.append(SectionRows(section.label, [row(node_id) for node_id in node_ids]))

    rest = [node_id for node_id in model.node_ids if node_id not in placed]
    if rest:
        sections.append(SectionRows(OTHER_SECTION_LABEL, [row(node_id) for node_id in rest]))
    return sections


def get_node_detail(session: Session, node_id: str) -> NodeDetail:
    """Get detailed information about a node.

    Raises:
        KeyError: If the model has no node with this id.

    """
    node = session.model.get_node(node_id)
    graph = DependencyGraph.from_nodes(session.model.nodes)
    unresolved = graph.unresolved_dependencies(session.region.base_values.keys()).get(node_id, ())
    return NodeDetail(
        node=node,
        base_value=session.base_values()[node_id],
        value=session.current_values()[node_id],
        direct_dependencies=graph.predecessors(node_id),
        direct_dependents=graph.successors(node_id),
        downstream_count=len(graph.descendants(node_id)),
        unresolved_dependencies=unresolved,
    )


def get_dependency_tree(model: CEAModel, node_id: str, *, max_depth: int | None = None) -> TreeNode:
    """Build the tree of everything a node depends on.

    Args:
        model: The model containing the node.
        node_id: Root of the tree.
        max_depth: Maximum depth to expand (None for unlimited).

    Raises:
        KeyError: If the model has no node with this id.

    """
    model.get_node(node_id)
    graph = DependencyGraph.from_nodes(model.nodes)

    def build(current: str, depth: int, path: frozenset[str]) -> TreeNode:
        if (max_depth is not None and depth >= max_depth) or current in path:
            return TreeNode(current, [])
        children = [build(dep, depth + 1, path | {current}) for dep in graph.predecessors(current)]
        return TreeNode(current, children)

    return build(node_id, 0, frozenset())


def check_model(model: CEAModel) -> list[str]:
    """Validate a model's graph for every region.

    Returns:
        Error messages: a dependency cycle (reported once), calculation and
        output nodes without a compute rule, and per region the leaf nodes
        without a base value, dependencies that resolve to neither a node
        nor a base value, and narrative references that resolve to neither.

    """
    graph = DependencyGraph.from_nodes(model.nodes)
    errors: list[str] = []

    try:
        graph.topological_order()
    except CycleError as e:
        errors.append(str(e))

    errors.extend(
        f"Node '{node.id}' has kind '{node.kind}' but no compute rule"
        for node in model.nodes
        if node.kind.is_derived and not node.is_derived
    )

    narrative_refs = model.narrative.references if isinstance(model.narrative, NarrativeTemplate) else ()

    for region in model.regions:
        errors.extend(
            f"Region '{region.id}': node '{node.id}' has no base value"
            for node in model.nodes
            if not node.is_derived and node.id not in region.base_values
        )
        for node_id, missing in graph.unresolved_dependencies(region.base_values.keys()).items():
            names = ", ".join(missing)
            errors.append(f"Region '{region.id}': node '{node_id}' has unresolved dependencies: {names}")
        unknown = [ref for ref in narrative_refs if not model.has_node(ref) and ref not in region.base_values]
        if unknown:
            errors.append(f"Region '{region.id}': narrative references unknown ids: {', '.join(unknown)}")

    return errors
