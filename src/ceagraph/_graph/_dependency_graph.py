"""Dependency graph over the nodes of a model."""

from __future__ import annotations

from collections.abc import Collection, Iterable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Generic, TypeVar

from ._algorithms import depth_first_order

if TYPE_CHECKING:
    from collections.abc import Callable

    from ceagraph._model import Node

T = TypeVar("T")


@dataclass(frozen=True, slots=True)
class DependencyGraph(Generic[T]):
    """A directed graph representing dependencies between nodes.

    This is a pure, immutable data structure with query methods. Neighbour
    queries return tuples in declaration order so that displays built on
    top of the graph are stable.

    The graph represents "depends on" relationships:
    - predecessors(b) == (a,) means "b depends on a"
    - successors(a) == (b,) means "a is depended on by b"

    Edges may point at ids that are not nodes of the graph (for example
    hidden parameters that live only in a region's base values); those are
    reported by ``unresolved_dependencies`` and ignored by traversals.

    Attributes:
        _order: Nodes in declaration order.
        _predecessors: Mapping from node to its direct dependencies.
        _successors: Mapping from node to nodes that depend on it.

    """

    _order: tuple[T, ...] = ()
    _predecessors: dict[T, tuple[T, ...]] = field(default_factory=dict)
    _successors: dict[T, tuple[T, ...]] = field(default_factory=dict)

    @classmethod
    def from_dependencies(cls, dependencies: Iterable[tuple[T, Iterable[T]]]) -> DependencyGraph[T]:
        """Build a graph from ``(node, dependencies)`` pairs.

        Args:
            dependencies: Each node paired with the nodes it depends on, in
                declaration order.

        Returns:
            A new DependencyGraph instance.

        Example:
            >>> graph = DependencyGraph.from_dependencies([("a", []), ("b", ["a"])])
            >>> graph.predecessors("b")
            ('a',)

        """
        predecessors: dict[T, tuple[T, ...]] = {}
        for node, deps in dependencies:
            predecessors[node] = tuple(dict.fromkeys(deps))

        successors: dict[T, list[T]] = {node: [] for node in predecessors}
        for node, deps in predecessors.items():
            for dep in deps:
                if dep in successors and node not in successors[dep]:
                    successors[dep].append(node)

        return cls(
            _order=tuple(predecessors),
            _predecessors=predecessors,
            _successors={k: tuple(v) for k, v in successors.items()},
        )

    @classmethod
    def from_nodes(cls, nodes: Iterable[Node]) -> DependencyGraph[str]:
        """Build the graph of a model's nodes, keyed by node id."""
        return DependencyGraph.from_dependencies((node.id, node.dependencies) for node in nodes)

    @property
    def nodes(self) -> tuple[T, ...]:
        """All nodes in the graph, in declaration order."""
        return self._order

    def predecessors(self, node: T) -> tuple[T, ...]:
        """Get the direct dependencies of a node that are nodes of this graph."""
        return tuple(dep for dep in self._predecessors.get(node, ()) if dep in self._predecessors)

    def successors(self, node: T) -> tuple[T, ...]:
        """Get the nodes that directly depend on a node."""
        return self._successors.get(node, ())

    def neighbours(self, node: T) -> tuple[T, ...]:
        """Get the direct dependencies followed by the direct dependents of a node."""
        return tuple(dict.fromkeys((*self.predecessors(node), *self.successors(node))))

    def ancestors(self, node: T) -> frozenset[T]:
        """Get all transitive dependencies of a node."""
        return self._reachable(node, self.predecessors)

    def descendants(self, node: T) -> frozenset[T]:
        """Get all transitive dependents of a node."""
        return self._reachable(node, self.successors)

    def _reachable(self, node: T, step: Callable[[T], tuple[T, ...]]) -> frozenset[T]:
        visited: set[T] = set()
        stack = list(step(node))
        while stack:
            current = stack.pop()
            if current not in visited:
                visited.add(current)
                stack.extend(step(current))
        return frozenset(visited)

    def topological_order(self) -> list[T]:
        """Return nodes with every node after its dependencies.

        Raises:
            CycleError: If the graph contains a cycle.

        """
        return depth_first_order(self._order, self._predecessors)

    def unresolved_dependencies(self, known: Collection[T] = ()) -> dict[T, tuple[T, ...]]:
        """Find dependencies that are neither nodes nor in ``known``.

        Args:
            known: Additional ids that count as resolved (e.g. the keys of a
                region's base values).

        Returns:
            Mapping from node to its unresolved dependencies, for nodes that
            have any.

        """
        unresolved: dict[T, tuple[T, ...]] = {}
        for node in self._order:
            missing = tuple(
                dep for dep in self._predecessors[node] if dep not in self._predecessors and dep not in known
            )
            if missing:
                unresolved[node] = missing
        return unresolved

    def __len__(self) -> int:
        """Return the number of nodes in the graph."""
        return len(self._order)

    def __contains__(self, node: object) -> bool:
        """Check if a node is in the graph."""
        return node in self._predecessors

