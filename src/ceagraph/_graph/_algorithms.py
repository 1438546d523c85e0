"""Graph algorithms for dependency graph operations."""

from collections.abc import Hashable, Mapping, Sequence
from typing import TypeVar

T = TypeVar("T", bound=Hashable)


class CycleError(ValueError):
    """A dependency cycle was found while ordering a graph."""

    def __init__(self, cycle: Sequence[Hashable]) -> None:
        self.cycle = tuple(cycle)
        path = " -> ".join(str(node) for node in self.cycle)
        super().__init__(f"Cycle detected in graph: {path}")


def depth_first_order(
    nodes: Sequence[T],
    predecessors: Mapping[T, Sequence[T]],
) -> list[T]:
    """Order nodes so that every node comes after its dependencies.

    Nodes are visited in the given order. Each node's dependencies are
    visited (in their declared order) before the node itself is emitted, and
    visited nodes are remembered. The result is therefore fully determined by
    the input order, not just some valid topological order.

    Dependencies that are not keys of ``predecessors`` are not part of the
    graph; they are skipped and never emitted.

    Args:
        nodes: The nodes to order, in declaration order.
        predecessors: Mapping from node to the nodes it depends on.

    Returns:
        List of nodes in dependency-first order.

    Raises:
        CycleError: If the graph contains a cycle.

    Example:
        >>> depth_first_order(["c", "a", "b"], {"a": [], "b": ["a"], "c": ["b"]})
        ['a', 'b', 'c']

    """
    done: set[T] = set()
    in_progress: list[T] = []
    order: list[T] = []

    def visit(node: T) -> None:
        if node in done or node not in predecessors:
            return
        if node in in_progress:
            start = in_progress.index(node)
            raise CycleError([*in_progress[start:], node])
        in_progress.append(node)
        for dep in predecessors[node]:
            visit(dep)
        in_progress.pop()
        done.add(node)
        order.append(node)

    for node in nodes:
        visit(node)

    return order
