"""Tests for DependencyGraph and graph algorithms."""

import pytest

from ceagraph import Node, NodeKind, ValueFormat
from ceagraph._graph import CycleError, DependencyGraph, depth_first_order


class TestDepthFirstOrder:
    """Tests for the depth_first_order algorithm."""

    def test_empty_graph(self) -> None:
        assert depth_first_order([], {}) == []

    def test_single_node(self) -> None:
        assert depth_first_order(["a"], {"a": []}) == ["a"]

    def test_linear_chain(self) -> None:
        # c depends on b, b depends on a
        result = depth_first_order(["c", "b", "a"], {"a": [], "b": ["a"], "c": ["b"]})
        assert result == ["a", "b", "c"]

    def test_dependencies_visited_in_declared_order(self) -> None:
        result = depth_first_order(["d", "a", "b", "c"], {"a": [], "b": [], "c": [], "d": ["c", "a", "b"]})
        assert result == ["c", "a", "b", "d"]

    def test_diamond_emits_shared_dependency_once(self) -> None:
        preds = {"a": [], "b": ["a"], "c": ["a"], "d": ["b", "c"]}
        assert depth_first_order(["d", "c", "b", "a"], preds) == ["a", "b", "c", "d"]

    def test_unknown_dependencies_are_skipped(self) -> None:
        result = depth_first_order(["b"], {"b": ["hidden"]})
        assert result == ["b"]

    def test_cycle_detection(self) -> None:
        with pytest.raises(CycleError, match="Cycle") as excinfo:
            depth_first_order(["a", "b"], {"a": ["b"], "b": ["a"]})
        assert excinfo.value.cycle == ("a", "b", "a")

    def test_self_loop_detection(self) -> None:
        with pytest.raises(CycleError):
            depth_first_order(["a"], {"a": ["a"]})

    def test_cycle_error_is_value_error(self) -> None:
        with pytest.raises(ValueError, match="a -> b -> c -> a"):
            depth_first_order(["a"], {"a": ["b"], "b": ["c"], "c": ["a"]})

    def test_works_with_integers(self) -> None:
        assert depth_first_order([3, 2, 1], {1: [], 2: [1], 3: [2]}) == [1, 2, 3]


class TestDependencyGraphConstruction:
    """Tests for DependencyGraph construction."""

    def test_empty_graph(self) -> None:
        graph = DependencyGraph.from_dependencies([])
        assert graph.nodes == ()
        assert len(graph) == 0

    def test_from_dependencies(self) -> None:
        graph = DependencyGraph.from_dependencies([("a", []), ("b", ["a"])])
        assert graph.nodes == ("a", "b")
        assert "a" in graph
        assert "c" not in graph

    def test_duplicate_dependencies_are_merged(self) -> None:
        graph = DependencyGraph.from_dependencies([("a", []), ("b", ["a", "a"])])
        assert graph.predecessors("b") == ("a",)
        assert graph.successors("a") == ("b",)

    def test_from_nodes(self) -> None:
        nodes = [
            Node(id="x", kind=NodeKind.INPUT, format=ValueFormat.NUMBER),
            Node(
                id="y",
                kind=NodeKind.CALCULATION,
                format=ValueFormat.NUMBER,
                dependencies=("x",),
                compute=lambda v: v["x"] * 2,
            ),
        ]
        graph = DependencyGraph.from_nodes(nodes)
        assert graph.predecessors("y") == ("x",)


class TestDependencyGraphQueries:
    """Tests for DependencyGraph query methods."""

    @pytest.fixture
    def graph(self) -> DependencyGraph[str]:
        # a -> b -> d, a -> c -> d, c also reads a hidden parameter
        return DependencyGraph.from_dependencies(
            [("a", []), ("b", ["a"]), ("c", ["a", "_hidden"]), ("d", ["b", "c"])],
        )

    def test_predecessors_exclude_unknown_ids(self, graph: DependencyGraph[str]) -> None:
        assert graph.predecessors("c") == ("a",)

    def test_successors_in_declaration_order(self, graph: DependencyGraph[str]) -> None:
        assert graph.successors("a") == ("b", "c")

    def test_neighbours(self, graph: DependencyGraph[str]) -> None:
        assert graph.neighbours("b") == ("a", "d")

    def test_ancestors(self, graph: DependencyGraph[str]) -> None:
        assert graph.ancestors("d") == frozenset({"a", "b", "c"})
        assert graph.ancestors("a") == frozenset()

    def test_descendants(self, graph: DependencyGraph[str]) -> None:
        assert graph.descendants("a") == frozenset({"b", "c", "d"})

    def test_topological_order(self, graph: DependencyGraph[str]) -> None:
        assert graph.topological_order() == ["a", "b", "c", "d"]


class TestDependencyGraphValidation:
    """Tests for cycle and unresolved dependency detection."""

    def test_cycle_rejected_by_topological_order(self) -> None:
        graph = DependencyGraph.from_dependencies([("a", ["b"]), ("b", ["a"])])
        with pytest.raises(CycleError, match="Cycle detected"):
            graph.topological_order()

    def test_unresolved_dependencies(self) -> None:
        graph = DependencyGraph.from_dependencies([("a", ["x", "y"])])
        assert graph.unresolved_dependencies() == {"a": ("x", "y")}
        assert graph.unresolved_dependencies(known={"x"}) == {"a": ("y",)}
