"""Graph module providing dependency graph abstractions.

This module contains:
- DependencyGraph[T]: An immutable view of "depends on" relationships
- depth_first_order: Deterministic dependency-first ordering with cycle detection
- CycleError: Raised when a dependency cycle is found
"""

from ._algorithms import CycleError, depth_first_order
from ._dependency_graph import DependencyGraph

__all__ = ["CycleError", "DependencyGraph", "depth_first_order"]
