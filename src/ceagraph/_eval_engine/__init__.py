"""Evaluation engine module for ceagraph.

This module provides pure functions for evaluating CEA node graphs.
The evaluation engine takes nodes, base values and overrides, and produces
a value for every node without side effects.

Key functions:
- evaluate: Resolve every node value for one scenario
- evaluation_order: The deterministic order nodes are resolved in
"""

from ._engine import evaluate, evaluation_order

__all__ = ["evaluate", "evaluation_order"]
