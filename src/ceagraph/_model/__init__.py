"""Node graph model for cost-effectiveness analyses.

This module provides the pure data structures describing a CEA model,
independent of how it was authored (built-in catalog or loaded JSON) and of
how it is presented.

Key types:
- NodeKind: Enum for node roles (INPUT, CALCULATION, ADJUSTMENT, OUTPUT)
- ValueFormat: Enum of display formats
- Node: A single named quantity with an optional compute rule
- Region: A named set of base values
- CEAModel: Nodes plus regions and presentational metadata
"""

from ._cea_model import CEAModel, LayoutSection, NarrativeFn, Region
from ._node import ComputeFn, Node, NodeKind, ValueFormat

__all__ = [
    "CEAModel",
    "ComputeFn",
    "LayoutSection",
    "NarrativeFn",
    "Node",
    "NodeKind",
    "Region",
    "ValueFormat",
]
