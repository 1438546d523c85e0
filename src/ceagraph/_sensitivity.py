"""One-at-a-time sensitivity of an output to the editable inputs."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from ._eval_engine import evaluate
from ._graph import DependencyGraph
from ._model import NodeKind

if TYPE_CHECKING:
    from ._model import Node
    from ._session import Session

logger = logging.getLogger(__name__)

_VARIED_KINDS = (NodeKind.INPUT, NodeKind.ADJUSTMENT)


@dataclass(frozen=True, slots=True)
class SensitivityRow:
    """Target values at the low and high perturbation of one input."""

    node: Node
    value: float
    low_input: float
    high_input: float
    low: float
    high: float

    @property
    def swing(self) -> float:
        return abs(self.high - self.low)


def _perturbed(node: Node, value: float, step: float) -> tuple[float, float]:
    # Adjustments move additively so that zero-valued adjustments still vary.
    if node.kind == NodeKind.ADJUSTMENT:
        return value - step, value + step
    return value * (1 - step), value * (1 + step)


def sensitivity(session: Session, target_id: str, *, step: float = 0.1) -> list[SensitivityRow]:
    """Measure how much each editable upstream input moves a target node.

    Every editable input or adjustment node that the target depends on is
    perturbed in turn, on top of the session's current overrides. The
    session itself is not modified.

    Args:
        session: The session providing the model, region and overrides.
        target_id: Id of the node whose value is observed.
        step: Relative step for inputs; absolute step for adjustments.

    Returns:
        One row per varied input, largest swing first.

    Raises:
        KeyError: If the target is not a node of the model.
        ValueError: If ``step`` is not positive.

    """
    if step <= 0:
        msg = f"Sensitivity step must be positive, got {step}"
        raise ValueError(msg)

    model = session.model
    model.get_node(target_id)
    upstream = DependencyGraph.from_nodes(model.nodes).ancestors(target_id)

    base_values = session.region.base_values
    overrides = session.overrides
    current = session.current_values()

    rows = []
    for node in model.nodes:
        if node.id not in upstream or not node.editable or node.kind not in _VARIED_KINDS:
            continue
        value = current[node.id]
        low_input, high_input = _perturbed(node, value, step)
        low = evaluate(model.nodes, base_values, {**overrides, node.id: low_input})[target_id]
        high = evaluate(model.nodes, base_values, {**overrides, node.id: high_input})[target_id]
        rows.append(SensitivityRow(node, value, low_input, high_input, low, high))

    logger.debug("Sensitivity of '%s' to %d inputs", target_id, len(rows))
    return sorted(rows, key=lambda row: row.swing, reverse=True)
