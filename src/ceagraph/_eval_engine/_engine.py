"""Core evaluation engine for CEA node graphs."""

from __future__ import annotations

import logging
import math
from types import MappingProxyType
from typing import TYPE_CHECKING

from ceagraph._graph import depth_first_order

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence

    from ceagraph._model import Node

logger = logging.getLogger(__name__)


def evaluation_order(nodes: Sequence[Node]) -> list[Node]:
    """Return the nodes in the order they are evaluated.

    Each node's dependencies are visited in declared order before the node
    itself, walking the node list in its given order. The order is stable
    for a fixed node list.

    Args:
        nodes: The nodes of a model.

    Returns:
        The same nodes, every node after all of its dependencies.

    Raises:
        CycleError: If the dependencies of the nodes form a cycle.

    """
    by_id = {node.id: node for node in nodes}
    order = depth_first_order(list(by_id), {node.id: node.dependencies for node in nodes})
    return [by_id[node_id] for node_id in order]


def evaluate(
    nodes: Sequence[Node],
    base_values: Mapping[str, float],
    overrides: Mapping[str, float] | None = None,
) -> dict[str, float]:
    """Evaluate every node for one scenario.

    This is a pure function. Values are resolved as follows:
    1. Start from the base values with the overrides laid on top
    2. Walk the nodes in evaluation order
    3. Leaf nodes keep their override or base value (NaN if they have neither)
    4. Editable derived nodes that are overridden keep the override
    5. Every other derived node is computed from the values resolved so far

    Errors raised by compute rules are not caught.

    Args:
        nodes: The nodes of the model.
        base_values: Values of the active region, including hidden parameters.
        overrides: User-supplied replacement values by node id.

    Returns:
        A value for every node id, plus the base values that are not nodes.

    Raises:
        CycleError: If the dependencies of the nodes form a cycle.

    Example:
        >>> values = evaluate(model.nodes, region.base_values, {"grant_size": 2_000_000})
        >>> values["num_u5_reached"]

    """
    overrides = overrides or {}
    values: dict[str, float] = {**base_values, **overrides}
    resolved = MappingProxyType(values)

    order = evaluation_order(nodes)
    logger.debug("Evaluating %d nodes with %d overrides", len(order), len(overrides))

    for node in order:
        if node.compute is None:
            if node.id not in values:
                logger.warning("No base value for leaf node '%s'", node.id)
                values[node.id] = math.nan
            continue

        if node.editable and node.id in overrides:
            logger.debug("Keeping override for %s = %r", node.id, overrides[node.id])
            continue

        values[node.id] = float(node.compute(resolved))
        logger.debug("Computed %s = %r", node.id, values[node.id])

    return values
