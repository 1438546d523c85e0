"""Interactive session state: active region, overrides and focus."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import TYPE_CHECKING, Literal

from ._eval_engine import evaluate
from ._format import format_node_value
from ._graph import DependencyGraph

if TYPE_CHECKING:
    from ._model import CEAModel, Node, Region

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class OverrideChange:
    """One user override compared with the value it replaced."""

    node: Node
    base_value: float
    value: float

    @property
    def delta(self) -> float:
        return self.value - self.base_value


class Session:
    """The state of one interactive session over a model.

    A session holds the active region, the user's overrides and an optional
    focus node. Value snapshots are fully recomputed after every change and
    cached until the next one.

    Args:
        model: The model to work on.
        region_id: Initial region. Defaults to the model's first region.

    Raises:
        KeyError: If ``region_id`` is not a region of the model.

    Example:
        >>> session = Session(get_model("amf-itn"), "guinea")
        >>> session.set_override("effect_on_deaths", 0.18)
        >>> session.current_values()["deaths_averted_u5"]

    """

    def __init__(self, model: CEAModel, region_id: str | None = None) -> None:
        self._model = model
        self._graph = DependencyGraph.from_nodes(model.nodes)
        self._region = model.get_region(region_id) if region_id is not None else model.default_region
        self._overrides: dict[str, float] = {}
        self._selected_node_id: str | None = None
        self._current: dict[str, float] | None = None
        self._base: dict[str, float] | None = None

    @property
    def model(self) -> CEAModel:
        return self._model

    @property
    def region(self) -> Region:
        return self._region

    @property
    def overrides(self) -> dict[str, float]:
        """A copy of the active overrides."""
        return dict(self._overrides)

    @property
    def selected_node_id(self) -> str | None:
        return self._selected_node_id

    def _invalidate(self, *, base: bool = False) -> None:
        self._current = None
        if base:
            self._base = None

    def select_region(self, region_id: str) -> None:
        """Switch to another region, clearing overrides and the focus node.

        Raises:
            KeyError: If the model has no region with this id.

        """
        self._region = self._model.get_region(region_id)
        self._overrides.clear()
        self._selected_node_id = None
        self._invalidate(base=True)
        logger.debug("Selected region '%s'", region_id)

    def set_override(self, node_id: str, value: float) -> None:
        """Override the value of a node.

        Raises:
            ValueError: If ``value`` is not a finite number.

        """
        if isinstance(value, bool) or not isinstance(value, int | float) or not math.isfinite(value):
            msg = f"Override for '{node_id}' must be a finite number, got {value!r}"
            raise ValueError(msg)
        self._overrides[node_id] = float(value)
        self._invalidate()
        logger.debug("Override %s = %r", node_id, value)

    def reset_overrides(self) -> None:
        self._overrides.clear()
        self._invalidate()

    def current_values(self) -> dict[str, float]:
        """Evaluate the model with the region's base values and the overrides."""
        if self._current is None:
            self._current = evaluate(self._model.nodes, self._region.base_values, self._overrides)
        return dict(self._current)

    def base_values(self) -> dict[str, float]:
        """Evaluate the model with the region's base values only."""
        if self._base is None:
            self._base = evaluate(self._model.nodes, self._region.base_values, {})
        return dict(self._base)

    def select_node(self, node_id: str) -> None:
        """Focus a node, or clear the focus if it is already focused.

        Raises:
            KeyError: If the model has no node with this id.

        """
        self._model.get_node(node_id)
        self._selected_node_id = None if self._selected_node_id == node_id else node_id

    def highlighted_ids(self) -> set[str]:
        """The focus node with its direct dependencies and dependents."""
        if self._selected_node_id is None:
            return set()
        return {self._selected_node_id, *self._graph.neighbours(self._selected_node_id)}

    def changes(self) -> list[OverrideChange]:
        """Describe every override against the value it replaces.

        The base of an override is the region's base value, or the computed
        base value for nodes without one. Overrides of ids that are not
        nodes of the model are skipped.
        """
        base = self.base_values()
        result = []
        for node_id, value in self._overrides.items():
            if not self._model.has_node(node_id):
                continue
            base_value = self._region.base_values.get(node_id, base.get(node_id, math.nan))
            result.append(OverrideChange(self._model.get_node(node_id), float(base_value), value))
        return result

    def relative_change(self, node_id: str) -> float:
        """Return ``(current - base) / base`` for a node, 0.0 when the base is 0."""
        base = self.base_values()[node_id]
        if base == 0:
            return 0.0
        return (self.current_values()[node_id] - base) / base

    def narrative(self) -> str | None:
        """The model's summary text for the current values, if it has one."""
        if self._model.narrative is None:
            return None
        return self._model.narrative(self.current_values(), self._region.name)

    def format_node_value(self, node_id: str, which: Literal["current", "base"] = "current") -> str:
        """Format the current or base value of a node for display."""
        values = self.current_values() if which == "current" else self.base_values()
        return format_node_value(self._model.get_node(node_id), values[node_id])
