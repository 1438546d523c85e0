"""Display formatting for node values."""

from __future__ import annotations

import math
from typing import TYPE_CHECKING

from ._model import NodeKind, ValueFormat

if TYPE_CHECKING:
    from ._model import Node

_MILLION = 1_000_000
_GROUPED_THRESHOLD = 10_000
_SMALL_PERCENTAGE = 0.01


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def format_integer(value: float) -> str:
    """Round half up to an integer and insert comma thousands separators.

    Example:
        >>> format_integer(12344.5)
        '12,345'

    """
    if math.isnan(value) or math.isinf(value):
        return str(value)
    return f"{_round_half_up(value):,}"


def format_value(value: float, fmt: ValueFormat | str) -> str:
    """Format a value for display according to its format tag.

    Args:
        value: The numeric value to format.
        fmt: The display format of the node.

    Returns:
        The formatted string. Unknown format tags fall back to ``str(value)``.

    Example:
        >>> format_value(1_500_000, ValueFormat.CURRENCY)
        '$1.50M'
        >>> format_value(0.297, "percentage")
        '29.7%'

    """
    if math.isnan(value) or math.isinf(value):
        return str(value)

    match fmt:
        case ValueFormat.CURRENCY:
            if abs(value) >= _MILLION:
                return f"${value / _MILLION:.2f}M"
            if abs(value) >= _GROUPED_THRESHOLD:
                return f"${format_integer(value)}"
            return f"${value:.2f}"
        case ValueFormat.NUMBER:
            if abs(value) >= _GROUPED_THRESHOLD:
                return format_integer(value)
            if abs(value) >= 1:
                return f"{value:.1f}"
            return f"{value:.4f}"
        case ValueFormat.PERCENTAGE:
            if abs(value) < _SMALL_PERCENTAGE:
                return f"{value * 100:.3f}%"
            return f"{value * 100:.1f}%"
        case ValueFormat.MULTIPLIER:
            return f"{value:.1f}x"
        case ValueFormat.UNITS_OF_VALUE:
            return f"{value:.2f} UoV"
        case _:
            return str(value)


def format_signed_percentage(value: float) -> str:
    """Format a fractional delta as a percentage with an explicit sign.

    Example:
        >>> format_signed_percentage(-0.08)
        '-8.0%'
        >>> format_signed_percentage(0.08)
        '+8.0%'

    """
    if value >= 0:
        return f"+{abs(value) * 100:.1f}%"
    return f"{value * 100:.1f}%"


def format_node_value(node: Node, value: float) -> str:
    """Format a value the way the given node displays it.

    Adjustment nodes always render as signed percentages, whatever their
    declared format.
    """
    if node.kind == NodeKind.ADJUSTMENT:
        return format_signed_percentage(value)
    return format_value(value, node.format)
