"""Tests for value formatting."""

import math

import pytest

from ceagraph import Node, NodeKind, ValueFormat, format_node_value, format_signed_percentage, format_value
from ceagraph._format import format_integer


class TestFormatValue:
    """Tests for format_value."""

    @pytest.mark.parametrize(
        ("value", "fmt", "expected"),
        [
            (1_500_000, ValueFormat.CURRENCY, "$1.50M"),
            (12_345, ValueFormat.CURRENCY, "$12,345"),
            (15.19, ValueFormat.CURRENCY, "$15.19"),
            (-2_000_000, ValueFormat.CURRENCY, "$-2.00M"),
            (65_832.79, ValueFormat.NUMBER, "65,833"),
            (46.94, ValueFormat.NUMBER, "46.9"),
            (0.12346, ValueFormat.NUMBER, "0.1235"),
            (0.297, ValueFormat.PERCENTAGE, "29.7%"),
            (0.001, ValueFormat.PERCENTAGE, "0.100%"),
            (0.001508, ValueFormat.PERCENTAGE, "0.151%"),
            (12.34, ValueFormat.MULTIPLIER, "12.3x"),
            (116.25262, ValueFormat.UNITS_OF_VALUE, "116.25 UoV"),
        ],
    )
    def test_formats(self, value: float, fmt: ValueFormat, expected: str) -> None:
        assert format_value(value, fmt) == expected

    def test_accepts_plain_string_tag(self) -> None:
        assert format_value(0.297, "percentage") == "29.7%"

    def test_unknown_tag_falls_back_to_str(self) -> None:
        assert format_value(1.5, "fraction") == "1.5"

    def test_non_finite_values(self) -> None:
        assert format_value(math.inf, ValueFormat.CURRENCY) == "inf"
        assert format_value(math.nan, ValueFormat.NUMBER) == "nan"


class TestFormatInteger:
    """Tests for half-up integer rounding."""

    def test_rounds_half_up(self) -> None:
        assert format_integer(12_344.5) == "12,345"
        assert format_integer(2.5) == "3"

    def test_thousands_separators(self) -> None:
        assert format_integer(1_234_567.2) == "1,234,567"


class TestSignedPercentage:
    """Tests for format_signed_percentage."""

    def test_negative(self) -> None:
        assert format_signed_percentage(-0.08) == "-8.0%"

    def test_positive(self) -> None:
        assert format_signed_percentage(0.08) == "+8.0%"

    def test_zero_is_positive(self) -> None:
        assert format_signed_percentage(0.0) == "+0.0%"

    def test_negative_zero_is_positive(self) -> None:
        assert format_signed_percentage(-0.0) == "+0.0%"


class TestFormatNodeValue:
    """Tests for node-aware formatting."""

    def test_adjustment_uses_signed_percentage(self) -> None:
        node = Node(id="adj", kind=NodeKind.ADJUSTMENT, format=ValueFormat.PERCENTAGE)
        assert format_node_value(node, -0.04) == "-4.0%"

    def test_other_kinds_use_declared_format(self) -> None:
        node = Node(id="grant", kind=NodeKind.INPUT, format=ValueFormat.CURRENCY)
        assert format_node_value(node, 1_000_000) == "$1.00M"
