"""Tests for narrative templates."""

import pytest

from ceagraph import ExpressionError, compile_narrative


class TestRender:
    """Tests for rendering narrative templates."""

    def test_int_and_region_fields(self) -> None:
        template = compile_narrative("{v.deaths:int} deaths averted in {region}")
        assert template({"deaths": 46.9}, "Chad") == "47 deaths averted in Chad"

    def test_value_format_fields(self) -> None:
        template = compile_narrative("{grant:currency} at {share:percentage}, {ce:multiplier}")
        text = template({"grant": 1_500_000, "share": 0.297, "ce": 12.34}, "Guinea")
        assert text == "$1.50M at 29.7%, 12.3x"

    def test_signed_field(self) -> None:
        template = compile_narrative("Funging {adj:signed}")
        assert template({"adj": -0.08}, "") == "Funging -8.0%"

    def test_default_field_uses_number_format(self) -> None:
        template = compile_narrative("{reached}")
        assert template({"reached": 65_832.79}, "") == "65,833"

    def test_python_format_spec(self) -> None:
        template = compile_narrative("{ce:.2f}")
        assert template({"ce": 3.14159}, "") == "3.14"

    def test_expressions_in_fields(self) -> None:
        template = compile_narrative("{grant / deaths:currency} per death")
        assert template({"grant": 1_000_000, "deaths": 50}, "") == "$20,000 per death"

    def test_literal_braces(self) -> None:
        template = compile_narrative("{{not a field}} {region}")
        assert template({}, "Chad") == "{not a field} Chad"

    def test_references(self) -> None:
        template = compile_narrative("{a + b} and {b:int} in {region}")
        assert template.references == ("a", "b")


class TestCompileErrors:
    """Tests for malformed narrative templates."""

    @pytest.mark.parametrize(
        ("text", "message"),
        [
            ("{}", "Empty field"),
            ("{deaths", "Invalid narrative template"),
            ("{deaths!r}", "Conversion '!r' is not supported"),
            ("{deaths:%%%}", "Invalid format"),
            ("{import os}", "Invalid syntax"),
        ],
    )
    def test_rejected(self, text: str, message: str) -> None:
        with pytest.raises(ExpressionError, match=message):
            compile_narrative(text)
