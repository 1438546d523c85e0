"""Narrative templates: summary text with embedded expressions."""

from __future__ import annotations

import string
from dataclasses import dataclass
from typing import TYPE_CHECKING

from ceagraph._format import format_integer, format_signed_percentage, format_value
from ceagraph._model import ValueFormat

from ._expression import Expression, ExpressionError, compile_expression

if TYPE_CHECKING:
    from collections.abc import Mapping

REGION_FIELD = "region"

_VALUE_FORMATS = frozenset(ValueFormat)


@dataclass(frozen=True, slots=True)
class _Field:
    expression: Expression | None  # None for the region name
    spec: str

    def render(self, values: Mapping[str, float], region_name: str) -> str:
        if self.expression is None:
            return format(region_name, self.spec)

        value = self.expression(values)
        if self.spec in _VALUE_FORMATS:
            return format_value(value, ValueFormat(self.spec))
        if self.spec == "signed":
            return format_signed_percentage(value)
        if self.spec == "int":
            return format_integer(value)
        if not self.spec:
            return format_value(value, ValueFormat.NUMBER)
        return format(value, self.spec)


@dataclass(frozen=True, slots=True)
class NarrativeTemplate:
    """A compiled narrative template.

    Calling the template with the evaluated values and the region name
    returns the summary text.

    Attributes:
        text: The source template.
        parts: Literal text and fields, in order.

    """

    text: str
    parts: tuple[str | _Field, ...]

    @property
    def references(self) -> tuple[str, ...]:
        """Ids read by the embedded expressions, in order of first use."""
        seen: dict[str, None] = {}
        for part in self.parts:
            if isinstance(part, _Field) and part.expression is not None:
                for ref in part.expression.references:
                    seen.setdefault(ref, None)
        return tuple(seen)

    def __call__(self, values: Mapping[str, float], region_name: str) -> str:
        return "".join(
            part if isinstance(part, str) else part.render(values, region_name)
            for part in self.parts
        )


def _compile_field(field_name: str, spec: str, conversion: str | None, text: str) -> _Field:
    if conversion is not None:
        msg = f"Conversion '!{conversion}' is not supported in narrative '{text}'"
        raise ExpressionError(msg)

    if field_name.strip() == REGION_FIELD:
        return _Field(expression=None, spec=spec)

    expression = compile_expression(field_name)
    if spec and spec not in _VALUE_FORMATS and spec not in ("signed", "int"):
        try:
            format(0.0, spec)
        except ValueError as e:
            msg = f"Invalid format '{spec}' in narrative '{text}': {e}"
            raise ExpressionError(msg) from e
    return _Field(expression=expression, spec=spec)


def compile_narrative(text: str) -> NarrativeTemplate:
    """Compile a narrative template.

    Fields are written ``{expression}`` or ``{expression:spec}``. The
    expression uses the same language as node formulas; ``{region}`` inserts
    the region name. ``spec`` may be a value format tag (``currency``,
    ``percentage``, ...), ``signed`` for a signed percentage, ``int`` for a
    rounded integer with separators, or any Python format spec. Fields
    without a spec use the ``number`` format. Write ``{{`` and ``}}`` for
    literal braces.

    Example:
        >>> template = compile_narrative("{v.deaths:int} deaths averted in {region}")
        >>> template({"deaths": 46.9}, "Chad")
        '47 deaths averted in Chad'

    Raises:
        ExpressionError: If the template or any embedded expression is
            malformed.

    """
    try:
        parsed = list(string.Formatter().parse(text))
    except ValueError as e:
        msg = f"Invalid narrative template '{text}': {e}"
        raise ExpressionError(msg) from e

    parts: list[str | _Field] = []
    for literal, field_name, spec, conversion in parsed:
        if literal:
            parts.append(literal)
        if field_name is None:
            continue
        if not field_name.strip():
            msg = f"Empty field in narrative '{text}'"
            raise ExpressionError(msg)
        parts.append(_compile_field(field_name, spec or "", conversion, text))

    return NarrativeTemplate(text=text, parts=tuple(parts))
