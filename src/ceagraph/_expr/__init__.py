"""Restricted expression language for text-authored models.

Formulas in model files are parsed into a whitelisted expression tree and
evaluated against the resolved value map. Nothing is passed to ``eval``.

Key types:
- Expression: A compiled arithmetic expression over node values
- NarrativeTemplate: A compiled summary text with embedded expressions
- ExpressionError: Raised for malformed or unresolvable expressions
"""

from ._expression import Expression, ExpressionError, compile_expression
from ._narrative import NarrativeTemplate, compile_narrative

__all__ = [
    "Expression",
    "ExpressionError",
    "NarrativeTemplate",
    "compile_expression",
    "compile_narrative",
]
