"""Arithmetic expressions over node values."""

from __future__ import annotations

import ast
import operator
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, TypeAlias

from ceagraph._arithmetic import divide, maximum, minimum, modulo, power

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping

    _Evaluator: TypeAlias = Callable[[Mapping[str, float]], float]

# Name under which formulas may address the value map, as in ``v.grant_size``.
VALUES_NAME = "v"
# Namespace accepted in front of function names, as in ``Math.max(a, b)``.
FUNCTION_NAMESPACE = "Math"


class ExpressionError(ValueError):
    """An expression could not be compiled or evaluated."""


_BINARY_OPERATORS: dict[type[ast.operator], Callable[[float, float], float]] = {
    ast.Add: operator.add,
    ast.Sub: operator.sub,
    ast.Mult: operator.mul,
    ast.Div: divide,
    ast.Mod: modulo,
    ast.Pow: power,
}

_UNARY_OPERATORS: dict[type[ast.unaryop], Callable[[float], float]] = {
    ast.UAdd: operator.pos,
    ast.USub: operator.neg,
}

_FUNCTIONS: dict[str, tuple[Callable[..., float], int, int | None]] = {
    # name: (function, min args, max args)
    "min": (minimum, 2, None),
    "max": (maximum, 2, None),
    "abs": (abs, 1, 1),
}


@dataclass(frozen=True, slots=True)
class Expression:
    """A compiled arithmetic expression.

    Calling the expression with a mapping of values returns a float.

    Attributes:
        text: The source text the expression was compiled from.
        references: Ids the expression reads, in order of first use.

    Example:
        >>> expr = compile_expression("v.grant_size / v.cost_per_child")
        >>> expr.references
        ('grant_size', 'cost_per_child')
        >>> expr({"grant_size": 100.0, "cost_per_child": 4.0})
        25.0

    """

    text: str
    references: tuple[str, ...]
    _evaluate: _Evaluator = field(repr=False, compare=False)

    def __call__(self, values: Mapping[str, float]) -> float:
        return float(self._evaluate(values))


class _Compiler:
    """Turns a Python expression tree into nested closures.

    Only the node types listed in ``_compile`` are accepted; anything else
    is rejected before the expression can ever run.
    """

    def __init__(self, text: str) -> None:
        self.text = text
        self.references: dict[str, None] = {}

    def error(self, message: str) -> ExpressionError:
        return ExpressionError(f"{message} in expression '{self.text}'")

    def _compile(self, node: ast.expr) -> _Evaluator:  # noqa: C901, PLR0911
        match node:
            case ast.Constant(value=bool()):
                raise self.error("Boolean literals are not allowed")
            case ast.Constant(value=int() | float() as number):
                literal = float(number)
                return lambda _values: literal
            case ast.Name(id=name) if name not in (VALUES_NAME, FUNCTION_NAMESPACE):
                return self._reference(name)
            case ast.Attribute(value=ast.Name(id="v"), attr=name):
                return self._reference(name)
            case ast.Subscript(value=ast.Name(id="v"), slice=ast.Constant(value=str() as name)):
                return self._reference(name)
            case ast.BinOp(left=left, op=op, right=right) if type(op) in _BINARY_OPERATORS:
                return self._binary(_BINARY_OPERATORS[type(op)], left, right)
            case ast.UnaryOp(op=op, operand=operand) if type(op) in _UNARY_OPERATORS:
                func = _UNARY_OPERATORS[type(op)]
                inner = self._compile(operand)
                return lambda values: func(inner(values))
            case ast.Call(func=func, args=args, keywords=[]):
                return self._call(func, args)
            case _:
                construct = type(node).__name__
                raise self.error(f"Unsupported construct '{construct}'")

    def _reference(self, name: str) -> _Evaluator:
        self.references.setdefault(name, None)

        def lookup(values: Mapping[str, float]) -> float:
            try:
                return values[name]
            except KeyError:
                msg = f"Unknown reference '{name}' in expression '{self.text}'"
                raise ExpressionError(msg) from None

        return lookup

    def _binary(self, func: Callable[[float, float], float], left: ast.expr, right: ast.expr) -> _Evaluator:
        lhs = self._compile(left)
        rhs = self._compile(right)
        return lambda values: func(lhs(values), rhs(values))

    def _call(self, func: ast.expr, args: list[ast.expr]) -> _Evaluator:
        match func:
            case ast.Name(id=name) | ast.Attribute(value=ast.Name(id="Math"), attr=name) if name in _FUNCTIONS:
                pass
            case _:
                raise self.error("Unsupported function call")

        impl, min_args, max_args = _FUNCTIONS[name]
        if len(args) < min_args or (max_args is not None and len(args) > max_args):
            raise self.error(f"Wrong number of arguments to '{name}'")

        compiled = [self._compile(arg) for arg in args]
        return lambda values: impl(*(arg(values) for arg in compiled))

    def compile(self, tree: ast.Expression) -> Expression:
        evaluate = self._compile(tree.body)
        return Expression(text=self.text, references=tuple(self.references), _evaluate=evaluate)


def compile_expression(text: str) -> Expression:
    """Compile formula text into an invocable expression.

    The language accepts numeric literals, the operators ``+ - * / % **``
    (with unary ``+``/``-``), parentheses, references written as bare names,
    ``v.name`` or ``v["name"]``, and the functions ``min``, ``max`` and
    ``abs`` (optionally written ``Math.min`` etc.).

    Arithmetic follows IEEE-754: dividing by zero yields ``inf``, ``-inf``
    or ``nan`` instead of raising, and ``min``/``max`` return ``nan`` when
    any argument is ``nan``.

    Args:
        text: The formula text.

    Returns:
        The compiled Expression.

    Raises:
        ExpressionError: If the text is empty, not valid syntax, or uses a
            construct outside the language.

    """
    source = text.strip()
    if not source:
        msg = "Empty expression"
        raise ExpressionError(msg)

    try:
        tree = ast.parse(source, mode="eval")
    except SyntaxError as e:
        msg = f"Invalid syntax in expression '{text}': {e.msg}"
        raise ExpressionError(msg) from e

    return _Compiler(text).compile(tree)
