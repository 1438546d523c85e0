"""Floating-point arithmetic that never raises.

Python raises on division by zero and on a few other domain errors for
which IEEE-754 defines a result. Compute rules use these helpers instead,
so driving a denominator to zero with an override yields ``inf``, ``-inf``
or ``nan`` and the rest of the model still evaluates.
"""

import math


def divide(a: float, b: float) -> float:
    """Divide ``a`` by ``b``.

    Example:
        >>> divide(1.0, 0.0)
        inf
        >>> divide(0.0, 0.0)
        nan

    """
    if b == 0:
        if a == 0 or math.isnan(a):
            return math.nan
        return math.copysign(math.inf, a) * math.copysign(1.0, b)
    return a / b


def modulo(a: float, b: float) -> float:
    """Remainder of ``a / b`` with the sign of ``a``."""
    if b == 0 or math.isinf(a):
        return math.nan
    return math.fmod(a, b)


def power(a: float, b: float) -> float:
    if a == 0 and b < 0:
        return math.inf
    try:
        return math.pow(a, b)
    except OverflowError:
        return math.inf
    except ValueError:
        return math.nan


def minimum(*values: float) -> float:
    """Smallest of ``values``, or ``nan`` if any of them is ``nan``."""
    if any(math.isnan(value) for value in values):
        return math.nan
    return min(values)


def maximum(*values: float) -> float:
    """Largest of ``values``, or ``nan`` if any of them is ``nan``."""
    if any(math.isnan(value) for value in values):
        return math.nan
    return max(values)
