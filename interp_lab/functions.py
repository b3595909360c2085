"""
Registry of the seven analytic test functions.

Each function is written once as a sympy expression; the first and second
derivatives are derived symbolically and every expression is lambdified into
a numpy callable.  Arguments are coerced to ``np.float64`` before evaluation
so the process-wide numpy error policy (see ``interp_lab.cli``) governs every
value, derivative and range scan.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import IntEnum
from typing import Callable

import numpy as np
import sympy as sp

logger = logging.getLogger(__name__)
logger.addHandler(logging.NullHandler())

ScalarFunction = Callable[[float], float]

# ---------------------------------------------------------------------------
# Defaults and tolerances
# ---------------------------------------------------------------------------

DEFAULT_LEFT_BOUND: float = -10.0
DEFAULT_RIGHT_BOUND: float = 10.0
DEFAULT_NUMBER_POINTS: int = 10

EPS: float = 1e-15


class FunctionKind(IntEnum):
    CONSTANT = 0
    LINEAR = 1
    QUADRATIC = 2
    CUBIC = 3
    QUARTIC = 4
    EXPONENT = 5
    FRACTION = 6

    NONE = 7  # no function selected


FUNCTION_COUNT: int = int(FunctionKind.NONE)


@dataclass(frozen=True, slots=True)
class FunctionDescriptor:
    value: ScalarFunction
    first_derivative: ScalarFunction
    second_derivative: ScalarFunction
    bounds: tuple[float, float]
    label: str


# ===========================================================================
# Expression table
# ===========================================================================

_x = sp.Symbol("x", real=True)

# Bounds keep f and f'' inside double range.
_TABLE: dict[FunctionKind, tuple[sp.Expr, tuple[float, float], str]] = {
    FunctionKind.CONSTANT: (sp.Integer(1), (-1e306, 1e306), "f (x) = 1"),
    FunctionKind.LINEAR: (_x, (-1e306, 1e306), "f (x) = x"),
    FunctionKind.QUADRATIC: (_x ** 2, (-1e153, 1e153), "f (x) = x^2"),
    FunctionKind.CUBIC: (_x ** 3, (-1e100, 1e100), "f (x) = x^3"),
    FunctionKind.QUARTIC: (_x ** 4, (-1e75, 1e75), "f (x) = x^4"),
    FunctionKind.EXPONENT: (sp.exp(_x), (-500.0, 500.0), "f (x) = exp (x)"),
    FunctionKind.FRACTION: (1 / (25 * _x ** 2 + 1), (-1e50, 1e50), "f (x) = 1 / (25x^2 + 1)"),
}

_INVALID_LABEL = "Invalid function type"


def _to_scalar_function(expr: sp.Expr) -> ScalarFunction:
    compiled = sp.lambdify(_x, expr, modules="numpy")

    def evaluate(x: float) -> float:
        return np.float64(compiled(np.float64(x)))

    return evaluate


def _build_registry() -> dict[FunctionKind, FunctionDescriptor]:
    registry: dict[FunctionKind, FunctionDescriptor] = {}
    for kind, (expr, bounds, label) in _TABLE.items():
        first = sp.diff(expr, _x)
        second = sp.diff(first, _x)
        registry[kind] = FunctionDescriptor(
            value=_to_scalar_function(expr),
            first_derivative=_to_scalar_function(first),
            second_derivative=_to_scalar_function(second),
            bounds=bounds,
            label=label,
        )
        logger.debug("registered %s: f' = %s, f'' = %s", kind.name, first, second)
    return registry


_REGISTRY: dict[FunctionKind, FunctionDescriptor] = _build_registry()


# ===========================================================================
# Lookups
# ===========================================================================

def get_descriptor(kind: FunctionKind) -> FunctionDescriptor:
    try:
        return _REGISTRY[FunctionKind(kind)]
    except KeyError:
        raise ValueError(f"no function selected ({FunctionKind(kind).name})") from None


def get_function_by_kind(kind: FunctionKind) -> ScalarFunction:
    return get_descriptor(kind).value


def get_first_derivative_by_kind(kind: FunctionKind) -> ScalarFunction:
    return get_descriptor(kind).first_derivative


def get_second_derivative_by_kind(kind: FunctionKind) -> ScalarFunction:
    return get_descriptor(kind).second_derivative


def get_function_bounds_by_kind(kind: FunctionKind) -> tuple[float, float]:
    """Domain outside of which evaluating f or f'' may overflow.

    The sentinel kind reports the empty domain ``(0, 0)``.
    """
    descriptor = _REGISTRY.get(FunctionKind(kind))
    return descriptor.bounds if descriptor is not None else (0.0, 0.0)


def function_label(kind: FunctionKind) -> str:
    descriptor = _REGISTRY.get(FunctionKind(kind))
    return descriptor.label if descriptor is not None else _INVALID_LABEL


def next_function_kind(kind: FunctionKind) -> FunctionKind:
    return FunctionKind((int(kind) + 1) % FUNCTION_COUNT)


# ===========================================================================
# Numeric helpers
# ===========================================================================

def math_equal(x: float, y: float) -> bool:
    """Scale-relative equality used for parameter change detection."""
    if x == y:
        return True
    return abs(x - y) < EPS * max(abs(x), abs(y))


def minmax(
    lo: float, hi: float, func: ScalarFunction, number_points: int
) -> tuple[float, float]:
    """Range of *func* sampled at ``number_points`` evenly spaced points.

    Samples are ``lo + i * (hi - lo) / number_points`` for
    ``i in [0, number_points)``, so *hi* itself is not sampled.  An inverted
    interval (``lo > hi``) yields the sentinel pair ``(-1, 1)``.
    """
    if lo > hi:
        return -1.0, 1.0

    step = (np.float64(hi) - lo) / number_points
    low = high = func(lo)
    for i in range(1, number_points):
        value = func(lo + step * i)
        if value < low:
            low = value
        if value > high:
            high = value
    return float(low), float(high)
