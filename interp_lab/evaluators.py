"""
Evaluators drawn by the graph window.

1.  FunctionEvaluator    the sampled function itself
2.  NewtonInterpolant    global divided-difference polynomial, O(n^2) build
3.  SplineInterpolant    piecewise quadratic on a staggered grid, O(n) build
4.  ResidualEvaluator    |interpolant(x) - f(x)| over any of the above

Every interpolant samples the function at ``number_points`` nodes and adds the
shared perturbation to the middle sample, so methods compared side by side see
identical noise.  Floating-point faults are not caught here.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import replace
from typing import Any, Callable

import numpy as np
from numpy.typing import NDArray

from .functions import (
    get_first_derivative_by_kind,
    get_function_by_kind,
    math_equal,
)
from .perturbation import CommonParams, PerturbationModel

logger = logging.getLogger(__name__)
logger.addHandler(logging.NullHandler())

FloatArray = NDArray[np.floating[Any]]

# ---------------------------------------------------------------------------
# Rendering identifiers (Qt::GlobalColor / Qt::PenStyle values)
# ---------------------------------------------------------------------------

COLOR_RED: int = 7
COLOR_GREEN: int = 8
COLOR_BLUE: int = 9
RESIDUAL_COLOR_OFFSET: int = 6  # red -> darkRed, green -> darkGreen, blue -> darkBlue

SOLID_LINE: int = 1
DOT_LINE: int = 3


# ===========================================================================
# Common interface
# ===========================================================================

class Evaluator(ABC):
    """A real function of one variable rebuilt from a :class:`CommonParams`.

    ``update`` is called once per rendering pass; ``get_value`` only reads
    whatever the last ``resolve`` produced.
    """

    def __init__(self, params: CommonParams, perturbation: PerturbationModel) -> None:
        self._params = replace(params)
        self._perturbation = perturbation

    @property
    def params(self) -> CommonParams:
        return self._params

    def update(self, new_params: CommonParams) -> None:
        if self._skips_update(new_params):
            return
        self._assign_params(new_params)
        self.resize_all()
        self.resolve()

    def _skips_update(self, new_params: CommonParams) -> bool:
        # Skips only when the right bound alone moved; an unchanged set
        # always rebuilds, which is what picks up perturbation changes.
        cur = self._params
        return (
            cur.function_kind == new_params.function_kind
            and cur.number_points == new_params.number_points
            and math_equal(cur.left_bound, new_params.left_bound)
            and not math_equal(cur.right_bound, new_params.right_bound)
        )

    def _assign_params(self, new_params: CommonParams) -> None:
        self._params = replace(new_params)

    def resize_all(self) -> None:
        pass

    def resolve(self) -> None:
        pass

    def value_getter(self) -> Callable[[float], float]:
        return self.get_value

    @abstractmethod
    def get_value(self, x: float) -> float:
        raise NotImplementedError

    @abstractmethod
    def get_color(self) -> int:
        raise NotImplementedError

    def get_line_style(self) -> int:
        return SOLID_LINE


class FunctionEvaluator(Evaluator):

    def get_value(self, x: float) -> float:
        return get_function_by_kind(self._params.function_kind)(x)

    def get_color(self) -> int:
        return COLOR_RED


# ===========================================================================
# Newton divided-difference polynomial
# ===========================================================================

class NewtonInterpolant(Evaluator):
    """Degree ``n - 1`` polynomial through the (perturbed) samples.

    Nodes run from ``right_bound`` down to ``left_bound``; after ``resolve``
    the ``y`` buffer holds the divided differences of the Newton form
    anchored at ``x[0]``.  Degrees above ~40 are numerically useless, but
    the limit is enforced by the session, not here.
    """

    def __init__(self, params: CommonParams, perturbation: PerturbationModel) -> None:
        super().__init__(params, perturbation)
        self._x: FloatArray = np.empty(0, dtype=np.float64)
        self._y: FloatArray = np.empty(0, dtype=np.float64)

    @property
    def nodes(self) -> FloatArray:
        view = self._x.view()
        view.flags.writeable = False
        return view

    @property
    def coefficients(self) -> FloatArray:
        view = self._y.view()
        view.flags.writeable = False
        return view

    def get_color(self) -> int:
        return COLOR_BLUE

    def resize_all(self) -> None:
        n = self._params.number_points
        self._x = np.zeros(n, dtype=np.float64)
        self._y = np.zeros(n, dtype=np.float64)

    def resolve(self) -> None:
        p = self._params
        n = p.number_points
        func = get_function_by_kind(p.function_kind)
        x, y = self._x, self._y

        delta = (p.left_bound - p.right_bound) / (n - 1)
        for i in range(n):
            x[i] = p.right_bound + delta * i
            y[i] = func(x[i])

        y[n // 2] += self._perturbation.get_value()

        for i in range(1, n):
            for j in range(n - 1, i - 1, -1):
                y[j] = (y[j] - y[j - 1]) / (x[j] - x[j - i])

        logger.debug("newton resolved: n=%d, leading coefficient=%g", n, y[n - 1])

    def get_value(self, x: float) -> float:
        nodes, coef = self._x, self._y
        res = 0.0
        for i in range(self._params.number_points - 2, -1, -1):
            res += coef[i + 1]
            res = res * (x - nodes[i])
        return res + coef[0]


# ===========================================================================
# Staggered-grid quadratic spline
# ===========================================================================

class SplineInterpolant(Evaluator):
    """Piecewise quadratic over cells of a staggered grid.

    Cell ``i`` spans ``[eps[i], eps[i + 1]]`` around the sample ``x[i]``;
    the knots sit halfway between samples plus one half-step outside each
    end.  The unknowns of the tridiagonal system are the spline values at
    the knots.  The two boundary rows match the analytic ``f'`` at the end
    samples.  Each cell's
    parabola passes through its two knot values and its sample, which makes
    the curve continuous across knots.
    """

    def __init__(self, params: CommonParams, perturbation: PerturbationModel) -> None:
        super().__init__(params, perturbation)
        empty = np.empty(0, dtype=np.float64)
        self._x: FloatArray = empty
        self._y: FloatArray = empty
        self._eps: FloatArray = empty
        self._left: FloatArray = empty
        self._diagonal: FloatArray = empty
        self._right: FloatArray = empty
        self._rhs: FloatArray = empty
        self._help: FloatArray = empty
        self._ans_1: FloatArray = empty
        self._ans_2: FloatArray = empty
        self._ans_3: FloatArray = empty

    @staticmethod
    def _frozen(buffer: FloatArray) -> FloatArray:
        view = buffer.view()
        view.flags.writeable = False
        return view

    @property
    def nodes(self) -> FloatArray:
        return self._frozen(self._x)

    @property
    def samples(self) -> FloatArray:
        return self._frozen(self._y)

    @property
    def knots(self) -> FloatArray:
        return self._frozen(self._eps)

    @property
    def staggered_values(self) -> FloatArray:
        return self._frozen(self._help)

    def get_color(self) -> int:
        return COLOR_GREEN

    def resize_all(self) -> None:
        n = self._params.number_points
        self._x = np.zeros(n, dtype=np.float64)
        self._y = np.zeros(n, dtype=np.float64)
        self._eps = np.zeros(n + 1, dtype=np.float64)
        self._left = np.zeros(n + 1, dtype=np.float64)
        self._diagonal = np.zeros(n + 1, dtype=np.float64)
        self._right = np.zeros(n + 1, dtype=np.float64)
        self._rhs = np.zeros(n + 1, dtype=np.float64)
        self._help = np.zeros(n + 1, dtype=np.float64)
        # Only [0, n) is filled; the zero tail backs the clamped lookup.
        self._ans_1 = np.zeros(n + 1, dtype=np.float64)
        self._ans_2 = np.zeros(n + 1, dtype=np.float64)
        self._ans_3 = np.zeros(n + 1, dtype=np.float64)

    def resolve(self) -> None:
        p = self._params
        n = p.number_points
        func = get_function_by_kind(p.function_kind)
        deriv = get_first_derivative_by_kind(p.function_kind)
        x, y, eps = self._x, self._y, self._eps

        step = (p.right_bound - p.left_bound) / (n - 1)
        for i in range(n):
            x[i] = p.left_bound + step * i
            y[i] = func(x[i])
        y[n // 2] += self._perturbation.get_value()

        for i in range(1, n):
            eps[i] = (x[i] + x[i - 1]) / 2.0
        eps[0] = p.left_bound - step / 2
        eps[n] = p.right_bound + step / 2

        self._assemble(deriv)
        self._solve()
        self._build_segments()

        logger.debug("spline resolved: n=%d on [%g, %g]", n, eps[0], eps[n])

    def _assemble(self, deriv: Callable[[float], float]) -> None:
        n = self._params.number_points
        x, y, eps = self._x, self._y, self._eps
        left, diagonal, right, rhs = self._left, self._diagonal, self._right, self._rhs

        for i in range(1, n):
            prev_lo = 1.0 / (x[i - 1] - eps[i - 1])
            prev_hi = 1.0 / (eps[i] - x[i - 1])
            prev_cell = 1.0 / (eps[i] - eps[i - 1])
            cur_lo = 1.0 / (x[i] - eps[i])
            cur_hi = 1.0 / (eps[i + 1] - x[i])
            cur_cell = 1.0 / (eps[i + 1] - eps[i])

            left[i] = prev_lo - prev_cell
            diagonal[i] = prev_hi + prev_cell + cur_lo + cur_cell
            right[i] = cur_hi - cur_cell
            rhs[i] = (prev_lo + prev_hi) * y[i - 1] + (cur_lo + cur_hi) * y[i]

        first_lo = 1.0 / (x[0] - eps[0])
        first_hi = 1.0 / (eps[1] - x[0])
        first_cell = 1.0 / (eps[1] - eps[0])
        last_lo = 1.0 / (x[n - 1] - eps[n - 1])
        last_hi = 1.0 / (eps[n] - x[n - 1])
        last_cell = 1.0 / (eps[n] - eps[n - 1])

        left[0] = 0.0
        diagonal[0] = first_cell - first_lo
        right[0] = first_hi - first_cell
        rhs[0] = deriv(x[0]) - (first_lo - first_hi) * y[0]

        left[n] = last_cell - last_lo
        diagonal[n] = last_hi - last_cell
        right[n] = 0.0
        rhs[n] = deriv(x[n - 1]) - y[n - 1] * (last_lo - last_hi)

    def _solve(self) -> None:
        """Thomas algorithm; the bands are consumed in place."""
        n = self._params.number_points
        left, diagonal, right, rhs = self._left, self._diagonal, self._right, self._rhs

        for i in range(n):
            right[i] /= diagonal[i]
            rhs[i] /= diagonal[i]
            diagonal[i + 1] -= right[i] * left[i + 1]
            rhs[i + 1] -= rhs[i] * left[i + 1]
        rhs[n] /= diagonal[n]
        for i in range(n, 0, -1):
            rhs[i - 1] -= rhs[i] * right[i - 1]

        np.copyto(self._help, rhs)

    def _build_segments(self) -> None:
        n = self._params.number_points
        x, y, eps, h = self._x, self._y, self._eps, self._help

        for i in range(n):
            lo_width = x[i] - eps[i]
            hi_width = eps[i + 1] - x[i]
            cell_width = eps[i + 1] - eps[i]
            lo_slope = (y[i] - h[i]) / lo_width
            hi_slope = (h[i + 1] - y[i]) / hi_width

            self._ans_1[i] = h[i]
            self._ans_2[i] = lo_slope - (lo_width / cell_width) * (hi_slope - lo_slope)
            self._ans_3[i] = (1.0 / cell_width) * (hi_slope - lo_slope)

    def segment_value(self, i: int, x: float) -> float:
        """Evaluate the parabola of cell *i* at *x*, wherever *x* lies."""
        t = x - self._eps[i]
        return self._ans_1[i] + self._ans_2[i] * t + self._ans_3[i] * t * t

    def get_value(self, x: float) -> float:
        n = self._params.number_points
        eps = self._eps
        i = int(n * (x - eps[0]) / (eps[n] - eps[0]))
        i = min(max(i, 0), n)
        return self.segment_value(i, x)


# ===========================================================================
# Residual decorator
# ===========================================================================

class ResidualEvaluator(Evaluator):
    """Absolute error of *target* against the function it interpolates.

    The target's own ``update`` is never called: whenever the residual
    rebuilds, it writes its parameter copy onto the target first and then
    drives the target's ``resize_all``/``resolve``.
    """

    def __init__(
        self,
        params: CommonParams,
        perturbation: PerturbationModel,
        target: Evaluator,
    ) -> None:
        super().__init__(params, perturbation)
        self._target = target

    @property
    def target(self) -> Evaluator:
        return self._target

    def _assign_params(self, new_params: CommonParams) -> None:
        super()._assign_params(new_params)
        self._target._assign_params(new_params)

    def resize_all(self) -> None:
        self._target.resize_all()

    def resolve(self) -> None:
        self._target.resolve()

    def get_value(self, x: float) -> float:
        func = get_function_by_kind(self._params.function_kind)
        return abs(self._target.get_value(x) - func(x))

    def get_color(self) -> int:
        return self._target.get_color() + RESIDUAL_COLOR_OFFSET

    def get_line_style(self) -> int:
        return DOT_LINE
