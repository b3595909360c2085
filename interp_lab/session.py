"""
Interactive state behind the graph window.

The session owns the parameter set, the paint mode, one perturbation model
and the five evaluators built against it.  Every toolbar action validates its
effect first: on rejection it returns a message and leaves the state alone
(the mode fallback of :meth:`InterpolationSession.change_mode` is the one
exception), on success it returns an empty string.  No action raises for bad
user input.
"""

from __future__ import annotations

import logging
from enum import IntEnum
from typing import Callable, Optional

from .evaluators import (
    Evaluator,
    FunctionEvaluator,
    NewtonInterpolant,
    ResidualEvaluator,
    SplineInterpolant,
)
from .functions import (
    EPS,
    FunctionKind,
    function_label,
    get_function_bounds_by_kind,
    minmax,
    next_function_kind,
)
from .perturbation import CommonParams, PerturbationModel

logger = logging.getLogger(__name__)
logger.addHandler(logging.NullHandler())

NEWTON_LIMITS_MIN: int = 2
NEWTON_LIMITS_MAX: int = 40

SPLINE_LIMITS_MIN: int = 3
SPLINE_LIMITS_MAX: int = 10_000_000_000_000

MIN_INTERVAL_LENGTH: float = 1e-5
MAX_INTERVAL_LENGTH: float = 1e306

# Vertical headroom added above and below the drawn range.
SCALING_MARGIN: float = 0.01


class PaintMode(IntEnum):
    NEWTON = 0
    NEWTON_RESIDUAL = 1
    SPLINE = 2
    SPLINE_RESIDUAL = 3
    BOTH = 4
    BOTH_RESIDUAL = 5


_PAINT_MODE_LABELS: dict[PaintMode, str] = {
    PaintMode.NEWTON: "Newton",
    PaintMode.NEWTON_RESIDUAL: "Newton's residual",
    PaintMode.SPLINE: "Spline",
    PaintMode.SPLINE_RESIDUAL: "Spline's residual",
    PaintMode.BOTH: "Spline and Newton",
    PaintMode.BOTH_RESIDUAL: "Newton's and Spline's residual",
}

NEWTON_MODES: frozenset[PaintMode] = frozenset(
    {PaintMode.NEWTON, PaintMode.NEWTON_RESIDUAL, PaintMode.BOTH, PaintMode.BOTH_RESIDUAL}
)
SPLINE_MODES: frozenset[PaintMode] = frozenset(
    {PaintMode.SPLINE, PaintMode.SPLINE_RESIDUAL, PaintMode.BOTH, PaintMode.BOTH_RESIDUAL}
)
RESIDUAL_MODES: frozenset[PaintMode] = frozenset(
    {PaintMode.NEWTON_RESIDUAL, PaintMode.SPLINE_RESIDUAL, PaintMode.BOTH_RESIDUAL}
)


def paint_mode_label(mode: PaintMode) -> str:
    return _PAINT_MODE_LABELS[PaintMode(mode)]


def next_paint_mode(mode: PaintMode) -> PaintMode:
    return PaintMode((int(mode) + 1) % len(PaintMode))


class InterpolationSession:

    def __init__(
        self,
        params: Optional[CommonParams] = None,
        mode: PaintMode = PaintMode.SPLINE,
    ) -> None:
        self.params = params if params is not None else CommonParams()
        self.mode = mode
        self.perturbation = PerturbationModel(self.params)

        if self.params.function_kind == FunctionKind.NONE:
            message = self.change_function()
            if message:
                raise ValueError(message)

        self.base = FunctionEvaluator(self.params, self.perturbation)
        self.newton = NewtonInterpolant(self.params, self.perturbation)
        self.spline = SplineInterpolant(self.params, self.perturbation)
        self.newton_residual = ResidualEvaluator(self.params, self.perturbation, self.newton)
        self.spline_residual = ResidualEvaluator(self.params, self.perturbation, self.spline)

        # Last entry of each list drives the vertical scaling.
        self._paint_lists: dict[PaintMode, tuple[Evaluator, ...]] = {
            PaintMode.NEWTON: (self.newton, self.base),
            PaintMode.NEWTON_RESIDUAL: (self.newton_residual,),
            PaintMode.SPLINE: (self.spline, self.base),
            PaintMode.SPLINE_RESIDUAL: (self.spline_residual,),
            PaintMode.BOTH: (self.spline, self.newton, self.base),
            PaintMode.BOTH_RESIDUAL: (self.spline_residual, self.newton_residual),
        }

    # ------------------------------------------------------------------
    # Toolbar actions
    # ------------------------------------------------------------------

    def change_function(self) -> str:
        kind = next_function_kind(self.params.function_kind)
        lo, hi = get_function_bounds_by_kind(kind)
        if self.params.left_bound < lo or self.params.right_bound > hi:
            return self._reject("ERROR! Incorrect limits for function.")

        self.params.function_kind = kind
        self.perturbation.set_dirty()
        return ""

    def change_mode(self) -> str:
        mode = next_paint_mode(self.mode)
        if mode in NEWTON_MODES and self.params.number_points > NEWTON_LIMITS_MAX:
            self.mode = PaintMode.SPLINE_RESIDUAL if mode in RESIDUAL_MODES else PaintMode.SPLINE
            return self._reject("ERROR! N is too big for Newton.\nNewton is replaced with a Spline.")

        self.mode = mode
        return ""

    def zoom_in(self) -> str:
        return self._rescale(0.5, lambda length: length < MIN_INTERVAL_LENGTH, "ERROR! Too small length")

    def zoom_out(self) -> str:
        return self._rescale(2.0, lambda length: length > MAX_INTERVAL_LENGTH, "ERROR! Too big length")

    def raise_n(self) -> str:
        return self._resample(self.params.number_points * 2)

    def reduce_n(self) -> str:
        return self._resample(self.params.number_points // 2)

    def add_precision(self) -> str:
        self.perturbation.raise_coefficient()
        return ""

    def remove_precision(self) -> str:
        self.perturbation.reduce_coefficient()
        return ""

    def _rescale(self, factor: float, rejects: Callable[[float], bool], message: str) -> str:
        a, b = self.params.left_bound, self.params.right_bound
        mid = (a + b) / 2.0
        b = (b - mid) * factor + mid
        a = (a - mid) * factor + mid

        if rejects(abs(b - a)):
            return self._reject(message)

        lo, hi = get_function_bounds_by_kind(self.params.function_kind)
        if a < lo or b > hi:
            return self._reject("ERROR! Incorrect limits for function.")

        self.params.left_bound = a
        self.params.right_bound = b
        self.perturbation.set_dirty()
        return ""

    def _resample(self, n: int) -> str:
        if self.mode in NEWTON_MODES:
            if n > NEWTON_LIMITS_MAX:
                return self._reject("ERROR! N is too big for Newton.")
            if n < NEWTON_LIMITS_MIN:
                return self._reject("ERROR! N is too small for Newton.")
        if self.mode in SPLINE_MODES:
            if n > SPLINE_LIMITS_MAX:
                return self._reject("ERROR! N is too big for Spline.")
            if n < SPLINE_LIMITS_MIN:
                return self._reject("ERROR! N is too small for Spline.")

        self.params.number_points = n
        self.perturbation.set_dirty()
        return ""

    @staticmethod
    def _reject(message: str) -> str:
        logger.warning("%s", message.replace("\n", " "))
        return message

    # ------------------------------------------------------------------
    # Rendering pass
    # ------------------------------------------------------------------

    def evaluators_to_paint(self) -> tuple[Evaluator, ...]:
        return self._paint_lists[self.mode]

    def refresh(self) -> tuple[Evaluator, ...]:
        """Bring the evaluators of the current mode up to date and return them."""
        evaluators = self.evaluators_to_paint()
        for evaluator in evaluators:
            evaluator.update(self.params)
        return evaluators

    def scaling_limits(self, evaluator: Evaluator) -> tuple[float, float]:
        low, high = minmax(
            self.params.left_bound,
            self.params.right_bound,
            evaluator.value_getter(),
            self.params.number_points,
        )
        span = high - low
        delta = SCALING_MARGIN * span if span > EPS else SCALING_MARGIN
        return low - delta, high + delta

    def status_lines(self, limits: tuple[float, float]) -> list[str]:
        p = self.params
        extent = max(abs(limits[0]), abs(limits[1]))
        return [
            f"k = {int(p.function_kind)}  {function_label(p.function_kind)}",
            paint_mode_label(self.mode),
            f"N = {p.number_points}",
            f"[a;b] = [{p.left_bound:g};{p.right_bound:g}]",
            f"max{{|Fmin|, |Fmax|}} = {extent:.2e}",
            f"Precision = {self.perturbation.get_value():g}",
        ]
