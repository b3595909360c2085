from __future__ import annotations

import logging
from dataclasses import dataclass

from .functions import (
    DEFAULT_LEFT_BOUND,
    DEFAULT_NUMBER_POINTS,
    DEFAULT_RIGHT_BOUND,
    FunctionKind,
    get_function_by_kind,
    minmax,
)

logger = logging.getLogger(__name__)
logger.addHandler(logging.NullHandler())

# Share of the sampled maximum injected per unit of coefficient.
NOISE_FRACTION: float = 0.1


@dataclass(slots=True)
class CommonParams:
    """Parameter set shared by the session and every evaluator.

    No validation happens here: bound ordering, domain limits and sample
    counts are checked by the session and the command line.
    """

    left_bound: float = DEFAULT_LEFT_BOUND
    right_bound: float = DEFAULT_RIGHT_BOUND
    number_points: int = DEFAULT_NUMBER_POINTS
    function_kind: FunctionKind = FunctionKind.NONE


class PerturbationModel:
    """Noise magnitude injected at the middle sample of every interpolant.

    The value is ``max(f) * 0.1 * coefficient`` over the current bounds and is
    computed at most once per invalidation.  The model keeps a reference to
    the caller's parameter set, so whoever mutates that set must call
    :meth:`set_dirty` afterwards.
    """

    def __init__(self, params: CommonParams) -> None:
        self._params = params
        self._dirty = True
        self._value = 0.0
        self._coefficient = 0

    @property
    def coefficient(self) -> int:
        return self._coefficient

    @property
    def dirty(self) -> bool:
        return self._dirty

    def set_dirty(self) -> None:
        self._dirty = True

    def raise_coefficient(self) -> None:
        self._coefficient += 1
        self.set_dirty()

    def reduce_coefficient(self) -> None:
        self._coefficient -= 1
        self.set_dirty()

    def get_value(self) -> float:
        if self._dirty:
            p = self._params
            _, high = minmax(
                p.left_bound,
                p.right_bound,
                get_function_by_kind(p.function_kind),
                p.number_points,
            )
            self._value = high * NOISE_FRACTION * self._coefficient
            self._dirty = False
            logger.debug(
                "perturbation recomputed: max=%g coefficient=%d value=%g",
                high, self._coefficient, self._value,
            )
        return self._value
