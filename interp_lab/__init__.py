from .evaluators import (
    Evaluator,
    FunctionEvaluator,
    NewtonInterpolant,
    ResidualEvaluator,
    SplineInterpolant,
)
from .functions import (
    FunctionKind,
    function_label,
    get_first_derivative_by_kind,
    get_function_bounds_by_kind,
    get_function_by_kind,
    get_second_derivative_by_kind,
    math_equal,
    minmax,
    next_function_kind,
)
from .perturbation import CommonParams, PerturbationModel
from .session import InterpolationSession, PaintMode

__all__ = [
    "CommonParams",
    "Evaluator",
    "FunctionEvaluator",
    "FunctionKind",
    "InterpolationSession",
    "NewtonInterpolant",
    "PaintMode",
    "PerturbationModel",
    "ResidualEvaluator",
    "SplineInterpolant",
    "function_label",
    "get_first_derivative_by_kind",
    "get_function_bounds_by_kind",
    "get_function_by_kind",
    "get_second_derivative_by_kind",
    "math_equal",
    "minmax",
    "next_function_kind",
]
