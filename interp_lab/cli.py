"""Command line and process-wide numeric policy for the graph window."""

from __future__ import annotations

import argparse
import logging
import os
import sys
from types import TracebackType
from typing import Optional, Sequence

import numpy as np

from .functions import FUNCTION_COUNT, FunctionKind, function_label, get_function_bounds_by_kind
from .perturbation import CommonParams
from .session import SPLINE_LIMITS_MIN

logger = logging.getLogger(__name__)
logger.addHandler(logging.NullHandler())

MIN_INITIAL_LENGTH: float = 1e-6


def build_parser() -> argparse.ArgumentParser:
    kinds = "; ".join(f"{int(k)}: {function_label(k)}" for k in list(FunctionKind)[:FUNCTION_COUNT])
    parser = argparse.ArgumentParser(
        prog="interp-lab",
        description="Compare Newton and staggered-spline interpolation of a test function.",
        epilog=f"function kinds: {kinds}",
    )
    parser.add_argument("left_bound", type=float, help="left end a of the interval")
    parser.add_argument("right_bound", type=float, help="right end b of the interval")
    parser.add_argument("number_points", type=int, help="number of samples N")
    parser.add_argument(
        "function_kind", type=int, choices=range(FUNCTION_COUNT), metavar="k",
        help=f"function kind, 0..{FUNCTION_COUNT - 1}",
    )
    return parser


def parse_command_line(argv: Optional[Sequence[str]] = None) -> CommonParams:
    """Parse ``a b n k``; exits with a usage error when they are unusable."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.right_bound - args.left_bound < MIN_INITIAL_LENGTH:
        parser.error(f"b - a must be at least {MIN_INITIAL_LENGTH:g}")
    if args.number_points < SPLINE_LIMITS_MIN:
        parser.error(f"N must be at least {SPLINE_LIMITS_MIN}")
    lo, hi = get_function_bounds_by_kind(FunctionKind(args.function_kind))
    if args.left_bound < lo or args.right_bound > hi:
        parser.error(f"Incorrect limits for function: [{lo:g}; {hi:g}]")

    return CommonParams(
        left_bound=args.left_bound,
        right_bound=args.right_bound,
        number_points=args.number_points,
        function_kind=FunctionKind(args.function_kind),
    )


def enable_float_traps() -> dict[str, str]:
    """Make every numpy floating-point fault raise; returns the old settings."""
    return np.seterr(all="raise")


def _abort_on_numeric_fault(
    exc_type: type[BaseException],
    exc: BaseException,
    tb: Optional[TracebackType],
) -> None:
    if issubclass(exc_type, ArithmeticError):
        logger.critical("floating-point fault, aborting", exc_info=(exc_type, exc, tb))
        logging.shutdown()
        os.abort()
        return
    sys.__excepthook__(exc_type, exc, tb)


def install_fatal_excepthook() -> None:
    """Unhandled arithmetic faults end the process instead of the Qt slot."""
    sys.excepthook = _abort_on_numeric_fault
