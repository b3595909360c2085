from __future__ import annotations

import numpy as np
import pytest

from interp_lab.functions import FunctionKind
from interp_lab.perturbation import CommonParams, PerturbationModel


@pytest.fixture(autouse=True, scope="session")
def float_traps():
    """Run the suite under the same trap policy as the application."""
    old = np.seterr(all="raise")
    yield
    np.seterr(**old)


@pytest.fixture
def linear_params() -> CommonParams:
    return CommonParams(-10.0, 10.0, 10, FunctionKind.LINEAR)


@pytest.fixture
def runge_params() -> CommonParams:
    return CommonParams(-1.0, 1.0, 21, FunctionKind.FRACTION)


def perturbation_with(params: CommonParams, coefficient: int = 0) -> PerturbationModel:
    model = PerturbationModel(params)
    for _ in range(abs(coefficient)):
        if coefficient > 0:
            model.raise_coefficient()
        else:
            model.reduce_coefficient()
    return model
