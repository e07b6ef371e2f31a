import numpy as np
import pandas as pd
import pytest

from bboselect.acquisitions import make_acquisition_evaluator
from bboselect.bounds import make_bounds


class SumModel:
    """Surrogate stand-in: mean is the coordinate sum, constant std."""

    def __init__(self, std=0.1):
        self.std = std

    def predict(self, X, return_std=False):
        X = np.asarray(X, dtype=float)
        mu = X.sum(axis=1)
        if return_std:
            return mu, np.full(X.shape[0], self.std)
        return mu


@pytest.fixture
def sum_model():
    return SumModel()


@pytest.fixture
def sum_acq(sum_model):
    # ucb with kappa=0 -> utility is the sum of the scaled coordinates
    return make_acquisition_evaluator(sum_model, acq="ucb", kappa=0.0)


@pytest.fixture
def int_bounds():
    return make_bounds({"x": (1, 5), "y": (1, 5)})


@pytest.fixture
def cont_bounds():
    return make_bounds({"a": (0.0, 10.0), "b": (-5.0, 5.0)})


@pytest.fixture
def make_pool():
    def _make_pool(points, utilities, names=("x", "y"), grad_count=True):
        pool = pd.DataFrame(np.asarray(points, dtype=float), columns=list(names))
        pool["gp_utility"] = utilities
        if grad_count:
            pool["grad_count"] = 7
        return pool

    return _make_pool
