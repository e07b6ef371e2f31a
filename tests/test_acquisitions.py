import numpy as np
import pandas as pd
import pytest
from sklearn.gaussian_process import GaussianProcessRegressor
from sklearn.gaussian_process.kernels import RBF, WhiteKernel

from bboselect.acquisitions import (
    acquisition_ei,
    acquisition_eips,
    acquisition_pi,
    acquisition_ucb,
    evaluate_acquisition,
    make_acquisition_evaluator,
)


def test_ucb_adds_scaled_uncertainty():
    mu = np.array([0.1, 0.5])
    sigma = np.array([0.2, 0.0])

    assert acquisition_ucb(mu, sigma, kappa=2.0).tolist() == pytest.approx([0.5, 0.5])


def test_ei_is_zero_without_uncertainty():
    mu = np.array([0.9, 0.9])
    sigma = np.array([0.0, 0.1])

    ei = acquisition_ei(mu, sigma, y_max=1.0)

    assert ei[0] == 0.0
    assert ei[1] > 0.0


def test_pi_is_a_probability():
    mu = np.linspace(-1, 2, 10)
    pi = acquisition_pi(mu, np.full(10, 0.3), y_max=1.0)

    assert np.all((pi >= 0) & (pi <= 1))
    assert np.all(np.diff(pi) >= 0)


def test_eips_divides_by_predicted_time():
    mu, sigma = np.array([1.0]), np.array([0.5])

    ei = acquisition_ei(mu, sigma, y_max=1.0)
    eips = acquisition_eips(mu, sigma, y_max=1.0, time_mu=np.array([2.0]))

    assert eips[0] == pytest.approx(ei[0] / 2.0)


def test_evaluate_acquisition_uses_model_predictions(sum_model):
    X = pd.DataFrame({"x": [0.1, 0.4], "y": [0.2, 0.4]})

    ucb = evaluate_acquisition(X, sum_model, acq="ucb", kappa=1.0)

    assert ucb.tolist() == pytest.approx([0.4, 0.9])
    assert evaluate_acquisition(np.empty((0, 2)), sum_model).shape == (0,)


def test_evaluate_acquisition_with_gaussian_process():
    rng = np.random.default_rng(0)
    X_train = rng.random((15, 2))
    y_train = np.sin(3 * X_train[:, 0]) + X_train[:, 1]
    gp = GaussianProcessRegressor(
        kernel=RBF(length_scale=np.ones(2)) + WhiteKernel(1e-4),
        normalize_y=True,
        random_state=0,
    ).fit(X_train, y_train)

    for acq in ("ucb", "ei", "poi"):
        values = evaluate_acquisition(rng.random((5, 2)), gp, acq=acq, y_max=y_train.max())
        assert values.shape == (5,)
        assert np.all(np.isfinite(values))


def test_evaluate_acquisition_errors(sum_model):
    X = np.array([[0.1, 0.2]])

    with pytest.raises(ValueError):
        evaluate_acquisition(X, sum_model, acq="nope")
    with pytest.raises(ValueError):
        evaluate_acquisition(X, sum_model, acq="eips")


def test_eips_with_time_model(sum_model):
    class TimeModel:
        def predict(self, X):
            return np.full(len(X), 4.0)

    X = np.array([[0.5, 0.5]])
    eips = evaluate_acquisition(X, sum_model, acq="eips", time_model=TimeModel())
    ei = evaluate_acquisition(X, sum_model, acq="ei")

    assert eips[0] == pytest.approx(ei[0] / 4.0)


def test_make_acquisition_evaluator_binds_parameters(sum_model):
    acq_fn = make_acquisition_evaluator(sum_model, acq="ucb", kappa=0.0)

    assert acq_fn(np.array([[0.25, 0.5]])).tolist() == pytest.approx([0.75])
    with pytest.raises(ValueError):
        make_acquisition_evaluator(sum_model, beta=3.0)
