import numpy as np
import pandas as pd
import pytest

from bboselect.bounds import make_bounds
from bboselect.candidateGeneration import PerturbationError, apply_noise, local_candidates


def test_local_candidates_stay_within_radius_and_bounds():
    rng = np.random.default_rng(0)
    centers = np.zeros((200, 3))

    X = local_candidates(centers, 0.1, rng=rng)
    assert X.shape == (200, 3)
    assert np.all(np.abs(X) <= 0.1)

    clipped = local_candidates(centers, 0.1, bounds=np.array([[0.0, 1.0]] * 3), rng=rng)
    assert np.all(clipped >= 0.0)


def test_apply_noise_respects_bounds(cont_bounds):
    rng = np.random.default_rng(1)
    table = pd.DataFrame({"a": [0.0, 10.0, 5.0] * 50, "b": [-5.0, 5.0, 0.0] * 50})

    noisy = apply_noise(table, cont_bounds, noise_add=0.5, rng=rng)

    assert noisy.shape == table.shape
    assert noisy["a"].between(0.0, 10.0).all()
    assert noisy["b"].between(-5.0, 5.0).all()
    # window is +/- noise_add * range / 2
    assert np.all(np.abs(noisy["a"] - table["a"]) <= 2.5)
    assert not noisy.equals(table)


def test_apply_noise_keeps_integers_integer(int_bounds):
    rng = np.random.default_rng(2)
    table = pd.DataFrame({"x": [3.0] * 50, "y": [1.0] * 50, "gp_utility": 0.7})

    noisy = apply_noise(table, int_bounds, noise_add=0.1, rng=rng)

    values = noisy[["x", "y"]].to_numpy()
    assert np.all(values == np.round(values))
    assert noisy["x"].between(1, 5).all()
    assert noisy["y"].between(1, 5).all()
    # integer rows can always reach a neighbour
    assert (noisy["x"] != 3.0).any()
    assert (noisy["gp_utility"] == 0.7).all()


def test_apply_noise_keeps_index(cont_bounds):
    table = pd.DataFrame({"a": [1.0, 2.0], "b": [0.0, 0.0]}, index=[4, 7])

    noisy = apply_noise(table, cont_bounds, rng=np.random.default_rng(0))

    assert list(noisy.index) == [4, 7]


def test_apply_noise_fails_on_zero_width_bounds():
    bounds = make_bounds({"a": (0.0, 1.0), "b": (2.0, 2.0)})
    table = pd.DataFrame({"a": [0.5], "b": [2.0]})

    with pytest.raises(PerturbationError, match="zero-width"):
        apply_noise(table, bounds)


def test_apply_noise_fails_on_bad_input(cont_bounds):
    with pytest.raises(PerturbationError):
        apply_noise(pd.DataFrame({"a": [np.nan], "b": [0.0]}), cont_bounds)
    with pytest.raises(PerturbationError):
        apply_noise(pd.DataFrame({"a": [1.0]}), cont_bounds)
    with pytest.raises(PerturbationError):
        apply_noise(pd.DataFrame({"a": [1.0], "b": [0.0]}), cont_bounds, noise_add=0.0)


def test_perturbation_error_is_a_value_error():
    assert issubclass(PerturbationError, ValueError)
