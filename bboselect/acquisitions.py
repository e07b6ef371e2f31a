from functools import partial

import numpy as np
from scipy import stats

from bboselect.configs.configs import DEFAULT_ACQ_PARAMS
from bboselect.utils.utils import as_matrix


def acquisition_ucb(mu, sigma, kappa=2.576):
    return mu + kappa * sigma


def acquisition_pi(mu, sigma, y_max, eps=0.0):
    z = (mu - y_max - eps) / (sigma + 1e-12)
    return stats.norm.cdf(z)


def acquisition_ei(mu, sigma, y_max, eps=0.0):
    with np.errstate(divide='ignore'):
        z = (mu - y_max - eps) / (sigma + 1e-12)
        ei = (mu - y_max - eps) * stats.norm.cdf(z) + sigma * stats.norm.pdf(z)
    if np.isscalar(ei):
        if sigma == 0.0:
            ei = 0.0
    else:
        ei[sigma == 0.0] = 0.0

    return ei


def acquisition_eips(mu, sigma, y_max, time_mu, eps=0.0):
    """
    Expected improvement per second: EI divided by the predicted run time.
    """
    time_mu = np.maximum(np.asarray(time_mu, dtype=float), 1e-12)
    return acquisition_ei(mu, sigma, y_max, eps) / time_mu


def evaluate_acquisition(scaled_points, model, acq="ucb", y_max=1.0, kappa=2.576,
                         eps=0.0, time_model=None):
    """
    Evaluate the acquisition function on points in scaled [0, 1] space.

    Parameters
    ----------
    scaled_points : pd.DataFrame or np.ndarray, shape (n_points, n_dims)
    model : fitted regressor with predict(X, return_std=True),
        e.g. sklearn GaussianProcessRegressor
    acq : "ucb", "ei", "poi" (alias "pi") or "eips"
    y_max : best observed (scaled) score, used by ei / poi / eips
    kappa : exploration weight for ucb
    eps : exploration margin for ei / poi / eips
    time_model : fitted regressor predicting run time, required for eips

    Returns
    -------
    np.ndarray of acquisition values, shape (n_points,)
    """
    X = as_matrix(scaled_points)
    if X.shape[0] == 0:
        return np.zeros(0)

    mu, sigma = model.predict(X, return_std=True)
    mu, sigma = np.ravel(mu), np.ravel(sigma)

    acq = acq.lower()
    if acq == "ucb":
        return acquisition_ucb(mu, sigma, kappa=kappa)
    elif acq == "ei":
        return acquisition_ei(mu, sigma, y_max, eps=eps)
    elif acq in ("poi", "pi"):
        return acquisition_pi(mu, sigma, y_max, eps=eps)
    elif acq == "eips":
        if time_model is None:
            raise ValueError("time_model must be provided for eips")
        time_mu = np.ravel(time_model.predict(X))
        return acquisition_eips(mu, sigma, y_max, time_mu, eps=eps)
    else:
        raise ValueError(f"Unknown acquisition function: {acq}")


def make_acquisition_evaluator(model, time_model=None, **acq_params):
    """
    Bind a surrogate and acquisition parameters into the callable
    scaled_points -> utilities used by select_candidates.
    """
    params = {**DEFAULT_ACQ_PARAMS, **acq_params}
    unknown = set(params) - set(DEFAULT_ACQ_PARAMS)
    if unknown:
        raise ValueError(f"Unknown acquisition parameters: {sorted(unknown)}")
    return partial(evaluate_acquisition, model=model, time_model=time_model, **params)
