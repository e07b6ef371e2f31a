import numpy as np

from bboselect.bounds import param_names


class PerturbationError(ValueError):
    """Noise could not produce valid in-bounds parameter sets."""


def local_candidates(centers, radius, bounds=None, rng=None):
    """
    Draw one uniform point around each center.

    centers : array (n_points, dim)
    radius : scalar or array (dim,), half-width of the window per dimension
    bounds : array (dim, 2) of [lower, upper], optional clip
    """
    rng = np.random.default_rng() if rng is None else rng
    centers = np.atleast_2d(np.asarray(centers, dtype=float))
    n_points, dim = centers.shape

    # radius can be scalar to broadcast to all dims
    radius = np.atleast_1d(np.asarray(radius, dtype=float))
    if radius.size == 1:
        radius = np.ones(dim) * radius

    noise = (rng.random((n_points, dim)) * 2 - 1) * radius
    X = centers + noise

    if bounds is not None:
        lb = bounds[:, 0]
        ub = bounds[:, 1]
        X = np.clip(X, lb, ub)

    return X


def apply_noise(table, bounds, noise_add=0.25, rng=None):
    """
    Perturb every parameter column of every row of table (original units).

    Each value is redrawn uniformly within +/- noise_add * range / 2 and
    clipped to its bounds. Integer parameters get a window of at least one
    unit and are rounded, so they can always reach a neighbour.

    Parameters
    ----------
    table : pd.DataFrame
        Rows to perturb; non-parameter columns are carried over unchanged.
    bounds : pd.DataFrame
        Bounds table from make_bounds.
    noise_add : float
        Fraction of each parameter range used as the noise window.
    rng : np.random.Generator, optional

    Returns
    -------
    pd.DataFrame, same shape and index as table.

    Raises
    ------
    PerturbationError
        If a bound has zero width, the input is not finite, or noise_add
        is not positive.
    """
    names = param_names(bounds)
    missing = [n for n in names if n not in table.columns]
    if missing:
        raise PerturbationError(f"Cannot add noise, missing parameter columns: {missing}")
    if not noise_add > 0:
        raise PerturbationError(f"noise_add must be positive to add noise, got {noise_add}")

    ranges = bounds["range"].to_numpy(dtype=float)
    degenerate = list(bounds.loc[ranges <= 0, "name"])
    if degenerate:
        raise PerturbationError(
            f"Cannot add noise to parameters with zero-width bounds: {degenerate}"
        )

    X = table[names].to_numpy(dtype=float)
    if not np.all(np.isfinite(X)):
        raise PerturbationError("Cannot add noise to non-finite parameter values")

    out = table.copy()
    if len(out) == 0:
        return out

    is_int = bounds["integer"].to_numpy(dtype=bool)
    radius = noise_add * ranges / 2
    radius[is_int] = np.maximum(radius[is_int], 1.0)

    lims = bounds[["lower", "upper"]].to_numpy(dtype=float)
    noisy = local_candidates(X, radius, bounds=lims, rng=rng)
    noisy[:, is_int] = np.round(noisy[:, is_int])

    out[names] = noisy
    return out
