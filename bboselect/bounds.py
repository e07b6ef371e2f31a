import numbers

import numpy as np
import pandas as pd
from sklearn.preprocessing import MinMaxScaler


def make_bounds(bounds):
    """
    Build the bounds table used by every scaling / noise step.

    Parameters
    ----------
    bounds : dict
        Mapping of parameter name -> (lower, upper). A parameter is treated
        as integer-valued when both of its bounds are integers.

    Returns
    -------
    pd.DataFrame
        One row per parameter with columns name, lower, upper, range, integer.
    """
    if isinstance(bounds, pd.DataFrame):
        return bounds.copy()
    if not bounds:
        raise ValueError("bounds must contain at least one parameter")

    rows = []
    for name, pair in bounds.items():
        if len(pair) != 2:
            raise ValueError(f"Bounds for '{name}' must be (lower, upper), got {pair}")
        lower, upper = pair
        is_int = all(
            isinstance(v, numbers.Integral) and not isinstance(v, bool) for v in (lower, upper)
        )
        lower, upper = float(lower), float(upper)
        if not (np.isfinite(lower) and np.isfinite(upper)):
            raise ValueError(f"Bounds for '{name}' must be finite, got {pair}")
        if lower > upper:
            raise ValueError(f"Lower bound above upper bound for '{name}': {pair}")
        rows.append({
            "name": name,
            "lower": lower,
            "upper": upper,
            "range": upper - lower,
            "integer": is_int,
        })

    return pd.DataFrame(rows)


def param_names(bounds):
    return list(bounds["name"])


def _fit_scaler(bounds):
    # Corner rows (lower, upper) define the unit cube exactly
    corners = np.vstack([bounds["lower"].to_numpy(), bounds["upper"].to_numpy()])
    return MinMaxScaler().fit(corners)


def _as_frame(table, names):
    if isinstance(table, pd.DataFrame):
        missing = [n for n in names if n not in table.columns]
        if missing:
            raise ValueError(f"Missing parameter columns: {missing}")
        return table.copy()
    arr = np.atleast_2d(np.asarray(table, dtype=float))
    if arr.shape[1] != len(names):
        raise ValueError(f"Expected {len(names)} columns, got {arr.shape[1]}")
    return pd.DataFrame(arr, columns=names)


def min_max_scale(table, bounds):
    """Map parameter columns from original units onto [0, 1]."""
    names = param_names(bounds)
    out = _as_frame(table, names)
    if out.empty:
        return out
    scaler = _fit_scaler(bounds)
    out[names] = scaler.transform(out[names].to_numpy(dtype=float))
    return out


def un_min_max_scale(table, bounds):
    """
    Inverse of min_max_scale. Integer parameters are rounded and every
    parameter is clipped back into its bounds.
    """
    names = param_names(bounds)
    out = _as_frame(table, names)
    if out.empty:
        return out
    scaler = _fit_scaler(bounds)
    values = scaler.inverse_transform(out[names].to_numpy(dtype=float))

    is_int = bounds["integer"].to_numpy(dtype=bool)
    values[:, is_int] = np.round(values[:, is_int])
    values = np.clip(values, bounds["lower"].to_numpy(), bounds["upper"].to_numpy())

    out[names] = values
    return out
