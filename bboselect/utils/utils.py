import numpy as np
import pandas as pd

from bboselect.configs.configs import DEFAULT_SELECTION_CONFIG


def merge_config(config=None, config_override=None, defaults=None):
    """
    Merge a selection config on top of the defaults and validate it.

    Template keys that the selection step does not use (e.g. "name") are kept.
    """
    base = DEFAULT_SELECTION_CONFIG if defaults is None else defaults
    final_config = {**base, **(config or {}), **(config_override or {})}

    if not final_config["noise_add"] > 0:
        raise ValueError(f"noise_add must be positive, got {final_config['noise_add']}")
    if int(final_config["max_tries"]) < 1:
        raise ValueError(f"max_tries must be >= 1, got {final_config['max_tries']}")
    if not final_config["eps_scale"] > 0:
        raise ValueError(f"eps_scale must be positive, got {final_config['eps_scale']}")
    if final_config["dup_tolerance"] < 0:
        raise ValueError(f"dup_tolerance must be >= 0, got {final_config['dup_tolerance']}")

    final_config["max_tries"] = int(final_config["max_tries"])
    return final_config


def as_matrix(table, columns=None):
    """Return the given columns of a DataFrame (or an array) as a 2-D float array."""
    if isinstance(table, pd.DataFrame):
        if columns is not None:
            table = table[list(columns)]
        return table.to_numpy(dtype=float)
    arr = np.asarray(table, dtype=float)
    if arr.ndim == 1:
        arr = arr.reshape(1, -1) if arr.size else arr.reshape(0, 0)
    return arr


def cycle_rows(table, n_rows):
    """Repeat the rows of a table in order until n_rows rows are collected."""
    if len(table) == 0:
        raise ValueError("cannot cycle rows of an empty table")
    idx = np.resize(np.arange(len(table)), n_rows)
    return table.iloc[idx].reset_index(drop=True)
