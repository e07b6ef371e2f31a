import numpy as np

# Default: continuous parameters, exact duplicate matching
DEFAULT_SELECTION_CONFIG = {
    "noise_add": 0.25,            # noise window as a fraction of each parameter range
    "max_tries": 1000,            # retry ceiling for both backfill loops
    "eps_scale": np.sqrt(2) / 1e3,  # DBSCAN radius per dimension (scaled space)
    "dup_tolerance": 0.0,         # 0.0 = exact match only
    "utility_column": "gp_utility",
    "drop_columns": ["grad_count"],
}

# Template 1: smooth continuous surface, optimiser restarts converge tightly
CONFIG_CONTINUOUS = {
    "name": "continuous",
    "noise_add": 0.1,
    "max_tries": 1000,
    "eps_scale": np.sqrt(2) / 1e3,
    "dup_tolerance": 0.0,
}

# Template 2: integer grids, duplicates are common so allow a wider noise window
CONFIG_INTEGER = {
    "name": "integer",
    "noise_add": 0.5,
    "max_tries": 1000,
    "eps_scale": np.sqrt(2) / 1e3,
    "dup_tolerance": 0.0,
}

# Template 3: explorative, merge nearby optima more aggressively
CONFIG_EXPLORATIVE = {
    "name": "explorative",
    "noise_add": 0.35,
    "max_tries": 1000,
    "eps_scale": np.sqrt(2) / 1e2,
    "dup_tolerance": 0.0,
}

CONFIG_LIST = [CONFIG_CONTINUOUS, CONFIG_INTEGER, CONFIG_EXPLORATIVE]

# Acquisition defaults (scores are assumed min-max scaled, so y_max = 1)
DEFAULT_ACQ_PARAMS = {
    "acq": "ucb",
    "kappa": 2.576,
    "eps": 0.0,
    "y_max": 1.0,
}
