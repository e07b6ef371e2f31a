import numpy as np
from sklearn.cluster import DBSCAN

from bboselect.utils.logging.logger import logger


def cluster_local_optima(pool, param_names, eps_scale=np.sqrt(2) / 1e3):
    """
    Run density-based clustering (DBSCAN) on the parameter columns of the
    local optima pool.

    min_samples=1, so every point belongs to a cluster (no -1 noise label).
    The radius grows with the number of parameters so that a cluster means
    "restarts converged to the same optimum" rather than "points are nearby".

    Returns
    -------
    np.ndarray of int cluster labels, one per pool row.
    """
    X = pool[list(param_names)].to_numpy(dtype=float)
    eps = len(param_names) * eps_scale
    clustering = DBSCAN(eps=eps, min_samples=1).fit(X)
    return clustering.labels_


def select_cluster_points(pool, param_names, min_cluster_utility=None, run_new=1,
                          eps_scale=np.sqrt(2) / 1e3, utility_column="gp_utility"):
    """
    Pick the local optima worth sampling next.

    If min_cluster_utility is None, or the pool has no positive utility to
    rank against, only the best optimum is returned.
    Otherwise the best point of every cluster whose relative utility
    (utility / max utility) reaches min_cluster_utility is returned, best
    first, at most run_new rows.

    Ties: the earliest pool row wins inside a cluster, and clusters with
    equal relative utility keep pool order.

    Returns
    -------
    pd.DataFrame with the pool's parameter and utility columns (scaled space).
    """
    if len(pool) == 0:
        raise ValueError("local optima pool is empty")

    loc_opt = pool.reset_index(drop=True)
    keep_cols = list(param_names) + [utility_column]

    if min_cluster_utility is not None and not 0.0 <= min_cluster_utility <= 1.0:
        raise ValueError(f"min_cluster_utility must be in [0, 1], got {min_cluster_utility}")

    if min_cluster_utility is not None and not loc_opt[utility_column].max() > 0:
        # Relative utility is undefined without a positive maximum (e.g. EI == 0 everywhere)
        logger.warning(
            f"Max utility in pool is {loc_opt[utility_column].max()}, "
            "cannot rank clusters; selecting the best optimum only"
        )
        min_cluster_utility = None

    if min_cluster_utility is None:
        # idxmax returns the first row on ties
        best = loc_opt[utility_column].idxmax()
        return loc_opt.loc[[best], keep_cols].reset_index(drop=True)

    loc_opt = loc_opt.copy()
    loc_opt["rel_utility"] = loc_opt[utility_column] / loc_opt[utility_column].max()
    loc_opt["cluster"] = cluster_local_optima(loc_opt, param_names, eps_scale=eps_scale)

    # Best parameter set from each cluster
    best_idx = loc_opt.groupby("cluster", sort=False)["rel_utility"].idxmax()
    cluster_points = loc_opt.loc[np.sort(best_idx.to_numpy())]

    n_clusters = len(cluster_points)
    cluster_points = cluster_points[cluster_points["rel_utility"] >= min_cluster_utility]
    cluster_points = cluster_points.sort_values("rel_utility", ascending=False, kind="mergesort")
    cluster_points = cluster_points.head(run_new)

    logger.info(
        f"Clustering | optima:{len(loc_opt)} | clusters:{n_clusters} | "
        f"above threshold {min_cluster_utility}: {len(cluster_points)}"
    )

    return cluster_points[keep_cols].reset_index(drop=True)
