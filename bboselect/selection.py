from dataclasses import dataclass
from enum import Enum

import numpy as np
import pandas as pd

from bboselect.analysis.clustering import select_cluster_points
from bboselect.analysis.duplicates import check_dup_within
from bboselect.bounds import make_bounds, min_max_scale, param_names, un_min_max_scale
from bboselect.candidateGeneration import PerturbationError, apply_noise
from bboselect.utils.logging.logger import logger
from bboselect.utils.utils import as_matrix, cycle_rows, merge_config


class FailureReason(Enum):
    PERTURBATION = "perturbation"
    DUPLICATE_EXHAUSTED = "duplicate_exhausted"
    BACKFILL_EXHAUSTED = "backfill_exhausted"


DUPLICATE_EXHAUSTED_MESSAGE = (
    "Noise could not be added to find unique parameter set. Are all of your "
    "parameters integers? Try increasing noise_add if you want to run longer. "
    "Stopping process and returning results so far."
)
BACKFILL_EXHAUSTED_MESSAGE = (
    "Could not procure required number of unique parameter sets to run next "
    "scoring function. Stopping process and returning results so far."
)


@dataclass(frozen=True, eq=False)
class SelectionSuccess:
    batch: pd.DataFrame
    ok = True


@dataclass(frozen=True)
class SelectionFailure:
    reason: FailureReason
    message: str
    ok = False


def _failure(reason, message):
    logger.warning(f"Candidate selection stopped ({reason.value}): {message}")
    return SelectionFailure(reason=reason, message=message)


def _history_matrix(history, names):
    if history is None:
        return np.zeros((0, len(names)))
    if isinstance(history, pd.DataFrame):
        missing = [n for n in names if n not in history.columns]
        if missing:
            raise ValueError(f"Evaluation history is missing parameter columns: {missing}")
        return history[names].to_numpy(dtype=float)
    H = as_matrix(history)
    if H.size == 0:
        return np.zeros((0, len(names)))
    if H.shape[1] != len(names):
        raise ValueError(f"Evaluation history has {H.shape[1]} columns, expected {len(names)}")
    return H


def _score(rows, bounds, acquisition_fn):
    utilities = np.ravel(acquisition_fn(min_max_scale(rows, bounds)))
    if utilities.shape[0] != len(rows):
        raise ValueError(
            f"acquisition_fn returned {utilities.shape[0]} values for {len(rows)} points"
        )
    return utilities


def resolve_duplicates(batch, bounds, history, acquisition_fn, config, rng):
    """
    Add noise to the selected points until none of them repeats the history
    (or an earlier point of the batch).

    Rows that had to be moved are re-scored and lose their acq_optimum flag.
    Returns the new batch, or a SelectionFailure.
    """
    names = param_names(bounds)
    H = _history_matrix(history, names)
    tol = config["dup_tolerance"]

    duplicate = check_dup_within(batch[names], H, tol=tol)
    tries = 1
    while duplicate.any():

        if tries >= config["max_tries"]:
            return _failure(FailureReason.DUPLICATE_EXHAUSTED, DUPLICATE_EXHAUSTED_MESSAGE)

        try:
            from_noise = apply_noise(batch.loc[duplicate], bounds, config["noise_add"], rng=rng)
        except PerturbationError as e:
            return _failure(FailureReason.PERTURBATION, str(e))

        from_noise["gp_utility"] = _score(from_noise[names], bounds, acquisition_fn)
        from_noise["acq_optimum"] = False

        # Fold the replacements into a fresh snapshot instead of editing in place
        batch = pd.concat([batch.loc[~duplicate], from_noise]).sort_index()

        duplicate = check_dup_within(batch[names], H, tol=tol)
        logger.debug(f"Duplicate resolution | try {tries} | still duplicated: {int(duplicate.sum())}")
        tries += 1

    return batch


def backfill(batch, bounds, history, run_new, acquisition_fn, config, rng):
    """
    Top the batch up to run_new rows with noisy copies of its points, best
    points first, keeping only draws that are new to both the history and
    the batch. Returns the full batch, or a SelectionFailure.
    """
    names = param_names(bounds)
    H = _history_matrix(history, names)
    tol = config["dup_tolerance"]

    new_set = batch
    draw_points = max(run_new - len(new_set), 0)
    tries = 1
    while draw_points > 0:

        if tries >= config["max_tries"]:
            return _failure(FailureReason.BACKFILL_EXHAUSTED, BACKFILL_EXHAUSTED_MESSAGE)

        # Pull cluster points one at a time (repeating if necessary), most promising first
        new_p = cycle_rows(batch[names], draw_points)
        try:
            noisy_p = apply_noise(new_p, bounds, config["noise_add"], rng=rng)
        except PerturbationError as e:
            return _failure(FailureReason.PERTURBATION, str(e))

        n_drawn = len(noisy_p)
        seen = np.vstack([new_set[names].to_numpy(dtype=float), H])
        duplicate = check_dup_within(noisy_p, seen, tol=tol)

        if not duplicate.all():
            noisy_p = noisy_p.loc[~duplicate].copy()
            noisy_p["gp_utility"] = _score(noisy_p, bounds, acquisition_fn)
            noisy_p["acq_optimum"] = False
            new_set = pd.concat([new_set, noisy_p], ignore_index=True)

        logger.debug(f"Backfill | try {tries} | accepted {int((~duplicate).sum())}/{n_drawn}")
        draw_points = max(run_new - len(new_set), 0)
        tries += 1

    return new_set


def select_candidates(local_optima, bounds, history, run_new, acquisition_fn,
                      min_cluster_utility=None, config=None, random_state=None):
    """
    Find the run_new parameter sets to score next.

    Local optima of the acquisition function are clustered with DBSCAN so
    that restarts which converged to the same place count once. The best
    optimum (min_cluster_utility=None) or the best point of every cluster
    above min_cluster_utility is kept. Points that were already scored get
    noise added until they are unique, and noisy copies of the kept points
    fill the batch up to run_new.

    Parameters
    ----------
    local_optima : pd.DataFrame
        Local optima in scaled [0, 1] space: one column per parameter plus
        the utility column ("gp_utility"). A "grad_count" column is ignored.
    bounds : dict or pd.DataFrame
        {name: (lower, upper)} or a table from make_bounds.
    history : pd.DataFrame, np.ndarray or None
        Parameter sets already scored, in original units.
    run_new : int
        Number of parameter sets wanted.
    acquisition_fn : callable
        scaled_points -> utilities, see make_acquisition_evaluator.
    min_cluster_utility : float or None
        Relative utility threshold in [0, 1].
    config : dict, optional
        Overrides for DEFAULT_SELECTION_CONFIG.
    random_state : int or np.random.Generator, optional

    Returns
    -------
    SelectionSuccess
        batch: pd.DataFrame in original units with the parameter columns,
        gp_utility and acq_optimum, exactly run_new unique rows.
    SelectionFailure
        reason and a readable message when unique sets could not be found.
    """
    config = merge_config(config)
    bounds = make_bounds(bounds)
    names = param_names(bounds)
    rng = np.random.default_rng(random_state)

    if isinstance(run_new, bool) or not float(run_new).is_integer() or int(run_new) < 1:
        raise ValueError(f"run_new must be an integer >= 1, got {run_new}")
    run_new = int(run_new)

    utility_column = config["utility_column"]
    loc_opt = local_optima.drop(columns=config["drop_columns"], errors="ignore")
    missing = [c for c in names + [utility_column] if c not in loc_opt.columns]
    if missing:
        raise ValueError(f"Local optima are missing columns: {missing}")
    if len(loc_opt) == 0:
        raise ValueError("local optima pool is empty")

    cluster_points = select_cluster_points(
        loc_opt,
        names,
        min_cluster_utility=min_cluster_utility,
        run_new=run_new,
        eps_scale=config["eps_scale"],
        utility_column=utility_column,
    )
    cluster_points = un_min_max_scale(cluster_points, bounds)
    cluster_points = cluster_points.rename(columns={utility_column: "gp_utility"})
    cluster_points["acq_optimum"] = True

    batch = resolve_duplicates(cluster_points, bounds, history, acquisition_fn, config, rng)
    if isinstance(batch, SelectionFailure):
        return batch

    batch = backfill(batch, bounds, history, run_new, acquisition_fn, config, rng)
    if isinstance(batch, SelectionFailure):
        return batch

    batch = batch[names + ["gp_utility", "acq_optimum"]].reset_index(drop=True)
    batch["acq_optimum"] = batch["acq_optimum"].astype(bool)
    logger.info(
        f"Selected {len(batch)} parameter sets | "
        f"optima:{int(batch['acq_optimum'].sum())} | from noise:{int((~batch['acq_optimum']).sum())}"
    )
    return SelectionSuccess(batch=batch)
