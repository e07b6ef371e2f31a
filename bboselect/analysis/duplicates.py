import numpy as np

from bboselect.utils.utils import as_matrix


def _match_matrix(A, B, tol):
    # (n_a, n_b) boolean matrix: row i of A equals row j of B in every dimension
    if tol == 0.0:
        return np.all(A[:, None, :] == B[None, :, :], axis=2)
    return np.all(np.abs(A[:, None, :] - B[None, :, :]) <= tol, axis=2)


def check_dup(candidates, comparison, tol=0.0, columns=None):
    """
    Flag candidate rows that already appear in the comparison set.

    Parameters must match exactly (tol = 0.0). Whether 'close' parameters
    should also count is left to the caller through tol, which is the
    maximum absolute difference allowed per dimension.

    Parameters
    ----------
    candidates : pd.DataFrame or array-like, shape (n, d)
    comparison : pd.DataFrame or array-like, shape (m, d)
    tol : float
    columns : list of str, optional
        Columns to compare when DataFrames are passed.

    Returns
    -------
    np.ndarray of bool, shape (n,)
    """
    if tol < 0:
        raise ValueError(f"tol must be >= 0, got {tol}")

    A = as_matrix(candidates, columns)
    if A.shape[0] == 0:
        return np.zeros(0, dtype=bool)

    B = as_matrix(comparison, columns)
    if B.size == 0:
        return np.zeros(A.shape[0], dtype=bool)
    if A.shape[1] != B.shape[1]:
        raise ValueError(
            f"Dimension mismatch: candidates have {A.shape[1]} columns, comparison has {B.shape[1]}"
        )

    return _match_matrix(A, B, tol).any(axis=1)


def check_dup_within(candidates, comparison, tol=0.0, columns=None):
    """
    Same as check_dup, but a row is also flagged when it repeats an earlier
    row of candidates. The first occurrence is kept.
    """
    flags = check_dup(candidates, comparison, tol=tol, columns=columns)
    A = as_matrix(candidates, columns)
    if A.shape[0] < 2:
        return flags

    earlier = np.tril(_match_matrix(A, A, tol), k=-1)
    return flags | earlier.any(axis=1)
