from __future__ import annotations

import numpy as np
import scipy.linalg

__all__ = [
    "DEFAULT_COND_MAX",
    "SingularMatrixError",
    "solve_dense",
]


DEFAULT_COND_MAX = 1.0e12


class SingularMatrixError(np.linalg.LinAlgError):
    """A is singular or too ill-conditioned to trust the solve."""


def solve_dense(A, b, *, cond_max: float = DEFAULT_COND_MAX) -> np.ndarray:
    """Solve A x = b for small dense real A (partial-pivoting LU).

    Parameters
    ----------
    A
        Square matrix, shape (n, n).
    b
        Right-hand side, shape (n,).
    cond_max
        Reject A when its 2-norm condition number exceeds this.

    Returns
    -------
    x : np.ndarray
        Solution, shape (n,).

    Raises SingularMatrixError on a singular / ill-conditioned / non-finite A
    and ValueError on shape mismatch.
    """
    A = np.asarray(A, dtype=float)
    b = np.asarray(b, dtype=float)
    if A.ndim != 2 or A.shape[0] != A.shape[1]:
        raise ValueError(f"A must be square (n,n), got {A.shape}.")
    n = A.shape[0]
    if b.shape != (n,):
        raise ValueError(f"b must have shape ({n},), got {b.shape}.")
    if not (np.all(np.isfinite(A)) and np.all(np.isfinite(b))):
        raise SingularMatrixError("A or b contains non-finite values.")

    # n is tiny here, so the SVD-based 2-norm condition number is affordable.
    cond = float(np.linalg.cond(A))
    if not np.isfinite(cond) or cond > float(cond_max):
        raise SingularMatrixError(f"matrix is singular or ill-conditioned (cond={cond:.3e}).")

    lu, piv = scipy.linalg.lu_factor(A, check_finite=False)
    x = scipy.linalg.lu_solve((lu, piv), b, check_finite=False)
    if not np.all(np.isfinite(x)):
        raise SingularMatrixError("LU solve produced non-finite values.")
    return x
