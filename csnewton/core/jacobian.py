"""Jacobian estimators for complex-extended residual functions.

The complex-step derivative uses the Taylor expansion along the imaginary
axis of an analytic F:

    F(x + i h e_j) = F(x) + i h dF/dx_j - (h^2/2) d^2F/dx_j^2 + O(h^3)

so Im(F(x + i h e_j)) / h = dF/dx_j + O(h^2). No difference of nearly equal
numbers is formed, hence there is no cancellation error and h can be taken
absurdly small (the only lower bound is underflow of h itself).

The central-difference estimator is kept as a comparison backend.
"""
from __future__ import annotations

from typing import Optional, Tuple

import numpy as np

from .model import ModelLike, evaluate_model

__all__ = [
    "DEFAULT_PROBE",
    "JACOBIAN_METHODS",
    "central_difference_jacobian",
    "complex_step_jacobian",
    "estimate_jacobian",
    "real_point",
]


# Any h with h^2 well below truncation dominance works for IEEE-754 doubles;
# 1e-22 is the classic choice (h^2 = 1e-44, still a normal number).
DEFAULT_PROBE = 1.0e-22

JACOBIAN_METHODS = ("complex-step", "central")


def real_point(x, name: str = "x") -> np.ndarray:
    """Real evaluation point as a 1D float array; rejects nonzero imaginary parts."""
    x = np.asarray(x)
    if np.iscomplexobj(x):
        if np.any(x.imag != 0.0):
            raise ValueError(f"{name} must be real; imaginary parts are reserved for the complex step.")
        x = x.real
    x = np.asarray(x, dtype=float)
    if x.ndim != 1 or x.size == 0:
        raise ValueError(f"{name} must be a non-empty vector of shape (n,), got shape {x.shape}.")
    return x


def complex_step_jacobian(
    model: ModelLike,
    x,
    *,
    h: float = DEFAULT_PROBE,
    out: Optional[np.ndarray] = None,
    work: Optional[np.ndarray] = None,
) -> Tuple[np.ndarray, np.ndarray]:
    """Complex-step Jacobian of ``model`` at the real point ``x``.

    Parameters
    ----------
    model
        Analytic model, model(z) -> (m,) complex.
    x
        Real evaluation point, shape (n,).
    h
        Probe distance (imaginary perturbation).
    out
        Optional preallocated (m, n) float array for J.
    work
        Optional preallocated (n,) complex buffer for the complex iterate.
        On return it holds x + 0i again.

    Returns
    -------
    J : np.ndarray
        Jacobian, shape (m, n). Column j = Im(F(x + i h e_j)) / h.
    F0 : np.ndarray
        Unperturbed real residual Re(F(x + 0i)), shape (m,).

    Notes
    -----
    Uses n + 1 model evaluations. Raises ModelEvaluationError if the model
    returns non-finite values for any of them.
    """
    x = real_point(x)
    h = float(h)
    if not (np.isfinite(h) and h > 0.0):
        raise ValueError("probe distance h must be a positive finite number.")
    n = x.size

    if work is None:
        work = np.empty(n, dtype=complex)
    elif work.shape != (n,) or not np.iscomplexobj(work):
        raise ValueError(f"work must be a complex array of shape ({n},), got {work.dtype}{work.shape}.")
    work[:] = x

    F0 = evaluate_model(model, work).real.copy()
    m = F0.size

    if out is None:
        out = np.empty((m, n), dtype=float)
    elif out.shape != (m, n):
        raise ValueError(f"model returned {m} components for {n} unknowns; out has shape {out.shape}.")

    for j in range(n):
        work[j] = complex(x[j], h)
        Fj = evaluate_model(model, work, m)
        out[:, j] = Fj.imag / h
        work[j] = x[j]

    return out, F0


def central_difference_jacobian(
    model: ModelLike,
    x,
    *,
    dx_rel: float = 1e-6,
) -> Tuple[np.ndarray, np.ndarray]:
    """Central-difference Jacobian, same return convention as complex_step_jacobian.

    The model is evaluated on real arrays only. Accuracy is limited to about
    sqrt(eps)-ish by the competition between truncation and cancellation.
    """
    x = real_point(x)
    dx_rel = float(dx_rel)
    if not (np.isfinite(dx_rel) and dx_rel > 0.0):
        raise ValueError("dx_rel must be a positive finite number.")
    n = x.size

    z = x.astype(complex)
    F0 = evaluate_model(model, z).real.copy()
    m = F0.size

    # step scales with |x_j|, never below dx_rel
    steps = dx_rel * (np.abs(x) + 1.0)
    J = np.empty((m, n), dtype=float)
    for j in range(n):
        z[j] = x[j] + steps[j]
        Fp = evaluate_model(model, z, m).real.copy()
        z[j] = x[j] - steps[j]
        Fm = evaluate_model(model, z, m).real
        J[:, j] = (Fp - Fm) / (2.0 * steps[j])
        z[j] = x[j]
    return J, F0


def estimate_jacobian(
    model: ModelLike,
    x,
    *,
    method: str = "complex-step",
    h: float = DEFAULT_PROBE,
    out: Optional[np.ndarray] = None,
    work: Optional[np.ndarray] = None,
) -> Tuple[np.ndarray, np.ndarray]:
    """Dispatch to the Jacobian backend named by ``method``."""
    if method == "complex-step":
        return complex_step_jacobian(model, x, h=h, out=out, work=work)
    if method == "central":
        J, F0 = central_difference_jacobian(model, x)
        if out is not None:
            out[...] = J
            J = out
        return J, F0
    raise ValueError(f"unknown Jacobian method {method!r}; expected one of {JACOBIAN_METHODS}.")
