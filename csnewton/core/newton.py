from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, List, Optional

import numpy as np

from .jacobian import DEFAULT_PROBE, JACOBIAN_METHODS, estimate_jacobian, real_point
from .linalg import solve_dense
from .model import ModelEvaluationError, ModelLike, evaluate_model
from .residual import residual_norm

__all__ = [
    "NewtonResult",
    "NewtonStatus",
    "newton_complex_step",
    "newton_scalar",
]

logger = logging.getLogger(__name__)


class NewtonStatus(str, Enum):
    CONVERGED = "converged"
    ITERATION_CAP_EXCEEDED = "iteration-cap-exceeded"
    SOLVER_FAILED = "solver-failed"
    MODEL_FAILED = "model-failed"


@dataclass
class NewtonResult:
    # final state
    x: np.ndarray
    residual: float
    niter: int
    status: NewtonStatus

    # diagnostics
    history: List[float] = field(default_factory=list)
    jacobian: Optional[np.ndarray] = None
    message: str = ""

    @property
    def converged(self) -> bool:
        return self.status is NewtonStatus.CONVERGED


def _as_target(target: Any, n: int) -> np.ndarray:
    if target is None:
        return np.zeros(n, dtype=float)
    t = np.asarray(target, dtype=float)
    if t.shape != (n,):
        raise ValueError(f"target must have shape ({n},), got {t.shape}.")
    if not np.all(np.isfinite(t)):
        raise ValueError("target must be finite.")
    return t


def newton_complex_step(
    model: ModelLike,
    x0: Any,
    *,
    target: Any = None,
    tol: float = 1e-4,
    maxiter: int = 9,
    h: float = DEFAULT_PROBE,
    solver: Optional[Callable[[np.ndarray, np.ndarray], np.ndarray]] = None,
    method: str = "complex-step",
    callback: Optional[Callable[[int, np.ndarray, float], None]] = None,
) -> NewtonResult:
    """Newton-Raphson for F(x) = F* with a complex-step Jacobian.

    Parameters
    ----------
    model
        Analytic model: model(z) -> (n,) complex for complex z of shape (n,).
    x0
        Initial guess, shape (n,).
    target
        Desired value F*, shape (n,). Defaults to zero.
    tol
        Convergence tolerance on ||F(x) - F*||_2.
    maxiter
        Iteration cap K (>= 1).
    h
        Complex-step probe distance.
    solver
        Dense solver solver(A, b) -> x. Must raise numpy.linalg.LinAlgError
        when A cannot be solved. Defaults to solve_dense.
    method
        "complex-step" (default) or "central" (finite-difference comparison).
    callback
        Optional callback(niter, x, residual), called after every update.

    Returns
    -------
    NewtonResult
        Final iterate, residual, iteration count and terminal status. On
        solver/model failure the last accepted iterate and its residual are
        returned; nothing is raised. ``jacobian`` is None when the model
        failed while the Jacobian was being built.

    Notes
    -----
    The loop runs while niter < maxiter and residual > tol, starting from
    residual = +inf, so at least one Newton step is always taken. The step
    uses the Jacobian at the old iterate; the new F only scores the update.
    No line search, no damping.

    Diagnostics are stored as:
        newton_complex_step.last_info = {"converged": bool, "niter": int, "F_norm": float, "status": str}
    """
    x = real_point(x0, "x0").astype(float, copy=True)
    n = int(x.size)
    F_target = _as_target(target, n)

    tol = float(tol)
    if not (tol > 0.0):
        raise ValueError("tol must be positive.")
    if int(maxiter) != maxiter or int(maxiter) < 1:
        raise ValueError("maxiter must be a positive integer.")
    maxiter = int(maxiter)
    h = float(h)
    if not (np.isfinite(h) and h > 0.0):
        raise ValueError("probe distance h must be a positive finite number.")
    if method not in JACOBIAN_METHODS:
        raise ValueError(f"unknown Jacobian method {method!r}; expected one of {JACOBIAN_METHODS}.")
    if solver is None:
        solver = solve_dense

    # buffers owned by this solve
    J = np.zeros((n, n), dtype=float)
    work = np.empty(n, dtype=complex)
    x_trial = np.empty(n, dtype=float)

    count = 0
    error = float("inf")
    history: List[float] = []
    status: Optional[NewtonStatus] = None
    message = ""
    jacobian_ok = False

    while count < maxiter and error > tol:
        try:
            J, F = estimate_jacobian(model, x, method=method, h=h, out=J, work=work)
        except ModelEvaluationError as e:
            # J may be partly overwritten
            jacobian_ok = False
            status = NewtonStatus.MODEL_FAILED
            message = str(e)
            break
        jacobian_ok = True

        # residual of the iterate the step is taken from
        error = residual_norm(F, F_target)

        try:
            dx = np.asarray(solver(J, -(F - F_target)), dtype=float)
        except np.linalg.LinAlgError as e:
            status = NewtonStatus.SOLVER_FAILED
            message = str(e)
            break
        if dx.shape != (n,):
            raise ValueError(f"solver must return shape ({n},), got {dx.shape}.")
        if not np.all(np.isfinite(dx)):
            status = NewtonStatus.SOLVER_FAILED
            message = "solver returned a non-finite step."
            break

        np.add(x, dx, out=x_trial)
        work[:] = x_trial
        try:
            F_new = evaluate_model(model, work, n).real
        except ModelEvaluationError as e:
            status = NewtonStatus.MODEL_FAILED
            message = str(e)
            break

        x, x_trial = x_trial, x
        error = residual_norm(F_new, F_target)
        count += 1
        history.append(error)
        logger.debug("Newton iter %d: residual %.6e", count, error)
        if callback is not None:
            callback(count, x.copy(), error)

    if status is None:
        status = NewtonStatus.CONVERGED if error <= tol else NewtonStatus.ITERATION_CAP_EXCEEDED
    if status is NewtonStatus.CONVERGED:
        logger.info("Newton converged in %d iterations (residual %.3e).", count, error)
    else:
        logger.warning("Newton stopped with status %s after %d iterations (residual %.3e). %s",
                       status.value, count, error, message)

    newton_complex_step.last_info = {
        "converged": status is NewtonStatus.CONVERGED,
        "niter": count,
        "F_norm": float(error),
        "status": status.value,
    }
    return NewtonResult(
        x=x.copy(),
        residual=float(error),
        niter=count,
        status=status,
        history=history,
        jacobian=J.copy() if jacobian_ok else None,
        message=message,
    )


def newton_scalar(
    f: Callable[[complex], complex],
    x0: float,
    **kwargs: Any,
) -> NewtonResult:
    """Scalar Newton (n = 1) for f(x) = target; f must accept a complex argument.

    Keyword arguments are forwarded to newton_complex_step. A scalar
    ``target`` is accepted.
    """
    if "target" in kwargs and kwargs["target"] is not None:
        kwargs["target"] = np.atleast_1d(np.asarray(kwargs["target"], dtype=float))

    def F(z: np.ndarray) -> np.ndarray:
        return np.atleast_1d(f(z[0]))

    return newton_complex_step(F, np.array([float(x0)], dtype=float), **kwargs)
