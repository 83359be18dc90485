from __future__ import annotations

from typing import Any, Callable, Optional, Union

import numpy as np

__all__ = [
    "AnalyticModel",
    "ModelEvaluationError",
    "ModelLike",
    "evaluate_model",
]


class ModelEvaluationError(ValueError):
    """Raised when a model returns NaN/Inf in its real or imaginary part."""


class AnalyticModel:
    """Interface for a complex-extended residual function F: C^n -> C^n.

    The complex-step Jacobian only works if the model is analytic in a
    neighborhood of every real iterate. In practice that means:

      - use holomorphic operations only (polynomials, rational functions,
        exp/log/sin/cos on their analytic branches);
      - never branch on z.real or abs(z), never call np.abs / np.real /
        np.conj on the argument;
      - keep the input dtype: build outputs with dtype=complex (or let numpy
        promote), never force dtype=float.

    Implement:

      evaluate(z) -> F(z), complex array-like of shape (m,)

    Optional:
      dimension: the expected input length n (None = any).

    Plain functions ``f(z) -> array_like`` are accepted everywhere an
    AnalyticModel is; subclassing is only a convenience for models that
    carry parameters.
    """

    dimension: Optional[int] = None

    def evaluate(self, z: np.ndarray) -> Any:
        raise NotImplementedError

    def __call__(self, z: np.ndarray) -> Any:
        return self.evaluate(z)


ModelLike = Union[AnalyticModel, Callable[[np.ndarray], Any]]


def evaluate_model(model: ModelLike, z: np.ndarray, m: Optional[int] = None) -> np.ndarray:
    """Call ``model(z)`` and return a finite 1D complex array.

    Raises ValueError if the output is not 1D (or not of length m when m is
    given) and ModelEvaluationError if any component is non-finite.
    """
    out = np.asarray(model(z), dtype=complex)
    if out.ndim == 0:
        # scalar models (n = 1) may return a bare number
        out = out.reshape(1)
    if out.ndim != 1:
        raise ValueError(f"model must return a 1D array, got shape {out.shape}.")
    if m is not None and out.shape[0] != int(m):
        raise ValueError(f"model must return shape ({m},), got {out.shape}.")
    if not (np.all(np.isfinite(out.real)) and np.all(np.isfinite(out.imag))):
        raise ModelEvaluationError(f"model returned non-finite values at z={z}.")
    return out
