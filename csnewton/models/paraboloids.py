from __future__ import annotations

from typing import Any, Optional

import numpy as np

from ..core.config import ProblemConfig, reference_offsets
from ..core.model import AnalyticModel
from ..core.newton import NewtonResult, newton_complex_step

__all__ = [
    "ParaboloidModel",
    "paraboloid_jacobian",
    "solve_paraboloids",
]


class ParaboloidModel(AnalyticModel):
    """Intersection of n paraboloids in R^n.

    Row i of the offset table A shifts paraboloid i:

        F_i(x) = sum_{j < n-1} (x_j - A_ij)^2 + (-1)^i x_{n-1} - A_{i,n-1}

    For n = 3 and the reference offsets this is

        (x-1)^2 + y^2 + z = 0
        x^2 + y^2 - (z+1) = 0
        x^2 + y^2 + (z-1) = 0

    with the single intersection (1, 0, 0). Quadratic-plus-linear, hence
    entire: the complex step is exact up to roundoff.
    """

    def __init__(self, offsets: Optional[Any] = None):
        A = reference_offsets() if offsets is None else np.asarray(offsets, dtype=float)
        if A.ndim != 2 or A.shape[0] != A.shape[1]:
            raise ValueError(f"offsets must be square (n,n), got {A.shape}.")
        if A.shape[0] < 2:
            raise ValueError("paraboloid model needs at least 2 dimensions.")
        self.offsets = A
        self.dimension = int(A.shape[0])
        self._signs = (-1.0) ** np.arange(self.dimension)

    def evaluate(self, z: np.ndarray) -> np.ndarray:
        z = np.asarray(z)
        n = self.dimension
        if z.shape != (n,):
            raise ValueError(f"z must have shape ({n},), got {z.shape}.")
        A = self.offsets
        # (n, n-1) differences, squared and summed per row: keeps complex dtype
        d = z[None, : n - 1] - A[:, : n - 1]
        quad = np.sum(d * d, axis=1)
        return quad + self._signs * z[n - 1] - A[:, n - 1]


def paraboloid_jacobian(x: Any, offsets: Optional[Any] = None) -> np.ndarray:
    """Analytic Jacobian of ParaboloidModel (for checks)."""
    A = reference_offsets() if offsets is None else np.asarray(offsets, dtype=float)
    x = np.asarray(x, dtype=float)
    n = A.shape[0]
    J = np.empty((n, n), dtype=float)
    J[:, : n - 1] = 2.0 * (x[None, : n - 1] - A[:, : n - 1])
    J[:, n - 1] = (-1.0) ** np.arange(n)
    return J


def solve_paraboloids(config: Optional[ProblemConfig] = None, **kwargs: Any) -> NewtonResult:
    """Solve the paraboloid-intersection problem described by ``config``.

    Extra keyword arguments (solver, method, callback) go to
    newton_complex_step.
    """
    if config is None:
        config = ProblemConfig()
    model = ParaboloidModel(config.offsets)
    return newton_complex_step(model, config.initial_guess, **config.solve_kwargs(), **kwargs)
