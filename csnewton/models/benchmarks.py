"""Small analytic test systems with known roots.

Every model here is written with holomorphic operations only, so it can be
fed complex arguments by the complex-step Jacobian.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict, Optional

import numpy as np

__all__ = [
    "Benchmark",
    "BENCHMARKS",
    "linear_2x2",
    "linear_2x2_jacobian",
    "rosenbrock_gradient",
    "rosenbrock_hessian",
    "singular_seed",
    "sqrt2",
]


def sqrt2(z: np.ndarray) -> np.ndarray:
    """F(x) = x^2 - 2, root sqrt(2)."""
    return np.array([z[0] * z[0] - 2.0])


def linear_2x2(z: np.ndarray) -> np.ndarray:
    """F(x, y) = (2x + 3y - 5, x - y - 1), root (1.6, 0.6)."""
    x, y = z[0], z[1]
    return np.array([2.0 * x + 3.0 * y - 5.0, x - y - 1.0])


def linear_2x2_jacobian(x: Optional[np.ndarray] = None) -> np.ndarray:
    return np.array([[2.0, 3.0], [1.0, -1.0]], dtype=float)


def rosenbrock_gradient(z: np.ndarray) -> np.ndarray:
    """Gradient of R = (1-x)^2 + 100 (y - x^2)^2, root (1, 1)."""
    x, y = z[0], z[1]
    w = y - x * x
    return np.array([-2.0 * (1.0 - x) - 400.0 * x * w, 200.0 * w])


def rosenbrock_hessian(x: np.ndarray) -> np.ndarray:
    x0, x1 = float(x[0]), float(x[1])
    return np.array(
        [
            [1200.0 * x0 * x0 - 400.0 * x1 + 2.0, -400.0 * x0],
            [-400.0 * x0, 200.0],
        ],
        dtype=float,
    )


def singular_seed(z: np.ndarray) -> np.ndarray:
    """F(x, y) = (x^2, y^2); the Jacobian is singular whenever x = 0 or y = 0."""
    return np.array([z[0] * z[0], z[1] * z[1]])


@dataclass(frozen=True)
class Benchmark:
    name: str
    model: Callable[[np.ndarray], np.ndarray]
    x0: tuple
    root: Optional[tuple]
    tol: float
    maxiter: int


BENCHMARKS: Dict[str, Benchmark] = {
    b.name: b
    for b in (
        Benchmark("sqrt2", sqrt2, (1.0,), (float(np.sqrt(2.0)),), 1e-12, 20),
        Benchmark("linear_2x2", linear_2x2, (0.0, 0.0), (1.6, 0.6), 1e-14, 2),
        Benchmark("rosenbrock_gradient", rosenbrock_gradient, (-1.2, 1.0), (1.0, 1.0), 1e-8, 50),
        Benchmark("singular_seed", singular_seed, (0.0, 1.0), (0.0, 0.0), 1e-8, 20),
    )
}
