"""
Example: complex-step Newton on the small benchmark systems.

  - sqrt2:               x^2 - 2 = 0 (scalar Newton)
  - linear_2x2:          constant Jacobian, one step
  - rosenbrock_gradient: grad R = 0 for the Rosenbrock function
  - singular_seed:       (x^2, y^2) started where J is singular

Run:
  python -m csnewton.examples.example_benchmarks
"""
from __future__ import annotations

import logging

import numpy as np

from csnewton.core.newton import newton_complex_step
from csnewton.models.benchmarks import BENCHMARKS


def main() -> None:
    logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(levelname)s - %(message)s")

    for name, bench in BENCHMARKS.items():
        res = newton_complex_step(bench.model, np.array(bench.x0, dtype=float), tol=bench.tol, maxiter=bench.maxiter)
        print(f"[{name}] status={res.status.value} niter={res.niter} residual={res.residual:.3e}")
        print(f"    x = {res.x}")
        if bench.root is not None and res.converged:
            err = float(np.max(np.abs(res.x - np.asarray(bench.root, dtype=float))))
            print(f"    max|x - root| = {err:.3e}")


if __name__ == "__main__":
    main()
