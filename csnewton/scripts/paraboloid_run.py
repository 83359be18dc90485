from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import List, Optional

import numpy as np

# Use a non-interactive backend (safe on headless machines)
import matplotlib
matplotlib.use("Agg")  # noqa: E402
import matplotlib.pyplot as plt  # noqa: E402

from ..core.config import ProblemConfig, load_config
from ..core.jacobian import central_difference_jacobian, complex_step_jacobian
from ..core.newton import NewtonResult
from ..models.paraboloids import ParaboloidModel, paraboloid_jacobian, solve_paraboloids


def _parse_vec(s: str) -> List[float]:
    return [float(v) for v in s.replace(",", " ").split()]


def build_config(args: argparse.Namespace) -> ProblemConfig:
    base = load_config(args.config) if args.config else ProblemConfig()
    return ProblemConfig(
        dimension=base.dimension,
        initial_guess=_parse_vec(args.x0) if args.x0 else base.initial_guess,
        target=base.target,
        probe_distance=base.probe_distance,
        tol=args.tol if args.tol is not None else base.tol,
        maxiter=args.maxiter if args.maxiter is not None else base.maxiter,
        offsets=base.offsets,
    )


def compare_jacobians(config: ProblemConfig) -> None:
    model = ParaboloidModel(config.offsets)
    x = config.initial_guess
    J_exact = paraboloid_jacobian(x, config.offsets)
    J_cs, _ = complex_step_jacobian(model, x, h=config.probe_distance)
    J_fd, _ = central_difference_jacobian(model, x)
    print("\n[Jacobian check at initial guess]")
    print(f"  complex-step  max|J - J_exact| = {float(np.max(np.abs(J_cs - J_exact))):.3e}")
    print(f"  central-diff  max|J - J_exact| = {float(np.max(np.abs(J_fd - J_exact))):.3e}")


def print_report(result: NewtonResult, config: ProblemConfig) -> None:
    print("******************************************")
    print(f"Status: {result.status.value}")
    if result.message:
        print(f"Message: {result.message}")
    print(f"Number of iterations: {result.niter}")
    print("Final guess:\n x, y, z" if config.dimension == 3 else "Final guess:")
    print(" " + "  ".join(f"{v:.10g}" for v in result.x))
    print(f"Error tolerance: {config.tol:g}")
    print(f"Final error: {result.residual:.6e}")


def plot_history(result: NewtonResult, config: ProblemConfig, outdir: Path) -> Optional[Path]:
    if not result.history:
        return None
    it = np.arange(1, len(result.history) + 1)
    plt.figure()
    plt.semilogy(it, result.history, marker="o")
    plt.axhline(config.tol, color="k", linestyle="--", linewidth=1.0, label=f"tol={config.tol:g}")
    plt.xlabel("iteration")
    plt.ylabel(r"$\|F(x) - F^*\|_2$")
    plt.title("Complex-step Newton: paraboloid intersection")
    plt.grid(True)
    plt.legend()
    figpath = outdir / "paraboloid_residual_history.png"
    plt.savefig(figpath, dpi=200, bbox_inches="tight")
    plt.close()
    return figpath


def main(argv: Optional[List[str]] = None) -> int:
    ap = argparse.ArgumentParser(description="Complex-step Newton solver for the three-paraboloid problem.")
    ap.add_argument("--config", type=str, default=None, help="JSON file with ProblemConfig fields.")
    ap.add_argument("--x0", type=str, default=None, help="Initial guess, e.g. '2,2,2'.")
    ap.add_argument("--tol", type=float, default=None)
    ap.add_argument("--maxiter", type=int, default=None)
    ap.add_argument("--outdir", type=str, default="csnewton_out", help="Output directory for --plot.")
    ap.add_argument("--plot", action="store_true", help="Save a residual-history plot.")
    ap.add_argument("--compare-fd", action="store_true", help="Compare complex-step and central-difference Jacobians.")
    ap.add_argument("-v", "--verbose", action="store_true", help="Log every iteration.")

    args = ap.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s - %(levelname)s - %(message)s",
    )

    config = build_config(args)
    print("Running complex step example ................")
    if args.compare_fd:
        compare_jacobians(config)

    result = solve_paraboloids(config)
    for k, r in enumerate(result.history, start=1):
        print(f"Residual Error [{k}]: {r:.6e}")
    print_report(result, config)

    if args.plot:
        outdir = Path(args.outdir)
        outdir.mkdir(parents=True, exist_ok=True)
        figpath = plot_history(result, config, outdir)
        if figpath is not None:
            print(f"  saved: {figpath}")

    print("--program complete--")
    return 0 if result.converged else 1


if __name__ == "__main__":
    raise SystemExit(main())
