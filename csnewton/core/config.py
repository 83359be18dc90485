from __future__ import annotations

import json
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Union

import numpy as np

from .jacobian import DEFAULT_PROBE

__all__ = [
    "ProblemConfig",
    "load_config",
    "reference_offsets",
]


def reference_offsets() -> np.ndarray:
    """Offset table of the three-paraboloid problem (root at (1, 0, 0))."""
    A = np.zeros((3, 3), dtype=float)
    A[0, 0] = 1.0
    A[1, 2] = 1.0
    A[2, 2] = 1.0
    return A


@dataclass
class ProblemConfig:
    """Settings for one solve of the paraboloid problem.

    initial_guess / target / offsets may be given as nested lists; they are
    converted to float arrays and checked against ``dimension``. Missing
    vectors get the reference defaults (guess = all 2.0, target = 0).
    """
    dimension: int = 3
    initial_guess: Optional[Any] = None
    target: Optional[Any] = None
    probe_distance: float = DEFAULT_PROBE
    tol: float = 1.0e-4
    maxiter: int = 9
    offsets: Optional[Any] = field(default=None, repr=False)

    def __post_init__(self) -> None:
        n = int(self.dimension)
        if n < 1:
            raise ValueError("dimension must be a positive integer.")
        self.dimension = n

        if self.initial_guess is None:
            self.initial_guess = np.full(n, 2.0, dtype=float)
        self.initial_guess = self._vec("initial_guess", self.initial_guess)

        if self.target is None:
            self.target = np.zeros(n, dtype=float)
        self.target = self._vec("target", self.target)

        if self.offsets is None:
            if n != 3:
                raise ValueError("offsets must be given explicitly when dimension != 3.")
            self.offsets = reference_offsets()
        A = np.asarray(self.offsets, dtype=float)
        if A.shape != (n, n):
            raise ValueError(f"offsets must have shape ({n},{n}), got {A.shape}.")
        self.offsets = A

        self.probe_distance = float(self.probe_distance)
        if not (np.isfinite(self.probe_distance) and self.probe_distance > 0.0):
            raise ValueError("probe_distance must be a positive finite number.")
        self.tol = float(self.tol)
        if not (self.tol > 0.0):
            raise ValueError("tol must be positive.")
        if int(self.maxiter) != self.maxiter or int(self.maxiter) < 1:
            raise ValueError("maxiter must be a positive integer.")
        self.maxiter = int(self.maxiter)

    def _vec(self, name: str, v: Any) -> np.ndarray:
        arr = np.asarray(v, dtype=float)
        if arr.shape != (self.dimension,):
            raise ValueError(f"{name} must have shape ({self.dimension},), got {arr.shape}.")
        return arr

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "ProblemConfig":
        """Build a config from a dict (keys starting with '_' are comments)."""
        known = {f.name for f in fields(cls)}
        kwargs: Dict[str, Any] = {}
        for key, value in data.items():
            if key.startswith("_"):
                continue
            if key not in known:
                raise ValueError(f"unknown config key {key!r}; expected one of {sorted(known)}.")
            kwargs[key] = value
        return cls(**kwargs)

    def solve_kwargs(self) -> Dict[str, Any]:
        """Keyword arguments for newton_complex_step."""
        return {
            "target": self.target,
            "tol": self.tol,
            "maxiter": self.maxiter,
            "h": self.probe_distance,
        }


def load_config(path: Union[str, Path]) -> ProblemConfig:
    """Read a ProblemConfig from a JSON file."""
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)
    if not isinstance(data, dict):
        raise ValueError(f"{path}: top-level JSON value must be an object.")
    return ProblemConfig.from_mapping(data)
