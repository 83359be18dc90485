from __future__ import annotations

from typing import Optional

import numpy as np

__all__ = ["residual_norm"]


def residual_norm(F, target: Optional[np.ndarray] = None) -> float:
    """Euclidean norm ||Re(F) - F*||_2 (no scaling, no weights)."""
    Fv = np.real(np.asarray(F)).astype(float).reshape(-1)
    if target is None:
        return float(np.linalg.norm(Fv, 2))
    t = np.asarray(target, dtype=float).reshape(-1)
    if t.shape != Fv.shape:
        raise ValueError(f"target must have shape {Fv.shape}, got {t.shape}.")
    return float(np.linalg.norm(Fv - t, 2))
