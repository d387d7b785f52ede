# MIT License (see LICENSE)
"""
Utility functions for vector math and numeric operations.

Provides low-level 3D vector operations used by the mass point state and
the capsule collision routines. All functions operate on 3D vectors
represented as numpy float64 arrays of shape (3,).
"""
from __future__ import annotations
import os

import numpy as np

from .constants import EPS


def f64(x) -> np.ndarray:
    """
    Convert any array-like to a float64 numpy array.

    Always returns a new array, so callers can store the result without
    aliasing the caller's buffer.
    """
    return np.array(x, dtype=np.float64)


def zero3() -> np.ndarray:
    """A fresh null vector."""
    return np.zeros(3, dtype=np.float64)


def vec3(x, name: str = "vector") -> np.ndarray:
    """
    Convert to a float64 3-vector, rejecting other shapes and NaN/inf.

    Raises:
        ValueError: If x is not a finite 3-component vector.
    """
    v = f64(x)
    if v.shape != (3,):
        raise ValueError(f"{name} must have shape (3,), got {v.shape}")
    require_finite(v, name)
    return v


def require_finite(v: np.ndarray, name: str = "value") -> None:
    """Raise ValueError if any component of v is NaN or infinite."""
    if not np.all(np.isfinite(v)):
        raise ValueError(f"{name} must be finite, got {v}")


def norm2(v: np.ndarray) -> float:
    """Squared magnitude of a 3D vector. Avoids sqrt for performance."""
    return float(v[0] * v[0] + v[1] * v[1] + v[2] * v[2])


def norm(v: np.ndarray) -> float:
    """Magnitude (length) of a 3D vector."""
    return float(np.sqrt(norm2(v)))


def unit(v: np.ndarray, eps: float = EPS) -> np.ndarray:
    """
    Return a unit (normalized) vector in the same direction as v.

    Returns zero vector if |v| < eps to avoid division by zero.
    """
    n = norm(v)
    if n < eps:
        return zero3()
    return v / n


def any_perpendicular(v: np.ndarray) -> np.ndarray:
    """
    Deterministic unit vector perpendicular to a non-zero v.

    Crosses v with the coordinate axis it is least aligned with, so the
    result is well conditioned for every direction.
    """
    axis = np.zeros(3, dtype=np.float64)
    axis[int(np.argmin(np.abs(v)))] = 1.0
    return unit(np.cross(v, axis))


def default_workers() -> int:
    """Worker count for parallel pair resolution, from DLO_SIM_WORKERS (default 1)."""
    raw = os.environ.get("DLO_SIM_WORKERS", "1")
    try:
        return max(1, int(raw))
    except ValueError:
        raise ValueError(f"DLO_SIM_WORKERS must be an integer, got {raw!r}") from None
