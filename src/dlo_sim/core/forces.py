# MIT License (see LICENSE)
"""
Force generators for mass points.

All force functions add into point.f through the point's own hooks and are
designed to be called during the force accumulation phase of a step, after
reset_force() and before prediction. Structural (spring/bending) forces of
the rope come from an external solver through the same hooks.
"""
from __future__ import annotations
from typing import Iterable

import numpy as np

from ..types import MassPoint


def apply_gravity(point: MassPoint, g: np.ndarray) -> None:
    """
    Apply gravitational force F = m * g.

    Args:
        point: The mass point. Anchored points (mass == 0) are skipped.
        g: Gravitational acceleration [gx, gy, gz] in m/s².
    """
    if point.mass > 0:
        point.add_external_force(point.mass * g)


def apply_damping(point: MassPoint, b: float) -> None:
    """
    Apply linear damping F = -b * v.

    Has no effect if b == 0 or the point is anchored.
    """
    if b != 0.0 and point.mass > 0:
        point.add_damping_force(b)


def apply_point_forces(points: Iterable[MassPoint], g: np.ndarray, b: float) -> None:
    """Gravity and damping on every point."""
    for p in points:
        apply_gravity(p, g)
        apply_damping(p, b)
