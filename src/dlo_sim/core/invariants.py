# MIT License (see LICENSE)
"""
Utilities for calculating physical invariants and accumulator totals.

Used for verifying simulation correctness and debugging stability issues.
Collision handling is pairwise and antisymmetric in force, so the total
deferred force it adds over all points should vanish up to rounding.
"""
from __future__ import annotations
from typing import Iterable

import numpy as np

from ..types import MassPoint


def kinetic_energy(points: Iterable[MassPoint]) -> float:
    """
    Total kinetic energy T = Σ 0.5 * m * v² of the current velocities.

    Anchored points contribute nothing.
    """
    ke = 0.0
    for p in points:
        if p.mass <= 0:
            continue
        ke += 0.5 * p.mass * float(np.dot(p.v, p.v))
    return ke


def linear_momentum(points: Iterable[MassPoint]) -> np.ndarray:
    """Total linear momentum P = Σ m * v in kg·m/s."""
    total = np.zeros(3, dtype=np.float64)
    for p in points:
        if p.mass <= 0:
            continue
        total += p.mass * p.v
    return total


def accumulator_totals(points: Iterable[MassPoint]) -> dict[str, np.ndarray]:
    """
    Sum each accumulator over a set of points.

    Returns:
        Dict with keys 'f', 'df', 'dr', 'v_res'.
    """
    totals = {name: np.zeros(3, dtype=np.float64) for name in ("f", "df", "dr", "v_res")}
    for p in points:
        totals["f"] += p.f
        totals["df"] += p.df
        totals["dr"] += p.dr
        totals["v_res"] += p.v_res
    return totals
