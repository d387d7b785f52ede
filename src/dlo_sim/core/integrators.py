# MIT License (see LICENSE)
"""
Reference predictors for the three-level mass point state.

A predictor computes r_plus and v_plus from the current state and the
accumulated force f; collision handling then corrects the prediction and
synchronize_positions_and_velocities() commits it. Anchored points
(mass == 0) are held in place: r_plus = r and v_plus = 0.

Available predictors:
- symplectic_euler_predict: v+ = v + a dt, r+ = r + v+ dt
- verlet_predict: position Verlet over the three stored levels,
  r+ = 2 r - r- + a dt², v+ = (r+ - r) / dt. The committed velocity v
  overrides the history when corrections changed it.

Reference:
    Semi-implicit Euler: https://en.wikipedia.org/wiki/Semi-implicit_Euler_method
    Verlet: https://en.wikipedia.org/wiki/Verlet_integration#Basic_St%C3%B6rmer%E2%80%93Verlet
"""
from __future__ import annotations

import numpy as np

from ..types import MassPoint


def _hold(point: MassPoint) -> None:
    point.r_plus = point.r.copy()
    point.v_plus = point.v * 0.0


def symplectic_euler_predict(point: MassPoint, dt: float) -> None:
    """
    Predict the next state with semi-implicit (symplectic) Euler.

    Args:
        point: Mass point (r_plus, v_plus modified in-place).
        dt: Timestep in seconds.
    """
    if point.is_anchored:
        _hold(point)
        return
    a = point.f * point.inv_mass
    point.v_plus = point.v + a * dt
    point.r_plus = point.r + point.v_plus * dt


def verlet_predict(point: MassPoint, dt: float) -> None:
    """
    Predict the next state with position Verlet.

    Uses r_minus as the previous position while (r - r_minus) / dt still
    equals the committed velocity v. When it does not (restitution or
    displacement corrections, a set initial velocity, perturb()), the
    previous position is rebuilt as r - v * dt, so v is always honoured
    and a position correction never turns into velocity.

    Args:
        point: Mass point (r_plus, v_plus modified in-place).
        dt: Timestep in seconds.
    """
    if point.is_anchored:
        _hold(point)
        return
    a = point.f * point.inv_mass
    r_prev = point.r_minus
    if not np.array_equal((point.r - r_prev) / dt, point.v):
        r_prev = point.r - point.v * dt
    point.r_plus = 2.0 * point.r - r_prev + a * dt * dt
    point.v_plus = (point.r_plus - point.r) / dt
