# MIT License (see LICENSE)
"""
Core physics simulation components.

This subpackage provides:
    - Force generators: Gravity and linear damping on mass points.
    - Predictors: Symplectic Euler and three-level position Verlet.
    - Invariants: Momentum, kinetic energy and accumulator totals.

Typical usage:
    from dlo_sim.core import apply_gravity, symplectic_euler_predict

    apply_gravity(point, np.array([0.0, 0.0, -9.81]))
    symplectic_euler_predict(point, dt=1e-3)
"""
from .forces import apply_gravity, apply_damping, apply_point_forces
from .integrators import symplectic_euler_predict, verlet_predict
from .invariants import kinetic_energy, linear_momentum, accumulator_totals

__all__ = [
    # Forces
    "apply_gravity",
    "apply_damping",
    "apply_point_forces",
    # Predictors
    "symplectic_euler_predict",
    "verlet_predict",
    # Invariants
    "kinetic_energy",
    "linear_momentum",
    "accumulator_totals",
]
