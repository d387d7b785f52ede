# MIT License (see LICENSE)
"""
Core type definitions for the deformable linear object simulation.

Defines the fundamental data structures:
- MassPoint: a particle with positions and velocities at three time levels
  (t - dt, t, t + dt) plus the per-step accumulators.
- Link: a view over the six corner points of two consecutive triangular
  cross-sections, used as a capsule collision proxy.

Per-step lifecycle of a MassPoint (driven by Scene or an external driver):
  reset_force / reset_displacement / reset_restitution_velocity
  -> force accumulation -> prediction of r_plus, v_plus
  -> collision accumulation into df, dr, v_res
  -> correct_position / correct_velocity
  -> synchronize_positions_and_velocities
"""
from __future__ import annotations
from dataclasses import dataclass, field, replace

import numpy as np

from .util import f64, vec3, zero3


# =============================================================================
# Mass Point
# =============================================================================

@dataclass(eq=False)
class MassPoint:
    """
    A 3D point endowed with a mass.

    Positions and velocities are kept at three consecutive time instances
    so that single-step and multi-step integrators can share one record:
    r_minus / v_minus (t - dt), r / v (t), r_plus / v_plus (t + dt).
    r0 / v0 hold the reference state from construction.

    Attributes:
        r: Current position [x, y, z] in meters.
        mass: Mass in kg. 0 marks a kinematically fixed (anchored) point.
        v: Current velocity in m/s.
        r_minus, r_plus, r0: Previous, predicted and reference positions.
            Default to a copy of r.
        v_minus, v_plus, v0: Previous, predicted and reference velocities.
            Default to a copy of v.
        f: Net force consumed by the integrator this step.
        df: Force gathered by collision handling this step, deferred to the
            next step's f by reset_force().
        dr: Displacement correction added to r_plus by correct_position().
        v_res: Restitution velocity added to v_plus by correct_velocity().
        id: Index assigned by the owning Chain (-1 when free).

    Note:
        Equality is identity: points are shared by reference between
        links and contribution buffers.
    """
    r: np.ndarray | tuple[float, float, float] = (0.0, 0.0, 0.0)
    mass: float = 0.0
    v: np.ndarray | tuple[float, float, float] = (0.0, 0.0, 0.0)
    r_minus: np.ndarray | None = None
    r_plus: np.ndarray | None = None
    r0: np.ndarray | None = None
    v_minus: np.ndarray | None = None
    v_plus: np.ndarray | None = None
    v0: np.ndarray | None = None

    # Accumulators (not user-specified)
    f: np.ndarray = field(default_factory=zero3)
    df: np.ndarray = field(default_factory=zero3)
    dr: np.ndarray = field(default_factory=zero3)
    v_res: np.ndarray = field(default_factory=zero3)
    id: int = -1

    def __post_init__(self) -> None:
        """Convert every vector to its own float64 array and validate."""
        self.r = vec3(self.r, "r")
        self.v = vec3(self.v, "v")
        for name, base in (("r_minus", self.r), ("r_plus", self.r), ("r0", self.r),
                           ("v_minus", self.v), ("v_plus", self.v), ("v0", self.v)):
            value = getattr(self, name)
            setattr(self, name, f64(base) if value is None else vec3(value, name))
        self.f = vec3(self.f, "f")
        self.df = vec3(self.df, "df")
        self.dr = vec3(self.dr, "dr")
        self.v_res = vec3(self.v_res, "v_res")
        self.set_mass(self.mass)

    def copy(self) -> MassPoint:
        """Independent copy with all vectors duplicated."""
        return replace(self)

    @property
    def is_anchored(self) -> bool:
        """True for kinematically fixed points (mass == 0)."""
        return self.mass == 0.0

    @property
    def inv_mass(self) -> float:
        """Inverse mass (1/m). Returns 0 for anchored points."""
        return 0.0 if self.mass == 0.0 else 1.0 / self.mass

    def set_mass(self, mass: float) -> None:
        """
        Replace the mass. Setting 0 anchors the point.

        Raises:
            ValueError: If mass is negative or not finite.
        """
        mass = float(mass)
        if not (np.isfinite(mass) and mass >= 0.0):
            raise ValueError(f"mass must be finite and >= 0, got {mass}")
        self.mass = mass

    # -------------------------------------------------------------------------
    # Accumulator lifecycle
    # -------------------------------------------------------------------------

    def reset_force(self) -> None:
        """Start a step: the deferred force becomes the applied force."""
        self.f = self.df
        self.df = zero3()

    def reset_displacement(self) -> None:
        self.dr = zero3()

    def reset_restitution_velocity(self) -> None:
        self.v_res = zero3()

    def add_external_force(self, force: np.ndarray) -> None:
        """Add a force contribution to f for this step."""
        self.f += force

    def add_damping_force(self, b: float) -> None:
        """Add linear damping F = -b * v to f."""
        self.f += -b * self.v

    def add_deferred_force(self, force: np.ndarray) -> None:
        """Add a force that takes effect after the next reset_force()."""
        self.df += force

    def add_displacement(self, dr: np.ndarray) -> None:
        self.dr += dr

    def add_restitution_velocity(self, dv: np.ndarray) -> None:
        self.v_res += dv

    # -------------------------------------------------------------------------
    # Corrections and time levels
    # -------------------------------------------------------------------------

    def correct_position(self) -> None:
        """
        Add the accumulated displacement to the predicted position.

        Applies dr again if called twice without reset_displacement().
        """
        self.r_plus += self.dr

    def correct_velocity(self) -> None:
        """Add the accumulated restitution velocity to the predicted velocity."""
        self.v_plus += self.v_res

    def synchronize_positions_and_velocities(self) -> None:
        """
        Roll the time levels forward: t + dt becomes the current state.

        r_minus <- r, r <- r_plus, v_minus <- v, v <- v_plus. The current
        holders receive copies so the levels never share a buffer.
        """
        self.r_minus = self.r
        self.r = self.r_plus.copy()
        self.v_minus = self.v
        self.v = self.v_plus.copy()

    def perturb(self, offset: np.ndarray) -> None:
        """Shift the current position directly. Setup and testing only."""
        self.r += offset

    def __str__(self) -> str:
        return format_point(self)


def _fmt3(v: np.ndarray) -> str:
    return f"({v[0]:g}, {v[1]:g}, {v[2]:g})"


def format_point(p: MassPoint) -> str:
    """
    Diagnostic text for a point: current and reference position.

    Example:
        "(0, 0.5, 1) -- (0, 0, 1)"
    """
    return f"{_fmt3(p.r)} -- {_fmt3(p.r0)}"


# =============================================================================
# Link
# =============================================================================

@dataclass(frozen=True, eq=False)
class Link:
    """
    Capsule proxy between two consecutive triangular cross-sections.

    The capsule axis runs between the centroids of (p, q, r) and
    (p1, q1, r1). Geometry is evaluated on the predicted state r_plus,
    v_plus, which is what collision handling corrects.
    """
    p: MassPoint
    q: MassPoint
    r: MassPoint
    p1: MassPoint
    q1: MassPoint
    r1: MassPoint

    @property
    def corners(self) -> tuple[MassPoint, ...]:
        """The six corners, section i first, then section i + 1."""
        return (self.p, self.q, self.r, self.p1, self.q1, self.r1)

    def axis(self) -> tuple[np.ndarray, np.ndarray]:
        """Centroids of the two cross-sections (predicted positions)."""
        c0 = (self.p.r_plus + self.q.r_plus + self.r.r_plus) / 3.0
        c1 = (self.p1.r_plus + self.q1.r_plus + self.r1.r_plus) / 3.0
        return c0, c1

    def axis_velocity(self) -> tuple[np.ndarray, np.ndarray]:
        """Centroid velocities of the two cross-sections (predicted velocities)."""
        w0 = (self.p.v_plus + self.q.v_plus + self.r.v_plus) / 3.0
        w1 = (self.p1.v_plus + self.q1.v_plus + self.r1.v_plus) / 3.0
        return w0, w1
