# MIT License (see LICENSE)
"""
Contact material for capsule-capsule collision response.

The friction coefficient is passed per call (it belongs to the colliding
pair); the remaining response coefficients live here.
"""
from __future__ import annotations
from dataclasses import dataclass
import math

from .constants import DEFAULT_STIFFNESS


@dataclass(frozen=True)
class ContactMaterial:
    """
    Coefficients of the penalty/impulse/projection contact model.

    Attributes:
        stiffness: Penalty stiffness k in N/m. The normal force is k * pen.
        restitution: Coefficient of restitution e in [0, 1]. 0 cancels the
                     approaching normal velocity, 1 reverses it.
        relaxation: Fraction in [0, 1] of the penetration resolved by the
                    displacement correction dr in a single step.
    """
    stiffness: float = DEFAULT_STIFFNESS
    restitution: float = 0.0
    relaxation: float = 1.0

    def __post_init__(self) -> None:
        if not (math.isfinite(self.stiffness) and self.stiffness >= 0.0):
            raise ValueError(f"stiffness must be finite and >= 0, got {self.stiffness}")
        if not 0.0 <= self.restitution <= 1.0:
            raise ValueError(f"restitution must be in [0, 1], got {self.restitution}")
        if not 0.0 <= self.relaxation <= 1.0:
            raise ValueError(f"relaxation must be in [0, 1], got {self.relaxation}")
