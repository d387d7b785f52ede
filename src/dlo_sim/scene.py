# MIT License (see LICENSE)
"""
The simulation scene and step driver.

The Scene class acts as the world container and simulation controller.
It manages:
- The list of chains (ropes) and therefore all mass points.
- Global simulation parameters (gravity, timestep, predictor, contact
  coefficients, worker count).
- The step, as a strict sequence of phases:
    1. Reset accumulators (df becomes f).
    2. Force generation (gravity, damping, structural hook).
    3. Prediction of r_plus, v_plus.
    4. Link-link collision resolution over all candidate pairs.
    5. Correction of predicted positions and velocities.
    6. Synchronization of the time levels.

Each phase completes for every point before the next begins; collision
evaluation may run on several threads but only inside phase 4.
"""
from __future__ import annotations
from contextlib import nullcontext
from dataclasses import dataclass, field
from typing import Callable, ContextManager
import logging

from .chain import Chain
from .collision.resolve import resolve_link_pairs
from .constants import DT, GRAVITY, DEFAULT_CHUNK_SIZE, DEFAULT_MIN_SEPARATION
from .core.forces import apply_point_forces
from .core.integrators import symplectic_euler_predict, verlet_predict
from .materials import ContactMaterial
from .profiler import Profiler
from .types import Link, MassPoint
from .util import vec3

logger = logging.getLogger(__name__)

PREDICTORS = {
    "symplectic_euler": symplectic_euler_predict,
    "verlet": verlet_predict,
}


@dataclass
class Scene:
    """
    Rope simulation world.

    Attributes:
        gravity: Gravity vector in m/s² (default: [0, 0, -GRAVITY]).
        dt: Default timestep in seconds (default: DT).
        integrator: Predictor name ("symplectic_euler", "verlet").
        damping: Linear damping coefficient b applied to every point.
        friction: Coulomb coefficient mu of link-link contacts.
        material: Contact stiffness, restitution and relaxation.
        self_collision: Test link pairs within a chain.
        min_separation: Minimum link index distance for self-collision.
        max_workers: Threads for collision resolution (None: DLO_SIM_WORKERS).
        chunk_size: Candidate pairs per contribution buffer.
        structural_forces: Hook called with the scene during force
                           accumulation; adds spring/bending forces through
                           MassPoint.add_external_force().
        profiler: Optional Profiler instance for per-phase timing.
    """
    gravity: tuple[float, float, float] = (0.0, 0.0, -GRAVITY)
    dt: float = DT
    integrator: str = "symplectic_euler"
    damping: float = 0.0
    friction: float = 0.0
    material: ContactMaterial = field(default_factory=ContactMaterial)
    self_collision: bool = True
    min_separation: int = DEFAULT_MIN_SEPARATION
    max_workers: int | None = None
    chunk_size: int = DEFAULT_CHUNK_SIZE
    structural_forces: Callable[[Scene], None] | None = None
    profiler: Profiler | None = None

    # Internal state
    chains: list[Chain] = field(default_factory=list)
    time: float = 0.0
    last_contact_count: int = 0

    def __post_init__(self) -> None:
        """Validate configuration and cache numpy forms."""
        self._g = vec3(self.gravity, "gravity")
        if self.integrator not in PREDICTORS:
            raise ValueError(f"Unknown integrator: {self.integrator}")
        self._predict = PREDICTORS[self.integrator]

    def add_chain(self, chain: Chain) -> Chain:
        """
        Add a chain to the simulation.

        Raises:
            ValueError: If its radius differs from the chains already added.
        """
        if self.chains and chain.radius != self.chains[0].radius:
            raise ValueError(
                f"all chains must share one radius: {chain.radius} != {self.chains[0].radius}"
            )
        self.chains.append(chain)
        return chain

    @property
    def contact_radius(self) -> float:
        if not self.chains:
            raise ValueError("scene has no chains")
        return self.chains[0].radius

    def points(self) -> list[MassPoint]:
        return [p for chain in self.chains for p in chain.points]

    def candidate_pairs(self) -> list[tuple[Link, Link]]:
        """
        Every link pair the collision phase tests.

        Self pairs (if enabled) chain by chain, then all pairs between
        different chains in (chain, link) order.
        """
        pairs: list[tuple[Link, Link]] = []
        if self.self_collision:
            for chain in self.chains:
                pairs.extend(chain.candidate_pairs(self.min_separation))
        links = [chain.links() for chain in self.chains]
        for ca in range(len(links)):
            for cb in range(ca + 1, len(links)):
                pairs.extend((la, lb) for la in links[ca] for lb in links[cb])
        return pairs

    def _section(self, name: str) -> ContextManager:
        return self.profiler.section(name) if self.profiler else nullcontext()

    def _reset(self, points: list[MassPoint]) -> None:
        for p in points:
            p.reset_force()
            p.reset_displacement()
            p.reset_restitution_velocity()

    def _apply_forces(self, points: list[MassPoint]) -> None:
        apply_point_forces(points, self._g, self.damping)
        if self.structural_forces is not None:
            self.structural_forces(self)

    def _collide(self) -> int:
        if not self.chains:
            return 0
        return resolve_link_pairs(
            self.candidate_pairs(),
            self.contact_radius,
            self.friction,
            self.material,
            max_workers=self.max_workers,
            chunk_size=self.chunk_size,
        )

    def _correct(self, points: list[MassPoint]) -> None:
        # Anchors collect contributions but are never moved
        for p in points:
            if p.is_anchored:
                continue
            p.correct_position()
            p.correct_velocity()

    def step(self, dt: float | None = None) -> None:
        """
        Advance the simulation by one timestep.

        Args:
            dt: Timestep in seconds (default: self.dt).
        """
        dt = float(self.dt if dt is None else dt)
        if not dt > 0.0:
            raise ValueError(f"dt must be > 0, got {dt}")
        points = self.points()

        with self._section("reset"):
            self._reset(points)
        with self._section("forces"):
            self._apply_forces(points)
        with self._section("predict"):
            for p in points:
                self._predict(p, dt)
        with self._section("collide"):
            self.last_contact_count = self._collide()
        with self._section("correct"):
            self._correct(points)
        with self._section("synchronize"):
            for p in points:
                p.synchronize_positions_and_velocities()

        self.time += dt
        logger.debug("t=%.6f: %d link contacts", self.time, self.last_contact_count)
