# MIT License (see LICENSE)
"""
dlo_sim - Mass point state and capsule collisions for deformable linear objects.

A rope (cable, yarn) is a chain of mass points grouped into triangular
cross-sections; consecutive sections form capsule-shaped links. This package
provides the per-point three-time-level state, link-link collision handling
with a race-free parallel reduction, and a small step driver.

Main entry points:
    - MassPoint: Particle state and per-step accumulators.
    - collide_links: Resolve one link pair (twelve points).
    - resolve_link_pairs: Resolve many pairs, optionally on threads.
    - Chain: Points grouped into cross-sections and links.
    - Scene: Runs the reset / forces / predict / collide / correct /
      synchronize cycle.
    - ContactMaterial: Contact stiffness, restitution and relaxation.

Submodules:
    - collision: Segment distance, contact response, accumulation.
    - core: Force generators, predictors, invariants.

Example:
    from dlo_sim import Scene, Chain

    scene = Scene(friction=0.3)
    scene.add_chain(Chain.straight((0, 0, 0), (1, 0, 0), 11, 0.01, 0.02, mass=0.01))
    scene.step()
"""
from .types import MassPoint, Link, format_point
from .materials import ContactMaterial
from .collision.contact import collide_links
from .collision.resolve import resolve_link_pairs
from .chain import Chain
from .scene import Scene

__all__ = [
    # State
    "MassPoint",
    "Link",
    "format_point",
    # Collision
    "collide_links",
    "resolve_link_pairs",
    "ContactMaterial",
    # Driver
    "Chain",
    "Scene",
]
