# MIT License (see LICENSE)
"""
Link-link contact detection and response.

Each link is a capped cylinder whose axis joins the centroids of two
structural triangles of the rope. A colliding pair therefore involves twelve
mass points, and the response is spread over all of them.

Response model (per colliding pair, side A receives +, side B receives -):
- Penalty force:   F_n = k * pen * n, deferred into df.
- Coulomb friction: F_t = -mu * |F_n| * unit(v_t), deferred into df.
- Restitution:     dv = -0.5 * (1 + e) * v_n * n when approaching, into v_res.
- Projection:      dx = 0.5 * relaxation * pen * n, into dr.

Key concepts:
- Contact weights: the contact point of A is sum_k a_k * x_k over A's six
  corners with a_k = (1 - s)/3 on section i and s/3 on section i + 1.
- Forces use a_k directly, so the twelve force contributions sum to zero.
- Kinematic corrections use a_k / sum(a^2), which moves the interpolated
  contact point by exactly dx (dv).
- One crossing of two ropes is usually found by several link pairs sharing
  a section. resolve_link_pairs therefore averages the kinematic
  corrections reaching a point, weighted by a_k; forces are summed.
- No mass check: anchored points receive writes like any other point and
  the driver never applies them.
"""
from __future__ import annotations
from dataclasses import dataclass, field
from typing import Callable
import math

import numpy as np

from ..materials import ContactMaterial
from ..types import Link, MassPoint
from ..util import norm, require_finite, zero3
from ..constants import EPS
from .segment import segment_proximity

# add(point, weight, df, dr, v_res): additive sink for one corner's contributions,
# weight being the corner's contact weight a_k
ContributionSink = Callable[[MassPoint, float, np.ndarray, np.ndarray, np.ndarray], None]

DEFAULT_MATERIAL = ContactMaterial()


@dataclass
class LinkContact:
    """
    A contact between two links, from detection through response.

    Attributes:
        a: First link (receives +force, +dx, +dv at its contact point).
        b: Second link (receives the negated response).
        s: Parameter of the contact point along A's axis.
        t: Parameter of the contact point along B's axis.
        point_a: Closest point on A's axis.
        point_b: Closest point on B's axis.
        normal: Unit normal from B toward A.
        distance: Axis-to-axis distance.
        penetration: 2 * rad - distance (positive = overlapping).
        force: Total force on A (normal + friction), set by prepare.
        displacement: Contact-point displacement of A, set by prepare.
        restitution_velocity: Contact-point velocity change of A, set by prepare.
    """
    a: Link
    b: Link
    s: float
    t: float
    point_a: np.ndarray
    point_b: np.ndarray
    normal: np.ndarray
    distance: float
    penetration: float

    # Response (computed by prepare_link_response)
    force: np.ndarray = field(default_factory=zero3)
    displacement: np.ndarray = field(default_factory=zero3)
    restitution_velocity: np.ndarray = field(default_factory=zero3)


def check_contact_parameters(rad: float, mu: float) -> None:
    """
    Fail fast on invalid contact parameters.

    Raises:
        ValueError: If rad is not positive and finite or mu is negative or
                    not finite.
    """
    if not (math.isfinite(rad) and rad > 0.0):
        raise ValueError(f"contact radius must be finite and > 0, got {rad}")
    if not (math.isfinite(mu) and mu >= 0.0):
        raise ValueError(f"friction coefficient must be finite and >= 0, got {mu}")


def corner_weights(s: float) -> np.ndarray:
    """Contact weights of a link's six corners for axis parameter s."""
    w0 = (1.0 - s) / 3.0
    w1 = s / 3.0
    return np.array([w0, w0, w0, w1, w1, w1], dtype=np.float64)


def detect_link_contact(a: Link, b: Link, rad: float) -> LinkContact | None:
    """
    Detect overlap between the capsules of two links.

    Args:
        a: First link.
        b: Second link.
        rad: Capsule radius shared by both links.

    Returns:
        LinkContact if the axes are closer than 2 * rad, None otherwise.

    Raises:
        ValueError: If any predicted corner position is NaN or infinite.
    """
    ci, cip1 = a.axis()
    cj, cjp1 = b.axis()
    for c in (ci, cip1, cj, cjp1):
        require_finite(c, "link corner position")

    prox = segment_proximity(ci, cip1, cj, cjp1)
    if prox.distance >= 2.0 * rad:
        return None

    return LinkContact(
        a=a,
        b=b,
        s=prox.s,
        t=prox.t,
        point_a=prox.point_a,
        point_b=prox.point_b,
        normal=prox.normal,
        distance=prox.distance,
        penetration=2.0 * rad - prox.distance,
    )


def prepare_link_response(contact: LinkContact, mu: float, material: ContactMaterial) -> None:
    """
    Compute force, displacement and restitution velocity for a contact.

    Velocities are interpolated at the contact points with the same s, t
    used for positions. Friction opposes the relative tangential velocity
    and is capped at mu times the normal force; at rest it is zero.

    Args:
        contact: A detected contact (modified in-place).
        mu: Coulomb friction coefficient of the pair.
        material: Stiffness, restitution and relaxation.
    """
    n = contact.normal
    s, t = contact.s, contact.t
    pen = contact.penetration

    wi, wip1 = contact.a.axis_velocity()
    wj, wjp1 = contact.b.axis_velocity()
    va = (1.0 - s) * wi + s * wip1
    vb = (1.0 - t) * wj + t * wjp1
    rv = va - vb
    vn = float(np.dot(rv, n))

    # --- Normal and friction force ---
    fn = material.stiffness * pen
    force = fn * n
    vt_vec = rv - vn * n
    vt_len = norm(vt_vec)
    if mu > 0.0 and vt_len > EPS:
        force = force - (mu * fn / vt_len) * vt_vec
    contact.force = force

    # --- Restitution (approaching only) ---
    if vn < 0.0:
        contact.restitution_velocity = (-0.5 * (1.0 + material.restitution) * vn) * n
    else:
        contact.restitution_velocity = zero3()

    # --- Positional projection ---
    contact.displacement = (0.5 * material.relaxation * pen) * n


def accumulate_link_contact(contact: LinkContact, add: ContributionSink) -> None:
    """
    Spread a prepared contact over the twelve corner points.

    Args:
        contact: Contact with force, displacement and restitution_velocity set.
        add: Sink called once per corner with (point, a_k, df, dr, v_res).
    """
    for link, param, sign in ((contact.a, contact.s, 1.0), (contact.b, contact.t, -1.0)):
        w = corner_weights(param)
        kin = w / float(np.dot(w, w))
        force = sign * contact.force
        dx = sign * contact.displacement
        dv = sign * contact.restitution_velocity
        for k, point in enumerate(link.corners):
            add(point, float(w[k]), w[k] * force, kin[k] * dx, kin[k] * dv)


def add_to_point(point: MassPoint, weight: float, df: np.ndarray, dr: np.ndarray, v_res: np.ndarray) -> None:
    """
    Sink writing straight into a point's accumulators.

    Every call adds the full correction of its contact. Several contacts
    sharing a point are averaged only by resolve_link_pairs.
    """
    point.add_deferred_force(df)
    point.add_displacement(dr)
    point.add_restitution_velocity(v_res)


def collide_link_pair(
    a: Link,
    b: Link,
    rad: float,
    mu: float,
    material: ContactMaterial | None = None,
    add: ContributionSink = add_to_point,
) -> LinkContact | None:
    """
    Detect, prepare and accumulate one link pair.

    Returns:
        The contact if the links collide, None otherwise (nothing is added).
    """
    check_contact_parameters(rad, mu)
    contact = detect_link_contact(a, b, rad)
    if contact is None:
        return None
    prepare_link_response(contact, mu, material or DEFAULT_MATERIAL)
    accumulate_link_contact(contact, add)
    return contact


def collide_links(
    Pi: MassPoint, Qi: MassPoint, Ri: MassPoint,
    Pip1: MassPoint, Qip1: MassPoint, Rip1: MassPoint,
    Pj: MassPoint, Qj: MassPoint, Rj: MassPoint,
    Pjp1: MassPoint, Qjp1: MassPoint, Rjp1: MassPoint,
    rad: float,
    mu: float,
    material: ContactMaterial | None = None,
) -> None:
    """
    Collision detection and handling between two volumetric segments.

    The pair is formed by triangles T_i T_{i+1} (first link) and
    T_j T_{j+1} (second link); each capsule runs between the centroids of
    its two triangles. Reaction and friction forces are accumulated into
    df, restitution velocities into v_res and displacement penalties into
    dr of all twelve points. Nothing is written when the capsules are
    apart.

    Args:
        Pi, Qi, Ri: Vertices of triangle i.
        Pip1, Qip1, Rip1: Vertices of triangle i + 1.
        Pj, Qj, Rj: Vertices of triangle j.
        Pjp1, Qjp1, Rjp1: Vertices of triangle j + 1.
        rad: Radius of the volumetric segment.
        mu: Friction coefficient.
        material: Response coefficients (defaults to ContactMaterial()).

    Raises:
        ValueError: On a non-positive radius, negative friction or
                    non-finite positions.
    """
    collide_link_pair(
        Link(Pi, Qi, Ri, Pip1, Qip1, Rip1),
        Link(Pj, Qj, Rj, Pjp1, Qjp1, Rjp1),
        rad,
        mu,
        material,
    )
