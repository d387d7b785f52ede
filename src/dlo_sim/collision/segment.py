# MIT License (see LICENSE)
"""
Closest-point queries between finite 3D segments.

This is the narrowphase primitive behind capsule-capsule collision: two
capsules of radius rad overlap exactly when the distance between their axis
segments is below 2 * rad.

Key concepts:
- Parametric closest points: P(s) = p1 + s*d1, Q(t) = p2 + t*d2 with
  s, t clamped to [0, 1].
- Degenerate segments (zero length) fall back to point-segment and
  point-point distance instead of dividing by zero.

Reference:
    Ericson, Real-Time Collision Detection, 5.1.9
    "Closest points of two line segments".
"""
from __future__ import annotations
from dataclasses import dataclass
import logging

import numpy as np

from ..constants import EPS
from ..util import any_perpendicular, norm, norm2, unit

logger = logging.getLogger(__name__)


@dataclass
class SegmentProximity:
    """
    Result of a segment-segment distance query.

    Attributes:
        s: Parameter of the closest point on segment A, in [0, 1].
        t: Parameter of the closest point on segment B, in [0, 1].
        point_a: Closest point on segment A.
        point_b: Closest point on segment B.
        distance: |point_a - point_b|.
        normal: Unit vector from point_b toward point_a. When the segments
                touch, a deterministic tie-break direction.
    """
    s: float
    t: float
    point_a: np.ndarray
    point_b: np.ndarray
    distance: float
    normal: np.ndarray


def _clamp01(x: float) -> float:
    return min(1.0, max(0.0, x))


def closest_point_on_segment(a: np.ndarray, b: np.ndarray, p: np.ndarray) -> tuple[float, np.ndarray]:
    """
    Closest point to p on segment [a, b].

    Returns:
        (t, point) with point = a + t*(b - a). A zero-length segment
        returns (0, a).
    """
    ab = b - a
    ll = norm2(ab)
    if ll <= EPS * EPS:
        return 0.0, a.copy()
    t = _clamp01(float(np.dot(p - a, ab)) / ll)
    return t, a + t * ab


def closest_points_segments(
    p1: np.ndarray,
    q1: np.ndarray,
    p2: np.ndarray,
    q2: np.ndarray,
) -> tuple[float, float, np.ndarray, np.ndarray]:
    """
    Closest points between segments [p1, q1] and [p2, q2].

    Returns:
        (s, t, c1, c2) where c1 = p1 + s*(q1 - p1), c2 = p2 + t*(q2 - p2).
        For overlapping parallel segments the middle of the overlap is
        chosen, so the result is deterministic and symmetric.
    """
    d1 = q1 - p1
    d2 = q2 - p2
    r = p1 - p2
    a = norm2(d1)
    e = norm2(d2)
    f = float(np.dot(d2, r))

    tiny = EPS * EPS
    if a <= tiny and e <= tiny:
        # Both segments collapse to points
        return 0.0, 0.0, p1.copy(), p2.copy()

    if a <= tiny:
        # Segment A is a point: project it onto B
        t, c2 = closest_point_on_segment(p2, q2, p1)
        return 0.0, t, p1.copy(), c2

    c = float(np.dot(d1, r))
    if e <= tiny:
        # Segment B is a point: project it onto A
        s, c1 = closest_point_on_segment(p1, q1, p2)
        return s, 0.0, c1, p2.copy()

    b = float(np.dot(d1, d2))
    denom = a * e - b * b

    # Non-parallel: closest point on infinite lines, clamped to A.
    # Parallel: every s in the overlap is closest, take its midpoint.
    if denom > EPS * a * e:
        s = _clamp01((b * f - c * e) / denom)
    else:
        u0 = float(np.dot(p2 - p1, d1)) / a
        u1 = float(np.dot(q2 - p1, d1)) / a
        lo = max(0.0, min(u0, u1))
        hi = min(1.0, max(u0, u1))
        s = 0.5 * (lo + hi) if lo <= hi else 0.0

    t = (b * s + f) / e

    # Re-clamp t and recompute s for the clamped t
    if t < 0.0:
        t = 0.0
        s = _clamp01(-c / a)
    elif t > 1.0:
        t = 1.0
        s = _clamp01((b - c) / a)

    return s, t, p1 + s * d1, p2 + t * d2


def contact_normal(
    point_a: np.ndarray,
    point_b: np.ndarray,
    axis_a: np.ndarray,
    axis_b: np.ndarray,
) -> tuple[np.ndarray, float]:
    """
    Unit normal from point_b toward point_a and their distance.

    When the closest points coincide the direction is undefined; the
    fallback is, in order: unit(axis_a x axis_b), a perpendicular of the
    longer axis, and finally +x for two collapsed axes.
    """
    delta = point_a - point_b
    dist = norm(delta)
    if dist > EPS:
        return delta / dist, dist

    n = unit(np.cross(axis_a, axis_b))
    if norm2(n) == 0.0:
        longer = axis_a if norm2(axis_a) >= norm2(axis_b) else axis_b
        if norm2(longer) > EPS * EPS:
            n = any_perpendicular(longer)
        else:
            n = np.array([1.0, 0.0, 0.0], dtype=np.float64)
    logger.debug("Coincident closest points, tie-break normal %s", n)
    return n, dist


def segment_proximity(
    p1: np.ndarray,
    q1: np.ndarray,
    p2: np.ndarray,
    q2: np.ndarray,
) -> SegmentProximity:
    """Full distance query between [p1, q1] and [p2, q2]."""
    s, t, ca, cb = closest_points_segments(p1, q1, p2, q2)
    n, dist = contact_normal(ca, cb, q1 - p1, q2 - p2)
    return SegmentProximity(s=s, t=t, point_a=ca, point_b=cb, distance=dist, normal=n)
