import numpy as np

from dlo_sim.collision.segment import (
    closest_point_on_segment,
    closest_points_segments,
    contact_normal,
    segment_proximity,
)


def v(*xs):
    return np.array(xs, dtype=np.float64)


def test_skew_segments():
    """Segment along x at z=0 and segment along y at z=1: closest at the crossing."""
    prox = segment_proximity(v(-1, 0, 0), v(1, 0, 0), v(0, -1, 1), v(0, 1, 1))
    assert np.isclose(prox.s, 0.5)
    assert np.isclose(prox.t, 0.5)
    assert np.allclose(prox.point_a, [0, 0, 0])
    assert np.allclose(prox.point_b, [0, 0, 1])
    assert np.isclose(prox.distance, 1.0)
    # Normal points from B toward A
    assert np.allclose(prox.normal, [0, 0, -1])


def test_endpoint_clamping():
    """Closest points beyond the segment ends are clamped to [0, 1]."""
    s, t, ca, cb = closest_points_segments(v(0, 0, 0), v(1, 0, 0), v(2, 1, 0), v(2, 2, 0))
    assert s == 1.0
    assert t == 0.0
    assert np.allclose(ca, [1, 0, 0])
    assert np.allclose(cb, [2, 1, 0])


def test_parallel_overlap_uses_midpoint():
    prox = segment_proximity(v(0, 0, 0), v(0, 0, 1), v(0, 0.4, 0), v(0, 0.4, 1))
    assert np.isclose(prox.s, 0.5)
    assert np.isclose(prox.t, 0.5)
    assert np.isclose(prox.distance, 0.4)
    assert np.allclose(prox.normal, [0, -1, 0])


def test_parallel_partial_overlap():
    """B covers the upper half of A: contact in the middle of the shared stretch."""
    prox = segment_proximity(v(0, 0, 0), v(0, 0, 1), v(1, 0, 0.5), v(1, 0, 1.5))
    assert np.isclose(prox.s, 0.75)
    assert np.isclose(prox.t, 0.25)
    assert np.isclose(prox.distance, 1.0)


def test_parallel_disjoint_end_to_end():
    s, t, ca, cb = closest_points_segments(v(0, 0, 0), v(0, 0, 1), v(0, 0, 2), v(0, 0, 3))
    assert (s, t) == (1.0, 0.0)
    assert np.allclose(cb - ca, [0, 0, 1])


def test_degenerate_segment_falls_back_to_point_segment():
    s, t, ca, cb = closest_points_segments(v(0, 1, 0.5), v(0, 1, 0.5), v(0, 0, 0), v(0, 0, 1))
    assert s == 0.0
    assert np.isclose(t, 0.5)
    assert np.allclose(cb, [0, 0, 0.5])

    s, t, ca, cb = closest_points_segments(v(0, 0, 0), v(0, 0, 1), v(0, 1, 0.25), v(0, 1, 0.25))
    assert np.isclose(s, 0.25)
    assert t == 0.0


def test_both_degenerate():
    prox = segment_proximity(v(1, 1, 1), v(1, 1, 1), v(1, 1, 2), v(1, 1, 2))
    assert np.isclose(prox.distance, 1.0)
    assert np.allclose(prox.normal, [0, 0, -1])


def test_point_on_segment_projection():
    t, c = closest_point_on_segment(v(0, 0, 0), v(2, 0, 0), v(0.5, 3, 0))
    assert np.isclose(t, 0.25)
    assert np.allclose(c, [0.5, 0, 0])


def test_intersecting_segments_tie_break_normal():
    """Crossing axes: the normal falls back to the cross product of the axes."""
    prox = segment_proximity(v(-1, 0, 0), v(1, 0, 0), v(0, -1, 0), v(0, 1, 0))
    assert prox.distance == 0.0
    assert np.allclose(prox.normal, [0, 0, 1])


def test_tie_break_normal_fallbacks():
    # Coincident parallel axes: perpendicular to the axis
    n, d = contact_normal(v(0, 0, 0), v(0, 0, 0), v(0, 0, 1), v(0, 0, 2))
    assert d == 0.0
    assert np.isclose(np.linalg.norm(n), 1.0)
    assert np.isclose(np.dot(n, [0, 0, 1]), 0.0)

    # Same input, same answer
    n_again, _ = contact_normal(v(0, 0, 0), v(0, 0, 0), v(0, 0, 1), v(0, 0, 2))
    assert np.array_equal(n, n_again)

    # Both axes collapsed: +x
    n, d = contact_normal(v(0, 0, 0), v(0, 0, 0), v(0, 0, 0), v(0, 0, 0))
    assert np.array_equal(n, [1, 0, 0])
