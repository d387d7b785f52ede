# MIT License (see LICENSE)
"""
Collision detection and resolution subsystem.

This subpackage provides:
    - Segment: Closest points between capsule axes.
    - Contact: Link-link detection, response and distribution over corners.
    - Accumulator: Per-chunk partial sums merged into shared points.
    - Resolve: Chunked, optionally threaded evaluation of candidate pairs.

Typical usage:
    from dlo_sim.collision import resolve_link_pairs

    pairs = chain.candidate_pairs()
    n_contacts = resolve_link_pairs(pairs, rad=chain.radius, mu=0.3)
"""
from .segment import SegmentProximity, closest_point_on_segment, closest_points_segments, segment_proximity
from .contact import (
    LinkContact,
    collide_links,
    collide_link_pair,
    detect_link_contact,
    prepare_link_response,
    accumulate_link_contact,
    corner_weights,
)
from .accumulator import ContributionBuffer, merge_buffers
from .resolve import resolve_link_pairs

__all__ = [
    # Segment
    "SegmentProximity",
    "closest_point_on_segment",
    "closest_points_segments",
    "segment_proximity",
    # Contact
    "LinkContact",
    "collide_links",
    "collide_link_pair",
    "detect_link_contact",
    "prepare_link_response",
    "accumulate_link_contact",
    "corner_weights",
    # Accumulation
    "ContributionBuffer",
    "merge_buffers",
    "resolve_link_pairs",
]
