# MIT License (see LICENSE)
"""
Chain container for a deformable linear object.

A Chain owns its mass points exclusively and groups them into triangular
cross-sections. Consecutive sections i, i + 1 form link i, whose capsule
of radius `radius` is the collision proxy of that stretch of rope.
"""
from __future__ import annotations
from typing import Sequence

import numpy as np

from .constants import DEFAULT_MIN_SEPARATION
from .types import Link, MassPoint
from .util import any_perpendicular, unit, vec3, norm

Section = tuple[int, int, int]


class Chain:
    """
    Mass points grouped into triangular cross-sections.

    Attributes:
        points: All points of the chain; point.id is its index here.
        sections: Index triples (p, q, r) into points, in rope order.
        radius: Capsule radius shared by every link.

    Example:
        chain = Chain.straight((0, 0, 0), (0, 0, 1), n_sections=11,
                               section_radius=0.02, radius=0.03, mass=0.01)
        for a, b in chain.candidate_pairs():
            ...
    """

    def __init__(self, points: Sequence[MassPoint], sections: Sequence[Section], radius: float) -> None:
        if not (np.isfinite(radius) and radius > 0.0):
            raise ValueError(f"radius must be finite and > 0, got {radius}")
        if len(sections) < 2:
            raise ValueError(f"a chain needs at least 2 sections, got {len(sections)}")
        n = len(points)
        for sec in sections:
            if len(sec) != 3 or not all(0 <= k < n for k in sec):
                raise ValueError(f"section {sec} does not index 3 of {n} points")

        self.points: list[MassPoint] = list(points)
        self.sections: list[Section] = [tuple(sec) for sec in sections]
        self.radius = float(radius)
        for i, p in enumerate(self.points):
            p.id = i

    @classmethod
    def straight(
        cls,
        start,
        end,
        n_sections: int,
        section_radius: float,
        radius: float,
        mass: float = 1.0,
    ) -> Chain:
        """
        Build a straight rope from start to end.

        Each section is an equilateral triangle of circumradius
        section_radius, perpendicular to the axis and centred on it, so the
        section centroids lie exactly on the segment [start, end].

        Args:
            start: First section centroid.
            end: Last section centroid.
            n_sections: Number of cross-sections (>= 2).
            section_radius: Distance from centroid to each corner.
            radius: Capsule radius of the links.
            mass: Mass of every point.
        """
        start = vec3(start, "start")
        end = vec3(end, "end")
        axis = end - start
        if norm(axis) == 0.0:
            raise ValueError("start and end must differ")
        if n_sections < 2:
            raise ValueError(f"n_sections must be >= 2, got {n_sections}")

        direction = unit(axis)
        u = any_perpendicular(direction)
        w = np.cross(direction, u)
        angles = (0.0, 2.0 * np.pi / 3.0, 4.0 * np.pi / 3.0)
        offsets = [section_radius * (np.cos(a) * u + np.sin(a) * w) for a in angles]

        points: list[MassPoint] = []
        sections: list[Section] = []
        for i in range(n_sections):
            center = start + axis * (i / (n_sections - 1))
            base = len(points)
            for off in offsets:
                points.append(MassPoint(center + off, mass=mass))
            sections.append((base, base + 1, base + 2))
        return cls(points, sections, radius)

    @property
    def n_links(self) -> int:
        return len(self.sections) - 1

    def section_points(self, i: int) -> tuple[MassPoint, MassPoint, MassPoint]:
        p, q, r = self.sections[i]
        return self.points[p], self.points[q], self.points[r]

    def link(self, i: int) -> Link:
        """Link between sections i and i + 1."""
        if not 0 <= i < self.n_links:
            raise ValueError(f"link index {i} out of range [0, {self.n_links})")
        return Link(*self.section_points(i), *self.section_points(i + 1))

    def links(self) -> list[Link]:
        return [self.link(i) for i in range(self.n_links)]

    def candidate_pairs(self, min_separation: int = DEFAULT_MIN_SEPARATION) -> list[tuple[Link, Link]]:
        """
        Self-collision candidates: links i < j with j - i >= min_separation.

        No spatial culling is done; every admissible pair is returned in
        (i, j) lexicographic order.
        """
        if min_separation < 1:
            raise ValueError(f"min_separation must be >= 1, got {min_separation}")
        links = self.links()
        return [
            (links[i], links[j])
            for i in range(len(links))
            for j in range(i + min_separation, len(links))
        ]

    def anchor_section(self, i: int) -> None:
        """Fix the three points of section i (mass 0)."""
        for p in self.section_points(i):
            p.set_mass(0.0)
