# MIT License (see LICENSE)
"""
Per-worker partial sums of collision contributions.

Pair evaluations never write into shared points directly. Each chunk of
pairs accumulates into its own ContributionBuffer; after every chunk has
finished, the buffers are merged into the points in a fixed order. This
keeps concurrent evaluation free of data races and makes the final
accumulator values independent of thread scheduling.

Forces are summed over all contacts of a point. Displacements and
restitution velocities are averaged, weighted by the point's contact
weight in each contact: a rope crossing found by four link pairs that share
a section corrects that section once, not four times.
"""
from __future__ import annotations
from dataclasses import dataclass, field
from typing import Dict, Iterable

import numpy as np

from ..types import MassPoint

# Keyed by id(point): MassPoint compares by identity and is not hashable by value
PointKey = int


@dataclass
class PointContribution:
    """
    Partial sums for one point.

    df is a plain sum; dr and v_res are sums weighted by the contact weight,
    with the weights summed in `weight`.
    """
    point: MassPoint
    weight: float = 0.0
    df: np.ndarray = field(default_factory=lambda: np.zeros(3, dtype=np.float64))
    dr: np.ndarray = field(default_factory=lambda: np.zeros(3, dtype=np.float64))
    v_res: np.ndarray = field(default_factory=lambda: np.zeros(3, dtype=np.float64))


class ContributionBuffer:
    """
    Private accumulator for one chunk of pair evaluations.

    Usage:
        buf = ContributionBuffer()
        collide_link_pair(a, b, rad, mu, add=buf.add)
        ...
        buf.merge_into_points()
    """

    def __init__(self) -> None:
        # Insertion-ordered, so merging follows first-touch order
        self.entries: Dict[PointKey, PointContribution] = {}
        self.contacts = 0

    def __len__(self) -> int:
        return len(self.entries)

    def _entry(self, point: MassPoint) -> PointContribution:
        key = id(point)
        entry = self.entries.get(key)
        if entry is None:
            entry = PointContribution(point)
            self.entries[key] = entry
        return entry

    def add(self, point: MassPoint, weight: float, df: np.ndarray, dr: np.ndarray, v_res: np.ndarray) -> None:
        """Add one corner's contribution (signature of a ContributionSink)."""
        entry = self._entry(point)
        entry.weight += weight
        entry.df += df
        entry.dr += weight * dr
        entry.v_res += weight * v_res

    def absorb(self, other: ContributionBuffer) -> None:
        """Add another buffer's partial sums into this one."""
        for e in other.entries.values():
            entry = self._entry(e.point)
            entry.weight += e.weight
            entry.df += e.df
            entry.dr += e.dr
            entry.v_res += e.v_res
        self.contacts += other.contacts

    def merge_into_points(self) -> None:
        """Add the summed forces and the averaged corrections into the points."""
        for entry in self.entries.values():
            entry.point.add_deferred_force(entry.df)
            # Zero total weight means every contribution was zero as well
            if entry.weight > 0.0:
                entry.point.add_displacement(entry.dr / entry.weight)
                entry.point.add_restitution_velocity(entry.v_res / entry.weight)


def merge_buffers(buffers: Iterable[ContributionBuffer]) -> int:
    """
    Combine buffers in the given order and merge the result into the points.

    The averages span all buffers, so a point touched by contacts in
    different chunks is averaged over all of its contacts.
    Must run single-threaded, after all evaluations of the step are done
    and before any correction is applied.

    Returns:
        Total number of contacts recorded in the buffers.
    """
    total = ContributionBuffer()
    for buf in buffers:
        total.absorb(buf)
    total.merge_into_points()
    return total.contacts
