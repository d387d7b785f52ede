# MIT License (see LICENSE)
"""
Per-phase timing of the simulation step.

Scene.step() wraps each of its phases (reset, forces, predict, collide,
correct, synchronize) in a profiler section when a Profiler is attached.

Example:
    profiler = Profiler()
    scene = Scene(profiler=profiler)
    scene.step()
    print(profiler.stats.summary()["collide"]["mean_ms"])
"""
from __future__ import annotations
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Iterator
import logging
import time

logger = logging.getLogger(__name__)


@dataclass
class ProfileStats:
    """Timing samples (seconds) per phase name."""
    samples: dict[str, list[float]] = field(default_factory=dict)

    def add(self, name: str, dt: float) -> None:
        self.samples.setdefault(name, []).append(dt)

    def summary(self) -> dict[str, dict[str, float]]:
        """
        Per-phase statistics.

        Returns:
            Dict mapping phase name to {'n', 'mean_ms', 'max_ms', 'total_ms'}.
        """
        out = {}
        for name, times in self.samples.items():
            total = sum(times)
            out[name] = {
                "n": len(times),
                "mean_ms": 1e3 * total / len(times),
                "max_ms": 1e3 * max(times),
                "total_ms": 1e3 * total,
            }
        return out


class Profiler:
    """Collects wall-clock time of named sections."""

    def __init__(self) -> None:
        self.stats = ProfileStats()

    @contextmanager
    def section(self, name: str) -> Iterator[None]:
        """Time the enclosed block under `name`, also when it raises."""
        t0 = time.perf_counter()
        try:
            yield
        finally:
            elapsed = time.perf_counter() - t0
            self.stats.add(name, elapsed)
            logger.debug("%s took %.3f ms", name, 1e3 * elapsed)
