import numpy as np
import pytest

from dlo_sim.chain import Chain
from dlo_sim.scene import Scene
from dlo_sim.types import Link, MassPoint

SQRT3_2 = np.sqrt(3.0) / 2.0


def section_points(center, size=0.05, mass=1.0, velocity=(0.0, 0.0, 0.0)):
    """Three points of a triangle in the xy-plane whose centroid is exactly `center`."""
    c = np.asarray(center, dtype=np.float64)
    offsets = [(size, 0.0, 0.0), (-0.5 * size, SQRT3_2 * size, 0.0), (-0.5 * size, -SQRT3_2 * size, 0.0)]
    return [MassPoint(c + np.array(o), mass=mass, v=velocity) for o in offsets]


@pytest.fixture
def make_link():
    """Factory: capsule link with axis c0 -> c1, built from two fresh triangles."""
    def _make(c0, c1, size=0.05, mass=1.0, velocity=(0.0, 0.0, 0.0)):
        return Link(*section_points(c0, size, mass, velocity), *section_points(c1, size, mass, velocity))
    return _make


@pytest.fixture
def crossing_ropes():
    """
    Factory: rope A along x at z = 0 and rope B along y at z = 0.03,
    crossing above x = 0.5. Capsule radius 0.02, so the four links meeting
    at the crossing overlap by 0.01.
    """
    def _make(velocity_b=(0.0, 0.0, 0.0), **scene_kwargs):
        a = Chain.straight((0, 0, 0), (1, 0, 0), n_sections=11, section_radius=0.01, radius=0.02, mass=0.01)
        b = Chain.straight((0.5, -0.5, 0.03), (0.5, 0.5, 0.03), n_sections=11, section_radius=0.01,
                           radius=0.02, mass=0.01)
        for p in b.points:
            p.v = np.array(velocity_b, dtype=np.float64)
            p.v_plus = p.v.copy()
        scene = Scene(**scene_kwargs)
        scene.add_chain(a)
        scene.add_chain(b)
        return scene
    return _make
