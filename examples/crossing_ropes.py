# examples/crossing_ropes.py
import logging

from dlo_sim import Chain, ContactMaterial, Scene
from dlo_sim.logging_config import setup_logging

setup_logging(logging.INFO)
log = logging.getLogger("dlo_sim.examples")

scene = Scene(
    gravity=(0.0, 0.0, -9.81),
    dt=1e-3,
    integrator="verlet",
    damping=0.01,
    friction=0.3,
    material=ContactMaterial(stiffness=2.0e3, restitution=0.2, relaxation=0.8),
)

# Rope A is pinned at both ends, rope B is dropped across it
a = scene.add_chain(Chain.straight((0, 0, 0), (1, 0, 0), n_sections=21, section_radius=0.005,
                                   radius=0.01, mass=0.005))
a.anchor_section(0)
a.anchor_section(len(a.sections) - 1)
b = scene.add_chain(Chain.straight((0.5, -0.5, 0.05), (0.5, 0.5, 0.05), n_sections=21,
                                   section_radius=0.005, radius=0.01, mass=0.005))

t_end = 0.2
while scene.time < t_end:
    scene.step()
    if scene.last_contact_count:
        log.info("t=%.3f contacts=%d", scene.time, scene.last_contact_count)

print("t:", scene.time)
print("A middle:", a.section_points(10)[0])
print("B middle:", b.section_points(10)[0])
