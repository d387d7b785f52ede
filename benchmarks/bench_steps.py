"""
Microbenchmark: time per step vs number of ropes and collision threads.
Run:
  python benchmarks/bench_steps.py
"""
import time
import numpy as np
from dlo_sim.scene import Scene
from dlo_sim.chain import Chain
from dlo_sim.materials import ContactMaterial
from dlo_sim.profiler import Profiler

def run(n: int, workers: int, steps: int = 50):
    prof = Profiler()
    scene = Scene(
        gravity=(0.0, 0.0, -9.81),
        dt=1e-3,
        friction=0.2,
        material=ContactMaterial(restitution=0.2),
        max_workers=workers,
        chunk_size=128,
        profiler=prof,
    )

    rng = np.random.default_rng(12345)  # determinism (no randomness elsewhere)

    # ropes stacked in alternating directions so neighbours cross
    for k in range(n):
        z = 0.015 * k + 0.001 * float(rng.normal())
        if k % 2 == 0:
            start, end = (0.0, 0.5, z), (1.0, 0.5, z)
        else:
            start, end = (0.5, 0.0, z), (0.5, 1.0, z)
        scene.add_chain(Chain.straight(start, end, n_sections=16, section_radius=0.005,
                                       radius=0.01, mass=0.01))

    # warmup
    for _ in range(5):
        scene.step()

    t0 = time.perf_counter()
    for _ in range(steps):
        scene.step()
    t1 = time.perf_counter()

    total = t1 - t0
    per_step = total / steps
    return per_step, prof.stats.summary()

if __name__ == "__main__":
    for n in [2, 4, 8]:
        for workers in [1, 4]:
            per_step, summary = run(n, workers)
            print(f"ropes={n:2d} workers={workers}  step={1e3*per_step:8.3f} ms  steps/s={1/per_step:8.1f}")
            # print top sections
            for k in ["forces", "predict", "collide", "correct"]:
                if k in summary:
                    print(" ", k, summary[k])
            print()
