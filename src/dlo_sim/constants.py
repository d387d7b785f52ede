# MIT License (see LICENSE)
"""
Process-wide constants used throughout the simulation.

SI units. The time step and gravitational constant are plain parameters:
the driver passes them into force and integration calls, nothing in the
core reads them implicitly.
"""
from __future__ import annotations

# Fixed integration time step in seconds.
DT: float = 0.001

# Gravitational acceleration magnitude in m/s². Zero by default so that
# collision behaviour can be studied without sagging; Earth is 9.81.
GRAVITY: float = 0.0

# Length below which a vector is treated as zero (degenerate axes,
# coincident closest points, vanishing tangential velocity).
EPS: float = 1e-12

# Penalty stiffness of the capsule contact in N/m.
DEFAULT_STIFFNESS: float = 1.0e3

# Links whose indices differ by less than this never self-collide.
# 2 excludes neighbours sharing a cross-section.
DEFAULT_MIN_SEPARATION: int = 2

# Candidate pairs evaluated into one private contribution buffer.
DEFAULT_CHUNK_SIZE: int = 64
