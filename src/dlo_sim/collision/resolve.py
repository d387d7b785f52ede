# MIT License (see LICENSE)
"""
Resolution of many candidate link pairs, optionally in parallel.

Pairs are cut into contiguous chunks in input order. Each chunk is
evaluated into its own ContributionBuffer (reading shared points, writing
nothing shared), possibly on a thread pool. When every chunk is done, the
buffers are merged in chunk order: forces summed, displacement and
restitution corrections averaged per point. The chunk layout depends only
on the pair list and chunk_size, so the result is the same for any worker
count.
"""
from __future__ import annotations
from concurrent.futures import ThreadPoolExecutor
from typing import List, Sequence, Tuple
import logging

from ..constants import DEFAULT_CHUNK_SIZE
from ..materials import ContactMaterial
from ..types import Link
from ..util import default_workers
from .accumulator import ContributionBuffer, merge_buffers
from .contact import DEFAULT_MATERIAL, check_contact_parameters, collide_link_pair

logger = logging.getLogger(__name__)

LinkPair = Tuple[Link, Link]


def evaluate_chunk(
    pairs: Sequence[LinkPair],
    rad: float,
    mu: float,
    material: ContactMaterial,
) -> ContributionBuffer:
    """Evaluate a chunk of pairs into a fresh buffer. Reads points only."""
    buf = ContributionBuffer()
    for a, b in pairs:
        if collide_link_pair(a, b, rad, mu, material, add=buf.add) is not None:
            buf.contacts += 1
    return buf


def resolve_link_pairs(
    pairs: Sequence[LinkPair],
    rad: float,
    mu: float,
    material: ContactMaterial | None = None,
    max_workers: int | None = None,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
) -> int:
    """
    Detect and resolve all candidate link pairs of a step.

    Args:
        pairs: Candidate (Link, Link) pairs from the broad phase.
        rad: Capsule radius.
        mu: Friction coefficient.
        material: Response coefficients (defaults to ContactMaterial()).
        max_workers: Thread count. None reads DLO_SIM_WORKERS (default 1).
        chunk_size: Pairs per private buffer.

    Returns:
        Number of colliding pairs.

    Raises:
        ValueError: On invalid parameters or non-finite positions. Nothing
                    is merged into the points in that case.
    """
    check_contact_parameters(rad, mu)
    if chunk_size < 1:
        raise ValueError(f"chunk_size must be >= 1, got {chunk_size}")
    material = material or DEFAULT_MATERIAL
    workers = default_workers() if max_workers is None else max(1, max_workers)

    pairs = list(pairs)
    chunks = [pairs[i:i + chunk_size] for i in range(0, len(pairs), chunk_size)]

    if workers > 1 and len(chunks) > 1:
        logger.debug("Resolving %d pairs in %d chunks on %d threads", len(pairs), len(chunks), workers)
        with ThreadPoolExecutor(max_workers=min(workers, len(chunks))) as executor:
            futures = [executor.submit(evaluate_chunk, chunk, rad, mu, material) for chunk in chunks]
            # Collect in submission order; result() re-raises worker errors
            buffers: List[ContributionBuffer] = [future.result() for future in futures]
    else:
        buffers = [evaluate_chunk(chunk, rad, mu, material) for chunk in chunks]

    contacts = merge_buffers(buffers)
    logger.debug("%d of %d link pairs in contact", contacts, len(pairs))
    return contacts
