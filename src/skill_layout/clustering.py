"""
Clustering post-pass: pull positioned nodes toward a few random centers.

The pass is driven by a small string-seeded generator so a seed typed in the
UI reproduces the same clusters on every run.
"""

from typing import List, Sequence
import logging

import numpy as np

from skill_layout.models import NodePosition

logger = logging.getLogger(__name__)

FNV_OFFSET_BASIS = 0x811C9DC5
FNV_PRIME = 0x01000193
MASK32 = 0xFFFFFFFF
MAX_STRENGTH = 0.99


def fnv1a_32(text: str) -> int:
    """32-bit FNV-1a hash of the UTF-8 bytes of ``text``."""
    h = FNV_OFFSET_BASIS
    for byte in text.encode("utf-8"):
        h ^= byte
        h = (h * FNV_PRIME) & MASK32
    return h


class SeededRandom:
    """xorshift32 generator seeded from a string hash."""

    def __init__(self, seed: str):
        self.seed = seed
        # xorshift never leaves the zero state
        self.state = fnv1a_32(seed) or 0x9E3779B9

    def next_uint32(self) -> int:
        x = self.state
        x ^= (x << 13) & MASK32
        x ^= x >> 17
        x ^= (x << 5) & MASK32
        self.state = x & MASK32
        return self.state

    def random(self) -> float:
        """Float in [0, 1)."""
        return self.next_uint32() / 4294967296.0

    def randint(self, n: int) -> int:
        """Integer in [0, n)."""
        return int(self.random() * n)


def new_cluster_seed(rng: np.random.Generator) -> str:
    """Fresh seed string for the "re-randomize" action."""
    return format(int(rng.integers(0, 2 ** 32)), "08x")


def cluster_positions(
    positions: Sequence[NodePosition],
    strength: float,
    cluster_count: int,
    seed: str,
) -> List[NodePosition]:
    """
    Interpolate every node toward a pseudo-randomly assigned cluster center.

    Args:
        positions: Already positioned nodes (not modified)
        strength: 0 leaves nodes in place; clamped below 1 so nodes never
            collapse exactly onto a center
        cluster_count: Number of centers, drawn from existing node positions
        seed: Seed string; the same seed and inputs give identical output

    Returns:
        New NodePosition objects. Region containment is not re-checked.
    """
    result = [p.copy() for p in positions]
    if not result or cluster_count <= 0:
        return result
    strength = min(max(float(strength), 0.0), MAX_STRENGTH)
    if strength == 0.0:
        return result

    prng = SeededRandom(seed)
    centers = []
    for _ in range(min(cluster_count, len(result))):
        anchor = result[prng.randint(len(result))]
        centers.append((anchor.x, anchor.y))

    for pos in result:
        cx, cy = centers[prng.randint(len(centers))]
        pos.x = pos.x + (cx - pos.x) * strength
        pos.y = pos.y + (cy - pos.y) * strength

    logger.debug(f"Clustered {len(result)} nodes into {len(centers)} centers (strength={strength:.2f}, seed={seed!r})")
    return result
