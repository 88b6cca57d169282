"""
Neighbor graphs: distance-based k-NN and order-based topologies.
"""

from collections import defaultdict
from enum import Enum
from typing import Dict, Iterable, List, Optional, Sequence, Tuple
import math
import logging

import numpy as np

from skill_layout.models import NodePosition

logger = logging.getLogger(__name__)

DEFAULT_K = 3
PROXIMAL_DISTANCE = 80.0  # px, hub reach for the fist wiring
ISOLATED_FRACTION = 0.15


class Topology(str, Enum):
    """Connection topologies selectable from the presentation layer."""

    CHAIN = "chain"
    LINEAR_BUS = "linear-bus"
    TREE = "tree"
    RING = "ring"
    STAR = "star"
    FULL_MESH = "full-mesh"
    PARTIAL_MESH = "partial-mesh"
    INCOMPLETE = "incomplete"
    NONE = "none"

    @classmethod
    def parse(cls, name: str) -> "Topology":
        key = name.strip().lower().replace("_", "-").replace(" ", "-")
        key = _TOPOLOGY_ALIASES.get(key, key)
        try:
            return cls(key)
        except ValueError:
            raise ValueError(f"Unknown topology: {name!r}") from None


_TOPOLOGY_ALIASES = {
    "line": "chain",
    "bus": "linear-bus",
    "linear": "linear-bus",
    "binary-tree": "tree",
    "cycle": "ring",
    "hub": "star",
    "hub-and-spoke": "star",
    "mesh": "full-mesh",
    "fully-connected": "full-mesh",
    "full": "full-mesh",
    "partial": "partial-mesh",
    "clustered": "incomplete",
    "incomplete-clustered": "incomplete",
    "empty": "none",
}


def link(adjacency: Dict[str, List[str]], a: str, b: str) -> None:
    """Add an undirected edge a-b, skipping self loops and duplicates."""
    if a == b:
        return
    if b not in adjacency[a]:
        adjacency[a].append(b)
    if a not in adjacency[b]:
        adjacency[b].append(a)


# ---------------------------------------------------------------------------
# Distance based
# ---------------------------------------------------------------------------

def k_nearest(points: Sequence[Tuple[str, float, float]], k: int = DEFAULT_K) -> List[List[str]]:
    """
    For each point, the ids of its ``k`` nearest other points.

    Self distance is treated as infinite; a stable sort keeps input order on
    exact ties. Lists are directional: A listing B does not imply the reverse.
    """
    n = len(points)
    if n == 0:
        return []
    xy = np.array([(x, y) for _, x, y in points], dtype=float)
    diff = xy[:, None, :] - xy[None, :, :]
    dist = np.hypot(diff[..., 0], diff[..., 1])
    np.fill_diagonal(dist, np.inf)
    order = np.argsort(dist, axis=1, kind="stable")
    take = min(k, n - 1)
    ids = [p[0] for p in points]
    return [[ids[j] for j in order[i, :take]] for i in range(n)]


def k_nearest_by_region(positions: Sequence[NodePosition], k: int = DEFAULT_K) -> None:
    """
    Assign k-NN neighbor lists per region tag, in place.

    Edges never cross regions.
    """
    groups: Dict[Optional[str], List[NodePosition]] = defaultdict(list)
    for pos in positions:
        groups[pos.region].append(pos)
    for members in groups.values():
        lists = k_nearest([(p.id, p.x, p.y) for p in members], k)
        for pos, neighbors in zip(members, lists):
            pos.neighbors = neighbors


# ---------------------------------------------------------------------------
# Order based
# ---------------------------------------------------------------------------

def _chain(ids, adjacency, rng):
    for i in range(len(ids) - 1):
        link(adjacency, ids[i], ids[i + 1])


def _linear_bus(ids, adjacency, rng):
    _chain(ids, adjacency, rng)
    for i in range(0, len(ids) - 3, 3):
        link(adjacency, ids[i], ids[i + 3])


def _tree(ids, adjacency, rng):
    # parent links are implied by linking each child to (i - 1) // 2
    for i in range(1, len(ids)):
        link(adjacency, ids[i], ids[(i - 1) // 2])


def _ring(ids, adjacency, rng):
    _chain(ids, adjacency, rng)
    if len(ids) > 2:
        link(adjacency, ids[-1], ids[0])


def _star(ids, adjacency, rng):
    for other in ids[1:]:
        link(adjacency, ids[0], other)


def _full_mesh(ids, adjacency, rng):
    for i in range(len(ids)):
        for j in range(i + 1, len(ids)):
            link(adjacency, ids[i], ids[j])


def _partial_mesh(ids, adjacency, rng):
    n = len(ids)
    want = min(3, n - 1)
    if want <= 0:
        return
    for i in range(n):
        others = [j for j in range(n) if j != i]
        for j in rng.choice(others, size=want, replace=False):
            link(adjacency, ids[i], ids[int(j)])


def _incomplete(ids, adjacency, rng):
    """A share of nodes left isolated, the rest wired inside random clusters."""
    n = len(ids)
    order = [int(i) for i in rng.permutation(n)]
    isolated = int(math.floor(n * ISOLATED_FRACTION))
    connected = order[isolated:]
    if len(connected) < 2:
        return
    cluster_count = min(int(rng.integers(2, 5)), len(connected))
    clusters: List[List[int]] = [[] for _ in range(cluster_count)]
    for idx in connected:
        clusters[int(rng.integers(cluster_count))].append(idx)
    for members in clusters:
        if len(members) < 2:
            continue
        for idx in members:
            others = [m for m in members if m != idx]
            links = min(int(rng.integers(1, 3)), len(others))
            for j in rng.choice(others, size=links, replace=False):
                link(adjacency, ids[idx], ids[int(j)])


_GENERATORS = {
    Topology.CHAIN: _chain,
    Topology.LINEAR_BUS: _linear_bus,
    Topology.TREE: _tree,
    Topology.RING: _ring,
    Topology.STAR: _star,
    Topology.FULL_MESH: _full_mesh,
    Topology.PARTIAL_MESH: _partial_mesh,
    Topology.INCOMPLETE: _incomplete,
    Topology.NONE: lambda ids, adjacency, rng: None,
}


def build_topology(
    name, ids: Sequence[str], rng: Optional[np.random.Generator] = None
) -> Dict[str, List[str]]:
    """
    Build an undirected neighbor map from node order alone.

    Args:
        name: Topology or topology name (aliases accepted)
        ids: Node ids; index order drives the wiring
        rng: Random source for the randomized topologies

    Returns:
        Mapping id -> fresh neighbor list (one list object per node)
    """
    topology = name if isinstance(name, Topology) else Topology.parse(name)
    if rng is None:
        rng = np.random.default_rng()
    ids = list(ids)
    adjacency: Dict[str, List[str]] = {node_id: [] for node_id in ids}
    _GENERATORS[topology](ids, adjacency, rng)
    return adjacency


def apply_topology(
    positions: Sequence[NodePosition], name, rng: Optional[np.random.Generator] = None
) -> None:
    """Replace every node's neighbors with the named topology, in place."""
    adjacency = build_topology(name, [p.id for p in positions], rng)
    for pos in positions:
        pos.neighbors = adjacency[pos.id]


# ---------------------------------------------------------------------------
# Outline / hub wiring
# ---------------------------------------------------------------------------

def _as_adjacency(positions: Iterable[NodePosition]) -> Dict[str, List[str]]:
    # shares list objects with the positions so link() edits them in place
    return {p.id: p.neighbors for p in positions}


def connect_outline_ring(outline: Sequence[NodePosition]) -> None:
    """Each outline node lists the next one, wrapping around."""
    n = len(outline)
    for i, pos in enumerate(outline):
        nxt = outline[(i + 1) % n].id
        pos.neighbors = [nxt] if nxt != pos.id else []


def connect_outline_to_inside(
    outline: Sequence[NodePosition],
    inside: Sequence[NodePosition],
    rng: np.random.Generator,
) -> None:
    """Link every outline node to one random inside node (both directions)."""
    if not inside:
        return
    adjacency = _as_adjacency(list(outline) + list(inside))
    for pos in outline:
        target = inside[int(rng.integers(len(inside)))]
        link(adjacency, pos.id, target.id)


def connect_to_hubs(
    inside: Sequence[NodePosition],
    hub_count: int,
    max_connections: int,
    rng: np.random.Generator,
    proximal_distance: float = PROXIMAL_DISTANCE,
) -> List[NodePosition]:
    """
    Pick random hubs among ``inside`` and attach every other node to its
    nearest hubs within ``proximal_distance``, at most ``max_connections``.

    Nodes with no hub in reach stay unattached. Returns the hubs.
    """
    if not inside:
        return []
    order = rng.permutation(len(inside))
    hubs = [inside[int(i)] for i in order[:hub_count]]
    hub_ids = {h.id for h in hubs}
    adjacency = _as_adjacency(inside)

    if max_connections <= 0:
        return hubs

    for pos in inside:
        if pos.id in hub_ids:
            continue
        nearby = [
            (math.hypot(pos.x - hub.x, pos.y - hub.y), i)
            for i, hub in enumerate(hubs)
            if math.hypot(pos.x - hub.x, pos.y - hub.y) < proximal_distance
        ]
        nearby.sort()
        for _, i in nearby[:max_connections]:
            link(adjacency, pos.id, hubs[i].id)
    return hubs
