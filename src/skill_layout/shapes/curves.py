"""
Parametric curve layouts: the infinity family and the moebius loop.

Nodes are spaced evenly in the curve parameter ``t``. No sampling is
involved and the random source is unused.
"""

from typing import List, Sequence
import math
import logging

import numpy as np

from skill_layout.graph import link
from skill_layout.layout import register_shape
from skill_layout.models import NodePosition, ShapeParams, SkillNode, score_to_brightness

logger = logging.getLogger(__name__)

INFINITY_A = 0.42
INFINITY_B = 0.19
WIDE_INFINITY_A = 0.48
# Offset multipliers applied to the semi-axes of outer layers
LAYER_X_SPREAD = 90
LAYER_Y_SPREAD = 60
LAYER_GAP = 1.1
LAYER_COUNT = 3

MOEBIUS_RADIUS = 0.32
MOEBIUS_STRIP = 0.22


def infinity_point(
    t: float, cx: float, cy: float, a: float, b: float, offset: float = 0.0
) -> tuple:
    """Lateral eight: x = A cos t, y = B sin 2t / 1.2, with both axes pushed out by ``offset``."""
    x = cx + (a + offset * LAYER_X_SPREAD) * math.cos(t)
    y = cy + (b + offset * LAYER_Y_SPREAD) * math.sin(2 * t) / 1.2
    return x, y


def moebius_point(t: float, cx: float, cy: float, r: float, w: float) -> tuple:
    x = cx + (r + w * math.cos(t / 2)) * math.cos(t)
    y = cy + (r + w * math.cos(t / 2)) * math.sin(t) * math.cos(t / 2)
    return x, y


def _position(node: SkillNode, x: float, y: float, region: str) -> NodePosition:
    return NodePosition(
        id=node.id,
        x=x,
        y=y,
        brightness=score_to_brightness(node.score),
        score=node.score,
        region=region,
    )


def _close_loop(loop: Sequence[NodePosition]) -> None:
    adjacency = {p.id: p.neighbors for p in loop}
    for i in range(len(loop) - 1):
        link(adjacency, loop[i].id, loop[i + 1].id)
    if len(loop) > 2:
        link(adjacency, loop[-1].id, loop[0].id)


def _layered(
    nodes: Sequence[SkillNode], params: ShapeParams, layers: int
) -> List[List[NodePosition]]:
    """Split nodes into equal layers on the wide infinity curve; leftovers are dropped."""
    size = len(nodes) // layers
    if size == 0:
        return []
    dropped = len(nodes) - size * layers
    if dropped:
        logger.debug(f"{dropped} node(s) do not fill a complete layer and are left out")

    w, h = params.width, params.height
    m = min(w, h)
    a, b = m * WIDE_INFINITY_A, m * INFINITY_B
    result = []
    for layer in range(layers):
        offset = params.node_space * LAYER_GAP * layer
        members = nodes[layer * size:(layer + 1) * size]
        row = []
        for i, node in enumerate(members):
            t = (i / size) * 2 * math.pi
            x, y = infinity_point(t, w / 2, h / 2, a, b, offset)
            row.append(_position(node, x, y, f"layer{layer}"))
        _close_loop(row)
        result.append(row)
    return result


def _link_pairs(upper: Sequence[NodePosition], lower: Sequence[NodePosition]) -> None:
    adjacency = {p.id: p.neighbors for p in list(upper) + list(lower)}
    for a, b in zip(upper, lower):
        link(adjacency, a.id, b.id)


@register_shape("infinity")
def infinity_layout(nodes, params: ShapeParams, rng: np.random.Generator) -> List[NodePosition]:
    """Nodes on a single lateral eight, linked in a loop along the curve."""
    w, h = params.width, params.height
    m = min(w, h)
    n = len(nodes)
    positions = []
    for i, node in enumerate(nodes):
        t = (i / n) * 2 * math.pi
        x, y = infinity_point(t, w / 2, h / 2, m * INFINITY_A, m * INFINITY_B)
        positions.append(_position(node, x, y, "curve"))
    _close_loop(positions)
    return positions


@register_shape("infinity-layers")
def infinity_layers_layout(nodes, params: ShapeParams, rng: np.random.Generator) -> List[NodePosition]:
    """
    Three offset copies of the infinity curve (inner, middle, outer).

    The input is expected to be the layered node list (see
    ``models.build_layered_nodes``): consecutive thirds go to consecutive
    layers, and layer ``l`` is offset by ``(l - 1) * node_space``.
    """
    w, h = params.width, params.height
    m = min(w, h)
    per_layer = math.ceil(len(nodes) / LAYER_COUNT)
    rows: List[List[NodePosition]] = [[] for _ in range(LAYER_COUNT)]
    for idx, node in enumerate(nodes):
        layer, i = divmod(idx, per_layer)
        offset = (layer - 1) * params.node_space
        t = (i / per_layer) * 2 * math.pi
        x, y = infinity_point(t, w / 2, h / 2, m * INFINITY_A, m * INFINITY_B, offset)
        rows[layer].append(_position(node, x, y, f"layer{layer}"))
    for row in rows:
        _close_loop(row)
    return [p for row in rows for p in row]


@register_shape("infinity2")
def infinity2_layout(nodes, params: ShapeParams, rng: np.random.Generator) -> List[NodePosition]:
    """Two concentric layers; each node links along its layer and to its pair."""
    rows = _layered(nodes, params, 2)
    if not rows:
        return []
    _link_pairs(rows[0], rows[1])
    return rows[0] + rows[1]


@register_shape("infinity3")
def infinity3_layout(nodes, params: ShapeParams, rng: np.random.Generator) -> List[NodePosition]:
    """Three concentric layers; pairs link between adjacent layers only."""
    rows = _layered(nodes, params, 3)
    if not rows:
        return []
    _link_pairs(rows[0], rows[1])
    _link_pairs(rows[1], rows[2])
    return rows[0] + rows[1] + rows[2]


@register_shape("moebius")
def moebius_layout(nodes, params: ShapeParams, rng: np.random.Generator) -> List[NodePosition]:
    """Figure-eight projection of a twisted strip."""
    w, h = params.width, params.height
    r = min(w, h) * MOEBIUS_RADIUS
    strip = r * MOEBIUS_STRIP
    n = len(nodes)
    positions = []
    for i, node in enumerate(nodes):
        t = (i / n) * 2 * math.pi
        x, y = moebius_point(t, w / 2, h / 2, r, strip)
        positions.append(_position(node, x, y, "curve"))
    _close_loop(positions)
    return positions
