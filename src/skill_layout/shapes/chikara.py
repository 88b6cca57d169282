"""
Kanji 力 (chikara, "strength") drawn as three straight strokes.
"""

from typing import List
import math

import numpy as np

from skill_layout.graph import link
from skill_layout.layout import register_shape
from skill_layout.models import DEFAULT_BRIGHTNESS, NodePosition, ShapeParams
from skill_layout.sampler import allocate_shares

# (x1, y1, x2, y2) in normalized canvas coordinates
STROKES = [
    (0.35, 0.18, 0.35, 0.82),  # main vertical
    (0.35, 0.50, 0.75, 0.18),  # top right to bottom left
    (0.55, 0.65, 0.82, 0.82),  # bottom hook
]


@register_shape("chikara")
def chikara_layout(nodes, params: ShapeParams, rng: np.random.Generator) -> List[NodePosition]:
    """
    Nodes spread along the strokes in proportion to stroke length.

    Endpoints are avoided (``t = (i + 1) / (count + 1)``) and the first
    stroke absorbs the rounding remainder. Nodes on a stroke form a chain.
    """
    lengths = [math.hypot(x2 - x1, y2 - y1) for x1, y1, x2, y2 in STROKES]
    total = sum(lengths)
    counts = allocate_shares(len(nodes), [length / total for length in lengths], remainder_index=0)

    positions: List[NodePosition] = []
    idx = 0
    for s, ((x1, y1, x2, y2), count) in enumerate(zip(STROKES, counts)):
        stroke = []
        for i in range(count):
            t = (i + 1) / (count + 1)
            node = nodes[idx]
            idx += 1
            stroke.append(
                NodePosition(
                    id=node.id,
                    x=params.width * (x1 + (x2 - x1) * t),
                    y=params.height * (y1 + (y2 - y1) * t),
                    brightness=DEFAULT_BRIGHTNESS,
                    score=node.score,
                    region=f"stroke{s}",
                )
            )
        adjacency = {p.id: p.neighbors for p in stroke}
        for a, b in zip(stroke, stroke[1:]):
            link(adjacency, a.id, b.id)
        positions.extend(stroke)
    return positions
