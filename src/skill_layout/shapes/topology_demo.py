"""
Topology demos: nodes evenly spaced on a circle, wired by a named topology.

Registered as ``<topology>-topology-demo`` for every Topology, e.g.
``ring-topology-demo``. The geometry is only there to make the graph readable.
"""

from typing import List
import math

import numpy as np

from skill_layout.graph import Topology, apply_topology
from skill_layout.layout import register_shape
from skill_layout.models import NodePosition, ShapeParams, score_to_brightness

DEMO_RADIUS = 0.4


def circle_positions(nodes, params: ShapeParams) -> List[NodePosition]:
    cx, cy = params.width / 2, params.height / 2
    r = min(params.width, params.height) * DEMO_RADIUS
    n = len(nodes)
    return [
        NodePosition(
            id=node.id,
            x=cx + r * math.cos(2 * math.pi * i / n - math.pi / 2),
            y=cy + r * math.sin(2 * math.pi * i / n - math.pi / 2),
            brightness=score_to_brightness(node.score),
            score=node.score,
        )
        for i, node in enumerate(nodes)
    ]


def _demo(topology: Topology):
    def layout(nodes, params: ShapeParams, rng: np.random.Generator) -> List[NodePosition]:
        positions = circle_positions(nodes, params)
        apply_topology(positions, topology, rng)
        return positions

    layout.__name__ = f"{topology.name.lower()}_topology_demo"
    layout.__doc__ = f"Circle of nodes wired as {topology.value}."
    return layout


for _topology in Topology:
    register_shape(f"{_topology.value}-topology-demo")(_demo(_topology))
