"""
Fist layouts: a traced outline with hub wiring, and a raster fill.
"""

from typing import List

import numpy as np

from skill_layout.graph import (
    connect_outline_ring,
    connect_outline_to_inside,
    connect_to_hubs,
    k_nearest_by_region,
)
from skill_layout.layout import register_shape
from skill_layout.models import FIST_COLOR, NodePosition, ShapeParams
from skill_layout.raster import PathRegion
from skill_layout.regions import PolygonRegion
from skill_layout.sampler import sample_region_budget
from skill_layout.shapes._common import load_outline, outline_subset, place, tagged

FIST_ATTEMPTS = 5000
HUB_COUNT = 4
OUTLINE_NODE_SIZE = 8
INSIDE_NODE_SIZE = 5

# Outer boundary of the fist artwork, drawn in a 451 x 368 box
FIST1_VIEWBOX = (451, 368)
FIST1_PATH = (
    "M0 0 C148.83 0 297.66 0 451 0 "
    "C451 121.44 451 242.88 451 368 "
    "C302.17 368 153.34 368 0 368 "
    "C0 246.56 0 125.12 0 0 Z"
)


@register_shape("fist")
def fist_layout(nodes, params: ShapeParams, rng: np.random.Generator) -> List[NodePosition]:
    """
    Outline nodes on the traced fist, inside nodes filled at random.

    Wiring:
      - outline nodes form a ring, each also linked to one random inside node
      - four random inside nodes act as hubs; every other inside node links
        to up to ``max_inside_connections`` hubs within 80px, nearest first
    """
    coords = load_outline("fist")
    n = len(nodes)
    count = min(len(coords), max(10, n // 5), n)
    outline_points = [(x * params.width, y * params.height) for x, y in outline_subset(coords, count)]

    outline = place(
        nodes[:count], tagged("outline", outline_points), size=OUTLINE_NODE_SIZE, color=FIST_COLOR
    )
    connect_outline_ring(outline)

    inside: List[NodePosition] = []
    if n > count and count >= 3:
        region = PolygonRegion(outline_points)
        points = sample_region_budget(region, n - count, rng, FIST_ATTEMPTS)
        inside = place(nodes[count:], tagged("inside", points), size=INSIDE_NODE_SIZE, color=FIST_COLOR)

    connect_outline_to_inside(outline, inside, rng)
    connect_to_hubs(inside, HUB_COUNT, int(params.max_inside_connections), rng)
    return outline + inside


@register_shape("fist1")
def fist1_layout(nodes, params: ShapeParams, rng: np.random.Generator) -> List[NodePosition]:
    """Fist artwork rasterized from its SVG path, k-NN wired."""
    view_w, view_h = FIST1_VIEWBOX
    region = PathRegion.fitted_svg_path(FIST1_PATH, view_w, view_h, params.width, params.height)
    points = sample_region_budget(region, len(nodes), rng, FIST_ATTEMPTS)
    positions = place(nodes, tagged("path", points))
    k_nearest_by_region(positions)
    return positions
