"""
Brain layouts.

Side views are composites of lobes, a band and a stem; top-down views are
two mirrored lobes separated by a gap. The raster and polygon variants fill
a traced outline instead.
"""

from typing import Dict, List
import math
import logging

import numpy as np

from skill_layout.graph import connect_outline_ring, k_nearest_by_region
from skill_layout.layout import register_shape
from skill_layout.models import NODE_COLOR, NodePosition, ShapeParams
from skill_layout.raster import PathRegion
from skill_layout.regions import (
    CircleRegion,
    CompositeRegion,
    EllipseRegion,
    HalfPlane,
    PolygonRegion,
    RectRegion,
    Region,
    RegionPart,
    TriangleRegion,
)
from skill_layout.sampler import sample_composite, sample_points, sample_region_budget
from skill_layout.shapes._common import (
    load_outline,
    outline_subset,
    place,
    place_with_intensity,
    relax_if_enabled,
    safe_area,
    tagged,
)

logger = logging.getLogger(__name__)

RASTER_ATTEMPTS = 5000
TOP_DOWN_POLYGON_ATTEMPTS = 20000

# Side-view silhouette, normalized to the safe area. The stem runs past the
# bottom edge of the box on purpose.
BRAIN4_POLYGON = [
    (0.22, 0.28), (0.36, 0.13), (0.50, 0.08), (0.64, 0.13), (0.78, 0.28),
    # cerebellum
    (0.82, 0.70), (0.92, 0.70), (0.92, 0.90), (0.82, 0.90),
    (0.68, 0.70),
    # stem
    (0.54, 0.70), (0.54, 1.08), (0.46, 1.08), (0.46, 0.70),
    (0.32, 0.70),
    (0.22, 0.28),
]

# Drawn in a 931.843 x 931.843 box
BRAIN_SVG_VIEWBOX = 931.843
BRAIN_SVG_PATH = (
    "M926.932,305.137 "
    "c12.301,-38.3,1.4,-86.6,-32,-124 "
    "c-14.5,-16.2,-31.4,-28.5,-49.199,-36.5 "
    "c-5.1,-8.4,-11.201,-16.6,-18.1,-24.4 "
    "c-29.9,-33.5,-69.4,-51.5,-105.701,-51.7 "
    "c-25.4,-19.5,-59.699,-34.3,-98.699,-40.4 "
    "c-30.7,-4.8,-60.3,-3.6,-86.2,2.4 "
    "c-22.5,-9.8,-49,-13.8,-76.8,-10.3 "
    "c-28.899,3.7,-54.5,14.9,-74.1,31 "
    "c-31,-14,-70.9,-14.8,-108.9,0.9 "
    "c-32.7,13.5,-57.8,36.5,-72,63 "
    "c-25.4,5.6,-51.1,19.1,-73,40.1 "
    "c-31.1,29.8,-47.5,68,-47.4,102.8 "
    "c-37.8,21,-61.8,57.1,-60.1,95.6 "
    "c-10.1,15.4,-17.7,33.5,-21.7,53.4 "
    "c-6.9,34.5,-1.7,67.899,12.3,94.3 "
    "c-1,58.3,31.7,108.6,80.9,118.4 "
    "c3.2,0.6,6.4,1.1,9.6,1.399 "
    "c-1.7,12.101,-1.5,24.4,1,36.7 "
    "c14.1,71.1,95.7,114.8,182.3,97.6 "
    "c3.899,-0.8,7.8,-1.699,11.6,-2.699 "
    "l0,0 c12.9,20.699,39.7,11.8,39.7,11.8 "
    "v76.6 c0,8.2,3.1,16,8.8,22 "
    "l42.4,44.7 c9.899,10.5,27.5,3.4,27.5,-11 "
    "v-86.6 c2.6,-78.101,31.3,-116.7,55.8,-131.4 "
    "c33,-19.9,32.5,-61.3,32.3,-76.4 "
    "c26,13.7,67.101,21.5,101.5,17.601 "
    "c155.199,-17.9,163.299,-122.3,168.4,-139.4 "
    "c45.299,3.4,86.898,-15.8,104.898,-52.7 "
    "c2.5,-5.199,4.5,-10.6,5.9,-16 "
    "c15,-8.899,27.301,-21.6,35.1,-37.6 "
    "C933.633,352.737,934.332,328.337,926.932,305.137z"
)


# ---------------------------------------------------------------------------
# Region builders
# ---------------------------------------------------------------------------

def brain_regions(width: float, height: float) -> CompositeRegion:
    """Five-part side view: two lobes, a band, a stem and the central oblong."""
    r_left = width * 0.25
    left_cx, left_cy = width * 0.36, height * 0.36
    r_right = width * 0.25 * 1.2
    right_cx, right_cy = width * 0.64, height * 0.36
    lobe_sector = (math.pi / 2, math.pi)
    return CompositeRegion([
        RegionPart("left", CircleRegion(
            left_cx, left_cy, r_left,
            angle_range=lobe_sector,
            half_planes=[
                HalfPlane.x_below(left_cx + r_left * 0.25),
                HalfPlane.y_below(left_cy + r_left * 0.9),
            ],
        ), share=0.22),
        RegionPart("right", CircleRegion(
            right_cx, right_cy, r_right,
            angle_range=lobe_sector,
            half_planes=[
                HalfPlane.x_above(right_cx - r_right * 0.25),
                HalfPlane.y_below(right_cy + r_right * 0.9),
            ],
        ), share=0.25),
        RegionPart("band", RectRegion(width * 0.28, height * 0.41, width * 0.72, height * 0.58), share=0.18),
        RegionPart("stem", TriangleRegion(
            (width * 0.52, height * 0.58),
            (width * 0.60, height * 0.58),
            (width * 0.56, height * 0.88),
        ), share=0.15),
        RegionPart("oblong", EllipseRegion(width * 0.5, height * 0.48, width * 0.13, height * 0.09), remainder=True),
    ])


def brain2_regions(width: float, height: float) -> CompositeRegion:
    """Upper half-ellipse with a stem triangle at the bottom right."""
    cx, cy = width * 0.5, height * 0.38
    return CompositeRegion([
        RegionPart("oblong", EllipseRegion(
            cx, cy, width * 0.32, height * 0.22,
            angle_range=(math.pi, 2 * math.pi),
            half_planes=[HalfPlane.y_below(cy)],
        ), share=0.8),
        RegionPart("stem", TriangleRegion(
            (width * 0.62, height * 0.60),
            (width * 0.72, height * 0.88),
            (width * 0.52, height * 0.88),
        ), remainder=True),
    ])


def brain3_regions(width: float, height: float) -> CompositeRegion:
    """Semicircle resting on its flat side, with a triangular stem below its right end."""
    draw_x, draw_y, draw_w, draw_h = safe_area(width, height)
    r = 0.48 * min(draw_w, draw_h * 0.7)
    cx = draw_x + draw_w / 2
    cy = draw_y + r
    return CompositeRegion([
        RegionPart("semicircle", CircleRegion(
            cx, cy, r,
            angle_range=(math.pi, 2 * math.pi),
            half_planes=[HalfPlane.y_below(cy)],
        ), share=0.8),
        RegionPart("triangle", TriangleRegion(
            (cx + r, cy),
            (draw_x + draw_w * 0.92, draw_y + draw_h * 0.98),
            (cx + r * 0.55, cy + r * 0.65),
        ), remainder=True),
    ])


def brain4_polygon(width: float, height: float) -> PolygonRegion:
    draw_x, draw_y, draw_w, draw_h = safe_area(width, height)
    return PolygonRegion.from_normalized(BRAIN4_POLYGON, draw_w, draw_h, origin=(draw_x, draw_y))


def top_down_regions(width: float, height: float) -> Dict[str, EllipseRegion]:
    """Left and right hemispheres; neither may cross into the central gap."""
    gap = width * 0.06
    lobe_w = (width - gap) / 2 * 0.96
    lobe_h = height * 0.92
    cx_left = width / 2 - gap / 2 - lobe_w / 2
    cx_right = width / 2 + gap / 2 + lobe_w / 2
    cy = height / 2
    return {
        "left": EllipseRegion(
            cx_left, cy, lobe_w / 2, lobe_h / 2,
            half_planes=[HalfPlane.x_below(width / 2 - gap / 2)],
        ),
        "right": EllipseRegion(
            cx_right, cy, lobe_w / 2, lobe_h / 2,
            half_planes=[HalfPlane.x_above(width / 2 + gap / 2)],
        ),
    }


def _part_regions(composite: CompositeRegion) -> Dict[str, Region]:
    return {p.name: p.region for p in composite.parts}


# ---------------------------------------------------------------------------
# Layouts
# ---------------------------------------------------------------------------

@register_shape("brain")
def brain_layout(nodes, params: ShapeParams, rng: np.random.Generator) -> List[NodePosition]:
    """Five-region brain with intensity-weighted relaxation (on by default)."""
    regions = brain_regions(params.width, params.height)
    samples = sample_composite(regions, len(nodes), rng)
    positions, intensities = place_with_intensity(nodes, samples, rng)
    k_nearest_by_region(positions)
    relax_if_enabled(positions, _part_regions(regions), params, rng, default=True, intensities=intensities)
    return positions


@register_shape("brain2")
def brain2_layout(nodes, params: ShapeParams, rng: np.random.Generator) -> List[NodePosition]:
    regions = brain2_regions(params.width, params.height)
    positions = place(nodes, sample_composite(regions, len(nodes), rng))
    k_nearest_by_region(positions)
    relax_if_enabled(positions, _part_regions(regions), params, rng, default=False)
    return positions


@register_shape("brain3")
def brain3_layout(nodes, params: ShapeParams, rng: np.random.Generator) -> List[NodePosition]:
    _, _, draw_w, draw_h = safe_area(params.width, params.height)
    if draw_w <= 0 or draw_h <= 0:
        logger.warning(
            f"Canvas {params.width}x{params.height} leaves no room inside the margins for brain3"
        )
        return []
    regions = brain3_regions(params.width, params.height)
    positions = place(nodes, sample_composite(regions, len(nodes), rng))
    k_nearest_by_region(positions)
    relax_if_enabled(positions, _part_regions(regions), params, rng, default=False)
    return positions


@register_shape("brain4")
def brain4_layout(nodes, params: ShapeParams, rng: np.random.Generator) -> List[NodePosition]:
    region = brain4_polygon(params.width, params.height)
    positions = place(nodes, tagged("polygon", sample_points(region, len(nodes), rng)))
    k_nearest_by_region(positions)
    relax_if_enabled(positions, {"polygon": region}, params, rng, default=False)
    return positions


@register_shape("brain-svg2")
def brain_svg2_layout(nodes, params: ShapeParams, rng: np.random.Generator) -> List[NodePosition]:
    """Brain silhouette filled from its SVG path via a raster mask."""
    region = PathRegion.fitted_svg_path(
        BRAIN_SVG_PATH, BRAIN_SVG_VIEWBOX, BRAIN_SVG_VIEWBOX, params.width, params.height
    )
    budget = int(params.get("max_tries", RASTER_ATTEMPTS))
    positions = place(nodes, tagged("path", sample_region_budget(region, len(nodes), rng, budget)))
    k_nearest_by_region(positions)
    relax_if_enabled(positions, {"path": region}, params, rng, default=False)
    return positions


@register_shape("brain-test2")
def brain_test2_layout(nodes, params: ShapeParams, rng: np.random.Generator) -> List[NodePosition]:
    """
    Outline ring traced from the drawing tool, interior filled at random.

    A quarter of the nodes (at least 8) sit on evenly spaced outline
    vertices and link to the next one; the rest are unconnected.
    """
    coords = load_outline("brain_test")
    n = len(nodes)
    count = min(len(coords), max(8, n // 4), n)
    outline = [(x * params.width, y * params.height) for x, y in outline_subset(coords, count)]

    positions = place(nodes[:count], tagged("outline", outline))
    connect_outline_ring(positions)
    if n > count and count >= 3:
        interior = PolygonRegion(outline)
        points = sample_region_budget(interior, n - count, rng, RASTER_ATTEMPTS)
        positions += place(nodes[count:], tagged("interior", points))
    return positions


@register_shape("top-down-brain")
def top_down_brain_layout(nodes, params: ShapeParams, rng: np.random.Generator) -> List[NodePosition]:
    """Two hemispheres seen from above, relaxed with intensity weighting (on by default)."""
    regions = top_down_regions(params.width, params.height)
    n_left = len(nodes) // 2
    positions: List[NodePosition] = []
    intensities: Dict[str, int] = {}
    for tag, members in (("left", nodes[:n_left]), ("right", nodes[n_left:])):
        points = sample_points(regions[tag], len(members), rng)
        placed, drawn = place_with_intensity(members, tagged(tag, points), rng)
        positions += placed
        intensities.update(drawn)
    k_nearest_by_region(positions)
    relax_if_enabled(positions, regions, params, rng, default=True, intensities=intensities)
    return positions


@register_shape("top-down-brain2")
def top_down_brain2_layout(nodes, params: ShapeParams, rng: np.random.Generator) -> List[NodePosition]:
    """Top-down outline polygon filled at random; nodes are left unconnected."""
    region = PolygonRegion.from_normalized(load_outline("top_down_brain"), params.width, params.height)
    budget = int(params.get("max_tries", TOP_DOWN_POLYGON_ATTEMPTS))
    points = sample_region_budget(region, len(nodes), rng, budget)
    return place(nodes, tagged("polygon", points), size=8, color=NODE_COLOR)
