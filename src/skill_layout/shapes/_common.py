"""
Helpers shared by the shape layouts.
"""

from importlib import resources
from typing import Dict, List, Mapping, Optional, Sequence, Tuple
import functools
import logging

import numpy as np
import yaml

from skill_layout.models import (
    DEFAULT_BRIGHTNESS,
    NODE_COLOR,
    NodePosition,
    ShapeParams,
    SkillNode,
    intensity_to_brightness,
    random_intensity,
)
from skill_layout.regions import Point, Region
from skill_layout.relax import RelaxConfig, relax

logger = logging.getLogger(__name__)

# Safe drawing area used by the side-view brains (px)
MARGIN_TOP = 80
MARGIN_SIDE = 40
MARGIN_BOTTOM = 40

INTENSE_NODE_SIZE = 8

Sample = Tuple[Optional[str], float, float]


@functools.lru_cache(maxsize=None)
def _load_outlines() -> Dict[str, Tuple[Point, ...]]:
    text = resources.files("skill_layout").joinpath("data/outlines.yaml").read_text()
    data = yaml.safe_load(text)
    return {name: tuple((float(x), float(y)) for x, y in coords) for name, coords in data.items()}


def load_outline(name: str) -> List[Point]:
    """Normalized outline polygon bundled with the package."""
    return list(_load_outlines()[name])


def outline_subset(coords: Sequence[Point], count: int) -> List[Point]:
    """``count`` evenly spaced vertices of an outline, in drawing order."""
    count = max(0, min(count, len(coords)))
    return [coords[(i * len(coords)) // count] for i in range(count)]


def safe_area(width: float, height: float) -> Tuple[float, float, float, float]:
    """(x, y, width, height) of the drawing area inside the fixed margins."""
    return (
        float(MARGIN_SIDE),
        float(MARGIN_TOP),
        width - 2 * MARGIN_SIDE,
        height - MARGIN_TOP - MARGIN_BOTTOM,
    )


def place(
    nodes: Sequence[SkillNode],
    samples: Sequence[Sample],
    brightness: float = DEFAULT_BRIGHTNESS,
    size: Optional[float] = None,
    color: Optional[str] = None,
) -> List[NodePosition]:
    """
    Pair sampled points with nodes in input order.

    When sampling came up short the trailing nodes are left unplaced.
    """
    return [
        NodePosition(
            id=node.id,
            x=float(x),
            y=float(y),
            brightness=brightness,
            neighbors=[],
            score=node.score,
            size=size,
            color=color,
            region=tag,
        )
        for node, (tag, x, y) in zip(nodes, samples)
    ]


def place_with_intensity(
    nodes: Sequence[SkillNode],
    samples: Sequence[Sample],
    rng: np.random.Generator,
) -> Tuple[List[NodePosition], Dict[str, int]]:
    """Like place(), but draws an intensity per node and styles it from that."""
    positions = []
    intensities = {}
    for node, (tag, x, y) in zip(nodes, samples):
        intensity = random_intensity(rng)
        intensities[node.id] = intensity
        positions.append(
            NodePosition(
                id=node.id,
                x=float(x),
                y=float(y),
                brightness=intensity_to_brightness(intensity),
                neighbors=[],
                score=node.score,
                size=INTENSE_NODE_SIZE,
                color=NODE_COLOR,
                region=tag,
            )
        )
    return positions, intensities


def tagged(tag: str, points: Sequence[Point]) -> List[Sample]:
    return [(tag, x, y) for x, y in points]


def relax_if_enabled(
    positions: List[NodePosition],
    regions: Mapping[str, Region],
    params: ShapeParams,
    rng: np.random.Generator,
    default: bool,
    intensities: Optional[Mapping[str, int]] = None,
) -> None:
    """Run the relaxation when requested (``params.relax``) or by shape default."""
    enabled = default if params.relax is None else bool(params.relax)
    if not enabled:
        return
    config = RelaxConfig.from_dict({**params.get("relaxation", {}), "iterations": params.iterations})
    relax(positions, regions, params.width, params.height, rng, config, intensities)
