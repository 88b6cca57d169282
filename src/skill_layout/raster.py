"""
Raster-backed regions for outlines too complex for analytic geometry.

A vector outline is filled into an offscreen Pillow image and membership is
answered by pixel occupancy.
"""

from pathlib import Path
from typing import List, Optional, Sequence, Tuple
import json
import logging

import numpy as np
from PIL import Image, ImageDraw
from svgpathtools import parse_path

from skill_layout.regions import Point, Region

logger = logging.getLogger(__name__)


def _split_subpaths(path) -> List[list]:
    """Split a parsed path into continuous runs of segments (M...Z boundaries)."""
    subpaths = []
    current: list = []
    for seg in path:
        if current and abs(seg.start - current[-1].end) > 1e-6:
            subpaths.append(current)
            current = []
        current.append(seg)
    if current:
        subpaths.append(current)
    return subpaths


def flatten_svg_path(
    d: str,
    samples_per_segment: int = 16,
    scale: float = 1.0,
    offset: Point = (0.0, 0.0),
) -> List[List[Point]]:
    """
    Flatten an SVG path string into polygons, one per sub-path.

    Args:
        d: SVG path data
        samples_per_segment: Parametric samples taken on each segment
        scale: Uniform scale applied to the path before flattening
        offset: Translation applied after scaling

    Returns:
        List of vertex lists
    """
    path = parse_path(d)
    if scale != 1.0:
        path = path.scaled(scale)
    if offset != (0.0, 0.0):
        path = path.translated(complex(offset[0], offset[1]))
    polygons = []
    for segments in _split_subpaths(path):
        points: List[Point] = []
        for seg in segments:
            for t in np.linspace(0, 1, samples_per_segment, endpoint=False):
                pt = seg.point(t)
                points.append((pt.real, pt.imag))
        end = segments[-1].end
        points.append((end.real, end.imag))
        if len(points) >= 3:
            polygons.append(points)
    return polygons


class PathRegion(Region):
    """Region answered by an occupancy mask; mask[y, x] is True inside."""

    max_attempts = 5000

    def __init__(self, mask: np.ndarray, max_attempts: Optional[int] = None):
        self.mask = np.asarray(mask, dtype=bool)
        self.height, self.width = self.mask.shape
        if max_attempts is not None:
            self.max_attempts = max_attempts

    @classmethod
    def from_polygons(
        cls, polygons: Sequence[Sequence[Point]], width: float, height: float
    ) -> "PathRegion":
        """Fill polygons (even-odd between overlapping sub-paths is not applied)."""
        image = Image.new("L", (max(1, int(width)), max(1, int(height))), 0)
        draw = ImageDraw.Draw(image)
        for polygon in polygons:
            if len(polygon) >= 3:
                draw.polygon([(float(x), float(y)) for x, y in polygon], fill=255)
        return cls(np.array(image) > 0)

    @classmethod
    def from_svg_path(
        cls,
        d: str,
        width: float,
        height: float,
        scale: float = 1.0,
        offset: Point = (0.0, 0.0),
    ) -> "PathRegion":
        polygons = flatten_svg_path(d, scale=scale, offset=offset)
        logger.debug(f"Rasterizing SVG path: {len(polygons)} sub-path(s) into {width}x{height}")
        return cls.from_polygons(polygons, width, height)

    @classmethod
    def fitted_svg_path(
        cls, d: str, view_width: float, view_height: float, width: float, height: float
    ) -> "PathRegion":
        """Rasterize a path drawn in a ``view_width`` x ``view_height`` box, scaled to fit and centred."""
        scale = min(width / view_width, height / view_height)
        offset = ((width - view_width * scale) / 2, (height - view_height * scale) / 2)
        return cls.from_svg_path(d, width, height, scale=scale, offset=offset)

    @classmethod
    def from_cells(
        cls,
        coords: Sequence[Point],
        cols: int,
        rows: int,
        width: float,
        height: float,
    ) -> "PathRegion":
        """
        Seed a region from a drawn-shape export.

        Args:
            coords: Normalized cell centers in [0, 1]
            cols: Grid columns of the drawing tool
            rows: Grid rows of the drawing tool
            width: Target raster width
            height: Target raster height
        """
        image = Image.new("L", (max(1, int(width)), max(1, int(height))), 0)
        draw = ImageDraw.Draw(image)
        cell_w = width / cols
        cell_h = height / rows
        for x, y in coords:
            # x == 1.0 belongs to the last column, not one past it
            i = min(int(x * cols), cols - 1)
            j = min(int(y * rows), rows - 1)
            draw.rectangle(
                [i * cell_w, j * cell_h, (i + 1) * cell_w - 1, (j + 1) * cell_h - 1], fill=255
            )
        return cls(np.array(image) > 0)

    def contains(self, x: float, y: float) -> bool:
        if not (0 <= x < self.width and 0 <= y < self.height):
            return False
        return bool(self.mask[int(y), int(x)])

    def bounds(self) -> Tuple[float, float, float, float]:
        return (0.0, 0.0, float(self.width), float(self.height))

    def fill_ratio(self) -> float:
        return float(self.mask.mean()) if self.mask.size else 0.0

    def params(self) -> dict:
        return {"shape": self.mask.shape, "filled": int(self.mask.sum())}


def load_drawn_shape(path: Path) -> List[Point]:
    """Read a drawn-shape export: a JSON array of {"x": .., "y": ..} in [0, 1]."""
    with open(path, "r") as f:
        data = json.load(f)
    coords = []
    for item in data:
        x, y = float(item["x"]), float(item["y"])
        if not (0.0 <= x <= 1.0 and 0.0 <= y <= 1.0):
            logger.warning(f"Drawn shape coordinate out of range, skipped: ({x}, {y})")
            continue
        coords.append((x, y))
    return coords
