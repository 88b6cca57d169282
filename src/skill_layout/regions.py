"""
Closed 2D regions with membership tests, proposal draws and outlines.

All coordinates are screen coordinates (y grows downwards), so angles
computed with atan2 follow the screen: pi/2 points down, pi points left.
"""

from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple
import math
import logging

import numpy as np

logger = logging.getLogger(__name__)

Point = Tuple[float, float]

TWO_PI = 2 * math.pi
# Projection targets are pulled this far inside the boundary so they pass contains()
BOUNDARY_SHRINK = 1e-6


@dataclass(frozen=True)
class HalfPlane:
    """Linear constraint a*x + b*y <= c."""

    a: float
    b: float
    c: float

    def holds(self, x: float, y: float) -> bool:
        return self.a * x + self.b * y <= self.c

    @classmethod
    def x_below(cls, value: float) -> "HalfPlane":
        return cls(1.0, 0.0, value)

    @classmethod
    def x_above(cls, value: float) -> "HalfPlane":
        return cls(-1.0, 0.0, -value)

    @classmethod
    def y_below(cls, value: float) -> "HalfPlane":
        return cls(0.0, 1.0, value)

    @classmethod
    def y_above(cls, value: float) -> "HalfPlane":
        return cls(0.0, -1.0, -value)


class Region:
    """Base class for every region family."""

    max_attempts = 100

    def contains(self, x: float, y: float) -> bool:
        raise NotImplementedError

    def bounds(self) -> Tuple[float, float, float, float]:
        """Axis-aligned bounding box (min_x, min_y, max_x, max_y)."""
        raise NotImplementedError

    def propose(self, rng: np.random.Generator) -> Point:
        """Draw a candidate point; default is uniform in the bounding box."""
        min_x, min_y, max_x, max_y = self.bounds()
        return (
            min_x + (max_x - min_x) * rng.random(),
            min_y + (max_y - min_y) * rng.random(),
        )

    def sample(self, rng: np.random.Generator, max_attempts: Optional[int] = None) -> Optional[Point]:
        """Rejection-sample one point, or None once the attempt ceiling is hit."""
        attempts = self.max_attempts if max_attempts is None else max_attempts
        for _ in range(attempts):
            x, y = self.propose(rng)
            if self.contains(x, y):
                return (x, y)
        return None

    def recover(self, x: float, y: float, rng: np.random.Generator) -> Optional[Point]:
        """Bring an escaped point back inside; default draws a fresh sample."""
        return self.sample(rng)

    def outline(self, samples: int = 120) -> List[Point]:
        min_x, min_y, max_x, max_y = self.bounds()
        return [(min_x, min_y), (max_x, min_y), (max_x, max_y), (min_x, max_y)]

    def params(self) -> Dict[str, object]:
        """Numeric description of the region."""
        return {"bounds": self.bounds()}


def _angle_in_range(angle: float, start: float, span: float) -> bool:
    return (angle - start) % TWO_PI <= span + 1e-12


class EllipseRegion(Region):
    """
    Ellipse, optionally cut down to an angular sector and/or half-planes.

    ``angle_range`` is (start, end) in radians measured with atan2 around
    the center, sweeping from start towards increasing angles.
    """

    def __init__(
        self,
        cx: float,
        cy: float,
        rx: float,
        ry: float,
        angle_range: Optional[Tuple[float, float]] = None,
        half_planes: Sequence[HalfPlane] = (),
    ):
        if rx <= 0 or ry <= 0:
            raise ValueError(f"Ellipse radii must be positive, got rx={rx}, ry={ry}")
        self.cx = cx
        self.cy = cy
        self.rx = rx
        self.ry = ry
        self.angle_range = angle_range
        self.half_planes = tuple(half_planes)

        if angle_range is not None:
            start, end = angle_range
            self._start = start % TWO_PI
            self._span = (end - start) if end > start else (end - start) % TWO_PI
        else:
            self._start = 0.0
            self._span = TWO_PI

    def contains(self, x: float, y: float) -> bool:
        dx = (x - self.cx) / self.rx
        dy = (y - self.cy) / self.ry
        if dx * dx + dy * dy > 1:
            return False
        if self.angle_range is not None:
            if not _angle_in_range(math.atan2(y - self.cy, x - self.cx), self._start, self._span):
                return False
        return all(hp.holds(x, y) for hp in self.half_planes)

    def bounds(self) -> Tuple[float, float, float, float]:
        return (self.cx - self.rx, self.cy - self.ry, self.cx + self.rx, self.cy + self.ry)

    def propose(self, rng: np.random.Generator) -> Point:
        # sqrt keeps the draw uniform over the area instead of piling up at the center
        t = self._start + self._span * rng.random()
        r = math.sqrt(rng.random())
        return (self.cx + r * self.rx * math.cos(t), self.cy + r * self.ry * math.sin(t))

    def recover(self, x: float, y: float, rng: np.random.Generator) -> Optional[Point]:
        """Project along the angle from the center onto the boundary."""
        angle = math.atan2((y - self.cy) / self.ry, (x - self.cx) / self.rx)
        scale = 1 - BOUNDARY_SHRINK
        px = self.cx + self.rx * scale * math.cos(angle)
        py = self.cy + self.ry * scale * math.sin(angle)
        if self.contains(px, py):
            return (px, py)
        return self.sample(rng)

    def outline(self, samples: int = 120) -> List[Point]:
        start, span = self._start, self._span
        points = [
            (self.cx + self.rx * math.cos(start + span * i / samples),
             self.cy + self.ry * math.sin(start + span * i / samples))
            for i in range(samples + 1)
        ]
        if span < TWO_PI:
            points.append((self.cx, self.cy))
        return points

    def params(self) -> Dict[str, object]:
        return {
            "cx": self.cx,
            "cy": self.cy,
            "rx": self.rx,
            "ry": self.ry,
            "angle_range": self.angle_range,
            "half_planes": self.half_planes,
        }


class CircleRegion(EllipseRegion):
    """Circle (or circular sector) with radius ``r``."""

    def __init__(
        self,
        cx: float,
        cy: float,
        r: float,
        angle_range: Optional[Tuple[float, float]] = None,
        half_planes: Sequence[HalfPlane] = (),
    ):
        super().__init__(cx, cy, r, r, angle_range=angle_range, half_planes=half_planes)
        self.r = r

    def propose(self, rng: np.random.Generator) -> Point:
        r = self.r * math.sqrt(rng.random())
        a = self._start + self._span * rng.random()
        return (self.cx + r * math.cos(a), self.cy + r * math.sin(a))

    def params(self) -> Dict[str, object]:
        data = super().params()
        data["r"] = self.r
        return data


class RectRegion(Region):
    """Axis-aligned rectangle (the brain "band")."""

    def __init__(self, left: float, top: float, right: float, bottom: float):
        if right < left or bottom < top:
            raise ValueError(f"Invalid rectangle ({left}, {top}, {right}, {bottom})")
        self.left = left
        self.top = top
        self.right = right
        self.bottom = bottom

    def contains(self, x: float, y: float) -> bool:
        return self.top <= y <= self.bottom and self.left <= x <= self.right

    def bounds(self) -> Tuple[float, float, float, float]:
        return (self.left, self.top, self.right, self.bottom)

    def params(self) -> Dict[str, object]:
        return {"left": self.left, "top": self.top, "right": self.right, "bottom": self.bottom}


class TriangleRegion(Region):
    """Triangle with barycentric membership."""

    def __init__(self, a: Point, b: Point, c: Point):
        self.a = (float(a[0]), float(a[1]))
        self.b = (float(b[0]), float(b[1]))
        self.c = (float(c[0]), float(c[1]))
        (ax, ay), (bx, by), (cx, cy) = self.a, self.b, self.c
        self.area = (ax * (by - cy) + bx * (cy - ay) + cx * (ay - by)) / 2

    def barycentric(self, x: float, y: float) -> Tuple[float, float, float]:
        (ax, ay), (bx, by), (cx, cy) = self.a, self.b, self.c
        s = (ax * (by - y) + bx * (y - ay) + x * (ay - by)) / (2 * self.area)
        t = (ax * (y - cy) + x * (cy - ay) + cx * (ay - y)) / (2 * self.area)
        return s, t, 1 - s - t

    def contains(self, x: float, y: float) -> bool:
        if self.area == 0:
            return False
        s, t, u = self.barycentric(x, y)
        return s >= 0 and t >= 0 and u >= 0

    def bounds(self) -> Tuple[float, float, float, float]:
        xs = (self.a[0], self.b[0], self.c[0])
        ys = (self.a[1], self.b[1], self.c[1])
        return (min(xs), min(ys), max(xs), max(ys))

    def propose(self, rng: np.random.Generator) -> Point:
        u, v = rng.random(), rng.random()
        if u + v > 1:
            u, v = 1 - u, 1 - v
        (ax, ay), (bx, by), (cx, cy) = self.a, self.b, self.c
        return (ax + u * (bx - ax) + v * (cx - ax), ay + u * (by - ay) + v * (cy - ay))

    def outline(self, samples: int = 120) -> List[Point]:
        return [self.a, self.b, self.c, self.a]

    def params(self) -> Dict[str, object]:
        return {"a": self.a, "b": self.b, "c": self.c}


def point_in_polygon(x: float, y: float, vertices: Sequence[Point]) -> bool:
    """Even-odd ray casting towards +x."""
    inside = False
    n = len(vertices)
    j = n - 1
    for i in range(n):
        xi, yi = vertices[i]
        xj, yj = vertices[j]
        if (yi > y) != (yj > y):
            # epsilon guards horizontal edges against division by zero
            x_cross = (xj - xi) * (y - yi) / (yj - yi + 1e-8) + xi
            if x < x_cross:
                inside = not inside
        j = i
    return inside


class PolygonRegion(Region):
    """Simple polygon tested with ray casting."""

    def __init__(self, vertices: Sequence[Point], max_attempts: Optional[int] = None):
        if len(vertices) < 3:
            raise ValueError(f"Polygon needs at least 3 vertices, got {len(vertices)}")
        self.vertices = [(float(x), float(y)) for x, y in vertices]
        if max_attempts is not None:
            self.max_attempts = max_attempts

    @classmethod
    def from_normalized(
        cls,
        coords: Sequence[Point],
        width: float,
        height: float,
        origin: Point = (0.0, 0.0),
        max_attempts: Optional[int] = None,
    ) -> "PolygonRegion":
        """Scale [0, 1] coordinates into a ``width`` x ``height`` box at ``origin``."""
        ox, oy = origin
        return cls([(ox + x * width, oy + y * height) for x, y in coords], max_attempts=max_attempts)

    def contains(self, x: float, y: float) -> bool:
        return point_in_polygon(x, y, self.vertices)

    def bounds(self) -> Tuple[float, float, float, float]:
        xs = [v[0] for v in self.vertices]
        ys = [v[1] for v in self.vertices]
        return (min(xs), min(ys), max(xs), max(ys))

    def outline(self, samples: int = 120) -> List[Point]:
        return list(self.vertices) + [self.vertices[0]]

    def params(self) -> Dict[str, object]:
        return {"vertices": tuple(self.vertices)}


@dataclass
class RegionPart:
    """A named sub-region holding a fractional share of the node budget."""

    name: str
    region: Region
    share: float = 0.0
    remainder: bool = False


class CompositeRegion(Region):
    """
    Union of named sub-regions.

    Exactly one part absorbs the rounding remainder of the node budget;
    if none is flagged, the last part does.
    """

    def __init__(self, parts: Sequence[RegionPart]):
        if not parts:
            raise ValueError("CompositeRegion needs at least one part")
        self.parts = list(parts)
        flagged = [i for i, p in enumerate(self.parts) if p.remainder]
        if len(flagged) > 1:
            raise ValueError("Only one part may absorb the remainder")
        self.remainder_index = flagged[0] if flagged else len(self.parts) - 1
        self._by_name = {p.name: p for p in self.parts}

    def part(self, name: str) -> RegionPart:
        return self._by_name[name]

    def names(self) -> List[str]:
        return [p.name for p in self.parts]

    def allocate(self, count: int) -> List[int]:
        from skill_layout.sampler import allocate_shares

        return allocate_shares(count, [p.share for p in self.parts], self.remainder_index)

    def contains(self, x: float, y: float) -> bool:
        return any(p.region.contains(x, y) for p in self.parts)

    def bounds(self) -> Tuple[float, float, float, float]:
        boxes = [p.region.bounds() for p in self.parts]
        return (
            min(b[0] for b in boxes),
            min(b[1] for b in boxes),
            max(b[2] for b in boxes),
            max(b[3] for b in boxes),
        )

    def propose(self, rng: np.random.Generator) -> Point:
        part = self.parts[int(rng.integers(len(self.parts)))]
        return part.region.propose(rng)

    def outline(self, samples: int = 120) -> List[Point]:
        points: List[Point] = []
        for p in self.parts:
            points.extend(p.region.outline(samples))
        return points

    def outlines(self, samples: int = 120) -> Dict[str, List[Point]]:
        return {p.name: p.region.outline(samples) for p in self.parts}

    def params(self) -> Dict[str, object]:
        return {p.name: {"share": p.share, **p.region.params()} for p in self.parts}
