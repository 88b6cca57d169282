"""
Rejection sampling of points inside regions.

Every function takes the random generator explicitly; nothing here touches
global random state.
"""

from typing import List, Optional, Sequence, Tuple
import logging

import numpy as np

from skill_layout.regions import CompositeRegion, Point, Region

logger = logging.getLogger(__name__)


def allocate_shares(count: int, shares: Sequence[float], remainder_index: int = -1) -> List[int]:
    """
    Split ``count`` into integer budgets proportional to ``shares``.

    Each share is rounded half up and the part at ``remainder_index`` takes
    whatever is left so the budgets sum to ``count`` exactly. If rounding
    overshoots, other parts are trimmed from the end so no budget goes
    negative.
    """
    if count <= 0 or not shares:
        return [0] * len(shares)
    if remainder_index < 0:
        remainder_index += len(shares)

    budgets = [int(np.floor(count * s + 0.5)) if i != remainder_index else 0 for i, s in enumerate(shares)]
    left = count - sum(budgets)
    i = len(budgets) - 1
    while left < 0 and i >= 0:
        if i != remainder_index and budgets[i] > 0:
            take = min(budgets[i], -left)
            budgets[i] -= take
            left += take
        i -= 1
    budgets[remainder_index] = left
    return budgets


def sample_point(
    region: Region, rng: np.random.Generator, max_attempts: Optional[int] = None
) -> Optional[Point]:
    """One accepted point, or None after ``max_attempts`` rejections."""
    return region.sample(rng, max_attempts)


def sample_points(
    region: Region,
    count: int,
    rng: np.random.Generator,
    max_attempts: Optional[int] = None,
) -> List[Point]:
    """
    Sample up to ``count`` points, each with its own attempt ceiling.

    A point that exhausts its ceiling is dropped and sampling moves on, so
    the result may be shorter than ``count``.
    """
    points = []
    for _ in range(max(0, count)):
        point = region.sample(rng, max_attempts)
        if point is not None:
            points.append(point)
    if len(points) < count:
        logger.warning(
            f"Sampling exhausted in {type(region).__name__}: placed {len(points)}/{count} points"
        )
    return points


def sample_region_budget(
    region: Region,
    count: int,
    rng: np.random.Generator,
    total_attempts: int,
) -> List[Point]:
    """
    Sample up to ``count`` points sharing one attempt budget for the whole fill.

    Used for low-density regions (rasterized outlines, large polygons) where a
    single ceiling for the layout bounds the work.
    """
    points: List[Point] = []
    tries = 0
    while len(points) < count and tries < total_attempts:
        x, y = region.propose(rng)
        if region.contains(x, y):
            points.append((x, y))
        tries += 1
    if len(points) < count:
        logger.warning(
            f"Sampling budget of {total_attempts} attempts exhausted: placed {len(points)}/{count} points"
        )
    return points


def sample_composite(
    composite: CompositeRegion,
    count: int,
    rng: np.random.Generator,
    max_attempts: Optional[int] = None,
) -> List[Tuple[str, float, float]]:
    """
    Distribute ``count`` points across the parts of a composite region.

    Returns (part_name, x, y) tuples in part order. Parts with a zero budget
    perform no draws.
    """
    budgets = composite.allocate(count)
    result = []
    for part, budget in zip(composite.parts, budgets):
        if budget <= 0:
            continue
        for x, y in sample_points(part.region, budget, rng, max_attempts):
            result.append((part.name, x, y))
    logger.debug(f"Composite sampling budgets: {dict(zip(composite.names(), budgets))}")
    return result
