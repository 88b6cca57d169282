"""
Core data types: skill nodes in, positioned nodes out, per-call parameters.
"""

from dataclasses import dataclass, field, replace
from importlib import resources
from typing import Any, Dict, List, Optional
import math
import logging

import numpy as np
import yaml

logger = logging.getLogger(__name__)

# Cumulative thresholds for random_intensity(); values 1..10, 10 is rare
INTENSITY_THRESHOLDS = [0.97, 0.90, 0.80, 0.65, 0.50, 0.35, 0.25, 0.15, 0.07]

DEFAULT_BRIGHTNESS = 0.7
NODE_COLOR = "#3bb0e0"
FIST_COLOR = "#8B0000"


@dataclass(frozen=True)
class SkillNode:
    """Input node: a skill with a 1-10 score."""

    id: str
    score: float

    @classmethod
    def from_dict(cls, data: dict) -> "SkillNode":
        return cls(id=str(data["id"]), score=float(data.get("score", 5)))


@dataclass
class NodePosition:
    """A positioned node as handed to the renderer."""

    id: str
    x: float
    y: float
    brightness: float
    neighbors: List[str] = field(default_factory=list)
    score: Optional[float] = None
    size: Optional[float] = None
    color: Optional[str] = None
    region: Optional[str] = None  # sub-region the node was sampled in

    def copy(self) -> "NodePosition":
        return replace(self, neighbors=list(self.neighbors))

    def to_dict(self, include_region: bool = False) -> Dict[str, Any]:
        """Serialize, omitting unset optional fields."""
        data: Dict[str, Any] = {
            "id": self.id,
            "x": float(self.x),
            "y": float(self.y),
            "brightness": float(self.brightness),
            "neighbors": list(self.neighbors),
        }
        for key in ("score", "size", "color"):
            value = getattr(self, key)
            if value is not None:
                data[key] = value
        if include_region and self.region is not None:
            data["region"] = self.region
        return data


@dataclass
class ShapeParams:
    """Per-call layout configuration. Treated as read-only by layouts."""

    width: float
    height: float
    node_space: float = 1.0
    max_inside_connections: int = 1
    topology: Optional[str] = None
    relax: Optional[bool] = None  # None means "shape default"
    iterations: int = 100
    clustering: float = 0.0
    cluster_count: int = 3
    cluster_seed: Optional[str] = None
    seed: Optional[int] = None
    extra: Dict[str, Any] = field(default_factory=dict)

    # camelCase keys sent by the web front-end
    _ALIASES = {
        "nodeSpace": "node_space",
        "maxInsideConnections": "max_inside_connections",
        "clusterCount": "cluster_count",
        "clusterSeed": "cluster_seed",
    }

    @classmethod
    def from_dict(cls, config: dict) -> "ShapeParams":
        """
        Create params from a dictionary (loaded from YAML or a UI payload).

        Accepts a flat mapping or the nested ``canvas`` / ``relaxation`` /
        ``clustering`` sections of layout.yaml. Unknown keys land in ``extra``.
        """
        flat: Dict[str, Any] = {}
        canvas = config.get("canvas", {})
        flat["width"] = canvas.get("width", config.get("width"))
        flat["height"] = canvas.get("height", config.get("height"))

        relaxation = config.get("relaxation", {})
        if isinstance(relaxation, dict):
            if "enabled" in relaxation:
                flat["relax"] = relaxation["enabled"]
            if "iterations" in relaxation:
                flat["iterations"] = relaxation["iterations"]

        clustering = config.get("clustering", 0.0)
        if isinstance(clustering, dict):
            flat["clustering"] = clustering.get("strength", 0.0)
            flat["cluster_count"] = clustering.get("count", 3)
            flat["cluster_seed"] = clustering.get("seed")
        else:
            flat["clustering"] = clustering

        known = {f for f in cls.__dataclass_fields__ if not f.startswith("_")}
        extra = dict(config.get("extra", {}))
        for key, value in config.items():
            key = cls._ALIASES.get(key, key)
            if key in ("canvas", "relaxation", "clustering", "extra", "width", "height"):
                continue
            if key in known:
                flat[key] = value
            else:
                extra[key] = value

        if flat["width"] is None or flat["height"] is None:
            raise KeyError("ShapeParams requires width and height")
        if isinstance(relaxation, dict) and relaxation:
            # force constants are read back by RelaxConfig.from_dict
            extra["relaxation"] = dict(relaxation)
        flat["extra"] = extra
        return cls(**flat)

    def is_valid(self) -> bool:
        """Width and height must be positive finite numbers."""
        try:
            w = float(self.width)
            h = float(self.height)
        except (TypeError, ValueError):
            return False
        return math.isfinite(w) and math.isfinite(h) and w > 0 and h > 0

    def get(self, key: str, default: Any = None) -> Any:
        """Look up a layout-specific knob."""
        return self.extra.get(key, default)


def score_to_brightness(score: float) -> float:
    """Map score (1-10) to brightness (0.3-1.0)."""
    return 0.3 + 0.7 * (score - 1) / 9


def score_to_radius(score: float) -> float:
    """Map score (1-10) to node radius (6-18px)."""
    return 6 + 12 * (score - 1) / 9


def intensity_to_brightness(intensity: int) -> float:
    return 0.4 + 0.6 * (intensity / 10)


def random_intensity(rng: np.random.Generator) -> int:
    """Draw an intensity 1-10 with a lower chance for the high end."""
    r = rng.random()
    for value, threshold in zip(range(10, 1, -1), INTENSITY_THRESHOLDS):
        if r > threshold:
            return value
    return 1


def load_skill_pool() -> List[SkillNode]:
    """Load the bundled pool of skill nodes."""
    text = resources.files("skill_layout").joinpath("data/skills.yaml").read_text()
    data = yaml.safe_load(text)
    return [SkillNode.from_dict(item) for item in data["skills"]]


def build_nodes(count: int, pool: Optional[List[SkillNode]] = None) -> List[SkillNode]:
    """
    Build ``count`` nodes from a fixed pool, cycling through it as needed.

    Ids are suffixed with the running index so they stay unique.
    """
    if pool is None:
        pool = load_skill_pool()
    if not pool or count <= 0:
        return []
    return [
        SkillNode(id=f"{pool[i % len(pool)].id}-dyn{i}", score=pool[i % len(pool)].score)
        for i in range(count)
    ]


def build_layered_nodes(
    nodes: List[SkillNode], layers: int, rng: np.random.Generator
) -> List[SkillNode]:
    """Copy ``nodes`` once per layer with a fresh random score (1-10)."""
    layered = []
    for layer in range(layers):
        for node in nodes:
            layered.append(
                SkillNode(id=f"{node.id}-layer{layer}", score=int(rng.integers(1, 11)))
            )
    return layered
