"""
Layout dispatcher - routes a shape id to its layout and applies post-passes.
"""

from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Union
import logging
import time

import numpy as np

from skill_layout.models import (
    NodePosition,
    ShapeParams,
    SkillNode,
    build_layered_nodes,
    build_nodes,
    load_skill_pool,
)

logger = logging.getLogger(__name__)

ShapeLayout = Callable[[Sequence[SkillNode], ShapeParams, np.random.Generator], List[NodePosition]]

_REGISTRY: Dict[str, ShapeLayout] = {}

# Shapes whose input is the three-layer node list
LAYERED_SHAPES = {"infinity-layers": 3}


def register_shape(shape_id: str) -> Callable[[ShapeLayout], ShapeLayout]:
    """Decorator registering a layout under ``shape_id``."""

    def decorator(func: ShapeLayout) -> ShapeLayout:
        if shape_id in _REGISTRY and _REGISTRY[shape_id] is not func:
            raise ValueError(f"Shape already registered: {shape_id}")
        _REGISTRY[shape_id] = func
        return func

    return decorator


def _load_builtin_shapes():
    # shape modules register themselves on import
    import skill_layout.shapes  # noqa: F401


def get_shape(shape_id: str) -> Optional[ShapeLayout]:
    _load_builtin_shapes()
    return _REGISTRY.get(shape_id)


def available_shapes() -> List[str]:
    """Sorted ids of every registered shape."""
    _load_builtin_shapes()
    return sorted(_REGISTRY)


def resolve_rng(rng: Optional[np.random.Generator] = None, seed: Optional[int] = None) -> np.random.Generator:
    """
    Pick the random source for one layout call.

    An explicit generator wins; otherwise a seed gives a reproducible
    generator; otherwise a fresh, unseeded one.
    """
    if rng is not None:
        return rng
    if seed is not None:
        return np.random.default_rng(seed)
    return np.random.default_rng()


def _coerce_nodes(nodes) -> List[SkillNode]:
    return [n if isinstance(n, SkillNode) else SkillNode.from_dict(n) for n in nodes]


def _coerce_params(params) -> Optional[ShapeParams]:
    if isinstance(params, ShapeParams):
        candidate = params
    else:
        try:
            candidate = ShapeParams.from_dict(dict(params))
        except (KeyError, TypeError, ValueError) as e:
            logger.warning(f"Invalid layout parameters: {e}")
            return None
    if not candidate.is_valid():
        logger.warning(
            f"Invalid canvas size {candidate.width!r} x {candidate.height!r}; returning empty layout"
        )
        return None
    # copy so the caller's params are never touched
    return replace(
        candidate,
        width=float(candidate.width),
        height=float(candidate.height),
        extra=dict(candidate.extra),
    )


def layout(
    shape_id: str,
    nodes: Sequence[Union[SkillNode, Mapping[str, Any]]],
    params: Union[ShapeParams, Mapping[str, Any]],
    rng: Optional[np.random.Generator] = None,
) -> List[NodePosition]:
    """
    Compute positions for ``nodes`` arranged as ``shape_id``.

    Args:
        shape_id: Registered shape id (see available_shapes())
        nodes: Skill nodes, ids unique within the call
        params: Canvas size and layout knobs
        rng: Random source; defaults to ``params.seed`` or a fresh generator

    Returns:
        Positioned nodes. Empty for unknown shapes and malformed input; may
        be shorter than ``nodes`` when a region could not fit every node.
    """
    params = _coerce_params(params)
    if params is None:
        return []
    if not nodes:
        logger.debug(f"No nodes to lay out for {shape_id!r}")
        return []

    shape = get_shape(shape_id)
    if shape is None:
        logger.warning(f"Unknown shape id {shape_id!r}; returning empty layout")
        return []

    start = time.perf_counter()
    rng = resolve_rng(rng, params.seed)
    nodes = _coerce_nodes(nodes)
    positions = shape(nodes, params, rng)

    if params.topology:
        from skill_layout.graph import apply_topology

        try:
            apply_topology(positions, params.topology, rng)
        except ValueError as e:
            logger.warning(f"Topology override skipped: {e}")

    if params.clustering and params.clustering > 0:
        from skill_layout.clustering import cluster_positions, new_cluster_seed

        seed = params.cluster_seed if params.cluster_seed is not None else new_cluster_seed(rng)
        positions = cluster_positions(positions, params.clustering, params.cluster_count, seed)

    if len(positions) < len(nodes):
        logger.warning(f"Layout {shape_id!r} placed {len(positions)}/{len(nodes)} nodes")
    logger.info(
        f"Layout {shape_id!r}: {len(positions)} nodes in {time.perf_counter() - start:.3f}s"
    )
    return positions


@dataclass
class EngineConfig:
    """Defaults for LayoutEngine, read from layout.yaml."""

    shape: str
    node_count: int
    base_seed: Optional[int]
    auto_increment: bool
    params: Dict[str, Any]
    paths: Dict[str, str] = field(default_factory=dict)
    export: Dict[str, Any] = field(default_factory=dict)
    validation: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, config: dict) -> "EngineConfig":
        """Create config from dictionary."""
        section = dict(config.get("layout", {}))
        seed = config.get("seed", {})
        params = {
            "canvas": config.get("canvas", {}),
            "relaxation": config.get("relaxation", {}),
            "clustering": config.get("clustering", {}),
        }
        params.update({k: v for k, v in section.items() if k not in ("shape", "node_count")})
        return cls(
            shape=section.get("shape", "brain"),
            node_count=int(section.get("node_count", 60)),
            base_seed=seed.get("base"),
            auto_increment=seed.get("auto_increment", True),
            params=params,
            paths=config.get("paths", {}),
            export=config.get("export", {}),
            validation=config.get("validation", {}),
        )

    def shape_params(self, seed: Optional[int] = None) -> ShapeParams:
        params = ShapeParams.from_dict(self.params)
        params.seed = seed
        return params


@dataclass
class LayoutResult:
    """One computed layout with the inputs that produced it."""

    shape: str
    seed: Optional[int]
    nodes: List[SkillNode]
    positions: List[NodePosition]
    params: ShapeParams

    def to_dict(self) -> Dict[str, Any]:
        return {
            "shape": self.shape,
            "seed": self.seed,
            "width": self.params.width,
            "height": self.params.height,
            "nodes": [p.to_dict() for p in self.positions],
        }


class LayoutEngine:
    """
    Generate layouts from a configuration, for scripts and batch runs.
    """

    def __init__(self, config: EngineConfig, pool: Optional[List[SkillNode]] = None):
        """
        Initialize engine.

        Args:
            config: Engine configuration
            pool: Skill pool to draw nodes from (defaults to the bundled pool)
        """
        self.config = config
        self.pool = pool if pool is not None else load_skill_pool()
        logger.info(f"LayoutEngine initialized ({len(self.pool)} skills in pool)")

    def get_seed(self, sample_id: int) -> Optional[int]:
        """Seed for this sample."""
        if self.config.base_seed is None:
            return None
        if self.config.auto_increment:
            return self.config.base_seed + sample_id
        return self.config.base_seed

    def generate(
        self,
        shape: Optional[str] = None,
        node_count: Optional[int] = None,
        sample_id: int = 0,
    ) -> LayoutResult:
        """
        Build the input nodes and lay them out.

        Args:
            shape: Shape id (defaults to the configured shape)
            node_count: Number of base nodes (defaults to the configured count)
            sample_id: Sample index, used to derive the seed

        Returns:
            LayoutResult
        """
        shape = shape or self.config.shape
        count = self.config.node_count if node_count is None else node_count
        seed = self.get_seed(sample_id)
        params = self.config.shape_params(seed)
        rng = resolve_rng(None, seed)

        nodes = build_nodes(count, self.pool)
        if shape in LAYERED_SHAPES:
            nodes = build_layered_nodes(nodes, LAYERED_SHAPES[shape], rng)

        positions = layout(shape, nodes, params, rng)
        return LayoutResult(shape=shape, seed=seed, nodes=nodes, positions=positions, params=params)

    def generate_sample(self, sample_id: int, paths, shape: Optional[str] = None) -> Optional[Path]:
        """
        Generate one layout and write its configured outputs.

        Args:
            sample_id: Sample ID
            paths: PathManager for the output locations
            shape: Shape id (defaults to the configured shape)

        Returns:
            Path to the JSON output (or None if failed)
        """
        from skill_layout.exporter import LayoutExporter
        from skill_layout.utils.validation import validate_layout

        shape = shape or self.config.shape
        logger.info(f"Generating sample {sample_id} ({shape})")

        try:
            result = self.generate(shape=shape, sample_id=sample_id)

            if self.config.validation.get("check_layout", True):
                report = validate_layout(result.positions, result.nodes)
                if self.config.validation.get("strict", False) and not report.ok:
                    raise RuntimeError(f"Layout validation failed: {report.summary()}")

            exporter = LayoutExporter()
            json_path = paths.get_layout_path(sample_id, shape)
            exporter.to_json(result, json_path)

            if self.config.export.get("preview", False):
                exporter.render_preview(result, paths.get_preview_path(sample_id, shape))

            logger.info(f"Sample {sample_id} complete: {json_path}")
            return json_path

        except Exception as e:
            logger.error(f"Sample {sample_id} failed: {e}", exc_info=True)
            return None
