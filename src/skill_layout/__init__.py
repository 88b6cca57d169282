"""
Skill Layout

Procedural layout engine placing skill nodes into decorative 2D shapes,
with neighbor graphs, force relaxation and seeded clustering.
"""

__version__ = "0.1.0"

# Lazy imports keep `import skill_layout` cheap (no h5py/matplotlib until needed).
# The `layout` and `relax` functions live in submodules of the same name.
__all__ = [
    "__version__",
    "available_shapes",
    "register_shape",
    "LayoutEngine",
    "EngineConfig",
    "SkillNode",
    "NodePosition",
    "ShapeParams",
    "Topology",
    "build_topology",
    "RelaxConfig",
    "cluster_positions",
    "LayoutExporter",
]


def __getattr__(name):
    """Lazy import to avoid loading all dependencies at once."""
    if name in ("available_shapes", "register_shape", "LayoutEngine", "EngineConfig"):
        from skill_layout import layout as _layout
        return getattr(_layout, name)
    elif name in ("SkillNode", "NodePosition", "ShapeParams"):
        from skill_layout import models
        return getattr(models, name)
    elif name in ("Topology", "build_topology"):
        from skill_layout import graph
        return getattr(graph, name)
    elif name == "RelaxConfig":
        from skill_layout.relax import RelaxConfig
        return RelaxConfig
    elif name == "cluster_positions":
        from skill_layout.clustering import cluster_positions
        return cluster_positions
    elif name == "LayoutExporter":
        from skill_layout.exporter import LayoutExporter
        return LayoutExporter
    raise AttributeError(f"module '{__name__}' has no attribute '{name}'")
