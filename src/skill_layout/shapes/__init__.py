"""
Shape layouts.

Each module registers its layouts with the dispatcher on import. A layout is
a callable ``(nodes, params, rng) -> list[NodePosition]``; input validation,
topology overrides and clustering are handled by the dispatcher.
"""

from skill_layout.shapes import curves, chikara, brain, fist, topology_demo  # noqa: F401

__all__ = ["curves", "chikara", "brain", "fist", "topology_demo"]
