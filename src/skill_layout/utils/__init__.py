"""
Utility modules for skill layout generation.
"""

from skill_layout.utils.config import load_config, merge_config, parse_override, ConfigLoader
from skill_layout.utils.logging import setup_logging, get_logger
from skill_layout.utils.paths import PathManager
from skill_layout.utils.validation import (
    ValidationReport,
    validate_layout,
    prune_dangling_neighbors,
    unique_edges,
    validate_hdf5_file,
)

__all__ = [
    "load_config",
    "ConfigLoader",
    "merge_config",
    "parse_override",
    "setup_logging",
    "get_logger",
    "PathManager",
    "ValidationReport",
    "validate_layout",
    "prune_dangling_neighbors",
    "unique_edges",
    "validate_hdf5_file",
]
