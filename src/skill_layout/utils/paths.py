"""
Output locations for layout runs.
"""

from pathlib import Path
from typing import Dict, Optional

DEFAULT_DIRS = {
    "layouts": "layouts",
    "previews": "previews",
    "batches": "batches",
    "logs": "logs",
}


def sample_stem(sample_id: int, shape: str) -> str:
    """File stem shared by every output of one sample, e.g. ``brain_000012``."""
    return f"{shape}_{sample_id:06d}"


class PathManager:
    """
    Resolve and create the output tree under one base directory.

    Subdirectory names come from the ``paths`` section of layout.yaml; any
    that are missing use DEFAULT_DIRS.
    """

    def __init__(self, base_dir: Path, paths_config: Optional[Dict[str, str]] = None):
        self.base_dir = Path(base_dir)
        names = {**DEFAULT_DIRS, **(paths_config or {})}

        self.layouts_dir = self.base_dir / names["layouts"]
        self.previews_dir = self.base_dir / names["previews"]
        self.batches_dir = self.base_dir / names["batches"]
        self.logs_dir = self.base_dir / names["logs"]

        for dir_path in (self.layouts_dir, self.previews_dir, self.batches_dir, self.logs_dir):
            dir_path.mkdir(parents=True, exist_ok=True)

    def get_layout_path(self, sample_id: int, shape: str) -> Path:
        return self.layouts_dir / f"{sample_stem(sample_id, shape)}.json"

    def get_preview_path(self, sample_id: int, shape: str) -> Path:
        return self.previews_dir / f"{sample_stem(sample_id, shape)}.png"

    def get_batch_path(self, name: str) -> Path:
        return self.batches_dir / f"{name}.hdf5"

    def get_log_path(self, name: str) -> Path:
        return self.logs_dir / f"{name}.log"
