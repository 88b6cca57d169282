"""
Export computed layouts to JSON, HDF5 and PNG previews.
"""

from pathlib import Path
from typing import Dict, List, Sequence
import json
import logging

import h5py
import matplotlib.pyplot as plt
import numpy as np

from skill_layout.layout import LayoutResult
from skill_layout.models import NODE_COLOR, score_to_radius
from skill_layout.utils.validation import unique_edges

logger = logging.getLogger(__name__)

BACKGROUND = "#10161a"
EDGE_COLOR = "#9fd8ef"


class LayoutExporter:
    """
    Write layouts in the formats consumed downstream.

    JSON mirrors the renderer payload; HDF5 packs many layouts into one file
    (one group per layout); PNG previews are for eyeballing only.
    """

    def to_json(self, result: LayoutResult, output_path: Path) -> Path:
        """
        Write one layout as JSON.

        Args:
            result: Layout to write
            output_path: Target .json file

        Returns:
            Path to the written file
        """
        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        with open(output_path, "w") as f:
            json.dump(result.to_dict(), f, indent=2)
        logger.debug(f"Wrote {len(result.positions)} nodes to {output_path}")
        return output_path

    def to_hdf5(self, results: Sequence[LayoutResult], output_path: Path) -> Path:
        """
        Write several layouts into one HDF5 file.

        Each layout becomes group ``layout_NNNN`` holding ``xy`` (n, 2),
        ``brightness`` (n,), ``score`` (n,), ``ids`` (n,) and ``edges`` (m, 2)
        as indices into ``ids``, one row per unordered pair. Shape, seed and
        canvas size are stored as group attributes.
        """
        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)

        with h5py.File(output_path, "w") as f:
            f.attrs["num_layouts"] = len(results)
            for i, result in enumerate(results):
                positions = result.positions
                index = {p.id: j for j, p in enumerate(positions)}
                edges = [(index[a], index[b]) for a, b in unique_edges(positions)]

                group = f.create_group(f"layout_{i:04d}")
                group.attrs["shape"] = result.shape
                group.attrs["seed"] = -1 if result.seed is None else result.seed
                group.attrs["width"] = result.params.width
                group.attrs["height"] = result.params.height
                group.create_dataset(
                    "xy", data=np.array([(p.x, p.y) for p in positions], dtype=np.float64).reshape(-1, 2)
                )
                group.create_dataset(
                    "brightness", data=np.array([p.brightness for p in positions], dtype=np.float64)
                )
                group.create_dataset(
                    "score",
                    data=np.array([np.nan if p.score is None else p.score for p in positions], dtype=np.float64),
                )
                group.create_dataset(
                    "ids", data=[p.id for p in positions], dtype=h5py.string_dtype(encoding="utf-8")
                )
                group.create_dataset("edges", data=np.array(edges, dtype=np.int64).reshape(-1, 2))

        logger.info(f"Wrote {len(results)} layout(s) to {output_path}")
        return output_path

    def read_hdf5(self, input_path: Path) -> List[Dict[str, object]]:
        """Read back what to_hdf5 wrote, one dict per layout."""
        layouts = []
        with h5py.File(input_path, "r") as f:
            for name in sorted(f.keys()):
                group = f[name]
                layouts.append({
                    "shape": group.attrs["shape"],
                    "seed": int(group.attrs["seed"]),
                    "xy": np.array(group["xy"]),
                    "brightness": np.array(group["brightness"]),
                    "ids": [s.decode("utf-8") if isinstance(s, bytes) else s for s in group["ids"][()]],
                    "edges": np.array(group["edges"]),
                })
        return layouts

    def render_preview(self, result: LayoutResult, output_path: Path, dpi: int = 100) -> Path:
        """
        Draw a layout to PNG: edges once per unordered pair, radius from score.

        Args:
            result: Layout to draw
            output_path: Target .png file
            dpi: Output resolution; the figure matches the canvas in pixels

        Returns:
            Path to the written image
        """
        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        width, height = result.params.width, result.params.height
        positions = result.positions
        by_id = {p.id: p for p in positions}

        fig, ax = plt.subplots(figsize=(width / dpi, height / dpi), dpi=dpi)
        try:
            fig.patch.set_facecolor(BACKGROUND)
            ax.set_facecolor(BACKGROUND)
            ax.set_xlim(0, width)
            ax.set_ylim(height, 0)  # screen coordinates
            ax.set_aspect("equal")
            ax.axis("off")

            for a, b in unique_edges(positions):
                pa, pb = by_id[a], by_id[b]
                ax.plot([pa.x, pb.x], [pa.y, pb.y], color=EDGE_COLOR, linewidth=0.6, alpha=0.4, zorder=1)

            if positions:
                xs = [p.x for p in positions]
                ys = [p.y for p in positions]
                radii = [p.size if p.size is not None else score_to_radius(p.score or 1) for p in positions]
                colors = [p.color or NODE_COLOR for p in positions]
                alphas = [min(max(p.brightness, 0.0), 1.0) for p in positions]
                # scatter sizes are areas in points^2
                ax.scatter(xs, ys, s=[(r * 72 / dpi) ** 2 for r in radii], c=colors, alpha=alphas, zorder=2)

            fig.savefig(output_path, dpi=dpi, facecolor=fig.get_facecolor())
        finally:
            plt.close(fig)

        logger.info(f"Saved preview: {output_path}")
        return output_path
