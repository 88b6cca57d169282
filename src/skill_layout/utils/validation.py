"""
Layout and output file validation utilities.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterator, List, Mapping, Optional, Sequence, Tuple
import logging

import h5py

from skill_layout.models import NodePosition, SkillNode
from skill_layout.regions import Region

logger = logging.getLogger(__name__)


@dataclass
class ValidationReport:
    """Problems found in one layout."""

    missing_ids: List[str] = field(default_factory=list)
    unknown_ids: List[str] = field(default_factory=list)
    duplicate_ids: List[str] = field(default_factory=list)
    dangling_neighbors: List[Tuple[str, str]] = field(default_factory=list)
    outside_region: List[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        """True when no contract violation was found (missing ids are tolerated)."""
        return not (self.unknown_ids or self.duplicate_ids or self.dangling_neighbors or self.outside_region)

    def summary(self) -> str:
        return (
            f"missing={len(self.missing_ids)} unknown={len(self.unknown_ids)} "
            f"duplicates={len(self.duplicate_ids)} dangling={len(self.dangling_neighbors)} "
            f"outside={len(self.outside_region)}"
        )


def validate_layout(
    positions: Sequence[NodePosition],
    nodes: Optional[Sequence[SkillNode]] = None,
    regions: Optional[Mapping[str, Region]] = None,
) -> ValidationReport:
    """
    Check a layout against its input.

    Args:
        positions: Layout output
        nodes: Layout input; enables the missing/unknown id checks
        regions: Region per tag; enables the containment check

    Returns:
        ValidationReport
    """
    report = ValidationReport()
    seen = set()
    for pos in positions:
        if pos.id in seen:
            report.duplicate_ids.append(pos.id)
        seen.add(pos.id)

    if nodes is not None:
        expected = {n.id for n in nodes}
        report.missing_ids = [n.id for n in nodes if n.id not in seen]
        report.unknown_ids = [p.id for p in positions if p.id not in expected]

    for pos in positions:
        for nid in pos.neighbors:
            if nid not in seen:
                report.dangling_neighbors.append((pos.id, nid))

    if regions is not None:
        for pos in positions:
            region = regions.get(pos.region)
            if region is not None and not region.contains(pos.x, pos.y):
                report.outside_region.append(pos.id)

    if report.missing_ids:
        # sampling exhaustion; tolerated
        logger.warning(f"{len(report.missing_ids)} node(s) were not placed")
    if not report.ok:
        logger.error(f"Layout validation failed: {report.summary()}")
    else:
        logger.debug(f"Layout validated: {len(positions)} nodes")
    return report


def prune_dangling_neighbors(positions: Sequence[NodePosition]) -> int:
    """
    Drop neighbor ids that are not in the layout, in place.

    Returns:
        Number of references removed
    """
    ids = {p.id for p in positions}
    removed = 0
    for pos in positions:
        kept = [nid for nid in pos.neighbors if nid in ids]
        removed += len(pos.neighbors) - len(kept)
        pos.neighbors = kept
    if removed:
        logger.debug(f"Pruned {removed} dangling neighbor reference(s)")
    return removed


def unique_edges(positions: Sequence[NodePosition]) -> Iterator[Tuple[str, str]]:
    """
    Yield each unordered edge once, in first-seen order.

    Dangling references and self loops are skipped.
    """
    ids = {p.id for p in positions}
    seen = set()
    for pos in positions:
        for nid in pos.neighbors:
            if nid not in ids or nid == pos.id:
                continue
            key = frozenset((pos.id, nid))
            if key in seen:
                continue
            seen.add(key)
            yield pos.id, nid


def validate_hdf5_file(file_path: Path, check_keys: bool = True) -> bool:
    """
    Validate an HDF5 batch file written by LayoutExporter.to_hdf5.

    Args:
        file_path: Path to .hdf5 file
        check_keys: Whether to check every layout group for its datasets

    Returns:
        True if valid, False otherwise
    """
    file_path = Path(file_path)
    if not file_path.exists():
        logger.error(f"HDF5 file does not exist: {file_path}")
        return False

    if file_path.stat().st_size == 0:
        logger.error(f"HDF5 file is empty: {file_path}")
        return False

    try:
        with h5py.File(file_path, "r") as f:
            groups = [key for key in f.keys() if key.startswith("layout_")]
            if not groups:
                logger.error(f"HDF5 file holds no layouts: {file_path}")
                return False
            if check_keys:
                expected_keys = ["xy", "brightness", "ids", "edges"]
                for name in groups:
                    missing_keys = [key for key in expected_keys if key not in f[name]]
                    if missing_keys:
                        logger.error(f"HDF5 group {name} missing keys {missing_keys}: {file_path}")
                        return False
    except OSError as e:
        logger.error(f"Error reading HDF5 file {file_path}: {e}")
        return False

    logger.debug(f"HDF5 file validated: {file_path} ({len(groups)} layouts)")
    return True
