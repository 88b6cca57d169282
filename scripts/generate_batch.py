#!/usr/bin/env python3
"""
Generate a batch of skill layouts into one HDF5 file.

Usage:
    python scripts/generate_batch.py --shapes brain fist --num-samples 5 --output-dir data
"""

import argparse
import sys
from pathlib import Path

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from skill_layout.exporter import LayoutExporter
from skill_layout.layout import EngineConfig, LayoutEngine, available_shapes
from skill_layout.utils.config import load_config
from skill_layout.utils.logging import setup_logging, get_logger
from skill_layout.utils.paths import PathManager
from skill_layout.utils.validation import validate_hdf5_file

logger = get_logger(__name__)


def main():
    parser = argparse.ArgumentParser(description="Generate batch of skill layouts")
    parser.add_argument("--num-samples", type=int, required=True, help="Layouts per shape")
    parser.add_argument("--shapes", nargs="+", default=None, help="Shape ids (default: configured shape)")
    parser.add_argument("--name", type=str, default="batch", help="Batch file name (without extension)")
    parser.add_argument(
        "--config-dir",
        type=Path,
        default=Path(__file__).parent.parent / "config",
        help="Configuration directory",
    )
    parser.add_argument(
        "--output-dir",
        type=Path,
        default=Path(__file__).parent.parent / "data",
        help="Output directory",
    )
    parser.add_argument(
        "--log-level", type=str, default="INFO", help="Log level (DEBUG, INFO, WARNING, ERROR)"
    )
    parser.add_argument(
        "--start-id", type=int, default=0, help="Starting sample ID"
    )
    parser.add_argument(
        "--set",
        dest="overrides",
        action="append",
        default=[],
        metavar="SECTION.KEY=VALUE",
        help="Override a layout.yaml value, e.g. canvas.width=1024 (repeatable)",
    )
    args = parser.parse_args()

    # Setup logging
    log_file = args.output_dir / "logs" / "batch_generation.log"
    setup_logging(level=args.log_level, log_file=log_file)

    try:
        config = EngineConfig.from_dict(load_config(args.config_dir, "layout", args.overrides))
    except ValueError as e:
        parser.error(str(e))
    shapes = args.shapes or [config.shape]
    unknown = [s for s in shapes if s not in available_shapes()]
    if unknown:
        logger.error(f"Unknown shape ids: {unknown}")
        sys.exit(1)

    logger.info(f"Starting batch generation: {args.num_samples} samples x {len(shapes)} shape(s)")

    engine = LayoutEngine(config)
    paths = PathManager(args.output_dir, config.paths)

    # Generate layouts
    results = []
    short_samples = []
    total = args.num_samples * len(shapes)

    for shape in shapes:
        for i in range(args.num_samples):
            sample_id = args.start_id + i
            logger.info(f"Generating {shape} sample {sample_id} ({len(results) + 1}/{total})")

            result = engine.generate(shape=shape, sample_id=sample_id)
            if len(result.positions) < len(result.nodes):
                short_samples.append((shape, sample_id))
            results.append(result)

    output_path = LayoutExporter().to_hdf5(results, paths.get_batch_path(args.name))
    valid = validate_hdf5_file(output_path)

    # Summary
    logger.info("=" * 60)
    logger.info("Batch generation complete")
    logger.info(f"  Layouts: {len(results)}")
    logger.info(f"  Short (fewer nodes than requested): {len(short_samples)}")
    if short_samples:
        logger.info(f"  Short samples: {short_samples}")
    logger.info(f"  Output: {output_path}")
    logger.info("=" * 60)

    if not valid:
        sys.exit(1)
    elif short_samples:
        sys.exit(2)  # Partial success
    sys.exit(0)


if __name__ == "__main__":
    main()
