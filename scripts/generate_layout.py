#!/usr/bin/env python3
"""
Generate a single skill layout.

Usage:
    python scripts/generate_layout.py --shape brain --count 60 --sample-id 0 --output-dir data
"""

import argparse
import sys
from pathlib import Path

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from skill_layout.layout import EngineConfig, LayoutEngine, available_shapes
from skill_layout.utils.config import load_config
from skill_layout.utils.logging import setup_logging
from skill_layout.utils.paths import PathManager


def main():
    parser = argparse.ArgumentParser(description="Generate a single skill layout")
    parser.add_argument("--shape", type=str, default=None, help="Shape id (default from config)")
    parser.add_argument("--count", type=int, default=None, help="Number of nodes (default from config)")
    parser.add_argument("--sample-id", type=int, default=0, help="Sample ID (offsets the base seed)")
    parser.add_argument("--seed", type=int, default=None, help="Base seed (overrides config)")
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
    parser.add_argument("--no-preview", action="store_true", help="Skip the PNG preview")
    parser.add_argument(
        "--set",
        dest="overrides",
        action="append",
        default=[],
        metavar="SECTION.KEY=VALUE",
        help="Override a layout.yaml value, e.g. relaxation.iterations=50 (repeatable)",
    )
    parser.add_argument("--list-shapes", action="store_true", help="Print available shape ids and exit")
    parser.add_argument(
        "--log-level", type=str, default="INFO", help="Log level (DEBUG, INFO, WARNING, ERROR)"
    )
    args = parser.parse_args()

    if args.list_shapes:
        print("\n".join(available_shapes()))
        sys.exit(0)

    # Setup logging
    log_file = args.output_dir / "logs" / f"layout_{args.sample_id:06d}.log"
    setup_logging(level=args.log_level, log_file=log_file)

    # Load configuration; explicit flags win over --set
    overrides = list(args.overrides)
    if args.seed is not None:
        overrides.append(f"seed.base={args.seed}")
    if args.count is not None:
        overrides.append(f"layout.node_count={args.count}")
    if args.no_preview:
        overrides.append("export.preview=false")
    try:
        config = EngineConfig.from_dict(load_config(args.config_dir, "layout", overrides))
    except ValueError as e:
        parser.error(str(e))

    shape = args.shape or config.shape
    if shape not in available_shapes():
        print(f"Unknown shape: {shape} (see --list-shapes)")
        sys.exit(1)

    engine = LayoutEngine(config)
    paths = PathManager(args.output_dir, config.paths)

    output_path = engine.generate_sample(args.sample_id, paths, shape=shape)

    if output_path:
        print(f"Success: {output_path}")
        sys.exit(0)
    else:
        print(f"Failed to generate layout {args.sample_id}")
        sys.exit(1)


if __name__ == "__main__":
    main()
