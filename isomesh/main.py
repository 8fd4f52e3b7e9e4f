#!/usr/bin/env python3
"""
isomesh command line entry point.

Loads a plain-text volume, extracts the isosurface and prints a
diagnostics report.
"""

import argparse
import logging
import sys

logger = logging.getLogger(__name__)


def configure_logging(verbose: bool = False) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[
            logging.StreamHandler(sys.stdout)
        ]
    )
    # Silence noisy third-party loggers
    logging.getLogger('trimesh').setLevel(logging.WARNING)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='isomesh',
        description='Extract an isosurface from a plain-text volume file.'
    )
    parser.add_argument('volume', help='Volume file: N followed by N^3 samples')
    level = parser.add_mutually_exclusive_group()
    level.add_argument('--isovalue', type=float, default=None,
                       help='Absolute isovalue (default: 1.0)')
    level.add_argument('--relative', type=float, default=None, metavar='FRACTION',
                       help='Isovalue as a fraction of the value range (0 = min, 1 = max)')
    parser.add_argument('--cell-size', type=float, default=None,
                        help='Grid spacing (default: 1/N, fitting the unit cube)')
    parser.add_argument('--verbose', '-v', action='store_true', help='Enable debug logging')
    return parser


def main(argv=None) -> int:
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.cell_size is not None and args.cell_size <= 0:
        parser.error("--cell-size must be positive")
    configure_logging(args.verbose)

    from isomesh.core import (
        IsosurfaceSession,
        ReconstructionSettings,
        analyze_surface,
        DEFAULT_ISOVALUE,
    )

    isovalue = DEFAULT_ISOVALUE if args.isovalue is None else args.isovalue
    session = IsosurfaceSession(
        isovalue=isovalue,
        settings=ReconstructionSettings(cell_size=args.cell_size)
    )

    result = session.load_volume(args.volume)
    if not result.success:
        print(f"Error ({result.error_kind.value}): {result.error_message}", file=sys.stderr)
        return 1

    if args.relative is not None:
        session.set_relative_isovalue(args.relative)
        session.reconstruct()

    if session.mesh is None:
        print(f"No surface at isovalue {session.isovalue:.6g}")
        return 0

    print(analyze_surface(session.mesh).format())
    return 0


if __name__ == "__main__":
    try:
        sys.exit(main())
    except Exception as e:
        logger.exception(f"Fatal error: {e}")
        sys.exit(1)
