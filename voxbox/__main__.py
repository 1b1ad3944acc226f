"""
Command-line entry point for Voxbox.

Usage:
    python -m voxbox path/to/model.obj -o model.aabb.txt --order XZY
"""

import argparse
import logging
import sys
from pathlib import Path


def build_parser() -> argparse.ArgumentParser:
    from voxbox.voxels.box import OUTPUT_FORMAT_HELP
    from voxbox.voxels.grid import AxisOrder

    parser = argparse.ArgumentParser(
        prog="voxbox",
        description="Generate per-voxel collision boxes for a mesh",
        epilog="Output format slots:\n" + OUTPUT_FORMAT_HELP,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "mesh",
        type=str,
        help="Path to mesh file (.obj, .stl or any format supported by assimp)",
    )
    parser.add_argument(
        "--output", "-o",
        type=str,
        default=None,
        help="Output file (default: <mesh>.aabb.txt, or .aabb.json with --json)",
    )
    parser.add_argument(
        "--settings",
        type=str,
        default=None,
        help="Generator settings JSON; command-line options override it",
    )
    parser.add_argument(
        "--order",
        type=str.upper,
        choices=[o.name for o in AxisOrder],
        default=None,
        help="Voxel enumeration order, fastest axis first (default: XZY)",
    )
    for axis in ("x", "y", "z"):
        parser.add_argument(
            f"--invert-{axis}",
            dest=f"invert_{axis}",
            action=argparse.BooleanOptionalAction,
            default=None,
            help=f"Walk the {axis.upper()} axis in negative direction",
        )
    parser.add_argument(
        "--acceptable", "-a",
        type=int,
        default=None,
        help="Maximum boxes per voxel before refinement stops (1-10, default: 4)",
    )
    parser.add_argument(
        "--workers", "-j",
        type=int,
        default=None,
        help="Worker threads for the batch pass (default: 1)",
    )
    parser.add_argument(
        "--format", "-f",
        dest="output_format",
        type=str,
        default=None,
        help="Box output template",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Write JSON results instead of the text export",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Debug logging",
    )
    return parser


def load_settings(args):
    from voxbox.voxels.grid import AxisOrder
    from voxbox.voxels.settings import GeneratorSettings

    settings = GeneratorSettings.load(args.settings) if args.settings else GeneratorSettings()
    if args.order is not None:
        settings.axis_order = AxisOrder[args.order]
    for axis in ("x", "y", "z"):
        value = getattr(args, f"invert_{axis}")
        if value is not None:
            setattr(settings, f"invert_{axis}", value)
    if args.acceptable is not None:
        settings.acceptable_aabb = args.acceptable
    if args.workers is not None:
        settings.workers = args.workers
    if args.output_format is not None:
        settings.output_format = args.output_format
    return settings


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s: %(message)s",
    )

    from voxbox.errors import InvalidArgument
    from voxbox.loaders import load_mesh_file
    from voxbox.voxels.generator import AABBGenerator
    from voxbox.voxels.persistence import RESULT_FILE_EXTENSION, ResultPersistence, save_text

    mesh_path = Path(args.mesh)
    if not mesh_path.exists():
        print(f"Error: Mesh file does not exist: {mesh_path}")
        return 1

    try:
        settings = load_settings(args)
        settings.validate()
    except InvalidArgument as e:
        print(f"Error: {e}")
        return 1

    mesh = load_mesh_file(mesh_path)
    generator = AABBGenerator()
    if not generator.reset(mesh, settings):
        print(f"Error: Mesh has no triangles: {mesh_path}")
        return 1

    handle = generator.calculate_all()
    layout = generator.layout
    print(f"Grid: {layout.width}x{layout.height}x{layout.length} ({layout.axis_order.name})")
    print(f"Total AABBs: {handle.total_collisions}")

    if args.json:
        output = Path(args.output) if args.output else mesh_path.with_suffix(RESULT_FILE_EXTENSION)
        ResultPersistence.save(layout, handle, output)
    else:
        output = Path(args.output) if args.output else mesh_path.with_suffix(".aabb.txt")
        save_text(output, handle, settings.output_format)
    print(f"Saved: {output}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
