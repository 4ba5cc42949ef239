"""
Command-line interface for quadtokens.

Provides commands for encoding shapes into index fields and for
inspecting the queries built for a query shape.
"""

import argparse
import json
import logging
import sys
from typing import Optional

from .config import QuadFieldConfig
from .exceptions import QuadTokenError
from .field import QuadTreeField
from .grid import SpatialGrid


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="quadtokens",
        description="Encode shapes into quad tokens and build spatial term queries",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable debug logging",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    field_options = argparse.ArgumentParser(add_help=False)
    field_options.add_argument(
        "--field",
        type=str,
        default="geo",
        help="Primary field name (default: geo)",
    )
    field_options.add_argument(
        "--resolutions",
        type=str,
        default=None,
        help="Comma-separated truncation lengths, e.g. 5,10",
    )
    field_options.add_argument(
        "--prefix",
        type=str,
        default=None,
        help="Auxiliary field prefix (required with --resolutions)",
    )

    # Encode command
    encode_parser = subparsers.add_parser(
        "encode",
        parents=[field_options],
        help="Encode a shape or token literal into index fields",
    )
    encode_parser.add_argument("value", help="Shape literal, WKT or [token] literal")
    encode_parser.add_argument(
        "--json",
        action="store_true",
        help="Print fields as JSON",
    )

    # Query command
    query_parser = subparsers.add_parser(
        "query",
        parents=[field_options],
        help="Show the query built for a shape",
    )
    query_parser.add_argument("value", help="Shape literal, WKT or [token] literal")

    # Stats command
    stats_parser = subparsers.add_parser(
        "stats",
        help="Show cell sizes of the default grid",
    )
    stats_parser.add_argument(
        "--max-depth",
        type=int,
        default=None,
        help="Deepest level to list (default: grid max depth)",
    )

    return parser


def _build_field(args: argparse.Namespace) -> QuadTreeField:
    schema_args = {}
    if args.resolutions:
        schema_args["resolutions"] = args.resolutions
    if args.prefix:
        schema_args["prefix"] = args.prefix
    return QuadTreeField(args.field, QuadFieldConfig.from_args(schema_args))


def cmd_encode(args: argparse.Namespace) -> int:
    """Handle the encode command."""
    field = _build_field(args)
    fields = field.create_fields(args.value)

    if args.json:
        print(json.dumps({
            "stored": fields.stored_value,
            "fields": fields.fields(),
        }, indent=2))
        return 0

    print(f"Stored value: {fields.stored_value}")
    for name, terms in fields.fields().items():
        print(f"  {name} ({len(terms)} terms): {' '.join(terms)}")
    return 0


def cmd_query(args: argparse.Namespace) -> int:
    """Handle the query command."""
    field = _build_field(args)
    query = field.field_query(args.value)

    print(f"Query: {query}")
    for clause in query.clauses:
        print(f"  {clause.field} boost={clause.boost:g} terms={len(clause.terms)}")
    return 0


def cmd_stats(args: argparse.Namespace) -> int:
    """Handle the stats command."""
    grid = SpatialGrid.default()
    max_depth = args.max_depth if args.max_depth is not None else grid.max_depth
    world = grid.world

    print("Grid statistics:")
    print(f"  World: x [{world.x0}, {world.x1}], y [{world.y0}, {world.y1}]")
    print(f"  Max depth: {grid.max_depth}")
    print(f"  Extra depth: {grid.extra_depth}")
    for depth in range(max_depth + 1):
        width, height = grid.cell_size(depth)
        print(f"  Level {depth:2d}: {4 ** depth:,} cells of {width:g} x {height:g}")

    return 0


def main(argv: Optional[list] = None) -> int:
    """Main entry point."""
    parser = create_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if args.command is None:
        parser.print_help()
        return 1

    try:
        if args.command == "encode":
            return cmd_encode(args)
        elif args.command == "query":
            return cmd_query(args)
        elif args.command == "stats":
            return cmd_stats(args)
    except QuadTokenError as e:
        print(f"Error: {e}")
        return 1

    parser.print_help()
    return 1


if __name__ == "__main__":
    sys.exit(main())
