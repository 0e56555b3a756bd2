#!/usr/bin/env python3
"""
Command-line interface for javastride - Java to Stride converter.
"""

import argparse
import json
import logging
import sys
from pathlib import Path


def convert_command(args):
    """Convert Java files and output Stride elements as JSON."""
    from .diagnostics import ParseFailure
    from .frontend import JavaContext, convert_file

    context = JavaContext[args.context.upper()]

    for source_file in args.files:
        path = Path(source_file)
        if not path.exists():
            print(f"Error: File not found: {source_file}", file=sys.stderr)
            sys.exit(1)

        try:
            result = convert_file(str(path), context=context, testing=args.testing)
        except ParseFailure as e:
            print(f"Error: {source_file}: {e}", file=sys.stderr)
            sys.exit(1)

        print(json.dumps([e.to_dict() for e in result.elements], indent=2))
        for warning in result.warnings:
            print(f"{source_file}: warning: {warning.message}", file=sys.stderr)


def main(argv=None):
    """Main entry point for javastride CLI."""
    parser = argparse.ArgumentParser(
        prog="javastride",
        description="Convert Java source into Stride code elements",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Log conversion progress to stderr",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Convert command
    convert_parser = subparsers.add_parser(
        "convert",
        help="Convert Java files and output elements as JSON",
    )
    convert_parser.add_argument(
        "files",
        nargs="+",
        help="Java source files to convert",
    )
    convert_parser.add_argument(
        "--context",
        choices=["top_level", "class_member", "statement"],
        default="top_level",
        help="What the files contain (default: a whole compilation unit)",
    )
    convert_parser.add_argument(
        "--testing",
        action="store_true",
        help="Use stable warning identifiers in warning comments",
    )
    convert_parser.set_defaults(func=convert_command)

    args = parser.parse_args(argv)

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, stream=sys.stderr)

    if args.command is None:
        parser.print_help()
        sys.exit(1)

    args.func(args)


if __name__ == "__main__":
    main()
