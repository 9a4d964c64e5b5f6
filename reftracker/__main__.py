#!/usr/bin/env python3
"""CLI entry point for reftracker.

Usage:
    python -m reftracker <command> [options]

Commands:
    track       Track references to files, directories and lines
    parse-diff  Parse a unified diff into added and deleted lines
"""

from __future__ import annotations

import argparse
import logging
import sys

from reftracker.commands.parse_diff import cmd_parse_diff
from reftracker.commands.track import cmd_track
from reftracker.domain.diff import DEFAULT_CONTEXT_LINES


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="reftracker",
        description="Keep references to code valid across git history",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Commands:
  track       Track references to files, directories and lines
  parse-diff  Parse a unified diff into added and deleted lines

Examples:
  reftracker track src/app.py#L12 --anchor 3f2c1ab
  reftracker track docs/guide.md src/util.py#L10-L18 --format json
  reftracker track old/dir/ --anchor 3f2c1ab
  git diff HEAD~1 -- src/app.py | reftracker parse-diff --format text
        """,
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable debug logging",
    )
    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    # track command
    parser_track = subparsers.add_parser(
        "track",
        help="Track references to files, directories and lines",
    )
    parser_track.add_argument(
        "references",
        nargs="+",
        metavar="REFERENCE",
        help="Reference as path, path#L12, path#L12-L18 or dir/",
    )
    parser_track.add_argument(
        "--anchor",
        help="Revision the references were captured at",
    )
    parser_track.add_argument(
        "--directory",
        action="store_true",
        help="Treat plain paths as directories",
    )
    parser_track.add_argument(
        "--repo",
        default=".",
        help="Path to the git repository (default: current directory)",
    )
    parser_track.add_argument(
        "--config",
        help="Path to a YAML settings file",
    )
    parser_track.add_argument(
        "--format",
        choices=["json", "text"],
        default="text",
        help="Output format (default: text)",
    )

    # parse-diff command
    parser_parse_diff = subparsers.add_parser(
        "parse-diff",
        help="Parse a unified diff into added and deleted lines",
    )
    parser_parse_diff.add_argument(
        "--input-file",
        help="Path to diff file. If not provided, reads from stdin",
    )
    parser_parse_diff.add_argument(
        "--context-lines",
        type=int,
        default=DEFAULT_CONTEXT_LINES,
        help=f"Context lines around each changed line (default: {DEFAULT_CONTEXT_LINES})",
    )
    parser_parse_diff.add_argument(
        "--format",
        choices=["json", "text"],
        default="json",
        help="Output format (default: json)",
    )

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    if not args.command:
        parser.print_help()
        return 1

    # Route to command implementations with explicit parameters
    if args.command == "track":
        return cmd_track(
            references=args.references,
            anchor_revision=args.anchor,
            is_directory=args.directory,
            repo_path=args.repo,
            config_file=args.config,
            output_format=args.format,
        )

    elif args.command == "parse-diff":
        return cmd_parse_diff(
            input_file=args.input_file,
            context_lines=args.context_lines,
            output_format=args.format,
        )

    parser.print_help()
    return 1


if __name__ == "__main__":
    sys.exit(main())
