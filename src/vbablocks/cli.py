"""Command line entry point for resolving and assembling a project."""
from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from typing import List, Optional

from .actions import build_graph, resolve_project
from .common.logging_utils import configure_logging
from .config import load_config
from .constants import ExitCodes
from .errors import (
    BlocksError,
    BuildInvalid,
    ComponentLoadFailed,
    SourceUnavailable,
    UnresolvableConflict,
)
from .project import load_project

logger = logging.getLogger(__name__)


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parses the arguments passed to the program."""
    parser = argparse.ArgumentParser(
        prog="vba-blocks",
        description="vba-blocks - dependency resolution and build graph assembly",
        add_help=True,
    )
    parser.add_argument("-c", "--config",
                        dest="CONFIG",
                        help="Path to a YAML config file",
                        action="store", type=str)
    parser.add_argument("-C", "--directory",
                        dest="DIRECTORY",
                        help="Project directory (default: search upward from cwd)",
                        action="store", type=str)
    parser.add_argument("--loglevel",
                        dest="LOG_LEVEL",
                        help="Set the logging level",
                        action="store", type=str.upper,
                        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"])

    subparsers = parser.add_subparsers(dest="COMMAND", required=True)
    resolve_parser = subparsers.add_parser("resolve", help="Resolve dependencies and print the solution")
    resolve_parser.add_argument("--json", dest="JSON", action="store_true", help="Print the solution as JSON")
    subparsers.add_parser("graph", help="Resolve, load sources, and print the build graph")

    return parser.parse_args(argv)


async def _run(args: argparse.Namespace, config) -> None:
    project = load_project(args.DIRECTORY)

    if args.COMMAND == "resolve":
        solution = await resolve_project(project, config)
        if args.JSON:
            print(json.dumps(solution.to_snapshot(), indent=2))
            return
        for entry in solution.to_snapshot():
            print(f"{entry['name']} {entry['version']} ({entry['source']})")
        return

    graph = await build_graph(project, config)
    print(graph.name)
    for component in graph.components:
        origin = f" [{component.origin}]" if component.origin else ""
        print(f"  {component.type.value:<8} {component.name}{origin}")
    for reference in graph.references:
        origin = f" [{reference.origin}]" if reference.origin else ""
        print(f"  reference {reference.name} {reference.version} {reference.guid}{origin}")


def _exit_code(error: BlocksError) -> int:
    if isinstance(error, SourceUnavailable):
        return ExitCodes.CONNECTION_ERROR.value
    if isinstance(error, UnresolvableConflict):
        return ExitCodes.RESOLVE_ERROR.value
    if isinstance(error, (BuildInvalid, ComponentLoadFailed)):
        return ExitCodes.BUILD_ERROR.value
    return ExitCodes.FILE_ERROR.value


def main(argv: Optional[List[str]] = None) -> int:
    """Main function of the program."""
    args = parse_args(argv)
    configure_logging(args.LOG_LEVEL)
    config = load_config(args.CONFIG)
    if config.log_level and not args.LOG_LEVEL:
        configure_logging(config.log_level)

    try:
        asyncio.run(_run(args, config))
    except BlocksError as error:
        logger.error("%s", error)
        return _exit_code(error)
    return ExitCodes.SUCCESS.value


if __name__ == "__main__":
    sys.exit(main())
