"""
Command-line interface for the application.

This module provides the main entry point for the CLI.
"""

from __future__ import annotations

import argparse
import functools
import http.server
import logging
import sys
from collections.abc import Callable

from pydantic import ValidationError

from fish_passage import __version__
from fish_passage.config import get_settings
from fish_passage.errors import PipelineError
from fish_passage.flows import build
from fish_passage.flows.build import build_all, write_explorer
from fish_passage.flows.fetch import fetch_all
from fish_passage.schemas import FilterState


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser for the CLI."""
    parser = argparse.ArgumentParser(
        prog="fish-passage",
        description="Fetch, tidy and chart adult fish passage counts from Columbia basin dams",
    )
    parser.add_argument(
        "-v",
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    subparsers.add_parser("info", help="Show application info")

    fetch_parser = subparsers.add_parser("fetch", help="Fetch DART reports into the checkpoint")
    _add_years(fetch_parser)
    fetch_parser.add_argument(
        "--force",
        action="store_true",
        help="Fetch even if the checkpoint is still fresh",
    )

    subparsers.add_parser("build", help="Build the report site from the checkpoint")

    refresh_parser = subparsers.add_parser("refresh", help="Fetch data and build site")
    _add_years(refresh_parser)
    refresh_parser.add_argument("--force", action="store_true", help="Ignore checkpoint freshness")

    explore_parser = subparsers.add_parser("explore", help="Chart one project/species selection")
    explore_parser.add_argument("--project", type=str, default=None, help="Project name")
    explore_parser.add_argument("--species", type=str, default=None, help="Species, e.g. steelhead")
    _add_years(explore_parser)

    serve_parser = subparsers.add_parser("serve", help="Serve site locally")
    serve_parser.add_argument(
        "--port",
        type=int,
        default=None,
        help="Port to serve on (default: api_port from settings)",
    )

    return parser


def _add_years(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--years",
        type=int,
        nargs=2,
        metavar=("FIRST", "LAST"),
        default=None,
        help="Inclusive year range",
    )


def _years(args: argparse.Namespace) -> tuple[int | None, int | None]:
    years = getattr(args, "years", None)
    if not years:
        return None, None
    return years[0], years[1]


def _reports_pipeline_errors(
    func: Callable[[argparse.Namespace], int],
) -> Callable[[argparse.Namespace], int]:
    """Turn a ``PipelineError`` into a stage-tagged message and exit code 1."""

    @functools.wraps(func)
    def wrapper(args: argparse.Namespace) -> int:
        try:
            return func(args)
        except PipelineError as exc:
            detail = f" ({exc.identifier})" if exc.identifier else ""
            print(f"Error [{exc.stage}]: {exc.message}{detail}", file=sys.stderr)
            return 1

    return wrapper


def cmd_info(_args: argparse.Namespace) -> int:
    """Handle the 'info' command."""
    settings = get_settings()
    print(f"Application: {settings.app_name}")
    print(f"Version: {__version__}")
    print(f"Environment: {settings.app_env}")
    print(f"Data directory: {settings.data_dir}")
    print(f"Years: {settings.year_min}-{settings.year_max}")
    print(f"Catalog: {settings.catalog_url}")
    return 0


@_reports_pipeline_errors
def cmd_fetch(args: argparse.Namespace) -> int:
    """Handle the 'fetch' command."""
    year_min, year_max = _years(args)
    result = fetch_all(year_min=year_min, year_max=year_max, force=args.force)
    print(f"Checkpoint: {result.get('output')} ({result.get('rows', 0)} rows)")
    return 0


@_reports_pipeline_errors
def cmd_build(_args: argparse.Namespace) -> int:
    """Handle the 'build' command."""
    result = build_all()
    print(f"Site: {result.get('output')}")
    return 0


@_reports_pipeline_errors
def cmd_refresh(args: argparse.Namespace) -> int:
    """Handle the 'refresh' command: fetch data then build site."""
    year_min, year_max = _years(args)
    print("Fetching data...")
    fetch_all(year_min=year_min, year_max=year_max, force=args.force)

    print("Building site...")
    build_all()

    print("Done.")
    return 0


@_reports_pipeline_errors
def cmd_explore(args: argparse.Namespace) -> int:
    """Handle the 'explore' command: render one selection to explore.html."""
    year_min, year_max = _years(args)
    try:
        selection = FilterState(
            project=args.project,
            species=args.species,
            year_min=year_min,
            year_max=year_max,
        )
    except ValidationError as exc:
        print(f"Error: invalid selection: {exc.errors()[0]['msg']}", file=sys.stderr)
        return 1

    output_path = write_explorer(selection)
    print(f"Wrote {selection.label} to {output_path}")
    return 0


def cmd_serve(args: argparse.Namespace) -> int:
    """Handle the 'serve' command: serve the built site locally."""
    settings = get_settings()
    port = args.port if args.port is not None else settings.api_port
    site_dir = build.SITE_DIR

    if not site_dir.exists():
        print("No site directory found. Run 'fish-passage refresh' first.", file=sys.stderr)
        return 1

    handler = functools.partial(http.server.SimpleHTTPRequestHandler, directory=str(site_dir))

    with http.server.HTTPServer(("", port), handler) as server:
        print(f"Serving site on http://localhost:{port}/ (Ctrl+C to stop)")
        try:
            server.serve_forever()
        except KeyboardInterrupt:
            print("\nServer stopped.")

    return 0


def main() -> int:
    """Main entry point for the CLI."""
    parser = create_parser()
    args = parser.parse_args()

    debug = getattr(args, "debug", False) or get_settings().debug
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.command is None:
        parser.print_help()
        return 0

    commands = {
        "info": cmd_info,
        "fetch": cmd_fetch,
        "build": cmd_build,
        "refresh": cmd_refresh,
        "explore": cmd_explore,
        "serve": cmd_serve,
    }

    handler = commands.get(args.command)
    if handler:
        return handler(args)
    else:
        parser.print_help()
        return 1


if __name__ == "__main__":
    sys.exit(main())
