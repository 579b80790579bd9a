"""drivefinder entry point.

Examples:
  drivefinder                      Interactive search prompt (default)
  drivefinder search "report"      Run one search and print the results
  drivefinder login                Sign in to OneDrive
  drivefinder signout              Forget stored tokens
"""

from __future__ import annotations

import argparse
import asyncio
import logging
from collections.abc import Sequence
from importlib.metadata import PackageNotFoundError
from importlib.metadata import version as get_version

import httpx
from pydantic import ValidationError
from rich.console import Console

from drivefinder.config import Settings, get_config_path, get_settings
from drivefinder.console import (
    ConsoleSearchView,
    run_interactive,
    run_login,
    run_search,
    run_signout,
)
from drivefinder.integrations.graph_drive import GraphDriveClient
from drivefinder.integrations.oauth import OAuthManager
from drivefinder.logging_setup import setup_logging
from drivefinder.search.controller import SearchSessionController

logger = logging.getLogger(__name__)


def _package_version() -> str:
    try:
        return get_version("drivefinder")
    except PackageNotFoundError:
        from drivefinder import __version__

        return __version__


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="drivefinder",
        description="Search your OneDrive from the terminal.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__.split("\n", 2)[2] if __doc__ else None,
    )
    parser.add_argument(
        "--log-level",
        type=str.upper,
        default=None,
        choices=["CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"],
        help="Logging verbosity (default: log_level setting, INFO)",
    )
    parser.add_argument("--version", "-v", action="version", version=_package_version())

    subparsers = parser.add_subparsers(dest="command")
    subparsers.add_parser("interactive", help="Interactive search prompt (default)")
    search_parser = subparsers.add_parser("search", help="Run one search and print the results")
    search_parser.add_argument("query", nargs="+", help="Search text")
    subparsers.add_parser("login", help="Sign in to OneDrive (OAuth authorization code flow)")
    subparsers.add_parser("signout", help="Forget stored OneDrive tokens")
    return parser


async def _dispatch(args: argparse.Namespace, settings: Settings, console: Console) -> int:
    oauth = OAuthManager(tenant=settings.graph_tenant)

    if args.command == "login":
        return await run_login(settings, oauth, console)
    if args.command == "signout":
        return await run_signout(oauth, console)

    view = ConsoleSearchView(console)
    controller = SearchSessionController(GraphDriveClient(settings, oauth), view=view)
    if args.command == "search":
        return await run_search(controller, " ".join(args.query), console)
    return await run_interactive(controller, console)


def main(argv: Sequence[str] | None = None) -> int:
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        settings = get_settings()
    except ValidationError as e:
        setup_logging(level=args.log_level or "INFO")
        logger.error("Invalid settings in %s or DRIVEFINDER_* env: %s", get_config_path(), e)
        return 1
    setup_logging(level=args.log_level or settings.log_level)
    console = Console()

    try:
        return asyncio.run(_dispatch(args, settings, console))
    except KeyboardInterrupt:
        return 130
    except httpx.HTTPError as e:
        logger.error("Request failed: %s", e)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
