"""Command-line interface for remmina-search.

Provides commands for:
- serve: Run the MCP server with a live-updating index (default)
- list: Show every saved connection
- search: Show connections matching all terms
- connect: Open the first matching connection in Remmina

Usage:
    remmina-search                 # Run MCP server (default)
    remmina-search serve           # Run MCP server explicitly
    remmina-search list            # List saved connections
    remmina-search search rdp      # Search by name or protocol
    remmina-search connect office  # Open the first match
"""

from __future__ import annotations

import logging
import sys
from typing import TYPE_CHECKING, Annotated

import cyclopts

from .config import get_max_results, get_profile_dir
from .index import DirectoryUnavailable
from .index.search import format_label
from .launcher import LaunchError

if TYPE_CHECKING:
    from .index import Session
    from .provider import RemminaSearchProvider

app = cyclopts.App(
    name="remmina-search",
    help="Search and open saved Remmina connections.",
)

Verbose = Annotated[
    bool,
    cyclopts.Parameter(name=["--verbose", "-v"], help="Enable debug logging"),
]


def _configure_logging(verbose: bool) -> None:
    """Send log records to stderr (DEBUG when verbose)."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def _load_provider() -> RemminaSearchProvider:
    """Index the profile directory once, exiting if it is unavailable."""
    from .provider import RemminaSearchProvider

    provider = RemminaSearchProvider()
    try:
        provider.load()
    except DirectoryUnavailable as e:
        print(f"✗ {e}", file=sys.stderr)
        sys.exit(1)
    return provider


def _print_sessions(sessions: list[Session]) -> None:
    """Print one session per line: label, then profile path."""
    if not sessions:
        print("No sessions found.")
        return

    width = max(len(format_label(s)) for s in sessions)
    for session in sessions:
        print(f"{format_label(session):<{width}}  {session.source_path}")


def _run_serve() -> None:
    """Internal function to run the MCP server."""
    from .index.profiles import find_profile_directory
    from .provider import RemminaSearchProvider
    from .server import create_server

    provider = RemminaSearchProvider()

    # Fail before the server starts rather than inside its lifespan
    try:
        profile_dir = find_profile_directory(provider.profile_dir)
    except DirectoryUnavailable as e:
        print(f"✗ {e}", file=sys.stderr)
        sys.exit(1)

    print(f"Watching {profile_dir}", file=sys.stderr, flush=True)
    create_server(provider).run()


@app.command
def serve(verbose: Verbose = False) -> None:
    """
    Run the MCP server.

    This is the default command when no subcommand is specified.
    The profile directory is indexed at startup and watched for
    changes while the server runs.
    """
    _configure_logging(verbose)
    _run_serve()


@app.command(name="list")
def list_(verbose: Verbose = False) -> None:
    """
    List every saved connection.

    Reads profiles from ~/.remmina (or REMMINA_SEARCH_PROFILE_DIR).
    """
    _configure_logging(verbose)
    provider = _load_provider()
    _print_sessions(provider.get_initial_result_set([]))


@app.command
def search(
    *terms: str,
    limit: Annotated[
        int | None,
        cyclopts.Parameter(
            name=["--limit", "-n"],
            help="Maximum results (REMMINA_SEARCH_MAX_RESULTS if not set)",
        ),
    ] = None,
    verbose: Verbose = False,
) -> None:
    """
    Search saved connections by name or protocol.

    Every term must match (case-insensitive). "remmina" matches all.
    """
    _configure_logging(verbose)
    provider = _load_provider()
    results = provider.get_initial_result_set(terms)
    max_results = limit if limit is not None else get_max_results()
    _print_sessions(provider.filter_results(results, max_results))


@app.command
def connect(*terms: str, verbose: Verbose = False) -> None:
    """
    Open the first connection matching all terms.

    Runs `remmina -c <profile>` and returns immediately.
    """
    if not any(term.strip() for term in terms):
        print("✗ Give at least one search term", file=sys.stderr)
        sys.exit(1)

    _configure_logging(verbose)
    provider = _load_provider()
    results = provider.get_initial_result_set(terms)

    if not results:
        print(
            f"✗ No session matches {' '.join(terms)!r} "
            f"in {get_profile_dir()}",
            file=sys.stderr,
        )
        sys.exit(1)

    session = results[0]
    try:
        provider.activate_result(session)
    except LaunchError as e:
        print(f"✗ {e}", file=sys.stderr)
        sys.exit(1)

    print(f"✓ Opening {format_label(session)}")


@app.default
def default_handler(verbose: Verbose = False) -> None:
    """Run the MCP server (default when no command specified)."""
    _configure_logging(verbose)
    _run_serve()


def main() -> None:
    """Entry point for the CLI."""
    app()
