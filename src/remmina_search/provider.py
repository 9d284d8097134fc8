"""RemminaSearchProvider - search-host integration for saved sessions.

Owns the SessionIndex and the DirectoryWatcher that feeds it, with an
explicit enable/disable lifecycle. Whatever hosts the search (the MCP
server, the CLI) constructs one provider and passes it around.

Host contract:
- get_initial_result_set(terms): query the whole index
- get_subsearch_result_set(prior, terms): narrow earlier results
- filter_results(results, max): truncate, preserving order
- get_result_metas(sessions): labels and icon names for display
- activate_result(session): open the connection in Remmina
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

from .config import get_match_mode, get_profile_dir
from .index import DirectoryWatcher, Session, SessionIndex
from .index.profiles import find_profile_directory, list_profile_files
from .index.search import (
    PROVIDER_ID,
    ResultMeta,
    get_matcher,
    limit_results,
    result_meta,
)
from .launcher import launch_session

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

    from .index.search import TermMatcher

logger = logging.getLogger(__name__)


class RemminaSearchProvider:
    """
    Search provider over the Remmina profile directory.

    Usage:
        provider = RemminaSearchProvider()
        await provider.enable()
        results = provider.get_initial_result_set(["office"])
        provider.activate_result(results[0])
        await provider.disable()
    """

    id = PROVIDER_ID

    def __init__(
        self,
        profile_dir: Path | None = None,
        matcher: TermMatcher | None = None,
        watcher: DirectoryWatcher | None = None,
        launcher: Callable[[Session], list[str]] = launch_session,
    ):
        """
        Initialize the provider (nothing is read until enabled).

        Args:
            profile_dir: Profile directory (uses config default if None)
            matcher: Term matcher (uses configured match mode if None)
            watcher: Directory watcher (a default one if None)
            launcher: Called to open a session
        """
        self._profile_dir = profile_dir
        self._matcher = matcher or get_matcher(get_match_mode())
        self._watcher = watcher or DirectoryWatcher()
        self._launcher = launcher

        self._index = SessionIndex(self._matcher)
        self._enabled = False

    @property
    def profile_dir(self) -> Path:
        """Configured profile directory."""
        return self._profile_dir or get_profile_dir()

    @property
    def index(self) -> SessionIndex:
        """The session index being maintained."""
        return self._index

    @property
    def enabled(self) -> bool:
        """Check if the provider is watching its directory."""
        return self._enabled

    # ─────────────────────────────────────────────────────────────────
    # Lifecycle
    # ─────────────────────────────────────────────────────────────────

    async def enable(self) -> None:
        """
        Index the profile directory and keep watching it.

        Raises:
            DirectoryUnavailable: If the directory cannot be watched
        """
        if self._enabled:
            return

        self._index = SessionIndex(self._matcher)
        await self._watcher.start(self.profile_dir, self._index.handle_event)
        self._enabled = True
        logger.info(
            "Remmina search enabled with %d sessions", len(self._index)
        )

    async def disable(self) -> None:
        """Stop watching and discard all sessions."""
        if not self._enabled:
            return

        await self._watcher.stop()
        self._index.clear()
        self._enabled = False
        logger.info("Remmina search disabled")

    def load(self) -> int:
        """
        Index the profile directory once, without watching it.

        Returns:
            Number of sessions indexed

        Raises:
            DirectoryUnavailable: If the directory cannot be listed
        """
        directory = find_profile_directory(self.profile_dir)
        self._index = SessionIndex(self._matcher)
        return self._index.populate(list_profile_files(directory))

    # ─────────────────────────────────────────────────────────────────
    # Host contract
    # ─────────────────────────────────────────────────────────────────

    def get_session(self, result_id: str) -> Session | None:
        """Resolve a result id (profile path) to its session."""
        return self._index.get(Path(result_id))

    def get_result_metas(
        self, sessions: Sequence[Session]
    ) -> list[ResultMeta]:
        """Describe sessions for display."""
        return [result_meta(session) for session in sessions]

    def get_initial_result_set(self, terms: Sequence[str]) -> list[Session]:
        """Search every indexed session."""
        return self._index.query(terms)

    def get_subsearch_result_set(
        self, prior_results: Sequence[Session], terms: Sequence[str]
    ) -> list[Session]:
        """Narrow a previous result set, keeping its order."""
        return self._index.query_subset(prior_results, terms)

    def filter_results(
        self, results: Sequence[Session], max_results: int
    ) -> list[Session]:
        """Keep the first max_results results."""
        return limit_results(results, max_results)

    def activate_result(self, session: Session) -> list[str]:
        """
        Open a session in Remmina (fire-and-forget).

        Returns:
            The command that was spawned

        Raises:
            LaunchError: If Remmina cannot be started
        """
        return self._launcher(session)
