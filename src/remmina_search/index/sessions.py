"""SessionIndex - in-memory collection of Remmina sessions.

Keeps one Session per profile path, in insertion order, and answers
term-filtered queries over it. Mutations come from DirectoryWatcher
events; queries come from the search host.

Not thread-safe: the watcher task and the query callers share one
event loop.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

from .profiles import Session, read_profile
from .search import SubstringMatcher, TermMatcher, filter_sessions
from .watcher import ChangeKind

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

logger = logging.getLogger(__name__)


class SessionIndex:
    """
    Ordered collection of sessions keyed by profile path.

    Usage:
        index = SessionIndex()
        index.apply_upsert(Path("~/.remmina/office.remmina"))
        index.query(["rdp"])
    """

    def __init__(self, matcher: TermMatcher | None = None):
        """
        Initialize an empty index.

        Args:
            matcher: Term matcher for queries (substring if None)
        """
        self.matcher = matcher or SubstringMatcher()
        # dict keeps insertion order; re-inserting moves a path to the end
        self._sessions: dict[Path, Session] = {}

    def __len__(self) -> int:
        return len(self._sessions)

    def __contains__(self, file_path: object) -> bool:
        return file_path in self._sessions

    @property
    def sessions(self) -> list[Session]:
        """All sessions in iteration order."""
        return list(self._sessions.values())

    def get(self, file_path: Path) -> Session | None:
        """Get the session backed by a profile path, if indexed."""
        return self._sessions.get(file_path)

    def clear(self) -> None:
        """Discard every session."""
        self._sessions.clear()

    # ─────────────────────────────────────────────────────────────────
    # Mutation
    # ─────────────────────────────────────────────────────────────────

    def apply_upsert(self, file_path: Path) -> Session | None:
        """
        Parse a profile and add or replace its session.

        Files that are not valid profiles (yet) are skipped silently;
        a later change event will try again.

        Args:
            file_path: Path to the profile file

        Returns:
            The indexed Session, or None if the file was skipped
        """
        session = read_profile(file_path)
        if session is None:
            return None

        self._sessions.pop(file_path, None)
        self._sessions[file_path] = session
        return session

    def apply_removal(self, file_path: Path) -> bool:
        """
        Remove the session backed by a profile path.

        Returns:
            True if a session was removed, False if none was indexed
        """
        return self._sessions.pop(file_path, None) is not None

    def handle_event(self, file_path: Path, kind: ChangeKind) -> None:
        """Apply a DirectoryWatcher event."""
        if kind is ChangeKind.UPSERTED:
            self.apply_upsert(file_path)
        elif kind is ChangeKind.REMOVED:
            self.apply_removal(file_path)

    def populate(self, paths: Iterable[Path]) -> int:
        """
        Upsert every path (e.g. a directory listing).

        Returns:
            Number of paths that produced a session
        """
        count = sum(1 for path in paths if self.apply_upsert(path))
        logger.debug("Indexed %d sessions", count)
        return count

    # ─────────────────────────────────────────────────────────────────
    # Queries
    # ─────────────────────────────────────────────────────────────────

    def query(self, terms: Sequence[str]) -> list[Session]:
        """
        Find sessions matched by every term.

        Args:
            terms: Search terms (case-insensitive)

        Returns:
            Matching sessions in index order; empty terms return all
        """
        return filter_sessions(self._sessions.values(), terms, self.matcher)

    def query_subset(
        self, prior_results: Sequence[Session], terms: Sequence[str]
    ) -> list[Session]:
        """
        Narrow earlier results with (usually more) terms.

        Args:
            prior_results: Sessions from a previous query
            terms: Search terms (case-insensitive)

        Returns:
            Matching sessions in the order of prior_results
        """
        return filter_sessions(prior_results, terms, self.matcher)
