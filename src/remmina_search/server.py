"""
Remmina Sessions MCP Server

Exposes saved Remmina connections to MCP clients, which act as the
search host: they send search terms, narrow results, and ask for a
connection to be opened. The profile directory is indexed when the
server starts and kept current by a file watcher while it runs.

TOOLS (4 total):
- list_sessions(limit?) - All saved connections
- search_sessions(terms, limit?) - Sessions matching every term
- refine_sessions(ids, terms, limit?) - Narrow earlier results
- connect_session(session_id) - Open a connection in Remmina
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

from typing_extensions import TypedDict

from fastmcp import FastMCP

from .config import get_max_results
from .index.search import ResultMeta, split_terms
from .launcher import LaunchError
from .provider import RemminaSearchProvider

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Sequence

    from .index import Session


# ========== Response Type Definitions ==========


class LaunchResult(TypedDict):
    """Outcome of opening a connection."""

    id: str
    label: str
    command: list[str]


# ========== Helper Functions ==========


def _normalize_terms(terms: list[str] | str) -> list[str]:
    """Accept terms as a list or as one whitespace-separated string."""
    if isinstance(terms, str):
        return split_terms(terms)
    return [term for term in terms if term.strip()]


def _resolve_limit(limit: int | None) -> int:
    """Resolve limit, using the configured default if not specified."""
    return limit if limit is not None else get_max_results()


# ========== MCP Tools ==========


class SessionTools:
    """MCP tools bound to one provider."""

    def __init__(self, provider: RemminaSearchProvider):
        self.provider = provider

    def _metas(
        self, sessions: Sequence[Session], limit: int | None
    ) -> list[ResultMeta]:
        limited = self.provider.filter_results(sessions, _resolve_limit(limit))
        return self.provider.get_result_metas(limited)

    async def list_sessions(self, limit: int | None = None) -> list[ResultMeta]:
        """
        List saved Remmina connections.

        Args:
            limit: Maximum number of sessions to return. Uses
                   REMMINA_SEARCH_MAX_RESULTS (20) if not specified.

        Returns:
            List of session dictionaries with 'id', 'name', 'protocol',
            'label', 'icon' and 'emblem' fields, in index order.
        """
        return self._metas(self.provider.get_initial_result_set([]), limit)

    async def search_sessions(
        self,
        terms: list[str] | str,
        limit: int | None = None,
    ) -> list[ResultMeta]:
        """
        Search saved connections by name or protocol.

        Every term must match (case-insensitive) the session name, its
        protocol, or the word "remmina". Searching "remmina" lists all.

        Args:
            terms: Search terms, as a list or a space-separated string
            limit: Maximum number of sessions to return

        Returns:
            Matching session dictionaries in index order.

        Example:
            >>> search_sessions(["office", "rdp"])
            [{"id": "/home/me/.remmina/1.remmina",
              "label": "Office PC (RDP)", ...}]
        """
        results = self.provider.get_initial_result_set(
            _normalize_terms(terms)
        )
        return self._metas(results, limit)

    async def refine_sessions(
        self,
        ids: list[str],
        terms: list[str] | str,
        limit: int | None = None,
    ) -> list[ResultMeta]:
        """
        Narrow previous search results with more terms.

        Args:
            ids: Session ids from an earlier search, in display order.
                 Ids no longer in the index are dropped.
            terms: Search terms, as a list or a space-separated string
            limit: Maximum number of sessions to return

        Returns:
            Matching session dictionaries in the order of ids.
        """
        prior = [
            session
            for session in (self.provider.get_session(i) for i in ids)
            if session is not None
        ]
        results = self.provider.get_subsearch_result_set(
            prior, _normalize_terms(terms)
        )
        return self._metas(results, limit)

    async def connect_session(self, session_id: str) -> LaunchResult:
        """
        Open a saved connection in Remmina.

        Starts `remmina -c <profile>` and returns without waiting.

        Args:
            session_id: Session id from search results (profile path)

        Returns:
            The session label and the command that was started.
        """
        session = self.provider.get_session(session_id)
        if session is None:
            raise ValueError(f"Session {session_id} not found.")

        try:
            command = self.provider.activate_result(session)
        except LaunchError as e:
            raise ValueError(str(e)) from e

        meta = self.provider.get_result_metas([session])[0]
        return LaunchResult(id=meta["id"], label=meta["label"], command=command)


def create_server(provider: RemminaSearchProvider | None = None) -> FastMCP:
    """
    Build the MCP server around a provider.

    The provider is enabled when the server starts and disabled when
    it shuts down.

    Args:
        provider: Provider to serve (a default one if None)

    Returns:
        Configured FastMCP app (call .run() to serve)
    """
    provider = provider or RemminaSearchProvider()
    tools = SessionTools(provider)

    @asynccontextmanager
    async def lifespan(server: FastMCP) -> AsyncIterator[None]:
        await provider.enable()
        try:
            yield
        finally:
            await provider.disable()

    mcp = FastMCP("Remmina Sessions", lifespan=lifespan)
    mcp.tool(tools.list_sessions)
    mcp.tool(tools.search_sessions)
    mcp.tool(tools.refine_sessions)
    mcp.tool(tools.connect_session)
    return mcp
