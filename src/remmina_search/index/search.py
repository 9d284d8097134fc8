"""Term matching and result shaping for session search.

Provides:
- SubstringMatcher / RegexMatcher: does one term match one session
- filter_sessions(): keep sessions matched by every term
- limit_results(): truncate a result list, preserving order
- result_meta(): host-facing description of a session

Every term is checked against the session name, its protocol, and the
provider identifier "remmina". The last one means searching for
"remmina" lists every saved connection.
"""

from __future__ import annotations

import re
from functools import lru_cache
from typing import TYPE_CHECKING, Protocol

from typing_extensions import TypedDict

from .profiles import Session

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

PROVIDER_ID = "remmina"

# Application icon shown for every session
SESSION_ICON = "remmina"

PROTOCOL_EMBLEMS = {
    "NX": "remmina-nx",
    "RDP": "remmina-rdp",
    "SFTP": "remmina-sftp",
    "SSH": "gnome-terminal",
    "VNC": "remmina-vnc",
    "XDMCP": "remmina-xdmcp",
}


class ResultMeta(TypedDict):
    """Description of one search result for the host to display."""

    id: str
    name: str
    protocol: str
    label: str
    icon: str
    emblem: str | None


class TermMatcher(Protocol):
    """Decides whether a single search term matches a session."""

    def matches(self, session: Session, term: str) -> bool: ...


class SubstringMatcher:
    """Case-insensitive literal containment.

    Regex metacharacters in terms have no special meaning.
    """

    def matches(self, session: Session, term: str) -> bool:
        needle = term.casefold()
        return (
            needle in session.name.casefold()
            or needle in session.protocol.casefold()
            or needle in PROVIDER_ID
        )


@lru_cache(maxsize=256)
def _compile_term(term: str) -> re.Pattern[str]:
    """Compile a term as a case-insensitive pattern.

    Terms that are not valid patterns are matched literally.
    """
    try:
        return re.compile(term, re.IGNORECASE)
    except re.error:
        return re.compile(re.escape(term), re.IGNORECASE)


class RegexMatcher:
    """Each term is a case-insensitive regular expression.

    Lets power users write patterns like ``^office`` or ``rdp|vnc``.
    Note that ``.*`` matches every session.
    """

    def matches(self, session: Session, term: str) -> bool:
        pattern = _compile_term(term)
        return bool(
            pattern.search(session.name)
            or pattern.search(session.protocol)
            or pattern.search(PROVIDER_ID)
        )


_MATCHERS: dict[str, type[SubstringMatcher] | type[RegexMatcher]] = {
    "substring": SubstringMatcher,
    "regex": RegexMatcher,
}


def get_matcher(mode: str) -> TermMatcher:
    """
    Get the matcher for a match mode name.

    Args:
        mode: "substring" or "regex"

    Returns:
        A new matcher instance

    Raises:
        ValueError: If the mode is unknown
    """
    try:
        return _MATCHERS[mode.lower()]()
    except KeyError:
        valid = ", ".join(sorted(_MATCHERS))
        raise ValueError(
            f"Unknown match mode {mode!r} (expected one of: {valid})"
        ) from None


def filter_sessions(
    sessions: Iterable[Session],
    terms: Sequence[str],
    matcher: TermMatcher,
) -> list[Session]:
    """
    Keep the sessions matched by every term.

    Args:
        sessions: Candidates, in the order results should come back
        terms: Search terms; all must match
        matcher: Term matcher to use

    Returns:
        Matching sessions in input order (all of them if terms is empty)
    """
    return [
        session
        for session in sessions
        if all(matcher.matches(session, term) for term in terms)
    ]


def limit_results(
    results: Sequence[Session], max_results: int
) -> list[Session]:
    """Return at most ``max_results`` results, preserving order."""
    return list(results[: max(max_results, 0)])


def split_terms(query: str) -> list[str]:
    """Split a free-text query into whitespace-separated terms."""
    return query.split()


def format_label(session: Session) -> str:
    """Display label: ``"<name> (<protocol>)"``."""
    if not session.protocol:
        return session.name
    return f"{session.name} ({session.protocol})"


def emblem_for_protocol(protocol: str) -> str | None:
    """Get the emblem icon name for a protocol, if Remmina ships one."""
    return PROTOCOL_EMBLEMS.get(protocol)


def result_meta(session: Session) -> ResultMeta:
    """Describe a session for display."""
    return ResultMeta(
        id=str(session.source_path),
        name=session.name,
        protocol=session.protocol,
        label=format_label(session),
        icon=SESSION_ICON,
        emblem=emblem_for_protocol(session.protocol),
    )
