"""Configuration for Remmina session search."""

import os
from pathlib import Path

# Default profile location (Remmina's classic per-user directory)
DEFAULT_PROFILE_DIR = Path.home() / ".remmina"

DEFAULT_BINARY = "remmina"


def get_profile_dir() -> Path:
    """
    Get the directory holding Remmina connection profiles.

    Set REMMINA_SEARCH_PROFILE_DIR to customize the location.
    Defaults to ~/.remmina

    Returns:
        Path to the profile directory.
    """
    env_path = os.environ.get("REMMINA_SEARCH_PROFILE_DIR")
    if env_path:
        return Path(env_path).expanduser()
    return DEFAULT_PROFILE_DIR


def get_remmina_binary() -> str:
    """
    Get the executable used to open a connection.

    Set REMMINA_SEARCH_BINARY to use a different client or a full path.
    Defaults to "remmina".
    """
    return os.environ.get("REMMINA_SEARCH_BINARY") or DEFAULT_BINARY


def get_max_results() -> int:
    """
    Get the default number of results returned by a search.

    Set REMMINA_SEARCH_MAX_RESULTS to customize.
    Defaults to 20 sessions.

    Returns:
        Maximum results per search.
    """
    return int(os.environ.get("REMMINA_SEARCH_MAX_RESULTS", "20"))


def get_match_mode() -> str:
    """
    Get how search terms are matched against sessions.

    Set REMMINA_SEARCH_MATCH_MODE to one of:
    - "substring": case-insensitive literal containment (default)
    - "regex": each term is a case-insensitive regular expression

    Returns:
        Match mode name (lowercased).
    """
    return os.environ.get("REMMINA_SEARCH_MATCH_MODE", "substring").lower()


def get_debounce_ms() -> int:
    """
    Get the debounce window for directory change batches.

    Set REMMINA_SEARCH_DEBOUNCE_MS to customize.
    Defaults to 500 milliseconds.
    """
    return int(os.environ.get("REMMINA_SEARCH_DEBOUNCE_MS", "500"))
