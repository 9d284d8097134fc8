"""Reading Remmina connection profiles from disk.

Remmina stores one connection per file in its profile directory:

    ~/.remmina/
    ├── 1361893421143.remmina
    ├── 1361893521967.remmina
    └── remmina.pref          ← preferences, not a profile

Profiles are GLib key files:

    [remmina]                 ← required group
    name=Office PC            ← required, display name
    protocol=RDP              ← optional, protocol code
    server=office.example.com:3389
    ...

Anything without a ``remmina`` group or a non-empty ``name`` is not a
profile. Files are often caught half-written by the watcher, so parse
failures are expected and reported with ProfileParseError for the index
to skip.
"""

from __future__ import annotations

import configparser
import logging
import re
from dataclasses import dataclass
from pathlib import Path

from ..config import get_profile_dir

logger = logging.getLogger(__name__)

PROFILE_GROUP = "remmina"

# Profiles are a few hundred bytes; anything huge is not one of ours
MAX_PROFILE_SIZE = 1024 * 1024

# GKeyFile string escapes
_ESCAPES = {"s": " ", "n": "\n", "t": "\t", "r": "\r", "\\": "\\"}
_ESCAPE_PATTERN = re.compile(r"\\(.)")


class DirectoryUnavailable(OSError):
    """Raised when the profile directory cannot be opened or watched."""


class ProfileParseError(ValueError):
    """Raised when a file is not (yet) a valid Remmina profile."""

    def __init__(self, message: str, path: Path):
        super().__init__(message)
        self.path = path


class MissingRequiredField(ProfileParseError):
    """Raised when a profile lacks a required key such as ``name``."""

    def __init__(self, field: str, path: Path):
        super().__init__(f"Profile {path} has no '{field}'", path)
        self.field = field


@dataclass(frozen=True)
class Session:
    """One saved remote-desktop connection."""

    name: str
    protocol: str
    source_path: Path


def find_profile_directory(path: Path | None = None) -> Path:
    """
    Find the Remmina profile directory.

    Args:
        path: Explicit directory (uses config default if None)

    Returns:
        Absolute path to the profile directory

    Raises:
        DirectoryUnavailable: If the directory is missing or unreadable
    """
    profile_dir = (path or get_profile_dir()).expanduser().absolute()

    if not profile_dir.is_dir():
        raise DirectoryUnavailable(
            f"Profile directory not found: {profile_dir}\n"
            "Ensure Remmina has saved at least one connection."
        )

    # Test access by trying to list contents
    try:
        next(profile_dir.iterdir(), None)
    except OSError as e:
        raise DirectoryUnavailable(
            f"Cannot access profile directory {profile_dir}: {e}"
        ) from e

    return profile_dir


def list_profile_files(directory: Path) -> list[Path]:
    """
    List the regular files directly inside a profile directory.

    Args:
        directory: Directory to enumerate (not recursed)

    Returns:
        File paths sorted by name

    Raises:
        DirectoryUnavailable: If the directory cannot be listed
    """
    try:
        entries = sorted(directory.iterdir())
    except OSError as e:
        raise DirectoryUnavailable(
            f"Cannot list profile directory {directory}: {e}"
        ) from e

    return [entry for entry in entries if entry.is_file()]


def _unescape(value: str) -> str:
    """Decode GKeyFile escape sequences (\\s, \\n, \\t, \\r, \\\\)."""
    return _ESCAPE_PATTERN.sub(
        lambda m: _ESCAPES.get(m.group(1), m.group(0)), value
    )


def _new_parser() -> configparser.ConfigParser:
    """Create a ConfigParser that reads the GKeyFile dialect."""
    parser = configparser.ConfigParser(
        delimiters=("=",),
        comment_prefixes=("#",),
        inline_comment_prefixes=None,
        strict=False,
        empty_lines_in_values=False,
        interpolation=None,
        # Key files have no DEFAULT group; keep that name unremarkable
        default_section="\x00",
    )
    # Key names are case-sensitive in key files
    parser.optionxform = str  # type: ignore[assignment,method-assign]
    return parser


def parse_profile(path: Path) -> Session:
    """
    Parse a single Remmina profile.

    Args:
        path: Path to the profile file

    Returns:
        Session built from the ``remmina`` group

    Raises:
        MissingRequiredField: If the profile has no non-empty ``name``
        ProfileParseError: If the file is unreadable, malformed,
            oversized, or has no ``remmina`` group
    """
    try:
        # Check file size to avoid reading things that are not profiles
        if path.stat().st_size > MAX_PROFILE_SIZE:
            raise ProfileParseError(f"Profile {path} is too large", path)
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise ProfileParseError(f"Cannot read {path}: {e}", path) from e

    # Key files ignore leading whitespace; ConfigParser would read an
    # indented line as a continuation of the previous value
    text = "\n".join(line.lstrip() for line in text.splitlines())

    parser = _new_parser()
    try:
        parser.read_string(text, source=str(path))
    except configparser.Error as e:
        raise ProfileParseError(f"Malformed profile {path}: {e}", path) from e

    if not parser.has_section(PROFILE_GROUP):
        raise ProfileParseError(
            f"{path} has no [{PROFILE_GROUP}] group", path
        )

    group = parser[PROFILE_GROUP]
    name = _unescape(group.get("name", "")).strip()
    if not name:
        raise MissingRequiredField("name", path)

    protocol = _unescape(group.get("protocol", "")).strip()

    return Session(name=name, protocol=protocol, source_path=path)


def read_profile(path: Path) -> Session | None:
    """
    Parse a profile, returning None if it is not a valid one.

    Args:
        path: Path to the profile file

    Returns:
        Session, or None if parsing fails
    """
    try:
        return parse_profile(path)
    except ProfileParseError as e:
        logger.debug("Skipping %s: %s", path, e)
        return None
