"""In-memory index of Remmina connection profiles.

This module provides:
- SessionIndex: Ordered collection of sessions with term-filtered queries
- DirectoryWatcher: Initial listing plus live change events for a directory
- Profile parsing from Remmina's key-file format
"""

from .profiles import (
    DirectoryUnavailable,
    MissingRequiredField,
    ProfileParseError,
    Session,
)
from .sessions import SessionIndex
from .watcher import ChangeKind, DirectoryWatcher

__all__ = [
    "ChangeKind",
    "DirectoryUnavailable",
    "DirectoryWatcher",
    "MissingRequiredField",
    "ProfileParseError",
    "Session",
    "SessionIndex",
]
