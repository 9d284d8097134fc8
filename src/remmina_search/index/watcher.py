"""Directory watcher for live session updates.

Watches the Remmina profile directory and reports every file as either
upserted or removed, so the index never has to tell "present at
startup" apart from "changed later":

- Existing files at start → UPSERTED (one event each)
- Created or modified files → UPSERTED
- Deleted files → REMOVED

Uses watchfiles (Rust-based, efficient) through its asyncio API. The
watch loop runs as a task on the caller's event loop, so callbacks never
race with queries.
"""

from __future__ import annotations

import asyncio
import contextlib
import enum
import functools
import logging
from pathlib import Path
from typing import TYPE_CHECKING

from watchfiles import Change, awatch

from ..config import get_debounce_ms
from .profiles import find_profile_directory, list_profile_files

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Callable, Iterable

    ChangeSource = Callable[
        [Path, asyncio.Event], AsyncIterator[set[tuple[Change, str]]]
    ]
    EventCallback = Callable[[Path, "ChangeKind"], None]
    Lister = Callable[[Path], Iterable[Path]]

logger = logging.getLogger(__name__)


class ChangeKind(enum.Enum):
    """Normalized change reported for one file."""

    UPSERTED = "upserted"
    REMOVED = "removed"


def watch_directory(
    directory: Path,
    stop_event: asyncio.Event,
    debounce_ms: int | None = None,
) -> AsyncIterator[set[tuple[Change, str]]]:
    """
    Watch one directory (not recursive) with watchfiles.

    Args:
        directory: Directory to watch
        stop_event: Ends the iteration when set
        debounce_ms: Batch window (uses config default if None)

    Returns:
        Async iterator of change batches
    """
    if debounce_ms is None:
        debounce_ms = get_debounce_ms()
    return awatch(
        directory,
        stop_event=stop_event,
        debounce=debounce_ms,
        recursive=False,
    )


def normalize_changes(
    directory: Path, changes: Iterable[tuple[Change, str]]
) -> list[tuple[Path, ChangeKind]]:
    """
    Collapse a batch of raw changes into one event per file.

    A file touched several times in one batch (created then deleted,
    deleted then recreated) is judged by whether it exists now.

    Args:
        directory: Watched directory
        changes: Raw (change, path) pairs from watchfiles

    Returns:
        (path, kind) pairs sorted by path
    """
    events: list[tuple[Path, ChangeKind]] = []
    raw_paths = {Path(path_str) for _, path_str in changes}

    for raw in sorted(raw_paths):
        if raw == directory or not raw.name:
            continue
        # Re-anchor on the watched directory so keys match the listing
        path = directory / raw.name
        kind = ChangeKind.UPSERTED if path.is_file() else ChangeKind.REMOVED
        events.append((path, kind))

    return events


class DirectoryWatcher:
    """
    Reports profile files as they appear, change, and disappear.

    Usage:
        watcher = DirectoryWatcher()
        await watcher.start(profile_dir, on_event=index.handle_event)
        # ... later ...
        await watcher.stop()
    """

    def __init__(
        self,
        lister: Lister = list_profile_files,
        source: ChangeSource | None = None,
        debounce_ms: int | None = None,
    ):
        """
        Initialize the watcher.

        Args:
            lister: One-shot directory enumeration
            source: Change batch source (watchfiles if None)
            debounce_ms: Milliseconds to batch changes for (config if None)
        """
        self._lister = lister
        self._source = source or functools.partial(
            watch_directory, debounce_ms=debounce_ms
        )

        self._directory: Path | None = None
        self._on_event: EventCallback | None = None
        self._stop_event: asyncio.Event | None = None
        self._task: asyncio.Task[None] | None = None

    @property
    def is_running(self) -> bool:
        """Check if the watch task is alive."""
        return self._task is not None and not self._task.done()

    @property
    def directory(self) -> Path | None:
        """Directory being watched, if started."""
        return self._directory

    async def start(self, path: Path, on_event: EventCallback) -> None:
        """
        Watch the directory for changes, then list it.

        The watch is set up before the listing so a file created in
        between is still reported. Every file present now is reported as
        UPSERTED before start() returns; live changes follow from a
        background task.

        Args:
            path: Directory to watch
            on_event: Called with (file_path, ChangeKind) for every event

        Raises:
            DirectoryUnavailable: If the directory cannot be listed
            RuntimeError: If the watcher is already running
        """
        if self.is_running:
            raise RuntimeError("Directory watcher is already running")

        directory = find_profile_directory(path)

        self._directory = directory
        self._on_event = on_event
        self._stop_event = asyncio.Event()
        self._task = asyncio.create_task(
            self._watch_loop(directory, self._stop_event),
            name="DirectoryWatcher",
        )

        # Let the task run up to its first await; awatch creates the OS
        # watch before that point.
        await asyncio.sleep(0)

        try:
            entries = list(self._lister(directory))
        except Exception:
            await self.stop()
            raise

        for entry in entries:
            self._dispatch(entry, ChangeKind.UPSERTED)

        logger.info(
            "Directory watcher started for %s (%d files)",
            directory,
            len(entries),
        )

    async def stop(self) -> None:
        """Stop watching. No events are delivered after this returns."""
        self._on_event = None

        if self._stop_event is not None:
            self._stop_event.set()

        task, self._task = self._task, None
        if task is None:
            return

        task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await task

        logger.info("Directory watcher stopped")

    async def _watch_loop(
        self, directory: Path, stop_event: asyncio.Event
    ) -> None:
        """Consume change batches until stopped (runs as a task)."""
        logger.debug("Starting watch loop on %s", directory)

        try:
            async for changes in self._source(directory, stop_event):
                if stop_event.is_set():
                    break

                events = normalize_changes(directory, changes)
                for file_path, kind in events:
                    self._dispatch(file_path, kind)

                if events:
                    logger.debug(
                        "Processed %d changes in %s", len(events), directory
                    )
        except Exception as e:  # Broad: any watch backend failure
            logger.warning("Watching %s failed: %s", directory, e)

    def _dispatch(self, file_path: Path, kind: ChangeKind) -> None:
        """Deliver one event unless the watcher has been stopped."""
        if self._on_event is None:
            return

        try:
            self._on_event(file_path, kind)
        except Exception as e:  # Broad: user callback
            logger.warning(
                "Error in watcher callback for %s: %s", file_path, e
            )
