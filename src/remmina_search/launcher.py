"""Launching Remmina connections.

Provides:
- build_launch_command(): argv for "connect using this profile"
- launch_session(): spawn Remmina detached and return immediately

The child process is not tracked: Remmina owns the connection window
once it starts.
"""

from __future__ import annotations

import logging
import subprocess
from typing import TYPE_CHECKING

from .config import get_remmina_binary

if TYPE_CHECKING:
    from pathlib import Path

    from .index import Session

logger = logging.getLogger(__name__)


class LaunchError(Exception):
    """Raised when the Remmina client cannot be started."""

    def __init__(self, message: str, command: list[str]):
        super().__init__(message)
        self.command = command


def build_launch_command(
    source_path: Path, binary: str | None = None
) -> list[str]:
    """
    Build the command that opens a saved connection.

    Args:
        source_path: Profile file to connect with
        binary: Client executable (uses config default if None)

    Returns:
        Argument list like ["remmina", "-c", "/home/me/.remmina/1.remmina"]
    """
    return [binary or get_remmina_binary(), "-c", str(source_path)]


def launch_session(session: Session, binary: str | None = None) -> list[str]:
    """
    Start Remmina for a session without waiting for it.

    Args:
        session: Session to open
        binary: Client executable (uses config default if None)

    Returns:
        The command that was spawned

    Raises:
        LaunchError: If the executable cannot be started
    """
    command = build_launch_command(session.source_path, binary)

    try:
        subprocess.Popen(
            command,
            stdin=subprocess.DEVNULL,
            stdout=subprocess.DEVNULL,
            stderr=subprocess.DEVNULL,
            start_new_session=True,
        )
    except OSError as e:
        raise LaunchError(
            f"Failed to start {command[0]}: {e}", command
        ) from e

    logger.info("Launched %s", " ".join(command))
    return command
