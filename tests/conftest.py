"""Shared pytest fixtures for remmina-search tests."""

from __future__ import annotations

from pathlib import Path

import pytest

from remmina_search.index import Session, SessionIndex

OFFICE_PROFILE = """\
[remmina]
name=Office PC
protocol=RDP
server=office.example.com:3389
username=alice
"""

NAS_PROFILE = """\
[remmina]
name=Home NAS
protocol=SFTP
server=nas.local
"""


@pytest.fixture
def profile_dir(tmp_path: Path) -> Path:
    """Create an empty profile directory."""
    directory = tmp_path / ".remmina"
    directory.mkdir()
    return directory


@pytest.fixture
def write_profile(profile_dir: Path):
    """Return a helper that writes a file into the profile directory."""

    def _write(filename: str, content: str) -> Path:
        path = profile_dir / filename
        path.write_text(content, encoding="utf-8")
        return path

    return _write


@pytest.fixture
def office_profile(write_profile) -> Path:
    """An RDP profile named "Office PC"."""
    return write_profile("a.remmina", OFFICE_PROFILE)


@pytest.fixture
def nas_profile(write_profile) -> Path:
    """An SFTP profile named "Home NAS"."""
    return write_profile("b.remmina", NAS_PROFILE)


@pytest.fixture
def sample_sessions() -> list[Session]:
    """Return in-memory sessions for matching tests."""
    return [
        Session("Office PC", "RDP", Path("/h/.remmina/a")),
        Session("Home NAS", "SFTP", Path("/h/.remmina/b")),
        Session("Build Box", "SSH", Path("/h/.remmina/c")),
        Session("Lab (VNC)", "VNC", Path("/h/.remmina/d")),
        Session("Old Terminal", "XDMCP", Path("/h/.remmina/e")),
    ]


@pytest.fixture
def populated_index(office_profile: Path, nas_profile: Path) -> SessionIndex:
    """Index holding the Office PC and Home NAS profiles, in that order."""
    index = SessionIndex()
    index.apply_upsert(office_profile)
    index.apply_upsert(nas_profile)
    return index
