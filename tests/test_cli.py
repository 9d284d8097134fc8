"""Tests for the one-shot CLI commands."""

from __future__ import annotations

from unittest.mock import patch

import pytest

from remmina_search.cli import connect, list_, search
from remmina_search.launcher import LaunchError


@pytest.fixture(autouse=True)
def no_logging_setup():
    """Keep CLI commands from installing handlers on the root logger."""
    with patch("remmina_search.cli._configure_logging"):
        yield


@pytest.fixture
def configured_dir(profile_dir, office_profile, nas_profile, monkeypatch):
    monkeypatch.setenv("REMMINA_SEARCH_PROFILE_DIR", str(profile_dir))
    monkeypatch.delenv("REMMINA_SEARCH_MATCH_MODE", raising=False)
    return profile_dir


class TestList:
    def test_prints_every_session(self, configured_dir, capsys):
        list_()
        out = capsys.readouterr().out
        assert "Office PC (RDP)" in out
        assert "Home NAS (SFTP)" in out
        assert str(configured_dir / "a.remmina") in out

    def test_missing_directory_exits(self, tmp_path, monkeypatch, capsys):
        monkeypatch.setenv("REMMINA_SEARCH_PROFILE_DIR", str(tmp_path / "no"))
        with pytest.raises(SystemExit) as exc_info:
            list_()
        assert exc_info.value.code == 1
        assert "✗" in capsys.readouterr().err

    def test_empty_directory(self, profile_dir, monkeypatch, capsys):
        monkeypatch.setenv("REMMINA_SEARCH_PROFILE_DIR", str(profile_dir))
        list_()
        assert "No sessions found." in capsys.readouterr().out


class TestSearch:
    def test_filters_by_terms(self, configured_dir, capsys):
        search("sftp")
        out = capsys.readouterr().out
        assert "Home NAS" in out
        assert "Office PC" not in out

    def test_limit(self, configured_dir, capsys):
        search("remmina", limit=1)
        out = capsys.readouterr().out
        assert "Office PC" in out
        assert "Home NAS" not in out


class TestConnect:
    @patch("remmina_search.launcher.subprocess.Popen")
    def test_opens_first_match(self, mock_popen, configured_dir, capsys):
        connect("office")

        args = mock_popen.call_args.args[0]
        assert args[1:] == ["-c", str(configured_dir / "a.remmina")]
        assert "Opening Office PC (RDP)" in capsys.readouterr().out

    @patch("remmina_search.launcher.subprocess.Popen")
    def test_requires_a_term(self, mock_popen, configured_dir, capsys):
        with pytest.raises(SystemExit) as exc_info:
            connect()
        assert exc_info.value.code == 1
        assert "at least one search term" in capsys.readouterr().err
        mock_popen.assert_not_called()

    def test_no_match_exits(self, configured_dir, capsys):
        with pytest.raises(SystemExit) as exc_info:
            connect("zzz")
        assert exc_info.value.code == 1
        assert "No session matches" in capsys.readouterr().err

    @patch("remmina_search.provider.RemminaSearchProvider.activate_result")
    def test_launch_failure_exits(self, mock_activate, configured_dir, capsys):
        mock_activate.side_effect = LaunchError("Failed to start remmina", [])
        with pytest.raises(SystemExit) as exc_info:
            connect("office")
        assert exc_info.value.code == 1
        assert "Failed to start remmina" in capsys.readouterr().err
