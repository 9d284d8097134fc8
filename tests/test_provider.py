"""Tests for RemminaSearchProvider.

Tests the lifecycle object the search host talks to:
- enable/disable with a (fake-sourced) directory watcher
- one-shot loading
- the host contract (result sets, metas, limiting, activation)
"""

from __future__ import annotations

import asyncio
from pathlib import Path
from unittest.mock import MagicMock

import pytest
from watchfiles import Change

from remmina_search.index import (
    DirectoryUnavailable,
    DirectoryWatcher,
    Session,
)
from remmina_search.index.search import RegexMatcher, SubstringMatcher
from remmina_search.provider import RemminaSearchProvider


class ScriptedSource:
    """Change source fed from a queue by the test."""

    def __init__(self):
        self.queue: asyncio.Queue = asyncio.Queue()
        self.processed = asyncio.Event()

    def __call__(self, directory: Path, stop_event: asyncio.Event):
        return self._run()

    async def _run(self):
        while True:
            batch = await self.queue.get()
            yield batch
            self.processed.set()

    async def push(self, *changes: tuple[Change, str]) -> None:
        self.processed.clear()
        await self.queue.put(set(changes))
        await asyncio.wait_for(self.processed.wait(), timeout=1)


def make_provider(profile_dir: Path, source=None, **kwargs):
    watcher = DirectoryWatcher(source=source or ScriptedSource())
    return RemminaSearchProvider(
        profile_dir=profile_dir, watcher=watcher, **kwargs
    )


class TestLifecycle:
    """Tests for enable/disable."""

    @pytest.mark.asyncio
    async def test_enable_indexes_existing_profiles(
        self, profile_dir, office_profile, nas_profile
    ):
        provider = make_provider(profile_dir)

        await provider.enable()
        try:
            assert provider.enabled
            names = [s.name for s in provider.get_initial_result_set([])]
            assert names == ["Office PC", "Home NAS"]
        finally:
            await provider.disable()

    @pytest.mark.asyncio
    async def test_enable_skips_non_profiles(
        self, profile_dir, office_profile, write_profile
    ):
        write_profile("remmina.pref", "[remmina_pref]\nsave_view_mode=1\n")
        write_profile("partial.remmina", "[remm")
        provider = make_provider(profile_dir)

        await provider.enable()
        try:
            assert len(provider.index) == 1
        finally:
            await provider.disable()

    @pytest.mark.asyncio
    async def test_live_events_update_index(
        self, profile_dir, office_profile, write_profile
    ):
        source = ScriptedSource()
        provider = make_provider(profile_dir, source)
        await provider.enable()

        try:
            nas = write_profile("b.remmina", "[remmina]\nname=Home NAS\n")
            await source.push((Change.added, str(nas)))
            assert [s.name for s in provider.get_initial_result_set([])] == [
                "Office PC",
                "Home NAS",
            ]

            office_profile.unlink()
            await source.push((Change.deleted, str(office_profile)))
            assert [s.name for s in provider.get_initial_result_set([])] == [
                "Home NAS"
            ]
        finally:
            await provider.disable()

    @pytest.mark.asyncio
    async def test_disable_discards_sessions(self, profile_dir, office_profile):
        provider = make_provider(profile_dir)
        await provider.enable()

        await provider.disable()

        assert not provider.enabled
        assert len(provider.index) == 0

    @pytest.mark.asyncio
    async def test_enable_twice_is_noop(self, profile_dir, office_profile):
        provider = make_provider(profile_dir)
        await provider.enable()
        try:
            await provider.enable()
            assert len(provider.index) == 1
        finally:
            await provider.disable()

    @pytest.mark.asyncio
    async def test_disable_when_not_enabled(self, profile_dir):
        provider = make_provider(profile_dir)
        await provider.disable()
        assert not provider.enabled

    @pytest.mark.asyncio
    async def test_missing_directory_is_fatal(self, tmp_path):
        provider = make_provider(tmp_path / "missing")

        with pytest.raises(DirectoryUnavailable):
            await provider.enable()

        assert not provider.enabled

    @pytest.mark.asyncio
    async def test_enable_again_after_disable(
        self, profile_dir, office_profile
    ):
        provider = make_provider(profile_dir)
        await provider.enable()
        await provider.disable()

        await provider.enable()
        try:
            assert len(provider.index) == 1
        finally:
            await provider.disable()


class TestLoad:
    """Tests for one-shot loading."""

    def test_load_counts_sessions(
        self, profile_dir, office_profile, nas_profile
    ):
        provider = RemminaSearchProvider(profile_dir=profile_dir)
        assert provider.load() == 2
        assert len(provider.index) == 2
        assert not provider.enabled

    def test_load_missing_directory(self, tmp_path):
        provider = RemminaSearchProvider(profile_dir=tmp_path / "missing")
        with pytest.raises(DirectoryUnavailable):
            provider.load()

    def test_profile_dir_from_config(self, profile_dir, monkeypatch):
        monkeypatch.setenv("REMMINA_SEARCH_PROFILE_DIR", str(profile_dir))
        assert RemminaSearchProvider().profile_dir == profile_dir


class TestMatcherSelection:
    """Tests for the configured match mode."""

    def test_default_is_substring(self, monkeypatch):
        monkeypatch.delenv("REMMINA_SEARCH_MATCH_MODE", raising=False)
        provider = RemminaSearchProvider()
        assert isinstance(provider.index.matcher, SubstringMatcher)

    def test_regex_mode(self, monkeypatch):
        monkeypatch.setenv("REMMINA_SEARCH_MATCH_MODE", "regex")
        provider = RemminaSearchProvider()
        assert isinstance(provider.index.matcher, RegexMatcher)

    def test_explicit_matcher_wins(self, monkeypatch):
        monkeypatch.setenv("REMMINA_SEARCH_MATCH_MODE", "regex")
        provider = RemminaSearchProvider(matcher=SubstringMatcher())
        assert isinstance(provider.index.matcher, SubstringMatcher)


class TestHostContract:
    """Tests for the calls a search host makes."""

    @pytest.fixture
    def provider(self, profile_dir, office_profile, nas_profile):
        provider = RemminaSearchProvider(
            profile_dir=profile_dir, launcher=MagicMock(return_value=["x"])
        )
        provider.load()
        return provider

    def test_initial_result_set(self, provider):
        results = provider.get_initial_result_set(["rdp"])
        assert [s.name for s in results] == ["Office PC"]

    def test_initial_result_set_provider_name(self, provider):
        assert len(provider.get_initial_result_set(["remmina"])) == 2

    def test_subsearch_result_set(self, provider):
        prior = provider.get_initial_result_set(["o"])
        results = provider.get_subsearch_result_set(prior, ["o", "nas"])
        assert [s.name for s in results] == ["Home NAS"]

    def test_filter_results(self, provider):
        results = provider.get_initial_result_set([])
        assert provider.filter_results(results, 1) == results[:1]

    def test_result_metas(self, provider, office_profile):
        session = provider.get_session(str(office_profile))
        metas = provider.get_result_metas([session])
        assert metas[0]["label"] == "Office PC (RDP)"
        assert metas[0]["id"] == str(office_profile)
        assert metas[0]["emblem"] == "remmina-rdp"

    def test_get_session_unknown(self, provider):
        assert provider.get_session("/nowhere/x.remmina") is None

    def test_activate_result_launches(self, provider, nas_profile):
        session = provider.get_session(str(nas_profile))
        assert provider.activate_result(session) == ["x"]
        provider._launcher.assert_called_once_with(
            Session("Home NAS", "SFTP", nas_profile)
        )
