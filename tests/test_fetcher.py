"""Unit tests for template fetching (ngseed.fetcher)."""

from __future__ import annotations

from pathlib import Path

import pytest

from ngseed.errors import DestinationExistsError, FetchError
from ngseed.fetcher import TemplateFetcher


class TestTemplateFetcher:
    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_clones_into_destination(self, recording_runner, clone_hook, tmp_path: Path):
        runner = recording_runner(hooks={"git clone": clone_hook({"angular.json": "{}"})})
        dest = tmp_path / "demo"

        result = await TemplateFetcher(runner).fetch("https://example.com/tpl.git", dest)

        assert result == dest
        assert runner.commands == [f"git clone -- https://example.com/tpl.git {dest}"]
        assert (dest / "angular.json").exists()

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_dash_names_are_not_options(self, recording_runner, tmp_path: Path):
        runner = recording_runner()
        dest = tmp_path / "-demo"
        await TemplateFetcher(runner).fetch("-tpl", dest)
        assert runner.calls[0][0] == ["git", "clone", "--", "-tpl", str(dest)]

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_custom_git_executable(self, recording_runner, tmp_path: Path):
        runner = recording_runner()
        await TemplateFetcher(runner, git_executable="/usr/local/bin/git").fetch(
            "tpl", tmp_path / "demo"
        )
        assert runner.calls[0][0][0] == "/usr/local/bin/git"

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_existing_directory_rejected_without_clone(
        self, recording_runner, tmp_path: Path
    ):
        runner = recording_runner()
        dest = tmp_path / "demo"
        dest.mkdir()
        (dest / "keep.txt").write_text("mine", encoding="utf-8")

        with pytest.raises(DestinationExistsError, match="demo already exists") as excinfo:
            await TemplateFetcher(runner).fetch("https://example.com/tpl.git", dest)

        assert runner.calls == []
        assert (dest / "keep.txt").read_text(encoding="utf-8") == "mine"
        assert excinfo.value.stage == "fetch"
        assert excinfo.value.path == dest

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_existing_file_rejected(self, recording_runner, tmp_path: Path):
        runner = recording_runner()
        dest = tmp_path / "demo"
        dest.write_text("not a dir", encoding="utf-8")

        with pytest.raises(DestinationExistsError):
            await TemplateFetcher(runner).fetch("tpl", dest)
        assert dest.read_text(encoding="utf-8") == "not a dir"
        assert runner.calls == []

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_clone_failure_raises_fetch_error(self, recording_runner, tmp_path: Path):
        runner = recording_runner(
            failures={"git clone": (128, "fatal: repository 'x' not found")}
        )
        with pytest.raises(FetchError, match="not found") as excinfo:
            await TemplateFetcher(runner).fetch("x", tmp_path / "demo")

        assert excinfo.value.command.startswith("git clone -- x")
        assert excinfo.value.stderr == "fatal: repository 'x' not found"
        assert excinfo.value.stage == "fetch"

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_partial_clone_removed_on_failure(
        self, recording_runner, clone_hook, tmp_path: Path
    ):
        runner = recording_runner(
            hooks={"git clone": clone_hook({"half.txt": "x"})},
            failures={"git clone": (128, "fatal: early EOF")},
        )
        dest = tmp_path / "demo"
        with pytest.raises(FetchError):
            await TemplateFetcher(runner).fetch("x", dest)
        assert not dest.exists()
