"""Shared pytest fixtures for the ngseed test suite.

Provides reusable fixtures for:
- A recording fake ``CommandRunner`` (no processes are started)
- A runner that executes git for real but fakes the package manager
- Local git repositories acting as valid / invalid Angular boilerplates
- Mock asyncio subprocess helpers
"""

from __future__ import annotations

import json
import subprocess
from collections.abc import Callable
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import pytest

from ngseed.config import InstallConfig, LintConfig, ScaffoldConfig
from ngseed.runner import CommandResult, SubprocessRunner


# ---------------------------------------------------------------------------
# Fake command runners
# ---------------------------------------------------------------------------


Hook = Callable[[list[str], "Path | None"], None]


class RecordingRunner:
    """Records every invocation and answers from a table of canned failures.

    ``failures`` maps a command prefix (``"npm update"``) to
    ``(returncode, stderr)``; ``hooks`` maps a prefix to a callable run
    before the result is returned (e.g. to create the clone directory).
    Anything not listed succeeds.
    """

    def __init__(
        self,
        failures: dict[str, tuple[int, str]] | None = None,
        hooks: dict[str, Hook] | None = None,
    ) -> None:
        self.failures = failures or {}
        self.hooks = hooks or {}
        self.calls: list[tuple[list[str], Path | None]] = []

    @property
    def commands(self) -> list[str]:
        return [" ".join(args) for args, _ in self.calls]

    async def run(self, args: list[str], cwd: Path | None = None) -> CommandResult:
        self.calls.append((list(args), cwd))
        line = " ".join(args)
        for prefix, hook in self.hooks.items():
            if line.startswith(prefix):
                hook(list(args), cwd)
        for prefix, (code, stderr) in self.failures.items():
            if line.startswith(prefix):
                return CommandResult(args=list(args), returncode=code, stderr=stderr, cwd=cwd)
        return CommandResult(args=list(args), returncode=0, cwd=cwd)


class GitOnlyRunner(RecordingRunner):
    """Runs git for real, records everything, fakes every other executable."""

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._real = SubprocessRunner(timeout=60)

    async def run(self, args: list[str], cwd: Path | None = None) -> CommandResult:
        if args and args[0] == "git":
            self.calls.append((list(args), cwd))
            return await self._real.run(args, cwd=cwd)
        return await super().run(args, cwd=cwd)


@pytest.fixture
def recording_runner() -> Callable[..., RecordingRunner]:
    """Factory for ``RecordingRunner`` instances.

    Usage:
        def test_x(recording_runner):
            runner = recording_runner(failures={"npm update": (1, "boom")})
    """
    return RecordingRunner


@pytest.fixture
def git_only_runner() -> GitOnlyRunner:
    return GitOnlyRunner()


def fake_clone(files: dict[str, str]) -> Hook:
    """Hook for ``git clone`` that materialises ``files`` in the destination."""

    def _hook(args: list[str], cwd: Path | None) -> None:
        destination = Path(args[-1])
        for relative, content in files.items():
            target = destination / relative
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(content, encoding="utf-8")
        (destination / ".git").mkdir(exist_ok=True)

    return _hook


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------


@pytest.fixture
def scaffold_config() -> ScaffoldConfig:
    """Config using the default tokens but an explicit fixture template URL."""
    return ScaffoldConfig(
        template_url="https://example.invalid/ng-boilerplate.git",
        lint=LintConfig(
            config_file="tslint.json",
            base_package="tslint-config-airbnb",
            base_config={"extends": ["tslint-config-airbnb"], "rules": {"semicolon": True}},
        ),
        install=InstallConfig(),
    )


# ---------------------------------------------------------------------------
# Git fixture repositories
# ---------------------------------------------------------------------------


@pytest.fixture
def git_identity(monkeypatch: pytest.MonkeyPatch) -> None:
    """Give git a commit identity and disable signing for this test."""
    monkeypatch.setenv("GIT_AUTHOR_NAME", "ngseed Test")
    monkeypatch.setenv("GIT_AUTHOR_EMAIL", "test@ngseed.local")
    monkeypatch.setenv("GIT_COMMITTER_NAME", "ngseed Test")
    monkeypatch.setenv("GIT_COMMITTER_EMAIL", "test@ngseed.local")
    monkeypatch.setenv("GIT_CONFIG_COUNT", "1")
    monkeypatch.setenv("GIT_CONFIG_KEY_0", "commit.gpgsign")
    monkeypatch.setenv("GIT_CONFIG_VALUE_0", "false")


def _make_repo(repo_dir: Path, files: dict[str, str]) -> Path:
    repo_dir.mkdir(parents=True)
    for relative, content in files.items():
        target = repo_dir / relative
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(content, encoding="utf-8")
    subprocess.run(["git", "init"], cwd=repo_dir, check=True, capture_output=True)
    subprocess.run(["git", "add", "-A"], cwd=repo_dir, check=True, capture_output=True)
    subprocess.run(
        ["git", "commit", "-m", "Boilerplate commit 1"],
        cwd=repo_dir, check=True, capture_output=True,
    )
    (repo_dir / "CHANGELOG.md").write_text("- history\n", encoding="utf-8")
    subprocess.run(["git", "add", "-A"], cwd=repo_dir, check=True, capture_output=True)
    subprocess.run(
        ["git", "commit", "-m", "Boilerplate commit 2"],
        cwd=repo_dir, check=True, capture_output=True,
    )
    return repo_dir


TEMPLATE_FILES: dict[str, str] = {
    "angular.json": json.dumps({"version": 1, "projects": {"APP_NAME": {"prefix": "APP_PREFIX"}}}),
    "tslint.json": json.dumps({"rules": {"semicolon": False, "quotemark": [True, "single"]}}),
    "README.md": "APP_NAME says APP_PREFIX\n",
    "src/app/app.component.ts": "@Component({ selector: 'APP_PREFIX-root' })\n",
}


@pytest.fixture
def template_repo(tmp_path: Path, git_identity: None) -> Path:
    """Real git repository that is a valid (Angular) boilerplate with two commits."""
    return _make_repo(tmp_path / "fixtures" / "valid-template", TEMPLATE_FILES)


@pytest.fixture
def invalid_template_repo(tmp_path: Path, git_identity: None) -> Path:
    """Real git repository without ``angular.json``."""
    files = {k: v for k, v in TEMPLATE_FILES.items() if k != "angular.json"}
    return _make_repo(tmp_path / "fixtures" / "invalid-template", files)


@pytest.fixture
def workspace(tmp_path: Path) -> Path:
    """Empty parent directory in which projects are created."""
    path = tmp_path / "workspace"
    path.mkdir()
    return path


# ---------------------------------------------------------------------------
# Mock subprocess
# ---------------------------------------------------------------------------


@pytest.fixture
def mock_subprocess():
    """Mock asyncio subprocess for testing command execution.

    Returns a factory that creates mock subprocess instances with configurable
    stdout, stderr, and return codes.

    Usage:
        def test_command(mock_subprocess):
            proc = mock_subprocess(stdout="output", returncode=0)
            with patch("asyncio.create_subprocess_exec", return_value=proc):
                ...
    """
    def factory(
        stdout: str = "",
        stderr: str = "",
        returncode: int = 0,
    ) -> AsyncMock:
        mock_proc = AsyncMock()
        mock_proc.communicate = AsyncMock(
            return_value=(stdout.encode("utf-8"), stderr.encode("utf-8"))
        )
        mock_proc.returncode = returncode
        mock_proc.pid = 99999
        mock_proc.kill = MagicMock()
        mock_proc.wait = AsyncMock(return_value=returncode)
        return mock_proc

    return factory


@pytest.fixture
def clone_hook() -> Callable[[dict[str, str]], Hook]:
    """Factory for ``git clone`` hooks that write the given files."""
    return fake_clone
