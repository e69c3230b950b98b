"""Replace the template's git history with a fresh repository."""

from __future__ import annotations

import shutil
from pathlib import Path

from rich.markup import escape

from ngseed.errors import GitInitError
from ngseed.runner import CommandRunner
from ngseed.utils import console


class GitInitializer:
    """Drops the cloned ``.git`` and records a single initial commit."""

    def __init__(self, runner: CommandRunner, git_executable: str = "git") -> None:
        self.runner = runner
        self.git_executable = git_executable

    async def _git(self, *args: str, cwd: Path) -> None:
        result = await self.runner.run([self.git_executable, *args], cwd=cwd)
        if not result.ok:
            raise GitInitError(
                f"Git command failed (exit {result.returncode}): {result.command}\n"
                f"{result.stderr}",
                command=result.command,
                stderr=result.stderr,
                stage="git",
                path=cwd,
            )

    def remove_history(self, project_dir: Path) -> None:
        """Delete the inherited ``.git`` directory (or gitlink file)."""
        git_path = project_dir / ".git"
        try:
            if git_path.is_dir() and not git_path.is_symlink():
                shutil.rmtree(git_path)
            elif git_path.exists() or git_path.is_symlink():
                git_path.unlink()
        except OSError as exc:
            raise GitInitError(
                f"Could not remove template history at {git_path}: {exc}",
                stage="git",
                path=git_path,
            ) from exc

    async def initialize(self, project_dir: str | Path, message: str = "Initial commit") -> None:
        """Start a new repository in ``project_dir`` with one commit.

        Raises:
            GitInitError: If any git command exits non-zero.
        """
        root = Path(project_dir)
        self.remove_history(root)
        await self._git("init", cwd=root)
        await self._git("add", "-A", cwd=root)
        await self._git("commit", "-m", message, cwd=root)
        console.print(f"  [green]+[/green] Fresh repository with commit '{escape(message)}'")
