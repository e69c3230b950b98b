"""Template fetching: clone the boilerplate repository."""

from __future__ import annotations

import shutil
from pathlib import Path

from rich.markup import escape

from ngseed.errors import DestinationExistsError, FetchError
from ngseed.runner import CommandRunner
from ngseed.utils import console


class TemplateFetcher:
    """Clones a template repository into a fresh directory.

    Never overwrites: an occupied destination is rejected before git is
    started.
    """

    def __init__(self, runner: CommandRunner, git_executable: str = "git") -> None:
        self.runner = runner
        self.git_executable = git_executable

    async def fetch(self, source: str, destination: str | Path) -> Path:
        """Clone ``source`` into ``destination``.

        Args:
            source: Any URI or path ``git clone`` accepts.
            destination: Directory to create. Must not exist.

        Returns:
            The destination path.

        Raises:
            DestinationExistsError: If ``destination`` already exists.
            FetchError: If ``git clone`` exits non-zero.
        """
        dest = Path(destination)
        if dest.exists() or dest.is_symlink():
            raise DestinationExistsError(
                f"Folder {dest.name} already exists at {dest.parent}.",
                stage="fetch",
                path=dest,
            )

        console.print(
            f"  Cloning [bold]{escape(source)}[/bold] into [green]{escape(dest.name)}[/green]..."
        )
        result = await self.runner.run(
            [self.git_executable, "clone", "--", source, str(dest)]
        )
        if not result.ok:
            # The directory did not exist before the clone, anything here is ours.
            if dest.exists():
                shutil.rmtree(dest, ignore_errors=True)
            raise FetchError(
                f"Could not clone {source} (exit {result.returncode}): {result.stderr}",
                command=result.command,
                stderr=result.stderr,
                stage="fetch",
                path=dest,
            )

        return dest
