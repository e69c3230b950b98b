"""Dependency installation for the freshly provisioned project."""

from __future__ import annotations

from pathlib import Path

from rich.markup import escape

from ngseed.config import InstallConfig
from ngseed.errors import DependencyInstallError
from ngseed.runner import CommandResult, CommandRunner
from ngseed.utils import console


class DependencyInstaller:
    """Runs install, framework update and general update, in that order."""

    def __init__(self, runner: CommandRunner, install: InstallConfig | None = None) -> None:
        self.runner = runner
        self.install_config = install or InstallConfig()

    @property
    def commands(self) -> list[list[str]]:
        return [
            self.install_config.install_command,
            self.install_config.framework_update_command,
            self.install_config.update_command,
        ]

    async def install(self, project_dir: str | Path) -> list[CommandResult]:
        """Run every install command inside ``project_dir``.

        Raises:
            DependencyInstallError: On the first non-zero exit; the remaining
                commands are not run.
        """
        root = Path(project_dir)
        results: list[CommandResult] = []
        for args in self.commands:
            console.print(f"  Running [bold]{escape(' '.join(args))}[/bold]...")
            result = await self.runner.run(list(args), cwd=root)
            results.append(result)
            if not result.ok:
                raise DependencyInstallError(
                    f"'{result.command}' failed in {root.name} "
                    f"(exit {result.returncode}): {result.stderr}",
                    command=result.command,
                    stderr=result.stderr,
                    stage="install",
                    path=root,
                )
        return results
