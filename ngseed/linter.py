"""Lint configuration: install the shared base config and merge it in."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from ngseed.config import LintConfig
from ngseed.errors import DependencyInstallError, InvalidLintConfigError, MissingLintConfigError
from ngseed.runner import CommandRunner
from ngseed.utils import console, dump_json, load_json


def merge_lint_config(base: dict[str, Any], project: dict[str, Any]) -> dict[str, Any]:
    """Shallow-merge ``project`` over ``base``; the project's keys win."""
    return {**base, **project}


class LintConfigurator:
    """Merges a fixed base lint configuration into a project's lint file.

    The base package is installed as a dev dependency first so the
    ``extends`` entry in the merged file resolves. An install failure is fatal.
    """

    def __init__(
        self,
        runner: CommandRunner,
        lint: LintConfig | None = None,
        dev_install_command: list[str] | None = None,
    ) -> None:
        self.runner = runner
        self.lint = lint or LintConfig()
        self.dev_install_command = dev_install_command or ["npm", "install", "--save-dev"]

    async def configure(self, project_dir: str | Path) -> dict[str, Any]:
        """Install the base package and rewrite the project's lint file.

        Returns:
            The merged configuration that was written.

        Raises:
            MissingLintConfigError: The lint file does not exist.
            DependencyInstallError: The base package could not be installed.
            InvalidLintConfigError: The lint file is not a UTF-8 JSON object,
                or it could not be read or written.
        """
        root = Path(project_dir)
        config_path = root / self.lint.config_file
        if not config_path.is_file():
            raise MissingLintConfigError(
                f"Lint configuration {self.lint.config_file} not found in {root.name}.",
                stage="lint",
                path=config_path,
            )

        args = [*self.dev_install_command, self.lint.base_package]
        console.print(f"  Installing [bold]{self.lint.base_package}[/bold]...")
        result = await self.runner.run(args, cwd=root)
        if not result.ok:
            raise DependencyInstallError(
                f"Could not install {self.lint.base_package} "
                f"(exit {result.returncode}): {result.stderr}",
                command=result.command,
                stderr=result.stderr,
                stage="lint",
                path=root,
            )

        try:
            project_config = load_json(config_path)
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            raise InvalidLintConfigError(
                f"{self.lint.config_file} is not valid JSON: {exc}",
                stage="lint",
                path=config_path,
            ) from exc
        except OSError as exc:
            raise InvalidLintConfigError(
                f"{self.lint.config_file} could not be read: {exc.strerror or exc}",
                stage="lint",
                path=config_path,
            ) from exc
        if not isinstance(project_config, dict):
            raise InvalidLintConfigError(
                f"{self.lint.config_file} must contain a JSON object, "
                f"got {type(project_config).__name__}.",
                stage="lint",
                path=config_path,
            )

        merged = merge_lint_config(self.lint.base_config, project_config)
        try:
            dump_json(merged, config_path)
        except OSError as exc:
            raise InvalidLintConfigError(
                f"{self.lint.config_file} could not be written: {exc.strerror or exc}",
                stage="lint",
                path=config_path,
            ) from exc
        console.print(f"  [green]+[/green] Merged base config into {self.lint.config_file}")
        return merged
