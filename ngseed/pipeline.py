"""ngseed provisioning pipeline.

Drives the six sequential stages that turn a boilerplate repository into a
new project:

1. fetch     -- clone the template into ``<parent>/<name>``.
2. validate  -- require the marker file, removing the clone otherwise.
3. rewrite   -- replace the name placeholder, then the prefix placeholder.
4. lint      -- install and merge the base lint configuration (optional).
5. install   -- install and update dependencies.
6. git       -- drop the template history and commit once.

Each stage only runs after the previous one succeeded. Failures during fetch
and validate leave no project directory behind; later failures are reported
and the directory is kept for inspection.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Awaitable, Callable

from rich.markup import escape
from rich.panel import Panel

from ngseed.config import ProjectParams, ScaffoldConfig
from ngseed.errors import DestinationExistsError, ScaffoldError
from ngseed.fetcher import TemplateFetcher
from ngseed.git_init import GitInitializer
from ngseed.installer import DependencyInstaller
from ngseed.linter import LintConfigurator
from ngseed.replacer import PassReport, TokenReplacer
from ngseed.runner import CommandRunner, SubprocessRunner
from ngseed.utils import (
    STAGE_NAMES,
    console,
    format_duration,
    print_error,
    print_stage_header,
    print_success,
    print_summary_table,
    print_warning,
)
from ngseed.validator import TemplateValidator


class Stage(str, Enum):
    """Pipeline states. ``GIT_READY`` and ``FAILED`` are terminal."""

    START = "start"
    FETCHED = "fetched"
    VALIDATED = "validated"
    REWRITTEN = "rewritten"
    LINTED = "linted"
    DEPS_INSTALLED = "deps_installed"
    GIT_READY = "git_ready"
    FAILED = "failed"


# Stages whose failure leaves nothing on disk.
_CLEANED_UP_FROM = (Stage.START, Stage.FETCHED)


@dataclass
class PipelineResult:
    """Outcome of one pipeline run."""

    project_path: Path
    template: str
    stage: Stage = Stage.START
    last_completed: Stage = Stage.START
    failed_stage: str | None = None
    error: ScaffoldError | None = None
    lint_skipped: bool = False
    rewrite_reports: list[PassReport] = field(default_factory=list)
    durations: dict[str, float] = field(default_factory=dict)

    @property
    def success(self) -> bool:
        return self.stage is Stage.GIT_READY


StepFn = Callable[[ProjectParams, PipelineResult], Awaitable[None]]


class Pipeline:
    """ngseed pipeline driver.

    Attributes:
        config: Defaults and commands for every stage.
        runner: Executes git and package-manager commands.
    """

    def __init__(self, config: ScaffoldConfig, runner: CommandRunner | None = None) -> None:
        self.config = config
        self.runner = runner or SubprocessRunner(timeout=config.command_timeout)
        self.fetcher = TemplateFetcher(self.runner, config.git_executable)
        self.replacer = TokenReplacer(config.ignored_paths)
        self.linter = LintConfigurator(
            self.runner, config.lint, config.install.dev_install_command
        )
        self.installer = DependencyInstaller(self.runner, config.install)
        self.git = GitInitializer(self.runner, config.git_executable)
        self.validator = TemplateValidator(config.marker_file)

    # ------------------------------------------------------------------
    # Stages
    # ------------------------------------------------------------------

    async def _fetch(self, params: ProjectParams, result: PipelineResult) -> None:
        await self.fetcher.fetch(params.template, params.project_path)

    async def _validate(self, params: ProjectParams, result: PipelineResult) -> None:
        self.validator.validate(params.project_path)

    async def _rewrite(self, params: ProjectParams, result: PipelineResult) -> None:
        substitutions = [
            (self.config.name_placeholder, params.name),
            (self.config.prefix_placeholder, params.prefix),
        ]
        try:
            result.rewrite_reports = await self.replacer.replace_tokens(
                params.project_path, substitutions
            )
        except ScaffoldError as exc:
            result.rewrite_reports = list(getattr(exc, "reports", []))
            raise

    async def _lint(self, params: ProjectParams, result: PipelineResult) -> None:
        if not params.lint_enabled:
            result.lint_skipped = True
            console.print("  [dim]Linter configuration skipped (--no-linter).[/dim]")
            return
        await self.linter.configure(params.project_path)

    async def _install(self, params: ProjectParams, result: PipelineResult) -> None:
        await self.installer.install(params.project_path)

    async def _git(self, params: ProjectParams, result: PipelineResult) -> None:
        message = params.commit_message or self.config.commit_message
        await self.git.initialize(params.project_path, message)

    def _steps(self) -> list[tuple[str, Stage, StepFn]]:
        return [
            ("fetch", Stage.FETCHED, self._fetch),
            ("validate", Stage.VALIDATED, self._validate),
            ("rewrite", Stage.REWRITTEN, self._rewrite),
            ("lint", Stage.LINTED, self._lint),
            ("install", Stage.DEPS_INSTALLED, self._install),
            ("git", Stage.GIT_READY, self._git),
        ]

    # ------------------------------------------------------------------
    # Driver
    # ------------------------------------------------------------------

    async def run(self, params: ProjectParams) -> PipelineResult:
        """Execute every stage in order.

        ``ScaffoldError`` is caught, printed to stderr and recorded on the
        returned result; anything else propagates.
        """
        result = PipelineResult(project_path=params.project_path, template=params.template)
        pipeline_start = time.monotonic()

        console.print(
            Panel(
                f"[bold bright_cyan]ngseed[/bold bright_cyan]\n"
                f"Project  : {escape(params.name)}\n"
                f"Prefix   : {escape(params.prefix)}\n"
                f"Template : {escape(params.template)}\n"
                f"Root     : {escape(str(params.parent_dir.resolve()))}",
                title="[bold]Scaffold[/bold]",
                border_style="bright_cyan",
            )
        )

        for index, (name, reached, step) in enumerate(self._steps(), start=1):
            print_stage_header(index, name)
            stage_start = time.monotonic()
            try:
                await step(params, result)
            except ScaffoldError as exc:
                result.durations[name] = time.monotonic() - stage_start
                self._fail(result, name, exc)
                return result
            result.durations[name] = time.monotonic() - stage_start
            result.stage = result.last_completed = reached

        self._print_final_summary(params, result, time.monotonic() - pipeline_start)
        return result

    def _fail(self, result: PipelineResult, stage_name: str, exc: ScaffoldError) -> None:
        if exc.stage is None:
            exc.stage = stage_name
        result.failed_stage = stage_name
        result.error = exc
        result.stage = Stage.FAILED

        label = STAGE_NAMES.get(stage_name, stage_name)
        print_error(
            f"{type(exc).__name__} during '{label}' "
            f"[{result.project_path.name}]: {exc}"
        )
        if isinstance(exc, DestinationExistsError):
            return
        if result.last_completed in _CLEANED_UP_FROM:
            print_warning(
                f"No project directory was left at {escape(str(result.project_path))}."
            )
        else:
            print_warning(
                f"Project directory left at {escape(str(result.project_path))} for inspection; "
                f"completed stages were not rolled back."
            )

    def _print_final_summary(
        self, params: ProjectParams, result: PipelineResult, total_elapsed: float
    ) -> None:
        rewritten = sum(len(r.changed) for r in result.rewrite_reports)
        print_summary_table(
            {
                "Project": str(result.project_path),
                "Template": params.template,
                "Prefix": params.prefix,
                "Files rewritten": str(rewritten),
                "Linter": "skipped" if result.lint_skipped else "configured",
                "Elapsed": format_duration(total_elapsed),
            },
            title="Scaffold Results",
        )
        print_success(f"Project {escape(params.name)} is ready.")
