"""Exception hierarchy for the provisioning pipeline.

Every stage raises a distinct ``ScaffoldError`` subclass. The pipeline driver
catches ``ScaffoldError``, prints it with the failing stage and directory, and
turns it into a failed ``PipelineResult``; nothing else is retried or rolled
back apart from the cleanup done by the fetcher and validator.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ngseed.replacer import PassReport


class ScaffoldError(Exception):
    """Base class for every failure the pipeline knows how to report."""

    def __init__(
        self,
        message: str,
        stage: str | None = None,
        path: str | Path | None = None,
    ) -> None:
        self.stage = stage
        self.path = Path(path) if path is not None else None
        super().__init__(message)


class CommandFailedError(ScaffoldError):
    """Base for errors caused by an external command exiting non-zero."""

    def __init__(
        self,
        message: str,
        command: str = "",
        stderr: str = "",
        stage: str | None = None,
        path: str | Path | None = None,
    ) -> None:
        self.command = command
        self.stderr = stderr
        super().__init__(message, stage=stage, path=path)


class UsageError(ScaffoldError):
    """A required argument is missing or has an unusable value."""


class DestinationExistsError(ScaffoldError):
    """The target project directory is already occupied."""


class FetchError(CommandFailedError):
    """Cloning the template repository failed."""


class InvalidTemplateError(ScaffoldError):
    """The fetched template lacks the marker file. Raised after cleanup."""


class MissingLintConfigError(ScaffoldError):
    """The project has no lint configuration file to merge into."""


class InvalidLintConfigError(ScaffoldError):
    """The lint configuration file is not a JSON object."""


class DependencyInstallError(CommandFailedError):
    """A package-manager invocation exited non-zero."""


class GitInitError(CommandFailedError):
    """Re-initialising the project's git repository failed."""


class PartialRewriteError(ScaffoldError):
    """Some files could not be rewritten during a substitution pass."""

    def __init__(
        self,
        reports: list[PassReport],
        stage: str | None = None,
        path: str | Path | None = None,
    ) -> None:
        self.reports = reports
        failing = reports[-1]
        lines = [
            f"Token '{failing.token}' could not be replaced in "
            f"{len(failing.failed)} file(s) "
            f"({len(failing.changed)} rewritten, {len(failing.unchanged)} unchanged)."
        ]
        for file_path, reason in sorted(failing.failed.items()):
            lines.append(f"  {file_path}: {reason}")
        super().__init__("\n".join(lines), stage=stage, path=path)

    @property
    def failed_files(self) -> list[Path]:
        """Every file that failed in any pass."""
        return [p for report in self.reports for p in report.failed]

    @property
    def succeeded_files(self) -> list[Path]:
        """Every file that was rewritten in any pass."""
        return [p for report in self.reports for p in report.changed]
