"""Command runner capability.

Every external process the pipeline starts (git, npm, npx) goes through a
``CommandRunner`` so tests can swap in a fake that records invocations
instead of shelling out.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Protocol, runtime_checkable

from ngseed.utils import run_command


@dataclass(frozen=True)
class CommandResult:
    """Outcome of a single external command."""

    args: list[str]
    returncode: int
    stdout: str = ""
    stderr: str = ""
    cwd: Path | None = field(default=None, compare=False)

    @property
    def ok(self) -> bool:
        return self.returncode == 0

    @property
    def command(self) -> str:
        """The command line as a single display string."""
        return " ".join(self.args)


@runtime_checkable
class CommandRunner(Protocol):
    """Anything that can run an argv list in a directory."""

    async def run(self, args: list[str], cwd: Path | None = None) -> CommandResult: ...


class SubprocessRunner:
    """Runs commands as real child processes via ``run_command``."""

    def __init__(self, timeout: int | None = None) -> None:
        self.timeout = timeout

    async def run(self, args: list[str], cwd: Path | None = None) -> CommandResult:
        returncode, stdout, stderr = await run_command(
            list(args), cwd=cwd, timeout=self.timeout
        )
        return CommandResult(
            args=list(args),
            returncode=returncode,
            stdout=stdout,
            stderr=stderr,
            cwd=cwd,
        )
