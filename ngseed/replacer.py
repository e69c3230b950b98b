"""Token replacement across the cloned project tree.

Substitution passes are literal, global and strictly ordered: pass N+1 only
starts once pass N has been applied to every file, so a value inserted by an
earlier pass is visible to the later ones. Files are rewritten one at a time
off the event loop.
"""

from __future__ import annotations

import asyncio
import os
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from pathlib import Path

from rich.markup import escape

from ngseed.errors import PartialRewriteError
from ngseed.utils import console

CHANGED = "changed"
UNCHANGED = "unchanged"
SKIPPED = "skipped"


@dataclass
class PassReport:
    """What one substitution pass did to each file."""

    token: str
    value: str
    changed: list[Path] = field(default_factory=list)
    unchanged: list[Path] = field(default_factory=list)
    skipped: list[Path] = field(default_factory=list)
    failed: dict[Path, str] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.failed

    @property
    def total(self) -> int:
        return len(self.changed) + len(self.unchanged) + len(self.skipped) + len(self.failed)


def _rewrite_file(path: Path, token: str, value: str) -> str:
    """Replace every occurrence of ``token`` in one file.

    Returns one of ``CHANGED``, ``UNCHANGED`` or ``SKIPPED`` (not UTF-8 text).
    I/O errors propagate to the caller.
    """
    raw = path.read_bytes()
    try:
        text = raw.decode("utf-8")
    except UnicodeDecodeError:
        return SKIPPED
    if token not in text:
        return UNCHANGED
    path.write_bytes(text.replace(token, value).encode("utf-8"))
    return CHANGED


class TokenReplacer:
    """Applies ordered placeholder substitutions to every file under a root.

    ``ignored_paths`` entries with a single segment (``node_modules``) are
    skipped at any depth; entries with several segments (``dist/assets``) are
    matched from the root.
    """

    def __init__(self, ignored_paths: Iterable[str] = ("node_modules", ".git")) -> None:
        self.ignored: list[tuple[str, ...]] = [
            Path(entry).parts for entry in ignored_paths if entry.strip()
        ]

    def is_ignored(self, relative: Path) -> bool:
        parts = relative.parts
        for ignored in self.ignored:
            if len(ignored) == 1:
                if ignored[0] in parts:
                    return True
            elif parts[: len(ignored)] == ignored:
                return True
        return False

    def iter_files(self, root: str | Path) -> list[Path]:
        """All regular, non-ignored files under ``root`` in a stable order."""
        base = Path(root)
        files: list[Path] = []
        for dirpath, dirnames, filenames in os.walk(base, followlinks=False):
            current = Path(dirpath)
            dirnames[:] = [
                d for d in dirnames if not self.is_ignored((current / d).relative_to(base))
            ]
            for filename in filenames:
                file_path = current / filename
                if file_path.is_symlink() or not file_path.is_file():
                    continue
                if self.is_ignored(file_path.relative_to(base)):
                    continue
                files.append(file_path)
        return sorted(files)

    async def replace_pass(self, root: str | Path, token: str, value: str) -> PassReport:
        """Run one substitution over the whole tree and report per-file outcome."""
        report = PassReport(token=token, value=value)
        files = await asyncio.to_thread(self.iter_files, root)
        for file_path in files:
            try:
                outcome = await asyncio.to_thread(_rewrite_file, file_path, token, value)
            except OSError as exc:
                report.failed[file_path] = exc.strerror or str(exc)
                continue
            getattr(report, outcome).append(file_path)
        return report

    async def replace_tokens(
        self,
        root: str | Path,
        substitutions: Sequence[tuple[str, str]],
    ) -> list[PassReport]:
        """Apply ``substitutions`` in order, each pass over the entire tree.

        Raises:
            PartialRewriteError: As soon as a pass has failed files; later
                passes are not started. Carries every report produced so far.
        """
        reports: list[PassReport] = []
        for token, value in substitutions:
            report = await self.replace_pass(root, token, value)
            reports.append(report)
            if not report.ok:
                raise PartialRewriteError(reports, stage="rewrite", path=Path(root))
            console.print(
                f"  [green]+[/green] {escape(token)} -> [bold]{escape(value)}[/bold] "
                f"({len(report.changed)} file(s) rewritten)"
            )
        return reports
