"""Template validation: make sure the clone is an Angular workspace."""

from __future__ import annotations

import shutil
from pathlib import Path

from ngseed.errors import InvalidTemplateError
from ngseed.utils import console


class TemplateValidator:
    """Checks a fetched template for its marker file.

    A template without the marker is deleted before the error is raised, so
    a failed validation never leaves a half-provisioned directory behind.
    """

    def __init__(self, marker_file: str = "angular.json") -> None:
        self.marker_file = marker_file

    def validate(self, directory: str | Path) -> Path:
        """Return ``directory`` if it contains the marker file.

        Raises:
            InvalidTemplateError: After removing ``directory`` entirely.
        """
        root = Path(directory)
        if (root / self.marker_file).is_file():
            console.print(f"  [green]+[/green] Found {self.marker_file}")
            return root

        shutil.rmtree(root, ignore_errors=True)
        if root.exists():
            raise InvalidTemplateError(
                f"Boilerplate is not an Angular project (no {self.marker_file}) "
                f"and {root} could not be removed.",
                stage="validate",
                path=root,
            )
        raise InvalidTemplateError(
            f"Boilerplate is not an Angular project: {self.marker_file} not found "
            f"in {root.name}. The cloned directory was removed.",
            stage="validate",
            path=root,
        )
