"""ngseed configuration.

Typed configuration for the provisioning pipeline. ``ScaffoldConfig`` holds
every default the pipeline relies on (template URL, marker file, placeholder
tokens, lint and install commands) so tests can hand the driver a fixture
configuration instead of patching globals. ``ProjectParams`` is the frozen
parameter set produced once by the argument resolver.
"""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from ngseed.errors import UsageError

DEFAULT_TEMPLATE_URL = "https://github.com/ngseed/ng-boilerplate.git"


class LintConfig(BaseModel):
    """Where the lint configuration lives and what gets merged into it."""

    config_file: str = Field(default="tslint.json")
    base_package: str = Field(default="tslint-config-airbnb")
    base_config: dict[str, Any] = Field(
        default_factory=lambda: {
            "extends": ["tslint-config-airbnb"],
            "rulesDirectory": [],
            "rules": {},
        }
    )


class InstallConfig(BaseModel):
    """Package-manager invocations, all run inside the project directory."""

    install_command: list[str] = Field(default_factory=lambda: ["npm", "install"])
    framework_update_command: list[str] = Field(
        default_factory=lambda: ["npx", "ng", "update", "@angular/cli", "@angular/core"]
    )
    update_command: list[str] = Field(default_factory=lambda: ["npm", "update"])
    dev_install_command: list[str] = Field(
        default_factory=lambda: ["npm", "install", "--save-dev"],
        description="Prefix used to add a single dev dependency (package name is appended)",
    )

    @field_validator(
        "install_command",
        "framework_update_command",
        "update_command",
        "dev_install_command",
    )
    @classmethod
    def _non_empty(cls, value: list[str]) -> list[str]:
        if not value:
            raise ValueError("command must contain at least the executable")
        return value


class ScaffoldConfig(BaseModel):
    """Global ngseed configuration.

    Created once by the CLI (or a test) and passed to ``Pipeline``.
    """

    template_url: str = Field(default=DEFAULT_TEMPLATE_URL, min_length=1)
    marker_file: str = Field(default="angular.json", min_length=1)
    name_placeholder: str = Field(default="APP_NAME", min_length=1)
    prefix_placeholder: str = Field(default="APP_PREFIX", min_length=1)
    ignored_paths: list[str] = Field(default_factory=lambda: ["node_modules", ".git"])
    lint: LintConfig = Field(default_factory=LintConfig)
    install: InstallConfig = Field(default_factory=InstallConfig)
    git_executable: str = Field(default="git")
    commit_message: str = Field(default="Initial commit", min_length=1)
    command_timeout: int | None = Field(
        default=None, ge=1, description="Per-command timeout in seconds (None waits forever)"
    )

    # ------------------------------------------------------------------
    # Serialisation helpers
    # ------------------------------------------------------------------

    def save(self, path: Path) -> Path:
        """Persist the configuration as JSON and return the written path."""
        target = Path(path)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(self.model_dump_json(indent=2), encoding="utf-8")
        return target

    @classmethod
    def load(cls, path: str | Path) -> "ScaffoldConfig":
        """Load a configuration file.

        ``.yaml`` / ``.yml`` files are parsed with PyYAML, anything else as
        JSON. Missing keys fall back to their defaults.
        """
        file_path = Path(path)
        raw = file_path.read_text(encoding="utf-8")
        if file_path.suffix.lower() in (".yaml", ".yml"):
            data = yaml.safe_load(raw) or {}
        else:
            data = json.loads(raw)
        return cls.model_validate(data)

    @classmethod
    def from_env(cls) -> "ScaffoldConfig":
        """Build a ``ScaffoldConfig`` from environment variables.

        Recognised variables (all optional):
            NGSEED_TEMPLATE_URL, NGSEED_MARKER_FILE, NGSEED_NAME_PLACEHOLDER,
            NGSEED_PREFIX_PLACEHOLDER, NGSEED_LINT_FILE, NGSEED_LINT_PACKAGE,
            NGSEED_COMMIT_MESSAGE, NGSEED_COMMAND_TIMEOUT.
        """
        kwargs: dict[str, Any] = {}
        if os.environ.get("NGSEED_TEMPLATE_URL"):
            kwargs["template_url"] = os.environ["NGSEED_TEMPLATE_URL"]
        if os.environ.get("NGSEED_MARKER_FILE"):
            kwargs["marker_file"] = os.environ["NGSEED_MARKER_FILE"]
        if os.environ.get("NGSEED_NAME_PLACEHOLDER"):
            kwargs["name_placeholder"] = os.environ["NGSEED_NAME_PLACEHOLDER"]
        if os.environ.get("NGSEED_PREFIX_PLACEHOLDER"):
            kwargs["prefix_placeholder"] = os.environ["NGSEED_PREFIX_PLACEHOLDER"]
        if os.environ.get("NGSEED_COMMIT_MESSAGE"):
            kwargs["commit_message"] = os.environ["NGSEED_COMMIT_MESSAGE"]
        if os.environ.get("NGSEED_COMMAND_TIMEOUT"):
            kwargs["command_timeout"] = int(os.environ["NGSEED_COMMAND_TIMEOUT"])

        lint_kwargs: dict[str, Any] = {}
        if os.environ.get("NGSEED_LINT_FILE"):
            lint_kwargs["config_file"] = os.environ["NGSEED_LINT_FILE"]
        if os.environ.get("NGSEED_LINT_PACKAGE"):
            lint_kwargs["base_package"] = os.environ["NGSEED_LINT_PACKAGE"]

        return cls(lint=LintConfig(**lint_kwargs), **kwargs)


class ProjectParams(BaseModel):
    """Validated, immutable parameters for one scaffolding run."""

    model_config = ConfigDict(frozen=True)

    name: str
    prefix: str
    template: str = Field(default=DEFAULT_TEMPLATE_URL)
    lint_enabled: bool = True
    commit_message: str | None = None
    parent_dir: Path = Field(default_factory=Path.cwd)

    @field_validator("name")
    @classmethod
    def _check_name(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("project name must not be empty")
        if value in (".", "..") or "/" in value or "\\" in value:
            raise ValueError(f"project name '{value}' must be a single directory name")
        return value

    @field_validator("prefix")
    @classmethod
    def _check_prefix(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("prefix must not be empty")
        if any(ch.isspace() for ch in value):
            raise ValueError(f"prefix '{value}' must not contain whitespace")
        return value

    @property
    def project_path(self) -> Path:
        """Directory the project is cloned into."""
        return self.parent_dir / self.name

    @classmethod
    def build(cls, **kwargs: Any) -> "ProjectParams":
        """Construct params, turning validation failures into ``UsageError``."""
        try:
            return cls(**kwargs)
        except ValidationError as exc:
            problems = "; ".join(
                f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}"
                for err in exc.errors()
            )
            raise UsageError(f"Invalid arguments: {problems}", stage="resolve") from exc
