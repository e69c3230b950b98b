"""Command-line entry point for ngseed.

Usage::

    ngseed --name demo --prefix dm
    ngseed -n demo -p dm -t https://example.com/boilerplate.git --no-linter
    python -m ngseed -n demo -p dm -d ./projects -m "chore: scaffold"
"""

from __future__ import annotations

import argparse
import asyncio
import json
from collections.abc import Sequence
from pathlib import Path

import yaml
from pydantic import ValidationError

from ngseed import __version__
from ngseed.config import ProjectParams, ScaffoldConfig
from ngseed.errors import UsageError
from ngseed.pipeline import Pipeline
from ngseed.runner import CommandRunner
from ngseed.utils import console, err_console, print_error


class _ArgumentParser(argparse.ArgumentParser):
    """``ArgumentParser`` that raises ``UsageError`` instead of exiting with 2."""

    def error(self, message: str) -> None:  # type: ignore[override]
        raise UsageError(message, stage="resolve")


def build_parser() -> argparse.ArgumentParser:
    parser = _ArgumentParser(
        prog="ngseed",
        description="Scaffold a new Angular project from a git boilerplate.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  ngseed --name demo --prefix dm\n"
            "  ngseed -n demo -p dm -t git@github.com:acme/ng-boilerplate.git\n"
            "  ngseed -n demo -p dm --no-linter -m 'chore: scaffold'\n"
        ),
    )
    parser.add_argument("--name", "-n", help="Project name, also the directory name (required)")
    parser.add_argument(
        "--prefix", "-p",
        help="Component prefix substituted into the template (required)",
    )
    parser.add_argument(
        "--template", "-t",
        default=None,
        help="Boilerplate repository to clone (default: configured template URL)",
    )
    parser.add_argument(
        "--no-linter",
        dest="lint_enabled",
        action="store_false",
        help="Skip merging the base lint configuration",
    )
    parser.add_argument(
        "--directory", "-d",
        default=None,
        help="Parent directory for the new project (default: current directory)",
    )
    parser.add_argument(
        "--message", "-m",
        default=None,
        help="Message for the initial commit",
    )
    parser.add_argument(
        "--config", "-c",
        default=None,
        help="JSON or YAML file overriding the default configuration",
    )
    parser.add_argument(
        "--quiet", "-q",
        action="store_true",
        help="Only print errors",
    )
    parser.add_argument(
        "--version",
        action="store_true",
        help="Print the ngseed version and exit",
    )
    return parser


def load_config(path: str | None) -> ScaffoldConfig:
    """Load ``path`` if given, otherwise read defaults and env overrides."""
    if path is None:
        try:
            return ScaffoldConfig.from_env()
        except ValueError as exc:
            raise UsageError(f"Invalid NGSEED_* environment: {exc}", stage="resolve") from exc
    try:
        return ScaffoldConfig.load(Path(path))
    except FileNotFoundError as exc:
        raise UsageError(f"Config file not found: {path}", stage="resolve") from exc
    except (json.JSONDecodeError, yaml.YAMLError, ValidationError) as exc:
        raise UsageError(f"Invalid config file {path}: {exc}", stage="resolve") from exc


def params_from_args(args: argparse.Namespace, config: ScaffoldConfig) -> ProjectParams:
    """Merge parsed flags over ``config`` into a frozen ``ProjectParams``."""
    required = (("--name", args.name), ("--prefix", args.prefix))
    missing = [flag for flag, value in required if not value]
    if missing:
        raise UsageError(
            f"the following arguments are required: {', '.join(missing)}", stage="resolve"
        )

    fields: dict[str, object] = {
        "name": args.name,
        "prefix": args.prefix,
        "template": args.template or config.template_url,
        "lint_enabled": args.lint_enabled,
        "commit_message": args.message,
    }
    if args.directory:
        fields["parent_dir"] = Path(args.directory)
    return ProjectParams.build(**fields)


def resolve_params(argv: Sequence[str], config: ScaffoldConfig) -> ProjectParams:
    """Parse ``argv`` into ``ProjectParams``. Touches neither disk nor network.

    Raises:
        UsageError: On missing, unknown or invalid arguments.
    """
    return params_from_args(build_parser().parse_args(list(argv)), config)


def main(argv: Sequence[str] | None = None, runner: CommandRunner | None = None) -> int:
    """Run ngseed and return the process exit code (0 success, 1 failure).

    ``runner`` replaces the subprocess runner, mainly for tests.
    """
    parser = build_parser()
    try:
        args = parser.parse_args(list(argv) if argv is not None else None)
        if args.version:
            console.print(f"ngseed {__version__}", highlight=False)
            return 0
        config = load_config(args.config)
        params = params_from_args(args, config)
    except UsageError as exc:
        err_console.print(parser.format_usage().rstrip(), highlight=False, markup=False)
        print_error(f"UsageError: {exc}")
        return 1

    previous_quiet = console.quiet
    console.quiet = args.quiet
    try:
        result = asyncio.run(Pipeline(config, runner).run(params))
    finally:
        console.quiet = previous_quiet

    return 0 if result.success else 1


def run() -> None:
    """Console-script entry point."""
    raise SystemExit(main())
