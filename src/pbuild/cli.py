"""Shared CLI utilities for pbuild commands.

Provides common Typer options, config/profile loading helpers, and
standardised output / error helpers so that every command reports
schema and profile errors the same way.

Usage in a command::

    import typer
    from pbuild.cli import JsonOption, RootOption, error_exit, load_profile_or_exit

    app = typer.Typer()

    @app.callback(invoke_without_command=True)
    def main(profile: str, root: Path | None = RootOption, json_output: bool = JsonOption):
        cfg, prof = load_profile_or_exit(profile, root, json_mode=json_output)
        ...
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, NoReturn

import typer
from rich.console import Console
from rich.markup import escape

from pbuild.config import ProjectConfig, load_config
from pbuild.errors import PbuildError
from pbuild.profile import Profile

# Re-usable Typer options
RootOption: Path | None = typer.Option(
    None,
    "--root",
    "-C",
    help="Project root containing pbuild/ (default: search upward from cwd).",
)

JsonOption: bool = typer.Option(False, "--json", help="Output results as JSON.")


# ---------------------------------------------------------------------------
# Standardised output helpers
# ---------------------------------------------------------------------------

_err_console = Console(stderr=True)


def error_exit(msg: str, *, json_mode: bool = False, code: int = 1) -> NoReturn:
    """Print *msg* as an error and ``raise typer.Exit(code)``."""
    if json_mode:
        print(json.dumps({"error": msg}, indent=2))
    else:
        _err_console.print(f"[red bold]error:[/red bold] {escape(msg)}")
    raise typer.Exit(code=code)


def json_print(data: dict[str, Any] | list[Any]) -> None:
    """Print *data* as pretty-printed JSON to stdout."""
    print(json.dumps(data, indent=2))


def _describe(exc: Exception) -> str:
    # KeyError wraps its message in quotes when str()'d
    if isinstance(exc, KeyError) and exc.args:
        return str(exc.args[0])
    return str(exc)


# ---------------------------------------------------------------------------
# Loading helpers
# ---------------------------------------------------------------------------


def get_config(root: Path | None = None, *, json_mode: bool = False) -> ProjectConfig:
    """Load the project config, exiting with an error if there is none."""
    try:
        return load_config(root)
    except (FileNotFoundError, KeyError, PbuildError) as exc:
        error_exit(_describe(exc), json_mode=json_mode)


def load_profile_or_exit(
    name: str,
    root: Path | None = None,
    *,
    json_mode: bool = False,
    check_dependencies: bool = False,
) -> tuple[ProjectConfig, Profile]:
    """Load the project, its main schema, and the profile *name*."""
    cfg = get_config(root, json_mode=json_mode)
    try:
        profile = cfg.load_profile(name, check_dependencies=check_dependencies)
    except PbuildError as exc:
        error_exit(str(exc), json_mode=json_mode)
    return cfg, profile
