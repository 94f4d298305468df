"""Initialize pbuild in a cargo project.

Usage:
    pbuild init [--name NAME] [--bin BIN]
"""

from __future__ import annotations

from pathlib import Path

import tomlkit
import typer

from pbuild.cli import error_exit
from pbuild.config import (
    DEFAULT_CARGO,
    DEFAULT_CARGO_SUBCOMMAND,
    DEFAULT_MAIN_SPEC,
    PBUILD_DIR,
    PROFILES_DIR,
    SETTINGS_FILE,
    SPECS_DIR,
)

DEFAULT_PROFILE = "default"

app = typer.Typer(
    help="Initialize pbuild in a cargo project.",
    rich_markup_mode="rich",
    epilog="""\
[bold]Examples:[/bold]

pbuild init                                 Schema named after the current directory

pbuild init --name firmware --bin app       Name the schema and the profile's binary

[bold]What it creates:[/bold]

pbuild/pbuild.toml              Settings (main schema, cargo command)

pbuild/specs/main.toml          Example schema with a single-valued and a multi-valued type

pbuild/profiles/default.toml    Example profile selecting fields from both types""",
)


# ---------------------------------------------------------------------------
# Document templates
# ---------------------------------------------------------------------------


def _inline(**items: object) -> tomlkit.items.InlineTable:
    t = tomlkit.inline_table()
    t.update(items)
    return t


def _field(description: str, **extra: object) -> tomlkit.items.Table:
    t = tomlkit.table()
    t.add("description", description)
    for k, v in extra.items():
        t.add(k, v)
    return t


def settings_document() -> tomlkit.TOMLDocument:
    doc = tomlkit.document()
    t = tomlkit.table()
    t.add("main_spec", DEFAULT_MAIN_SPEC)
    t["main_spec"].comment("stem of the schema in specs/ that profiles are checked against")
    t.add("cargo", DEFAULT_CARGO)
    t.add("cargo_subcommand", DEFAULT_CARGO_SUBCOMMAND)
    doc.add("pbuild", t)
    return doc


def spec_document(name: str) -> tomlkit.TOMLDocument:
    """Example schema: a single-valued ``target`` and a multi-valued ``feature``."""
    doc = tomlkit.document()
    doc.add(tomlkit.comment("Schema: declares the types (categories) and their fields."))

    spec = tomlkit.table()
    spec.add("name", name)
    types = tomlkit.table()
    types.add("target", _inline(key="target", single=True))
    types.add("features", "feature")
    spec.add("types", types)
    doc.add("spec", spec)

    target = tomlkit.table()
    target.add("linux", _field("Linux userspace"))
    target.add("windows", _field("Windows desktop"))
    doc.add("target", target)

    logging_props = tomlkit.table()
    logging_props.add("level", _inline(type="u8", default=1))
    features = tomlkit.table()
    features.add(
        "logging",
        _field(
            "Structured logging",
            dependencies=["target:linux OR target:windows"],
            properties=logging_props,
        ),
    )
    doc.add("features", features)
    return doc


def profile_document(bin_name: str) -> tomlkit.TOMLDocument:
    """Example profile for :func:`spec_document`."""
    doc = tomlkit.document()
    profile = tomlkit.table()
    profile.add("description", "Default configuration")
    profile.add("bins", [bin_name])
    profile.add("features", tomlkit.array())
    doc.add("profile", profile)

    config = tomlkit.table()
    config.add("target", "linux")
    config["target"].comment("select a field by type key")
    doc.add("config", config)

    features = tomlkit.table()
    features.add("logging", _inline(level=2))
    doc.add("features", features)
    return doc


# ---------------------------------------------------------------------------
# CLI
# ---------------------------------------------------------------------------


@app.callback(invoke_without_command=True)
def main(
    name: str | None = typer.Option(None, "--name", "-n", help="Schema name (default: cwd name)."),
    bin_name: str | None = typer.Option(
        None, "--bin", "-b", help="Binary built by the example profile (default: cwd name)."
    ),
) -> None:
    """
    Create a pbuild/ directory with settings, an example schema and profile.
    """
    cwd = Path.cwd()
    pbuild_dir = cwd / PBUILD_DIR
    if pbuild_dir.exists():
        error_exit(f"A {PBUILD_DIR}/ directory already exists in {cwd}")

    name = name or cwd.name
    bin_name = bin_name or cwd.name

    specs_dir = pbuild_dir / SPECS_DIR
    profiles_dir = pbuild_dir / PROFILES_DIR
    specs_dir.mkdir(parents=True)
    profiles_dir.mkdir()

    files = [
        (pbuild_dir / SETTINGS_FILE, settings_document()),
        (specs_dir / f"{DEFAULT_MAIN_SPEC}.toml", spec_document(name)),
        (profiles_dir / f"{DEFAULT_PROFILE}.toml", profile_document(bin_name)),
    ]
    for path, doc in files:
        path.write_text(tomlkit.dumps(doc), encoding="utf-8")
        typer.secho(f"Created {path.relative_to(cwd)}", fg=typer.colors.GREEN)

    typer.secho("\nInitialization complete! Next steps:", fg=typer.colors.CYAN, bold=True)
    typer.echo(f"1. Describe your types and fields in {PBUILD_DIR}/{SPECS_DIR}/main.toml")
    typer.echo(f"2. Run 'pbuild show {DEFAULT_PROFILE}' to check the example profile")
    typer.echo(f"3. Run 'pbuild build {DEFAULT_PROFILE}' to build with its cfg flags")


init = main
