"""listing.py - List the schemas and profiles of a project."""

from pathlib import Path

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from pbuild.cli import JsonOption, RootOption, get_config, json_print
from pbuild.document import read_toml
from pbuild.errors import PbuildError
from pbuild.spec import Spec

app = typer.Typer(
    help="List schemas and profiles.",
    rich_markup_mode="rich",
    epilog="""\
[bold]Examples:[/bold]

pbuild list                         Schemas and profiles found under pbuild/

pbuild list --json                  Machine-readable listing""",
)


def _describe_spec(path: Path) -> str:
    try:
        spec = Spec.parse_path(path)
    except PbuildError as exc:
        return f"invalid: {exc}"
    return f"{spec.name} ({len(spec.types)} types)"


def _describe_profile(path: Path) -> str:
    # only the [profile] header; full validation is `pbuild check`
    try:
        section = read_toml(path).get("profile", {})
    except PbuildError as exc:
        return f"invalid: {exc}"
    description = section.get("description") if isinstance(section, dict) else None
    return description if isinstance(description, str) else ""


@app.callback(invoke_without_command=True)
def main(
    root: Path | None = RootOption,
    json_output: bool = JsonOption,
) -> None:
    """List the schemas in pbuild/specs/ and the profiles in pbuild/profiles/."""
    cfg = get_config(root, json_mode=json_output)

    specs = [
        {"name": s, "main": s == cfg.main_spec, "summary": _describe_spec(cfg.spec_path(s))}
        for s in cfg.all_specs
    ]
    profiles = [
        {"name": p, "description": _describe_profile(cfg.profile_path(p))}
        for p in cfg.all_profiles
    ]

    if json_output:
        json_print({"root": str(cfg.root), "specs": specs, "profiles": profiles})
        return

    console = Console()
    tbl = Table(show_header=True, header_style="bold", box=None, padding=(0, 2))
    tbl.add_column("Kind", style="dim")
    tbl.add_column("Name")
    tbl.add_column("Summary")
    for s in specs:
        name = f"[bold]{escape(s['name'])}[/] [cyan](main)[/]" if s["main"] else escape(s["name"])
        tbl.add_row("schema", name, escape(s["summary"]))
    for p in profiles:
        tbl.add_row("profile", escape(p["name"]), escape(p["description"]))
    console.print(tbl)
