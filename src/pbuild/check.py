"""check.py - Validate profiles, including field dependencies.

Parsing a profile checks that every type, field and property it names
exists in the main schema.  ``pbuild check`` additionally evaluates the
``dependencies`` declared by each enabled field:

- ``"target:linux"`` requires that field to be enabled,
- ``"target:linux OR target:macos"`` requires one of them,
- several entries must all hold.
"""

from pathlib import Path

import typer
from rich.console import Console
from rich.markup import escape

from pbuild.cli import JsonOption, RootOption, error_exit, get_config, json_print
from pbuild.config import ProjectConfig
from pbuild.errors import PbuildError
from pbuild.spec import Spec

app = typer.Typer(
    help="Validate profiles and their field dependencies.",
    rich_markup_mode="rich",
    epilog="""\
[bold]Examples:[/bold]

pbuild check release                Check one profile

pbuild check                        Check every profile in pbuild/profiles/

pbuild check --json                 Machine-readable results""",
)


def check_profile(cfg: ProjectConfig, spec: Spec, name: str) -> dict[str, object]:
    """Parse profile *name* and evaluate its dependencies.

    Returns ``{"profile", "ok", "errors"}`` instead of raising so that every
    profile can be reported in one run.
    """
    try:
        prof = cfg.load_profile(name, spec)
    except PbuildError as exc:
        return {"profile": name, "ok": False, "errors": [str(exc)]}
    unmet = prof.unmet_dependencies()
    return {"profile": name, "ok": not unmet, "errors": [f"unmet dependency {u}" for u in unmet]}


@app.callback(invoke_without_command=True)
def main(
    profile: str | None = typer.Argument(None, help="Profile to check (default: all)."),
    root: Path | None = RootOption,
    json_output: bool = JsonOption,
) -> None:
    """Parse profiles against the main schema and evaluate dependencies."""
    cfg = get_config(root, json_mode=json_output)
    try:
        spec = cfg.load_main_spec()
    except PbuildError as exc:
        error_exit(f"{cfg.main_spec}: {exc}", json_mode=json_output)

    names = [profile] if profile is not None else cfg.all_profiles
    if not names:
        error_exit(f"No profiles found in {cfg.profiles_dir}", json_mode=json_output)

    results = [check_profile(cfg, spec, name) for name in names]
    failed = [r for r in results if not r["ok"]]

    if json_output:
        json_print({"spec": spec.name, "results": results})
    else:
        console = Console()
        for r in results:
            if r["ok"]:
                console.print(f"[green]ok[/]    {escape(r['profile'])}")
                continue
            console.print(f"[red]FAIL[/]  {escape(r['profile'])}")
            for err in r["errors"]:
                console.print(f"      {escape(err)}")

    if failed:
        raise typer.Exit(code=1)
