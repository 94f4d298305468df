"""show.py - Human-readable summary of a profile.

Prints a Rich panel with the profile's description, cargo targets,
features and the selected fields of each category with their resolved
property values.
"""

from pathlib import Path

import typer
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from pbuild.cli import JsonOption, RootOption, json_print, load_profile_or_exit
from pbuild.profile import Profile

# ---------------------------------------------------------------------------
# Rich output
# ---------------------------------------------------------------------------


def _join(items: list[str]) -> str:
    return ", ".join(items) if items else "[dim]none[/]"


def render_profile(console: Console, name: str, profile: Profile) -> None:
    """Print a Rich panel for *profile*."""
    title = Text(f"  {name}  ", style="bold white on blue")

    tbl = Table(show_header=True, header_style="bold", box=None, padding=(0, 2))
    tbl.add_column("Type", style="dim")
    tbl.add_column("Field")
    tbl.add_column("Properties")
    tbl.add_column("Depends on", style="dim")

    for key, fields in profile.config.items():
        index = profile.spec.index_for_key(key)
        type_spec = profile.spec.types[index]
        key_label = f"{key} [cyan](single)[/]" if type_spec.is_single else key
        for field_name, props in fields.items():
            field_spec = profile.spec.field_spec(index, field_name)
            prop_str = "  ".join(f"{p}=[bold]{escape(str(v))}[/]" for p, v in props.items())
            tbl.add_row(
                key_label,
                f"[green]{escape(field_name)}[/]",
                prop_str,
                escape(str(field_spec.dependencies)),
            )

    header = Table.grid(padding=(0, 2))
    header.add_column(style="bold")
    header.add_column()
    header.add_row("Description", escape(profile.description))
    header.add_row("Schema", escape(profile.spec.name))
    header.add_row("Bins", _join(profile.bins))
    header.add_row("Libs", _join(profile.libs))
    header.add_row("Features", _join(profile.features))

    grid = Table.grid()
    grid.add_row(header)
    grid.add_row("")
    grid.add_row(tbl)

    enabled = sum(len(fields) for fields in profile.config.values())
    subtitle = f"[bold]{enabled}[/] fields in [bold]{len(profile.config)}[/] types"
    console.print(Panel(grid, title=title, subtitle=subtitle, border_style="blue"))


# ---------------------------------------------------------------------------
# CLI
# ---------------------------------------------------------------------------

app = typer.Typer(
    help="Show a summary of a profile.",
    rich_markup_mode="rich",
    epilog="""\
[bold]Examples:[/bold]

pbuild show release                 Rich summary of pbuild/profiles/release.toml

pbuild show release --json          Resolved profile as JSON

[dim]Profiles are validated against the main schema (pbuild/specs/main.toml).[/dim]""",
)


@app.callback(invoke_without_command=True)
def main(
    profile: str = typer.Argument(..., help="Profile name or path to a profile .toml."),
    root: Path | None = RootOption,
    json_output: bool = JsonOption,
) -> None:
    """Print the validated configuration of a profile."""
    _, prof = load_profile_or_exit(profile, root, json_mode=json_output)

    if json_output:
        json_print(prof.to_dict())
        return

    console = Console()
    render_profile(console, profile, prof)
