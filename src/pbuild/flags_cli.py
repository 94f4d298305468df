"""flags_cli.py - Print the rustc / cargo flags of a profile.

Default output is the shell-quoted ``--cfg`` list, one line, ready to be
pasted into ``RUSTFLAGS``.  ``--map`` shows the flat cfg map instead and
``--cargo`` the cargo argument groups.
"""

from pathlib import Path

import typer

from pbuild.cli import JsonOption, RootOption, error_exit, json_print, load_profile_or_exit
from pbuild.flags import cargo_flags, cfg_flags_map, rustc_cfg_flags

app = typer.Typer(
    help="Print the cfg and cargo flags of a profile.",
    rich_markup_mode="rich",
    epilog="""\
[bold]Examples:[/bold]

pbuild flags release                Shell-quoted --cfg flags

pbuild flags release --map          cfg key = value, one per line

pbuild flags release --cargo        cargo argument groups (one per target)

pbuild flags release --json         All of the above as JSON""",
)


@app.callback(invoke_without_command=True)
def main(
    profile: str = typer.Argument(..., help="Profile name or path to a profile .toml."),
    show_map: bool = typer.Option(False, "--map", help="Print the cfg map."),
    show_cargo: bool = typer.Option(False, "--cargo", help="Print cargo argument groups."),
    root: Path | None = RootOption,
    json_output: bool = JsonOption,
) -> None:
    """Project a profile onto rustc cfg flags."""
    if show_map and show_cargo:
        error_exit("--map and --cargo are mutually exclusive", json_mode=json_output)

    _, prof = load_profile_or_exit(profile, root, json_mode=json_output)
    cfg_map = cfg_flags_map(prof)

    if json_output:
        json_print(
            {
                "profile": profile,
                "map": {k: v.to_json() for k, v in cfg_map.items()},
                "rustc": rustc_cfg_flags(prof),
                "cargo": cargo_flags(prof),
            }
        )
        return

    if show_map:
        for key, value in cfg_map.items():
            typer.echo(f"{key}: {value.type.value} = {value}")
    elif show_cargo:
        for group in cargo_flags(prof):
            typer.echo(" ".join(group))
    else:
        typer.echo(" ".join(rustc_cfg_flags(prof)))
