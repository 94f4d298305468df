"""main.py – Umbrella CLI entry point for pbuild.

Lazily imports and registers all subcommand typer apps so that a broken
optional dependency in one command doesn't prevent the entire CLI from
loading.

Every command module exposes a Typer ``app`` whose callback is ``main``;
it is registered here as a flat ``app.command()`` entry.
"""

import importlib
import sys
from collections.abc import Callable

import typer

app = typer.Typer(
    help=(
        "Configuration profiles for Cargo: validate profiles against a schema "
        "and build with cfg flags."
    ),
    rich_markup_mode="rich",
    epilog="""\
[bold]Typical workflow:[/bold]
  pbuild init                  Create pbuild/ with an example schema and profile
  pbuild list                  Show schemas and profiles
  pbuild check                 Validate every profile, including dependencies
  pbuild show release          Summary of one profile
  pbuild flags release         rustc --cfg flags of a profile
  pbuild build release         cargo build with those flags

[dim]Profiles live in pbuild/profiles/ and are checked against pbuild/specs/main.toml.
Run 'pbuild <cmd> --help' for details.[/dim]""",
)

# ---------------------------------------------------------------------------
# Subcommand registry
# ---------------------------------------------------------------------------

_COMMANDS: list[tuple[str, str, str]] = [
    ("init", "pbuild.init", "Initialize pbuild in a cargo project."),
    ("list", "pbuild.listing", "List schemas and profiles."),
    ("show", "pbuild.show", "Show a summary of a profile."),
    ("flags", "pbuild.flags_cli", "Print the cfg and cargo flags of a profile."),
    ("check", "pbuild.check", "Validate profiles and their field dependencies."),
    ("build", "pbuild.build", "Build the targets of a profile with cargo."),
]


def _make_stub_cmd(mod_name: str, err: ImportError) -> Callable[[], None]:
    """Create a stub command function that reports a missing dependency."""

    def _stub() -> None:
        print(f"Error: could not load '{mod_name}': {err}", file=sys.stderr)
        raise typer.Exit(code=1)

    return _stub


for _name, _module, _help in _COMMANDS:
    try:
        _mod = importlib.import_module(_module)
        _epilog = getattr(_mod.app.info, "epilog", None)
        if not isinstance(_epilog, str):
            _epilog = None
        app.command(name=_name, help=_help, epilog=_epilog)(_mod.main)
    except ImportError as _exc:
        app.command(name=_name, help=f"[unavailable] {_help}")(_make_stub_cmd(_module, _exc))


def main() -> None:
    app()


if __name__ == "__main__":
    main()
