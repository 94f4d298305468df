"""build.py - Run cargo once per target of a profile.

Each cargo group from :func:`pbuild.flags.cargo_invocations` becomes one
``cargo build`` run.  The profile's cfg flags normally reach rustc as
``cargo --config 'build.rustflags=[...]'``; cargo joins that array with the
``build.rustflags`` of ``.cargo/config.toml``, so flags set there are kept.
A ``[target.<triple>] rustflags`` entry in a config file still takes
precedence over ``build.rustflags``, as it does in cargo itself.

When the caller's environment sets ``CARGO_ENCODED_RUSTFLAGS`` or
``RUSTFLAGS``, cargo ignores every configured rustflags, so the cfg flags
are appended to the environment instead (``0x1f``-separated, which keeps
cfg values containing spaces or quotes intact).
"""

import os
import shlex
import subprocess
from pathlib import Path

import tomlkit
import typer

from pbuild.cli import RootOption, error_exit, load_profile_or_exit
from pbuild.config import ProjectConfig
from pbuild.flags import cargo_invocations, rustc_cfg_args
from pbuild.profile import Profile

ENCODED_SEP = "\x1f"
ENCODED_VAR = "CARGO_ENCODED_RUSTFLAGS"
PLAIN_VAR = "RUSTFLAGS"


def uses_env_rustflags(environ: dict[str, str]) -> bool:
    """True if cargo will take rustflags from *environ* rather than config.

    A variable that is set but empty still counts.
    """
    return ENCODED_VAR in environ or PLAIN_VAR in environ


def encoded_rustflags(cfg_args: list[str], environ: dict[str, str] | None = None) -> str:
    """Merge *cfg_args* into the caller's rustflags, ``0x1f``-separated.

    ``CARGO_ENCODED_RUSTFLAGS`` wins over ``RUSTFLAGS`` whenever it is set.
    """
    if environ is None:
        environ = dict(os.environ)
    existing: list[str] = []
    if ENCODED_VAR in environ:
        if environ[ENCODED_VAR]:
            existing = environ[ENCODED_VAR].split(ENCODED_SEP)
    elif PLAIN_VAR in environ:
        existing = environ[PLAIN_VAR].split()
    return ENCODED_SEP.join(existing + cfg_args)


def rustflags_config_args(cfg_args: list[str]) -> list[str]:
    """``["--config", 'build.rustflags=["--cfg", ...]']`` or ``[]``."""
    if not cfg_args:
        return []
    return ["--config", "build.rustflags=" + tomlkit.item(cfg_args).as_string()]


def cargo_base_command(cfg: ProjectConfig) -> list[str]:
    """``["cargo", "build"]`` from the project settings."""
    try:
        parts = shlex.split(cfg.cargo_command)
    except ValueError:
        parts = cfg.cargo_command.split()
    return parts + [cfg.cargo_subcommand]


def build_commands(
    cfg: ProjectConfig,
    profile: Profile,
    extra_args: list[str] | None = None,
    environ: dict[str, str] | None = None,
) -> list[list[str]]:
    """Every cargo command line needed to build *profile*.

    Unless *environ* carries rustflags, the cfg flags go in as ``--config``
    right before the subcommand.
    """
    env = os.environ if environ is None else environ
    base = cargo_base_command(cfg)
    if not uses_env_rustflags(env):
        base = base[:-1] + rustflags_config_args(rustc_cfg_args(profile)) + base[-1:]
    extra = list(extra_args or [])
    return [base + group + extra for group in cargo_invocations(profile)]


def build_env(profile: Profile, environ: dict[str, str] | None = None) -> dict[str, str]:
    """Return a subprocess env for cargo.

    Only an env that already sets rustflags is changed: the profile's cfg
    flags are appended to ``CARGO_ENCODED_RUSTFLAGS`` and ``RUSTFLAGS`` is
    dropped.
    """
    env = dict(os.environ if environ is None else environ)
    if uses_env_rustflags(env):
        env[ENCODED_VAR] = encoded_rustflags(rustc_cfg_args(profile), env)
        env.pop(PLAIN_VAR, None)
    return env


# ---------------------------------------------------------------------------
# CLI
# ---------------------------------------------------------------------------

app = typer.Typer(
    help="Build the targets of a profile with cargo.",
    rich_markup_mode="rich",
    epilog="""\
[bold]Examples:[/bold]

pbuild build release                       cargo build, once per bin/lib

pbuild build release --dry-run             Print the commands only

pbuild build release -a --release          Forward --release to cargo

[dim]The cargo command and subcommand come from pbuild/pbuild.toml
(keys 'cargo' and 'cargo_subcommand').[/dim]""",
)


@app.callback(invoke_without_command=True)
def main(
    profile: str = typer.Argument(..., help="Profile name or path to a profile .toml."),
    cargo_args: list[str] | None = typer.Option(
        None, "--cargo-arg", "-a", help="Extra argument passed to every cargo run (repeatable)."
    ),
    dry_run: bool = typer.Option(False, "--dry-run", help="Print commands without running."),
    check_deps: bool = typer.Option(
        False, "--check-deps", help="Refuse to build if field dependencies are unmet."
    ),
    root: Path | None = RootOption,
) -> None:
    """Run cargo for every bin and lib of a profile with its cfg flags."""
    cfg, prof = load_profile_or_exit(profile, root, check_dependencies=check_deps)
    env = build_env(prof)
    commands = build_commands(cfg, prof, cargo_args, env)

    if dry_run:
        if ENCODED_VAR in env:
            rustflags = [f for f in env[ENCODED_VAR].split(ENCODED_SEP) if f]
            typer.echo(f"{ENCODED_VAR}: {shlex.join(rustflags)}")
        for cmd in commands:
            typer.echo(shlex.join(cmd))
        return

    for cmd in commands:
        typer.secho(f"$ {shlex.join(cmd)}", fg=typer.colors.CYAN, err=True)
        try:
            r = subprocess.run(cmd, cwd=str(cfg.root), env=env)
        except FileNotFoundError as exc:
            error_exit(f"cargo not found: {exc}")
        if r.returncode != 0:
            error_exit(f"cargo exited with status {r.returncode}", code=r.returncode)
