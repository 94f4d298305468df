"""Project layout and settings for pbuild.

A pbuild project is a cargo workspace with a ``pbuild/`` directory::

    pbuild/
        pbuild.toml         optional settings (see below)
        specs/main.toml     the base schema that profiles are checked against
        specs/*.toml        further schema files, one per category catalog
        profiles/*.toml     one profile per deployable configuration

``pbuild.toml`` may override the conventions::

    [pbuild]
    main_spec = "main"          # stem of the base schema in specs/
    cargo = "cargo"             # command used by `pbuild build`
    cargo_subcommand = "build"

Usage in any command::

    from pbuild.config import load_config

    cfg = load_config()
    spec = cfg.load_main_spec()
    profile = cfg.load_profile("release", spec)
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

from pbuild.document import read_toml
from pbuild.errors import SettingsError
from pbuild.profile import Profile
from pbuild.spec import Spec

PBUILD_DIR = "pbuild"
SETTINGS_FILE = "pbuild.toml"
SPECS_DIR = "specs"
PROFILES_DIR = "profiles"
ROOT_ENV_VAR = "PBUILD_ROOT"

DEFAULT_MAIN_SPEC = "main"
DEFAULT_CARGO = "cargo"
DEFAULT_CARGO_SUBCOMMAND = "build"


@dataclass
class ProjectConfig:
    """Resolved project layout and settings."""

    # Directory containing pbuild/
    root: Path

    main_spec: str = DEFAULT_MAIN_SPEC
    cargo_command: str = DEFAULT_CARGO
    cargo_subcommand: str = DEFAULT_CARGO_SUBCOMMAND

    # Stems of the files found in specs/ and profiles/, sorted
    all_specs: list[str] = field(default_factory=list)
    all_profiles: list[str] = field(default_factory=list)

    @property
    def pbuild_dir(self) -> Path:
        return self.root / PBUILD_DIR

    @property
    def specs_dir(self) -> Path:
        return self.pbuild_dir / SPECS_DIR

    @property
    def profiles_dir(self) -> Path:
        return self.pbuild_dir / PROFILES_DIR

    def spec_path(self, name: str) -> Path:
        return self.specs_dir / f"{name}.toml"

    def profile_path(self, name: str) -> Path:
        """Resolve a profile by stem, or by path if *name* is a TOML file."""
        if name.endswith(".toml"):
            return Path(name)
        return self.profiles_dir / f"{name}.toml"

    def load_spec(self, name: str) -> Spec:
        return Spec.parse_path(self.spec_path(name))

    def load_main_spec(self) -> Spec:
        return self.load_spec(self.main_spec)

    def load_profile(
        self, name: str, spec: Spec | None = None, *, check_dependencies: bool = False
    ) -> Profile:
        """Parse a profile against *spec* (default: the main schema)."""
        if spec is None:
            spec = self.load_main_spec()
        return Profile.parse_path(
            spec, self.profile_path(name), check_dependencies=check_dependencies
        )


_SETTING_KEYS = ("main_spec", "cargo", "cargo_subcommand")


def _read_settings(path: Path) -> dict:
    """Return the ``[pbuild]`` table of *path*, checking its value types."""
    settings = read_toml(path).get("pbuild", {})
    if not isinstance(settings, dict):
        raise SettingsError(f"[pbuild] in {path} is not a table.")
    for key in _SETTING_KEYS:
        if key in settings and not isinstance(settings[key], str):
            raise SettingsError(f"`pbuild.{key}` in {path} is not of type `string`.")
    return settings


def _stems(directory: Path) -> list[str]:
    if not directory.is_dir():
        return []
    return sorted(p.stem for p in directory.glob("*.toml"))


def _find_root(start: Path | None = None) -> Path:
    """Walk up from *start* (or cwd) to find a directory containing ``pbuild/``.

    ``$PBUILD_ROOT`` takes precedence when *start* is not given.
    """
    if start is not None:
        return start
    env_root = os.environ.get(ROOT_ENV_VAR)
    if env_root:
        return Path(env_root)
    candidate = Path.cwd().resolve()
    while True:
        if (candidate / PBUILD_DIR).is_dir():
            return candidate
        if candidate == candidate.parent:
            break
        candidate = candidate.parent
    raise FileNotFoundError(
        "Could not find a pbuild/ directory in any parent of the current directory. "
        "Run 'pbuild init' to create one."
    )


def load_config(root: Path | None = None) -> ProjectConfig:
    """Locate the project and read ``pbuild/pbuild.toml`` if present.

    Args:
        root: Project root directory.  Auto-detected if ``None``.

    Raises:
        FileNotFoundError: no project was found.
        SettingsError: ``pbuild.toml`` has a malformed ``[pbuild]`` table.
        KeyError: the configured main schema does not exist in ``specs/``.
    """
    root = _find_root(root)
    if not (root / PBUILD_DIR).is_dir():
        raise FileNotFoundError(f"No {PBUILD_DIR}/ directory in {root}")

    settings: dict = {}
    settings_path = root / PBUILD_DIR / SETTINGS_FILE
    if settings_path.exists():
        settings = _read_settings(settings_path)

    cfg = ProjectConfig(
        root=root,
        main_spec=settings.get("main_spec", DEFAULT_MAIN_SPEC),
        cargo_command=settings.get("cargo", DEFAULT_CARGO),
        cargo_subcommand=settings.get("cargo_subcommand", DEFAULT_CARGO_SUBCOMMAND),
    )
    cfg.all_specs = _stems(cfg.specs_dir)
    cfg.all_profiles = _stems(cfg.profiles_dir)

    if cfg.main_spec not in cfg.all_specs:
        raise KeyError(
            f"Main schema '{cfg.main_spec}' not found in {cfg.specs_dir}.  "
            f"Available schemas: {cfg.all_specs}"
        )

    return cfg
