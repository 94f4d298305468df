"""Loading of raw TOML documents for schemas and profiles."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Any

if sys.version_info >= (3, 11):
    import tomllib
else:
    try:
        import tomllib  # type: ignore[import]
    except ModuleNotFoundError:
        import tomli as tomllib  # type: ignore[import,no-redef]

from pbuild.errors import DocumentReadError, DocumentSyntaxError

Document = dict[str, Any]


def parse_toml(text: str, source: str = "<string>") -> Document:
    """Decode TOML *text* into a plain dict."""
    try:
        return tomllib.loads(text)
    except tomllib.TOMLDecodeError as exc:
        raise DocumentSyntaxError(f"Could not parse TOML in {source}: {exc}") from exc


def read_toml(path: str | Path) -> Document:
    """Read and decode the TOML file at *path*."""
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise DocumentReadError(f"Could not load file {path}: {exc}") from exc
    return parse_toml(text, source=str(path))
