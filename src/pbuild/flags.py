"""flags.py - Project a Profile onto rustc and cargo arguments.

The projection goes through one flat, ordered map of cfg keys
(:func:`cfg_flags_map`):

- a field of a single-valued category ``target`` yields ``target = "linux"``,
- a field of any other category ``feature`` yields ``feature_logging``,
- every property of an enabled field yields ``feature_logging_level = 3``.

Keys are snake-cased; a later entry with the same key overwrites an earlier
one in place.  Only ``Bool(true)`` entries become bare ``--cfg key`` flags;
``Bool(false)`` entries are dropped.
"""

from __future__ import annotations

import unicodedata
from typing import TYPE_CHECKING

from pbuild.naming import snake_case
from pbuild.values import Type, Value

if TYPE_CHECKING:
    from pbuild.profile import Profile

CFG_FLAG = "--cfg"
PACKAGE_SEPARATOR = "/"

_DEBUG_ESCAPES = {
    "\\": "\\\\",
    '"': '\\"',
    "\n": "\\n",
    "\r": "\\r",
    "\t": "\\t",
    "\0": "\\0",
}


# Control, format, separator, private-use, surrogate and unassigned code
# points, plus combining marks (grapheme extenders), print as \u{...}.
_ESCAPED_CATEGORIES = {"Cc", "Cf", "Co", "Cs", "Cn", "Zl", "Zp", "Zs", "Mn", "Me"}


def debug_quote(s: str) -> str:
    """Quote *s* the way rustc prints string literals: ``"a\\"b"``.

    Printability is decided from the Unicode general category, which is close
    to but not identical with Rust's own tables for rarely used code points.
    """
    out = []
    for ch in s:
        if ch in _DEBUG_ESCAPES:
            out.append(_DEBUG_ESCAPES[ch])
        elif ch != " " and unicodedata.category(ch) in _ESCAPED_CATEGORIES:
            out.append(f"\\u{{{ord(ch):x}}}")
        else:
            out.append(ch)
    return '"' + "".join(out) + '"'


# ---------------------------------------------------------------------------
# cfg map
# ---------------------------------------------------------------------------


def cfg_flags_map(profile: Profile) -> dict[str, Value]:
    """Flatten ``profile.config`` into ``{cfg_key: Value}``."""
    out: dict[str, Value] = {}
    for key, fields in profile.config.items():
        type_spec = profile.spec.type_for_key(key)
        for name, props in fields.items():
            if type_spec.is_single:
                out[snake_case(key)] = Value(Type.STRING, name)
            else:
                out[snake_case(f"{key}_{name}")] = Value(Type.BOOL, True)
            for prop, value in props.items():
                out[snake_case(f"{key}_{name}_{prop}")] = value
    return out


def cfg_spec(key: str, value: Value) -> str | None:
    """Render one map entry as the argument of ``--cfg``, or ``None`` to skip it."""
    if value.type is Type.BOOL:
        return key if value.data else None
    if value.type is Type.STRING:
        return f"{key}={debug_quote(value.data)}"
    if value.type is Type.UUID:
        return f'{key}="{value.data}"'
    return f"{key}={value.data}"


def rustc_cfg_args(profile: Profile) -> list[str]:
    """``["--cfg", 'target="linux"', ...]`` without shell quoting."""
    out: list[str] = []
    for key, value in cfg_flags_map(profile).items():
        spec = cfg_spec(key, value)
        if spec is None:
            continue
        out += [CFG_FLAG, spec]
    return out


def rustc_cfg_flags(profile: Profile) -> list[str]:
    """Like :func:`rustc_cfg_args` with each cfg wrapped in single quotes.

    The result is meant to be pasted into a shell command line.
    """
    out = rustc_cfg_args(profile)
    return [f"'{tok}'" if i % 2 else tok for i, tok in enumerate(out)]


# ---------------------------------------------------------------------------
# cargo
# ---------------------------------------------------------------------------


def _features_args(features: list[str]) -> list[str]:
    if not features:
        return []
    return ["--features", '"' + '","'.join(features) + '"']


def cargo_flags(profile: Profile) -> list[list[str]]:
    """One cargo argument group per binary and per library target.

    A binary written ``package/name`` selects its package first:
    ``["--package", "package", "--bin", "name"]``.
    """
    out: list[list[str]] = []
    for bin_name in profile.bins:
        package, sep, name = bin_name.partition(PACKAGE_SEPARATOR)
        group = ["--package", package, "--bin", name] if sep else ["--bin", bin_name]
        out.append(group + _features_args(profile.features))
    for lib in profile.libs:
        out.append(["--lib", lib] + _features_args(profile.features))
    return out


def cargo_invocations(profile: Profile) -> list[list[str]]:
    """Argument groups for running cargo directly, without a shell.

    Unlike :func:`cargo_flags`, features are not quoted and a library is
    selected by package (``--package name --lib``), which is what cargo
    itself accepts.
    """
    features = ["--features", ",".join(profile.features)] if profile.features else []
    out: list[list[str]] = []
    for bin_name in profile.bins:
        package, sep, name = bin_name.partition(PACKAGE_SEPARATOR)
        group = ["--package", package, "--bin", name] if sep else ["--bin", bin_name]
        out.append(group + features)
    for lib in profile.libs:
        out.append(["--package", lib, "--lib"] + features)
    return out
