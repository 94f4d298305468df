"""profile.py - Profile documents validated against a Spec.

A profile names the cargo targets to build and selects fields from the
schema's categories::

    [profile]
    description = "Release build for Linux"
    bins = ["app", "tools/cli"]
    features = ["serde"]

    [config]
    target = "linux"              # select by TypeKey

    [features]                    # per-category section, by TypeIndex
    tracing = true
    logging = { level = 3 }

Both forms land in :attr:`Profile.config`, which is keyed by TypeKey only.
Property values that do not coerce to their declared type are replaced by
the type's zero value with a warning, while schema defaults are already
typed (see :func:`pbuild.values.resolve`).
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from pbuild import flags
from pbuild.document import parse_toml, read_toml
from pbuild.errors import DependencyError, ProfileError
from pbuild.spec import FieldKey, Spec, TypeIndex, TypeKey
from pbuild.values import CoercionPolicy, Value, resolve

PROFILE_SECTION = "profile"
CONFIG_SECTION = "config"

Config = dict[TypeKey, dict[FieldKey, dict[str, Value]]]


@dataclass(frozen=True)
class Profile:
    """A validated, schema-conformant configuration."""

    spec: Spec
    description: str
    bins: list[str] = field(default_factory=list)
    libs: list[str] = field(default_factory=list)
    features: list[str] = field(default_factory=list)
    config: Config = field(default_factory=dict)

    # --- parsing ---

    @classmethod
    def parse_path(cls, spec: Spec, path: str | Path, **kwargs: Any) -> Profile:
        return cls.parse(spec, read_toml(path), **kwargs)

    @classmethod
    def parse_str(cls, spec: Spec, text: str, **kwargs: Any) -> Profile:
        return cls.parse(spec, parse_toml(text), **kwargs)

    @classmethod
    def parse(
        cls,
        spec: Spec,
        raw: Mapping[str, Any],
        *,
        check_dependencies: bool = False,
    ) -> Profile:
        """Validate a decoded profile document against *spec*.

        Dependencies declared by the schema are only evaluated when
        *check_dependencies* is set (see :meth:`check_dependencies`).
        """
        section = raw.get(PROFILE_SECTION)
        if not isinstance(section, Mapping):
            raise ProfileError("[profile] section not found.")

        bins = _string_list(section, "bins")
        libs = _string_list(section, "libs")
        if not bins and not libs:
            raise ProfileError("Either [profile.bins] or [profile.libs] must be provided.")
        features = _string_list(section, "features")

        description = section.get("description")
        if not isinstance(description, str):
            raise ProfileError("[profile] is missing a `description` string.")

        config: Config = {}
        _parse_config_section(spec, raw.get(CONFIG_SECTION), config)
        for index, block in raw.items():
            if index in (PROFILE_SECTION, CONFIG_SECTION):
                continue
            _parse_type_section(spec, index, block, config)

        profile = cls(spec, description, bins, libs, features, config)
        if check_dependencies:
            profile.check_dependencies()
        return profile

    # --- queries ---

    def enabled_fields(self) -> set[tuple[str, str]]:
        """Return every enabled ``(TypeKey, FieldKey)`` pair."""
        return {(key, name) for key, fields in self.config.items() for name in fields}

    def unmet_dependencies(self) -> list[str]:
        """Describe each dependency of an enabled field that is not enabled.

        Entries look like ``"feature.logging: target:linux OR target:macos"``.
        """
        enabled = self.enabled_fields()
        unmet: list[str] = []
        for key, fields in self.config.items():
            index = self.spec.index_for_key(key)
            for name in fields:
                field_spec = self.spec.field_spec(index, name)
                for op in field_spec.dependencies.unmet(enabled):
                    unmet.append(f"{key}.{name}: {op}")
        return unmet

    def check_dependencies(self) -> None:
        """Raise :class:`~pbuild.errors.DependencyError` if any are unmet."""
        unmet = self.unmet_dependencies()
        if unmet:
            raise DependencyError(unmet)

    # --- projection ---

    def cfg_flags_map(self) -> dict[str, Value]:
        return flags.cfg_flags_map(self)

    def rustc_cfg_flags(self) -> list[str]:
        return flags.rustc_cfg_flags(self)

    def cargo_flags(self) -> list[list[str]]:
        return flags.cargo_flags(self)

    def to_dict(self) -> dict[str, object]:
        """Serialize to a plain dict for JSON output."""
        return {
            "spec": self.spec.name,
            "description": self.description,
            "bins": list(self.bins),
            "libs": list(self.libs),
            "features": list(self.features),
            "config": {
                key: {
                    name: {prop: v.to_json() for prop, v in props.items()}
                    for name, props in fields.items()
                }
                for key, fields in self.config.items()
            },
        }


# ---------------------------------------------------------------------------
# Section parsers
# ---------------------------------------------------------------------------


def _string_list(section: Mapping[str, Any], key: str) -> list[str]:
    raw = section.get(key, [])
    if not isinstance(raw, list) or not all(isinstance(x, str) for x in raw):
        raise ProfileError(f"`{key}` field in [profile] is not of type `array<string>`.")
    return list(raw)


def _parse_config_section(spec: Spec, raw: object, config: Config) -> None:
    """``[config]``: ``<TypeKey> = "<field>"`` selections."""
    if not isinstance(raw, Mapping):
        raise ProfileError("[config] section not found or wrong type.")

    for key, value in raw.items():
        index = spec.index_for_key(key)
        if index is None:
            raise ProfileError(f"Unknown type `{key}` in [config].")
        entry = config.setdefault(TypeKey(key), {})

        if isinstance(value, str):
            if spec.field_spec(index, value) is None:
                raise ProfileError(f"Unknown field `{value}` for type `{key}` in [config].")
            entry[FieldKey(value)] = {}
        elif isinstance(value, Mapping):
            # reserved for a future nested selection form
            raise ProfileError(f"Table values in [config] are not supported yet (`config.{key}`).")
        else:
            raise ProfileError(f"`config.{key}` is not of type `string`.")


def _parse_type_section(spec: Spec, index: str, raw: object, config: Config) -> None:
    """``[<TypeIndex>]``: ``<field> = true`` or ``<field> = { <prop> = ... }``."""
    type_spec = spec.types.get(TypeIndex(index))
    if type_spec is None:
        raise ProfileError(f"Unknown type section [{index}].")
    if not isinstance(raw, Mapping):
        raise ProfileError(f"[{index}] section is not a table.")

    for name, value in raw.items():
        field_spec = spec.field_spec(index, name)
        if field_spec is None:
            raise ProfileError(f"Unknown field `{name}` in [{index}].")
        path = f"{index}.{name}"

        if isinstance(value, bool):
            if value:
                config.setdefault(type_spec.key, {}).setdefault(FieldKey(name), {})
        elif isinstance(value, Mapping):
            props: dict[str, Value] = {}
            for prop, prop_raw in value.items():
                prop_spec = field_spec.properties.get(prop)
                if prop_spec is None:
                    raise ProfileError(f"Unknown property `{prop}` in [{path}].")
                props[prop] = resolve(
                    prop_spec.ty, prop_raw, CoercionPolicy.DEFAULT, f"{path}.{prop}"
                )
            for prop, prop_spec in field_spec.properties.items():
                if prop_spec.default is not None and prop not in props:
                    props[prop] = prop_spec.default
            config.setdefault(type_spec.key, {})[FieldKey(name)] = props
        else:
            raise ProfileError(f"`{path}` is not of type `bool` or `table`.")
