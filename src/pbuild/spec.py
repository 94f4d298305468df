"""spec.py - Schema model and schema document parser.

A schema ("spec") document declares a catalog of categories under
``[spec.types]`` and one top-level section per category listing its
fields::

    [spec]
    name = "firmware"
    types = { target = { key = "target", single = true }, features = "feature" }

    [target.linux]
    description = "Linux userspace"

    [features.logging]
    description = "Structured logging"
    dependencies = ["target:linux OR target:macos"]
    properties = { level = { type = "u8", default = 1 } }

Each category is addressed by two names: its *TypeIndex* (the section name
in documents, ``features`` above) and its *TypeKey* (the display and flag
name, ``feature`` above).  Profiles select fields by TypeKey in ``[config]``
and by TypeIndex in their per-category sections.

Parsing is all-or-nothing: any structural problem raises a
:class:`~pbuild.errors.PbuildError` subclass and no partial Spec is
returned.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, NewType, Union

from pbuild.document import parse_toml, read_toml
from pbuild.errors import FieldError, SchemaError, SectionMismatchError
from pbuild.values import CoercionPolicy, Type, Value, resolve

TypeKey = NewType("TypeKey", str)
TypeIndex = NewType("TypeIndex", str)
FieldKey = NewType("FieldKey", str)

SPEC_SECTION = "spec"

# ---------------------------------------------------------------------------
# Dependency expressions
# ---------------------------------------------------------------------------

_OR_RE = re.compile(r"\bOR\b")


@dataclass(frozen=True)
class Dep:
    """A reference to another field, written ``category:field``."""

    ty: TypeKey
    name: str

    @classmethod
    def parse(cls, text: str, known_keys: Iterable[str], section: str) -> Dep:
        parts = text.split(":")
        if len(parts) != 2 or not all(p.strip() for p in parts):
            raise FieldError(
                f"Dependency {text!r} in [{section}] is not of the form `category:field`."
            )
        ty, name = (p.strip() for p in parts)
        if ty not in known_keys:
            raise FieldError(f"Dependency {text!r} in [{section}] names unknown type `{ty}`.")
        return cls(TypeKey(ty), name)

    def is_satisfied(self, enabled: set[tuple[str, str]]) -> bool:
        return (self.ty, self.name) in enabled

    def __str__(self) -> str:
        return f"{self.ty}:{self.name}"


@dataclass(frozen=True)
class Or:
    """Any one of the referenced fields must be enabled."""

    deps: tuple[Dep, ...]

    def is_satisfied(self, enabled: set[tuple[str, str]]) -> bool:
        return any(d.is_satisfied(enabled) for d in self.deps)

    def __str__(self) -> str:
        return " OR ".join(str(d) for d in self.deps)


@dataclass(frozen=True)
class And:
    """Every operand must be satisfied."""

    ops: tuple[DependencyOp, ...]

    def is_satisfied(self, enabled: set[tuple[str, str]]) -> bool:
        return all(op.is_satisfied(enabled) for op in self.ops)

    def __str__(self) -> str:
        if len(self.ops) == 1:
            return str(self.ops[0])
        return " AND ".join(f"({op})" if isinstance(op, Or) else str(op) for op in self.ops)


DependencyOp = Union[Dep, Or, And]


def parse_dependency_line(line: str, known_keys: Iterable[str], section: str) -> DependencyOp:
    """Parse one ``dependencies`` entry into a :data:`DependencyOp`."""
    known_keys = set(known_keys)
    segments = _OR_RE.split(line)
    if len(segments) > 1:
        return Or(tuple(Dep.parse(s.strip(), known_keys, section) for s in segments))
    return Dep.parse(line.strip(), known_keys, section)


@dataclass(frozen=True)
class Dependencies:
    """The dependency expression of one field: a single top-level ``And``."""

    op: And = field(default_factory=lambda: And(()))

    @classmethod
    def parse(cls, lines: list[str], known_keys: Iterable[str], section: str) -> Dependencies:
        known_keys = set(known_keys)
        return cls(And(tuple(parse_dependency_line(x, known_keys, section) for x in lines)))

    def unmet(self, enabled: set[tuple[str, str]]) -> list[DependencyOp]:
        """Return the top-level operands that *enabled* does not satisfy."""
        return [op for op in self.op.ops if not op.is_satisfied(enabled)]

    def __bool__(self) -> bool:
        return bool(self.op.ops)

    def __str__(self) -> str:
        return str(self.op)


# ---------------------------------------------------------------------------
# Properties and fields
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class PropSpec:
    """Declared type and optional default of one field property."""

    ty: Type
    default: Value | None = None

    @classmethod
    def parse(cls, path: str, raw: object) -> PropSpec:
        if not isinstance(raw, Mapping):
            raise FieldError(f"[{path}] section not found or wrong type.")
        if "type" not in raw:
            raise FieldError(f"[{path}] is missing a `type` field.")
        ty = Type.parse(raw["type"]) if isinstance(raw["type"], str) else None
        if ty is None:
            raise FieldError(f"`type` field in [{path}] is not of type `Type (string)`.")

        default = None
        if "default" in raw:
            default = resolve(ty, raw["default"], CoercionPolicy.RAISE, path)
        return cls(ty, default)


Properties = dict[str, PropSpec]


def parse_properties(path: str, raw: Mapping[str, Any]) -> Properties:
    return {name: PropSpec.parse(f"{path}.{name}", v) for name, v in raw.items()}


@dataclass(frozen=True)
class FieldSpec:
    """One selectable field of a category."""

    description: str
    dependencies: Dependencies = field(default_factory=Dependencies)
    properties: Properties = field(default_factory=dict)

    @classmethod
    def parse(cls, section: str, known_keys: Iterable[str], raw: Mapping[str, Any]) -> FieldSpec:
        if "description" not in raw:
            raise FieldError(f"[{section}] is missing a `description` field.")
        description = raw["description"]
        if not isinstance(description, str):
            raise FieldError(f"`description` field in [{section}] is not of type `string`.")

        dependencies = Dependencies()
        if "dependencies" in raw:
            lines = raw["dependencies"]
            if not isinstance(lines, list) or not all(isinstance(x, str) for x in lines):
                raise FieldError(
                    f"`dependencies` field in [{section}] is not of type `array<string>`."
                )
            dependencies = Dependencies.parse(lines, known_keys, section)

        properties: Properties = {}
        if "properties" in raw:
            props = raw["properties"]
            if not isinstance(props, Mapping):
                raise FieldError(f"`properties` field in [{section}] is not of type `table`.")
            properties = parse_properties(f"{section}.properties", props)

        return cls(description, dependencies, properties)


# ---------------------------------------------------------------------------
# Spec
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class TypeSpec:
    """Catalog entry of one category."""

    key: TypeKey
    is_single: bool = False


@dataclass(frozen=True)
class Spec:
    """A parsed schema: type catalog plus per-category field catalogs."""

    name: str
    types: dict[TypeIndex, TypeSpec]
    fields: dict[TypeIndex, dict[FieldKey, FieldSpec]]
    _by_key: dict[TypeKey, TypeIndex] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        by_key: dict[TypeKey, TypeIndex] = {}
        for index, ts in self.types.items():
            by_key.setdefault(ts.key, index)
        object.__setattr__(self, "_by_key", by_key)

    # --- lookups ---

    def index_for_key(self, key: str) -> TypeIndex | None:
        """Return the TypeIndex of the category whose TypeKey is *key*."""
        return self._by_key.get(TypeKey(key))

    def type_for_key(self, key: str) -> TypeSpec | None:
        index = self.index_for_key(key)
        return None if index is None else self.types[index]

    def field_spec(self, index: str, name: str) -> FieldSpec | None:
        return self.fields.get(TypeIndex(index), {}).get(FieldKey(name))

    # --- parsing ---

    @classmethod
    def parse_path(cls, path: str | Path) -> Spec:
        return cls.parse(read_toml(path))

    @classmethod
    def parse_str(cls, text: str) -> Spec:
        return cls.parse(parse_toml(text))

    @classmethod
    def parse(cls, raw: Mapping[str, Any]) -> Spec:
        """Build a Spec from a decoded schema document."""
        name, types = _parse_spec_table(raw)
        fields = _parse_fields(raw, types)
        return cls(name, types, fields)


def _parse_spec_table(raw: Mapping[str, Any]) -> tuple[str, dict[TypeIndex, TypeSpec]]:
    spec = raw.get(SPEC_SECTION)
    if not isinstance(spec, Mapping):
        raise SchemaError("[spec] section not found.")

    if "name" not in spec:
        raise SchemaError("[spec] is missing a `name` field.")
    name = spec["name"]
    if not isinstance(name, str):
        raise SchemaError("`name` field in [spec] is not of type `string`.")

    if "types" not in spec:
        raise SchemaError("[spec] is missing a `types` field.")
    raw_types = spec["types"]
    if not isinstance(raw_types, Mapping):
        raise SchemaError("`types` field in [spec] is not of type `map<string, string>`.")

    types: dict[TypeIndex, TypeSpec] = {}
    seen_keys: dict[str, str] = {}
    for index, v in raw_types.items():
        if isinstance(v, str):
            ts = TypeSpec(TypeKey(v))
        elif isinstance(v, Mapping):
            key = v.get("key")
            if not isinstance(key, str):
                raise SchemaError(f"[spec.types.{index}] is missing a `key` string.")
            # presence alone marks a single-valued category
            ts = TypeSpec(TypeKey(key), is_single="single" in v)
        else:
            raise SchemaError(f"Value for key `{index}` in [spec.types] is not of type `string`.")

        if ts.key in seen_keys:
            raise SchemaError(
                f"Types `{seen_keys[ts.key]}` and `{index}` in [spec.types] "
                f"share the key `{ts.key}`."
            )
        seen_keys[ts.key] = index
        types[TypeIndex(index)] = ts

    return name, types


def _parse_fields(
    raw: Mapping[str, Any], types: dict[TypeIndex, TypeSpec]
) -> dict[TypeIndex, dict[FieldKey, FieldSpec]]:
    excess = [k for k in raw if k != SPEC_SECTION and k not in types]
    missing = [k for k in types if k != SPEC_SECTION and k not in raw]
    if excess or missing:
        raise SectionMismatchError(excess, missing)

    known_keys = {ts.key for ts in types.values()}
    out: dict[TypeIndex, dict[FieldKey, FieldSpec]] = {}
    for index in types:
        section = raw[index]
        if not isinstance(section, Mapping):
            raise FieldError(f"[{index}] section not found or wrong type.")

        fields: dict[FieldKey, FieldSpec] = {}
        for sub, block in section.items():
            path = f"{index}.{sub}"
            if not isinstance(block, Mapping):
                raise FieldError(f"[{path}] section not found or wrong type.")
            fields[FieldKey(sub)] = FieldSpec.parse(path, known_keys, block)
        out[index] = fields

    return out
