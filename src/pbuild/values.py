"""values.py - Typed scalar values for schema properties.

A :class:`Value` is a scalar tagged with the :class:`Type` it was coerced
against.  Raw values come from decoded TOML (or JSON) documents, so coercion
only has to deal with ``str``, ``bool`` and ``int`` nodes.

Usage::

    from pbuild.values import CoercionPolicy, Type, coerce, resolve

    coerce(Type.U8, 300)                                  # None
    resolve(Type.U8, 300, CoercionPolicy.DEFAULT, "a.b")  # Value(U8, 0) + warning
"""

from __future__ import annotations

import enum
import uuid
import warnings
from dataclasses import dataclass

from pbuild.errors import CoercionError


class Type(enum.Enum):
    """Scalar kinds a property may declare."""

    STRING = "string"
    BOOL = "bool"
    U8 = "u8"
    U16 = "u16"
    U32 = "u32"
    U64 = "u64"
    I8 = "i8"
    I16 = "i16"
    I32 = "i32"
    I64 = "i64"
    UUID = "uuid"

    @classmethod
    def parse(cls, name: str) -> Type | None:
        """Return the Type spelled *name* in a schema, or ``None``."""
        return _TYPE_ALIASES.get(name)

    @property
    def is_integer(self) -> bool:
        return self in _INT_RANGES


_TYPE_ALIASES: dict[str, Type] = {
    "string": Type.STRING,
    "str": Type.STRING,
    "String": Type.STRING,
    "bool": Type.BOOL,
    "Bool": Type.BOOL,
    "boolean": Type.BOOL,
    "u8": Type.U8,
    "u16": Type.U16,
    "u32": Type.U32,
    "u64": Type.U64,
    "i8": Type.I8,
    "i16": Type.I16,
    "i32": Type.I32,
    "i64": Type.I64,
    "uuid": Type.UUID,
    "Uuid": Type.UUID,
}

# Inclusive (min, max) per integer width.
_INT_RANGES: dict[Type, tuple[int, int]] = {
    Type.U8: (0, 2**8 - 1),
    Type.U16: (0, 2**16 - 1),
    Type.U32: (0, 2**32 - 1),
    Type.U64: (0, 2**64 - 1),
    Type.I8: (-(2**7), 2**7 - 1),
    Type.I16: (-(2**15), 2**15 - 1),
    Type.I32: (-(2**31), 2**31 - 1),
    Type.I64: (-(2**63), 2**63 - 1),
}

# Raw documents only carry signed 64-bit integers.
_RAW_INT_RANGE = _INT_RANGES[Type.I64]


def _fits(ty: Type, data: object) -> bool:
    if ty is Type.STRING:
        return isinstance(data, str)
    if ty is Type.BOOL:
        return isinstance(data, bool)
    if ty is Type.UUID:
        return isinstance(data, uuid.UUID)
    if isinstance(data, bool) or not isinstance(data, int):
        return False
    lo, hi = _INT_RANGES[ty]
    return lo <= data <= hi


@dataclass(frozen=True)
class Value:
    """A scalar tagged with its :class:`Type`.

    Raises ``ValueError`` if *data* is not a valid payload for *type*.
    """

    type: Type
    data: str | bool | int | uuid.UUID

    def __post_init__(self) -> None:
        if not _fits(self.type, self.data):
            raise ValueError(f"{self.data!r} is not a valid `{self.type.value}` value")

    def to_json(self) -> str | bool | int:
        """Return a JSON-serialisable payload."""
        if isinstance(self.data, uuid.UUID):
            return str(self.data)
        return self.data

    def __str__(self) -> str:
        if self.type is Type.BOOL:
            return "true" if self.data else "false"
        return str(self.data)


def default(ty: Type) -> Value:
    """Return the zero value for *ty*."""
    if ty is Type.STRING:
        return Value(ty, "")
    if ty is Type.BOOL:
        return Value(ty, False)
    if ty is Type.UUID:
        return Value(ty, uuid.UUID(int=0))
    return Value(ty, 0)


def _as_raw_int(raw: object) -> int | None:
    # bool is an int subclass; TOML booleans are never integers
    if isinstance(raw, bool) or not isinstance(raw, int):
        return None
    lo, hi = _RAW_INT_RANGE
    if not lo <= raw <= hi:
        return None
    return raw


def coerce(ty: Type, raw: object) -> Value | None:
    """Interpret a raw document node as *ty*.

    Returns ``None`` if the node has the wrong kind, if an integer does not
    fit the requested width, or if a UUID string is malformed.
    """
    if ty is Type.STRING:
        return Value(ty, raw) if isinstance(raw, str) else None
    if ty is Type.BOOL:
        return Value(ty, raw) if isinstance(raw, bool) else None
    if ty is Type.UUID:
        if not isinstance(raw, str):
            return None
        try:
            return Value(ty, uuid.UUID(raw))
        except ValueError:
            return None

    n = _as_raw_int(raw)
    if n is None or not _fits(ty, n):
        return None
    return Value(ty, n)


class CoercionPolicy(enum.Enum):
    """What :func:`resolve` does when :func:`coerce` fails."""

    RAISE = "raise"
    DEFAULT = "default"


def resolve(ty: Type, raw: object, policy: CoercionPolicy, path: str) -> Value:
    """Coerce *raw* to *ty*, handling failure according to *policy*.

    ``RAISE`` raises :class:`~pbuild.errors.CoercionError` naming *path*.
    ``DEFAULT`` warns and substitutes :func:`default` so that parsing can
    continue.
    """
    value = coerce(ty, raw)
    if value is not None:
        return value
    if policy is CoercionPolicy.RAISE:
        raise CoercionError(path, ty.value, raw)
    warnings.warn(
        f"`{path}` value {raw!r} is not of type `{ty.value}`, using {default(ty).to_json()!r}",
        stacklevel=2,
    )
    return default(ty)
