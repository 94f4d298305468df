"""Exception hierarchy for pbuild.

Every failure raised while loading schemas and profiles derives from
:class:`PbuildError`, so the CLI can report any of them the same way.
"""

from __future__ import annotations


class PbuildError(Exception):
    """Base exception for all pbuild errors."""


# ---------------------------------------------------------------------------
# Documents
# ---------------------------------------------------------------------------


class DocumentError(PbuildError):
    """A schema or profile document could not be loaded."""


class DocumentReadError(DocumentError):
    """The file could not be read."""


class DocumentSyntaxError(DocumentError):
    """The file is not valid TOML."""


class SettingsError(PbuildError):
    """``pbuild/pbuild.toml`` has a malformed ``[pbuild]`` table."""


# ---------------------------------------------------------------------------
# Schemas
# ---------------------------------------------------------------------------


class SchemaError(PbuildError):
    """The ``[spec]`` table is missing or malformed."""


class FieldError(PbuildError):
    """A category section or one of its field blocks is malformed."""


class SectionMismatchError(FieldError):
    """Top-level sections do not match the declared type catalog.

    Carries *all* offending names: sections present but not declared
    (``excess``) and declared types without a section (``missing``).
    """

    def __init__(self, excess: list[str], missing: list[str]) -> None:
        self.excess = list(excess)
        self.missing = list(missing)
        parts = []
        if self.excess:
            parts.append(f"Undefined types were found: {', '.join(self.excess)}")
        if self.missing:
            parts.append(f"Defined types are missing sections: {', '.join(self.missing)}")
        super().__init__("; ".join(parts))


# ---------------------------------------------------------------------------
# Values
# ---------------------------------------------------------------------------


class CoercionError(PbuildError):
    """A raw value could not be coerced to its declared type."""

    def __init__(self, path: str, type_name: str, raw: object) -> None:
        self.path = path
        self.type_name = type_name
        self.raw = raw
        super().__init__(f"`{path}` value {raw!r} is not of type `{type_name}`.")


# ---------------------------------------------------------------------------
# Profiles
# ---------------------------------------------------------------------------


class ProfileError(PbuildError):
    """A profile document does not conform to its schema."""


class DependencyError(ProfileError):
    """Enabled fields have dependencies that the profile does not satisfy."""

    def __init__(self, unmet: list[str]) -> None:
        self.unmet = list(unmet)
        super().__init__("Unmet dependencies: " + "; ".join(self.unmet))
