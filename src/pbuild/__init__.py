"""pbuild — configuration profiles for Cargo.

Validates profile documents against a declarative schema of typed
categories, fields and properties, and projects the validated
configuration onto ``rustc --cfg`` flags and cargo target arguments.

Usage::

    from pbuild import Profile, Spec

    spec = Spec.parse_path("pbuild/specs/main.toml")
    profile = Profile.parse_path(spec, "pbuild/profiles/release.toml")
    profile.rustc_cfg_flags()   # ["--cfg", "'target=\\"linux\\"'", ...]
"""

from pbuild.errors import CoercionError, DependencyError, PbuildError, ProfileError
from pbuild.profile import Profile
from pbuild.spec import Spec
from pbuild.values import Type, Value

__all__ = [
    "CoercionError",
    "DependencyError",
    "PbuildError",
    "Profile",
    "ProfileError",
    "Spec",
    "Type",
    "Value",
]

__version__ = "0.1.0"
