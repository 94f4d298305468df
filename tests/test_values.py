"""Tests for typed values and coercion in pbuild.values."""

import uuid

import pytest

from pbuild.errors import CoercionError, PbuildError
from pbuild.values import CoercionPolicy, Type, Value, coerce, default, resolve

# ---------------------------------------------------------------------------
# Type.parse()
# ---------------------------------------------------------------------------


class TestTypeParse:
    @pytest.mark.parametrize(
        "name, expected",
        [
            ("string", Type.STRING),
            ("String", Type.STRING),
            ("str", Type.STRING),
            ("bool", Type.BOOL),
            ("boolean", Type.BOOL),
            ("u8", Type.U8),
            ("i64", Type.I64),
            ("uuid", Type.UUID),
            ("Uuid", Type.UUID),
        ],
    )
    def test_known_names(self, name: str, expected: Type) -> None:
        assert Type.parse(name) is expected

    @pytest.mark.parametrize("name", ["float", "U8", "int", ""])
    def test_unknown_names(self, name: str) -> None:
        assert Type.parse(name) is None

    def test_is_integer(self) -> None:
        assert Type.U16.is_integer
        assert Type.I8.is_integer
        assert not Type.BOOL.is_integer
        assert not Type.UUID.is_integer


# ---------------------------------------------------------------------------
# coerce()
# ---------------------------------------------------------------------------


class TestCoerce:
    def test_string(self) -> None:
        assert coerce(Type.STRING, "linux") == Value(Type.STRING, "linux")
        assert coerce(Type.STRING, 1) is None

    def test_bool(self) -> None:
        assert coerce(Type.BOOL, True) == Value(Type.BOOL, True)
        assert coerce(Type.BOOL, 1) is None
        assert coerce(Type.BOOL, "true") is None

    def test_bool_is_not_an_integer(self) -> None:
        assert coerce(Type.U8, True) is None
        assert coerce(Type.I64, False) is None

    @pytest.mark.parametrize(
        "ty, raw",
        [
            (Type.U8, 0),
            (Type.U8, 255),
            (Type.U16, 65535),
            (Type.U32, 2**32 - 1),
            (Type.U64, 2**63 - 1),
            (Type.I8, -128),
            (Type.I8, 127),
            (Type.I16, -(2**15)),
            (Type.I32, 2**31 - 1),
            (Type.I64, -(2**63)),
        ],
    )
    def test_integer_in_range(self, ty: Type, raw: int) -> None:
        assert coerce(ty, raw) == Value(ty, raw)

    @pytest.mark.parametrize(
        "ty, raw",
        [
            (Type.U8, 256),
            (Type.U8, 300),
            (Type.U8, -1),
            (Type.U16, 65536),
            (Type.U32, -5),
            (Type.I8, 128),
            (Type.I8, -129),
            (Type.I32, 2**31),
            # raw documents never carry integers beyond i64
            (Type.U64, 2**63),
            (Type.I64, 2**63),
        ],
    )
    def test_integer_out_of_range(self, ty: Type, raw: int) -> None:
        assert coerce(ty, raw) is None

    def test_integer_rejects_string_and_float(self) -> None:
        assert coerce(Type.U8, "1") is None
        assert coerce(Type.I32, 1.0) is None

    def test_uuid(self) -> None:
        text = "67e55044-10b1-426f-9247-bb680e5fe0c8"
        assert coerce(Type.UUID, text) == Value(Type.UUID, uuid.UUID(text))

    def test_uuid_uppercase_normalised(self) -> None:
        value = coerce(Type.UUID, "67E55044-10B1-426F-9247-BB680E5FE0C8")
        assert value is not None
        assert str(value) == "67e55044-10b1-426f-9247-bb680e5fe0c8"

    def test_uuid_malformed(self) -> None:
        assert coerce(Type.UUID, "not-a-uuid") is None
        assert coerce(Type.UUID, 12) is None


# ---------------------------------------------------------------------------
# default() / Value
# ---------------------------------------------------------------------------


class TestDefault:
    def test_zero_values(self) -> None:
        assert default(Type.STRING) == Value(Type.STRING, "")
        assert default(Type.BOOL) == Value(Type.BOOL, False)
        assert default(Type.U8) == Value(Type.U8, 0)
        assert default(Type.I64) == Value(Type.I64, 0)
        assert default(Type.UUID) == Value(Type.UUID, uuid.UUID(int=0))

    def test_default_is_valid_for_its_type(self) -> None:
        for ty in Type:
            d = default(ty)
            assert d.type is ty
            assert coerce(ty, d.to_json()) == d


class TestValue:
    def test_str_bool(self) -> None:
        assert str(Value(Type.BOOL, True)) == "true"
        assert str(Value(Type.BOOL, False)) == "false"

    def test_str_scalars(self) -> None:
        assert str(Value(Type.U8, 3)) == "3"
        assert str(Value(Type.STRING, "a b")) == "a b"

    def test_to_json_uuid(self) -> None:
        value = Value(Type.UUID, uuid.UUID(int=1))
        assert value.to_json() == "00000000-0000-0000-0000-000000000001"

    @pytest.mark.parametrize(
        "ty, data",
        [
            (Type.U8, "not a number"),
            (Type.U8, 256),
            (Type.I8, True),
            (Type.BOOL, 1),
            (Type.STRING, 3),
            (Type.UUID, "67e55044-10b1-426f-9247-bb680e5fe0c8"),
        ],
    )
    def test_payload_must_match_type(self, ty: Type, data: object) -> None:
        with pytest.raises(ValueError, match=ty.value):
            Value(ty, data)

    def test_u64_accepts_full_width(self) -> None:
        assert Value(Type.U64, 2**64 - 1).data == 2**64 - 1

    def test_frozen(self) -> None:
        value = Value(Type.U8, 1)
        with pytest.raises(AttributeError):
            value.data = 2  # type: ignore[misc]


# ---------------------------------------------------------------------------
# resolve()
# ---------------------------------------------------------------------------


class TestResolve:
    def test_success_under_both_policies(self) -> None:
        for policy in CoercionPolicy:
            assert resolve(Type.U8, 7, policy, "x") == Value(Type.U8, 7)

    def test_raise_policy(self) -> None:
        with pytest.raises(CoercionError) as exc_info:
            resolve(Type.U8, 300, CoercionPolicy.RAISE, "features.logging.properties.level")
        err = exc_info.value
        assert isinstance(err, PbuildError)
        assert err.path == "features.logging.properties.level"
        assert err.type_name == "u8"
        assert err.raw == 300
        assert "features.logging.properties.level" in str(err)

    def test_default_policy_warns(self) -> None:
        with pytest.warns(UserWarning, match="features.logging.level"):
            value = resolve(Type.U8, 300, CoercionPolicy.DEFAULT, "features.logging.level")
        assert value == Value(Type.U8, 0)

    def test_default_policy_string(self) -> None:
        with pytest.warns(UserWarning):
            value = resolve(Type.STRING, 5, CoercionPolicy.DEFAULT, "a.b")
        assert value == Value(Type.STRING, "")
