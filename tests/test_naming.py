"""Tests for cfg key naming in pbuild.naming."""

import pytest

from pbuild.naming import snake_case


class TestSnakeCase:
    @pytest.mark.parametrize(
        "name, expected",
        [
            ("target", "target"),
            ("Target", "target"),
            ("feature_logging_level", "feature_logging_level"),
            ("fooBar", "foo_bar"),
            ("FooBar", "foo_bar"),
            ("HTTPServer", "http_server"),
            ("feature_HTTPServer-port", "feature_http_server_port"),
            ("my-feature.v2", "my_feature_v2"),
            ("v2Beta", "v2_beta"),
            ("BuildMode_Fast", "build_mode_fast"),
        ],
    )
    def test_conversion(self, name: str, expected: str) -> None:
        assert snake_case(name) == expected

    def test_collapses_separators(self) -> None:
        assert snake_case("a--b__c") == "a_b_c"
        assert snake_case("_leading_") == "leading"

    @pytest.mark.parametrize(
        "name, expected",
        [
            ("café", "café"),
            ("feature_café", "feature_café"),
            ("feature_日本", "feature_日本"),
            ("ÉtéFort", "été_fort"),
            ("straße-Mode", "straße_mode"),
        ],
    )
    def test_non_ascii_letters_are_kept(self, name: str, expected: str) -> None:
        assert snake_case(name) == expected

    def test_empty(self) -> None:
        assert snake_case("") == ""
