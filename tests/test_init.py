"""Tests for ``pbuild init`` scaffolding."""

from pathlib import Path

import pytest
from typer.testing import CliRunner

from pbuild.config import load_config
from pbuild.document import read_toml
from pbuild.init import app, profile_document, settings_document, spec_document
from pbuild.spec import Spec

runner = CliRunner()


class TestDocuments:
    def test_settings(self) -> None:
        text = settings_document().as_string()
        assert 'main_spec = "main"' in text
        assert 'cargo = "cargo"' in text
        assert 'cargo_subcommand = "build"' in text

    def test_spec_document_parses(self) -> None:
        spec = Spec.parse_str(spec_document("firmware").as_string())
        assert spec.name == "firmware"
        assert spec.types["target"].is_single
        assert spec.types["features"].key == "feature"
        assert list(spec.fields["target"]) == ["linux", "windows"]
        logging = spec.fields["features"]["logging"]
        assert str(logging.dependencies) == "target:linux OR target:windows"
        assert logging.properties["level"].default.data == 1

    def test_profile_document(self) -> None:
        text = profile_document("app").as_string()
        assert 'bins = ["app"]' in text
        assert 'target = "linux"' in text


class TestInitCommand:
    def test_creates_project(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.chdir(tmp_path)
        result = runner.invoke(app, ["--name", "fw", "--bin", "demo"])
        assert result.exit_code == 0, result.output
        assert "Created pbuild/pbuild.toml" in result.output

        assert read_toml(tmp_path / "pbuild" / "pbuild.toml")["pbuild"]["main_spec"] == "main"
        cfg = load_config(tmp_path)
        assert cfg.all_specs == ["main"]
        assert cfg.all_profiles == ["default"]

        profile = cfg.load_profile("default", check_dependencies=True)
        assert profile.spec.name == "fw"
        assert profile.bins == ["demo"]
        assert profile.rustc_cfg_flags() == [
            "--cfg",
            "'target=\"linux\"'",
            "--cfg",
            "'feature_logging'",
            "--cfg",
            "'feature_logging_level=2'",
        ]

    def test_defaults_to_directory_name(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        project = tmp_path / "my_crate"
        project.mkdir()
        monkeypatch.chdir(project)
        result = runner.invoke(app, [])
        assert result.exit_code == 0, result.output
        profile = load_config(project).load_profile("default")
        assert profile.spec.name == "my_crate"
        assert profile.bins == ["my_crate"]

    def test_refuses_existing(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        (tmp_path / "pbuild").mkdir()
        monkeypatch.chdir(tmp_path)
        result = runner.invoke(app, [])
        assert result.exit_code == 1
        assert not (tmp_path / "pbuild" / "specs").exists()
