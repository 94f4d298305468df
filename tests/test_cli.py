"""Tests for the shared CLI helpers in pbuild.cli."""

import json
from pathlib import Path

import pytest
import typer

from pbuild.cli import error_exit, get_config, json_print, load_profile_or_exit

# ---------------------------------------------------------------------------
# error_exit()
# ---------------------------------------------------------------------------


class TestErrorExit:
    def test_plain_stderr_and_exit(self, capsys: pytest.CaptureFixture[str]) -> None:
        with pytest.raises(typer.Exit) as exc_info:
            error_exit("something broke")
        assert exc_info.value.exit_code == 1
        captured = capsys.readouterr()
        assert "something broke" in captured.err
        assert captured.out == ""

    def test_custom_exit_code(self, capsys: pytest.CaptureFixture[str]) -> None:
        with pytest.raises(typer.Exit) as exc_info:
            error_exit("fatal", code=101)
        assert exc_info.value.exit_code == 101

    def test_brackets_are_not_markup(self, capsys: pytest.CaptureFixture[str]) -> None:
        with pytest.raises(typer.Exit):
            error_exit("[spec] section not found.")
        assert "[spec] section not found." in capsys.readouterr().err

    def test_json_mode_stdout(self, capsys: pytest.CaptureFixture[str]) -> None:
        with pytest.raises(typer.Exit):
            error_exit("bad input", json_mode=True)
        captured = capsys.readouterr()
        assert json.loads(captured.out) == {"error": "bad input"}
        assert captured.err == ""


# ---------------------------------------------------------------------------
# json_print()
# ---------------------------------------------------------------------------


class TestJsonPrint:
    def test_dict_output(self, capsys: pytest.CaptureFixture[str]) -> None:
        json_print({"profile": "release", "ok": True})
        captured = capsys.readouterr()
        assert json.loads(captured.out) == {"profile": "release", "ok": True}
        assert captured.err == ""

    def test_list_output(self, capsys: pytest.CaptureFixture[str]) -> None:
        json_print(["--cfg", "feature_logging"])
        assert json.loads(capsys.readouterr().out) == ["--cfg", "feature_logging"]


# ---------------------------------------------------------------------------
# Loading helpers
# ---------------------------------------------------------------------------


class TestLoadingHelpers:
    def test_get_config_without_project(
        self, tmp_path: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        with pytest.raises(typer.Exit) as exc_info:
            get_config(tmp_path, json_mode=True)
        assert exc_info.value.exit_code == 1
        assert "pbuild/" in json.loads(capsys.readouterr().out)["error"]

    def test_get_config_missing_main_spec_unquoted(
        self, tmp_path: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        (tmp_path / "pbuild" / "specs").mkdir(parents=True)
        with pytest.raises(typer.Exit):
            get_config(tmp_path, json_mode=True)
        error = json.loads(capsys.readouterr().out)["error"]
        assert error.startswith("Main schema 'main' not found")

    def test_get_config_malformed_settings(
        self, tmp_path: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        (tmp_path / "pbuild").mkdir()
        (tmp_path / "pbuild" / "pbuild.toml").write_text('[pbuild]\ncargo = ["cargo"]\n')
        with pytest.raises(typer.Exit) as exc_info:
            get_config(tmp_path, json_mode=True)
        assert exc_info.value.exit_code == 1
        assert "`pbuild.cargo`" in json.loads(capsys.readouterr().out)["error"]

    def test_load_profile_or_exit_reports_profile_error(
        self, tmp_path: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        specs = tmp_path / "pbuild" / "specs"
        specs.mkdir(parents=True)
        (specs / "main.toml").write_text(
            '[spec]\nname = "s"\ntypes = { os = "os" }\n\n[os.linux]\ndescription = "l"\n'
        )
        profiles = tmp_path / "pbuild" / "profiles"
        profiles.mkdir()
        (profiles / "bad.toml").write_text('[profile]\ndescription = "d"\n\n[config]\n')
        with pytest.raises(typer.Exit):
            load_profile_or_exit("bad", tmp_path, json_mode=True)
        error = json.loads(capsys.readouterr().out)["error"]
        assert "bins" in error
