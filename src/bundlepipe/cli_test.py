from __future__ import annotations

import json
from pathlib import Path

import pytest
from click.testing import CliRunner

from bundlepipe import cli as cli_mod
from bundlepipe.fakes_test import FakeEngine


@pytest.fixture
def fake_engine(monkeypatch):
    engines = []

    def factory(binary=None):
        eng = FakeEngine(Path.cwd())
        engines.append(eng)
        return eng

    monkeypatch.setattr(cli_mod, "EsbuildEngine", factory)
    return engines


def test_build_writes_both_artifacts(project, fake_engine):
    result = CliRunner().invoke(cli_mod.cli, ["build"])

    assert result.exit_code == 0, result.output
    assert "minified: SUCCESS" in result.output
    assert "debug: SUCCESS" in result.output
    assert (project / "fable_build" / "cobie-coach.min.js").is_file()
    assert (project / "fable_build" / "cobie-coach.js").is_file()
    assert fake_engine[0].calls == ["minified", "debug"]


def test_bare_invocation_runs_build(project, fake_engine):
    result = CliRunner().invoke(cli_mod.cli, [])
    assert result.exit_code == 0, result.output
    assert (project / "fable_build" / "cobie-coach.js").is_file()


def test_missing_entry_exits_nonzero_and_writes_nothing(project, fake_engine):
    (project / "Interop" / "JS.fs.js").unlink()

    result = CliRunner().invoke(cli_mod.cli, ["build"])

    assert result.exit_code == 1
    assert "Job 'minified' failed (resolution)" in result.output
    assert 'Could not resolve "./Interop/JS.fs.js"' in result.output
    assert not (project / "fable_build").exists()


def test_options_override_config(project, fake_engine):
    result = CliRunner().invoke(
        cli_mod.cli,
        ["build", "--out-dir", "dist", "--package", "coach", "--global-name", "Coach"],
    )
    assert result.exit_code == 0, result.output
    text = (project / "dist" / "coach.js").read_text(encoding="utf-8")
    assert text.startswith("var Coach =")
    assert (project / "dist" / "coach.min.js").is_file()


def test_bad_config_file(project, fake_engine):
    result = CliRunner().invoke(cli_mod.cli, ["build", "--config", "nope.py"])
    assert result.exit_code == 1
    assert "Failed to load config" in result.output
    assert fake_engine == []


def test_plan_json(project):
    result = CliRunner().invoke(cli_mod.cli, ["plan", "--json"])
    assert result.exit_code == 0, result.output
    jobs = json.loads(result.output)
    assert [j["name"] for j in jobs] == ["minified", "debug"]
    assert [j["minify"] for j in jobs] == [True, False]
    assert {j["global_name"] for j in jobs} == {"COBieCoach"}
    assert {j["format"] for j in jobs} == {"iife"}


def test_plan_text(project):
    result = CliRunner().invoke(cli_mod.cli, ["plan"])
    assert result.exit_code == 0, result.output
    assert "minified: ./Interop/JS.fs.js -> fable_build/cobie-coach.min.js" in result.output
    assert "debug: ./Interop/JS.fs.js -> fable_build/cobie-coach.js" in result.output
