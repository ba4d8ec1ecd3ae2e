"""Tests for the agentport command surface."""
from __future__ import annotations

from typing import TYPE_CHECKING

import pytest
from agentport_cli.main import app
from conftest import write_agent
from typer.testing import CliRunner

if TYPE_CHECKING:
    from pathlib import Path

runner = CliRunner()


@pytest.fixture
def project(tmp_path: Path, corpus: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """A project directory holding the corpus, isolated from any user config."""
    monkeypatch.setenv("HOME", str(tmp_path / "home"))
    monkeypatch.chdir(tmp_path)
    return tmp_path


def _invoke(project: Path, *args: str):
    return runner.invoke(
        app,
        [
            "--source", str(project / "agents"),
            "--target", str(project / "out"),
            "--index", str(project / "AGENT_INDEX.md"),
            *args,
        ],
    )


class TestConvert:
    def test_convert(self, project: Path) -> None:
        result = _invoke(project, "convert")

        assert result.exit_code == 0, result.output
        assert "3 document(s) converted" in result.output
        assert (project / "out" / "re-frame-event-handler.md").exists()
        assert (project / "AGENT_INDEX.md").exists()

    def test_dry_run(self, project: Path) -> None:
        result = _invoke(project, "convert", "--dry-run")

        assert result.exit_code == 0, result.output
        assert "Would write" in result.output
        assert not (project / "out").exists()

    def test_failures_named(self, project: Path) -> None:
        write_agent(project / "agents", "re-frame-rogue-agent", tools="Read, Delete")

        result = _invoke(project, "convert")

        assert result.exit_code == 0, result.output
        assert "FAIL" in result.output
        assert "re-frame-rogue-agent" in result.output

    def test_empty_corpus_exits_non_zero(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("HOME", str(tmp_path / "home"))
        monkeypatch.chdir(tmp_path)

        result = _invoke(tmp_path / "nothing-here", "convert")

        assert result.exit_code == 1
        assert "Index not rebuilt" in result.output
        assert not (tmp_path / "nothing-here" / "AGENT_INDEX.md").exists()


class TestValidate:
    def test_clean(self, project: Path) -> None:
        result = _invoke(project, "validate")

        assert result.exit_code == 0, result.output
        assert "passed validation" in result.output

    def test_diagnostics_exit_non_zero(self, project: Path) -> None:
        write_agent(project / "agents", "re-frame-rogue-agent", tools="Read, Delete")

        result = _invoke(project, "validate")

        assert result.exit_code == 1
        assert "unknown-tool" in result.output
        assert "1 diagnostic(s)" in result.output

    def test_missing_source_exits_non_zero(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("HOME", str(tmp_path / "home"))
        monkeypatch.chdir(tmp_path)

        result = _invoke(tmp_path / "nothing-here", "validate")

        assert result.exit_code == 1
        assert "No documents could be validated" in result.output


class TestIndex:
    def test_check_then_rebuild(self, project: Path) -> None:
        assert _invoke(project, "index", "--check").exit_code == 1
        assert not (project / "AGENT_INDEX.md").exists()

        assert _invoke(project, "index").exit_code == 0
        assert _invoke(project, "index", "--check").exit_code == 0

    def test_from_target(self, project: Path) -> None:
        _invoke(project, "convert")

        result = _invoke(project, "index", "--from", "target")

        assert result.exit_code == 0, result.output
        assert "target corpus" in result.output

    def test_check_over_empty_corpus_exits_non_zero(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("HOME", str(tmp_path / "home"))
        monkeypatch.chdir(tmp_path)

        result = _invoke(tmp_path / "nothing-here", "index", "--check")

        assert result.exit_code == 1

    def test_invalid_from(self, project: Path) -> None:
        result = _invoke(project, "index", "--from", "elsewhere")

        assert result.exit_code == 2


class TestSmoke:
    def test_built_in_sample(self, project: Path) -> None:
        result = _invoke(project, "smoke")

        assert result.exit_code == 0, result.output
        assert "PASS smoke test (re-frame-event-handler)" in result.output

    def test_failing_document(self, project: Path) -> None:
        path = write_agent(project, "rogue", tools="Delete")

        result = _invoke(project, "smoke", str(path))

        assert result.exit_code == 1
        assert "FAIL smoke test (rogue)" in result.output


class TestConfigAndInfo:
    def test_missing_config_file(self, project: Path) -> None:
        result = runner.invoke(app, ["--config", str(project / "nope.toml"), "config"])

        assert result.exit_code == 2
        assert "Configuration error" in result.output

    def test_bad_policy_in_config(self, project: Path) -> None:
        (project / "agentport.toml").write_text(
            '[policy]\nmode = "primary"\n', encoding="utf-8"
        )

        result = runner.invoke(app, ["convert"])

        assert result.exit_code == 2
        assert "Configuration error" in result.output

    def test_unknown_log_level(self, project: Path) -> None:
        result = runner.invoke(app, ["--log-level", "LOUD", "validate"])

        assert result.exit_code == 2
        assert "Configuration error" in result.output

    def test_config_shows_policy(self, project: Path) -> None:
        (project / "agentport.toml").write_text(
            "[policy]\ntemperature = 0.6\n", encoding="utf-8"
        )

        result = runner.invoke(app, ["config"])

        assert result.exit_code == 0, result.output
        assert "0.6" in result.output
        assert "subagent" in result.output

    def test_tools(self) -> None:
        result = runner.invoke(app, ["tools"])

        assert result.exit_code == 0, result.output
        assert "MultiEdit" in result.output
        assert "webfetch" in result.output

    def test_version(self) -> None:
        result = runner.invoke(app, ["version"])

        assert result.exit_code == 0
        assert "agentport 0.1.0" in result.output
