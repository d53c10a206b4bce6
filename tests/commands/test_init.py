"""Tests for the init command."""

from __future__ import annotations

import json
from pathlib import Path

from click.testing import CliRunner

from acltree.cli import cli


class TestInitCommand:
    def test_init_path(self, cli_runner: CliRunner, tmp_path: Path) -> None:
        result = cli_runner.invoke(cli, ["--json", "init", str(tmp_path)])
        assert result.exit_code == 0, result.output
        data = json.loads(result.output)["data"]
        assert data["strategy"] == "path"
        assert (tmp_path / "acltree.toml").is_file()

    def test_init_strategy(self, cli_runner: CliRunner, tmp_path: Path) -> None:
        result = cli_runner.invoke(cli, ["init", str(tmp_path), "--strategy", "adjacency"])
        assert result.exit_code == 0, result.output
        assert 'name = "adjacency"' in (tmp_path / "acltree.toml").read_text()

    def test_init_twice_fails(self, cli_runner: CliRunner, tmp_path: Path) -> None:
        cli_runner.invoke(cli, ["init", str(tmp_path)])
        result = cli_runner.invoke(cli, ["init", str(tmp_path)])
        assert result.exit_code == 1
        assert "ALREADY_INITIALIZED" in result.output

    def test_init_unknown_strategy(self, cli_runner: CliRunner, tmp_path: Path) -> None:
        result = cli_runner.invoke(cli, ["init", str(tmp_path), "--strategy", "nested-set"])
        assert result.exit_code == 1
        assert "Unknown strategy" in result.output
