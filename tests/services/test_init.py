"""Tests for InitService."""

from __future__ import annotations

import tomllib
from pathlib import Path

import pytest

from acltree.services.init import InitService


class TestInitProject:
    @pytest.mark.parametrize("strategy", ["path", "adjacency"])
    def test_creates_config_and_database(self, tmp_path: Path, strategy: str) -> None:
        result = InitService.init_project(tmp_path, strategy=strategy)
        assert result.ok
        config = tomllib.loads((tmp_path / "acltree.toml").read_text())
        assert config["strategy"]["name"] == strategy
        assert (tmp_path / ".acltree" / "acltree.db").is_file()
        assert result.data["strategy"] == strategy
        assert result.data["strict_mode"] is False

    def test_refuses_existing(self, tmp_path: Path) -> None:
        InitService.init_project(tmp_path)
        result = InitService.init_project(tmp_path)
        assert not result.ok
        assert result.error is not None
        assert result.error.code == "ALREADY_INITIALIZED"

    def test_force(self, tmp_path: Path) -> None:
        InitService.init_project(tmp_path)
        result = InitService.init_project(tmp_path, strategy="adjacency", force=True)
        assert result.ok
        assert result.data["prefix"] == "al."

    def test_unknown_strategy(self, tmp_path: Path) -> None:
        result = InitService.init_project(tmp_path, strategy="nested-set")
        assert not result.ok
        assert result.error is not None
        assert result.error.code == "CONFIGURATION_ERROR"
        assert not (tmp_path / "acltree.toml").exists()
