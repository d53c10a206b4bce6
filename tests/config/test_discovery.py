"""Tests for acltree.toml discovery."""

from pathlib import Path

import pytest

from acltree.config.discovery import find_config


class TestFindConfig:
    def test_finds_in_start_dir(self, tmp_path: Path) -> None:
        (tmp_path / "acltree.toml").write_text("")
        assert find_config(tmp_path) == tmp_path.resolve() / "acltree.toml"

    def test_walks_up(self, tmp_path: Path) -> None:
        (tmp_path / "acltree.toml").write_text("")
        deep = tmp_path / "x" / "y" / "z"
        deep.mkdir(parents=True)
        assert find_config(deep) == tmp_path.resolve() / "acltree.toml"

    def test_env_var_wins(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        other = tmp_path / "elsewhere.toml"
        other.write_text("")
        (tmp_path / "acltree.toml").write_text("")
        monkeypatch.setenv("ACLTREE_CONFIG", str(other))
        assert find_config(tmp_path) == other

    def test_env_var_missing_file(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("ACLTREE_CONFIG", str(tmp_path / "nope.toml"))
        assert find_config(tmp_path) is None

