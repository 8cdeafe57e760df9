"""Tests for config file discovery."""

from pathlib import Path

import pytest

from envfold.config.discovery import (
    CONFIG_ENV_VAR,
    CONFIG_FILENAME,
    ConfigNotFoundError,
    find_config,
    locate_config,
)


class TestFindConfig:
    def test_finds_in_current_dir(self, tmp_path: Path) -> None:
        config_file = tmp_path / CONFIG_FILENAME
        config_file.write_text("")
        assert find_config(tmp_path) == config_file

    def test_walks_up(self, tmp_path: Path) -> None:
        config_file = tmp_path / CONFIG_FILENAME
        config_file.write_text("")
        child = tmp_path / "a" / "b" / "c"
        child.mkdir(parents=True)
        assert find_config(child) == config_file

    def test_returns_none_when_not_found(self, tmp_path: Path) -> None:
        child = tmp_path / "empty"
        child.mkdir()
        assert find_config(child) is None

    def test_ignores_env_var(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        custom = tmp_path / "custom.toml"
        custom.write_text("")
        monkeypatch.setenv(CONFIG_ENV_VAR, str(custom))
        (tmp_path / "empty").mkdir()
        assert find_config(tmp_path / "empty") is None


class TestLocateConfig:
    def test_explicit_path_wins(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        explicit = tmp_path / "explicit.toml"
        explicit.write_text("")
        from_env = tmp_path / "env.toml"
        from_env.write_text("")
        monkeypatch.setenv(CONFIG_ENV_VAR, str(from_env))
        assert locate_config(str(explicit), tmp_path) == explicit

    def test_env_var_beats_walk_up(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        (tmp_path / CONFIG_FILENAME).write_text("")
        custom = tmp_path / "custom.toml"
        custom.write_text("")
        monkeypatch.setenv(CONFIG_ENV_VAR, str(custom))
        assert locate_config(start=tmp_path) == custom

    def test_falls_back_to_walk_up(self, tmp_path: Path) -> None:
        config_file = tmp_path / CONFIG_FILENAME
        config_file.write_text("")
        assert locate_config(start=tmp_path) == config_file

    def test_missing_explicit_path(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigNotFoundError, match="--config"):
            locate_config(tmp_path / "nope.toml")

    def test_missing_env_var_file(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        (tmp_path / CONFIG_FILENAME).write_text("")
        monkeypatch.setenv(CONFIG_ENV_VAR, str(tmp_path / "nope.toml"))
        with pytest.raises(ConfigNotFoundError) as excinfo:
            locate_config(start=tmp_path)
        assert excinfo.value.source == CONFIG_ENV_VAR
