"""Tests for snipgen.config -- XDG paths, atomic writes, index sources, precedence."""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any
from unittest.mock import patch

import pytest

from snipgen.config import (
    ENV_INDEX,
    ENV_LANGUAGE,
    _atomic_write,
    get_cache_dir,
    get_config_dir,
    get_data_dir,
    global_config_path,
    load_global_config,
    load_project_config,
    resolve_config,
    save_global_config,
    set_index_source,
)
from snipgen.exceptions import ConfigError
from snipgen.models import DEFAULT_INDEX_SOURCES, CacheConfig, GlobalConfig


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _write_json(path: Path, data: Any) -> None:
    """Write a dict as JSON to *path*, creating parent dirs."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data, indent=2), encoding="utf-8")


# ---------------------------------------------------------------------------
# XDG path resolution
# ---------------------------------------------------------------------------


class TestXDGPathsLinux:
    """XDG paths on Linux (the default XDG platform)."""

    def test_config_dir_xdg_default(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr("snipgen.config._is_xdg_platform", lambda: True)
        monkeypatch.delenv("XDG_CONFIG_HOME", raising=False)
        monkeypatch.setattr(Path, "home", classmethod(lambda cls: tmp_path))

        result = get_config_dir()
        assert result == tmp_path / ".config" / "snipgen"
        assert result.is_dir()

    def test_config_dir_xdg_custom(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        custom = tmp_path / "custom_config"
        monkeypatch.setattr("snipgen.config._is_xdg_platform", lambda: True)
        monkeypatch.setenv("XDG_CONFIG_HOME", str(custom))

        assert get_config_dir() == custom / "snipgen"

    def test_cache_dir_xdg_custom(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        custom = tmp_path / "custom_cache"
        monkeypatch.setattr("snipgen.config._is_xdg_platform", lambda: True)
        monkeypatch.setenv("XDG_CACHE_HOME", str(custom))

        result = get_cache_dir()
        assert result == custom / "snipgen"
        assert result.is_dir()

    def test_data_dir_xdg_default(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr("snipgen.config._is_xdg_platform", lambda: True)
        monkeypatch.delenv("XDG_DATA_HOME", raising=False)
        monkeypatch.setattr(Path, "home", classmethod(lambda cls: tmp_path))

        assert get_data_dir() == tmp_path / ".local" / "share" / "snipgen"


class TestXDGPathsFallback:
    """Fallback paths on non-XDG platforms (macOS, Windows)."""

    def test_fallback_layout(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr("snipgen.config._is_xdg_platform", lambda: False)
        monkeypatch.setattr(Path, "home", classmethod(lambda cls: tmp_path))

        assert get_config_dir() == tmp_path / ".snipgen"
        assert get_cache_dir() == tmp_path / ".snipgen" / "cache"
        assert get_data_dir() == tmp_path / ".snipgen" / "logs"


# ---------------------------------------------------------------------------
# Atomic writes
# ---------------------------------------------------------------------------


class TestAtomicWrite:
    """Temp-file-then-rename writes."""

    def test_writes_content(self, tmp_path: Path) -> None:
        target = tmp_path / "sub" / "file.json"
        _atomic_write(target, '{"a": 1}\n')
        assert target.read_text(encoding="utf-8") == '{"a": 1}\n'

    def test_overwrites_existing(self, tmp_path: Path) -> None:
        target = tmp_path / "file.json"
        target.write_text("old", encoding="utf-8")
        _atomic_write(target, "new")
        assert target.read_text(encoding="utf-8") == "new"

    def test_failure_leaves_no_temp_file(self, tmp_path: Path) -> None:
        target = tmp_path / "file.json"
        target.write_text("original", encoding="utf-8")
        with patch("snipgen.config.os.replace", side_effect=OSError("disk full")):
            with pytest.raises(OSError, match="disk full"):
                _atomic_write(target, "new")
        assert target.read_text(encoding="utf-8") == "original"
        assert [p.name for p in tmp_path.iterdir()] == ["file.json"]


# ---------------------------------------------------------------------------
# Global config
# ---------------------------------------------------------------------------


class TestGlobalConfig:
    """Loading, saving, and updating the user-wide config file."""

    def test_defaults_when_missing(self, isolated_config: Path) -> None:
        config = load_global_config()
        assert config.default_language == "c#"
        assert config.index_sources == DEFAULT_INDEX_SOURCES
        assert config.override_index is None
        assert config.cache == CacheConfig()

    def test_round_trip(self, isolated_config: Path) -> None:
        config = GlobalConfig(default_language="go", override_index="/tmp/graph.yaml")
        save_global_config(config)
        assert load_global_config() == config
        assert global_config_path().read_text(encoding="utf-8").endswith("\n")

    def test_invalid_json(self, isolated_config: Path) -> None:
        path = global_config_path()
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(ConfigError, match="Invalid global config"):
            load_global_config()

    def test_invalid_shape(self, isolated_config: Path) -> None:
        _write_json(global_config_path(), {"cache": {"ttl_seconds": "forever"}})
        with pytest.raises(ConfigError):
            load_global_config()

    def test_set_index_source_lowers_version(self, isolated_config: Path) -> None:
        set_index_source("Beta", "/specs/beta.yaml")
        assert load_global_config().index_sources["beta"] == "/specs/beta.yaml"
        assert load_global_config().index_sources["v1.0"] == DEFAULT_INDEX_SOURCES["v1.0"]


# ---------------------------------------------------------------------------
# Project config
# ---------------------------------------------------------------------------


class TestProjectConfig:
    """./snipgen.json in the working directory."""

    def test_missing(self, isolated_config: Path) -> None:
        assert load_project_config() is None

    def test_loaded(self, isolated_config: Path) -> None:
        _write_json(isolated_config / "snipgen.json", {"default_language": "php"})
        assert load_project_config() == {"default_language": "php"}

    def test_not_an_object(self, isolated_config: Path) -> None:
        _write_json(isolated_config / "snipgen.json", ["php"])
        with pytest.raises(ConfigError, match="expected a JSON object"):
            load_project_config()

    def test_invalid_json(self, isolated_config: Path) -> None:
        (isolated_config / "snipgen.json").write_text("{", encoding="utf-8")
        with pytest.raises(ConfigError, match="Invalid project config"):
            load_project_config()


# ---------------------------------------------------------------------------
# Precedence
# ---------------------------------------------------------------------------


class TestResolveConfig:
    """CLI > env > project > global > defaults."""

    def test_defaults(self, isolated_config: Path) -> None:
        config, language = resolve_config()
        assert language == "c#"
        assert config.override_index is None

    def test_global_language(self, isolated_config: Path) -> None:
        save_global_config(GlobalConfig(default_language="java"))
        assert resolve_config()[1] == "java"

    def test_project_overrides_global(self, isolated_config: Path) -> None:
        save_global_config(GlobalConfig(default_language="java"))
        _write_json(
            isolated_config / "snipgen.json",
            {
                "default_language": "python",
                "override_index": "./graph.yaml",
                "index_sources": {"Custom": "./custom.yaml"},
            },
        )
        config, language = resolve_config()
        assert language == "python"
        assert config.override_index == "./graph.yaml"
        assert config.index_sources["custom"] == "./custom.yaml"
        assert "v1.0" in config.index_sources

    def test_env_overrides_project(self, isolated_config: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        _write_json(isolated_config / "snipgen.json", {"default_language": "python"})
        monkeypatch.setenv(ENV_LANGUAGE, "go")
        monkeypatch.setenv(ENV_INDEX, "/env/graph.yaml")
        config, language = resolve_config()
        assert language == "go"
        assert config.override_index == "/env/graph.yaml"

    def test_cli_overrides_everything(self, isolated_config: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv(ENV_LANGUAGE, "go")
        monkeypatch.setenv(ENV_INDEX, "/env/graph.yaml")
        config, language = resolve_config(
            cli_language="typescript", cli_index="/cli/graph.yaml", cli_format="json"
        )
        assert language == "typescript"
        assert config.override_index == "/cli/graph.yaml"
        assert config.output.format == "json"

    def test_resolution_does_not_persist(self, isolated_config: Path) -> None:
        resolve_config(cli_index="/cli/graph.yaml")
        assert not os.path.exists(global_config_path())
