"""Unit tests for smartbom.config."""

from __future__ import annotations

import tomllib
from pathlib import Path

import pytest

from smartbom.config import (
    DEFAULT_CONFIG_DIR,
    DEFAULT_CONFIG_FILE,
    SmartBOMConfig,
    default_config_toml,
    load_config,
)
from smartbom.exceptions import ConfigurationError


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    import os

    for key in list(os.environ):
        if key.startswith("SMARTBOM_"):
            monkeypatch.delenv(key)


class TestDefaults:
    def test_engine_defaults(self) -> None:
        config = SmartBOMConfig()
        assert config.max_attempts == 3
        assert config.base_retry_delay == 1.0
        assert config.supplier_call_delay == 1.0
        assert config.batch_size == 3
        assert config.batch_delay == 2.0
        assert config.alternatives_timeout == 60.0
        assert config.suppliers_timeout == 120.0

    def test_default_toml_round_trips(self) -> None:
        data = tomllib.loads(default_config_toml())
        assert data["engine"]["batch_size"] == 3
        assert data["research"]["suppliers_timeout"] == 120.0

    def test_default_toml_matches_model(self, tmp_path: Path) -> None:
        path = tmp_path / "config.toml"
        path.write_text(default_config_toml())
        assert load_config(path, project_dir=tmp_path) == SmartBOMConfig(project_dir=tmp_path)

    def test_prompt_dir_relative_to_project(self, tmp_path: Path) -> None:
        assert SmartBOMConfig(project_dir=tmp_path).prompt_dir() is None
        config = SmartBOMConfig(project_dir=tmp_path, template_dir=Path("prompts"))
        assert config.prompt_dir() == tmp_path / "prompts"


class TestLoadConfig:
    def test_no_file_uses_defaults(self, tmp_path: Path) -> None:
        config = load_config(project_dir=tmp_path)
        assert config.batch_size == 3
        assert config.project_dir == tmp_path

    def test_project_file_discovered(self, tmp_path: Path) -> None:
        path = tmp_path / DEFAULT_CONFIG_DIR / DEFAULT_CONFIG_FILE
        path.parent.mkdir()
        path.write_text("[engine]\nbatch_size = 5\nbatch_delay = 0.5\n")

        config = load_config(project_dir=tmp_path)

        assert config.batch_size == 5
        assert config.batch_delay == 0.5

    def test_explicit_path(self, tmp_path: Path) -> None:
        path = tmp_path / "custom.toml"
        path.write_text('alternatives_model = "openai/gpt-4o"\n')
        assert load_config(path).alternatives_model == "openai/gpt-4o"

    def test_explicit_missing_path(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigurationError, match="not found"):
            load_config(tmp_path / "missing.toml")

    def test_invalid_toml(self, tmp_path: Path) -> None:
        path = tmp_path / "bad.toml"
        path.write_text("batch_size = = 3")
        with pytest.raises(ConfigurationError, match="Invalid TOML"):
            load_config(path)

    def test_invalid_value(self, tmp_path: Path) -> None:
        path = tmp_path / "bad.toml"
        path.write_text("[engine]\nbatch_size = 0\n")
        with pytest.raises(ConfigurationError, match="Invalid configuration"):
            load_config(path)

    def test_env_override(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        path = tmp_path / "config.toml"
        path.write_text("[engine]\nbatch_size = 5\n")
        monkeypatch.setenv("SMARTBOM_BATCH_SIZE", "7")
        monkeypatch.setenv("SMARTBOM_BATCH_DELAY", "0")
        monkeypatch.setenv("SMARTBOM_UNKNOWN_FIELD", "ignored")

        config = load_config(path)

        assert config.batch_size == 7
        assert config.batch_delay == 0.0

    def test_env_override_validated(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("SMARTBOM_MAX_ATTEMPTS", "zero")
        with pytest.raises(ConfigurationError):
            load_config(project_dir=tmp_path)
