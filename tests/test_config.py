"""Tests for gptbridge.config — YAML and environment settings."""

from __future__ import annotations

import os
from pathlib import Path
from unittest.mock import patch

import pytest

from gptbridge.config import PluginSettings, load_settings, validate_config_path
from gptbridge.errors import ConfigError
from gptbridge.registry import list_models

_ENV_VARS = (
    "OPENAI_API_KEY",
    "OPENAI_BASE_URL",
    "OPENAI_ORG_ID",
    "AZURE_OPENAI_ENDPOINT",
)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    """Isolate tests from the caller's environment and any local .env."""
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)


def _write(tmp_path: Path, text: str) -> Path:
    path = tmp_path / "gptbridge.yaml"
    path.write_text(text, encoding="utf-8")
    return path


class TestPluginSettings:
    """Tests for the settings model."""

    def test_defaults(self) -> None:
        settings = PluginSettings()
        assert settings.models == list_models()
        assert settings.api_key is None
        assert settings.use_azure is False

    def test_unknown_model_rejected(self) -> None:
        with pytest.raises(ValueError, match="gpt-5"):
            PluginSettings(models=["gpt-4o", "gpt-5"])

    def test_unknown_deployment_model_rejected(self) -> None:
        with pytest.raises(ValueError, match="davinci"):
            PluginSettings(azure_deployments={"davinci": "legacy"})

    def test_api_key_hidden_from_repr(self) -> None:
        settings = PluginSettings(api_key="sk-secret")
        assert "sk-secret" not in repr(settings)
        assert settings.api_key is not None
        assert settings.api_key.get_secret_value() == "sk-secret"

    def test_use_azure(self) -> None:
        assert PluginSettings(azure_endpoint="https://x.openai.azure.com").use_azure


class TestValidateConfigPath:
    """Tests for config path validation."""

    def test_existing_file(self, tmp_path: Path) -> None:
        path = _write(tmp_path, "openai: {}\n")
        assert validate_config_path(str(path)) == path

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            validate_config_path(tmp_path / "missing.yaml")


class TestLoadSettings:
    """Tests for load_settings."""

    def test_no_file_no_env(self) -> None:
        settings = load_settings()
        assert settings.models == list_models()
        assert settings.base_url is None

    def test_yaml_section(self, tmp_path: Path) -> None:
        path = _write(
            tmp_path,
            "openai:\n"
            "  base_url: https://gw.example.com/v1\n"
            "  models: [gpt-4o, gpt-4o-mini]\n"
            "  azure_deployments:\n"
            "    gpt-4o: prod-gpt4o\n",
        )
        settings = load_settings(path)
        assert settings.base_url == "https://gw.example.com/v1"
        assert settings.models == ["gpt-4o", "gpt-4o-mini"]
        assert settings.azure_deployments == {"gpt-4o": "prod-gpt4o"}

    def test_env_fallbacks(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("OPENAI_API_KEY", "sk-env")
        monkeypatch.setenv("OPENAI_ORG_ID", "org-1")
        monkeypatch.setenv("AZURE_OPENAI_ENDPOINT", "https://env.openai.azure.com")
        settings = load_settings()
        assert settings.api_key is not None
        assert settings.api_key.get_secret_value() == "sk-env"
        assert settings.organization == "org-1"
        assert settings.use_azure is True

    def test_file_wins_over_env(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("OPENAI_BASE_URL", "https://env.example.com/v1")
        path = _write(tmp_path, "openai:\n  base_url: https://file.example.com/v1\n")
        assert load_settings(path).base_url == "https://file.example.com/v1"

    def test_dotenv_loaded(self, tmp_path: Path) -> None:
        (tmp_path / ".env").write_text("OPENAI_BASE_URL=https://dotenv.example.com/v1\n")
        with patch.dict(os.environ):
            settings = load_settings()
        assert settings.base_url == "https://dotenv.example.com/v1"

    def test_empty_file(self, tmp_path: Path) -> None:
        settings = load_settings(_write(tmp_path, ""))
        assert settings.models == list_models()

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            load_settings(tmp_path / "missing.yaml")

    def test_malformed_yaml(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigError, match="Malformed YAML"):
            load_settings(_write(tmp_path, "openai: [unclosed\n"))

    def test_top_level_not_mapping(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigError, match="YAML mapping"):
            load_settings(_write(tmp_path, "- a\n- b\n"))

    def test_section_not_mapping(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigError, match="'openai' section"):
            load_settings(_write(tmp_path, "openai: gpt-4o\n"))

    def test_invalid_model(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigError, match="gpt-5"):
            load_settings(_write(tmp_path, "openai:\n  models: [gpt-5]\n"))
