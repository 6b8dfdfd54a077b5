"""YAML and environment configuration for the OpenAI model plugin."""

from __future__ import annotations

import os
from pathlib import Path

import yaml
from dotenv import find_dotenv, load_dotenv
from pydantic import BaseModel, Field, SecretStr, ValidationError, field_validator

from gptbridge.errors import ConfigError
from gptbridge.logging import get_logger
from gptbridge.registry import SUPPORTED_GPT_MODELS, list_models

logger = get_logger("config")

# Settings field -> environment variable consulted when the field is unset.
_ENV_VARS: dict[str, str] = {
    "api_key": "OPENAI_API_KEY",
    "base_url": "OPENAI_BASE_URL",
    "organization": "OPENAI_ORG_ID",
    "azure_endpoint": "AZURE_OPENAI_ENDPOINT",
}


def _check_supported(names: list[str]) -> list[str]:
    unknown = [name for name in names if name not in SUPPORTED_GPT_MODELS]
    if unknown:
        raise ValueError(
            f"Unsupported model(s): {', '.join(unknown)}. "
            f"Supported: {', '.join(list_models())}"
        )
    return names


class PluginSettings(BaseModel):
    """Settings used to define the OpenAI models.

    Attributes:
        api_key: OpenAI API key (kept out of reprs and logs).
        base_url: Optional custom API base URL.
        organization: Optional OpenAI organization id.
        models: Registry names of the models to define (default: all).
        azure_endpoint: When set, models are served from Azure OpenAI.
        azure_deployments: Registry name -> Azure deployment name.
    """

    api_key: SecretStr | None = None
    base_url: str | None = None
    organization: str | None = None
    models: list[str] = Field(default_factory=list_models)
    azure_endpoint: str | None = None
    azure_deployments: dict[str, str] = {}

    @field_validator("models")
    @classmethod
    def _models_must_be_supported(cls, v: list[str]) -> list[str]:
        return _check_supported(v)

    @field_validator("azure_deployments")
    @classmethod
    def _deployments_must_be_supported(cls, v: dict[str, str]) -> dict[str, str]:
        _check_supported(list(v))
        return v

    @property
    def use_azure(self) -> bool:
        """Whether models should be served from Azure OpenAI."""
        return bool(self.azure_endpoint)


def validate_config_path(path: str | Path) -> Path:
    """Resolve and validate that a config file path exists.

    Args:
        path: Path to the YAML configuration file.

    Returns:
        A resolved ``Path`` object.

    Raises:
        FileNotFoundError: If the file does not exist.
    """
    resolved = Path(path)
    if not resolved.is_file():
        raise FileNotFoundError(f"Config file not found: {resolved}")
    return resolved


def _parse_yaml(path: Path) -> dict:
    """Read and parse a YAML file.

    Args:
        path: Path to the YAML file.

    Returns:
        Parsed YAML content as a dictionary (empty for an empty file).

    Raises:
        ConfigError: If the YAML is malformed or not a mapping.
    """
    with open(path, "r", encoding="utf-8") as fh:
        try:
            data = yaml.safe_load(fh)
        except yaml.YAMLError as exc:
            raise ConfigError(f"Malformed YAML in {path}: {exc}") from exc

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(
            f"Expected a YAML mapping at top level, got {type(data).__name__}"
        )
    return data


def load_settings(path: str | Path | None = None) -> PluginSettings:
    """Load plugin settings from an optional YAML file and the environment.

    Expected YAML shape::

        openai:
          base_url: "https://gateway.example.com/v1"
          models: ["gpt-4o", "gpt-4o-mini"]
          azure_deployments:
            gpt-4o: "prod-gpt4o"

    Values absent from the file are taken from ``OPENAI_API_KEY``,
    ``OPENAI_BASE_URL``, ``OPENAI_ORG_ID`` and ``AZURE_OPENAI_ENDPOINT``.
    A ``.env`` file in the working directory is loaded first without
    overriding variables that are already set.

    Args:
        path: Optional path to the YAML configuration file.

    Returns:
        Validated ``PluginSettings``.

    Raises:
        FileNotFoundError: If *path* is given but doesn't exist.
        ConfigError: If the YAML or any setting is invalid.
    """
    load_dotenv(find_dotenv(usecwd=True), override=False)

    data: dict = {}
    if path is not None:
        raw = _parse_yaml(validate_config_path(path))
        section = raw.get("openai", {})
        if not isinstance(section, dict):
            raise ConfigError(
                f"'openai' section must be a YAML mapping, got {type(section).__name__}"
            )
        data.update(section)

    for field_name, env_var in _ENV_VARS.items():
        if data.get(field_name) is None and os.environ.get(env_var):
            data[field_name] = os.environ[env_var]

    try:
        settings = PluginSettings(**data)
    except ValidationError as exc:
        raise ConfigError(f"Invalid plugin settings: {exc}") from exc

    logger.debug(
        "Loaded settings: %d model(s), azure=%s", len(settings.models), settings.use_azure
    )
    return settings
