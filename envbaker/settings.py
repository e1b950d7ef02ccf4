"""Runtime configuration from environment variables and an optional YAML file."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import yaml
from jinja2 import Environment, TemplateSyntaxError
from pydantic import AliasChoices, Field, SecretStr, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .core.errors import SettingsError
from .workspace.layout import default_solutions_root

logger = logging.getLogger(__name__)


class EnvbakerSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="ENVBAKER_", case_sensitive=False, populate_by_name=True
    )

    solutions_root: Path = Field(default_factory=default_solutions_root)
    github_api_url: str = "https://api.github.com"
    github_token: SecretStr | None = Field(
        default=None,
        validation_alias=AliasChoices("ENVBAKER_GITHUB_TOKEN", "GITHUB_TOKEN", "GH_TOKEN"),
    )
    repo_private: bool = True
    default_branch: str = "master"
    commit_message_template: str = "first commit for {{ name }}"
    http_timeout: float = Field(default=30.0, gt=0)
    retry_attempts: int = Field(default=3, ge=1)

    @field_validator("commit_message_template")
    @classmethod
    def _check_template(cls, value: str) -> str:
        try:
            Environment().parse(value)
        except TemplateSyntaxError as e:
            raise ValueError(f"Invalid commit message template: {e}") from e
        return value

    @field_validator("default_branch")
    @classmethod
    def _check_branch(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("default_branch must not be empty")
        return value


def _read_config_file(path: Path) -> dict[str, Any]:
    try:
        data = yaml.safe_load(path.read_text()) or {}
    except (OSError, yaml.YAMLError) as e:
        raise SettingsError(f"Failed to read config file {path}: {e}") from e
    if not isinstance(data, dict):
        raise SettingsError(f"Config file {path} must contain a mapping")
    return data


def load_settings(config_path: Path | None = None, **overrides: Any) -> EnvbakerSettings:
    """Load settings with precedence overrides > environment > YAML file > defaults.

    Args:
        config_path: Optional YAML file with setting names as keys
        **overrides: Explicit values; ``None`` entries are ignored

    Returns:
        Validated settings
    """
    file_values = _read_config_file(config_path) if config_path else {}
    explicit = {k: v for k, v in overrides.items() if v is not None}

    try:
        from_env = EnvbakerSettings()
        env_values = {name: getattr(from_env, name) for name in from_env.model_fields_set}
        settings = EnvbakerSettings(**{**file_values, **env_values, **explicit})
    except ValidationError as e:
        raise SettingsError(f"Invalid configuration: {e}") from e

    logger.debug(f"Settings loaded (solutions_root={settings.solutions_root})")
    return settings
