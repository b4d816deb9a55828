"""Configuration management for the Model Router service."""

import os
import re
from pathlib import Path
from typing import Any

import yaml
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Provider credentials are not settings: the provider gate reads
    them from the process environment on every check.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Service configuration
    service_name: str = Field(default="model-router")
    service_port: int = Field(default=8000)
    log_level: str = Field(default="INFO")

    # Provider endpoints
    cerebras_base_url: str = Field(default="https://api.cerebras.ai/v1")
    ai_gateway_base_url: str = Field(default="https://ai-gateway.vercel.sh/v1")

    # Routing
    default_model: str = Field(default="cerebras/gpt-oss-120b")

    # Timeouts
    default_timeout: float = Field(default=60.0)

    # Response cache
    cache_enabled: bool = Field(default=True)
    cache_max_size: int = Field(default=1000)
    cache_ttl_seconds: float = Field(default=3600.0)

    # Config file path
    config_path: str = Field(default="config/model-router.yaml")


def _substitute_env_vars(value: Any, settings: Settings) -> Any:
    """Recursively substitute environment variables in config values."""
    if isinstance(value, str):
        # Match ${VAR:-default} or ${VAR}
        pattern = r'\$\{([A-Z_][A-Z0-9_]*)(?::-([^}]*))?\}'

        def replace(match: re.Match) -> str:
            var_name = match.group(1)
            default = match.group(2) or ""

            # Check settings first, then environment
            attr_name = var_name.lower()
            if attr_name in Settings.model_fields:
                return str(getattr(settings, attr_name))
            return os.environ.get(var_name, default)

        return re.sub(pattern, replace, value)
    elif isinstance(value, dict):
        return {k: _substitute_env_vars(v, settings) for k, v in value.items()}
    elif isinstance(value, list):
        return [_substitute_env_vars(item, settings) for item in value]
    return value


def load_router_config(settings: Settings) -> dict[str, Any]:
    """
    Load and parse the model-router.yaml configuration.

    The file is optional; an empty mapping is returned when it is absent.

    Raises:
        ValueError: If the file does not contain a mapping at the top level.
    """
    config_path = Path(settings.config_path)

    if not config_path.exists():
        # Try relative to the project root
        config_path = Path(__file__).parent.parent / "config" / "model-router.yaml"

    if not config_path.exists():
        return {}

    with open(config_path, encoding="utf-8") as f:
        raw_config = yaml.safe_load(f) or {}

    if not isinstance(raw_config, dict):
        raise ValueError(f"Top-level configuration must be a mapping: {config_path}")

    return _substitute_env_vars(raw_config, settings)


# Global settings instance
_settings: Settings | None = None


def get_settings() -> Settings:
    """Get the global settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def get_router_config() -> dict[str, Any]:
    """Get the processed router configuration."""
    return load_router_config(get_settings())
