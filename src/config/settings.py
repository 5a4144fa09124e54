"""
Configuration management for the Web Search Gateway.

Configuration sources:
- config.yaml: Application settings (non-secrets)
- Environment variables: Secrets and deployment overrides (API key, provider, limits)

ENV vars override YAML values. Out-of-range values fail validation when the
settings are loaded, so a misconfigured deployment never starts.
"""

import os
from functools import lru_cache
from pathlib import Path
from typing import List, Literal

import yaml
from pydantic import BaseModel, Field, field_validator

from src.domain.exceptions import ConfigurationError


ProviderName = Literal["brave", "serpapi", "google_custom_search", "mock"]


class AppSettings(BaseModel):
    """Application-level settings."""
    name: str = "Web Search Gateway"
    version: str = "1.0.0"
    debug: bool = False
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    log_format: Literal["json", "text"] = "json"


class APISettings(BaseModel):
    """API server settings."""
    host: str = "0.0.0.0"
    port: int = 8080
    workers: int = 1
    cors_origins: List[str] = ["*"]


class WebSearchSettings(BaseModel):
    """Search provider, cache and rate limit settings."""
    provider: ProviderName = "brave"
    api_key: str = ""  # From ENV: WEBSEARCH_API_KEY
    default_result_count: int = Field(default=10, ge=1, le=100)
    rate_limit_per_minute: int = Field(default=60, ge=1, le=300)
    cache_expiration_seconds: int = Field(default=300, ge=1, le=86400)
    cache_max_entries: int = Field(default=1000, ge=1)
    request_timeout: float = Field(default=15.0, ge=1, le=60)
    health_check_interval_seconds: int = Field(default=30, ge=0, le=3600)
    rate_limited_paths: List[str] = ["/mcp", "/sse"]

    @field_validator("rate_limited_paths")
    @classmethod
    def validate_paths(cls, v: List[str]) -> List[str]:
        """Path prefixes must be absolute."""
        for path in v:
            if not path.startswith("/"):
                raise ValueError(f"Rate limited path must start with '/': {path}")
        return v

    def check_credentials(self) -> None:
        """
        Verify the credential matches what the configured provider needs.

        Raises:
            ConfigurationError: If the key is missing or malformed
        """
        if self.provider == "mock":
            return
        if not self.api_key.strip():
            raise ConfigurationError(
                f"API key is required for provider '{self.provider}'",
                setting="websearch.api_key",
            )
        if self.provider == "google_custom_search":
            # Imported lazily: the adapters import logging, which imports this module
            from src.adapters.search.google_cse_client import split_credential
            split_credential(self.api_key)


class Settings(BaseModel):
    """Main settings container."""
    app: AppSettings = AppSettings()
    api: APISettings = APISettings()
    websearch: WebSearchSettings = WebSearchSettings()


def _load_yaml_config(yaml_path: Path) -> dict:
    """Load YAML config file if it exists."""
    if yaml_path.exists():
        with open(yaml_path, "r") as f:
            return yaml.safe_load(f) or {}
    return {}


def _env_overrides() -> dict:
    """
    Collect environment variable overrides for the websearch section.

    Values are returned raw so they pass through the same validation as
    YAML values.
    """
    mapping = {
        "WEBSEARCH_PROVIDER": "provider",
        "WEBSEARCH_API_KEY": "api_key",
        "WEBSEARCH_DEFAULT_RESULT_COUNT": "default_result_count",
        "WEBSEARCH_RATE_LIMIT_PER_MINUTE": "rate_limit_per_minute",
        "WEBSEARCH_CACHE_EXPIRATION_SECONDS": "cache_expiration_seconds",
    }
    overrides = {}
    for env_name, field_name in mapping.items():
        if os.environ.get(env_name):
            overrides[field_name] = os.environ[env_name]
    return overrides


def build_settings(yaml_config: dict) -> Settings:
    """Build validated settings from a YAML mapping plus ENV overrides."""
    app_config = dict(yaml_config.get("app", {}))
    if os.environ.get("LOG_LEVEL"):
        app_config["log_level"] = os.environ["LOG_LEVEL"].upper()

    websearch_config = {**yaml_config.get("websearch", {}), **_env_overrides()}

    return Settings(
        app=AppSettings(**app_config),
        api=APISettings(**yaml_config.get("api", {})),
        websearch=WebSearchSettings(**websearch_config),
    )


@lru_cache
def get_settings() -> Settings:
    """
    Get application settings.

    Loads from:
    1. config.yaml (application settings)
    2. Environment variables (secrets + overrides)
    """
    # Load .env file if present (for local development)
    from dotenv import load_dotenv
    env_path = Path(__file__).parent.parent.parent / ".env"
    load_dotenv(env_path)

    config_path = Path(
        os.environ.get("WEBSEARCH_CONFIG", Path(__file__).parent.parent.parent / "config.yaml")
    )
    return build_settings(_load_yaml_config(config_path))


def clear_settings_cache() -> None:
    """Clear the settings cache. Useful for testing."""
    get_settings.cache_clear()
