"""
Deep Research Configuration System

Hierarchical configuration with environment variable overrides.
Uses Pydantic Settings for type validation.
"""

from functools import lru_cache
from pathlib import Path
from typing import Optional, Literal
import os

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict
import yaml


class SearchConfig(BaseSettings):
    """Web search provider configuration."""

    provider: Literal["brave"] = "brave"
    base_url: str = "https://api.search.brave.com/res/v1/web/search"
    api_key: str = Field(
        default="",
        validation_alias=AliasChoices("DEEP_RESEARCH_SEARCH_API_KEY", "BRAVE_API_KEY"),
    )
    timeout: float = 20.0
    max_results: int = 20  # Provider hard limit per request
    verify_ssl: bool = True

    model_config = SettingsConfigDict(env_prefix="DEEP_RESEARCH_SEARCH_", populate_by_name=True)


class ResearchConfig(BaseSettings):
    """Research session behaviour."""

    results_per_search: int = 10
    top_results: int = 5  # Results used per analysis
    sentences_per_result: int = 2
    report_preview_length: int = 500

    model_config = SettingsConfigDict(env_prefix="DEEP_RESEARCH_RESEARCH_")


class SessionConfig(BaseSettings):
    """Session storage configuration."""

    max_sessions: int = 1000
    ttl: int = 86400  # 24 hours; 0 disables expiry

    model_config = SettingsConfigDict(env_prefix="DEEP_RESEARCH_SESSION_")


class APIConfig(BaseSettings):
    """API server configuration."""

    host: str = "127.0.0.1"
    port: int = 8000
    cors_origins: list[str] = Field(default_factory=lambda: ["http://localhost:3000"])
    debug: bool = False

    model_config = SettingsConfigDict(env_prefix="DEEP_RESEARCH_API_")


class LoggingConfig(BaseSettings):
    """Logging configuration."""

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    format: str = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
    json_format: bool = False  # One JSON object per record
    file: Optional[str] = None

    model_config = SettingsConfigDict(env_prefix="DEEP_RESEARCH_LOG_")


class Settings(BaseSettings):
    """
    Main application settings.

    Configuration priority (highest to lowest):
    1. Environment variables (DEEP_RESEARCH_*)
    2. .env file
    3. Config YAML file
    4. Default values
    """

    app_name: str = "Deep Research"
    version: str = "0.1.0"
    environment: Literal["development", "production", "test"] = "development"

    search: SearchConfig = Field(default_factory=SearchConfig)
    research: ResearchConfig = Field(default_factory=ResearchConfig)
    session: SessionConfig = Field(default_factory=SessionConfig)
    api: APIConfig = Field(default_factory=APIConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    model_config = SettingsConfigDict(
        env_prefix="DEEP_RESEARCH_",
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        extra="ignore",
    )

    @classmethod
    def from_yaml(cls, path: Path) -> "Settings":
        """Load settings from a YAML file."""
        if not path.exists():
            return cls()

        with open(path, "r") as f:
            config_data = yaml.safe_load(f) or {}

        return cls(**config_data)


def load_config(config_path: Optional[str] = None) -> Settings:
    """
    Load configuration with proper precedence.

    Args:
        config_path: Optional path to YAML config file.
                    If not provided, checks DEEP_RESEARCH_CONFIG_PATH,
                    then falls back to config/<environment>.yaml and
                    config/default.yaml
    """
    if config_path is None:
        config_path = os.environ.get("DEEP_RESEARCH_CONFIG_PATH")

    if config_path is None:
        env = os.environ.get("DEEP_RESEARCH_ENVIRONMENT", "development")
        possible_paths = [
            Path(f"config/{env}.yaml"),
            Path("config/default.yaml"),
        ]
        for p in possible_paths:
            if p.exists():
                config_path = str(p)
                break

    if config_path and Path(config_path).exists():
        return Settings.from_yaml(Path(config_path))

    return Settings()


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Use this as the primary way to access settings throughout the app.
    The settings are cached after first load.
    """
    return load_config()


def clear_settings_cache():
    """Clear the settings cache (useful for testing)."""
    get_settings.cache_clear()
