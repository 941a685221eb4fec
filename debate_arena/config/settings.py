"""Configuration settings and data models."""

import json
import os
from pathlib import Path
from typing import Literal

import yaml
from pydantic import BaseModel, Field, field_validator, model_validator


class OpenRouterConfig(BaseModel):
    """OpenRouter-specific configuration."""

    api_key: str | None = Field(
        default=None,
        description="OpenRouter API key (can also be set via OPENROUTER_API_KEY env var)",
    )
    base_url: str = Field(
        default="https://openrouter.ai/api/v1", description="OpenRouter API base URL"
    )
    site_url: str | None = Field(
        default=None, description="Your site URL for OpenRouter referrer tracking"
    )
    app_name: str | None = Field(
        default="AI Debate Arena", description="App name for OpenRouter tracking"
    )
    max_retries: int = Field(
        default=3, ge=1, description="Maximum number of attempts per completion request"
    )
    timeout: float = Field(default=60, description="API request timeout in seconds")
    max_tokens: int = Field(default=500, description="Maximum tokens per completion")
    temperature: float = Field(default=0.7, description="Sampling temperature")
    models_cache_ttl: float = Field(
        default=600, description="Seconds to keep the fetched model catalogue"
    )

    def resolve_api_key(self) -> str | None:
        """Return the configured key, falling back to the environment."""
        return self.api_key or os.getenv("OPENROUTER_API_KEY")


class RateLimitConfig(BaseModel):
    """Process-wide admission limits for the shared API key."""

    min_interval: float = Field(
        default=10.0, description="Seconds between requests for standard-tier models"
    )
    free_min_interval: float = Field(
        default=15.0, description="Seconds between requests for free-tier models"
    )
    max_requests_per_minute: int = Field(
        default=6, description="Requests allowed per window for standard-tier models"
    )
    free_max_requests_per_minute: int = Field(
        default=3, description="Requests allowed per window for free-tier models"
    )
    window: float = Field(default=60.0, description="Length of the rolling request window")
    rate_limit_backoff_base: float = Field(
        default=5.0, description="First backoff delay after an HTTP 429"
    )
    rate_limit_backoff_cap: float = Field(
        default=30.0, description="Upper bound for HTTP 429 backoff delays"
    )
    server_error_backoff: float = Field(
        default=2.0, description="Per-attempt backoff step after an HTTP 5xx"
    )
    transport_error_backoff: float = Field(
        default=1.0, description="Per-attempt backoff step after a connection failure"
    )

    @field_validator("max_requests_per_minute", "free_max_requests_per_minute")
    @classmethod
    def validate_request_quota(cls, v: int) -> int:
        if v < 1:
            raise ValueError("Request quota must allow at least one request per window")
        return v


class DebateConfig(BaseModel):
    """Debate flow configuration."""

    max_rounds: int = Field(default=3, ge=1, description="Rounds per debate")
    auto_delay: float = Field(
        default=12.0, description="Seconds between turns in auto mode"
    )
    rate_limit_retry_delay: float = Field(
        default=20.0, description="Seconds before auto mode retries a rate-limited turn"
    )
    max_manual_retries: int = Field(
        default=3, description="Manual retries allowed for a failed turn"
    )
    auto_scoring: bool = Field(
        default=True, description="Score every argument as soon as it is generated"
    )
    min_words: int = Field(default=150, description="Lower bound of the argument length")
    max_words: int = Field(default=250, description="Upper bound of the argument length")

    @model_validator(mode="after")
    def validate_word_range(self) -> "DebateConfig":
        if self.min_words > self.max_words:
            raise ValueError("min_words must not exceed max_words")
        return self


class SystemConfig(BaseModel):
    """System-wide configuration."""

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(default="INFO")


class AppConfig(BaseModel):
    """Complete application configuration."""

    debate: DebateConfig
    openrouter: OpenRouterConfig
    rate_limits: RateLimitConfig
    system: SystemConfig

    @classmethod
    def load_from_file(cls, config_path: Path) -> "AppConfig":
        """Load configuration from JSON file."""
        if not config_path.exists():
            raise FileNotFoundError(f"Config file not found: {config_path}")

        with open(config_path, "r", encoding="utf-8") as f:
            data = json.load(f)

        # Validate required sections
        required_sections = ["debate", "openrouter", "rate_limits", "system"]
        missing_sections = [
            section for section in required_sections if section not in data
        ]
        if missing_sections:
            raise ValueError(f"Missing required config sections: {missing_sections}")

        return cls(**data)

    def save_to_file(self, config_path: Path) -> None:
        """Save configuration to YAML file."""
        config_path.parent.mkdir(parents=True, exist_ok=True)

        with open(config_path, "w", encoding="utf-8") as f:
            yaml.dump(
                self.model_dump(exclude_unset=True),
                f,
                default_flow_style=False,
                indent=2,
            )


def get_default_config(config_path: Path = Path("debate_config.json")) -> AppConfig:
    """Load debate_config.json if present, otherwise fall back to the template."""
    if config_path.exists():
        return AppConfig.load_from_file(config_path)
    return get_template_config()


def get_template_config() -> AppConfig:
    """Get template configuration for config file generation."""
    return AppConfig(
        debate=DebateConfig(
            max_rounds=3,
            auto_delay=12.0,  # Longer than the client's own request interval
            rate_limit_retry_delay=20.0,
            max_manual_retries=3,
            auto_scoring=True,
        ),
        openrouter=OpenRouterConfig(
            api_key=None,  # Set your OpenRouter API key here or use OPENROUTER_API_KEY env var
            base_url="https://openrouter.ai/api/v1",
            site_url=None,
            app_name="AI Debate Arena",
            max_retries=3,
            timeout=60,
        ),
        rate_limits=RateLimitConfig(),
        system=SystemConfig(log_level="INFO"),
    )
