"""Configuration models."""

from .settings import (
    AppConfig,
    DebateConfig,
    OpenRouterConfig,
    RateLimitConfig,
    SystemConfig,
    get_default_config,
    get_template_config,
)

__all__ = [
    "AppConfig",
    "DebateConfig",
    "OpenRouterConfig",
    "RateLimitConfig",
    "SystemConfig",
    "get_default_config",
    "get_template_config",
]
