"""Pytest configuration and shared fixtures."""

import pytest

from debate_arena.config.settings import (
    AppConfig,
    DebateConfig,
    OpenRouterConfig,
    RateLimitConfig,
    SystemConfig,
)
from debate_arena.models.providers import RequestGate


class FakeClock:
    """Monotonic clock that only moves when something sleeps on it."""

    def __init__(self, start: float = 1000.0):
        self.now = start
        self.sleeps: list[float] = []

    def __call__(self) -> float:
        return self.now

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


# =============================================================================
# SHARED FIXTURES - Available to all test modules
# =============================================================================


@pytest.fixture
def sample_debate_topic() -> str:
    return "Should artificial intelligence be regulated by governments?"


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def gate(fake_clock: FakeClock) -> RequestGate:
    """Gate with production limits driven by the fake clock."""
    return RequestGate(RateLimitConfig(), clock=fake_clock, sleep=fake_clock.sleep)


@pytest.fixture
def no_limits() -> RateLimitConfig:
    """Limits that never make a request wait."""
    return RateLimitConfig(
        min_interval=0,
        free_min_interval=0,
        max_requests_per_minute=1000,
        free_max_requests_per_minute=1000,
        rate_limit_backoff_base=0,
        rate_limit_backoff_cap=0,
        server_error_backoff=0,
        transport_error_backoff=0,
    )


@pytest.fixture
def openrouter_config() -> OpenRouterConfig:
    return OpenRouterConfig(api_key="sk-or-test", base_url="https://openrouter.test/api/v1")


@pytest.fixture
def fast_config(no_limits: RateLimitConfig, openrouter_config: OpenRouterConfig) -> AppConfig:
    """Full application config with rate limits and auto-mode delays removed."""
    return AppConfig(
        debate=DebateConfig(auto_delay=0.01, rate_limit_retry_delay=0.01),
        openrouter=openrouter_config,
        rate_limits=no_limits,
        system=SystemConfig(log_level="DEBUG"),
    )


# =============================================================================
# PYTEST CONFIGURATION HOOKS
# =============================================================================


def pytest_configure(config: pytest.Config) -> None:
    """Configure pytest with custom markers."""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )
    config.addinivalue_line("markers", "integration: marks tests as integration tests")
    config.addinivalue_line("markers", "unit: marks tests as unit tests")
