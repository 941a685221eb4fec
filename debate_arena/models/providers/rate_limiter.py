"""Process-wide admission queue and rate limiting for the shared API key.

One ``RequestGate`` is created per process and handed to every provider
instance. Requests enter the gate in FIFO order and only one holds it at a
time, so the rate-limit counters below are never updated concurrently.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import AsyncIterator, Awaitable, Callable
from contextlib import asynccontextmanager
from dataclasses import dataclass

from debate_arena.config.settings import RateLimitConfig

logger = logging.getLogger(__name__)

Clock = Callable[[], float]
Sleep = Callable[[float], Awaitable[None]]


def is_free_tier(model_id: str) -> bool:
    """Free-tier models are identified by naming convention (``...:free``)."""
    return "free" in model_id


@dataclass
class RateLimitState:
    """Counters for the single external quota."""

    last_request_time: float | None = None
    request_count: int = 0
    window_start: float | None = None


class RequestGate:
    """Single-flight FIFO admission queue with interval and per-window limits."""

    def __init__(
        self,
        limits: RateLimitConfig | None = None,
        clock: Clock = time.monotonic,
        sleep: Sleep = asyncio.sleep,
    ):
        self.limits = limits or RateLimitConfig()
        self.state = RateLimitState()
        self._clock = clock
        self._sleep = sleep
        self._lock = asyncio.Lock()
        self._waiting = 0

    @property
    def queue_depth(self) -> int:
        """Number of requests waiting for admission."""
        return self._waiting

    @asynccontextmanager
    async def admission(self, model: str) -> AsyncIterator[RequestGate]:
        """Hold the gate for the duration of one request, retries included."""
        self._waiting += 1
        if self._lock.locked():
            logger.debug(
                f"Queued request for {model} ({self._waiting} waiting for admission)"
            )
        try:
            await self._lock.acquire()
        finally:
            self._waiting -= 1
        try:
            yield self
        finally:
            self._lock.release()

    async def pause(self, seconds: float) -> None:
        """Sleep using the gate's clock; used for backoff delays."""
        if seconds > 0:
            await self._sleep(seconds)

    async def wait_for_rate_limit(self, model: str) -> float:
        """Block until ``model`` may be dispatched, then record the attempt.

        Must be called while holding ``admission``. Returns the total time
        spent waiting.
        """
        free = is_free_tier(model)
        min_interval = self.limits.free_min_interval if free else self.limits.min_interval
        max_per_window = (
            self.limits.free_max_requests_per_minute
            if free
            else self.limits.max_requests_per_minute
        )
        waited = 0.0

        now = self._clock()
        if self.state.last_request_time is not None:
            elapsed = now - self.state.last_request_time
            if elapsed < min_interval:
                wait_time = min_interval - elapsed
                logger.info(
                    f"Rate limiting: waiting {wait_time:.1f}s before next request ({model})"
                )
                await self._sleep(wait_time)
                waited += wait_time
                now = self._clock()

        if (
            self.state.window_start is None
            or now - self.state.window_start > self.limits.window
        ):
            self.state.request_count = 0
            self.state.window_start = now

        if self.state.request_count >= max_per_window:
            wait_time = self.limits.window - (now - self.state.window_start)
            if wait_time > 0:
                logger.info(
                    f"Rate limit window full ({self.state.request_count}/{max_per_window}):"
                    f" waiting {wait_time:.1f}s"
                )
                await self._sleep(wait_time)
                waited += wait_time
            self.state.request_count = 0
            self.state.window_start = self._clock()

        self.state.last_request_time = self._clock()
        self.state.request_count += 1
        return waited
