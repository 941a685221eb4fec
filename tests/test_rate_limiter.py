"""Tests for the process-wide request gate.

All timing runs on the ``fake_clock`` fixture, so nothing really sleeps.
"""

import asyncio

import pytest

from debate_arena.config.settings import RateLimitConfig
from debate_arena.models.providers import RequestGate, is_free_tier


async def _dispatch(gate: RequestGate, model: str, count: int, clock) -> list[float]:
    times = []
    for _ in range(count):
        async with gate.admission(model):
            await gate.wait_for_rate_limit(model)
            times.append(clock())
    return times


@pytest.mark.unit
@pytest.mark.parametrize(
    "model_id, expected",
    [
        ("meta-llama/llama-3.1-8b-instruct:free", True),
        ("openai/gpt-4o", False),
        ("some/freeform-model", True),
    ],
)
def test_is_free_tier_uses_naming_convention(model_id: str, expected: bool):
    assert is_free_tier(model_id) is expected


@pytest.mark.unit
def test_standard_requests_are_spaced_by_min_interval(gate, fake_clock):
    """Four standard-tier requests issued back to back span at least 30 seconds."""
    times = asyncio.run(_dispatch(gate, "openai/gpt-4o", 4, fake_clock))

    assert times[-1] - times[0] >= 30
    assert fake_clock.sleeps == [10, 10, 10]
    assert gate.state.request_count == 4


@pytest.mark.unit
def test_free_tier_requests_are_spaced_by_free_interval(gate, fake_clock):
    """Free models wait 15s between requests and get three per window."""
    times = asyncio.run(_dispatch(gate, "mistralai/mistral-7b:free", 4, fake_clock))

    gaps = [later - earlier for earlier, later in zip(times, times[1:])]
    assert all(gap >= 15 for gap in gaps)
    # Fourth request also waits for the 60s window to roll over
    assert fake_clock.sleeps == [15, 15, 15, 15]
    assert times[-1] - times[0] >= 60
    assert gate.state.request_count == 1


@pytest.mark.unit
def test_window_resets_after_idle_period(gate, fake_clock):
    asyncio.run(_dispatch(gate, "openai/gpt-4o", 2, fake_clock))
    fake_clock.now += 120

    waited = asyncio.run(gate.wait_for_rate_limit("openai/gpt-4o"))

    assert waited == 0
    assert gate.state.request_count == 1
    assert gate.state.window_start == fake_clock.now


@pytest.mark.unit
def test_full_window_blocks_until_it_rolls_over(fake_clock):
    limits = RateLimitConfig(min_interval=0, max_requests_per_minute=2)
    gate = RequestGate(limits, clock=fake_clock, sleep=fake_clock.sleep)

    asyncio.run(_dispatch(gate, "openai/gpt-4o", 3, fake_clock))

    assert fake_clock.sleeps == [60]
    assert gate.state.request_count == 1


@pytest.mark.unit
def test_admission_is_single_flight_and_fifo(gate):
    """Requests queue in arrival order and only one holds the gate at a time."""
    order: list[str] = []
    in_flight = 0
    max_in_flight = 0

    async def request(name: str, release: asyncio.Event | None = None):
        nonlocal in_flight, max_in_flight
        async with gate.admission(name):
            in_flight += 1
            max_in_flight = max(max_in_flight, in_flight)
            order.append(name)
            if release is not None:
                await release.wait()
            in_flight -= 1

    async def scenario():
        release = asyncio.Event()
        first = asyncio.create_task(request("first", release))
        await asyncio.sleep(0)
        others = [asyncio.create_task(request(name)) for name in ("second", "third")]
        await asyncio.sleep(0)
        depth = gate.queue_depth
        release.set()
        await asyncio.gather(first, *others)
        return depth

    depth = asyncio.run(scenario())

    assert depth == 2
    assert order == ["first", "second", "third"]
    assert max_in_flight == 1
    assert gate.queue_depth == 0


@pytest.mark.unit
def test_pause_uses_injected_sleep(gate, fake_clock):
    asyncio.run(gate.pause(5))
    asyncio.run(gate.pause(0))

    assert fake_clock.sleeps == [5]
