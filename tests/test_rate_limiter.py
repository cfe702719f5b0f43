"""
Unit tests for RateLimiter.

Tests cover:
- Wait computation before and after the first dispatch
- Global spacing of concurrently waiting requests
- Recording the conclusion time of a dispatch
- Statistics tracking
"""

import asyncio

import pytest

from parley.clients.rate_limiter import RateLimiter, RateLimiterStats

from mock_utils import FakeClock


@pytest.fixture
def clock():
  return FakeClock()


@pytest.fixture
def limiter(clock):
  return RateLimiter(3.0, clock=clock, sleep=clock.sleep)


class TestComputeWait:
  def test_first_dispatch_has_no_wait(self, limiter):
    assert limiter.compute_wait(0.0) == 0.0
    assert limiter.compute_wait(1000.0) == 0.0

  def test_first_dispatch_at_time_zero_is_still_tracked(self, limiter):
    limiter.record_dispatch(0.0)
    assert limiter.compute_wait(0.0) == 3.0

  def test_interval_scenario(self, limiter):
    limiter.record_dispatch(0.0)
    assert limiter.compute_wait(1.0) == 2.0
    assert limiter.compute_wait(4.0) == 0.0

  def test_wait_never_negative(self, limiter):
    limiter.record_dispatch(10.0)
    assert limiter.compute_wait(100.0) == 0.0

  def test_defaults_to_clock(self, limiter, clock):
    limiter.record_dispatch(5.0)
    clock.now = 6.5
    assert limiter.compute_wait() == 1.5

  def test_zero_interval_never_waits(self, clock):
    limiter = RateLimiter(0.0, clock=clock, sleep=clock.sleep)
    limiter.record_dispatch(0.0)
    assert limiter.compute_wait(0.0) == 0.0

  def test_negative_interval_rejected(self):
    with pytest.raises(ValueError):
      RateLimiter(-1.0)


class TestWait:
  @pytest.mark.asyncio
  async def test_first_wait_does_not_sleep(self, limiter, clock):
    waited = await limiter.wait()
    assert waited == 0.0
    assert clock.sleeps == []

  @pytest.mark.asyncio
  async def test_wait_sleeps_remaining_interval(self, limiter, clock):
    await limiter.wait()
    limiter.record_dispatch()

    clock.advance(1.0)
    waited = await limiter.wait()

    assert waited == 2.0
    assert clock.sleeps == [2.0]
    assert clock.now == 3.0

  @pytest.mark.asyncio
  async def test_interval_measured_from_conclusion(self, limiter, clock):
    await limiter.wait()
    # the request stays in flight for two seconds
    clock.advance(2.0)
    limiter.record_dispatch()

    clock.advance(1.0)
    assert limiter.compute_wait() == 2.0

  @pytest.mark.asyncio
  async def test_in_flight_request_delays_the_next_one(self, limiter, clock):
    await limiter.wait()
    # nothing recorded yet, the first request is still in flight
    clock.advance(1.0)
    assert limiter.last_dispatch_time is None
    assert limiter.compute_wait() == 2.0

  @pytest.mark.asyncio
  async def test_concurrent_waiters_are_spaced(self, limiter, clock):
    admitted = []

    async def request():
      await limiter.wait()
      admitted.append(clock())

    await asyncio.gather(*[request() for _ in range(4)])

    assert admitted == [0.0, 3.0, 6.0, 9.0]
    for earlier, later in zip(admitted, admitted[1:]):
      assert later - earlier >= limiter.interval


class TestStats:
  @pytest.mark.asyncio
  async def test_stats(self, limiter, clock):
    await limiter.wait()
    limiter.record_dispatch()
    await limiter.wait()
    limiter.record_dispatch()

    stats = limiter.stats
    assert isinstance(stats, RateLimiterStats)
    assert stats.interval == 3.0
    assert stats.admitted_requests == 2
    assert stats.recorded_dispatches == 2
    assert stats.total_wait_seconds == 3.0
    assert stats.last_dispatch_time == 3.0

  def test_reset(self, limiter):
    limiter.record_dispatch(1.0)
    limiter.reset()
    assert limiter.last_dispatch_time is None
    assert limiter.compute_wait(1.0) == 0.0
    assert limiter.stats.recorded_dispatches == 0
