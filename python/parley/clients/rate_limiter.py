"""
Global request throttle.

One RateLimiter is shared by every personality a Communicator serves, so two
agents asking for completions in quick succession wait on each other.

The limiter keeps two timestamps:
- the last *recorded dispatch*, set by `record_dispatch` once an attempt has
  concluded (delivered, denied or failed), never before;
- the last *admission*, set when a request leaves `wait()` and is about to go
  on the wire.

`compute_wait` measures the interval from whichever of the two is later.
Waiting is serialised behind a lock while the transport round-trip is not, so
a second request can wait while the first one is in flight, but two waiting
requests can never both be admitted at once.
"""

import asyncio
import time
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional

from ..logs import get_logger

Clock = Callable[[], float]
Sleep = Callable[[float], Awaitable[None]]


@dataclass
class RateLimiterStats:
  """Statistics for rate limiter monitoring."""

  interval: float
  admitted_requests: int
  recorded_dispatches: int
  total_wait_seconds: float
  last_dispatch_time: Optional[float]
  last_admission_time: Optional[float]


class RateLimiter:
  """
  Minimum-interval throttle between completion requests.

  Usage:
      limiter = RateLimiter(interval=3.0)

      await limiter.wait()
      try:
          response = await transport.complete(body)
      finally:
          limiter.record_dispatch()
  """

  def __init__(self, interval: float, clock: Clock = time.monotonic, sleep: Sleep = asyncio.sleep):
    """
    :param interval: Minimum number of seconds between two dispatches
    :param clock: Monotonic time source in seconds
    :param sleep: Coroutine used to suspend while waiting
    """
    if interval < 0:
      raise ValueError(f"interval must not be negative, got {interval}")

    self.interval = interval
    self.clock = clock
    self.sleep = sleep
    self.logger = get_logger("rate_limiter")

    self._last_dispatch: Optional[float] = None
    self._last_admission: Optional[float] = None
    self._lock = asyncio.Lock()

    self._admitted_requests = 0
    self._recorded_dispatches = 0
    self._total_wait = 0.0

  def compute_wait(self, now: Optional[float] = None) -> float:
    """
    Seconds to wait before the next dispatch may start.

    :param now: Current time, defaults to the limiter's clock
    :return: 0 before anything has been dispatched, otherwise the remainder of the interval
    """
    if now is None:
      now = self.clock()

    references = [t for t in (self._last_dispatch, self._last_admission) if t is not None]
    if not references:
      return 0.0

    return max(0.0, self.interval - (now - max(references)))

  async def wait(self) -> float:
    """
    Suspend until a dispatch is allowed, then admit the caller.

    :return: Number of seconds the caller was told to wait
    """
    async with self._lock:
      wait_seconds = self.compute_wait()
      if wait_seconds > 0:
        self.logger.debug(f"Waiting {wait_seconds:.2f}s before the next request")
        await self.sleep(wait_seconds)

      self._last_admission = self.clock()
      self._admitted_requests += 1
      self._total_wait += wait_seconds
      return wait_seconds

  def record_dispatch(self, now: Optional[float] = None) -> None:
    """
    Mark the end of a dispatch attempt, whatever its outcome.

    :param now: Time the attempt concluded, defaults to the limiter's clock
    """
    self._last_dispatch = self.clock() if now is None else now
    self._recorded_dispatches += 1

  @property
  def last_dispatch_time(self) -> Optional[float]:
    return self._last_dispatch

  @property
  def stats(self) -> RateLimiterStats:
    return RateLimiterStats(
      interval=self.interval,
      admitted_requests=self._admitted_requests,
      recorded_dispatches=self._recorded_dispatches,
      total_wait_seconds=self._total_wait,
      last_dispatch_time=self._last_dispatch,
      last_admission_time=self._last_admission,
    )

  def reset(self) -> None:
    """Forget every dispatch (for testing)."""
    self._last_dispatch = None
    self._last_admission = None
    self._admitted_requests = 0
    self._recorded_dispatches = 0
    self._total_wait = 0.0
