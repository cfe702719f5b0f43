"""
Per-personality admission control.

Without it, two overlapping requests for the same personality both append their
user turn before either response arrives, and the final history follows
completion order instead of call order. Holding one lock per personality from
before the rate-limit wait until the request concludes keeps at most one
request per personality in flight. Requests for different personalities are
unaffected and still compete only on the global RateLimiter.
"""

import asyncio
from contextlib import asynccontextmanager
from typing import AsyncIterator, Dict
from weakref import WeakKeyDictionary

from ..personality import Personality


class PersonalityAdmission:
  def __init__(self, enabled: bool = True):
    self.enabled = enabled
    self._locks: "WeakKeyDictionary[Personality, asyncio.Lock]" = WeakKeyDictionary()
    self._waiting: Dict[int, int] = {}

  def _lock_for(self, personality: Personality) -> asyncio.Lock:
    lock = self._locks.get(personality)
    if lock is None:
      lock = asyncio.Lock()
      self._locks[personality] = lock
    return lock

  def in_flight(self, personality: Personality) -> bool:
    lock = self._locks.get(personality)
    return lock is not None and lock.locked()

  def waiting(self, personality: Personality) -> int:
    """Number of requests queued behind the one in flight."""
    return self._waiting.get(id(personality), 0)

  @asynccontextmanager
  async def admit(self, personality: Personality) -> AsyncIterator[None]:
    if not self.enabled:
      yield
      return

    lock = self._lock_for(personality)
    key = id(personality)
    self._waiting[key] = self._waiting.get(key, 0) + 1
    try:
      await lock.acquire()
    finally:
      self._waiting[key] -= 1
      if self._waiting[key] == 0:
        del self._waiting[key]

    try:
      yield
    finally:
      lock.release()
