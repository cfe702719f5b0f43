"""
Notification channels for observers of the communicator.

Subscribers register explicitly and are each called exactly once per fired
event. Delivery order across subscribers is registration order, but callers
should not rely on it.
"""

from typing import Callable, List

from .logs import get_logger
from .personality import Personality

Subscriber = Callable[[Personality], None]


class EventChannel:
  def __init__(self, name: str):
    self.name = name
    self.logger = get_logger("events")
    self._subscribers: List[Subscriber] = []

  def subscribe(self, subscriber: Subscriber) -> None:
    if subscriber in self._subscribers:
      raise ValueError(f"Subscriber {subscriber!r} is already registered on '{self.name}'")
    self._subscribers.append(subscriber)

  def unsubscribe(self, subscriber: Subscriber) -> None:
    try:
      self._subscribers.remove(subscriber)
    except ValueError:
      raise ValueError(f"Subscriber {subscriber!r} is not registered on '{self.name}'") from None

  @property
  def subscribers(self) -> List[Subscriber]:
    return list(self._subscribers)

  def fire(self, personality: Personality) -> None:
    # copy so a subscriber can unsubscribe itself while being notified
    for subscriber in list(self._subscribers):
      try:
        subscriber(personality)
      except Exception as e:
        self.logger.error(f"Subscriber {subscriber!r} on '{self.name}' failed for '{personality.name}': {e}")


class EventNotifier:
  """Holds the `denial` and `recorded` channels."""

  def __init__(self):
    self.denial = EventChannel("denial")
    self.recorded = EventChannel("recorded")
