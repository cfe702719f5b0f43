"""
Per-personality conversation history.

The history lives on the Personality itself (`Personality.messages`); the
store is the single place that appends to it and reads it back, so ordering and
windowing rules are applied the same way for every request.
"""

from functools import lru_cache
from typing import List, Optional

import tiktoken

from .logs import get_logger
from .messages import Message
from .personality import Personality

logger = get_logger("communicator")


@lru_cache(maxsize=1)
def _get_encoding():
  # cl100k_base is what the GPT-4 family tokenises with
  try:
    return tiktoken.get_encoding("cl100k_base")
  except Exception as e:
    logger.warning(f"Failed to load tiktoken encoding, token counts will be estimated: {e}")
    return None


class ConversationStore:
  def __init__(self, max_messages: Optional[int] = None):
    """
    :param max_messages: Only the newest `max_messages` messages are sent with
      a request. None sends the whole history.
    """
    if max_messages is not None and max_messages <= 0:
      raise ValueError(f"max_messages must be positive, got {max_messages}")
    self.max_messages = max_messages

  def append(self, personality: Personality, message: Message) -> None:
    personality.messages.append(message)

  def snapshot(self, personality: Personality) -> List[Message]:
    """Return a copy of the history to send, oldest first."""
    messages = list(personality.messages)
    if self.max_messages is not None and len(messages) > self.max_messages:
      messages = messages[-self.max_messages :]
    return messages

  def clear(self, personality: Personality) -> None:
    personality.messages.clear()

  def count_tokens(self, personality: Personality) -> int:
    """Estimate the prompt tokens the next snapshot will cost."""
    messages = self.snapshot(personality)
    encoding = _get_encoding()
    if encoding is None:
      return sum(len(m.content) for m in messages) // 4

    # roughly 4 tokens of framing per message
    return sum(4 + len(encoding.encode(m.content)) for m in messages)
