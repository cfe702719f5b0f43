from dataclasses import dataclass, field
from typing import List

from .messages import Message


@dataclass(eq=False)
class Personality:
  """
  A simulated agent on whose behalf completions are requested.

  The personality owns its conversation history; every request made for it
  replays `messages` to the model in full. Instances compare by identity so
  two agents with identical attributes still keep separate histories.
  """

  name: str
  temperature: float = 1.0
  presence_penalty: float = 0.0
  frequency_penalty: float = 0.0
  backstory: str = ""
  summary: str = ""
  verbose: bool = False
  messages: List[Message] = field(default_factory=list)

  def generation_parameters(self) -> dict:
    return {
      "temperature": self.temperature,
      "presence_penalty": self.presence_penalty,
      "frequency_penalty": self.frequency_penalty,
    }
