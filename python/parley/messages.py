from dataclasses import dataclass
from enum import Enum


class ConversationRole(Enum):
  USER = "user"
  ASSISTANT = "assistant"


@dataclass(frozen=True)
class Message:
  role: ConversationRole
  content: str

  def to_dict(self) -> dict:
    return {"role": self.role.value, "content": self.content}


def user_message(content: str) -> Message:
  return Message(ConversationRole.USER, content)


def assistant_message(content: str) -> Message:
  return Message(ConversationRole.ASSISTANT, content)
