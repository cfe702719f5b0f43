import json
from typing import Any, Mapping

from .errors import ParseError
from .prompts import DEFAULT_DENIAL_SENTINEL


class ResponseInterpreter:
  """
  Reads chat-completion responses.

  Only the first choice is used. Content kept in the conversation history is
  the raw model text; `sanitize_for_delivery` produces what callers receive.
  """

  def __init__(self, denial_sentinel: str = DEFAULT_DENIAL_SENTINEL):
    self.denial_sentinel = denial_sentinel

  def interpret(self, raw: str | bytes | Mapping[str, Any]) -> str:
    """
    Extract the content of the first choice.

    :param raw: Response body as text or bytes, or an already decoded mapping
    :return: The first choice's message content
    :raises ParseError: If the body is not JSON or holds no usable choice
    """
    if isinstance(raw, (str, bytes, bytearray)):
      try:
        response = json.loads(raw)
      except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise ParseError(f"Response body is not valid JSON: {e}") from e
    else:
      response = raw

    if not isinstance(response, Mapping):
      raise ParseError(f"Expected a JSON object, got {type(response).__name__}")

    choices = response.get("choices")
    if not isinstance(choices, list):
      raise ParseError(f"Response choices is not a list, got {type(choices).__name__}")
    if not choices:
      raise ParseError("Response contains no choices")

    first = choices[0]
    message = first.get("message") if isinstance(first, Mapping) else None
    if not isinstance(message, Mapping):
      raise ParseError("First choice has no message")

    content = message.get("content")
    if not isinstance(content, str):
      raise ParseError("First choice message has no text content")

    return content

  def is_denied(self, content: str) -> bool:
    return self.denial_sentinel in content

  @staticmethod
  def sanitize_for_delivery(content: str) -> str:
    return content.replace('"', "")
