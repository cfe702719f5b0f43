"""
Completion transport built on the OpenAI SDK.

Useful when the endpoint is OpenAI or an OpenAI-compatible gateway and the
SDK's typed responses are preferred over raw HTTP. The SDK's own retries are
disabled so a failure surfaces exactly once.
"""

from typing import Any, Mapping, Optional

from openai import APIError, APIStatusError, AsyncOpenAI

from ..errors import TransportError
from ..logs import get_logger
from .shared_clients import get_shared_openai_client

CHAT_COMPLETIONS_SUFFIX = "/chat/completions"


def base_url_from(url: str) -> str:
  """Turn a full chat completions URL into the SDK's base URL."""
  url = url.rstrip("/")
  if url.endswith(CHAT_COMPLETIONS_SUFFIX):
    return url[: -len(CHAT_COMPLETIONS_SUFFIX)]
  return url


class OpenAITransport:
  def __init__(
    self,
    url: str,
    api_key: str,
    timeout: float = 120.0,
    client: Optional[AsyncOpenAI] = None,
  ):
    self.base_url = base_url_from(url)
    self.api_key = api_key
    self.timeout = timeout
    self.logger = get_logger("transport")
    self._client = client

  async def _get_client(self) -> AsyncOpenAI:
    if self._client is None:
      self._client = await get_shared_openai_client(self.base_url, self.api_key)
    return self._client

  async def complete(self, body: dict) -> Mapping[str, Any]:
    client = await self._get_client()
    self.logger.debug(f"Sending {len(body['messages'])} messages to {self.base_url} with model '{body['model']}'")

    try:
      completion = await client.chat.completions.create(
        model=body["model"],
        messages=body["messages"],
        temperature=body["temperature"],
        presence_penalty=body["presence_penalty"],
        frequency_penalty=body["frequency_penalty"],
        timeout=self.timeout,
      )
    except APIStatusError as e:
      raise TransportError(f"Completion request failed with status {e.status_code}: {e}", status_code=e.status_code) from e
    except APIError as e:
      raise TransportError(f"Completion request failed: {e}") from e

    return completion.model_dump()
