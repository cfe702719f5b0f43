"""
Completion transports.

A transport sends one chat-completion request body and returns the raw
response, either as text or as an already decoded mapping. It raises
TransportError for network failures and non-success statuses and never retries.
"""

from typing import Any, Mapping, Optional, Protocol

import httpx

from ..errors import TransportError
from ..logs import get_logger, DebugContext
from .shared_clients import get_shared_http_client


class CompletionTransport(Protocol):
  async def complete(self, body: dict) -> str | Mapping[str, Any]: ...


def build_request_body(model: str, messages: list, parameters: dict) -> dict:
  """
  Assemble the JSON body sent to the completions endpoint.

  :param model: Model identifier
  :param messages: Conversation as a list of {"role", "content"} dicts
  :param parameters: temperature, presence_penalty and frequency_penalty
  """
  return {
    "model": model,
    "messages": messages,
    "temperature": parameters["temperature"],
    "presence_penalty": parameters["presence_penalty"],
    "frequency_penalty": parameters["frequency_penalty"],
  }


class HttpTransport(DebugContext):
  """
  Posts the request body as JSON to the configured URL with a bearer token.

  The URL is used as given, e.g. https://api.openai.com/v1/chat/completions.
  """

  def __init__(
    self,
    url: str,
    api_key: str,
    timeout: float = 120.0,
    client: Optional[httpx.AsyncClient] = None,
  ):
    """
    :param url: Full chat completions URL
    :param api_key: Bearer token
    :param timeout: Per-request timeout in seconds
    :param client: httpx client to use, defaults to the shared client
    """
    self.url = url
    self.api_key = api_key
    self.timeout = timeout
    self.logger = get_logger("transport")
    self._client = client

  @property
  def headers(self) -> dict:
    return {
      "Content-Type": "application/json",
      "Authorization": f"Bearer {self.api_key}",
    }

  async def _get_client(self) -> httpx.AsyncClient:
    if self._client is None:
      self._client = await get_shared_http_client()
    return self._client

  async def complete(self, body: dict) -> str:
    client = await self._get_client()

    with self.debug(
      f"Posting {len(body.get('messages', []))} messages to {self.url}",
      f"Received response from {self.url}",
    ):
      try:
        response = await client.post(self.url, json=body, headers=self.headers, timeout=self.timeout)
      except httpx.HTTPError as e:
        raise TransportError(f"Request to {self.url} failed: {e!r}") from e
      except (httpx.InvalidURL, ValueError) as e:
        raise TransportError(f"Invalid request URL {self.url!r}: {e}") from e

      if not response.is_success:
        raise TransportError(
          f"Request to {self.url} failed with status {response.status_code}: {response.text[:200]}",
          status_code=response.status_code,
        )

    return response.text
