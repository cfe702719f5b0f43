"""
Shared HTTP clients.

Every transport reuses one httpx connection pool instead of opening its own,
so creating and dropping many communicators does not leak sockets.

Usage:
    from parley.clients.shared_clients import get_shared_http_client

    client = await get_shared_http_client()
    response = await client.post(url, json=body, headers=headers)

    # at shutdown
    await close_shared_clients()
"""

import asyncio
from typing import Dict, Optional, Tuple

import httpx
from openai import AsyncOpenAI

from ..logs import get_logger

logger = get_logger("transport")

_shared_http_client: Optional[httpx.AsyncClient] = None
_shared_http_lock = asyncio.Lock()

# keyed by (base_url, api_key)
_shared_openai_clients: Dict[Tuple[str, str], AsyncOpenAI] = {}
_shared_openai_lock = asyncio.Lock()

MAX_CONNECTIONS = 100
MAX_KEEPALIVE_CONNECTIONS = 20

# transports pass their own per-request timeout on top of these
TIMEOUT = httpx.Timeout(120.0, connect=10.0, write=30.0, pool=10.0)
LIMITS = httpx.Limits(max_connections=MAX_CONNECTIONS, max_keepalive_connections=MAX_KEEPALIVE_CONNECTIONS)


async def get_shared_http_client() -> httpx.AsyncClient:
  """
  Get the shared httpx client, creating it on first use.

  Returns:
      httpx.AsyncClient: Client without credentials, headers are set per request
  """
  global _shared_http_client

  if _shared_http_client is not None:
    return _shared_http_client

  async with _shared_http_lock:
    if _shared_http_client is not None:
      return _shared_http_client

    _shared_http_client = httpx.AsyncClient(timeout=TIMEOUT, limits=LIMITS)
    logger.debug(
      f"Initialized shared HTTP client "
      f"(max_connections={MAX_CONNECTIONS}, max_keepalive={MAX_KEEPALIVE_CONNECTIONS})"
    )
    return _shared_http_client


async def get_shared_openai_client(base_url: str, api_key: str) -> AsyncOpenAI:
  """
  Get the AsyncOpenAI client for an endpoint and key, creating it on first use.

  All OpenAI clients share the httpx connection pool.
  """
  key = (base_url, api_key)
  client = _shared_openai_clients.get(key)
  if client is not None:
    return client

  http_client = await get_shared_http_client()
  async with _shared_openai_lock:
    client = _shared_openai_clients.get(key)
    if client is None:
      client = AsyncOpenAI(
        api_key=api_key,
        base_url=base_url,
        timeout=TIMEOUT,
        max_retries=0,
        http_client=http_client,
      )
      _shared_openai_clients[key] = client
      logger.debug(f"Initialized shared OpenAI client for {base_url}")
    return client


async def close_shared_clients() -> None:
  """
  Close all shared clients and release their connections.

  Call this during application shutdown.
  """
  global _shared_http_client

  _shared_openai_clients.clear()

  if _shared_http_client is not None:
    try:
      await _shared_http_client.aclose()
      logger.info("Closed shared HTTP client")
    except Exception as e:
      logger.warning(f"Error closing shared HTTP client: {e}")
    _shared_http_client = None


def reset_shared_clients() -> None:
  """
  Forget the shared clients without closing them (for testing).
  """
  global _shared_http_client
  _shared_http_client = None
  _shared_openai_clients.clear()
