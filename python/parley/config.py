"""
Communicator configuration.

Values are normally passed to CommunicatorConfig directly. For deployments,
`CommunicatorConfig.from_environment()` reads them from environment variables:

- PARLEY_API_KEY: API key sent as `Authorization: Bearer <key>`
- PARLEY_API_KEY_FILE: Path to a file containing the API key (used when PARLEY_API_KEY is unset)
- PARLEY_URL: Chat completions URL (default: https://api.openai.com/v1/chat/completions)
- PARLEY_MODEL: Model identifier (default: gpt-4)
- PARLEY_RATE_LIMIT: Minimum seconds between requests (default: 3.0)
- PARLEY_SEND_REQUESTS: 0 to skip sending requests entirely, for offline testing (default: 1)
- PARLEY_RECORD_OUTPUT: 1 to append delivered exchanges to a transcript file (default: 0)
- PARLEY_OUTPUT_DIR: Directory for transcript files (default: ./transcripts)
- PARLEY_OUTPUT_PREFIX: Transcript file name prefix (default: parley)
- PARLEY_MAX_HISTORY: Send at most this many history messages per request (default: unbounded)
- PARLEY_DENIAL_SENTINEL: Text the model is told to answer with when refusing (default: [REFUSED])
- PARLEY_SERIALIZE_PER_PERSONALITY: 0 to allow overlapping requests for one personality (default: 1)
- PARLEY_REQUEST_TIMEOUT: Seconds before a request is abandoned (default: 120)
"""

import os
from dataclasses import dataclass
from typing import Callable, Optional, TypeVar

import httpx

from .errors import ConfigError
from .logs import get_logger
from .prompts import DEFAULT_DENIAL_SENTINEL

logger = get_logger("config")

DEFAULT_URL = "https://api.openai.com/v1/chat/completions"
DEFAULT_MODEL = "gpt-4"
DEFAULT_RATE_LIMIT = 3.0
DEFAULT_OUTPUT_DIR = "transcripts"
DEFAULT_OUTPUT_PREFIX = "parley"
DEFAULT_REQUEST_TIMEOUT = 120.0

T = TypeVar("T")


@dataclass
class CommunicatorConfig:
  api_key: str = ""
  url: str = DEFAULT_URL
  model: str = DEFAULT_MODEL

  # Minimum seconds between two requests, across all personalities
  rate_limit: float = DEFAULT_RATE_LIMIT

  send_requests: bool = True
  record_output: bool = False
  output_dir: str = DEFAULT_OUTPUT_DIR
  output_prefix: str = DEFAULT_OUTPUT_PREFIX

  denial_sentinel: str = DEFAULT_DENIAL_SENTINEL

  # None sends the whole history with every request
  max_history: Optional[int] = None

  serialize_per_personality: bool = True
  request_timeout: float = DEFAULT_REQUEST_TIMEOUT

  def validate(self) -> "CommunicatorConfig":
    if self.rate_limit < 0:
      raise ConfigError(f"rate_limit must not be negative, got {self.rate_limit}")
    if self.max_history is not None and self.max_history <= 0:
      raise ConfigError(f"max_history must be positive, got {self.max_history}")
    if not self.denial_sentinel:
      raise ConfigError("denial_sentinel must not be empty")
    if self.request_timeout <= 0:
      raise ConfigError(f"request_timeout must be positive, got {self.request_timeout}")
    if not self.url:
      raise ConfigError("url must not be empty")
    try:
      url = httpx.URL(self.url)
    except (httpx.InvalidURL, ValueError) as e:
      raise ConfigError(f"url is not a valid URL: {self.url!r}") from e
    if url.scheme not in ("http", "https") or not url.host:
      raise ConfigError(f"url must be an absolute http(s) URL, got {self.url!r}")
    if self.send_requests and not self.api_key:
      logger.warning("No API key configured, requests will most likely be rejected")
    return self

  @classmethod
  def from_environment(cls) -> "CommunicatorConfig":
    max_history = _env("PARLEY_MAX_HISTORY", int, None)
    return cls(
      api_key=get_api_key(),
      url=os.environ.get("PARLEY_URL", DEFAULT_URL),
      model=os.environ.get("PARLEY_MODEL", DEFAULT_MODEL),
      rate_limit=_env("PARLEY_RATE_LIMIT", float, DEFAULT_RATE_LIMIT),
      send_requests=_env_flag("PARLEY_SEND_REQUESTS", True),
      record_output=_env_flag("PARLEY_RECORD_OUTPUT", False),
      output_dir=os.environ.get("PARLEY_OUTPUT_DIR", DEFAULT_OUTPUT_DIR),
      output_prefix=os.environ.get("PARLEY_OUTPUT_PREFIX", DEFAULT_OUTPUT_PREFIX),
      denial_sentinel=os.environ.get("PARLEY_DENIAL_SENTINEL", DEFAULT_DENIAL_SENTINEL),
      max_history=max_history,
      serialize_per_personality=_env_flag("PARLEY_SERIALIZE_PER_PERSONALITY", True),
      request_timeout=_env("PARLEY_REQUEST_TIMEOUT", float, DEFAULT_REQUEST_TIMEOUT),
    ).validate()


def get_api_key() -> str:
  """
  Get the API key from the environment.

  Checks in order:
  1. PARLEY_API_KEY env var
  2. PARLEY_API_KEY_FILE env var (path to a file holding the key)

  :return: The API key, or an empty string if neither is set
  """
  if api_key := os.environ.get("PARLEY_API_KEY"):
    return api_key

  if key_file := os.environ.get("PARLEY_API_KEY_FILE"):
    try:
      with open(key_file, "r") as f:
        api_key = f.read().strip()
    except (IOError, OSError) as e:
      raise ConfigError(f"Failed to read API key from {key_file}: {e}") from e
    if not api_key:
      raise ConfigError(f"API key file is empty: {key_file}")
    return api_key

  return ""


def _env(name: str, convert: Callable[[str], T], default: Optional[T]) -> Optional[T]:
  value = os.environ.get(name)
  if value is None or value.strip() == "":
    return default
  try:
    return convert(value.strip())
  except ValueError as e:
    raise ConfigError(f"Invalid value for {name}: {value!r}") from e


def _env_flag(name: str, default: bool) -> bool:
  value = os.environ.get(name)
  if value is None:
    return default
  value = value.strip().lower()
  if value in ("1", "true", "yes", "on"):
    return True
  if value in ("0", "false", "no", "off"):
    return False
  raise ConfigError(f"Invalid value for {name}: {value!r}")
