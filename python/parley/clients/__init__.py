from .rate_limiter import RateLimiter, RateLimiterStats
from .admission import PersonalityAdmission
from .transport import CompletionTransport, HttpTransport, build_request_body
from .openai_transport import OpenAITransport, base_url_from
from .shared_clients import (
  get_shared_http_client,
  get_shared_openai_client,
  close_shared_clients,
  reset_shared_clients,
)

__all__ = [
  "RateLimiter",
  "RateLimiterStats",
  "PersonalityAdmission",
  "CompletionTransport",
  "HttpTransport",
  "OpenAITransport",
  "build_request_body",
  "base_url_from",
  "get_shared_http_client",
  "get_shared_openai_client",
  "close_shared_clients",
  "reset_shared_clients",
]
