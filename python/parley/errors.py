"""
Exception classes raised inside parley.

Only ConfigError escapes to callers. TransportError, ParseError and SinkError
are raised by the collaborators of the Communicator and handled there: each one
ends a single request (or, for SinkError, a single recording) without touching
any other request in flight.
"""

from typing import Optional


class ParleyError(Exception):
  """Base class for every error raised by parley."""


class TransportError(ParleyError):
  """
  The completion endpoint could not be reached or answered with a non-success status.

  Attributes:
    status_code: HTTP status of the response, None for network level failures
  """

  def __init__(self, message: str, status_code: Optional[int] = None):
    self.status_code = status_code
    super().__init__(message)


class ParseError(ParleyError):
  """The completion response was malformed, empty, or had no choices."""


class SinkError(ParleyError):
  """A transcript record could not be written, e.g. because the sink was closed."""


class ConfigError(ParleyError):
  """Configuration values are missing or invalid."""
