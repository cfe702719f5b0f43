from .communicator import Communicator, DispatchOutcome, PendingRequest, ResponseCallback
from .config import CommunicatorConfig
from .conversation import ConversationStore
from .errors import ParleyError, TransportError, ParseError, SinkError, ConfigError
from .events import EventChannel, EventNotifier
from .interpreter import ResponseInterpreter
from .logs import get_logger, set_log_level, set_log_levels
from .messages import ConversationRole, Message
from .personality import Personality
from .prompts import PromptTemplater, TemplatedPrompt
from .clients import (
  RateLimiter,
  PersonalityAdmission,
  HttpTransport,
  OpenAITransport,
  close_shared_clients,
)
from .transcripts import OutputRecorder, TranscriptSink

__all__ = [
  "Communicator",
  "CommunicatorConfig",
  "DispatchOutcome",
  "PendingRequest",
  "ResponseCallback",
  "ConversationStore",
  "ParleyError",
  "TransportError",
  "ParseError",
  "SinkError",
  "ConfigError",
  "EventChannel",
  "EventNotifier",
  "ResponseInterpreter",
  "get_logger",
  "set_log_level",
  "set_log_levels",
  "ConversationRole",
  "Message",
  "Personality",
  "PromptTemplater",
  "TemplatedPrompt",
  "RateLimiter",
  "PersonalityAdmission",
  "HttpTransport",
  "OpenAITransport",
  "close_shared_clients",
  "OutputRecorder",
  "TranscriptSink",
]
