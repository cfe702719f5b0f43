"""
Completion requests on behalf of personalities.

Every request runs as its own asyncio task through the same steps:

    Idle -> Waiting -> InFlight -> Delivered | Denied | Failed

1. Waiting: the personality's admission lock is taken (when per-personality
   serialisation is on) and the global RateLimiter decides how long to sleep.
2. InFlight: the templated prompt is appended to the personality's history as a
   user turn and the whole history is sent through the transport.
3. The first choice of the response is interpreted:
   - Failed: transport or parse error. Logged; the user turn stays in history
     without an answer and the callback is not called.
   - Denied: the content contains the denial sentinel. Nothing is appended,
     the callback is not called and `events.denial` fires.
   - Delivered: the raw content is appended as an assistant turn, the callback
     receives it without double quotes, and it is recorded to the transcript
     when recording is on.

The RateLimiter is told the attempt concluded exactly once, whatever the outcome.
"""

import asyncio
import inspect
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Awaitable, Callable, Optional, Set

from .clients.admission import PersonalityAdmission
from .clients.rate_limiter import RateLimiter
from .clients.transport import CompletionTransport, HttpTransport, build_request_body
from .config import CommunicatorConfig
from .conversation import ConversationStore
from .errors import ParseError, SinkError, TransportError
from .events import EventNotifier
from .interpreter import ResponseInterpreter
from .logs import get_logger
from .messages import assistant_message, user_message
from .personality import Personality
from .prompts import PromptTemplater, TemplatedPrompt
from .transcripts import OutputRecorder, TranscriptSink

ResponseCallback = Callable[[str], Optional[Awaitable[Any]]]


class DispatchOutcome(Enum):
  DELIVERED = "delivered"
  DENIED = "denied"
  FAILED = "failed"
  # sending disabled, or the communicator is not enabled
  SKIPPED = "skipped"


@dataclass
class PendingRequest:
  prompt: str
  personality: Personality
  callback: Optional[ResponseCallback]
  original: str

  @classmethod
  def of(
    cls, templated: TemplatedPrompt, personality: Personality, callback: Optional[ResponseCallback]
  ) -> "PendingRequest":
    return cls(templated.prompt, personality, callback, templated.original)


class Communicator:
  """
  Sends personality prompts to a chat-completion endpoint and routes the answers back.

  Usage:
      async with Communicator(CommunicatorConfig(api_key="...")) as communicator:
          communicator.events.denial.subscribe(on_denial)
          communicator.request_conversational_reply("Hi there, stranger.", guard, guard.say)
  """

  def __init__(
    self,
    config: Optional[CommunicatorConfig] = None,
    transport: Optional[CompletionTransport] = None,
    rate_limiter: Optional[RateLimiter] = None,
    store: Optional[ConversationStore] = None,
    events: Optional[EventNotifier] = None,
    sink: Optional[TranscriptSink] = None,
  ):
    """
    :param config: Communicator configuration, defaults to CommunicatorConfig()
    :param transport: Completion transport, defaults to an HttpTransport for config.url
    :param rate_limiter: Throttle to use, pass one instance to several communicators to share it
    :param store: Conversation store, defaults to one windowed at config.max_history
    :param events: Notification channels
    :param sink: Transcript sink, defaults to a file in config.output_dir
    """
    self.config = (config or CommunicatorConfig()).validate()
    self.logger = get_logger("communicator")

    self.transport = transport or HttpTransport(self.config.url, self.config.api_key, self.config.request_timeout)
    self.rate_limiter = rate_limiter or RateLimiter(self.config.rate_limit)
    self.store = store or ConversationStore(self.config.max_history)
    self.events = events or EventNotifier()
    self.admission = PersonalityAdmission(self.config.serialize_per_personality)
    self.templater = PromptTemplater(self.config.denial_sentinel)
    self.interpreter = ResponseInterpreter(self.config.denial_sentinel)
    self.sink = sink or TranscriptSink(self.config.output_dir, self.config.output_prefix)
    self.recorder = OutputRecorder(self.sink, self.events.recorded)

    self._enabled = False
    self._tasks: Set[asyncio.Task] = set()

  @property
  def enabled(self) -> bool:
    return self._enabled

  def enable(self) -> None:
    """Start accepting requests, opening the transcript file when recording is on."""
    if self._enabled:
      return
    if self.config.record_output:
      self.sink.open()
    self._enabled = True
    self.logger.debug(f"Communicator enabled for model '{self.config.model}'")

  def disable(self) -> None:
    """
    Stop accepting requests and close the transcript file.

    Requests already in flight are not cancelled. If one of them is delivered
    afterwards its transcript record is skipped.
    """
    if not self._enabled:
      return
    self._enabled = False
    self.sink.close()
    self.logger.debug(f"Communicator disabled with {len(self._tasks)} requests still in flight")

  async def __aenter__(self) -> "Communicator":
    self.enable()
    return self

  async def __aexit__(self, exc_type, exc, tb) -> None:
    self.disable()

  def request_conversational_reply(
    self, prompt: str, personality: Personality, callback: Optional[ResponseCallback]
  ) -> asyncio.Task:
    """
    Ask for what the personality says next in an ongoing conversation.

    :param prompt: The conversation so far, as the personality perceives it
    :param personality: Personality to answer as
    :param callback: Called with the reply once it is delivered
    :return: Task resolving to the DispatchOutcome
    """
    return self._submit(PendingRequest.of(self.templater.conversational_reply(prompt), personality, callback))

  def request_visual_cue_assessment(
    self, prompt: str, personality: Personality, callback: Optional[ResponseCallback]
  ) -> asyncio.Task:
    """
    Ask whether the personality remarks on what it currently sees.

    :param prompt: Description of what the personality can see
    """
    return self._submit(PendingRequest.of(self.templater.visual_cue_assessment(prompt), personality, callback))

  def request_reaction_instructions(
    self, prompt: str, personality: Personality, callback: Optional[ResponseCallback]
  ) -> asyncio.Task:
    """
    Ask what the personality does next given its current state.

    :param prompt: Description of the personality's current state
    """
    return self._submit(PendingRequest.of(self.templater.reaction_instructions(prompt), personality, callback))

  def _submit(self, pending: PendingRequest) -> asyncio.Task:
    task = asyncio.get_running_loop().create_task(self.dispatch(pending))
    self._tasks.add(task)
    task.add_done_callback(self._tasks.discard)
    return task

  async def drain(self) -> None:
    """Wait until every request submitted so far has concluded."""
    while self._tasks:
      await asyncio.gather(*list(self._tasks), return_exceptions=True)

  async def dispatch(self, pending: PendingRequest) -> DispatchOutcome:
    personality = pending.personality
    if personality.verbose:
      self.logger.info(f"Sending request for '{personality.name}' with prompt:\n{pending.prompt}")

    if not self.config.send_requests:
      self.logger.debug(f"Sending requests is disabled, skipping request for '{personality.name}'")
      return DispatchOutcome.SKIPPED

    if not self._enabled:
      self.logger.warning(f"Communicator is not enabled, skipping request for '{personality.name}'")
      return DispatchOutcome.SKIPPED

    async with self.admission.admit(personality):
      await self.rate_limiter.wait()
      try:
        return await self._send(pending)
      finally:
        self.rate_limiter.record_dispatch()

  async def _send(self, pending: PendingRequest) -> DispatchOutcome:
    personality = pending.personality
    self.store.append(personality, user_message(pending.prompt))

    messages = self.store.snapshot(personality)
    if self.logger.isEnabledFor(logging.DEBUG):
      self.logger.debug(
        f"Sending {len(messages)} messages (~{self.store.count_tokens(personality)} tokens) "
        f"for '{personality.name}' with model '{self.config.model}'"
      )
    body = build_request_body(
      self.config.model,
      [message.to_dict() for message in messages],
      personality.generation_parameters(),
    )

    try:
      raw = await self.transport.complete(body)
      content = self.interpreter.interpret(raw)
    except TransportError as e:
      self.logger.error(f"Requester error for '{personality.name}': {e}")
      return DispatchOutcome.FAILED
    except ParseError as e:
      self.logger.error(f"Unreadable response for '{personality.name}': {e}")
      return DispatchOutcome.FAILED

    if self.interpreter.is_denied(content):
      self.logger.info(f'Got denial string "{self.interpreter.denial_sentinel}" from prompt:\n"{pending.prompt}"')
      self.events.denial.fire(personality)
      return DispatchOutcome.DENIED

    self.store.append(personality, assistant_message(content))
    await self._deliver(pending, self.interpreter.sanitize_for_delivery(content))

    if self.config.record_output:
      self._record(pending, content)

    return DispatchOutcome.DELIVERED

  async def _deliver(self, pending: PendingRequest, text: str) -> None:
    if pending.callback is None:
      return
    try:
      result = pending.callback(text)
      if inspect.isawaitable(result):
        await result
    except Exception as e:
      self.logger.error(f"Response callback for '{pending.personality.name}' failed: {e}")

  def _record(self, pending: PendingRequest, output: str) -> None:
    try:
      self.recorder.record(pending.personality, pending.original, output)
    except SinkError as e:
      self.logger.warning(f"Skipping transcript record for '{pending.personality.name}': {e}")
