"""
Plain-text transcripts of delivered exchanges.

When recording is enabled the communicator opens one file per active lifetime,
named `{prefix}_{timestamp}.txt` inside the output directory, and appends one
record per delivered, non-denied exchange:

    You are <backstory>. <summary>
    <Prompt, first letter capitalised> What is your response?
    <model output>

The files are meant for later analysis or as fine-tuning material.
"""

import os
from datetime import datetime
from typing import Callable, Optional, TextIO

from ..errors import SinkError
from ..events import EventChannel
from ..logs import get_logger
from ..personality import Personality

DATE_FORMAT = "%Y-%m-%d_%H-%M-%S"


def capitalize_first(text: str) -> str:
  """Upper-case the first character only; the empty string is returned unchanged."""
  if not text:
    return text
  return text[0].upper() + text[1:]


def format_record(personality: Personality, prompt: str, output: str) -> str:
  return (
    f"You are {personality.backstory}. {personality.summary}\n"
    f"{capitalize_first(prompt)} What is your response?\n"
    f"{output}"
  )


class TranscriptSink:
  """Append-only text file, open for the communicator's active lifetime."""

  def __init__(self, directory: str, prefix: str, now: Callable[[], datetime] = datetime.now):
    self.directory = directory
    self.prefix = prefix
    self.now = now
    self.path: Optional[str] = None
    self.logger = get_logger("transcripts")
    self._file: Optional[TextIO] = None

  @property
  def is_open(self) -> bool:
    return self._file is not None

  def open(self) -> str:
    if self._file is not None:
      return self.path

    filename = f"{self.prefix}_{self.now().strftime(DATE_FORMAT)}.txt"
    path = os.path.join(self.directory, filename)
    try:
      os.makedirs(self.directory, exist_ok=True)
      self._file = open(path, "a", encoding="utf-8")
    except OSError as e:
      raise SinkError(f"Failed to open transcript file {path}: {e}") from e

    self.path = path
    self.logger.info(f"Opened file for recording transcripts at: {path}")
    return path

  def write(self, record: str) -> None:
    if self._file is None:
      raise SinkError("Transcript sink is not open")
    try:
      self._file.write(record)
      self._file.write("\n")
      self._file.flush()
    except (OSError, ValueError) as e:
      raise SinkError(f"Failed to write to transcript file {self.path}: {e}") from e

  def close(self) -> None:
    if self._file is None:
      return
    try:
      self._file.close()
    finally:
      self._file = None
      self.logger.debug(f"Closed transcript file {self.path}")


class OutputRecorder:
  def __init__(self, sink: TranscriptSink, recorded: EventChannel):
    self.sink = sink
    self.recorded = recorded

  def record(self, personality: Personality, original_prompt: str, output: str) -> None:
    """
    Append one exchange to the sink, then notify `recorded` subscribers.

    :raises SinkError: If the record could not be written; nobody is notified
    """
    self.sink.write(format_record(personality, original_prompt, output))
    self.recorded.fire(personality)
