"""Transcript recording for delivered exchanges."""

from .transcript import (
  DATE_FORMAT,
  OutputRecorder,
  TranscriptSink,
  capitalize_first,
  format_record,
)

__all__ = [
  "DATE_FORMAT",
  "OutputRecorder",
  "TranscriptSink",
  "capitalize_first",
  "format_record",
]
