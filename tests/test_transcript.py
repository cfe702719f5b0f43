"""Unit tests for transcript formatting, the file sink and the output recorder."""

import os
from datetime import datetime

import pytest

from parley.errors import SinkError
from parley.events import EventChannel
from parley.personality import Personality
from parley.transcripts import (
  OutputRecorder,
  TranscriptSink,
  capitalize_first,
  format_record,
)

from mock_utils import Recorder


@pytest.fixture
def personality():
  return Personality(name="guard", backstory="a tired city guard", summary="You distrust strangers.")


@pytest.fixture
def sink(tmp_path):
  sink = TranscriptSink(str(tmp_path / "out"), "run", now=lambda: datetime(2024, 5, 17, 9, 30, 5))
  yield sink
  sink.close()


def read_lines(path):
  with open(path, "r", encoding="utf-8") as f:
    return f.read().splitlines()


class TestFormatting:
  def test_capitalize_first(self):
    assert capitalize_first("hello") == "Hello"
    assert capitalize_first("Hello") == "Hello"
    assert capitalize_first("h") == "H"
    assert capitalize_first("hELLO wORLD") == "HELLO wORLD"

  def test_capitalize_empty_is_noop(self):
    assert capitalize_first("") == ""

  def test_format_record(self, personality):
    record = format_record(personality, "hello", "Move along.")
    assert record == (
      "You are a tired city guard. You distrust strangers.\nHello What is your response?\nMove along."
    )

  def test_prompt_segment_starts_capitalized(self, personality):
    prompt_segment = format_record(personality, "hello there", "x").split("\n")[1]
    assert prompt_segment.startswith("Hello")

  def test_format_record_with_empty_prompt(self, personality):
    record = format_record(personality, "", "Move along.")
    assert record.split("\n")[1] == " What is your response?"


class TestTranscriptSink:
  def test_open_creates_file_with_prefix_and_timestamp(self, sink, tmp_path):
    path = sink.open()

    assert path == os.path.join(str(tmp_path / "out"), "run_2024-05-17_09-30-05.txt")
    assert os.path.exists(path)
    assert sink.is_open

  def test_open_twice_keeps_file(self, sink):
    assert sink.open() == sink.open()

  def test_write_appends_lines(self, sink):
    path = sink.open()
    sink.write("first")
    sink.write("second")

    assert read_lines(path) == ["first", "second"]

  def test_reopen_appends(self, sink):
    path = sink.open()
    sink.write("first")
    sink.close()
    sink.open()
    sink.write("second")

    assert read_lines(path) == ["first", "second"]

  def test_write_before_open(self, sink):
    with pytest.raises(SinkError):
      sink.write("record")

  def test_write_after_close(self, sink):
    sink.open()
    sink.close()
    assert not sink.is_open
    with pytest.raises(SinkError):
      sink.write("record")

  def test_close_without_open(self, sink):
    sink.close()

  def test_unwritable_directory(self, tmp_path):
    blocker = tmp_path / "blocker"
    blocker.write_text("not a directory")
    sink = TranscriptSink(str(blocker / "out"), "run")

    with pytest.raises(SinkError):
      sink.open()


class TestOutputRecorder:
  def test_record_writes_and_notifies_once(self, sink, personality):
    path = sink.open()
    recorded = EventChannel("recorded")
    subscriber = Recorder()
    recorded.subscribe(subscriber)

    OutputRecorder(sink, recorded).record(personality, "hello", "Move along.")

    assert read_lines(path) == [
      "You are a tired city guard. You distrust strangers.",
      "Hello What is your response?",
      "Move along.",
    ]
    assert subscriber.calls == [personality]

  def test_record_on_closed_sink_does_not_notify(self, sink, personality):
    recorded = EventChannel("recorded")
    subscriber = Recorder()
    recorded.subscribe(subscriber)

    with pytest.raises(SinkError):
      OutputRecorder(sink, recorded).record(personality, "hello", "Move along.")

    assert subscriber.calls == []
