import json

import pytest

from parley.errors import ParseError
from parley.interpreter import ResponseInterpreter

from mock_utils import completion_body


@pytest.fixture
def interpreter():
  return ResponseInterpreter("REFUSE")


class TestInterpret:
  def test_extracts_first_choice(self, interpreter):
    body = json.loads(completion_body("first"))
    body["choices"].append({"index": 1, "message": {"role": "assistant", "content": "second"}, "finish_reason": "stop"})

    assert interpreter.interpret(json.dumps(body)) == "first"

  def test_accepts_bytes(self, interpreter):
    assert interpreter.interpret(completion_body("hi").encode("utf-8")) == "hi"

  def test_accepts_decoded_mapping(self, interpreter):
    assert interpreter.interpret(json.loads(completion_body("hi"))) == "hi"

  def test_malformed_json(self, interpreter):
    with pytest.raises(ParseError):
      interpreter.interpret("{not json")

  def test_empty_body(self, interpreter):
    with pytest.raises(ParseError):
      interpreter.interpret("")

  def test_not_an_object(self, interpreter):
    with pytest.raises(ParseError):
      interpreter.interpret("[1, 2, 3]")

  def test_no_choices(self, interpreter):
    with pytest.raises(ParseError):
      interpreter.interpret(json.dumps({"id": "x", "choices": []}))

  def test_missing_choices(self, interpreter):
    with pytest.raises(ParseError):
      interpreter.interpret(json.dumps({"id": "x"}))

  @pytest.mark.parametrize("choices", [{"a": 1}, 5, True, "choice"])
  def test_choices_not_a_list(self, interpreter, choices):
    with pytest.raises(ParseError):
      interpreter.interpret(json.dumps({"id": "x", "choices": choices}))

  def test_missing_message(self, interpreter):
    with pytest.raises(ParseError):
      interpreter.interpret(json.dumps({"choices": [{"index": 0}]}))

  def test_null_content(self, interpreter):
    with pytest.raises(ParseError):
      interpreter.interpret(completion_body(None))


class TestDenial:
  def test_sentinel_anywhere(self, interpreter):
    assert interpreter.is_denied("I cannot do that. REFUSE")
    assert interpreter.is_denied("REFUSE")
    assert interpreter.is_denied("xxREFUSExx")

  def test_exact_substring(self, interpreter):
    assert not interpreter.is_denied("I refuse")
    assert not interpreter.is_denied("REFUS E")
    assert not interpreter.is_denied("")


class TestSanitize:
  def test_removes_double_quotes(self):
    assert ResponseInterpreter.sanitize_for_delivery('"Hello," she said, "friend."') == "Hello, she said, friend."

  def test_keeps_single_quotes(self):
    assert ResponseInterpreter.sanitize_for_delivery("it's fine") == "it's fine"

  def test_only_quotes(self):
    assert ResponseInterpreter.sanitize_for_delivery('""""') == ""
