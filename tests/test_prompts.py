from parley.prompts import (
  DEFAULT_DENIAL_SENTINEL,
  REACT_INSTRUCT,
  REPLY_INSTRUCT,
  RESPONSE_CHECK,
  VIS_ASSESS_HEAD,
  VIS_ASSESS_SAY,
  PromptTemplater,
  TemplatedPrompt,
)


class TestPromptTemplater:
  def test_conversational_reply(self):
    templater = PromptTemplater("NOPE")
    templated = templater.conversational_reply("The merchant asks for your name.")

    assert isinstance(templated, TemplatedPrompt)
    assert templated.original == "The merchant asks for your name."
    assert templated.prompt == f"The merchant asks for your name. {REPLY_INSTRUCT}{RESPONSE_CHECK}NOPE"
    assert templated.prompt.endswith("NOPE")

  def test_visual_cue_assessment(self):
    templater = PromptTemplater("NOPE")
    templated = templater.visual_cue_assessment("a burning cart")

    assert templated.original == "a burning cart"
    assert templated.prompt.startswith(f"{VIS_ASSESS_HEAD} a burning cart {VIS_ASSESS_SAY}")
    assert templated.prompt.endswith(f"{RESPONSE_CHECK}NOPE")

  def test_reaction_instructions_have_no_denial_invite(self):
    templater = PromptTemplater("NOPE")
    templated = templater.reaction_instructions("You are hungry.")

    assert templated == TemplatedPrompt(f"You are hungry. {REACT_INSTRUCT}", "You are hungry.")
    assert "NOPE" not in templated.prompt
    assert RESPONSE_CHECK not in templated.prompt

  def test_default_sentinel(self):
    templated = PromptTemplater().conversational_reply("hi")
    assert templated.prompt.endswith(DEFAULT_DENIAL_SENTINEL)

  def test_empty_prompt(self):
    templated = PromptTemplater().reaction_instructions("")
    assert templated.original == ""
    assert templated.prompt == f" {REACT_INSTRUCT}"
