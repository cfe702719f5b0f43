"""
Instructional templates wrapped around a personality's situational prompt.

Conversational replies and visual-cue assessments end with an invitation to
answer with the denial sentinel when the model cannot stay in character.
Reaction instructions deliberately carry no such invitation.
"""

from typing import NamedTuple

DEFAULT_DENIAL_SENTINEL = "[REFUSED]"

REPLY_INSTRUCT = "Reply in character with only the words you would say out loud, in one or two sentences."
VIS_ASSESS_HEAD = "This is what you can currently see:"
VIS_ASSESS_SAY = "If any of it is worth remarking on, say what you would say about it out loud, in one sentence."
REACT_INSTRUCT = (
  "Describe in one short sentence what you do next, using only actions available to you and no dialogue."
)
RESPONSE_CHECK = " If you cannot or will not answer in character, reply with exactly: "


class TemplatedPrompt(NamedTuple):
  prompt: str
  original: str


class PromptTemplater:
  def __init__(self, denial_sentinel: str = DEFAULT_DENIAL_SENTINEL):
    self.denial_sentinel = denial_sentinel

  @property
  def denial_invite(self) -> str:
    return f"{RESPONSE_CHECK}{self.denial_sentinel}"

  def conversational_reply(self, prompt: str) -> TemplatedPrompt:
    return TemplatedPrompt(f"{prompt} {REPLY_INSTRUCT}{self.denial_invite}", prompt)

  def visual_cue_assessment(self, prompt: str) -> TemplatedPrompt:
    return TemplatedPrompt(f"{VIS_ASSESS_HEAD} {prompt} {VIS_ASSESS_SAY}{self.denial_invite}", prompt)

  def reaction_instructions(self, prompt: str) -> TemplatedPrompt:
    return TemplatedPrompt(f"{prompt} {REACT_INSTRUCT}", prompt)
