"""Request-shape discriminator for raw submissions.

The ``/meme`` prefix is resolved exactly once, here, before any pipeline
stage runs.
"""

from dataclasses import dataclass


DEFAULT_MEME_PREFIX = "/meme "
MAX_MEME_PROMPT_LENGTH = 1000


@dataclass(frozen=True)
class TextSubmission:
    """Free text headed through moderation and classification."""

    text: str


@dataclass(frozen=True)
class MemeCommand:
    """Prompt for the image generator; skips moderation and classification."""

    prompt: str


Submission = TextSubmission | MemeCommand


def parse_submission(
    raw_text: str, meme_prefix: str = DEFAULT_MEME_PREFIX
) -> Submission:
    """Classify the raw input as a meme command or a text submission.

    A meme command needs a non-empty prompt after the prefix; a bare prefix is
    treated as ordinary text.
    """
    if meme_prefix and raw_text.startswith(meme_prefix):
        prompt = raw_text[len(meme_prefix) :].strip()
        if prompt:
            return MemeCommand(prompt=prompt)
    return TextSubmission(text=raw_text)
