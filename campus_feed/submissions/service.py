"""Submission pipeline.

Orchestrates moderation then classification:
- ``submit``: moderation, then classification of accepted text
- ``moderate``: moderation only (comments)
- ``submit_meme_command``: image generation with no moderation gate
- ``dispatch``: resolves the raw-text discriminator and routes

External calls are shielded: when a caller abandons a request the in-flight
call is left to finish and its result is dropped. The pipeline never stores
anything, so a cancelled request cannot leave a Post or Comment behind.
"""

import asyncio

import structlog

from .classification import ClassifierGateway
from .commands import (
    DEFAULT_MEME_PREFIX,
    MAX_MEME_PROMPT_LENGTH,
    MemeCommand,
    parse_submission,
)
from .images import ImageGenerator
from .models import (
    MEME_TITLE,
    Classified,
    MemeDraft,
    PipelineResult,
    Rejected,
    Verdict,
)
from .moderation import ModeratorGateway


logger = structlog.get_logger(__name__)


# ==============================================================================
# Custom Exceptions
# ==============================================================================


class SubmissionError(Exception):
    """Base submission error."""

    def __init__(self, message: str, code: str = "submission_error"):
        self.message = message
        self.code = code
        super().__init__(message)


class InvalidSubmissionError(SubmissionError):
    """Submitted text is empty or too long."""

    def __init__(self, message: str = "Submission text cannot be empty"):
        super().__init__(message, "invalid_submission")


class ImageGenerationError(SubmissionError):
    """The image generator failed; the meme command has no fallback."""

    def __init__(self, message: str = "Failed to generate meme. Please try again."):
        super().__init__(message, "image_generation_failed")


# ==============================================================================
# Pipeline
# ==============================================================================


class SubmissionPipeline:
    """Moderation-then-classification pipeline."""

    def __init__(
        self,
        moderator: ModeratorGateway,
        classifier: ClassifierGateway,
        image_generator: ImageGenerator | None = None,
        meme_prefix: str = DEFAULT_MEME_PREFIX,
        max_length: int | None = None,
    ):
        self._moderator = moderator
        self._classifier = classifier
        self._image_generator = image_generator
        self.meme_prefix = meme_prefix
        self.max_length = max_length

    def _require_text(self, text: str) -> str:
        if not text or not text.strip():
            raise InvalidSubmissionError
        if self.max_length is not None and len(text) > self.max_length:
            msg = f"Submission text exceeds {self.max_length} characters"
            raise InvalidSubmissionError(msg)
        return text

    async def moderate(self, text: str) -> Verdict:
        """Run the moderation stage only."""
        self._require_text(text)
        return await asyncio.shield(self._moderator.check(text))

    async def submit(self, text: str) -> PipelineResult:
        """Moderate, then classify accepted text into a draft.

        Rejected text never reaches the classifier.
        """
        verdict = await self.moderate(text)
        if isinstance(verdict, Rejected):
            return verdict

        draft = await asyncio.shield(self._classifier.classify(text))
        logger.info("submission_classified", category=draft.category)
        return Classified(draft=draft)

    async def _generate_image(self, prompt: str) -> str | None:
        if self._image_generator is None:
            logger.error("image_generator_not_configured")
            return None
        try:
            return await self._image_generator.generate(prompt)
        except Exception as e:
            logger.error(
                "meme_generation_failed", error=str(e), error_type=type(e).__name__
            )
            return None

    async def submit_meme_command(self, prompt: str) -> Classified:
        """Generate a meme draft from ``prompt``.

        This path has no moderation gate: image prompts are not checked.

        Raises:
            InvalidSubmissionError: If the prompt is blank or too long.
            ImageGenerationError: If no image could be produced.
        """
        self._require_text(prompt)
        if len(prompt) > MAX_MEME_PROMPT_LENGTH:
            msg = f"Meme prompt exceeds {MAX_MEME_PROMPT_LENGTH} characters"
            raise InvalidSubmissionError(msg)
        logger.warning("unmoderated_meme_prompt", prompt_length=len(prompt))

        image_url = await asyncio.shield(self._generate_image(prompt))
        if image_url is None:
            raise ImageGenerationError

        return Classified(
            draft=MemeDraft(title=MEME_TITLE, description=prompt, image_url=image_url)
        )

    async def dispatch(self, raw_text: str) -> PipelineResult:
        """Route raw client input to the meme command or the text pipeline."""
        submission = parse_submission(raw_text, self.meme_prefix)
        if isinstance(submission, MemeCommand):
            return await self.submit_meme_command(submission.prompt)
        return await self.submit(submission.text)
