"""Pydantic schemas for the submission endpoints.

Wire names are camelCase (``isToxic``, ``suggestedRewrite``, ``imageUrl``) to
match the existing web client.
"""

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .commands import MAX_MEME_PROMPT_LENGTH
from .models import Draft, Rejected, is_recognized_category


MAX_TEXT_LENGTH = 5000


def _strip_non_empty(v: str) -> str:
    v = v.strip()
    if not v:
        msg = "Text cannot be empty"
        raise ValueError(msg)
    return v


# ==============================================================================
# Request Schemas
# ==============================================================================


class ClassifyRequest(BaseModel):
    """Raw post text (or a ``/meme`` command) to run through the pipeline."""

    text: str = Field(..., min_length=1, max_length=MAX_TEXT_LENGTH)

    @field_validator("text")
    @classmethod
    def validate_text(cls, v: str) -> str:
        """Reject whitespace-only text; keep the raw string otherwise."""
        _strip_non_empty(v)
        return v


class GenerateMemeRequest(BaseModel):
    """Prompt for the meme image generator."""

    prompt: str = Field(..., min_length=1, max_length=MAX_MEME_PROMPT_LENGTH)

    @field_validator("prompt")
    @classmethod
    def validate_prompt(cls, v: str) -> str:
        """Strip whitespace and validate prompt."""
        return _strip_non_empty(v)


# ==============================================================================
# Response Schemas
# ==============================================================================


class ClassificationPayload(BaseModel):
    """A draft as shown to the user for confirmation."""

    model_config = ConfigDict(populate_by_name=True)

    category: str
    recognized: bool
    draft_fields: dict[str, Any] = Field(alias="fields")

    @classmethod
    def from_draft(cls, draft: Draft) -> "ClassificationPayload":
        return cls(
            category=draft.category,
            recognized=is_recognized_category(draft.category),
            draft_fields=draft.to_fields(),
        )


class ClassificationResponse(BaseModel):
    """Successful pipeline run."""

    model_config = ConfigDict(populate_by_name=True)

    success: Literal[True] = True
    is_toxic: bool = Field(default=False, alias="isToxic")
    classification: ClassificationPayload


class RejectionResponse(BaseModel):
    """Moderation veto; shared by post classification and comment creation."""

    model_config = ConfigDict(populate_by_name=True)

    success: Literal[False] = False
    is_toxic: bool = Field(default=True, alias="isToxic")
    reason: str
    suggested_rewrite: str | None = Field(default=None, alias="suggestedRewrite")

    @classmethod
    def from_rejected(cls, rejected: Rejected) -> "RejectionResponse":
        return cls(reason=rejected.reason, suggested_rewrite=rejected.suggested_rewrite)


class MemeResponse(BaseModel):
    """Generated meme image."""

    model_config = ConfigDict(populate_by_name=True)

    success: Literal[True] = True
    image_url: str = Field(alias="imageUrl")
