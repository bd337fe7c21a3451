"""Submission API endpoints.

- POST /api/classify: moderation + classification (or the ``/meme`` command)
- POST /api/generate-meme: meme trapdoor
"""

from fastapi import APIRouter

from .dependencies import SubmissionPipelineDep, handle_submission_error
from .models import Rejected
from .schemas import (
    ClassificationPayload,
    ClassificationResponse,
    ClassifyRequest,
    GenerateMemeRequest,
    MemeResponse,
    RejectionResponse,
)
from .service import SubmissionError


router = APIRouter(prefix="/api", tags=["submissions"])


@router.post(
    "/classify",
    response_model=ClassificationResponse | RejectionResponse,
    summary="Moderate and classify post text",
)
async def classify(
    data: ClassifyRequest,
    pipeline: SubmissionPipelineDep,
) -> ClassificationResponse | RejectionResponse:
    """Turn raw text into a draft awaiting confirmation.

    Toxic text is rejected with a reason and, when available, a suggested
    rewrite. Nothing is stored by this endpoint.
    """
    try:
        result = await pipeline.dispatch(data.text)
    except SubmissionError as e:
        raise handle_submission_error(e) from e

    if isinstance(result, Rejected):
        return RejectionResponse.from_rejected(result)

    return ClassificationResponse(
        classification=ClassificationPayload.from_draft(result.draft)
    )


@router.post(
    "/generate-meme",
    response_model=MemeResponse,
    summary="Generate a meme image",
)
async def generate_meme(
    data: GenerateMemeRequest,
    pipeline: SubmissionPipelineDep,
) -> MemeResponse:
    """Generate a meme image from a prompt (not moderated)."""
    try:
        result = await pipeline.submit_meme_command(data.prompt)
    except SubmissionError as e:
        raise handle_submission_error(e) from e

    return MemeResponse(image_url=result.draft.image_url)
