"""FastAPI dependencies for the submission pipeline."""

from typing import Annotated

from fastapi import Depends, HTTPException, Request, status

from .service import SubmissionError, SubmissionPipeline


async def get_submission_pipeline(request: Request) -> SubmissionPipeline:
    """Get the submission pipeline from app state."""
    pipeline = getattr(request.app.state, "submission_pipeline", None)
    if pipeline is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Submission pipeline not available",
        )
    return pipeline


SubmissionPipelineDep = Annotated[SubmissionPipeline, Depends(get_submission_pipeline)]


def handle_submission_error(error: SubmissionError) -> HTTPException:
    """Convert submission errors to HTTP exceptions."""
    status_map = {
        "invalid_submission": status.HTTP_400_BAD_REQUEST,
        "image_generation_failed": status.HTTP_502_BAD_GATEWAY,
    }

    status_code = status_map.get(error.code, status.HTTP_500_INTERNAL_SERVER_ERROR)

    return HTTPException(
        status_code=status_code,
        detail={"code": error.code, "message": error.message},
    )
