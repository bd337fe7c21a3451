"""FastAPI dependencies for the feed."""

from typing import Annotated

from fastapi import Depends, HTTPException, Request, status

from .errors import FeedError
from .repository import FeedRepository


async def get_feed_repository(request: Request) -> FeedRepository:
    """Get the feed repository from app state.

    Args:
        request: FastAPI request

    Returns:
        FeedRepository instance
    """
    repository = getattr(request.app.state, "feed_repository", None)
    if repository is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Feed repository not available",
        )
    return repository


FeedRepositoryDep = Annotated[FeedRepository, Depends(get_feed_repository)]


def handle_feed_error(error: FeedError) -> HTTPException:
    """Convert feed errors to HTTP exceptions.

    Args:
        error: Feed error

    Returns:
        HTTPException with appropriate status code
    """
    status_map = {
        "post_not_found": status.HTTP_404_NOT_FOUND,
        "comment_not_found": status.HTTP_404_NOT_FOUND,
        "parent_not_found": status.HTTP_404_NOT_FOUND,
        "reaction_target_not_found": status.HTTP_404_NOT_FOUND,
        "invalid_nesting": status.HTTP_400_BAD_REQUEST,
        "invalid_reaction_kind": status.HTTP_400_BAD_REQUEST,
        "invalid_post_fields": status.HTTP_400_BAD_REQUEST,
    }

    status_code = status_map.get(error.code, status.HTTP_500_INTERNAL_SERVER_ERROR)

    return HTTPException(
        status_code=status_code,
        detail={"code": error.code, "message": error.message},
    )
