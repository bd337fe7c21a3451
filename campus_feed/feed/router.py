"""Feed API endpoints.

Provides routes for:
- Post confirmation, listing, merge-patch and cascade deletion
- Reactions on posts and comments
- Moderated comment threads (one reply level)
"""

from uuid import UUID

from fastapi import APIRouter

from campus_feed.submissions.models import Rejected, build_draft
from campus_feed.submissions.dependencies import handle_submission_error
from campus_feed.submissions.schemas import RejectionResponse
from campus_feed.submissions.service import SubmissionError

from .dependencies import FeedRepositoryDep, handle_feed_error
from .errors import FeedError
from .models import Comment, Post
from .repository import FeedRepository
from .schemas import (
    CommentEnvelope,
    CommentListEnvelope,
    CommentReactRequest,
    CommentResponse,
    CreateCommentRequest,
    CreatePostRequest,
    MessageResponse,
    PostEnvelope,
    PostListEnvelope,
    PostResponse,
    ReactionsEnvelope,
    ReactRequest,
    UpdatePostRequest,
)


router = APIRouter(prefix="/api", tags=["feed"])


def _post_response(repository: FeedRepository, post: Post) -> PostResponse:
    return PostResponse.from_post(post, repository.counts(post.post_id))


def _comment_response(repository: FeedRepository, comment: Comment) -> CommentResponse:
    replies = [_comment_response(repository, reply) for reply in comment.replies]
    return CommentResponse.from_comment(
        comment, repository.counts(comment.comment_id), replies
    )


# ==============================================================================
# Posts
# ==============================================================================


@router.post("/posts", response_model=PostEnvelope, summary="Confirm a draft as a post")
async def create_post(
    data: CreatePostRequest,
    repository: FeedRepositoryDep,
) -> PostEnvelope:
    """Store a confirmed (possibly edited) draft.

    Unrecognized categories are accepted and rendered as generic posts.
    """
    draft = build_draft(
        data.category, data.post_fields, default_description=data.original_text
    )
    post = repository.create_post(draft, data.original_text)
    return PostEnvelope(post=_post_response(repository, post))


@router.get("/posts", response_model=PostListEnvelope, summary="List posts")
async def list_posts(repository: FeedRepositoryDep) -> PostListEnvelope:
    """All posts, newest first."""
    posts = [_post_response(repository, post) for post in repository.list_posts()]
    return PostListEnvelope(posts=posts)


@router.get("/posts/{post_id}", response_model=PostEnvelope, summary="Get a post")
async def get_post(post_id: UUID, repository: FeedRepositoryDep) -> PostEnvelope:
    """Fetch a single post."""
    try:
        post = repository.get_post(post_id)
    except FeedError as e:
        raise handle_feed_error(e) from e
    return PostEnvelope(post=_post_response(repository, post))


@router.put(
    "/posts/{post_id}", response_model=PostEnvelope, summary="Update post fields"
)
async def update_post(
    post_id: UUID,
    data: UpdatePostRequest,
    repository: FeedRepositoryDep,
) -> PostEnvelope:
    """Merge-patch the post's fields; ``null`` removes a key."""
    try:
        post = await repository.update_post_fields(post_id, data.post_fields)
    except FeedError as e:
        raise handle_feed_error(e) from e
    return PostEnvelope(post=_post_response(repository, post))


@router.delete(
    "/posts/{post_id}", response_model=MessageResponse, summary="Delete a post"
)
async def delete_post(post_id: UUID, repository: FeedRepositoryDep) -> MessageResponse:
    """Delete a post together with its comments and reactions."""
    try:
        await repository.delete_post(post_id)
    except FeedError as e:
        raise handle_feed_error(e) from e
    return MessageResponse(message="Post deleted")


@router.post(
    "/posts/{post_id}/react",
    response_model=ReactionsEnvelope,
    summary="Toggle a reaction on a post",
)
async def react_to_post(
    post_id: UUID,
    data: ReactRequest,
    repository: FeedRepositoryDep,
) -> ReactionsEnvelope:
    """Toggle a reaction; the same reaction twice removes it."""
    try:
        reactions = await repository.react(
            post_id, data.user_id, data.reaction, post_id=post_id
        )
    except FeedError as e:
        raise handle_feed_error(e) from e
    return ReactionsEnvelope(reactions=reactions)


# ==============================================================================
# Comments
# ==============================================================================


@router.get(
    "/posts/{post_id}/comments",
    response_model=CommentListEnvelope,
    summary="List post comments",
)
async def list_comments(
    post_id: UUID, repository: FeedRepositoryDep
) -> CommentListEnvelope:
    """Top-level comments in insertion order, each with its replies."""
    try:
        comments = repository.list_comments(post_id)
    except FeedError as e:
        raise handle_feed_error(e) from e
    return CommentListEnvelope(
        comments=[_comment_response(repository, comment) for comment in comments]
    )


@router.post(
    "/posts/{post_id}/comments",
    response_model=CommentEnvelope | RejectionResponse,
    summary="Add a comment or reply",
)
async def create_comment(
    post_id: UUID,
    data: CreateCommentRequest,
    repository: FeedRepositoryDep,
) -> CommentEnvelope | RejectionResponse:
    """Add a moderated comment; ``parentId`` makes it a reply.

    Replies must target a top-level comment of the same post.
    """
    try:
        result = await repository.add_comment(
            post_id, data.text, data.author, parent_id=data.parent_id
        )
    except FeedError as e:
        raise handle_feed_error(e) from e
    except SubmissionError as e:
        raise handle_submission_error(e) from e

    if isinstance(result, Rejected):
        return RejectionResponse.from_rejected(result)
    return CommentEnvelope(comment=_comment_response(repository, result))


@router.post(
    "/comments/{comment_id}/react",
    response_model=ReactionsEnvelope,
    summary="Toggle a reaction on a comment",
)
async def react_to_comment(
    comment_id: UUID,
    data: CommentReactRequest,
    repository: FeedRepositoryDep,
) -> ReactionsEnvelope:
    """Toggle a reaction on a comment or reply."""
    try:
        reactions = await repository.react(
            comment_id, data.user_id, data.reaction, post_id=data.post_id
        )
    except FeedError as e:
        raise handle_feed_error(e) from e
    return ReactionsEnvelope(reactions=reactions)
