"""Thread store: posts and their comment forests.

Each post owns an insertion-ordered mapping of top-level comments; every
top-level comment keeps its replies in insertion order. Replies cannot have
replies (nesting depth <= 2).

Comment text is moderated before admission. Moderation is an external call,
so targets are validated before it and re-validated after it under the
post's lock; a post deleted in the meantime is reported as not found and no
comment is created.
"""

import asyncio
from collections.abc import AsyncIterator, Callable
from contextlib import asynccontextmanager
from typing import Protocol
from uuid import UUID

import structlog

from campus_feed.submissions.models import Rejected, Verdict

from .errors import InvalidNestingError, ParentNotFoundError, PostNotFoundError
from .models import Comment, Post, create_comment


logger = structlog.get_logger(__name__)


class CommentModerator(Protocol):
    """Moderation-only check applied to comment text."""

    async def moderate(self, text: str) -> Verdict: ...


class ThreadStore:
    """Owns posts and, per post, an ordered forest of comments."""

    def __init__(
        self,
        moderator: CommentModerator,
        on_comment_created: Callable[[Comment], None] | None = None,
    ):
        self._moderator = moderator
        self._on_comment_created = on_comment_created
        self._posts: dict[UUID, Post] = {}
        self._threads: dict[UUID, dict[UUID, Comment]] = {}
        self._locks: dict[UUID, asyncio.Lock] = {}
        # every comment (top-level and reply) -> owning post
        self._comment_posts: dict[UUID, UUID] = {}

    # ==========================================================================
    # Posts
    # ==========================================================================

    def add_post(self, post: Post) -> None:
        """Register a new post with an empty thread."""
        self._posts[post.post_id] = post
        self._threads[post.post_id] = {}
        self._locks[post.post_id] = asyncio.Lock()

    def has_post(self, post_id: UUID) -> bool:
        return post_id in self._posts

    def get_post(self, post_id: UUID) -> Post:
        """Return the post or raise ``PostNotFoundError``."""
        post = self._posts.get(post_id)
        if post is None:
            raise PostNotFoundError
        return post

    def list_posts(self) -> list[Post]:
        """All posts, newest first."""
        return list(reversed(self._posts.values()))

    @asynccontextmanager
    async def locked(self, post_id: UUID) -> AsyncIterator[Post]:
        """Hold the post's lock; raises ``PostNotFoundError`` if it is gone."""
        lock = self._locks.get(post_id)
        if lock is None:
            raise PostNotFoundError

        async with lock:
            post = self._posts.get(post_id)
            if post is None:
                raise PostNotFoundError
            yield post

    def remove_post(self, post_id: UUID) -> list[UUID]:
        """Remove a post and its thread; the caller holds ``locked(post_id)``.

        Returns the ids of every removed comment.
        """
        self.get_post(post_id)
        thread = self._threads.pop(post_id, {})
        removed: list[UUID] = []
        for comment in thread.values():
            removed.append(comment.comment_id)
            removed.extend(reply.comment_id for reply in comment.replies)

        for comment_id in removed:
            self._comment_posts.pop(comment_id, None)
        del self._posts[post_id]
        del self._locks[post_id]
        return removed

    # ==========================================================================
    # Comments
    # ==========================================================================

    def _thread_for(self, post_id: UUID, parent_id: UUID | None) -> dict[UUID, Comment]:
        """Validate the target of a new comment and return the post's thread."""
        thread = self._threads.get(post_id)
        if thread is None:
            raise PostNotFoundError

        if parent_id is None or parent_id in thread:
            return thread

        if self._comment_posts.get(parent_id) == post_id:
            raise InvalidNestingError
        raise ParentNotFoundError

    async def _admit(
        self,
        post_id: UUID,
        text: str,
        author: str,
        parent_id: UUID | None,
    ) -> Comment | Rejected:
        self._thread_for(post_id, parent_id)

        verdict = await self._moderator.moderate(text)
        if isinstance(verdict, Rejected):
            logger.info(
                "comment_rejected", post_id=str(post_id), reason=verdict.reason
            )
            return verdict

        async with self.locked(post_id):
            thread = self._thread_for(post_id, parent_id)
            comment = create_comment(
                post_id=post_id, text=text, author=author, parent_id=parent_id
            )
            if parent_id is None:
                thread[comment.comment_id] = comment
            else:
                thread[parent_id].replies.append(comment)
            self._comment_posts[comment.comment_id] = post_id

            if self._on_comment_created is not None:
                self._on_comment_created(comment)

        logger.info(
            "comment_created",
            post_id=str(post_id),
            comment_id=str(comment.comment_id),
            is_reply=comment.is_reply,
        )
        return comment

    async def add_top_level_comment(
        self, post_id: UUID, text: str, author: str
    ) -> Comment | Rejected:
        """Add a top-level comment after moderation.

        Raises:
            PostNotFoundError: If the post does not exist.
        """
        return await self._admit(post_id, text, author, parent_id=None)

    async def add_reply(
        self, post_id: UUID, parent_id: UUID, text: str, author: str
    ) -> Comment | Rejected:
        """Add a reply to a top-level comment after moderation.

        Raises:
            PostNotFoundError: If the post does not exist.
            ParentNotFoundError: If ``parent_id`` is not a comment of the post.
            InvalidNestingError: If ``parent_id`` is itself a reply.
        """
        return await self._admit(post_id, text, author, parent_id=parent_id)

    def list_comments(self, post_id: UUID) -> list[Comment]:
        """Top-level comments in insertion order, each carrying its replies.

        Raises:
            PostNotFoundError: If the post does not exist.
        """
        thread = self._threads.get(post_id)
        if thread is None:
            raise PostNotFoundError
        return list(thread.values())

    def find_post_of_comment(self, comment_id: UUID) -> UUID | None:
        """Owning post of a comment or reply, if the comment exists."""
        return self._comment_posts.get(comment_id)
