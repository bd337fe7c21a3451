"""Feed repository.

Aggregate in-memory store composing the thread store and the reaction
ledger. One instance is constructed at application start and injected into
the request handlers; nothing here is a module-level singleton.
"""

from typing import Any
from uuid import UUID

import structlog

from campus_feed.submissions.models import Draft, Rejected

from .errors import (
    CommentNotFoundError,
    InvalidPostFieldsError,
    LedgerEntryNotFoundError,
    PostNotFoundError,
)
from .models import (
    REQUIRED_FIELDS,
    Comment,
    Post,
    ReactionType,
    create_post,
    merge_fields,
)
from .reactions import ReactionLedger, parse_reaction_kind
from .threads import CommentModerator, ThreadStore


logger = structlog.get_logger(__name__)


class FeedRepository:
    """CRUD surface over posts, comment threads and reactions."""

    def __init__(self, moderator: CommentModerator):
        self._ledger = ReactionLedger()
        self._threads = ThreadStore(
            moderator,
            on_comment_created=lambda comment: self._ledger.open(comment.comment_id),
        )

    @property
    def ledger(self) -> ReactionLedger:
        return self._ledger

    # ==========================================================================
    # Posts
    # ==========================================================================

    def create_post(self, draft: Draft, original_text: str) -> Post:
        """Store a confirmed draft as a new post."""
        post = create_post(draft, original_text)
        self._threads.add_post(post)
        self._ledger.open(post.post_id)

        logger.info(
            "post_created",
            post_id=str(post.post_id),
            category=post.category,
            recognized=post.recognized,
        )
        return post

    def get_post(self, post_id: UUID) -> Post:
        """Return a post.

        Raises:
            PostNotFoundError: If the post does not exist.
        """
        return self._threads.get_post(post_id)

    def list_posts(self) -> list[Post]:
        """All posts, newest first."""
        return self._threads.list_posts()

    async def update_post_fields(
        self, post_id: UUID, partial_fields: dict[str, Any]
    ) -> Post:
        """Merge-patch a post's fields; ``None`` values remove keys.

        Raises:
            PostNotFoundError: If the post does not exist.
            InvalidPostFieldsError: If the patch removes a required field.
        """
        async with self._threads.locked(post_id) as post:
            merged = merge_fields(post.fields, partial_fields)
            missing = [key for key in REQUIRED_FIELDS if key not in merged]
            if missing:
                msg = f"Fields cannot be removed: {', '.join(missing)}"
                raise InvalidPostFieldsError(msg)
            post.fields = merged

        logger.info(
            "post_updated", post_id=str(post_id), keys=sorted(partial_fields)
        )
        return post

    async def delete_post(self, post_id: UUID) -> None:
        """Delete a post, its whole comment thread and every ledger entry.

        Runs as one step under the post's lock.

        Raises:
            PostNotFoundError: If the post does not exist.
        """
        async with self._threads.locked(post_id):
            removed = self._threads.remove_post(post_id)
            self._ledger.drop(post_id)
            for comment_id in removed:
                self._ledger.drop(comment_id)

        logger.info(
            "post_deleted", post_id=str(post_id), removed_comments=len(removed)
        )

    # ==========================================================================
    # Comments
    # ==========================================================================

    async def add_comment(
        self,
        post_id: UUID,
        text: str,
        author: str,
        parent_id: UUID | None = None,
    ) -> Comment | Rejected:
        """Add a moderated comment, or a reply when ``parent_id`` is given."""
        if parent_id is None:
            return await self._threads.add_top_level_comment(post_id, text, author)
        return await self._threads.add_reply(post_id, parent_id, text, author)

    def list_comments(self, post_id: UUID) -> list[Comment]:
        """Ordered comment forest of a post.

        Raises:
            PostNotFoundError: If the post does not exist.
        """
        return self._threads.list_comments(post_id)

    # ==========================================================================
    # Reactions
    # ==========================================================================

    def _is_post(self, target_id: UUID, post_id: UUID | None) -> bool:
        """Resolve whether ``target_id`` names a post (True) or a comment."""
        if post_id is not None and post_id == target_id:
            # addressed as a post; a comment id here is not a post either
            if not self._threads.has_post(target_id):
                raise PostNotFoundError
            return True

        if self._threads.has_post(target_id):
            if post_id is not None and post_id != target_id:
                raise LedgerEntryNotFoundError
            return True

        owner = self._threads.find_post_of_comment(target_id)
        if owner is None:
            raise LedgerEntryNotFoundError
        if post_id is not None and owner != post_id:
            raise CommentNotFoundError("Comment not found on this post")
        return False

    async def react(
        self,
        target_id: UUID,
        actor_id: str,
        kind: str | ReactionType,
        post_id: UUID | None = None,
    ) -> dict[str, int]:
        """Toggle a reaction on a post or a comment.

        ``target_id`` may address either; ``post_id`` (optional) pins a
        comment to its post. ``post_id == target_id`` addresses a post.

        Raises:
            InvalidReactionKindError: Unknown kind; nothing changes.
            LedgerEntryNotFoundError: ``target_id`` is neither a post nor a
                comment (or does not belong to ``post_id``).
            CommentNotFoundError: The comment is not on ``post_id``.
            PostNotFoundError: The addressed post does not exist, or was
                deleted while waiting its turn.
        """
        parse_reaction_kind(kind)
        is_post = self._is_post(target_id, post_id)

        try:
            return await self._ledger.react(target_id, actor_id, kind)
        except LedgerEntryNotFoundError as e:
            # deleted while waiting for the entry's lock
            if is_post:
                raise PostNotFoundError from e
            raise CommentNotFoundError from e

    def counts(self, entity_id: UUID) -> dict[str, int]:
        """Reaction counts of a post or comment."""
        return self._ledger.counts(entity_id)
