"""Campus feed module.

Provides the in-memory feed with:
- Posts created from confirmed drafts (merge-patchable fields)
- Comment threads with one reply level, moderated before admission
- Toggle reactions (like, love, etc.) on posts and comments

Note: Router is not exported here to avoid circular imports.
Import directly from campus_feed.feed.router when needed.
"""

from .errors import (
    CommentNotFoundError,
    FeedError,
    InvalidNestingError,
    InvalidPostFieldsError,
    InvalidReactionKindError,
    LedgerEntryNotFoundError,
    ParentNotFoundError,
    PostNotFoundError,
)
from .models import Comment, Post, ReactionType
from .reactions import ReactionLedger
from .repository import FeedRepository
from .threads import ThreadStore


__all__ = [
    "Comment",
    "CommentNotFoundError",
    "FeedError",
    "FeedRepository",
    "InvalidNestingError",
    "InvalidPostFieldsError",
    "InvalidReactionKindError",
    "LedgerEntryNotFoundError",
    "ParentNotFoundError",
    "Post",
    "PostNotFoundError",
    "ReactionLedger",
    "ReactionType",
    "ThreadStore",
]
