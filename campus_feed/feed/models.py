"""In-memory entities for the feed.

- Post: confirmed draft with merge-patchable ``fields``
- Comment: top-level comment or reply (one nesting level)
- ReactionType: closed set of reaction kinds shared by posts and comments
"""

from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import Any
from uuid import UUID, uuid4

from campus_feed.submissions.models import Draft, is_recognized_category


class ReactionType(str, Enum):
    """Available reaction kinds for posts and comments."""

    LIKE = "like"
    LOVE = "love"
    LAUGH = "laugh"
    SURPRISE = "surprise"
    SAD = "sad"
    ANGRY = "angry"


# Keys every post's fields must keep
REQUIRED_FIELDS = ("title", "description")


@dataclass
class Post:
    """A confirmed post."""

    post_id: UUID
    category: str
    fields: dict[str, Any]
    original_text: str
    created_at: datetime

    @property
    def recognized(self) -> bool:
        """False when the category is outside the closed set (render as generic)."""
        return is_recognized_category(self.category)

    @property
    def title(self) -> str:
        return str(self.fields.get("title", ""))


@dataclass
class Comment:
    """Comment on a post; ``parent_id`` is set for replies."""

    comment_id: UUID
    post_id: UUID
    parent_id: UUID | None
    text: str
    author: str
    created_at: datetime
    replies: list["Comment"] = field(default_factory=list)

    @property
    def is_reply(self) -> bool:
        return self.parent_id is not None


# ==============================================================================
# Factory Functions
# ==============================================================================


def create_post(draft: Draft, original_text: str) -> Post:
    """Create a new post from a confirmed draft."""
    return Post(
        post_id=uuid4(),
        category=draft.category,
        fields=draft.to_fields(),
        original_text=original_text,
        created_at=datetime.now(UTC),
    )


def create_comment(
    post_id: UUID,
    text: str,
    author: str,
    parent_id: UUID | None = None,
) -> Comment:
    """Create a new comment with default values."""
    return Comment(
        comment_id=uuid4(),
        post_id=post_id,
        parent_id=parent_id,
        text=text,
        author=author,
        created_at=datetime.now(UTC),
    )


def merge_fields(current: dict[str, Any], patch: dict[str, Any]) -> dict[str, Any]:
    """Merge-patch ``patch`` into ``current`` (JSON merge-patch, one level).

    A ``None`` value removes the key. Returns a new dictionary.
    """
    merged = dict(current)
    for key, value in patch.items():
        if value is None:
            merged.pop(key, None)
        else:
            merged[key] = value
    return merged
