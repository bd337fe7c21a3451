"""Pydantic schemas for the feed endpoints.

Request/response models for:
- Post confirmation, listing, merge-patch and deletion
- Reactions on posts and comments
- Comment threads
"""

from datetime import datetime
from typing import Any, Literal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .models import REQUIRED_FIELDS, Comment, Post


MAX_COMMENT_LENGTH = 2000
DEFAULT_ACTOR = "anonymous"
DEFAULT_AUTHOR = "Anonymous"


# ==============================================================================
# Request Schemas
# ==============================================================================


class CreatePostRequest(BaseModel):
    """Confirmation of a draft returned by /classify (possibly edited)."""

    model_config = ConfigDict(populate_by_name=True)

    category: str = Field(..., min_length=1, max_length=64)
    post_fields: dict[str, Any] = Field(..., alias="fields")
    original_text: str = Field(
        ..., alias="originalText", min_length=1, max_length=10000
    )

    @field_validator("category")
    @classmethod
    def validate_category(cls, v: str) -> str:
        """Strip whitespace and validate category label."""
        v = v.strip()
        if not v:
            msg = "Category cannot be empty"
            raise ValueError(msg)
        return v

    @field_validator("post_fields")
    @classmethod
    def validate_fields(cls, v: dict[str, Any]) -> dict[str, Any]:
        """Require a non-empty title and a description."""
        title = v.get("title")
        if not isinstance(title, str) or not title.strip():
            msg = "fields.title is required"
            raise ValueError(msg)
        if not isinstance(v.get("description"), str):
            msg = "fields.description is required"
            raise ValueError(msg)
        return v


class UpdatePostRequest(BaseModel):
    """Merge-patch of a post's fields; ``null`` removes a key."""

    model_config = ConfigDict(populate_by_name=True)

    post_fields: dict[str, Any] = Field(..., alias="fields")

    @field_validator("post_fields")
    @classmethod
    def validate_fields(cls, v: dict[str, Any]) -> dict[str, Any]:
        """Keep required keys as strings when they are being changed."""
        for key in REQUIRED_FIELDS:
            if key in v and v[key] is not None and not isinstance(v[key], str):
                msg = f"fields.{key} must be a string"
                raise ValueError(msg)
        title = v.get("title")
        if title is not None and not title.strip():
            msg = "fields.title cannot be empty"
            raise ValueError(msg)
        return v


class ReactRequest(BaseModel):
    """Reaction toggle on a post."""

    model_config = ConfigDict(populate_by_name=True)

    # validated against ReactionType by the ledger so unknown kinds map to
    # invalid_reaction_kind rather than a schema error
    reaction: str = Field(..., min_length=1, max_length=32)
    user_id: str = Field(
        default=DEFAULT_ACTOR, alias="userId", min_length=1, max_length=128
    )


class CommentReactRequest(ReactRequest):
    """Reaction toggle on a comment or reply."""

    post_id: UUID | None = Field(default=None, alias="postId")


class CreateCommentRequest(BaseModel):
    """New comment, or reply when ``parentId`` is set."""

    model_config = ConfigDict(populate_by_name=True)

    text: str = Field(..., min_length=1, max_length=MAX_COMMENT_LENGTH)
    author: str = Field(default=DEFAULT_AUTHOR, min_length=1, max_length=100)
    parent_id: UUID | None = Field(default=None, alias="parentId")

    @field_validator("text", "author")
    @classmethod
    def validate_not_blank(cls, v: str) -> str:
        """Strip whitespace and validate content."""
        v = v.strip()
        if not v:
            msg = "Value cannot be empty"
            raise ValueError(msg)
        return v


# ==============================================================================
# Response Schemas
# ==============================================================================


class PostResponse(BaseModel):
    """Serialized post."""

    model_config = ConfigDict(populate_by_name=True)

    id: UUID
    category: str
    recognized: bool
    post_fields: dict[str, Any] = Field(alias="fields")
    original_text: str = Field(alias="originalText")
    created_at: datetime = Field(alias="createdAt")
    reactions: dict[str, int]

    @classmethod
    def from_post(cls, post: Post, reactions: dict[str, int]) -> "PostResponse":
        return cls(
            id=post.post_id,
            category=post.category,
            recognized=post.recognized,
            post_fields=dict(post.fields),
            original_text=post.original_text,
            created_at=post.created_at,
            reactions=reactions,
        )


class CommentResponse(BaseModel):
    """Serialized comment with its replies."""

    model_config = ConfigDict(populate_by_name=True)

    id: UUID
    post_id: UUID = Field(alias="postId")
    parent_id: UUID | None = Field(default=None, alias="parentId")
    text: str
    author: str
    created_at: datetime = Field(alias="createdAt")
    reactions: dict[str, int]
    replies: list["CommentResponse"] = Field(default_factory=list)

    @classmethod
    def from_comment(
        cls,
        comment: Comment,
        reactions: dict[str, int],
        replies: list["CommentResponse"],
    ) -> "CommentResponse":
        return cls(
            id=comment.comment_id,
            post_id=comment.post_id,
            parent_id=comment.parent_id,
            text=comment.text,
            author=comment.author,
            created_at=comment.created_at,
            reactions=reactions,
            replies=replies,
        )


CommentResponse.model_rebuild()


class PostEnvelope(BaseModel):
    success: Literal[True] = True
    post: PostResponse


class PostListEnvelope(BaseModel):
    success: Literal[True] = True
    posts: list[PostResponse]


class ReactionsEnvelope(BaseModel):
    success: Literal[True] = True
    reactions: dict[str, int]


class CommentEnvelope(BaseModel):
    success: Literal[True] = True
    comment: CommentResponse


class CommentListEnvelope(BaseModel):
    success: Literal[True] = True
    comments: list[CommentResponse]


class MessageResponse(BaseModel):
    """Simple acknowledgement."""

    success: bool = True
    message: str
