"""Domain errors raised by the feed store."""


class FeedError(Exception):
    """Base feed error."""

    def __init__(self, message: str, code: str = "feed_error"):
        self.message = message
        self.code = code
        super().__init__(message)


class PostNotFoundError(FeedError):
    """Post does not exist."""

    def __init__(self, message: str = "Post not found"):
        super().__init__(message, "post_not_found")


class CommentNotFoundError(FeedError):
    """Comment does not exist."""

    def __init__(self, message: str = "Comment not found"):
        super().__init__(message, "comment_not_found")


class ParentNotFoundError(FeedError):
    """Reply parent is not a comment of the addressed post."""

    def __init__(self, message: str = "Parent comment not found on this post"):
        super().__init__(message, "parent_not_found")


class InvalidNestingError(FeedError):
    """Attempt to reply to a reply."""

    def __init__(self, message: str = "Replies cannot have replies"):
        super().__init__(message, "invalid_nesting")


class InvalidReactionKindError(FeedError):
    """Reaction kind outside the supported set."""

    def __init__(self, message: str = "Unsupported reaction kind"):
        super().__init__(message, "invalid_reaction_kind")


class InvalidPostFieldsError(FeedError):
    """Field patch would break the post's required fields."""

    def __init__(self, message: str = "Invalid post fields"):
        super().__init__(message, "invalid_post_fields")


class LedgerEntryNotFoundError(FeedError):
    """No reaction ledger entry for the entity."""

    def __init__(self, message: str = "Reaction target not found"):
        super().__init__(message, "reaction_target_not_found")
