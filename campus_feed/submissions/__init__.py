"""Submission pipeline module.

Provides:
- Moderator and classifier gateways over external models
- Moderation-then-classification pipeline producing typed drafts
- The ``/meme`` command trapdoor

Note: Router is not exported here to avoid circular imports.
Import directly from campus_feed.submissions.router when needed.
"""

from .classification import ClassifierGateway, LLMClassifier
from .client import GatewayUnavailableError, LLMClient
from .images import LLMImageGenerator
from .models import (
    Accepted,
    AnnouncementDraft,
    Classified,
    Draft,
    EventDraft,
    LostAndFoundDraft,
    MemeDraft,
    PostCategory,
    Rejected,
    UnrecognizedDraft,
)
from .moderation import LLMModerator, ModeratorGateway
from .service import SubmissionPipeline


__all__ = [
    "Accepted",
    "AnnouncementDraft",
    "Classified",
    "ClassifierGateway",
    "Draft",
    "EventDraft",
    "GatewayUnavailableError",
    "LLMClassifier",
    "LLMClient",
    "LLMImageGenerator",
    "LLMModerator",
    "LostAndFoundDraft",
    "MemeDraft",
    "ModeratorGateway",
    "PostCategory",
    "Rejected",
    "SubmissionPipeline",
    "UnrecognizedDraft",
]
