"""Domain types for the submission pipeline.

- Drafts: a tagged union over the four post categories plus an
  ``UnrecognizedDraft`` for labels outside the closed set
- Verdicts: ``Accepted`` / ``Rejected`` from the moderation stage
- Pipeline results: ``Rejected`` / ``Classified``

Post ``fields`` travel as camelCase keys (``lastLocation``, ``imageUrl``)
because that is the shape clients read and edit.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class PostCategory(str, Enum):
    """Closed set of post categories."""

    EVENT = "EVENT"
    LOST_AND_FOUND = "LOST_AND_FOUND"
    ANNOUNCEMENT = "ANNOUNCEMENT"
    MEME = "MEME"


FALLBACK_TITLE = "General Post"
FALLBACK_DEPARTMENT = "General"
MEME_TITLE = "Generated Meme"

DEFAULT_REJECTION_REASON = "This content was flagged as inappropriate."


class DraftParseError(ValueError):
    """Raised when classifier output cannot be turned into a draft."""


def _text(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


# ==============================================================================
# Drafts
# ==============================================================================


@dataclass(frozen=True)
class EventDraft:
    """Workshops, seminars, competitions, meetings, parties."""

    title: str
    description: str
    location: str | None = None
    date: str | None = None
    time: str | None = None

    category = PostCategory.EVENT.value

    def to_fields(self) -> dict[str, Any]:
        return {
            "title": self.title,
            "description": self.description,
            "location": self.location,
            "date": self.date,
            "time": self.time,
        }


@dataclass(frozen=True)
class LostAndFoundDraft:
    """Lost or found items."""

    title: str
    description: str
    item: str | None = None
    last_location: str | None = None
    contact_info: str | None = None

    category = PostCategory.LOST_AND_FOUND.value

    def to_fields(self) -> dict[str, Any]:
        return {
            "title": self.title,
            "description": self.description,
            "item": self.item,
            "lastLocation": self.last_location,
            "contactInfo": self.contact_info,
        }


@dataclass(frozen=True)
class AnnouncementDraft:
    """General announcements, notices, department updates."""

    title: str
    description: str
    department: str | None = None

    category = PostCategory.ANNOUNCEMENT.value

    def to_fields(self) -> dict[str, Any]:
        return {
            "title": self.title,
            "description": self.description,
            "department": self.department,
        }


@dataclass(frozen=True)
class MemeDraft:
    """Generated meme image."""

    title: str
    description: str
    image_url: str | None = None

    category = PostCategory.MEME.value

    def to_fields(self) -> dict[str, Any]:
        return {
            "title": self.title,
            "description": self.description,
            "imageUrl": self.image_url,
        }


@dataclass(frozen=True)
class UnrecognizedDraft:
    """Draft whose label is outside ``PostCategory``; rendered as generic."""

    label: str
    title: str
    description: str
    extra: dict[str, Any] = field(default_factory=dict)

    @property
    def category(self) -> str:
        return self.label

    def to_fields(self) -> dict[str, Any]:
        return {"title": self.title, "description": self.description, **self.extra}


Draft = (
    EventDraft | LostAndFoundDraft | AnnouncementDraft | MemeDraft | UnrecognizedDraft
)


def fallback_draft(text: str) -> AnnouncementDraft:
    """Default classification used whenever the classifier cannot be trusted."""
    return AnnouncementDraft(
        title=FALLBACK_TITLE,
        description=text,
        department=FALLBACK_DEPARTMENT,
    )


def is_recognized_category(label: str) -> bool:
    """Check whether a category label belongs to the closed set."""
    return label in PostCategory._value2member_map_


def build_draft(
    category: str, fields: dict[str, Any], default_description: str = ""
) -> Draft:
    """Build a typed draft from a category label and camelCase fields.

    Used both for classifier output and for drafts confirmed by a client.
    Unknown labels become ``UnrecognizedDraft``; missing titles fall back to
    ``FALLBACK_TITLE`` and missing descriptions to ``default_description``.

    Raises:
        DraftParseError: If ``category`` is empty.
    """
    label = _text(category)
    if label is None:
        msg = "Draft has no category label"
        raise DraftParseError(msg)

    normalized = label.upper().replace(" ", "_").replace("-", "_")
    title = _text(fields.get("title")) or FALLBACK_TITLE
    description = _text(fields.get("description")) or default_description

    if normalized == PostCategory.EVENT.value:
        return EventDraft(
            title=title,
            description=description,
            location=_text(fields.get("location")),
            date=_text(fields.get("date")),
            time=_text(fields.get("time")),
        )
    if normalized == PostCategory.LOST_AND_FOUND.value:
        return LostAndFoundDraft(
            title=_text(fields.get("title")) or _text(fields.get("item")) or title,
            description=description,
            item=_text(fields.get("item")),
            last_location=_text(fields.get("lastLocation")),
            contact_info=_text(fields.get("contactInfo")),
        )
    if normalized == PostCategory.ANNOUNCEMENT.value:
        return AnnouncementDraft(
            title=title,
            description=description,
            department=_text(fields.get("department")),
        )
    if normalized == PostCategory.MEME.value:
        return MemeDraft(
            title=_text(fields.get("title")) or MEME_TITLE,
            description=description,
            image_url=_text(fields.get("imageUrl")),
        )

    extra = {
        key: value
        for key, value in fields.items()
        if key not in {"title", "description"} and value is not None
    }
    return UnrecognizedDraft(
        label=label, title=title, description=description, extra=extra
    )


def parse_classifier_output(payload: Any, text: str) -> Draft:
    """Turn the classifier's JSON object into a draft.

    Accepts the label under ``classification``, ``type`` or ``category``
    and the attributes either flat or nested under ``fields``.

    Raises:
        DraftParseError: If the payload is not an object or has no label.
    """
    if not isinstance(payload, dict):
        msg = f"Classifier returned {type(payload).__name__}, expected object"
        raise DraftParseError(msg)

    label = (
        payload.get("classification") or payload.get("type") or payload.get("category")
    )
    if not isinstance(label, str):
        msg = "Classifier output has no category label"
        raise DraftParseError(msg)

    nested = payload.get("fields")
    fields = dict(nested) if isinstance(nested, dict) else {}
    for key, value in payload.items():
        if key not in {"classification", "type", "category", "fields"}:
            fields.setdefault(key, value)

    return build_draft(label, fields, default_description=text)


# ==============================================================================
# Verdicts and pipeline results
# ==============================================================================


@dataclass(frozen=True)
class Accepted:
    """Moderation let the text through."""


@dataclass(frozen=True)
class Rejected:
    """Moderation veto with a human-readable reason."""

    reason: str
    suggested_rewrite: str | None = None


@dataclass(frozen=True)
class Classified:
    """Accepted text turned into a draft awaiting confirmation."""

    draft: Draft


Verdict = Accepted | Rejected
PipelineResult = Rejected | Classified
