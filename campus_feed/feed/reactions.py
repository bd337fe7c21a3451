"""Reaction ledger shared by posts and comments.

Each entity (post or comment id) owns one entry: counts per reaction kind and
the single active kind of every actor. ``react`` is a read-modify-write
toggle, serialized per entity by that entry's own lock; entries for
different entities never contend.
"""

import asyncio
from dataclasses import dataclass, field
from uuid import UUID

import structlog

from .errors import InvalidReactionKindError, LedgerEntryNotFoundError
from .models import ReactionType


logger = structlog.get_logger(__name__)


def empty_counts() -> dict[str, int]:
    """Zeroed counts for every reaction kind."""
    return {kind.value: 0 for kind in ReactionType}


def parse_reaction_kind(kind: str | ReactionType) -> ReactionType:
    """Validate a reaction kind.

    Raises:
        InvalidReactionKindError: If ``kind`` is not a ``ReactionType`` value.
    """
    if isinstance(kind, ReactionType):
        return kind
    try:
        return ReactionType(kind)
    except ValueError as e:
        allowed = ", ".join(k.value for k in ReactionType)
        msg = f"Unsupported reaction kind {kind!r}; expected one of: {allowed}"
        raise InvalidReactionKindError(msg) from e


@dataclass
class LedgerEntry:
    """Counters plus actor choices for one entity."""

    counts: dict[str, int] = field(default_factory=empty_counts)
    actor_choice: dict[str, str] = field(default_factory=dict)
    lock: asyncio.Lock = field(default_factory=asyncio.Lock, repr=False)

    def toggle(self, actor_id: str, kind: ReactionType) -> None:
        """Apply one reaction by ``actor_id``; the caller holds ``lock``."""
        previous = self.actor_choice.get(actor_id)

        if previous == kind.value:
            # un-react
            self.counts[kind.value] = max(0, self.counts[kind.value] - 1)
            del self.actor_choice[actor_id]
            return

        if previous is not None:
            # switch
            self.counts[previous] = max(0, self.counts[previous] - 1)

        self.counts[kind.value] += 1
        self.actor_choice[actor_id] = kind.value


class ReactionLedger:
    """Per-entity reaction entries keyed by post or comment id."""

    def __init__(self) -> None:
        self._entries: dict[UUID, LedgerEntry] = {}

    def __contains__(self, entity_id: object) -> bool:
        return entity_id in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def open(self, entity_id: UUID) -> None:
        """Create an empty entry for a new entity (no-op if it exists)."""
        self._entries.setdefault(entity_id, LedgerEntry())

    def drop(self, entity_id: UUID) -> None:
        """Remove the entry of a deleted entity."""
        self._entries.pop(entity_id, None)

    def _entry(self, entity_id: UUID) -> LedgerEntry:
        entry = self._entries.get(entity_id)
        if entry is None:
            raise LedgerEntryNotFoundError
        return entry

    def counts(self, entity_id: UUID) -> dict[str, int]:
        """Snapshot of the counts for ``entity_id``."""
        return dict(self._entry(entity_id).counts)

    def choice(self, entity_id: UUID, actor_id: str) -> str | None:
        """Active reaction kind of ``actor_id`` on ``entity_id``, if any."""
        return self._entry(entity_id).actor_choice.get(actor_id)

    def actor_choices(self, entity_id: UUID) -> dict[str, str]:
        """Snapshot of every actor's active reaction on ``entity_id``."""
        return dict(self._entry(entity_id).actor_choice)

    async def react(
        self,
        entity_id: UUID,
        actor_id: str,
        kind: str | ReactionType,
    ) -> dict[str, int]:
        """Toggle ``kind`` for ``actor_id`` on ``entity_id``.

        Returns the counts after the mutation.

        Raises:
            InvalidReactionKindError: Unknown kind; nothing changes.
            LedgerEntryNotFoundError: No entry for ``entity_id``.
        """
        reaction = parse_reaction_kind(kind)
        entry = self._entry(entity_id)

        async with entry.lock:
            # the entity may have been dropped while waiting for the lock
            if self._entries.get(entity_id) is not entry:
                raise LedgerEntryNotFoundError

            entry.toggle(actor_id, reaction)
            snapshot = dict(entry.counts)

        logger.debug(
            "reaction_toggled",
            entity_id=str(entity_id),
            actor_id=actor_id,
            reaction=reaction.value,
        )
        return snapshot
