"""Tests for the reaction ledger.

Covers:
- first reaction, switch and un-react toggles
- one active reaction per actor per entity
- unknown kinds and unknown entities
- concurrent toggles on one entity
"""

import asyncio
from uuid import UUID, uuid4

import pytest

from campus_feed.feed.errors import InvalidReactionKindError, LedgerEntryNotFoundError
from campus_feed.feed.models import ReactionType
from campus_feed.feed.reactions import ReactionLedger, empty_counts, parse_reaction_kind


@pytest.fixture
def ledger() -> ReactionLedger:
    return ReactionLedger()


@pytest.fixture
def entity_id(ledger: ReactionLedger) -> UUID:
    """An entity with an open, empty entry."""
    entity = uuid4()
    ledger.open(entity)
    return entity


class TestParseReactionKind:
    """Tests for parse_reaction_kind."""

    def test_accepts_every_reaction_type(self):
        """Every enum value parses back to its member."""
        for kind in ReactionType:
            assert parse_reaction_kind(kind.value) is kind

    def test_rejects_unknown_kind(self):
        """Kinds outside the closed set raise InvalidReactionKind."""
        with pytest.raises(InvalidReactionKindError) as exc_info:
            parse_reaction_kind("wow")
        assert exc_info.value.code == "invalid_reaction_kind"

    def test_is_case_sensitive(self):
        """Kinds are lower-case wire values."""
        with pytest.raises(InvalidReactionKindError):
            parse_reaction_kind("LIKE")


class TestReactionLedger:
    """Tests for ReactionLedger.react."""

    @pytest.mark.asyncio
    async def test_new_entry_has_zero_counts(
        self, ledger: ReactionLedger, entity_id: UUID
    ):
        """A freshly opened entry reports every kind at zero."""
        assert ledger.counts(entity_id) == empty_counts()
        assert ledger.actor_choices(entity_id) == {}

    @pytest.mark.asyncio
    async def test_first_reaction_increments(
        self, ledger: ReactionLedger, entity_id: UUID
    ):
        """First reaction counts once and records the actor's choice."""
        counts = await ledger.react(entity_id, "userA", "like")

        assert counts["like"] == 1
        assert ledger.choice(entity_id, "userA") == "like"

    @pytest.mark.asyncio
    async def test_switch_moves_the_vote(self, ledger: ReactionLedger, entity_id: UUID):
        """like then love by the same actor leaves {like: 0, love: 1}."""
        await ledger.react(entity_id, "userA", "like")
        counts = await ledger.react(entity_id, "userA", "love")

        assert counts["like"] == 0
        assert counts["love"] == 1
        assert ledger.choice(entity_id, "userA") == "love"

    @pytest.mark.asyncio
    async def test_same_reaction_twice_restores_state(
        self, ledger: ReactionLedger, entity_id: UUID
    ):
        """Toggling the same kind twice is a no-op overall."""
        before = ledger.counts(entity_id)

        await ledger.react(entity_id, "userA", ReactionType.LAUGH)
        counts = await ledger.react(entity_id, "userA", ReactionType.LAUGH)

        assert counts == before
        assert ledger.choice(entity_id, "userA") is None

    @pytest.mark.asyncio
    async def test_actors_are_independent(
        self, ledger: ReactionLedger, entity_id: UUID
    ):
        """Each actor holds their own single choice."""
        await ledger.react(entity_id, "userA", "like")
        await ledger.react(entity_id, "userB", "like")
        counts = await ledger.react(entity_id, "userC", "sad")

        assert counts["like"] == 2
        assert counts["sad"] == 1
        assert sum(counts.values()) == len(ledger.actor_choices(entity_id))

    @pytest.mark.asyncio
    async def test_invalid_kind_changes_nothing(
        self, ledger: ReactionLedger, entity_id: UUID
    ):
        """An unknown kind raises before touching the entry."""
        await ledger.react(entity_id, "userA", "like")

        with pytest.raises(InvalidReactionKindError):
            await ledger.react(entity_id, "userA", "wow")

        assert ledger.counts(entity_id)["like"] == 1
        assert ledger.choice(entity_id, "userA") == "like"

    @pytest.mark.asyncio
    async def test_unknown_entity_raises(self, ledger: ReactionLedger):
        """Reacting to an entity without an entry fails."""
        with pytest.raises(LedgerEntryNotFoundError):
            await ledger.react(uuid4(), "userA", "like")

    @pytest.mark.asyncio
    async def test_dropped_entity_raises(
        self, ledger: ReactionLedger, entity_id: UUID
    ):
        """Dropping an entry removes it from the ledger."""
        ledger.drop(entity_id)

        assert entity_id not in ledger
        with pytest.raises(LedgerEntryNotFoundError):
            await ledger.react(entity_id, "userA", "like")

    @pytest.mark.asyncio
    async def test_open_is_idempotent(self, ledger: ReactionLedger, entity_id: UUID):
        """Re-opening an existing entry keeps its counts."""
        await ledger.react(entity_id, "userA", "like")
        ledger.open(entity_id)

        assert ledger.counts(entity_id)["like"] == 1
        assert len(ledger) == 1

    @pytest.mark.asyncio
    async def test_concurrent_toggles_keep_one_choice_per_actor(
        self, ledger: ReactionLedger, entity_id: UUID
    ):
        """Concurrent toggles never leave an actor with two reactions."""
        kinds = [kind.value for kind in ReactionType]
        await asyncio.gather(
            *(
                ledger.react(entity_id, f"user{i % 5}", kinds[i % len(kinds)])
                for i in range(60)
            )
        )

        counts = ledger.counts(entity_id)
        choices = ledger.actor_choices(entity_id)
        assert all(value >= 0 for value in counts.values())
        assert sum(counts.values()) == len(choices)
        for kind in kinds:
            assert counts[kind] == sum(1 for c in choices.values() if c == kind)
