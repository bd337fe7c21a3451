"""Tests for the submission pipeline.

Covers:
- moderation before classification
- classification fallback
- the meme command trapdoor
- cancellation while a gateway call is in flight
"""

import asyncio
from unittest.mock import AsyncMock

import pytest

from campus_feed.submissions.classification import ClassifierGateway
from campus_feed.submissions.commands import MAX_MEME_PROMPT_LENGTH
from campus_feed.submissions.models import (
    FALLBACK_DEPARTMENT,
    FALLBACK_TITLE,
    MEME_TITLE,
    Accepted,
    AnnouncementDraft,
    Classified,
    EventDraft,
    MemeDraft,
    Rejected,
)
from campus_feed.submissions.moderation import ModeratorGateway
from campus_feed.submissions.service import (
    ImageGenerationError,
    InvalidSubmissionError,
    SubmissionPipeline,
)


class TestSubmit:
    """Tests for SubmissionPipeline.submit."""

    @pytest.mark.asyncio
    async def test_accepted_text_is_classified(
        self, pipeline: SubmissionPipeline, mock_classifier: AsyncMock
    ):
        result = await pipeline.submit("Library open until midnight")

        assert isinstance(result, Classified)
        assert isinstance(result.draft, AnnouncementDraft)
        assert result.draft.department == "Library"
        mock_classifier.classify.assert_awaited_once_with(
            "Library open until midnight"
        )

    @pytest.mark.asyncio
    async def test_rejected_text_never_reaches_classifier(
        self,
        pipeline: SubmissionPipeline,
        mock_moderator: AsyncMock,
        mock_classifier: AsyncMock,
    ):
        mock_moderator.assess.return_value = {
            "isToxic": True,
            "reason": "Hate speech",
            "suggestedRewrite": "Let's keep it respectful",
        }

        result = await pipeline.submit("something hateful")

        assert result == Rejected(
            reason="Hate speech", suggested_rewrite="Let's keep it respectful"
        )
        assert mock_classifier.classify.call_count == 0

    @pytest.mark.asyncio
    async def test_classifier_fault_falls_back(
        self, pipeline: SubmissionPipeline, mock_classifier: AsyncMock
    ):
        mock_classifier.classify.side_effect = TimeoutError("slow backend")

        result = await pipeline.submit("random musings")

        assert isinstance(result, Classified)
        assert result.draft == AnnouncementDraft(
            title=FALLBACK_TITLE,
            description="random musings",
            department=FALLBACK_DEPARTMENT,
        )

    @pytest.mark.asyncio
    async def test_moderator_fault_fails_open(
        self,
        pipeline: SubmissionPipeline,
        mock_moderator: AsyncMock,
        mock_classifier: AsyncMock,
    ):
        mock_moderator.assess.side_effect = ConnectionError("down")

        result = await pipeline.submit("Chess club meets Friday")

        assert isinstance(result, Classified)
        mock_classifier.classify.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_blank_text_is_invalid(self, pipeline: SubmissionPipeline):
        with pytest.raises(InvalidSubmissionError):
            await pipeline.submit("   ")

    @pytest.mark.asyncio
    async def test_text_over_limit_is_invalid(
        self,
        mock_moderator: AsyncMock,
        mock_classifier: AsyncMock,
    ):
        pipeline = SubmissionPipeline(
            moderator=ModeratorGateway(mock_moderator),
            classifier=ClassifierGateway(mock_classifier),
            max_length=10,
        )

        with pytest.raises(InvalidSubmissionError):
            await pipeline.submit("x" * 11)
        mock_moderator.assess.assert_not_called()

    @pytest.mark.asyncio
    async def test_moderate_only(
        self, pipeline: SubmissionPipeline, mock_classifier: AsyncMock
    ):
        """Comment moderation skips classification entirely."""
        assert await pipeline.moderate("great talk!") == Accepted()
        mock_classifier.classify.assert_not_called()


class TestMemeCommand:
    """Tests for the meme trapdoor."""

    @pytest.mark.asyncio
    async def test_dispatch_routes_meme_prefix(
        self,
        pipeline: SubmissionPipeline,
        mock_moderator: AsyncMock,
        mock_classifier: AsyncMock,
        mock_image_generator: AsyncMock,
    ):
        """The meme command skips both moderation and classification."""
        result = await pipeline.dispatch("/meme cat studying for finals")

        assert isinstance(result, Classified)
        assert result.draft == MemeDraft(
            title=MEME_TITLE,
            description="cat studying for finals",
            image_url="https://images.example.com/meme.png",
        )
        mock_image_generator.generate.assert_awaited_once_with(
            "cat studying for finals"
        )
        mock_moderator.assess.assert_not_called()
        mock_classifier.classify.assert_not_called()

    @pytest.mark.asyncio
    async def test_dispatch_routes_plain_text(
        self, pipeline: SubmissionPipeline, mock_image_generator: AsyncMock
    ):
        result = await pipeline.dispatch("meme contest on Friday")

        assert isinstance(result, Classified)
        mock_image_generator.generate.assert_not_called()

    @pytest.mark.asyncio
    async def test_generator_failure_raises(
        self, pipeline: SubmissionPipeline, mock_image_generator: AsyncMock
    ):
        mock_image_generator.generate.side_effect = RuntimeError("quota")

        with pytest.raises(ImageGenerationError) as exc_info:
            await pipeline.submit_meme_command("dog in a lab coat")
        assert exc_info.value.code == "image_generation_failed"

    @pytest.mark.asyncio
    async def test_prompt_over_limit_raises(
        self, pipeline: SubmissionPipeline, mock_image_generator: AsyncMock
    ):
        prompt = "x" * (MAX_MEME_PROMPT_LENGTH + 1)

        with pytest.raises(InvalidSubmissionError):
            await pipeline.dispatch(f"/meme {prompt}")
        mock_image_generator.generate.assert_not_called()

    @pytest.mark.asyncio
    async def test_missing_generator_raises(
        self, mock_moderator: AsyncMock, mock_classifier: AsyncMock
    ):
        pipeline = SubmissionPipeline(
            moderator=ModeratorGateway(mock_moderator),
            classifier=ClassifierGateway(mock_classifier),
        )
        with pytest.raises(ImageGenerationError):
            await pipeline.submit_meme_command("anything")

    @pytest.mark.asyncio
    async def test_custom_prefix(
        self, mock_moderator: AsyncMock, mock_classifier: AsyncMock
    ):
        generator = AsyncMock()
        generator.generate.return_value = "https://img/x.png"
        pipeline = SubmissionPipeline(
            moderator=ModeratorGateway(mock_moderator),
            classifier=ClassifierGateway(mock_classifier),
            image_generator=generator,
            meme_prefix="!img ",
        )

        result = await pipeline.dispatch("!img robot")

        assert isinstance(result.draft, MemeDraft)
        generator.generate.assert_awaited_once_with("robot")


class TestCancellation:
    """Abandoned requests leave no trace."""

    @pytest.mark.asyncio
    async def test_cancel_during_moderation(
        self,
        pipeline: SubmissionPipeline,
        mock_moderator: AsyncMock,
        mock_classifier: AsyncMock,
    ):
        """The in-flight call finishes; its result is dropped."""
        started = asyncio.Event()
        release = asyncio.Event()
        finished = asyncio.Event()

        async def slow_assess(text: str):
            started.set()
            await release.wait()
            finished.set()
            return {"isToxic": False}

        mock_moderator.assess.side_effect = slow_assess

        task = asyncio.create_task(pipeline.submit("Workshop at 5pm"))
        await asyncio.wait_for(started.wait(), timeout=1)
        task.cancel()

        with pytest.raises(asyncio.CancelledError):
            await task

        release.set()
        await asyncio.wait_for(finished.wait(), timeout=1)
        await asyncio.sleep(0)

        mock_classifier.classify.assert_not_called()

    @pytest.mark.asyncio
    async def test_cancel_during_classification(
        self, pipeline: SubmissionPipeline, mock_classifier: AsyncMock
    ):
        started = asyncio.Event()
        release = asyncio.Event()

        async def slow_classify(text: str):
            started.set()
            await release.wait()
            return {"classification": "EVENT", "title": "Workshop"}

        mock_classifier.classify.side_effect = slow_classify

        task = asyncio.create_task(pipeline.submit("Workshop at 5pm"))
        await asyncio.wait_for(started.wait(), timeout=1)
        task.cancel()

        with pytest.raises(asyncio.CancelledError):
            await task

        release.set()
        await asyncio.sleep(0)
        mock_classifier.classify.assert_awaited_once()


class TestDraftTypes:
    """Classifier output maps onto the typed drafts."""

    @pytest.mark.asyncio
    async def test_event_fields(
        self, pipeline: SubmissionPipeline, mock_classifier: AsyncMock
    ):
        mock_classifier.classify.return_value = {
            "classification": "EVENT",
            "title": "Rust Workshop",
            "description": "Hands-on intro",
            "location": "Lab 2",
            "date": "2026-11-03",
            "time": "5pm",
        }

        result = await pipeline.submit("Workshop on Rust at 5pm in Lab 2")

        assert result.draft == EventDraft(
            title="Rust Workshop",
            description="Hands-on intro",
            location="Lab 2",
            date="2026-11-03",
            time="5pm",
        )
