"""Shared fixtures: fake model backends and an app wired to them."""

from collections.abc import Iterator
from unittest.mock import AsyncMock

import pytest
from fastapi.testclient import TestClient

from campus_feed.config import Settings
from campus_feed.feed.repository import FeedRepository
from campus_feed.main import create_app
from campus_feed.submissions.classification import ClassifierGateway
from campus_feed.submissions.moderation import ModeratorGateway
from campus_feed.submissions.service import SubmissionPipeline


@pytest.fixture
def settings() -> Settings:
    """Settings for tests (no request logging, no files)."""
    return Settings(
        environment="testing",
        log_requests=False,
        log_to_file=False,
        llm_api_key=None,
    )


@pytest.fixture
def mock_moderator() -> AsyncMock:
    """Moderator backend that accepts everything unless told otherwise."""
    moderator = AsyncMock()
    moderator.assess.return_value = {"isToxic": False}
    return moderator


@pytest.fixture
def mock_classifier() -> AsyncMock:
    """Classifier backend returning an announcement by default."""
    classifier = AsyncMock()
    classifier.classify.return_value = {
        "classification": "ANNOUNCEMENT",
        "title": "Library hours",
        "description": "The library is open until midnight this week.",
        "department": "Library",
    }
    return classifier


@pytest.fixture
def mock_image_generator() -> AsyncMock:
    """Image backend returning a fixed URL."""
    generator = AsyncMock()
    generator.generate.return_value = "https://images.example.com/meme.png"
    return generator


@pytest.fixture
def pipeline(
    mock_moderator: AsyncMock,
    mock_classifier: AsyncMock,
    mock_image_generator: AsyncMock,
) -> SubmissionPipeline:
    """Pipeline over the fake backends."""
    return SubmissionPipeline(
        moderator=ModeratorGateway(mock_moderator),
        classifier=ClassifierGateway(mock_classifier),
        image_generator=mock_image_generator,
    )


@pytest.fixture
def repository(pipeline: SubmissionPipeline) -> FeedRepository:
    """Empty feed whose comments are moderated by ``pipeline``."""
    return FeedRepository(pipeline)


@pytest.fixture
def client(
    settings: Settings,
    repository: FeedRepository,
    pipeline: SubmissionPipeline,
) -> Iterator[TestClient]:
    """Test client running the app lifespan with injected collaborators."""
    app = create_app(settings=settings, repository=repository, pipeline=pipeline)
    with TestClient(app) as test_client:
        yield test_client
