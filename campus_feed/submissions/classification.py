"""Classifier gateway.

Turns accepted text into a typed ``Draft``. Failure policy is FAIL CLOSED TO A
DEFAULT: any classifier error or unparseable reply yields the fallback
announcement (``title="General Post"``, ``department="General"``), so every
accepted submission always produces a valid draft.
"""

from typing import Any, Protocol

import structlog

from .client import LLMClient
from .models import Draft, UnrecognizedDraft, fallback_draft, parse_classifier_output
from .prompts import CLASSIFICATION_PROMPT


logger = structlog.get_logger(__name__)


class Classifier(Protocol):
    """External text classifier returning a JSON object."""

    async def classify(self, text: str) -> dict[str, Any]: ...


class LLMClassifier:
    """Classifier backed by a chat-completions model."""

    def __init__(self, client: LLMClient, model: str, temperature: float = 0.3):
        self._client = client
        self._model = model
        self._temperature = temperature

    async def classify(self, text: str) -> dict[str, Any]:
        return await self._client.complete_json(
            model=self._model,
            system_prompt=CLASSIFICATION_PROMPT,
            text=text,
            temperature=self._temperature,
        )


class ClassifierGateway:
    """Gateway that always yields a draft."""

    def __init__(self, classifier: Classifier):
        self._classifier = classifier

    async def classify(self, text: str) -> Draft:
        """Classify ``text``; never raises."""
        try:
            payload = await self._classifier.classify(text)
            draft = parse_classifier_output(payload, text)
        except Exception as e:
            logger.warning(
                "classification_fallback",
                error=str(e),
                error_type=type(e).__name__,
            )
            return fallback_draft(text)

        if isinstance(draft, UnrecognizedDraft):
            logger.info("classification_unrecognized_label", label=draft.label)
        else:
            logger.debug("classification_succeeded", category=draft.category)
        return draft
