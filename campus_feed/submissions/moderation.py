"""Moderator gateway.

Wraps the external toxicity model and turns its reply into a ``Verdict``.

Failure policy is FAIL OPEN: if the moderator is unreachable or replies with
something unparseable, the text is accepted. A moderation outage must not
block all content creation. Every such acceptance is logged as
``moderation_failed_open`` so the trade-off stays visible in operations.
Classification fails the other way (see ``classification.py``); the
asymmetry is intentional and pending product review.
"""

from typing import Any, Protocol

import structlog

from .client import GatewayUnavailableError, LLMClient
from .models import DEFAULT_REJECTION_REASON, Accepted, Rejected, Verdict
from .prompts import MODERATION_PROMPT


logger = structlog.get_logger(__name__)


class Moderator(Protocol):
    """External toxicity detector.

    Returns the raw assessment: ``{"isToxic": bool, "reason": str | None,
    "suggestedRewrite": str | None}``.
    """

    async def assess(self, text: str) -> dict[str, Any]: ...


class LLMModerator:
    """Moderator backed by a chat-completions model."""

    def __init__(self, client: LLMClient, model: str, temperature: float = 0.1):
        self._client = client
        self._model = model
        self._temperature = temperature

    async def assess(self, text: str) -> dict[str, Any]:
        return await self._client.complete_json(
            model=self._model,
            system_prompt=MODERATION_PROMPT,
            text=text,
            temperature=self._temperature,
        )


def parse_assessment(payload: Any) -> Verdict:
    """Interpret a moderator reply.

    Raises:
        GatewayUnavailableError: If ``isToxic`` is missing or not a boolean.
    """
    if not isinstance(payload, dict) or not isinstance(payload.get("isToxic"), bool):
        msg = "Moderator reply has no boolean isToxic"
        raise GatewayUnavailableError(msg, code="moderation_unparseable")

    if not payload["isToxic"]:
        return Accepted()

    reason = payload.get("reason")
    if not isinstance(reason, str) or not reason.strip():
        reason = DEFAULT_REJECTION_REASON

    rewrite = payload.get("suggestedRewrite")
    if not isinstance(rewrite, str) or not rewrite.strip():
        rewrite = None

    return Rejected(reason=reason.strip(), suggested_rewrite=rewrite)


class ModeratorGateway:
    """Accept/reject gateway in front of a ``Moderator``."""

    def __init__(self, moderator: Moderator):
        self._moderator = moderator

    async def check(self, text: str) -> Verdict:
        """Return the moderation verdict for ``text``; never raises."""
        try:
            payload = await self._moderator.assess(text)
            verdict = parse_assessment(payload)
        except Exception as e:
            logger.warning(
                "moderation_failed_open",
                error=str(e),
                error_type=type(e).__name__,
                text_length=len(text),
            )
            return Accepted()

        if isinstance(verdict, Rejected):
            logger.info("moderation_rejected", reason=verdict.reason)
        return verdict
