"""HTTP client for an OpenAI-compatible LLM backend.

Only two calls are needed:
- chat completions constrained to a JSON object (moderation, classification)
- image generation (meme trapdoor)

Every failure mode (transport error, timeout, non-200 status, unparseable
body) is raised as ``GatewayUnavailableError`` so the gateways can apply
their own recovery policy.
"""

import json
from typing import Any

import httpx
import structlog


logger = structlog.get_logger(__name__)


class GatewayUnavailableError(Exception):
    """External collaborator failed or returned unusable output."""

    def __init__(self, message: str, code: str = "gateway_unavailable"):
        self.message = message
        self.code = code
        super().__init__(message)


class LLMClient:
    """Thin async wrapper around the chat-completions and images endpoints."""

    def __init__(
        self,
        base_url: str,
        api_key: str | None,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        headers = {"Accept": "application/json"}
        if api_key:
            headers["Authorization"] = f"Bearer {api_key}"
        self._client = httpx.AsyncClient(
            base_url=base_url.rstrip("/"),
            headers=headers,
            timeout=timeout,
            transport=transport,
        )

    async def aclose(self) -> None:
        """Close the underlying connection pool."""
        await self._client.aclose()

    async def _post(self, path: str, payload: dict[str, Any]) -> dict[str, Any]:
        try:
            response = await self._client.post(path, json=payload)
        except httpx.TimeoutException as e:
            logger.error("llm_request_timeout", path=path, error=str(e))
            raise GatewayUnavailableError(f"LLM request timed out: {path}") from e
        except httpx.RequestError as e:
            logger.error("llm_request_error", path=path, error=str(e))
            raise GatewayUnavailableError(f"LLM request failed: {e}") from e

        if response.status_code != httpx.codes.OK:
            logger.error(
                "llm_request_failed",
                path=path,
                status_code=response.status_code,
                response_text=response.text[:500],
            )
            raise GatewayUnavailableError(f"LLM API error: {response.status_code}")

        try:
            data = response.json()
        except ValueError as e:
            raise GatewayUnavailableError("LLM API returned a non-JSON body") from e

        if not isinstance(data, dict):
            raise GatewayUnavailableError("LLM API returned an unexpected body")
        return data

    async def complete_json(
        self,
        model: str,
        system_prompt: str,
        text: str,
        temperature: float,
    ) -> dict[str, Any]:
        """Run a chat completion and decode the reply as a JSON object.

        Raises:
            GatewayUnavailableError: On any transport or decoding failure.
        """
        data = await self._post(
            "/chat/completions",
            {
                "model": model,
                "messages": [
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": text},
                ],
                "temperature": temperature,
                "response_format": {"type": "json_object"},
            },
        )

        try:
            content = data["choices"][0]["message"]["content"]
            parsed = json.loads(content)
        except (KeyError, IndexError, TypeError, json.JSONDecodeError) as e:
            raise GatewayUnavailableError("LLM reply is not a JSON document") from e

        if not isinstance(parsed, dict):
            raise GatewayUnavailableError("LLM reply is not a JSON object")
        return parsed

    async def generate_image(self, model: str, prompt: str, size: str) -> str:
        """Generate one image and return its URL.

        Raises:
            GatewayUnavailableError: On any transport failure or missing URL.
        """
        data = await self._post(
            "/images/generations",
            {"model": model, "prompt": prompt, "size": size, "n": 1},
        )

        try:
            url = data["data"][0]["url"]
        except (KeyError, IndexError, TypeError) as e:
            raise GatewayUnavailableError("Image API reply has no URL") from e

        if not isinstance(url, str) or not url:
            raise GatewayUnavailableError("Image API reply has no URL")
        return url
