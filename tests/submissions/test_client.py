"""Tests for the LLM HTTP client and its adapters."""

import json

import httpx
import pytest

from campus_feed.submissions.classification import LLMClassifier
from campus_feed.submissions.client import GatewayUnavailableError, LLMClient
from campus_feed.submissions.images import LLMImageGenerator
from campus_feed.submissions.moderation import LLMModerator


def _chat_reply(content: str) -> dict:
    return {"choices": [{"message": {"role": "assistant", "content": content}}]}


def _client(handler) -> LLMClient:
    return LLMClient(
        base_url="https://llm.test/v1/",
        api_key="sk-test",
        transport=httpx.MockTransport(handler),
    )


class TestCompleteJson:
    """Tests for LLMClient.complete_json."""

    @pytest.mark.asyncio
    async def test_sends_json_mode_request(self):
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json=_chat_reply('{"isToxic": false}'))

        client = _client(handler)
        result = await client.complete_json(
            model="m", system_prompt="sys", text="hello", temperature=0.1
        )
        await client.aclose()

        assert result == {"isToxic": False}
        request = seen[0]
        assert request.url.path == "/v1/chat/completions"
        assert request.headers["Authorization"] == "Bearer sk-test"
        body = json.loads(request.content)
        assert body["response_format"] == {"type": "json_object"}
        assert body["messages"][1] == {"role": "user", "content": "hello"}

    @pytest.mark.asyncio
    async def test_non_200_raises(self):
        client = _client(lambda request: httpx.Response(503, text="overloaded"))

        with pytest.raises(GatewayUnavailableError):
            await client.complete_json("m", "sys", "hello", 0.1)
        await client.aclose()

    @pytest.mark.asyncio
    async def test_non_json_content_raises(self):
        client = _client(
            lambda request: httpx.Response(200, json=_chat_reply("not json"))
        )

        with pytest.raises(GatewayUnavailableError):
            await client.complete_json("m", "sys", "hello", 0.1)
        await client.aclose()

    @pytest.mark.asyncio
    async def test_transport_error_raises(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        client = _client(handler)
        with pytest.raises(GatewayUnavailableError):
            await client.complete_json("m", "sys", "hello", 0.1)
        await client.aclose()


class TestGenerateImage:
    """Tests for LLMClient.generate_image."""

    @pytest.mark.asyncio
    async def test_returns_url(self):
        def handler(request: httpx.Request) -> httpx.Response:
            assert request.url.path == "/v1/images/generations"
            return httpx.Response(200, json={"data": [{"url": "https://img/1.png"}]})

        client = _client(handler)
        url = await client.generate_image("img", "a cat", "1024x1024")
        await client.aclose()

        assert url == "https://img/1.png"

    @pytest.mark.asyncio
    async def test_missing_url_raises(self):
        client = _client(lambda request: httpx.Response(200, json={"data": []}))

        with pytest.raises(GatewayUnavailableError):
            await client.generate_image("img", "a cat", "1024x1024")
        await client.aclose()


class TestAdapters:
    """The model adapters send their prompts through the client."""

    @pytest.mark.asyncio
    async def test_moderator_and_classifier(self):
        bodies: list[dict] = []

        def handler(request: httpx.Request) -> httpx.Response:
            bodies.append(json.loads(request.content))
            return httpx.Response(200, json=_chat_reply('{"ok": true}'))

        client = _client(handler)
        await LLMModerator(client, model="mod-model").assess("text one")
        await LLMClassifier(client, model="cls-model").classify("text two")
        await client.aclose()

        assert [b["model"] for b in bodies] == ["mod-model", "cls-model"]
        assert bodies[0]["temperature"] == 0.1
        assert bodies[1]["temperature"] == 0.3
        assert bodies[1]["messages"][1]["content"] == "text two"

    @pytest.mark.asyncio
    async def test_image_generator_wraps_prompt(self):
        bodies: list[dict] = []

        def handler(request: httpx.Request) -> httpx.Response:
            bodies.append(json.loads(request.content))
            return httpx.Response(200, json={"data": [{"url": "https://img/2.png"}]})

        client = _client(handler)
        url = await LLMImageGenerator(client, model="img-model").generate("a dog")
        await client.aclose()

        assert url == "https://img/2.png"
        assert "a dog" in bodies[0]["prompt"]
        assert bodies[0]["size"] == "1024x1024"
