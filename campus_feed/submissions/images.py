"""Image generation collaborator used by the meme command."""

from typing import Protocol

from .client import LLMClient
from .prompts import MEME_PROMPT_TEMPLATE


class ImageGenerator(Protocol):
    """External image model; returns the URL of the generated image."""

    async def generate(self, prompt: str) -> str: ...


class LLMImageGenerator:
    """Image generator backed by the images endpoint."""

    def __init__(self, client: LLMClient, model: str, size: str = "1024x1024"):
        self._client = client
        self._model = model
        self._size = size

    async def generate(self, prompt: str) -> str:
        return await self._client.generate_image(
            model=self._model,
            prompt=MEME_PROMPT_TEMPLATE.format(prompt=prompt),
            size=self._size,
        )
