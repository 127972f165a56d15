"""Studio image generation for a single garment description."""

from __future__ import annotations

import logging

from closet.api.errors import ProviderRequestError
from closet.api.openai_client import OpenAIClient
from closet.detection.base import MissingCredentialError
from closet.imggen.prompt_builder import PromptBuilder

logger = logging.getLogger(__name__)


class ImageGenerationError(RuntimeError):
    """Raised when a garment image could not be generated."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        self.status_code = status_code
        super().__init__(message)


class ImageGenerationStage:
    """One generation call per description, no batching."""

    def __init__(
        self,
        client: OpenAIClient,
        *,
        model: str | None = None,
        size: str | None = None,
        prompt_builder: PromptBuilder | None = None,
    ) -> None:
        self._client = client
        self._model = model
        self._size = size
        self._prompt_builder = prompt_builder or PromptBuilder()

    async def generate(self, description: str, *, api_key: str | None, color: str | None = None) -> str:
        """Return the hosted URL of the generated image."""

        if not api_key:
            raise MissingCredentialError("Missing OpenAI API key")

        prompt = self._prompt_builder.studio_prompt(description, color=color)
        try:
            url = await self._client.generate_image(prompt, api_key=api_key, model=self._model, size=self._size)
        except ProviderRequestError as exc:
            raise ImageGenerationError(str(exc), status_code=exc.status_code) from exc

        if not url:
            raise ImageGenerationError("Image generation response missing expected image URL")
        logger.debug("Generated image for %r: %s", description, url)
        return url
