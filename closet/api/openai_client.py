"""Async wrapper around the OpenAI chat and image generation endpoints."""

from __future__ import annotations

import logging
from typing import Any, Mapping, Sequence

import httpx
from openai import APIConnectionError, APIStatusError, AsyncOpenAI, OpenAIError

from closet.api.errors import ProviderRequestError
from closet.config.settings import ClosetSettings

logger = logging.getLogger(__name__)


class OpenAIClient:
    """Provides the vision description and image generation calls used by the pipeline.

    The credential is supplied per call because the capture flow hands its own
    key to every invocation; the key from settings is only a default.
    """

    def __init__(self, settings: ClosetSettings, *, http_client: httpx.AsyncClient | None = None) -> None:
        self._settings = settings
        self._openai = AsyncOpenAI(
            api_key=settings.openai_api_key or "unset",
            base_url=settings.openai_base_url.rstrip("/"),
            timeout=settings.request_timeout,
            max_retries=0,
            http_client=http_client,
        )

    async def close(self) -> None:
        """Close the underlying HTTP client."""

        await self._openai.close()

    def _client_for(self, api_key: str | None) -> AsyncOpenAI:
        if api_key and api_key != self._settings.openai_api_key:
            return self._openai.with_options(api_key=api_key)
        return self._openai

    async def chat_completion(
        self,
        messages: Sequence[Mapping[str, Any]],
        *,
        api_key: str | None = None,
        model: str | None = None,
    ) -> str | None:
        """Call chat completions and return the first choice's text content."""

        client = self._client_for(api_key)
        try:
            response = await client.chat.completions.create(
                model=model or self._settings.description_model,
                messages=list(messages),  # type: ignore[arg-type]
            )
        except APIStatusError as exc:
            raise ProviderRequestError(
                f"OpenAI returned error {exc.status_code}: {exc.message}",
                status_code=exc.status_code,
            ) from exc
        except APIConnectionError as exc:
            raise ProviderRequestError(f"OpenAI could not be reached: {exc}") from exc
        except OpenAIError as exc:
            raise ProviderRequestError(str(exc)) from exc

        choices = response.choices or []
        if not choices or choices[0].message is None:
            logger.warning("OpenAI chat response has no choices: %s", response)
            return None
        content = choices[0].message.content
        return content if isinstance(content, str) else None

    async def generate_image(
        self,
        prompt: str,
        *,
        api_key: str | None = None,
        model: str | None = None,
        size: str | None = None,
    ) -> str | None:
        """Generate one image and return its hosted URL, if the response carries one."""

        client = self._client_for(api_key)
        try:
            result = await client.images.generate(
                model=model or self._settings.image_model,
                prompt=prompt,
                n=1,
                size=size or self._settings.image_size,  # type: ignore[arg-type]
            )
        except APIStatusError as exc:
            raise ProviderRequestError(
                f"OpenAI returned error {exc.status_code}: {exc.message}",
                status_code=exc.status_code,
            ) from exc
        except APIConnectionError as exc:
            raise ProviderRequestError(f"OpenAI could not be reached: {exc}") from exc
        except OpenAIError as exc:
            raise ProviderRequestError(str(exc)) from exc

        data_attr = getattr(result, "data", None)
        if isinstance(data_attr, list) and data_attr:
            return getattr(data_attr[0], "url", None)
        logger.warning("OpenAI image response contains no data entries: %s", result)
        return None
