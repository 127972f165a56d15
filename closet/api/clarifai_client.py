"""Async client for the Clarifai model outputs endpoint."""

from __future__ import annotations

import logging
from typing import Any, Mapping

import httpx

from closet.api.errors import ProviderRequestError
from closet.config.settings import ClosetSettings

logger = logging.getLogger(__name__)


class ClarifaiClient:
    """Posts images to a Clarifai detection model."""

    def __init__(self, settings: ClosetSettings, *, http_client: httpx.AsyncClient | None = None) -> None:
        self._settings = settings
        self._client = http_client or httpx.AsyncClient(
            base_url=settings.clarifai_base_url.rstrip("/"),
            timeout=settings.request_timeout,
            headers={"Accept": "application/json"},
        )

    async def close(self) -> None:
        """Close the underlying HTTP client."""

        await self._client.aclose()

    @property
    def outputs_endpoint(self) -> str:
        model_id = self._settings.clarifai_model_id
        version_id = self._settings.clarifai_model_version_id
        if version_id:
            return f"/v2/models/{model_id}/versions/{version_id}/outputs"
        return f"/v2/models/{model_id}/outputs"

    async def predict(self, image: Mapping[str, str], *, api_key: str | None = None) -> dict[str, Any]:
        """Run the detection model on ``image`` (``{"base64": ...}`` or ``{"url": ...}``)."""

        key = api_key or self._settings.clarifai_api_key
        payload = {
            "user_app_id": {
                "user_id": self._settings.clarifai_user_id,
                "app_id": self._settings.clarifai_app_id,
            },
            "inputs": [{"data": {"image": dict(image)}}],
        }
        try:
            response = await self._client.post(
                self.outputs_endpoint,
                json=payload,
                headers={"Authorization": f"Key {key}"},
            )
            response.raise_for_status()
        except httpx.TimeoutException as exc:
            raise ProviderRequestError("Clarifai did not respond in time.") from exc
        except httpx.HTTPStatusError as exc:
            logger.error("Clarifai error response: %s", exc.response.text)
            raise ProviderRequestError(
                f"Clarifai API error: {exc.response.status_code}",
                status_code=exc.response.status_code,
            ) from exc
        except httpx.TransportError as exc:
            raise ProviderRequestError(f"Clarifai could not be reached: {exc}") from exc

        try:
            body = response.json()
        except ValueError as exc:
            raise ProviderRequestError("Clarifai returned a non-JSON body.", status_code=response.status_code) from exc
        if not isinstance(body, dict):
            raise ProviderRequestError("Clarifai returned an unexpected body.", status_code=response.status_code)
        return body
