"""Tests for the studio image generation stage."""

from __future__ import annotations

from typing import Callable

import httpx
import pytest

from closet.api.openai_client import OpenAIClient
from closet.detection import MissingCredentialError
from closet.imggen import ImageGenerationError, ImageGenerationStage, PromptBuilder
from tests.conftest import image_response, request_json


def test_studio_prompt_mentions_color_once() -> None:
    builder = PromptBuilder()

    assert builder.studio_prompt("navy blazer", color="navy").startswith("Studio product photo of a navy blazer.")
    assert "red wool scarf" in builder.studio_prompt("wool scarf", color="red")


@pytest.mark.asyncio
async def test_generate_requests_single_image(make_openai: Callable[..., OpenAIClient]) -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return image_response("https://images.example.test/blazer.png")

    stage = ImageGenerationStage(make_openai(handler), model="dall-e-2", size="512x512")

    url = await stage.generate("navy blazer", api_key="sk-user")

    assert url == "https://images.example.test/blazer.png"
    body = request_json(seen[0])
    assert seen[0].url.path.endswith("/images/generations")
    assert body["n"] == 1
    assert body["size"] == "512x512"
    assert body["model"] == "dall-e-2"
    assert "navy blazer" in body["prompt"]


@pytest.mark.asyncio
async def test_generate_requires_credential(make_openai: Callable[..., OpenAIClient]) -> None:
    stage = ImageGenerationStage(make_openai(lambda request: image_response("https://x.test/a.png")))

    with pytest.raises(MissingCredentialError):
        await stage.generate("navy blazer", api_key=None)


@pytest.mark.asyncio
async def test_generate_without_url_is_an_error(make_openai: Callable[..., OpenAIClient]) -> None:
    stage = ImageGenerationStage(make_openai(lambda request: httpx.Response(200, json={"created": 0, "data": []})))

    with pytest.raises(ImageGenerationError, match="missing expected image URL"):
        await stage.generate("navy blazer", api_key="sk-user")


@pytest.mark.asyncio
async def test_generate_maps_status_errors(make_openai: Callable[..., OpenAIClient]) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(400, json={"error": {"message": "content policy", "type": "invalid_request_error"}})

    stage = ImageGenerationStage(make_openai(handler))

    with pytest.raises(ImageGenerationError) as exc_info:
        await stage.generate("navy blazer", api_key="sk-user")
    assert exc_info.value.status_code == 400
