"""Shared fixtures: isolated storage, fake HTTP transports, sample images."""

from __future__ import annotations

import json
from io import BytesIO
from pathlib import Path
from typing import Any, Callable

import httpx
import pytest
from PIL import Image

from closet.api.openai_client import OpenAIClient
from closet.config.settings import ClosetSettings
from closet.storage import ArticleRepository, KeyValueStore, LocalImageCache, OutfitRepository

Handler = Callable[[httpx.Request], httpx.Response]

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 32


def make_jpeg(size: tuple[int, int] = (64, 48), color: str = "navy") -> bytes:
    buffer = BytesIO()
    Image.new("RGB", size, color).save(buffer, format="JPEG")
    return buffer.getvalue()


def chat_response(content: str) -> httpx.Response:
    return httpx.Response(
        200,
        json={
            "id": "chatcmpl-test",
            "object": "chat.completion",
            "created": 0,
            "model": "gpt-4o-mini",
            "choices": [
                {
                    "index": 0,
                    "finish_reason": "stop",
                    "message": {"role": "assistant", "content": content},
                },
            ],
        },
    )


def redirect_loop(url: str) -> httpx.Response:
    """A response that redirects back to its own URL forever."""

    return httpx.Response(302, headers={"Location": url})


def image_response(url: str) -> httpx.Response:
    return httpx.Response(200, json={"created": 0, "data": [{"url": url}]})


def request_json(request: httpx.Request) -> dict[str, Any]:
    return json.loads(request.content.decode("utf-8"))


@pytest.fixture
def settings(tmp_path: Path) -> ClosetSettings:
    return ClosetSettings(
        openai_api_key="sk-default",
        openai_base_url="https://api.openai.test/v1",
        clarifai_api_key="clarifai-key",
        clarifai_model_id="apparel",
        clarifai_model_version_id="v1",
        clarifai_base_url="https://api.clarifai.test",
        storage_root=str(tmp_path / "storage"),
    )


@pytest.fixture
def make_openai(settings: ClosetSettings) -> Callable[[Handler], OpenAIClient]:
    def _factory(handler: Handler) -> OpenAIClient:
        http_client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        return OpenAIClient(settings, http_client=http_client)

    return _factory


@pytest.fixture
def download_log() -> list[str]:
    return []


@pytest.fixture
def remote_images() -> dict[str, httpx.Response]:
    """URL -> response served by the fake image host; unknown URLs answer 404."""

    return {}


@pytest.fixture
def image_http(remote_images: dict[str, httpx.Response], download_log: list[str]) -> httpx.AsyncClient:
    def handler(request: httpx.Request) -> httpx.Response:
        url = str(request.url)
        download_log.append(url)
        response = remote_images.get(url)
        if response is None:
            return httpx.Response(404, text="not found")
        return httpx.Response(response.status_code, headers=response.headers, content=response.content)

    return httpx.AsyncClient(transport=httpx.MockTransport(handler), follow_redirects=True)


@pytest.fixture
def image_cache(settings: ClosetSettings, image_http: httpx.AsyncClient) -> LocalImageCache:
    return LocalImageCache(settings.images_dir, http=image_http)


@pytest.fixture
def store(settings: ClosetSettings) -> KeyValueStore:
    return KeyValueStore(settings.kv_dir)


@pytest.fixture
def articles(store: KeyValueStore, image_cache: LocalImageCache) -> ArticleRepository:
    return ArticleRepository(store, image_cache)


@pytest.fixture
def outfits(store: KeyValueStore, articles: ArticleRepository) -> OutfitRepository:
    return OutfitRepository(store, articles)
