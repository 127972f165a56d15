"""End-to-end tests for the wardrobe service facade."""

from __future__ import annotations

import json
from io import BytesIO
from pathlib import Path
from typing import Callable

import httpx
import pytest
from PIL import Image

from closet.api.openai_client import OpenAIClient
from closet.bootstrap import open_wardrobe, startup
from closet.catalog import BoundingBox, Category, GarmentRecord
from closet.config.settings import ClosetSettings
from closet.detection.generative import GenerativeDetector
from closet.imggen import DescriptionStage, ImageGenerationStage
from closet.migrations import MigrationRunner
from closet.pipeline import GarmentPipeline, PipelineFailure
from closet.service import SelectionError, WardrobeService
from closet.storage import ArticleRepository, KeyValueStore, LocalImageCache, OutfitRepository
from tests.conftest import PNG_BYTES, chat_response, image_response, make_jpeg, request_json

BLAZER_URL = "https://images.example.test/blazer.png"


def _handler(request: httpx.Request) -> httpx.Response:
    if request.url.path.endswith("/chat/completions"):
        items = [
            {"id": 1, "description": "navy blazer", "category": "jacket", "color": "navy"},
            {"id": 2, "description": "grey wool trousers", "category": "pants", "color": "grey"},
        ]
        return chat_response(json.dumps({"clothingItems": items}))
    if "trousers" in request_json(request)["prompt"]:
        return httpx.Response(500, json={"error": {"message": "try again", "type": "server_error"}})
    return image_response(BLAZER_URL)


@pytest.fixture
def service(
    settings: ClosetSettings,
    make_openai: Callable[..., OpenAIClient],
    store: KeyValueStore,
    image_cache: LocalImageCache,
    articles: ArticleRepository,
    outfits: OutfitRepository,
) -> WardrobeService:
    client = make_openai(_handler)
    pipeline = GarmentPipeline(
        GenerativeDetector(DescriptionStage(client)),
        generation=ImageGenerationStage(client),
        image_cache=image_cache,
    )
    return WardrobeService(
        pipeline,
        articles,
        outfits,
        image_cache,
        MigrationRunner(store, image_cache),
        default_credential=settings.openai_api_key,
    )


@pytest.fixture
def photo_path(tmp_path: Path) -> Path:
    path = tmp_path / "capture.jpg"
    path.write_bytes(make_jpeg((200, 100)))
    return path


@pytest.mark.asyncio
async def test_capture_confirm_and_store(
    service: WardrobeService,
    remote_images: dict[str, httpx.Response],
    photo_path: Path,
) -> None:
    remote_images[BLAZER_URL] = httpx.Response(200, content=PNG_BYTES)

    candidates = await service.process_photo(str(photo_path))
    assert isinstance(candidates, list) and len(candidates) == 2
    blazer, trousers = candidates
    assert blazer.local_image_path is not None
    assert trousers.error is not None and trousers.remote_image_url is None

    confirmed = await service.confirm_selection(str(photo_path), candidates, [blazer.id, trousers.id])
    assert all(record.error is None for record in confirmed)

    stored = await service.add_to_wardrobe(confirmed)

    assert [record.id for record in stored] == [blazer.id]
    assert stored[0].wear_count == 0
    assert stored[0].category is Category.OUTERWEAR
    assert [record.id for record in await service.list_wardrobe()] == [blazer.id]


@pytest.mark.asyncio
async def test_process_photo_without_photo(service: WardrobeService) -> None:
    failure = await service.process_photo(None, "sk-user")

    assert isinstance(failure, PipelineFailure)
    assert failure.message == "No image provided"


@pytest.mark.asyncio
async def test_confirm_requires_a_selection(service: WardrobeService, photo_path: Path) -> None:
    candidates = [GarmentRecord(id="a", original_image_path=str(photo_path))]

    with pytest.raises(SelectionError):
        await service.confirm_selection(str(photo_path), candidates, [])


@pytest.mark.asyncio
async def test_confirm_crops_regions_from_the_photo(service: WardrobeService, photo_path: Path) -> None:
    candidates = [
        GarmentRecord(
            id="jeans",
            category="Jeans",
            original_image_path=str(photo_path),
            bounding_box=BoundingBox(top=0.0, left=0.5, bottom=1.0, right=1.0),
        ),
        GarmentRecord(id="skipped", original_image_path=str(photo_path)),
    ]

    confirmed = await service.confirm_selection(str(photo_path), candidates, ["jeans"])

    assert len(confirmed) == 1
    record = confirmed[0]
    assert record.category is Category.BOTTOMS
    assert record.cropped_image_path is not None
    with Image.open(BytesIO(Path(record.cropped_image_path).read_bytes())) as img:
        assert img.size == (100, 100)
    assert record.display_image == record.cropped_image_path


@pytest.mark.asyncio
async def test_confirm_keeps_record_when_crop_is_empty(service: WardrobeService, photo_path: Path) -> None:
    candidates = [
        GarmentRecord(
            id="sliver",
            original_image_path=str(photo_path),
            bounding_box=BoundingBox(top=0.5, left=0.5, bottom=0.5, right=0.9),
        ),
    ]

    confirmed = await service.confirm_selection(str(photo_path), candidates, ["sliver"])

    assert confirmed[0].cropped_image_path is None
    assert confirmed[0].display_image == str(photo_path)


@pytest.mark.asyncio
async def test_outfit_flow(service: WardrobeService, photo_path: Path) -> None:
    await service.add_to_wardrobe(
        [GarmentRecord(id="a", original_image_path=str(photo_path)), GarmentRecord(id="b", original_image_path="x")],
    )
    outfit = await service.create_outfit("Monday", ["a", "b"])

    result = await service.mark_outfit_worn(outfit.id)

    assert result.success and result.articles_updated == 2
    assert [o.wear_count for o in await service.list_outfits()] == [1]
    assert await service.delete_outfit(outfit.id) == []
    await service.delete_from_wardrobe(["a"])
    await service.clear_wardrobe()
    assert await service.list_wardrobe() == []


@pytest.mark.asyncio
async def test_startup_on_fresh_storage(settings: ClosetSettings) -> None:
    report = await startup(settings)

    assert report.success
    assert settings.images_dir.is_dir()


@pytest.mark.asyncio
async def test_open_wardrobe_wires_default_credential(settings: ClosetSettings) -> None:
    async with open_wardrobe(settings) as wardrobe:
        failure = await wardrobe.process_photo(None)

    assert isinstance(failure, PipelineFailure)
    assert failure.message == "No image provided"
