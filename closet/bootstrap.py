"""Wires settings, clients and repositories into a ``WardrobeService``."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager, suppress
from typing import AsyncIterator

import httpx

from closet.api.clarifai_client import ClarifaiClient
from closet.api.openai_client import OpenAIClient
from closet.config.settings import ClosetSettings, get_settings
from closet.detection.factory import build_detection_provider, default_credential
from closet.imggen.generation import ImageGenerationStage
from closet.migrations.runner import MigrationReport, MigrationRunner
from closet.pipeline.orchestrator import GarmentPipeline
from closet.service import WardrobeService
from closet.storage.articles import ArticleRepository
from closet.storage.image_cache import LocalImageCache
from closet.storage.kvstore import KeyValueStore
from closet.storage.outfits import OutfitRepository

logger = logging.getLogger(__name__)


@asynccontextmanager
async def open_wardrobe(settings: ClosetSettings | None = None) -> AsyncIterator[WardrobeService]:
    """Yield a fully wired service and close its HTTP clients afterwards."""

    settings = settings or get_settings()
    http = httpx.AsyncClient(timeout=settings.request_timeout, follow_redirects=True)
    openai_client = OpenAIClient(settings)
    clarifai_client = ClarifaiClient(settings)

    store = KeyValueStore(settings.kv_dir)
    image_cache = LocalImageCache(settings.images_dir, http=http)
    articles = ArticleRepository(store, image_cache)
    outfits = OutfitRepository(store, articles)

    provider = build_detection_provider(
        settings,
        openai_client=openai_client,
        clarifai_client=clarifai_client,
        http=http,
    )
    generation = None
    if provider.renders_images:
        generation = ImageGenerationStage(openai_client, model=settings.image_model, size=settings.image_size)
    pipeline = GarmentPipeline(
        provider,
        generation=generation,
        image_cache=image_cache,
        concurrent=settings.concurrent_generation,
    )
    service = WardrobeService(
        pipeline,
        articles,
        outfits,
        image_cache,
        MigrationRunner(store, image_cache),
        default_credential=default_credential(settings),
    )
    logger.info("Wardrobe ready (provider=%s, storage=%s)", settings.detection_provider.value, settings.storage_root)
    try:
        yield service
    finally:
        with suppress(httpx.HTTPError):
            await openai_client.close()
        with suppress(httpx.HTTPError):
            await clarifai_client.close()
        with suppress(httpx.HTTPError):
            await http.aclose()


async def startup(settings: ClosetSettings | None = None) -> MigrationReport:
    """Launch-time routine: prepare storage and run the migrations once."""

    async with open_wardrobe(settings) as service:
        return await service.run_startup_migrations()
