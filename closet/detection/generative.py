"""Generative provider: rich descriptions from a vision model, no crops."""

from __future__ import annotations

import asyncio
import logging

import httpx

from closet.catalog.categories import map_label_to_category
from closet.detection.base import DetectionProvider, GarmentCandidate, NoGarmentsDetectedError
from closet.imaging.photos import PhotoRef, encode_jpeg_base64, read_photo_bytes
from closet.imggen.description import DescriptionStage

logger = logging.getLogger(__name__)


class GenerativeDetector(DetectionProvider):
    """Delegates detection to the description stage; images are rendered later."""

    renders_images = True

    def __init__(self, description_stage: DescriptionStage, *, http: httpx.AsyncClient | None = None) -> None:
        self._description = description_stage
        self._http = http

    async def encode_photo(self, photo: PhotoRef) -> str:
        raw = await read_photo_bytes(photo, self._http)
        return await asyncio.to_thread(encode_jpeg_base64, raw)

    async def detect(self, photo: PhotoRef, *, api_key: str | None = None) -> list[GarmentCandidate]:
        image_base64 = await self.encode_photo(photo)
        outcome = await self._description.describe(image_base64, api_key=api_key)
        if not outcome.ok:
            raise NoGarmentsDetectedError(outcome.message, reason=outcome.status.value)

        return [
            GarmentCandidate(
                name=item.description,
                source_photo=photo,
                description=item.description,
                category=map_label_to_category(item.category),
                color=item.color,
                provider_id=None if item.id is None else str(item.id),
            )
            for item in outcome.items
        ]
