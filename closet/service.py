"""Entry points used by the capture and wardrobe screens."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Iterable, Mapping, Sequence

from closet.catalog.categories import map_label_to_category
from closet.catalog.records import GarmentRecord, OutfitRecord
from closet.imaging.crop import crop_bounding_box
from closet.imaging.photos import PhotoLoadError, PhotoRef, read_photo_bytes
from closet.migrations.runner import MigrationReport, MigrationRunner
from closet.pipeline.orchestrator import GarmentPipeline
from closet.pipeline.stages import PipelineResult
from closet.storage.articles import ArticleRepository
from closet.storage.image_cache import LocalImageCache
from closet.storage.outfits import OutfitRepository, WearResult

logger = logging.getLogger(__name__)


class SelectionError(ValueError):
    """Raised when a confirmation does not select any candidate."""


class WardrobeService:
    """Facade over the capture pipeline, the repositories and the migrations."""

    def __init__(
        self,
        pipeline: GarmentPipeline,
        articles: ArticleRepository,
        outfits: OutfitRepository,
        image_cache: LocalImageCache,
        migrations: MigrationRunner,
        *,
        default_credential: str = "",
    ) -> None:
        self._pipeline = pipeline
        self._articles = articles
        self._outfits = outfits
        self._image_cache = image_cache
        self._migrations = migrations
        self._default_credential = default_credential

    @property
    def articles(self) -> ArticleRepository:
        return self._articles

    @property
    def outfits(self) -> OutfitRepository:
        return self._outfits

    async def process_photo(self, photo_ref: str | None, credential: str | None = None) -> PipelineResult:
        """Detect garments in a captured photo.

        Returns a ``PipelineFailure`` for the whole photo, or one record per
        candidate; individual records may carry an ``error``.
        """

        return await self._pipeline.process(photo_ref, credential or self._default_credential)

    async def confirm_selection(
        self,
        photo_ref: str,
        candidates: Sequence[GarmentRecord],
        selected_ids: Iterable[str],
    ) -> list[GarmentRecord]:
        """Keep the candidates the user confirmed and prepare them for storage."""

        selected = set(selected_ids)
        if not selected:
            raise SelectionError("No articles selected")

        confirmed = [
            candidate.model_copy(
                update={
                    "category": map_label_to_category(candidate.category),
                    "error": None,
                    "error_stage": None,
                },
            )
            for candidate in candidates
            if candidate.id in selected
        ]
        if any(record.bounding_box is not None and not record.cropped_image_path for record in confirmed):
            confirmed = await self._crop_all(PhotoRef(photo_ref), confirmed)
        return confirmed

    async def _crop_all(self, photo: PhotoRef, records: list[GarmentRecord]) -> list[GarmentRecord]:
        try:
            photo_bytes = await read_photo_bytes(photo)
        except PhotoLoadError as exc:
            logger.error("Could not read %s for cropping: %s", photo.uri, exc)
            return records

        await self._image_cache.ensure_storage_ready()
        cropped: list[GarmentRecord] = []
        for record in records:
            if record.bounding_box is None or record.cropped_image_path:
                cropped.append(record)
                continue
            destination = self._image_cache.resolve_path(f"{record.id}_crop.jpg")
            try:
                path = await asyncio.to_thread(crop_bounding_box, photo_bytes, record.bounding_box, destination)
            except (PhotoLoadError, ValueError) as exc:
                logger.warning("Could not crop article %s: %s", record.id, exc)
                cropped.append(record)
                continue
            cropped.append(record.model_copy(update={"cropped_image_path": str(path)}))
        return cropped

    async def add_to_wardrobe(
        self,
        records: Iterable[GarmentRecord | Mapping[str, Any]],
        *,
        validate_image_fields: bool = True,
        migrate_images: bool = True,
    ) -> list[GarmentRecord]:
        return await self._articles.add(
            records,
            validate_image_fields=validate_image_fields,
            migrate_images=migrate_images,
        )

    async def delete_from_wardrobe(self, ids: Iterable[str]) -> list[GarmentRecord]:
        return await self._articles.delete_by_ids(ids)

    async def list_wardrobe(self, *, migrate_images: bool = False) -> list[GarmentRecord]:
        return await self._articles.get_all(migrate_images=migrate_images)

    async def clear_wardrobe(self) -> None:
        await self._articles.clear_all()

    async def create_outfit(self, name: str, article_ids: Iterable[str]) -> OutfitRecord:
        return await self._outfits.create(name, article_ids)

    async def list_outfits(self) -> list[OutfitRecord]:
        return await self._outfits.list_all()

    async def mark_outfit_worn(self, outfit_id: str) -> WearResult:
        return await self._outfits.mark_worn(outfit_id)

    async def delete_outfit(self, outfit_id: str) -> list[OutfitRecord]:
        return await self._outfits.delete(outfit_id)

    async def run_startup_migrations(self) -> MigrationReport:
        await self._image_cache.ensure_storage_ready()
        return await self._migrations.run()
