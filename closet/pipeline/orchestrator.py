"""Runs a captured photo through detection, rendering and caching."""

from __future__ import annotations

import asyncio
import logging
import uuid

from closet.catalog.records import GarmentRecord
from closet.detection.base import DetectionError, DetectionProvider, GarmentCandidate
from closet.imaging.photos import PhotoLoadError, PhotoRef
from closet.imggen.generation import ImageGenerationError, ImageGenerationStage
from closet.pipeline.stages import PipelineFailure, PipelineResult, PipelineStage, PipelineState
from closet.storage.image_cache import CacheError, LocalImageCache

logger = logging.getLogger(__name__)


class GarmentPipeline:
    """Sequences the detection provider, image generation and the local cache.

    ``process`` returns either a :class:`PipelineFailure` for the whole photo
    or one record per candidate, in detection order. Per-candidate failures
    are recorded on the candidate's record and never abort its siblings.
    """

    def __init__(
        self,
        provider: DetectionProvider,
        *,
        generation: ImageGenerationStage | None = None,
        image_cache: LocalImageCache | None = None,
        concurrent: bool = True,
    ) -> None:
        if provider.renders_images and generation is None:
            raise ValueError(f"{type(provider).__name__} needs an image generation stage")
        self._provider = provider
        self._generation = generation
        self._image_cache = image_cache
        self._concurrent = concurrent

    @property
    def provider(self) -> DetectionProvider:
        return self._provider

    async def process(self, photo: PhotoRef | str | None, credential: str | None) -> PipelineResult:
        state = PipelineState.VALIDATING
        if not credential:
            return self._fail(state, PipelineStage.PIPELINE, "Missing API credential")
        if not photo or (isinstance(photo, PhotoRef) and not photo.uri):
            return self._fail(state, PipelineStage.PIPELINE, "No image provided")
        photo_ref = photo if isinstance(photo, PhotoRef) else PhotoRef(photo)

        state = PipelineState.DESCRIBING
        try:
            candidates = await self._provider.detect(photo_ref, api_key=credential)
        except PhotoLoadError as exc:
            return self._fail(state, PipelineStage.PIPELINE, f"Could not read the photo: {exc}")
        except DetectionError as exc:
            return self._fail(state, PipelineStage.DESCRIBE, str(exc) or type(exc).__name__)
        generation = self._generation
        if not self._provider.renders_images or generation is None:
            records = [self._crop_record(candidate) for candidate in candidates]
        elif self._concurrent:
            records = list(
                await asyncio.gather(*(self._render(generation, candidate, credential) for candidate in candidates)),
            )
        else:
            records = [await self._render(generation, candidate, credential) for candidate in candidates]

        failed = sum(1 for record in records if record.error)
        logger.info(
            "Pipeline %s: %s candidate(s), %s with errors",
            PipelineState.COMPLETED.value,
            len(records),
            failed,
        )
        return records

    @staticmethod
    def _fail(state: PipelineState, stage: PipelineStage, message: str) -> PipelineFailure:
        logger.error("Pipeline %s during %s: %s", PipelineState.FAILED.value, state.value, message)
        return PipelineFailure(message=message, stage=stage)

    @staticmethod
    def _base_record(candidate: GarmentCandidate) -> GarmentRecord:
        return GarmentRecord(
            id=str(uuid.uuid4()),
            name=candidate.name,
            description=candidate.description,
            category=candidate.category,
            color=candidate.color,
            confidence=candidate.confidence,
            bounding_box=candidate.bounding_box,
        )

    def _crop_record(self, candidate: GarmentCandidate) -> GarmentRecord:
        record = self._base_record(candidate)
        photo = candidate.source_photo
        if photo.is_remote:
            return record.model_copy(update={"remote_image_url": photo.uri})
        return record.model_copy(update={"original_image_path": photo.uri})

    async def _render(
        self,
        generation: ImageGenerationStage,
        candidate: GarmentCandidate,
        credential: str,
    ) -> GarmentRecord:
        """Generate and cache one candidate's image; errors stay on the returned record."""

        record = self._base_record(candidate)
        prompt = candidate.description or candidate.name
        try:
            image_url = await generation.generate(prompt, api_key=credential, color=candidate.color)
        except (ImageGenerationError, DetectionError) as exc:
            logger.error("Error generating image for item %s: %s", candidate.provider_id, exc)
            return record.model_copy(
                update={
                    "remote_image_url": None,
                    "error": str(exc) or "Image generation failed",
                    "error_stage": PipelineStage.GENERATE.value,
                },
            )
        record = record.model_copy(update={"remote_image_url": image_url})

        if self._image_cache is None:
            return record
        try:
            local_path = await self._image_cache.download_and_cache(image_url)
        except CacheError as exc:
            logger.error("Error caching image for item %s: %s", candidate.provider_id, exc)
            return record.model_copy(
                update={"error": str(exc) or "Image caching failed", "error_stage": PipelineStage.CACHE.value},
            )
        return record.model_copy(update={"local_image_path": str(local_path)})
