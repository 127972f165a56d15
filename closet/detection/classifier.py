"""Label-classifier provider: labelled regions over the existing photo."""

from __future__ import annotations

import base64
import logging
from typing import Any

import httpx
from pydantic import ValidationError

from closet.api.clarifai_client import ClarifaiClient
from closet.api.errors import ProviderRequestError
from closet.catalog.categories import is_clothing_concept, map_label_to_category
from closet.catalog.records import BoundingBox
from closet.detection.base import DetectionError, DetectionProvider, GarmentCandidate
from closet.imaging.photos import PhotoRef, read_photo_bytes

logger = logging.getLogger(__name__)

DEFAULT_CONCEPT_THRESHOLD = 0.3


def _region_box(region: dict[str, Any]) -> BoundingBox | None:
    raw = (region.get("region_info") or {}).get("bounding_box")
    if not isinstance(raw, dict):
        return None
    try:
        return BoundingBox(
            top=raw.get("top_row", 0.0),
            left=raw.get("left_col", 0.0),
            bottom=raw.get("bottom_row", 1.0),
            right=raw.get("right_col", 1.0),
        )
    except ValidationError:
        logger.warning("Ignoring malformed bounding box: %s", raw)
        return None


def parse_regions(
    payload: dict[str, Any],
    photo: PhotoRef,
    *,
    threshold: float = DEFAULT_CONCEPT_THRESHOLD,
) -> list[GarmentCandidate]:
    """Extract clothing candidates from a model outputs payload."""

    outputs = payload.get("outputs")
    if not isinstance(outputs, list):
        raise DetectionError("Classifier response has no outputs array")
    if not outputs:
        return []
    regions = ((outputs[0] or {}).get("data") or {}).get("regions") or []

    candidates: list[GarmentCandidate] = []
    for region_index, region in enumerate(regions):
        concepts = (region.get("data") or {}).get("concepts")
        if not isinstance(concepts, list):
            continue
        box = _region_box(region)
        for concept in concepts:
            name = concept.get("name")
            value = concept.get("value")
            if not isinstance(name, str) or not isinstance(value, (int, float)):
                continue
            if not is_clothing_concept(name) or value <= threshold:
                continue
            candidates.append(
                GarmentCandidate(
                    name=name,
                    source_photo=photo,
                    description=name,
                    category=map_label_to_category(name),
                    bounding_box=box,
                    confidence=float(value),
                    provider_id=f"{concept.get('id')}_{region_index}_{name}",
                ),
            )
    return candidates


class ClassifierDetector(DetectionProvider):
    """Detects garments with an external label-detection model."""

    renders_images = False

    def __init__(
        self,
        client: ClarifaiClient,
        *,
        threshold: float = DEFAULT_CONCEPT_THRESHOLD,
        http: httpx.AsyncClient | None = None,
    ) -> None:
        self._client = client
        self._threshold = threshold
        self._http = http

    async def detect(self, photo: PhotoRef, *, api_key: str | None = None) -> list[GarmentCandidate]:
        if photo.is_remote:
            image = {"url": photo.uri}
        else:
            raw = await read_photo_bytes(photo, self._http)
            image = {"base64": base64.b64encode(raw).decode("ascii")}

        try:
            payload = await self._client.predict(image, api_key=api_key)
        except ProviderRequestError as exc:
            logger.error("Error calling classifier: %s", exc)
            raise DetectionError(str(exc), status_code=exc.status_code) from exc

        candidates = parse_regions(payload, photo, threshold=self._threshold)
        logger.info("Classifier detected %s clothing concept(s)", len(candidates))
        return candidates

    async def close(self) -> None:
        await self._client.close()
