"""Provider contract shared by the classifier and generative detectors."""

from __future__ import annotations

import abc
from dataclasses import dataclass
from typing import ClassVar

from closet.catalog.categories import Category
from closet.catalog.records import BoundingBox
from closet.imaging.photos import PhotoRef


class DetectionError(RuntimeError):
    """Raised when a provider call fails or its response cannot be used."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        self.status_code = status_code
        super().__init__(message)


class MissingCredentialError(DetectionError):
    """Raised before any network call when no API key is available."""


class NoGarmentsDetectedError(DetectionError):
    """The provider answered, but yielded no usable garments.

    ``reason`` is ``"no_items"`` for an empty result and ``"parse_error"``
    when the response could not be decoded.
    """

    def __init__(self, message: str, reason: str = "no_items") -> None:
        self.reason = reason
        super().__init__(message)


@dataclass(slots=True)
class GarmentCandidate:
    """A garment found in a photo, before the user confirms it."""

    name: str
    source_photo: PhotoRef
    description: str | None = None
    category: Category = Category.OTHER
    color: str | None = None
    bounding_box: BoundingBox | None = None
    confidence: float | None = None
    provider_id: str | None = None


class DetectionProvider(abc.ABC):
    """Turns one photo into garment candidates."""

    #: whether candidates still need a generated studio image
    renders_images: ClassVar[bool] = False

    @abc.abstractmethod
    async def detect(self, photo: PhotoRef, *, api_key: str | None = None) -> list[GarmentCandidate]:
        """Return the candidates found in ``photo``."""

    async def close(self) -> None:
        """Release provider resources."""
