"""Persistent record shapes for garments and outfits."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from closet.catalog.categories import Category, map_label_to_category

# Image keys written by earlier app versions, mapped to their current names.
LEGACY_IMAGE_FIELDS: dict[str, str] = {
    "localImageUri": "localImagePath",
    "croppedImageUri": "croppedImagePath",
    "imageUri": "originalImagePath",
    "imageUrl": "remoteImageUrl",
}


def coerce_wear_count(value: Any) -> int:
    """Return a non-negative integer wear count, treating junk as zero."""

    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return 0
    if value != value:  # NaN
        return 0
    return max(int(value), 0)


def _clamp_unit(value: Any) -> Any:
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return min(max(float(value), 0.0), 1.0)
    return value


def _image_field(name: str, legacy: str) -> Any:
    return Field(
        default=None,
        validation_alias=AliasChoices(to_camel(name), legacy, name),
        serialization_alias=to_camel(name),
    )


class StoredModel(BaseModel):
    """Base model persisted with camelCase keys; unknown keys survive a round trip."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="allow")

    def to_storage(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class BoundingBox(StoredModel):
    """Normalized rectangle inside the source photo."""

    top: float
    left: float
    bottom: float
    right: float

    @field_validator("top", "left", "bottom", "right", mode="before")
    @classmethod
    def _clamp(cls, value: Any) -> Any:
        return _clamp_unit(value)


class GarmentRecord(StoredModel):
    """A single wardrobe article, either transient (pipeline output) or persisted."""

    id: str
    name: str | None = None
    description: str | None = None
    category: Category = Category.OTHER
    color: str | None = None
    local_image_path: str | None = _image_field("local_image_path", "localImageUri")
    cropped_image_path: str | None = _image_field("cropped_image_path", "croppedImageUri")
    original_image_path: str | None = _image_field("original_image_path", "imageUri")
    remote_image_url: str | None = _image_field("remote_image_url", "imageUrl")
    confidence: float | None = None
    wear_count: int = 0
    bounding_box: BoundingBox | None = None
    error: str | None = None
    error_stage: str | None = None

    @field_validator("id", mode="before")
    @classmethod
    def _stringify_id(cls, value: Any) -> Any:
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        return value

    @field_validator("category", mode="before")
    @classmethod
    def _map_category(cls, value: Any) -> Category:
        return map_label_to_category(value if isinstance(value, str) else None)

    @field_validator("wear_count", mode="before")
    @classmethod
    def _coerce_wear_count(cls, value: Any) -> int:
        return coerce_wear_count(value)

    @field_validator("confidence", mode="before")
    @classmethod
    def _clamp_confidence(cls, value: Any) -> Any:
        return _clamp_unit(value)

    @property
    def display_image(self) -> str | None:
        """Best available image: local copy, crop, source photo, then remote URL."""

        for candidate in (
            self.local_image_path,
            self.cropped_image_path,
            self.original_image_path,
            self.remote_image_url,
        ):
            if candidate:
                return candidate
        return None

    @property
    def has_image_field(self) -> bool:
        return self.display_image is not None

    @property
    def needs_image_migration(self) -> bool:
        return bool(self.remote_image_url) and not self.local_image_path


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class OutfitRecord(StoredModel):
    """Named, ordered group of garment ids with its own wear tracking."""

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    name: str
    article_ids: list[str] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=_utcnow)
    wear_count: int = 0
    last_worn_at: datetime | None = Field(
        default=None,
        validation_alias=AliasChoices("lastWornAt", "lastWorn", "last_worn_at"),
        serialization_alias="lastWornAt",
    )

    @field_validator("article_ids", mode="before")
    @classmethod
    def _dedupe_ids(cls, value: Any) -> Any:
        if not isinstance(value, (list, tuple)):
            return value
        return list(dict.fromkeys(str(item) for item in value))

    @field_validator("wear_count", mode="before")
    @classmethod
    def _coerce_wear_count(cls, value: Any) -> int:
        return coerce_wear_count(value)
