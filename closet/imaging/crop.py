"""Crop detected garments out of the source photo."""

from __future__ import annotations

from io import BytesIO
from pathlib import Path

from PIL import Image, UnidentifiedImageError

from closet.catalog.records import BoundingBox
from closet.imaging.photos import PhotoLoadError


def crop_bounding_box(image_bytes: bytes, box: BoundingBox, destination: Path) -> Path:
    """Save the region described by ``box`` as a JPEG at ``destination``."""

    try:
        with Image.open(BytesIO(image_bytes)) as img:
            img = img.convert("RGB")
            width, height = img.size
            left = round(box.left * width)
            top = round(box.top * height)
            right = round(box.right * width)
            bottom = round(box.bottom * height)
            if right <= left or bottom <= top:
                raise ValueError(f"Bounding box {box} is empty for a {width}x{height} image.")
            cropped = img.crop((left, top, right, bottom))
            destination.parent.mkdir(parents=True, exist_ok=True)
            cropped.save(destination, format="JPEG", quality=90)
    except (UnidentifiedImageError, OSError) as exc:
        raise PhotoLoadError("Source photo could not be cropped.") from exc
    return destination
