"""Helpers for turning a captured photo reference into bytes."""

from __future__ import annotations

import asyncio
import base64
import binascii
from dataclasses import dataclass
from io import BytesIO
from pathlib import Path
from urllib.parse import unquote, urlparse

import httpx
from PIL import Image, UnidentifiedImageError

VISION_MAX_SIDE = 512
VISION_JPEG_QUALITY = 80


class PhotoLoadError(RuntimeError):
    """Raised when a photo reference cannot be read or decoded."""


@dataclass(slots=True, frozen=True)
class PhotoRef:
    """A captured photo: local path, ``file://`` URI, ``data:`` URI or http(s) URL."""

    uri: str

    @property
    def is_data_uri(self) -> bool:
        return self.uri.startswith("data:")

    @property
    def is_remote(self) -> bool:
        return self.uri.startswith(("http://", "https://"))

    @property
    def local_path(self) -> Path | None:
        if self.is_data_uri or self.is_remote:
            return None
        if self.uri.startswith("file://"):
            return Path(unquote(urlparse(self.uri).path))
        return Path(self.uri).expanduser()


def _decode_data_uri(uri: str) -> bytes:
    if "," not in uri:
        raise PhotoLoadError("Malformed data URI.")
    header, encoded = uri.split(",", 1)
    if not header.endswith(";base64"):
        return unquote(encoded).encode("utf-8")
    try:
        return base64.b64decode(encoded, validate=False)
    except (ValueError, binascii.Error) as exc:
        raise PhotoLoadError("Data URI does not contain valid base64.") from exc


async def read_photo_bytes(photo: PhotoRef, http: httpx.AsyncClient | None = None) -> bytes:
    """Return the raw bytes behind a photo reference."""

    if photo.is_data_uri:
        return _decode_data_uri(photo.uri)

    if photo.is_remote:
        if http is None:
            raise PhotoLoadError(f"No HTTP client available to fetch {photo.uri}")
        try:
            response = await http.get(photo.uri)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise PhotoLoadError(f"Photo download failed with status {exc.response.status_code}") from exc
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            raise PhotoLoadError(f"Photo download failed: {exc}") from exc
        return response.content

    path = photo.local_path
    if path is None:
        raise PhotoLoadError(f"Unsupported photo reference: {photo.uri}")
    try:
        return await asyncio.to_thread(path.read_bytes)
    except OSError as exc:
        raise PhotoLoadError(f"Photo file {path} could not be read.") from exc


def encode_jpeg_base64(
    image_bytes: bytes,
    *,
    max_side: int = VISION_MAX_SIDE,
    quality: int = VISION_JPEG_QUALITY,
) -> str:
    """Downscale to fit ``max_side`` and return base64 JPEG suitable for vision prompts."""

    try:
        with Image.open(BytesIO(image_bytes)) as img:
            img = img.convert("RGB")
            img.thumbnail((max_side, max_side))
            buffer = BytesIO()
            img.save(buffer, format="JPEG", quality=quality)
    except (UnidentifiedImageError, OSError) as exc:
        raise PhotoLoadError("Photo is not a supported image.") from exc
    return base64.b64encode(buffer.getvalue()).decode("ascii")
