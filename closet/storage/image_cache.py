"""Durable local copies of provider-hosted images.

Provider URLs expire after a few hours, so every record that points at a
remote image should also carry a file under the images directory.
"""

from __future__ import annotations

import asyncio
import logging
import os
import uuid
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable

import httpx

from closet.catalog.records import GarmentRecord

logger = logging.getLogger(__name__)

DEFAULT_EXTENSION = ".jpg"
_TRANSIENT_CLIENT_STATUSES = {408, 425, 429}


class CacheError(RuntimeError):
    """Raised when a remote image could not be stored locally."""

    def __init__(self, message: str, status_code: int | None = None, *, expired: bool = False) -> None:
        self.status_code = status_code
        self.expired = expired
        super().__init__(message)

    @property
    def permanent(self) -> bool:
        """Whether retrying the same URL is pointless."""

        if self.expired:
            return True
        if self.status_code is None:
            return False
        return 400 <= self.status_code < 500 and self.status_code not in _TRANSIENT_CLIENT_STATUSES


@dataclass(slots=True)
class ImageMigration:
    """Result of trying to give one record a local image copy."""

    record: GarmentRecord
    changed: bool = False
    error: CacheError | None = None


class LocalImageCache:
    """Downloads remote images into ``images_dir`` exactly once."""

    def __init__(self, images_dir: Path, *, http: httpx.AsyncClient | None = None, timeout: float | None = None) -> None:
        self._images_dir = images_dir
        self._http = http or httpx.AsyncClient(timeout=timeout, follow_redirects=True)

    @property
    def images_dir(self) -> Path:
        return self._images_dir

    async def close(self) -> None:
        await self._http.aclose()

    async def ensure_storage_ready(self) -> None:
        """Create the images directory if it does not exist yet."""

        if not self._images_dir.exists():
            logger.info("Creating images directory %s", self._images_dir)
        await asyncio.to_thread(self._images_dir.mkdir, parents=True, exist_ok=True)

    def resolve_path(self, suggested_name: str | None = None) -> Path:
        name = Path(suggested_name).name if suggested_name else ""
        if not name:
            name = f"{uuid.uuid4().hex}{DEFAULT_EXTENSION}"
        return self._images_dir / name

    async def download_and_cache(self, remote_url: str, suggested_name: str | None = None) -> Path:
        """Store ``remote_url`` locally and return the file path."""

        if not remote_url:
            raise CacheError("No image URL provided")

        await self.ensure_storage_ready()
        local_path = self.resolve_path(suggested_name)
        if await asyncio.to_thread(local_path.exists):
            logger.debug("Image already cached at %s", local_path)
            return local_path

        logger.info("Downloading image from %s", remote_url)
        try:
            response = await self._http.get(remote_url)
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            raise CacheError(f"Failed to download image: {exc}") from exc
        if not response.is_success:
            raise CacheError(f"Failed to download image: {response.status_code}", status_code=response.status_code)

        try:
            await asyncio.to_thread(self._write_atomic, local_path, response.content)
        except OSError as exc:
            raise CacheError(f"Failed to save image to {local_path}: {exc}") from exc
        logger.info("Image saved to %s", local_path)
        return local_path

    @staticmethod
    def _write_atomic(path: Path, body: bytes) -> None:
        part_path = path.with_name(f"{path.name}.part")
        try:
            part_path.write_bytes(body)
            os.replace(part_path, path)
        finally:
            part_path.unlink(missing_ok=True)

    async def check_image_exists(self, local_path: str | None) -> bool:
        if not local_path:
            return False
        try:
            return await asyncio.to_thread(Path(local_path).is_file)
        except OSError as exc:
            logger.error("Error checking if image exists at %s: %s", local_path, exc)
            return False

    async def delete_local_image(self, local_path: str | None) -> bool:
        if not local_path:
            return False
        path = Path(local_path)
        try:
            if not await asyncio.to_thread(path.is_file):
                return False
            await asyncio.to_thread(path.unlink)
        except OSError as exc:
            logger.error("Error deleting image %s: %s", local_path, exc)
            return False
        logger.info("Deleted image at %s", local_path)
        return True

    async def try_migrate(self, record: GarmentRecord) -> ImageMigration:
        """Attach a local copy of the record's remote image when one is missing."""

        if record.local_image_path and await self.check_image_exists(record.local_image_path):
            return ImageMigration(record)
        if not record.remote_image_url:
            return ImageMigration(record)

        try:
            local_path = await self.download_and_cache(record.remote_image_url)
        except CacheError as exc:
            logger.error("Failed to migrate image for article %s: %s", record.id, exc)
            return ImageMigration(record, error=exc)
        return ImageMigration(record.model_copy(update={"local_image_path": str(local_path)}), changed=True)

    async def migrate_one(self, record: GarmentRecord) -> GarmentRecord:
        """Return the record with a local image path, or unchanged if that failed."""

        return (await self.try_migrate(record)).record

    async def migrate_all(self, records: Iterable[GarmentRecord]) -> list[GarmentRecord]:
        records = list(records)
        logger.info("Migrating images for %s articles", len(records))
        migrated: list[GarmentRecord] = []
        for record in records:
            migrated.append(await self.migrate_one(record))
        return migrated
