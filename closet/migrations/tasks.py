"""Individual migrations over the raw stored article collection.

Each task returns ``(migrated_count, total_count)`` and writes back only when
it changed at least one record, so running it twice is a no-op the second
time.
"""

from __future__ import annotations

import json
import logging
from typing import Any

from pydantic import ValidationError

from closet.catalog.records import LEGACY_IMAGE_FIELDS, GarmentRecord, coerce_wear_count
from closet.imaging.urls import is_url_likely_expired
from closet.storage.image_cache import CacheError, ImageMigration, LocalImageCache
from closet.storage.kvstore import KeyValueStore, dumps

logger = logging.getLogger(__name__)


class MigrationError(RuntimeError):
    """Raised when stored data cannot be migrated safely."""


async def load_raw(store: KeyValueStore, key: str) -> list[Any]:
    raw = await store.get_item(key)
    if not raw:
        return []
    try:
        payload = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise MigrationError(f"{key} is not valid JSON; refusing to rewrite it") from exc
    if not isinstance(payload, list):
        raise MigrationError(f"{key} does not hold a list")
    return payload


async def migrate_legacy_image_fields(store: KeyValueStore, key: str) -> tuple[int, int]:
    """Rename image keys written by older app versions."""

    entries = await load_raw(store, key)
    migrated = 0
    for entry in entries:
        if not isinstance(entry, dict):
            continue
        changed = False
        for legacy, current in LEGACY_IMAGE_FIELDS.items():
            if legacy not in entry:
                continue
            value = entry.pop(legacy)
            if value and not entry.get(current):
                entry[current] = value
            changed = True
        migrated += changed

    if migrated:
        await store.set_item(key, dumps(entries))
    return migrated, len(entries)


async def migrate_wear_count(store: KeyValueStore, key: str) -> tuple[int, int]:
    """Give every record a numeric, non-negative ``wearCount``."""

    entries = await load_raw(store, key)
    migrated = 0
    for entry in entries:
        if not isinstance(entry, dict):
            continue
        current = entry.get("wearCount")
        coerced = coerce_wear_count(current)
        if "wearCount" in entry and type(current) is int and current == coerced:
            continue
        entry["wearCount"] = coerced
        migrated += 1

    if migrated:
        await store.set_item(key, dumps(entries))
    return migrated, len(entries)


async def _migrate_image(image_cache: LocalImageCache, record: GarmentRecord) -> ImageMigration:
    if record.local_image_path and await image_cache.check_image_exists(record.local_image_path):
        return ImageMigration(record)
    # expired URLs are given up on without a request
    if is_url_likely_expired(record.remote_image_url):
        error = CacheError(f"Image URL for article {record.id} has expired", expired=True)
        logger.warning("%s", error)
        return ImageMigration(record, error=error)
    return await image_cache.try_migrate(record)


async def migrate_local_images(store: KeyValueStore, key: str, image_cache: LocalImageCache) -> tuple[int, int]:
    """Download a local copy for every remote-only record.

    Records whose URL failed permanently (expired, or a 4xx answer) lose
    their ``remoteImageUrl`` so later launches stop retrying them; transient
    failures are left for the next launch.
    """

    entries = await load_raw(store, key)
    await image_cache.ensure_storage_ready()
    migrated = 0
    for entry in entries:
        if not isinstance(entry, dict):
            continue
        try:
            record = GarmentRecord.model_validate(entry)
        except ValidationError:
            logger.warning("Skipping unreadable article during image migration: %r", entry)
            continue
        if not record.remote_image_url:
            continue

        outcome = await _migrate_image(image_cache, record)
        if outcome.changed:
            entry["localImagePath"] = outcome.record.local_image_path
            migrated += 1
        elif outcome.error is not None and outcome.error.permanent:
            logger.warning("Giving up on remote image for article %s: %s", record.id, outcome.error)
            entry.pop("remoteImageUrl", None)
            entry.pop("imageUrl", None)
            migrated += 1

    if migrated:
        await store.set_item(key, dumps(entries))
    return migrated, len(entries)
