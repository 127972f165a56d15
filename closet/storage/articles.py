"""Garment persistence backed by the local key-value store."""

from __future__ import annotations

import json
import logging
from typing import Any, Iterable, Mapping

from pydantic import ValidationError

from closet.catalog.records import GarmentRecord
from closet.storage.image_cache import LocalImageCache
from closet.storage.kvstore import KeyValueStore, StorageError, dumps

logger = logging.getLogger(__name__)

ARTICLES_KEY = "galleryArticles"


def parse_records(raw: str | None) -> list[GarmentRecord]:
    """Decode a stored collection, skipping entries that are not records."""

    if not raw:
        return []
    try:
        payload = json.loads(raw)
    except json.JSONDecodeError as exc:
        logger.error("Stored articles are not valid JSON: %s", exc)
        return []
    if not isinstance(payload, list):
        logger.error("Stored articles are not a list; ignoring %s", type(payload).__name__)
        return []

    records: list[GarmentRecord] = []
    for entry in payload:
        try:
            records.append(GarmentRecord.model_validate(entry))
        except ValidationError as exc:
            logger.error("Skipping unreadable article %r: %s", entry, exc)
    return records


def _as_record(value: GarmentRecord | Mapping[str, Any]) -> GarmentRecord:
    if isinstance(value, GarmentRecord):
        return value
    return GarmentRecord.model_validate(value)


class ArticleRepository:
    """Reads and writes the whole article collection on every operation.

    Reads and additions degrade to empty results on storage failures;
    deletions and wear-count updates raise.
    """

    def __init__(self, store: KeyValueStore, image_cache: LocalImageCache, *, key: str = ARTICLES_KEY) -> None:
        self._store = store
        self._image_cache = image_cache
        self._key = key

    @property
    def key(self) -> str:
        return self._key

    async def load(self) -> list[GarmentRecord]:
        """Return the stored collection; storage failures propagate."""

        return parse_records(await self._store.get_item(self._key))

    async def replace_all(self, records: Iterable[GarmentRecord]) -> None:
        body = dumps([record.to_storage() for record in records])
        await self._store.set_item(self._key, body)

    async def get_all(self, *, migrate_images: bool = False) -> list[GarmentRecord]:
        try:
            articles = await self.load()
        except StorageError as exc:
            logger.error("get_all failed: %s", exc)
            return []

        if not migrate_images or not articles:
            return articles

        logger.info("Migrating images for existing articles")
        migrated = await self._image_cache.migrate_all(articles)
        needs_saving = any(
            after.local_image_path != before.local_image_path for before, after in zip(articles, migrated)
        )
        if needs_saving:
            try:
                await self.replace_all(migrated)
                logger.info("Saved migrated articles")
            except StorageError as exc:
                logger.error("Could not save migrated articles: %s", exc)
        return migrated

    async def add(
        self,
        new_records: Iterable[GarmentRecord | Mapping[str, Any]],
        *,
        validate_image_fields: bool = True,
        migrate_images: bool = True,
    ) -> list[GarmentRecord]:
        """Append records whose ids are new; returns the resulting collection, or ``[]`` on failure."""

        try:
            existing = await self.load()
            seen = {record.id for record in existing}

            candidates: list[GarmentRecord] = []
            for value in new_records:
                try:
                    record = _as_record(value)
                except ValidationError as exc:
                    logger.error("Skipping invalid article %r: %s", value, exc)
                    continue
                if record.id in seen:
                    logger.info("Skipping article %s: id already stored", record.id)
                    continue
                seen.add(record.id)
                candidates.append(record)

            if validate_image_fields:
                kept: list[GarmentRecord] = []
                for record in candidates:
                    if record.has_image_field:
                        kept.append(record)
                    else:
                        logger.warning("Skipping article with ID %s due to missing image fields", record.id)
                candidates = kept

            if migrate_images:
                pending = sum(1 for record in candidates if record.needs_image_migration)
                if pending:
                    logger.info("Found %s articles needing image migration", pending)
                    candidates = [
                        await self._image_cache.migrate_one(record) if record.needs_image_migration else record
                        for record in candidates
                    ]

            combined = [*existing, *candidates]
            await self.replace_all(combined)
            return combined
        except StorageError as exc:
            logger.error("add failed: %s", exc)
            return []

    async def delete_by_ids(self, ids: Iterable[str]) -> list[GarmentRecord]:
        doomed = set(ids)
        existing = await self.load()
        remaining = [record for record in existing if record.id not in doomed]
        await self.replace_all(remaining)
        logger.info("Deleted %s article(s)", len(existing) - len(remaining))
        return remaining

    async def increment_wear_count(self, ids: Iterable[str]) -> list[GarmentRecord]:
        worn = set(ids)
        existing = await self.load()
        if not worn:
            logger.warning("increment_wear_count called without ids; nothing to update")
            return existing

        updated = [
            record.model_copy(update={"wear_count": record.wear_count + 1}) if record.id in worn else record
            for record in existing
        ]
        await self.replace_all(updated)
        logger.info("Incremented wear count for %s article(s)", sum(1 for record in existing if record.id in worn))
        return updated

    async def clear_all(self) -> None:
        await self._store.remove_item(self._key)
