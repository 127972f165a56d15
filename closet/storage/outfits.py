"""Outfit persistence and wear tracking."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Iterable

from pydantic import ValidationError

from closet.catalog.records import OutfitRecord
from closet.storage.articles import ArticleRepository
from closet.storage.kvstore import KeyValueStore, StorageError, dumps

logger = logging.getLogger(__name__)

OUTFITS_KEY = "OUTFITS"


class OutfitValidationError(ValueError):
    """Raised when an outfit cannot be created from the given input."""


@dataclass(slots=True)
class WearResult:
    """Outcome of marking an outfit as worn."""

    success: bool
    articles_updated: int
    outfit: OutfitRecord | None = None
    error: str | None = None


class OutfitRepository:
    """Stores outfits under their own key, next to the article collection."""

    def __init__(self, store: KeyValueStore, articles: ArticleRepository, *, key: str = OUTFITS_KEY) -> None:
        self._store = store
        self._articles = articles
        self._key = key

    async def _load(self) -> list[OutfitRecord]:
        raw = await self._store.get_item(self._key)
        if not raw:
            return []
        try:
            payload = json.loads(raw)
        except json.JSONDecodeError as exc:
            logger.error("Stored outfits are not valid JSON: %s", exc)
            return []
        if not isinstance(payload, list):
            return []
        outfits: list[OutfitRecord] = []
        for entry in payload:
            try:
                outfits.append(OutfitRecord.model_validate(entry))
            except ValidationError as exc:
                logger.error("Skipping unreadable outfit %r: %s", entry, exc)
        return outfits

    async def _save(self, outfits: Iterable[OutfitRecord]) -> None:
        await self._store.set_item(self._key, dumps([outfit.to_storage() for outfit in outfits]))

    async def create(self, name: str, article_ids: Iterable[str]) -> OutfitRecord:
        ids = list(article_ids or [])
        if not ids:
            raise OutfitValidationError("Select at least 1 article to create an outfit.")
        trimmed = (name or "").strip()
        if not trimmed:
            raise OutfitValidationError("Outfit name cannot be empty.")

        existing = await self._load()
        outfit = OutfitRecord(name=trimmed, article_ids=ids)
        await self._save([outfit, *existing])
        logger.info("Saved outfit %s with %s article(s)", outfit.id, len(outfit.article_ids))
        return outfit

    async def list_all(self) -> list[OutfitRecord]:
        try:
            outfits = await self._load()
        except StorageError as exc:
            logger.error("Error getting outfits: %s", exc)
            return []
        logger.debug("Found %s outfits in storage", len(outfits))
        return outfits

    async def get(self, outfit_id: str) -> OutfitRecord | None:
        for outfit in await self.list_all():
            if outfit.id == outfit_id:
                return outfit
        return None

    async def delete(self, outfit_id: str) -> list[OutfitRecord]:
        outfits = await self._load()
        remaining = [outfit for outfit in outfits if outfit.id != outfit_id]
        await self._save(remaining)
        return remaining

    async def mark_worn(self, outfit_id: str) -> WearResult:
        """Increment the wear count of the outfit and of every article in it.

        If the outfit cannot be saved after the articles were updated, the
        article collection is restored before the error propagates.
        """

        logger.info("Marking outfit %s as worn", outfit_id)
        outfits = await self._load()
        outfit = next((item for item in outfits if item.id == outfit_id), None)
        if outfit is None:
            logger.error("Outfit with ID %s not found", outfit_id)
            return WearResult(success=False, articles_updated=0, error="Outfit not found")
        if not outfit.article_ids:
            logger.warning("Outfit %s has no articles", outfit_id)
            return WearResult(success=True, articles_updated=0, outfit=outfit)

        snapshot = await self._articles.load()
        worn_ids = set(outfit.article_ids)
        articles_updated = sum(1 for article in snapshot if article.id in worn_ids)
        await self._articles.increment_wear_count(outfit.article_ids)

        worn = outfit.model_copy(
            update={"wear_count": outfit.wear_count + 1, "last_worn_at": datetime.now(timezone.utc)},
        )
        try:
            await self._save([worn if item.id == outfit_id else item for item in outfits])
        except StorageError:
            logger.error("Could not save outfit %s; restoring article wear counts", outfit_id)
            await self._articles.replace_all(snapshot)
            raise

        logger.info("Marked outfit %s as worn, updated %s articles", outfit_id, articles_updated)
        return WearResult(success=True, articles_updated=articles_updated, outfit=worn)
