"""Runs every startup migration and aggregates their results."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from functools import partial
from typing import Awaitable, Callable

from closet.migrations.tasks import migrate_legacy_image_fields, migrate_local_images, migrate_wear_count
from closet.storage.articles import ARTICLES_KEY
from closet.storage.image_cache import LocalImageCache
from closet.storage.kvstore import KeyValueStore

logger = logging.getLogger(__name__)

Migration = Callable[[], Awaitable[tuple[int, int]]]


@dataclass(slots=True)
class MigrationResult:
    """Structured result describing one migration."""

    name: str
    success: bool
    migrated_count: int = 0
    total_count: int = 0
    error: str | None = None


@dataclass(slots=True)
class MigrationReport:
    success: bool
    migrations: list[MigrationResult] = field(default_factory=list)


async def _run_migration(name: str, migration: Migration) -> MigrationResult:
    try:
        migrated, total = await migration()
    except Exception as exc:
        logger.exception("Migration %s failed", name)
        return MigrationResult(name=name, success=False, error=str(exc) or type(exc).__name__)

    logger.info("Migration %s: %s of %s record(s) updated", name, migrated, total)
    return MigrationResult(name=name, success=True, migrated_count=migrated, total_count=total)


class MigrationRunner:
    """Applies the startup migrations to the stored article collection, in order."""

    def __init__(self, store: KeyValueStore, image_cache: LocalImageCache, *, key: str = ARTICLES_KEY) -> None:
        self._migrations: list[tuple[str, Migration]] = [
            ("legacy-image-fields", partial(migrate_legacy_image_fields, store, key)),
            ("wear-count", partial(migrate_wear_count, store, key)),
            ("local-images", partial(migrate_local_images, store, key, image_cache)),
        ]

    @property
    def names(self) -> list[str]:
        return [name for name, _ in self._migrations]

    async def run(self) -> MigrationReport:
        """Run all migrations sequentially; they share one stored collection."""

        results = [await _run_migration(name, migration) for name, migration in self._migrations]
        report = MigrationReport(success=all(result.success for result in results), migrations=results)
        if not report.success:
            logger.warning("Some migrations failed: %s", [r.name for r in results if not r.success])
        return report
