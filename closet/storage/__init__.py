"""Local persistence: key-value store, image cache and repositories."""

from .articles import ARTICLES_KEY, ArticleRepository
from .image_cache import CacheError, ImageMigration, LocalImageCache
from .kvstore import KeyValueStore, StorageError
from .outfits import OUTFITS_KEY, OutfitRepository, OutfitValidationError, WearResult

__all__ = [
    "ARTICLES_KEY",
    "ArticleRepository",
    "CacheError",
    "ImageMigration",
    "KeyValueStore",
    "LocalImageCache",
    "OUTFITS_KEY",
    "OutfitRepository",
    "OutfitValidationError",
    "StorageError",
    "WearResult",
]
