"""Wardrobe vocabulary and record models."""

from .categories import CLOTHING_CONCEPTS, Category, is_clothing_concept, map_label_to_category
from .records import BoundingBox, GarmentRecord, OutfitRecord, coerce_wear_count

__all__ = [
    "BoundingBox",
    "CLOTHING_CONCEPTS",
    "Category",
    "GarmentRecord",
    "OutfitRecord",
    "coerce_wear_count",
    "is_clothing_concept",
    "map_label_to_category",
]
