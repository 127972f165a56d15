"""Wardrobe categories and the clothing label vocabulary."""

from __future__ import annotations

from enum import Enum


class Category(str, Enum):
    """Closed set of wardrobe categories."""

    OUTERWEAR = "outerwear"
    TOPS = "tops"
    BOTTOMS = "bottoms"
    SHOES = "shoes"
    ACCESSORY = "accessory"
    OTHER = "other"


# Concept names the classifier may return that are worth keeping.
CLOTHING_CONCEPTS: frozenset[str] = frozenset(
    {
        "Jacket", "Jeans", "Footwear", "Shirt", "Pants", "Dress", "Skirt", "Shorts",
        "Coat", "Sweater", "T-shirt", "Blouse", "Suit", "Hat", "Scarf", "Glove",
        "Sock", "Hoodie", "Sweatshirt", "Tank top", "Vest", "Cardigan", "Boot",
        "Sandal", "Sneaker", "Shoe", "Tie", "Belt", "Cap", "Glasses", "Watch",
        "Bag", "Purse", "Backpack", "Handbag", "Clothing", "Fashion accessory",
    },
)

_LABEL_TO_CATEGORY: dict[str, Category] = {
    "jacket": Category.OUTERWEAR,
    "jackets": Category.OUTERWEAR,
    "coat": Category.OUTERWEAR,
    "blazer": Category.OUTERWEAR,
    "parka": Category.OUTERWEAR,
    "windbreaker": Category.OUTERWEAR,
    "vest": Category.OUTERWEAR,
    "cardigan": Category.OUTERWEAR,
    "shirt": Category.TOPS,
    "shirts": Category.TOPS,
    "t-shirt": Category.TOPS,
    "t-shirts": Category.TOPS,
    "tee": Category.TOPS,
    "tees": Category.TOPS,
    "blouse": Category.TOPS,
    "blouses": Category.TOPS,
    "sweater": Category.TOPS,
    "sweaters": Category.TOPS,
    "sweatshirt": Category.TOPS,
    "hoodie": Category.TOPS,
    "hoodies": Category.TOPS,
    "tank top": Category.TOPS,
    "tank tops": Category.TOPS,
    "polo": Category.TOPS,
    "polos": Category.TOPS,
    "pants": Category.BOTTOMS,
    "jeans": Category.BOTTOMS,
    "trousers": Category.BOTTOMS,
    "shorts": Category.BOTTOMS,
    "skirt": Category.BOTTOMS,
    "skirts": Category.BOTTOMS,
    "leggings": Category.BOTTOMS,
    "shoes": Category.SHOES,
    "shoe": Category.SHOES,
    "sneaker": Category.SHOES,
    "sneakers": Category.SHOES,
    "boot": Category.SHOES,
    "boots": Category.SHOES,
    "loafer": Category.SHOES,
    "loafers": Category.SHOES,
    "sandals": Category.SHOES,
    "sandal": Category.SHOES,
    "heel": Category.SHOES,
    "heels": Category.SHOES,
    "footwear": Category.SHOES,
    "accessory": Category.ACCESSORY,
    "accessories": Category.ACCESSORY,
    "fashion accessory": Category.ACCESSORY,
    "hat": Category.ACCESSORY,
    "cap": Category.ACCESSORY,
    "scarf": Category.ACCESSORY,
    "glove": Category.ACCESSORY,
    "belt": Category.ACCESSORY,
    "tie": Category.ACCESSORY,
    "bag": Category.ACCESSORY,
    "purse": Category.ACCESSORY,
    "handbag": Category.ACCESSORY,
    "backpack": Category.ACCESSORY,
    "glasses": Category.ACCESSORY,
    "watch": Category.ACCESSORY,
    # generic label
    "clothing": Category.TOPS,
}


def map_label_to_category(label: str | None) -> Category:
    """Map a detector or model label onto a wardrobe category."""

    if isinstance(label, Category):
        return label
    if not label:
        return Category.OTHER
    normalized = label.strip().lower()
    try:
        return Category(normalized)
    except ValueError:
        return _LABEL_TO_CATEGORY.get(normalized, Category.OTHER)


def is_clothing_concept(name: str) -> bool:
    return name in CLOTHING_CONCEPTS
