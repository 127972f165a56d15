"""Tests for garment/outfit record models."""

from __future__ import annotations

from closet.catalog import Category, GarmentRecord, OutfitRecord, coerce_wear_count, map_label_to_category


def test_display_image_prefers_local_copy_over_remote_url() -> None:
    record = GarmentRecord(
        id="a",
        local_image_path="/images/a.jpg",
        remote_image_url="https://example.test/a.png",
    )

    assert record.display_image == "/images/a.jpg"


def test_display_image_fallback_order() -> None:
    assert GarmentRecord(id="1", cropped_image_path="crop.jpg", original_image_path="photo.jpg").display_image == "crop.jpg"
    assert GarmentRecord(id="2", original_image_path="photo.jpg", remote_image_url="https://x.test/y").display_image == "photo.jpg"
    assert GarmentRecord(id="3", remote_image_url="https://x.test/y").display_image == "https://x.test/y"
    assert GarmentRecord(id="4").display_image is None


def test_storage_shape_is_camel_case_and_keeps_unknown_keys() -> None:
    record = GarmentRecord.model_validate(
        {"id": "a", "remoteImageUrl": "https://x.test/a", "wearCount": 2, "favourite": True},
    )

    stored = record.to_storage()

    assert stored == {
        "id": "a",
        "category": "other",
        "remoteImageUrl": "https://x.test/a",
        "wearCount": 2,
        "favourite": True,
    }


def test_legacy_image_keys_are_read() -> None:
    record = GarmentRecord.model_validate(
        {"id": "old", "imageUrl": "https://x.test/old", "localImageUri": "/images/old.jpg", "imageUri": "photo.jpg"},
    )

    assert record.remote_image_url == "https://x.test/old"
    assert record.local_image_path == "/images/old.jpg"
    assert record.original_image_path == "photo.jpg"
    assert "imageUrl" not in record.to_storage()


def test_wear_count_coercion() -> None:
    assert coerce_wear_count(None) == 0
    assert coerce_wear_count("3") == 0
    assert coerce_wear_count(True) == 0
    assert coerce_wear_count(-2) == 0
    assert coerce_wear_count(4.0) == 4
    assert GarmentRecord.model_validate({"id": "a", "wearCount": "lots"}).wear_count == 0


def test_needs_image_migration() -> None:
    assert GarmentRecord(id="a", remote_image_url="https://x.test/a").needs_image_migration
    assert not GarmentRecord(id="a", remote_image_url="https://x.test/a", local_image_path="/a.jpg").needs_image_migration
    assert not GarmentRecord(id="a", original_image_path="photo.jpg").needs_image_migration


def test_category_mapping() -> None:
    assert map_label_to_category("Jacket") is Category.OUTERWEAR
    assert map_label_to_category(" jeans ") is Category.BOTTOMS
    assert map_label_to_category("Footwear") is Category.SHOES
    assert map_label_to_category("Handbag") is Category.ACCESSORY
    assert map_label_to_category("tops") is Category.TOPS
    assert map_label_to_category("dress") is Category.OTHER
    assert map_label_to_category(None) is Category.OTHER
    assert GarmentRecord.model_validate({"id": "a", "category": "shirt"}).category is Category.TOPS


def test_outfit_article_ids_are_deduplicated_in_order() -> None:
    outfit = OutfitRecord(name="Friday", article_ids=["b", "a", "b", "c"])

    assert outfit.article_ids == ["b", "a", "c"]
    assert outfit.wear_count == 0
    assert "lastWornAt" not in outfit.to_storage()
