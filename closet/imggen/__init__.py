"""Description and image generation stages."""

from .description import (
    ClothingItem,
    DescriptionOutcome,
    DescriptionRequestError,
    DescriptionStage,
    DescriptionStatus,
    decode_clothing_items,
)
from .generation import ImageGenerationError, ImageGenerationStage
from .prompt_builder import PromptBuilder

__all__ = [
    "ClothingItem",
    "DescriptionOutcome",
    "DescriptionRequestError",
    "DescriptionStage",
    "DescriptionStatus",
    "ImageGenerationError",
    "ImageGenerationStage",
    "PromptBuilder",
    "decode_clothing_items",
]
