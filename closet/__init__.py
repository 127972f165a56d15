"""Digital closet: garment capture, image caching and wardrobe persistence."""

__version__ = "0.1.0"
