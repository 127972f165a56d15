"""Photo loading, cropping and image URL helpers."""

from .crop import crop_bounding_box
from .photos import PhotoLoadError, PhotoRef, encode_jpeg_base64, read_photo_bytes
from .urls import is_url_likely_expired, validate_image_url

__all__ = [
    "PhotoLoadError",
    "PhotoRef",
    "crop_bounding_box",
    "encode_jpeg_base64",
    "is_url_likely_expired",
    "read_photo_bytes",
    "validate_image_url",
]
