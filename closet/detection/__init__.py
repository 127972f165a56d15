"""Garment detection providers."""

from .base import (
    DetectionError,
    DetectionProvider,
    GarmentCandidate,
    MissingCredentialError,
    NoGarmentsDetectedError,
)

__all__ = [
    "DetectionError",
    "DetectionProvider",
    "GarmentCandidate",
    "MissingCredentialError",
    "NoGarmentsDetectedError",
]
