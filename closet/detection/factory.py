"""Construction-time selection of the detection provider."""

from __future__ import annotations

from typing import Callable

import httpx

from closet.api.clarifai_client import ClarifaiClient
from closet.api.openai_client import OpenAIClient
from closet.config.settings import ClosetSettings, ProviderKind
from closet.detection.base import DetectionProvider
from closet.detection.classifier import ClassifierDetector
from closet.detection.generative import GenerativeDetector
from closet.imggen.description import DescriptionStage


def _build_generative(
    settings: ClosetSettings,
    openai_client: OpenAIClient | None,
    clarifai_client: ClarifaiClient | None,
    http: httpx.AsyncClient | None,
) -> DetectionProvider:
    client = openai_client or OpenAIClient(settings)
    stage = DescriptionStage(client, max_items=settings.max_garments, model=settings.description_model)
    return GenerativeDetector(stage, http=http)


def _build_classifier(
    settings: ClosetSettings,
    openai_client: OpenAIClient | None,
    clarifai_client: ClarifaiClient | None,
    http: httpx.AsyncClient | None,
) -> DetectionProvider:
    client = clarifai_client or ClarifaiClient(settings)
    return ClassifierDetector(client, threshold=settings.concept_threshold, http=http)


_BUILDERS: dict[ProviderKind, Callable[..., DetectionProvider]] = {
    ProviderKind.GENERATIVE: _build_generative,
    ProviderKind.CLASSIFIER: _build_classifier,
}


def build_detection_provider(
    settings: ClosetSettings,
    *,
    openai_client: OpenAIClient | None = None,
    clarifai_client: ClarifaiClient | None = None,
    http: httpx.AsyncClient | None = None,
) -> DetectionProvider:
    """Return the provider named by ``settings.detection_provider``."""

    builder = _BUILDERS[ProviderKind(settings.detection_provider)]
    return builder(settings, openai_client, clarifai_client, http)


def default_credential(settings: ClosetSettings) -> str:
    """API key used when the caller does not pass one explicitly."""

    if ProviderKind(settings.detection_provider) is ProviderKind.CLASSIFIER:
        return settings.clarifai_api_key
    return settings.openai_api_key
