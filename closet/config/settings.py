"""Settings loader for the closet pipeline."""

from __future__ import annotations

import os
from dataclasses import dataclass
from enum import Enum
from functools import lru_cache
from pathlib import Path

from closet.config.env import load_env_file


class ProviderKind(str, Enum):
    """Available garment detection providers."""

    GENERATIVE = "generative"
    CLASSIFIER = "classifier"


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def _env_timeout(name: str) -> float | None:
    raw = os.getenv(name, "").strip()
    if not raw:
        return None
    return float(raw)


@dataclass(slots=True, frozen=True)
class ClosetSettings:
    """Settings required by the detection pipeline and local storage."""

    openai_api_key: str = ""
    openai_base_url: str = "https://api.openai.com/v1"
    description_model: str = "gpt-4o-mini"
    image_model: str = "dall-e-2"
    image_size: str = "512x512"

    clarifai_api_key: str = ""
    clarifai_user_id: str = "clarifai"
    clarifai_app_id: str = "main"
    clarifai_model_id: str = "apparel-detection"
    clarifai_model_version_id: str = ""
    clarifai_base_url: str = "https://api.clarifai.com"

    detection_provider: ProviderKind = ProviderKind.GENERATIVE
    concept_threshold: float = 0.3
    max_garments: int = 4
    concurrent_generation: bool = True

    storage_root: str = "storage"
    request_timeout: float | None = None
    log_level: str = "INFO"

    @property
    def images_dir(self) -> Path:
        return Path(self.storage_root) / "images"

    @property
    def kv_dir(self) -> Path:
        return Path(self.storage_root) / "kv"


def _build_settings() -> ClosetSettings:
    load_env_file(os.getenv("CLOSET_ENV_FILE", ".env"))
    return ClosetSettings(
        openai_api_key=os.getenv("OPENAI_API_KEY", ""),
        openai_base_url=os.getenv("OPENAI_BASE_URL", "https://api.openai.com/v1"),
        description_model=os.getenv("CLOSET_DESCRIPTION_MODEL", "gpt-4o-mini"),
        image_model=os.getenv("CLOSET_IMAGE_MODEL", "dall-e-2"),
        image_size=os.getenv("CLOSET_IMAGE_SIZE", "512x512"),
        clarifai_api_key=os.getenv("CLARIFAI_API_KEY", ""),
        clarifai_user_id=os.getenv("CLARIFAI_USER_ID", "clarifai"),
        clarifai_app_id=os.getenv("CLARIFAI_APP_ID", "main"),
        clarifai_model_id=os.getenv("CLARIFAI_MODEL_ID", "apparel-detection"),
        clarifai_model_version_id=os.getenv("CLARIFAI_MODEL_VERSION_ID", ""),
        clarifai_base_url=os.getenv("CLARIFAI_BASE_URL", "https://api.clarifai.com"),
        detection_provider=ProviderKind(os.getenv("CLOSET_DETECTION_PROVIDER", "generative").strip().lower()),
        concept_threshold=float(os.getenv("CLOSET_CONCEPT_THRESHOLD", "0.3")),
        max_garments=int(os.getenv("CLOSET_MAX_GARMENTS", "4")),
        concurrent_generation=_env_bool("CLOSET_CONCURRENT_GENERATION", True),
        storage_root=os.getenv("CLOSET_STORAGE_ROOT", "storage"),
        request_timeout=_env_timeout("CLOSET_REQUEST_TIMEOUT"),
        log_level=os.getenv("LOG_LEVEL", "INFO"),
    )


@lru_cache(maxsize=1)
def get_settings() -> ClosetSettings:
    """Return cached settings instance."""

    return _build_settings()
