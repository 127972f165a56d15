"""Vision description step: photo in, structured garment list out."""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator

from closet.api.errors import ProviderRequestError
from closet.api.openai_client import OpenAIClient
from closet.detection.base import DetectionError, MissingCredentialError
from closet.imggen.prompt_builder import PromptBuilder

logger = logging.getLogger(__name__)

MAX_DESCRIPTION_WORDS = 6
_FENCE_RE = re.compile(r"^```[a-zA-Z]*\s*\n?(.*?)\n?\s*```\s*$", re.DOTALL)


class DescriptionRequestError(DetectionError):
    """Raised when the description request itself fails."""


class ClothingItem(BaseModel):
    """One garment as described by the vision model."""

    model_config = ConfigDict(extra="ignore")

    id: int | str | None = None
    description: str
    category: str = "other"
    color: str | None = None

    @field_validator("description")
    @classmethod
    def _limit_words(cls, value: str) -> str:
        words = value.split()
        if not words:
            raise ValueError("description must not be empty")
        return " ".join(words[:MAX_DESCRIPTION_WORDS])

    @field_validator("category", mode="before")
    @classmethod
    def _normalise_category(cls, value: Any) -> str:
        return str(value).strip().lower() if value else "other"


class DescriptionStatus(str, Enum):
    OK = "ok"
    NO_ITEMS = "no_items"
    PARSE_ERROR = "parse_error"


@dataclass(slots=True)
class DescriptionOutcome:
    """Decoded model output; never raised, always inspected."""

    status: DescriptionStatus
    items: list[ClothingItem] = field(default_factory=list)
    detail: str | None = None

    @property
    def ok(self) -> bool:
        return self.status is DescriptionStatus.OK

    @property
    def message(self) -> str:
        if self.status is DescriptionStatus.NO_ITEMS:
            return "No clothing items detected in the image."
        if self.status is DescriptionStatus.PARSE_ERROR:
            return f"Could not read clothing items from the model response: {self.detail}"
        return f"{len(self.items)} clothing item(s) detected."


def strip_code_fences(content: str) -> str:
    stripped = content.strip()
    match = _FENCE_RE.match(stripped)
    if match:
        return match.group(1).strip()
    return stripped


def decode_clothing_items(content: str | None, *, max_items: int = 4) -> DescriptionOutcome:
    """Validate raw model text against the ``clothingItems`` schema."""

    if content is None:
        return DescriptionOutcome(DescriptionStatus.PARSE_ERROR, detail="response had no text content")

    body = strip_code_fences(content)
    try:
        parsed = json.loads(body)
    except json.JSONDecodeError as exc:
        return DescriptionOutcome(DescriptionStatus.PARSE_ERROR, detail=f"invalid JSON ({exc.msg})")

    if isinstance(parsed, dict):
        parsed = parsed.get("clothingItems")
    if not isinstance(parsed, list):
        return DescriptionOutcome(DescriptionStatus.PARSE_ERROR, detail="clothingItems is not an array")
    if not parsed:
        return DescriptionOutcome(DescriptionStatus.NO_ITEMS)

    items: list[ClothingItem] = []
    for entry in parsed:
        try:
            items.append(ClothingItem.model_validate(entry))
        except ValidationError as exc:
            logger.warning("Dropping unusable clothing item %r: %s", entry, exc)
    if not items:
        return DescriptionOutcome(DescriptionStatus.NO_ITEMS)

    if len(items) > max_items:
        logger.warning("Model returned %s items, keeping the first %s", len(items), max_items)
        items = items[:max_items]
    return DescriptionOutcome(DescriptionStatus.OK, items=items)


class DescriptionStage:
    """Asks the vision model for up to ``max_items`` garment descriptions."""

    def __init__(
        self,
        client: OpenAIClient,
        *,
        max_items: int = 4,
        model: str | None = None,
        prompt_builder: PromptBuilder | None = None,
    ) -> None:
        self._client = client
        self._max_items = max_items
        self._model = model
        self._prompt = (prompt_builder or PromptBuilder()).description_prompt(max_items=max_items)

    async def describe(self, image_base64: str, *, api_key: str | None) -> DescriptionOutcome:
        if not api_key:
            raise MissingCredentialError("Missing OpenAI API key")

        try:
            content = await self._client.chat_completion(
                self._prompt.messages(image_base64),
                api_key=api_key,
                model=self._model,
            )
        except ProviderRequestError as exc:
            logger.error("Description request failed: %s", exc)
            raise DescriptionRequestError(str(exc), status_code=exc.status_code) from exc

        outcome = decode_clothing_items(content, max_items=self._max_items)
        if outcome.status is DescriptionStatus.PARSE_ERROR:
            logger.error("Failed to parse model JSON (%s): %r", outcome.detail, content)
        elif outcome.status is DescriptionStatus.NO_ITEMS:
            logger.warning("No clothing items detected in the image.")
        else:
            logger.info("Model described %s garment(s)", len(outcome.items))
        return outcome
