"""States and result shapes of the garment pipeline."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Union

from closet.catalog.records import GarmentRecord


class PipelineState(str, Enum):
    """Finite states a photo moves through."""

    VALIDATING = "validating"
    DESCRIBING = "describing"
    GENERATING = "generating"
    CACHING = "caching"
    COMPLETED = "completed"
    FAILED = "failed"


class PipelineStage(str, Enum):
    """Stage names attached to failures."""

    PIPELINE = "pipeline"
    DESCRIBE = "describeGarmentImage"
    GENERATE = "generateGarmentImage"
    CACHE = "cacheGarmentImage"


@dataclass(slots=True)
class PipelineFailure:
    """Whole-photo failure; no candidates were produced."""

    message: str
    stage: PipelineStage
    error: bool = True


PipelineResult = Union[PipelineFailure, list[GarmentRecord]]
