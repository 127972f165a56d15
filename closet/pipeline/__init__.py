"""Garment capture pipeline."""

from .orchestrator import GarmentPipeline
from .stages import PipelineFailure, PipelineResult, PipelineStage, PipelineState

__all__ = ["GarmentPipeline", "PipelineFailure", "PipelineResult", "PipelineStage", "PipelineState"]
