"""Startup repairs over the stored wardrobe."""

from .runner import MigrationReport, MigrationResult, MigrationRunner

__all__ = ["MigrationReport", "MigrationResult", "MigrationRunner"]
