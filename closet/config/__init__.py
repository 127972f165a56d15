"""Configuration helpers."""

from .settings import ClosetSettings, ProviderKind, get_settings

__all__ = ["ClosetSettings", "ProviderKind", "get_settings"]
