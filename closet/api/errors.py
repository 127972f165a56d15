"""Errors shared by the provider clients."""

from __future__ import annotations


class ProviderRequestError(RuntimeError):
    """Raised when a provider responds with an error status or cannot be reached."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        self.status_code = status_code
        super().__init__(message)
