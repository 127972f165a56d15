"""Heuristics for time-limited provider image URLs."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from urllib.parse import parse_qs, urlparse

logger = logging.getLogger(__name__)

OPENAI_BLOB_HOST = "oaidalleapiprodscus.blob.core.windows.net"
TYPICAL_URL_LIFETIME = timedelta(hours=2)


@dataclass(slots=True, frozen=True)
class UrlStatus:
    valid: bool
    expired: bool
    message: str


def _parse_timestamp(raw: str) -> datetime:
    parsed = datetime.fromisoformat(raw.replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def is_url_likely_expired(url: str | None, *, now: datetime | None = None) -> bool:
    """Return ``True`` when a signed URL carries an expiry (``se``) or start time that has passed."""

    if not url:
        return True
    now = now or datetime.now(timezone.utc)
    try:
        parsed = urlparse(url)
        if not parsed.scheme or not parsed.netloc:
            return True
        params = parse_qs(parsed.query)

        expiry = params.get("se")
        if expiry:
            return _parse_timestamp(expiry[0]) < now

        if parsed.netloc == OPENAI_BLOB_HOST:
            if not params.get("sig"):
                return True
            start = params.get("st")
            if start:
                return now - _parse_timestamp(start[0]) > TYPICAL_URL_LIFETIME
    except ValueError as exc:
        logger.warning("Could not inspect URL expiry for %s: %s", url, exc)
        return True
    return False


def validate_image_url(url: str | None) -> UrlStatus:
    if not url:
        return UrlStatus(valid=False, expired=False, message="No image URL provided")
    if is_url_likely_expired(url):
        return UrlStatus(valid=False, expired=True, message="Image URL has expired")
    return UrlStatus(valid=True, expired=False, message="URL appears valid")
