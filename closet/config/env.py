"""Parsing of ``.env`` files into the process environment."""

from __future__ import annotations

import os
from pathlib import Path

_QUOTES = ('"', "'")


def _unquote(value: str) -> str:
    if len(value) >= 2 and value[0] == value[-1] and value[0] in _QUOTES:
        return value[1:-1]
    return value.split(" #", 1)[0].rstrip()


def read_env_file(path: str | Path) -> dict[str, str]:
    """Return ``KEY=value`` pairs from ``path``; a missing file yields ``{}``.

    Blank lines and ``#`` comments are skipped, an ``export`` prefix is
    accepted and matching single or double quotes around a value are removed.
    """

    env_path = Path(path)
    if not env_path.is_file():
        return {}

    values: dict[str, str] = {}
    for line in env_path.read_text(encoding="utf-8").splitlines():
        stripped = line.strip()
        if stripped.startswith("export "):
            stripped = stripped[len("export "):].lstrip()
        if not stripped or stripped.startswith("#") or "=" not in stripped:
            continue
        key, value = stripped.split("=", 1)
        key = key.strip()
        if key:
            values[key] = _unquote(value.strip())
    return values


def load_env_file(path: str | Path = ".env") -> dict[str, str]:
    """Copy values from ``path`` into ``os.environ`` without overriding set variables.

    Returns the pairs that were actually applied.
    """

    applied: dict[str, str] = {}
    for key, value in read_env_file(path).items():
        if key not in os.environ:
            os.environ[key] = value
            applied[key] = value
    return applied
