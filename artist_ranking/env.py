"""Environment helper utilities for API access."""
from __future__ import annotations

import os
from pathlib import Path
from typing import Dict, Iterable, Optional

from .errors import CredentialConfigurationError

ALIAS_KEY_MAP = {
    "spotify developer id": "SPOTIFY_CLIENT_ID",
    "spotify client id": "SPOTIFY_CLIENT_ID",
    "client id": "SPOTIFY_CLIENT_ID",
    "secret": "SPOTIFY_CLIENT_SECRET",
    "spotify secret": "SPOTIFY_CLIENT_SECRET",
    "client secret": "SPOTIFY_CLIENT_SECRET",
}


def load_env(path: Optional[Path] = None) -> Dict[str, str]:
    """Load environment variables from a .env file, returning a mapping.

    The file is expected to contain KEY=VALUE pairs. Existing os.environ takes
    precedence, but values from the file are also exported for downstream use.
    """

    env_path = Path(path) if path else Path(__file__).resolve().parent.parent / ".env"
    values: Dict[str, str] = {}
    if not env_path.exists():
        return values

    for raw_line in env_path.read_text().splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        if "=" in line:
            key, raw_value = line.split("=", 1)
            _store(values, key, raw_value)
            continue

        # Support colon-separated entries and multi-pairs per line
        segments = [segment.strip() for segment in line.split(",") if segment.strip()]
        for segment in segments:
            if ":" not in segment:
                continue
            key, raw_value = segment.split(":", 1)
            _store(values, key, raw_value)
    return values


def require(keys: Iterable[str]) -> Dict[str, str]:
    """Return the named variables, raising if any is missing or empty."""

    names = list(keys)
    missing = [name for name in names if not os.environ.get(name)]
    if missing:
        raise CredentialConfigurationError(
            f"Missing required environment variables: {', '.join(missing)}"
        )
    return {name: os.environ[name] for name in names}


def _store(values: Dict[str, str], key: str, raw_value: str) -> None:
    parsed_key = _normalize_key(key)
    if not parsed_key:
        return
    value = raw_value.strip().strip('"').strip("'")
    values[parsed_key] = value
    os.environ.setdefault(parsed_key, value)


def _normalize_key(key: str) -> Optional[str]:
    lowered = key.lower().strip()
    if not lowered:
        return None
    if lowered in ALIAS_KEY_MAP:
        return ALIAS_KEY_MAP[lowered]
    return lowered.replace(" ", "_").upper()
