"""UI strings loaded from the JSON files beside this module."""

from __future__ import annotations

import json
import logging
from functools import lru_cache
from pathlib import Path

logger = logging.getLogger(__name__)

LOCALES_DIR = Path(__file__).resolve().parent
FALLBACK_LANGUAGE = "en"


def available() -> set[str]:
    return {path.stem for path in LOCALES_DIR.glob("*.json")}


def ensure_language(language: str | None) -> str:
    language = (language or FALLBACK_LANGUAGE).lower()
    return language if language in available() else FALLBACK_LANGUAGE


@lru_cache(maxsize=None)
def load_locale(language: str) -> dict:
    path = LOCALES_DIR / f"{ensure_language(language)}.json"
    if not path.is_file():
        logger.warning("No locale file at %s", path)
        return {}
    with path.open(encoding="utf-8") as f:
        return json.load(f)


def get_section(language: str, section: str) -> dict:
    strings = load_locale(language).get(section)
    if strings is None:
        strings = load_locale(FALLBACK_LANGUAGE).get(section, {})
    return strings


def format_message(strings: dict, key: str, **kwargs) -> str:
    value = strings.get(key, "")
    try:
        return value.format(**kwargs)
    except (KeyError, IndexError, ValueError):
        logger.debug("Could not format %r with %r", key, kwargs)
        return value
