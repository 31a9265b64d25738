from __future__ import annotations

import json
import logging
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict

from app.config import settings

_logger = logging.getLogger(__name__)

_FALLBACK_LANGUAGE = "ru"

_BASE_DIR = Path(__file__).resolve().parent
_DEFAULT_LOCALES_DIR = _BASE_DIR / "locales"


def _normalize_language_code(value: Any) -> str:
    if isinstance(value, str):
        return value.strip().lower()
    if value is None:
        return ""
    return str(value).strip().lower()


def _determine_default_language() -> str:
    code = _normalize_language_code(settings.DEFAULT_LANGUAGE)
    if code and (_DEFAULT_LOCALES_DIR / f"{code}.json").exists():
        return code
    return _FALLBACK_LANGUAGE


DEFAULT_LANGUAGE = _determine_default_language()


@lru_cache(maxsize=None)
def load_locale(language: str) -> Dict[str, Any]:
    code = _normalize_language_code(language).split("-")[0] or DEFAULT_LANGUAGE
    path = _DEFAULT_LOCALES_DIR / f"{code}.json"

    if not path.exists():
        if code != DEFAULT_LANGUAGE:
            _logger.warning("Locale '%s' not found, using '%s'", code, DEFAULT_LANGUAGE)
        path = _DEFAULT_LOCALES_DIR / f"{DEFAULT_LANGUAGE}.json"

    try:
        with path.open("r", encoding="utf-8") as handle:
            data = json.load(handle)
    except (OSError, json.JSONDecodeError) as error:
        _logger.error("Failed to load locale %s: %s", path, error)
        return {}

    if not isinstance(data, dict):
        _logger.error("Locale file %s must contain an object", path)
        return {}

    return data
