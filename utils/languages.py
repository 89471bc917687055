"""Supported response languages and locale helpers."""

from typing import Dict, Optional

DEFAULT_LANGUAGE = "en-US"

SUPPORTED_LANGUAGES: Dict[str, str] = {
    "en-US": "English",
    "es-ES": "Spanish",
    "fr-FR": "French",
    "de-DE": "German",
    "hi-IN": "Hindi",
    "ja-JP": "Japanese",
    "zh-CN": "Chinese",
    "ta-IN": "Tamil",
    "pa-IN": "Punjabi",
}


def resolve_language(locale: Optional[str]) -> str:
    """Return `locale` if supported, otherwise the default language."""
    if not locale:
        return DEFAULT_LANGUAGE
    candidate = locale.strip()
    return candidate if candidate in SUPPORTED_LANGUAGES else DEFAULT_LANGUAGE


def language_code(locale: Optional[str]) -> str:
    """Return the ISO-639-1 part of a locale (``es-ES`` -> ``es``)."""
    return resolve_language(locale).split("-", 1)[0].lower()


def language_name(locale: Optional[str]) -> str:
    """Return the English display name used in prompts."""
    return SUPPORTED_LANGUAGES[resolve_language(locale)]
