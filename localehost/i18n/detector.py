"""
Locale detection for localehost.

Turns client-reported and OS locale strings into the 3-letter locale codes
used to name catalogs:
- Caller locales (e.g. a connected player's client reporting "en_US")
- OS locale from LANGUAGE, LC_ALL, LC_MESSAGES and LANG
"""

from __future__ import annotations

import os
import re
from dataclasses import dataclass

from localehost.i18n.catalog import FALLBACK_LOCALE

# Two-letter (ISO 639-1) and region-qualified variants -> catalog codes
LANGUAGE_MAPPINGS = {
    "en": "eng",
    "es": "spa",
    "es_mx": "spa",
    "fr": "fra",
    "fr_ca": "fra",
    "de": "deu",
    "it": "ita",
    "pt": "por",
    "pt_br": "por",
    "nl": "nld",
    "pl": "pol",
    "cs": "ces",
    "sv": "swe",
    "da": "dan",
    "nb": "nor",
    "no": "nor",
    "fi": "fin",
    "el": "ell",
    "tr": "tur",
    "ru": "rus",
    "uk": "ukr",
    "ar": "ara",
    "he": "heb",
    "hi": "hin",
    "id": "ind",
    "vi": "vie",
    "th": "tha",
    "ja": "jpn",
    "ko": "kor",
    "zh": "zho",
    "zh_cn": "zho",
    "zh_tw": "zho",
    "zh_hk": "zho",
    # C and POSIX locales behave like English
    "c": "eng",
    "posix": "eng",
}

_CODE_RE = re.compile(r"^[a-z]{3}$")


@dataclass(frozen=True)
class CallerContext:
    """
    The party a message is being translated for.

    Attributes:
        name: Caller name, for diagnostics only
        locale: Locale reported by the caller's client (e.g. "en_US"), if any
        is_end_user: False for console/system callers, which always get the
            registry's default locale
    """

    name: str
    locale: str | None = None
    is_end_user: bool = True

    @classmethod
    def console(cls) -> CallerContext:
        return cls(name="CONSOLE", is_end_user=False)


def _parse_locale(locale_string: str) -> str | None:
    """
    Parse a locale string and extract a 3-letter locale code.

    Handles formats like:
    - en_US / en-US
    - de_DE.UTF-8, sr_RS@latin
    - fr
    - eng (already a catalog code)

    Returns:
        Locale code or None if it cannot be mapped
    """
    if not locale_string:
        return None

    locale_lower = locale_string.lower().strip()
    if not locale_lower:
        return None

    locale_lower = locale_lower.replace("-", "_")

    # Remove encoding and @modifier suffixes
    locale_lower = re.sub(r"\.[a-z0-9_-]+(@[a-z]+)?$", "", locale_lower)
    locale_lower = re.sub(r"@[a-z]+$", "", locale_lower)

    if locale_lower in LANGUAGE_MAPPINGS:
        return LANGUAGE_MAPPINGS[locale_lower]

    lang_part = locale_lower.split("_")[0]
    if lang_part in LANGUAGE_MAPPINGS:
        return LANGUAGE_MAPPINGS[lang_part]

    if _CODE_RE.match(lang_part):
        return lang_part

    return None


def convert_locale(locale_string: str | None, default: str = FALLBACK_LOCALE) -> str:
    """
    Convert a client or OS locale string to a catalog locale code.

    Args:
        locale_string: Raw locale (e.g. "en_US", "de-DE", "fra")
        default: Code returned when the string cannot be mapped

    Examples:
        >>> convert_locale("en_US")
        'eng'
        >>> convert_locale("ko_KR.UTF-8")
        'kor'
    """
    return _parse_locale(locale_string or "") or default.lower()


def detect_caller_locale(caller: CallerContext, default: str) -> str:
    """
    Default locale detector used by TranslationRegistry.translate_to.

    Console/system callers and callers that report no locale get ``default``.
    """
    if not caller.is_end_user:
        return default
    return convert_locale(caller.locale, default)


def detect_os_language() -> str:
    """
    Detect the OS language from environment variables.

    Checks LANGUAGE (GNU gettext, colon separated), LC_ALL, LC_MESSAGES and
    LANG in that order. The first mappable value wins.

    Returns:
        Detected locale code, or 'eng' as fallback

    Examples:
        With LANG=es_ES.UTF-8: returns 'spa'
        With LC_ALL=fr_FR: returns 'fra'
    """
    env_vars = ["LANGUAGE", "LC_ALL", "LC_MESSAGES", "LANG"]

    for var in env_vars:
        value = os.environ.get(var, "")
        if not value:
            continue

        candidates = value.split(":") if var == "LANGUAGE" else [value]
        for candidate in candidates:
            parsed = _parse_locale(candidate)
            if parsed:
                return parsed

    return FALLBACK_LOCALE


def get_os_locale_info() -> dict[str, str | None]:
    """
    Get detailed OS locale information for debugging.

    Returns:
        Dictionary with all relevant locale environment variables
    """
    env_vars = ["LANGUAGE", "LC_ALL", "LC_MESSAGES", "LANG", "LC_CTYPE"]

    info: dict[str, str | None] = {}
    for var in env_vars:
        info[var] = os.environ.get(var)

    info["detected_language"] = detect_os_language()

    return info
