"""
Single-locale translator for plugins.

A plugin ships its translations under ``lang/`` in its data directory,
either flat or nested:

    lang/eng.ini
    lang/kor.ini
    lang/eng/lang.ini

Lookups use the same catalog rules as TranslationRegistry: the locale's own
table, then the English fallback table, then the identifier itself.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable
from pathlib import Path
from typing import Any

from localehost.i18n.catalog import (
    CATALOG_EXTENSION,
    FALLBACK_LOCALE,
    MessageCatalog,
    load_fallback_entries,
)

logger = logging.getLogger(__name__)

LANG_DIRNAME = "lang"
CANONICAL_FILENAME = f"lang{CATALOG_EXTENSION}"

# Relative paths (posix) that name a locale file
_FLAT_FILE_RE = re.compile(r"^lang/([^/]+)\.ini$")
_NESTED_FILE_RE = re.compile(r"^lang/([^/]+)/lang\.ini$")


def scan_language_files(data_dir: Path) -> dict[str, Path]:
    """
    Find every locale file below a data directory.

    Flat files win over nested ones when both exist for the same code.

    Returns:
        Mapping of lower-cased locale code to file path
    """
    flat: dict[str, Path] = {}
    nested: dict[str, Path] = {}
    if not data_dir.is_dir():
        return {}

    for path in data_dir.rglob(f"*{CATALOG_EXTENSION}"):
        if not path.is_file():
            continue
        relative = path.relative_to(data_dir).as_posix()
        flat_match = _FLAT_FILE_RE.match(relative)
        nested_match = _NESTED_FILE_RE.match(relative)
        if flat_match:
            flat[flat_match.group(1).lower()] = path
        elif nested_match:
            nested[nested_match.group(1).lower()] = path

    return {**nested, **flat}


class Language:
    """
    Translator bound to one plugin and one locale.

    The set of available locales is scanned once at construction.
    """

    def __init__(
        self,
        data_dir: Path | str,
        locale: str,
        resources_dir: Path | str | None = None,
        fallback_locale: str = FALLBACK_LOCALE,
    ):
        """
        Initialize the translator.

        Args:
            data_dir: Plugin data directory containing lang/
            locale: Locale to load (e.g. 'kor')
            resources_dir: Bundled resources checked first for the fallback
                file; defaults to data_dir
            fallback_locale: Locale whose table backs lookups
        """
        self._data_dir = Path(data_dir)
        self._resources_dir = Path(resources_dir) if resources_dir else self._data_dir
        self._fallback_locale = fallback_locale.lower()
        self._files = scan_language_files(self._data_dir)
        self._language_list = tuple(sorted(self._files))

        self._fallback_entries = load_fallback_entries(self._find_fallback_file())
        self._catalog: MessageCatalog
        self.load(locale)

    def _find_fallback_file(self) -> Path:
        lang_dir = Path(LANG_DIRNAME)
        candidates = [
            self._resources_dir / lang_dir / self._fallback_locale / CANONICAL_FILENAME,
            self._data_dir / lang_dir / self._fallback_locale / CANONICAL_FILENAME,
            self._data_dir / lang_dir / f"{self._fallback_locale}{CATALOG_EXTENSION}",
        ]
        for candidate in candidates:
            if candidate.is_file():
                return candidate
        return candidates[0]

    @property
    def locale(self) -> str:
        """Get the lower-cased locale code."""
        return self._catalog.locale_code

    @property
    def catalog(self) -> MessageCatalog:
        return self._catalog

    def load(self, locale: str) -> bool:
        """
        Switch to a locale and load its file.

        Args:
            locale: Locale code in any case

        Returns:
            True if the locale file was loaded; False if the locale is not
            available or its file could not be read. On failure lookups
            still work through the fallback table.
        """
        code = locale.lower()
        path = self._files.get(code)
        if path is None:
            logger.error(f"Missing required language file ({code})")
            self._catalog = MessageCatalog(code, fallback_entries=self._fallback_entries)
            return False

        self._catalog = MessageCatalog(code, path, self._fallback_entries)
        return not self._catalog.is_degraded

    def translate(self, message_id: str, params: Iterable[Any] = ()) -> str:
        """
        Translate an identifier with positional parameters.

        Examples:
            >>> lang.translate("plugin.reloaded", ["MyPlugin"])
            'MyPlugin reloaded'
        """
        return self._catalog.translate(message_id, params)

    def get_name(self) -> str:
        return self._catalog.name()

    def get_language_list(self) -> tuple[str, ...]:
        """Get the locale codes found under lang/."""
        return self._language_list

    def is_available_language(self, locale: str) -> bool:
        return locale.lower() in self._files
