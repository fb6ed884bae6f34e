"""
Translation registry for localehost.

Provides locale resolution and message translation with:
- Catalog discovery from a locales/ directory (one INI file per locale)
- A shared fallback table backing every catalog
- A default locale that can only point at a known catalog
- Caller-aware translation through an injected locale detector
"""

from __future__ import annotations

import logging
import re
import threading
from collections.abc import Callable, Iterable, Mapping
from pathlib import Path
from types import MappingProxyType
from typing import Any

from localehost.i18n.catalog import (
    CATALOG_EXTENSION,
    FALLBACK_LOCALE,
    MessageCatalog,
    substitute_params,
)
from localehost.i18n.detector import CallerContext, detect_caller_locale

logger = logging.getLogger(__name__)

LOCALES_DIRNAME = "locales"

_LOCALE_FILE_RE = re.compile(r"^([a-zA-Z]{3})\.ini$")

LocaleDetector = Callable[[CallerContext, str], str]


class LocaleDirectoryError(FileNotFoundError):
    """Raised when the locale directory does not exist."""


class TranslationRegistry:
    """
    Owns every locale catalog and the default locale.

    Resolution for ``translate(id, params, locale)``:
    1. Catalog for ``locale``, or for the default locale when omitted
    2. Within the catalog: own entries, shared fallback entries, the id
    3. With no catalog at all, the id itself

    The catalog set is built once in the constructor and never changes. The
    default locale is the only mutable state and is guarded by a lock.
    """

    def __init__(
        self,
        data_dir: Path | str,
        default_locale: str | None = None,
        force_locale: bool = False,
        fallback_locale: str = FALLBACK_LOCALE,
        locale_detector: LocaleDetector = detect_caller_locale,
    ):
        """
        Initialize the registry and load every catalog.

        Args:
            data_dir: Host data directory containing a locales/ subdirectory
            default_locale: Locale used when none is given; when unknown the
                fallback locale is used instead
            force_locale: When True, translate_to ignores per-caller locales
            fallback_locale: Locale whose table backs every catalog
            locale_detector: Maps an end-user caller to a locale code

        Raises:
            LocaleDirectoryError: If data_dir/locales is not a directory
        """
        self._data_dir = Path(data_dir)
        self._locales_dir = self._data_dir / LOCALES_DIRNAME
        self._fallback_locale = fallback_locale.lower()
        self._locale_detector = locale_detector
        self.force_locale = force_locale
        self._lock = threading.Lock()
        self._default_locale = ""

        self._fallback_entries: Mapping[str, str] = MappingProxyType({})
        self._catalogs: Mapping[str, MessageCatalog] = self.load_all_locale()

        if default_locale and not self.set_default_locale(default_locale):
            logger.warning(
                f"Default locale '{default_locale}' has no catalog in {self._locales_dir}, "
                f"using '{self._fallback_locale}'"
            )
        if not self._default_locale and not self.set_default_locale(self._fallback_locale):
            logger.warning(f"Fallback locale '{self._fallback_locale}' has no catalog")

    @property
    def locales_dir(self) -> Path:
        return self._locales_dir

    @property
    def fallback_locale(self) -> str:
        return self._fallback_locale

    @property
    def fallback_entries(self) -> Mapping[str, str]:
        """The table shared by every catalog as its last lookup tier."""
        return self._fallback_entries

    def load_all_locale(self) -> Mapping[str, MessageCatalog]:
        """
        Discover and load every catalog in the locales directory.

        Only files named ``<3 letters>.ini`` are considered; anything else is
        skipped. The fallback locale's file is read once and its table shared
        by all catalogs.

        Returns:
            Read-only mapping of lower-cased locale code to catalog

        Raises:
            LocaleDirectoryError: If the locales directory is missing
        """
        if not self._locales_dir.is_dir():
            raise LocaleDirectoryError(
                f"Language directory {self._locales_dir} does not exist or is not a directory"
            )

        sources: dict[str, Path] = {}
        for path in sorted(self._locales_dir.iterdir()):
            match = _LOCALE_FILE_RE.match(path.name)
            if match is None or not path.is_file():
                continue
            sources[match.group(1).lower()] = path

        fallback_catalog = None
        fallback_source = sources.get(self._fallback_locale)
        if fallback_source is None:
            logger.error(
                "Missing fallback language file: "
                f"{self._locales_dir / (self._fallback_locale + CATALOG_EXTENSION)}"
            )
            self._fallback_entries = MappingProxyType({})
        else:
            fallback_catalog = MessageCatalog.load_fallback(self._fallback_locale, fallback_source)
            self._fallback_entries = fallback_catalog.entries

        catalogs: dict[str, MessageCatalog] = {}
        for code, path in sources.items():
            if code == self._fallback_locale and fallback_catalog is not None:
                catalogs[code] = fallback_catalog
            else:
                catalogs[code] = MessageCatalog(code, path, self._fallback_entries)
            logger.debug(f"Loaded locale '{code}' from {path} ({len(catalogs[code])} entries)")

        return MappingProxyType(catalogs)

    def translate(
        self, message_id: str, params: Iterable[Any] = (), locale: str | None = None
    ) -> str:
        """
        Translate a message identifier with positional parameters.

        Args:
            message_id: Identifier to look up (e.g. 'command.usage')
            params: Values for the ``{%0}``, ``{%1}``... placeholders
            locale: Locale code; the default locale when omitted

        Returns:
            The translated string, or the identifier itself when nothing
            resolves. Never raises for unknown locales or identifiers.

        Examples:
            >>> registry.translate("greeting", ["Ada"], "eng")
            'Hello Ada!'
        """
        catalog = self.get_lang(locale)
        template = catalog.get(message_id) if catalog is not None else message_id
        return substitute_params(template, params)

    def translate_to(
        self,
        message_id: str,
        params: Iterable[Any],
        caller: CallerContext,
        forced: bool | None = None,
    ) -> str:
        """
        Translate for a specific caller.

        The locale detector is consulted only for end-user callers and only
        when the locale is not forced; everyone else gets the default locale.

        Args:
            message_id: Identifier to look up
            params: Positional parameters
            caller: The party the message is for
            forced: Overrides the registry's force_locale for this call
        """
        default = self.get_default_locale()
        locale = default
        is_forced = self.force_locale if forced is None else forced
        if not is_forced and caller.is_end_user:
            locale = self._locale_detector(caller, default)
        return self.translate(message_id, params, locale)

    def get_lang(self, locale: str | None = None) -> MessageCatalog | None:
        """
        Resolve a locale code to its catalog.

        Args:
            locale: Locale code in any case; the default locale when omitted

        Returns:
            The catalog, or None when no catalog has that code
        """
        code = locale.lower() if locale else self.get_default_locale()
        return self._catalogs.get(code)

    def get_lang_list(self) -> Mapping[str, MessageCatalog]:
        """Get the read-only mapping of locale code to catalog."""
        return self._catalogs

    def get_locale_list(self) -> list[str]:
        """Get the known locale codes."""
        return list(self._catalogs)

    def get_default_locale(self) -> str:
        with self._lock:
            return self._default_locale

    def set_default_locale(self, locale: str) -> bool:
        """
        Point the default locale at a known catalog.

        Args:
            locale: Locale code in any case

        Returns:
            True if changed; False (state untouched) if no catalog has that code
        """
        code = locale.lower()
        if code not in self._catalogs:
            return False

        with self._lock:
            self._default_locale = code
        return True

    def get_all_keys(self, locale: str | None = None) -> set[str]:
        """
        Get the identifiers a locale's own table defines.

        Args:
            locale: Locale code, defaults to the default locale

        Returns:
            Set of identifiers, empty for unknown locales
        """
        catalog = self.get_lang(locale)
        return catalog.keys() if catalog is not None else set()

    def get_missing_translations(self, locale: str) -> set[str]:
        """
        Find identifiers in the fallback table that a locale does not define.

        Args:
            locale: Target locale to check

        Returns:
            Set of missing identifiers
        """
        return set(self._fallback_entries) - self.get_all_keys(locale)


# Global registry instance
_registry: TranslationRegistry | None = None


def get_registry() -> TranslationRegistry:
    """
    Get or create the global registry from the persisted configuration.

    Raises:
        LocaleDirectoryError: If the configured data directory has no locales/
    """
    global _registry
    if _registry is None:
        from localehost.i18n.config import LocaleConfig

        config = LocaleConfig()
        _registry = TranslationRegistry(
            config.get_data_dir(),
            default_locale=config.get_default_locale(),
            force_locale=config.is_locale_forced(),
        )
    return _registry


def t(message_id: str, *params: Any, locale: str | None = None) -> str:
    """
    Translate a message identifier (shorthand function).

    Examples:
        >>> t("greeting", "Ada")
        'Hello Ada!'
        >>> t("greeting", "Ada", locale="kor")
        '안녕하세요 Ada!'
    """
    return get_registry().translate(message_id, params, locale)


def reset_registry() -> None:
    """Reset the global registry (mainly for testing)."""
    global _registry
    _registry = None
