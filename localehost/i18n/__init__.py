"""
Locale resolution and translation for localehost.

Provides:
- Message catalogs loaded from flat INI files, one per locale
- A registry resolving explicit, default and per-caller locales
- A single-locale translator for plugins
- Locale detection and persisted configuration

Usage:
    from localehost.i18n import TranslationRegistry

    registry = TranslationRegistry("/srv/host", default_locale="kor")

    # Default locale
    print(registry.translate("greeting", ["Ada"]))

    # Explicit locale, case-insensitive
    print(registry.translate("greeting", ["Ada"], "ENG"))

    # Change the default; False if there is no such catalog
    registry.set_default_locale("eng")
"""

from localehost.i18n.catalog import (
    FALLBACK_LOCALE,
    LANGUAGE_NAME_KEY,
    LoadStatus,
    MessageCatalog,
    substitute_params,
)
from localehost.i18n.config import LocaleConfig
from localehost.i18n.detector import (
    CallerContext,
    convert_locale,
    detect_caller_locale,
    detect_os_language,
)
from localehost.i18n.language import Language
from localehost.i18n.translator import (
    LocaleDirectoryError,
    TranslationRegistry,
    get_registry,
    reset_registry,
    t,
)

__all__ = [
    # Catalogs
    "MessageCatalog",
    "LoadStatus",
    "substitute_params",
    "FALLBACK_LOCALE",
    "LANGUAGE_NAME_KEY",
    # Registry
    "TranslationRegistry",
    "LocaleDirectoryError",
    "get_registry",
    "reset_registry",
    "t",
    # Plugin translator
    "Language",
    # Configuration
    "LocaleConfig",
    # Detection
    "CallerContext",
    "convert_locale",
    "detect_caller_locale",
    "detect_os_language",
]
