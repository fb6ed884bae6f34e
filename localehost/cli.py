import argparse
import logging
import sys
from pathlib import Path

from localehost import VERSION
from localehost.i18n.catalog import LANGUAGE_NAME_KEY
from localehost.i18n.config import LocaleConfig
from localehost.i18n.translator import LocaleDirectoryError, TranslationRegistry
from localehost.ui import console, data_table, error, info, status_box, success, warning


def _resolve_locale_name(registry: TranslationRegistry, name: str) -> str | None:
    """
    Resolve a locale code or display name to a known locale code.

    Args:
        registry: Registry whose catalogs are searched
        name: Code ('kor', 'KOR') or display name ('English', '한국어')

    Returns:
        The locale code, or None if nothing matches
    """
    name = name.strip()
    if not name:
        return None

    catalogs = registry.get_lang_list()
    if name.lower() in catalogs:
        return name.lower()

    wanted = name.casefold()
    for code, catalog in catalogs.items():
        display_name = catalog.name()
        if display_name != LANGUAGE_NAME_KEY and display_name.casefold() == wanted:
            return code
    return None


class LocaleHostCLI:
    def __init__(self, verbose: bool = False, data_dir: str | None = None):
        self.verbose = verbose
        self._config = LocaleConfig()
        self._data_dir = Path(data_dir) if data_dir else None
        self._registry: TranslationRegistry | None = None

    def _get_registry(self) -> TranslationRegistry:
        if self._registry is None:
            self._registry = TranslationRegistry(
                self._data_dir or self._config.get_data_dir(),
                default_locale=self._config.get_default_locale(),
                force_locale=self._config.is_locale_forced(),
            )
        return self._registry

    def list_locales(self) -> int:
        """Show every discovered catalog."""
        try:
            registry = self._get_registry()
        except LocaleDirectoryError as e:
            error("Cannot load locales", str(e))
            return 1

        catalogs = registry.get_lang_list()
        if not catalogs:
            warning(f"No locale files found in {registry.locales_dir}")
            return 0

        default = registry.get_default_locale()
        rows = []
        for code, catalog in sorted(catalogs.items()):
            row = [
                code,
                catalog.name(),
                len(catalog),
                catalog.status.value,
                "✓" if code == default else "",
            ]
            if self.verbose:
                row.append(str(catalog.source))
            rows.append(row)

        columns = [
            {"name": "Code", "style": "cyan"},
            {"name": "Name"},
            {"name": "Entries", "justify": "right"},
            {"name": "Status", "style": "dim"},
            {"name": "Default", "justify": "center", "style": "green"},
        ]
        if self.verbose:
            columns.append({"name": "Source", "style": "dim"})

        data_table(columns=columns, rows=rows, title="Locales")
        return 0

    def translate(self, args: argparse.Namespace) -> int:
        try:
            registry = self._get_registry()
        except LocaleDirectoryError as e:
            error("Cannot load locales", str(e))
            return 1

        if args.locale and registry.get_lang(args.locale) is None:
            warning(f"Unknown locale '{args.locale}', showing the identifier")

        print(registry.translate(args.id, args.params or [], args.locale))
        return 0

    def missing(self, args: argparse.Namespace) -> int:
        """List identifiers the fallback locale defines but a locale lacks."""
        try:
            registry = self._get_registry()
        except LocaleDirectoryError as e:
            error("Cannot load locales", str(e))
            return 1

        code = _resolve_locale_name(registry, args.locale)
        if code is None:
            error(f"Unknown locale: {args.locale}")
            return 1

        missing = sorted(registry.get_missing_translations(code))
        if not missing:
            success(f"'{code}' defines every identifier of '{registry.fallback_locale}'")
            return 0

        data_table(
            columns=[
                {"name": "Identifier", "style": "cyan"},
                {"name": f"Fallback ({registry.fallback_locale})", "style": "dim"},
            ],
            rows=[[message_id, registry.fallback_entries[message_id]] for message_id in missing],
            title=f"{len(missing)} missing in {code}",
        )
        return 0

    def default(self, args: argparse.Namespace) -> int:
        """Show, set or clear the persisted default locale."""
        if args.locale is None:
            locale_info = self._config.get_locale_info()
            status_box(
                "DEFAULT LOCALE",
                {
                    "Locale": locale_info["locale"],
                    "Source": locale_info["source"],
                    "Forced": "yes" if locale_info["forced"] else "no",
                    "Data dir": str(self._data_dir or self._config.get_data_dir()),
                },
            )
            return 0

        if args.locale.lower() == "auto":
            self._config.clear_default_locale()
            success("Default locale cleared, using auto-detection")
            return 0

        try:
            registry = self._get_registry()
        except LocaleDirectoryError as e:
            error("Cannot load locales", str(e))
            return 1

        code = _resolve_locale_name(registry, args.locale)
        if code is None or not registry.set_default_locale(code):
            error(
                f"Unknown locale: {args.locale}",
                "Available: " + ", ".join(sorted(registry.get_locale_list())),
            )
            return 1

        try:
            self._config.set_default_locale(code)
        except (ValueError, RuntimeError) as e:
            error("Could not save default locale", str(e))
            return 1

        success(f"Default locale set to {code} ({registry.get_lang(code).name()})")
        return 0


def main():
    parser = argparse.ArgumentParser(
        prog="localehost",
        description="Inspect locale catalogs and translate messages",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument("--version", "-V", action="version", version=f"localehost {VERSION}")
    parser.add_argument("--verbose", "-v", action="store_true", help="Show detailed output")
    parser.add_argument("--data-dir", "-d", help="Data directory containing locales/")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    subparsers.add_parser("list", help="List discovered locales")

    translate_parser = subparsers.add_parser("translate", help="Translate a message identifier")
    translate_parser.add_argument("id")
    translate_parser.add_argument("params", nargs="*", help="Values for {%%0}, {%%1}, ...")
    translate_parser.add_argument("--locale", "-l")

    missing_parser = subparsers.add_parser("missing", help="Show untranslated identifiers")
    missing_parser.add_argument("locale")

    default_parser = subparsers.add_parser("default", help="Show or change the default locale")
    default_parser.add_argument("locale", nargs="?", help="Locale code, name, or 'auto'")

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if not args.command:
        parser.print_help()
        return 0

    cli = LocaleHostCLI(verbose=args.verbose, data_dir=args.data_dir)

    try:
        if args.command == "list":
            return cli.list_locales()
        elif args.command == "translate":
            return cli.translate(args)
        elif args.command == "missing":
            return cli.missing(args)
        elif args.command == "default":
            return cli.default(args)
        else:
            parser.print_help()
            return 1
    except KeyboardInterrupt:
        console.print()
        info("Interrupted")
        return 130


if __name__ == "__main__":
    sys.exit(main())
