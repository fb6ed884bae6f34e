"""
Tests for the localehost command-line interface.
"""

import argparse
import io
import os
import tempfile
import unittest
from contextlib import redirect_stdout
from pathlib import Path
from unittest.mock import patch

ENG_INI = """language.name=English
greeting=Hello {%0}!
only.eng=Fallback text
"""

KOR_INI = """language.name=한국어
greeting=안녕하세요 {%0}!
"""


class TestCLIBase(unittest.TestCase):
    """Temp home and data directory shared by the CLI tests."""

    def setUp(self):
        self.temp_dir = tempfile.TemporaryDirectory()
        self.temp_home = Path(self.temp_dir.name) / "home"
        self.temp_home.mkdir()
        self.data_dir = Path(self.temp_dir.name) / "data"
        locales_dir = self.data_dir / "locales"
        locales_dir.mkdir(parents=True)
        (locales_dir / "eng.ini").write_text(ENG_INI, encoding="utf-8")
        (locales_dir / "kor.ini").write_text(KOR_INI, encoding="utf-8")

        self.home_patch = patch("pathlib.Path.home", return_value=self.temp_home)
        self.env_patch = patch.dict(os.environ, {}, clear=True)
        self.home_patch.start()
        self.env_patch.start()

    def tearDown(self):
        self.env_patch.stop()
        self.home_patch.stop()
        self.temp_dir.cleanup()

    def _cli(self, data_dir=None):
        from localehost.cli import LocaleHostCLI

        return LocaleHostCLI(data_dir=str(data_dir or self.data_dir))


class TestCLICommands(TestCLIBase):
    """Tests for the CLI subcommands."""

    def test_list(self):
        self.assertEqual(self._cli().list_locales(), 0)

    def test_list_verbose_shows_source(self):
        from localehost.cli import LocaleHostCLI

        cli = LocaleHostCLI(verbose=True, data_dir=str(self.data_dir))
        with patch("localehost.cli.data_table") as mock_table:
            self.assertEqual(cli.list_locales(), 0)

        kwargs = mock_table.call_args.kwargs
        self.assertEqual(kwargs["columns"][-1]["name"], "Source")
        sources = {row[0]: row[-1] for row in kwargs["rows"]}
        self.assertEqual(sources["eng"], str(self.data_dir / "locales" / "eng.ini"))
        self.assertEqual(sources["kor"], str(self.data_dir / "locales" / "kor.ini"))

    def test_list_without_verbose_hides_source(self):
        with patch("localehost.cli.data_table") as mock_table:
            self.assertEqual(self._cli().list_locales(), 0)

        columns = mock_table.call_args.kwargs["columns"]
        self.assertNotIn("Source", [column["name"] for column in columns])

    def test_list_missing_directory(self):
        cli = self._cli(data_dir=self.data_dir / "nowhere")
        self.assertEqual(cli.list_locales(), 1)

    def test_translate_prints_result(self):
        args = argparse.Namespace(id="greeting", params=["Ada"], locale="kor")

        out = io.StringIO()
        with redirect_stdout(out):
            result = self._cli().translate(args)

        self.assertEqual(result, 0)
        self.assertIn("안녕하세요 Ada!", out.getvalue())

    def test_translate_unknown_identifier(self):
        args = argparse.Namespace(id="nonexistent.key", params=[], locale="eng")

        out = io.StringIO()
        with redirect_stdout(out):
            result = self._cli().translate(args)

        self.assertEqual(result, 0)
        self.assertEqual(out.getvalue().strip(), "nonexistent.key")

    def test_missing_by_code(self):
        args = argparse.Namespace(locale="kor")
        self.assertEqual(self._cli().missing(args), 0)

    def test_missing_by_display_name(self):
        args = argparse.Namespace(locale="한국어")
        self.assertEqual(self._cli().missing(args), 0)

    def test_missing_unknown_locale(self):
        args = argparse.Namespace(locale="xyz")
        self.assertEqual(self._cli().missing(args), 1)

    def test_default_show(self):
        args = argparse.Namespace(locale=None)
        self.assertEqual(self._cli().default(args), 0)

    def test_default_set_by_name(self):
        from localehost.i18n.config import LocaleConfig

        args = argparse.Namespace(locale="한국어")
        self.assertEqual(self._cli().default(args), 0)
        self.assertEqual(LocaleConfig().get_default_locale(), "kor")

    def test_default_set_by_code(self):
        from localehost.i18n.config import LocaleConfig

        args = argparse.Namespace(locale="ENG")
        self.assertEqual(self._cli().default(args), 0)
        self.assertEqual(LocaleConfig().get_default_locale(), "eng")

    def test_default_set_unknown(self):
        from localehost.i18n.config import LocaleConfig

        args = argparse.Namespace(locale="Klingon")
        self.assertEqual(self._cli().default(args), 1)
        self.assertIsNone(LocaleConfig().get_locale_info()["saved_preference"])

    def test_default_auto_clears(self):
        from localehost.i18n.config import LocaleConfig

        cli = self._cli()
        cli.default(argparse.Namespace(locale="kor"))

        self.assertEqual(cli.default(argparse.Namespace(locale="auto")), 0)
        self.assertEqual(LocaleConfig().get_default_locale(), "eng")


class TestResolveLocaleName(TestCLIBase):
    """Tests for the _resolve_locale_name function."""

    def _registry(self):
        from localehost.i18n.translator import TranslationRegistry

        return TranslationRegistry(self.data_dir)

    def test_resolve_codes(self):
        from localehost.cli import _resolve_locale_name

        registry = self._registry()
        self.assertEqual(_resolve_locale_name(registry, "eng"), "eng")
        self.assertEqual(_resolve_locale_name(registry, "KOR"), "kor")

    def test_resolve_display_names(self):
        from localehost.cli import _resolve_locale_name

        registry = self._registry()
        self.assertEqual(_resolve_locale_name(registry, "English"), "eng")
        self.assertEqual(_resolve_locale_name(registry, "ENGLISH"), "eng")
        self.assertEqual(_resolve_locale_name(registry, "한국어"), "kor")

    def test_resolve_with_whitespace(self):
        from localehost.cli import _resolve_locale_name

        self.assertEqual(_resolve_locale_name(self._registry(), "  English  "), "eng")

    def test_resolve_invalid_returns_none(self):
        from localehost.cli import _resolve_locale_name

        registry = self._registry()
        self.assertIsNone(_resolve_locale_name(registry, "Japanese"))
        self.assertIsNone(_resolve_locale_name(registry, ""))
        self.assertIsNone(_resolve_locale_name(registry, "language.name"))


class TestMain(TestCLIBase):
    """Tests for argument parsing in main()."""

    def test_main_translate(self):
        from localehost.cli import main

        argv = ["localehost", "--data-dir", str(self.data_dir), "translate", "greeting", "Ada"]
        out = io.StringIO()
        with patch("sys.argv", argv), redirect_stdout(out):
            result = main()

        self.assertEqual(result, 0)
        self.assertIn("Hello Ada!", out.getvalue())

    def test_main_without_command(self):
        from localehost.cli import main

        with patch("sys.argv", ["localehost"]), redirect_stdout(io.StringIO()):
            self.assertEqual(main(), 0)


if __name__ == "__main__":
    unittest.main()
