"""
Message catalogs for localehost.

A catalog is one locale's translation table, read from a flat INI file:

    language.name=English
    greeting=Hello {%0}!\\nWelcome back.

Lookups fall back to a shared fallback table, then to the identifier itself,
so a missing file or key never raises.
"""

from __future__ import annotations

import configparser
import logging
import re
from collections.abc import Iterable, Mapping
from enum import Enum
from pathlib import Path
from types import MappingProxyType
from typing import Any

logger = logging.getLogger(__name__)

FALLBACK_LOCALE = "eng"
LANGUAGE_NAME_KEY = "language.name"
CATALOG_EXTENSION = ".ini"

_EMPTY: Mapping[str, str] = MappingProxyType({})

# Section name used to feed sectionless files to configparser
_ROOT_SECTION = "localehost:root"

_ESCAPE_RE = re.compile(r"\\(x[0-9A-Fa-f]{1,2}|[0-7]{1,3}|.)", re.DOTALL)
_SIMPLE_ESCAPES = {
    "a": "\a",
    "b": "\b",
    "f": "\f",
    "n": "\n",
    "r": "\r",
    "t": "\t",
    "v": "\v",
}


class LoadStatus(Enum):
    """Outcome of reading a catalog source file."""

    LOADED = "loaded"
    MISSING = "missing"
    INVALID = "invalid"

    @property
    def degraded(self) -> bool:
        return self is not LoadStatus.LOADED


class CatalogParseError(ValueError):
    """Raised when a catalog source cannot be parsed."""


def unescape(value: str) -> str:
    """
    Resolve C-style backslash escapes in a catalog value.

    Handles the named escapes (\\n, \\t, \\r, \\a, \\b, \\f, \\v), hex (\\xHH)
    and octal (\\ooo) sequences. Any other escaped character stands for
    itself, so "\\\\" becomes a single backslash.
    """

    def _replace(match: re.Match[str]) -> str:
        seq = match.group(1)
        if seq[0] == "x" and len(seq) > 1:
            return chr(int(seq[1:], 16))
        if seq[0] in "01234567":
            return chr(int(seq, 8) & 0xFF)
        return _SIMPLE_ESCAPES.get(seq, seq)

    return _ESCAPE_RE.sub(_replace, value)


def _strip_quotes(value: str) -> str:
    if len(value) >= 2 and value[0] == value[-1] and value[0] in ('"', "'"):
        return value[1:-1]
    return value


def parse_catalog(text: str) -> dict[str, str]:
    """
    Parse catalog source text into a flat identifier -> template mapping.

    Args:
        text: Contents of an INI catalog file

    Returns:
        Dictionary of unescaped templates. Keys keep their case; section
        headers are flattened away and later duplicates win.

    Raises:
        CatalogParseError: If the text is not valid key=value INI
    """
    parser = configparser.RawConfigParser(
        delimiters=("=",),
        comment_prefixes=(";", "#"),
        strict=False,
        default_section=_ROOT_SECTION + ":defaults",
        interpolation=None,
    )
    parser.optionxform = str  # type: ignore[assignment,method-assign]

    # Every line is its own entry; indentation must not start a continuation
    flat_text = "\n".join(line.lstrip() for line in text.splitlines())
    try:
        parser.read_string(f"[{_ROOT_SECTION}]\n{flat_text}")
    except configparser.Error as e:
        raise CatalogParseError(str(e)) from e

    entries: dict[str, str] = {}
    for section in parser.sections():
        for key, raw in parser.items(section, raw=True):
            entries[key] = unescape(_strip_quotes(raw or ""))
    return entries


def read_catalog_file(path: Path) -> dict[str, str]:
    """
    Read and parse a catalog file.

    Raises:
        FileNotFoundError: If the file does not exist
        CatalogParseError: If the file cannot be decoded or parsed
    """
    try:
        text = path.read_text(encoding="utf-8-sig")
    except UnicodeDecodeError as e:
        raise CatalogParseError(f"{path} is not valid UTF-8: {e}") from e
    return parse_catalog(text)


def load_fallback_entries(path: Path) -> Mapping[str, str]:
    """
    Load the table shared by every catalog as its last lookup tier.

    A missing or broken file is logged and yields an empty table.
    """
    try:
        return MappingProxyType(read_catalog_file(path))
    except FileNotFoundError:
        logger.error(f"Missing fallback language file: {path}")
    except (CatalogParseError, OSError) as e:
        logger.error(f"Could not load fallback language file {path}: {e}")
    return _EMPTY


def substitute_params(template: str, params: Iterable[Any] = ()) -> str:
    """
    Replace positional placeholders in a template.

    Every literal ``{%N}`` is replaced by ``str(params[N])``, one parameter at
    a time in list order. Placeholders without a matching parameter are left
    untouched.

    Examples:
        >>> substitute_params("Hello {%0}, you have {%1} items", ["Ada", 3])
        'Hello Ada, you have 3 items'
        >>> substitute_params("{%0} and {%1}", ["x"])
        'x and {%1}'
    """
    for index, param in enumerate(params):
        template = template.replace(f"{{%{index}}}", str(param))
    return template


class MessageCatalog:
    """
    One locale's translation table.

    Lookup order for an identifier:
    1. The catalog's own entries
    2. The shared fallback entries
    3. The identifier itself

    Construction never fails. When the source file is missing or broken the
    catalog keeps an empty table and reports it through ``status``.
    """

    def __init__(
        self,
        locale_code: str,
        source: Path | None = None,
        fallback_entries: Mapping[str, str] | None = None,
    ):
        """
        Initialize the catalog.

        Args:
            locale_code: Locale identifier, stored lower-cased (e.g. 'eng')
            source: Path of the INI file to load, or None for an empty table
            fallback_entries: Shared fallback table, referenced not copied
        """
        self._locale_code = locale_code.lower()
        self._source = source
        self._fallback: Mapping[str, str] = (
            fallback_entries if fallback_entries is not None else _EMPTY
        )
        self._entries: Mapping[str, str] = _EMPTY
        self._status = LoadStatus.MISSING

        if source is not None:
            self._load(source)

    @classmethod
    def load_fallback(cls, locale_code: str, source: Path) -> MessageCatalog:
        """
        Load the fallback locale's catalog.

        Its own table doubles as the shared fallback table handed to every
        other catalog, so the source is read once.
        """
        catalog = cls(locale_code, source)
        catalog._fallback = catalog._entries
        return catalog

    def _load(self, source: Path) -> None:
        try:
            self._entries = MappingProxyType(read_catalog_file(source))
            self._status = LoadStatus.LOADED
        except FileNotFoundError:
            logger.error(f"Missing required language file ({self._locale_code}): {source}")
            self._status = LoadStatus.MISSING
        except (CatalogParseError, OSError) as e:
            logger.error(f"Could not load language file ({self._locale_code}) {source}: {e}")
            self._status = LoadStatus.INVALID

    @property
    def locale_code(self) -> str:
        """Get the lower-cased locale code."""
        return self._locale_code

    @property
    def source(self) -> Path | None:
        return self._source

    @property
    def status(self) -> LoadStatus:
        return self._status

    @property
    def is_degraded(self) -> bool:
        """True when the source file could not be loaded."""
        return self._status.degraded

    @property
    def entries(self) -> Mapping[str, str]:
        return self._entries

    @property
    def fallback_entries(self) -> Mapping[str, str]:
        return self._fallback

    def get(self, message_id: str) -> str:
        """
        Resolve an identifier to its template.

        Returns:
            The catalog's template, else the fallback template, else the
            identifier unchanged.
        """
        if message_id in self._entries:
            return self._entries[message_id]
        return self._fallback.get(message_id, message_id)

    def translate(self, message_id: str, params: Iterable[Any] = ()) -> str:
        """Resolve an identifier and substitute positional parameters."""
        return substitute_params(self.get(message_id), params)

    def name(self) -> str:
        """Get the catalog's display name (the ``language.name`` entry)."""
        return self.get(LANGUAGE_NAME_KEY)

    def keys(self) -> set[str]:
        """Get the identifiers defined by this catalog's own table."""
        return set(self._entries)

    def __contains__(self, message_id: object) -> bool:
        return message_id in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return (
            f"MessageCatalog(locale_code={self._locale_code!r}, "
            f"entries={len(self._entries)}, status={self._status.value})"
        )
