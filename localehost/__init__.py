"""localehost: locale resolution and string translation for plugin hosts."""

VERSION = "0.3.0"
