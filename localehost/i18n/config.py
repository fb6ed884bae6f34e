"""
Configuration persistence for localehost.

Handles:
- Reading/writing preferences in ~/.localehost/preferences.yaml
- Default locale, forced-locale flag and data directory resolution
- Thread-safe and process-safe file access

Concurrency Safety:
- threading.Lock guards access within a process
- fcntl.flock guards access between processes
"""

from __future__ import annotations

import logging
import os
import re
import sys
import threading
from pathlib import Path
from typing import Any

import yaml

from localehost.i18n.catalog import FALLBACK_LOCALE
from localehost.i18n.detector import detect_os_language

logger = logging.getLogger(__name__)

ENV_LOCALE = "LOCALEHOST_LOCALE"
ENV_FORCE_LOCALE = "LOCALEHOST_FORCE_LOCALE"
ENV_DATA_DIR = "LOCALEHOST_DATA_DIR"

_TRUE_VALUES = ("1", "true", "yes")
_LOCALE_CODE_RE = re.compile(r"^[a-z]{3}$")


def is_valid_locale_code(code: str) -> bool:
    """Check that a code has the 3-letter shape catalogs are named with."""
    return bool(_LOCALE_CODE_RE.match(code.lower()))


class LocaleConfig:
    """
    Manages localehost preferences.

    Default locale resolution order:
    1. LOCALEHOST_LOCALE environment variable
    2. default_locale in ~/.localehost/preferences.yaml
    3. OS-detected locale
    4. eng

    Whether a resolved locale actually has a catalog is decided by the
    TranslationRegistry it is handed to.
    """

    def __init__(self) -> None:
        """Initialize the configuration manager."""
        self.config_dir = Path.home() / ".localehost"
        self.preferences_file = self.config_dir / "preferences.yaml"
        self._thread_lock = threading.Lock()

        self.config_dir.mkdir(mode=0o700, exist_ok=True)

    def _acquire_file_lock(self, file_obj: Any, exclusive: bool = False) -> None:
        """
        Acquire a file lock for concurrent access.

        Uses fcntl.flock on Unix; Windows relies on the thread lock only.

        Args:
            file_obj: Open file object to lock
            exclusive: Exclusive lock for writing, shared lock for reading
        """
        if sys.platform != "win32":
            import fcntl

            lock_type = fcntl.LOCK_EX if exclusive else fcntl.LOCK_SH
            try:
                fcntl.flock(file_obj.fileno(), lock_type)
            except OSError as e:
                logger.debug(f"Could not acquire file lock: {e}")

    def _release_file_lock(self, file_obj: Any) -> None:
        if sys.platform != "win32":
            import fcntl

            try:
                fcntl.flock(file_obj.fileno(), fcntl.LOCK_UN)
            except OSError as e:
                logger.debug(f"Could not release file lock: {e}")

    def _load_preferences(self) -> dict[str, Any]:
        """
        Load preferences from file with proper locking.

        Returns:
            Dictionary of preferences, or empty dict on failure

        Note:
            A missing, empty, malformed or non-mapping file yields {}.
        """
        try:
            with self._thread_lock:
                if not self.preferences_file.exists():
                    return {}

                with open(self.preferences_file, encoding="utf-8") as f:
                    self._acquire_file_lock(f, exclusive=False)
                    try:
                        content = f.read()
                        if not content.strip():
                            return {}

                        data = yaml.safe_load(content)

                        if data is None:
                            return {}
                        if not isinstance(data, dict):
                            logger.warning(
                                f"Preferences file contains invalid type: {type(data).__name__}, "
                                "expected dict. Using defaults."
                            )
                            return {}

                        return data
                    finally:
                        self._release_file_lock(f)

        except yaml.YAMLError as e:
            logger.warning(f"Malformed YAML in preferences file: {e}. Using defaults.")
            return {}
        except OSError as e:
            logger.debug(f"Could not read preferences file: {e}")
            return {}

    def _save_preferences(self, preferences: dict[str, Any]) -> None:
        """
        Save preferences atomically with an exclusive lock.

        Raises:
            RuntimeError: If preferences cannot be saved
        """
        try:
            with self._thread_lock:
                temp_file = self.preferences_file.with_suffix(".yaml.tmp")

                with open(temp_file, "w", encoding="utf-8") as f:
                    self._acquire_file_lock(f, exclusive=True)
                    try:
                        yaml.safe_dump(preferences, f, default_flow_style=False, allow_unicode=True)
                    finally:
                        self._release_file_lock(f)

                temp_file.rename(self.preferences_file)

        except OSError as e:
            raise RuntimeError(f"Failed to save preferences: {e}") from e

    def _saved_locale(self, preferences: dict[str, Any]) -> str:
        saved = preferences.get("default_locale", "")
        if isinstance(saved, str) and is_valid_locale_code(saved):
            return saved.lower()
        return ""

    def get_default_locale(self) -> str:
        """
        Get the configured default locale.

        Returns:
            Locale code
        """
        env_locale = os.environ.get(ENV_LOCALE, "").lower()
        if is_valid_locale_code(env_locale):
            return env_locale

        saved_locale = self._saved_locale(self._load_preferences())
        if saved_locale:
            return saved_locale

        return detect_os_language()

    def set_default_locale(self, locale: str) -> None:
        """
        Persist the default locale.

        Args:
            locale: 3-letter locale code in any case

        Raises:
            ValueError: If the code is not three letters
            RuntimeError: If preferences cannot be saved
        """
        locale = locale.strip().lower()
        if not is_valid_locale_code(locale):
            raise ValueError(f"Invalid locale code: '{locale}' (expected 3 letters, e.g. eng)")

        old_locale = self.get_default_locale()
        preferences = self._load_preferences()
        preferences["default_locale"] = locale
        self._save_preferences(preferences)

        logger.info(f"Default locale changed: {old_locale} -> {locale}")

    def clear_default_locale(self) -> None:
        """Remove the saved default locale so detection applies again."""
        preferences = self._load_preferences()
        if "default_locale" in preferences:
            del preferences["default_locale"]
            self._save_preferences(preferences)
            logger.info("Default locale cleared, using auto-detection")

    def is_locale_forced(self) -> bool:
        """
        Whether every caller gets the default locale.

        LOCALEHOST_FORCE_LOCALE wins over the force_locale preference.
        """
        env_value = os.environ.get(ENV_FORCE_LOCALE)
        if env_value:
            return env_value.lower() in _TRUE_VALUES

        return self._load_preferences().get("force_locale") is True

    def set_locale_forced(self, forced: bool) -> None:
        preferences = self._load_preferences()
        preferences["force_locale"] = bool(forced)
        self._save_preferences(preferences)

    def get_data_dir(self) -> Path:
        """
        Get the host data directory holding locales/.

        Resolution: LOCALEHOST_DATA_DIR, then the data_dir preference, then
        the current working directory.
        """
        env_dir = os.environ.get(ENV_DATA_DIR)
        if env_dir:
            return Path(env_dir).expanduser()

        saved_dir = self._load_preferences().get("data_dir")
        if isinstance(saved_dir, str) and saved_dir:
            return Path(saved_dir).expanduser()

        return Path.cwd()

    def set_data_dir(self, data_dir: Path | str) -> None:
        preferences = self._load_preferences()
        preferences["data_dir"] = str(Path(data_dir).expanduser().resolve())
        self._save_preferences(preferences)

    def get_locale_info(self) -> dict[str, Any]:
        """
        Get detailed locale configuration info.

        Returns:
            Dictionary with the effective locale and where it came from
        """
        env_locale = os.environ.get(ENV_LOCALE, "").lower()
        saved_locale = self._saved_locale(self._load_preferences())
        detected_locale = detect_os_language()

        if is_valid_locale_code(env_locale):
            effective_locale = env_locale
            source = "environment"
        elif saved_locale:
            effective_locale = saved_locale
            source = "config"
        elif detected_locale != FALLBACK_LOCALE:
            effective_locale = detected_locale
            source = "auto-detected"
        else:
            effective_locale = FALLBACK_LOCALE
            source = "default"

        return {
            "locale": effective_locale,
            "source": source,
            "env_override": env_locale if env_locale else None,
            "saved_preference": saved_locale if saved_locale else None,
            "detected_locale": detected_locale,
            "forced": self.is_locale_forced(),
        }
