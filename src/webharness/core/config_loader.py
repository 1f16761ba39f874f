import json
import logging
import os
from pathlib import Path
from typing import Dict, List, Any, Union, Optional, Mapping

from pydantic import ValidationError

from ..data_models import BrowserKind, SessionConfig
from ..exceptions import ConfigurationError

# Relative paths resolve against the directory the harness is started from
CONFIG_DIR = Path('config')
DEFAULT_SETTINGS_FILE = CONFIG_DIR / 'settings.json'

ENV_PREFIX = 'WEBHARNESS_'
DEFAULT_BROWSER = BrowserKind.CHROME.value
DEFAULT_WAIT_TIMEOUT = 10.0
DEFAULT_POLL_INTERVAL = 0.5
DEFAULT_SCREENSHOTS_DIR = 'reports/screenshots'

_TRUE_STRINGS = {'1', 'true', 'yes', 'on'}
_FALSE_STRINGS = {'0', 'false', 'no', 'off', ''}
_MISSING = object()

logger = logging.getLogger(__name__)


def env_var_name(path_str: str) -> str:
    """`webdriver.timeouts.pageLoad` -> `WEBHARNESS_WEBDRIVER_TIMEOUTS_PAGELOAD`."""
    return ENV_PREFIX + path_str.replace('.', '_').replace('-', '_').upper()


class ConfigLoader:
    def __init__(self, settings_file: Union[str, Path, None] = DEFAULT_SETTINGS_FILE,
                 overrides: Optional[Mapping[str, Any]] = None,
                 environ: Optional[Mapping[str, str]] = None):
        """
        Loads harness settings.

        Args:
            settings_file (Union[str, Path, None], optional): Path to the settings JSON file.
                                                              None skips the file entirely.
            overrides (Mapping[str, Any], optional): Dot-path keys that win over every other source.
            environ (Mapping[str, str], optional): Environment to read `WEBHARNESS_*` overrides from.
                                                   Defaults to `os.environ`.
        """
        self.settings_file: Optional[Path] = Path(settings_file) if settings_file is not None else None
        self.overrides: Dict[str, Any] = dict(overrides or {})
        self.environ: Mapping[str, str] = os.environ if environ is None else environ

        if self.settings_file is None:
            self.settings: Dict[str, Any] = {}
        else:
            self.settings = self._load_json(self.settings_file, default_value={})
            if not self.settings:
                logger.warning(f"Settings file '{self.settings_file}' was not found or is empty/invalid. Using defaults.")
        if not isinstance(self.settings, dict):
            logger.error(f"Settings file '{self.settings_file}' must contain a JSON object. Using defaults.")
            self.settings = {}

    def _load_json(self, file_path: Path, default_value: Union[Dict, List]) -> Any:
        if not file_path.exists():
            logger.info(f"Configuration file not found: {file_path}")
            return default_value
        if not file_path.is_file():
            logger.error(f"Configuration path is not a file: {file_path}")
            return default_value

        try:
            with file_path.open('r', encoding='utf-8') as f:
                data = json.load(f)
                logger.debug(f"Successfully loaded JSON from {file_path}")
                return data
        except json.JSONDecodeError as e:
            logger.error(f"Could not decode JSON from {file_path}: {e}")
            return default_value
        except OSError as e:
            logger.error(f"Could not read {file_path}: {e}")
            return default_value

    def get_settings(self) -> Dict[str, Any]:
        """Returns all settings loaded from the file (overrides excluded)."""
        return self.settings

    def _file_value(self, path_str: str) -> Any:
        current_level: Any = self.settings
        for key in path_str.split('.'):
            if not isinstance(current_level, dict):
                logger.warning(f"Invalid path '{path_str}' at key '{key}'. Expected a dictionary, found {type(current_level)}.")
                return _MISSING
            if key not in current_level:
                return _MISSING
            current_level = current_level[key]
        return current_level

    def get_setting(self, path_str: str, default: Any = None) -> Any:
        """
        Retrieves a setting using a dot-separated path.

        Resolution order: in-process override, `WEBHARNESS_*` environment variable,
        settings file, then `default`.
        """
        if path_str in self.overrides and self.overrides[path_str] is not None:
            return self.overrides[path_str]
        env_value = self.environ.get(env_var_name(path_str))
        if env_value is not None:
            return env_value
        value = self._file_value(path_str)
        if value is _MISSING:
            logger.debug(f"Setting '{path_str}' not found. Returning default: {default}")
            return default
        return value

    def get_bool(self, path_str: str, default: bool = False) -> bool:
        value = self.get_setting(path_str, default)
        if isinstance(value, bool):
            return value
        if isinstance(value, (int, float)):
            return bool(value)
        text = str(value).strip().lower()
        if text in _TRUE_STRINGS:
            return True
        if text in _FALSE_STRINGS:
            return False
        logger.warning(f"Setting '{path_str}' is not a valid boolean: {value!r}. Using {default}.")
        return default

    def get_float(self, path_str: str, default: float) -> float:
        value = self.get_setting(path_str, default)
        try:
            return float(value)
        except (TypeError, ValueError):
            logger.warning(f"Setting '{path_str}' is not a valid number: {value!r}. Using {default}.")
            return default

    def get_int(self, path_str: str, default: int) -> int:
        value = self.get_setting(path_str, default)
        try:
            return int(value)
        except (TypeError, ValueError):
            logger.warning(f"Setting '{path_str}' is not a valid integer: {value!r}. Using {default}.")
            return default

    def get_list(self, path_str: str, default: Optional[List[str]] = None) -> List[str]:
        """Accepts a JSON list or a comma-separated string."""
        value = self.get_setting(path_str, None)
        if value is None:
            return list(default or [])
        if isinstance(value, str):
            return [part.strip() for part in value.split(',') if part.strip()]
        if isinstance(value, (list, tuple)):
            return [str(part) for part in value]
        logger.warning(f"Setting '{path_str}' should be a list or comma-separated string, got {value!r}.")
        return list(default or [])

    def get_logging_setting(self, setting_name: str, default: Any = None) -> Any:
        """Retrieves a specific setting from the 'logging' block."""
        return self.get_setting(f'logging.{setting_name}', default)

    def browser_kind(self) -> BrowserKind:
        raw = str(self.get_setting('browser', DEFAULT_BROWSER)).strip().lower()
        try:
            return BrowserKind(raw)
        except ValueError:
            supported = ", ".join(kind.value for kind in BrowserKind)
            raise ConfigurationError(f"Unsupported browser '{raw}'. Supported: {supported}") from None

    def session_config(self) -> SessionConfig:
        """Builds the immutable SessionConfig for the configured browser."""
        kind = self.browser_kind()
        prefix = kind.value
        private_key = 'incognito' if kind is BrowserKind.CHROME else 'private'
        implicit_wait = self.get_float('webdriver.timeouts.implicitWait', 0)
        if implicit_wait:
            logger.warning(
                f"Implicit wait is set to {implicit_wait}s; it compounds with explicit waits and should stay 0."
            )
        try:
            return SessionConfig(
                browser_kind=kind,
                headless=self.get_bool(f'{prefix}.headless', False),
                incognito_or_private=self.get_bool(f'{prefix}.{private_key}', False),
                extra_args=self.get_list(f'{prefix}.args'),
                page_load_timeout=self.get_float('webdriver.timeouts.pageLoad', 30),
                implicit_wait=implicit_wait,
                script_timeout=self.get_float('webdriver.timeouts.script', 30),
                driver_path=self.get_setting(f'{prefix}.driver_path'),
                service_args=self.get_list(f'{prefix}.service_args'),
            )
        except ValidationError as e:
            raise ConfigurationError(f"Invalid session configuration: {e}") from e

    def wait_timeout(self) -> float:
        return self.get_float('waits.timeout', DEFAULT_WAIT_TIMEOUT)

    def poll_interval(self) -> float:
        return self.get_float('waits.poll_interval', DEFAULT_POLL_INTERVAL)

    def screenshots_dir(self) -> Path:
        return Path(self.get_setting('reporting.screenshots_dir', DEFAULT_SCREENSHOTS_DIR))
