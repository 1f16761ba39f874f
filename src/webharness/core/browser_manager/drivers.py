import logging
import shutil
from pathlib import Path
from typing import Callable, Dict, Optional, Union, List

from selenium import webdriver
from selenium.webdriver.chrome.service import Service as ChromeService
from selenium.webdriver.firefox.service import Service as FirefoxService
from selenium.webdriver.remote.webdriver import WebDriver
from selenium.common.exceptions import WebDriverException
from webdriver_manager.chrome import ChromeDriverManager
from webdriver_manager.firefox import GeckoDriverManager
from webdriver_manager.core.driver_cache import DriverCacheManager

from ...data_models import BrowserKind, SessionConfig
from ...exceptions import SessionCreationError
from ..config_loader import ConfigLoader
from .constants import (
    DEFAULT_WDM_CACHE_PATH,
    CHROME_DRIVER_BINARY,
    FIREFOX_DRIVER_BINARY,
    set_wdm_ssl_verify,
)
from .options import DriverOptions, build_driver_options

logger = logging.getLogger(__name__)

DriverService = Union[ChromeService, FirefoxService]
DriverConstructor = Callable[[DriverOptions, DriverService], WebDriver]
ManagedResolver = Callable[[Path], str]


def init_chrome_driver(options: DriverOptions, service: DriverService) -> WebDriver:
    return webdriver.Chrome(service=service, options=options)


def init_firefox_driver(options: DriverOptions, service: DriverService) -> WebDriver:
    return webdriver.Firefox(service=service, options=options)


def resolve_managed_chromedriver(cache_path: Path) -> str:
    return ChromeDriverManager(cache_manager=DriverCacheManager(root_dir=str(cache_path))).install()


def resolve_managed_geckodriver(cache_path: Path) -> str:
    return GeckoDriverManager(cache_manager=DriverCacheManager(root_dir=str(cache_path))).install()


_DEFAULT_CONSTRUCTORS: Dict[BrowserKind, DriverConstructor] = {
    BrowserKind.CHROME: init_chrome_driver,
    BrowserKind.FIREFOX: init_firefox_driver,
}
_DEFAULT_RESOLVERS: Dict[BrowserKind, ManagedResolver] = {
    BrowserKind.CHROME: resolve_managed_chromedriver,
    BrowserKind.FIREFOX: resolve_managed_geckodriver,
}
_SERVICE_CLASSES = {
    BrowserKind.CHROME: ChromeService,
    BrowserKind.FIREFOX: FirefoxService,
}
_DRIVER_BINARIES = {
    BrowserKind.CHROME: CHROME_DRIVER_BINARY,
    BrowserKind.FIREFOX: FIREFOX_DRIVER_BINARY,
}


class SessionFactory:
    """
    Builds fully configured WebDriver sessions.

    Each browser kind is tried first against a local driver binary (explicit
    `driver_path` or one found on PATH), then once more with a driver resolved
    by webdriver_manager. The requested browser kind is never swapped for another.
    """

    def __init__(
        self,
        *,
        wdm_cache_path: Union[str, Path] = DEFAULT_WDM_CACHE_PATH,
        wdm_ssl_verify: Optional[bool] = None,
        constructors: Optional[Dict[BrowserKind, DriverConstructor]] = None,
        managed_resolvers: Optional[Dict[BrowserKind, ManagedResolver]] = None,
        which: Callable[[str], Optional[str]] = shutil.which,
    ):
        self.wdm_cache_path = Path(wdm_cache_path)
        self.wdm_ssl_verify = wdm_ssl_verify
        self.constructors = {**_DEFAULT_CONSTRUCTORS, **(constructors or {})}
        self.managed_resolvers = {**_DEFAULT_RESOLVERS, **(managed_resolvers or {})}
        self._which = which

    @classmethod
    def from_config_loader(cls, config_loader: ConfigLoader) -> "SessionFactory":
        ssl_verify = config_loader.get_setting('webdriver_manager.ssl_verify')
        return cls(
            wdm_cache_path=config_loader.get_setting('webdriver_manager.cache_path', str(DEFAULT_WDM_CACHE_PATH)),
            wdm_ssl_verify=None if ssl_verify is None else config_loader.get_bool('webdriver_manager.ssl_verify'),
        )

    def create(self, config: SessionConfig) -> WebDriver:
        kind = config.browser_kind
        logger.info(f"Creating {kind.value} session (headless={config.headless}).")
        causes: List[BaseException] = []

        try:
            driver = self._construct_direct(config)
        except Exception as direct_error:
            causes.append(direct_error)
            logger.warning(f"Direct {kind.value} construction failed, trying managed driver acquisition: {direct_error}")
            try:
                driver = self._construct_managed(config)
            except Exception as managed_error:
                causes.append(managed_error)
                logger.error(f"Managed {kind.value} construction failed: {managed_error}", exc_info=True)
                raise SessionCreationError(kind, managed_error, causes) from managed_error

        self._apply_timeouts(driver, config)
        logger.info(f"{kind.value.capitalize()} WebDriver initialized successfully.")
        return driver

    def _construct_direct(self, config: SessionConfig) -> WebDriver:
        kind = config.browser_kind
        binary = _DRIVER_BINARIES[kind]
        local_driver = config.driver_path or self._which(binary)
        if not local_driver:
            raise WebDriverException(f"No local {binary} found on PATH and no driver_path configured.")
        logger.info(f"Using local {binary} at: {local_driver}")
        return self._construct(config, local_driver)

    def _construct_managed(self, config: SessionConfig) -> WebDriver:
        kind = config.browser_kind
        if self.wdm_ssl_verify is not None:
            set_wdm_ssl_verify(self.wdm_ssl_verify)
        self.wdm_cache_path.mkdir(parents=True, exist_ok=True)
        managed_driver = self.managed_resolvers[kind](self.wdm_cache_path)
        logger.info(f"webdriver_manager resolved {_DRIVER_BINARIES[kind]} at: {managed_driver}")
        return self._construct(config, managed_driver)

    def _construct(self, config: SessionConfig, executable_path: str) -> WebDriver:
        service_cls = _SERVICE_CLASSES[config.browser_kind]
        service = service_cls(
            executable_path=executable_path,
            service_args=list(config.service_args) or None,
        )
        options = build_driver_options(config)
        return self.constructors[config.browser_kind](options, service)

    def _apply_timeouts(self, driver: WebDriver, config: SessionConfig) -> None:
        try:
            driver.set_page_load_timeout(config.page_load_timeout)
            driver.implicitly_wait(config.implicit_wait)
            driver.set_script_timeout(config.script_timeout)
        except Exception as e:
            logger.error(f"Failed to apply timeouts to new {config.browser_kind.value} session: {e}")
            try:
                driver.quit()
            except Exception as quit_error:
                logger.warning(f"Could not quit half-configured session: {quit_error}")
            raise SessionCreationError(config.browser_kind, e) from e
        logger.debug(
            f"Applied timeouts: pageLoad={config.page_load_timeout}s, "
            f"implicitWait={config.implicit_wait}s, script={config.script_timeout}s"
        )
