import logging
from pathlib import Path
from typing import Any, Mapping, Optional, Union

from selenium.webdriver.remote.webdriver import WebDriver

from ..data_models import SessionConfig
from ..utils.failure_observer import FailureObserver
from ..utils.interactions import Interactions
from ..utils.logger import setup_logger
from ..utils.selenium_waits import WaitEngine
from .browser_manager import SessionFactory, SessionRegistry
from .config_loader import ConfigLoader, DEFAULT_SETTINGS_FILE

logger = logging.getLogger(__name__)


class Harness:
    """Everything one test run needs, built once from a ConfigLoader."""

    def __init__(self, config_loader: ConfigLoader, factory: Optional[SessionFactory] = None):
        self.config_loader = config_loader
        self.session_config: SessionConfig = config_loader.session_config()
        self.registry = SessionRegistry(
            factory if factory else SessionFactory.from_config_loader(config_loader),
            default_config=self.session_config,
        )
        self.waits = WaitEngine(config_loader.wait_timeout(), config_loader.poll_interval())
        self.interactions = Interactions(self.registry, self.waits)
        self.failure_observer = FailureObserver(self.registry, config_loader.screenshots_dir())

    def session(self) -> WebDriver:
        return self.registry.get_or_create(self.session_config)

    def shutdown(self) -> None:
        self.registry.destroy()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.shutdown()


def configure(
    settings_file: Union[str, Path, None] = DEFAULT_SETTINGS_FILE,
    overrides: Optional[Mapping[str, Any]] = None,
    *,
    setup_logging: bool = True,
    factory: Optional[SessionFactory] = None,
) -> Harness:
    """Single entry point: load settings, optionally configure logging, build the harness."""
    config_loader = ConfigLoader(settings_file, overrides=overrides)
    if setup_logging:
        setup_logger(config_loader)
    harness = Harness(config_loader, factory=factory)
    logger.info(f"Harness configured for {harness.session_config.browser_kind.value}.")
    return harness
