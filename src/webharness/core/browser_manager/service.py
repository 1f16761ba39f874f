import logging
import threading
from typing import Optional

from selenium.webdriver.remote.webdriver import WebDriver

from ...data_models import SessionConfig
from ...exceptions import NoActiveSessionError
from .drivers import SessionFactory

logger = logging.getLogger(__name__)


class SessionRegistry:
    """
    Sole owner of the one live browser session for a test run.

    The session is created lazily by `get_or_create` and released by `destroy`.
    Other components borrow it per call through `require_session` or
    `current_session` and must not keep it after `destroy`.
    """

    def __init__(self, factory: Optional[SessionFactory] = None, default_config: Optional[SessionConfig] = None):
        self.factory = factory if factory else SessionFactory()
        self.default_config = default_config if default_config else SessionConfig()
        self._lock = threading.RLock()
        self._session: Optional[WebDriver] = None
        self._config: Optional[SessionConfig] = None

    def get_or_create(self, config: Optional[SessionConfig] = None) -> WebDriver:
        with self._lock:
            if self._session is not None:
                if config is not None and config != self._config:
                    logger.warning(
                        "A session is already live; ignoring the differing configuration "
                        f"(live: {self._config}, requested: {config}). Call destroy() first to apply it."
                    )
                return self._session

            effective = config if config is not None else self.default_config
            # Slot stays empty if creation raises
            self._session = self.factory.create(effective)
            self._config = effective
            logger.info(f"Registered new {effective.browser_kind.value} session.")
            return self._session

    @property
    def current_session(self) -> Optional[WebDriver]:
        with self._lock:
            return self._session

    @property
    def config(self) -> Optional[SessionConfig]:
        with self._lock:
            return self._config

    def require_session(self) -> WebDriver:
        session = self.current_session
        if session is None:
            raise NoActiveSessionError("No live browser session; call get_or_create() first.")
        return session

    def is_active(self) -> bool:
        session = self.current_session
        if session is None:
            return False
        try:
            _ = session.current_url
            return True
        except Exception:
            logger.warning("WebDriver is not responsive.")
            return False

    def destroy(self) -> None:
        # Held through quit() so no new session starts while the old browser is still running
        with self._lock:
            session, self._session, self._config = self._session, None, None
            if session is None:
                return
            try:
                session.quit()
                logger.info("WebDriver session closed.")
            except Exception as e:
                logger.error(f"Error closing WebDriver: {e}", exc_info=True)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.destroy()
