import logging
from dataclasses import dataclass
from typing import Any, Callable, List, Optional, Union

from selenium.common.exceptions import InvalidSessionIdException, NoSuchWindowException
from selenium.webdriver.common.keys import Keys
from selenium.webdriver.remote.webdriver import WebDriver
from selenium.webdriver.remote.webelement import WebElement

from ..core.browser_manager import SessionRegistry
from ..data_models import Locator
from ..exceptions import EvaluationError, InteractionError
from .selenium_waits import (
    WaitCondition,
    WaitEngine,
    click_when_ready,
    clickable,
    page_ready,
    title_contains,
    visible,
)

logger = logging.getLogger(__name__)

# Faults that mean the browser or its window is gone, not that the page misbehaved
SESSION_LOST_EXCEPTIONS = (InvalidSessionIdException, NoSuchWindowException)

SCROLL_INTO_VIEW_SCRIPT = "arguments[0].scrollIntoView({block: 'center'});"
JS_CLICK_SCRIPT = "arguments[0].click();"
SET_VALUE_SCRIPT = """
var el = arguments[0];
el.focus();
el.value = arguments[2] ? el.value + arguments[1] : arguments[1];
el.dispatchEvent(new Event('input', {bubbles: true}));
el.dispatchEvent(new Event('change', {bubbles: true}));
"""
COMMIT_SCRIPT = """
var el = arguments[0];
['keydown', 'keypress', 'keyup'].forEach(function (type) {
    el.dispatchEvent(new KeyboardEvent(type, {key: 'Enter', code: 'Enter', keyCode: 13, which: 13, bubbles: true}));
});
if (el.form) {
    if (el.form.requestSubmit) { el.form.requestSubmit(); } else { el.form.submit(); }
}
"""


@dataclass(frozen=True)
class Ok:
    value: Any = None


@dataclass(frozen=True)
class Failed:
    cause: BaseException


StrategyResult = Union[Ok, Failed]


def attempt(strategy: Callable[[], Any]) -> StrategyResult:
    try:
        return Ok(strategy())
    except Exception as e:
        return Failed(e)


class Interactions:
    """
    Click/type/query operations against the registry's live session.

    Every action waits for its target through the WaitEngine first. Actions that are
    flaky in practice run a native primary strategy and, if that fails, exactly one
    scripted secondary strategy before giving up with InteractionError.
    """

    def __init__(self, registry: SessionRegistry, waits: Optional[WaitEngine] = None):
        self.registry = registry
        self.waits = waits if waits else WaitEngine()

    def _session(self) -> WebDriver:
        return self.registry.require_session()

    def _session_lost(self, error: EvaluationError) -> bool:
        if isinstance(error.cause, SESSION_LOST_EXCEPTIONS):
            return True
        return not self.registry.is_active()

    def run_with_fallback(self, action: str, primary: Callable[[], Any], secondary: Callable[[], Any]) -> Any:
        first = attempt(primary)
        if isinstance(first, Ok):
            return first.value
        if isinstance(first.cause, EvaluationError) and self._session_lost(first.cause):
            # A scripted retry against a dead session would fail the same way
            raise first.cause

        logger.warning(f"{action}: primary strategy failed ({type(first.cause).__name__}: {first.cause}); trying scripted fallback.")
        second = attempt(secondary)
        if isinstance(second, Ok):
            logger.info(f"{action}: succeeded via scripted fallback.")
            return second.value

        logger.error(f"{action}: scripted fallback failed too: {second.cause}")
        raise InteractionError(action, second.cause, first.cause) from second.cause

    def navigate(self, url: str, wait_for_ready: bool = True, timeout: Optional[float] = None) -> None:
        driver = self._session()
        logger.info(f"Navigating to {url}")
        driver.get(url)
        if wait_for_ready:
            self.waits.until(driver, page_ready(), timeout=timeout)

    def wait_for(self, condition: WaitCondition, timeout: Optional[float] = None) -> Any:
        return self.waits.until(self._session(), condition, timeout=timeout)

    def click(self, locator: Locator, timeout: Optional[float] = None) -> None:
        driver = self._session()

        def native_click() -> None:
            self.waits.until(driver, click_when_ready(locator), timeout=timeout)

        def script_click() -> None:
            element = driver.find_element(*locator.as_tuple())
            driver.execute_script(SCROLL_INTO_VIEW_SCRIPT, element)
            driver.execute_script(JS_CLICK_SCRIPT, element)

        self.run_with_fallback(f"click {locator}", native_click, script_click)
        logger.debug(f"Clicked {locator}")

    def type(self, locator: Locator, text: str, clear: bool = True, timeout: Optional[float] = None) -> None:
        driver = self._session()

        def native_type() -> None:
            element = self.waits.until(driver, visible(locator), timeout=timeout)
            if clear:
                element.clear()
            element.send_keys(text)

        def script_type() -> None:
            element = driver.find_element(*locator.as_tuple())
            driver.execute_script(SET_VALUE_SCRIPT, element, text, not clear)

        self.run_with_fallback(f"type into {locator}", native_type, script_type)

    def submit_search(
        self,
        locator: Locator,
        text: str,
        *,
        alternate_locator: Optional[Locator] = None,
        commit_key: str = Keys.RETURN,
        post_condition: Optional[WaitCondition] = None,
        timeout: Optional[float] = None,
    ) -> None:
        """Fill a search box and commit it, falling back to script-set value plus synthetic Enter."""
        driver = self._session()
        done = post_condition if post_condition else title_contains(text)

        def native_submit() -> None:
            box = self.waits.until(driver, clickable(locator), timeout=timeout)
            box.click()
            box.clear()
            box.send_keys(text)
            box.send_keys(commit_key)
            self.waits.until(driver, done, timeout=timeout)

        def scripted_submit() -> None:
            box = driver.find_element(*(alternate_locator or locator).as_tuple())
            driver.execute_script(SET_VALUE_SCRIPT, box, text, False)
            driver.execute_script(COMMIT_SCRIPT, box)

        self.run_with_fallback(f"search for {text!r}", native_submit, scripted_submit)

    def is_displayed(self, locator: Locator) -> bool:
        """Query, not assertion: any failure to resolve the element reads as False."""
        try:
            driver = self.registry.current_session
            if driver is None:
                return False
            elements = driver.find_elements(*locator.as_tuple())
            return bool(elements) and elements[0].is_displayed()
        except Exception as e:
            logger.debug(f"is_displayed({locator}) treated as False: {e}")
            return False

    def get_text(self, locator: Locator, timeout: Optional[float] = None) -> str:
        element = self.waits.until(self._session(), visible(locator), timeout=timeout)
        return element.text

    def find_elements(self, locator: Locator) -> List[WebElement]:
        return self._session().find_elements(*locator.as_tuple())

    def title(self) -> str:
        return self._session().title

    def page_source(self) -> str:
        return self._session().page_source

    def page_contains(self, text: str) -> bool:
        return text in (self.page_source() or '')
