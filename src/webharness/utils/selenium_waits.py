import logging
import re
import time
import typing
from typing import Any, Callable, Iterable, Optional, Tuple

from selenium.webdriver.remote.webdriver import WebDriver
from selenium.webdriver.remote.webelement import WebElement
from selenium.common.exceptions import (
    NoSuchElementException,
    StaleElementReferenceException,
    ElementClickInterceptedException,
    ElementNotInteractableException,
)

from ..data_models import Locator
from ..exceptions import EvaluationError, WaitTimeoutError

logger = logging.getLogger(__name__)

SearchContext = typing.Union[WebDriver, WebElement]

# Raised by a healthy session while the page is still settling
IGNORED_EXCEPTIONS: Tuple[type, ...] = (NoSuchElementException, StaleElementReferenceException)

# True when the element's centre is not covered by another element. Points outside
# the viewport count as hit-testable because a native click scrolls them into view.
HIT_TEST_SCRIPT = """
var el = arguments[0];
var rect = el.getBoundingClientRect();
if (rect.width === 0 || rect.height === 0) { return false; }
var x = rect.left + rect.width / 2;
var y = rect.top + rect.height / 2;
if (x < 0 || y < 0 || x >= window.innerWidth || y >= window.innerHeight) { return true; }
var hit = document.elementFromPoint(x, y);
return hit !== null && (hit === el || el.contains(hit));
"""


class NotReady:
    """Result of a poll that has not succeeded yet; `observed` ends up in the timeout error."""

    __slots__ = ('observed',)

    def __init__(self, observed: Any = None):
        self.observed = observed

    def __repr__(self) -> str:
        return f"NotReady({self.observed!r})"


NOT_READY = NotReady()


class WaitCondition:
    """A described predicate over a session. Returns a value when ready, else NotReady/None/False."""

    def __init__(self, description: str, evaluate: Callable[[SearchContext], Any]):
        self.description = description
        self._evaluate = evaluate

    def __call__(self, context: SearchContext) -> Any:
        return self._evaluate(context)

    def __repr__(self) -> str:
        return f"WaitCondition({self.description})"


def is_not_ready(result: Any) -> bool:
    return result is None or result is False or isinstance(result, NotReady)


class WaitEngine:
    """
    Synchronous polling on the calling thread.

    `until` returns as soon as the condition is ready, sleeps at most the remaining
    budget between polls, and measures time with a monotonic clock.
    """

    def __init__(
        self,
        timeout: float = 10.0,
        poll_interval: float = 0.5,
        *,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ):
        if timeout < 0 or poll_interval < 0:
            raise ValueError("timeout and poll_interval must be non-negative")
        self.timeout = timeout
        self.poll_interval = poll_interval
        self._clock = clock
        self._sleep = sleep

    def until(
        self,
        context: SearchContext,
        condition: WaitCondition,
        timeout: Optional[float] = None,
        poll_interval: Optional[float] = None,
    ) -> Any:
        timeout = self.timeout if timeout is None else timeout
        poll_interval = self.poll_interval if poll_interval is None else poll_interval
        if timeout < 0 or poll_interval < 0:
            raise ValueError("timeout and poll_interval must be non-negative")

        deadline = self._clock() + timeout
        last_observed: Any = None
        while True:
            try:
                result = condition(context)
            except IGNORED_EXCEPTIONS as e:
                result = NotReady(f"{type(e).__name__}: {getattr(e, 'msg', None) or e}")
            except Exception as e:
                logger.error(f"Condition '{condition.description}' raised {type(e).__name__}: {e}")
                raise EvaluationError(condition.description, e) from e

            if not is_not_ready(result):
                return result
            last_observed = result.observed if isinstance(result, NotReady) else result

            remaining = deadline - self._clock()
            if remaining <= 0:
                logger.debug(f"Timed out waiting for {condition.description}; last observed {last_observed!r}")
                raise WaitTimeoutError(condition.description, last_observed, timeout)
            self._sleep(min(poll_interval, remaining))


def presence(locator: Locator) -> WaitCondition:
    def _evaluate(context: SearchContext) -> Any:
        elements = context.find_elements(*locator.as_tuple())
        return elements[0] if elements else NotReady("no matching element")
    return WaitCondition(f"presence of {locator}", _evaluate)


def visible(locator: Locator) -> WaitCondition:
    def _evaluate(context: SearchContext) -> Any:
        elements = context.find_elements(*locator.as_tuple())
        if not elements:
            return NotReady("no matching element")
        element = elements[0]
        return element if element.is_displayed() else NotReady("present but not displayed")
    return WaitCondition(f"visibility of {locator}", _evaluate)


def _hit_testable(driver: WebDriver, element: WebElement) -> bool:
    return bool(driver.execute_script(HIT_TEST_SCRIPT, element))


def clickable(locator: Locator) -> WaitCondition:
    """Visible, enabled, and not covered by another element at its centre."""
    def _evaluate(driver: WebDriver) -> Any:
        elements = driver.find_elements(*locator.as_tuple())
        if not elements:
            return NotReady("no matching element")
        element = elements[0]
        if not element.is_displayed():
            return NotReady("present but not displayed")
        if not element.is_enabled():
            return NotReady("displayed but disabled")
        if not _hit_testable(driver, element):
            return NotReady("covered by another element")
        return element
    return WaitCondition(f"clickability of {locator}", _evaluate)


def click_when_ready(locator: Locator) -> WaitCondition:
    """
    Interaction condition: clicks the element the first time it is clickable.

    An intercepted or non-interactable click did not happen, so it is reported as
    not-ready and retried on the next poll.
    """
    check = clickable(locator)

    def _evaluate(driver: WebDriver) -> Any:
        element = check(driver)
        if is_not_ready(element):
            return element
        try:
            element.click()
        except (ElementClickInterceptedException, ElementNotInteractableException) as e:
            return NotReady(f"click rejected: {getattr(e, 'msg', None) or e}")
        return element
    return WaitCondition(f"click on {locator}", _evaluate)


def _as_return_statement(script: str) -> str:
    stripped = script.strip()
    return stripped if re.match(r'return\b', stripped) else f"return {stripped}"


def script_equals(script: str, expected: Any, *args: Any) -> WaitCondition:
    statement = _as_return_statement(script)

    def _evaluate(driver: WebDriver) -> Any:
        value = driver.execute_script(statement, *args)
        return True if value == expected else NotReady(value)
    return WaitCondition(f"script `{script}` == {expected!r}", _evaluate)


def page_ready() -> WaitCondition:
    return script_equals("document.readyState", "complete")


def title_contains(text: str) -> WaitCondition:
    def _evaluate(driver: WebDriver) -> Any:
        title = driver.title
        return True if text in (title or '') else NotReady(title)
    return WaitCondition(f"title containing {text!r}", _evaluate)


def wait_for_any_present(context: SearchContext,
                         locators: Iterable[Locator],
                         engine: WaitEngine,
                         timeout: Optional[float] = None) -> Optional[WebElement]:
    """
    Waits for the first present element among the provided locators within the given context.
    Each locator gets its own `timeout`. Returns the found WebElement or None.
    """
    for locator in locators:
        try:
            return engine.until(context, presence(locator), timeout=timeout)
        except WaitTimeoutError:
            logger.debug(f"No element for {locator}, trying next locator.")
            continue
    return None


def wait_for_any_clickable(context: WebDriver,
                           locators: Iterable[Locator],
                           engine: WaitEngine,
                           timeout: Optional[float] = None) -> Optional[WebElement]:
    """
    Waits for the first clickable element among the provided locators.
    Each locator gets its own `timeout`. Returns the found WebElement or None.
    """
    for locator in locators:
        try:
            return engine.until(context, clickable(locator), timeout=timeout)
        except WaitTimeoutError:
            logger.debug(f"{locator} never became clickable, trying next locator.")
            continue
    return None
