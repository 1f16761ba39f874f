import logging
from typing import Any, Optional, Protocol, runtime_checkable

from ...data_models import Locator
from ...exceptions import HarnessError, WaitTimeoutError
from ...utils.interactions import Interactions
from ...utils.selenium_waits import page_ready, presence
from .selectors import SEARCH_BOX, SEARCH_BOX_XPATH, SEARCH_RESULTS

logger = logging.getLogger(__name__)


@runtime_checkable
class Searchable(Protocol):
    def search(self, term: str) -> None: ...

    def results_contain(self, text: str) -> bool: ...


def supports_search(page: Any) -> bool:
    return isinstance(page, Searchable)


class BasePage:
    url: Optional[str] = None

    def __init__(self, interactions: Interactions, url: Optional[str] = None):
        self.interactions = interactions
        if url is not None:
            self.url = url

    def open(self) -> "BasePage":
        if not self.url:
            raise HarnessError(f"{type(self).__name__} has no URL to open.")
        self.interactions.navigate(self.url)
        return self

    def title(self) -> str:
        return self.interactions.title()

    def is_loaded(self) -> bool:
        try:
            self.interactions.wait_for(page_ready(), timeout=0)
            return True
        except WaitTimeoutError:
            return False


class SearchPage(BasePage):
    """A page with a single search box that lists results in one container."""

    url = "https://www.google.com"

    def __init__(
        self,
        interactions: Interactions,
        url: Optional[str] = None,
        *,
        search_box: Locator = SEARCH_BOX,
        search_box_fallback: Locator = SEARCH_BOX_XPATH,
        results: Locator = SEARCH_RESULTS,
    ):
        super().__init__(interactions, url)
        self.search_box = search_box
        self.search_box_fallback = search_box_fallback
        self.results = results

    def search(self, term: str) -> None:
        logger.info(f"Searching for {term!r}")
        self.interactions.submit_search(
            self.search_box,
            term,
            alternate_locator=self.search_box_fallback,
        )

    def results_contain(self, text: str) -> bool:
        try:
            container = self.interactions.wait_for(presence(self.results))
            return text in (container.text or '')
        except WaitTimeoutError:
            logger.info(f"{self.results} not found; checking the page source instead.")
            return self.interactions.page_contains(text)
