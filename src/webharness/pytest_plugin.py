"""
pytest integration.

Enable it from a conftest.py with ``pytest_plugins = ["webharness.pytest_plugin"]``.
Log output goes through pytest's own logging capture, so no handlers are installed here.
"""

import logging
from typing import Iterator

import pytest
from selenium.webdriver.remote.webdriver import WebDriver

from .core.config_loader import ConfigLoader, DEFAULT_SETTINGS_FILE
from .core.harness import Harness
from .data_models import BrowserKind
from .utils.interactions import Interactions

logger = logging.getLogger(__name__)

HARNESS_KEY = pytest.StashKey[Harness]()


def pytest_addoption(parser):
    group = parser.getgroup('webharness')
    group.addoption('--browser', action='store', default=None,
                    choices=[kind.value for kind in BrowserKind],
                    help="Browser to run against; overrides the settings file.")
    group.addoption('--headless', action='store_true', default=False,
                    help="Run the browser without a visible window.")
    group.addoption('--harness-settings', action='store', default=str(DEFAULT_SETTINGS_FILE),
                    help="Path to the webharness settings JSON file.")


@pytest.fixture(scope='session')
def harness(request) -> Iterator[Harness]:
    options = request.config
    overrides = {'browser': options.getoption('--browser')}
    config_loader = ConfigLoader(options.getoption('--harness-settings'), overrides=overrides)
    if options.getoption('--headless'):
        config_loader.overrides[f'{config_loader.browser_kind().value}.headless'] = True

    test_harness = Harness(config_loader)
    options.stash[HARNESS_KEY] = test_harness
    yield test_harness
    test_harness.shutdown()


@pytest.fixture
def browser_session(harness: Harness) -> Iterator[WebDriver]:
    yield harness.session()
    harness.registry.destroy()


@pytest.fixture
def interactions(harness: Harness, browser_session: WebDriver) -> Interactions:
    return harness.interactions


def pytest_runtest_logstart(nodeid, location):
    logger.info(f"Starting test: {nodeid}")


@pytest.hookimpl(hookwrapper=True)
def pytest_runtest_makereport(item, call):
    outcome = yield
    report = outcome.get_result()
    if report.when != 'call':
        return
    if report.passed:
        logger.info(f"Test passed: {item.name}")
    elif report.skipped:
        logger.info(f"Test skipped: {item.name}")
    elif report.failed:
        test_harness = item.config.stash.get(HARNESS_KEY, None)
        if test_harness is None:
            logger.info(f"Test failed: {item.name} (no harness in use, no screenshot)")
            return
        test_class = item.cls.__name__ if getattr(item, 'cls', None) else item.nodeid.split('::')[0]
        test_harness.failure_observer.capture(test_class, item.name)
