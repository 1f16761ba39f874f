import logging
from typing import Union, Iterable

from selenium.webdriver.chrome.options import Options as ChromeOptions
from selenium.webdriver.firefox.options import Options as FirefoxOptions

from ...data_models import BrowserKind, SessionConfig

logger = logging.getLogger(__name__)

DriverOptions = Union[ChromeOptions, FirefoxOptions]


def configure_driver_options(
    options: DriverOptions,
    browser_kind: BrowserKind,
    *,
    headless: bool,
    private: bool,
    additional_options: Iterable[str] = (),
) -> DriverOptions:
    if headless:
        if browser_kind is BrowserKind.CHROME:
            options.add_argument('--headless=new')
            options.add_argument('--disable-gpu')
        else:
            options.add_argument('-headless')

    if private:
        if browser_kind is BrowserKind.CHROME:
            options.add_argument('--incognito')
        else:
            options.add_argument('-private')

    # Pass-through: duplicates are kept and the browser decides which wins
    for opt in additional_options:
        if isinstance(opt, str):
            options.add_argument(opt)
        else:
            logger.warning(f"Ignoring non-string driver option: {opt!r}")

    return options


def build_driver_options(config: SessionConfig) -> DriverOptions:
    """Fresh browser options for `config`; same config always yields the same arguments."""
    options: DriverOptions = ChromeOptions() if config.browser_kind is BrowserKind.CHROME else FirefoxOptions()
    return configure_driver_options(
        options,
        config.browser_kind,
        headless=config.headless,
        private=config.incognito_or_private,
        additional_options=config.extra_args,
    )
