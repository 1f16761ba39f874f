import os
from pathlib import Path

DEFAULT_WDM_CACHE_PATH: Path = Path('.wdm_cache')

# Local driver binaries looked up on PATH for direct construction
CHROME_DRIVER_BINARY = 'chromedriver'
FIREFOX_DRIVER_BINARY = 'geckodriver'

# Environment variable key used by webdriver_manager to control SSL verification
WDM_SSL_VERIFY_ENV = "WDM_SSL_VERIFY"


def set_wdm_ssl_verify(enabled: bool) -> None:
    os.environ[WDM_SSL_VERIFY_ENV] = '1' if enabled else '0'
