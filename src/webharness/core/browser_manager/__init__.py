"""
Browser manager package.

Public API:
- SessionFactory: builds a configured WebDriver, local driver first, webdriver_manager second.
- SessionRegistry: owns at most one live WebDriver for the test run.
"""

from .drivers import SessionFactory
from .options import build_driver_options, configure_driver_options
from .service import SessionRegistry

__all__ = [
    "SessionFactory",
    "SessionRegistry",
    "build_driver_options",
    "configure_driver_options",
]
