# This file makes webharness.core a Python package and exposes key classes.

from .browser_manager import SessionFactory, SessionRegistry
from .config_loader import ConfigLoader
from .harness import Harness, configure

__all__ = [
    "ConfigLoader",
    "Harness",
    "SessionFactory",
    "SessionRegistry",
    "configure",
]
