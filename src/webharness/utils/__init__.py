# This file makes webharness.utils a Python package and exposes key utilities.

from .failure_observer import FailureObserver
from .interactions import Interactions
from .logger import setup_logger
from .selenium_waits import WaitCondition, WaitEngine

__all__ = [
    "FailureObserver",
    "Interactions",
    "setup_logger",
    "WaitCondition",
    "WaitEngine",
]
