"""Selenium session lifecycle, explicit waits and resilient interactions for UI tests."""

from .core import ConfigLoader, Harness, SessionFactory, SessionRegistry, configure
from .data_models import BrowserKind, Locator, SessionConfig
from .exceptions import (
    ConfigurationError,
    EvaluationError,
    HarnessError,
    InteractionError,
    NoActiveSessionError,
    SessionCreationError,
    WaitTimeoutError,
)
from .utils import FailureObserver, Interactions, WaitCondition, WaitEngine

__version__ = "0.1.0"

__all__ = [
    "BrowserKind",
    "ConfigLoader",
    "ConfigurationError",
    "EvaluationError",
    "FailureObserver",
    "Harness",
    "HarnessError",
    "InteractionError",
    "Interactions",
    "Locator",
    "NoActiveSessionError",
    "SessionConfig",
    "SessionCreationError",
    "SessionFactory",
    "SessionRegistry",
    "WaitCondition",
    "WaitEngine",
    "WaitTimeoutError",
    "configure",
]
