from typing import Any, Optional, Sequence


class HarnessError(Exception):
    """Base class for every error raised by webharness."""


class ConfigurationError(HarnessError):
    pass


class NoActiveSessionError(HarnessError):
    pass


class SessionCreationError(HarnessError):
    """Raised only after direct construction and managed acquisition both failed."""

    def __init__(self, browser_kind: Any, cause: BaseException, causes: Sequence[BaseException] = ()):
        self.browser_kind = browser_kind
        self.cause = cause
        self.causes = list(causes) or [cause]
        kind = getattr(browser_kind, 'value', browser_kind)
        details = "; ".join(f"{type(c).__name__}: {c}" for c in self.causes)
        super().__init__(f"Could not create a {kind} session ({details})")


class WaitTimeoutError(HarnessError, TimeoutError):
    def __init__(self, description: str, last_observed: Any = None, timeout: Optional[float] = None):
        self.description = description
        self.last_observed = last_observed
        self.timeout = timeout
        super().__init__(
            f"Timed out after {timeout}s waiting for {description} (last observed: {last_observed!r})"
        )


class EvaluationError(HarnessError):
    """A wait condition raised instead of reporting not-ready, e.g. the session died mid-poll."""

    def __init__(self, description: str, cause: BaseException):
        self.description = description
        self.cause = cause
        super().__init__(f"Error while evaluating {description}: {type(cause).__name__}: {cause}")


class InteractionError(HarnessError):
    def __init__(self, action: str, cause: BaseException, primary_cause: Optional[BaseException] = None):
        self.action = action
        self.cause = cause
        self.primary_cause = primary_cause
        message = f"{action} failed: {type(cause).__name__}: {cause}"
        if primary_cause is not None:
            message += f" (primary strategy: {type(primary_cause).__name__}: {primary_cause})"
        super().__init__(message)
