from enum import Enum
from typing import Optional, Tuple, Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from selenium.webdriver.common.by import By


class BrowserKind(str, Enum):
    CHROME = "chrome"
    FIREFOX = "firefox"


class SessionConfig(BaseModel):
    """Immutable description of how a browser session is built."""

    model_config = ConfigDict(frozen=True)

    browser_kind: BrowserKind = Field(BrowserKind.CHROME, description="Browser to launch. Never substituted.")
    headless: bool = False
    incognito_or_private: bool = Field(False, description="Chrome incognito or Firefox private browsing.")
    extra_args: Tuple[str, ...] = Field((), description="Passed to the browser verbatim, in order.")
    page_load_timeout: float = Field(30, ge=0, description="Seconds.")
    implicit_wait: float = Field(0, ge=0, description="Seconds. Keep at 0; explicit waits are used instead.")
    script_timeout: float = Field(30, ge=0, description="Seconds.")
    driver_path: Optional[str] = Field(None, description="Explicit local driver binary for direct construction.")
    service_args: Tuple[str, ...] = ()

    @field_validator('browser_kind', mode='before')
    @classmethod
    def _normalize_browser_kind(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip().lower()
        return value

    @field_validator('extra_args', 'service_args', mode='before')
    @classmethod
    def _split_args(cls, value: Any) -> Any:
        if value is None:
            return ()
        if isinstance(value, str):
            return tuple(part.strip() for part in value.split(',') if part.strip())
        return tuple(value)


class Locator(BaseModel):
    """How to find elements in a session; hashable and printable."""

    model_config = ConfigDict(frozen=True)

    by: str
    value: str
    name: Optional[str] = Field(None, description="Human-friendly label used in log and error messages.")

    def as_tuple(self) -> Tuple[str, str]:
        return (self.by, self.value)

    def __str__(self) -> str:
        label = f"{self.by}={self.value!r}"
        return f"{self.name} ({label})" if self.name else label

    @classmethod
    def by_id(cls, value: str, name: Optional[str] = None) -> "Locator":
        return cls(by=By.ID, value=value, name=name)

    @classmethod
    def by_name(cls, value: str, name: Optional[str] = None) -> "Locator":
        return cls(by=By.NAME, value=value, name=name)

    @classmethod
    def by_css(cls, value: str, name: Optional[str] = None) -> "Locator":
        return cls(by=By.CSS_SELECTOR, value=value, name=name)

    @classmethod
    def by_xpath(cls, value: str, name: Optional[str] = None) -> "Locator":
        return cls(by=By.XPATH, value=value, name=name)
