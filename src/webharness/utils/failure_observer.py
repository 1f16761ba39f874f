import logging
import re
from datetime import datetime
from pathlib import Path
from typing import Callable, Optional, Union

from ..core.browser_manager import SessionRegistry

logger = logging.getLogger(__name__)

TIMESTAMP_FORMAT = "%Y%m%d_%H%M%S"
_UNSAFE_CHARS = re.compile(r'[^A-Za-z0-9._-]+')


def _safe(part: str) -> str:
    return _UNSAFE_CHARS.sub('_', part).strip('_') or 'unknown'


def _unused(path: Path) -> Path:
    """`path`, or `<stem>_<n><suffix>` when failures land within the same second."""
    candidate, n = path, 1
    while candidate.exists():
        candidate = path.with_name(f"{path.stem}_{n}{path.suffix}")
        n += 1
    return candidate


class FailureObserver:
    """
    Saves a screenshot of the live session when a test fails.

    Reads the session from the registry and nothing else. Never raises: a missing
    session or a failed capture is logged so the original test failure stays visible.
    """

    def __init__(self, registry: SessionRegistry, output_dir: Union[str, Path],
                 now: Callable[[], datetime] = datetime.now):
        self.registry = registry
        self.output_dir = Path(output_dir)
        self._now = now

    def artifact_path(self, test_class: str, test_name: str, when: Optional[datetime] = None) -> Path:
        stamp = (when or self._now()).strftime(TIMESTAMP_FORMAT)
        return self.output_dir / f"{_safe(test_class)}_{_safe(test_name)}_{stamp}.png"

    def capture(self, test_class: str, test_name: str) -> Optional[Path]:
        logger.info(f"Test failed: {test_class}::{test_name} - taking screenshot")
        session = self.registry.current_session
        if session is None:
            logger.warning("No live WebDriver session, cannot take screenshot.")
            return None

        destination = _unused(self.artifact_path(test_class, test_name))
        try:
            png = session.get_screenshot_as_png()
            destination.parent.mkdir(parents=True, exist_ok=True)
            destination.write_bytes(png)
        except Exception as e:
            logger.error(f"Failed to capture screenshot for {test_name}: {e}")
            return None
        logger.info(f"Screenshot saved to: {destination}")
        return destination
