import argparse
import logging
import sys
from typing import List, Optional

from .core.config_loader import DEFAULT_SETTINGS_FILE
from .core.harness import configure
from .data_models import BrowserKind
from .exceptions import HarnessError
from .features.search import BasePage, SearchPage

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="webharness",
        description="Open a browser session, load a page, and report its title.",
    )
    parser.add_argument("url", help="Page to open.")
    parser.add_argument("--browser", choices=[kind.value for kind in BrowserKind], default=None)
    parser.add_argument("--headless", action="store_true")
    parser.add_argument("--search", metavar="TERM", default=None, help="Submit TERM through the page's search box.")
    parser.add_argument("--settings", default=str(DEFAULT_SETTINGS_FILE), help="Settings JSON file.")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    overrides = {'browser': args.browser}
    if args.headless:
        overrides.update({f"{kind.value}.headless": True for kind in BrowserKind})

    try:
        harness = configure(args.settings, overrides=overrides)
    except HarnessError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 2

    with harness:
        try:
            harness.session()
            if args.search:
                page = SearchPage(harness.interactions, url=args.url).open()
                page.search(args.search)
            else:
                page = BasePage(harness.interactions, url=args.url).open()
            print(page.title())
            return 0
        except HarnessError as e:
            logger.error(f"Smoke run failed: {e}")
            return 1


if __name__ == "__main__":
    sys.exit(main())
