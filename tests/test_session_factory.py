import pytest
from pydantic import ValidationError
from selenium.common.exceptions import SessionNotCreatedException, WebDriverException
from selenium.webdriver.chrome.options import Options as ChromeOptions
from selenium.webdriver.firefox.options import Options as FirefoxOptions

from fakes import FakeDriver
from webharness.core.browser_manager import SessionFactory, build_driver_options
from webharness.core.config_loader import ConfigLoader
from webharness.data_models import BrowserKind, SessionConfig
from webharness.exceptions import SessionCreationError


class RecordingConstructor:
    """Stands in for webdriver.Chrome/Firefox; fails on the calls listed in `errors`."""

    def __init__(self, errors=()):
        self.errors = list(errors)
        self.calls = []
        self.drivers = []

    def __call__(self, options, service):
        self.calls.append((options, service))
        if self.errors:
            error = self.errors.pop(0)
            if error is not None:
                raise error
        driver = FakeDriver()
        self.drivers.append(driver)
        return driver


class RecordingResolver:
    def __init__(self, path="/cache/driver", error=None):
        self.path = path
        self.error = error
        self.calls = []

    def __call__(self, cache_path):
        self.calls.append(cache_path)
        if self.error is not None:
            raise self.error
        return self.path


@pytest.fixture
def chrome():
    return RecordingConstructor()


@pytest.fixture
def firefox():
    return RecordingConstructor()


@pytest.fixture
def resolvers():
    return {
        BrowserKind.CHROME: RecordingResolver("/cache/chromedriver"),
        BrowserKind.FIREFOX: RecordingResolver("/cache/geckodriver"),
    }


def make_factory(tmp_path, chrome, firefox, resolvers, which=lambda name: f"/usr/local/bin/{name}"):
    return SessionFactory(
        wdm_cache_path=tmp_path / "wdm",
        constructors={BrowserKind.CHROME: chrome, BrowserKind.FIREFOX: firefox},
        managed_resolvers=resolvers,
        which=which,
    )


class TestSessionFactory:
    def test_direct_construction_uses_local_driver(self, tmp_path, chrome, firefox, resolvers):
        factory = make_factory(tmp_path, chrome, firefox, resolvers)
        driver = factory.create(SessionConfig())

        assert driver is chrome.drivers[0]
        assert len(chrome.calls) == 1
        _, service = chrome.calls[0]
        assert service.path == "/usr/local/bin/chromedriver"
        assert resolvers[BrowserKind.CHROME].calls == []

    def test_timeouts_applied_before_return(self, tmp_path, chrome, firefox, resolvers):
        factory = make_factory(tmp_path, chrome, firefox, resolvers)
        config = SessionConfig(page_load_timeout=5, script_timeout=12)
        driver = factory.create(config)
        assert driver.timeouts == {'pageLoad': 5, 'implicitWait': 0, 'script': 12}

    def test_explicit_driver_path_wins_over_path_lookup(self, tmp_path, chrome, firefox, resolvers):
        factory = make_factory(tmp_path, chrome, firefox, resolvers)
        factory.create(SessionConfig(driver_path="/opt/drivers/chromedriver"))
        assert chrome.calls[0][1].path == "/opt/drivers/chromedriver"

    def test_falls_back_to_managed_driver_when_direct_fails(self, tmp_path, firefox, resolvers):
        chrome = RecordingConstructor(errors=[SessionNotCreatedException("version mismatch")])
        factory = make_factory(tmp_path, chrome, firefox, resolvers)

        driver = factory.create(SessionConfig())

        assert driver is chrome.drivers[0]
        assert len(chrome.calls) == 2
        assert chrome.calls[1][1].path == "/cache/chromedriver"
        assert resolvers[BrowserKind.CHROME].calls == [tmp_path / "wdm"]
        assert (tmp_path / "wdm").is_dir()

    def test_missing_local_binary_goes_straight_to_managed(self, tmp_path, chrome, firefox, resolvers):
        factory = make_factory(tmp_path, chrome, firefox, resolvers, which=lambda name: None)
        factory.create(SessionConfig())
        assert len(chrome.calls) == 1
        assert chrome.calls[0][1].path == "/cache/chromedriver"

    def test_both_strategies_failing_raises_with_both_causes(self, tmp_path, firefox):
        direct_error = SessionNotCreatedException("chrome not installed")
        managed_error = WebDriverException("download failed")
        chrome = RecordingConstructor(errors=[direct_error, managed_error])
        resolvers = {BrowserKind.CHROME: RecordingResolver("/cache/chromedriver")}
        factory = make_factory(tmp_path, chrome, firefox, resolvers)

        with pytest.raises(SessionCreationError) as exc_info:
            factory.create(SessionConfig())

        error = exc_info.value
        assert error.browser_kind is BrowserKind.CHROME
        assert error.causes == [direct_error, managed_error]
        assert error.cause is managed_error
        assert error.__cause__ is managed_error
        assert firefox.calls == []

    def test_resolver_failure_counts_as_managed_failure(self, tmp_path, chrome, firefox):
        resolvers = {BrowserKind.CHROME: RecordingResolver(error=ValueError("no network"))}
        factory = make_factory(tmp_path, chrome, firefox, resolvers, which=lambda name: None)
        with pytest.raises(SessionCreationError) as exc_info:
            factory.create(SessionConfig())
        assert len(exc_info.value.causes) == 2
        assert chrome.calls == []

    def test_firefox_is_never_substituted_with_chrome(self, tmp_path, chrome, resolvers):
        firefox = RecordingConstructor(errors=[WebDriverException("no firefox"), WebDriverException("still none")])
        factory = make_factory(tmp_path, chrome, firefox, resolvers)

        with pytest.raises(SessionCreationError) as exc_info:
            factory.create(SessionConfig(browser_kind="firefox", headless=True))

        assert exc_info.value.browser_kind is BrowserKind.FIREFOX
        assert chrome.calls == []
        assert len(firefox.calls) == 2
        options, service = firefox.calls[0]
        assert isinstance(options, FirefoxOptions)
        assert "-headless" in options.arguments
        assert service.path == "/usr/local/bin/geckodriver"

    def test_failed_timeout_setup_quits_the_driver(self, tmp_path, firefox, resolvers):
        broken = FakeDriver()
        broken.timeout_error = WebDriverException("session gone")
        factory = make_factory(tmp_path, lambda options, service: broken, firefox, resolvers)

        with pytest.raises(SessionCreationError):
            factory.create(SessionConfig())
        assert broken.quit_calls == 1

    def test_from_config_loader_reads_cache_path(self, tmp_path):
        loader = ConfigLoader(None, overrides={'webdriver_manager.cache_path': str(tmp_path / "drivers")}, environ={})
        factory = SessionFactory.from_config_loader(loader)
        assert factory.wdm_cache_path == tmp_path / "drivers"
        assert factory.wdm_ssl_verify is None


class TestDriverOptions:
    def test_chrome_arguments_follow_config_order(self):
        config = SessionConfig(headless=True, incognito_or_private=True, extra_args=["--lang=en", "--window-size=800,600", "--lang=de"])
        options = build_driver_options(config)
        assert isinstance(options, ChromeOptions)
        assert options.arguments == [
            "--headless=new",
            "--disable-gpu",
            "--incognito",
            "--lang=en",
            "--window-size=800,600",
            "--lang=de",
        ]

    def test_firefox_private_browsing(self):
        options = build_driver_options(SessionConfig(browser_kind=BrowserKind.FIREFOX, incognito_or_private=True))
        assert options.arguments == ["-private"]

    def test_same_config_builds_same_arguments(self):
        config = SessionConfig(headless=True, extra_args=["--a", "--b"])
        assert build_driver_options(config).arguments == build_driver_options(config).arguments


class TestSessionConfig:
    def test_defaults(self):
        config = SessionConfig()
        assert config.browser_kind is BrowserKind.CHROME
        assert config.headless is False
        assert config.implicit_wait == 0
        assert config.page_load_timeout == 30
        assert config.script_timeout == 30

    def test_comma_separated_args_are_split_in_order(self):
        assert SessionConfig(extra_args="--a, --b,,--c").extra_args == ("--a", "--b", "--c")

    def test_negative_timeouts_are_rejected(self):
        with pytest.raises(ValidationError):
            SessionConfig(page_load_timeout=-1)

    def test_unknown_browser_is_rejected(self):
        with pytest.raises(ValidationError):
            SessionConfig(browser_kind="safari")

    def test_is_immutable_and_comparable(self):
        config = SessionConfig(headless=True)
        with pytest.raises(ValidationError):
            config.headless = False
        assert config == SessionConfig(headless=True)
        assert hash(config) == hash(SessionConfig(headless=True))
