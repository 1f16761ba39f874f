import pytest

from fakes import FakeClock, FakeDriver, FakeFactory
from webharness.core.browser_manager import SessionRegistry
from webharness.utils.interactions import Interactions
from webharness.utils.selenium_waits import WaitEngine


@pytest.fixture
def fake_clock():
    return FakeClock()


@pytest.fixture
def engine(fake_clock):
    return WaitEngine(timeout=2.0, poll_interval=0.5, clock=fake_clock, sleep=fake_clock.sleep)


@pytest.fixture
def driver():
    return FakeDriver(title="Home")


@pytest.fixture
def fake_factory(driver):
    factory = FakeFactory([driver])
    yield factory
    # An un-quit session is a leak
    leaked = [d for d in factory.created if d.quit_calls != 1]
    assert not leaked, f"{len(leaked)} session(s) were not quit exactly once"


@pytest.fixture
def registry(fake_factory):
    session_registry = SessionRegistry(fake_factory)
    yield session_registry
    session_registry.destroy()


@pytest.fixture
def live_registry(registry):
    registry.get_or_create()
    return registry


@pytest.fixture
def interactions(live_registry, engine):
    return Interactions(live_registry, engine)
