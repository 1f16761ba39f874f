import logging
from datetime import datetime

from selenium.common.exceptions import WebDriverException

from webharness.utils.failure_observer import FailureObserver

FIXED_NOW = datetime(2024, 1, 2, 3, 4, 5)


def test_artifact_name_is_class_test_and_timestamp(tmp_path, registry):
    observer = FailureObserver(registry, tmp_path, now=lambda: FIXED_NOW)
    assert observer.artifact_path("TestLogin", "test_bad_password") == tmp_path / "TestLogin_test_bad_password_20240102_030405.png"


def test_artifact_name_replaces_unsafe_characters(tmp_path, registry):
    observer = FailureObserver(registry, tmp_path, now=lambda: FIXED_NOW)
    path = observer.artifact_path("tests/test_search.py", "test_search[cheese / crackers]")
    assert path.name == "tests_test_search.py_test_search_cheese_crackers_20240102_030405.png"


def test_capture_writes_screenshot(tmp_path, live_registry, driver):
    observer = FailureObserver(live_registry, tmp_path / "shots", now=lambda: FIXED_NOW)
    path = observer.capture("TestSearch", "test_results")
    assert path == tmp_path / "shots" / "TestSearch_test_results_20240102_030405.png"
    assert path.read_bytes() == driver.screenshot


def test_capture_within_the_same_second_keeps_both_screenshots(tmp_path, live_registry):
    observer = FailureObserver(live_registry, tmp_path, now=lambda: FIXED_NOW)
    first = observer.capture("TestSearch", "test_results")
    second = observer.capture("TestSearch", "test_results")
    assert first.name == "TestSearch_test_results_20240102_030405.png"
    assert second.name == "TestSearch_test_results_20240102_030405_1.png"
    assert sorted(p.name for p in tmp_path.iterdir()) == [first.name, second.name]


def test_capture_without_session_logs_and_returns_none(tmp_path, registry, caplog):
    observer = FailureObserver(registry, tmp_path)
    with caplog.at_level(logging.WARNING):
        assert observer.capture("TestSearch", "test_results") is None
    assert "cannot take screenshot" in caplog.text
    assert list(tmp_path.iterdir()) == []


def test_capture_failure_never_raises(tmp_path, live_registry, driver, monkeypatch):
    def broken():
        raise WebDriverException("tab crashed")
    monkeypatch.setattr(driver, "get_screenshot_as_png", broken)
    observer = FailureObserver(live_registry, tmp_path)
    assert observer.capture("TestSearch", "test_results") is None
