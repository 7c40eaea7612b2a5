"""
Shared pytest fixtures for all tests.
"""
import pytest
from unittest.mock import Mock

from host_provider import MockScriptingHost
from scripter import PageScripter
from scripter_config import ScripterConfig
from utils.event_logger import EventLogger


class SleepRecorder:
    """Stand-in for time.sleep that records every requested delay."""

    def __init__(self):
        self.calls = []

    def __call__(self, seconds):
        self.calls.append(seconds)

    @property
    def total(self):
        return sum(self.calls)


@pytest.fixture
def sleep_recorder():
    return SleepRecorder()


@pytest.fixture
def event_logger():
    """Quiet event logger that keeps history for assertions"""
    return EventLogger(debug_mode=False)


@pytest.fixture
def mock_host():
    """Scripting host with no browser behind it"""
    return MockScriptingHost(url="https://example.com")


@pytest.fixture
def config():
    return ScripterConfig()


@pytest.fixture
def scripter(mock_host, config, event_logger, sleep_recorder):
    """PageScripter wired to the mock host, a recorded sleep and a no-op System Events"""
    system_events = Mock()
    return PageScripter(
        mock_host,
        config,
        event_logger=event_logger,
        system_events=system_events,
        sleep=sleep_recorder,
    )


@pytest.fixture
def mock_page():
    """Mock Playwright Page object"""
    page = Mock()
    page.url = "https://example.com"
    page.is_closed.return_value = False
    page.evaluate.return_value = None
    return page
