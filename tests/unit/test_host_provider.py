"""
Unit tests for scripting hosts and the System Events side channel.
"""
import subprocess
from unittest.mock import patch

import pytest

from error_handling import ConfigurationError, HostError
from host_provider import (
    AppleScriptHost,
    HostConfig,
    MockScriptingHost,
    PlaywrightHost,
    applescript_string,
    create_scripting_host,
    run_osascript,
)
from models import SentinelKind
from system_events import SystemEvents
from utils.event_logger import EventType


class FakeRunner:
    """Records AppleScript sources and answers with canned output."""

    def __init__(self, *outputs):
        self.outputs = list(outputs)
        self.scripts = []
        self.commands = []

    def __call__(self, script, command="osascript"):
        self.scripts.append(script)
        self.commands.append(command)
        return self.outputs.pop(0) if self.outputs else ""


def test_applescript_string_escapes():
    assert applescript_string('say "hi"') == '"say \\"hi\\""'
    assert applescript_string("a\\b") == '"a\\\\b"'


def test_run_osascript_reports_missing_executable():
    with pytest.raises(HostError):
        run_osascript("return 1", command="/nonexistent/osascript")


def test_run_osascript_keeps_value_newlines():
    completed = subprocess.CompletedProcess(["osascript", "-"], 0, stdout="line one\n\n", stderr="")
    with patch("host_provider.subprocess.run", return_value=completed) as run:
        assert run_osascript("return text") == "line one\n"
    assert run.call_args.kwargs["input"] == "return text"


def test_run_osascript_nonzero_exit():
    completed = subprocess.CompletedProcess(["osascript", "-"], 1, stdout="", stderr="execution error\n")
    with patch("host_provider.subprocess.run", return_value=completed):
        with pytest.raises(HostError) as exc_info:
            run_osascript("bad")
    assert "execution error" in str(exc_info.value)
    assert exc_info.value.context.metadata == {"returncode": 1}


class TestAppleScriptHost:
    def test_run_script_targets_document(self):
        runner = FakeRunner("42")
        host = AppleScriptHost(HostConfig(), runner=runner)

        assert host.run_script("return 'x';") == "42"
        source = runner.scripts[0]
        assert source.startswith('tell application "Safari"\n')
        assert "do JavaScript \"return 'x';\" in document 1" in source
        assert source.endswith("end tell")

    def test_script_quotes_are_escaped_for_applescript(self):
        runner = FakeRunner("")
        AppleScriptHost(HostConfig(), runner=runner).run_script('var a = "b";')
        assert 'do JavaScript "var a = \\"b\\";"' in runner.scripts[0]

    def test_missing_value_is_none(self):
        host = AppleScriptHost(HostConfig(), runner=FakeRunner("missing value"))
        assert host.run_script("void 0") is None

    def test_current_url(self):
        runner = FakeRunner("https://example.com/", "missing value")
        host = AppleScriptHost(HostConfig(document_index=2), runner=runner)
        assert host.current_url() == "https://example.com/"
        assert host.current_url() == ""
        assert "get URL of document 2" in runner.scripts[0]

    def test_navigate_and_window(self):
        runner = FakeRunner()
        host = AppleScriptHost(HostConfig(app_name="Safari Technology Preview"), runner=runner)
        host.navigate("https://example.com/")
        host.ensure_window_ready()
        assert 'tell application "Safari Technology Preview"' in runner.scripts[0]
        assert 'set URL of document 1 to "https://example.com/"' in runner.scripts[0]
        assert "make new document" in runner.scripts[1]

    def test_runner_errors_propagate(self):
        def failing(script, command):
            raise HostError("Safari got an error")

        host = AppleScriptHost(HostConfig(), runner=failing)
        with pytest.raises(HostError):
            host.run_script("1")


class TestPlaywrightHost:
    def test_run_script_uses_indirect_eval(self, mock_page):
        mock_page.evaluate.return_value = "complete"
        host = PlaywrightHost(HostConfig(host_type="playwright"), page=mock_page)

        assert host.run_script("document.readyState") == "complete"
        mock_page.evaluate.assert_called_once_with(PlaywrightHost.EVAL_WRAPPER, "document.readyState")

    def test_blank_page_has_no_url(self, mock_page):
        host = PlaywrightHost(HostConfig(host_type="playwright"), page=mock_page)
        assert host.current_url() == "https://example.com"
        mock_page.url = "about:blank"
        assert host.current_url() == ""

    def test_navigate_does_not_wait_for_load(self, mock_page):
        host = PlaywrightHost(HostConfig(host_type="playwright"), page=mock_page)
        host.navigate("https://example.com/next")
        mock_page.goto.assert_called_once_with("https://example.com/next", wait_until="commit")

    def test_ensure_window_ready(self, mock_page):
        PlaywrightHost(HostConfig(host_type="playwright"), page=mock_page).ensure_window_ready()
        mock_page.bring_to_front.assert_called_once_with()


class TestMockScriptingHost:
    def test_queue_then_responder(self):
        host = MockScriptingHost(responder=lambda script: script.upper())
        host.queue_reply("first")
        assert host.run_script("a") == "first"
        assert host.run_script("b") == "B"
        assert host.scripts == ["a", "b"]

    def test_queued_exception_is_raised(self):
        host = MockScriptingHost()
        host.queue_reply(HostError("down"))
        with pytest.raises(HostError):
            host.run_script("a")


class TestFactory:
    @pytest.mark.parametrize("host_type,expected", [
        ("applescript", AppleScriptHost),
        ("playwright", PlaywrightHost),
        ("mock", MockScriptingHost),
    ])
    def test_creates_configured_host(self, host_type, expected):
        assert isinstance(create_scripting_host(HostConfig(host_type=host_type)), expected)

    def test_unknown_host_type(self):
        with pytest.raises(ConfigurationError):
            create_scripting_host(HostConfig(host_type="lynx"))


class TestSystemEvents:
    def test_click_alert(self, event_logger):
        runner = FakeRunner()
        SystemEvents(HostConfig(), runner=runner, event_logger=event_logger).click_alert()

        source = runner.scripts[0]
        assert source.startswith('tell application "System Events" to tell process "Safari"')
        assert 'click button named "OK"' in source
        assert event_logger.history[-1].event_type is EventType.SYSTEM_EVENTS_COMMAND

    def test_security_warning_reports_success(self, event_logger):
        success = SentinelKind.EXTRA_ACTION_SUCCESS.value
        runner = FakeRunner(success + "\n")
        system_events = SystemEvents(HostConfig(), runner=runner, event_logger=event_logger)

        assert system_events.click_security_warning("Continue") == success
        source = runner.scripts[0]
        assert "tell sheet 1" in source
        assert 'click button named "Continue"' in source
        assert f'return "{success}"' in source

    def test_security_warning_absent(self, event_logger):
        system_events = SystemEvents(HostConfig(), runner=FakeRunner(""), event_logger=event_logger)
        assert system_events.click_security_warning("Continue") == ""
