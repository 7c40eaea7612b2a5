"""
Scripting host adapters.

The core only needs three things from a host: run a script in the current
document and hand back its value, report the current URL, and make sure a
window is there to run in. Everything about how that happens lives here.

Example:
    >>> from host_provider import HostConfig, create_scripting_host
    >>> host = create_scripting_host(HostConfig(host_type="applescript"))
    >>> host.ensure_window_ready()
    >>> host.run_script("(function() { return document.title; })()")
"""
from __future__ import annotations

import json
import subprocess
from abc import ABC, abstractmethod
from collections import deque
from typing import Any, Callable, List, Optional

from playwright.sync_api import Browser, Error as PlaywrightError, Page, Playwright, sync_playwright
from pydantic import BaseModel, Field

from error_handling import ConfigurationError, HostError


class HostConfig(BaseModel):
    """Configuration for scripting hosts."""

    host_type: str = Field(
        default="applescript",
        description="Scripting host type: 'applescript', 'playwright', 'mock'"
    )

    # AppleScript host settings
    app_name: str = Field(
        default="Safari",
        description="Application that receives 'do JavaScript' commands"
    )
    osascript_command: str = Field(
        default="osascript",
        description="Executable used to run AppleScript"
    )
    document_index: int = Field(
        default=1,
        ge=1,
        description="AppleScript index of the document scripts run in"
    )

    # Playwright host settings
    headless: bool = Field(
        default=True,
        description="Run the Playwright browser headless"
    )
    browser_type: str = Field(
        default="webkit",
        description="Playwright browser engine: 'webkit', 'chromium', 'firefox'"
    )
    viewport_width: int = Field(
        default=1280,
        ge=100,
        description="Browser viewport width"
    )
    viewport_height: int = Field(
        default=800,
        ge=100,
        description="Browser viewport height"
    )

    class Config:
        arbitrary_types_allowed = True


def applescript_string(text: str) -> str:
    """Quote ``text`` as an AppleScript string literal."""
    return '"' + text.replace("\\", "\\\\").replace('"', '\\"') + '"'


def run_osascript(script: str, command: str = "osascript") -> str:
    """Run ``script`` through osascript and return its printed result."""
    try:
        completed = subprocess.run(
            [command, "-"],
            input=script,
            capture_output=True,
            text=True,
        )
    except OSError as e:
        raise HostError(f"Unable to run {command}: {e}") from e
    if completed.returncode != 0:
        raise HostError(
            f"{command} failed with exit code {completed.returncode}: {completed.stderr.strip()}",
            metadata={"returncode": completed.returncode},
        )
    # osascript terminates its result with exactly one newline
    output = completed.stdout
    return output[:-1] if output.endswith("\n") else output


class ScriptingHost(ABC):
    """
    Abstract base class for scripting hosts.

    Implementations run one script per call, synchronously, in the document
    they own.
    """

    def __init__(self, config: HostConfig):
        self.config = config

    @abstractmethod
    def run_script(self, script: str) -> Any:
        """
        Run ``script`` in the current document.

        Returns:
            The script's value (strings, numbers, booleans or None)

        Raises:
            HostError: the host could not run the script
        """
        pass

    @abstractmethod
    def current_url(self) -> str:
        """URL of the current document, blank while nothing is loaded."""
        pass

    def navigate(self, url: str) -> None:
        """Point the current document at ``url`` without waiting for it to load."""
        self.run_script(f"window.location.href = {json.dumps(url)};")

    def ensure_window_ready(self) -> None:
        """Make sure there is a document to script."""
        pass

    def close(self) -> None:
        """Release host resources."""
        pass


class AppleScriptHost(ScriptingHost):
    """
    Drives Safari through AppleScript's ``do JavaScript``.

    Every call is a separate osascript process; there is no session to keep.
    """

    MISSING_VALUE = "missing value"

    def __init__(self, config: HostConfig, runner: Callable[[str, str], str] = run_osascript):
        super().__init__(config)
        self._runner = runner

    @property
    def _document(self) -> str:
        return f"document {self.config.document_index}"

    def _tell(self, body: str) -> str:
        script = f"tell application {applescript_string(self.config.app_name)}\n{body}\nend tell"
        return self._runner(script, self.config.osascript_command)

    def run_script(self, script: str) -> Any:
        output = self._tell(f"do JavaScript {applescript_string(script)} in {self._document}")
        if output == self.MISSING_VALUE:
            return None
        return output

    def current_url(self) -> str:
        output = self._tell(f"get URL of {self._document}")
        return "" if output == self.MISSING_VALUE else output

    def navigate(self, url: str) -> None:
        self._tell(f"set URL of {self._document} to {applescript_string(url)}")

    def ensure_window_ready(self) -> None:
        self._tell(
            "activate\n"
            "if (count of documents) = 0 then\n"
            "  make new document\n"
            "end if"
        )


class PlaywrightHost(ScriptingHost):
    """
    Runs the same composed scripts in a Playwright page.

    The script text is handed to an indirect ``eval`` so it executes as a
    global script, exactly as the AppleScript host runs it.
    """

    EVAL_WRAPPER = "script => (0, eval)(script)"

    def __init__(self, config: HostConfig, page: Optional[Page] = None):
        super().__init__(config)
        self._page: Optional[Page] = page
        self._owns_page = page is None
        self._browser: Optional[Browser] = None
        self._playwright: Optional[Playwright] = None

    def get_page(self) -> Page:
        """Launch a browser on first use and return its page."""
        if self._page is not None and not self._page.is_closed():
            return self._page

        self._playwright = sync_playwright().start()
        launcher = getattr(self._playwright, self.config.browser_type, None)
        if launcher is None:
            raise ConfigurationError(f"Unknown Playwright browser_type: {self.config.browser_type}")
        self._browser = launcher.launch(headless=self.config.headless)
        context = self._browser.new_context(
            viewport={
                "width": self.config.viewport_width,
                "height": self.config.viewport_height
            }
        )
        self._page = context.new_page()
        self._owns_page = True
        return self._page

    def run_script(self, script: str) -> Any:
        try:
            return self.get_page().evaluate(self.EVAL_WRAPPER, script)
        except PlaywrightError as e:
            raise HostError(f"Script evaluation failed: {e}") from e

    def navigate(self, url: str) -> None:
        try:
            self.get_page().goto(url, wait_until="commit")
        except PlaywrightError as e:
            raise HostError(f"Navigation to {url} failed: {e}") from e

    def current_url(self) -> str:
        url = self.get_page().url
        return "" if url == "about:blank" else url

    def ensure_window_ready(self) -> None:
        self.get_page().bring_to_front()

    def close(self) -> None:
        """Close browser and cleanup."""
        if self._browser:
            self._browser.close()
            self._browser = None

        if self._playwright:
            self._playwright.stop()
            self._playwright = None

        if self._owns_page:
            self._page = None


class MockScriptingHost(ScriptingHost):
    """
    Scripting host for tests.

    Replies come from a queue first, then from ``responder``; every script
    is recorded in ``scripts``.

    Example:
        >>> host = MockScriptingHost(url="https://example.com")
        >>> host.queue_reply("complete", "proceed")
    """

    def __init__(
        self,
        config: Optional[HostConfig] = None,
        responder: Optional[Callable[[str], Any]] = None,
        url: str = "about:blank",
    ):
        super().__init__(config or HostConfig(host_type="mock"))
        self.responder = responder
        self.url = url
        self.scripts: List[str] = []
        self._replies: deque = deque()
        self.window_ready_calls = 0
        self.navigations: List[str] = []

    def queue_reply(self, *replies: Any) -> None:
        self._replies.extend(replies)

    def run_script(self, script: str) -> Any:
        self.scripts.append(script)
        if self._replies:
            reply = self._replies.popleft()
        elif self.responder is not None:
            reply = self.responder(script)
        else:
            reply = None
        if isinstance(reply, Exception):
            raise reply
        return reply

    def current_url(self) -> str:
        return self.url

    def navigate(self, url: str) -> None:
        self.navigations.append(url)
        self.url = url

    def ensure_window_ready(self) -> None:
        self.window_ready_calls += 1

    @property
    def last_script(self) -> Optional[str]:
        return self.scripts[-1] if self.scripts else None


def create_scripting_host(config: HostConfig) -> ScriptingHost:
    """
    Factory function to create the scripting host named by ``config``.

    Example:
        >>> host = create_scripting_host(HostConfig(host_type="playwright"))
    """
    if config.host_type == "applescript":
        return AppleScriptHost(config)
    elif config.host_type == "playwright":
        return PlaywrightHost(config)
    elif config.host_type == "mock":
        return MockScriptingHost(config)
    else:
        raise ConfigurationError(
            f"Unknown host_type: {config.host_type}. "
            f"Must be one of: applescript, playwright, mock"
        )
