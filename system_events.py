"""
System Events side channel for browser chrome.

Alert dialogs and security sheets are not part of the page, so they are
addressed through the "System Events" application by visible button label
rather than through ``do JavaScript``. Requires accessibility access for the
calling process (System Settings > Privacy & Security > Accessibility).
"""
from __future__ import annotations

from typing import Callable, Optional

from host_provider import HostConfig, applescript_string, run_osascript
from models import SentinelKind
from utils.event_logger import EventLogger, get_event_logger


class SystemEvents:
    """Sends GUI scripting commands to the browser's process."""

    def __init__(
        self,
        config: Optional[HostConfig] = None,
        runner: Callable[[str, str], str] = run_osascript,
        event_logger: Optional[EventLogger] = None,
    ):
        self.config = config or HostConfig()
        self._runner = runner
        self.events = event_logger or get_event_logger()

    def execute(self, script: str, capture_result: bool = False) -> Optional[str]:
        """Run ``script`` inside ``tell process <app>``; optionally return its output."""
        wrapped = (
            f'tell application "System Events" to tell process {applescript_string(self.config.app_name)}\n'
            f"{script}\n"
            f"end tell"
        )
        result = self._runner(wrapped, self.config.osascript_command)
        if capture_result and result is not None:
            return result.strip()
        return None

    def click_alert(self, label: str = "OK") -> None:
        """Dismiss a JavaScript alert by clicking its button."""
        self.events.system_events_command(f"click alert button {label}")
        button = applescript_string(label)
        self.execute(f"""tell window 1
  if button named {button} exists then
    click button named {button}
  end if
end tell""")

    def click_security_warning(self, label: str) -> Optional[str]:
        """
        Click ``label`` on a security sheet.

        Returns the extra-action success sentinel when the button was there,
        so it can serve as a page-load probe.
        """
        self.events.system_events_command(f"click security warning button {label}")
        button = applescript_string(label)
        success = applescript_string(SentinelKind.EXTRA_ACTION_SUCCESS.value)
        return self.execute(f"""tell window 1
  tell sheet 1
    tell group 2
      if button named {button} exists then
        click button named {button}
        return {success}
      end if
    end tell
  end tell
end tell""", capture_result=True)


__all__ = ["SystemEvents"]
