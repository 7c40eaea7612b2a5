"""
Page-load synchronization.

The scripting host has no load events or callbacks, so completion is
inferred by polling: ready-state and URL first, then a meta-refresh scan,
because a redirect page reports "complete" before the real destination loads.
"""
from __future__ import annotations

import time
from enum import Enum
from typing import Any, Callable, Optional

from error_handling import PageLoadTimeoutError
from execution_protocol import ExecutionProtocol, is_extra_action_success
from models import LoadOutcome, LoadStatus
from script_composer import ScriptScope, compose_plain, js_string
from utils.event_logger import EventLogger, get_event_logger


NO_REDIRECT = "proceed"


class LoadState(str, Enum):
    RUNNING = "running"
    SETTLING = "settling"
    COMPLETE = "complete"
    TIMED_OUT = "timed_out"


def ready_state_script(scope: Optional[ScriptScope] = None) -> str:
    scope = scope or ScriptScope.top()
    return compose_plain(f"return {scope.document}.readyState;", scope)


def meta_refresh_script(scope: Optional[ScriptScope] = None) -> str:
    scope = scope or ScriptScope.top()
    return compose_plain(f"""var elements = {scope.document}.getElementsByTagName('META');
for (var i = 0; i < elements.length; i++) {{
  if ("refresh" == elements[i].httpEquiv && elements[i].content != undefined && elements[i].content.indexOf(";") != -1) {{
    return elements[i].content;
  }}
}}
return {js_string(NO_REDIRECT)};""", scope)


def parse_refresh_delay(content: Any) -> Optional[float]:
    """
    Seconds to wait for a ``<meta http-equiv="refresh">`` content value.

    Returns None when there is no redirect or the delay does not parse.
    """
    if not isinstance(content, str) or content == NO_REDIRECT or ";" not in content:
        return None
    head = content.split(";", 1)[0].strip()
    try:
        delay = float(head)
    except ValueError:
        return None
    return delay if delay >= 0 else None


def _blank(url: Any) -> bool:
    return url is None or not str(url).strip()


class PageLoadSynchronizer:
    """
    Polling state machine run around any action that may navigate.

    States: RUNNING -> SETTLING -> COMPLETE, or RUNNING -> TIMED_OUT.
    """

    def __init__(
        self,
        protocol: ExecutionProtocol,
        timing,
        scope: Optional[ScriptScope] = None,
        sleep: Callable[[float], None] = time.sleep,
        event_logger: Optional[EventLogger] = None,
    ):
        self.protocol = protocol
        self.timing = timing
        self.scope = scope or ScriptScope.top()
        self.sleep = sleep
        self.events = event_logger or get_event_logger()
        self.state: Optional[LoadState] = None

    @property
    def host(self):
        return self.protocol.host

    def wait(
        self,
        action: Callable[[], Any],
        extra_action: Optional[Callable[[], Any]] = None,
    ) -> Any:
        """
        Run ``action`` and block until the page it triggers has loaded.

        Args:
            action: Navigation trigger (set location, submit, click)
            extra_action: Optional probe (e.g. dismissing a dialog) polled while not ready

        Returns:
            Whatever ``action`` returned.

        Raises:
            PageLoadTimeoutError: readiness was never observed within ``max_rounds``
        """
        result = action()
        outcome = self.synchronize(extra_action)
        if outcome.status is LoadStatus.TIMED_OUT:
            raise PageLoadTimeoutError(
                f"Unable to load page within {self.timing.max_rounds} rounds "
                f"({self.timing.timeout_seconds:g} seconds)",
                page_url=self._safe_url(),
                max_rounds=self.timing.max_rounds,
            )
        return result

    def synchronize(self, extra_action: Optional[Callable[[], Any]] = None) -> LoadOutcome:
        """Poll after a navigation action has run; never raises on timeout."""
        self.state = LoadState.RUNNING
        self.events.page_load_start(self.timing.max_rounds)
        self.sleep(self.timing.initial_delay)

        for round_number in range(1, self.timing.max_rounds + 1):
            ready_state = self.protocol.execute(ready_state_script(self.scope))
            url = self.host.current_url()
            self.events.page_load_poll(round_number, ready_state, url)

            if ready_state == "complete" and not _blank(url):
                self.state = LoadState.SETTLING
                redirect_delay = self._settle()
                self.state = LoadState.COMPLETE
                self.events.page_load_complete(round_number, url)
                return LoadOutcome(LoadStatus.COMPLETE, rounds=round_number, redirect_delay=redirect_delay)

            if extra_action is not None and is_extra_action_success(extra_action()):
                self.state = LoadState.COMPLETE
                self.events.page_load_complete(round_number, url, via_extra_action=True)
                return LoadOutcome(LoadStatus.COMPLETE, rounds=round_number, via_extra_action=True)

            self.sleep(self.timing.poll_interval)

        self.state = LoadState.TIMED_OUT
        self.events.page_load_timeout(self.timing.max_rounds)
        return LoadOutcome(LoadStatus.TIMED_OUT, rounds=self.timing.max_rounds)

    def _settle(self) -> float:
        self.sleep(self.timing.settle_delay)
        pending = self.check_client_redirect()
        if pending.status is LoadStatus.REDIRECT_PENDING:
            self.sleep(pending.redirect_delay)
        return pending.redirect_delay

    def check_client_redirect(self) -> LoadOutcome:
        """Scan for a meta-refresh tag; REDIRECT_PENDING carries its delay."""
        content = self.protocol.execute(meta_refresh_script(self.scope))
        delay = parse_refresh_delay(content)
        if delay is None:
            return LoadOutcome(LoadStatus.COMPLETE)
        self.events.page_load_redirect(delay, content=str(content))
        return LoadOutcome(LoadStatus.REDIRECT_PENDING, redirect_delay=delay)

    def _safe_url(self) -> Optional[str]:
        try:
            return self.host.current_url()
        except Exception:
            return None


__all__ = [
    "LoadState",
    "PageLoadSynchronizer",
    "parse_refresh_delay",
    "ready_state_script",
    "meta_refresh_script",
]
